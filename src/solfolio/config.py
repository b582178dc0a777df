from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

DEFAULT_IPFS_GATEWAYS = [
    "https://nftstorage.link/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
    "https://ipfs.io/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
]


class Settings(BaseSettings):
    # Server-side endpoint; preferred over the one meant for client exposure
    solana_rpc_url: str = ""
    public_solana_rpc_url: str = Field(
        default="",
        validation_alias=AliasChoices("public_solana_rpc_url", "next_public_solana_rpc_url"),
    )
    rpc_rate_per_second: float = 10.0
    rpc_timeout: float = 30.0
    rpc_max_attempts: int = 3
    rpc_backoff_multiplier: float = 2.0
    rpc_backoff_min: float = 2.0
    rpc_backoff_max: float = 8.0

    address_scan_delay: float = 0.2  # seconds between wallet scans
    scan_concurrency: int = 1

    metadata_batch_size: int = 100
    metadata_fetch_timeout: float = 5.0
    metadata_fetch_concurrency: int = 8
    ipfs_gateways: list[str] = DEFAULT_IPFS_GATEWAYS
    arweave_gateway: str = "https://arweave.net/"
    gateway_rate_per_second: float = 20.0

    jupiter_price_url: str = "https://api.jup.ag/price/v2"
    jupiter_token_list_url: str = "https://token.jup.ag/all"
    price_batch_size: int = 100
    price_batch_delay: float = 0.5
    price_rate_per_second: float = 5.0
    price_timeout: float = 15.0
    price_cache_ttl: float = 300.0  # 5 minutes
    registry_cache_ttl: float = 3600.0  # 1 hour
    native_price_stale_ttl: float = 86400.0
    fallback_native_price_usd: float = 30.0

    coingecko_base_url: str = "https://api.coingecko.com"
    coingecko_api_key: str = ""

    floor_price_source: str = "none"  # none | static | magiceden
    floor_prices: dict[str, float] = {}
    magiceden_base_url: str = "https://api-mainnet.magiceden.dev"

    summary_top_n: int = 10
    debug: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def rpc_url(self) -> str:
        return self.solana_rpc_url or self.public_solana_rpc_url or DEFAULT_RPC_URL


settings = Settings()
