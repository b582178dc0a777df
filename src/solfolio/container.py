from dependency_injector import containers, providers

from solfolio.config import Settings
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient
from solfolio.infra.gateway.resolver import GatewayFallbackResolver
from solfolio.infra.http.rate_limited_client import RateLimitedClient
from solfolio.infra.http.retry import RetryPolicy
from solfolio.infra.nft.floor import build_floor_provider
from solfolio.infra.price.cache import TTLCache
from solfolio.infra.price.coingecko import CoinGeckoProvider
from solfolio.infra.price.jupiter import JupiterPriceProvider
from solfolio.infra.price.service import PriceAggregator
from solfolio.portfolio.aggregator import PortfolioAggregator
from solfolio.portfolio.burn import BurnService
from solfolio.portfolio.metadata import MetadataResolver
from solfolio.portfolio.rent import RentCalculator
from solfolio.portfolio.scanner import AccountScanner


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["solfolio.api.deps"])

    settings = providers.Singleton(Settings)

    # One paced client per upstream
    rpc_http = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.rpc_timeout,
    )
    price_http = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.price_rate_per_second,
        timeout=settings.provided.price_timeout,
    )
    gateway_http = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.gateway_rate_per_second,
        timeout=settings.provided.metadata_fetch_timeout,
    )
    floor_http = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.price_rate_per_second,
        timeout=settings.provided.price_timeout,
    )

    retry_policy = providers.Singleton(
        RetryPolicy,
        max_attempts=settings.provided.rpc_max_attempts,
        multiplier=settings.provided.rpc_backoff_multiplier,
        min_wait=settings.provided.rpc_backoff_min,
        max_wait=settings.provided.rpc_backoff_max,
    )

    rpc_client = providers.Singleton(
        SolanaRPCClient,
        rpc_url=settings.provided.rpc_url,
        http_client=rpc_http,
        retry_policy=retry_policy,
    )

    price_cache = providers.Singleton(TTLCache, ttl_seconds=settings.provided.price_cache_ttl)
    registry_cache = providers.Singleton(TTLCache, ttl_seconds=settings.provided.registry_cache_ttl)
    native_cache = providers.Singleton(TTLCache, ttl_seconds=settings.provided.price_cache_ttl)

    jupiter = providers.Singleton(
        JupiterPriceProvider,
        http_client=price_http,
        price_url=settings.provided.jupiter_price_url,
        token_list_url=settings.provided.jupiter_token_list_url,
        retry_policy=retry_policy,
    )
    coingecko = providers.Singleton(
        CoinGeckoProvider,
        http_client=price_http,
        base_url=settings.provided.coingecko_base_url,
        api_key=settings.provided.coingecko_api_key,
        retry_policy=retry_policy,
    )
    price_aggregator = providers.Singleton(
        PriceAggregator,
        jupiter=jupiter,
        price_cache=price_cache,
        registry_cache=registry_cache,
        native_cache=native_cache,
        coingecko=coingecko,
        batch_size=settings.provided.price_batch_size,
        batch_delay=settings.provided.price_batch_delay,
        native_stale_ttl=settings.provided.native_price_stale_ttl,
        fallback_native_price=settings.provided.fallback_native_price_usd,
    )

    gateway = providers.Singleton(
        GatewayFallbackResolver,
        http_client=gateway_http,
        ipfs_gateways=settings.provided.ipfs_gateways,
        arweave_gateway=settings.provided.arweave_gateway,
        timeout=settings.provided.metadata_fetch_timeout,
    )

    rent_calculator = providers.Singleton(RentCalculator, rpc=rpc_client)
    scanner = providers.Singleton(AccountScanner, rpc=rpc_client)
    metadata_resolver = providers.Singleton(
        MetadataResolver,
        rpc=rpc_client,
        gateway=gateway,
        rent_calculator=rent_calculator,
        batch_size=settings.provided.metadata_batch_size,
        fetch_concurrency=settings.provided.metadata_fetch_concurrency,
    )
    floor_provider = providers.Singleton(
        build_floor_provider,
        source=settings.provided.floor_price_source,
        table=settings.provided.floor_prices,
        http_client=floor_http,
        magiceden_base_url=settings.provided.magiceden_base_url,
    )

    portfolio_aggregator = providers.Singleton(
        PortfolioAggregator,
        scanner=scanner,
        price_aggregator=price_aggregator,
        metadata_resolver=metadata_resolver,
        rent_calculator=rent_calculator,
        floor_provider=floor_provider,
        scan_concurrency=settings.provided.scan_concurrency,
        address_delay=settings.provided.address_scan_delay,
    )
    burn_service = providers.Singleton(BurnService, rpc=rpc_client, rent_calculator=rent_calculator)


async def close_http_clients(container: Container) -> None:
    for provider in (container.rpc_http, container.price_http, container.gateway_http, container.floor_http):
        await provider().close()
