"""Domain types for wallet holdings, NFT burn values and portfolio summaries."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from solfolio.domain.enums import AccountKind
from solfolio.infra.blockchain.solana.programs import TOKEN_ACCOUNT_SIZE

UNKNOWN_COLLECTION = "Unknown Collection"


def classify_token_account(decimals: int, amount: int) -> AccountKind:
    """NFT candidate iff decimals == 0 and ui amount == 1; zero balances are EMPTY."""
    if decimals < 0 or amount < 0:
        raise ValueError(f"decimals and amount must be non-negative (got {decimals}, {amount})")
    ui_amount = amount / (10 ** decimals)
    if decimals == 0 and ui_amount == 1:
        return AccountKind.NFT_CANDIDATE
    if ui_amount > 0:
        return AccountKind.FUNGIBLE
    return AccountKind.EMPTY


class TokenAccountRecord(BaseModel):
    """One token-holding account owned by a wallet."""

    mint: str
    token_account: str
    owner: str
    program_id: str
    amount: int = Field(ge=0)  # raw, smallest unit
    decimals: int = Field(ge=0)
    ui_amount: float
    lamports: int = 0
    space: int = TOKEN_ACCOUNT_SIZE

    @property
    def kind(self) -> AccountKind:
        return classify_token_account(self.decimals, self.amount)


class FungibleBalance(TokenAccountRecord):
    """A fungible token account enriched with registry data and a USD price."""

    symbol: str = "Unknown"
    name: str = "Unknown Token"
    logo_uri: str | None = None
    price: float = 0.0  # USD per unit
    value: float = 0.0  # ui_amount * price


class TokenInfo(BaseModel):
    """Token registry row (mint -> display metadata)."""

    address: str
    symbol: str
    name: str
    decimals: int | None = None
    logo_uri: str | None = None


class TokenPrice(BaseModel):
    price: float = 0.0
    symbol: str = "Unknown"
    name: str = "Unknown Token"
    logo_uri: str | None = None


class NFTAttribute(BaseModel):
    trait_type: str
    value: str | int | float


class CollectionInfo(BaseModel):
    name: str = UNKNOWN_COLLECTION
    family: str = ""
    verified: bool = False
    address: str | None = None  # on-chain collection mint


class NFTAsset(BaseModel):
    """A token-account-based NFT with its rent and market valuation.

    Amounts in SOL. ``burn_value`` is what closing the token account returns and
    never exceeds ``accounts_rent``, which also counts metadata/edition rent.
    """

    mint: str
    token_account: str
    owner: str
    program_id: str
    name: str = "Unknown NFT"
    symbol: str = "NFT"
    uri: str = ""
    image: str | None = None
    description: str | None = None
    attributes: list[NFTAttribute] | None = None
    collection: CollectionInfo | None = None
    floor_price: float | None = None
    rent_exempt: float = 0.0
    accounts_rent: float = 0.0
    burn_value: float = 0.0
    has_market_value: bool = False
    worth_more_on_market: bool = False

    @property
    def collection_name(self) -> str:
        if self.collection is None or not self.collection.name:
            return UNKNOWN_COLLECTION
        return self.collection.name


class AccountScan(BaseModel):
    """Raw result of scanning one address, before pricing."""

    address: str
    lamports: int = 0
    sol_balance: float = 0.0
    fungible_accounts: list[TokenAccountRecord] = []
    nft_candidate_accounts: list[TokenAccountRecord] = []


class WalletPortfolio(BaseModel):
    """Immutable snapshot of one wallet. Values in USD unless suffixed otherwise."""

    model_config = {"frozen": True}

    address: str
    sol_balance: float = 0.0
    sol_price_usd: float = 0.0
    sol_value_usd: float = 0.0
    tokens: list[FungibleBalance] = []
    nfts: list[NFTAsset] = []
    token_value_usd: float = 0.0
    total_value_usd: float = 0.0  # NFTs excluded
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CollectionValue(BaseModel):
    name: str
    count: int = 0
    value: float = 0.0  # USD


class PortfolioSummary(BaseModel):
    """Derived from a list of portfolios; never persisted. USD except total_sol."""

    total_value: float = 0.0
    total_sol: float = 0.0
    total_sol_value: float = 0.0
    total_token_value: float = 0.0
    total_nft_value: float = 0.0
    token_count: int = 0
    nft_count: int = 0
    wallet_count: int = 0
    valuable_nft_count: int = 0
    top_tokens: list[FungibleBalance] = []
    top_nft_collections: list[CollectionValue] = []


class BurnSelectionSummary(BaseModel):
    """Totals for a set of NFTs selected for burning. SOL unless suffixed _usd."""

    count: int = 0
    total_burn_value: float = 0.0
    total_market_value: float = 0.0
    total_burn_value_usd: float = 0.0
    valuable_count: int = 0
    collections: dict[str, int] = {}


class BurnTarget(BaseModel):
    mint: str
    token_account: str
    program_id: str | None = None


class BurnTransaction(BaseModel):
    transaction: str  # base64, unsigned
    blockhash: str
    last_valid_block_height: int
    estimated_recoverable: float  # SOL
    instruction_count: int
    skipped: list[str] = []
