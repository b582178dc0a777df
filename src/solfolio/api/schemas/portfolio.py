from pydantic import BaseModel

from solfolio.domain.models.portfolio import (
    BurnSelectionSummary,
    NFTAsset,
    PortfolioSummary,
    WalletPortfolio,
)


class AddressesRequest(BaseModel):
    addresses: list[str]


class PortfolioRequest(AddressesRequest):
    include_nft_metadata: bool = False


class PortfolioList(BaseModel):
    portfolios: list[WalletPortfolio]


class NFTList(BaseModel):
    nfts: list[NFTAsset]
    total: int


class SummaryResponse(BaseModel):
    summary: PortfolioSummary
    burn_selection: BurnSelectionSummary
