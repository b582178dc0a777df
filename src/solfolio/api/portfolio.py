from fastapi import APIRouter, HTTPException, status

from solfolio.api.deps import AggregatorDep
from solfolio.api.schemas.portfolio import PortfolioList, PortfolioRequest

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


@router.post("", response_model=PortfolioList)
async def build_portfolios(body: PortfolioRequest, aggregator: AggregatorDep) -> PortfolioList:
    """One portfolio per address, in request order. Failing addresses come back zeroed."""
    if not body.addresses:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid addresses")

    portfolios = await aggregator.build_portfolios(body.addresses, include_nft_metadata=body.include_nft_metadata)
    return PortfolioList(portfolios=portfolios)
