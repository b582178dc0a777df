from fastapi import APIRouter, HTTPException, status

from solfolio.api.deps import AggregatorDep, SettingsDep
from solfolio.api.schemas.portfolio import AddressesRequest, SummaryResponse
from solfolio.portfolio.reconciler import native_price_of, summarize, summarize_burn_selection

router = APIRouter(prefix="/api/summary", tags=["summary"])


@router.post("", response_model=SummaryResponse)
async def portfolio_summary(body: AddressesRequest, aggregator: AggregatorDep, settings: SettingsDep) -> SummaryResponse:
    """Combined totals across wallets plus what burning every NFT would return."""
    if not body.addresses:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid addresses")

    portfolios, nfts = await aggregator.build_overview(body.addresses)
    return SummaryResponse(
        summary=summarize(portfolios, nfts, top_n=settings.summary_top_n),
        burn_selection=summarize_burn_selection(nfts, native_price_of(portfolios)),
    )
