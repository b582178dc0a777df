from fastapi import APIRouter, HTTPException, status

from solfolio.api.deps import BurnServiceDep
from solfolio.api.schemas.burn import BurnRequest, BurnResponse
from solfolio.exceptions import AddressValidationError, BurnTransactionError

router = APIRouter(prefix="/api/burn", tags=["burn"])


@router.post("", response_model=BurnResponse)
async def build_burn_transaction(body: BurnRequest, service: BurnServiceDep) -> BurnResponse:
    """Unsigned burn-and-close transaction for the payer's wallet to sign."""
    try:
        tx = await service.build(body.nfts, body.payer)
    except (AddressValidationError, BurnTransactionError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return BurnResponse(**tx.model_dump())
