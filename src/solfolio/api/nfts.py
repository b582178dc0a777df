from fastapi import APIRouter, HTTPException, status

from solfolio.api.deps import AggregatorDep
from solfolio.api.schemas.portfolio import AddressesRequest, NFTList

router = APIRouter(prefix="/api/nfts", tags=["nfts"])


@router.post("", response_model=NFTList)
async def list_nfts(body: AddressesRequest, aggregator: AggregatorDep) -> NFTList:
    if not body.addresses:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid addresses")

    nfts = await aggregator.collect_nfts(body.addresses)
    return NFTList(nfts=nfts, total=len(nfts))
