from pydantic import BaseModel, Field, field_validator

from solfolio.domain.models.portfolio import BurnTarget


class BurnRequest(BaseModel):
    nfts: list[BurnTarget] = Field(default_factory=list)
    payer: str

    @field_validator("payer")
    @classmethod
    def strip_payer(cls, v: str) -> str:
        return v.strip()


class BurnResponse(BaseModel):
    transaction: str
    blockhash: str
    last_valid_block_height: int
    estimated_recoverable: float
    instruction_count: int
    skipped: list[str] = []
