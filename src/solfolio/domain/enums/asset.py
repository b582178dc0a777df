from enum import Enum


class AccountKind(str, Enum):
    """Classification of a token account by its amount/decimals."""

    NFT_CANDIDATE = "nft_candidate"
    FUNGIBLE = "fungible"
    EMPTY = "empty"
