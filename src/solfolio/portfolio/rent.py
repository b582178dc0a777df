"""RentCalculator — rent-exempt reserves and the NFT burn value derived from them."""

import logging
from dataclasses import dataclass

from solfolio.infra.blockchain.solana.programs import (
    ACCOUNT_STORAGE_OVERHEAD,
    EDITION_ACCOUNT_SIZE,
    EXEMPTION_THRESHOLD_YEARS,
    LAMPORTS_PER_BYTE_YEAR,
    METADATA_ACCOUNT_SIZE,
    TOKEN_ACCOUNT_SIZE,
    lamports_to_sol,
)
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient

logger = logging.getLogger(__name__)


def local_rent_exemption(size: int) -> int:
    """Minimum balance for rent exemption using the cluster's default parameters."""
    return (ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS


@dataclass(frozen=True)
class NFTRent:
    """Lamport reserves tied up by one NFT."""

    token_account: int
    metadata: int
    edition: int

    @property
    def rent_exempt(self) -> float:
        return lamports_to_sol(self.token_account)

    @property
    def accounts_rent(self) -> float:
        return lamports_to_sol(self.token_account + self.metadata + self.edition)

    @property
    def burn_value(self) -> float:
        # Only the token account is closed by a burn
        return lamports_to_sol(self.token_account)


class RentCalculator:
    def __init__(self, rpc: SolanaRPCClient) -> None:
        self._rpc = rpc
        self._by_size: dict[int, int] = {}

    async def account_rent(self, size: int) -> int:
        """Lamports an account of ``size`` bytes must hold; memoized per size."""
        if size in self._by_size:
            return self._by_size[size]
        try:
            lamports = await self._rpc.get_minimum_balance_for_rent_exemption(size)
        except Exception:
            lamports = local_rent_exemption(size)
            logger.warning("Rent query failed for %d bytes, using local estimate %d", size, lamports, exc_info=True)
        self._by_size[size] = lamports
        return lamports

    async def nft_rent(self, token_account_size: int = TOKEN_ACCOUNT_SIZE) -> NFTRent:
        return NFTRent(
            token_account=await self.account_rent(token_account_size),
            metadata=await self.account_rent(METADATA_ACCOUNT_SIZE),
            edition=await self.account_rent(EDITION_ACCOUNT_SIZE),
        )
