"""BurnService — assembles the unsigned burn-and-close transaction for selected NFTs."""

import logging

from solders.pubkey import Pubkey

from solfolio.domain.models.portfolio import BurnTarget, BurnTransaction
from solfolio.exceptions import AddressValidationError, BurnTransactionError
from solfolio.infra.blockchain.solana.burn import build_burn_instructions, serialize_unsigned
from solfolio.infra.blockchain.solana.programs import TOKEN_ACCOUNT_SIZE, lamports_to_sol
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient
from solfolio.portfolio.rent import RentCalculator
from solfolio.portfolio.validation import validate_wallet_address

logger = logging.getLogger(__name__)


class BurnService:
    def __init__(self, rpc: SolanaRPCClient, rent_calculator: RentCalculator) -> None:
        self._rpc = rpc
        self._rent = rent_calculator

    async def build(self, targets: list[BurnTarget], payer: str) -> BurnTransaction:
        """Burn one unit of each NFT and close its token account, rent to ``payer``.

        Malformed targets are skipped and reported in ``skipped``. Raises
        AddressValidationError for a bad payer or an empty selection and
        BurnTransactionError when no target produced an instruction.
        """
        validation = validate_wallet_address(payer)
        if not validation.ok:
            raise AddressValidationError(f"Invalid payer: {validation.reason}")
        if not targets:
            raise AddressValidationError("No NFTs selected")
        payer_pubkey = Pubkey.from_string(payer.strip())

        instructions = []
        built = 0
        skipped: list[str] = []
        for target in targets:
            try:
                instructions.extend(
                    build_burn_instructions(target.mint, target.token_account, payer_pubkey, target.program_id)
                )
            except ValueError as exc:
                logger.warning("Skipping burn of %s: %s", target.mint, exc)
                skipped.append(target.mint)
                continue
            built += 1

        if not instructions:
            raise BurnTransactionError("No valid burn instructions could be created")

        blockhash, last_valid_block_height = await self._rpc.get_latest_blockhash()
        token_rent = await self._rent.account_rent(TOKEN_ACCOUNT_SIZE)

        logger.info("Burn transaction: %d NFTs, %d skipped, payer %s", built, len(skipped), payer)
        return BurnTransaction(
            transaction=serialize_unsigned(instructions, payer_pubkey, blockhash),
            blockhash=blockhash,
            last_valid_block_height=last_valid_block_height,
            estimated_recoverable=lamports_to_sol(token_rent) * built,
            instruction_count=len(instructions),
            skipped=skipped,
        )
