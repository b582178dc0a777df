"""AccountScanner — native balance and classified token accounts for one address."""

import asyncio
import logging

from solfolio.domain.enums import AccountKind
from solfolio.domain.models.portfolio import AccountScan, TokenAccountRecord
from solfolio.exceptions import AddressValidationError
from solfolio.infra.blockchain.solana.programs import TOKEN_ACCOUNT_SIZE, TOKEN_PROGRAMS, lamports_to_sol
from solfolio.infra.blockchain.solana.rpc_client import SolanaRPCClient
from solfolio.portfolio.validation import validate_wallet_address

logger = logging.getLogger(__name__)


def parse_token_account(entry: dict, owner: str, program_id: str) -> TokenAccountRecord:
    """Build a record from one jsonParsed getTokenAccountsByOwner entry.

    Raises KeyError/TypeError/ValueError on malformed entries.
    """
    account = entry["account"]
    data = account["data"]
    info = data["parsed"]["info"]
    token_amount = info["tokenAmount"]

    amount = int(token_amount["amount"])
    decimals = int(token_amount["decimals"])
    if amount < 0 or decimals < 0:
        raise ValueError(f"negative amount/decimals in {entry.get('pubkey')}")

    return TokenAccountRecord(
        mint=info["mint"],
        token_account=entry["pubkey"],
        owner=info.get("owner", owner),
        program_id=program_id,
        amount=amount,
        decimals=decimals,
        ui_amount=amount / (10 ** decimals),
        lamports=int(account.get("lamports") or 0),
        space=int(data.get("space") or account.get("space") or TOKEN_ACCOUNT_SIZE),
    )


class AccountScanner:
    """Enumerates SPL Token and Token-2022 accounts and splits NFTs from fungibles.

    Rate-limit answers are retried by the RPC client's retry policy; every other
    failure propagates to the caller as a failure of this one address.
    """

    def __init__(self, rpc: SolanaRPCClient) -> None:
        self._rpc = rpc

    async def scan(self, address: str) -> AccountScan:
        validation = validate_wallet_address(address)
        if not validation.ok:
            raise AddressValidationError(f"{address!r}: {validation.reason}")
        address = address.strip()

        lamports = await self._rpc.get_balance(address)

        program_ids = [str(p) for p in TOKEN_PROGRAMS]
        results = await asyncio.gather(
            *(self._rpc.get_token_accounts_by_owner(address, program_id) for program_id in program_ids)
        )

        fungible: list[TokenAccountRecord] = []
        nft_candidates: list[TokenAccountRecord] = []
        for program_id, entries in zip(program_ids, results):
            for entry in entries:
                try:
                    record = parse_token_account(entry, address, program_id)
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("Skipping malformed token account %s: %s", _pubkey_of(entry), exc)
                    continue

                kind = record.kind
                if kind == AccountKind.NFT_CANDIDATE:
                    nft_candidates.append(record)
                elif kind == AccountKind.FUNGIBLE:
                    fungible.append(record)

        logger.info(
            "Wallet %s: SOL=%.4f, tokens=%d, nfts=%d",
            address, lamports_to_sol(lamports), len(fungible), len(nft_candidates),
        )
        return AccountScan(
            address=address,
            lamports=lamports,
            sol_balance=lamports_to_sol(lamports),
            fungible_accounts=fungible,
            nft_candidate_accounts=nft_candidates,
        )


def _pubkey_of(entry: object) -> str:
    return str(entry.get("pubkey", "?")) if isinstance(entry, dict) else "?"
