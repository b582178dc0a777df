"""Solana JSON-RPC client — balances, token accounts, account batches and rent."""

import logging

from solfolio.exceptions import ExternalServiceError, RateLimitError
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.rate_limited_client import RateLimitedClient
from solfolio.infra.http.retry import RetryPolicy

logger = logging.getLogger(__name__)

# Upper bound of getMultipleAccounts per request
MAX_MULTIPLE_ACCOUNTS = 100

_RATE_LIMIT_CODES = {429, -32429}


def _is_rate_limited(error: dict) -> bool:
    code = error.get("code")
    message = str(error.get("message", "")).lower()
    return code in _RATE_LIMIT_CODES or "429" in message or "too many requests" in message


class SolanaRPCClient:
    """Minimal Solana JSON-RPC client for portfolio scanning."""

    def __init__(
        self,
        rpc_url: str,
        http_client: RateLimitedClient,
        retry_policy: RetryPolicy | None = None,
        commitment: str = "confirmed",
    ) -> None:
        self._rpc_url = rpc_url
        self._http = http_client
        self._retry = retry_policy or RetryPolicy()
        self._commitment = commitment

    async def _call(self, method: str, params: list) -> dict | list | int | str | None:
        """Execute a JSON-RPC call, retrying only when the node throttles us."""
        return await self._retry.call(self._call_once, method, params)

    async def _call_once(self, method: str, params: list) -> dict | list | int | str | None:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        async with upstream_errors(f"Solana RPC ({method})"):
            resp = await self._http.post(self._rpc_url, json=payload)
        check_response(resp, f"Solana RPC ({method})")
        data = resp.json()

        if "error" in data:
            error = data["error"]
            msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            if isinstance(error, dict) and _is_rate_limited(error):
                raise RateLimitError(f"Solana RPC rate limited ({method}): {msg}")
            raise ExternalServiceError(f"Solana RPC error ({method}): {msg}")

        return data.get("result")

    async def get_balance(self, address: str) -> int:
        """Native balance in lamports."""
        result = await self._call("getBalance", [address, {"commitment": self._commitment}])
        if isinstance(result, dict):
            return int(result.get("value") or 0)
        return int(result or 0)

    async def get_token_accounts_by_owner(self, owner: str, program_id: str) -> list[dict]:
        """All token accounts of ``owner`` under one token program, jsonParsed.

        Returns list of {pubkey, account: {data: {parsed: {info: ...}}, lamports, space}}.
        """
        opts = {"encoding": "jsonParsed", "commitment": self._commitment}
        result = await self._call("getTokenAccountsByOwner", [owner, {"programId": program_id}, opts])
        if not isinstance(result, dict):
            return []
        return result.get("value") or []

    async def get_multiple_accounts(self, addresses: list[str]) -> list[dict | None]:
        """Raw (base64) account infos in request order; None where the account does not exist."""
        accounts: list[dict | None] = []
        for start in range(0, len(addresses), MAX_MULTIPLE_ACCOUNTS):
            chunk = addresses[start:start + MAX_MULTIPLE_ACCOUNTS]
            opts = {"encoding": "base64", "commitment": self._commitment}
            result = await self._call("getMultipleAccounts", [chunk, opts])
            values = result.get("value") if isinstance(result, dict) else None
            if not values:
                values = [None] * len(chunk)
            accounts.extend(values)
        return accounts

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = await self._call("getMinimumBalanceForRentExemption", [size])
        return int(result)  # type: ignore[arg-type]

    async def get_latest_blockhash(self) -> tuple[str, int]:
        """Returns (blockhash, last_valid_block_height)."""
        result = await self._call("getLatestBlockhash", [{"commitment": self._commitment}])
        if not isinstance(result, dict) or "value" not in result:
            raise ExternalServiceError("Solana RPC returned no blockhash")
        value = result["value"]
        return value["blockhash"], int(value["lastValidBlockHeight"])
