"""Jupiter price + token list provider."""

import logging
import math

from solfolio.domain.models.portfolio import TokenInfo
from solfolio.exceptions import DecodeError
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.rate_limited_client import RateLimitedClient
from solfolio.infra.http.retry import RetryPolicy

logger = logging.getLogger(__name__)

# A raw price as the API may hand it back: 1.5, "1.5", {"price": "1.5"}, {"usdPrice": 1.5}
PricePayload = float | int | str | dict | None


def normalize_price(payload: PricePayload) -> float:
    """Collapse any price payload shape to a non-negative finite float.

    Anything that cannot be read as a number (None, garbage strings, objects
    without a price field, NaN, infinities, negatives) becomes 0.0.
    """
    if isinstance(payload, dict):
        inner = payload.get("price", payload.get("usdPrice"))
        if isinstance(inner, dict):
            return 0.0
        return normalize_price(inner)

    if isinstance(payload, bool) or payload is None:
        return 0.0

    if isinstance(payload, (int, float)):
        value = float(payload)
    elif isinstance(payload, str):
        try:
            value = float(payload.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


class JupiterPriceProvider:
    """Batch USD prices by mint, plus the token registry (mint -> symbol/name/logo)."""

    def __init__(
        self,
        http_client: RateLimitedClient,
        price_url: str,
        token_list_url: str,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._http = http_client
        self._price_url = price_url
        self._token_list_url = token_list_url
        self._retry = retry_policy or RetryPolicy()

    async def get_prices(self, mints: list[str]) -> dict[str, float]:
        """Prices for one batch. Mints missing from the response are absent from the result."""
        if not mints:
            return {}
        return await self._retry.call(self._get_prices_once, mints)

    async def _get_prices_once(self, mints: list[str]) -> dict[str, float]:
        async with upstream_errors("Jupiter price API"):
            response = await self._http.get(self._price_url, params={"ids": ",".join(mints)})
        check_response(response, "Jupiter price API")

        try:
            body = response.json()
        except ValueError as exc:
            raise DecodeError(f"Jupiter price API returned non-JSON body: {exc}") from exc

        data = body.get("data", body) if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise DecodeError("Jupiter price API returned an unexpected payload")

        # null entries mean "no price"
        return {mint: normalize_price(raw) for mint, raw in data.items() if mint in mints and raw is not None}

    async def get_token_list(self) -> dict[str, TokenInfo]:
        async with upstream_errors("Jupiter token list"):
            response = await self._http.get(self._token_list_url)
        check_response(response, "Jupiter token list")

        try:
            rows = response.json()
        except ValueError as exc:
            raise DecodeError(f"Jupiter token list is not JSON: {exc}") from exc
        if isinstance(rows, dict):
            rows = rows.get("tokens", [])

        registry: dict[str, TokenInfo] = {}
        for row in rows or []:
            if not isinstance(row, dict) or not row.get("address"):
                continue
            registry[row["address"]] = TokenInfo(
                address=row["address"],
                symbol=str(row.get("symbol") or "Unknown"),
                name=str(row.get("name") or "Unknown Token"),
                decimals=row.get("decimals") if isinstance(row.get("decimals"), int) else None,
                logo_uri=row.get("logoURI"),
            )
        logger.info("Loaded %d tokens from Jupiter token list", len(registry))
        return registry
