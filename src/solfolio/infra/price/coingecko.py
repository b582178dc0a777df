"""CoinGecko price provider — dedicated source for the native SOL price in USD."""

import logging

from solfolio.exceptions import DecodeError
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.rate_limited_client import RateLimitedClient
from solfolio.infra.http.retry import RetryPolicy
from solfolio.infra.price.jupiter import normalize_price

logger = logging.getLogger(__name__)

SOLANA_COINGECKO_ID = "solana"


class CoinGeckoProvider:
    """Fetch spot USD prices from CoinGecko's simple price endpoint with rate-limit retry."""

    def __init__(
        self,
        http_client: RateLimitedClient,
        base_url: str = "https://api.coingecko.com",
        api_key: str = "",
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._retry = retry_policy or RetryPolicy()

    async def get_price(self, coingecko_id: str = SOLANA_COINGECKO_ID) -> float | None:
        """Current USD price, or None if CoinGecko has no positive price for the id.

        Retries on 429 with exponential backoff; other failures propagate.
        """
        return await self._retry.call(self._get_price_once, coingecko_id)

    async def _get_price_once(self, coingecko_id: str) -> float | None:
        params: dict[str, str] = {"ids": coingecko_id, "vs_currencies": "usd"}
        if self._api_key:
            params["x_cg_demo_api_key"] = self._api_key

        url = f"{self._base_url}/api/v3/simple/price"
        async with upstream_errors("CoinGecko"):
            response = await self._http.get(url, params=params)
        check_response(response, "CoinGecko")

        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError(f"CoinGecko returned non-JSON body: {exc}") from exc

        entry = data.get(coingecko_id) if isinstance(data, dict) else None
        price = normalize_price(entry.get("usd") if isinstance(entry, dict) else None)
        if price <= 0:
            logger.warning("CoinGecko returned no USD price for %s", coingecko_id)
            return None
        return price
