"""Collection floor-price sources. All prices in SOL, keyed by collection name."""

import logging
import re
from typing import Protocol

from solfolio.domain.enums import FloorPriceSource
from solfolio.infra.blockchain.solana.programs import lamports_to_sol
from solfolio.infra.http.errors import check_response, upstream_errors
from solfolio.infra.http.rate_limited_client import RateLimitedClient
from solfolio.infra.price.jupiter import normalize_price

logger = logging.getLogger(__name__)


class FloorPriceProvider(Protocol):
    async def get_floor_prices(self, collections: list[str]) -> dict[str, float]:
        """Floor price per collection name; collections without a floor are omitted."""
        ...


class NullFloorPriceProvider:
    async def get_floor_prices(self, collections: list[str]) -> dict[str, float]:
        return {}


class StaticFloorPriceProvider:
    """Configured collection -> floor table. Lookup is case-insensitive."""

    def __init__(self, table: dict[str, float]) -> None:
        self._table = {name.strip().lower(): price for name, price in table.items()}

    async def get_floor_prices(self, collections: list[str]) -> dict[str, float]:
        floors: dict[str, float] = {}
        for name in collections:
            price = normalize_price(self._table.get(name.strip().lower()))
            if price > 0:
                floors[name] = price
        return floors


def collection_slug(name: str) -> str:
    """Magic Eden symbol guess: lowercase, non-alphanumerics collapsed to '_'."""
    return re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")


class MagicEdenFloorPriceProvider:
    """Floor prices from Magic Eden collection stats (floorPrice is in lamports)."""

    def __init__(self, http_client: RateLimitedClient, base_url: str = "https://api-mainnet.magiceden.dev") -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def get_floor_prices(self, collections: list[str]) -> dict[str, float]:
        floors: dict[str, float] = {}
        for name in dict.fromkeys(collections):
            slug = collection_slug(name)
            if not slug:
                continue
            try:
                price = await self._get_floor(slug)
            except Exception:
                logger.warning("Magic Eden floor lookup failed for %s (%s)", name, slug, exc_info=True)
                continue
            if price > 0:
                floors[name] = price
        return floors

    async def _get_floor(self, slug: str) -> float:
        url = f"{self._base_url}/v2/collections/{slug}/stats"
        async with upstream_errors("Magic Eden"):
            response = await self._http.get(url)
        if response.status_code == 404:
            return 0.0
        check_response(response, "Magic Eden")
        data = response.json()
        lamports = normalize_price(data.get("floorPrice") if isinstance(data, dict) else None)
        return lamports_to_sol(int(lamports))


def build_floor_provider(
    source: str,
    table: dict[str, float],
    http_client: RateLimitedClient,
    magiceden_base_url: str = "https://api-mainnet.magiceden.dev",
) -> FloorPriceProvider:
    """Provider for the configured ``floor_price_source``; unknown values raise ValueError."""
    kind = FloorPriceSource(source.strip().lower())
    if kind == FloorPriceSource.STATIC:
        return StaticFloorPriceProvider(table)
    if kind == FloorPriceSource.MAGICEDEN:
        return MagicEdenFloorPriceProvider(http_client, magiceden_base_url)
    return NullFloorPriceProvider()
