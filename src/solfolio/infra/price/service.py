"""PriceAggregator — cache-first, batched USD pricing with graceful degradation."""

import asyncio
import logging
import math
from typing import Iterable

from solfolio.domain.models.portfolio import TokenInfo, TokenPrice
from solfolio.infra.blockchain.solana.programs import NATIVE_MINT
from solfolio.infra.price.cache import TTLCache
from solfolio.infra.price.coingecko import CoinGeckoProvider
from solfolio.infra.price.jupiter import JupiterPriceProvider

logger = logging.getLogger(__name__)

# Last-resort SOL/USD, returned only when every source and the stale cache miss
FALLBACK_NATIVE_PRICE_USD = 30.0

REGISTRY_KEY = "registry"
NATIVE_KEY = "native"


class PriceAggregator:
    """Price orchestrator: cache lookup → batched provider fetch → cache store.

    Every requested mint always gets an entry; anything the providers could
    not price is reported at 0.0 rather than left out.
    """

    def __init__(
        self,
        jupiter: JupiterPriceProvider,
        price_cache: TTLCache[str, float],
        registry_cache: TTLCache[str, dict[str, TokenInfo]],
        native_cache: TTLCache[str, float],
        coingecko: CoinGeckoProvider | None = None,
        batch_size: int = 100,
        batch_delay: float = 0.5,
        native_stale_ttl: float = 86400.0,
        fallback_native_price: float = FALLBACK_NATIVE_PRICE_USD,
    ) -> None:
        self._jupiter = jupiter
        self._coingecko = coingecko
        self._price_cache = price_cache
        self._registry_cache = registry_cache
        self._native_cache = native_cache
        self._batch_size = max(1, batch_size)
        self._batch_delay = batch_delay
        self._native_stale_ttl = native_stale_ttl
        self._fallback_native_price = fallback_native_price

    async def get_token_registry(self) -> dict[str, TokenInfo]:
        cached = self._registry_cache.get(REGISTRY_KEY)
        if cached is not None:
            return cached

        try:
            registry = await self._jupiter.get_token_list()
        except Exception:
            logger.exception("Token registry fetch failed, serving the previous copy if any")
            return self._registry_cache.get_stale(REGISTRY_KEY, math.inf) or {}

        self._registry_cache.set(REGISTRY_KEY, registry)
        return registry

    async def get_prices(self, mints: Iterable[str]) -> dict[str, TokenPrice]:
        """Resolve USD prices for ``mints``. Never omits a requested mint."""
        requested = list(dict.fromkeys(m for m in mints if m))
        if not requested:
            return {}

        registry = await self.get_token_registry()

        # 1. Fresh cache hits
        prices: dict[str, float] = {}
        to_fetch: list[str] = []
        for mint in requested:
            cached = self._price_cache.get(mint)
            if cached is not None:
                prices[mint] = cached
            else:
                to_fetch.append(mint)

        # 2. Provider batches, paced
        for index, start in enumerate(range(0, len(to_fetch), self._batch_size)):
            batch = to_fetch[start:start + self._batch_size]
            if index > 0 and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)
            try:
                fetched = await self._jupiter.get_prices(batch)
            except Exception:
                logger.exception("Price batch of %d mints failed, recording zero prices", len(batch))
                continue

            for mint, price in fetched.items():
                self._price_cache.set(mint, price)
                prices[mint] = price

        missing = [m for m in to_fetch if m not in prices]
        if missing:
            logger.info("No price for %d of %d mints, recorded as 0", len(missing), len(requested))

        # 3. Every mint gets an entry
        result: dict[str, TokenPrice] = {}
        for mint in requested:
            token = registry.get(mint)
            result[mint] = TokenPrice(
                price=prices.get(mint, 0.0),
                symbol=token.symbol if token else "Unknown",
                name=token.name if token else "Unknown Token",
                logo_uri=token.logo_uri if token else None,
            )
        return result

    async def get_native_price(self) -> float:
        """SOL/USD: fresh cache → CoinGecko → Jupiter → stale cache → fallback constant."""
        cached = self._native_cache.get(NATIVE_KEY)
        if cached is not None:
            return cached

        price = await self._fetch_native_price()
        if price is not None:
            self._native_cache.set(NATIVE_KEY, price)
            return price

        stale = self._native_cache.get_stale(NATIVE_KEY, self._native_stale_ttl)
        if stale is not None:
            logger.warning("Native price sources failed, using cached price %.4f", stale)
            return stale

        logger.warning("Native price sources failed, using fallback %.2f", self._fallback_native_price)
        return self._fallback_native_price

    async def _fetch_native_price(self) -> float | None:
        if self._coingecko is not None:
            try:
                price = await self._coingecko.get_price()
            except Exception:
                logger.exception("CoinGecko native price fetch failed")
                price = None
            if price:
                return price

        try:
            fetched = await self._jupiter.get_prices([NATIVE_MINT])
        except Exception:
            logger.exception("Jupiter native price fetch failed")
            return None

        price = fetched.get(NATIVE_MINT, 0.0)
        return price if price > 0 else None
