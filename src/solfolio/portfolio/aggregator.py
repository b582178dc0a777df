"""PortfolioAggregator — orchestrates scanning, pricing and NFT resolution across wallets."""

import asyncio
import logging

from solfolio.domain.models.portfolio import (
    AccountScan,
    FungibleBalance,
    NFTAsset,
    TokenPrice,
    WalletPortfolio,
)
from solfolio.infra.nft.floor import FloorPriceProvider, NullFloorPriceProvider
from solfolio.infra.price.service import PriceAggregator
from solfolio.portfolio.metadata import MetadataResolver
from solfolio.portfolio.reconciler import apply_floor_prices
from solfolio.portfolio.rent import RentCalculator
from solfolio.portfolio.scanner import AccountScanner

logger = logging.getLogger(__name__)


class PortfolioAggregator:
    """Builds one WalletPortfolio per requested address, in request order.

    A failing address never aborts the batch: it is reported as a zero-valued
    placeholder portfolio (or contributes no NFTs to ``collect_nfts``).
    """

    def __init__(
        self,
        scanner: AccountScanner,
        price_aggregator: PriceAggregator,
        metadata_resolver: MetadataResolver,
        rent_calculator: RentCalculator,
        floor_provider: FloorPriceProvider | None = None,
        scan_concurrency: int = 1,
        address_delay: float = 0.2,
    ) -> None:
        self._scanner = scanner
        self._prices = price_aggregator
        self._metadata = metadata_resolver
        self._rent = rent_calculator
        self._floors = floor_provider or NullFloorPriceProvider()
        self._scan_concurrency = max(1, scan_concurrency)
        self._address_delay = address_delay

    async def scan_all(self, addresses: list[str]) -> list[AccountScan | None]:
        """Scan every address; ``None`` marks an address whose scan failed."""
        semaphore = asyncio.Semaphore(self._scan_concurrency)

        async def scan_one(index: int, address: str) -> AccountScan | None:
            async with semaphore:
                if index > 0 and self._address_delay > 0:
                    await asyncio.sleep(self._address_delay)
                try:
                    return await self._scanner.scan(address)
                except Exception:
                    logger.exception("Scan failed for %s, using empty placeholder", address)
                    return None

        return list(await asyncio.gather(*(scan_one(i, a) for i, a in enumerate(addresses))))

    async def build_portfolios(
        self, addresses: list[str], include_nft_metadata: bool = False,
    ) -> list[WalletPortfolio]:
        scans = await self.scan_all(addresses)
        return await self._build(addresses, scans, include_nft_metadata)

    async def build_overview(self, addresses: list[str]) -> tuple[list[WalletPortfolio], list[NFTAsset]]:
        """Portfolios with resolved NFTs plus the flat NFT list, scanning each address once."""
        portfolios = await self.build_portfolios(addresses, include_nft_metadata=True)
        return portfolios, [nft for portfolio in portfolios for nft in portfolio.nfts]

    async def collect_nfts(self, addresses: list[str]) -> list[NFTAsset]:
        """Flat, fully resolved NFT list across all wallets with floor prices applied."""
        scans = await self.scan_all(addresses)

        nfts: list[NFTAsset] = []
        for scan in scans:
            if scan is None:
                continue
            try:
                nfts.extend(await self._metadata.resolve(scan.nft_candidate_accounts))
            except Exception:
                logger.exception("NFT resolution failed for %s", scan.address)

        return apply_floor_prices(nfts, await self._floor_prices(nfts))

    async def _build(
        self, addresses: list[str], scans: list[AccountScan | None], include_nft_metadata: bool,
    ) -> list[WalletPortfolio]:
        mints = [record.mint for scan in scans if scan for record in scan.fungible_accounts]
        prices = await self._prices.get_prices(mints)
        native_price = await self._prices.get_native_price()

        nfts_by_scan = [await self._nfts_for(scan, include_nft_metadata) if scan else [] for scan in scans]
        floors = await self._floor_prices([nft for nfts in nfts_by_scan for nft in nfts])

        portfolios = []
        for address, scan, nfts in zip(addresses, scans, nfts_by_scan):
            if scan is None:
                portfolios.append(WalletPortfolio(address=address, sol_price_usd=native_price))
                continue
            portfolios.append(self._assemble(scan, prices, native_price, apply_floor_prices(nfts, floors)))

        logger.info(
            "Built %d portfolios (%d failed), SOL=$%.2f",
            len(portfolios), sum(1 for s in scans if s is None), native_price,
        )
        return portfolios

    async def _floor_prices(self, nfts: list[NFTAsset]) -> dict[str, float]:
        collections = sorted({nft.collection_name for nft in nfts})
        if not collections:
            return {}
        try:
            return await self._floors.get_floor_prices(collections)
        except Exception:
            logger.exception("Floor price lookup failed for %d collections", len(collections))
            return {}

    async def _nfts_for(self, scan: AccountScan, include_metadata: bool) -> list[NFTAsset]:
        if include_metadata:
            try:
                return await self._metadata.resolve(scan.nft_candidate_accounts)
            except Exception:
                logger.exception("NFT resolution failed for %s, using minimal records", scan.address)

        nfts = []
        for record in scan.nft_candidate_accounts:
            rent = await self._rent.nft_rent(record.space)
            nfts.append(self._metadata.minimal_asset(record, rent))
        return nfts

    @staticmethod
    def _assemble(
        scan: AccountScan,
        prices: dict[str, TokenPrice],
        native_price: float,
        nfts: list[NFTAsset],
    ) -> WalletPortfolio:
        tokens = []
        for record in scan.fungible_accounts:
            price = prices.get(record.mint) or TokenPrice()
            tokens.append(FungibleBalance(
                **record.model_dump(),
                symbol=price.symbol,
                name=price.name,
                logo_uri=price.logo_uri,
                price=price.price,
                value=record.ui_amount * price.price,
            ))

        sol_value = scan.sol_balance * native_price
        token_value = sum(t.value for t in tokens)
        return WalletPortfolio(
            address=scan.address,
            sol_balance=scan.sol_balance,
            sol_price_usd=native_price,
            sol_value_usd=sol_value,
            tokens=tokens,
            nfts=nfts,
            token_value_usd=token_value,
            total_value_usd=sol_value + token_value,
        )
