"""BurnValueReconciler — burn value vs market value, and portfolio roll-ups.

Everything here is pure: inputs are never mutated and no I/O is performed.
"""

import math
from collections import defaultdict
from typing import Iterable

from solfolio.domain.models.portfolio import (
    UNKNOWN_COLLECTION,
    BurnSelectionSummary,
    CollectionValue,
    FungibleBalance,
    NFTAsset,
    PortfolioSummary,
    WalletPortfolio,
)
from solfolio.infra.price.service import FALLBACK_NATIVE_PRICE_USD


def _finite(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return value


def nft_market_value(nft: NFTAsset) -> float:
    """Floor price when the NFT has one, else what burning it returns. In SOL."""
    floor = _finite(nft.floor_price)
    if floor > 0:
        return floor
    return _finite(nft.burn_value)


def apply_floor_prices(nfts: Iterable[NFTAsset], floors: dict[str, float]) -> list[NFTAsset]:
    result = []
    for nft in nfts:
        floor = _finite(floors.get(nft.collection_name))
        if floor <= 0:
            floor = _finite(nft.floor_price)
        has_market_value = floor > 0
        result.append(nft.model_copy(update={
            "floor_price": floor if has_market_value else None,
            "has_market_value": has_market_value,
            "worth_more_on_market": has_market_value and floor > _finite(nft.burn_value),
        }))
    return result


def merge_fungible_balances(portfolios: Iterable[WalletPortfolio]) -> list[FungibleBalance]:
    """One entry per mint; amounts and values are summed across wallets."""
    merged: dict[str, FungibleBalance] = {}
    for portfolio in portfolios:
        for token in portfolio.tokens:
            existing = merged.get(token.mint)
            if existing is None:
                merged[token.mint] = token.model_copy()
                continue
            merged[token.mint] = existing.model_copy(update={
                "amount": existing.amount + token.amount,
                "ui_amount": _finite(existing.ui_amount) + _finite(token.ui_amount),
                "value": _finite(existing.value) + _finite(token.value),
            })
    return list(merged.values())


def native_price_of(portfolios: list[WalletPortfolio]) -> float:
    for portfolio in portfolios:
        price = _finite(portfolio.sol_price_usd)
        if price > 0:
            return price
    return FALLBACK_NATIVE_PRICE_USD


def summarize(
    portfolios: list[WalletPortfolio],
    nfts: list[NFTAsset] | None = None,
    top_n: int = 10,
) -> PortfolioSummary:
    if nfts is None:
        nfts = [nft for portfolio in portfolios for nft in portfolio.nfts]
    native_price = native_price_of(portfolios)

    total_sol = sum(_finite(p.sol_balance) for p in portfolios)
    total_sol_value = sum(_finite(p.sol_value_usd) for p in portfolios)
    total_token_value = sum(_finite(p.token_value_usd) for p in portfolios)

    collections: dict[str, CollectionValue] = {}
    total_nft_value = 0.0
    for nft in nfts:
        value_usd = nft_market_value(nft) * native_price
        total_nft_value += value_usd
        name = nft.collection_name or UNKNOWN_COLLECTION
        bucket = collections.setdefault(name, CollectionValue(name=name))
        bucket.count += 1
        bucket.value += value_usd

    tokens = merge_fungible_balances(portfolios)
    top_tokens = sorted(tokens, key=lambda t: _finite(t.value), reverse=True)[:top_n]
    top_collections = sorted(collections.values(), key=lambda c: c.value, reverse=True)[:top_n]

    return PortfolioSummary(
        total_value=total_sol_value + total_token_value + total_nft_value,
        total_sol=total_sol,
        total_sol_value=total_sol_value,
        total_token_value=total_token_value,
        total_nft_value=total_nft_value,
        token_count=len(tokens),
        nft_count=len(nfts),
        wallet_count=len(portfolios),
        valuable_nft_count=sum(1 for nft in nfts if nft.worth_more_on_market),
        top_tokens=top_tokens,
        top_nft_collections=top_collections,
    )


def summarize_burn_selection(nfts: list[NFTAsset], native_price: float) -> BurnSelectionSummary:
    """Totals shown before the user confirms a burn."""
    total_burn = sum(_finite(nft.burn_value) for nft in nfts)
    counts: dict[str, int] = defaultdict(int)
    for nft in nfts:
        counts[nft.collection_name] += 1
    return BurnSelectionSummary(
        count=len(nfts),
        total_burn_value=total_burn,
        total_market_value=sum(_finite(nft.floor_price) for nft in nfts),
        total_burn_value_usd=total_burn * _finite(native_price),
        valuable_count=sum(1 for nft in nfts if _finite(nft.floor_price) > _finite(nft.burn_value)),
        collections=dict(counts),
    )
