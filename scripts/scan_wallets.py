"""Scan one or more Solana wallets and print portfolio + burn summary as JSON.

Usage:
    PYTHONPATH=src python scripts/scan_wallets.py <address> [<address> ...]
"""

import asyncio
import json
import logging
import sys
import time

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


async def main(addresses: list[str]) -> None:
    from solfolio.container import Container, close_http_clients
    from solfolio.portfolio.reconciler import native_price_of, summarize, summarize_burn_selection
    from solfolio.portfolio.validation import sanitize_wallet_list

    usable = sanitize_wallet_list(addresses)
    if len(usable) < len(addresses):
        print(f"Ignoring {len(addresses) - len(usable)} invalid or repeated addresses", file=sys.stderr)
    if not usable:
        sys.exit(2)

    container = Container()
    settings = container.settings()
    aggregator = container.portfolio_aggregator()
    print(f"RPC: {settings.rpc_url}", file=sys.stderr)

    try:
        t0 = time.time()
        portfolios, nfts = await aggregator.build_overview(usable)
        summary = summarize(portfolios, nfts, top_n=settings.summary_top_n)
        burn = summarize_burn_selection(nfts, native_price_of(portfolios))
        print(f"Scanned {len(usable)} wallets in {time.time() - t0:.1f}s", file=sys.stderr)
    finally:
        await close_http_clients(container)

    print(json.dumps(
        {
            "portfolios": [p.model_dump(mode="json", exclude={"nfts"}) for p in portfolios],
            "summary": summary.model_dump(mode="json"),
            "burn_selection": burn.model_dump(mode="json"),
        },
        indent=2,
    ))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    asyncio.run(main(sys.argv[1:]))
