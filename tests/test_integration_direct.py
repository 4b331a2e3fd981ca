"""Live check of the direct transport against Finnhub and Alpha Vantage.

Requires FINNHUB_API_KEY and ALPHA_VANTAGE_API_KEY in .env or environment.
Run: python tests/test_integration_direct.py
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

from wisefolio.config import DashboardConfig, TransportType
from wisefolio.formatting import render_mini_price
from wisefolio.models.series import TimeRange
from wisefolio.notifications import CollectingNotifier
from wisefolio.service import MarketDataService

SYMBOLS = ["AAPL", "MSFT", "GOOGL"]


async def check_symbol(service: MarketDataService, sym: str) -> dict[str, str]:
    sym_results = {}

    print(f"\n--- resolve_price({sym}) ---")
    price = await service.resolve_price(sym)
    print(f"  {render_mini_price(price)}" + (f" via {price.source.value}" if price else ""))
    sym_results["price"] = "OK" if price is not None else "FAIL: unavailable"

    print(f"\n--- get_series({sym}, 1M) ---")
    points = await service.get_series(sym, TimeRange.ONE_MONTH)
    if points:
        print(f"  Received {len(points)} points, {points[0].date.date()} .. {points[-1].date.date()}")
        for p in points[-3:]:
            print(f"  {p.date.date()} O={p.open:.2f} H={p.high:.2f} L={p.low:.2f} C={p.close:.2f} V={p.volume:.0f}")
        sym_results["series"] = f"OK ({len(points)} points)"
    else:
        sym_results["series"] = "FAIL: no points"

    print(f"\n--- get_stock_overview({sym}) ---")
    overview = await service.get_stock_overview(sym)
    if overview.profile is not None:
        print(f"  name={overview.profile.name} industry={overview.profile.industry}")
        if overview.metrics is not None:
            print(f"  52w high={overview.metrics.week52_high} low={overview.metrics.week52_low} beta={overview.metrics.beta}")
        sym_results["overview"] = "OK"
    else:
        sym_results["overview"] = "FAIL: no profile"

    return sym_results


async def run(service: MarketDataService) -> dict[str, dict[str, str]]:
    results = {}
    for sym in SYMBOLS:
        print(f"\n{'='*70}")
        print(f"  {sym}")
        print(f"{'='*70}")
        results[sym] = await check_symbol(service, sym)
    return results


def main():
    finnhub_key = os.getenv("FINNHUB_API_KEY")
    alpha_vantage_key = os.getenv("ALPHA_VANTAGE_API_KEY")
    if not finnhub_key or not alpha_vantage_key:
        print("FINNHUB_API_KEY / ALPHA_VANTAGE_API_KEY not set. Skipping integration test.")
        return

    notifier = CollectingNotifier()
    config = DashboardConfig(
        transport=TransportType.DIRECT,
        finnhub_api_key=finnhub_key,
        alpha_vantage_api_key=alpha_vantage_key,
        cache_backend="none",
    )
    service = MarketDataService.from_config(config, notifier=notifier)
    try:
        results = asyncio.run(run(service))
    finally:
        service.close()

    print(f"\n\n{'='*70}")
    print("  INTEGRATION TEST SUMMARY")
    print(f"{'='*70}")
    all_pass = True
    for sym, sym_results in results.items():
        for method, status in sym_results.items():
            marker = "PASS" if status.startswith("OK") else "FAIL"
            if marker == "FAIL":
                all_pass = False
            print(f"{sym:<10}{method:<12}{marker:<6}{status}")

    for n in notifier.drain():
        print(f"  [{n.level.value}] {n.message}")

    print(f"\n  RESULT: {'ALL PASSED' if all_pass else 'SOME FAILURES'}")
    if not all_pass:
        sys.exit(1)


if __name__ == "__main__":
    main()
