"""Command-line access to the ratio history."""

import argparse
import logging
import sys
import time
from datetime import datetime

from gold_silver_monitor.config import Settings
from gold_silver_monitor.data import GeminiFetcher, HistoryStore, SqliteKeyValueStore
from gold_silver_monitor.models import Timeframe
from gold_silver_monitor.tracker import HistoryController, IntervalTicker
from gold_silver_monitor.tracker.history import aggregate, summarize
from gold_silver_monitor.ui.chart import export_html


logger = logging.getLogger(__name__)


def print_status(store: HistoryStore) -> None:
    info = summarize(store.load())
    print("\nHistory Status:")
    print("-" * 50)
    if not info["count"]:
        print("  No samples stored")
        return
    print(f"  Samples:      {info['count']}")
    print(f"  First:        {info['first']:%Y-%m-%d %H:%M}")
    print(f"  Last:         {info['last']:%Y-%m-%d %H:%M}")
    print(f"  Latest ratio: {info['latest_ratio']:.2f}")
    print(f"  Range:        {info['min_ratio']:.2f} - {info['max_ratio']:.2f} (mean {info['mean_ratio']:.2f})")


def print_daily(store: HistoryStore) -> None:
    daily = aggregate(store.load(), Timeframe.DAILY)
    print(f"\n{'Date':10} | {'Gold':>10} | {'Silver':>8} | {'Ratio':>7}")
    print("-" * 45)
    for sample in daily:
        day = datetime.fromtimestamp(sample.timestamp / 1000)
        print(
            f"{day:%Y-%m-%d} | {sample.gold_price:>10,.2f} | "
            f"{sample.silver_price:>8,.2f} | {sample.ratio:>7.2f}"
        )


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Track the Gold/Silver price ratio")
    parser.add_argument("--status", action="store_true", help="Show stored history and exit")
    parser.add_argument("--daily", action="store_true", help="Print the daily aggregation")
    parser.add_argument("--refresh", action="store_true", help="Fetch live prices now")
    parser.add_argument("--analyze", action="store_true", help="Print AI commentary on the latest ratio")
    parser.add_argument("--export", type=str, metavar="PATH", help="Write the chart to an HTML file")
    parser.add_argument("--clear", action="store_true", help="Delete the stored history")
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running, refreshing every interval, until interrupted",
    )
    args = parser.parse_args()

    settings = Settings()
    store = HistoryStore(SqliteKeyValueStore(settings.db_path))

    if args.clear:
        store.clear()
        print("History cleared.")
        return
    if args.status:
        print_status(store)
        return
    if args.daily:
        print_daily(store)
        return
    if args.export:
        path = export_html(store.load(), args.export)
        print(f"Chart written to {path}")
        return

    try:
        with GeminiFetcher(settings) as fetcher, HistoryController(store, fetcher, settings) as controller:
            if args.watch:
                controller.start(IntervalTicker(settings.refresh_interval_ms / 1000))
                print("Watching. Press Ctrl-C to stop.")
                try:
                    while True:
                        time.sleep(1)
                except KeyboardInterrupt:
                    print("\nStopped.")
            else:
                controller.start()
                if args.refresh and not controller.refreshed_on_start:
                    controller.refresh()

            if controller.error:
                print(controller.error)
                sys.exit(1)

            if args.analyze:
                analysis = controller.run_analysis()
                if analysis is not None:
                    print(f"\n{analysis.text}")
                    for source in analysis.sources:
                        print(f"  - {source.title}: {source.uri}")

            print_status(store)

    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
