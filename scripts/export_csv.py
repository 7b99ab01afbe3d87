#!/usr/bin/env python3
"""
Export stock balances, movements or lost pallets from the configured store
as CSV.

Usage:
  python3 scripts/export_csv.py stock --output stock.csv
  python3 scripts/export_csv.py movements --output moves.csv [--type EUR/EPAL] [--limit 100]
  python3 scripts/export_csv.py lost --output lost.csv [--min-days 30]

Settings come from --config, else PALLET_TRACKER_CONFIG, else the packaged
defaults. Without --output the CSV is written to stdout.
"""

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

EXPORT_KINDS = ("stock", "movements", "lost")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Export pallet tracker data as CSV")
    p.add_argument("kind", choices=EXPORT_KINDS, help="Which export to produce")
    p.add_argument("--config", type=Path, default=None, help="Settings YAML file")
    p.add_argument("--output", "-o", type=Path, default=None, help="Output file (default: stdout)")
    p.add_argument("--include-zero", action="store_true", help="stock: keep rows that net to zero")
    p.add_argument("--type", dest="pallet_type", default=None, help="movements: only this pallet type")
    p.add_argument("--limit", type=int, default=None, help="movements: at most this many lines")
    p.add_argument("--min-days", type=int, default=None, help="lost: threshold in days")
    p.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Structured log level on stderr",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from pallet_kernel.domain.records import MovementFilter
    from pallet_kernel.export import lost_pallets_csv, movements_csv, stock_csv, write_csv
    from pallet_kernel.exceptions import SettingsError
    from pallet_kernel.logging_config import configure_logging
    from pallet_services import build_tracker

    configure_logging(level=logging.getLevelName(args.log_level), stream=sys.stderr)

    try:
        tracker = build_tracker(args.config)
    except (FileNotFoundError, SettingsError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if args.kind == "stock":
        text = stock_csv(tracker.stock_view.grouped_stock(include_zero=args.include_zero))
    elif args.kind == "movements":
        criteria = None
        if args.pallet_type or args.limit is not None:
            criteria = MovementFilter(pallet_type=args.pallet_type, limit=args.limit)
        text = movements_csv(tracker.stock_view.movement_lines(criteria))
    else:
        lines = tracker.pallet_view.lost_pallets(tracker.clock.now(), min_days=args.min_days)
        text = lost_pallets_csv(lines)

    if args.output is None:
        sys.stdout.write(text)
    else:
        write_csv(args.output, text)
        print(f"Wrote {args.kind} export to {args.output}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
