"""
Re-track orders stuck before delivery and apply the status Delhivery reports.

Usage:
    python scripts/fix_missed_statuses.py [--dry-run] [--delay SECONDS]

Example:
    python scripts/fix_missed_statuses.py --dry-run
"""

import argparse
import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.db import SessionLocal
from modules.shipment.reconciliation_service import (
    ReconciliationService,
    DEFAULT_DELAY,
)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Sync orders whose Delhivery scan pushes were missed."
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="show what would change without writing anything",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_DELAY,
        help="seconds to wait between tracking calls (default: %(default)s)",
    )
    return parser


def format_summary(summary):
    lines = [
        "=" * 70,
        "DRY RUN SUMMARY" if summary["dry_run"] else "SYNC SUMMARY",
        "=" * 70,
        f"Total checked:      {summary['total']}",
        f"NDR fixed:          {summary['ndr_fixed']}",
        f"Delivered fixed:    {summary['delivered_fixed']}",
        f"RTO fixed:          {summary['rto_fixed']}",
        f"Already correct:    {summary['already_correct']}",
        f"Skipped:            {summary['skipped']}",
        f"Errors:             {summary['errors']}",
    ]

    if summary["fixed_orders"]:
        lines.append("")
        lines.append("Would fix orders:" if summary["dry_run"] else "Fixed orders:")
        for index, fixed in enumerate(summary["fixed_orders"], start=1):
            lines.append(
                f"  {index}. {fixed['order_id']} (AWB: {fixed['awb']}) "
                f"{fixed['old_status']} -> {fixed['new_status']} "
                f"({fixed['status_code']}: {fixed['reason']})"
            )

    return "\n".join(lines)


def main(argv=None):
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        summary = ReconciliationService.fix_missed_statuses(
            dry_run=args.dry_run, delay=args.delay, db=db
        )
        print(format_summary(summary))
        return 0

    except Exception as e:
        print(f"\nERROR: {str(e)}")
        return 1

    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
