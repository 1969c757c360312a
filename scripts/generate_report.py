"""
Generate union reports from the command line.

Usage:
    python -m scripts.generate_report --list
    python -m scripts.generate_report --data-dir exports/
    python -m scripts.generate_report --date-from 2024-01-01 --date-to 2024-12-31 --output reports.json
    python -m scripts.generate_report --report cba_status cba_expiring_soon --cba-days 60
    python -m scripts.generate_report --report executives_by_union --union-id 12 --summary
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timezone

from source_config import get_repository
from reporting import REPORT_CATALOGUE, FilterContext, ReportPipeline
from reporting.config import (
    DEFAULT_ASSEMBLY_RECENT_DAYS,
    DEFAULT_ASSEMBLY_UPCOMING_DAYS,
    DEFAULT_CBA_EXPIRING_DAYS,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def iso_date(value):
    """argparse type: YYYY-MM-DD."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)")


def non_negative(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("window must be >= 0")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        description="Generate union analytics reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scripts.generate_report --list
  python -m scripts.generate_report --data-dir exports/ --output reports.json
  python -m scripts.generate_report --report cba_status --date-from 2024-01-01
        """
    )
    parser.add_argument('--list', '-l', action='store_true', help='List available reports')
    parser.add_argument('--data-dir', help='Read <kind>.json files instead of the HTTP source')
    parser.add_argument('--date-from', type=iso_date, help='Inclusive start date (YYYY-MM-DD)')
    parser.add_argument('--date-to', type=iso_date, help='Inclusive end date (YYYY-MM-DD)')
    parser.add_argument('--today', type=iso_date, help='Reference date for day arithmetic (default: today)')
    parser.add_argument('--report', '-r', nargs='+', dest='reports', metavar='KEY', help='Report keys (default: all)')
    parser.add_argument('--union-id', help='Union for executives_by_union')
    parser.add_argument('--expiry-date', type=iso_date, help='Cutoff for executives_expiring_before')
    parser.add_argument('--cba-days', type=non_negative, default=DEFAULT_CBA_EXPIRING_DAYS,
                        help='CBA expiring-soon window in days')
    parser.add_argument('--recent-days', type=non_negative, default=DEFAULT_ASSEMBLY_RECENT_DAYS,
                        help='Recent assembly window in days')
    parser.add_argument('--upcoming-days', type=non_negative, default=DEFAULT_ASSEMBLY_UPCOMING_DAYS,
                        help='Upcoming assembly window in days')
    parser.add_argument('--summary', '-s', action='store_true', help='Print a text summary instead of JSON')
    parser.add_argument('--output', '-o', help='Write JSON to this file instead of stdout')
    return parser


def print_catalogue():
    print("\n" + "=" * 60)
    print("AVAILABLE REPORTS")
    print("=" * 60 + "\n")
    for key, definition in REPORT_CATALOGUE.items():
        print(f"  {key:<28} {definition.title}  [{', '.join(definition.requires)}]")
    print()


def print_summary(results, failures):
    print(f"\n{'='*60}")
    print("REPORTS")
    print(f"{'='*60}")
    for key, result in results.items():
        if result.available:
            print(f"  {key:<28} total={result.total:,}  rows={len(result.rows):,}")
        else:
            print(f"  {key:<28} UNAVAILABLE ({result.error})")
    if failures:
        print()
        print("  Source failures:")
        for kind, reason in failures.items():
            print(f"    {kind}: {reason}")
    print()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        print_catalogue()
        return 0

    unknown = [k for k in args.reports or [] if k not in REPORT_CATALOGUE]
    if unknown:
        print(f"Error: Unknown report(s): {', '.join(unknown)}")
        print("Use --list to see available reports")
        return 1

    if args.date_from and args.date_to and args.date_from > args.date_to:
        print("Error: --date-from must be on or before --date-to")
        return 1

    context = FilterContext.create(
        date_from=args.date_from,
        date_to=args.date_to,
        today=args.today,
        union_id=args.union_id,
        executive_expiry_date=args.expiry_date,
        cba_expiring_days=args.cba_days,
        assembly_recent_days=args.recent_days,
        assembly_upcoming_days=args.upcoming_days,
    )

    repository = get_repository(args.data_dir)
    snapshot = repository.fetch_snapshot()
    pipeline = ReportPipeline(snapshot)
    results = pipeline.generate(context, args.reports)

    if args.summary:
        print_summary(results, pipeline.failures)
        return 0

    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **context.to_dict(),
        "failures": pipeline.failures,
        "reports": {key: result.to_dict() for key, result in results.items()},
    }
    text = json.dumps(payload, indent=2, default=str)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info(f"Wrote {len(results)} reports to {args.output}")
    else:
        print(text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
