"""
Command-line interface for benefit-filter.

Usage:
    benefit-filter filter programs.json --household household.json --citizenship non_citizen
    benefit-filter derived --household household.json --citizenship gc_5less
    benefit-filter explain programs.json --household household.json --citizenship citizen
    benefit-filter statuses
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from .citizenship import CITIZEN_LABEL_OPTIONS, CITIZENSHIP_FILTER_CONFIG, FilterState
from .config import EXCLUSION_STRATEGIES, FilterConfig
from .filtering import filter_programs
from .household import FormData
from .programs import parse_programs
from .report import visibility_report

logger = logging.getLogger(__name__)


def _read_json(path: Path):
    if not path.exists():
        print(f"Error: {path} not found", file=sys.stderr)
        sys.exit(1)
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        print(f"Error: {path} is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)


def _add_household_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--household",
        type=Path,
        required=True,
        help="Household JSON (form data or list of members)",
    )
    parser.add_argument(
        "--citizenship",
        choices=CITIZEN_LABEL_OPTIONS,
        default="citizen",
        help="Selected citizenship/legal status (default: citizen)",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Reference date for ages, YYYY-MM-DD (default: today)",
    )


def _add_program_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "programs",
        type=Path,
        help="Programs JSON (list or eligibility results with 'programs')",
    )
    _add_household_args(parser)
    parser.add_argument(
        "--strategy",
        choices=EXCLUSION_STRATEGIES,
        default="recursive",
        help="Exclusion strategy (default: recursive)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file path (default: stdout)",
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="benefit-filter",
        description="Filter benefit screening results by citizenship and program exclusions",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Filter command
    filter_parser = subparsers.add_parser(
        "filter",
        help="Print the programs visible for a household",
    )
    _add_program_args(filter_parser)
    filter_parser.add_argument(
        "--admin",
        action="store_true",
        help="Admin view: show every program, unfiltered",
    )

    # Derived command
    derived_parser = subparsers.add_parser(
        "derived",
        help="Print the calculated citizenship labels active for a household",
    )
    _add_household_args(derived_parser)

    # Explain command
    explain_parser = subparsers.add_parser(
        "explain",
        help="Explain why each program is shown or hidden",
    )
    _add_program_args(explain_parser)

    # Statuses command
    subparsers.add_parser(
        "statuses",
        help="List the citizenship statuses that can be selected",
    )

    # Version
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "statuses":
        for status in CITIZEN_LABEL_OPTIONS:
            print(f"{status}\t{CITIZENSHIP_FILTER_CONFIG[status].label}")
        return

    try:
        form_data = FormData.from_dict(_read_json(args.household))
    except (AttributeError, TypeError, ValueError) as e:
        print(f"Error: invalid household in {args.household}: {e}", file=sys.stderr)
        sys.exit(1)
    filter_state = FilterState.for_household(
        args.citizenship, form_data.household_data, today=args.date
    )

    if args.command == "derived":
        for label in sorted(filter_state.calculated_filters):
            print(label)
        return

    try:
        programs = parse_programs(_read_json(args.programs))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        print(f"Error: invalid programs in {args.programs}: {e}", file=sys.stderr)
        sys.exit(1)

    config = FilterConfig(exclusion_strategy=args.strategy, reference_date=args.date)
    logger.debug("Filtering %d programs with %s", len(programs), filter_state)

    if args.command == "filter":
        visible = filter_programs(programs, form_data, filter_state, args.admin, config)
        output = json.dumps([p.to_dict() for p in visible], indent=2)

        if args.output:
            args.output.write_text(output)
            print(
                f"Wrote {len(visible)} of {len(programs)} programs -> {args.output}",
                file=sys.stderr,
            )
        else:
            print(output)

    elif args.command == "explain":
        report = visibility_report(programs, form_data, filter_state, config)

        if args.output:
            report.to_csv(args.output, index=False)
            print(f"Saved report to: {args.output}", file=sys.stderr)
        else:
            print(report.to_string(index=False))


if __name__ == "__main__":
    main()
