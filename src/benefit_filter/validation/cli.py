"""
CLI for running scenario validation.

Usage:
    python -m benefit_filter.validation.cli [options] PATH
    benefit-filter-validate [options] PATH  # if installed

Examples:
    # All scenarios in one file
    benefit-filter-validate scenarios.json

    # A directory of scenario files, legacy exclusion strategy
    benefit-filter-validate --source dir --strategy forward scenarios/
"""

import argparse
import logging
import sys
from datetime import date

from ..config import EXCLUSION_STRATEGIES, FilterConfig
from .comparator import ComparisonConfig, validate


def main():
    parser = argparse.ArgumentParser(
        description="Validate the results filter against recorded screening scenarios"
    )

    parser.add_argument(
        "path",
        type=str,
        help="Scenario JSON file, or directory with --source dir",
    )

    parser.add_argument(
        "--source",
        choices=["json", "dir"],
        default="json",
        help="Scenario source (default: json)",
    )

    parser.add_argument(
        "--sample-size",
        type=int,
        help="Sample size (default: all scenarios)",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory to save results",
    )

    parser.add_argument(
        "--strategy",
        choices=EXCLUSION_STRATEGIES,
        default="recursive",
        help="Exclusion strategy (default: recursive)",
    )

    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        help="Reference date for scenarios without one, YYYY-MM-DD",
    )

    parser.add_argument(
        "--value-tolerance",
        type=float,
        default=1.0,
        help="Total value tolerance in dollars (default: 1)",
    )

    parser.add_argument(
        "--min-match-rate",
        type=float,
        default=100.0,
        help="Exit with an error below this match rate (default: 100)",
    )

    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide progress bar",
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = ComparisonConfig(value_tolerance=args.value_tolerance)
    filter_config = FilterConfig(exclusion_strategy=args.strategy, reference_date=args.date)

    try:
        results = validate(
            source=args.source,
            path=args.path,
            sample_size=args.sample_size,
            output_dir=args.output_dir,
            config=config,
            filter_config=filter_config,
            show_progress=not args.no_progress,
        )
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    # Exit with error if match rates are too low (only for variables with data)
    valid_rates = [
        rate for var, rate in results.match_rates.items()
        if results.matches[var] + len(results.mismatches[var]) > 0
    ]
    min_match_rate = min(valid_rates) if valid_rates else 100
    if min_match_rate < args.min_match_rate:
        print(f"\nWarning: Lowest match rate is {min_match_rate:.1f}%")
        sys.exit(1)


if __name__ == "__main__":
    main()
