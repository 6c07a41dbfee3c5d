"""
Comparator: Compare filter output against recorded scenario expectations.

Two things are checked per scenario: the set of visible program ids must
match exactly, and the total value of the visible programs must match
within a tolerance (only where the scenario records an expected total).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..config import FilterConfig


@dataclass
class ComparisonConfig:
    """Configuration for validation comparison."""

    # Absolute tolerance on total visible value, in dollars
    value_tolerance: float = 1.0

    # Column mappings
    id_col: str = "scenario_id"


@dataclass
class MismatchRecord:
    """Record of a scenario mismatch."""

    scenario_id: str
    variable: str
    expected: Any
    actual: Any
    missing_ids: List[int] = field(default_factory=list)
    unexpected_ids: List[int] = field(default_factory=list)
    difference: Optional[float] = None
    citizenship: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ComparisonResults:
    """Results from comparing filter output with expectations."""

    total_scenarios: int
    variables_compared: List[str]
    matches: Dict[str, int]
    mismatches: Dict[str, List[MismatchRecord]]
    match_rates: Dict[str, float]
    config: ComparisonConfig
    full_data: Optional[pd.DataFrame] = None

    def summary(self) -> Dict[str, Any]:
        """Generate summary statistics."""
        return {
            "total_scenarios": self.total_scenarios,
            "variables": {
                var: {
                    "matches": self.matches[var],
                    "mismatches": len(self.mismatches[var]),
                    "match_rate": self.match_rates[var],
                }
                for var in self.variables_compared
            },
        }

    def detailed_report(self) -> str:
        """Generate detailed text report."""
        lines = [
            "=" * 70,
            "Results Filter Scenario Validation Report",
            "=" * 70,
            f"Total Scenarios: {self.total_scenarios:,}",
            "",
        ]

        for var in self.variables_compared:
            total_compared = self.matches[var] + len(self.mismatches[var])
            if total_compared == 0:
                lines.extend([
                    f"{var.upper()} Comparison:",
                    "-" * 40,
                    "  Skipped (no expectations recorded)",
                    "",
                ])
                continue

            lines.extend([
                f"{var.upper()} Comparison:",
                "-" * 40,
                f"  Matches:     {self.matches[var]:,} ({self.match_rates[var]:.2f}%)",
                f"  Mismatches:  {len(self.mismatches[var]):,}",
            ])
            if var == "total_value":
                lines.append(f"  Tolerance:   ±${self.config.value_tolerance:.0f}")
            lines.append("")

            if self.mismatches[var]:
                lines.append("  First mismatches:")
                for m in self.mismatches[var][:5]:
                    if m.error:
                        lines.append(f"    {m.scenario_id}: error: {m.error}")
                    elif var == "program_ids":
                        lines.append(
                            f"    {m.scenario_id}: missing={m.missing_ids}, "
                            f"unexpected={m.unexpected_ids}"
                        )
                    else:
                        lines.append(
                            f"    {m.scenario_id}: expected=${m.expected:.0f}, "
                            f"actual=${m.actual:.0f}, diff=${m.difference:.0f}"
                        )
                lines.append("")

        lines.append("=" * 70)
        return "\n".join(lines)

    def save_report(self, output_dir: Path):
        """Save comparison results to files."""
        output_dir = Path(output_dir)
        output_dir.mkdir(exist_ok=True, parents=True)

        # Save summary report
        report_path = output_dir / "validation_report.txt"
        report_path.write_text(self.detailed_report())
        print(f"Saved report to: {report_path}")

        # Save full comparison data
        if self.full_data is not None:
            data_path = output_dir / "validation_data.csv"
            self.full_data.to_csv(data_path, index=False)
            print(f"Saved full data to: {data_path}")

        # Save mismatches per variable
        for var in self.variables_compared:
            if self.mismatches[var]:
                mismatch_df = pd.DataFrame([
                    {
                        "scenario_id": m.scenario_id,
                        "citizenship": m.citizenship,
                        "expected": m.expected,
                        "actual": m.actual,
                        "missing_ids": m.missing_ids,
                        "unexpected_ids": m.unexpected_ids,
                        "difference": m.difference,
                        "error": m.error,
                    }
                    for m in self.mismatches[var]
                ])
                mismatch_path = output_dir / f"{var}_mismatches.csv"
                mismatch_df.to_csv(mismatch_path, index=False)
                print(f"Saved {var} mismatches to: {mismatch_path}")


class Comparator:
    """Compare filter output with scenario expectations."""

    VARIABLES = ["program_ids", "total_value"]

    def __init__(self, config: Optional[ComparisonConfig] = None):
        self.config = config or ComparisonConfig()

    def compare(self, df: pd.DataFrame) -> ComparisonResults:
        """
        Compare expected and actual filter output.

        Args:
            df: DataFrame with expected_* and actual_* columns
                (output from runners.run_both)

        Returns:
            ComparisonResults with match statistics and mismatches
        """
        matches = {}
        mismatches = {}
        match_rates = {}

        for var_name in self.VARIABLES:
            compare_variable = getattr(self, f"_compare_{var_name}")
            var_matches, var_mismatches = compare_variable(df)
            matches[var_name] = var_matches
            mismatches[var_name] = var_mismatches
            valid_count = var_matches + len(var_mismatches)
            match_rates[var_name] = (var_matches / valid_count * 100) if valid_count > 0 else 0

        return ComparisonResults(
            total_scenarios=len(df),
            variables_compared=list(matches.keys()),
            matches=matches,
            mismatches=mismatches,
            match_rates=match_rates,
            config=self.config,
            full_data=df,
        )

    def _compare_program_ids(self, df: pd.DataFrame) -> tuple:
        """Visible program ids must match exactly (order ignored)."""
        if "expected_program_ids" not in df.columns or "actual_program_ids" not in df.columns:
            return 0, []

        match_count = 0
        mismatches = []
        for _, row in df.iterrows():
            expected = row["expected_program_ids"]
            actual = row["actual_program_ids"]
            error = row.get("error")

            if not isinstance(actual, list):
                mismatches.append(MismatchRecord(
                    scenario_id=row[self.config.id_col],
                    variable="program_ids",
                    expected=list(expected),
                    actual=None,
                    citizenship=row.get("citizenship"),
                    error=error if isinstance(error, str) else "no result",
                ))
                continue

            expected_set = set(expected)
            actual_set = set(actual)
            if expected_set == actual_set:
                match_count += 1
                continue

            mismatches.append(MismatchRecord(
                scenario_id=row[self.config.id_col],
                variable="program_ids",
                expected=list(expected),
                actual=list(actual),
                missing_ids=sorted(expected_set - actual_set),
                unexpected_ids=sorted(actual_set - expected_set),
                citizenship=row.get("citizenship"),
            ))

        return match_count, mismatches

    def _compare_total_value(self, df: pd.DataFrame) -> tuple:
        """Total visible value must match within tolerance."""
        if "expected_total_value" not in df.columns or "actual_total_value" not in df.columns:
            return 0, []

        # Scenarios without a recorded total or without a result are skipped
        valid_mask = ~df["expected_total_value"].isna() & ~df["actual_total_value"].isna()
        df_valid = df[valid_mask]
        if len(df_valid) == 0:
            return 0, []

        is_match = np.isclose(
            df_valid["actual_total_value"].astype(float),
            df_valid["expected_total_value"].astype(float),
            atol=self.config.value_tolerance,
            rtol=0,
        )

        mismatches = []
        for _, row in df_valid[~is_match].iterrows():
            expected = float(row["expected_total_value"])
            actual = float(row["actual_total_value"])
            mismatches.append(MismatchRecord(
                scenario_id=row[self.config.id_col],
                variable="total_value",
                expected=expected,
                actual=actual,
                difference=actual - expected,
                citizenship=row.get("citizenship"),
            ))

        return int(is_match.sum()), mismatches


def validate(
    source: str = "json",
    path: Optional[str] = None,
    sample_size: Optional[int] = None,
    output_dir: Optional[str] = None,
    config: Optional[ComparisonConfig] = None,
    filter_config: Optional[FilterConfig] = None,
    show_progress: bool = True,
) -> ComparisonResults:
    """
    Run the scenario validation pipeline.

    Args:
        source: Scenario source ("json" or "dir")
        path: Scenario file or directory
        sample_size: Optional sample size for faster validation
        output_dir: Directory to save results
        config: Comparison configuration
        filter_config: FilterConfig for the pipeline under test
        show_progress: Show progress bar

    Returns:
        ComparisonResults
    """
    from .runners import run_both
    from .scenario_loader import load_scenarios

    print(f"Loading scenarios from {path}...")
    df = load_scenarios(source=source, path=path, sample_size=sample_size)
    print(f"Loaded {len(df):,} scenarios")

    print("\nRunning filter...")
    results_df = run_both(df, config=filter_config, show_progress=show_progress)

    print("\nComparing results...")
    comparator = Comparator(config)
    results = comparator.compare(results_df)

    print("\n" + results.detailed_report())

    if output_dir:
        results.save_report(Path(output_dir))

    return results
