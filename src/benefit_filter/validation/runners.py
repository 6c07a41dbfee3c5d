"""
Runners for validation: execute the results filter on recorded scenarios.

Each scenario is run through the same pipeline the results page uses
(calculated citizenship labels, member eligibility updates, basic filters,
exclusions) and the visible programs are recorded next to the expectations.
"""

import dataclasses
import logging
from datetime import date
from typing import Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from ..citizenship import FilterState
from ..config import FilterConfig
from ..filtering import filter_programs
from ..household import FormData
from ..programs import parse_programs, program_value
from .scenario_loader import Scenario, iterate_scenarios

logger = logging.getLogger(__name__)


def _reference_date(scenario: Scenario, config: FilterConfig) -> Optional[date]:
    if isinstance(scenario.reference_date, str) and scenario.reference_date:
        return date.fromisoformat(scenario.reference_date)
    return config.reference_date


def run_scenario(scenario: Scenario, config: Optional[FilterConfig] = None) -> dict:
    """Run one scenario and return the visible program ids and total value."""
    config = config or FilterConfig()
    today = _reference_date(scenario, config)
    run_config = dataclasses.replace(config, reference_date=today)

    form_data = FormData.from_dict(scenario.form_data)
    programs = parse_programs(scenario.programs)
    filter_state = FilterState.for_household(
        scenario.citizenship, form_data.household_data, today=today
    )
    visible = filter_programs(
        programs, form_data, filter_state, scenario.is_admin_view, run_config
    )

    return {
        "scenario_id": scenario.scenario_id,
        "actual_program_ids": [p.program_id for p in visible],
        "actual_total_value": float(sum(program_value(p) for p in visible)),
        "actual_count": len(visible),
        "error": None,
    }


def run_filter(
    df: pd.DataFrame,
    config: Optional[FilterConfig] = None,
    show_progress: bool = True,
) -> pd.DataFrame:
    """
    Run the results filter on every scenario.

    Args:
        df: DataFrame with scenarios (from load_scenarios)
        config: Filter configuration
        show_progress: Show progress bar

    Returns:
        DataFrame with scenario_id and the filter output
    """
    results = []
    scenarios = iterate_scenarios(df)
    iterator = (
        tqdm(scenarios, total=len(df), desc="Filter")
        if show_progress
        else scenarios
    )

    for scenario in iterator:
        try:
            results.append(run_scenario(scenario, config))
        except Exception as e:
            # Record the failure but continue with other scenarios
            logger.warning("Scenario %s failed: %s", scenario.scenario_id, e)
            results.append(
                {
                    "scenario_id": scenario.scenario_id,
                    "actual_program_ids": None,
                    "actual_total_value": np.nan,
                    "actual_count": np.nan,
                    "error": str(e),
                }
            )

    return pd.DataFrame(
        results,
        columns=[
            "scenario_id",
            "actual_program_ids",
            "actual_total_value",
            "actual_count",
            "error",
        ],
    )


def run_both(
    df: pd.DataFrame,
    config: Optional[FilterConfig] = None,
    show_progress: bool = True,
) -> pd.DataFrame:
    """
    Run the filter and merge its output with the scenario expectations.

    Returns:
        DataFrame with expected_* and actual_* columns per scenario
    """
    actual = run_filter(df, config=config, show_progress=show_progress)
    expected = df[
        ["scenario_id", "citizenship", "expected_program_ids", "expected_total_value"]
    ]
    return expected.merge(actual, on="scenario_id", how="left")
