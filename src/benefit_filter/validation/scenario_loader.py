"""
Scenario loader for validation.

A scenario is one recorded screening: household, eligibility API programs,
the selected citizenship status and the programs the results page should
show. Scenarios are stored as JSON, either one file holding a list or a
directory of ``*.json`` files.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

import numpy as np
import pandas as pd

SCENARIO_COLUMNS = [
    "scenario_id",
    "citizenship",
    "is_admin_view",
    "reference_date",
    "form_data",
    "programs",
    "expected_program_ids",
    "expected_total_value",
]


@dataclass
class Scenario:
    """A single recorded screening scenario."""

    scenario_id: str
    citizenship: str
    form_data: Any
    programs: list
    expected_program_ids: list[int]
    is_admin_view: bool = False
    reference_date: Optional[str] = None
    expected_total_value: float = np.nan


def _scenario_record(data: dict, default_id: str) -> dict:
    if "expected_program_ids" not in data:
        scenario_id = data.get("scenario_id", default_id)
        raise ValueError(f"Scenario {scenario_id} has no expected_program_ids")

    expected_total = data.get("expected_total_value")
    return {
        "scenario_id": str(data.get("scenario_id", default_id)),
        "citizenship": data.get("citizenship", "citizen"),
        "is_admin_view": bool(data.get("is_admin_view", False)),
        "reference_date": data.get("reference_date"),
        "form_data": data.get("household", data.get("form_data", [])),
        "programs": data.get("programs", []),
        "expected_program_ids": [int(i) for i in data["expected_program_ids"]],
        "expected_total_value": np.nan if expected_total is None else float(expected_total),
    }


def load_scenarios_from_json(
    path: str,
    sample_size: Optional[int] = None,
    random_state: int = 42,
) -> pd.DataFrame:
    """
    Load scenarios from a JSON file.

    Args:
        path: JSON file with a list of scenarios (or {"scenarios": [...]})
        sample_size: If set, randomly sample this many scenarios
        random_state: Random seed for reproducible sampling

    Returns:
        DataFrame with one row per scenario
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("scenarios", [data])

    records = [
        _scenario_record(item, default_id=f"{Path(path).stem}-{i}")
        for i, item in enumerate(data)
    ]
    return _finish(records, sample_size, random_state)


def load_scenarios_from_dir(
    path: str,
    sample_size: Optional[int] = None,
    random_state: int = 42,
) -> pd.DataFrame:
    """Load every ``*.json`` scenario file in a directory, sorted by name."""
    records = []
    for file_path in sorted(Path(path).glob("*.json")):
        data = json.loads(file_path.read_text())
        items = data if isinstance(data, list) else data.get("scenarios", [data])
        for i, item in enumerate(items):
            default_id = file_path.stem if len(items) == 1 else f"{file_path.stem}-{i}"
            records.append(_scenario_record(item, default_id=default_id))

    return _finish(records, sample_size, random_state)


def _finish(records: list[dict], sample_size: Optional[int], random_state: int) -> pd.DataFrame:
    df = pd.DataFrame(records, columns=SCENARIO_COLUMNS)

    if sample_size and sample_size < len(df):
        df = df.sample(n=sample_size, random_state=random_state)

    return df.reset_index(drop=True)


def load_scenarios(
    source: str = "json",
    path: Optional[str] = None,
    sample_size: Optional[int] = None,
    random_state: int = 42,
) -> pd.DataFrame:
    """
    Load scenarios from specified source.

    Args:
        source: "json" (single file) or "dir" (directory of JSON files)
        path: File or directory path
        sample_size: Optional sample size
        random_state: Random seed

    Returns:
        DataFrame ready for validation
    """
    if path is None:
        raise ValueError("path required to load scenarios")
    if source == "json":
        return load_scenarios_from_json(path, sample_size, random_state)
    elif source == "dir":
        return load_scenarios_from_dir(path, sample_size, random_state)
    else:
        raise ValueError(f"Unknown source: {source}. Use 'json' or 'dir'")


def iterate_scenarios(df: pd.DataFrame) -> Iterator[Scenario]:
    """Iterate over DataFrame as Scenario objects."""
    for _, row in df.iterrows():
        yield Scenario(
            scenario_id=row["scenario_id"],
            citizenship=row["citizenship"],
            form_data=row["form_data"],
            programs=row["programs"],
            expected_program_ids=list(row["expected_program_ids"]),
            is_admin_view=bool(row["is_admin_view"]),
            reference_date=row["reference_date"],
            expected_total_value=row["expected_total_value"],
        )
