"""
Validation module: Check the results filter against recorded screening scenarios.

- Scenarios are recorded screenings with the programs the page should show
- Each scenario runs through the full filter pipeline
- Program-id sets are compared exactly, total value within a tolerance
"""

from .comparator import Comparator, ComparisonConfig, ComparisonResults
from .runners import run_both, run_filter
from .scenario_loader import Scenario, load_scenarios

__all__ = [
    "Comparator",
    "ComparisonConfig",
    "ComparisonResults",
    "run_filter",
    "run_both",
    "load_scenarios",
    "Scenario",
]
