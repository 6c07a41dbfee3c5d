"""
Age helpers for household members.

The screener only collects birth month and year, so ages are whole years
computed against a reference date. Callers pass ``today`` explicitly when
they need deterministic results; otherwise the wall clock is used.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional


@dataclass
class AgeStatus:
    """Result of the 16+ check used by the household member step."""

    is_16_or_older: bool
    is_under_16: bool
    age: Optional[int]


def get_current_month_year(today: Optional[date] = None) -> tuple[int, int]:
    """Return (month, year) for the reference date, 1-based month."""
    today = today or date.today()
    return today.month, today.year


def _to_positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _birth_fields(member: Any) -> tuple[Any, Any]:
    if isinstance(member, dict):
        month = member.get("birth_month", member.get("birthMonth"))
        year = member.get("birth_year", member.get("birthYear"))
        return month, year
    return getattr(member, "birth_month", None), getattr(member, "birth_year", None)


def calc_age_from_birth(
    birth_month: Any,
    birth_year: Any,
    today: Optional[date] = None,
) -> Optional[int]:
    """
    Whole-year age from a birth month and year.

    Args:
        birth_month: Birth month (1-12), int or numeric string
        birth_year: Birth year, int or numeric string
        today: Reference date (default: today)

    Returns:
        Age in years, or None when the birth date is missing or invalid
    """
    month = _to_positive_int(birth_month)
    year = _to_positive_int(birth_year)
    if month is None or year is None or month > 12:
        return None

    current_month, current_year = get_current_month_year(today)
    age = current_year - year
    if current_month < month:
        age -= 1
    return age


def calc_age(member: Any, today: Optional[date] = None) -> Optional[int]:
    """Age of a household member (object or raw form dict)."""
    birth_month, birth_year = _birth_fields(member)
    return calc_age_from_birth(birth_month, birth_year, today)


def calculate_age_status(
    birth_month: Any,
    birth_year: Any,
    today: Optional[date] = None,
) -> AgeStatus:
    """
    Check whether a person is 16 or older from birth month and year.

    Uses the plain year difference; someone turning 16 this year counts as
    16+ once their birth month has been reached.
    """
    month = _to_positive_int(birth_month)
    year = _to_positive_int(birth_year)
    if month is None or year is None:
        return AgeStatus(is_16_or_older=False, is_under_16=True, age=None)

    current_month, current_year = get_current_month_year(today)
    age = current_year - year
    is_16_or_older = age > 16 or (age == 16 and month <= current_month)

    return AgeStatus(
        is_16_or_older=is_16_or_older,
        is_under_16=not is_16_or_older,
        age=age,
    )


def determine_default_income_by_age(
    member: Optional[dict],
    today: Optional[date] = None,
) -> str:
    """
    Default answer for the "has income" question of a household member.

    Returns:
        "true" if the member already lists income streams or is 16+, else "false"
    """
    if member is None:
        return "false"

    income_streams = member.get("income_streams", member.get("incomeStreams"))
    if income_streams:
        return "true"

    birth_month, birth_year = _birth_fields(member)
    status = calculate_age_status(birth_month, birth_year, today)
    return "true" if status.is_16_or_older else "false"
