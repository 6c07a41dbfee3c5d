"""
Household data collected by the screener.

Members arrive from the form layer as camelCase dicts; both camelCase and
snake_case keys are accepted.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from .age import calc_age


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class SpecialConditions:
    """Special circumstances reported for a household member."""

    pregnant: bool = False
    student: bool = False
    disabled: bool = False
    blind_or_visually_impaired: bool = False
    long_term_disability: bool = False

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SpecialConditions":
        data = data or {}
        return cls(
            pregnant=bool(_pick(data, "pregnant", default=False)),
            student=bool(_pick(data, "student", default=False)),
            disabled=bool(_pick(data, "disabled", default=False)),
            blind_or_visually_impaired=bool(
                _pick(data, "blind_or_visually_impaired", "blindOrVisuallyImpaired", "blind", default=False)
            ),
            long_term_disability=bool(
                _pick(data, "long_term_disability", "longTermDisability", default=False)
            ),
        )

    def to_dict(self) -> dict:
        return {
            "pregnant": self.pregnant,
            "student": self.student,
            "disabled": self.disabled,
            "blindOrVisuallyImpaired": self.blind_or_visually_impaired,
            "longTermDisability": self.long_term_disability,
        }


@dataclass
class HouseholdMember:
    """One person in the household."""

    frontend_id: str
    birth_month: Optional[int] = None
    birth_year: Optional[int] = None
    relationship_to_hh: Optional[str] = None
    special_conditions: SpecialConditions = field(default_factory=SpecialConditions)
    income_streams: list = field(default_factory=list)

    def age(self, today: Optional[date] = None) -> Optional[int]:
        """Whole-year age, or None if the birth date is unknown."""
        return calc_age(self, today)

    @property
    def pregnant(self) -> bool:
        return self.special_conditions.pregnant

    @classmethod
    def from_dict(cls, data: dict) -> "HouseholdMember":
        frontend_id = _pick(data, "frontend_id", "frontendId", "id", default="")
        return cls(
            frontend_id=str(frontend_id),
            birth_month=_pick(data, "birth_month", "birthMonth"),
            birth_year=_pick(data, "birth_year", "birthYear"),
            relationship_to_hh=_pick(data, "relationship_to_hh", "relationshipToHH"),
            special_conditions=SpecialConditions.from_dict(
                _pick(data, "special_conditions", "specialConditions")
            ),
            income_streams=list(_pick(data, "income_streams", "incomeStreams", default=[])),
        )

    def to_dict(self) -> dict:
        return {
            "frontendId": self.frontend_id,
            "birthMonth": self.birth_month,
            "birthYear": self.birth_year,
            "relationshipToHH": self.relationship_to_hh,
            "specialConditions": self.special_conditions.to_dict(),
            "incomeStreams": list(self.income_streams),
        }


def find_member(
    household_data: Iterable[HouseholdMember],
    frontend_id: str,
) -> Optional[HouseholdMember]:
    """Return the member with the given frontend id, or None."""
    for member in household_data:
        if member.frontend_id == frontend_id:
            return member
    return None


@dataclass
class FormData:
    """The household portion of the screener form."""

    household_data: list[HouseholdMember] = field(default_factory=list)
    household_size: Optional[int] = None

    def __post_init__(self):
        if self.household_size is None:
            self.household_size = len(self.household_data)

    def find_member(self, frontend_id: str) -> Optional[HouseholdMember]:
        return find_member(self.household_data, frontend_id)

    @classmethod
    def from_dict(cls, data: Any) -> "FormData":
        """
        Build form data from parsed JSON.

        Accepts either a form object with ``householdData`` or a bare list
        of member dicts.
        """
        if isinstance(data, list):
            members = data
            size = None
        elif isinstance(data, dict):
            members = _pick(data, "household_data", "householdData", default=[])
            size = _pick(data, "household_size", "householdSize")
        else:
            raise ValueError(f"Unsupported household data: {type(data).__name__}")

        return cls(
            household_data=[
                m if isinstance(m, HouseholdMember) else HouseholdMember.from_dict(m)
                for m in members
            ],
            household_size=size,
        )

    def to_dict(self) -> dict:
        return {
            "householdSize": self.household_size,
            "householdData": [m.to_dict() for m in self.household_data],
        }
