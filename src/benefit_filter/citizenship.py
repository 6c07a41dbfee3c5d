"""
Citizenship / legal-status filters for screening results.

A user picks one primary status. Each primary status can switch on a set of
calculated labels: member-level conditions (age, pregnancy) that some
programs require on top of the primary status, e.g. "green card holder
under 19". A calculated label is active when it is linked to the selected
status and at least one household member satisfies it.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional

from .household import HouseholdMember

logger = logging.getLogger(__name__)

# Primary statuses, in the order they are offered to the user
CITIZEN_LABEL_OPTIONS = (
    "citizen",
    "non_citizen",
    "gc_5plus",
    "gc_5less",
    "refugee",
    "otherWithWorkPermission",
)

DEFAULT_CITIZENSHIP = "citizen"

# Statuses that unlock the general non-citizen health care labels
_ALL_NON_CITIZEN = [
    "non_citizen",
    "refugee",
    "gc_5plus",
    "gc_5less",
    "otherWithWorkPermission",
]

MemberPredicate = Callable[[HouseholdMember, Optional[date]], bool]


@dataclass(frozen=True)
class CalculatedCitizenshipFilter:
    """A calculated label: member predicate plus the primary statuses it belongs to."""

    func: MemberPredicate
    linked_filters: tuple[str, ...]

    def applies_to(self, selected_citizenship: str) -> bool:
        return selected_citizenship in self.linked_filters


def _age_below(member: HouseholdMember, limit: int, today: Optional[date]) -> bool:
    age = member.age(today)
    return age is not None and age < limit


def _age_at_least(member: HouseholdMember, limit: int, today: Optional[date]) -> bool:
    age = member.age(today)
    return age is not None and age >= limit


def _pregnant(member: HouseholdMember, today: Optional[date] = None) -> bool:
    return bool(member.special_conditions.pregnant)


def _not_pregnant_and_19_plus(member: HouseholdMember, today: Optional[date] = None) -> bool:
    return not _pregnant(member) and _age_at_least(member, 19, today)


def _not_pregnant_and_not_under_21(member: HouseholdMember, today: Optional[date] = None) -> bool:
    # An unknown age is not "under 21"
    return not _pregnant(member) and not _age_below(member, 21, today)


CALCULATED_CITIZENSHIP_FILTERS: dict[str, CalculatedCitizenshipFilter] = {
    "otherHealthCarePregnant": CalculatedCitizenshipFilter(
        func=_pregnant,
        linked_filters=tuple(_ALL_NON_CITIZEN),
    ),
    "otherHealthCareUnder19": CalculatedCitizenshipFilter(
        func=lambda member, today=None: _age_below(member, 19, today),
        linked_filters=tuple(_ALL_NON_CITIZEN),
    ),
    "notPregnantOrUnder19ForOmniSalud": CalculatedCitizenshipFilter(
        func=_not_pregnant_and_19_plus,
        linked_filters=("non_citizen",),
    ),
    "notPregnantOrUnder19ForEmergencyMedicaid": CalculatedCitizenshipFilter(
        func=_not_pregnant_and_19_plus,
        linked_filters=("gc_5less", "non_citizen", "otherWithWorkPermission"),
    ),
    "gc_18plus_no5": CalculatedCitizenshipFilter(
        func=lambda member, today=None: _age_at_least(member, 18, today),
        linked_filters=("gc_5less",),
    ),
    "gc_under18_no5": CalculatedCitizenshipFilter(
        func=lambda member, today=None: _age_below(member, 18, today),
        linked_filters=("gc_5less",),
    ),
    "notPregnantForMassHealthLimited": CalculatedCitizenshipFilter(
        func=lambda member, today=None: not _pregnant(member),
        linked_filters=("non_citizen",),
    ),
    "notPregnantOrChildForMassHealthLimited": CalculatedCitizenshipFilter(
        func=_not_pregnant_and_not_under_21,
        linked_filters=("gc_5less", "otherWithWorkPermission"),
    ),
    "otherHealthCareUnder21": CalculatedCitizenshipFilter(
        func=lambda member, today=None: _age_below(member, 21, today),
        linked_filters=("gc_5less", "otherWithWorkPermission"),
    ),
}

CALCULATED_CITIZEN_LABELS = tuple(CALCULATED_CITIZENSHIP_FILTERS)
ALL_CITIZEN_LABELS = CITIZEN_LABEL_OPTIONS + CALCULATED_CITIZEN_LABELS


@dataclass(frozen=True)
class CitizenshipFilterLabel:
    """Presentation strings for a primary status. Translation is up to the UI."""

    message_id: str
    label: str
    tooltip_id: str
    tooltip: str
    legacy_message_id: str
    legacy_label: str


CITIZENSHIP_FILTER_CONFIG: dict[str, CitizenshipFilterLabel] = {
    "citizen": CitizenshipFilterLabel(
        message_id="citizenshipButton-citizen",
        label="U.S. Citizen",
        tooltip_id="citizenshipTooltip-citizen",
        tooltip="U.S. citizens by birth or naturalization.",
        legacy_message_id="citizenshipFCtrlLabel-citizen",
        legacy_label="U.S. Citizen",
    ),
    "gc_5plus": CitizenshipFilterLabel(
        message_id="citizenshipButton-gc_5plus",
        label="Green Card 5+",
        tooltip_id="citizenshipTooltip-gc_5plus",
        tooltip="Lawful permanent residents who have had their green card for 5 or more years.",
        legacy_message_id="citizenshipFCtrlLabel-gc_5plus",
        legacy_label="Had green card for 5+ years",
    ),
    "gc_5less": CitizenshipFilterLabel(
        message_id="citizenshipButton-gc_5less",
        label="Green Card <5",
        tooltip_id="citizenshipTooltip-gc_5less",
        tooltip="Lawful permanent residents who have had their green card for less than 5 years.",
        legacy_message_id="citizenshipFCtrlLabel-gc_5less",
        legacy_label="Had green card for less than 5 years",
    ),
    "refugee": CitizenshipFilterLabel(
        message_id="citizenshipButton-refugee",
        label="Refugee/Asylee",
        tooltip_id="citizenshipTooltip-refugee",
        tooltip="Individuals granted refugee or asylee status by the U.S. government.",
        legacy_message_id="citizenshipFCtrlLabel-refugee",
        legacy_label="Granted refugee or asylee status (special rules or waiting periods may apply)",
    ),
    "otherWithWorkPermission": CitizenshipFilterLabel(
        message_id="citizenshipButton-otherLawful",
        label="Other Lawful",
        tooltip_id="citizenshipTooltip-otherLawful",
        tooltip="Other lawfully present noncitizens with authorization to live or work in the U.S.",
        legacy_message_id="citizenshipFCtrlLabel-other_work_permission",
        legacy_label=(
            "Other lawfully present noncitizens with permission to live or work "
            "in the U.S. (other rules may apply)"
        ),
    ),
    "non_citizen": CitizenshipFilterLabel(
        message_id="citizenshipButton-undocumented",
        label="Undocumented",
        tooltip_id="citizenshipTooltip-undocumented",
        tooltip="Individuals without lawful immigration status (includes DACA recipients).",
        legacy_message_id="citizenshipFCtrlLabel-non_citizen",
        legacy_label=(
            "Individuals without lawful U.S. presence or citizenship "
            "(includes DACA recipients)"
        ),
    ),
}


def validate_citizenship(selected_citizenship: str) -> str:
    """Return the status unchanged, or raise ValueError if it is not a primary status."""
    if selected_citizenship not in CITIZEN_LABEL_OPTIONS:
        raise ValueError(
            f"Unknown citizenship status: {selected_citizenship!r}. "
            f"Use one of: {', '.join(CITIZEN_LABEL_OPTIONS)}"
        )
    return selected_citizenship


def calculate_derived_filters(
    selected_citizenship: str,
    household_data: Iterable[HouseholdMember],
    today: Optional[date] = None,
) -> frozenset[str]:
    """
    Calculated labels that are active for a status selection and household.

    Args:
        selected_citizenship: Selected primary status
        household_data: Household members
        today: Reference date for age checks (default: today)

    Returns:
        Frozen set of active calculated labels
    """
    validate_citizenship(selected_citizenship)
    members = list(household_data)
    active = set()

    for label, calculator in CALCULATED_CITIZENSHIP_FILTERS.items():
        if not calculator.applies_to(selected_citizenship):
            continue
        if any(calculator.func(member, today) for member in members):
            active.add(label)

    logger.debug(
        "Derived filters for %s (%d members): %s",
        selected_citizenship,
        len(members),
        sorted(active),
    )
    return frozenset(active)


@dataclass(frozen=True)
class FilterState:
    """Single-select filter state: the chosen status and the calculated labels it activates."""

    selected_citizenship: str = DEFAULT_CITIZENSHIP
    calculated_filters: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        validate_citizenship(self.selected_citizenship)
        unknown = set(self.calculated_filters) - set(CALCULATED_CITIZEN_LABELS)
        if unknown:
            raise ValueError(f"Unknown calculated filters: {sorted(unknown)}")
        object.__setattr__(self, "calculated_filters", frozenset(self.calculated_filters))

    @property
    def checked_filter_names(self) -> frozenset[str]:
        """Every label a program's legal status may match."""
        return self.calculated_filters | {self.selected_citizenship}

    @classmethod
    def for_household(
        cls,
        selected_citizenship: str,
        household_data: Iterable[HouseholdMember],
        today: Optional[date] = None,
    ) -> "FilterState":
        return cls(
            selected_citizenship=selected_citizenship,
            calculated_filters=calculate_derived_filters(
                selected_citizenship, household_data, today
            ),
        )

    @classmethod
    def from_checked(cls, filters_checked: dict[str, bool]) -> "FilterState":
        """
        Build a state from the legacy ``{label: checked}`` checkbox map.

        Exactly one primary status must be checked.
        """
        unknown = [name for name in filters_checked if name not in ALL_CITIZEN_LABELS]
        if unknown:
            raise ValueError(f"Unknown citizenship labels: {sorted(unknown)}")

        primaries = [
            name for name in CITIZEN_LABEL_OPTIONS if filters_checked.get(name)
        ]
        if len(primaries) != 1:
            raise ValueError(
                f"Exactly one citizenship status must be checked, got {len(primaries)}"
            )

        calculated = [
            name for name in CALCULATED_CITIZEN_LABELS if filters_checked.get(name)
        ]
        return cls(selected_citizenship=primaries[0], calculated_filters=frozenset(calculated))

    def to_checked(self) -> dict[str, bool]:
        """Legacy checkbox map over every known label."""
        checked = self.checked_filter_names
        return {name: name in checked for name in ALL_CITIZEN_LABELS}


def create_initial_filter_state() -> FilterState:
    """Initial state: 'citizen' with no calculated labels."""
    return FilterState()
