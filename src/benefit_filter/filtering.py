"""
Results filter pipeline.

Given the household, the citizenship filter state and the programs returned
by the eligibility API, decide which programs to show:

1. Update member eligibility for programs that need a calculated label the
   member does not satisfy (on a deep copy of the programs).
2. Keep programs that match a checked label, are eligible, have value and
   aren't already held.
3. Drop programs excluded by another visible program.

Admin view skips steps 2 and 3.
"""

import logging
from datetime import date
from typing import Callable, Iterable, Optional, Union

from .citizenship import CALCULATED_CITIZENSHIP_FILTERS, FilterState
from .config import FilterConfig
from .exclusions import apply_program_exclusions
from .household import FormData, HouseholdMember, find_member
from .programs import Program, clone_programs, program_value

logger = logging.getLogger(__name__)

ProgramFilter = Callable[[list[Program]], list[Program]]


def update_member_eligibilities(
    programs: Iterable[Program],
    household_data: Iterable[HouseholdMember],
    filter_state: FilterState,
    today: Optional[date] = None,
    warn_on_unmatched_members: bool = True,
) -> list[Program]:
    """
    Mark members ineligible when they fail every calculated label a program needs.

    A program that accepts the selected primary status is left alone. For
    the rest, the applicable labels for a member are the active calculated
    labels that the program lists in ``legal_status_required``. A member with
    applicable labels who satisfies none of them gets ``eligible=False`` and
    ``value=0``; a member with no applicable labels is untouched.

    Args:
        programs: Programs from the eligibility API (not modified)
        household_data: Household members
        filter_state: Current filter state
        today: Reference date for age checks (default: today)
        warn_on_unmatched_members: Log a warning for unknown frontend ids

    Returns:
        Deep copy of ``programs`` with member eligibility updated
    """
    household_data = list(household_data)
    updated = clone_programs(programs)

    for program in updated:
        if filter_state.selected_citizenship in program.legal_status_required:
            continue

        applicable = [
            (label, calculator)
            for label, calculator in CALCULATED_CITIZENSHIP_FILTERS.items()
            if label in filter_state.calculated_filters
            and label in program.legal_status_required
        ]
        if not applicable:
            continue

        for member_eligibility in program.members:
            member = find_member(household_data, member_eligibility.frontend_id)
            if member is None:
                if warn_on_unmatched_members:
                    logger.warning(
                        "Program %s: no household member with frontend_id %r; skipping",
                        program.program_id,
                        member_eligibility.frontend_id,
                    )
                continue

            if any(calculator.func(member, today) for _, calculator in applicable):
                continue

            logger.debug(
                "Program %s: member %s fails %s",
                program.program_id,
                member.frontend_id,
                [label for label, _ in applicable],
            )
            member_eligibility.eligible = False
            member_eligibility.value = 0

    return updated


def is_program_basically_visible(
    program: Program,
    checked_filter_names: Iterable[str],
) -> bool:
    """Legal status, eligibility, value and already-has checks (no exclusions)."""
    checked = set(checked_filter_names)
    meets_legal_status = any(
        status in checked for status in program.legal_status_required
    )
    return (
        meets_legal_status
        and program.eligible
        and program_value(program) > 0
        and not program.already_has
    )


def apply_basic_filters(
    programs: Iterable[Program],
    filter_state: FilterState,
    is_admin_view: bool = False,
) -> list[Program]:
    """Keep basically visible programs; admin view keeps everything."""
    programs = list(programs)
    if is_admin_view:
        return programs

    checked = filter_state.checked_filter_names
    return [p for p in programs if is_program_basically_visible(p, checked)]


def household_members(
    form_data: Union[FormData, Iterable[HouseholdMember]],
) -> list[HouseholdMember]:
    """Members from form data or a plain member list."""
    if isinstance(form_data, FormData):
        return list(form_data.household_data)
    return list(form_data)


def filter_programs_generator(
    form_data: Union[FormData, Iterable[HouseholdMember]],
    filter_state: FilterState,
    is_admin_view: bool = False,
    config: Optional[FilterConfig] = None,
) -> ProgramFilter:
    """
    Build the filter function for the current form data and filter state.

    Args:
        form_data: Screener form data (or a list of household members)
        filter_state: Current citizenship filter state
        is_admin_view: Show every program, unfiltered
        config: Pipeline settings (exclusion strategy, reference date)

    Returns:
        Function mapping a list of programs to the programs to display
    """
    config = config or FilterConfig()
    household_data = household_members(form_data)

    def filter_programs(programs: list[Program]) -> list[Program]:
        updated = update_member_eligibilities(
            programs,
            household_data,
            filter_state,
            today=config.reference_date,
            warn_on_unmatched_members=config.warn_on_unmatched_members,
        )
        visible = apply_basic_filters(updated, filter_state, is_admin_view)
        return apply_program_exclusions(
            visible,
            is_admin_view=is_admin_view,
            strategy=config.exclusion_strategy,
        )

    return filter_programs


def filter_programs(
    programs: Iterable[Program],
    form_data: Union[FormData, Iterable[HouseholdMember]],
    filter_state: FilterState,
    is_admin_view: bool = False,
    config: Optional[FilterConfig] = None,
) -> list[Program]:
    """One-shot version of :func:`filter_programs_generator`."""
    return filter_programs_generator(form_data, filter_state, is_admin_view, config)(
        list(programs)
    )
