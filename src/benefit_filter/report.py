"""
Visibility report: why each program is shown or hidden.

Intended for the admin view, which shows every program unfiltered; the
report adds the reason the regular view would hide it.
"""

from typing import Iterable, Optional, Union

import pandas as pd

from .citizenship import FilterState
from .config import FilterConfig
from .exclusions import ExclusionResolver, forward_exclusions
from .filtering import (
    household_members,
    is_program_basically_visible,
    update_member_eligibilities,
)
from .household import FormData, HouseholdMember
from .programs import Program, program_value

REPORT_COLUMNS = [
    "program_id",
    "name",
    "legal_status_required",
    "meets_legal_status",
    "eligible",
    "value",
    "already_has",
    "basically_visible",
    "excluded_by",
    "visible",
    "reason",
]


def _hidden_reason(program: Program, meets_legal_status: bool, value: float) -> str:
    if not meets_legal_status:
        return "legal_status"
    if not program.eligible:
        return "ineligible"
    if value <= 0:
        return "no_value"
    if program.already_has:
        return "already_has"
    return "visible"


def visibility_report(
    programs: Iterable[Program],
    form_data: Union[FormData, Iterable[HouseholdMember]],
    filter_state: FilterState,
    config: Optional[FilterConfig] = None,
) -> pd.DataFrame:
    """
    Explain the regular (non-admin) view, one row per program.

    Args:
        programs: Programs from the eligibility API (not modified)
        form_data: Screener form data (or a list of household members)
        filter_state: Current citizenship filter state
        config: Pipeline settings

    Returns:
        DataFrame with the columns in REPORT_COLUMNS
    """
    config = config or FilterConfig()
    updated = update_member_eligibilities(
        programs,
        household_members(form_data),
        filter_state,
        today=config.reference_date,
        warn_on_unmatched_members=config.warn_on_unmatched_members,
    )
    checked = filter_state.checked_filter_names
    resolver = ExclusionResolver(
        updated, is_candidate=lambda p: is_program_basically_visible(p, checked)
    )
    candidates = [p for p in updated if is_program_basically_visible(p, checked)]

    if config.exclusion_strategy == "forward":
        visible_ids = {p.program_id for p in forward_exclusions(candidates)}
    else:
        visible_ids = {p.program_id for p in resolver.resolve()}
    candidate_ids = {p.program_id for p in candidates}

    rows = []
    for program in updated:
        meets_legal_status = any(s in checked for s in program.legal_status_required)
        value = program_value(program)
        basically_visible = program.program_id in candidate_ids
        excluded_by = [
            excluder.program_id
            for excluder in resolver.excluders_of(program.program_id)
            if excluder.program_id in visible_ids
        ]
        visible = program.program_id in visible_ids

        if visible:
            reason = "visible"
        elif basically_visible:
            reason = "excluded"
        else:
            reason = _hidden_reason(program, meets_legal_status, value)

        rows.append(
            {
                "program_id": program.program_id,
                "name": program.display_name,
                "legal_status_required": ",".join(program.legal_status_required),
                "meets_legal_status": meets_legal_status,
                "eligible": program.eligible,
                "value": value,
                "already_has": program.already_has,
                "basically_visible": basically_visible,
                "excluded_by": excluded_by,
                "visible": visible,
                "reason": reason,
            }
        )

    return pd.DataFrame(rows, columns=REPORT_COLUMNS)
