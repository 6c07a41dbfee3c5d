"""
benefit-filter: Citizenship filter and program exclusions for screening results.

This module decides which benefit programs a household sees on the results
page, given the selected citizenship/legal status, the household members
and the program eligibility returned by the eligibility API.
"""

from .age import AgeStatus, calc_age, calculate_age_status
from .citizenship import (
    CALCULATED_CITIZENSHIP_FILTERS,
    CITIZEN_LABEL_OPTIONS,
    CITIZENSHIP_FILTER_CONFIG,
    FilterState,
    calculate_derived_filters,
    create_initial_filter_state,
)
from .config import FilterConfig
from .exclusions import ExclusionResolver, apply_program_exclusions, forward_exclusions
from .filtering import (
    apply_basic_filters,
    filter_programs,
    filter_programs_generator,
    update_member_eligibilities,
)
from .household import FormData, HouseholdMember, SpecialConditions
from .programs import MemberEligibility, Program, parse_programs, program_value
from .report import visibility_report

__version__ = "0.1.0"
__all__ = [
    "AgeStatus",
    "calc_age",
    "calculate_age_status",
    "CALCULATED_CITIZENSHIP_FILTERS",
    "CITIZEN_LABEL_OPTIONS",
    "CITIZENSHIP_FILTER_CONFIG",
    "FilterState",
    "calculate_derived_filters",
    "create_initial_filter_state",
    "FilterConfig",
    "ExclusionResolver",
    "apply_program_exclusions",
    "forward_exclusions",
    "apply_basic_filters",
    "filter_programs",
    "filter_programs_generator",
    "update_member_eligibilities",
    "FormData",
    "HouseholdMember",
    "SpecialConditions",
    "MemberEligibility",
    "Program",
    "parse_programs",
    "program_value",
    "visibility_report",
]
