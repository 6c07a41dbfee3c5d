"""Shared fixtures for benefit_filter tests."""

from datetime import date

import pytest

from benefit_filter.household import FormData, HouseholdMember, SpecialConditions
from benefit_filter.programs import MemberEligibility, Program

TODAY = date(2025, 6, 15)


@pytest.fixture
def today():
    """Fixed reference date for age checks."""
    return TODAY


@pytest.fixture
def make_member():
    """Factory for household members with a given age on TODAY."""

    def _make(frontend_id="member1", age=30, pregnant=False, birth_month=1, **conditions):
        birth_year = None if age is None else TODAY.year - age
        return HouseholdMember(
            frontend_id=frontend_id,
            birth_month=None if age is None else birth_month,
            birth_year=birth_year,
            special_conditions=SpecialConditions(pregnant=pregnant, **conditions),
        )

    return _make


@pytest.fixture
def make_program():
    """Factory for programs that pass every basic check by default."""

    def _make(
        program_id=1,
        legal_status_required=None,
        eligible=True,
        household_value=100,
        already_has=False,
        excludes_programs=None,
        members=None,
        **extra,
    ):
        return Program(
            program_id=program_id,
            legal_status_required=(
                ["citizen"] if legal_status_required is None else legal_status_required
            ),
            eligible=eligible,
            household_value=household_value,
            already_has=already_has,
            excludes_programs=excludes_programs,
            members=members or [],
            name_abbreviated=f"program_{program_id}",
            extra=extra,
        )

    return _make


@pytest.fixture
def make_member_eligibility():
    """Factory for member eligibility records."""

    def _make(frontend_id="member1", eligible=True, value=100, already_has=False):
        return MemberEligibility(
            frontend_id=frontend_id,
            eligible=eligible,
            value=value,
            already_has=already_has,
        )

    return _make


@pytest.fixture
def form_data(make_member):
    """Single adult, not pregnant."""
    return FormData(household_data=[make_member("member1", age=30)])
