"""Tests for the results filter pipeline."""

import logging
from datetime import date

import pytest

from benefit_filter.citizenship import FilterState, create_initial_filter_state
from benefit_filter.config import FilterConfig
from benefit_filter.filtering import (
    apply_basic_filters,
    filter_programs,
    filter_programs_generator,
    is_program_basically_visible,
    update_member_eligibilities,
)
from benefit_filter.household import FormData

TODAY = date(2025, 6, 15)


@pytest.fixture
def config():
    return FilterConfig(reference_date=TODAY)


@pytest.fixture
def citizen():
    return create_initial_filter_state()


def ids(programs):
    return [p.program_id for p in programs]


class TestFilterProgramsGenerator:
    """Basic visibility and exclusions through the full pipeline."""

    def test_returns_callable(self, form_data, citizen, config):
        program_filter = filter_programs_generator(form_data, citizen, config=config)
        assert callable(program_filter)

    def test_shows_eligible_programs(self, make_program, form_data, citizen, config):
        programs = [make_program(1), make_program(2)]
        result = filter_programs(programs, form_data, citizen, config=config)
        assert ids(result) == [1, 2]

    def test_hides_ineligible_programs(self, make_program, form_data, citizen, config):
        programs = [make_program(1), make_program(2, eligible=False)]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1]

    def test_hides_zero_value_programs(self, make_program, form_data, citizen, config):
        programs = [make_program(1), make_program(2, household_value=0)]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1]

    def test_hides_already_held_programs(self, make_program, form_data, citizen, config):
        programs = [make_program(1), make_program(2, already_has=True)]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1]

    def test_hides_programs_without_matching_legal_status(
        self, make_program, form_data, citizen, config
    ):
        programs = [make_program(1), make_program(2, legal_status_required=["refugee"])]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1]

    def test_member_values_count_toward_value(
        self, make_program, make_member_eligibility, form_data, citizen, config
    ):
        program = make_program(1, household_value=0, members=[make_member_eligibility(value=50)])
        assert ids(filter_programs([program], form_data, citizen, config=config)) == [1]

    def test_member_already_has_value_not_counted(
        self, make_program, make_member_eligibility, form_data, citizen, config
    ):
        program = make_program(
            1,
            household_value=0,
            members=[make_member_eligibility(value=50, already_has=True)],
        )
        assert filter_programs([program], form_data, citizen, config=config) == []

    def test_mutual_exclusion_keeps_first(self, make_program, form_data, citizen, config):
        programs = [
            make_program(1, excludes_programs=[2]),
            make_program(2, excludes_programs=[1]),
        ]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1]

    def test_exclusion_only_from_visible_programs(
        self, make_program, form_data, citizen, config
    ):
        programs = [
            make_program(1, eligible=False, excludes_programs=[2]),
            make_program(2),
        ]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [2]

    def test_chain_exclusion(self, make_program, form_data, citizen, config):
        programs = [
            make_program(1, excludes_programs=[2]),
            make_program(2, excludes_programs=[3]),
            make_program(3),
        ]
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [1, 3]

    def test_empty_programs(self, form_data, citizen, config):
        assert filter_programs([], form_data, citizen, config=config) == []

    def test_accepts_member_list(self, make_program, make_member, citizen, config):
        result = filter_programs([make_program(1)], [make_member()], citizen, config=config)
        assert ids(result) == [1]

    def test_input_not_mutated(
        self, make_program, make_member, make_member_eligibility, config
    ):
        form = FormData([make_member("kid", age=15), make_member("adult", age=30)])
        state = FilterState.for_household("non_citizen", form.household_data, TODAY)
        programs = [
            make_program(
                1,
                legal_status_required=["otherHealthCareUnder19"],
                members=[make_member_eligibility("adult")],
            )
        ]
        filter_programs(programs, form, state, config=config)
        assert programs[0].members[0].eligible is True
        assert programs[0].members[0].value == 100

    def test_idempotent(self, make_program, form_data, citizen, config):
        programs = [
            make_program(1, excludes_programs=[2]),
            make_program(2),
            make_program(3, eligible=False),
        ]
        once = filter_programs(programs, form_data, citizen, config=config)
        twice = filter_programs(once, form_data, citizen, config=config)
        assert ids(once) == ids(twice) == [1]

    def test_forward_strategy(self, make_program, form_data, citizen):
        programs = [
            make_program(1, excludes_programs=[2]),
            make_program(2, excludes_programs=[3]),
            make_program(3, excludes_programs=[1]),
        ]
        config = FilterConfig(exclusion_strategy="forward", reference_date=TODAY)
        assert ids(filter_programs(programs, form_data, citizen, config=config)) == [3]

    def test_default_config(self, make_program, form_data, citizen):
        assert ids(filter_programs([make_program(1)], form_data, citizen)) == [1]


class TestAdminView:
    """Admin view skips basic filters and exclusions."""

    def test_shows_everything(self, make_program, form_data, citizen, config):
        programs = [
            make_program(1, excludes_programs=[2]),
            make_program(2),
            make_program(3, eligible=False),
            make_program(4, household_value=0),
            make_program(5, already_has=True),
            make_program(6, legal_status_required=["refugee"]),
        ]
        result = filter_programs(programs, form_data, citizen, is_admin_view=True, config=config)
        assert ids(result) == [1, 2, 3, 4, 5, 6]

    def test_member_eligibility_still_updated(
        self, make_program, make_member, make_member_eligibility, config
    ):
        form = FormData([make_member("kid", age=15), make_member("adult", age=30)])
        state = FilterState.for_household("non_citizen", form.household_data, TODAY)
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            members=[make_member_eligibility("adult")],
        )
        result = filter_programs([program], form, state, is_admin_view=True, config=config)
        assert result[0].members[0].eligible is False


class TestUpdateMemberEligibilities:
    """Calculated labels mark failing members ineligible."""

    def test_under_19_program(self, make_program, make_member, make_member_eligibility):
        household = [make_member("kid", age=15), make_member("adult", age=30)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            household_value=0,
            members=[make_member_eligibility("kid"), make_member_eligibility("adult")],
        )

        [updated] = update_member_eligibilities([program], household, state, TODAY)

        kid, adult = updated.members
        assert kid.eligible is True
        assert kid.value == 100
        assert adult.eligible is False
        assert adult.value == 0

    def test_under_19_program_stays_visible_with_child_value(
        self, make_program, make_member, make_member_eligibility, config
    ):
        household = [make_member("kid", age=15), make_member("adult", age=30)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            household_value=0,
            members=[make_member_eligibility("kid"), make_member_eligibility("adult")],
        )
        assert ids(filter_programs([program], household, state, config=config)) == [1]

    def test_program_accepting_selected_status_untouched(
        self, make_program, make_member, make_member_eligibility
    ):
        household = [make_member("kid", age=15), make_member("adult", age=30)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        program = make_program(
            1,
            legal_status_required=["non_citizen", "otherHealthCareUnder19"],
            members=[make_member_eligibility("adult")],
        )
        [updated] = update_member_eligibilities([program], household, state, TODAY)
        assert updated.members[0].eligible is True

    def test_member_passing_any_label_stays_eligible(
        self, make_program, make_member, make_member_eligibility
    ):
        household = [make_member("adult", age=25)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        assert "notPregnantForMassHealthLimited" in state.calculated_filters
        program = make_program(
            1,
            legal_status_required=["otherHealthCarePregnant", "notPregnantForMassHealthLimited"],
            members=[make_member_eligibility("adult")],
        )
        [updated] = update_member_eligibilities([program], household, state, TODAY)
        assert updated.members[0].eligible is True
        assert updated.members[0].value == 100

    def test_inactive_labels_not_applied(
        self, make_program, make_member, make_member_eligibility
    ):
        # Citizen selected: no calculated labels are active
        household = [make_member("adult", age=30)]
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            members=[make_member_eligibility("adult")],
        )
        [updated] = update_member_eligibilities(
            [program], household, create_initial_filter_state(), TODAY
        )
        assert updated.members[0].eligible is True

    def test_unmatched_member_logs_warning(
        self, make_program, make_member, make_member_eligibility, caplog
    ):
        household = [make_member("kid", age=15), make_member("adult", age=30)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            members=[make_member_eligibility("ghost")],
        )
        with caplog.at_level(logging.WARNING, logger="benefit_filter.filtering"):
            [updated] = update_member_eligibilities([program], household, state, TODAY)

        assert updated.members[0].eligible is True
        assert "ghost" in caplog.text

    def test_unmatched_member_warning_can_be_disabled(
        self, make_program, make_member, make_member_eligibility, caplog
    ):
        household = [make_member("kid", age=15), make_member("adult", age=30)]
        state = FilterState.for_household("non_citizen", household, TODAY)
        program = make_program(
            1,
            legal_status_required=["otherHealthCareUnder19"],
            members=[make_member_eligibility("ghost")],
        )
        with caplog.at_level(logging.WARNING, logger="benefit_filter.filtering"):
            update_member_eligibilities(
                [program], household, state, TODAY, warn_on_unmatched_members=False
            )
        assert caplog.text == ""


class TestBasicFilters:
    def test_is_program_basically_visible(self, make_program):
        assert is_program_basically_visible(make_program(), {"citizen"})
        assert not is_program_basically_visible(make_program(), {"refugee"})

    def test_calculated_label_satisfies_legal_status(self, make_program):
        program = make_program(legal_status_required=["gc_18plus_no5"])
        assert is_program_basically_visible(program, {"gc_5less", "gc_18plus_no5"})

    def test_empty_legal_status_never_visible(self, make_program):
        assert not is_program_basically_visible(make_program(legal_status_required=[]), {"citizen"})

    def test_apply_basic_filters_admin(self, make_program, citizen):
        programs = [make_program(1, eligible=False)]
        assert ids(apply_basic_filters(programs, citizen, is_admin_view=True)) == [1]
        assert apply_basic_filters(programs, citizen) == []
