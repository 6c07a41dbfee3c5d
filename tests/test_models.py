"""Tests for household and program models."""

import pytest

from benefit_filter.household import FormData, HouseholdMember, SpecialConditions, find_member
from benefit_filter.programs import (
    MemberEligibility,
    Program,
    clone_programs,
    parse_programs,
    program_value,
)


class TestHouseholdMember:
    """Tests for parsing household members from form data."""

    def test_from_camel_case_dict(self):
        member = HouseholdMember.from_dict(
            {
                "frontendId": "abc",
                "birthMonth": 4,
                "birthYear": 1990,
                "relationshipToHH": "headOfHousehold",
                "specialConditions": {
                    "pregnant": True,
                    "blindOrVisuallyImpaired": True,
                    "longTermDisability": False,
                },
            }
        )
        assert member.frontend_id == "abc"
        assert member.birth_month == 4
        assert member.birth_year == 1990
        assert member.relationship_to_hh == "headOfHousehold"
        assert member.special_conditions.pregnant is True
        assert member.special_conditions.blind_or_visually_impaired is True
        assert member.pregnant is True

    def test_from_snake_case_dict(self):
        member = HouseholdMember.from_dict(
            {"frontend_id": "x", "birth_month": 1, "birth_year": 2000, "special_conditions": {"student": True}}
        )
        assert member.frontend_id == "x"
        assert member.special_conditions.student is True
        assert member.special_conditions.pregnant is False

    def test_missing_special_conditions_default_false(self):
        member = HouseholdMember.from_dict({"frontendId": "x"})
        assert member.special_conditions == SpecialConditions()
        assert member.birth_month is None

    def test_round_trip_to_dict(self):
        member = HouseholdMember(frontend_id="a", birth_month=2, birth_year=1980)
        assert HouseholdMember.from_dict(member.to_dict()) == member


class TestFormData:
    def test_from_form_object(self):
        form = FormData.from_dict(
            {"householdSize": 2, "householdData": [{"frontendId": "a"}, {"frontendId": "b"}]}
        )
        assert form.household_size == 2
        assert [m.frontend_id for m in form.household_data] == ["a", "b"]

    def test_from_member_list(self):
        form = FormData.from_dict([{"frontendId": "a"}])
        assert form.household_size == 1

    def test_rejects_other_types(self):
        with pytest.raises(ValueError, match="Unsupported household data"):
            FormData.from_dict("not a household")

    def test_find_member(self):
        form = FormData.from_dict([{"frontendId": "a"}, {"frontendId": "b"}])
        assert form.find_member("b").frontend_id == "b"
        assert form.find_member("zzz") is None
        assert find_member(form.household_data, "a") is form.household_data[0]


class TestProgram:
    """Tests for program parsing and value."""

    def _program_dict(self, **overrides):
        data = {
            "program_id": 7,
            "name": {"label": "program.snap", "default_message": "SNAP"},
            "name_abbreviated": "snap",
            "legal_status_required": ["citizen", "gc_5plus"],
            "eligible": True,
            "household_value": 1200,
            "estimated_value": 0,
            "already_has": False,
            "excludes_programs": [3],
            "members": [
                {"frontend_id": "a", "eligible": True, "value": 0, "already_has": False}
            ],
            "navigators": [],
        }
        data.update(overrides)
        return data

    def test_from_dict(self):
        program = Program.from_dict(self._program_dict())
        assert program.program_id == 7
        assert program.legal_status_required == ["citizen", "gc_5plus"]
        assert program.excludes_programs == [3]
        assert program.members == [MemberEligibility("a", True, 0, False)]
        assert program.extra["navigators"] == []
        assert program.display_name == "SNAP"

    def test_null_excludes_programs_kept_as_none(self):
        program = Program.from_dict(self._program_dict(excludes_programs=None))
        assert program.excludes_programs is None

    def test_to_dict_preserves_unknown_fields(self):
        data = self._program_dict()
        assert Program.from_dict(data).to_dict() == data

    def test_missing_program_id_raises(self):
        data = self._program_dict()
        del data["program_id"]
        with pytest.raises(KeyError):
            Program.from_dict(data)

    def test_parse_programs_from_results_object(self):
        programs = parse_programs({"programs": [self._program_dict()], "screen_id": 1})
        assert [p.program_id for p in programs] == [7]

    def test_parse_programs_rejects_bad_input(self):
        with pytest.raises(ValueError):
            parse_programs({"screen_id": 1})
        with pytest.raises(ValueError):
            parse_programs("programs")


class TestProgramValue:
    def test_household_value_only(self, make_program):
        assert program_value(make_program(household_value=250)) == 250

    def test_adds_member_values(self, make_program, make_member_eligibility):
        program = make_program(
            household_value=100,
            members=[
                make_member_eligibility("a", value=50),
                make_member_eligibility("b", value=25),
            ],
        )
        assert program_value(program) == 175

    def test_skips_members_who_already_have_it(self, make_program, make_member_eligibility):
        program = make_program(
            household_value=0,
            members=[
                make_member_eligibility("a", value=50, already_has=True),
                make_member_eligibility("b", value=25),
            ],
        )
        assert program_value(program) == 25


class TestCloneProgram:
    def test_clone_shares_no_references(self, make_program, make_member_eligibility):
        original = [make_program(members=[make_member_eligibility("a")], excludes_programs=[2])]
        cloned = clone_programs(original)

        cloned[0].members[0].eligible = False
        cloned[0].excludes_programs.append(3)
        cloned[0].legal_status_required.append("refugee")

        assert original[0].members[0].eligible is True
        assert original[0].excludes_programs == [2]
        assert original[0].legal_status_required == ["citizen"]
