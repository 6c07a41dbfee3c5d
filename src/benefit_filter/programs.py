"""
Program eligibility records returned by the eligibility API.

Only the fields the filter reads are modelled; everything else is kept in
``extra`` so a program can be written back out unchanged.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional


@dataclass
class MemberEligibility:
    """Program-scoped eligibility of one household member."""

    frontend_id: str
    eligible: bool = False
    value: float = 0
    already_has: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "MemberEligibility":
        return cls(
            frontend_id=str(data.get("frontend_id", "")),
            eligible=bool(data.get("eligible", False)),
            value=data.get("value") or 0,
            already_has=bool(data.get("already_has", False)),
        )

    def to_dict(self) -> dict:
        return {
            "frontend_id": self.frontend_id,
            "eligible": self.eligible,
            "value": self.value,
            "already_has": self.already_has,
        }


@dataclass
class Program:
    """A benefit program candidate."""

    program_id: int
    legal_status_required: list[str] = field(default_factory=list)
    eligible: bool = False
    household_value: float = 0
    estimated_value: float = 0
    already_has: bool = False
    excludes_programs: Optional[list[int]] = None
    members: list[MemberEligibility] = field(default_factory=list)
    name_abbreviated: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "program_id",
        "legal_status_required",
        "eligible",
        "household_value",
        "estimated_value",
        "already_has",
        "excludes_programs",
        "members",
        "name_abbreviated",
    )

    @property
    def display_name(self) -> str:
        """Best-effort readable name for reports."""
        name = self.extra.get("name")
        if isinstance(name, dict):
            name = name.get("default_message") or name.get("label")
        return name or self.name_abbreviated or str(self.program_id)

    @classmethod
    def from_dict(cls, data: dict) -> "Program":
        excludes = data.get("excludes_programs")
        return cls(
            program_id=int(data["program_id"]),
            legal_status_required=list(data.get("legal_status_required") or []),
            eligible=bool(data.get("eligible", False)),
            household_value=data.get("household_value") or 0,
            estimated_value=data.get("estimated_value") or 0,
            already_has=bool(data.get("already_has", False)),
            excludes_programs=None if excludes is None else [int(i) for i in excludes],
            members=[MemberEligibility.from_dict(m) for m in data.get("members") or []],
            name_abbreviated=data.get("name_abbreviated") or "",
            extra={k: v for k, v in data.items() if k not in cls._FIELDS},
        )

    def to_dict(self) -> dict:
        result = dict(self.extra)
        result.update(
            {
                "program_id": self.program_id,
                "name_abbreviated": self.name_abbreviated,
                "legal_status_required": list(self.legal_status_required),
                "eligible": self.eligible,
                "household_value": self.household_value,
                "estimated_value": self.estimated_value,
                "already_has": self.already_has,
                "excludes_programs": (
                    None if self.excludes_programs is None else list(self.excludes_programs)
                ),
                "members": [m.to_dict() for m in self.members],
            }
        )
        return result


def program_value(program: Program) -> float:
    """Household value plus the value of members who don't already have it."""
    total = program.household_value
    for member in program.members:
        if not member.already_has:
            total += member.value
    return total


def clone_programs(programs: Iterable[Program]) -> list[Program]:
    """Deep copy so callers' program lists are never mutated."""
    return copy.deepcopy(list(programs))


def parse_programs(data: Any) -> list[Program]:
    """
    Parse programs from JSON.

    Accepts a list of program dicts or an eligibility-results object with a
    ``programs`` key.
    """
    if isinstance(data, dict):
        if "programs" not in data:
            raise ValueError("Eligibility results must contain a 'programs' list")
        data = data["programs"]
    if not isinstance(data, list):
        raise ValueError(f"Unsupported program data: {type(data).__name__}")
    return [p if isinstance(p, Program) else Program.from_dict(p) for p in data]
