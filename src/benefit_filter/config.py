"""Configuration for the results filter pipeline."""

from dataclasses import dataclass, fields
from datetime import date
from typing import Any, Optional

EXCLUSION_STRATEGIES = ("recursive", "forward")


@dataclass
class FilterConfig:
    """Settings shared by every filter run."""

    # "recursive": memoized visibility with cycle guard; "forward": legacy one-pass
    exclusion_strategy: str = "recursive"

    # Reference date for age checks (None: today)
    reference_date: Optional[date] = None

    # Log a warning when a member eligibility has no matching household member
    warn_on_unmatched_members: bool = True

    def __post_init__(self):
        if self.exclusion_strategy not in EXCLUSION_STRATEGIES:
            raise ValueError(
                f"Unknown exclusion strategy: {self.exclusion_strategy}. "
                f"Use one of: {', '.join(EXCLUSION_STRATEGIES)}"
            )
        if isinstance(self.reference_date, str):
            self.reference_date = date.fromisoformat(self.reference_date)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FilterConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
