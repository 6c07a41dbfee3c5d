"""
Program exclusion resolution.

Some programs suppress others when shown (``excludes_programs``), e.g. a
state health plan hiding a narrower emergency plan. A program is hidden
only when an excluder that is itself visible lists it, so whether an
excluder is visible has to be resolved first.

Two strategies are available; a run always uses exactly one:

- "recursive" (default): depth-first, memoized visibility per program id.
  When resolving a program reaches an excluder that is still being
  resolved, the program is on a cycle and resolves to hidden.
- "forward": the legacy one-pass form. Walk the list in order, skip
  programs already excluded, and collect the ids each remaining program
  excludes.

Both keep the first program of a mutual pair, keep A and C for the chain
A -> B -> C, and keep only C for the cycle A -> B -> C -> A.
"""

import logging
from typing import Callable, Iterable, Optional

from .config import EXCLUSION_STRATEGIES
from .programs import Program

logger = logging.getLogger(__name__)


class ExclusionResolver:
    """
    Memoized visibility resolution over an exclusion graph.

    Args:
        programs: Programs in display order
        is_candidate: Basic visibility check; programs failing it are hidden
            and never exclude anything (default: every program is a candidate)
    """

    def __init__(
        self,
        programs: Iterable[Program],
        is_candidate: Optional[Callable[[Program], bool]] = None,
    ):
        self.programs = list(programs)
        self._is_candidate = is_candidate or (lambda program: True)
        self.program_visibility: dict[int, bool] = {}
        self._in_progress: set[int] = set()

        self._candidates: dict[int, bool] = {}
        self._excluders: dict[int, list[Program]] = {}
        for program in self.programs:
            candidate = self._is_candidate(program)
            self._candidates[program.program_id] = (
                self._candidates.get(program.program_id, False) or candidate
            )
            if not candidate:
                continue
            for excluded_id in program.excludes_programs or []:
                self._excluders.setdefault(excluded_id, []).append(program)

    def excluders_of(self, program_id: int) -> list[Program]:
        """Candidate programs that list ``program_id`` as excluded, in input order."""
        return list(self._excluders.get(program_id, []))

    def is_visible(self, program_id: int) -> bool:
        """
        Resolve (and cache) the visibility of a program id.

        Depth-first over excluders with an explicit stack, so long exclusion
        chains don't hit the interpreter's recursion limit. Each frame is
        [program_id, index of the next excluder to check].
        """
        if program_id in self.program_visibility:
            return self.program_visibility[program_id]

        if not self._candidates.get(program_id, False):
            self.program_visibility[program_id] = False
            return False

        stack = [[program_id, 0]]
        self._in_progress.add(program_id)
        try:
            while stack:
                frame = stack[-1]
                current_id, index = frame
                excluders = self._excluders.get(current_id, [])
                visible = True
                pushed = False

                while index < len(excluders):
                    excluder_id = excluders[index].program_id
                    if excluder_id in self._in_progress:
                        logger.debug(
                            "Exclusion cycle at program %s (excluder %s still resolving)",
                            current_id,
                            excluder_id,
                        )
                        visible = False
                        break
                    if excluder_id not in self.program_visibility:
                        # Resolve the excluder first, then come back to this index
                        frame[1] = index
                        stack.append([excluder_id, 0])
                        self._in_progress.add(excluder_id)
                        pushed = True
                        break
                    if self.program_visibility[excluder_id]:
                        logger.debug(
                            "Program %s excluded by program %s",
                            current_id,
                            excluder_id,
                        )
                        visible = False
                        break
                    index += 1

                if pushed:
                    continue

                self.program_visibility[current_id] = visible
                self._in_progress.discard(current_id)
                stack.pop()
        finally:
            for current_id, _ in stack:
                self._in_progress.discard(current_id)

        return self.program_visibility[program_id]

    def resolve(self) -> list[Program]:
        """Visible programs, in input order."""
        return [p for p in self.programs if self.is_visible(p.program_id)]


def forward_exclusions(programs: Iterable[Program]) -> list[Program]:
    """Legacy one-pass exclusion: earlier programs win, no re-evaluation."""
    programs = list(programs)
    excluded_ids: set[int] = set()

    for program in programs:
        if program.program_id in excluded_ids:
            continue
        for excluded_id in program.excludes_programs or []:
            excluded_ids.add(excluded_id)

    return [p for p in programs if p.program_id not in excluded_ids]


def apply_program_exclusions(
    programs: Iterable[Program],
    is_admin_view: bool = False,
    strategy: str = "recursive",
) -> list[Program]:
    """
    Remove programs excluded by other visible programs.

    Args:
        programs: Programs that already passed basic visibility
        is_admin_view: Admin users see every program, excluded or not
        strategy: "recursive" or "forward"

    Returns:
        Programs that remain visible, in input order
    """
    programs = list(programs)
    if is_admin_view:
        return programs

    if strategy == "recursive":
        visible = ExclusionResolver(programs).resolve()
    elif strategy == "forward":
        visible = forward_exclusions(programs)
    else:
        raise ValueError(
            f"Unknown exclusion strategy: {strategy}. "
            f"Use one of: {', '.join(EXCLUSION_STRATEGIES)}"
        )

    if len(visible) != len(programs):
        logger.debug(
            "Exclusions (%s) hid %d of %d programs",
            strategy,
            len(programs) - len(visible),
            len(programs),
        )
    return visible
