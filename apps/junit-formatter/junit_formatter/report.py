"""In-memory report tree assembled while events arrive."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeKind(str, Enum):
    FAILURE = "failure"
    SKIPPED = "skipped"
    SYSTEM_OUT = "system-out"


@dataclass(frozen=True)
class Outcome:
    """The single outcome marker of a test case."""

    kind: OutcomeKind
    text: str = ""
    message: Optional[str] = None


@dataclass
class TestCaseNode:
    """One concrete scenario in the report."""

    __test__ = False  # keep pytest from collecting this class

    classname: str
    name: str
    time: Optional[str] = None
    outcome: Optional[Outcome] = None

    def set_outcome(self, outcome: Outcome) -> None:
        """Replace the outcome slot; a node never holds two outcomes."""

        self.outcome = outcome
