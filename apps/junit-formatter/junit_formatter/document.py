"""Report document assembled for one feature."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

import structlog

from .durations import format_seconds, parse_seconds
from .errors import ProtocolViolationError
from .report import Outcome, OutcomeKind, TestCaseNode

LOGGER = structlog.get_logger("junit_formatter")

DUMMY_NAME = "dummy"
NO_FEATURES_MESSAGE = "No features found"


class ReportDocument:
    """Root of a feature report.

    ``tests`` is a running counter kept for display while events arrive.
    The summary attributes written to the report are recomputed by
    :meth:`finalize` from the test case nodes themselves.
    """

    def __init__(self, feature_path: str) -> None:
        self.feature_path = feature_path
        self.feature_name: Optional[str] = None
        self.name: Optional[str] = None
        self.test_cases: list[TestCaseNode] = []
        self.tests = 0
        self.failures: Optional[int] = None
        self.skipped: Optional[int] = None
        self.time: Optional[str] = None
        self.total_seconds: Optional[Decimal] = None
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def attach_feature(self, name: Optional[str]) -> None:
        self.feature_name = name

    def add_test_case(self, node: TestCaseNode) -> None:
        self.test_cases.append(node)
        self.note_test_case_added()

    def note_test_case_added(self) -> None:
        self.tests += 1

    def finalize(self) -> None:
        """Derive the summary attributes from the assembled tree.

        Must be called exactly once, after the last test case is complete.
        """

        if self._finalized:
            raise ProtocolViolationError(f"Report for {self.feature_path} is already finalized")
        self._finalized = True

        self.name = (self.feature_name or "").strip() or self.feature_path
        if not self.test_cases:
            self._add_dummy_test_case()

        self.tests = len(self.test_cases)
        self.failures = self._count(OutcomeKind.FAILURE)
        self.skipped = self._count(OutcomeKind.SKIPPED)
        self.total_seconds = sum(
            (parse_seconds(node.time) for node in self.test_cases),
            Decimal(0),
        )
        self.time = format_seconds(self.total_seconds)
        LOGGER.debug(
            "report_finalized",
            name=self.name,
            tests=self.tests,
            failures=self.failures,
            skipped=self.skipped,
            time=self.time,
        )

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for node in self.test_cases if node.outcome is not None and node.outcome.kind == kind)

    def _add_dummy_test_case(self) -> None:
        # keeps CI servers from failing a job on an empty report
        dummy = TestCaseNode(classname=DUMMY_NAME, name=DUMMY_NAME, time="0")
        dummy.set_outcome(Outcome(OutcomeKind.SKIPPED, message=NO_FEATURES_MESSAGE))
        self.test_cases.append(dummy)
