"""Event handler turning one feature's execution events into a JUnit report."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import structlog

from .accumulator import TestCaseAccumulator
from .console_reporter import ConsoleReporter
from .document import ReportDocument
from .errors import ProtocolViolationError
from .models import Background, Examples, Feature, HookResult, Result, Scenario, ScenarioOutline, Step
from .serializer import ReportSink

LOGGER = structlog.get_logger("junit_formatter")


class FormatterState(str, Enum):
    NEW = "new"
    IDLE = "idle"
    BACKGROUND = "background"
    COLLECTING = "collecting"
    DONE = "done"


class JunitFormatter:
    """Receives the events of one feature, in order, and writes its report on ``done``.

    The engine calls one method per event kind::

        feature
        ( [background step*] scenario step* (result | before | after)* end_of_scenario_lifecycle
        | scenario_outline examples ([background step*] scenario step* ... end_of_scenario_lifecycle)+ )*
        done

    Any other order raises :class:`ProtocolViolationError`. The report
    destination is opened when the formatter is created and released by
    ``done`` (or ``close``).
    """

    def __init__(
        self,
        feature_path: str,
        report_path: Path,
        *,
        strict: bool = False,
        reporter: Optional[ConsoleReporter] = None,
    ) -> None:
        self.feature_path = feature_path
        self.report_path = Path(report_path)
        self.document = ReportDocument(feature_path)
        self._strict = strict
        self._reporter = reporter or ConsoleReporter()
        self._test_case: Optional[TestCaseAccumulator] = None
        self._current_scenario = 0
        self._in_outline = False
        self._examples_seen = False
        self._state = FormatterState.NEW
        self._logger = LOGGER.bind(feature=feature_path)

        self.test_count = 0
        self.fail_count = 0
        self.skip_count = 0
        self.time_taken = 0.0

        self._logger.debug("formatter_created", report=str(self.report_path))
        self._sink = ReportSink(self.report_path)

    @property
    def state(self) -> FormatterState:
        return self._state

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def is_fail(self) -> bool:
        return self.fail_count > 0

    def set_strict(self, strict: bool) -> None:
        """Treat pending and undefined steps as failures from now on."""

        self._strict = strict
        if self._test_case is not None:
            self._test_case.strict = strict

    def _expect(self, event: str, *allowed: FormatterState) -> None:
        if self._state not in allowed:
            raise ProtocolViolationError(
                f"Unexpected '{event}' event while {self._state.value} (feature {self.feature_path})"
            )

    def _accumulator(self) -> TestCaseAccumulator:
        assert self._test_case is not None, "feature event creates the accumulator"
        return self._test_case

    def feature(self, feature: Feature) -> None:
        self._expect("feature", FormatterState.NEW)
        self._logger.debug("feature", name=feature.name, uri=feature.uri)
        self._test_case = TestCaseAccumulator(feature, self.feature_path, strict=self._strict)
        self.document.attach_feature(feature.name)
        self._state = FormatterState.IDLE

    def background(self, background: Background) -> None:
        self._expect("background", FormatterState.IDLE)
        self._logger.debug("background", name=background.name)
        self._state = FormatterState.BACKGROUND

    def scenario_outline(self, outline: ScenarioOutline) -> None:
        self._expect("scenario_outline", FormatterState.IDLE)
        self._logger.debug("scenario_outline", name=outline.name)
        self._test_case = self._accumulator().fresh()
        self._current_scenario += 1
        self._in_outline = True
        self._examples_seen = False

    def examples(self, examples: Examples) -> None:
        self._expect("examples", FormatterState.IDLE)
        if not self._in_outline:
            raise ProtocolViolationError("Examples received outside of a scenario outline")
        self._logger.debug("examples", name=examples.name)
        self._examples_seen = True

    def start_of_scenario_lifecycle(self, scenario: Scenario) -> None:
        self._expect("start_of_scenario_lifecycle", FormatterState.IDLE, FormatterState.BACKGROUND)
        self._logger.debug("start_of_scenario_lifecycle", name=scenario.name)

    def scenario(self, scenario: Scenario) -> None:
        self._expect("scenario", FormatterState.IDLE, FormatterState.BACKGROUND)
        if scenario.is_outline_example:
            if not (self._in_outline and self._examples_seen):
                raise ProtocolViolationError("Outline example received before its outline and examples")
        else:
            self._in_outline = False
            self._current_scenario += 1
        node = self._accumulator().start(scenario, self._current_scenario)
        self.document.add_test_case(node)
        self._logger.debug("scenario", name=node.name, tests=self.document.tests)
        self._state = FormatterState.COLLECTING

    def step(self, step: Step) -> None:
        self._expect("step", FormatterState.BACKGROUND, FormatterState.COLLECTING)
        if self._state == FormatterState.BACKGROUND:
            self._logger.debug("background_step", keyword=step.keyword, name=step.name)
            return
        self._logger.debug("step", keyword=step.keyword, name=step.name)
        self._accumulator().add_step(step)

    def result(self, result: Result) -> None:
        self._expect("result", FormatterState.COLLECTING)
        self._logger.debug("result", status=result.status.value, duration=result.duration)
        self._accumulator().add_result(result)

    def before(self, result: HookResult) -> None:
        self._expect("before", FormatterState.COLLECTING)
        self._logger.debug("before", status=result.status.value, duration=result.duration)
        self._accumulator().add_hook_result(result)

    def after(self, result: HookResult) -> None:
        self._expect("after", FormatterState.COLLECTING)
        self._logger.debug("after", status=result.status.value, duration=result.duration)
        self._accumulator().add_hook_result(result)

    def end_of_scenario_lifecycle(self, scenario: Scenario) -> None:
        self._expect("end_of_scenario_lifecycle", FormatterState.COLLECTING)
        self._logger.debug("end_of_scenario_lifecycle", name=scenario.name)
        self._accumulator().end()
        self._state = FormatterState.IDLE

    def done(self) -> None:
        """Finalize the document, write it and print the feature summary."""

        self._expect("done", FormatterState.IDLE)
        self._state = FormatterState.DONE
        try:
            self.document.finalize()
            self._sink.write(self.document)
        finally:
            self._sink.close()

        self.test_count = self.document.tests
        self.fail_count = self.document.failures or 0
        self.skip_count = self.document.skipped or 0
        self.time_taken = float(self.document.total_seconds or 0)
        self._reporter.feature_summary(
            feature_path=self.feature_path,
            report_path=str(self.report_path),
            scenarios=self.test_count,
            failed=self.fail_count,
            skipped=self.skip_count,
            time_taken=self.time_taken,
        )
        self._logger.info(
            "report_generated",
            report=str(self.report_path),
            tests=self.test_count,
            failures=self.fail_count,
            skipped=self.skip_count,
        )

    def close(self) -> None:
        """Release the report destination of a stream that never reached ``done``."""

        self._sink.close()
