"""Per-scenario accumulation of steps, results and hook results."""

from __future__ import annotations

from typing import Optional

import structlog

from .durations import duration_string
from .errors import ProtocolViolationError
from .models import Feature, HookResult, Result, Scenario, Step
from .outcome import empty_scenario_outcome, resolve_outcome
from .report import TestCaseNode

LOGGER = structlog.get_logger("junit_formatter")


class TestCaseAccumulator:
    """Tracks the scenario currently running and keeps its report node current.

    Every result or hook result recomputes time and outcome from everything
    collected so far and replaces the node's outcome, so replayed
    notifications never stack up markers.
    """

    __test__ = False  # keep pytest from collecting this class

    def __init__(self, feature: Feature, classname: str, *, strict: bool = False) -> None:
        self.feature = feature
        self.classname = classname
        self.strict = strict
        self.scenario: Optional[Scenario] = None
        self.node: Optional[TestCaseNode] = None
        self.example_number = 0
        self.steps: list[Step] = []
        self.results: list[Result] = []
        self.hook_results: list[HookResult] = []

    def fresh(self) -> TestCaseAccumulator:
        """New accumulator for the same feature, e.g. when an outline starts."""

        return TestCaseAccumulator(self.feature, self.classname, strict=self.strict)

    def start(self, scenario: Scenario, scenario_ordinal: int) -> TestCaseNode:
        self.steps.clear()
        self.results.clear()
        self.hook_results.clear()
        self.scenario = scenario
        self.node = TestCaseNode(
            classname=self.classname,
            name=self._next_name(scenario, scenario_ordinal),
        )
        LOGGER.debug("test_case_started", classname=self.classname, name=self.node.name)
        return self.node

    def _next_name(self, scenario: Scenario, scenario_ordinal: int) -> str:
        name = (scenario.name or "").strip() or str(scenario_ordinal)
        if scenario.is_outline_example:
            self.example_number += 1
            return f"{name} ({self.example_number})"
        return name

    def add_step(self, step: Step) -> None:
        self._active_node()
        self.steps.append(step)

    def add_result(self, result: Result) -> None:
        self._active_node()
        self.results.append(result)
        self._update()

    def add_hook_result(self, result: HookResult) -> None:
        self._active_node()
        self.hook_results.append(result)
        self._update()

    def end(self) -> TestCaseNode:
        node = self._active_node()
        if not self.steps:
            node.time = duration_string(self.results, self.hook_results)
            node.set_outcome(empty_scenario_outcome(self.strict))
        elif node.outcome is None:
            self._update()
        LOGGER.debug(
            "test_case_finished",
            name=node.name,
            outcome=node.outcome.kind.value if node.outcome else None,
            time=node.time,
        )
        return node

    def _update(self) -> None:
        node = self._active_node()
        node.time = duration_string(self.results, self.hook_results)
        node.set_outcome(resolve_outcome(self.steps, self.results, self.hook_results, self.strict))

    def _active_node(self) -> TestCaseNode:
        if self.node is None:
            raise ProtocolViolationError("No scenario has been started for this test case")
        return self.node
