"""Outcome resolution for a single scenario.

Failures win over pending/undefined steps, which win over an all-passed run.
Hook results only fill in a candidate the step results did not provide: a
failed hook can make the scenario fail and a pending hook can make it skip.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import Result, ResultStatus, Step
from .report import Outcome, OutcomeKind

PENDING_MESSAGE = "The scenario has pending or undefined step(s)"
NO_STEPS_MESSAGE = "The scenario has no steps"
NOT_EXECUTED = "not executed"
STEP_LISTING_WIDTH = 76

_SKIPPED_STEP_STATUSES = frozenset({ResultStatus.UNDEFINED, ResultStatus.PENDING})


def _first(results: Iterable[Result], statuses: frozenset[ResultStatus]) -> Optional[Result]:
    return next((result for result in results if result.status in statuses), None)


def step_listing(steps: Sequence[Step], results: Sequence[Result]) -> str:
    """One line per step: keyword and text padded with dots, then the status.

    Results are matched to steps by position; steps without a result yet are
    listed as not executed.
    """

    lines = []
    for index, step in enumerate(steps):
        status = results[index].status.value if index < len(results) else NOT_EXECUTED
        text = f"{step.keyword}{step.name}"
        padding = "." * max(1, STEP_LISTING_WIDTH - len(text))
        lines.append(f"{text}{padding}{status}\n")
    return "".join(lines)


def _stack_trace(failed: Result) -> str:
    trace = failed.error.stack_trace if failed.error else ""
    return f"\nStackTrace:\n{trace}"


def resolve_outcome(
    steps: Sequence[Step],
    results: Sequence[Result],
    hook_results: Sequence[Result],
    strict: bool,
) -> Outcome:
    failed = _first(results, frozenset({ResultStatus.FAILED}))
    skipped = _first(results, _SKIPPED_STEP_STATUSES)
    if failed is None:
        failed = _first(hook_results, frozenset({ResultStatus.FAILED}))
    if skipped is None:
        skipped = _first(hook_results, frozenset({ResultStatus.PENDING}))

    listing = step_listing(steps, results)
    if failed is not None:
        return Outcome(OutcomeKind.FAILURE, listing + _stack_trace(failed), failed.error_message)
    if skipped is not None:
        if strict:
            return Outcome(OutcomeKind.FAILURE, listing, PENDING_MESSAGE)
        return Outcome(OutcomeKind.SKIPPED, listing)
    return Outcome(OutcomeKind.SYSTEM_OUT, listing)


def empty_scenario_outcome(strict: bool) -> Outcome:
    """Outcome of a scenario that finished without a single step."""

    kind = OutcomeKind.FAILURE if strict else OutcomeKind.SKIPPED
    return Outcome(kind, "", NO_STEPS_MESSAGE)
