"""Feeds recorded events to a formatter, one handler call per event."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from .errors import ProtocolViolationError
from .formatter import FormatterState, JunitFormatter
from .loader import Event


def _handlers(formatter: JunitFormatter) -> dict[str, Callable[[Any], None]]:
    return {
        "feature": formatter.feature,
        "background": formatter.background,
        "scenario_outline": formatter.scenario_outline,
        "examples": formatter.examples,
        "start_of_scenario_lifecycle": formatter.start_of_scenario_lifecycle,
        "scenario": formatter.scenario,
        "step": formatter.step,
        "result": formatter.result,
        "before": formatter.before,
        "after": formatter.after,
        "end_of_scenario_lifecycle": formatter.end_of_scenario_lifecycle,
        "strict": lambda toggle: formatter.set_strict(toggle.value),
        "done": lambda _: formatter.done(),
    }


def replay(formatter: JunitFormatter, events: Iterable[Event]) -> JunitFormatter:
    """Dispatch ``events`` in order; the stream must end with ``done``."""

    handlers = _handlers(formatter)
    try:
        for event in events:
            handlers[event.kind](event.payload)
        if formatter.state != FormatterState.DONE:
            raise ProtocolViolationError(f"Event stream for {formatter.feature_path} ended before 'done'")
    finally:
        formatter.close()
    return formatter
