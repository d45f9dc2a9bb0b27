"""Recorded event stream loading."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional
import json

import yaml
from pydantic import BaseModel, ValidationError

from .errors import EventStreamError
from .models import (
    Background,
    Examples,
    Feature,
    HookResult,
    Result,
    Scenario,
    ScenarioOutline,
    Step,
)


class StrictToggle(BaseModel):
    value: bool


EVENT_MODELS: dict[str, Optional[type[BaseModel]]] = {
    "feature": Feature,
    "background": Background,
    "scenario_outline": ScenarioOutline,
    "examples": Examples,
    "start_of_scenario_lifecycle": Scenario,
    "scenario": Scenario,
    "step": Step,
    "result": Result,
    "before": HookResult,
    "after": HookResult,
    "end_of_scenario_lifecycle": Scenario,
    "strict": StrictToggle,
    "done": None,
}


@dataclass(frozen=True)
class Event:
    """One notification of a recorded stream."""

    kind: str
    payload: Optional[BaseModel] = None


def parse_event(record: Any, where: str = "event") -> Event:
    """Validate one ``{"event": <kind>, ...payload}`` mapping."""

    if not isinstance(record, dict):
        raise EventStreamError(f"{where} must be a mapping, got {type(record).__name__}")
    fields = dict(record)
    kind = fields.pop("event", None)
    if kind not in EVENT_MODELS:
        raise EventStreamError(f"{where} has unknown event kind {kind!r}")
    model = EVENT_MODELS[kind]
    if model is None:
        return Event(kind)
    if model is HookResult:
        fields.setdefault("hook", kind)
    try:
        return Event(kind, model.model_validate(fields))
    except ValidationError as exc:
        raise EventStreamError(f"{where} ({kind}) is invalid: {exc}") from exc


def _read_records(path: Path) -> list[Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise EventStreamError(f"Event stream {path} cannot be read: {exc}") from exc
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise EventStreamError(f"Event stream {path} is not valid YAML: {exc}") from exc
        if data is None:
            return []
        if not isinstance(data, list):
            raise EventStreamError(f"Event stream {path} must contain a list of events")
        return data

    records = []
    for number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise EventStreamError(f"{path}:{number} is not valid JSON: {exc}") from exc
    return records


def load_events(path: Path) -> list[Event]:
    """Load a JSONL (one event per line) or YAML (list of events) stream."""

    return [
        parse_event(record, where=f"{path} event #{index}")
        for index, record in enumerate(_read_records(path), start=1)
    ]


def feature_uri(events: Iterable[Event]) -> Optional[str]:
    for event in events:
        if event.kind == "feature" and isinstance(event.payload, Feature):
            return event.payload.uri
    return None
