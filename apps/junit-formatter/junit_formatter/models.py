"""Value types delivered by the execution engine."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

OUTLINE_KEYWORD = "Scenario Outline"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ResultStatus(str, Enum):
    """Outcome reported by the engine for a step or hook."""

    PASSED = "passed"
    FAILED = "failed"
    UNDEFINED = "undefined"
    PENDING = "pending"
    SKIPPED = "skipped"


class Feature(_Frozen):
    """Feature file being executed."""

    uri: str
    name: Optional[str] = None
    keyword: str = "Feature"


class Background(_Frozen):
    keyword: str = "Background"
    name: Optional[str] = None


class Scenario(_Frozen):
    """Concrete scenario run.

    Instances expanded from an outline keep the outline keyword, which is how
    they are told apart from plain scenarios.
    """

    keyword: str = "Scenario"
    name: Optional[str] = None
    line: Optional[int] = None

    @property
    def is_outline_example(self) -> bool:
        return self.keyword == OUTLINE_KEYWORD


class ScenarioOutline(_Frozen):
    keyword: str = OUTLINE_KEYWORD
    name: Optional[str] = None
    line: Optional[int] = None


class Examples(_Frozen):
    keyword: str = "Examples"
    name: Optional[str] = None


class Step(_Frozen):
    """Step line; the keyword keeps its trailing space (``"Given "``)."""

    keyword: str
    name: str
    line: Optional[int] = None


class ErrorInfo(_Frozen):
    message: Optional[str] = None
    stack_trace: str = ""


class Result(_Frozen):
    """Outcome of one step."""

    status: ResultStatus
    duration: Optional[int] = Field(default=None, ge=0, description="Nanoseconds")
    error: Optional[ErrorInfo] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


class HookResult(Result):
    """Outcome of a setup or teardown hook, independent of any step."""

    hook: Literal["before", "after"] = "before"
