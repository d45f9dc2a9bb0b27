"""JUnit XML report aggregation for feature execution event streams."""

from .errors import (
    CorruptReportError,
    EventStreamError,
    JunitFormatterError,
    ProtocolViolationError,
    ReportWriteError,
)
from .formatter import JunitFormatter

__all__ = [
    "CorruptReportError",
    "EventStreamError",
    "JunitFormatter",
    "JunitFormatterError",
    "ProtocolViolationError",
    "ReportWriteError",
]
