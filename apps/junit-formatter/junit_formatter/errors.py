"""Exceptions raised while aggregating and writing feature reports."""


class JunitFormatterError(Exception):
    """Base exception for all report aggregation errors."""


class ProtocolViolationError(JunitFormatterError):
    """Raised when the execution events do not follow the expected grammar."""


class ReportWriteError(JunitFormatterError):
    """Raised when the report destination cannot be opened or written."""


class CorruptReportError(JunitFormatterError):
    """Raised when an assembled report holds data that cannot be summarized."""


class EventStreamError(JunitFormatterError):
    """Raised when a recorded event stream cannot be loaded."""
