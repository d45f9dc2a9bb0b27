"""Elapsed-time arithmetic for test cases and report totals."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from .errors import CorruptReportError
from .models import Result

NANOS_PER_SECOND = Decimal(1_000_000_000)
_QUANTUM = Decimal("0.000001")


def total_duration_nanos(*result_groups: Iterable[Result]) -> int:
    """Sum durations of every result; a missing duration counts as zero."""

    return sum(result.duration or 0 for group in result_groups for result in group)


def nanos_to_seconds(nanos: int) -> Decimal:
    return Decimal(nanos) / NANOS_PER_SECOND


def format_seconds(seconds: Union[Decimal, float, int]) -> str:
    """Render seconds with at most six fractional digits and no grouping.

    ``1.5`` -> ``"1.5"``, ``0.0000004`` -> ``"0"``, ``12`` -> ``"12"``.
    """

    value = seconds if isinstance(seconds, Decimal) else Decimal(str(seconds))
    text = format(value.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def duration_string(*result_groups: Iterable[Result]) -> str:
    return format_seconds(nanos_to_seconds(total_duration_nanos(*result_groups)))


def parse_seconds(text: Optional[str]) -> Decimal:
    """Read back a time attribute written by :func:`format_seconds`."""

    if text is None:
        raise CorruptReportError("Test case has no recorded time")
    try:
        value = Decimal(text)
    except InvalidOperation as exc:
        raise CorruptReportError(f"Test case time {text!r} is not a number") from exc
    if not value.is_finite() or value < 0:
        raise CorruptReportError(f"Test case time {text!r} is not a valid duration")
    return value
