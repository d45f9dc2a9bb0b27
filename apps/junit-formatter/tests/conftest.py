"""Test bootstrap for junit-formatter."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest
import structlog

APP_ROOT = Path(__file__).resolve().parents[1]
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

from junit_formatter.console_reporter import ConsoleReporter  # noqa: E402
from junit_formatter.output_config import OutputFormat  # noqa: E402

structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING))


@pytest.fixture
def plain_reporter() -> ConsoleReporter:
    return ConsoleReporter(output_format=OutputFormat.PLAIN)
