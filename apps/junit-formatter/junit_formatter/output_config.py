"""Console and log output configuration shared by the CLI and the console reporter."""

from __future__ import annotations

import os
from enum import Enum
from typing import Literal, Optional


class OutputFormat(str, Enum):
    """How the per-feature summary is printed."""
    AUTO = "auto"
    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


LogFormat = Literal["json", "console", "plain"]

ENV_VAR_NAME = "CONSOLE_OUTPUT_FORMAT"

_LOG_FORMAT_BY_OUTPUT = {
    OutputFormat.AUTO: "console",
    OutputFormat.RICH: "console",
    OutputFormat.PLAIN: "plain",
    OutputFormat.JSON: "json",
}


def _parse_output_format(value: Optional[str]) -> Optional[OutputFormat]:
    if not value:
        return None
    try:
        return OutputFormat(value.lower())
    except ValueError:
        return None


def get_output_format(cli_override: Optional[str] = None) -> OutputFormat:
    """
    Resolve the output format: CLI parameter > environment variable > auto.

    Unknown values are ignored and the next source is consulted.
    """
    return (
        _parse_output_format(cli_override)
        or _parse_output_format(os.environ.get(ENV_VAR_NAME))
        or OutputFormat.AUTO
    )


def get_log_format(cli_override: Optional[str] = None) -> LogFormat:
    """
    Resolve the log format with the same priority as :func:`get_output_format`.

    The CLI may name a log format directly (json/console/plain); the
    environment variable holds an output format which is mapped:
    auto/rich -> console, plain -> plain, json -> json.
    """
    if cli_override and cli_override.lower() in ("json", "console", "plain"):
        return cli_override.lower()  # type: ignore[return-value]
    output_format = _parse_output_format(cli_override) or _parse_output_format(os.environ.get(ENV_VAR_NAME))
    if output_format is None:
        return "console"
    return _LOG_FORMAT_BY_OUTPUT[output_format]  # type: ignore[return-value]
