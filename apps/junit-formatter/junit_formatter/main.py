"""Entry point for the junit-formatter application."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

if __package__ in {None, ""}:
    sys.path.append(str(Path(__file__).resolve().parents[1]))
    __package__ = "junit_formatter"

from .console_reporter import ConsoleReporter
from .errors import JunitFormatterError
from .logging_utils import configure_logging
from .output_config import get_log_format, get_output_format
from .runner import run_features

app = typer.Typer(help="Aggregate recorded feature execution events into JUnit XML reports.")

DEFAULT_OUTPUT_DIR = Path("target/surefire-reports")


@app.command()
def report(
    events: list[Path] = typer.Option(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Recorded event stream(s) of one feature each, JSONL or YAML.",
    ),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, help="Directory receiving TEST-*.xml reports."),
    strict: bool = typer.Option(False, "--strict", help="Treat pending and undefined steps as failures."),
    threads: int = typer.Option(1, min=1, help="Number of features processed concurrently."),
    output_format: Optional[str] = typer.Option(
        None,
        help="Console output: auto, rich, plain or json. Falls back to CONSOLE_OUTPUT_FORMAT.",
    ),
    log_level: str = typer.Option("warning", help="Log level for diagnostic output."),
) -> None:
    """Write one JUnit report per event stream and print the summaries."""

    reporter = ConsoleReporter(get_output_format(output_format))
    configure_logging(log_level, get_log_format(output_format))

    try:
        summary = run_features(
            events,
            output_dir=output_dir,
            strict=strict,
            max_workers=threads,
            reporter=reporter,
        )
    except JunitFormatterError as exc:
        reporter.print_error(str(exc))
        raise typer.Exit(code=2) from exc

    reporter.run_summary(
        features=len(summary.features),
        scenarios=summary.scenarios,
        failed=summary.failed,
        skipped=summary.skipped,
        time_taken=summary.time,
    )
    if summary.failed:
        raise typer.Exit(code=1)


def run() -> None:
    """CLI entry point for console_scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    run()
