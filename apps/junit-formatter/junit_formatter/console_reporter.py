"""Console reporter printing feature and run summaries."""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .output_config import OutputFormat

_CI_ENV_VARS = ("CI", "JENKINS_HOME", "GITLAB_CI", "TRAVIS", "GITHUB_ACTIONS")


def summary_line(
    feature_path: str,
    report_path: str,
    scenarios: int,
    failed: int,
    skipped: int,
    time_taken: float,
) -> str:
    """The fixed-format one-line summary of a feature report."""

    return (
        f"feature: {feature_path} | report: {report_path} | "
        f"scenarios: {scenarios:2d} | failed: {failed:2d} | skipped: {skipped:2d} | time: {time_taken:f}"
    )


class ConsoleReporter:
    """
    Console reporter that adapts to the environment.

    Rich output is used only for interactive terminals outside CI; pipes,
    redirects and CI jobs get plain text, and ``json`` prints one JSON
    object per summary.
    """

    def __init__(self, output_format: OutputFormat = OutputFormat.AUTO) -> None:
        self.output_format = output_format
        self.use_rich = self._detect_rich()
        self.console: Optional[Console] = Console() if self.use_rich else None

    def _detect_rich(self) -> bool:
        if self.output_format == OutputFormat.RICH:
            return True
        if self.output_format in (OutputFormat.PLAIN, OutputFormat.JSON):
            return False
        is_terminal = sys.stdout.isatty()
        is_ci = any(name in os.environ for name in _CI_ENV_VARS)
        return is_terminal and not is_ci

    def feature_summary(
        self,
        *,
        feature_path: str,
        report_path: str,
        scenarios: int,
        failed: int,
        skipped: int,
        time_taken: float,
    ) -> None:
        line = summary_line(feature_path, report_path, scenarios, failed, skipped, time_taken)
        if self.output_format == OutputFormat.JSON:
            self._print_json(
                {
                    "feature": feature_path,
                    "report": report_path,
                    "scenarios": scenarios,
                    "failed": failed,
                    "skipped": skipped,
                    "time": time_taken,
                }
            )
        elif self.console is not None:
            self.console.print(Text(line, style="bold red" if failed else "green"))
        else:
            print(line, flush=True)

    def run_summary(self, *, features: int, scenarios: int, failed: int, skipped: int, time_taken: float) -> None:
        """Totals across every feature of a run."""

        if self.output_format == OutputFormat.JSON:
            self._print_json(
                {
                    "features": features,
                    "scenarios": scenarios,
                    "failed": failed,
                    "skipped": skipped,
                    "time": time_taken,
                }
            )
            return
        totals = (
            f"Features: {features} | Scenarios: {scenarios} | Failed: {failed} | "
            f"Skipped: {skipped} | Time: {time_taken:f}"
        )
        status = "✓ ALL SCENARIOS PASSED" if failed == 0 else "✗ SOME SCENARIOS FAILED"
        if self.console is not None:
            self.console.print(
                Panel(
                    Text(totals, style="bold"),
                    title=Text(status, style="bold green" if failed == 0 else "bold red"),
                    border_style="green" if failed == 0 else "red",
                )
            )
        else:
            print("-" * 80)
            print(totals)
            print(status)

    def print_error(self, message: str) -> None:
        if self.console is not None:
            self.console.print(f"[bold red]Error:[/] {message}")
        else:
            print(f"Error: {message}", file=sys.stderr)

    @staticmethod
    def _print_json(payload: dict[str, Any]) -> None:
        print(json.dumps(payload), flush=True)
