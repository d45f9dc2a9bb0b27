"""Runs several recorded feature streams concurrently and aggregates their counters."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
import re

import structlog
from pydantic import BaseModel, Field

from .console_reporter import ConsoleReporter
from .formatter import JunitFormatter
from .loader import Event, feature_uri, load_events
from .replay import replay

LOGGER = structlog.get_logger("junit_formatter")

_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z_.-]+")


class FeatureSummary(BaseModel):
    """Counters of one feature report."""

    feature_path: str
    report_path: str
    events_file: str
    scenarios: int
    failed: int
    skipped: int
    time: float


class RunSummary(BaseModel):
    """Totals across every feature of a run."""

    features: list[FeatureSummary] = Field(default_factory=list)
    scenarios: int = 0
    failed: int = 0
    skipped: int = 0
    time: float = 0.0

    @classmethod
    def from_features(cls, features: list[FeatureSummary]) -> RunSummary:
        return cls(
            features=features,
            scenarios=sum(item.scenarios for item in features),
            failed=sum(item.failed for item in features),
            skipped=sum(item.skipped for item in features),
            time=sum(item.time for item in features),
        )

    @property
    def failed_features(self) -> list[str]:
        return [item.feature_path for item in self.features if item.failed]


def report_file_name(feature_path: str) -> str:
    """``features/payments/list.feature`` -> ``TEST-features.payments.list.xml``."""

    path = PurePosixPath(feature_path.replace("\\", "/"))
    if path.suffix == ".feature":
        path = path.with_suffix("")
    dotted = ".".join(part for part in path.parts if part not in ("/", ".", ".."))
    slug = _UNSAFE_CHARS.sub("-", dotted).strip("-.")
    return f"TEST-{slug or 'feature'}.xml"


@dataclass(frozen=True)
class FeatureJob:
    """A loaded stream with the report file reserved for it."""

    events_file: Path
    events: list[Event]
    feature_path: str
    report_path: Path


def plan_jobs(events_files: Iterable[Path], output_dir: Path) -> list[FeatureJob]:
    """Load every stream and give each one a distinct report file.

    Feature paths that map to the same name (``a/b.feature`` and
    ``a.b.feature``, or two streams of one feature) get a numeric suffix.
    """

    jobs = []
    taken: set[str] = set()
    for events_file in events_files:
        events = load_events(events_file)
        feature_path = feature_uri(events) or str(events_file)
        name = report_file_name(feature_path)
        stem = name[: -len(".xml")]
        counter = 1
        while name.lower() in taken:
            counter += 1
            name = f"{stem}-{counter}.xml"
        if counter > 1:
            LOGGER.warning("report_name_in_use", feature=feature_path, report=name)
        taken.add(name.lower())
        jobs.append(FeatureJob(events_file, events, feature_path, output_dir / name))
    return jobs


def run_feature(
    job: FeatureJob,
    *,
    strict: bool = False,
    reporter: Optional[ConsoleReporter] = None,
) -> FeatureSummary:
    """Replay one recorded stream into its own formatter and report file."""

    events, feature_path, report_path = job.events, job.feature_path, job.report_path
    logger = LOGGER.bind(feature=feature_path, events=len(events))
    logger.info("feature_replay_started", report=str(report_path))

    formatter = replay(
        JunitFormatter(feature_path, report_path, strict=strict, reporter=reporter),
        events,
    )
    return FeatureSummary(
        feature_path=feature_path,
        report_path=str(report_path),
        events_file=str(job.events_file),
        scenarios=formatter.test_count,
        failed=formatter.fail_count,
        skipped=formatter.skip_count,
        time=formatter.time_taken,
    )


def run_features(
    events_files: Iterable[Path],
    *,
    output_dir: Path,
    strict: bool = False,
    max_workers: int = 1,
    reporter: Optional[ConsoleReporter] = None,
) -> RunSummary:
    """Each stream gets its own formatter and destination; nothing is shared between workers."""

    jobs = plan_jobs(events_files, output_dir)
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        futures = [
            pool.submit(run_feature, job, strict=strict, reporter=reporter)
            for job in jobs
        ]
        features = [future.result() for future in futures]
    summary = RunSummary.from_features(features)
    LOGGER.info(
        "run_completed",
        features=len(features),
        scenarios=summary.scenarios,
        failed=summary.failed,
        skipped=summary.skipped,
    )
    return summary
