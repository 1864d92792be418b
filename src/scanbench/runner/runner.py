"""Scan runner — for each trial, for each image: fetch, inspect, scan, record."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from scanbench.images import ImageRef
from scanbench.report import ReportError, count_report_file
from scanbench.runner.models import ScanRecord, ScanStatus
from scanbench.storage.metrics_log import MetricsLog
from scanbench.tooling.base import ImageTooling

logger = logging.getLogger(__name__)

REPORTS_DIRNAME = "reports"


def report_path(output_dir: Path, ref: ImageRef, trial: int) -> Path:
    """Location of the report for one (image, trial) attempt."""
    return (
        output_dir
        / REPORTS_DIRNAME
        / ref.repository
        / ref.tag
        / f"trial_{trial}_report.json"
    )


class ScanRunner:
    """Runs repeated, strictly sequential scan trials over an image list.

    Per-image failures are written to the metrics log as FAILED rows and
    never abort the loop.
    """

    def __init__(
        self,
        tooling: ImageTooling,
        metrics: MetricsLog,
        output_dir: str | Path,
        on_record: Callable[[ScanRecord], None] | None = None,
        on_trial: Callable[[int, int], None] | None = None,
        on_phase: Callable[[str, ImageRef], None] | None = None,
    ) -> None:
        self._tooling = tooling
        self._metrics = metrics
        self._output_dir = Path(output_dir)
        self._on_record = on_record
        self._on_trial = on_trial
        self._on_phase = on_phase

    def run(self, images: Sequence[ImageRef], trials: int) -> int:
        """Run every trial over every image. Returns the process exit code."""
        if isinstance(trials, bool) or not isinstance(trials, int) or trials < 1:
            raise ValueError(f"trials must be a positive integer, got {trials!r}")

        logger.info("Running %d trial(s) over %d image(s)", trials, len(images))
        for trial in range(1, trials + 1):
            if self._on_trial:
                self._on_trial(trial, trials)
            for ref in images:
                self._record(self.scan_one(ref, trial))
        return 0

    def scan_one(self, ref: ImageRef, trial: int) -> ScanRecord:
        """Process a single (image, trial) attempt and return its record."""
        self._phase("pull", ref)
        if not self._tooling.fetch(ref):
            logger.warning("Failed to pull %s, skipping", ref)
            return ScanRecord(
                trial=trial,
                repository=ref.repository,
                tag=ref.tag,
                status=ScanStatus.FAILED,
            )

        digest = self._tooling.inspect(ref)
        if not digest.value:
            logger.warning("Could not determine a digest or image id for %s", ref)
        elif digest.fallback:
            logger.warning(
                "Could not find RepoDigest for %s, using image id %s", ref, digest.value
            )

        report = report_path(self._output_dir, ref, trial)
        report.parent.mkdir(parents=True, exist_ok=True)

        self._phase("scan", ref)
        start = time.perf_counter_ns()
        scanned = self._tooling.scan(ref, report)
        elapsed_ns = time.perf_counter_ns() - start

        failed = ScanRecord(
            trial=trial,
            repository=ref.repository,
            tag=ref.tag,
            digest=digest.value,
            status=ScanStatus.FAILED,
            report_file=str(report),
        )
        if not scanned:
            logger.warning("Scan failed for %s, skipping", ref)
            return failed

        self._phase("parse", ref)
        try:
            counts = count_report_file(report)
        except ReportError as e:
            logger.warning("Unusable report for %s: %s", ref, e)
            return failed

        return ScanRecord(
            trial=trial,
            repository=ref.repository,
            tag=ref.tag,
            digest=digest.value,
            status=ScanStatus.SUCCESS,
            duration_ms=elapsed_ns // 1_000_000,
            counts=counts,
            report_file=str(report),
        )

    def _record(self, record: ScanRecord) -> None:
        self._metrics.append(record)
        if self._on_record:
            self._on_record(record)

    def _phase(self, phase: str, ref: ImageRef) -> None:
        if self._on_phase:
            self._on_phase(phase, ref)
