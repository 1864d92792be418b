"""Append-only CSV metrics log — the durable record of every scan attempt."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import IO

from scanbench.runner.models import ScanRecord

logger = logging.getLogger(__name__)

METRICS_FILENAME = "summary_metrics.csv"

HEADER = (
    "trial",
    "scanTimestamp",
    "repoName",
    "imageTag",
    "imageDigest",
    "status",
    "scanDurationMs",
    "criticalCount",
    "highCount",
    "mediumCount",
    "lowCount",
    "totalVulns",
    "reportFile",
)


class MetricsLog:
    """Single writer for the metrics CSV.

    The header is emitted only when the file does not exist yet; existing
    files are appended to. Use as a context manager or call close().
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._handle: IO[str] | None = None
        self._writer = None
        self.rows_written = 0

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> None:
        if self._handle is not None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not self._path.exists()
        self._handle = self._path.open("a", newline="", encoding="utf-8")
        self._writer = csv.writer(self._handle, lineterminator="\n")
        if is_new:
            self._writer.writerow(HEADER)
            self._handle.flush()
            logger.info("Created metrics log %s", self._path)

    def append(self, record: ScanRecord) -> None:
        """Append one record and flush it to disk."""
        if self._handle is None:
            self.open()
        self._writer.writerow(record.to_row())
        self._handle.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            self._writer = None

    def __enter__(self) -> MetricsLog:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def read_records(path: str | Path) -> list[ScanRecord]:
    """Read every record back from a metrics CSV."""
    with Path(path).open(newline="", encoding="utf-8") as f:
        return [ScanRecord.from_row(row) for row in csv.DictReader(f)]
