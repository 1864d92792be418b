"""Runner data models — one record per (trial, image) attempt."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

from scanbench.report import SeverityCounts


class ScanStatus(enum.Enum):
    """Outcome of a single scan attempt."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ScanRecord:
    """A single row of the metrics log."""

    trial: int
    repository: str
    tag: str
    status: ScanStatus
    digest: str = ""
    duration_ms: int = 0
    counts: SeverityCounts = field(default_factory=SeverityCounts)
    report_file: str = ""
    timestamp: int = field(default_factory=lambda: int(time.time()))

    def to_row(self) -> list[str | int]:
        """Column values in metrics log order."""
        return [
            self.trial,
            self.timestamp,
            self.repository,
            self.tag,
            self.digest,
            self.status.value,
            self.duration_ms,
            self.counts.critical,
            self.counts.high,
            self.counts.medium,
            self.counts.low,
            self.counts.total,
            self.report_file,
        ]

    @classmethod
    def from_row(cls, row: dict[str, str]) -> ScanRecord:
        """Build a record from a csv.DictReader row."""
        return cls(
            trial=int(row["trial"]),
            timestamp=int(row["scanTimestamp"]),
            repository=row["repoName"],
            tag=row["imageTag"],
            digest=row["imageDigest"],
            status=ScanStatus(row["status"]),
            duration_ms=int(row["scanDurationMs"]),
            counts=SeverityCounts(
                critical=int(row["criticalCount"]),
                high=int(row["highCount"]),
                medium=int(row["mediumCount"]),
                low=int(row["lowCount"]),
                total=int(row["totalVulns"]),
            ),
            report_file=row["reportFile"],
        )
