"""Scanner report parsing — severity bucket counts from Trivy JSON output."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SEVERITY_BUCKETS = ("CRITICAL", "HIGH", "MEDIUM", "LOW")


class ReportError(ValueError):
    """Raised when a scan report cannot be read or decoded."""


@dataclass(frozen=True)
class SeverityCounts:
    """Vulnerability counts for the four tracked buckets plus the overall total.

    ``total`` counts every entry, so severities outside the four buckets
    (``UNKNOWN``, vendor specific labels) only show up there.
    """

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total: int = 0


def _iter_results(report: Any) -> list[dict]:
    # Current Trivy emits {"Results": [...]}; older releases emit a bare list.
    if isinstance(report, dict):
        results = report.get("Results") or []
    elif isinstance(report, list):
        results = report
    else:
        raise ReportError(f"Unexpected report type: {type(report).__name__}")
    if not isinstance(results, list):
        raise ReportError(f"Results must be a list, got {type(results).__name__}")
    return [r for r in results if isinstance(r, dict)]


def count_severities(report: Any) -> SeverityCounts:
    """Count vulnerabilities by severity across all result groups."""
    buckets = dict.fromkeys(SEVERITY_BUCKETS, 0)
    total = 0

    for result in _iter_results(report):
        vulns = result.get("Vulnerabilities") or []
        if not isinstance(vulns, list):
            raise ReportError(
                f"Vulnerabilities must be a list, got {type(vulns).__name__}"
            )
        for vuln in vulns:
            total += 1
            if not isinstance(vuln, dict):
                continue
            severity = str(vuln.get("Severity", "")).upper()
            if severity in buckets:
                buckets[severity] += 1

    return SeverityCounts(
        critical=buckets["CRITICAL"],
        high=buckets["HIGH"],
        medium=buckets["MEDIUM"],
        low=buckets["LOW"],
        total=total,
    )


def load_report(path: str | Path) -> Any:
    """Load a JSON report from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ReportError(f"Cannot read report {path}: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ReportError(f"Invalid JSON in report {path}: {e}") from e


def count_report_file(path: str | Path) -> SeverityCounts:
    """Load a report file and count its severities."""
    counts = count_severities(load_report(path))
    logger.debug("Report %s: %s", path, counts)
    return counts
