"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from scanbench.images import ImageRef
from scanbench.tooling.base import ImageDigest


class FakeTooling:
    """In-memory ImageTooling double that records every call."""

    def __init__(
        self,
        fail_fetch: set[str] | None = None,
        fail_scan: set[str] | None = None,
        fallback: set[str] | None = None,
        no_identity: set[str] | None = None,
        report: object | None = None,
        reports: dict[str, object] | None = None,
        write_report: bool = True,
    ) -> None:
        self.fail_fetch = fail_fetch or set()
        self.fail_scan = fail_scan or set()
        self.fallback = fallback or set()
        self.no_identity = no_identity or set()
        self.report = report if report is not None else {"Results": []}
        self.reports = reports or {}
        self.write_report = write_report
        self.calls: list[tuple[str, str]] = []

    def fetch(self, ref: ImageRef) -> bool:
        self.calls.append(("fetch", ref.raw))
        return ref.raw not in self.fail_fetch

    def inspect(self, ref: ImageRef) -> ImageDigest:
        self.calls.append(("inspect", ref.raw))
        if ref.raw in self.no_identity:
            return ImageDigest(value="", fallback=True)
        if ref.raw in self.fallback:
            return ImageDigest(value="sha256:localid", fallback=True)
        return ImageDigest(value=f"sha256:{ref.repository}")

    def scan(self, ref: ImageRef, output_path: Path) -> bool:
        self.calls.append(("scan", ref.raw))
        if ref.raw in self.fail_scan:
            return False
        if self.write_report:
            report = self.reports.get(ref.raw, self.report)
            output_path.write_text(json.dumps(report), encoding="utf-8")
        return True

    def missing_tools(self) -> list[str]:
        return []


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def trivy_report_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "trivy_report.json"


@pytest.fixture
def images_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "images.txt"


@pytest.fixture
def config_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "config.yaml"


@pytest.fixture
def fake_tooling() -> FakeTooling:
    return FakeTooling()


@pytest.fixture
def make_tooling():
    return FakeTooling
