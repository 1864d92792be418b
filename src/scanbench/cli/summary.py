"""CLI command: scanbench summary — per-image latency table from the metrics CSV."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from scanbench.config import DEFAULT_OUTPUT_DIR
from scanbench.runner.models import ScanRecord, ScanStatus
from scanbench.storage.metrics_log import METRICS_FILENAME, read_records

console = Console()
err_console = Console(stderr=True)


@dataclass
class ImageStats:
    """Aggregated attempts for one repository:tag."""

    name: str
    attempts: int = 0
    failures: int = 0
    durations_ms: list[int] = field(default_factory=list)
    last_total: int | None = None

    @property
    def successes(self) -> int:
        return self.attempts - self.failures

    @property
    def mean_ms(self) -> float | None:
        if not self.durations_ms:
            return None
        return sum(self.durations_ms) / len(self.durations_ms)


def aggregate(records: list[ScanRecord]) -> list[ImageStats]:
    """Group records by image, in first-seen order."""
    stats: dict[str, ImageStats] = {}
    for record in records:
        name = f"{record.repository}:{record.tag}"
        entry = stats.setdefault(name, ImageStats(name=name))
        entry.attempts += 1
        if record.status is ScanStatus.FAILED:
            entry.failures += 1
            continue
        entry.durations_ms.append(record.duration_ms)
        entry.last_total = record.counts.total
    return list(stats.values())


@click.command()
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Directory containing summary_metrics.csv.",
)
def summary(output_dir: Path) -> None:
    """Summarize scan durations and outcomes per image."""
    metrics_path = output_dir / METRICS_FILENAME
    if not metrics_path.is_file():
        err_console.print(f"[red]ERROR:[/red] No metrics log at '{metrics_path}'")
        sys.exit(1)

    try:
        records = read_records(metrics_path)
    except (KeyError, ValueError) as e:
        err_console.print(f"[red]ERROR:[/red] Malformed metrics log: {e}")
        sys.exit(1)

    if not records:
        console.print("[dim]No scan records yet.[/dim]")
        return

    table = Table(title=f"Scan durations ({metrics_path})", show_lines=False)
    table.add_column("Image", style="cyan")
    table.add_column("Attempts", justify="right")
    table.add_column("OK", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Mean ms", justify="right")
    table.add_column("Min ms", justify="right")
    table.add_column("Max ms", justify="right")
    table.add_column("Vulns", justify="right")

    for entry in aggregate(records):
        mean = entry.mean_ms
        table.add_row(
            entry.name,
            str(entry.attempts),
            str(entry.successes),
            str(entry.failures),
            f"{mean:.1f}" if mean is not None else "-",
            str(min(entry.durations_ms)) if entry.durations_ms else "-",
            str(max(entry.durations_ms)) if entry.durations_ms else "-",
            str(entry.last_total) if entry.last_total is not None else "-",
        )

    console.print(table)
    console.print(f"\nTotal attempts: {len(records)}")
