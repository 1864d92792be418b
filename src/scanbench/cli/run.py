"""CLI command: scanbench run — pull, scan and time every image for N trials."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from scanbench.config import BenchConfig
from scanbench.images import ImageRef, load_image_list
from scanbench.runner.models import ScanRecord, ScanStatus
from scanbench.runner.runner import REPORTS_DIRNAME, ScanRunner
from scanbench.storage.metrics_log import MetricsLog
from scanbench.tooling.docker import DockerTrivyTooling

console = Console()
err_console = Console(stderr=True)

_PHASE_MESSAGES = {
    "pull": "Pulling {ref}...",
    "scan": "Scanning {ref}...",
    "parse": "Parsing report for {ref}...",
}


def _fail(message: str) -> None:
    err_console.print(f"[red]ERROR:[/red] {message}")
    sys.exit(1)


@click.command()
@click.option(
    "--trials",
    "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Number of trials per image (default: 3).",
)
@click.option(
    "--images",
    "-i",
    "image_list",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="File with one image reference per line (default: images.txt).",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the metrics CSV and reports (default: local_scan_results).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-command timeout in seconds (default: none).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a YAML config file.",
)
def run(
    trials: int | None,
    image_list: Path | None,
    output_dir: Path | None,
    timeout: float | None,
    config_path: str | None,
) -> None:
    """Pull, scan and time each listed image, appending results to a CSV."""
    try:
        config = BenchConfig.load(config_path)
        config.update(
            {
                "trials": trials,
                "image_list": image_list,
                "output_dir": output_dir,
                "scan_timeout": timeout,
            }
        )
        config.validate()
    except (OSError, ValueError) as e:
        _fail(f"Invalid configuration: {e}")

    try:
        images = load_image_list(config.image_list)
    except (OSError, ValueError) as e:
        _fail(str(e))

    tooling = DockerTrivyTooling(
        docker=config.docker,
        trivy=config.trivy,
        timeout=config.scan_timeout,
    )
    missing = tooling.missing_tools()
    if missing:
        _fail(f"Required tool(s) not found on PATH: {', '.join(missing)}")

    console.print("[bold]Starting local scan baseline...[/bold]")
    console.print(
        f"Running [cyan]{config.trials}[/cyan] trial(s) for each image "
        f"in [cyan]{config.image_list}[/cyan]"
    )
    console.print(f"Results will be stored in [cyan]{config.output_dir}[/cyan]")

    config.output_dir.mkdir(parents=True, exist_ok=True)

    def on_trial(trial: int, total: int) -> None:
        if trial > 1:
            console.print(f"[bold]=== TRIAL {trial - 1} COMPLETE ===[/bold]")
        console.print(f"\n[bold]=== STARTING TRIAL {trial} / {total} ===[/bold]")

    def on_phase(phase: str, ref: ImageRef) -> None:
        console.print(f"  [dim]{_PHASE_MESSAGES[phase].format(ref=ref)}[/dim]")

    def on_record(record: ScanRecord) -> None:
        console.print(_format_record(record))

    with MetricsLog(config.metrics_path) as metrics:
        runner = ScanRunner(
            tooling=tooling,
            metrics=metrics,
            output_dir=config.output_dir,
            on_record=on_record,
            on_trial=on_trial,
            on_phase=on_phase,
        )
        rc = runner.run(images, config.trials)

    console.print(f"[bold]=== TRIAL {config.trials} COMPLETE ===[/bold]\n")
    console.print("[green]All scans complete.[/green]")
    console.print(
        f"Logged [cyan]{metrics.rows_written}[/cyan] record(s) to "
        f"[cyan]{config.metrics_path}[/cyan]"
    )
    console.print(
        f"Full JSON reports are in [cyan]{config.output_dir / REPORTS_DIRNAME}[/cyan]"
    )
    sys.exit(rc)


def _format_record(record: ScanRecord) -> str:
    name = f"{record.repository}:{record.tag}"
    if record.status is ScanStatus.FAILED:
        return f"  [red]FAILED[/red] {name} (trial {record.trial})"
    c = record.counts
    return (
        f"  [green]SUCCESS[/green] {name} (trial {record.trial}) "
        f"in {record.duration_ms} ms: "
        f"C:{c.critical} H:{c.high} M:{c.medium} L:{c.low} (Total: {c.total})"
    )
