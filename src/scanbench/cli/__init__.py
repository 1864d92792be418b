"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from scanbench import __version__


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="scanbench")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def main(verbose: bool) -> None:
    """scanbench — repeated local container image scan benchmarks."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from scanbench.cli.run import run  # noqa: F811
    from scanbench.cli.summary import summary  # noqa: F811

    main.add_command(run)
    main.add_command(summary)


_register_commands()
