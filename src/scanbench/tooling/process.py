"""Subprocess helper — run an external command and capture its result."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def run_command(
    args: list[str],
    timeout: float | None = None,
    capture_output: bool = True,
) -> CommandResult:
    """Run a command without raising on failure.

    A missing executable maps to return code 127, a timeout to -1.
    """
    logger.debug("Running: %s", " ".join(args))
    try:
        proc = subprocess.run(
            args,
            capture_output=capture_output,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning("Command timed out after %ss: %s", timeout, args[0])
        return CommandResult(
            returncode=-1,
            stderr=f"Command timed out after {timeout} seconds",
            timed_out=True,
        )
    except FileNotFoundError as e:
        logger.error("Command not found: %s", args[0])
        return CommandResult(returncode=127, stderr=str(e))

    return CommandResult(
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def missing_executables(names: list[str]) -> list[str]:
    """Return the names that cannot be found on PATH."""
    return [name for name in names if shutil.which(name) is None]
