"""Tooling protocol — the capabilities the scan runner needs from the outside world."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from scanbench.images import ImageRef


@dataclass(frozen=True)
class ImageDigest:
    """Identity of a local image.

    ``fallback`` is set when no repo digest was available and ``value``
    holds the local image id instead.
    """

    value: str
    fallback: bool = False


class ImageTooling(Protocol):
    """Protocol for fetch/inspect/scan backends."""

    def fetch(self, ref: ImageRef) -> bool:
        """Ensure a local copy of the image exists. Returns True on success."""
        ...

    def inspect(self, ref: ImageRef) -> ImageDigest:
        """Return the content digest, or the local image id as a fallback."""
        ...

    def scan(self, ref: ImageRef, output_path: Path) -> bool:
        """Write a JSON vulnerability report to output_path. Returns True on success."""
        ...
