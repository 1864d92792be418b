"""Image references — parsing ``repository[:tag]`` and loading image lists."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TAG = "latest"


@dataclass(frozen=True)
class ImageRef:
    """A container image reference split into repository and tag."""

    raw: str
    repository: str
    tag: str = DEFAULT_TAG

    @classmethod
    def parse(cls, value: str) -> ImageRef:
        """Split on the first ``:``; a missing or empty tag becomes ``latest``."""
        raw = value.strip()
        repository, _, tag = raw.partition(":")
        if not repository:
            raise ValueError(f"Image reference has no repository: {value!r}")
        return cls(raw=raw, repository=repository, tag=tag or DEFAULT_TAG)

    def __str__(self) -> str:
        return self.raw


def parse_image_lines(lines: list[str]) -> list[ImageRef]:
    """Parse image references, skipping blank lines and ``#`` comments.

    Order and duplicates are preserved.
    """
    refs: list[ImageRef] = []
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith("#"):
            continue
        refs.append(ImageRef.parse(entry))
    return refs


def load_image_list(path: str | Path) -> list[ImageRef]:
    """Read a newline-delimited image list file."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image list file not found at '{path}'")
    refs = parse_image_lines(path.read_text(encoding="utf-8").splitlines())
    logger.debug("Loaded %d image(s) from %s", len(refs), path)
    return refs
