"""External tooling — image fetch, inspection and vulnerability scanning."""

from scanbench.tooling.base import ImageDigest, ImageTooling
from scanbench.tooling.docker import DockerTrivyTooling

__all__ = ["DockerTrivyTooling", "ImageDigest", "ImageTooling"]
