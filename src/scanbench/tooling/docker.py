"""Docker + Trivy backend — pulls and inspects with docker, scans with trivy."""

from __future__ import annotations

import logging
from pathlib import Path

from scanbench.images import ImageRef
from scanbench.tooling.base import ImageDigest
from scanbench.tooling.process import missing_executables, run_command

logger = logging.getLogger(__name__)


class DockerTrivyTooling:
    """Runs ``docker pull``, ``docker image inspect`` and ``trivy image``."""

    def __init__(
        self,
        docker: str = "docker",
        trivy: str = "trivy",
        timeout: float | None = None,
        quiet: bool = True,
    ) -> None:
        self._docker = docker
        self._trivy = trivy
        self._timeout = timeout
        self._quiet = quiet

    def missing_tools(self) -> list[str]:
        """Executables required by this backend that are not on PATH."""
        return missing_executables([self._docker, self._trivy])

    def fetch(self, ref: ImageRef) -> bool:
        result = run_command(
            [self._docker, "pull", ref.raw],
            timeout=self._timeout,
            capture_output=self._quiet,
        )
        if not result.success:
            logger.warning("docker pull %s failed: %s", ref, result.stderr.strip())
        return result.success

    def inspect(self, ref: ImageRef) -> ImageDigest:
        result = run_command(
            [
                self._docker,
                "image",
                "inspect",
                ref.raw,
                "--format",
                "{{index .RepoDigests 0}}",
            ],
            timeout=self._timeout,
        )
        # "nginx@sha256:..." -> "sha256:..."
        repo_digest = result.stdout.strip() if result.success else ""
        digest = repo_digest.split("@", 1)[1] if "@" in repo_digest else ""
        if digest:
            return ImageDigest(value=digest)

        # Locally built images have no RepoDigests
        result = run_command(
            [self._docker, "image", "inspect", ref.raw, "--format", "{{.Id}}"],
            timeout=self._timeout,
        )
        image_id = result.stdout.strip() if result.success else ""
        return ImageDigest(value=image_id, fallback=True)

    def scan(self, ref: ImageRef, output_path: Path) -> bool:
        args = [self._trivy, "image", "--format", "json", "--output", str(output_path)]
        if self._quiet:
            args.append("--quiet")
        args.append(ref.raw)

        result = run_command(args, timeout=self._timeout, capture_output=self._quiet)
        if not result.success:
            logger.warning("trivy scan of %s failed: %s", ref, result.stderr.strip())
        return result.success
