"""Global configuration — defaults, env vars and an optional YAML file."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from scanbench.storage.metrics_log import METRICS_FILENAME

DEFAULT_TRIALS = 3
DEFAULT_IMAGE_LIST = "images.txt"
DEFAULT_OUTPUT_DIR = "local_scan_results"

_ENV_PREFIX = "SCANBENCH_"


@dataclass
class BenchConfig:
    """Settings for one benchmarking run."""

    trials: int = DEFAULT_TRIALS
    image_list: Path = Path(DEFAULT_IMAGE_LIST)
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    scan_timeout: float | None = None  # None blocks indefinitely
    docker: str = "docker"
    trivy: str = "trivy"

    @classmethod
    def load(cls, path: str | Path | None = None) -> BenchConfig:
        """Build config from defaults, then SCANBENCH_* env vars, then a YAML file."""
        config = cls()

        env_trials = os.environ.get(f"{_ENV_PREFIX}TRIALS")
        if env_trials:
            config.trials = _parse_trials(env_trials)

        env_images = os.environ.get(f"{_ENV_PREFIX}IMAGE_LIST")
        if env_images:
            config.image_list = Path(env_images)

        env_output = os.environ.get(f"{_ENV_PREFIX}OUTPUT_DIR")
        if env_output:
            config.output_dir = Path(env_output)

        env_timeout = os.environ.get(f"{_ENV_PREFIX}SCAN_TIMEOUT")
        if env_timeout:
            config.scan_timeout = float(env_timeout)

        config.docker = os.environ.get(f"{_ENV_PREFIX}DOCKER", config.docker)
        config.trivy = os.environ.get(f"{_ENV_PREFIX}TRIVY", config.trivy)

        if path is not None:
            config.update(_read_yaml(path))

        config.validate()
        return config

    def update(self, values: dict) -> None:
        """Apply a mapping of overrides, converting paths and numbers."""
        known = {f.name for f in fields(self)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        for key, value in values.items():
            if value is None:
                continue
            try:
                if key in ("image_list", "output_dir"):
                    value = Path(value)
                elif key == "trials":
                    value = _parse_trials(value)
                elif key == "scan_timeout":
                    if isinstance(value, bool):
                        raise TypeError("boolean timeout")
                    value = float(value)
                else:
                    value = str(value)
            except TypeError as e:
                raise ValueError(f"Invalid value for {key}: {value!r}") from e
            setattr(self, key, value)

    def validate(self) -> None:
        if self.trials < 1:
            raise ValueError(f"trials must be a positive integer, got {self.trials}")
        if self.scan_timeout is not None and self.scan_timeout <= 0:
            raise ValueError("scan_timeout must be positive")

    @property
    def metrics_path(self) -> Path:
        return self.output_dir / METRICS_FILENAME


def _parse_trials(value: object) -> int:
    # YAML hands back bools and floats; only whole numbers are trial counts
    if isinstance(value, bool):
        raise ValueError(f"trials must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        return int(value)
    raise ValueError(f"trials must be an integer, got {value!r}")


def _read_yaml(path: str | Path) -> dict:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Config YAML must be a mapping")
    return data
