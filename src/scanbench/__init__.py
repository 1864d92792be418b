"""scanbench — local container image scan benchmarking harness."""

__version__ = "0.1.0"
