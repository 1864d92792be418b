"""Storage — the metrics CSV log."""
