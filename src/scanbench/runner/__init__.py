"""Scan runner — trial loop over images and per-attempt records."""
