"""Detect outdated, deprecated and migrated GitHub Actions and plan fixes."""

__version__ = "0.1.0"
