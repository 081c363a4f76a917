"""Shared utilities for API access, logging, and formatting."""

__all__ = [
    "api",
    "formatting",
    "logging",
]
