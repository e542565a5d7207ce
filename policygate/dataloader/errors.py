"""Batch loader errors."""

from __future__ import annotations


class LoaderError(Exception):
    """Raised when a loaded value cannot be produced (unknown source, missing or failed item)."""
