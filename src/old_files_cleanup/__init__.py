"""Periodic cleanup of old files in configured directories."""

from __future__ import annotations

__version__ = "0.1.0"
