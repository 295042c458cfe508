"""
Dashboard-level exceptions surfaced to the user.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base exception for recoverable dashboard failures."""


class CSVParseError(DashboardError, ValueError):
    """Raised when an uploaded file is not structurally valid CSV."""


class InvalidStateError(DashboardError):
    """Raised when an operation is invoked without its precondition."""
