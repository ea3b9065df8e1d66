"""Execution and history errors."""


class OrganizationError(Exception):
    """Base exception for executing proposed changes."""


class HistoryError(OrganizationError):
    """Raised when the operation history cannot be read or written."""
