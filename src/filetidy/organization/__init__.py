"""Execution of proposed changes and operation history."""

from .errors import HistoryError, OrganizationError
from .executor import ChangeExecutor
from .folders import FolderCache
from .history import HistoryRepository
from .models import ApplyReport, MoveResult, OperationLogEntry
from .movers import DriveFileMover, FileMover, LocalFileMover

__all__ = [
    "ApplyReport",
    "ChangeExecutor",
    "DriveFileMover",
    "FileMover",
    "FolderCache",
    "HistoryError",
    "HistoryRepository",
    "LocalFileMover",
    "MoveResult",
    "OperationLogEntry",
    "OrganizationError",
]
