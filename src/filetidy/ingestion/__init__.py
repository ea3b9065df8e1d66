"""File listing from local folders and cloud drives."""

from .drive import (
    DriveClient,
    DriveFile,
    DriveListResult,
    DriveOperationResult,
    drive_file_to_record,
    list_drive_records,
)
from .scanner import FolderScanner, ScanError, scan_folder

__all__ = [
    "DriveClient",
    "DriveFile",
    "DriveListResult",
    "DriveOperationResult",
    "FolderScanner",
    "ScanError",
    "drive_file_to_record",
    "list_drive_records",
    "scan_folder",
]
