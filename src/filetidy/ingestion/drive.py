"""Cloud drive listing contract and conversion to file records.

The Google Drive API client and OAuth flow live outside this package; anything
implementing :class:`DriveClient` can feed the rule engine and the drive mover.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator, List, Optional, Protocol

from pydantic import BaseModel, Field

from filetidy.rules.models import DEFAULT_MIME_TYPE, FileRecord
from filetidy.rules.paths import join

DRIVE_ROOT_ID = "root"
DRIVE_ROOT_NAME = "My Drive"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DriveFile(BaseModel):
    """File or folder as reported by the drive listing API."""

    id: str
    name: str
    mime_type: str = DEFAULT_MIME_TYPE
    size: Optional[int] = None
    created_time: datetime = Field(default_factory=_utcnow)
    modified_time: datetime = Field(default_factory=_utcnow)
    parents: List[str] = Field(default_factory=list)
    is_folder: bool = False
    web_view_link: Optional[str] = None


class DriveListResult(BaseModel):
    """One page of a drive listing."""

    files: List[DriveFile] = Field(default_factory=list)
    next_page_token: Optional[str] = None
    has_more: bool = False


class DriveOperationResult(BaseModel):
    """Outcome of a drive mutation."""

    success: bool
    file: Optional[DriveFile] = None
    error: Optional[str] = None


class DriveClient(Protocol):
    """Operations the drive integration must provide."""

    def list_files(
        self,
        *,
        folder_id: str = DRIVE_ROOT_ID,
        query: Optional[str] = None,
        page_size: int = 100,
        page_token: Optional[str] = None,
    ) -> DriveListResult:
        """Return one page of the folder's children."""
        ...

    def move_file(
        self,
        *,
        file_id: str,
        current_parent_id: str,
        new_parent_id: str,
        new_name: Optional[str] = None,
    ) -> DriveOperationResult:
        """Reparent (and optionally rename) a file."""
        ...

    def create_folder(self, name: str, parent_id: str) -> DriveFile:
        """Create a folder named ``name`` under ``parent_id``."""
        ...

    def find_folder(self, name: str, parent_id: str) -> Optional[DriveFile]:
        """Return the folder named ``name`` under ``parent_id`` if it exists."""
        ...


def drive_file_to_record(drive_file: DriveFile, parent_path: str = DRIVE_ROOT_NAME) -> FileRecord:
    """Convert a drive listing entry into a rule-engine record."""
    return FileRecord(
        id=drive_file.id,
        source="drive",
        path=join(parent_path, drive_file.name),
        name=drive_file.name,
        parent_path=parent_path,
        size=drive_file.size or 0,
        created_time=drive_file.created_time,
        modified_time=drive_file.modified_time,
        mime_type=drive_file.mime_type,
        is_directory=drive_file.is_folder,
    )


def iter_drive_files(
    client: DriveClient,
    *,
    folder_id: str = DRIVE_ROOT_ID,
    query: Optional[str] = None,
    page_size: int = 100,
) -> Iterator[DriveFile]:
    """Yield every entry of a drive folder, following pagination."""
    page_token: Optional[str] = None
    while True:
        page = client.list_files(
            folder_id=folder_id,
            query=query,
            page_size=page_size,
            page_token=page_token,
        )
        yield from page.files
        if not page.has_more or not page.next_page_token:
            return
        page_token = page.next_page_token


def list_drive_records(
    client: DriveClient,
    *,
    folder_id: str = DRIVE_ROOT_ID,
    parent_path: str = DRIVE_ROOT_NAME,
    query: Optional[str] = None,
    page_size: int = 100,
) -> list[FileRecord]:
    """Return records for every entry of a drive folder."""
    return [
        drive_file_to_record(drive_file, parent_path)
        for drive_file in iter_drive_files(
            client,
            folder_id=folder_id,
            query=query,
            page_size=page_size,
        )
    ]


__all__ = [
    "DRIVE_ROOT_ID",
    "DRIVE_ROOT_NAME",
    "DriveClient",
    "DriveFile",
    "DriveListResult",
    "DriveOperationResult",
    "FOLDER_MIME_TYPE",
    "drive_file_to_record",
    "iter_drive_files",
    "list_drive_records",
]
