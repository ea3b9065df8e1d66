"""Move files on the local filesystem or a cloud drive."""

from __future__ import annotations

import logging
import os
import shutil
from functools import partial
from pathlib import Path
from typing import Optional, Protocol

from filetidy.ingestion.drive import DRIVE_ROOT_ID, DRIVE_ROOT_NAME, DriveClient
from filetidy.rules.models import FileRecord, ProposedChange
from filetidy.rules.paths import basename, dirname, normalize_separators

from .folders import FolderCache
from .models import MoveResult

LOGGER = logging.getLogger(__name__)


class FileMover(Protocol):
    """Carry out a single proposed change."""

    def execute(self, change: ProposedChange) -> MoveResult:
        """Move ``change.file`` to ``change.proposed_path``."""
        ...


def available_path(destination: Path) -> Path:
    """Return ``destination`` or the first ``name_N.ext`` sibling that is free."""
    candidate = destination
    counter = 1
    while candidate.exists():
        candidate = destination.with_name(f"{destination.stem}_{counter}{destination.suffix}")
        counter += 1
    return candidate


class LocalFileMover:
    """Move files between local folders, creating destinations on demand."""

    def __init__(
        self,
        *,
        cache: Optional[FolderCache] = None,
        create_missing_folders: bool = True,
    ) -> None:
        self.cache = cache or FolderCache()
        self.create_missing_folders = create_missing_folders

    def execute(self, change: ProposedChange) -> MoveResult:
        return self.move(change.current_path, change.proposed_path)

    def move(self, source: str | Path, destination: str | Path) -> MoveResult:
        """Move ``source`` to ``destination``.

        Existing files at the destination are never overwritten; a ``_1``,
        ``_2``, ... suffix is added to the stem instead.

        Args:
            source: File to move.
            destination: Desired destination path.

        Returns:
            MoveResult: Outcome of the move; failures are reported, not raised.
        """
        source_path = Path(source)
        destination_path = Path(destination)
        if not source_path.exists():
            return MoveResult(success=False, error=f"Source file does not exist: {source_path}")
        if source_path == destination_path:
            return MoveResult(success=True, final_path=os.fspath(destination_path))

        try:
            self._ensure_folder(destination_path.parent)
            final_path = available_path(destination_path)
            shutil.move(os.fspath(source_path), os.fspath(final_path))
        except OSError as exc:
            LOGGER.warning("Failed to move %s to %s: %s", source_path, destination_path, exc)
            return MoveResult(success=False, error=str(exc))

        LOGGER.debug("Moved %s to %s", source_path, final_path)
        return MoveResult(success=True, final_path=os.fspath(final_path))

    def _ensure_folder(self, folder: Path) -> None:
        self.cache.ensure(os.fspath(folder.resolve()), partial(self._create_folder, folder))

    def _create_folder(self, folder: Path) -> str:
        if not folder.is_dir():
            if not self.create_missing_folders:
                raise FileNotFoundError(f"Destination folder does not exist: {folder}")
            folder.mkdir(parents=True, exist_ok=True)
        return os.fspath(folder)


class DriveFileMover:
    """Move drive files by reparenting them, creating folders on demand.

    Paths are interpreted relative to the drive root; a leading ``My Drive``
    segment is accepted and ignored.
    """

    def __init__(
        self,
        client: DriveClient,
        *,
        root_id: str = DRIVE_ROOT_ID,
        root_name: str = DRIVE_ROOT_NAME,
        cache: Optional[FolderCache] = None,
    ) -> None:
        self.client = client
        self.root_id = root_id
        self.root_name = root_name
        self.cache = cache or FolderCache()

    def execute(self, change: ProposedChange) -> MoveResult:
        return self.move(change.file, change.proposed_path)

    def move(self, file: FileRecord, destination: str) -> MoveResult:
        """Reparent ``file`` into the folder of ``destination``.

        Args:
            file: Drive record to move; ``parent_path`` locates its current folder.
            destination: Desired drive path including the file name.

        Returns:
            MoveResult: Outcome of the move; failures are reported, not raised.
        """
        new_name = basename(destination)
        try:
            current_parent_id = self.resolve_folder(file.parent_path, create=False)
            new_parent_id = self.resolve_folder(dirname(destination))
        except (LookupError, OSError) as exc:
            LOGGER.warning("Failed to resolve drive folders for %s: %s", file.path, exc)
            return MoveResult(success=False, error=str(exc))

        result = self.client.move_file(
            file_id=file.id,
            current_parent_id=current_parent_id,
            new_parent_id=new_parent_id,
            new_name=new_name if new_name != file.name else None,
        )
        if not result.success:
            return MoveResult(success=False, error=result.error or "Drive move failed")
        return MoveResult(success=True, final_path=normalize_separators(destination))

    def resolve_folder(self, path: str, *, create: bool = True) -> str:
        """Return the folder id for ``path``.

        Args:
            path: Drive folder path.
            create: Create missing folders instead of failing.

        Returns:
            str: Folder identifier.

        Raises:
            LookupError: If a folder is missing and ``create`` is false.
        """
        folder_id = self.root_id
        segments = self._segments(path)
        for index, segment in enumerate(segments):
            key = "/".join(segments[: index + 1])
            folder_id = self.cache.ensure(
                key, partial(self._find_folder, segment, folder_id, create)
            )
        return folder_id

    def _find_folder(self, name: str, parent_id: str, create: bool) -> str:
        folder = self.client.find_folder(name, parent_id)
        if folder is not None:
            return folder.id
        if not create:
            raise LookupError(f"Drive folder {name!r} not found under {parent_id}")
        LOGGER.info("Creating drive folder %s under %s", name, parent_id)
        return self.client.create_folder(name, parent_id).id

    def _segments(self, path: str) -> list[str]:
        segments = [part for part in normalize_separators(path).split("/") if part and part != "."]
        if segments and segments[0] == self.root_name:
            segments = segments[1:]
        return segments


__all__ = ["DriveFileMover", "FileMover", "LocalFileMover", "available_path"]
