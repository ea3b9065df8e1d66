"""Local folder scanning."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from filetidy.rules.models import FileRecord

LOGGER = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when a folder cannot be listed."""


class FolderScanner:
    """Collect file records for a folder tree.

    Directories are reported alongside files so callers can show them; the rule
    engine ignores them.
    """

    def __init__(
        self,
        *,
        include_subdirectories: bool = True,
        max_depth: int = 10,
        include_hidden: bool = True,
        follow_symlinks: bool = False,
    ) -> None:
        self.include_subdirectories = include_subdirectories
        self.max_depth = max_depth if include_subdirectories else 0
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks

    def scan(self, folder: Path) -> list[FileRecord]:
        """Return records for every entry under ``folder``.

        Args:
            folder: Folder to scan.

        Returns:
            list[FileRecord]: Records in directory-walk order.

        Raises:
            ScanError: If ``folder`` itself cannot be listed.
        """
        root = folder.expanduser().resolve()
        records = list(self._walk(root, depth=0))
        LOGGER.info("Scanned %s: %d entries.", root, len(records))
        return records

    def _walk(self, folder: Path, *, depth: int) -> Iterator[FileRecord]:
        try:
            entries = sorted(os.scandir(folder), key=lambda entry: entry.name)
        except OSError as exc:
            if depth == 0:
                raise ScanError(f"Unable to read folder {folder}: {exc}") from exc
            LOGGER.warning("Skipping unreadable folder %s: %s", folder, exc)
            return

        for entry in entries:
            if not self.include_hidden and entry.name.startswith("."):
                continue
            if entry.is_symlink() and not self.follow_symlinks:
                continue
            path = Path(entry.path)
            try:
                record = FileRecord.from_path(path, follow_symlinks=self.follow_symlinks)
            except OSError as exc:
                LOGGER.warning("Could not access %s: %s", path, exc)
                continue
            yield record

            if record.is_directory and depth < self.max_depth:
                yield from self._walk(path, depth=depth + 1)


def scan_folder(
    path: Path | str,
    *,
    include_subdirectories: bool = True,
    include_hidden: bool = True,
) -> list[FileRecord]:
    """Scan ``path`` with default depth limits."""
    scanner = FolderScanner(
        include_subdirectories=include_subdirectories,
        include_hidden=include_hidden,
    )
    return scanner.scan(Path(path))


__all__ = ["FolderScanner", "ScanError", "scan_folder"]
