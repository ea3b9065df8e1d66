"""Folder creation bookkeeping shared by the movers."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict

LOGGER = logging.getLogger(__name__)


class FolderCache:
    """Remember folders that exist or were created during a session.

    Lookups and creations happen under a single lock, so a folder is created at
    most once per cache even when several moves target it concurrently.
    """

    def __init__(self) -> None:
        self._folders: Dict[str, str] = {}
        self._lock = threading.Lock()

    def ensure(self, key: str, create: Callable[[], str]) -> str:
        """Return the handle cached for ``key``, calling ``create`` on a miss.

        Args:
            key: Normalized folder path.
            create: Callback that makes sure the folder exists and returns its
                handle (a filesystem path or a drive folder id).

        Returns:
            str: Handle for the folder.
        """
        with self._lock:
            handle = self._folders.get(key)
            if handle is None:
                handle = create()
                self._folders[key] = handle
                LOGGER.debug("Prepared folder %s", key)
            return handle

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._folders

    def __len__(self) -> int:
        with self._lock:
            return len(self._folders)

    def clear(self) -> None:
        """Forget every cached folder."""
        with self._lock:
            self._folders.clear()


__all__ = ["FolderCache"]
