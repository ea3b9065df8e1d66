"""Operation history persistence."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from pydantic import ValidationError

from .errors import HistoryError
from .models import OperationLogEntry

HISTORY_FILENAME = "history.jsonl"


class HistoryRepository:
    """Append and read operation log entries stored as JSON lines."""

    def __init__(self, state_dir: Path) -> None:
        """Initialize the repository.

        Args:
            state_dir: Directory holding filetidy state files.
        """
        self._path = state_dir.expanduser() / HISTORY_FILENAME

    @property
    def path(self) -> Path:
        """Return the history file path."""
        return self._path

    def append(self, entries: Iterable[OperationLogEntry]) -> int:
        """Append ``entries`` to the history file.

        Returns:
            int: Number of entries written.
        """
        lines = [entry.model_dump_json() for entry in entries]
        if not lines:
            return 0
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            for line in lines:
                handle.write(line + "\n")
        return len(lines)

    def read(self, limit: int | None = None) -> list[OperationLogEntry]:
        """Return recorded entries, oldest first.

        Args:
            limit: Only return the most recent ``limit`` entries.

        Raises:
            HistoryError: If a stored line cannot be parsed.
        """
        if not self._path.exists():
            return []

        entries: list[OperationLogEntry] = []
        with self._path.open(encoding="utf-8") as handle:
            for number, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    entries.append(OperationLogEntry.model_validate_json(line))
                except ValidationError as exc:
                    raise HistoryError(
                        f"Invalid history entry on line {number} of {self._path}: {exc}"
                    ) from exc

        if limit is not None:
            return entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        """Delete the history file."""
        if self._path.exists():
            self._path.unlink()


__all__ = ["HISTORY_FILENAME", "HistoryRepository"]
