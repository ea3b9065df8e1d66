"""Suggestion provider interface and composition helpers.

Providers turn scanned file records into a :class:`SuggestionBatch`. The
heuristic suggester is the built-in provider; other backends (for example a
language model service) implement the same protocol and can be chained in
front of it with :class:`FallbackSuggestionProvider`.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Optional, Protocol, Sequence, runtime_checkable

from filetidy.rules.models import FileRecord

from .errors import SuggestionProviderError
from .models import Suggestion, SuggestionBatch, SuggestionMode

LOGGER = logging.getLogger(__name__)

ProgressStatus = Literal["analyzing", "complete", "cancelled"]


@dataclass(frozen=True)
class SuggestionProgress:
    """Progress notification emitted after each analyzed batch.

    Attributes:
        current: Number of files analyzed so far.
        total: Number of files in the run.
        status: ``analyzing`` while batches remain, then ``complete`` or
            ``cancelled``.
    """

    current: int
    total: int
    status: ProgressStatus


ProgressCallback = Callable[[SuggestionProgress], None]


@runtime_checkable
class SuggestionProvider(Protocol):
    """Anything that can suggest destinations for a set of files."""

    name: str

    def suggest(
        self,
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode = "smart",
        *,
        now: Optional[datetime] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SuggestionBatch:
        """Return suggestions for ``files`` placed under ``base_folder``."""
        ...

    def cancel(self) -> None:
        """Stop the run in progress; partial results are returned as cancelled."""
        ...


class BatchedSuggestionProvider:
    """Base provider that analyzes files in fixed-size batches.

    Subclasses implement :meth:`analyze_batch` and may override
    :meth:`finalize` to add run-wide results such as duplicate detection.
    :meth:`cancel` may be called from another thread or from a progress
    callback; it takes effect before the next batch starts.
    """

    name = "batched"
    batch_size = 25

    def __init__(self, *, batch_size: Optional[int] = None) -> None:
        if batch_size is not None:
            if batch_size < 1:
                raise ValueError("batch_size must be at least 1.")
            self.batch_size = batch_size
        self._cancel_event = threading.Event()

    @property
    def cancel_requested(self) -> bool:
        """Return whether the current run has been asked to stop."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request the run in progress to stop after the current batch."""
        LOGGER.info("Cancelling %s suggestions.", self.name)
        self._cancel_event.set()

    def suggest(
        self,
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode = "smart",
        *,
        now: Optional[datetime] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SuggestionBatch:
        """Generate suggestions for ``files``.

        Args:
            files: Records to organize; directories are ignored.
            base_folder: Folder suggested paths are placed under.
            mode: ``quick`` or ``smart``.
            now: Reference time for age annotations (defaults to the current time).
            on_progress: Called after every batch and once when the run ends.

        Returns:
            SuggestionBatch: Suggestions for the analyzed files. ``cancelled``
            is set when the run stopped early.
        """
        self._cancel_event.clear()
        started = time.perf_counter()
        candidates = [file for file in files if not file.is_directory]
        total = len(candidates)

        suggestions: list[Suggestion] = []
        processed = 0
        while processed < total and not self._cancel_event.is_set():
            chunk = candidates[processed : processed + self.batch_size]
            suggestions.extend(self.analyze_batch(chunk, base_folder, mode))
            processed += len(chunk)
            _notify(on_progress, SuggestionProgress(processed, total, "analyzing"))

        cancelled = processed < total
        if cancelled:
            LOGGER.warning(
                "%s suggestions cancelled after %d of %d files.", self.name, processed, total
            )

        batch = self.finalize(suggestions, candidates[:processed], base_folder, mode, now=now)
        batch.files_processed = processed
        batch.processing_time_ms = (time.perf_counter() - started) * 1000
        batch.cancelled = cancelled
        _notify(
            on_progress,
            SuggestionProgress(processed, total, "cancelled" if cancelled else "complete"),
        )
        return batch

    def analyze_batch(
        self,
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode,
    ) -> list[Suggestion]:
        """Return suggestions for one batch of files."""
        raise NotImplementedError

    def finalize(
        self,
        suggestions: list[Suggestion],
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode,
        *,
        now: Optional[datetime] = None,
    ) -> SuggestionBatch:
        """Build the batch result from the per-file suggestions."""
        return SuggestionBatch(mode=mode, suggestions=suggestions)


class FallbackSuggestionProvider:
    """Use ``primary`` and fall back to ``fallback`` when it fails or finds nothing.

    A cancelled primary run is returned as is; the fallback is only consulted
    for errors raised as :class:`SuggestionProviderError` and for runs that
    produced no suggestions.
    """

    def __init__(self, primary: SuggestionProvider, fallback: SuggestionProvider) -> None:
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    def suggest(
        self,
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode = "smart",
        *,
        now: Optional[datetime] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SuggestionBatch:
        try:
            batch = self.primary.suggest(
                files, base_folder, mode, now=now, on_progress=on_progress
            )
        except SuggestionProviderError as exc:
            LOGGER.warning(
                "%s suggestions failed (%s); using %s instead.",
                self.primary.name,
                exc,
                self.fallback.name,
            )
        else:
            if batch.cancelled or batch.suggestions:
                return batch
            LOGGER.info(
                "%s returned no suggestions; using %s instead.",
                self.primary.name,
                self.fallback.name,
            )
        return self.fallback.suggest(files, base_folder, mode, now=now, on_progress=on_progress)

    def cancel(self) -> None:
        self.primary.cancel()
        self.fallback.cancel()


def _notify(callback: Optional[ProgressCallback], progress: SuggestionProgress) -> None:
    if callback is not None:
        callback(progress)


__all__ = [
    "BatchedSuggestionProvider",
    "FallbackSuggestionProvider",
    "ProgressCallback",
    "SuggestionProgress",
    "SuggestionProvider",
]
