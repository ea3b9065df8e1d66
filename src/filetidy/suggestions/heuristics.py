"""Heuristic organization suggestions.

Two modes are available:

* ``quick`` matches file names against well-known patterns (screenshots,
  invoices, camera photos, ...) and falls back to a category folder laid out
  according to the organization style.
* ``smart`` additionally groups likely duplicates, proposes cleaner file names,
  and annotates suggestions with file age and duplicate markers.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from filetidy.rules.actions import MONTH_NAMES
from filetidy.rules.categories import get_file_category
from filetidy.rules.models import FileRecord, ProposedChange
from filetidy.rules.paths import dirname, join, normalize_separators
from filetidy.rules.timestamps import as_utc

from .models import (
    DuplicateGroup,
    OrganizationStyle,
    RenameSuggestion,
    Suggestion,
    SuggestionBatch,
    SuggestionMode,
)
from .patterns import (
    DEFAULT_CATEGORY_FOLDERS,
    ORGANIZED_PATH_PATTERNS,
    RENAME_PATTERNS,
    SMART_PATTERNS,
    SmartPattern,
)
from .providers import BatchedSuggestionProvider, ProgressCallback, SuggestionProvider

LOGGER = logging.getLogger(__name__)

SUGGESTION_RULE_ID = "ai-suggestion"
PATTERN_CONFIDENCE = 0.85
CATEGORY_CONFIDENCE = 0.7

_COPY_NUMBER = re.compile(r"\s*\(\d+\)\s*")
_COPY_WORD = re.compile(r"\s+copy\s*", re.IGNORECASE)
_SECONDS_PER_DAY = 86_400


class HeuristicSuggester(BatchedSuggestionProvider):
    """Suggest destinations for files without any user-defined rules."""

    name = "heuristic"

    def __init__(
        self,
        *,
        style: OrganizationStyle = "by-category",
        old_threshold_days: int = 90,
        batch_size: Optional[int] = None,
    ) -> None:
        super().__init__(batch_size=batch_size)
        self.style = style
        self.old_threshold_days = old_threshold_days

    def analyze_batch(
        self,
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode,
    ) -> list[Suggestion]:
        return [
            suggestion
            for suggestion in (self._suggest_one(file, base_folder) for file in files)
            if suggestion is not None
        ]

    def finalize(
        self,
        suggestions: list[Suggestion],
        files: Sequence[FileRecord],
        base_folder: str,
        mode: SuggestionMode,
        *,
        now: Optional[datetime] = None,
    ) -> SuggestionBatch:
        """Add duplicate groups, renames and annotations in ``smart`` mode.

        Args:
            suggestions: Per-file suggestions for the analyzed files.
            files: Files that were analyzed.
            base_folder: Folder suggested paths are placed under.
            mode: ``quick`` or ``smart``.
            now: Reference time for age annotations (defaults to the current time).

        Returns:
            SuggestionBatch: Suggestions plus duplicate groups and renames.
        """
        duplicates: list[DuplicateGroup] = []
        renames: list[RenameSuggestion] = []
        if mode == "smart":
            duplicates = detect_duplicates(files)
            renames = suggest_renames(files)
            suggestions = self._annotate(suggestions, files, duplicates, now=now)

        LOGGER.info(
            "Generated %d suggestions for %d files (%s mode).",
            len(suggestions),
            len(files),
            mode,
        )
        return SuggestionBatch(
            mode=mode,
            suggestions=suggestions,
            duplicates=duplicates,
            renames=renames,
        )

    # ---- #  Quick mode  # ---- #

    def _suggest_one(self, file: FileRecord, base_folder: str) -> Optional[Suggestion]:
        if is_already_organized(file.path):
            return None

        pattern = match_smart_pattern(file.name)
        if pattern is not None:
            return Suggestion(
                file_id=file.id,
                original_path=file.path,
                proposed_path=join(base_folder, pattern.folder, file.name),
                reason=pattern.reason,
                confidence=PATTERN_CONFIDENCE,
                category=pattern.folder.split("/")[0],
                source="pattern",
            )

        category = get_file_category(file.extension)
        return Suggestion(
            file_id=file.id,
            original_path=file.path,
            proposed_path=join(base_folder, self._style_folder(file, category), file.name),
            reason=f"Organized {self.style.replace('-', ' ', 1)} ({category})",
            confidence=CATEGORY_CONFIDENCE,
            category=category,
            source="heuristic",
        )

    def _style_folder(self, file: FileRecord, category: str) -> str:
        if self.style == "flat":
            return ""
        if self.style == "by-date":
            moment = file.modified_time
            return f"{moment.year}/{MONTH_NAMES[moment.month - 1]}/{category}"
        if self.style == "by-type":
            extension = file.extension.lstrip(".").upper() or "Other"
            return f"{category}/{extension}"
        return DEFAULT_CATEGORY_FOLDERS.get(category, DEFAULT_CATEGORY_FOLDERS["other"])

    # ---- #  Smart mode  # ---- #

    def _annotate(
        self,
        suggestions: list[Suggestion],
        files: Sequence[FileRecord],
        duplicates: Sequence[DuplicateGroup],
        *,
        now: Optional[datetime],
    ) -> list[Suggestion]:
        reference = as_utc(now or datetime.now(timezone.utc))
        by_id = {file.id: file for file in files}
        kept_by_duplicate: dict[str, str] = {}
        for group in duplicates:
            for file_id in group.file_ids:
                if file_id != group.suggested_keep_id:
                    kept_by_duplicate[file_id] = group.suggested_keep_id

        annotated: list[Suggestion] = []
        for suggestion in suggestions:
            reason = suggestion.reason
            file = by_id.get(suggestion.file_id)
            if file is not None:
                days_old = math.floor(
                    (reference - as_utc(file.modified_time)).total_seconds() / _SECONDS_PER_DAY
                )
                if days_old > self.old_threshold_days:
                    reason = f"{reason} ({days_old} days old)"

            keep_id = kept_by_duplicate.get(suggestion.file_id)
            if keep_id is not None:
                reason = f"{reason} [DUPLICATE]"

            annotated.append(
                suggestion.model_copy(
                    update={
                        "reason": reason,
                        "is_duplicate": keep_id is not None,
                        "duplicate_of_id": keep_id,
                    }
                )
            )
        return annotated


def is_already_organized(path: str) -> bool:
    """Return whether ``path`` already looks like an organized location."""
    return any(pattern.search(path) for pattern in ORGANIZED_PATH_PATTERNS)


def match_smart_pattern(filename: str) -> Optional[SmartPattern]:
    """Return the highest-priority pattern matching ``filename``."""
    for pattern in SMART_PATTERNS:
        if pattern.pattern.search(filename):
            return pattern
    return None


def detect_duplicates(files: Iterable[FileRecord]) -> list[DuplicateGroup]:
    """Group files with the same non-zero size and the same normalized name.

    Names are compared after dropping a ``(n)`` counter and a ``copy`` suffix.
    Within a group the oldest file by modification time is suggested for keeping.
    """
    groups: dict[tuple[int, str], list[FileRecord]] = {}
    for file in files:
        if file.size <= 0:
            continue
        key = (file.size, _duplicate_key(file.name))
        groups.setdefault(key, []).append(file)

    result: list[DuplicateGroup] = []
    for similar in groups.values():
        if len(similar) < 2:
            continue
        ordered = sorted(similar, key=lambda item: as_utc(item.modified_time))
        result.append(
            DuplicateGroup(
                group_id=f"dup-{len(result)}",
                file_ids=[file.id for file in ordered],
                suggested_keep_id=ordered[0].id,
                reason=f"{len(similar)} files with same size and similar name",
            )
        )
    return result


def suggest_renames(files: Iterable[FileRecord]) -> list[RenameSuggestion]:
    """Propose cleaner names; the first applicable cleanup pattern wins.

    Patterns operate on the name without its extension, which is re-attached.
    """
    suggestions: list[RenameSuggestion] = []
    for file in files:
        stem = file.name[: len(file.name) - len(file.extension)] if file.extension else file.name
        suffix = file.name[len(stem) :]
        for rename in RENAME_PATTERNS:
            match = rename.pattern.search(stem)
            if match is None:
                continue
            new_stem = rename.transform(match, stem).strip()
            if new_stem and new_stem != stem:
                suggestions.append(
                    RenameSuggestion(
                        file_id=file.id,
                        current_name=file.name,
                        suggested_name=f"{new_stem}{suffix}",
                        reason=rename.reason,
                        pattern=rename.pattern.pattern,
                    )
                )
                break
    return suggestions


def suggestions_to_changes(
    batch: SuggestionBatch,
    files: Iterable[FileRecord],
    *,
    include_renames: bool = False,
) -> list[ProposedChange]:
    """Convert a suggestion batch into proposed changes for preview and execution.

    Args:
        batch: Output of :meth:`HeuristicSuggester.suggest`.
        files: Records the batch was generated for.
        include_renames: Apply suggested renames to the proposed file names.

    Returns:
        list[ProposedChange]: One change per suggestion that actually relocates
        its file.
    """
    by_id = {file.id: file for file in files}
    renames = {rename.file_id: rename for rename in batch.renames} if include_renames else {}

    changes: list[ProposedChange] = []
    for suggestion in batch.suggestions:
        file = by_id.get(suggestion.file_id)
        if file is None:
            LOGGER.debug("Dropping suggestion for unknown file %s", suggestion.file_id)
            continue

        proposed_path = normalize_separators(suggestion.proposed_path)
        rename = renames.get(file.id)
        if rename is not None:
            proposed_path = join(dirname(proposed_path), rename.suggested_name)
        if proposed_path == file.path:
            continue

        changes.append(
            ProposedChange.for_file(
                file,
                proposed_path,
                matched_rule=f"AI ({suggestion.source}): {suggestion.reason}",
                matched_rule_id=SUGGESTION_RULE_ID,
                selected=suggestion.selected,
            )
        )
    return changes


def propose_changes(
    provider: SuggestionProvider,
    files: Sequence[FileRecord],
    base_folder: str,
    mode: SuggestionMode = "smart",
    *,
    include_renames: bool = False,
    now: Optional[datetime] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> tuple[SuggestionBatch, list[ProposedChange]]:
    """Run ``provider`` and convert its suggestions into proposed changes.

    A cancelled run still yields changes for the files analyzed before the
    cancellation.
    """
    batch = provider.suggest(files, base_folder, mode, now=now, on_progress=on_progress)
    return batch, suggestions_to_changes(batch, files, include_renames=include_renames)


def _duplicate_key(name: str) -> str:
    return _COPY_WORD.sub("", _COPY_NUMBER.sub("", name, count=1), count=1).lower()


__all__ = [
    "HeuristicSuggester",
    "SUGGESTION_RULE_ID",
    "detect_duplicates",
    "is_already_organized",
    "match_smart_pattern",
    "propose_changes",
    "suggest_renames",
    "suggestions_to_changes",
]
