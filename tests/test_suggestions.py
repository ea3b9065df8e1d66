"""Tests for heuristic organization suggestions."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from filetidy.rules import FileRecord
from filetidy.suggestions import (
    SUGGESTION_RULE_ID,
    HeuristicSuggester,
    detect_duplicates,
    is_already_organized,
    match_smart_pattern,
    suggest_renames,
    suggestions_to_changes,
)
from filetidy.suggestions.patterns import SMART_PATTERNS

NOW = datetime(2024, 6, 30, tzinfo=timezone.utc)


def _record(path: str, **overrides: object) -> FileRecord:
    data: dict[str, object] = {
        "path": path,
        "size": 100,
        "modified_time": datetime(2024, 6, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return FileRecord.model_validate(data)


@pytest.mark.parametrize(
    ("name", "folder"),
    [
        ("Screenshot 2024-01-01.png", "Media/Screenshots"),
        ("IMG_20240101_120000.jpg", "Media/Photos/Camera"),
        ("invoice_march.pdf", "Documents/Finance/Invoices"),
        ("whatsapp screenshot.png", "Media/Screenshots"),
        ("passport_scan.pdf", "Documents/Identity"),
    ],
)
def test_match_smart_pattern_prefers_high_priority(name: str, folder: str) -> None:
    pattern = match_smart_pattern(name)

    assert pattern is not None
    assert pattern.folder == folder


def test_smart_patterns_are_sorted_by_priority() -> None:
    priorities = [pattern.priority for pattern in SMART_PATTERNS]

    assert priorities == sorted(priorities, reverse=True)
    assert match_smart_pattern("zzz.pdf") is None


def test_already_organized_paths_are_detected() -> None:
    assert is_already_organized("/home/me/Sorted/a.pdf")
    assert is_already_organized("/home/me/BACKUP-2023/a.pdf")
    assert not is_already_organized("/home/me/Downloads/a.pdf")


def test_quick_mode_uses_patterns_then_categories() -> None:
    files = [
        _record("/in/invoice_march.pdf"),
        _record("/in/zzz.pdf"),
        _record("/in/Organized/zzz.jpg"),
        _record("/in/folder", is_directory=True),
    ]

    batch = HeuristicSuggester().suggest(files, "/home", "quick", now=NOW)

    assert batch.mode == "quick"
    assert batch.files_processed == 3
    assert batch.duplicates == []
    assert batch.renames == []
    pattern, fallback = batch.suggestions
    assert pattern.proposed_path == "/home/Documents/Finance/Invoices/invoice_march.pdf"
    assert pattern.confidence == pytest.approx(0.85)
    assert pattern.category == "Documents"
    assert pattern.source == "pattern"
    assert fallback.proposed_path == "/home/Documents/Organized/zzz.pdf"
    assert fallback.confidence == pytest.approx(0.7)
    assert fallback.category == "documents"
    assert fallback.source == "heuristic"
    assert fallback.reason == "Organized by category (documents)"


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        ("by-category", "/home/Documents/Organized/zzz.pdf"),
        ("by-date", "/home/2024/March/documents/zzz.pdf"),
        ("by-type", "/home/documents/PDF/zzz.pdf"),
        ("flat", "/home/zzz.pdf"),
    ],
)
def test_organization_styles(style: str, expected: str) -> None:
    record = _record("/in/zzz.pdf", modified_time=datetime(2024, 3, 5, tzinfo=timezone.utc))
    suggester = HeuristicSuggester(style=style)  # type: ignore[arg-type]

    (suggestion,) = suggester.suggest([record], "/home", "quick").suggestions

    assert suggestion.proposed_path == expected


def test_by_type_without_extension_uses_other_folder() -> None:
    suggester = HeuristicSuggester(style="by-type")

    (suggestion,) = suggester.suggest([_record("/in/zzzfile")], "/home", "quick").suggestions

    assert suggestion.proposed_path == "/home/other/Other/zzzfile"


def test_detect_duplicates_keeps_oldest_copy() -> None:
    newest = _record("/in/photo.jpg", modified_time=datetime(2024, 1, 5, tzinfo=timezone.utc))
    oldest = _record("/in/photo (1).jpg", modified_time=datetime(2024, 1, 1, tzinfo=timezone.utc))
    middle = _record("/in/photo copy.jpg", modified_time=datetime(2024, 1, 3, tzinfo=timezone.utc))
    other_size = _record("/elsewhere/photo.jpg", size=200)
    empty_a = _record("/in/empty.txt", size=0)
    empty_b = _record("/in/empty (1).txt", size=0)

    (group,) = detect_duplicates([newest, oldest, middle, other_size, empty_a, empty_b])

    assert group.file_ids == [oldest.id, middle.id, newest.id]
    assert group.suggested_keep_id == oldest.id
    assert group.reason == "3 files with same size and similar name"


@pytest.mark.parametrize(
    ("name", "suggested"),
    [
        ("IMG_20240101_120000.jpg", "Photo_2024-01-01_1200.jpg"),
        ("IMG-20240102-WA0003.jpg", "WhatsApp_2024-01-02.jpg"),
        ("report (2).pdf", "report.pdf"),
        ("notes copy.txt", "notes.txt"),
        ("notes_final.txt", "notes.txt"),
        ("a__b.txt", "a_b.txt"),
        ("export-1700000000000.csv", "export.csv"),
    ],
)
def test_suggest_renames_cleans_stem_and_keeps_extension(name: str, suggested: str) -> None:
    (rename,) = suggest_renames([_record(f"/in/{name}")])

    assert rename.current_name == name
    assert rename.suggested_name == suggested


def test_clean_names_are_not_renamed() -> None:
    assert suggest_renames([_record("/in/clean.txt")]) == []


def test_smart_mode_annotates_age_and_duplicates() -> None:
    old = _record("/in/zzz.pdf", modified_time=datetime(2024, 1, 1, tzinfo=timezone.utc))
    copy = _record("/in/zzz (1).pdf", modified_time=datetime(2024, 6, 20, tzinfo=timezone.utc))

    batch = HeuristicSuggester(old_threshold_days=90).suggest([old, copy], "/home", now=NOW)

    assert batch.mode == "smart"
    assert len(batch.duplicates) == 1
    assert [rename.suggested_name for rename in batch.renames] == ["zzz.pdf"]
    kept, duplicate = batch.suggestions
    assert kept.reason == "Organized by category (documents) (181 days old)"
    assert not kept.is_duplicate
    assert duplicate.reason == "Organized by category (documents) [DUPLICATE]"
    assert duplicate.is_duplicate
    assert duplicate.duplicate_of_id == old.id


def test_suggestions_become_pending_changes() -> None:
    files = [_record("/in/invoice_march.pdf"), _record("/in/report (2).pdf")]
    suggester = HeuristicSuggester()
    batch = suggester.suggest(files, "/home", now=NOW)

    plain = suggestions_to_changes(batch, files)
    renamed = suggestions_to_changes(batch, files, include_renames=True)

    assert plain[0].matched_rule_id == SUGGESTION_RULE_ID
    assert plain[0].matched_rule == "AI (pattern): Detected as financial document"
    assert plain[0].status == "pending"
    assert plain[1].proposed_name == "report (2).pdf"
    assert renamed[1].proposed_name == "report.pdf"
    assert renamed[1].proposed_path == "/home/Documents/Reports/report.pdf"


def test_suggestions_that_do_not_move_are_dropped() -> None:
    files = [_record("/home/zzz.pdf")]
    batch = HeuristicSuggester(style="flat").suggest(files, "/home", "quick")

    assert len(batch.suggestions) == 1
    assert suggestions_to_changes(batch, files) == []
