"""Tests for the operation history log."""

from __future__ import annotations

from pathlib import Path

import pytest

from filetidy.organization import HistoryError, HistoryRepository, OperationLogEntry


def _entry(index: int, **overrides: object) -> OperationLogEntry:
    data: dict[str, object] = {
        "operation": "move",
        "source": f"/in/file{index}.txt",
        "destination": f"/out/file{index}.txt",
        "rule_id": "r1",
        "rule_name": "Rule one",
        "status": "success",
    }
    data.update(overrides)
    return OperationLogEntry.model_validate(data)


def test_append_and_read_preserve_order(tmp_path: Path) -> None:
    repository = HistoryRepository(tmp_path / "state")

    assert repository.read() == []
    assert repository.append([_entry(1), _entry(2)]) == 2
    assert repository.append([_entry(3, status="error", error="boom")]) == 1
    assert repository.append([]) == 0

    entries = repository.read()
    assert [entry.source for entry in entries] == [
        "/in/file1.txt",
        "/in/file2.txt",
        "/in/file3.txt",
    ]
    assert entries[-1].error == "boom"
    assert [entry.source for entry in repository.read(limit=2)] == [
        "/in/file2.txt",
        "/in/file3.txt",
    ]
    assert repository.read(limit=0) == []


def test_invalid_lines_raise_history_error(tmp_path: Path) -> None:
    repository = HistoryRepository(tmp_path)
    repository.append([_entry(1)])
    with repository.path.open("a", encoding="utf-8") as handle:
        handle.write("{not json}\n")

    with pytest.raises(HistoryError):
        repository.read()


def test_clear_removes_history(tmp_path: Path) -> None:
    repository = HistoryRepository(tmp_path)
    repository.append([_entry(1)])

    repository.clear()

    assert not repository.path.exists()
    assert repository.read() == []
