"""Tests for local moves and change execution."""

from __future__ import annotations

import threading
from pathlib import Path

from filetidy.organization import (
    ChangeExecutor,
    FolderCache,
    LocalFileMover,
    MoveResult,
)
from filetidy.organization.movers import available_path
from filetidy.rules import FileRecord, ProposedChange


def _change(source: Path, destination: Path, **overrides: object) -> ProposedChange:
    change = ProposedChange.for_file(
        FileRecord.from_path(source),
        str(destination),
        matched_rule="Documents",
        matched_rule_id="docs",
    )
    for key, value in overrides.items():
        setattr(change, key, value)
    return change


def test_available_path_appends_counter(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("1", encoding="utf-8")
    (tmp_path / "a_1.txt").write_text("2", encoding="utf-8")

    assert available_path(tmp_path / "b.txt") == tmp_path / "b.txt"
    assert available_path(tmp_path / "a.txt") == tmp_path / "a_2.txt"


def test_local_mover_creates_folders_and_avoids_overwrites(tmp_path: Path) -> None:
    source = tmp_path / "report.pdf"
    source.write_text("new", encoding="utf-8")
    target_dir = tmp_path / "Documents" / "2024"
    target_dir.mkdir(parents=True)
    (target_dir / "report.pdf").write_text("old", encoding="utf-8")

    result = LocalFileMover().move(source, target_dir / "report.pdf")

    assert result.success
    assert result.final_path == str(target_dir / "report_1.pdf")
    assert (target_dir / "report.pdf").read_text(encoding="utf-8") == "old"
    assert (target_dir / "report_1.pdf").read_text(encoding="utf-8") == "new"
    assert not source.exists()


def test_local_mover_reports_missing_source(tmp_path: Path) -> None:
    result = LocalFileMover().move(tmp_path / "missing.txt", tmp_path / "out" / "missing.txt")

    assert not result.success
    assert "does not exist" in (result.error or "")
    assert not (tmp_path / "out").exists()


def test_local_mover_can_refuse_to_create_folders(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("x", encoding="utf-8")
    mover = LocalFileMover(create_missing_folders=False)

    result = mover.move(source, tmp_path / "nope" / "a.txt")

    assert not result.success
    assert source.exists()
    assert len(mover.cache) == 0


def test_folder_cache_creates_once_under_concurrency() -> None:
    cache = FolderCache()
    calls: list[int] = []
    barrier = threading.Barrier(8)

    def _create() -> str:
        calls.append(1)
        return "folder-id"

    def _worker() -> None:
        barrier.wait()
        cache.ensure("Documents/2024", _create)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert calls == [1]
    assert "Documents/2024" in cache
    cache.clear()
    assert len(cache) == 0


def test_executor_applies_selected_changes_and_logs(tmp_path: Path) -> None:
    first = tmp_path / "a.pdf"
    second = tmp_path / "b.pdf"
    skipped = tmp_path / "c.pdf"
    for path in (first, second, skipped):
        path.write_text(path.name, encoding="utf-8")

    changes = [
        _change(first, tmp_path / "Documents" / "a.pdf"),
        _change(second, tmp_path / "renamed.pdf"),
        _change(skipped, tmp_path / "Documents" / "c.pdf", selected=False),
    ]

    report = ChangeExecutor(LocalFileMover()).apply(changes)

    assert [change.status for change in changes] == ["success", "success", "skipped"]
    assert (report.succeeded, report.failed, report.skipped) == (2, 0, 1)
    assert (tmp_path / "Documents" / "a.pdf").exists()
    assert (tmp_path / "renamed.pdf").exists()
    assert skipped.exists()
    assert changes[0].final_path == str(tmp_path / "Documents" / "a.pdf")
    assert [entry.operation for entry in report.entries] == ["move", "rename"]
    assert report.entries[0].rule_id == "docs"
    assert report.entries[0].source == str(first)


def test_executor_continues_after_failures(tmp_path: Path) -> None:
    present = tmp_path / "present.txt"
    vanished = tmp_path / "vanished.txt"
    present.write_text("x", encoding="utf-8")
    vanished.write_text("x", encoding="utf-8")
    changes = [
        _change(vanished, tmp_path / "out" / "vanished.txt"),
        _change(present, tmp_path / "out" / "present.txt"),
    ]
    vanished.unlink()

    report = ChangeExecutor(LocalFileMover()).apply(changes)

    assert [change.status for change in changes] == ["error", "success"]
    assert changes[0].error_message is not None
    assert report.entries[0].status == "error"
    assert report.entries[0].destination == str(tmp_path / "out" / "vanished.txt")
    assert (tmp_path / "out" / "present.txt").exists()


class _ExplodingMover:
    def execute(self, change: ProposedChange) -> MoveResult:
        raise RuntimeError(f"cannot move {change.current_name}")


def test_executor_turns_mover_exceptions_into_errors(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("x", encoding="utf-8")
    change = _change(source, tmp_path / "b.txt")

    report = ChangeExecutor(_ExplodingMover()).apply([change])

    assert change.status == "error"
    assert change.error_message == "cannot move a.txt"
    assert report.failed == 1


def test_executor_leaves_finished_changes_alone(tmp_path: Path) -> None:
    source = tmp_path / "a.txt"
    source.write_text("x", encoding="utf-8")
    change = _change(source, tmp_path / "b.txt", status="success")

    report = ChangeExecutor(LocalFileMover()).apply([change])

    assert report.entries == []
    assert source.exists()
