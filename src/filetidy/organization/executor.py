"""Executor for proposed changes."""

from __future__ import annotations

import logging
from typing import Iterable

from filetidy.rules.models import ProposedChange
from filetidy.rules.paths import dirname

from .models import ApplyReport, MoveResult, OperationLogEntry
from .movers import FileMover

LOGGER = logging.getLogger(__name__)


class ChangeExecutor:
    """Apply selected changes one by one through a mover."""

    def __init__(self, mover: FileMover) -> None:
        self._mover = mover

    def apply(self, changes: Iterable[ProposedChange]) -> ApplyReport:
        """Execute every selected pending change.

        Each change is attempted independently: a failure marks that change as
        ``error`` and the batch continues. Unselected pending changes become
        ``skipped``. Statuses are updated on the change objects in place.

        Args:
            changes: Changes produced by a preview or suggestion run.

        Returns:
            ApplyReport: The changes and the history entries for attempted ones.
        """
        report = ApplyReport()
        for change in changes:
            report.changes.append(change)
            if change.status != "pending":
                continue
            if not change.selected:
                change.status = "skipped"
                continue

            result = self._execute(change)
            if result.success:
                change.status = "success"
                change.final_path = result.final_path or change.proposed_path
            else:
                change.status = "error"
                change.error_message = result.error or "Unknown error"
            report.entries.append(self._log_entry(change))

        LOGGER.info(
            "Applied changes: %d succeeded, %d failed, %d skipped.",
            report.succeeded,
            report.failed,
            report.skipped,
        )
        return report

    def _execute(self, change: ProposedChange) -> MoveResult:
        try:
            return self._mover.execute(change)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Change for %s failed: %s", change.current_path, exc)
            return MoveResult(success=False, error=str(exc))

    def _log_entry(self, change: ProposedChange) -> OperationLogEntry:
        destination = change.final_path or change.proposed_path
        operation = "rename" if dirname(change.current_path) == dirname(destination) else "move"
        return OperationLogEntry(
            operation=operation,
            source=change.current_path,
            destination=destination,
            source_kind=change.file.source,
            rule_id=change.matched_rule_id,
            rule_name=change.matched_rule,
            status=change.status,
            error=change.error_message,
        )


__all__ = ["ChangeExecutor"]
