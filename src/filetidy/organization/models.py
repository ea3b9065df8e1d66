"""Execution result data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from filetidy.rules.models import ChangeStatus, FileSource, ProposedChange


class MoveResult(BaseModel):
    """Outcome of moving a single file.

    Attributes:
        success: Whether the file reached its destination.
        error: Failure description when ``success`` is false.
        final_path: Destination actually used, which may carry a conflict suffix.
    """

    success: bool
    error: Optional[str] = None
    final_path: Optional[str] = None


class OperationLogEntry(BaseModel):
    """History record for an attempted change.

    Attributes:
        timestamp: When the change was attempted.
        operation: ``rename`` when the parent folder is unchanged, else ``move``.
        source: Path before the change.
        destination: Path the file ended up at, or the proposed path on failure.
        source_kind: File source of the record.
        rule_id: Identifier of the rule or suggestion that produced the change.
        rule_name: Rule name or suggestion description.
        status: Final status of the change.
        error: Failure description, if any.
    """

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: Literal["move", "rename"]
    source: str
    destination: str
    source_kind: FileSource = "local"
    rule_id: str
    rule_name: str
    status: ChangeStatus
    error: Optional[str] = None


class ApplyReport(BaseModel):
    """Summary of a batch execution."""

    changes: List[ProposedChange] = Field(default_factory=list)
    entries: List[OperationLogEntry] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        """Return the number of successful changes."""
        return sum(1 for change in self.changes if change.status == "success")

    @property
    def failed(self) -> int:
        """Return the number of failed changes."""
        return sum(1 for change in self.changes if change.status == "error")

    @property
    def skipped(self) -> int:
        """Return the number of changes that were not attempted."""
        return sum(1 for change in self.changes if change.status == "skipped")


__all__ = ["ApplyReport", "MoveResult", "OperationLogEntry"]
