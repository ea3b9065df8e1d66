"""Rule engine data models."""

from __future__ import annotations

import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .paths import basename, dirname, extname, normalize_separators

FileSource = Literal["local", "drive"]
RuleScope = Literal["local", "drive", "both"]
ConditionType = Literal["extension", "category", "size", "age", "path", "name"]
ConditionOperator = Literal[
    "in",
    "notIn",
    "equals",
    "notEquals",
    "contains",
    "startsWith",
    "endsWith",
    "gt",
    "lt",
    "gte",
    "lte",
]
ConditionValue = Union[List[str], int, float, str]
ActionType = Literal["move", "moveByDate", "moveByCategory", "rename"]
ChangeStatus = Literal["pending", "success", "error", "skipped"]

DEFAULT_MIME_TYPE = "application/octet-stream"


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RuleBaseModel(BaseModel):
    """Shared configuration for rule engine models.

    Field names are snake_case; camelCase aliases are accepted on input so rule
    files exported by the desktop application load without conversion.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FileRecord(RuleBaseModel):
    """Immutable snapshot of a file or directory from any source.

    Attributes:
        id: Identifier that is stable for the duration of a session.
        source: Where the record was listed from (``local`` or ``drive``).
        path: Full path of the entry.
        name: File name including its extension.
        extension: Lower-cased extension with leading dot, or empty.
        parent_path: Path of the containing folder.
        size: Size in bytes.
        created_time: Creation timestamp.
        modified_time: Last modification timestamp.
        mime_type: MIME type reported by the source.
        is_directory: Whether the entry is a folder.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    source: FileSource = "local"
    path: str
    name: str
    extension: str = ""
    parent_path: str
    size: int = Field(default=0, ge=0)
    created_time: datetime = Field(default_factory=_utcnow)
    modified_time: datetime = Field(default_factory=_utcnow)
    mime_type: str = DEFAULT_MIME_TYPE
    is_directory: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_location(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = dict(data)
        path = values.get("path")
        if isinstance(path, str):
            path = normalize_separators(path)
            values["path"] = path
            if not (values.get("name")):
                values["name"] = basename(path)
            if not (values.get("parent_path") or values.get("parentPath")):
                values["parent_path"] = dirname(path)
        name = values.get("name")
        if isinstance(name, str) and values.get("extension") is None:
            values["extension"] = extname(name)
        return values

    @field_validator("extension")
    @classmethod
    def _lower_extension(cls, value: str) -> str:
        return value.lower()

    def relocated(self, path: str) -> FileRecord:
        """Return a copy of the record located at ``path``."""
        name = basename(path)
        return self.model_copy(
            update={
                "path": normalize_separators(path),
                "name": name,
                "parent_path": dirname(path),
                "extension": extname(name).lower(),
            }
        )

    @classmethod
    def from_path(
        cls,
        path: Path,
        *,
        source: FileSource = "local",
        record_id: Optional[str] = None,
        follow_symlinks: bool = True,
    ) -> FileRecord:
        """Build a record from a filesystem entry.

        Args:
            path: Filesystem path to describe.
            source: Source tag to assign.
            record_id: Optional identifier; a random one is generated otherwise.
            follow_symlinks: Whether to stat the symlink target.

        Returns:
            FileRecord: Snapshot of the entry's metadata.

        Raises:
            OSError: If the entry cannot be stat'ed.
        """
        stat = path.stat(follow_symlinks=follow_symlinks)
        is_directory = path.is_dir()
        created_ts = getattr(stat, "st_birthtime", None) or stat.st_ctime
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            id=record_id or _new_id(),
            source=source,
            path=os.fspath(path),
            name=path.name,
            parent_path=os.fspath(path.parent),
            size=stat.st_size,
            created_time=datetime.fromtimestamp(created_ts).astimezone(),
            modified_time=datetime.fromtimestamp(stat.st_mtime).astimezone(),
            mime_type=mime_type or DEFAULT_MIME_TYPE,
            is_directory=is_directory,
        )


class Condition(RuleBaseModel):
    """Single predicate evaluated against a file.

    Attributes:
        id: Identifier of the condition within its rule.
        type: File attribute under test. Unknown types are kept as written and
            never match.
        operator: Comparison operator; its validity depends on ``type``.
        value: Scalar or list operand interpreted per type/operator.
    """

    id: str = Field(default_factory=_new_id)
    type: Union[ConditionType, str]
    operator: Union[ConditionOperator, str]
    value: ConditionValue = ""


class ActionParams(RuleBaseModel):
    """Parameters consumed by actions.

    Attributes:
        target_folder: Absolute or relative destination folder.
        date_format: Folder pattern for date moves, e.g. ``YYYY/MM``.
        rename_pattern: Template using ``{name}``, ``{ext}``, ``{date}``,
            ``{category}`` and ``{size}`` placeholders.
        create_if_not_exists: Advisory flag for the executor.
    """

    target_folder: Optional[str] = None
    date_format: Optional[str] = None
    rename_pattern: Optional[str] = None
    create_if_not_exists: bool = True


class Action(RuleBaseModel):
    """One transformation step of a rule."""

    id: str = Field(default_factory=_new_id)
    type: ActionType
    params: ActionParams = Field(default_factory=ActionParams)


class Rule(RuleBaseModel):
    """Named bundle of conditions (AND) and sequential actions.

    Attributes:
        id: Unique rule identifier.
        name: Human-readable rule name.
        description: Free-form description.
        conditions: Conditions that must all match.
        actions: Actions applied in order when the conditions match.
        scope: File sources the rule applies to.
        enabled: Whether the rule participates in evaluation.
        priority: Evaluation order; lower values are evaluated first.
        created_at: Creation timestamp.
        updated_at: Last modification timestamp.
    """

    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    conditions: List[Condition] = Field(default_factory=list)
    actions: List[Action] = Field(default_factory=list)
    scope: RuleScope = "both"
    enabled: bool = True
    priority: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ProposedChange(RuleBaseModel):
    """Not-yet-executed move or rename of a single file.

    Attributes:
        file: Record the change applies to.
        current_path: Path before the change.
        current_name: Name before the change.
        proposed_path: Path after the change.
        proposed_name: Name after the change.
        matched_rule: Rule name, or a description for generated suggestions.
        matched_rule_id: Rule identifier, or ``ai-suggestion``.
        selected: Whether the change should be executed.
        status: Execution status.
        error_message: Failure description when ``status`` is ``error``.
        final_path: Destination actually used by the executor.
    """

    model_config = ConfigDict(validate_assignment=True)

    file: FileRecord
    current_path: str
    current_name: str
    proposed_path: str
    proposed_name: str
    matched_rule: str
    matched_rule_id: str
    selected: bool = True
    status: ChangeStatus = "pending"
    error_message: Optional[str] = None
    final_path: Optional[str] = None

    @classmethod
    def for_file(
        cls,
        file: FileRecord,
        proposed_path: str,
        *,
        matched_rule: str,
        matched_rule_id: str,
        selected: bool = True,
    ) -> ProposedChange:
        """Create a pending change moving ``file`` to ``proposed_path``."""
        return cls(
            file=file,
            current_path=file.path,
            current_name=file.name,
            proposed_path=proposed_path,
            proposed_name=basename(proposed_path),
            matched_rule=matched_rule,
            matched_rule_id=matched_rule_id,
            selected=selected,
        )


__all__ = [
    "Action",
    "ActionParams",
    "ActionType",
    "ChangeStatus",
    "Condition",
    "ConditionOperator",
    "ConditionType",
    "ConditionValue",
    "DEFAULT_MIME_TYPE",
    "FileRecord",
    "FileSource",
    "ProposedChange",
    "Rule",
    "RuleBaseModel",
    "RuleScope",
]
