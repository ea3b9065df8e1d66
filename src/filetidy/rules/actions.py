"""Path generators for rule actions.

Every generator is pure: it receives a file record and action parameters and
returns the path the file would end up at. Nothing here touches the
filesystem.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .categories import category_folder, get_file_category
from .models import Action, ActionParams, FileRecord
from .paths import basename, is_absolute, join

LOGGER = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "YYYY/MM"
RENAME_DATE_FORMAT = "YYYY-MM-DD"

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Longer tokens precede their prefixes so YYYY never matches as two YY tokens.
_DATE_TOKENS = re.compile(r"YYYY|YY|MMMM|MMM|MM|M|DD|D")
_PLACEHOLDERS = re.compile(r"\{(name|ext|date|category|size)\}")


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of applying one or more actions to a file.

    Attributes:
        proposed_path: Full path the file would be moved to.
        proposed_name: File name at the proposed path.
    """

    proposed_path: str
    proposed_name: str


def format_date(moment: datetime, pattern: str) -> str:
    """Render ``moment`` using ``YYYY``/``YY``/``MMMM``/``MMM``/``MM``/``M``/``DD``/``D`` tokens.

    Substituted text is never re-scanned, so month names such as ``March`` are
    not altered by the ``M`` token.
    """

    def _render(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "YYYY":
            return f"{moment.year:04d}"
        if token == "YY":
            return f"{moment.year % 100:02d}"
        if token == "MMMM":
            return MONTH_NAMES[moment.month - 1]
        if token == "MMM":
            return MONTH_NAMES[moment.month - 1][:3]
        if token == "MM":
            return f"{moment.month:02d}"
        if token == "M":
            return str(moment.month)
        if token == "DD":
            return f"{moment.day:02d}"
        return str(moment.day)

    return _DATE_TOKENS.sub(_render, pattern)


def apply_rename_pattern(file: FileRecord, pattern: str) -> str:
    """Substitute rename placeholders in ``pattern`` for ``file``.

    Each placeholder is replaced at its first occurrence only; repeated
    placeholders are left verbatim.
    """
    values = {
        "name": _stem(file),
        "ext": file.extension,
        "date": format_date(file.modified_time, RENAME_DATE_FORMAT),
        "category": get_file_category(file.extension),
        "size": f"{math.floor(file.size / 1024 + 0.5)}KB",
    }
    seen: set[str] = set()

    def _render(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in seen:
            return match.group(0)
        seen.add(key)
        return values[key]

    return _PLACEHOLDERS.sub(_render, pattern)


def generate_move_path(
    file: FileRecord,
    params: ActionParams,
    base_folder: Optional[str] = None,
) -> str:
    """Return the destination for a plain ``move`` action."""
    if not params.target_folder:
        return file.path
    if is_absolute(params.target_folder):
        return join(params.target_folder, file.name)
    return join(base_folder or file.parent_path, params.target_folder, file.name)


def generate_date_based_path(
    file: FileRecord,
    params: ActionParams,
    base_folder: Optional[str] = None,
) -> str:
    """Return the destination for a ``moveByDate`` action."""
    date_path = format_date(file.modified_time, params.date_format or DEFAULT_DATE_FORMAT)
    return _under_target(file, params, base_folder, date_path)


def generate_category_based_path(
    file: FileRecord,
    params: ActionParams,
    base_folder: Optional[str] = None,
) -> str:
    """Return the destination for a ``moveByCategory`` action."""
    folder = category_folder(get_file_category(file.extension))
    return _under_target(file, params, base_folder, folder)


def generate_renamed_path(file: FileRecord, params: ActionParams) -> str:
    """Return the path for a ``rename`` action; the parent folder is kept."""
    if not params.rename_pattern:
        return file.path
    return join(file.parent_path, apply_rename_pattern(file, params.rename_pattern))


def apply_action(
    file: FileRecord,
    action: Action,
    base_folder: Optional[str] = None,
) -> ActionResult:
    """Compute the proposed location of ``file`` after ``action``.

    Args:
        file: Record to transform.
        action: Action to apply.
        base_folder: Folder that relative targets resolve against; defaults to
            the file's parent folder.

    Returns:
        ActionResult: Proposed path and name. Unknown action types are no-ops.
    """
    action_type = action.type
    if action_type == "move":
        proposed_path = generate_move_path(file, action.params, base_folder)
    elif action_type == "moveByDate":
        proposed_path = generate_date_based_path(file, action.params, base_folder)
    elif action_type == "moveByCategory":
        proposed_path = generate_category_based_path(file, action.params, base_folder)
    elif action_type == "rename":
        proposed_path = generate_renamed_path(file, action.params)
    else:
        LOGGER.warning("Unknown action type: %s", action_type)
        proposed_path = file.path
    return ActionResult(proposed_path=proposed_path, proposed_name=basename(proposed_path))


def apply_all_actions(
    file: FileRecord,
    actions: Iterable[Action],
    base_folder: Optional[str] = None,
) -> ActionResult:
    """Apply ``actions`` in order, feeding each result into the next action.

    Returns:
        ActionResult: Location after the final action; the file's own location
            when ``actions`` is empty.
    """
    current = file
    result = ActionResult(proposed_path=file.path, proposed_name=file.name)
    for action in actions:
        result = apply_action(current, action, base_folder)
        current = current.relocated(result.proposed_path)
    return result


def _under_target(
    file: FileRecord,
    params: ActionParams,
    base_folder: Optional[str],
    subfolder: str,
) -> str:
    target = params.target_folder or ""
    if is_absolute(target):
        return join(target, subfolder, file.name)
    return join(base_folder or file.parent_path, target, subfolder, file.name)


def _stem(file: FileRecord) -> str:
    extension = file.extension
    if extension and file.name.lower().endswith(extension):
        return file.name[: -len(extension)]
    return file.name


__all__ = [
    "ActionResult",
    "DEFAULT_DATE_FORMAT",
    "MONTH_NAMES",
    "apply_action",
    "apply_all_actions",
    "apply_rename_pattern",
    "format_date",
    "generate_category_based_path",
    "generate_date_based_path",
    "generate_move_path",
    "generate_renamed_path",
]
