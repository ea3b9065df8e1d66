"""Condition matchers for the rule engine.

Each matcher evaluates one condition type against a file record. Matching is
total: malformed conditions log a warning and evaluate to False instead of
raising, so a single bad rule never blocks the rest of a batch.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

from .categories import get_file_category
from .models import Condition, FileRecord
from .timestamps import as_utc

LOGGER = logging.getLogger(__name__)

VALID_OPERATORS: Dict[str, tuple[str, ...]] = {
    "extension": ("in", "notIn", "equals", "notEquals"),
    "category": ("equals", "notEquals", "in", "notIn"),
    "size": ("gt", "lt", "gte", "lte", "equals"),
    "age": ("gt", "lt", "gte", "lte", "equals"),
    "path": ("contains", "startsWith", "endsWith", "equals", "notEquals"),
    "name": ("contains", "startsWith", "endsWith", "equals", "notEquals"),
}

DEFAULT_OPERATORS: Dict[str, str] = {
    "extension": "in",
    "category": "equals",
    "size": "gt",
    "age": "gt",
    "path": "contains",
    "name": "contains",
}

_SECONDS_PER_DAY = 86_400
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INFINITY_LITERAL = re.compile(r"[+-]?Infinity")
_RADIX_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")


def is_valid_operator(condition_type: str, operator: str) -> bool:
    """Return True when ``operator`` is allowed for ``condition_type``."""
    return operator in VALID_OPERATORS.get(condition_type, ())


def match_condition(
    file: FileRecord,
    condition: Condition,
    *,
    now: Optional[datetime] = None,
) -> bool:
    """Evaluate whether ``file`` satisfies ``condition``.

    Args:
        file: Record under evaluation.
        condition: Condition to check.
        now: Reference time for age conditions; defaults to the current time.

    Returns:
        bool: True when the condition matches.
    """
    condition_type = condition.type
    if condition_type not in VALID_OPERATORS:
        LOGGER.warning("Unknown condition type: %s", condition_type)
        return False
    if not is_valid_operator(condition_type, condition.operator):
        LOGGER.warning(
            "Operator %r is not valid for %s conditions; treating as no match.",
            condition.operator,
            condition_type,
        )
        return False

    if condition_type == "extension":
        return _match_members(file.extension, condition)
    if condition_type == "category":
        return _match_members(get_file_category(file.extension), condition)
    if condition_type == "size":
        return _match_number(file.size, condition)
    if condition_type == "age":
        return _match_number(_age_in_days(file, now), condition)
    if condition_type == "path":
        return _match_text(file.path, condition)
    return _match_text(file.name, condition)


def match_all_conditions(
    file: FileRecord,
    conditions: Iterable[Condition],
    *,
    now: Optional[datetime] = None,
) -> bool:
    """Return True when every condition matches; an empty list matches all files."""
    return all(match_condition(file, condition, now=now) for condition in conditions)


# ---------------------------------------------------------------------- #
# Matchers                                                               #
# ---------------------------------------------------------------------- #


def _match_members(actual: str, condition: Condition) -> bool:
    """Compare an extension or category against scalar or list operands."""
    subject = actual.lower()
    value = condition.value
    operator = condition.operator

    if operator in ("in", "notIn"):
        if not isinstance(value, list):
            LOGGER.warning(
                "%s condition with operator %r expects a list value, got %r.",
                condition.type,
                operator,
                value,
            )
            return operator == "notIn"
        members = {str(item).lower() for item in value}
        return (subject in members) == (operator == "in")

    expected = _as_text(value)
    if operator == "equals":
        return subject == expected
    return subject != expected


_TEXT_OPERATORS: Dict[str, Callable[[str, str], bool]] = {
    "contains": lambda subject, expected: expected in subject,
    "startsWith": lambda subject, expected: subject.startswith(expected),
    "endsWith": lambda subject, expected: subject.endswith(expected),
    "equals": lambda subject, expected: subject == expected,
    "notEquals": lambda subject, expected: subject != expected,
}

_NUMBER_OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    "gt": lambda actual, threshold: actual > threshold,
    "lt": lambda actual, threshold: actual < threshold,
    "gte": lambda actual, threshold: actual >= threshold,
    "lte": lambda actual, threshold: actual <= threshold,
    "equals": lambda actual, threshold: actual == threshold,
}


def _match_text(actual: str, condition: Condition) -> bool:
    return _TEXT_OPERATORS[condition.operator](actual.lower(), _as_text(condition.value))


def _match_number(actual: float, condition: Condition) -> bool:
    threshold = _as_number(condition.value)
    if threshold is None:
        LOGGER.warning(
            "%s condition value must be a number, got %r.",
            condition.type.capitalize(),
            condition.value,
        )
        return False
    return _NUMBER_OPERATORS[condition.operator](actual, threshold)


# ---------------------------------------------------------------------- #
# Helpers                                                                #
# ---------------------------------------------------------------------- #


def _as_text(value: object) -> str:
    if isinstance(value, list):
        return ",".join(str(item) for item in value).lower()
    return str(value).lower()


def _as_number(value: object) -> Optional[float]:
    """Coerce a numeric threshold using JavaScript-style number syntax.

    Numeric strings may carry surrounding whitespace, a sign, a fraction, an
    exponent, ``Infinity`` or a ``0x``/``0o``/``0b`` integer literal. A blank
    string counts as zero. Anything else, including Python-only spellings such
    as ``1_000`` or ``inf``, is rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL_LITERAL.fullmatch(text):
            number = float(text)
        elif _INFINITY_LITERAL.fullmatch(text):
            number = -math.inf if text.startswith("-") else math.inf
        elif _RADIX_LITERAL.fullmatch(text):
            number = float(int(text, 0))
        else:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def _age_in_days(file: FileRecord, now: Optional[datetime]) -> int:
    reference = as_utc(now) if now is not None else datetime.now(timezone.utc)
    elapsed = (reference - as_utc(file.modified_time)).total_seconds()
    return math.floor(elapsed / _SECONDS_PER_DAY)


__all__ = [
    "DEFAULT_OPERATORS",
    "VALID_OPERATORS",
    "is_valid_operator",
    "match_all_conditions",
    "match_condition",
]
