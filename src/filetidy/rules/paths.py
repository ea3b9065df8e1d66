"""Separator-agnostic path helpers.

Rule targets are plain strings that may describe a local path (POSIX or
Windows) or a cloud drive location such as ``My Drive/Reports``. These helpers
normalize every separator to ``/`` so proposals compare equal regardless of the
platform that produced them.
"""

from __future__ import annotations

import re

_DRIVE_PREFIX = re.compile(r"^[a-zA-Z]:[\\/]")
_REPEATED_SEPARATORS = re.compile(r"/+")


def normalize_separators(value: str) -> str:
    """Return ``value`` with backslashes replaced by forward slashes."""
    return value.replace("\\", "/")


def join(*segments: str) -> str:
    """Join non-empty segments with ``/`` and collapse repeated separators."""
    joined = "/".join(segment for segment in segments if segment)
    return _REPEATED_SEPARATORS.sub("/", normalize_separators(joined))


def basename(path: str) -> str:
    """Return the final component of ``path``."""
    return normalize_separators(path).split("/")[-1]


def dirname(path: str) -> str:
    """Return the parent portion of ``path`` (``.`` when there is none)."""
    normalized = normalize_separators(path)
    index = normalized.rfind("/")
    if index == -1:
        return "."
    return normalized[:index] or "/"


def extname(path: str) -> str:
    """Return the extension of the final component, including the dot."""
    name = basename(path)
    index = name.rfind(".")
    if index <= 0:
        return ""
    return name[index:]


def is_absolute(path: str) -> bool:
    """Return True for POSIX roots and Windows drive-letter paths."""
    return bool(_DRIVE_PREFIX.match(path)) or path.startswith("/")


__all__ = ["basename", "dirname", "extname", "is_absolute", "join", "normalize_separators"]
