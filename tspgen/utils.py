# File: tspgen/utils.py
"""
TSPGen - Utility Functions & Helpers
=====================================
Identifier transformations, TypeSpec text helpers, file I/O and a small
profiling timer used throughout the generation pipeline.

Naming helpers are decorated with ``@lru_cache(maxsize=None)``: the same
table, enum and member names are converted over and over while a schema
is rendered.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_CLASS_NAME_SPLIT_RE: re.Pattern[str] = re.compile(r"[_\s]+")
_NON_ALPHANUM_RUN_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9]+")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")

DEFAULT_CLASS_NAME: str = "Model"


# ---------------------------------------------------------------------------
# Cached identifier transformations
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_class_name(name: str) -> str:
    """
    Derive a TypeSpec type identifier from a DSL table or enum name.

    Splits on underscores and whitespace, upper-cases the first character
    of every part and concatenates.  The rest of each part keeps its
    casing.

    Examples:
        >>> to_class_name("users")
        'Users'
        >>> to_class_name("order_line_items")
        'OrderLineItems'
        >>> to_class_name("apiKeys")
        'ApiKeys'
    """
    parts: List[str] = [p for p in _CLASS_NAME_SPLIT_RE.split(name) if p]
    if not parts:
        return DEFAULT_CLASS_NAME
    return "".join(p[0].upper() + p[1:] for p in parts)


@functools.lru_cache(maxsize=None)
def to_enum_member_name(value: str) -> Optional[str]:
    """
    Normalise an enum value into a TypeSpec member identifier.

    Returns ``None`` when nothing identifier-like is left.

    Examples:
        >>> to_enum_member_name("in progress")
        'IN_PROGRESS'
        >>> to_enum_member_name("2fa-enabled")
        '_2FA_ENABLED'
        >>> to_enum_member_name("--") is None
        True
    """
    if not value:
        return None
    sanitized: str = _NON_ALPHANUM_RUN_RE.sub("_", value.strip())
    sanitized = _LEADING_TRAILING_UNDERSCORE_RE.sub("", sanitized)
    sanitized = _MULTI_UNDERSCORE_RE.sub("_", sanitized)
    if not sanitized:
        return None
    if sanitized[0].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized.upper()


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def stringify(value: Any) -> str:
    """Render a literal the way it reads in the schema (``true``, ``nil`` ...)."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(stringify(v) for v in value)
    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {stringify(v)}" for k, v in value.items()) + "}"
    return str(value)


def wrap_in_quotes(value: str) -> str:
    """Wrap a string value in double quotes, escaping internals."""
    escaped: str = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def indent_lines(lines: Sequence[str], level: int = 1, size: int = 2) -> List[str]:
    """Indent a list of lines, returning a new list. O(n)."""
    prefix: str = " " * (level * size)
    return [prefix + line if line.strip() else line for line in lines]


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def write_file(path: Path, content: str, *, overwrite: bool = False) -> int:
    """
    Write *content* to *path* through a temporary file and an atomic rename.

    Raises ``FileExistsError`` when the target exists and *overwrite* is
    False.  Returns the number of bytes written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise FileExistsError(f"File already exists: {path}")

    encoded: bytes = content.encode("utf-8")
    fd: int
    tmp_path: str
    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("parse schema") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_CLASS_NAME",
    "to_class_name",
    "to_enum_member_name",
    "stringify",
    "wrap_in_quotes",
    "indent_lines",
    "count_lines",
    "read_file",
    "write_file",
    "Timer",
]

logger.debug("tspgen.utils loaded: %d public symbols.", len(__all__))
