# File: entitygen/utils.py
"""
entitygen - Utility Functions & Helpers
========================================
Identifier sanitisation, file I/O and timing utilities used throughout the
generation pipeline.

Performance strategy:
- Name-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  so repeated calls for the same column / class names are O(1).
- File I/O helpers use atomic rename for safety.
"""

from __future__ import annotations

import functools
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.utils")

# ---------------------------------------------------------------------------
# C# reserved keywords (contextual keywords are legal identifiers)
# ---------------------------------------------------------------------------

CSHARP_KEYWORDS: FrozenSet[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator",
    "out", "override", "params", "private", "protected", "public",
    "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw",
    "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
    "ushort", "using", "virtual", "void", "volatile", "while",
})

_VERBATIM_PREFIX: str = "@"


# ---------------------------------------------------------------------------
# Identifier sanitisation
# ---------------------------------------------------------------------------


def _is_start_char(ch: str) -> bool:
    return ch == "_" or ch.isidentifier()


def _is_part_char(ch: str) -> bool:
    return ("_" + ch).isidentifier()


def is_keyword(name: str) -> bool:
    """Return True if *name* is a reserved C# keyword."""
    return name in CSHARP_KEYWORDS


@functools.lru_cache(maxsize=None)
def to_safe_name(name: str) -> str:
    """
    Turn an arbitrary string into a valid C# identifier.

    - Characters that cannot appear in an identifier become ``_``
    - A leading digit (or other non-start character) gets a ``_`` prefix
    - Reserved keywords are escaped with the verbatim prefix ``@``
    - Empty input becomes ``_``

    The transformation is idempotent: an already-escaped keyword such as
    ``@class`` is returned unchanged.

    Examples:
        >>> to_safe_name("Order")
        'Order'
        >>> to_safe_name("class")
        '@class'
        >>> to_safe_name("1st Line")
        '_1st_Line'
    """
    if name is None:
        name = ""

    # One verbatim prefix is ours to re-derive, anything else is sanitised.
    if name.startswith(_VERBATIM_PREFIX):
        name = name[len(_VERBATIM_PREFIX):]

    result: str = "".join(ch if _is_part_char(ch) else "_" for ch in name)
    if not result:
        return "_"

    if not _is_start_char(result[0]):
        result = f"_{result}"

    if is_keyword(result):
        result = f"{_VERBATIM_PREFIX}{result}"

    return result


@functools.lru_cache(maxsize=None)
def to_safe_qualified_name(name: str) -> str:
    """
    Sanitise a dotted name (namespace or qualified type) segment by segment.

        >>> to_safe_qualified_name("Acme.Data.event")
        'Acme.Data.@event'
    """
    if not name:
        return "_"
    return ".".join(to_safe_name(part) for part in name.split("."))


@functools.lru_cache(maxsize=None)
def strip_verbatim(name: str) -> str:
    """Drop the ``@`` escape, e.g. for use in file names."""
    if name.startswith(_VERBATIM_PREFIX):
        return name[len(_VERBATIM_PREFIX):]
    return name


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file first then renames,
    so a crash never leaves a half-written class file behind.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
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
            shutil.move(tmp_path, str(path))
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def write_files_batch(
    files: Dict[str, str],
    base_dir: Path,
    atomic: bool = True,
) -> Tuple[int, int]:
    """
    Write multiple files at once.

    Args:
        files: Mapping of relative path → content.
        base_dir: Root output directory.
        atomic: Use atomic writes.

    Returns:
        Tuple of (total_files_written, total_bytes_written).
    """
    total_files: int = 0
    total_bytes: int = 0

    for rel_path, content in files.items():
        full_path: Path = base_dir / rel_path
        byte_count: int = write_file(full_path, content, atomic=atomic)
        total_files += 1
        total_bytes += byte_count

    logger.info(
        "Batch write complete: %d files, %d bytes to %s",
        total_files,
        total_bytes,
        base_dir,
    )
    return total_files, total_bytes


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def count_lines(content: str) -> int:
    """Count the number of lines in a string. O(n)."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("synthesize Order") as t:
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
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CSHARP_KEYWORDS",
    "is_keyword",
    "to_safe_name",
    "to_safe_qualified_name",
    "strip_verbatim",
    "ensure_directory",
    "write_file",
    "write_files_batch",
    "count_lines",
    "Timer",
]

logger.debug("entitygen.utils loaded — %d public symbols.", len(__all__))
