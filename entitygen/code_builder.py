# File: entitygen/code_builder.py
"""
entitygen - Indentation-Scoped Code Builder
============================================
A line-oriented text accumulator used by every template.

Indentation is applied when the first non-empty text of a line is written,
using whatever level is active at that moment.  Lines already written are
never re-indented, so an exception raised half-way through a block leaves the
emitted text exactly as it was produced.

Usage::

    builder = CodeBuilder()
    builder.append_line("public partial class Order")
    builder.append_line("{")
    with builder.indent():
        builder.append_line("public int Id { get; set; }")
    builder.append_line("}")
    text = builder.to_string()
"""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, List

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.code_builder")

NEWLINE: str = "\n"


class CodeBuilder:
    """
    String builder with a stack-disciplined indentation level.

    Not thread-safe; templates create one builder per generated file.
    """

    __slots__ = ("_parts", "_level", "_indent_unit", "_at_line_start")

    def __init__(self, indent_size: int = 4) -> None:
        if indent_size < 0:
            raise ValueError(f"indent_size must be >= 0, got {indent_size}.")
        self._parts: List[str] = []
        self._level: int = 0
        self._indent_unit: str = " " * indent_size
        self._at_line_start: bool = True

    # -- Indentation --------------------------------------------------------

    @property
    def indent_level(self) -> int:
        return self._level

    def increment_indent(self) -> "CodeBuilder":
        self._level += 1
        return self

    def decrement_indent(self) -> "CodeBuilder":
        if self._level == 0:
            raise ValueError("Cannot decrement indentation below zero.")
        self._level -= 1
        return self

    @contextlib.contextmanager
    def indent(self) -> Iterator["CodeBuilder"]:
        """Increase indentation for the duration of the ``with`` block."""
        self.increment_indent()
        try:
            yield self
        finally:
            self.decrement_indent()

    # -- Emission -----------------------------------------------------------

    def append(self, text: str) -> "CodeBuilder":
        """
        Append *text* without a trailing newline.

        Embedded newlines start new lines, each indented on first content.
        """
        if not text:
            return self

        lines: List[str] = text.split(NEWLINE)
        for i, line in enumerate(lines):
            if i > 0:
                self._parts.append(NEWLINE)
                self._at_line_start = True
            if line:
                if self._at_line_start:
                    self._parts.append(self._indent_unit * self._level)
                    self._at_line_start = False
                self._parts.append(line)
        return self

    def append_line(self, text: str = "") -> "CodeBuilder":
        """Append *text* followed by a newline.  Blank lines carry no indent."""
        self.append(text)
        self._parts.append(NEWLINE)
        self._at_line_start = True
        return self

    def clear(self) -> "CodeBuilder":
        self._parts.clear()
        self._level = 0
        self._at_line_start = True
        return self

    # -- Output -------------------------------------------------------------

    def to_string(self) -> str:
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.to_string()

    def __len__(self) -> int:
        return sum(len(part) for part in self._parts)

    def __repr__(self) -> str:
        return f"<CodeBuilder level={self._level} chars={len(self)}>"


__all__: List[str] = [
    "CodeBuilder",
    "NEWLINE",
]
