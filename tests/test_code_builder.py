"""
tests/test_code_builder.py
Unit tests for entitygen.code_builder.CodeBuilder.
"""

from __future__ import annotations

import pytest

from entitygen.code_builder import CodeBuilder


class TestIndentation:
    def test_lines_prefixed_with_current_level(self) -> None:
        builder = CodeBuilder()
        builder.append_line("a")
        with builder.indent():
            builder.append_line("b")
            with builder.indent():
                builder.append_line("c")
            builder.append_line("d")
        builder.append_line("e")
        assert builder.to_string() == "a\n    b\n        c\n    d\ne\n"

    def test_custom_indent_size(self) -> None:
        builder = CodeBuilder(indent_size=2)
        with builder.indent():
            builder.append_line("x")
        assert str(builder) == "  x\n"

    def test_blank_lines_carry_no_indent(self) -> None:
        builder = CodeBuilder()
        with builder.indent():
            builder.append_line("x")
            builder.append_line()
            builder.append_line("y")
        assert builder.to_string() == "    x\n\n    y\n"

    def test_explicit_open_close(self) -> None:
        builder = CodeBuilder()
        builder.increment_indent()
        builder.append_line("x")
        builder.decrement_indent()
        builder.append_line("y")
        assert builder.to_string() == "    x\ny\n"
        assert builder.indent_level == 0

    def test_decrement_below_zero_raises(self) -> None:
        with pytest.raises(ValueError):
            CodeBuilder().decrement_indent()

    def test_negative_indent_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            CodeBuilder(indent_size=-1)


class TestAppend:
    def test_append_continues_line_without_reindent(self) -> None:
        builder = CodeBuilder()
        with builder.indent():
            builder.append("namespace Shop")
            builder.append_line(";")
        assert builder.to_string() == "    namespace Shop;\n"

    def test_embedded_newlines_indent_each_line(self) -> None:
        builder = CodeBuilder()
        with builder.indent():
            builder.append_line("a\nb")
        assert builder.to_string() == "    a\n    b\n"

    def test_clear_resets(self) -> None:
        builder = CodeBuilder()
        builder.increment_indent().append_line("x")
        builder.clear()
        assert builder.to_string() == ""
        assert builder.indent_level == 0
        assert len(builder) == 0


class TestFailureMidBlock:
    def test_written_lines_keep_their_indentation(self) -> None:
        builder = CodeBuilder()
        builder.append_line("{")
        with pytest.raises(RuntimeError):
            with builder.indent():
                builder.append_line("inside")
                raise RuntimeError("boom")
        assert builder.indent_level == 0
        builder.append_line("}")
        assert builder.to_string() == "{\n    inside\n}\n"
