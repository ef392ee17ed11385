"""
tests/test_types.py
Unit tests for entitygen.types: CLR name mapping and the nullability table.
"""

from __future__ import annotations

from typing import Optional

import pytest

from entitygen.models import SystemType
from entitygen.types import ProjectedType, is_value_type, project_type, to_type
from entitygen.validators import UnsupportedTypeError


class TestToType:
    @pytest.mark.parametrize(
        "clr, expected",
        [
            ("System.Int32", "int"),
            ("System.Int64", "long"),
            ("System.String", "string"),
            ("System.Boolean", "bool"),
            ("System.Decimal", "decimal"),
            ("System.Single", "float"),
            ("System.Byte[]", "byte[]"),
            ("int", "int"),
            ("Int32", "int"),
            ("String", "string"),
            ("DateTime", "DateTime"),
            ("System.DateTime", "System.DateTime"),
            ("System.Guid", "System.Guid"),
            ("NetTopologySuite.Geometries.Point", "NetTopologySuite.Geometries.Point"),
        ],
    )
    def test_mapping(self, clr: str, expected: str) -> None:
        assert to_type(clr) == expected

    def test_generic_arguments_mapped(self) -> None:
        assert (
            to_type("System.Collections.Generic.Dictionary<System.String, System.Int32>")
            == "System.Collections.Generic.Dictionary<string, int>"
        )

    @pytest.mark.parametrize(
        "bad",
        ["", "   ", "System Int32", "List<int", "List<int>>", "System.Nullable<System.Int32>", "9Type"],
    )
    def test_unsupported(self, bad: str) -> None:
        with pytest.raises(UnsupportedTypeError):
            to_type(bad)


class TestIsValueType:
    def test_declared_flag_wins(self) -> None:
        assert is_value_type(SystemType(name="Acme.Money", is_value_type=True))
        assert not is_value_type(SystemType(name="System.Int32", is_value_type=False))

    def test_inferred_from_known_types(self) -> None:
        assert is_value_type(SystemType(name="System.Int32"))
        assert is_value_type(SystemType(name="System.DateTimeOffset"))
        assert not is_value_type(SystemType(name="System.String"))
        assert not is_value_type(SystemType(name="System.Byte[]"))

    @pytest.mark.parametrize(
        "name", ["DateTime", "DateTimeOffset", "Guid", "TimeSpan", "Int32", "Decimal"]
    )
    def test_unqualified_structs(self, name: str) -> None:
        assert is_value_type(SystemType(name=name))
        assert project_type(SystemType(name=name), False, True).initializer is None

    def test_unknown_types_are_references(self) -> None:
        assert not is_value_type(SystemType(name="Acme.Blob"))


STRING = SystemType(name="System.String", is_value_type=False)
INT = SystemType(name="System.Int32", is_value_type=True)


class TestProjectType:
    @pytest.mark.parametrize("nullable_mode", [True, False])
    @pytest.mark.parametrize("system_type", [STRING, INT])
    def test_nullable_always_marked(self, system_type: SystemType, nullable_mode: bool) -> None:
        projected = project_type(system_type, True, nullable_mode)
        assert projected.printed_type.endswith("?")
        assert not projected.needs_non_null_default

    @pytest.mark.parametrize("is_nullable", [False, None])
    @pytest.mark.parametrize("nullable_mode", [True, False])
    def test_value_type_never_marked(
        self, is_nullable: Optional[bool], nullable_mode: bool
    ) -> None:
        assert project_type(INT, is_nullable, nullable_mode) == ProjectedType("int")

    @pytest.mark.parametrize("is_nullable", [False, None])
    def test_reference_type_nullable_mode_on(self, is_nullable: Optional[bool]) -> None:
        projected = project_type(STRING, is_nullable, True)
        assert projected.printed_type == "string"
        assert projected.needs_non_null_default
        assert projected.initializer == "null!"

    @pytest.mark.parametrize("is_nullable", [False, None])
    def test_reference_type_nullable_mode_off(self, is_nullable: Optional[bool]) -> None:
        projected = project_type(STRING, is_nullable, False)
        assert projected.printed_type == "string"
        assert not projected.needs_non_null_default
        assert projected.initializer is None

    def test_unsupported_type_propagates(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            project_type(SystemType(name="not a type"), False, True)
