# File: entitygen/types.py
"""
entitygen - Type Projection
============================
Maps a property's logical type and nullability onto the C# type expression
printed in the generated class.

Decision table implemented by ``project_type``:

    =========== =========== ============= ===================================
    is_nullable value type  nullable mode printed
    =========== =========== ============= ===================================
    True        any         any           ``T?``
    False/None  yes         any           ``T``
    False/None  no          on            ``T`` plus ``= null!;`` initializer
    False/None  no          off           ``T``
    =========== =========== ============= ===================================
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from entitygen.models import SystemType
from entitygen.validators import UnsupportedTypeError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.types")

NULLABLE_MARKER: str = "?"
NON_NULL_DEFAULT: str = "null!"

# CLR type name → C# keyword alias
_CLR_ALIASES: Dict[str, str] = {
    "System.Boolean": "bool",
    "System.Byte": "byte",
    "System.SByte": "sbyte",
    "System.Char": "char",
    "System.Decimal": "decimal",
    "System.Double": "double",
    "System.Single": "float",
    "System.Int16": "short",
    "System.Int32": "int",
    "System.Int64": "long",
    "System.UInt16": "ushort",
    "System.UInt32": "uint",
    "System.UInt64": "ulong",
    "System.IntPtr": "nint",
    "System.UIntPtr": "nuint",
    "System.Object": "object",
    "System.String": "string",
    "System.Void": "void",
}

# Unqualified spellings, as written with 'using System;' in scope
_CLR_ALIASES.update({
    name[len("System."):]: alias for name, alias in list(_CLR_ALIASES.items())
})

_KEYWORD_TYPES: FrozenSet[str] = frozenset(_CLR_ALIASES.values())

_SYSTEM_STRUCTS: FrozenSet[str] = frozenset({
    "DateTime", "DateTimeOffset", "DateOnly", "TimeOnly", "TimeSpan", "Guid",
})

# Printed names known to be structs
_VALUE_TYPES: FrozenSet[str] = frozenset({
    "bool", "byte", "sbyte", "char", "decimal", "double", "float",
    "short", "int", "long", "ushort", "uint", "ulong", "nint", "nuint",
}) | _SYSTEM_STRUCTS | frozenset(f"System.{name}" for name in _SYSTEM_STRUCTS)

_QUALIFIED_NAME_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"
)
_ARRAY_SUFFIX: str = "[]"


# ---------------------------------------------------------------------------
# Name mapping
# ---------------------------------------------------------------------------


def _split_generic_args(args: str) -> List[str]:
    """Split ``"A, B<C, D>"`` at top-level commas."""
    parts: List[str] = []
    depth: int = 0
    current: List[str] = []
    for ch in args:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
            if depth < 0:
                raise UnsupportedTypeError(args, reason="unbalanced '>'")
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if depth != 0:
        raise UnsupportedTypeError(args, reason="unbalanced '<'")
    parts.append("".join(current).strip())
    return parts


@functools.lru_cache(maxsize=None)
def to_type(name: str) -> str:
    """
    Return the C# spelling of a CLR or C# type name.

    Examples:
        >>> to_type("System.Int32")
        'int'
        >>> to_type("System.Byte[]")
        'byte[]'
        >>> to_type("System.Collections.Generic.ICollection<System.String>")
        'System.Collections.Generic.ICollection<string>'

    Raises:
        UnsupportedTypeError: *name* is not a well-formed type expression.
    """
    cleaned: str = (name or "").strip()
    if not cleaned:
        raise UnsupportedTypeError(name or "", reason="empty type name")

    if cleaned.endswith(_ARRAY_SUFFIX):
        return to_type(cleaned[: -len(_ARRAY_SUFFIX)]) + _ARRAY_SUFFIX

    # Nullable<T> is expressed through the marker, not the name.
    if cleaned.startswith("System.Nullable<") and cleaned.endswith(">"):
        raise UnsupportedTypeError(
            cleaned, reason="use the base type with is_nullable=True"
        )

    if "<" in cleaned:
        if not cleaned.endswith(">"):
            raise UnsupportedTypeError(cleaned, reason="malformed generic type")
        open_at: int = cleaned.index("<")
        head: str = cleaned[:open_at].strip()
        args: List[str] = _split_generic_args(cleaned[open_at + 1 : -1])
        if not _QUALIFIED_NAME_RE.match(head) or not all(args):
            raise UnsupportedTypeError(cleaned, reason="malformed generic type")
        return f"{head}<{', '.join(to_type(a) for a in args)}>"

    if cleaned in _CLR_ALIASES:
        return _CLR_ALIASES[cleaned]

    if cleaned in _KEYWORD_TYPES:
        return cleaned

    if not _QUALIFIED_NAME_RE.match(cleaned):
        raise UnsupportedTypeError(cleaned, reason="not a valid type name")

    return cleaned


def is_value_type(system_type: SystemType) -> bool:
    """
    Return the declared value-type flag, or infer it from the known types.

    Unknown types default to reference types.
    """
    if system_type.is_value_type is not None:
        return system_type.is_value_type
    printed: str = to_type(system_type.name)
    return printed in _VALUE_TYPES


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectedType:
    """Printed member type plus the initializer it requires, if any."""

    printed_type: str
    needs_non_null_default: bool = False

    @property
    def initializer(self) -> Optional[str]:
        return NON_NULL_DEFAULT if self.needs_non_null_default else None


def project_type(
    system_type: SystemType,
    is_nullable: Optional[bool],
    nullable_mode: bool,
) -> ProjectedType:
    """
    Decide how a scalar property's type is printed.

    Args:
        system_type: Logical type of the property.
        is_nullable: Tri-state nullability; ``None`` means unknown.
        nullable_mode: Whether nullable reference types are enabled.

    Raises:
        UnsupportedTypeError: The type name cannot be printed.
    """
    base: str = to_type(system_type.name)

    if is_nullable is True:
        return ProjectedType(f"{base}{NULLABLE_MARKER}")

    if is_value_type(system_type):
        return ProjectedType(base)

    if nullable_mode:
        return ProjectedType(base, needs_non_null_default=True)

    return ProjectedType(base)


__all__: List[str] = [
    "NULLABLE_MARKER",
    "NON_NULL_DEFAULT",
    "ProjectedType",
    "is_value_type",
    "project_type",
    "to_type",
]
