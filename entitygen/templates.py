# File: entitygen/templates.py
"""
entitygen - Entity Class Template
==================================
Turns one ``Entity`` plus ``GeneratorOptions`` into the source of a C#
partial class that is a JsonApiDotNetCore resource.

Generation happens in two passes:

    1. **Plan**: every member is described by a ``MemberPlan`` tagged with a
       ``MemberRole`` (scalar, to-one, to-many, identity adapter).  Type
       projection and name sanitisation happen here, so any failure is
       raised before a single line is written.
    2. **Render**: the plans are written through a ``CodeBuilder``.  The
       role decides the attribute and the ``virtual`` modifier; nothing else
       in the renderer inspects member kinds.

Layout of the generated file::

    namespace Acme.Data;            // or namespace Acme.Data { ... }

    public partial class Order
    {
        public Order() { #region Generated Constructor ... }
        #region Generated Properties ...
        #region Generated Relationships ...
        #region Generated IIdentifiable Properties ...
    }

The IIdentifiable region is rewritten on every run.

Template methods are pure: every call to ``write_code`` uses a fresh
builder, so one template instance (or many, across threads) can be reused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from entitygen.code_builder import CodeBuilder
from entitygen.models import (
    BaseClassMode,
    Cardinality,
    Entity,
    EntityReference,
    GeneratorOptions,
    Relationship,
)
from entitygen.types import NON_NULL_DEFAULT, NULLABLE_MARKER, project_type
from entitygen.utils import strip_verbatim, to_safe_name, to_safe_qualified_name
from entitygen.validators import (
    IDENTITY_PROPERTY_NAME,
    UnsupportedTypeError,
    ensure_valid,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.templates")

# ---------------------------------------------------------------------------
# Constants — JsonApiDotNetCore / BCL type names
# ---------------------------------------------------------------------------

ATTR_ATTRIBUTE: str = "JsonApiDotNetCore.Resources.Annotations.AttrAttribute"
HAS_ONE_ATTRIBUTE: str = "JsonApiDotNetCore.Resources.Annotations.HasOneAttribute"
HAS_MANY_ATTRIBUTE: str = "JsonApiDotNetCore.Resources.Annotations.HasManyAttribute"
IDENTIFIABLE: str = "JsonApiDotNetCore.Resources.IIdentifiable"
IDENTIFIABLE_OF_INT: str = "JsonApiDotNetCore.Resources.IIdentifiable<int>"
HASH_SET: str = "System.Collections.Generic.HashSet"
COLLECTION: str = "System.Collections.Generic.ICollection"

REGION_CONSTRUCTOR: str = "Generated Constructor"
REGION_PROPERTIES: str = "Generated Properties"
REGION_RELATIONSHIPS: str = "Generated Relationships"
REGION_IDENTIFIABLE: str = "Generated IIdentifiable Properties"


# ---------------------------------------------------------------------------
# Member plan (intermediate representation)
# ---------------------------------------------------------------------------


class MemberRole(str, Enum):
    """What a generated member is, independent of how it is spelled."""

    SCALAR = "scalar"
    TO_ONE = "to_one"
    TO_MANY = "to_many"
    IDENTITY_ADAPTER = "identity_adapter"


_ROLE_ATTRIBUTES: Dict[MemberRole, Optional[str]] = {
    MemberRole.SCALAR: ATTR_ATTRIBUTE,
    MemberRole.TO_ONE: HAS_ONE_ATTRIBUTE,
    MemberRole.TO_MANY: HAS_MANY_ATTRIBUTE,
    MemberRole.IDENTITY_ADAPTER: None,
}

_VIRTUAL_ROLES: FrozenSet[MemberRole] = frozenset({
    MemberRole.TO_ONE,
    MemberRole.TO_MANY,
})


@dataclass(frozen=True)
class MemberPlan:
    """
    One member of the generated class.

    ``interface`` and ``getter`` are only used by identity adapters, which
    are rendered as explicit interface implementations with a no-op setter.
    """

    role: MemberRole
    name: str
    type_name: str
    nullable: bool = False
    initializer: Optional[str] = None
    summary: str = ""
    value: str = ""
    see_also: Tuple[str, ...] = ()
    interface: str = ""
    getter: str = ""

    @property
    def attribute(self) -> Optional[str]:
        return _ROLE_ATTRIBUTES[self.role]

    @property
    def is_virtual(self) -> bool:
        return self.role in _VIRTUAL_ROLES

    @property
    def declared_type(self) -> str:
        return f"{self.type_name}{NULLABLE_MARKER}" if self.nullable else self.type_name


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _ordinal_key(name: str) -> bytes:
    # .NET ordinal comparison works on UTF-16 code units, not code points.
    return name.encode("utf-16-be", "surrogatepass")


def sort_relationships(relationships: Iterable[Relationship]) -> List[Relationship]:
    """Order navigations by member name (ordinal), then by target."""
    return sorted(
        relationships,
        key=lambda r: (
            _ordinal_key(r.property_name),
            _ordinal_key(r.primary_entity.full_name),
        ),
    )


def qualified_entity_name(reference: EntityReference) -> str:
    """Fully-qualified, sanitised C# name of a referenced entity."""
    class_name: str = to_safe_name(reference.entity_class)
    if not reference.entity_namespace:
        return class_name
    return f"{to_safe_qualified_name(reference.entity_namespace)}.{class_name}"


# ---------------------------------------------------------------------------
# EntityClassTemplate
# ---------------------------------------------------------------------------


class EntityClassTemplate:
    """
    Code template for a single entity class.

    Usage::

        template = EntityClassTemplate(entity, GeneratorOptions(nullable=True))
        source = template.write_code()
    """

    def __init__(self, entity: Entity, options: GeneratorOptions) -> None:
        self._entity: Entity = entity
        self._options: GeneratorOptions = options

    @property
    def entity(self) -> Entity:
        return self._entity

    @property
    def options(self) -> GeneratorOptions:
        return self._options

    @property
    def class_name(self) -> str:
        return to_safe_name(self._entity.entity_class)

    @property
    def file_name(self) -> str:
        return f"{strip_verbatim(self.class_name)}{self._options.file_extension}"

    # ===================================================================
    # Planning
    # ===================================================================

    def plan_properties(self) -> List[MemberPlan]:
        """Scalar members, in input order."""
        plans: List[MemberPlan] = []

        for prop in self._entity.properties:
            try:
                projected = project_type(
                    prop.system_type, prop.is_nullable, self._options.nullable
                )
            except UnsupportedTypeError as exc:
                raise exc.with_context(
                    self._entity.entity_class, prop.property_name
                ) from exc

            plans.append(MemberPlan(
                role=MemberRole.SCALAR,
                name=to_safe_name(prop.property_name),
                type_name=projected.printed_type,
                initializer=projected.initializer,
                summary=(
                    f"Gets or sets the property value representing column "
                    f"'{prop.column_name}'."
                ),
                value=f"The property value representing column '{prop.column_name}'.",
            ))

        return plans

    def plan_relationships(self) -> List[MemberPlan]:
        """Navigation members, sorted by member name."""
        plans: List[MemberPlan] = []

        for rel in sort_relationships(self._entity.relationships):
            name: str = to_safe_name(rel.property_name)
            target: str = qualified_entity_name(rel.primary_entity)

            if rel.cardinality == Cardinality.MANY:
                plans.append(MemberPlan(
                    role=MemberRole.TO_MANY,
                    name=name,
                    type_name=f"{COLLECTION}<{target}>",
                    summary=(
                        f'Gets or sets the navigation collection for entity '
                        f'<see cref="{target}" />.'
                    ),
                    value=f'The navigation collection for entity <see cref="{target}" />.',
                ))
                continue

            nullable: bool = False
            initializer: Optional[str] = None
            if self._options.nullable:
                if rel.cardinality == Cardinality.ONE:
                    initializer = NON_NULL_DEFAULT
                else:
                    nullable = True

            plans.append(MemberPlan(
                role=MemberRole.TO_ONE,
                name=name,
                type_name=target,
                nullable=nullable,
                initializer=initializer,
                summary=(
                    f'Gets or sets the navigation property for entity '
                    f'<see cref="{target}" />.'
                ),
                value=f'The navigation property for entity <see cref="{target}" />.',
                see_also=tuple(to_safe_name(p) for p in rel.properties),
            ))

        return plans

    def plan_identity_members(self) -> List[MemberPlan]:
        """
        The IIdentifiable adapters over the integer ``Id`` key.

        Writes are deliberately ignored: the key is owned by the database.
        """
        string_type: str = "string?" if self._options.nullable else "string"
        key: str = IDENTITY_PROPERTY_NAME

        return [
            MemberPlan(
                role=MemberRole.IDENTITY_ADAPTER,
                name="StringId",
                type_name=string_type,
                interface=IDENTIFIABLE,
                getter=f"{key}.ToString()",
            ),
            MemberPlan(
                role=MemberRole.IDENTITY_ADAPTER,
                name="LocalId",
                type_name=string_type,
                interface=IDENTIFIABLE,
                getter="null",
            ),
            MemberPlan(
                role=MemberRole.IDENTITY_ADAPTER,
                name=key,
                type_name="int",
                interface=IDENTIFIABLE_OF_INT,
                getter=key,
            ),
        ]

    def collection_initializers(self) -> List[Tuple[str, str]]:
        """(member, element type) for every to-many navigation, by name."""
        many: List[Relationship] = [
            r for r in self._entity.relationships
            if r.cardinality == Cardinality.MANY
        ]
        return [
            (to_safe_name(r.property_name), qualified_entity_name(r.primary_entity))
            for r in sort_relationships(many)
        ]

    # ===================================================================
    # Rendering
    # ===================================================================

    def write_code(self) -> str:
        """
        Generate the complete class file.

        Raises:
            EntityPreconditionError: The entity metadata is malformed.
            UnsupportedTypeError: A property type cannot be printed.
        """
        ensure_valid(self._entity)

        properties: List[MemberPlan] = self.plan_properties()
        relationships: List[MemberPlan] = self.plan_relationships()
        identity: List[MemberPlan] = self.plan_identity_members()
        initializers: List[Tuple[str, str]] = self.collection_initializers()

        builder: CodeBuilder = CodeBuilder(self._options.indent_size)
        namespace: str = to_safe_qualified_name(self._entity.entity_namespace)

        if self._options.file_scoped_namespace:
            builder.append_line(f"namespace {namespace};")
            builder.append_line()
            self._write_class(builder, initializers, properties, relationships, identity)
        else:
            builder.append_line(f"namespace {namespace}")
            builder.append_line("{")
            with builder.indent():
                self._write_class(
                    builder, initializers, properties, relationships, identity
                )
            builder.append_line("}")

        content: str = builder.to_string()
        logger.debug(
            "Generated class '%s': %d properties, %d relationships, %d lines.",
            self.class_name,
            len(properties),
            len(relationships),
            content.count("\n"),
        )
        return content

    def _write_class(
        self,
        builder: CodeBuilder,
        initializers: List[Tuple[str, str]],
        properties: List[MemberPlan],
        relationships: List[MemberPlan],
        identity: List[MemberPlan],
    ) -> None:
        if self._options.document:
            table: str = self._entity.table_name
            if self._entity.table_schema:
                table = f"{self._entity.table_schema}.{table}"
            self._write_doc(
                builder,
                summary=f"Entity class representing data for table '{table}'.",
            )

        builder.append_line(f"public partial class {self.class_name}")

        if self._entity.base_class_mode == BaseClassMode.WITH_BASE:
            base_class: str = to_safe_qualified_name(
                self._entity.entity_base_class.strip()
            )
            with builder.indent():
                builder.append_line(f": {base_class}, {IDENTIFIABLE_OF_INT}")

        builder.append_line("{")
        with builder.indent():
            self._write_constructor(builder, initializers)
            builder.append_line()
            self._write_region(builder, REGION_PROPERTIES, properties)
            builder.append_line()
            self._write_region(builder, REGION_RELATIONSHIPS, relationships)
            builder.append_line()
            self._write_identity_region(builder, identity)
        builder.append_line("}")

    def _write_constructor(
        self, builder: CodeBuilder, initializers: List[Tuple[str, str]]
    ) -> None:
        if self._options.document:
            self._write_doc(
                builder,
                summary=(
                    f'Initializes a new instance of the <see cref="{self.class_name}"/> '
                    f"class."
                ),
            )

        builder.append_line(f"public {self.class_name}()")
        builder.append_line("{")
        with builder.indent():
            builder.append_line(f"#region {REGION_CONSTRUCTOR}")
            for member, element_type in initializers:
                builder.append_line(f"{member} = new {HASH_SET}<{element_type}>();")
            builder.append_line("#endregion")
        builder.append_line("}")

    def _write_region(
        self, builder: CodeBuilder, region: str, members: List[MemberPlan]
    ) -> None:
        builder.append_line(f"#region {region}")
        for member in members:
            self._write_member(builder, member)
        builder.append_line("#endregion")

    def _write_member(self, builder: CodeBuilder, member: MemberPlan) -> None:
        if self._options.document:
            self._write_doc(
                builder,
                summary=member.summary,
                value=member.value,
                see_also=member.see_also,
            )

        parts: List[str] = []
        if member.attribute:
            parts.append(f"[{member.attribute}]")
        parts.append("public")
        if member.is_virtual:
            parts.append("virtual")
        parts.append(member.declared_type)
        parts.append(member.name)
        parts.append("{ get; set; }")

        line: str = " ".join(parts)
        if member.initializer:
            line = f"{line} = {member.initializer};"
        builder.append_line(line)

    def _write_identity_region(
        self, builder: CodeBuilder, members: List[MemberPlan]
    ) -> None:
        builder.append_line(f"#region {REGION_IDENTIFIABLE}")
        for member in members:
            builder.append_line(f"{member.declared_type} {member.interface}.{member.name}")
            builder.append_line("{")
            with builder.indent():
                builder.append_line(f"get => {member.getter};")
                builder.append_line("set { }")
            builder.append_line("}")
        builder.append_line("#endregion")

    @staticmethod
    def _write_doc(
        builder: CodeBuilder,
        summary: str,
        value: str = "",
        see_also: Tuple[str, ...] = (),
    ) -> None:
        builder.append_line("/// <summary>")
        builder.append_line(f"/// {summary}")
        builder.append_line("/// </summary>")
        if value:
            builder.append_line("/// <value>")
            builder.append_line(f"/// {value}")
            builder.append_line("/// </value>")
        for cref in see_also:
            builder.append_line(f'/// <seealso cref="{cref}" />')


# ---------------------------------------------------------------------------
# Functional entry point
# ---------------------------------------------------------------------------


def synthesize(entity: Entity, options: GeneratorOptions) -> str:
    """Generate the class source for *entity*.  Pure; safe to call concurrently."""
    return EntityClassTemplate(entity, options).write_code()


__all__: List[str] = [
    "EntityClassTemplate",
    "MemberPlan",
    "MemberRole",
    "qualified_entity_name",
    "sort_relationships",
    "synthesize",
]

logger.debug("entitygen.templates loaded.")
