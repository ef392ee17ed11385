# File: entitygen/models.py
"""
entitygen - Core Data Models
=============================
Pydantic V2 models describing the entities to generate and the options that
shape the generated code.  These models are the single source of truth for
the pipeline: Model Loading → Validation → Class Synthesis → Export.

Entities are built once per run (by a metadata loader) and treated as
immutable inputs by the templates.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Cardinality(str, Enum):
    """Multiplicity of a navigation, seen from the declaring entity."""

    ZERO_OR_ONE = "zero_or_one"
    ONE = "one"
    MANY = "many"


class BaseClassMode(str, Enum):
    """How the generated class satisfies the identity contract."""

    NO_BASE = "no_base"
    WITH_BASE = "with_base"


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Type descriptor
# ---------------------------------------------------------------------------


class SystemType(BaseModel):
    """
    Logical type of a property.

    ``name`` is a CLR type name (``System.Int32``), a C# alias (``int``) or
    any qualified type name.  ``is_value_type`` may be left unset, in which
    case the type projector infers it from its table of known types.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., description="CLR type name, e.g. 'System.String'.")
    is_value_type: Optional[bool] = Field(
        default=None,
        description="True for structs, False for reference types, None to infer.",
    )

    def __repr__(self) -> str:
        return f"<SystemType {self.name}>"


# ---------------------------------------------------------------------------
# Property & relationship
# ---------------------------------------------------------------------------


class Property(BaseModel):
    """One scalar column mapped onto a generated property."""

    model_config = _SHARED_CONFIG

    property_name: str = Field(..., description="Generated member name.")
    column_name: str = Field(default="", description="Source column (docs only).")
    system_type: SystemType = Field(..., description="Logical type of the column.")
    is_nullable: Optional[bool] = Field(
        default=None, description="Tri-state: True, False or unknown (None)."
    )
    is_primary_key: bool = Field(default=False, description="Part of the key?")

    @field_validator("system_type", mode="before")
    @classmethod
    def _coerce_system_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"name": v}
        return v

    @model_validator(mode="before")
    @classmethod
    def _default_column_name(cls, data: Any) -> Any:
        if isinstance(data, dict):
            has_column: bool = bool(data.get("column_name"))
            if not has_column and data.get("property_name"):
                data = {**data, "column_name": data["property_name"]}
        return data

    def __repr__(self) -> str:
        return (
            f"<Property {self.property_name}: {self.system_type.name}"
            f"{'?' if self.is_nullable else ''}>"
        )


class EntityReference(BaseModel):
    """Non-owning pointer to another entity by namespace and class name."""

    model_config = _SHARED_CONFIG

    entity_namespace: str = Field(default="", description="Namespace of the target.")
    entity_class: str = Field(..., description="Raw class name of the target.")

    @computed_field  # type: ignore[misc]
    @property
    def full_name(self) -> str:
        if self.entity_namespace:
            return f"{self.entity_namespace}.{self.entity_class}"
        return self.entity_class

    def __repr__(self) -> str:
        return f"<EntityReference {self.full_name}>"


class Relationship(BaseModel):
    """A navigation property pointing at another entity."""

    model_config = _SHARED_CONFIG

    property_name: str = Field(..., description="Navigation member name.")
    cardinality: Cardinality = Field(
        default=Cardinality.ONE, description="one, zero_or_one or many."
    )
    primary_entity: EntityReference = Field(
        ..., description="Entity the navigation points at."
    )
    properties: List[str] = Field(
        default_factory=list,
        description="Foreign-key property names, used for doc cross-links.",
    )

    @field_validator("primary_entity", mode="before")
    @classmethod
    def _coerce_reference(cls, v: Any) -> Any:
        if isinstance(v, Entity):
            return v.reference()
        if isinstance(v, str):
            namespace, _, name = v.rpartition(".")
            return {"entity_namespace": namespace, "entity_class": name}
        return v

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [p.property_name if isinstance(p, Property) else p for p in v]
        return v

    @computed_field  # type: ignore[misc]
    @property
    def is_collection(self) -> bool:
        return self.cardinality == Cardinality.MANY

    def __repr__(self) -> str:
        return (
            f"<Relationship {self.property_name} -> "
            f"{self.primary_entity.full_name} ({self.cardinality.value})>"
        )


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------


class Entity(BaseModel):
    """
    Metadata for one generated class.

    ``properties`` keep their input order; ``relationships`` are sorted by
    the templates at generation time.
    """

    model_config = _SHARED_CONFIG

    entity_namespace: str = Field(..., description="Target namespace.")
    entity_class: str = Field(..., description="Raw class name.")
    entity_base_class: Optional[str] = Field(
        default=None, description="Optional base class to inherit from."
    )
    table_name: str = Field(default="", description="Source table (docs only).")
    table_schema: Optional[str] = Field(
        default=None, description="Source database schema (docs only)."
    )
    properties: List[Property] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def base_class_mode(self) -> BaseClassMode:
        if self.entity_base_class and self.entity_base_class.strip():
            return BaseClassMode.WITH_BASE
        return BaseClassMode.NO_BASE

    def reference(self) -> EntityReference:
        return EntityReference(
            entity_namespace=self.entity_namespace,
            entity_class=self.entity_class,
        )

    def get_property(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.property_name == name:
                return prop
        return None

    def __repr__(self) -> str:
        return (
            f"<Entity {self.entity_namespace}.{self.entity_class} "
            f"props={len(self.properties)} rels={len(self.relationships)}>"
        )


# ---------------------------------------------------------------------------
# Generation options
# ---------------------------------------------------------------------------


class GeneratorOptions(BaseModel):
    """
    Project-wide settings for the generated code.

    Accepts both snake_case keys and the PascalCase keys used by existing
    generator configuration files (``Document``, ``FileScopedNamespace``,
    ``Nullable``).
    """

    model_config = _SHARED_CONFIG

    document: bool = Field(
        default=False,
        validation_alias=AliasChoices("document", "Document"),
        description="Emit XML documentation comments.",
    )
    file_scoped_namespace: bool = Field(
        default=False,
        validation_alias=AliasChoices("file_scoped_namespace", "FileScopedNamespace"),
        description="Use 'namespace X;' instead of a braced block.",
    )
    nullable: bool = Field(
        default=False,
        validation_alias=AliasChoices("nullable", "Nullable"),
        description="Target project has nullable reference types enabled.",
    )
    indent_size: int = Field(default=4, ge=1, le=8, description="Spaces per indent.")
    file_extension: str = Field(default=".cs", min_length=1)

    @field_validator("file_extension")
    @classmethod
    def _dotted_extension(cls, v: str) -> str:
        return v if v.startswith(".") else f".{v}"


# ---------------------------------------------------------------------------
# Entity model — top-level container
# ---------------------------------------------------------------------------


class EntityModel(BaseModel):
    """All entities produced by one metadata extraction run."""

    model_config = _SHARED_CONFIG

    entities: List[Entity] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_unique_entities(self) -> "EntityModel":
        seen: Dict[str, int] = {}
        for entity in self.entities:
            key: str = f"{entity.entity_namespace}.{entity.entity_class}"
            seen[key] = seen.get(key, 0) + 1
        dupes: List[str] = sorted(k for k, n in seen.items() if n > 1)
        if dupes:
            raise ValueError(f"Duplicate entity definitions: {dupes}")
        return self

    def get_entity(self, entity_class: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.entity_class == entity_class:
                return entity
        return None

    @computed_field  # type: ignore[misc]
    @property
    def entity_count(self) -> int:
        return len(self.entities)

    def __repr__(self) -> str:
        return f"<EntityModel entities={len(self.entities)}>"


__all__: List[str] = [
    "BaseClassMode",
    "Cardinality",
    "Entity",
    "EntityModel",
    "EntityReference",
    "GeneratorOptions",
    "Property",
    "Relationship",
    "SystemType",
]
