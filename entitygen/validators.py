# File: entitygen/validators.py
"""
entitygen - Entity Validators & Error Types
============================================
Pydantic handles per-field structural correctness of the models in
``entitygen.models``.  This module adds the **semantic preconditions** that a
class can only be generated from a well-formed entity: non-empty names,
member names that stay unique after sanitisation, resolvable navigation
targets, and so on.

Usage by downstream modules:
    from entitygen.validators import validate_entity
    result = validate_entity(entity)
    if not result:
        raise EntityPreconditionError(entity.entity_class, result)
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Set

from entitygen.models import Cardinality, Entity, EntityModel
from entitygen.utils import to_safe_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.validators")

IDENTITY_PROPERTY_NAME: str = "Id"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GenerationError(Exception):
    """Base class for every failure raised while generating an entity."""


class EntityPreconditionError(GenerationError):
    """The entity metadata is malformed; nothing is generated for it."""

    def __init__(self, entity_name: str, result: "ValidationResult") -> None:
        self.entity_name: str = entity_name
        self.result: ValidationResult = result
        messages: str = "; ".join(e.message for e in result.errors)
        super().__init__(f"Entity '{entity_name}' is invalid: {messages}")


class UnsupportedTypeError(GenerationError):
    """A property type cannot be printed as a C# type expression."""

    def __init__(
        self,
        type_name: str,
        *,
        entity_name: Optional[str] = None,
        property_name: Optional[str] = None,
        reason: str = "",
    ) -> None:
        self.type_name: str = type_name
        self.entity_name: Optional[str] = entity_name
        self.property_name: Optional[str] = property_name
        self.reason: str = reason

        location: str = ""
        if entity_name is not None and property_name is not None:
            location = f" for property '{entity_name}.{property_name}'"
        elif entity_name is not None:
            location = f" in entity '{entity_name}'"
        detail: str = f": {reason}" if reason else ""
        super().__init__(f"Unsupported type '{type_name}'{location}{detail}")

    def with_context(self, entity_name: str, property_name: str) -> "UnsupportedTypeError":
        return UnsupportedTypeError(
            self.type_name,
            entity_name=entity_name,
            property_name=property_name,
            reason=self.reason,
        )


# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the validators."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> Set[str]:
        return {e.code for e in self._items}

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual entity checks
# ---------------------------------------------------------------------------


def validate_names(entity: Entity) -> ValidationResult:
    """Class and namespace must be present."""
    result: ValidationResult = ValidationResult()
    ctx: Dict[str, Any] = {"entity": entity.entity_class}

    if not entity.entity_class or not entity.entity_class.strip():
        result.add_error(
            "EMPTY_CLASS_NAME",
            "Entity class name is empty.",
            {"table": entity.table_name},
        )

    if not entity.entity_namespace or not entity.entity_namespace.strip():
        result.add_error(
            "EMPTY_NAMESPACE",
            f"Entity '{entity.entity_class}' has no namespace.",
            ctx,
        )

    if entity.entity_base_class is not None and not entity.entity_base_class.strip():
        result.add_warning(
            "BLANK_BASE_CLASS",
            f"Entity '{entity.entity_class}' has a blank base class; "
            f"it is treated as having none.",
            ctx,
        )

    return result


def validate_member_names(entity: Entity) -> ValidationResult:
    """
    Every generated member name must be unique after sanitisation and must
    differ from the enclosing class name.
    """
    result: ValidationResult = ValidationResult()
    class_name: str = to_safe_name(entity.entity_class)
    seen: Dict[str, str] = {}

    members: List[str] = [p.property_name for p in entity.properties]
    members.extend(r.property_name for r in entity.relationships)

    for raw in members:
        ctx: Dict[str, Any] = {"entity": entity.entity_class, "member": raw}

        if not raw or not raw.strip():
            result.add_error(
                "EMPTY_MEMBER_NAME",
                f"Entity '{entity.entity_class}' has a member with an empty name.",
                ctx,
            )
            continue

        safe: str = to_safe_name(raw)
        if safe in seen:
            result.add_error(
                "DUPLICATE_MEMBER_NAME",
                f"Members '{seen[safe]}' and '{raw}' of entity "
                f"'{entity.entity_class}' both generate '{safe}'.",
                ctx,
            )
            continue
        seen[safe] = raw

        if safe == class_name:
            result.add_error(
                "MEMBER_NAMED_LIKE_CLASS",
                f"Member '{raw}' has the same name as its enclosing class "
                f"'{class_name}'.",
                ctx,
            )

    return result


def validate_relationships(entity: Entity) -> ValidationResult:
    """Navigation targets must be named; FK cross-links should resolve."""
    result: ValidationResult = ValidationResult()
    property_names: Set[str] = {p.property_name for p in entity.properties}

    for rel in entity.relationships:
        ctx: Dict[str, Any] = {
            "entity": entity.entity_class,
            "relationship": rel.property_name,
        }

        if not rel.primary_entity.entity_class.strip():
            result.add_error(
                "MISSING_PRIMARY_ENTITY",
                f"Relationship '{rel.property_name}' of entity "
                f"'{entity.entity_class}' has no target entity.",
                ctx,
            )

        if rel.cardinality == Cardinality.MANY:
            continue

        for fk_name in rel.properties:
            if fk_name not in property_names:
                result.add_warning(
                    "UNKNOWN_FOREIGN_KEY_PROPERTY",
                    f"Relationship '{rel.property_name}' references property "
                    f"'{fk_name}' which is not defined on '{entity.entity_class}'.",
                    {**ctx, "property": fk_name},
                )

    return result


def validate_identity(entity: Entity) -> ValidationResult:
    """The identity members read ``Id``; it must come from somewhere."""
    result: ValidationResult = ValidationResult()

    keys: List[str] = [p.property_name for p in entity.properties if p.is_primary_key]
    if keys and IDENTITY_PROPERTY_NAME not in keys:
        result.add_warning(
            "KEY_NOT_EXPOSED_AS_ID",
            f"Entity '{entity.entity_class}' is keyed on {keys}, but the "
            f"identity members expose '{IDENTITY_PROPERTY_NAME}'.",
            {"entity": entity.entity_class, "keys": keys},
        )

    if entity.entity_base_class and entity.entity_base_class.strip():
        return result

    if entity.get_property(IDENTITY_PROPERTY_NAME) is None:
        result.add_warning(
            "MISSING_ID_PROPERTY",
            f"Entity '{entity.entity_class}' has no '{IDENTITY_PROPERTY_NAME}' "
            f"property and no base class; the identity members will not "
            f"compile unless another partial declares it.",
            {"entity": entity.entity_class},
        )

    return result


# ---------------------------------------------------------------------------
# Aggregate validators
# ---------------------------------------------------------------------------


def validate_entity(entity: Entity) -> ValidationResult:
    """
    Run all entity-level validators.  Returns a merged ``ValidationResult``.

    Complexity: O(P + R) for P properties and R relationships.
    """
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[Entity], ValidationResult]] = [
        validate_names,
        validate_member_names,
        validate_relationships,
        validate_identity,
    ]

    for validator_fn in validators:
        result.merge(validator_fn(entity))

    logger.debug(
        "validate_entity(%s): %s", entity.entity_class, result.summary()
    )
    return result


def validate_model(model: EntityModel) -> ValidationResult:
    """
    Validate every entity plus cross-entity references.

    Relationships pointing at entities outside the model are only a warning:
    the target may live in another, hand-written assembly.
    """
    result: ValidationResult = ValidationResult()
    known: Set[str] = {
        f"{e.entity_namespace}.{e.entity_class}" for e in model.entities
    }

    for entity in model.entities:
        result.merge(validate_entity(entity))

        for rel in entity.relationships:
            if rel.primary_entity.full_name not in known:
                result.add_warning(
                    "UNKNOWN_PRIMARY_ENTITY",
                    f"Relationship '{entity.entity_class}.{rel.property_name}' "
                    f"targets '{rel.primary_entity.full_name}', which is not "
                    f"part of this model.",
                    {"entity": entity.entity_class, "relationship": rel.property_name},
                )

    if result.has_errors:
        logger.error(
            "Model validation FAILED with %d error(s). %s",
            result.error_count,
            result.summary(),
        )
    else:
        logger.info("Model validation PASSED. %s", result.summary())

    return result


def ensure_valid(entity: Entity) -> ValidationResult:
    """Validate *entity* and raise ``EntityPreconditionError`` on any error."""
    result: ValidationResult = validate_entity(entity)
    if result.has_errors:
        raise EntityPreconditionError(entity.entity_class or "<unnamed>", result)
    return result


__all__: List[str] = [
    "GenerationError",
    "EntityPreconditionError",
    "UnsupportedTypeError",
    "ValidationError",
    "ValidationResult",
    "IDENTITY_PROPERTY_NAME",
    "validate_names",
    "validate_member_names",
    "validate_relationships",
    "validate_identity",
    "validate_entity",
    "validate_model",
    "ensure_valid",
]

logger.debug("entitygen.validators loaded — %d public symbols.", len(__all__))
