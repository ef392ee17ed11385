"""
tests/test_validators.py
Unit tests for entitygen.validators.

Tests cover:
- Name preconditions (class, namespace)
- Member name collisions after sanitisation
- Relationship and identity checks (warnings)
- Model-level cross-entity checks
- ensure_valid / EntityPreconditionError
"""

from __future__ import annotations

import pytest

from entitygen.models import Cardinality, Entity, EntityModel, Property, Relationship
from entitygen.validators import (
    EntityPreconditionError,
    UnsupportedTypeError,
    ValidationResult,
    ensure_valid,
    validate_entity,
    validate_model,
)


def _entity(**overrides) -> Entity:
    data = {
        "entity_namespace": "Shop",
        "entity_class": "Order",
        "properties": [Property(property_name="Id", system_type="System.Int32")],
    }
    data.update(overrides)
    return Entity(**data)


class TestNames:
    def test_valid_entity(self, order_item_entity: Entity) -> None:
        result = validate_entity(order_item_entity)
        assert result.is_valid
        assert len(result) == 0

    def test_empty_class_name(self) -> None:
        result = validate_entity(_entity(entity_class=""))
        assert "EMPTY_CLASS_NAME" in result.codes()
        assert not result

    def test_blank_namespace(self) -> None:
        result = validate_entity(_entity(entity_namespace="  "))
        assert "EMPTY_NAMESPACE" in result.codes()


class TestMemberNames:
    def test_duplicate_after_sanitisation(self) -> None:
        entity = _entity(properties=[
            Property(property_name="Id", system_type="System.Int32"),
            Property(property_name="Unit Price", system_type="System.Decimal"),
            Property(property_name="Unit_Price", system_type="System.Decimal"),
        ])
        result = validate_entity(entity)
        assert "DUPLICATE_MEMBER_NAME" in result.codes()

    def test_escaped_keyword_collides_with_raw_keyword(self) -> None:
        entity = _entity(properties=[
            Property(property_name="Id", system_type="System.Int32"),
            Property(property_name="class", system_type="System.String"),
            Property(property_name="@class", system_type="System.String"),
        ])
        assert "DUPLICATE_MEMBER_NAME" in validate_entity(entity).codes()

    def test_property_and_navigation_collide(self) -> None:
        entity = _entity(relationships=[
            Relationship(property_name="Id", primary_entity="Shop.Customer"),
        ])
        assert "DUPLICATE_MEMBER_NAME" in validate_entity(entity).codes()

    def test_member_named_like_class(self) -> None:
        entity = _entity(properties=[
            Property(property_name="Id", system_type="System.Int32"),
            Property(property_name="Order", system_type="System.String"),
        ])
        assert "MEMBER_NAMED_LIKE_CLASS" in validate_entity(entity).codes()

    def test_empty_member_name(self) -> None:
        entity = _entity(properties=[Property(property_name="", system_type="int")])
        assert "EMPTY_MEMBER_NAME" in validate_entity(entity).codes()


class TestRelationshipChecks:
    def test_missing_target(self) -> None:
        entity = _entity(relationships=[
            Relationship(
                property_name="Customer",
                primary_entity={"entity_namespace": "Shop", "entity_class": " "},
            ),
        ])
        assert "MISSING_PRIMARY_ENTITY" in validate_entity(entity).codes()

    def test_unknown_fk_property_is_warning(self) -> None:
        entity = _entity(relationships=[
            Relationship(
                property_name="Customer",
                cardinality=Cardinality.ONE,
                primary_entity="Shop.Customer",
                properties=["CustomerId"],
            ),
        ])
        result = validate_entity(entity)
        assert result.is_valid
        assert "UNKNOWN_FOREIGN_KEY_PROPERTY" in result.codes()


class TestIdentity:
    def test_missing_id_warns(self) -> None:
        result = validate_entity(_entity(properties=[]))
        assert result.is_valid
        assert "MISSING_ID_PROPERTY" in result.codes()

    def test_key_other_than_id_warns(self) -> None:
        entity = _entity(properties=[
            Property(property_name="Id", system_type="System.Int32"),
            Property(property_name="Code", system_type="System.String", is_primary_key=True),
        ])
        result = validate_entity(entity)
        assert result.is_valid
        assert "KEY_NOT_EXPOSED_AS_ID" in result.codes()

    def test_id_key_accepted(self) -> None:
        entity = _entity(properties=[
            Property(property_name="Id", system_type="System.Int32", is_primary_key=True),
        ])
        assert len(validate_entity(entity)) == 0

    def test_base_class_supplies_id(self) -> None:
        result = validate_entity(_entity(properties=[], entity_base_class="EntityBase"))
        assert "MISSING_ID_PROPERTY" not in result.codes()


class TestModel:
    def test_unknown_primary_entity_warns(self, order_entity: Entity) -> None:
        result = validate_model(EntityModel(entities=[order_entity]))
        assert "UNKNOWN_PRIMARY_ENTITY" in result.codes()
        assert result.is_valid

    def test_resolved_model(self, order_entity: Entity, order_item_entity: Entity) -> None:
        result = validate_model(EntityModel(entities=[order_entity, order_item_entity]))
        assert "UNKNOWN_PRIMARY_ENTITY" not in result.codes()


class TestEnsureValid:
    def test_raises_with_result(self) -> None:
        with pytest.raises(EntityPreconditionError) as excinfo:
            ensure_valid(_entity(entity_class=""))
        assert isinstance(excinfo.value.result, ValidationResult)
        assert excinfo.value.result.error_count >= 1

    def test_returns_warnings(self) -> None:
        result = ensure_valid(_entity(properties=[]))
        assert result.warning_count == 1


class TestErrorMessages:
    def test_unsupported_type_context(self) -> None:
        exc = UnsupportedTypeError("Foo Bar", reason="not a valid type name")
        located = exc.with_context("Order", "Total")
        assert located.entity_name == "Order"
        assert located.property_name == "Total"
        assert "Order.Total" in str(located)
        assert "Foo Bar" in str(located)

    def test_report_format(self) -> None:
        result = validate_entity(_entity(entity_class=""))
        report = result.format_report()
        assert "EMPTY_CLASS_NAME" in report
