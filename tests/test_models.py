"""
tests/test_models.py
Unit tests for the pydantic models in entitygen.models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from entitygen.models import (
    BaseClassMode,
    Cardinality,
    Entity,
    EntityModel,
    GeneratorOptions,
    Property,
    Relationship,
)


class TestProperty:
    def test_system_type_from_string(self) -> None:
        prop = Property(property_name="Name", system_type="System.String")
        assert prop.system_type.name == "System.String"
        assert prop.system_type.is_value_type is None

    def test_column_name_defaults_to_property_name(self) -> None:
        prop = Property(property_name="Name", system_type="System.String")
        assert prop.column_name == "Name"

    def test_nullability_is_tri_state(self) -> None:
        assert Property(property_name="A", system_type="int").is_nullable is None
        assert Property(property_name="A", system_type="int", is_nullable=False).is_nullable is False

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Property(property_name="A", system_type="int", colour="red")


class TestRelationship:
    def test_primary_entity_from_entity(self, order_item_entity: Entity) -> None:
        rel = Relationship(property_name="Items", primary_entity=order_item_entity)
        assert rel.primary_entity.full_name == "Shop.OrderItem"

    def test_primary_entity_from_dotted_string(self) -> None:
        rel = Relationship(property_name="Region", primary_entity="Shop.Data.Region")
        assert rel.primary_entity.entity_namespace == "Shop.Data"
        assert rel.primary_entity.entity_class == "Region"

    def test_default_cardinality_is_one(self) -> None:
        rel = Relationship(property_name="Region", primary_entity="Region")
        assert rel.cardinality == Cardinality.ONE
        assert not rel.is_collection

    def test_fk_properties_accept_property_objects(self) -> None:
        fk = Property(property_name="RegionId", system_type="System.Int32")
        rel = Relationship(property_name="Region", primary_entity="Region", properties=[fk])
        assert rel.properties == ["RegionId"]


class TestEntity:
    def test_base_class_mode(self) -> None:
        entity = Entity(entity_namespace="Shop", entity_class="Order")
        assert entity.base_class_mode == BaseClassMode.NO_BASE
        entity.entity_base_class = "EntityBase"
        assert entity.base_class_mode == BaseClassMode.WITH_BASE
        entity.entity_base_class = "   "
        assert entity.base_class_mode == BaseClassMode.NO_BASE

    def test_get_property(self, order_entity: Entity) -> None:
        assert order_entity.get_property("Total") is not None
        assert order_entity.get_property("Missing") is None

    def test_duplicate_entities_rejected(self) -> None:
        entity = {"entity_namespace": "Shop", "entity_class": "Order"}
        with pytest.raises(ValidationError):
            EntityModel.model_validate({"entities": [entity, dict(entity)]})


class TestGeneratorOptions:
    def test_defaults(self) -> None:
        options = GeneratorOptions()
        assert options.document is False
        assert options.file_scoped_namespace is False
        assert options.nullable is False
        assert options.indent_size == 4
        assert options.file_extension == ".cs"

    def test_pascal_case_aliases(self) -> None:
        options = GeneratorOptions.model_validate(
            {"Document": True, "FileScopedNamespace": True, "Nullable": True}
        )
        assert options.document and options.file_scoped_namespace and options.nullable

    def test_extension_gets_dot(self) -> None:
        assert GeneratorOptions(file_extension="g.cs").file_extension == ".g.cs"
