"""
tests/conftest.py
Shared fixtures for the entitygen test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict

import pytest
import yaml

from entitygen.models import (
    Cardinality,
    Entity,
    GeneratorOptions,
    Property,
    Relationship,
    SystemType,
)


# ---------------------------------------------------------------------------
# Entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_item_entity() -> Entity:
    return Entity(
        entity_namespace="Shop",
        entity_class="OrderItem",
        table_name="order_items",
        properties=[
            Property(property_name="Id", column_name="id", system_type="System.Int32"),
            Property(
                property_name="OrderId",
                column_name="order_id",
                system_type="System.Int32",
            ),
        ],
    )


@pytest.fixture()
def order_entity(order_item_entity: Entity) -> Entity:
    """The ``Order`` scenario: one decimal property, one to-many navigation."""
    return Entity(
        entity_namespace="Shop",
        entity_class="Order",
        table_name="orders",
        properties=[
            Property(
                property_name="Total",
                column_name="total",
                system_type=SystemType(name="decimal", is_value_type=True),
                is_nullable=False,
            ),
        ],
        relationships=[
            Relationship(
                property_name="Items",
                cardinality=Cardinality.MANY,
                primary_entity=order_item_entity,
            ),
        ],
    )


@pytest.fixture()
def customer_entity() -> Entity:
    """Mixed entity: two to-many navigations, one to-one, varied scalars."""
    return Entity(
        entity_namespace="Shop.Data",
        entity_class="Customer",
        table_name="customers",
        properties=[
            Property(property_name="Id", column_name="id", system_type="System.Int32"),
            Property(
                property_name="Name",
                column_name="name",
                system_type="System.String",
                is_nullable=False,
            ),
            Property(
                property_name="Nickname",
                column_name="nickname",
                system_type="System.String",
                is_nullable=True,
            ),
            Property(
                property_name="BirthDate",
                column_name="birth_date",
                system_type="System.DateTime",
                is_nullable=True,
            ),
            Property(
                property_name="RegionId",
                column_name="region_id",
                system_type="System.Int32",
                is_nullable=False,
            ),
        ],
        relationships=[
            Relationship(
                property_name="Region",
                cardinality=Cardinality.ONE,
                primary_entity={"entity_namespace": "Shop.Data", "entity_class": "Region"},
                properties=["RegionId"],
            ),
            Relationship(
                property_name="Orders",
                cardinality=Cardinality.MANY,
                primary_entity={"entity_namespace": "Shop.Data", "entity_class": "Order"},
            ),
            Relationship(
                property_name="Addresses",
                cardinality=Cardinality.MANY,
                primary_entity={"entity_namespace": "Shop.Data", "entity_class": "Address"},
            ),
        ],
    )


@pytest.fixture()
def plain_options() -> GeneratorOptions:
    return GeneratorOptions(document=False, nullable=False, file_scoped_namespace=True)


# ---------------------------------------------------------------------------
# Raw model fixtures
# ---------------------------------------------------------------------------


_RAW_MODEL: Dict[str, Any] = {
    "options": {
        "document": False,
        "nullable": True,
        "file_scoped_namespace": True,
    },
    "entities": [
        {
            "entity_namespace": "Shop",
            "entity_class": "Order",
            "table_name": "orders",
            "properties": [
                {"property_name": "Id", "column_name": "id", "system_type": "System.Int32"},
                {
                    "property_name": "Total",
                    "column_name": "total",
                    "system_type": "System.Decimal",
                    "is_nullable": False,
                },
            ],
            "relationships": [
                {
                    "property_name": "Items",
                    "cardinality": "many",
                    "primary_entity": "OrderItem",
                },
            ],
        },
        {
            "entity_namespace": "Shop",
            "entity_class": "OrderItem",
            "table_name": "order_items",
            "properties": [
                {"property_name": "Id", "column_name": "id", "system_type": "System.Int32"},
                {
                    "property_name": "OrderId",
                    "column_name": "order_id",
                    "system_type": "System.Int32",
                },
            ],
            "relationships": [
                {
                    "property_name": "Order",
                    "cardinality": "one",
                    "primary_entity": "Order",
                    "properties": ["OrderId"],
                },
            ],
        },
    ],
}


@pytest.fixture()
def raw_model_dict() -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(_RAW_MODEL)


@pytest.fixture()
def model_yaml_path(raw_model_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "model.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(raw_model_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "out"
    return path
