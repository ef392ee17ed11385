# File: entitygen/__init__.py
"""
entitygen — C# Entity Class Generator
======================================

Turns entity metadata (table-backed properties plus navigations to other
entities) into C# partial classes that are JsonApiDotNetCore resources.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌─────────────────────┐
    │  CLI / Entry │────▶│ EntityGenerator │────▶│ EntityClassTemplate │
    │   (cli.py)   │     │ (generator.py)  │     │   (templates.py)    │
    └──────────────┘     └────────┬────────┘     └──────────┬──────────┘
                                  │                         │
                     ┌────────────┼──────────┐    ┌─────────┼──────────┐
                     ▼            ▼          ▼    ▼         ▼          ▼
               ┌──────────┐ ┌─────────┐ ┌───────┐ ┌───────┐ ┌────────────┐
               │validators│ │ models  │ │ utils │ │ types │ │code_builder│
               └──────────┘ └─────────┘ └───────┘ └───────┘ └────────────┘

Usage::

    # As a library
    from entitygen import Entity, GeneratorOptions, synthesize
    source = synthesize(entity, GeneratorOptions(nullable=True))

    # From the command line
    python -m entitygen --model model.yaml --output ./Data/Entities -v

Public API:
    - synthesize           — Entity + options → class source
    - EntityClassTemplate  — The class template
    - EntityGenerator      — Batch orchestrator
    - Entity, Property, Relationship, GeneratorOptions — Input models
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from entitygen.models import (
    BaseClassMode,
    Cardinality,
    Entity,
    EntityModel,
    EntityReference,
    GeneratorOptions,
    Property,
    Relationship,
    SystemType,
)
from entitygen.code_builder import CodeBuilder
from entitygen.utils import Timer, to_safe_name, to_safe_qualified_name
from entitygen.types import ProjectedType, project_type, to_type
from entitygen.validators import (
    EntityPreconditionError,
    GenerationError,
    UnsupportedTypeError,
    ValidationResult,
    validate_entity,
    validate_model,
)
from entitygen.templates import EntityClassTemplate, MemberPlan, MemberRole, synthesize
from entitygen.generator import EntityGenerator, GenerationReport

__all__: list[str] = [
    "__version__",
    "__license__",
    # Orchestrator
    "EntityGenerator",
    "GenerationReport",
    # Models
    "BaseClassMode",
    "Cardinality",
    "Entity",
    "EntityModel",
    "EntityReference",
    "GeneratorOptions",
    "Property",
    "Relationship",
    "SystemType",
    # Synthesis
    "EntityClassTemplate",
    "MemberPlan",
    "MemberRole",
    "synthesize",
    "CodeBuilder",
    "ProjectedType",
    "project_type",
    "to_type",
    # Validation & errors
    "EntityPreconditionError",
    "GenerationError",
    "UnsupportedTypeError",
    "ValidationResult",
    "validate_entity",
    "validate_model",
    # Utilities
    "Timer",
    "to_safe_name",
    "to_safe_qualified_name",
]
