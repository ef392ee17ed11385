# File: entitygen/generator.py
"""
entitygen - Generation Pipeline (Orchestrator)
===============================================

Connects every phase together:

    Model Input → Validation → Class Synthesis → File Export

The ``EntityGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Load the entity model from a JSON/YAML file (or accept objects).
    2. Parse into ``EntityModel`` + ``GeneratorOptions`` (models.py).
    3. Run model validation (validators.py).
    4. Feed each entity to ``EntityClassTemplate`` (templates.py).
    5. Write the generated files (utils.py), unless in dry-run mode.
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Validation errors are collected and surfaced, not swallowed.
    - Generation errors are isolated per entity: one bad entity never
      changes the output produced for the others.
    - A failed entity produces no file at all, never a partial class.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from entitygen.models import EntityModel, GeneratorOptions
from entitygen.templates import EntityClassTemplate
from entitygen.utils import Timer, count_lines, write_files_batch
from entitygen.validators import GenerationError, ValidationResult, validate_model

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.generator")

_MODEL_KEYS: Tuple[str, ...] = ("model", "entities")
_OPTION_KEYS: Tuple[str, ...] = ("options", "config", "generator_options")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Comprehensive report produced by ``EntityGenerator.generate()``.

    ``files`` maps relative file name → generated source for every entity
    that was generated successfully.
    """

    success: bool = False
    output_directory: str = ""
    dry_run: bool = False

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_entities_processed: int = 0
    total_elapsed_seconds: float = 0.0

    files: Dict[str, str] = field(default_factory=dict)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    failed_entities: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        lines.append(f"{'='*60}")
        lines.append("  entitygen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:             {status}")
        lines.append(f"  Output:             {self.output_directory or '-'}")
        lines.append(f"  Entities processed: {self.total_entities_processed}")
        lines.append(f"  Files generated:    {self.total_files}")
        lines.append(f"  Total lines:        {self.total_lines:,}")
        lines.append(f"  Total bytes:        {self.total_bytes:,}")
        lines.append(f"  Total time:         {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        sections: List[Tuple[str, str, List[str]]] = [
            ("Validation Errors", "✗", self.validation_errors),
            ("Validation Warnings", "⚠", self.validation_warnings),
            ("Generation Errors", "✗", self.generation_errors),
            ("Export Errors", "✗", self.export_errors),
            ("Failed Entities", "⊘", self.failed_entities),
        ]
        for title, icon, items in sections:
            if not items:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Model loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_model_file(path: Path) -> Dict[str, Any]:
    """
    Load an entity model file (JSON or YAML), dispatching on extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Model path is not a file: {path}")

    suffix: str = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _resolve_references(entities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Replace relationship targets given by bare class name with a full
    reference to the entity of that name in the same file.
    """
    by_class: Dict[str, Dict[str, Any]] = {}
    for raw in entities:
        if isinstance(raw, dict) and raw.get("entity_class"):
            by_class.setdefault(raw["entity_class"], raw)

    resolved: List[Dict[str, Any]] = []
    for raw in entities:
        if not isinstance(raw, dict):
            resolved.append(raw)
            continue
        relationships: List[Any] = []
        for rel in raw.get("relationships", []) or []:
            target: Any = rel.get("primary_entity") if isinstance(rel, dict) else None
            if isinstance(target, str) and target in by_class:
                rel = {
                    **rel,
                    "primary_entity": {
                        "entity_namespace": by_class[target].get("entity_namespace", ""),
                        "entity_class": target,
                    },
                }
            relationships.append(rel)
        resolved.append({**raw, "relationships": relationships})
    return resolved


def parse_raw_model(raw: Dict[str, Any]) -> Tuple[EntityModel, GeneratorOptions]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated Pydantic models.

    Expected top-level keys:
        - "entities" (list) or "model" (mapping with "entities")
        - "options" / "config" (optional): generator options

    Raises:
        ValueError: If required keys are missing or validation fails.
    """
    entities_data: Optional[List[Any]] = None
    for key in _MODEL_KEYS:
        if key not in raw:
            continue
        val: Any = raw[key]
        if isinstance(val, list):
            entities_data = val
        elif isinstance(val, dict) and isinstance(val.get("entities"), list):
            entities_data = val["entities"]
        break

    if entities_data is None:
        raise ValueError(
            "Cannot find entity definitions in input. "
            "Expected top-level key: 'entities' or 'model'."
        )

    options_data: Dict[str, Any] = {}
    for key in _OPTION_KEYS:
        if key in raw and raw[key] is not None:
            options_data = raw[key]
            break
    else:
        logger.info("No generator options found in input — using defaults.")

    try:
        model: EntityModel = EntityModel.model_validate(
            {"entities": _resolve_references(entities_data)}
        )
    except PydanticValidationError as exc:
        raise ValueError(f"Entity model validation failed: {exc}") from exc

    try:
        options: GeneratorOptions = GeneratorOptions.model_validate(options_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Options validation failed: {exc}") from exc

    return model, options


def apply_option_overrides(
    options: GeneratorOptions, overrides: Dict[str, Any]
) -> GeneratorOptions:
    """
    Return *options* with *overrides* applied on top.

    The file's options are validated first, so it may spell keys by any
    accepted alias while the overrides use field names.

    Raises:
        ValueError: If the merged options fail validation.
    """
    try:
        return GeneratorOptions.model_validate({**options.model_dump(), **overrides})
    except PydanticValidationError as exc:
        raise ValueError(f"Options validation failed: {exc}") from exc


# ---------------------------------------------------------------------------
# EntityGenerator — orchestrator
# ---------------------------------------------------------------------------


class EntityGenerator:
    """
    Pipeline orchestrator for entity class generation.

    Usage::

        generator = EntityGenerator()

        report = generator.generate_from_file(
            model_path=Path("model.yaml"),
            output_dir=Path("./Data/Entities"),
        )

        report = generator.generate(model, options)   # in memory only
        print(report.files["Order.cs"])

    The generator is reusable — create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = False,
        fail_on_warnings: bool = False,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            strict_validation: Abort the whole run when any entity has a
                validation error (default: skip only the bad entities).
            fail_on_warnings: Treat validation warnings as errors.
            dry_run: Never write files, even when an output dir is given.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._dry_run: bool = dry_run

        logger.debug(
            "EntityGenerator initialised: strict=%s, fail_on_warnings=%s, dry_run=%s.",
            strict_validation,
            fail_on_warnings,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        model_path: Path,
        output_dir: Optional[Path] = None,
        *,
        option_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """Full pipeline: load file → validate → generate → export."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        if output_dir is not None:
            report.output_directory = str(Path(output_dir).resolve())

        with Timer("load_model") as t_load:
            try:
                raw_data: Dict[str, Any] = load_model_file(Path(model_path))
                model, options = parse_raw_model(raw_data)
                if option_overrides:
                    options = apply_option_overrides(options, option_overrides)
            except (FileNotFoundError, ValueError) as exc:
                report.generation_errors.append(str(exc))
                report.step_metrics.append(GenerationStepMetric(
                    step_name="Load Model",
                    success=False,
                    elapsed_seconds=t_load.elapsed,
                    detail=str(exc),
                ))
                logger.error("Failed to load model: %s", exc)
                return self._finalise_report(report, t_load.elapsed)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Model",
            success=True,
            elapsed_seconds=t_load.elapsed,
            detail=f"{len(model.entities)} entities from {Path(model_path).name}",
        ))
        logger.info(
            "Loaded model file: %s (%d entities).", model_path, len(model.entities)
        )

        return self._run_pipeline(model, options, output_dir, report)

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        model: EntityModel,
        options: GeneratorOptions,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """Full pipeline from pre-parsed model and options."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        if output_dir is not None:
            report.output_directory = str(Path(output_dir).resolve())
        return self._run_pipeline(model, options, output_dir, report)

    # -----------------------------------------------------------------
    # Internal: pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        model: EntityModel,
        options: GeneratorOptions,
        output_dir: Optional[Path],
        report: GenerationReport,
    ) -> GenerationReport:
        pipeline_start: float = time.perf_counter()

        validation_ok: bool = self._step_validate(model, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        report.files = self._step_generate(model, options, report)

        if output_dir is not None and not self._dry_run and report.files:
            self._step_export(report.files, Path(output_dir), report)
        elif self._dry_run:
            logger.info("Dry-run mode: %d file(s) not written.", len(report.files))

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _step_validate(self, model: EntityModel, report: GenerationReport) -> bool:
        """Returns True if validation passed (warnings allowed unless configured)."""
        with Timer("validation") as t:
            result: ValidationResult = validate_model(model)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.warning_count:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        ok: bool = result.is_valid and not (
            self._fail_on_warnings and result.warning_count > 0
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Model",
            success=ok,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        for err in result.errors:
            logger.error("  ✗ %s", err)

        if self._fail_on_warnings and result.warning_count and result.is_valid:
            report.validation_errors.append(
                f"{result.warning_count} warning(s) treated as errors."
            )

        return ok

    def _step_generate(
        self,
        model: EntityModel,
        options: GeneratorOptions,
        report: GenerationReport,
    ) -> Dict[str, str]:
        """Generate every entity; a failing entity is recorded and skipped."""
        generated: Dict[str, str] = {}

        with Timer("code_generation") as t:
            for entity in model.entities:
                template: EntityClassTemplate = EntityClassTemplate(entity, options)
                try:
                    content: str = template.write_code()
                except GenerationError as exc:
                    report.generation_errors.append(str(exc))
                    report.failed_entities.append(entity.entity_class or "<unnamed>")
                    logger.error(
                        "Skipping entity '%s': %s", entity.entity_class, exc
                    )
                    continue

                file_name: str = template.file_name
                if file_name in generated:
                    report.generation_errors.append(
                        f"Entities generate the same file '{file_name}'; "
                        f"'{entity.entity_namespace}.{entity.entity_class}' skipped."
                    )
                    report.failed_entities.append(entity.entity_class)
                    continue
                generated[file_name] = content

        report.total_entities_processed = len(model.entities)
        report.total_lines = sum(count_lines(c) for c in generated.values())
        report.total_bytes = sum(len(c.encode("utf-8")) for c in generated.values())
        report.total_files = len(generated)

        detail: str = (
            f"{len(generated)} files, ~{report.total_lines:,} lines, "
            f"{len(report.failed_entities)} failed"
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Code Generation",
            success=not report.failed_entities,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        logger.info("Code generation complete: %s in %.3fs.", detail, t.elapsed)

        return generated

    def _step_export(
        self,
        files: Dict[str, str],
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        """Write all generated files to the filesystem."""
        with Timer("export") as t:
            try:
                written, byte_count = write_files_batch(files, output_dir)
                success: bool = True
                detail: str = f"{written} files, {byte_count:,} bytes"
            except OSError as exc:
                report.export_errors.append(f"Failed to write files: {exc}")
                logger.error("Export failed: %s", exc)
                success = False
                detail = str(exc)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=success,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

    def _finalise_report(
        self,
        report: GenerationReport,
        total_elapsed: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.validation_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


__all__: List[str] = [
    "EntityGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_model_file",
    "parse_raw_model",
    "apply_option_overrides",
]

logger.debug("entitygen.generator loaded.")
