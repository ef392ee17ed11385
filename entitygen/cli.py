# File: entitygen/cli.py
"""
entitygen - Command-Line Interface
===================================

Built with the standard-library ``argparse`` module.

Usage examples::

    # Generate one .cs file per entity
    python -m entitygen --model model.yaml --output ./Data/Entities

    # Nullable reference types, file-scoped namespaces, XML docs
    python -m entitygen -m model.json -o ./out \\
        --nullable --file-scoped-namespace --document

    # Validate only (no file output)
    python -m entitygen -m model.yaml --validate-only

    # Print the generated code instead of writing it
    python -m entitygen -m model.yaml --dry-run

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root entitygen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("entitygen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from entitygen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="entitygen",
        description=(
            "entitygen — C# entity class generator.\n\n"
            "Turns an entity model (JSON/YAML) into JsonApiDotNetCore "
            "resource classes, one file per entity."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -m model.yaml -o ./Data/Entities\n"
            "  %(prog)s -m model.json -o ./out --nullable --document\n"
            "  %(prog)s -m model.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"entitygen v{__version__}",
    )

    parser.add_argument(
        "-m", "--model",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the entity model file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help=(
            "Output directory for the generated classes. "
            "Required unless --validate-only or --dry-run is set."
        ),
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the model without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Generate and print the code to stdout; write nothing.",
    )

    # --- Option overrides ---
    options_group = parser.add_argument_group("generator options")
    options_group.add_argument(
        "--document",
        action="store_true",
        default=None,
        help="Emit XML documentation comments.",
    )
    options_group.add_argument(
        "--nullable",
        action="store_true",
        default=None,
        help="Target project uses nullable reference types.",
    )
    options_group.add_argument(
        "--file-scoped-namespace",
        action="store_true",
        default=None,
        help="Use 'namespace X;' instead of a braced namespace block.",
    )
    options_group.add_argument(
        "--indent-size",
        type=int,
        default=None,
        metavar="N",
        help="Spaces per indentation level (default 4).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Abort the whole run if any entity fails validation.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


def _build_option_overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Options given on the command line win over the model file."""
    overrides: Dict[str, object] = {}

    if args.document:
        overrides["document"] = True
    if args.nullable:
        overrides["nullable"] = True
    if args.file_scoped_namespace:
        overrides["file_scoped_namespace"] = True
    if args.indent_size is not None:
        overrides["indent_size"] = args.indent_size

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(model_path: Path) -> int:
    """Run validation only (no code generation)."""
    from entitygen.generator import load_model_file, parse_raw_model
    from entitygen.utils import Timer
    from entitygen.validators import validate_model

    logger.info("Running validation-only mode for: %s", model_path)

    try:
        model, _options = parse_raw_model(load_model_file(model_path))
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load model: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_model(model)

    print(f"\n{'='*50}")
    print("  Entity Model Validation Report")
    print(f"{'='*50}")
    print(f"  File:     {model_path.name}")
    print(f"  Entities: {len(model.entities)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")
    if len(result):
        print()
        print(result.format_report())
    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Generation mode
# ---------------------------------------------------------------------------


def _run_generation(
    model_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
) -> int:
    """Run the generation pipeline and map the report to an exit code."""
    from entitygen.generator import EntityGenerator, GenerationReport

    overrides: Dict[str, object] = _build_option_overrides(args)

    generator: EntityGenerator = EntityGenerator(
        strict_validation=args.strict,
        fail_on_warnings=args.fail_on_warnings,
        dry_run=args.dry_run,
    )

    report: GenerationReport = generator.generate_from_file(
        model_path=model_path,
        output_dir=output_dir,
        option_overrides=overrides or None,
    )

    if args.dry_run:
        for file_name in sorted(report.files):
            print(f"// ---- {file_name} ----")
            print(report.files[file_name])
    if not args.quiet:
        print(report.summary(), file=sys.stderr)

    if not report.success:
        if report.validation_errors:
            return EXIT_VALIDATION_ERROR
        if report.export_errors:
            return EXIT_EXPORT_ERROR
        return EXIT_GENERATION_ERROR

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    model_path: Path = Path(args.model).resolve()

    if not model_path.is_file():
        logger.error("Model file not found: %s", model_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(model_path))

    if args.output is None and not args.dry_run:
        logger.error(
            "Output directory is required for generation. "
            "Use -o/--output, --dry-run or --validate-only."
        )
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Optional[Path] = (
        Path(args.output).resolve() if args.output is not None else None
    )

    logger.info("Model:   %s", model_path)
    logger.info("Output:  %s", output_dir)
    logger.info("Strict:  %s", args.strict)

    exit_code: int = _run_generation(model_path, output_dir, args)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


def main() -> None:
    """Console-script entry point."""
    cli_main()


__all__: List[str] = [
    "cli_main",
    "main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
