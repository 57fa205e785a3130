# File: tspgen/cli.py
"""
TSPGen - Command-Line Interface
================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Generate into ./typespec
    python -m tspgen db/schema.rb

    # Several schemas, one namespace, overwrite previous output
    tspgen db/schema.rb engines/billing/db/schema.rb -n App --force

    # Print the documents instead of writing them
    tspgen db/schema.rb --dry-run

    # Settings from a file (CLI flags win)
    tspgen db/schema.rb --config tspgen.yaml -vv

Exit codes:
    0 — success
    1 — parse error (nothing written)
    2 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, NoReturn, Optional, Sequence

if TYPE_CHECKING:
    from tspgen.generator import TypespecGenerator

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_PARSE_ERROR: int = 1
EXIT_EXPORT_ERROR: int = 2
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root tspgen logger based on verbosity level.

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
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("tspgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from tspgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="tspgen",
        description=(
            "TSPGen — Rails schema to TypeSpec generator.\n\n"
            "Reads create_table / create_enum declarations from schema.rb "
            "files and writes one TypeSpec model or enum per file."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s db/schema.rb\n"
            "  %(prog)s db/schema.rb -n App -o ./typespec --force\n"
            "  %(prog)s db/schema.rb --dry-run\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"TSPGen v{__version__}",
    )

    # --- Inputs ---
    parser.add_argument(
        "schemas",
        nargs="+",
        metavar="SCHEMA",
        help="schema.rb file(s), relative to the project root.",
    )
    parser.add_argument(
        "-p", "--project-root",
        type=str,
        default=".",
        metavar="DIR",
        help="Project root; output mirrors schema paths below it (default: .).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default="./typespec",
        metavar="DIR",
        help="Directory for generated TypeSpec files (default: ./typespec).",
    )

    # --- Configuration ---
    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="YAML or JSON file with generation settings.",
    )
    config_group.add_argument(
        "-n", "--namespace",
        type=str,
        default=None,
        metavar="NAME",
        help="TypeSpec namespace declared at the top of every document.",
    )
    config_group.add_argument(
        "--fallback-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Time limit for the Ruby fallback parser (default: 60).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "-d", "--dry-run",
        action="store_true",
        default=False,
        help="Print the generated documents without writing to disk.",
    )
    mode_group.add_argument(
        "-f", "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files.",
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


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.namespace is not None:
        overrides["namespace"] = args.namespace

    if args.fallback_timeout is not None:
        overrides["fallback_timeout"] = args.fallback_timeout

    return overrides


def _resolve_schema_paths(entries: Sequence[str], project_root: Path) -> List[Path]:
    """Existing schema files; missing entries are skipped with a warning."""
    resolved: List[Path] = []
    for entry in entries:
        candidate: Path = Path(entry)
        if not candidate.is_absolute():
            candidate = project_root / candidate
        if candidate.is_file():
            resolved.append(candidate.resolve())
        else:
            logger.warning("Skipping missing schema file: %s", entry)
    return resolved


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(
    schema_paths: List[Path],
    project_root: Path,
    args: argparse.Namespace,
    generator: "TypespecGenerator",
) -> int:
    """
    Run the full generation pipeline.

    Returns the appropriate exit code.
    """
    from tspgen.generator import GenerationReport

    report: GenerationReport = generator.generate_files(schema_paths, project_root)

    for warning in report.warnings:
        logger.warning(warning)
    for error in report.errors:
        logger.error(error)

    if report.parse_failed:
        logger.error("Generation aborted due to parser errors.")
        return EXIT_PARSE_ERROR

    documents = report.documents()
    if not documents:
        logger.warning("No tables or enums were detected in the given schema files.")
        return EXIT_SUCCESS

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")
        for entry, document in documents:
            print(f"\n// Schema: {entry.relative_path}\n// File: {document.name}\n{document.content}")
        return EXIT_SUCCESS

    generator.export(report, Path(args.output), force=args.force)

    if not args.quiet:
        print(report.summary())

    return EXIT_EXPORT_ERROR if report.export_errors else EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    from tspgen.generator import TypespecGenerator, load_config_file, parse_config
    from tspgen.models import GenerationConfig

    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    # --- Project root ---
    project_root: Path = Path(args.project_root).resolve()
    if not project_root.is_dir():
        logger.error("Project root not found: %s", args.project_root)
        sys.exit(EXIT_INPUT_ERROR)

    # --- Configuration ---
    try:
        raw_config: Dict[str, Any] = (
            load_config_file(Path(args.config)) if args.config else {}
        )
        config: GenerationConfig = parse_config(raw_config, _build_config_overrides(args))
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    # --- Schema files ---
    schema_paths: List[Path] = _resolve_schema_paths(args.schemas, project_root)
    if not schema_paths:
        logger.error("No schema files were found. Check the paths given on the command line.")
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Project root: %s", project_root)
    logger.info("Schemas:      %s", ", ".join(str(p) for p in schema_paths))
    logger.info("Namespace:    %s", config.namespace)

    exit_code: int = _run_generation(
        schema_paths, project_root, args, TypespecGenerator(config)
    )

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_PARSE_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("tspgen.cli loaded.")
