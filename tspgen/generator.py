# File: tspgen/generator.py
"""
TSPGen - Generation Pipeline (Orchestrator)
============================================

Connects every phase together:

    Schema text → Backend parse → Model building → TypeSpec rendering → Export

Workflow::

    1. Load generation settings from YAML/JSON (optional).
    2. Pick the parser backend once per process (``tspgen.backends``).
    3. Parse each schema text into a ``ParsedSchema``.
    4. Render one ``TypespecDocument`` per enum and per table.
    5. Aggregate per-file results into a ``GenerationReport``.
    6. Hand the documents to ``DocumentExporter`` unless any file failed.

Error handling strategy:
    - Parse failures live in ``Diagnostics`` and are surfaced, not raised.
    - Unreadable schema files are recorded against that file only; the
      other files still run.
    - The report gives a clear pass/fail verdict; callers decide whether
      to write anything when it failed.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from tspgen.backends import ParserBackend, parse_schema, select_backend
from tspgen.exporters import DocumentExporter, ExportResult
from tspgen.models import (
    Diagnostics,
    GenerationConfig,
    GenerationResult,
    ParsedSchema,
    TypespecDocument,
)
from tspgen.templates import TypespecRenderer
from tspgen.utils import Timer, read_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.generator")


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


@dataclass(frozen=True, slots=True)
class SchemaFileResult:
    """Generation result for one schema file."""

    schema_path: Path
    relative_path: str
    result: GenerationResult


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Aggregated outcome of running the pipeline over several schema files.

    Diagnostics are prefixed with the schema path relative to the project
    root, e.g. ``[db/schema.rb] syntax error at line 3, column 1``.
    """

    project_root: str = ""
    output_directory: str = ""
    total_elapsed_seconds: float = 0.0

    files: List[SchemaFileResult] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    written_files: List[str] = field(default_factory=list)

    @property
    def parse_failed(self) -> bool:
        return len(self.errors) > 0

    @property
    def success(self) -> bool:
        return not self.errors and not self.export_errors

    def documents(self) -> List[Tuple[SchemaFileResult, TypespecDocument]]:
        """Every document paired with the file it came from, enums first per file."""
        return [
            (entry, document)
            for entry in self.files
            for document in entry.result.documents
        ]

    def add_file(self, entry: SchemaFileResult) -> None:
        self.files.append(entry)
        diagnostics: Diagnostics = entry.result.diagnostics
        self.warnings.extend(f"[{entry.relative_path}] {w}" for w in diagnostics.warnings)
        self.errors.extend(f"[{entry.relative_path}] {e}" for e in diagnostics.errors)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        models: int = sum(len(f.result.models) for f in self.files)
        enums: int = sum(len(f.result.enums) for f in self.files)
        lines.append(f"{'='*60}")
        lines.append("  TSPGen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Status:           {status}")
        lines.append(f"  Project root:     {self.project_root}")
        if self.output_directory:
            lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Schema files:     {len(self.files)}")
        lines.append(f"  Models:           {models}")
        lines.append(f"  Enums:            {enums}")
        lines.append(f"  Files written:    {len(self.written_files)}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'─'*60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, entries, marker in (
            ("Warnings", self.warnings, "⚠"),
            ("Errors", self.errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
        ):
            if not entries:
                continue
            lines.append(f"{'─'*60}")
            lines.append(f"  {title} ({len(entries)}):")
            for entry in entries:
                lines.append(f"    {marker} {entry}")

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(read_file(path))
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
        data: Any = yaml.safe_load(read_file(path))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a generation settings file (JSON or YAML).

    Dispatches based on file extension; anything that is not ``.json`` is
    read as YAML (a superset of JSON).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Config path is not a file: {path}")

    if path.suffix.lower() == ".json":
        return _load_json_file(path)
    return _load_yaml_file(path)


def parse_config(
    raw: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> GenerationConfig:
    """
    Build a ``GenerationConfig`` from a raw mapping plus overrides.

    A nested ``config`` / ``generation_config`` key is accepted as well as a
    flat mapping.  ``None`` override values are ignored.

    Raises:
        ValueError: If validation fails.
    """
    data: Dict[str, Any] = dict(raw or {})
    for key in ("config", "generation_config"):
        if isinstance(data.get(key), dict):
            data = dict(data[key])
            break

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        return GenerationConfig.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc


def relative_schema_path(schema_path: Path, project_root: Path) -> str:
    """*schema_path* relative to *project_root*, or its basename when outside it."""
    relative: str = os.path.relpath(schema_path.resolve(), project_root.resolve())
    if not relative or relative.startswith(".."):
        return schema_path.name
    return Path(relative).as_posix()


# ---------------------------------------------------------------------------
# TypespecGenerator — Master orchestrator
# ---------------------------------------------------------------------------


class TypespecGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = TypespecGenerator(GenerationConfig(namespace="App"))

        # One schema text
        result = generator.generate(Path("db/schema.rb").read_text())

        # Several schema files, then write them
        report = generator.generate_files([Path("db/schema.rb")], Path("."))
        if not report.parse_failed:
            generator.export(report, Path("./typespec"))

    The generator is reusable — create once, call generate() many times.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        backend: Optional[ParserBackend] = None,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._backend: Optional[ParserBackend] = backend
        self._renderer: TypespecRenderer = TypespecRenderer(self._config)

        logger.debug(
            "TypespecGenerator initialised: namespace=%s, backend=%s.",
            self._config.namespace,
            backend,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    @property
    def backend(self) -> ParserBackend:
        """The explicit backend, else the process-wide selection."""
        if self._backend is None:
            self._backend = select_backend(self._config)
        return self._backend

    # -----------------------------------------------------------------
    # Public: one schema text
    # -----------------------------------------------------------------

    def parse(self, schema_text: str) -> ParsedSchema:
        return parse_schema(schema_text, config=self._config, backend=self.backend)

    def generate(self, schema_text: str) -> GenerationResult:
        """
        Parse *schema_text* and render every enum and table.

        Whatever was extracted is rendered even when the diagnostics
        carry errors.
        """
        with Timer("generate") as timer:
            parsed: ParsedSchema = self.parse(schema_text)
            result: GenerationResult = GenerationResult(
                models=[self._renderer.model_document(t) for t in parsed.tables],
                enums=[self._renderer.enum_document(e) for e in parsed.enums],
                tables=parsed.tables,
                diagnostics=parsed.diagnostics,
            )

        logger.info(
            "Generated %d models and %d enums in %.3fs (%d warning(s), %d error(s)).",
            len(result.models),
            len(result.enums),
            timer.elapsed,
            len(result.diagnostics.warnings),
            len(result.diagnostics.errors),
        )
        return result

    def generate_from_file(self, schema_path: Path) -> GenerationResult:
        """``generate`` on a UTF-8 schema file. IO errors propagate."""
        return self.generate(read_file(schema_path))

    # -----------------------------------------------------------------
    # Public: several schema files
    # -----------------------------------------------------------------

    def generate_files(
        self,
        schema_paths: Sequence[Path],
        project_root: Path,
    ) -> GenerationReport:
        """Run the pipeline once per file; one bad file doesn't stop the others."""
        report: GenerationReport = GenerationReport(
            project_root=str(project_root.resolve())
        )

        with Timer("generate_files") as total:
            for schema_path in schema_paths:
                relative: str = relative_schema_path(schema_path, project_root)
                with Timer(f"parse {relative}") as t:
                    try:
                        result: GenerationResult = self.generate_from_file(schema_path)
                    except (OSError, UnicodeDecodeError) as exc:
                        logger.error("Could not read %s: %s", schema_path, exc)
                        result = GenerationResult(
                            diagnostics=Diagnostics(errors=[str(exc)])
                        )

                report.add_file(
                    SchemaFileResult(
                        schema_path=schema_path.resolve(),
                        relative_path=relative,
                        result=result,
                    )
                )
                report.step_metrics.append(GenerationStepMetric(
                    step_name=f"Parse {relative}",
                    success=not result.diagnostics.has_errors,
                    elapsed_seconds=t.elapsed,
                    detail=f"{len(result.models)} models, {len(result.enums)} enums",
                ))

        report.total_elapsed_seconds = total.elapsed
        return report

    # -----------------------------------------------------------------
    # Public: export
    # -----------------------------------------------------------------

    def export(
        self,
        report: GenerationReport,
        output_dir: Path,
        *,
        force: bool = False,
    ) -> ExportResult:
        """Write every document in *report* and record the outcome on it."""
        exporter: DocumentExporter = DocumentExporter(
            output_dir,
            project_root=Path(report.project_root or "."),
            force=force,
        )
        with Timer("export") as t:
            export_result: ExportResult = exporter.export(report.documents())

        report.output_directory = str(exporter.output_dir)
        report.export_errors.extend(export_result.errors)
        report.written_files.extend(r.absolute_path for r in export_result.files)
        report.total_elapsed_seconds += t.elapsed
        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=export_result.success,
            elapsed_seconds=t.elapsed,
            detail=f"{len(export_result.files)} files, {export_result.total_bytes:,} bytes",
        ))
        return export_result


# ---------------------------------------------------------------------------
# Convenience API
# ---------------------------------------------------------------------------


def generate_typespec(
    schema_text: str,
    *,
    namespace: Optional[str] = None,
    config: Optional[GenerationConfig] = None,
    backend: Optional[ParserBackend] = None,
) -> GenerationResult:
    """
    Generate TypeSpec documents from one schema text.

    *namespace* overrides the namespace of *config* when given.
    """
    cfg: GenerationConfig = config or GenerationConfig()
    if namespace is not None:
        cfg = GenerationConfig.model_validate({**cfg.model_dump(), "namespace": namespace})
    return TypespecGenerator(cfg, backend=backend).generate(schema_text)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TypespecGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "SchemaFileResult",
    "load_config_file",
    "parse_config",
    "relative_schema_path",
    "generate_typespec",
]

logger.debug("tspgen.generator loaded.")
