# File: tspgen/backends.py
"""
TSPGen - Dual-Backend Orchestrator
===================================
Produces a ``ParsedSchema`` from schema text through one of two
interchangeable strategies:

    ┌────────────────────┐   probe ok   ┌───────────────────┐
    │ probe_primary_parser│────────────▶│ TreeSitterBackend │  in-process
    │   (once / process)  │             └───────────────────┘
    └─────────┬──────────┘
              │ probe failed
              ▼
    ┌──────────────────────┐
    │  SubprocessBackend   │  ruby schema_fallback.rb, JSON on stdout
    └──────────────────────┘

The probe runs once and its result is cached for the lifetime of the
process; it is never re-evaluated.  Both strategies return the same
``ParsedSchema`` shape, so callers do not care which one ran.

Error handling strategy:
    - Nothing here raises for bad input; every failure is written into
      ``Diagnostics``.
    - Fallback launch failures, timeouts and undecodable output are hard
      stops: empty tables/enums plus an error entry.
    - A non-zero fallback exit status is an error entry, but whatever the
      JSON payload contained is still returned.
"""

from __future__ import annotations

import abc
import functools
import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional

from tspgen.builder import extract_schema, resolve_enum_name
from tspgen.models import (
    ColumnDefinition,
    Diagnostics,
    EnumDefinition,
    GenerationConfig,
    ParsedSchema,
    TableDefinition,
)
from tspgen.ruby_ast import iter_syntax_problems, wrap_tree
from tspgen.utils import to_class_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.backends")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FALLBACK_SCRIPT: Path = Path(__file__).resolve().parent / "ruby" / "schema_fallback.rb"
DEFAULT_FALLBACK_COMMAND: List[str] = ["ruby", str(FALLBACK_SCRIPT)]


# ---------------------------------------------------------------------------
# Diagnostics normalisation
# ---------------------------------------------------------------------------


def normalize_diagnostics(entries: Any) -> List[str]:
    """Provider diagnostics as strings (``message`` when present, else ``str()``)."""
    if not isinstance(entries, (list, tuple)):
        return []
    messages: List[str] = []
    for entry in entries:
        if isinstance(entry, Mapping) and isinstance(entry.get("message"), str):
            messages.append(entry["message"])
        elif isinstance(getattr(entry, "message", None), str):
            messages.append(entry.message)
        else:
            messages.append(str(entry))
    return messages


# ---------------------------------------------------------------------------
# Strategy interface
# ---------------------------------------------------------------------------


class ParserBackend(abc.ABC):
    """Turns schema text into a ``ParsedSchema``."""

    name: str = "backend"

    @abc.abstractmethod
    def parse(self, schema_text: str) -> ParsedSchema:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


# ---------------------------------------------------------------------------
# Primary: tree-sitter
# ---------------------------------------------------------------------------


class TreeSitterBackend(ParserBackend):
    """In-process parsing with the tree-sitter Ruby grammar."""

    name = "tree-sitter"

    def __init__(self, language: Any) -> None:
        self._language: Any = language

    def parse(self, schema_text: str) -> ParsedSchema:
        from tree_sitter import Parser

        # Parsers are not shareable between threads; one per call.
        parser: Any = Parser(self._language)
        try:
            tree: Any = parser.parse(schema_text.encode("utf-8"))
        except Exception as exc:
            logger.error("tree-sitter failed to parse schema: %s", exc)
            return ParsedSchema.failed([f"{type(exc).__name__}: {exc}"])

        errors: List[str] = normalize_diagnostics(list(iter_syntax_problems(tree.root_node)))
        if errors:
            logger.warning("Schema has %d syntax error(s); extracting what parsed.", len(errors))

        return extract_schema(
            wrap_tree(tree, schema_text),
            schema_text,
            Diagnostics(errors=errors),
        )


# ---------------------------------------------------------------------------
# Fallback: external Ruby process
# ---------------------------------------------------------------------------


class SubprocessBackend(ParserBackend):
    """
    Runs an external parser that reads schema text on stdin and prints one
    JSON document (``tables``, ``enums``, ``errors``, ``warnings``).
    """

    name = "ruby-fallback"

    def __init__(
        self,
        command: Optional[List[str]] = None,
        *,
        timeout: Optional[float] = 60.0,
        unavailable_reason: Optional[str] = None,
    ) -> None:
        self._command: List[str] = list(command or DEFAULT_FALLBACK_COMMAND)
        self._timeout: Optional[float] = timeout
        self._reason: Optional[str] = unavailable_reason

    @property
    def command(self) -> List[str]:
        return list(self._command)

    # -- Warning texts ------------------------------------------------------

    def _usage_warning(self) -> str:
        if self._reason:
            return (
                "Used the Ruby Ripper fallback parser because the tree-sitter "
                f"Ruby parser could not be loaded: {self._reason}"
            )
        return "Used the Ruby Ripper fallback parser because the tree-sitter Ruby parser is not available."

    def _launch_warning(self) -> str:
        if self._reason:
            return (
                "The Ruby fallback parser failed after the tree-sitter Ruby parser "
                f"could not be loaded: {self._reason}"
            )
        return "Failed to run the Ruby fallback parser."

    def _decode_warning(self) -> str:
        if self._reason:
            return (
                "Could not interpret the Ruby fallback output after the tree-sitter "
                f"Ruby parser could not be loaded: {self._reason}"
            )
        return "Could not interpret the Ruby fallback output."

    # -- Parse --------------------------------------------------------------

    def parse(self, schema_text: str) -> ParsedSchema:
        logger.debug("Running fallback parser: %s", " ".join(self._command))
        try:
            completed: subprocess.CompletedProcess = subprocess.run(
                self._command,
                input=schema_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            message: str = f"Ruby fallback parser timed out after {self._timeout:g} seconds."
            logger.error(message)
            return ParsedSchema.failed([message], [self._launch_warning()])
        except (OSError, ValueError) as exc:
            logger.error("Could not start fallback parser %s: %s", self._command[0], exc)
            return ParsedSchema.failed([str(exc)], [self._launch_warning()])

        if completed.stderr:
            logger.debug("Fallback parser stderr:\n%s", completed.stderr.rstrip())

        try:
            payload: Any = json.loads((completed.stdout or "").strip() or "{}")
        except json.JSONDecodeError as exc:
            logger.error("Fallback parser printed invalid JSON: %s", exc)
            return ParsedSchema.failed([str(exc)], [self._decode_warning()])
        if not isinstance(payload, dict):
            logger.error("Fallback parser printed %s instead of an object.", type(payload).__name__)
            return ParsedSchema.failed(
                [f"Expected a JSON object from the Ruby fallback, got {type(payload).__name__}."],
                [self._decode_warning()],
            )

        warnings: List[str] = [str(w) for w in _as_list(payload.get("warnings"))]
        warnings.append(self._usage_warning())
        errors: List[str] = [str(e) for e in _as_list(payload.get("errors"))]
        if completed.returncode != 0:
            errors.append(
                f"Ruby fallback parser exited with status {completed.returncode}."
            )

        return ParsedSchema(
            tables=decode_tables(payload.get("tables")),
            enums=decode_enums(payload.get("enums")),
            diagnostics=Diagnostics(warnings=warnings, errors=errors),
        )


# ---------------------------------------------------------------------------
# Payload decoding (tolerant of loose / snake_case field names)
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def decode_column(raw: Any) -> Optional[ColumnDefinition]:
    if not isinstance(raw, dict):
        return None
    name: Any = raw.get("name")
    column_type: Any = raw.get("type")
    if not isinstance(name, str) or not isinstance(column_type, str):
        return None
    options: Any = raw.get("options")
    if not isinstance(options, dict):
        options = {}

    enum_name: Any = None
    if column_type == "enum":
        enum_name = _first(raw, "enumName", "enum_name")
        if not isinstance(enum_name, str) or not enum_name:
            enum_name = resolve_enum_name(column_type, options)

    return ColumnDefinition(name=name, type=column_type, options=options, enum_name=enum_name)


def decode_tables(raw_tables: Any) -> List[TableDefinition]:
    tables: List[TableDefinition] = []
    for raw in _as_list(raw_tables):
        if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
            continue
        columns: List[ColumnDefinition] = [
            column
            for column in (decode_column(c) for c in _as_list(raw.get("columns")))
            if column is not None
        ]
        tables.append(
            TableDefinition(
                name=raw["name"],
                class_name=to_class_name(raw["name"]),
                columns=columns,
            )
        )
    return tables


def decode_enums(raw_enums: Any) -> List[EnumDefinition]:
    enums: List[EnumDefinition] = []
    for raw in _as_list(raw_enums):
        if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
            continue
        enums.append(
            EnumDefinition(
                name=raw["name"],
                class_name=to_class_name(raw["name"]),
                values=[v for v in _as_list(raw.get("values")) if isinstance(v, str)],
            )
        )
    return enums


# ---------------------------------------------------------------------------
# Capability probe & selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of loading the primary parser; immutable once computed."""

    available: bool
    reason: Optional[str] = None
    language: Any = None


@functools.lru_cache(maxsize=1)
def probe_primary_parser() -> ProbeResult:
    """Try to load tree-sitter and its Ruby grammar (cached per process)."""
    try:
        import tree_sitter
        import tree_sitter_ruby

        language: Any = tree_sitter.Language(tree_sitter_ruby.language())
        tree_sitter.Parser(language)
    except Exception as exc:
        reason: str = f"{type(exc).__name__}: {exc}"
        logger.warning("tree-sitter Ruby parser unavailable (%s); using the Ruby fallback.", reason)
        return ProbeResult(available=False, reason=reason)

    logger.info("Using the tree-sitter Ruby parser.")
    return ProbeResult(available=True, language=language)


def select_backend(config: Optional[GenerationConfig] = None) -> ParserBackend:
    """The strategy matching the (cached) probe result."""
    cfg: GenerationConfig = config or GenerationConfig()
    probe: ProbeResult = probe_primary_parser()
    if probe.available:
        return TreeSitterBackend(probe.language)
    return SubprocessBackend(
        cfg.fallback_command,
        timeout=cfg.fallback_timeout,
        unavailable_reason=probe.reason,
    )


def parse_schema(
    schema_text: str,
    *,
    config: Optional[GenerationConfig] = None,
    backend: Optional[ParserBackend] = None,
) -> ParsedSchema:
    """Parse one schema text with *backend* or the process-wide selection."""
    active: ParserBackend = backend or select_backend(config)
    return active.parse(schema_text)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FALLBACK_SCRIPT",
    "DEFAULT_FALLBACK_COMMAND",
    "normalize_diagnostics",
    "ParserBackend",
    "TreeSitterBackend",
    "SubprocessBackend",
    "decode_column",
    "decode_tables",
    "decode_enums",
    "ProbeResult",
    "probe_primary_parser",
    "select_backend",
    "parse_schema",
]

logger.debug("tspgen.backends loaded.")
