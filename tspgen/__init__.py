# File: tspgen/__init__.py
"""
TSPGen — Rails Schema to TypeSpec Generator
============================================

Reads the ``create_table`` / ``create_enum`` declarations of a Rails
``schema.rb`` and renders one TypeSpec ``model`` per table and one
``enum`` per enum type.

Architecture overview::

    ┌──────────────┐     ┌────────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ TypespecGenerator  │────▶│ TypespecRenderer │
    │   (cli.py)   │     │  (generator.py)    │     │  (templates.py)  │
    └──────────────┘     └─────────┬──────────┘     └────────┬─────────┘
                                   │                         │
                      ┌────────────┼────────────┐     ┌──────▼──────┐
                      ▼            ▼            ▼     │ type_mapper │
               ┌───────────┐ ┌──────────┐ ┌───────────┐└─────────────┘
               │ backends  │ │  models  │ │ exporters │
               └─────┬─────┘ └──────────┘ └───────────┘
                     │  tree-sitter  ──▶ ruby_ast → nodes → literals
                     │                   → matchers → builder
                     └─ Ruby fallback ──▶ ruby/schema_fallback.rb (JSON)

Usage::

    # As a library
    from tspgen import generate_typespec
    result = generate_typespec(open("db/schema.rb").read(), namespace="App")
    for document in result.documents:
        print(document.name, document.content)

    # From the command line
    python -m tspgen db/schema.rb --namespace App --output ./typespec

Public API:
    - generate_typespec  — One schema text to documents
    - parse_schema       — One schema text to tables/enums
    - TypespecGenerator  — Reusable orchestrator (files, reports, export)
    - GenerationConfig   — Generation settings model
"""

from __future__ import annotations

__version__: str = "0.1.0"
__license__: str = "MIT"

from tspgen.models import (
    ColumnDefinition,
    ColumnOptions,
    Diagnostics,
    EnumDefinition,
    GenerationConfig,
    GenerationResult,
    ParsedSchema,
    TableDefinition,
    TypespecDocument,
)
from tspgen.backends import (
    ParserBackend,
    SubprocessBackend,
    TreeSitterBackend,
    parse_schema,
    probe_primary_parser,
    select_backend,
)
from tspgen.type_mapper import map_dsl_type, typespec_type
from tspgen.templates import TypespecRenderer
from tspgen.exporters import DocumentExporter, ExportResult
from tspgen.generator import (
    GenerationReport,
    TypespecGenerator,
    generate_typespec,
    load_config_file,
    parse_config,
)
from tspgen.utils import Timer, to_class_name, to_enum_member_name

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Entry points
    "generate_typespec",
    "parse_schema",
    "TypespecGenerator",
    "GenerationReport",
    "load_config_file",
    "parse_config",
    # Models
    "ColumnDefinition",
    "ColumnOptions",
    "Diagnostics",
    "EnumDefinition",
    "GenerationConfig",
    "GenerationResult",
    "ParsedSchema",
    "TableDefinition",
    "TypespecDocument",
    # Backends
    "ParserBackend",
    "SubprocessBackend",
    "TreeSitterBackend",
    "probe_primary_parser",
    "select_backend",
    # Rendering
    "TypespecRenderer",
    "map_dsl_type",
    "typespec_type",
    # Export
    "DocumentExporter",
    "ExportResult",
    # Utilities
    "Timer",
    "to_class_name",
    "to_enum_member_name",
]
