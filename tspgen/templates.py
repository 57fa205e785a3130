# File: tspgen/templates.py
"""
TSPGen - TypeSpec Template Engine
==================================
Turns ``TableDefinition`` and ``EnumDefinition`` records into TypeSpec
source text:

    model Users {
      @doc("default: draft")
      status?: Status;
    }

    enum Status {
      DRAFT: "draft";
    }

**Performance contract:**
    - All string assembly uses ``List[str]`` + ``"\\n".join()``.
    - Template methods are stateless, safe for concurrent use.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from tspgen.models import (
    ColumnDefinition,
    EnumDefinition,
    GenerationConfig,
    TableDefinition,
    TypespecDocument,
)
from tspgen.type_mapper import typespec_type
from tspgen.utils import indent_lines, stringify, to_enum_member_name, wrap_in_quotes

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.templates")

# Documentation annotations, emitted in this order.
_DOC_OPTIONS: tuple = ("default", "limit")


# ---------------------------------------------------------------------------
# Line builders
# ---------------------------------------------------------------------------


def _doc_annotations(column: ColumnDefinition) -> List[str]:
    return [
        f"@doc({wrap_in_quotes(f'{key}: {stringify(column.options[key])}')})"
        for key in _DOC_OPTIONS
        if key in column.options
    ]


def _property_line(column: ColumnDefinition) -> str:
    optional_flag: str = "" if column.is_required else "?"
    return f"{column.name}{optional_flag}: {typespec_type(column)};"


# ---------------------------------------------------------------------------
# TypespecRenderer
# ---------------------------------------------------------------------------


class TypespecRenderer:
    """
    Stateless TypeSpec rendering engine.

    ``render_model`` / ``render_enum`` return the bare declaration;
    ``model_document`` / ``enum_document`` wrap it with the configured
    namespace and pick the document filename.
    """

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        logger.debug(
            "TypespecRenderer initialised (namespace=%s).", self._config.namespace
        )

    # ===================================================================
    # Declarations
    # ===================================================================

    def render_model(self, table: TableDefinition) -> str:
        lines: List[str] = [f"model {table.class_name} {{"]
        body: List[str] = []
        for column in table.columns:
            body.extend(_doc_annotations(column))
            body.append(_property_line(column))
        lines.extend(indent_lines(body))
        lines.append("}")
        return "\n".join(lines)

    def render_enum(self, enum: EnumDefinition) -> str:
        """One member per value; values without identifier characters are skipped."""
        lines: List[str] = [f"enum {enum.class_name} {{"]
        body: List[str] = []
        for value in enum.values:
            member: Optional[str] = to_enum_member_name(value)
            if member is None:
                logger.debug("Skipping enum value %r of %s.", value, enum.name)
                continue
            body.append(f"{member}: {wrap_in_quotes(value)};")
        lines.extend(indent_lines(body))
        lines.append("}")
        return "\n".join(lines)

    # ===================================================================
    # Documents
    # ===================================================================

    def wrap_namespace(self, content: str) -> str:
        namespace: Optional[str] = self._config.namespace
        if not namespace:
            return f"{content}\n"
        return "\n".join([f"namespace {namespace};", "", content, ""])

    def document_name(self, class_name: str) -> str:
        return f"{class_name}{self._config.file_extension}"

    def model_document(self, table: TableDefinition) -> TypespecDocument:
        return TypespecDocument(
            name=self.document_name(table.class_name),
            content=self.wrap_namespace(self.render_model(table)),
            table_name=table.name,
        )

    def enum_document(self, enum: EnumDefinition) -> TypespecDocument:
        return TypespecDocument(
            name=self.document_name(enum.class_name),
            content=self.wrap_namespace(self.render_enum(enum)),
            enum_name=enum.name,
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TypespecRenderer",
]

logger.debug("tspgen.templates loaded.")
