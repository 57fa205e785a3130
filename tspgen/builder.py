# File: tspgen/builder.py
"""
TSPGen - Schema Model Builder
==============================
Assembles ``TableDefinition`` / ``EnumDefinition`` records from the calls
found by ``tspgen.matchers`` while walking a syntax tree.

Ordering invariants:
    - tables and enums appear in first-encounter (preorder) order;
    - columns appear in declaration order, with the two ``timestamps``
      columns spliced in where the ``timestamps`` call stands.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from tspgen.literals import block_statements
from tspgen.matchers import (
    ColumnCall,
    ColumnStatement,
    CreateEnumCall,
    CreateTableCall,
    TimestampsCall,
    match_column,
    match_create_enum,
    match_create_table,
)
from tspgen.models import (
    ColumnDefinition,
    ColumnOptions,
    Diagnostics,
    EnumDefinition,
    ParsedSchema,
    TableDefinition,
)
from tspgen.nodes import NodeMapping, visit
from tspgen.utils import to_class_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.builder")

ENUM_LINK_OPTIONS: tuple = ("enum_type", "enum", "name")
TIMESTAMP_COLUMN_NAMES: tuple = ("created_at", "updated_at")


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------


def resolve_enum_name(column_type: str, options: ColumnOptions) -> Optional[str]:
    """
    Enum identifier linked from an ``enum`` column's options.

    Takes the first present of ``enum_type``, ``enum`` and ``name``; only
    a non-empty string yields a name.
    """
    if column_type != "enum":
        return None
    raw: Any = next(
        (options[key] for key in ENUM_LINK_OPTIONS if options.get(key) is not None),
        None,
    )
    if isinstance(raw, str) and raw:
        return to_class_name(raw)
    return None


def timestamp_columns() -> List[ColumnDefinition]:
    """Fresh ``created_at`` / ``updated_at`` columns (datetime, required)."""
    return [
        ColumnDefinition(name=name, type="datetime", options={"null": False})
        for name in TIMESTAMP_COLUMN_NAMES
    ]


def build_column(call: ColumnCall) -> ColumnDefinition:
    return ColumnDefinition(
        name=call.name,
        type=call.type,
        options=dict(call.options),
        enum_name=resolve_enum_name(call.type, call.options),
    )


def build_table(match: CreateTableCall, source: str) -> TableDefinition:
    columns: List[ColumnDefinition] = []
    for statement in block_statements(match.block):
        matched: Optional[ColumnStatement] = match_column(statement, source)
        if isinstance(matched, TimestampsCall):
            columns.extend(timestamp_columns())
        elif isinstance(matched, ColumnCall):
            columns.append(build_column(matched))

    return TableDefinition(
        name=match.name,
        class_name=to_class_name(match.name),
        columns=columns,
    )


def build_enum(match: CreateEnumCall) -> EnumDefinition:
    return EnumDefinition(
        name=match.name,
        class_name=to_class_name(match.name),
        values=[v for v in match.values if isinstance(v, str)],
    )


# ---------------------------------------------------------------------------
# Tree extraction
# ---------------------------------------------------------------------------


def extract_schema(
    tree: Any,
    source: str,
    diagnostics: Optional[Diagnostics] = None,
) -> ParsedSchema:
    """
    Walk *tree* once and collect every table and enum definition.

    *diagnostics* (provider warnings/errors) is attached unchanged.
    """
    tables: List[TableDefinition] = []
    enums: List[EnumDefinition] = []

    def _on_node(node: NodeMapping, parent: Optional[NodeMapping]) -> None:
        table_match: Optional[CreateTableCall] = match_create_table(node, parent, source)
        if table_match is not None:
            tables.append(build_table(table_match, source))
            return
        enum_match: Optional[CreateEnumCall] = match_create_enum(node, source)
        if enum_match is not None:
            enums.append(build_enum(enum_match))

    visit(tree, _on_node)

    logger.debug(
        "Extracted %d tables and %d enums from %d characters.",
        len(tables),
        len(enums),
        len(source),
    )
    return ParsedSchema(
        tables=tables,
        enums=enums,
        diagnostics=diagnostics or Diagnostics(),
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "resolve_enum_name",
    "timestamp_columns",
    "build_column",
    "build_table",
    "build_enum",
    "extract_schema",
]

logger.debug("tspgen.builder loaded.")
