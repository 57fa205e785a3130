# File: tspgen/type_mapper.py
"""
TSPGen - Type Mapper
=====================
Maps schema DSL column type tags to TypeSpec type names.

The lookup is total and deterministic: the same (lower-cased) tag always
gives the same type, unknown tags give ``unknown``.  Two families of tags
override the table:

    enum                               -> resolved enum identifier, else string
    references / belongs_to / foreign_key -> int64, or unknown when polymorphic
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List

from tspgen.models import ColumnDefinition

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.type_mapper")

# ---------------------------------------------------------------------------
# TypeSpec type names
# ---------------------------------------------------------------------------

TSP_STRING: str = "string"
TSP_INT64: str = "int64"
TSP_UNKNOWN: str = "unknown"

TYPESPEC_TYPE_BY_DSL_TYPE: Dict[str, str] = {
    "string": "string",
    "text": "string",
    "citext": "string",
    "uuid": "string",
    "integer": "int32",
    "int": "int32",
    "bigint": "int64",
    "float": "float64",
    "decimal": "decimal",
    "numeric": "decimal",
    "boolean": "boolean",
    "datetime": "utcDateTime",
    "timestamp": "utcDateTime",
    "timestamptz": "utcDateTime",
    "date": "plainDate",
    "time": "plainTime",
    "binary": "bytes",
    "json": "Record<string, unknown>",
    "jsonb": "Record<string, unknown>",
}

ENUM_TYPES: FrozenSet[str] = frozenset({"enum"})
REFERENCE_TYPES: FrozenSet[str] = frozenset({"references", "belongs_to", "foreign_key"})


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def map_dsl_type(dsl_type: str) -> str:
    """Table lookup only (no enum / reference rules)."""
    return TYPESPEC_TYPE_BY_DSL_TYPE.get(dsl_type.lower(), TSP_UNKNOWN)


def typespec_type(column: ColumnDefinition) -> str:
    """TypeSpec type of *column*, applying the enum and reference rules."""
    normalized: str = column.type.lower()

    if normalized in ENUM_TYPES:
        return column.enum_name or TSP_STRING

    if normalized in REFERENCE_TYPES:
        return TSP_UNKNOWN if column.options.get("polymorphic") is True else TSP_INT64

    return map_dsl_type(normalized)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TYPESPEC_TYPE_BY_DSL_TYPE",
    "ENUM_TYPES",
    "REFERENCE_TYPES",
    "map_dsl_type",
    "typespec_type",
]

logger.debug("tspgen.type_mapper loaded.")
