# File: tspgen/matchers.py
"""
TSPGen - DSL Call Matcher
==========================
Recognises the handful of schema DSL call shapes inside arbitrary
subtrees:

    create_table "name" do |t| ... end      -> CreateTableCall
    create_enum "name", ["a", "b"]          -> CreateEnumCall
    t.<type> "column", key: value, ...      -> ColumnCall
    t.timestamps  /  timestamps             -> TimestampsCall

Anything else returns ``None``; unsupported DSL is skipped, never
reported.
"""

from __future__ import annotations

import logging
from typing import Any, FrozenSet, List, NamedTuple, Optional, Union

from tspgen.literals import (
    array_values,
    call_arguments,
    call_name,
    merged_options,
    resolve_literal,
)
from tspgen.models import ColumnOptions
from tspgen.nodes import NodeMapping, field, node_tag

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.matchers")

# ---------------------------------------------------------------------------
# Node tags per backend convention
# ---------------------------------------------------------------------------

CALL_TAGS: FrozenSet[str] = frozenset({"CallNode", "call_node", "call"})
BLOCK_TAGS: FrozenSet[str] = frozenset({"BlockNode", "block_node", "do_block", "block"})
IDENTIFIER_TAGS: FrozenSet[str] = frozenset({"identifier"})

TIMESTAMPS_METHODS: FrozenSet[str] = frozenset({"timestamps", "t.timestamps"})


# ---------------------------------------------------------------------------
# Match results
# ---------------------------------------------------------------------------


class CreateTableCall(NamedTuple):
    name: str
    block: NodeMapping


class CreateEnumCall(NamedTuple):
    name: str
    values: List[str]


class ColumnCall(NamedTuple):
    name: str
    type: str
    options: ColumnOptions


class TimestampsCall(NamedTuple):
    pass


ColumnStatement = Union[ColumnCall, TimestampsCall]


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------


def _name_argument(call: Any, source: str) -> Optional[str]:
    arguments: List[Any] = call_arguments(call)
    if not arguments:
        return None
    name: Any = resolve_literal(arguments[0], source)
    if not isinstance(name, str) or not name:
        return None
    return name


def match_create_table(
    node: NodeMapping, parent: Optional[NodeMapping], source: str
) -> Optional[CreateTableCall]:
    """
    Match a block whose owning call is ``create_table(<name>)``.

    The owning call is read from the block's ``call`` / ``statement`` /
    ``target`` field, or is the block's parent node when the provider
    hangs blocks off their call.
    """
    if node_tag(node) not in BLOCK_TAGS:
        return None
    call: Any = field(node, "call", "statement", "target") or parent
    if call is None or call_name(call, source) != "create_table":
        return None
    name: Optional[str] = _name_argument(call, source)
    if name is None:
        return None
    return CreateTableCall(name=name, block=node)


def match_create_enum(node: NodeMapping, source: str) -> Optional[CreateEnumCall]:
    """Match ``create_enum(<name>, <array>)``; a missing array gives no values."""
    if node_tag(node) not in CALL_TAGS:
        return None
    if call_name(node, source) != "create_enum":
        return None
    name: Optional[str] = _name_argument(node, source)
    if name is None:
        return None
    arguments: List[Any] = call_arguments(node)
    values: List[str] = array_values(arguments[1], source) if len(arguments) > 1 else []
    return CreateEnumCall(name=name, values=values)


def match_column(statement: Any, source: str) -> Optional[ColumnStatement]:
    """Match one statement of a ``create_table`` block."""
    tag: Optional[str] = node_tag(statement)

    if tag in IDENTIFIER_TAGS:
        if resolve_literal(statement, source) in TIMESTAMPS_METHODS:
            return TimestampsCall()
        return None

    if tag not in CALL_TAGS:
        return None

    method: Optional[str] = call_name(statement, source)
    if not method:
        return None
    if method in TIMESTAMPS_METHODS:
        return TimestampsCall()

    arguments: List[Any] = call_arguments(statement)
    if not arguments:
        return None
    column_name: Any = resolve_literal(arguments[0], source)
    if not isinstance(column_name, str) or not column_name:
        return None

    return ColumnCall(
        name=column_name.replace('"', ""),
        type=method,
        options=merged_options(arguments[1:], source),
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CALL_TAGS",
    "BLOCK_TAGS",
    "CreateTableCall",
    "CreateEnumCall",
    "ColumnCall",
    "TimestampsCall",
    "ColumnStatement",
    "match_create_table",
    "match_create_enum",
    "match_column",
]

logger.debug("tspgen.matchers loaded.")
