# File: tspgen/ruby_ast.py
"""
TSPGen - tree-sitter Ruby syntax tree adapter
==============================================
Wraps ``tree_sitter.Node`` objects so the Node Access Layer can read them
as plain mappings.

Native tree-sitter nodes expose their data through methods and byte
offsets.  ``RubySyntaxNode.to_dict()`` materialises one level on demand:

* ``type`` - the grammar node type (``call``, ``do_block``, ``string`` ...)
* ``location`` - ``startOffset`` / ``endOffset`` as *character* offsets
* grammar fields (``receiver``, ``method``, ``arguments``, ``block``,
  ``body``, ``parameters``, ``key``, ``value``) as wrapped child nodes
* the remaining named children under one list key picked by node type
* a primitive ``value`` for numeric and boolean leaves and for signed
  numbers (``unary`` around an integer or float)

Children are wrapped lazily and every child is placed exactly once.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.ruby_ast")

# ---------------------------------------------------------------------------
# Grammar knowledge
# ---------------------------------------------------------------------------

_FIELD_NAMES: Tuple[str, ...] = (
    "receiver", "method", "arguments", "block", "body", "parameters", "key", "value",
)

# Key under which the remaining named children are exposed, per node type.
_CHILD_LIST_KEYS: Dict[str, str] = {
    "array": "elements",
    "string_array": "elements",
    "symbol_array": "elements",
    "string": "parts",
    "bare_string": "parts",
    "delimited_symbol": "parts",
    "bare_symbol": "parts",
    "hash": "pairs",
    "argument_list": "arguments",
    "program": "body",
    "body_statement": "body",
    "block_body": "body",
    "do_block": "body",
    "block": "body",
    "begin_block": "body",
}

_BOOLEAN_VALUES: Dict[str, bool] = {"true": True, "false": False}

_NUMERIC_TYPES: Tuple[str, ...] = ("integer", "float")
_SIGNS: Dict[str, int] = {"-": -1, "+": 1}


# ---------------------------------------------------------------------------
# Offset translation
# ---------------------------------------------------------------------------


class OffsetMap:
    """Translates tree-sitter byte offsets into ``str`` indexes."""

    __slots__ = ("_table",)

    def __init__(self, source: str) -> None:
        self._table: Optional[List[int]] = None
        if not source.isascii():
            table: List[int] = []
            for index, char in enumerate(source):
                table.extend([index] * len(char.encode("utf-8")))
            table.append(len(source))
            self._table = table

    def to_char(self, byte_offset: int) -> int:
        if self._table is None:
            return byte_offset
        if byte_offset >= len(self._table):
            return self._table[-1]
        return self._table[byte_offset]


# ---------------------------------------------------------------------------
# Lazily materialised node
# ---------------------------------------------------------------------------


class RubySyntaxNode:
    """Mapping view over a ``tree_sitter.Node``, built on first access."""

    __slots__ = ("_node", "_offsets", "_source", "_mapping")

    def __init__(self, node: Any, offsets: OffsetMap, source: str) -> None:
        self._node: Any = node
        self._offsets: OffsetMap = offsets
        self._source: str = source
        self._mapping: Optional[Dict[str, Any]] = None

    @property
    def type(self) -> str:
        return self._node.type

    def to_dict(self) -> Dict[str, Any]:
        if self._mapping is None:
            self._mapping = self._materialise()
        return self._mapping

    def _wrap(self, node: Any) -> "RubySyntaxNode":
        return RubySyntaxNode(node, self._offsets, self._source)

    def _materialise(self) -> Dict[str, Any]:
        node: Any = self._node
        start: int = self._offsets.to_char(node.start_byte)
        end: int = self._offsets.to_char(node.end_byte)
        mapping: Dict[str, Any] = {
            "type": node.type,
            "location": {"startOffset": start, "endOffset": end},
        }

        claimed: set = set()
        for name in _FIELD_NAMES:
            child: Any = node.child_by_field_name(name)
            if child is None or not child.is_named:
                continue
            mapping[name] = self._wrap(child)
            claimed.add(child.id)

        rest: List[RubySyntaxNode] = [
            self._wrap(child)
            for child in node.named_children
            if child.id not in claimed and child.type != "comment"
        ]
        list_key: str = _CHILD_LIST_KEYS.get(node.type, "children")
        if list_key in mapping:
            # e.g. a do_block whose statements sit under a ``body`` field
            list_key = "children"
        if rest or list_key in ("parts", "elements", "pairs", "arguments"):
            mapping[list_key] = rest

        if node.type == "unary":
            primitive: Any = self._signed_number(node)
        else:
            primitive = self._primitive_value(node.type, self._source[start:end])
        if primitive is not None:
            mapping["value"] = primitive
        return mapping

    def _text(self, node: Any) -> str:
        return self._source[self._offsets.to_char(node.start_byte):self._offsets.to_char(node.end_byte)]

    def _signed_number(self, node: Any) -> Any:
        """``-1`` / ``+2.5`` parse as a ``unary`` around a numeric leaf."""
        operator: Any = node.child_by_field_name("operator")
        operand: Any = node.child_by_field_name("operand")
        if operator is None or operand is None or operand.type not in _NUMERIC_TYPES:
            return None
        sign: Optional[int] = _SIGNS.get(self._text(operator).strip())
        number: Any = self._primitive_value(operand.type, self._text(operand))
        if sign is None or number is None:
            return None
        return sign * number

    @staticmethod
    def _primitive_value(node_type: str, text: str) -> Any:
        if node_type in _BOOLEAN_VALUES:
            return _BOOLEAN_VALUES[node_type]
        try:
            if node_type == "integer":
                return int(text, 0) if not text.isdigit() else int(text)
            if node_type == "float":
                return float(text)
        except ValueError:
            return None
        return None

    def __repr__(self) -> str:
        return f"<RubySyntaxNode {self._node.type} {self._node.start_point}>"


# ---------------------------------------------------------------------------
# Structural diagnostics
# ---------------------------------------------------------------------------


def iter_syntax_problems(root: Any) -> Iterator[str]:
    """Yield one message per ``ERROR`` or missing node, in document order."""
    if not root.has_error:
        return
    stack: List[Any] = [root]
    while stack:
        node: Any = stack.pop()
        if node.is_missing:
            row, column = node.start_point
            yield f"syntax error at line {row + 1}, column {column + 1}: missing {node.type}"
            continue
        if node.type == "ERROR":
            row, column = node.start_point
            yield f"syntax error at line {row + 1}, column {column + 1}"
            continue
        if node.has_error:
            children: Sequence[Any] = node.children
            stack.extend(reversed(children))


def wrap_tree(tree: Any, source: str) -> RubySyntaxNode:
    """Wrap the root of a parsed tree."""
    return RubySyntaxNode(tree.root_node, OffsetMap(source), source)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OffsetMap",
    "RubySyntaxNode",
    "iter_syntax_problems",
    "wrap_tree",
]

logger.debug("tspgen.ruby_ast loaded.")
