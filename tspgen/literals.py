# File: tspgen/literals.py
"""
TSPGen - Literal & Argument Resolver
=====================================
Turns literal-ish syntax nodes into Python values and pulls argument,
option and statement lists out of call and block nodes.

Resolution order for a literal node (first match wins):

    1. the node already is a primitive (str / int / float / bool)
    2. a primitive ``value`` field
    3. a ``parts`` list (compound / interpolated string) -> concatenation
    4. an ``elements`` list -> list of resolved elements
    5. a ``pairs`` list -> mapping of resolved key/value pairs
    6. last resort: the node's source text sliced by its offsets

Step 6 lives in ``SourceTextFallback`` so it can be replaced or removed
without touching any caller.  It must stay last: structured data keeps
the literal's type (``255`` stays an ``int``), the source slice does not.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tspgen.models import ColumnOptions
from tspgen.nodes import NodeMapping, as_mapping, field, node_tag

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.literals")

# ---------------------------------------------------------------------------
# Field-name priority lists
# ---------------------------------------------------------------------------

ARRAY_ITEM_FIELDS: Tuple[str, ...] = (
    "elements", "args", "arguments", "items", "contents", "parts",
)
OPTION_PAIR_FIELDS: Tuple[str, ...] = ("elements", "assocs", "arguments", "pairs")
PAIR_KEY_FIELDS: Tuple[str, ...] = ("key", "name")
PAIR_VALUE_FIELDS: Tuple[str, ...] = ("value", "val")
NAME_FIELDS: Tuple[str, ...] = ("name", "method", "identifier")
LOCATION_FIELDS: Tuple[str, ...] = ("location", "loc")

PAIR_TAGS: frozenset = frozenset({"AssocNode", "assoc_node", "pair", "assoc"})

_PRIMITIVES: Tuple[type, ...] = (str, int, float, bool)
_MISSING: object = object()


# ---------------------------------------------------------------------------
# Last-resort strategy: source text slicing
# ---------------------------------------------------------------------------


class SourceTextFallback:
    """
    Recover a literal from the raw schema text between a node's offsets.

    Heuristics: surrounding quotes are stripped, a leading ``:`` symbol
    marker is dropped and the bare tokens ``true`` / ``false`` / ``nil``
    become ``True`` / ``False`` / ``None``.  Anything else is returned as
    the raw text.
    """

    _KEYWORDS: Dict[str, Any] = {"true": True, "false": False, "nil": None}

    def resolve(self, json: NodeMapping, source: str) -> Any:
        offsets: Optional[Tuple[int, int]] = self._offsets(json)
        if offsets is None:
            return _MISSING
        start, end = offsets
        raw: str = source[start:end]
        if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
            return raw[1:-1]
        if raw.startswith(":"):
            return raw[1:]
        if raw in self._KEYWORDS:
            return self._KEYWORDS[raw]
        return raw

    @staticmethod
    def _offsets(json: NodeMapping) -> Optional[Tuple[int, int]]:
        location: Any = as_mapping(field(json, *LOCATION_FIELDS)) or json
        start: Any = location.get("startOffset", location.get("start_offset"))
        end: Any = location.get("endOffset", location.get("end_offset"))
        if isinstance(start, int) and isinstance(end, int) and 0 <= start <= end:
            return start, end
        return None


_fallback: SourceTextFallback = SourceTextFallback()


# ---------------------------------------------------------------------------
# Literal resolution
# ---------------------------------------------------------------------------


def resolve_literal(node: Any, source: str) -> Any:
    """Resolve *node* to a Python literal, or ``None`` when nothing fits."""
    if node is None:
        return None
    if isinstance(node, _PRIMITIVES):
        return node

    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        if isinstance(node, (list, tuple)):
            return [resolve_literal(element, source) for element in node]
        return None

    value: Any = json.get("value")
    if isinstance(value, _PRIMITIVES):
        return value

    parts: Any = json.get("parts")
    if isinstance(parts, (list, tuple)):
        return "".join(_join_part(resolve_literal(part, source)) for part in parts)

    elements: Any = json.get("elements")
    if isinstance(elements, (list, tuple)):
        return [resolve_literal(element, source) for element in elements]

    pairs: Any = json.get("pairs")
    if isinstance(pairs, (list, tuple)):
        return options_from_pairs(pairs, source)

    recovered: Any = _fallback.resolve(json, source)
    return None if recovered is _MISSING else recovered


def _join_part(value: Any) -> str:
    return "" if value is None else str(value)


def identifier_name(node: Any, source: str = "") -> Optional[str]:
    """
    Extract a method/selector name from a name-bearing field value.

    Accepts plain strings and the aliasing conventions ``name``,
    ``value``, ``name.value``, ``id.name`` and ``id.value``; otherwise the
    node is resolved as a literal (bare identifiers in tree-sitter trees).
    """
    if node is None:
        return None
    if isinstance(node, str):
        return node
    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        return None

    for candidate in (
        json.get("name"),
        json.get("value"),
        field(json.get("name"), "value"),
        field(json.get("id"), "name"),
        field(json.get("id"), "value"),
    ):
        if isinstance(candidate, str):
            return candidate

    resolved: Any = resolve_literal(json, source)
    if isinstance(resolved, str) and resolved:
        return resolved
    return None


def call_name(call: Any, source: str = "") -> Optional[str]:
    """The method name of a call node."""
    return identifier_name(field(call, *NAME_FIELDS), source)


# ---------------------------------------------------------------------------
# Argument, option and statement lists
# ---------------------------------------------------------------------------


def call_arguments(call: Any) -> List[Any]:
    """Positional argument nodes of a call (``arguments`` or ``arguments.arguments`` or ``args``)."""
    json: Optional[NodeMapping] = as_mapping(call)
    if json is None:
        return []
    arguments: Any = json.get("arguments")
    if isinstance(arguments, (list, tuple)):
        return list(arguments)
    nested: Any = field(arguments, "arguments")
    if isinstance(nested, (list, tuple)):
        return list(nested)
    args: Any = json.get("args")
    if isinstance(args, (list, tuple)):
        return list(args)
    return []


def block_statements(block: Any) -> List[Any]:
    """Statement nodes of a block body, whichever nesting the provider uses."""
    json: Optional[NodeMapping] = as_mapping(block)
    if json is None:
        return []
    body: Any = json.get("body")
    if isinstance(body, (list, tuple)):
        return list(body)
    for candidate in (
        field(body, "statements"),
        field(json.get("statements"), "body"),
        field(body, "body"),
    ):
        if isinstance(candidate, (list, tuple)):
            return list(candidate)
    return []


def array_values(node: Any, source: str) -> List[str]:
    """Non-empty string items of an array-like node, in order."""
    items: Any = field(node, *ARRAY_ITEM_FIELDS)
    if not isinstance(items, (list, tuple)):
        return []
    values: List[str] = []
    for item in items:
        resolved: Any = resolve_literal(item, source)
        if isinstance(resolved, str) and resolved:
            values.append(resolved)
    return values


def is_pair(node: Any) -> bool:
    return node_tag(node) in PAIR_TAGS


def resolve_pair(pair: Any, source: str) -> Optional[Tuple[str, Any]]:
    """
    Resolve one key/value pair node (or ``(key, value)`` sequence).

    Returns ``None`` when the key does not resolve to a non-empty string.
    """
    key_node: Any
    value_node: Any
    if isinstance(pair, (list, tuple)) and len(pair) == 2:
        key_node, value_node = pair
    else:
        json: Optional[NodeMapping] = as_mapping(pair)
        if json is None:
            return None
        key_node = field(json, *PAIR_KEY_FIELDS)
        value_node = field(json, *PAIR_VALUE_FIELDS)
    key: Any = resolve_literal(key_node, source)
    if not isinstance(key, str) or not key:
        return None
    return key, resolve_literal(value_node, source)


def options_from_pairs(pairs: Sequence[Any], source: str) -> ColumnOptions:
    options: ColumnOptions = {}
    for pair in pairs:
        resolved: Optional[Tuple[str, Any]] = resolve_pair(pair, source)
        if resolved is None:
            continue
        key, value = resolved
        options[key] = value
    return options


def options_from_node(node: Any, source: str) -> ColumnOptions:
    """
    Keyed options from a hash-like node.

    The pair list is the first list-valued field among ``elements``,
    ``assocs``, ``arguments`` and ``pairs``.  A node that is itself a pair
    contributes that single option.
    """
    if is_pair(node):
        single: Optional[Tuple[str, Any]] = resolve_pair(node, source)
        return dict([single]) if single is not None else {}
    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        return {}
    for name in OPTION_PAIR_FIELDS:
        pairs: Any = json.get(name)
        if isinstance(pairs, (list, tuple)):
            return options_from_pairs(pairs, source)
    return {}


def merged_options(nodes: Sequence[Any], source: str) -> ColumnOptions:
    """Shallow merge of the options of every node, later nodes win."""
    options: ColumnOptions = {}
    for node in nodes:
        options.update(options_from_node(node, source))
    return options


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SourceTextFallback",
    "resolve_literal",
    "identifier_name",
    "call_name",
    "call_arguments",
    "block_statements",
    "array_values",
    "is_pair",
    "resolve_pair",
    "options_from_pairs",
    "options_from_node",
    "merged_options",
]

logger.debug("tspgen.literals loaded.")
