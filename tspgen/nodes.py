# File: tspgen/nodes.py
"""
TSPGen - Node Access Layer
===========================
Normalises heterogeneous syntax-tree nodes into plain mappings.

Two node conventions have to be tolerated:

* nodes that already *are* mappings (Prism-style JSON, hand-built trees),
  tagged under either ``type`` or ``kind``;
* nodes that only materialise their data on demand through a
  ``to_dict()`` method (the tree-sitter wrapper in ``tspgen.ruby_ast``).

Every accessor elsewhere in the package goes through ``as_mapping`` and
``node_tag`` so that neither convention leaks further.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.nodes")

NodeMapping = Mapping[str, Any]
Visitor = Callable[[NodeMapping, Optional[NodeMapping]], None]

_TAG_FIELDS: tuple = ("type", "kind")


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def as_mapping(node: Any) -> Optional[NodeMapping]:
    """Return the keyed view of *node*, materialising it if needed."""
    if node is None:
        return None
    if isinstance(node, Mapping):
        return node
    to_dict: Any = getattr(node, "to_dict", None)
    if callable(to_dict):
        materialised: Any = to_dict()
        if isinstance(materialised, Mapping):
            return materialised
    return None


def node_tag(node: Any) -> Optional[str]:
    """The node's tag from ``type`` (preferred) or ``kind``, else ``None``."""
    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        return None
    for key in _TAG_FIELDS:
        value: Any = json.get(key)
        if isinstance(value, str):
            return value
    return None


def is_taggable(node: Any) -> bool:
    return node_tag(node) is not None


def field(node: Any, *names: str) -> Any:
    """First non-``None`` value among *names* on *node*."""
    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        return None
    for name in names:
        value: Any = json.get(name)
        if value is not None:
            return value
    return None


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def visit(node: Any, visitor: Visitor, parent: Optional[NodeMapping] = None) -> None:
    """
    Depth-first preorder walk calling ``visitor(node, parent)``.

    Only taggable nodes are handed to the visitor.  The walk descends into
    every list-valued field and every nested node that is itself taggable
    (or materialisable), so plain metadata such as location mappings is
    skipped.  Syntax trees carry no back-references, so each node is seen
    exactly once.
    """
    json: Optional[NodeMapping] = as_mapping(node)
    if json is None:
        return

    if is_taggable(json):
        visitor(json, parent)

    for value in list(json.values()):
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for element in value:
                visit(element, visitor, json)
            continue
        if is_taggable(value):
            visit(value, visitor, json)


def collect(node: Any, predicate: Callable[[NodeMapping], bool]) -> List[NodeMapping]:
    """Preorder list of every taggable node satisfying *predicate*."""
    found: List[NodeMapping] = []

    def _gather(json: NodeMapping, _parent: Optional[NodeMapping]) -> None:
        if predicate(json):
            found.append(json)

    visit(node, _gather)
    return found


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "NodeMapping",
    "Visitor",
    "as_mapping",
    "node_tag",
    "is_taggable",
    "field",
    "visit",
    "collect",
]

logger.debug("tspgen.nodes loaded.")
