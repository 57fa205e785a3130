"""
tests/test_literals.py
Unit tests for tspgen.nodes and tspgen.literals.

Tests cover:
- Node tags, materialisation through ``to_dict()`` and field priority
- Preorder traversal
- Literal resolution order and the source-text fallback
- Argument / statement / option extraction across field-name variants
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from conftest import array_node, assoc, kwargs, lit_node, str_node, sym_node
from tspgen.literals import (
    SourceTextFallback,
    array_values,
    block_statements,
    call_arguments,
    call_name,
    identifier_name,
    merged_options,
    options_from_node,
    resolve_literal,
    resolve_pair,
)
from tspgen.nodes import as_mapping, collect, field, node_tag, visit


class LazyNode:
    """Node that only exposes its data through ``to_dict()``."""

    def __init__(self, mapping: Dict[str, Any]) -> None:
        self._mapping = mapping
        self.materialised = 0

    def to_dict(self) -> Dict[str, Any]:
        self.materialised += 1
        return self._mapping


# ===========================================================================
# Node access
# ===========================================================================


class TestNodeAccess:
    def test_tag_prefers_type_over_kind(self) -> None:
        assert node_tag({"type": "CallNode", "kind": "call"}) == "CallNode"
        assert node_tag({"kind": "call"}) == "call"

    def test_untaggable_values(self) -> None:
        assert node_tag(None) is None
        assert node_tag("string") is None
        assert node_tag({"startOffset": 1}) is None

    def test_as_mapping_materialises_lazy_nodes(self) -> None:
        lazy = LazyNode({"type": "StringNode", "value": "x"})
        assert as_mapping(lazy) == {"type": "StringNode", "value": "x"}
        assert node_tag(lazy) == "StringNode"

    def test_field_returns_first_present_name(self) -> None:
        node = {"name": None, "method": "string", "identifier": "other"}
        assert field(node, "name", "method", "identifier") == "string"
        assert field(node, "missing") is None
        assert field(None, "name") is None


class TestVisit:
    def test_preorder_with_parents(self) -> None:
        inner = {"type": "Inner"}
        middle = {"type": "Middle", "child": inner}
        root = {"type": "Root", "items": [middle, {"type": "Sibling"}]}
        seen: List[tuple] = []

        visit(root, lambda node, parent: seen.append((node["type"], parent and parent["type"])))

        assert seen == [
            ("Root", None),
            ("Middle", "Root"),
            ("Inner", "Middle"),
            ("Sibling", "Root"),
        ]

    def test_metadata_mappings_are_not_visited(self) -> None:
        root = {"type": "Root", "location": {"startOffset": 0, "endOffset": 3}}
        assert collect(root, lambda node: True) == [root]

    def test_lazy_children_are_descended(self) -> None:
        root = {"type": "Root", "body": [LazyNode({"type": "Leaf"})]}
        tags = [node["type"] for node in collect(root, lambda node: True)]
        assert tags == ["Root", "Leaf"]


# ===========================================================================
# Literal resolution
# ===========================================================================


class TestResolveLiteral:
    def test_primitives_pass_through(self) -> None:
        assert resolve_literal("users", "") == "users"
        assert resolve_literal(255, "") == 255
        assert resolve_literal(False, "") is False
        assert resolve_literal(None, "") is None

    def test_value_field(self) -> None:
        assert resolve_literal(lit_node(10), "") == 10
        assert resolve_literal({"type": "FalseNode", "value": False}, "") is False

    def test_parts_are_concatenated(self) -> None:
        node = {"type": "InterpolatedStringNode", "parts": [str_node("foo"), str_node("bar"), None]}
        assert resolve_literal(node, "") == "foobar"

    def test_elements_become_list(self) -> None:
        assert resolve_literal(array_node(str_node("a"), lit_node(1)), "") == ["a", 1]

    def test_pairs_become_mapping(self) -> None:
        node = {"type": "HashNode", "pairs": [assoc("limit", lit_node(3))]}
        assert resolve_literal(node, "") == {"limit": 3}

    def test_structured_value_wins_over_source_text(self) -> None:
        source = "limit: 255"
        node = {"type": "IntegerNode", "value": 255, "location": {"startOffset": 7, "endOffset": 10}}
        assert resolve_literal(node, source) == 255

    def test_unresolvable_node_gives_none(self) -> None:
        assert resolve_literal({"type": "LambdaNode"}, "whatever") is None


class TestSourceTextFallback:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ('"users"', "users"),
            ("'users'", "users"),
            (":cascade", "cascade"),
            ("true", True),
            ("false", False),
            ("nil", None),
            ("-> { now() }", "-> { now() }"),
        ],
    )
    def test_heuristics(self, source: str, expected: Any) -> None:
        node = {"type": "Unknown", "location": {"startOffset": 0, "endOffset": len(source)}}
        assert resolve_literal(node, source) == expected

    def test_snake_case_offsets_on_the_node(self) -> None:
        source = 'create_table "users"'
        node = {"type": "Unknown", "start_offset": 13, "end_offset": 20}
        assert resolve_literal(node, source) == "users"

    def test_loc_alias(self) -> None:
        node = {"type": "Unknown", "loc": {"start_offset": 0, "end_offset": 4}}
        assert resolve_literal(node, "name") == "name"

    def test_invalid_offsets_are_ignored(self) -> None:
        node = {"type": "Unknown", "location": {"startOffset": 5, "endOffset": 2}}
        assert resolve_literal(node, "abcdef") is None
        assert resolve_literal({"type": "Unknown", "location": {"startOffset": "0"}}, "abc") is None

    def test_strategy_is_usable_on_its_own(self) -> None:
        node = {"type": "Unknown", "location": {"startOffset": 0, "endOffset": 6}}
        assert SourceTextFallback().resolve(node, ":draft") == "draft"


# ===========================================================================
# Names, arguments, statements
# ===========================================================================


class TestNames:
    @pytest.mark.parametrize(
        "value",
        [
            "string",
            {"name": "string"},
            {"value": "string"},
            {"name": {"value": "string"}},
            {"id": {"name": "string"}},
            {"id": {"value": "string"}},
        ],
    )
    def test_identifier_conventions(self, value: Any) -> None:
        assert identifier_name(value) == "string"

    def test_identifier_from_source_text(self) -> None:
        node = {"type": "identifier", "location": {"startOffset": 2, "endOffset": 8}}
        assert identifier_name(node, "t.string") == "string"

    def test_call_name_priority(self) -> None:
        assert call_name({"type": "CallNode", "name": "create_table"}) == "create_table"
        assert call_name({"type": "call", "method": {"name": "integer"}}) == "integer"
        assert call_name({"type": "call", "identifier": "text"}) == "text"
        assert call_name({"type": "call"}) is None


class TestArguments:
    def test_argument_variants(self) -> None:
        first, second = str_node("a"), str_node("b")
        assert call_arguments({"arguments": [first, second]}) == [first, second]
        assert call_arguments({"arguments": {"arguments": [first]}}) == [first]
        assert call_arguments({"args": [second]}) == [second]
        assert call_arguments({"type": "CallNode"}) == []
        assert call_arguments(None) == []

    def test_block_statement_variants(self) -> None:
        stmt = {"type": "CallNode", "name": "string"}
        assert block_statements({"body": [stmt]}) == [stmt]
        assert block_statements({"body": {"statements": [stmt]}}) == [stmt]
        assert block_statements({"statements": {"body": [stmt]}}) == [stmt]
        assert block_statements({"body": {"type": "StatementsNode", "body": [stmt]}}) == [stmt]
        assert block_statements({"type": "BlockNode"}) == []

    def test_array_values_keep_non_empty_strings(self) -> None:
        node = array_node(str_node("draft"), str_node(""), lit_node(3), str_node("published"))
        assert array_values(node, "") == ["draft", "published"]

    @pytest.mark.parametrize("key", ["elements", "args", "arguments", "items", "contents", "parts"])
    def test_array_item_fields(self, key: str) -> None:
        assert array_values({key: [str_node("x")]}, "") == ["x"]

    def test_array_values_of_non_array(self) -> None:
        assert array_values(str_node("x"), "") == []


# ===========================================================================
# Options
# ===========================================================================


class TestOptions:
    def test_keyword_hash(self) -> None:
        assert options_from_node(kwargs(null=False, limit=20), "") == {"null": False, "limit": 20}

    @pytest.mark.parametrize("key", ["elements", "assocs", "arguments", "pairs"])
    def test_pair_list_fields(self, key: str) -> None:
        node = {"type": "HashNode", key: [assoc("default", str_node("x"))]}
        assert options_from_node(node, "") == {"default": "x"}

    def test_single_pair_node(self) -> None:
        assert options_from_node(assoc("null", lit_node(False, "FalseNode")), "") == {"null": False}

    def test_pair_tuple_and_name_val_fields(self) -> None:
        assert resolve_pair((sym_node("limit"), lit_node(5)), "") == ("limit", 5)
        assert resolve_pair({"type": "pair", "name": "x", "val": 1}, "") == ("x", 1)

    def test_pairs_without_string_key_are_dropped(self) -> None:
        node = {"type": "HashNode", "elements": [
            {"type": "AssocNode", "key": lit_node(1), "value": lit_node(2)},
            {"type": "AssocNode", "key": str_node(""), "value": lit_node(2)},
            assoc("ok", lit_node(3)),
        ]}
        assert options_from_node(node, "") == {"ok": 3}

    def test_merge_last_writer_wins(self) -> None:
        merged = merged_options(
            [kwargs(null=True, limit=10), str_node("ignored"), kwargs(null=False)], ""
        )
        assert merged == {"null": False, "limit": 10}

    def test_non_hash_nodes_contribute_nothing(self) -> None:
        assert options_from_node(str_node("x"), "") == {}
        assert options_from_node(None, "") == {}
