"""
tests/test_builder.py
Unit tests for tspgen.matchers and tspgen.builder.

Trees are hand-built Prism-style mappings (see conftest), so these tests
run without any parser installed.

Tests cover:
- create_table / create_enum / column / timestamps recognition
- Enum linkage from column options
- Declaration and encounter ordering
- Silent skipping of unsupported DSL
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from conftest import (
    array_node,
    block_node,
    call_node,
    column,
    create_enum,
    create_table,
    kwargs,
    lit_node,
    program,
    str_node,
)
from tspgen.builder import extract_schema, resolve_enum_name, timestamp_columns
from tspgen.matchers import (
    ColumnCall,
    TimestampsCall,
    match_column,
    match_create_enum,
    match_create_table,
)
from tspgen.models import Diagnostics, ParsedSchema


def _extract(*statements: Any, source: str = "") -> ParsedSchema:
    return extract_schema(program(*statements), source)


# ===========================================================================
# Matchers
# ===========================================================================


class TestMatchers:
    def test_create_table_needs_owning_call(self) -> None:
        table = create_table("users")
        block: Dict[str, Any] = table["block"]

        assert match_create_table(block, table, "") is not None
        assert match_create_table(block, None, "") is None
        assert match_create_table(table, None, "") is None

    def test_create_table_call_field_on_block(self) -> None:
        block = dict(block_node(), call=call_node("create_table", str_node("users")))
        match = match_create_table(block, None, "")
        assert match is not None and match.name == "users"

    def test_other_block_calls_are_ignored(self) -> None:
        outer = call_node("define", kwargs(version=1), block=block_node())
        assert match_create_table(outer["block"], outer, "") is None

    def test_create_enum_values(self) -> None:
        match = match_create_enum(create_enum("status", "draft", "published"), "")
        assert match is not None
        assert match.name == "status"
        assert match.values == ["draft", "published"]

    def test_create_enum_without_array(self) -> None:
        match = match_create_enum(call_node("create_enum", str_node("mood")), "")
        assert match is not None and match.values == []

    def test_column_call(self) -> None:
        matched = match_column(column("string", "name", kwargs(null=False)), "")
        assert matched == ColumnCall(name="name", type="string", options={"null": False})

    def test_column_name_quotes_are_removed(self) -> None:
        matched = match_column(column("string", 'first"name'), "")
        assert isinstance(matched, ColumnCall) and matched.name == "firstname"

    def test_timestamps_shapes(self) -> None:
        source = "timestamps"
        bare_identifier = {"type": "identifier", "location": {"startOffset": 0, "endOffset": 10}}
        assert match_column(call_node("timestamps"), "") == TimestampsCall()
        assert match_column({"type": "CallNode", "name": "t.timestamps"}, "") == TimestampsCall()
        assert match_column(bare_identifier, source) == TimestampsCall()

    @pytest.mark.parametrize(
        "statement",
        [
            call_node("index", array_node(str_node("account_id")), kwargs(name="idx")),
            call_node("string"),
            {"type": "identifier", "location": {"startOffset": 0, "endOffset": 1}},
            {"type": "CommentNode"},
        ],
    )
    def test_unsupported_statements(self, statement: Dict[str, Any]) -> None:
        assert match_column(statement, "x") is None


# ===========================================================================
# Enum linkage
# ===========================================================================


class TestEnumLinkage:
    @pytest.mark.parametrize(
        "options, expected",
        [
            ({"enum_type": "status"}, "Status"),
            ({"enum": "post_status"}, "PostStatus"),
            ({"name": "mood"}, "Mood"),
            ({"enum_type": None, "enum": "mood"}, "Mood"),
            ({"enum_type": 5, "name": "mood"}, None),
            ({"enum_type": ""}, None),
            ({}, None),
        ],
    )
    def test_resolve_enum_name(self, options: Dict[str, Any], expected: Any) -> None:
        assert resolve_enum_name("enum", options) == expected

    def test_only_enum_columns_link(self) -> None:
        assert resolve_enum_name("string", {"enum_type": "status"}) is None


# ===========================================================================
# Schema extraction
# ===========================================================================


class TestExtractSchema:
    def test_users_table(self) -> None:
        parsed = _extract(
            create_table(
                "users",
                column("string", "name", kwargs(null=False)),
                column("integer", "age"),
            )
        )

        assert len(parsed.tables) == 1
        table = parsed.tables[0]
        assert (table.name, table.class_name) == ("users", "Users")
        assert [(c.name, c.type, c.is_required) for c in table.columns] == [
            ("name", "string", True),
            ("age", "integer", False),
        ]

    def test_status_enum(self) -> None:
        parsed = _extract(create_enum("status", "draft", "published"))
        assert [(e.name, e.class_name, e.values) for e in parsed.enums] == [
            ("status", "Status", ["draft", "published"])
        ]

    def test_enum_column(self) -> None:
        parsed = _extract(
            create_table("posts", column("enum", "status", kwargs(enum_type="status", default="draft")))
        )
        status = parsed.tables[0].get_column("status")
        assert status is not None
        assert status.type == "enum"
        assert status.enum_name == "Status"
        assert status.options == {"enum_type": "status", "default": "draft"}
        assert not status.is_required

    def test_references_column(self) -> None:
        parsed = _extract(create_table("posts", column("references", "account", kwargs(null=False))))
        account = parsed.tables[0].columns[0]
        assert (account.type, account.is_required) == ("references", True)

    def test_timestamps_spliced_in_place(self) -> None:
        parsed = _extract(
            create_table(
                "posts",
                column("string", "title"),
                call_node("timestamps", receiver={"type": "LocalVariableReadNode", "name": "t"}),
                column("boolean", "published"),
            )
        )
        columns = parsed.tables[0].columns
        assert [c.name for c in columns] == ["title", "created_at", "updated_at", "published"]
        for stamp in columns[1:3]:
            assert stamp.type == "datetime"
            assert stamp.is_required

    def test_timestamp_columns_are_fresh(self) -> None:
        first, second = timestamp_columns(), timestamp_columns()
        assert [c.name for c in first] == ["created_at", "updated_at"]
        assert first[0] is not second[0]

    def test_options_from_several_trailing_arguments(self) -> None:
        parsed = _extract(
            create_table(
                "users",
                column("string", "email", kwargs(null=True, limit=255), kwargs(null=False)),
            )
        )
        assert parsed.tables[0].columns[0].options == {"null": False, "limit": 255}

    def test_encounter_order(self) -> None:
        parsed = _extract(
            create_enum("a"),
            create_table("first"),
            create_enum("b"),
            create_table("second"),
        )
        assert [t.name for t in parsed.tables] == ["first", "second"]
        assert [e.name for e in parsed.enums] == ["a", "b"]

    def test_nested_in_schema_define_block(self) -> None:
        define = call_node(
            "define",
            kwargs(version=20240501),
            receiver={"type": "ConstantPathNode"},
            block=block_node(
                call_node("enable_extension", str_node("plpgsql")),
                create_table("accounts", column("string", "name")),
                call_node("add_foreign_key", str_node("posts"), str_node("accounts")),
            ),
        )
        parsed = _extract(define)
        assert [t.name for t in parsed.tables] == ["accounts"]
        assert parsed.enums == []

    def test_invalid_names_are_skipped(self) -> None:
        parsed = _extract(
            call_node("create_table", lit_node(5), block=block_node()),
            call_node("create_table", str_node(""), block=block_node()),
            call_node("create_enum", lit_node(1), array_node(str_node("x"))),
        )
        assert parsed.tables == []
        assert parsed.enums == []

    def test_empty_tree(self) -> None:
        parsed = extract_schema({"type": "ProgramNode"}, "")
        assert parsed == ParsedSchema()

    def test_source_offsets_resolve_names(self) -> None:
        source = 'create_table "users" do |t|\n  t.string "name"\nend\n'
        table_name = {"type": "StringNode", "location": {"startOffset": 13, "endOffset": 20}}
        column_name = {"type": "StringNode", "location": {"startOffset": 39, "endOffset": 45}}
        tree = program(
            call_node(
                "create_table",
                table_name,
                block=block_node(call_node("string", column_name)),
            )
        )
        parsed = extract_schema(tree, source)
        assert parsed.tables[0].name == "users"
        assert parsed.tables[0].column_names == ["name"]

    def test_provider_diagnostics_are_attached(self) -> None:
        diagnostics = Diagnostics(warnings=["w"], errors=["e"])
        parsed = extract_schema(program(create_table("users")), "", diagnostics)
        assert parsed.diagnostics == diagnostics
        assert [t.name for t in parsed.tables] == ["users"]
