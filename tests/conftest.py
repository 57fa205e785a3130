"""
tests/conftest.py
Shared fixtures for the tspgen test suite.

Syntax trees are built by hand as Prism-style mappings (``CallNode``,
``BlockNode``, ``StatementsNode`` ...) so the extraction layer can be
tested without any parser installed.  Tests that need the tree-sitter
Ruby grammar use the ``tree_sitter_backend`` fixture, which skips when the
grammar is missing.  The fallback path is exercised with the current
Python interpreter standing in for the external parser executable.
"""

from __future__ import annotations

import json
import logging
import pathlib
import sys
import textwrap
from typing import Any, Dict, List, Optional

import pytest
import yaml

from tspgen.backends import ParserBackend
from tspgen.models import Diagnostics, ParsedSchema


# ---------------------------------------------------------------------------
# Schema texts
# ---------------------------------------------------------------------------

USERS_SCHEMA: str = textwrap.dedent(
    """\
    create_table "users" do |t|
      t.string "name", null: false
      t.integer "age"
    end
    """
)

STATUS_ENUM_SCHEMA: str = 'create_enum "status", ["draft", "published"]\n'

FULL_SCHEMA: str = textwrap.dedent(
    """\
    # This file is auto-generated from the current state of the database.
    ActiveRecord::Schema[7.1].define(version: 2024_05_01_120000) do
      enable_extension "plpgsql"

      create_enum "post_status", ["draft", "in review", "published"]

      create_table "accounts", force: :cascade do |t|
        t.string "name", null: false, limit: 120
        t.timestamps
      end

      create_table "posts", force: :cascade do |t|
        t.references "account", null: false, foreign_key: true
        t.references "attachable", polymorphic: true
        t.string "title", null: false
        t.enum "status", enum_type: "post_status", default: "draft", null: false
        t.decimal "price", precision: 10, scale: 2
        t.jsonb "metadata", default: {}
        t.boolean "published", default: false
        t.timestamps
        t.index ["account_id"], name: "index_posts_on_account_id"
      end

      add_foreign_key "posts", "accounts"
    end
    """
)


@pytest.fixture()
def users_schema() -> str:
    return USERS_SCHEMA


@pytest.fixture()
def full_schema() -> str:
    return FULL_SCHEMA


# ---------------------------------------------------------------------------
# Prism-style node builders
# ---------------------------------------------------------------------------


def str_node(value: str) -> Dict[str, Any]:
    return {"type": "StringNode", "value": value}


def sym_node(value: str) -> Dict[str, Any]:
    return {"type": "SymbolNode", "value": value}


def lit_node(value: Any, node_type: str = "IntegerNode") -> Dict[str, Any]:
    return {"type": node_type, "value": value}


def array_node(*elements: Any) -> Dict[str, Any]:
    return {"type": "ArrayNode", "elements": list(elements)}


def assoc(key: str, value: Any) -> Dict[str, Any]:
    return {"type": "AssocNode", "key": sym_node(key), "value": value}


def kwargs(**options: Any) -> Dict[str, Any]:
    """Keyword-hash node; plain Python values are wrapped as literals."""
    elements: List[Dict[str, Any]] = []
    for key, value in options.items():
        if isinstance(value, dict):
            node: Any = value
        elif isinstance(value, bool):
            node = {"type": "TrueNode" if value else "FalseNode", "value": value}
        elif isinstance(value, str):
            node = str_node(value)
        else:
            node = lit_node(value)
        elements.append(assoc(key, node))
    return {"type": "KeywordHashNode", "elements": elements}


def call_node(
    name: str,
    *arguments: Any,
    receiver: Optional[Dict[str, Any]] = None,
    block: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "type": "CallNode",
        "name": name,
        "receiver": receiver,
        "arguments": {"type": "ArgumentsNode", "arguments": list(arguments)},
    }
    if block is not None:
        node["block"] = block
    return node


def column(method: str, name: str, *options: Any) -> Dict[str, Any]:
    """``t.<method> "<name>", ...``"""
    return call_node(
        method,
        str_node(name),
        *options,
        receiver={"type": "LocalVariableReadNode", "name": "t"},
    )


def block_node(*statements: Any) -> Dict[str, Any]:
    return {
        "type": "BlockNode",
        "body": {"type": "StatementsNode", "body": list(statements)},
    }


def create_table(name: str, *statements: Any) -> Dict[str, Any]:
    return call_node("create_table", str_node(name), block=block_node(*statements))


def create_enum(name: str, *values: str) -> Dict[str, Any]:
    return call_node("create_enum", str_node(name), array_node(*(str_node(v) for v in values)))


def program(*statements: Any) -> Dict[str, Any]:
    return {
        "type": "ProgramNode",
        "statements": {"type": "StatementsNode", "body": list(statements)},
    }


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class StaticBackend(ParserBackend):
    """Returns the same ``ParsedSchema`` for every input and records calls."""

    name = "static"

    def __init__(self, parsed: Optional[ParsedSchema] = None) -> None:
        self.parsed: ParsedSchema = parsed or ParsedSchema()
        self.calls: List[str] = []

    def parse(self, schema_text: str) -> ParsedSchema:
        self.calls.append(schema_text)
        return self.parsed


@pytest.fixture()
def static_backend() -> StaticBackend:
    return StaticBackend()


def python_command(script: str) -> List[str]:
    """argv running *script* with the current interpreter."""
    return [sys.executable, "-c", textwrap.dedent(script)]


def echo_payload_command(payload: Any, exit_code: int = 0) -> List[str]:
    """argv of a fake fallback that drains stdin, prints *payload* and exits."""
    return python_command(
        f"""
        import sys
        sys.stdin.read()
        sys.stdout.write({json.dumps(json.dumps(payload))})
        sys.exit({exit_code})
        """
    )


@pytest.fixture(scope="session")
def tree_sitter_language() -> Any:
    tree_sitter = pytest.importorskip("tree_sitter")
    tree_sitter_ruby = pytest.importorskip("tree_sitter_ruby")
    return tree_sitter.Language(tree_sitter_ruby.language())


@pytest.fixture()
def tree_sitter_backend(tree_sitter_language: Any) -> ParserBackend:
    from tspgen.backends import TreeSitterBackend

    return TreeSitterBackend(tree_sitter_language)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture()
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A project root holding ``db/schema.rb`` with the users table."""
    root: pathlib.Path = tmp_path / "app"
    (root / "db").mkdir(parents=True)
    (root / "db" / "schema.rb").write_text(USERS_SCHEMA, encoding="utf-8")
    return root


@pytest.fixture()
def config_yaml_path(tmp_path: pathlib.Path) -> pathlib.Path:
    path: pathlib.Path = tmp_path / "tspgen.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump({"namespace": "App", "fallback_timeout": 5}, fh)
    return path


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_tspgen_logger() -> Any:
    """The CLI installs its own handler on ``tspgen``; undo it after each test."""
    yield
    root_logger: logging.Logger = logging.getLogger("tspgen")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


def parsed_with(*, tables: Any = (), enums: Any = (), errors: Any = (), warnings: Any = ()) -> ParsedSchema:
    return ParsedSchema(
        tables=list(tables),
        enums=list(enums),
        diagnostics=Diagnostics(warnings=list(warnings), errors=list(errors)),
    )
