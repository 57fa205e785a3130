# File: tspgen/models.py
"""
TSPGen - Core Data Models
==========================
Pydantic V2 models representing the extracted schema and the rendered
TypeSpec output.  These models are the single source of truth for the
whole pipeline:

    Schema Text → Backend Parse → ParsedSchema → Rendering → GenerationResult

Every record is created fresh for one invocation and never mutated after
construction, so all of them are frozen.  Field aliases carry the wire
(camelCase) names used by the fallback parser's JSON payload; the Python
(snake_case) names are accepted as well.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_RECORD_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="ignore",
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

# Open mapping of option name -> literal value (string, number, boolean,
# None, nested list or mapping).
ColumnOptions = Dict[str, Any]


# ---------------------------------------------------------------------------
# Schema records
# ---------------------------------------------------------------------------


class ColumnDefinition(BaseModel):
    """
    A single column declared inside a ``create_table`` block.

    ``name`` keeps the DSL casing and ``type`` the raw DSL type tag
    (``string``, ``references``, ``enum`` ...).  ``enum_name`` is only
    ever set for ``enum`` columns whose enum link could be resolved.
    """

    model_config = _RECORD_CONFIG

    name: str = Field(..., description="Column name as written in the DSL.")
    type: str = Field(..., description="Raw DSL type tag.")
    options: ColumnOptions = Field(
        default_factory=dict, description="Literal options of the declaration."
    )
    enum_name: Optional[str] = Field(
        default=None,
        alias="enumName",
        description="Resolved TypeSpec enum identifier (enum columns only).",
    )

    @model_validator(mode="after")
    def _enum_name_only_for_enums(self) -> "ColumnDefinition":
        if self.enum_name is not None and self.type != "enum":
            raise ValueError(
                f"Column '{self.name}' has enum_name '{self.enum_name}' "
                f"but type '{self.type}'."
            )
        return self

    @computed_field  # type: ignore[misc]
    @property
    def is_required(self) -> bool:
        """Only an explicit ``null: false`` makes a column required."""
        return self.options.get("null") is False

    def __repr__(self) -> str:
        flag: str = "" if self.is_required else "?"
        return f"<Column {self.name}{flag} {self.type}>"


class TableDefinition(BaseModel):
    """One ``create_table`` call with its columns in declaration order."""

    model_config = _RECORD_CONFIG

    name: str = Field(..., description="Raw DSL table name.")
    class_name: str = Field(
        ..., alias="className", description="TypeSpec model identifier."
    )
    columns: List[ColumnDefinition] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[ColumnDefinition]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def __repr__(self) -> str:
        return f"<Table {self.name} ({len(self.columns)} cols)>"


class EnumDefinition(BaseModel):
    """One ``create_enum`` call; ``values`` keep declaration order."""

    model_config = _RECORD_CONFIG

    name: str = Field(..., description="Raw DSL enum name.")
    class_name: str = Field(
        ..., alias="className", description="TypeSpec enum identifier."
    )
    values: List[str] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"<Enum {self.name} {self.values}>"


class Diagnostics(BaseModel):
    """
    Warnings and errors gathered while parsing one schema text.

    Non-empty ``errors`` means the parse is unusable; warnings never
    block output.
    """

    model_config = _RECORD_CONFIG

    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


class ParsedSchema(BaseModel):
    """Backend-independent extraction result."""

    model_config = _RECORD_CONFIG

    tables: List[TableDefinition] = Field(default_factory=list)
    enums: List[EnumDefinition] = Field(default_factory=list)
    diagnostics: Diagnostics = Field(default_factory=Diagnostics)

    @classmethod
    def failed(
        cls, errors: List[str], warnings: Optional[List[str]] = None
    ) -> "ParsedSchema":
        """An empty result carrying only diagnostics (hard stop)."""
        return cls(
            diagnostics=Diagnostics(errors=list(errors), warnings=list(warnings or []))
        )

    def __repr__(self) -> str:
        return (
            f"<ParsedSchema {len(self.tables)} tables, {len(self.enums)} enums, "
            f"{len(self.diagnostics.errors)} errors>"
        )


# ---------------------------------------------------------------------------
# Rendered output
# ---------------------------------------------------------------------------


class TypespecDocument(BaseModel):
    """One rendered model or enum declaration plus its target filename."""

    model_config = _RECORD_CONFIG

    name: str = Field(..., min_length=1, description="Derived filename.")
    content: str = Field(..., description="Rendered TypeSpec text.")
    table_name: Optional[str] = Field(default=None, alias="tableName")
    enum_name: Optional[str] = Field(default=None, alias="enumName")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)


class GenerationResult(BaseModel):
    """Everything produced from a single schema text."""

    model_config = _RECORD_CONFIG

    models: List[TypespecDocument] = Field(default_factory=list)
    enums: List[TypespecDocument] = Field(default_factory=list)
    tables: List[TableDefinition] = Field(default_factory=list)
    diagnostics: Diagnostics = Field(default_factory=Diagnostics)

    @computed_field  # type: ignore[misc]
    @property
    def documents(self) -> List[TypespecDocument]:
        """Enum documents first, then models (write order)."""
        return [*self.enums, *self.models]

    def __repr__(self) -> str:
        return (
            f"<GenerationResult {len(self.models)} models, {len(self.enums)} enums, "
            f"{'OK' if not self.diagnostics.errors else 'FAILED'}>"
        )


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings controlling parsing and rendering.

    ``namespace`` is the only option affecting rendered text; the
    ``fallback_*`` settings only matter when the primary parser is not
    available.
    """

    model_config = _SETTINGS_CONFIG

    namespace: Optional[str] = Field(
        default=None, description="TypeSpec namespace wrapping every document."
    )
    fallback_command: Optional[List[str]] = Field(
        default=None,
        description="argv of the fallback parser (default: bundled Ruby script).",
    )
    fallback_timeout: Optional[float] = Field(
        default=60.0,
        gt=0,
        description="Seconds before the fallback parser is killed (None = no limit).",
    )
    file_extension: str = Field(
        default=".tsp", min_length=1, description="Suffix of document filenames."
    )

    @field_validator("namespace")
    @classmethod
    def _blank_namespace_is_absent(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("fallback_command")
    @classmethod
    def _non_empty_command(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None and len(v) == 0:
            raise ValueError("fallback_command must contain at least the executable.")
        return v


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ColumnOptions",
    "ColumnDefinition",
    "TableDefinition",
    "EnumDefinition",
    "Diagnostics",
    "ParsedSchema",
    "TypespecDocument",
    "GenerationResult",
    "GenerationConfig",
]

logger.debug("tspgen.models loaded: %d public symbols.", len(__all__))
