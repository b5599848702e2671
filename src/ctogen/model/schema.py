# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Archives, schema documents, and classified declarations."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class SchemaDocument(BaseModel):
    """One schema file read from an archive's model directory."""

    model_config = ConfigDict(frozen=True)

    archive: str
    filename: str
    text: str
    has_imports: bool = False


class Archive(BaseModel):
    """A named bundle of schema documents for one template or domain."""

    name: str
    path: Path
    documents: list[SchemaDocument] = _Field(default_factory=list)


class Role(Enum):
    """The role a declaration plays in contract synthesis."""

    REQUEST = "request"
    RESPONSE = "response"
    TEMPLATE_MODEL = "template_model"
    CONCEPT = "concept"
    PARTICIPANT = "participant"


class Property(BaseModel):
    """One field of a classified declaration with its derived Rust names.

    Attributes:
        name: Field name as declared in the model (``forceMajeure``).
        declared_type: Domain type name after scalar resolution.
        is_optional: Whether the field is declared ``optional``.
        is_array: Whether the field is declared with ``[]``.
        is_relationship: Whether the field is a ``-->`` relationship.
        field_name: Rust snake_case field name (``force_majeure``).
        target_type: Rust type under the contract storage profile.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    declared_type: str
    is_optional: bool = False
    is_array: bool = False
    is_relationship: bool = False
    field_name: str
    target_type: str


class Declaration(BaseModel):
    """A declaration tagged with exactly one role."""

    name: str
    fully_qualified_name: str
    namespace: str
    role: Role
    properties: list[Property] = _Field(default_factory=list)
