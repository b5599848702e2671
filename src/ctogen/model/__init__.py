# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic model for ctogen (parsed Concerto files and classified declarations)."""

from ctogen.model.entities import (
    DeclarationKind,
    ImportDeclaration,
    ModelFile,
    TypeDeclaration,
)
from ctogen.model.schema import (
    Archive,
    Declaration,
    Property,
    Role,
    SchemaDocument,
)
from ctogen.model.types import (
    PRIMITIVE_TYPE_NAMES,
    DecoratorDef,
    NumericRange,
    PrimitiveType,
    PropertyDef,
)

__all__ = [
    # Type system
    "PrimitiveType",
    "PRIMITIVE_TYPE_NAMES",
    "DecoratorDef",
    "NumericRange",
    "PropertyDef",
    # Parsed entities
    "DeclarationKind",
    "ImportDeclaration",
    "TypeDeclaration",
    "ModelFile",
    # Archives and classification
    "SchemaDocument",
    "Archive",
    "Role",
    "Property",
    "Declaration",
]
