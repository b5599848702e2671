# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Declarations and model files as produced by the Concerto parser."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import Field as _Field

from ctogen.model.types import DecoratorDef, PropertyDef

# ###############
# Public Interface
# ###############


class DeclarationKind(Enum):
    """Structural category of a top-level declaration."""

    CONCEPT = "concept"
    ASSET = "asset"
    PARTICIPANT = "participant"
    TRANSACTION = "transaction"
    EVENT = "event"
    ENUM = "enum"
    SCALAR = "scalar"
    MAP = "map"

    @property
    def is_class(self) -> bool:
        """Return True for declarations that carry properties and may be extended."""
        return self not in (DeclarationKind.ENUM, DeclarationKind.SCALAR, DeclarationKind.MAP)


class ImportDeclaration(BaseModel):
    """An import statement bringing types from another namespace into scope.

    ``types`` is empty for wildcard imports (``import ns.*``).
    """

    namespace: str
    version: str | None = None
    types: list[str] = _Field(default_factory=list)
    wildcard: bool = False
    uri: str | None = None

    @property
    def namespace_key(self) -> str:
        """Return the namespace with its version suffix, if any."""
        return f"{self.namespace}@{self.version}" if self.version else self.namespace


class TypeDeclaration(BaseModel):
    """A top-level declaration: class-like, enum, scalar, or map."""

    kind: DeclarationKind
    name: str
    is_abstract: bool = False
    super_type: str | None = None
    is_identified: bool = False
    identified_by: str | None = None
    properties: list[PropertyDef] = _Field(default_factory=list)
    enum_values: list[str] = _Field(default_factory=list)
    scalar_type: str | None = None
    map_key_type: str | None = None
    map_value_type: str | None = None
    decorators: list[DecoratorDef] = _Field(default_factory=list)

    def has_decorator(self, name: str) -> bool:
        """Return True if a decorator called *name* is applied to this declaration."""
        return any(d.name == name for d in self.decorators)


class ModelFile(BaseModel):
    """Top-level model representing the parsed contents of a single .cto file."""

    namespace: str
    version: str | None = None
    concerto_version: str | None = None
    imports: list[ImportDeclaration] = _Field(default_factory=list)
    declarations: list[TypeDeclaration] = _Field(default_factory=list)
    decorators: list[DecoratorDef] = _Field(default_factory=list)

    @property
    def namespace_key(self) -> str:
        """Return the namespace with its version suffix (``org.example@1.0.0``)."""
        return f"{self.namespace}@{self.version}" if self.version else self.namespace

    def get_declaration(self, name: str) -> TypeDeclaration | None:
        """Return the declaration called *name*, or None if it is not declared here."""
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None
