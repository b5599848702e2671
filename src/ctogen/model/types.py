# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Property and decorator representations for parsed Concerto models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveType(Enum):
    """Primitive types supported by the Concerto type system."""

    STRING = "String"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"
    DOUBLE = "Double"
    INTEGER = "Integer"
    LONG = "Long"


PRIMITIVE_TYPE_NAMES: frozenset[str] = frozenset(p.value for p in PrimitiveType)


# A decorator argument: a literal or the name of a referenced type.
DecoratorArgument = str | int | float | bool


class DecoratorDef(BaseModel):
    """A decorator applied to a declaration or property, e.g. ``@template``."""

    name: str
    arguments: list[DecoratorArgument] = _Field(default_factory=list)


class NumericRange(BaseModel):
    """An inclusive ``range=[lower, upper]`` validator; either bound may be open."""

    lower: int | float | None = None
    upper: int | float | None = None


class PropertyDef(BaseModel):
    """A single field (``o``) or relationship (``-->``) of a declaration."""

    name: str
    type_name: str
    is_array: bool = False
    is_optional: bool = False
    is_relationship: bool = False
    default: str | int | float | bool | None = None
    regex: str | None = None
    range: NumericRange | None = None
    length: NumericRange | None = None
    decorators: list[DecoratorDef] = _Field(default_factory=list)

    @property
    def is_primitive(self) -> bool:
        """Return True if the declared type is one of the Concerto primitives."""
        return self.type_name in PRIMITIVE_TYPE_NAMES
