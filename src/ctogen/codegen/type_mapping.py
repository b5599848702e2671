# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping from Concerto types to Rust types, and Rust naming helpers.

Two profiles exist. ``PLAIN_DATA`` targets the serde data crate, where
timestamps are ``chrono`` values and numbers are signed. ``CONTRACT_STORAGE``
targets ink! storage, where every value must be SCALE-encodable, so
timestamps become block-time integers and the well-known complex concepts
collapse to a single scalar.
"""

from __future__ import annotations

import re
from enum import Enum

# ###############
# Public Interface
# ###############


class Profile(Enum):
    """Target of a type mapping."""

    PLAIN_DATA = "plain_data"
    CONTRACT_STORAGE = "contract_storage"


# Concepts stored as a single scalar in contract storage.
COLLAPSED_CONCEPTS: dict[str, str] = {
    "MonetaryAmount": "u128",
    "Duration": "u64",
    "Period": "u64",
    "CurrencyCode": "String",
    "DigitalCurrencyCode": "String",
    "TemporalUnit": "String",
    "PeriodUnit": "String",
}


def short_name(type_name: str) -> str:
    """Strip the namespace (and version) from a possibly qualified type name."""
    return type_name.rpartition(".")[2]


def map_type(
    domain_type: str,
    optional: bool = False,
    is_array: bool = False,
    profile: Profile = Profile.PLAIN_DATA,
) -> str:
    """Map a Concerto type to a Rust type string.

    The base type is mapped first; arrays wrap it in ``Vec<..>`` and
    optional fields wrap the result in ``Option<..>``, so an optional array
    is always ``Option<Vec<T>>``. Unknown names pass through unchanged.

    Args:
        domain_type: Primitive or declared type name, possibly qualified.
        optional: Whether the field is optional.
        is_array: Whether the field is an array.
        profile: Target profile.

    Returns:
        The Rust type, e.g. ``Option<Vec<DateTime<Utc>>>``.
    """
    name = short_name(domain_type)
    if profile == Profile.PLAIN_DATA:
        rust_type = _PLAIN_DATA_PRIMITIVES.get(name, name)
    else:
        rust_type = _CONTRACT_STORAGE_PRIMITIVES.get(name) or COLLAPSED_CONCEPTS.get(name, name)
    if is_array:
        rust_type = f"Vec<{rust_type}>"
    if optional:
        rust_type = f"Option<{rust_type}>"
    return rust_type


def default_value(rust_type: str) -> str:
    """Return a Rust expression producing a neutral value of *rust_type*."""
    if rust_type.startswith("Option<"):
        return "None"
    if rust_type.startswith("Vec<"):
        return "Vec::new()"
    if rust_type == "String":
        return "String::new()"
    if rust_type == "bool":
        return "false"
    if rust_type in _INTEGER_TYPES:
        return "0"
    if rust_type in ("f32", "f64"):
        return "0.0"
    return "Default::default()"


def to_rust_field_name(name: str) -> str:
    """Convert a Concerto property name to a Rust field name.

    ``forceMajeure`` becomes ``force_majeure`` and the system property
    ``$class`` becomes ``class``. Rust keywords are emitted as raw
    identifiers (``r#type``).
    """
    snake = _CAMEL_BOUNDARY.sub("_", name.lstrip("$")).lower()
    return f"r#{snake}" if snake in _RUST_KEYWORDS else snake


def to_module_name(name: str) -> str:
    """Lower-case *name* and replace every character outside ``[a-z0-9_]`` with ``_``."""
    return re.sub(r"[^a-z0-9_]", "_", name.lower())


def to_package_name(name: str) -> str:
    """Convert a CamelCase type name to a kebab-case crate name."""
    return re.sub(r"(?<!^)([A-Z])", r"-\1", name).lower()


def contract_name_for(template_model: str | None) -> str:
    """Derive the contract name from the primary template model name.

    A trailing ``Clause`` is replaced by ``Contract``; without a template
    model the name is ``ConcertoContract``.
    """
    if not template_model:
        return "ConcertoContract"
    return re.sub(r"Clause$", "Contract", template_model)


# ################
# Implementation
# ################

_PLAIN_DATA_PRIMITIVES: dict[str, str] = {
    "String": "String",
    "Boolean": "bool",
    "Double": "f64",
    "Long": "f64",
    "Integer": "i64",
    "DateTime": "DateTime<Utc>",
}

_CONTRACT_STORAGE_PRIMITIVES: dict[str, str] = {
    "String": "String",
    "Boolean": "bool",
    "Double": "u128",
    "Long": "u128",
    "Integer": "u64",
    "DateTime": "u64",
}

_INTEGER_TYPES = frozenset(
    {"u8", "u16", "u32", "u64", "u128", "usize", "i8", "i16", "i32", "i64", "i128", "isize"}
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_RUST_KEYWORDS = frozenset(
    {
        "as", "async", "await", "box", "break", "const", "continue", "dyn", "else", "enum",
        "extern", "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod",
        "move", "mut", "pub", "ref", "return", "static", "struct", "trait", "true", "try",
        "type", "unsafe", "use", "where", "while", "yield",
    }
)
