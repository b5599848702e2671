# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Emit serde data types for every registered namespace.

Each namespace becomes one Rust module holding a struct per class
declaration (with its implicit and inherited fields), an enum per enum
declaration, and a type alias per scalar and map. Field types follow the
plain-data profile of :mod:`ctogen.codegen.type_mapping`.
"""

from __future__ import annotations

import re

from ctogen.codegen.type_mapping import Profile, map_type, to_rust_field_name
from ctogen.compiler.registry import ModelRegistry
from ctogen.model.entities import DeclarationKind, TypeDeclaration
from ctogen.model.types import PropertyDef

# ###############
# Public Interface
# ###############

DERIVES = "#[derive(Debug, Clone, Default, Serialize, Deserialize)]"
ENUM_DERIVES = "#[derive(Debug, Clone, Copy, Default, PartialEq, Eq, Serialize, Deserialize)]"


def module_name_for(namespace: str) -> str:
    """Return the Rust module name for a namespace key.

    ``org.accordproject.time@0.3.0`` becomes ``org_accordproject_time_0_3_0``.
    """
    return re.sub(r"[^a-z0-9]", "_", namespace.lower())


def emit_plain_data(registry: ModelRegistry) -> dict[str, str]:
    """Render one Rust source file per registered namespace.

    Args:
        registry: A validated model registry.

    Returns:
        A mapping from file name (``<module>.rs``) to file content, in
        namespace registration order.
    """
    return {
        f"{module_name_for(namespace)}.rs": _render_namespace(registry, namespace)
        for namespace in registry.namespaces()
    }


def plain_field_type(registry: ModelRegistry, namespace: str, prop: PropertyDef) -> str:
    """Return the plain-data Rust type of a property.

    Relationships hold the identifier of the related instance. Scalars keep
    their alias name, which the namespace module defines.
    """
    base_type = "String" if prop.is_relationship else prop.type_name
    return map_type(base_type, prop.is_optional, prop.is_array, Profile.PLAIN_DATA)


# ################
# Implementation
# ################


def _render_namespace(registry: ModelRegistry, namespace: str) -> str:
    model_file = registry.model_file(namespace)
    lines = [
        f"// Generated by ctogen from namespace {namespace}.",
        "#![allow(unused_imports)]",
        "",
        "use chrono::{DateTime, Utc};",
        "use serde::{Deserialize, Serialize};",
        "use std::collections::HashMap;",
    ]
    imported: list[str] = []
    for imp in model_file.imports:
        key = registry.find_namespace(imp.namespace, imp.version)
        if key is not None and key != namespace and key not in imported:
            imported.append(key)
    for key in imported:
        lines.append(f"use crate::{module_name_for(key)}::*;")

    for declaration in model_file.declarations:
        lines.append("")
        if declaration.kind == DeclarationKind.ENUM:
            lines.extend(_render_enum(declaration))
        elif declaration.kind == DeclarationKind.SCALAR:
            scalar_type = map_type(declaration.scalar_type or "String", profile=Profile.PLAIN_DATA)
            lines.append(f"pub type {declaration.name} = {scalar_type};")
        elif declaration.kind == DeclarationKind.MAP:
            key_type = map_type(declaration.map_key_type or "String", profile=Profile.PLAIN_DATA)
            value_type = map_type(declaration.map_value_type or "String", profile=Profile.PLAIN_DATA)
            lines.append(f"pub type {declaration.name} = HashMap<{key_type}, {value_type}>;")
        else:
            lines.extend(_render_struct(registry, namespace, declaration))
    return "\n".join(lines) + "\n"


def _render_struct(registry: ModelRegistry, namespace: str, declaration: TypeDeclaration) -> list[str]:
    lines = [DERIVES, f"pub struct {declaration.name} {{"]
    for prop in registry.all_properties(namespace, declaration):
        field_name = to_rust_field_name(prop.name)
        attributes: list[str] = []
        if field_name.removeprefix("r#") != prop.name:
            attributes.append(f'rename = "{prop.name}"')
        if prop.is_optional:
            attributes.append('default, skip_serializing_if = "Option::is_none"')
        if attributes:
            lines.append(f"    #[serde({', '.join(attributes)})]")
        lines.append(f"    pub {field_name}: {plain_field_type(registry, namespace, prop)},")
    lines.append("}")
    return lines


def _render_enum(declaration: TypeDeclaration) -> list[str]:
    # An enum without variants has no default.
    derives = ENUM_DERIVES if declaration.enum_values else ENUM_DERIVES.replace(" Default,", "")
    lines = [derives, "#[allow(non_camel_case_types)]", f"pub enum {declaration.name} {{"]
    for index, value in enumerate(declaration.enum_values):
        if index == 0:
            lines.append("    #[default]")
        lines.append(f"    {value},")
    lines.append("}")
    return lines
