# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Stub business logic and its synthetic-data test for the data crate.

The logic module exposes one ``trigger`` operation that answers a request
with a response whose every field holds a placeholder value. The test
builds a template model and a request from recognisable test values and
checks only that ``trigger`` succeeds. Both files are regenerated from
scratch on every run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ctogen.codegen.plain_data import module_name_for, plain_field_type
from ctogen.codegen.type_mapping import default_value, to_rust_field_name
from ctogen.compiler.classifier import ClassifiedModel
from ctogen.compiler.errors import Diagnostic
from ctogen.compiler.registry import ModelRegistry
from ctogen.logging import get_logger
from ctogen.model.entities import DeclarationKind, TypeDeclaration
from ctogen.model.schema import Declaration
from ctogen.model.types import PropertyDef

logger = get_logger(__name__)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class FieldValue:
    """A Rust field initializer in a generated struct literal.

    Attributes:
        field_name: Rust field name.
        rust_type: Plain-data Rust type of the field.
        value: Rust expression assigned to the field.
        property_name: Property name in the model.
        is_optional: Whether the property is optional.
    """

    field_name: str
    rust_type: str
    value: str
    property_name: str
    is_optional: bool = False


@dataclass
class LogicArtifact:
    """The stub ``trigger`` operation and its test, ready to be rendered."""

    crate_name: str
    template_model: Declaration
    request: Declaration
    response: Declaration
    response_fields: list[FieldValue] = field(default_factory=list)
    template_fields: list[FieldValue] = field(default_factory=list)
    request_fields: list[FieldValue] = field(default_factory=list)
    test_modules: list[str] = field(default_factory=list)

    def render_logic_rs(self) -> str:
        """Render ``src/logic.rs``."""
        return _render_logic_rs(self)

    def render_test_rs(self) -> str:
        """Render ``tests/logic.rs``."""
        return _render_test_rs(self)


def synthesize_logic(
    classified: ClassifiedModel,
    registry: ModelRegistry,
    package_name: str = "concerto-models",
) -> tuple[LogicArtifact | None, list[Diagnostic]]:
    """Plan the logic module and its test for the primary declarations.

    Args:
        classified: Output of the declaration classifier.
        registry: The registry the declarations were classified from.
        package_name: Cargo package name of the data crate.

    Returns:
        The artifact, or None with a warning diagnostic when the model lacks
        a template model, a request, or a response.
    """
    missing = [
        label
        for label, declaration in (
            ("template model", classified.primary_template_model),
            ("request", classified.primary_request),
            ("response", classified.primary_response),
        )
        if declaration is None
    ]
    if missing:
        message = "no " + ", ".join(missing) + " found; logic scaffold not generated"
        logger.warning("Logic scaffold skipped: %s", message)
        return None, [Diagnostic("logic", "logic.rs", message)]

    template_model = classified.primary_template_model
    request = classified.primary_request
    response = classified.primary_response
    planner = _TestValuePlanner(registry)

    artifact = LogicArtifact(
        crate_name=package_name.replace("-", "_"),
        template_model=template_model,
        request=request,
        response=response,
        response_fields=_placeholder_values(registry, response),
        template_fields=planner.values_for(template_model),
        request_fields=planner.values_for(request),
    )
    modules = [module_name_for(template_model.namespace), module_name_for(request.namespace), *planner.modules]
    artifact.test_modules = list(dict.fromkeys(modules))
    return artifact, []


# ################
# Implementation
# ################


def _declaration_of(registry: ModelRegistry, declaration: Declaration) -> TypeDeclaration:
    resolved = registry.resolve_type(declaration.namespace, declaration.name)
    if resolved is None:
        raise ValueError(f"Declaration '{declaration.fully_qualified_name}' is not registered")
    return resolved[1]


def _placeholder_values(registry: ModelRegistry, response: Declaration) -> list[FieldValue]:
    values: list[FieldValue] = []
    for prop in registry.all_properties(response.namespace, _declaration_of(registry, response)):
        rust_type = plain_field_type(registry, response.namespace, prop)
        if prop.name == "$class":
            value = f'"{response.fully_qualified_name}".to_string()'
        elif rust_type == "DateTime<Utc>":
            value = "Utc::now()"
        else:
            value = default_value(rust_type)
        values.append(FieldValue(to_rust_field_name(prop.name), rust_type, value, prop.name, prop.is_optional))
    return values


class _TestValuePlanner:
    """Chooses recognisable, non-default values for test fixtures."""

    def __init__(self, registry: ModelRegistry) -> None:
        self._registry = registry
        self.modules: list[str] = []

    def values_for(self, declaration: Declaration) -> list[FieldValue]:
        values: list[FieldValue] = []
        namespace = declaration.namespace
        for prop in self._registry.all_properties(namespace, _declaration_of(self._registry, declaration)):
            rust_type = plain_field_type(self._registry, namespace, prop)
            if prop.name == "$class":
                value = f'"{declaration.fully_qualified_name}".to_string()'
            else:
                value = self._value(namespace, prop, rust_type)
            values.append(FieldValue(to_rust_field_name(prop.name), rust_type, value, prop.name, prop.is_optional))
        return values

    def _value(self, namespace: str, prop: PropertyDef, rust_type: str) -> str:
        if rust_type.startswith("Option<"):
            return f"Some({self._value(namespace, prop, rust_type[len('Option<'):-1])})"
        if rust_type.startswith("Vec<"):
            return f"vec![{self._value(namespace, prop, rust_type[len('Vec<'):-1])}]"
        if rust_type == "bool":
            return "true"
        if rust_type == "i64":
            return "10"
        if rust_type == "f64":
            return "10.5"
        if rust_type == "String":
            return f'"Test {_words(prop.name)}".to_string()'
        if rust_type == "DateTime<Utc>":
            return "Utc::now()"
        if not prop.is_relationship:
            duration = self._duration_literal(namespace, prop.type_name)
            if duration is not None:
                return duration
        return "Default::default()"

    def _duration_literal(self, namespace: str, type_name: str) -> str | None:
        """Return a one-day ``Duration`` literal when the Duration concept supports it."""
        resolved = self._registry.resolve_type(namespace, type_name)
        if resolved is None or resolved[1].name != "Duration" or resolved[1].kind != DeclarationKind.CONCEPT:
            return None
        duration_namespace, duration = resolved
        properties = {p.name: p for p in self._registry.all_properties(duration_namespace, duration)}
        amount, unit = properties.get("amount"), properties.get("unit")
        if amount is None or unit is None:
            return None
        unit_type = self._registry.resolve_type(duration_namespace, unit.type_name)
        if unit_type is None or unit_type[1].kind != DeclarationKind.ENUM or "days" not in unit_type[1].enum_values:
            return None
        amount_value = "1" if plain_field_type(self._registry, duration_namespace, amount) == "i64" else "1.0"
        for module in (module_name_for(duration_namespace), module_name_for(unit_type[0])):
            if module not in self.modules:
                self.modules.append(module)
        return f"Duration {{ amount: {amount_value}, unit: {unit_type[1].name}::days, ..Default::default() }}"


def _words(name: str) -> str:
    """``buyerName`` becomes ``Buyer Name``."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name.lstrip("$"))
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


def _render_logic_rs(artifact: LogicArtifact) -> str:
    template_model, request, response = artifact.template_model, artifact.request, artifact.response
    imports = dict.fromkeys(
        f"use crate::{module_name_for(d.namespace)}::{d.name};" for d in (template_model, request, response)
    )
    lines = [
        f"//! Business logic for {template_model.name}.",
        "//!",
        "//! Generated by ctogen. This file is overwritten on every regeneration.",
        "",
        "#![allow(unused_imports)]",
        "",
        "use chrono::{DateTime, Utc};",
        "use serde::{Deserialize, Serialize};",
        "",
        *imports,
        "",
        "#[derive(Debug, Clone, Serialize, Deserialize)]",
        "pub struct ResponseWrapper {",
        f"    pub result: {response.name},",
        "}",
        "",
        "#[derive(Debug, Clone, PartialEq, Eq)]",
        "pub struct Error {",
        "    pub message: String,",
        "}",
        "",
        "impl std::fmt::Display for Error {",
        "    fn fmt(&self, f: &mut std::fmt::Formatter<'_>) -> std::fmt::Result {",
        '        write!(f, "{}", self.message)',
        "    }",
        "}",
        "",
        "impl std::error::Error for Error {}",
        "",
        f"pub async fn trigger(template_data: &{template_model.name}, request: &{request.name})"
        " -> Result<ResponseWrapper, Error> {",
        "    let _ = (template_data, request);",
        f"    let result = {response.name} {{",
    ]
    for value in artifact.response_fields:
        marker = f"// TODO: implement {value.field_name}: {value.rust_type}"
        if value.is_optional:
            marker += " (optional)"
        lines.append(f"        {marker}")
        lines.append(f"        {value.field_name}: {value.value},")
    lines.extend(
        [
            "    };",
            "",
            "    Ok(ResponseWrapper { result })",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"


def _render_test_rs(artifact: LogicArtifact) -> str:
    crate = artifact.crate_name
    lines = [
        "//! Smoke test for the generated business logic.",
        "//!",
        "//! Generated by ctogen. This file is overwritten on every regeneration.",
        "",
        "#![allow(unused_imports)]",
        "",
        "use chrono::Utc;",
        f"use {crate}::logic::trigger;",
    ]
    lines.extend(f"use {crate}::{module}::*;" for module in artifact.test_modules)
    lines.extend(
        [
            "",
            "#[tokio::test]",
            "async fn trigger_completes() {",
            f"    let template_data = {artifact.template_model.name} {{",
        ]
    )
    lines.extend(f"        {v.field_name}: {v.value}," for v in artifact.template_fields)
    lines.append("    };")
    lines.append(f"    let request = {artifact.request.name} {{")
    lines.extend(f"        {v.field_name}: {v.value}," for v in artifact.request_fields)
    lines.extend(
        [
            "    };",
            "",
            "    let result = trigger(&template_data, &request).await;",
            "    assert!(result.is_ok());",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"
