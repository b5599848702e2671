# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis for a single parsed Concerto file.

Checks structural correctness that can be decided from one file alone:
duplicate names and type references that are neither primitive, local,
nor imported. Checks that need other namespaces (imported types exist,
supertypes resolve, inheritance is acyclic) belong to the model registry.
"""

from __future__ import annotations

from dataclasses import dataclass

from ctogen.model.entities import DeclarationKind, ModelFile, TypeDeclaration
from ctogen.model.types import PRIMITIVE_TYPE_NAMES

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """A structural error detected during semantic analysis.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


def analyze(model_file: ModelFile) -> list[SemanticError]:
    """Perform semantic analysis on a parsed ModelFile.

    Checks performed:
    - Duplicate declaration names within the namespace.
    - Duplicate property names within each class declaration.
    - Duplicate values within each enum.
    - Scalars must extend a primitive type.
    - Unqualified type references (property types, supertypes, map key and
      value types) must name a primitive, a local declaration, or an
      explicitly imported type. Files with a wildcard import defer this
      check to cross-namespace validation.

    Args:
        model_file: The parsed ModelFile to analyze.

    Returns:
        A list of :class:`SemanticError` instances. An empty list means no
        semantic errors were found.
    """
    return _SemanticAnalyzer(model_file).analyze()


# ################
# Implementation
# ################


class _SemanticAnalyzer:
    """Performs semantic analysis on a single ModelFile."""

    def __init__(self, model_file: ModelFile) -> None:
        self._file = model_file
        self._local_names = {d.name for d in model_file.declarations}
        self._imported_names = {name for imp in model_file.imports for name in imp.types}
        self._has_wildcard = any(imp.wildcard for imp in model_file.imports)

    def analyze(self) -> list[SemanticError]:
        """Run all semantic checks and return collected errors."""
        errors: list[SemanticError] = []

        # 1. Duplicate declarations.
        errors.extend(_check_duplicate_declarations(self._file))

        for declaration in self._file.declarations:
            label = f"{declaration.kind.value} '{declaration.name}'"
            # 2. Declaration internals.
            if declaration.kind == DeclarationKind.ENUM:
                errors.extend(_check_enum_values(label, declaration))
            elif declaration.kind == DeclarationKind.SCALAR:
                if declaration.scalar_type not in PRIMITIVE_TYPE_NAMES:
                    errors.append(
                        SemanticError(
                            f"{label} must extend a primitive type, not '{declaration.scalar_type}'"
                        )
                    )
            elif declaration.kind == DeclarationKind.MAP:
                for type_name in (declaration.map_key_type, declaration.map_value_type):
                    errors.extend(self._check_type_ref(label, type_name))
            else:
                errors.extend(_check_property_names(label, declaration))
                if declaration.super_type is not None:
                    errors.extend(self._check_type_ref(label, declaration.super_type))
                for prop in declaration.properties:
                    errors.extend(
                        self._check_type_ref(f"{label}, property '{prop.name}'", prop.type_name)
                    )

        return errors

    def _check_type_ref(self, label: str, type_name: str | None) -> list[SemanticError]:
        if type_name is None or "." in type_name:
            return []
        if type_name in PRIMITIVE_TYPE_NAMES or type_name in self._local_names:
            return []
        if type_name in self._imported_names or self._has_wildcard:
            return []
        return [SemanticError(f"{label}: undefined type '{type_name}'")]


def _check_duplicate_declarations(model_file: ModelFile) -> list[SemanticError]:
    errors: list[SemanticError] = []
    seen: set[str] = set()
    for declaration in model_file.declarations:
        if declaration.name in seen:
            errors.append(
                SemanticError(
                    f"Duplicate declaration '{declaration.name}' in namespace '{model_file.namespace}'"
                )
            )
        seen.add(declaration.name)
    return errors


def _check_property_names(label: str, declaration: TypeDeclaration) -> list[SemanticError]:
    errors: list[SemanticError] = []
    seen: set[str] = set()
    for prop in declaration.properties:
        if prop.name in seen:
            errors.append(SemanticError(f"Duplicate property '{prop.name}' in {label}"))
        seen.add(prop.name)
    return errors


def _check_enum_values(label: str, declaration: TypeDeclaration) -> list[SemanticError]:
    errors: list[SemanticError] = []
    seen: set[str] = set()
    for value in declaration.enum_values:
        if value in seen:
            errors.append(SemanticError(f"Duplicate value '{value}' in {label}"))
        seen.add(value)
    return errors
