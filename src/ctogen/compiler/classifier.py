# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Assign a contract-synthesis role to every registered declaration.

Roles are decided by fixed rules evaluated in order; the first match wins:

1. The supertype name contains ``Request``: request.
2. The supertype name contains ``Response``: response.
3. An asset whose supertype name contains ``Clause`` or ``Contract``:
   template model.
4. A concept: concept.
5. A participant: participant.

Everything else is dropped with a diagnostic. The ``exact`` strategy
replaces the substring tests of rules 1 to 3 with a comparison of every
supertype along the inheritance chain against the known Accord Project
base types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ctogen.codegen.type_mapping import Profile, map_type, to_rust_field_name
from ctogen.compiler.errors import Diagnostic
from ctogen.compiler.registry import ModelRegistry
from ctogen.logging import get_logger
from ctogen.model.entities import DeclarationKind, TypeDeclaration
from ctogen.model.schema import Declaration, Property, Role
from ctogen.model.types import PRIMITIVE_TYPE_NAMES, PropertyDef

logger = get_logger(__name__)

Classification = Literal["substring", "exact"]

# Known base types for the exact strategy: (namespace without version, name).
KNOWN_BASE_TYPES: dict[Role, frozenset[tuple[str, str]]] = {
    Role.REQUEST: frozenset({("org.accordproject.runtime", "Request")}),
    Role.RESPONSE: frozenset({("org.accordproject.runtime", "Response")}),
    Role.TEMPLATE_MODEL: frozenset(
        {
            ("org.accordproject.contract", "Clause"),
            ("org.accordproject.contract", "Contract"),
        }
    ),
}

# ###############
# Public Interface
# ###############


@dataclass
class ClassifiedModel:
    """Declarations grouped by role, in enumeration order.

    Enumeration order is namespace registration order, then declaration
    order within each namespace.
    """

    requests: list[Declaration] = field(default_factory=list)
    responses: list[Declaration] = field(default_factory=list)
    template_models: list[Declaration] = field(default_factory=list)
    concepts: list[Declaration] = field(default_factory=list)
    participants: list[Declaration] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def primary_request(self) -> Declaration | None:
        """The first request encountered, or None."""
        return self.requests[0] if self.requests else None

    @property
    def primary_response(self) -> Declaration | None:
        """The first response encountered, or None."""
        return self.responses[0] if self.responses else None

    @property
    def primary_template_model(self) -> Declaration | None:
        """The first template model encountered, or None."""
        return self.template_models[0] if self.template_models else None

    def all_declarations(self) -> list[Declaration]:
        """Return every classified declaration, grouped by role."""
        return [*self.requests, *self.responses, *self.template_models, *self.concepts, *self.participants]


def classify(registry: ModelRegistry, strategy: Classification = "substring") -> ClassifiedModel:
    """Classify every declaration of every registered namespace.

    Args:
        registry: A registry that has passed ``validate_all``.
        strategy: ``substring`` (default) or ``exact`` matching of supertypes.

    Returns:
        The classified declarations and one diagnostic per dropped declaration.
    """
    result = ClassifiedModel()
    buckets = {
        Role.REQUEST: result.requests,
        Role.RESPONSE: result.responses,
        Role.TEMPLATE_MODEL: result.template_models,
        Role.CONCEPT: result.concepts,
        Role.PARTICIPANT: result.participants,
    }

    for namespace in registry.namespaces():
        for declaration in registry.declarations_of(namespace):
            fqn = registry.fully_qualified_name(namespace, declaration.name)
            role, reason = _assign_role(declaration, _supertype_chain(registry, namespace, declaration), strategy)
            if role is None:
                result.diagnostics.append(Diagnostic("classify", fqn, reason))
                continue
            buckets[role].append(
                Declaration(
                    name=declaration.name,
                    fully_qualified_name=fqn,
                    namespace=namespace,
                    role=role,
                    properties=[derive_property(registry, namespace, p) for p in declaration.properties],
                )
            )

    logger.info(
        "Classified %d request(s), %d response(s), %d template model(s), %d concept(s), %d participant(s)",
        len(result.requests),
        len(result.responses),
        len(result.template_models),
        len(result.concepts),
        len(result.participants),
    )
    return result


def derive_property(registry: ModelRegistry, namespace: str, prop: PropertyDef) -> Property:
    """Build a classified Property with its Rust field name and storage type.

    Scalar types are replaced by the primitive they extend; relationships
    are stored as the identifier of the related instance, a ``String``.
    """
    declared_type = prop.type_name
    if declared_type not in PRIMITIVE_TYPE_NAMES:
        declared_type = registry.resolve_scalar(namespace, declared_type) or declared_type
    base_type = "String" if prop.is_relationship else declared_type
    return Property(
        name=prop.name,
        declared_type=declared_type,
        is_optional=prop.is_optional,
        is_array=prop.is_array,
        is_relationship=prop.is_relationship,
        field_name=to_rust_field_name(prop.name),
        target_type=map_type(base_type, prop.is_optional, prop.is_array, Profile.CONTRACT_STORAGE),
    )


# ################
# Implementation
# ################


def _supertype_chain(registry: ModelRegistry, namespace: str, declaration: TypeDeclaration) -> list[str]:
    """Return the fully-qualified supertypes of *declaration*, nearest first.

    The walk stops at the first supertype that does not resolve; that
    supertype is included as declared.
    """
    chain: list[str] = []
    current_namespace, current = namespace, declaration
    while current.super_type is not None:
        super_type = registry.super_type_name(current_namespace, current)
        if super_type is None or super_type in chain:
            break
        chain.append(super_type)
        resolved = registry.resolve_type(current_namespace, current.super_type)
        if resolved is None:
            break
        current_namespace, current = resolved
    return chain


def _assign_role(
    declaration: TypeDeclaration,
    super_types: list[str],
    strategy: Classification,
) -> tuple[Role | None, str]:
    """Return the role of *declaration*, or None and the reason it was dropped."""
    if super_types:
        if _extends(super_types, Role.REQUEST, ("Request",), strategy):
            return Role.REQUEST, ""
        if _extends(super_types, Role.RESPONSE, ("Response",), strategy):
            return Role.RESPONSE, ""
        if declaration.kind == DeclarationKind.ASSET and _extends(
            super_types, Role.TEMPLATE_MODEL, ("Clause", "Contract"), strategy
        ):
            return Role.TEMPLATE_MODEL, ""
    if declaration.kind == DeclarationKind.CONCEPT:
        return Role.CONCEPT, ""
    if declaration.kind == DeclarationKind.PARTICIPANT:
        return Role.PARTICIPANT, ""
    if not super_types:
        return None, f"{declaration.kind.value} without a recognised supertype"
    return None, f"{declaration.kind.value} extending '{super_types[0]}' has no contract role"


def _extends(super_types: list[str], role: Role, markers: tuple[str, ...], strategy: Classification) -> bool:
    # substring looks at the direct supertype only; exact walks the whole chain
    if strategy == "substring":
        return any(marker in super_types[0] for marker in markers)
    for super_type in super_types:
        namespace, _, name = super_type.rpartition(".")
        if (namespace.partition("@")[0], name) in KNOWN_BASE_TYPES[role]:
            return True
    return False
