# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Model registry: the set of parsed Concerto namespaces for one run.

Documents are registered one at a time (each is parsed and checked on its
own), then :meth:`ModelRegistry.validate_all` checks the references that
cross namespace boundaries. Resolution helpers answer the questions the
classifier and the code generators ask about declarations.
"""

from __future__ import annotations

from ctogen.compiler.graph import detect_cycle
from ctogen.compiler.parser import ParseError, parse
from ctogen.compiler.scanner import LexerError
from ctogen.compiler.semantic_analysis import analyze
from ctogen.logging import get_logger
from ctogen.model.entities import DeclarationKind, ModelFile, TypeDeclaration
from ctogen.model.types import PRIMITIVE_TYPE_NAMES, PropertyDef

logger = get_logger(__name__)

# ###############
# Public Interface
# ###############


class RegistryError(Exception):
    """Base class for errors raised by the model registry."""


class DocumentRegistrationError(RegistryError):
    """Raised when a single document cannot be added to the registry.

    Attributes:
        document: Name of the document that failed.
    """

    def __init__(self, document: str, message: str) -> None:
        super().__init__(f"{document}: {message}")
        self.document = document


class ModelValidationError(RegistryError):
    """Raised when cross-namespace validation finds unresolved references.

    Attributes:
        errors: One message per problem found.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


# Properties every declaration carries implicitly, by category.
CLASS_PROPERTY = PropertyDef(name="$class", type_name="String")
IDENTIFIER_PROPERTY = PropertyDef(name="$identifier", type_name="String")
TIMESTAMP_PROPERTY = PropertyDef(name="$timestamp", type_name="DateTime")


class ModelRegistry:
    """Registered Concerto namespaces, keyed by ``namespace[@version]``."""

    def __init__(self) -> None:
        self._files: dict[str, ModelFile] = {}
        self._sources: dict[str, tuple[str, str]] = {}

    def register(self, text: str, name: str) -> ModelFile | None:
        """Parse and check one document, then add its namespace.

        A document whose namespace is already registered from byte-identical
        text is skipped. Any other re-declaration is an error.

        Args:
            text: The document source.
            name: Document name used in error messages and logs.

        Returns:
            The parsed ModelFile, or None when the document was a duplicate.

        Raises:
            DocumentRegistrationError: If the document does not parse, fails
                semantic analysis, or conflicts with a registered namespace.
        """
        try:
            model_file = parse(text)
        except (LexerError, ParseError) as exc:
            raise DocumentRegistrationError(name, str(exc)) from exc

        errors = analyze(model_file)
        if errors:
            raise DocumentRegistrationError(name, "; ".join(e.message for e in errors))

        key = model_file.namespace_key
        if key in self._files:
            first_name, first_text = self._sources[key]
            if first_text == text:
                logger.debug("Skipping %s: namespace %s already registered from %s", name, key, first_name)
                return None
            raise DocumentRegistrationError(
                name, f"namespace '{key}' is already registered from '{first_name}'"
            )

        self._files[key] = model_file
        self._sources[key] = (name, text)
        logger.debug("Registered namespace %s from %s", key, name)
        return model_file

    def validate_all(self) -> None:
        """Check every reference that crosses a namespace boundary.

        Checks performed:
        - Every imported namespace is registered and declares the imported types.
        - Every non-primitive property, map, and supertype reference resolves.
        - A supertype has the same category as the declaration extending it.
        - Inheritance is acyclic.

        Raises:
            ModelValidationError: If any check fails.
        """
        errors: list[str] = []
        inheritance: dict[str, list[str]] = {}

        for key, model_file in self._files.items():
            for imp in model_file.imports:
                target = self._find_file(imp.namespace, imp.version)
                if target is None:
                    errors.append(f"{key}: imported namespace '{imp.namespace_key}' is not registered")
                    continue
                for type_name in imp.types:
                    if target.get_declaration(type_name) is None:
                        errors.append(
                            f"{key}: imported type '{type_name}' is not declared in '{target.namespace_key}'"
                        )

            for declaration in model_file.declarations:
                fqn = self.fully_qualified_name(key, declaration.name)
                for type_name in _referenced_types(declaration):
                    if type_name not in PRIMITIVE_TYPE_NAMES and self.resolve_type(key, type_name) is None:
                        errors.append(f"{fqn}: undefined type '{type_name}'")
                if declaration.super_type is None:
                    continue
                resolved = self.resolve_type(key, declaration.super_type)
                if resolved is None:
                    errors.append(f"{fqn}: undefined supertype '{declaration.super_type}'")
                    continue
                super_key, super_decl = resolved
                if super_decl.kind != declaration.kind:
                    errors.append(
                        f"{fqn}: {declaration.kind.value} cannot extend "
                        f"{super_decl.kind.value} '{declaration.super_type}'"
                    )
                inheritance[fqn] = [self.fully_qualified_name(super_key, super_decl.name)]

        cycle = detect_cycle(inheritance)
        if cycle is not None:
            errors.append("Inheritance cycle: " + " -> ".join(cycle))

        if errors:
            raise ModelValidationError(errors)
        logger.info("Validated %d namespace(s)", len(self._files))

    def namespaces(self) -> list[str]:
        """Return the registered namespace keys in registration order."""
        return list(self._files)

    def model_file(self, namespace: str) -> ModelFile:
        """Return the parsed file registered under *namespace*.

        Raises:
            RegistryError: If the namespace is not registered.
        """
        try:
            return self._files[namespace]
        except KeyError:
            raise RegistryError(f"Namespace '{namespace}' is not registered") from None

    def declarations_of(self, namespace: str) -> list[TypeDeclaration]:
        """Return the declarations of *namespace* in declaration order."""
        return list(self.model_file(namespace).declarations)

    def find_namespace(self, namespace: str, version: str | None = None) -> str | None:
        """Return the registered key for *namespace*, as an import would resolve it."""
        model_file = self._find_file(namespace, version)
        return model_file.namespace_key if model_file is not None else None

    def fully_qualified_name(self, namespace: str, name: str) -> str:
        """Return ``namespace[@version].Name`` for a declaration of *namespace*."""
        return f"{namespace}.{name}"

    def resolve_type(self, namespace: str, type_name: str) -> tuple[str, TypeDeclaration] | None:
        """Find the declaration a type reference in *namespace* points to.

        Qualified references are looked up in the named namespace. Short names
        are looked up locally first, then through the imports in order.

        Returns:
            ``(namespace_key, declaration)`` or None for primitives and
            unresolvable names.
        """
        if type_name in PRIMITIVE_TYPE_NAMES:
            return None
        if "." in type_name:
            target_namespace, _, short_name = type_name.rpartition(".")
            namespace_name, _, version = target_namespace.partition("@")
            target = self._find_file(namespace_name, version or None)
            return _lookup(target, short_name)

        model_file = self._files.get(namespace)
        if model_file is None:
            return None
        local = model_file.get_declaration(type_name)
        if local is not None:
            return namespace, local
        for imp in model_file.imports:
            if imp.wildcard or type_name in imp.types:
                found = _lookup(self._find_file(imp.namespace, imp.version), type_name)
                if found is not None:
                    return found
        return None

    def super_type_name(self, namespace: str, declaration: TypeDeclaration) -> str | None:
        """Return the fully-qualified supertype of *declaration*.

        Falls back to the declared text when the supertype does not resolve,
        and returns None when the declaration extends nothing.
        """
        if declaration.super_type is None:
            return None
        resolved = self.resolve_type(namespace, declaration.super_type)
        if resolved is None:
            return declaration.super_type
        return self.fully_qualified_name(resolved[0], resolved[1].name)

    def resolve_scalar(self, namespace: str, type_name: str) -> str | None:
        """Return the primitive a scalar type extends, or None if *type_name* is no scalar."""
        resolved = self.resolve_type(namespace, type_name)
        if resolved is None or resolved[1].kind != DeclarationKind.SCALAR:
            return None
        return resolved[1].scalar_type

    def all_properties(self, namespace: str, declaration: TypeDeclaration) -> list[PropertyDef]:
        """Return the implicit, inherited, and own properties of *declaration*.

        Order: ``$class``, then ``$identifier`` or ``$timestamp`` where the
        category carries one, then properties from the root supertype down
        to *declaration* itself.
        """
        chain: list[tuple[str, TypeDeclaration]] = []
        seen: set[str] = set()
        current: tuple[str, TypeDeclaration] | None = (namespace, declaration)
        while current is not None:
            fqn = self.fully_qualified_name(current[0], current[1].name)
            if fqn in seen:
                break
            seen.add(fqn)
            chain.append(current)
            super_type = current[1].super_type
            current = self.resolve_type(current[0], super_type) if super_type is not None else None

        result = [CLASS_PROPERTY]
        if any(d.is_identified for _, d in chain) or declaration.kind in (
            DeclarationKind.ASSET,
            DeclarationKind.PARTICIPANT,
        ):
            result.append(IDENTIFIER_PROPERTY)
        if declaration.kind in (DeclarationKind.TRANSACTION, DeclarationKind.EVENT):
            result.append(TIMESTAMP_PROPERTY)
        for _, ancestor in reversed(chain):
            result.extend(ancestor.properties)
        return result

    def _find_file(self, namespace: str, version: str | None) -> ModelFile | None:
        """Find a registered file by namespace name, preferring an exact version match."""
        if version is not None:
            exact = self._files.get(f"{namespace}@{version}")
            if exact is not None:
                return exact
        for model_file in self._files.values():
            if model_file.namespace == namespace:
                return model_file
        return None


# ################
# Implementation
# ################


def _lookup(model_file: ModelFile | None, name: str) -> tuple[str, TypeDeclaration] | None:
    if model_file is None:
        return None
    declaration = model_file.get_declaration(name)
    if declaration is None:
        return None
    return model_file.namespace_key, declaration


def _referenced_types(declaration: TypeDeclaration) -> list[str]:
    """Return every type name a declaration refers to, except its supertype."""
    if declaration.kind == DeclarationKind.MAP:
        return [t for t in (declaration.map_key_type, declaration.map_value_type) if t is not None]
    return [prop.type_name for prop in declaration.properties]
