# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the model registry: registration, cross-namespace validation, and resolution."""

import pytest

from ctogen.compiler.registry import (
    DocumentRegistrationError,
    ModelRegistry,
    ModelValidationError,
    RegistryError,
)
from ctogen.model.entities import DeclarationKind

# ###############
# Test Helpers
# ###############

_RUNTIME = """\
namespace org.accordproject.runtime@0.2.0
transaction Request {}
transaction Response {}
"""

_CONTRACT = """\
namespace org.accordproject.contract@0.2.0
abstract asset Clause identified by clauseId {
  o String clauseId
}
"""

_TIME = """\
namespace org.accordproject.time@0.3.0
enum TemporalUnit { o seconds o days }
concept Duration {
  o Long amount
  o TemporalUnit unit
}
"""

_MODEL = """\
namespace io.example.penalty@0.1.0
import org.accordproject.time@0.3.0.{Duration, TemporalUnit}
import org.accordproject.contract@0.2.0.Clause
import org.accordproject.runtime@0.2.0.{Request, Response}

scalar Percent extends Double

@template
asset PenaltyClause extends Clause {
  o Duration penaltyDuration
  o Percent penaltyPercentage
}

transaction PenaltyRequest extends Request {
  o DateTime deliveredAt optional
}

event PenaltyIssued {
  o Double amount
}
"""


def _registry(*sources: str) -> ModelRegistry:
    """Register each source in order under a numbered document name."""
    registry = ModelRegistry()
    for index, source in enumerate(sources):
        registry.register(source, f"doc{index}.cto")
    return registry


def _full_registry() -> ModelRegistry:
    registry = _registry(_RUNTIME, _CONTRACT, _TIME, _MODEL)
    registry.validate_all()
    return registry


def _validation_errors(*sources: str) -> list[str]:
    """Register *sources* and return the messages of the expected validation failure."""
    registry = _registry(*sources)
    with pytest.raises(ModelValidationError) as exc_info:
        registry.validate_all()
    return exc_info.value.errors


# ###############
# Registration
# ###############


class TestRegister:
    def test_register_returns_parsed_file(self) -> None:
        registry = ModelRegistry()
        model_file = registry.register(_TIME, "time.cto")
        assert model_file is not None
        assert model_file.namespace_key == "org.accordproject.time@0.3.0"
        assert registry.namespaces() == ["org.accordproject.time@0.3.0"]

    def test_namespaces_keep_registration_order(self) -> None:
        registry = _registry(_TIME, _RUNTIME)
        assert registry.namespaces() == ["org.accordproject.time@0.3.0", "org.accordproject.runtime@0.2.0"]

    def test_identical_duplicate_is_skipped(self) -> None:
        registry = ModelRegistry()
        registry.register(_TIME, "a/time.cto")
        assert registry.register(_TIME, "b/time.cto") is None
        assert registry.namespaces() == ["org.accordproject.time@0.3.0"]

    def test_conflicting_namespace_is_rejected(self) -> None:
        registry = ModelRegistry()
        registry.register(_TIME, "a/time.cto")
        with pytest.raises(DocumentRegistrationError, match="already registered from 'a/time.cto'") as exc_info:
            registry.register(_TIME + "concept Extra {}\n", "b/time.cto")
        assert exc_info.value.document == "b/time.cto"

    def test_same_namespace_other_version_is_separate(self) -> None:
        registry = _registry(_TIME, _TIME.replace("@0.3.0", "@0.4.0"))
        assert len(registry.namespaces()) == 2

    def test_syntax_error_names_document(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(DocumentRegistrationError) as exc_info:
            registry.register("namespace a.b\nconcept {", "bad.cto")
        assert str(exc_info.value).startswith("bad.cto: Line 2")

    def test_lexer_error_names_document(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(DocumentRegistrationError, match="bad.cto"):
            registry.register("namespace a.b\n#", "bad.cto")

    def test_semantic_error_is_rejected(self) -> None:
        registry = ModelRegistry()
        with pytest.raises(DocumentRegistrationError, match="undefined type 'Money'"):
            registry.register("namespace a.b\nconcept A { o Money m }", "bad.cto")
        assert registry.namespaces() == []

    def test_registration_error_is_a_registry_error(self) -> None:
        assert issubclass(DocumentRegistrationError, RegistryError)
        assert issubclass(ModelValidationError, RegistryError)


# ###############
# Cross-Namespace Validation
# ###############


class TestValidateAll:
    def test_complete_model_validates(self) -> None:
        _full_registry()

    def test_missing_imported_namespace(self) -> None:
        errors = _validation_errors(_TIME, _CONTRACT, _MODEL)
        assert any("imported namespace 'org.accordproject.runtime@0.2.0' is not registered" in e for e in errors)

    def test_imported_type_not_declared(self) -> None:
        source = "namespace a.b@1.0.0\nimport org.accordproject.time@0.3.0.Period\nconcept A { o Period p }"
        errors = _validation_errors(_TIME, source)
        assert any("imported type 'Period' is not declared in 'org.accordproject.time@0.3.0'" in e for e in errors)

    def test_wildcard_reference_must_resolve(self) -> None:
        source = "namespace a.b@1.0.0\nimport org.accordproject.time.*\nconcept A { o Period p }"
        errors = _validation_errors(_TIME, source)
        assert errors == ["a.b@1.0.0.A: undefined type 'Period'"]

    def test_wildcard_reference_resolves(self) -> None:
        source = "namespace a.b@1.0.0\nimport org.accordproject.time.*\nconcept A { o Duration d }"
        registry = _registry(_TIME, source)
        registry.validate_all()

    def test_supertype_kind_mismatch(self) -> None:
        source = "namespace a.b\nconcept Base {}\nasset Car extends Base {}"
        errors = _validation_errors(source)
        assert errors == ["a.b.Car: asset cannot extend concept 'Base'"]

    def test_inheritance_cycle(self) -> None:
        source = "namespace a.b\nconcept A extends B {}\nconcept B extends A {}"
        errors = _validation_errors(source)
        assert errors == ["Inheritance cycle: a.b.A -> a.b.B -> a.b.A"]

    def test_unversioned_import_matches_versioned_namespace(self) -> None:
        source = "namespace a.b\nimport org.accordproject.time.Duration\nconcept A { o Duration d }"
        registry = _registry(_TIME, source)
        registry.validate_all()

    def test_all_errors_are_reported_together(self) -> None:
        source = "namespace a.b\nimport x.y.Missing\nconcept A { o x.y.Other other }"
        errors = _validation_errors(source)
        assert len(errors) == 2


# ###############
# Resolution
# ###############


class TestResolution:
    def test_model_file_for_unknown_namespace(self) -> None:
        with pytest.raises(RegistryError, match="not registered"):
            ModelRegistry().model_file("a.b")

    def test_declarations_of(self) -> None:
        registry = _full_registry()
        names = [d.name for d in registry.declarations_of("org.accordproject.time@0.3.0")]
        assert names == ["TemporalUnit", "Duration"]

    def test_find_namespace(self) -> None:
        registry = _full_registry()
        assert registry.find_namespace("org.accordproject.time", "0.3.0") == "org.accordproject.time@0.3.0"
        assert registry.find_namespace("org.accordproject.time") == "org.accordproject.time@0.3.0"
        assert registry.find_namespace("org.unknown") is None

    def test_fully_qualified_name(self) -> None:
        registry = _full_registry()
        fqn = registry.fully_qualified_name("io.example.penalty@0.1.0", "PenaltyClause")
        assert fqn == "io.example.penalty@0.1.0.PenaltyClause"

    def test_resolve_local_type(self) -> None:
        registry = _full_registry()
        resolved = registry.resolve_type("io.example.penalty@0.1.0", "Percent")
        assert resolved is not None
        assert resolved[0] == "io.example.penalty@0.1.0"
        assert resolved[1].kind == DeclarationKind.SCALAR

    def test_resolve_imported_type(self) -> None:
        registry = _full_registry()
        resolved = registry.resolve_type("io.example.penalty@0.1.0", "Duration")
        assert resolved is not None
        assert resolved[0] == "org.accordproject.time@0.3.0"

    def test_resolve_qualified_type(self) -> None:
        registry = _full_registry()
        resolved = registry.resolve_type("org.accordproject.runtime@0.2.0", "org.accordproject.time@0.3.0.Duration")
        assert resolved is not None
        assert resolved[1].name == "Duration"

    def test_primitives_and_unknown_names_do_not_resolve(self) -> None:
        registry = _full_registry()
        assert registry.resolve_type("io.example.penalty@0.1.0", "String") is None
        assert registry.resolve_type("io.example.penalty@0.1.0", "Period") is None

    def test_super_type_name_is_fully_qualified(self) -> None:
        registry = _full_registry()
        clause = registry.model_file("io.example.penalty@0.1.0").get_declaration("PenaltyClause")
        assert clause is not None
        super_type = registry.super_type_name("io.example.penalty@0.1.0", clause)
        assert super_type == "org.accordproject.contract@0.2.0.Clause"

    def test_super_type_name_without_supertype(self) -> None:
        registry = _full_registry()
        duration = registry.model_file("org.accordproject.time@0.3.0").get_declaration("Duration")
        assert duration is not None
        assert registry.super_type_name("org.accordproject.time@0.3.0", duration) is None

    def test_resolve_scalar(self) -> None:
        registry = _full_registry()
        assert registry.resolve_scalar("io.example.penalty@0.1.0", "Percent") == "Double"
        assert registry.resolve_scalar("io.example.penalty@0.1.0", "Duration") is None


# ###############
# Implicit and Inherited Properties
# ###############


class TestAllProperties:
    def _names(self, registry: ModelRegistry, namespace: str, name: str) -> list[str]:
        declaration = registry.model_file(namespace).get_declaration(name)
        assert declaration is not None
        return [p.name for p in registry.all_properties(namespace, declaration)]

    def test_concept_has_class_only(self) -> None:
        names = self._names(_full_registry(), "org.accordproject.time@0.3.0", "Duration")
        assert names == ["$class", "amount", "unit"]

    def test_asset_inherits_identifier_and_super_properties(self) -> None:
        names = self._names(_full_registry(), "io.example.penalty@0.1.0", "PenaltyClause")
        assert names == ["$class", "$identifier", "clauseId", "penaltyDuration", "penaltyPercentage"]

    def test_transaction_has_timestamp(self) -> None:
        names = self._names(_full_registry(), "io.example.penalty@0.1.0", "PenaltyRequest")
        assert names == ["$class", "$timestamp", "deliveredAt"]

    def test_event_has_timestamp(self) -> None:
        names = self._names(_full_registry(), "io.example.penalty@0.1.0", "PenaltyIssued")
        assert names == ["$class", "$timestamp", "amount"]

    def test_identified_concept_has_identifier(self) -> None:
        registry = _registry("namespace a.b\nconcept Tagged identified by tag { o String tag }")
        assert self._names(registry, "a.b", "Tagged") == ["$class", "$identifier", "tag"]
