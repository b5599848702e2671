# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the single-file semantic analysis of Concerto models."""

from ctogen.compiler.parser import parse
from ctogen.compiler.semantic_analysis import SemanticError, analyze

# ###############
# Test Helpers
# ###############


def _analyze(body: str) -> list[SemanticError]:
    """Parse *body* below a namespace declaration and run semantic analysis."""
    return analyze(parse(f"namespace org.example@1.0.0\n{body}"))


def _messages(errors: list[SemanticError]) -> list[str]:
    """Extract error messages from a list of SemanticError instances."""
    return [e.message for e in errors]


def _assert_clean(body: str) -> None:
    """Assert that a source string produces no semantic errors."""
    errors = _analyze(body)
    assert errors == [], f"Expected no errors but got: {_messages(errors)}"


def _assert_error(body: str, expected_fragment: str) -> None:
    """Assert that a semantic error containing expected_fragment is produced."""
    messages = _messages(_analyze(body))
    assert any(expected_fragment in m for m in messages), (
        f"Expected error containing {expected_fragment!r} but got: {messages}"
    )


# ###############
# Clean Files
# ###############


class TestCleanFile:
    def test_empty_namespace_has_no_errors(self) -> None:
        _assert_clean("")

    def test_primitive_properties(self) -> None:
        _assert_clean("""
concept Sample {
    o String s
    o Boolean b
    o DateTime d
    o Double x
    o Integer i
    o Long l
}
""")

    def test_local_references(self) -> None:
        _assert_clean("""
enum Unit { o days o weeks }
concept Duration { o Long amount o Unit unit }
concept Deadline { o Duration[] reminders optional }
""")

    def test_forward_reference(self) -> None:
        _assert_clean("""
concept Outer { o Inner inner }
concept Inner { o String s }
""")

    def test_imported_reference(self) -> None:
        _assert_clean("""
import org.accordproject.time@0.3.0.Duration
concept Penalty { o Duration after }
""")

    def test_imported_supertype(self) -> None:
        _assert_clean("""
import org.accordproject.runtime@0.2.0.{Request, Response}
transaction MyRequest extends Request { o Boolean flag }
""")

    def test_wildcard_import_defers_unknown_names(self) -> None:
        _assert_clean("""
import org.accordproject.money.*
concept Invoice { o MonetaryAmount total }
""")

    def test_qualified_reference_is_not_checked(self) -> None:
        _assert_clean("concept A { o org.other.Thing thing }")

    def test_scalar_and_map(self) -> None:
        _assert_clean("""
scalar Email extends String
map Directory { o String o Email }
concept Person { o Email email o Directory contacts }
""")

    def test_same_property_name_in_different_declarations(self) -> None:
        _assert_clean("""
concept A { o String name }
concept B { o String name }
""")


# ###############
# Duplicates
# ###############


class TestDuplicates:
    def test_duplicate_declaration(self) -> None:
        _assert_error(
            "concept A {}\nasset A identified by id { o String id }",
            "Duplicate declaration 'A' in namespace 'org.example'",
        )

    def test_duplicate_property(self) -> None:
        _assert_error("concept A { o String s o Integer s }", "Duplicate property 's' in concept 'A'")

    def test_duplicate_enum_value(self) -> None:
        _assert_error("enum Color { o RED o GREEN o RED }", "Duplicate value 'RED' in enum 'Color'")

    def test_each_duplicate_is_reported_once(self) -> None:
        errors = _analyze("concept A {}\nconcept A {}\nconcept A {}")
        assert len(errors) == 2


# ###############
# Type References
# ###############


class TestTypeReferences:
    def test_undefined_property_type(self) -> None:
        _assert_error("concept A { o Money total }", "concept 'A', property 'total': undefined type 'Money'")

    def test_undefined_supertype(self) -> None:
        _assert_error("transaction T extends Request {}", "transaction 'T': undefined type 'Request'")

    def test_undefined_relationship_target(self) -> None:
        _assert_error("asset A identified by id { o String id --> Buyer buyer }", "undefined type 'Buyer'")

    def test_undefined_map_value(self) -> None:
        _assert_error("map M { o String o Missing }", "map 'M': undefined type 'Missing'")

    def test_type_imported_under_other_name_is_undefined(self) -> None:
        _assert_error(
            "import org.accordproject.time@0.3.0.Duration\nconcept A { o Period p }",
            "undefined type 'Period'",
        )

    def test_scalar_must_extend_primitive(self) -> None:
        _assert_error(
            "concept Base {}\nscalar Wrapped extends Base",
            "scalar 'Wrapped' must extend a primitive type, not 'Base'",
        )

    def test_multiple_errors_are_collected(self) -> None:
        errors = _analyze("concept A { o Foo f o Bar b }")
        assert len(errors) == 2
