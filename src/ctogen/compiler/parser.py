# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for Concerto (.cto) files.

Converts a token stream produced by the scanner into a ModelFile.
"""

from ctogen.compiler.scanner import Token, TokenType, tokenize
from ctogen.model.entities import (
    DeclarationKind,
    ImportDeclaration,
    ModelFile,
    TypeDeclaration,
)
from ctogen.model.types import (
    DecoratorArgument,
    DecoratorDef,
    NumericRange,
    PropertyDef,
)

# ###############
# Public Interface
# ###############


class ParseError(Exception):
    """Raised when the parser encounters a syntactically invalid construct.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def parse(source: str) -> ModelFile:
    """Parse Concerto source text into a ModelFile.

    Args:
        source: The full text of a .cto file.

    Returns:
        A ModelFile instance representing the parsed namespace.

    Raises:
        LexerError: If the source contains invalid characters or unterminated literals.
        ParseError: If the source is syntactically invalid.
    """
    tokens = tokenize(source)
    return _Parser(tokens).parse()


# ################
# Implementation
# ################

_CLASS_KINDS: dict[TokenType, DeclarationKind] = {
    TokenType.CONCEPT: DeclarationKind.CONCEPT,
    TokenType.ASSET: DeclarationKind.ASSET,
    TokenType.PARTICIPANT: DeclarationKind.PARTICIPANT,
    TokenType.TRANSACTION: DeclarationKind.TRANSACTION,
    TokenType.EVENT: DeclarationKind.EVENT,
}

_KEYWORD_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.CONCERTO,
        TokenType.VERSION,
        TokenType.NAMESPACE,
        TokenType.IMPORT,
        TokenType.FROM,
        TokenType.ABSTRACT,
        TokenType.CONCEPT,
        TokenType.ASSET,
        TokenType.PARTICIPANT,
        TokenType.TRANSACTION,
        TokenType.EVENT,
        TokenType.ENUM,
        TokenType.SCALAR,
        TokenType.MAP,
        TokenType.EXTENDS,
        TokenType.IDENTIFIED,
        TokenType.BY,
        TokenType.FIELD,
        TokenType.OPTIONAL,
        TokenType.DEFAULT,
        TokenType.REGEX,
        TokenType.RANGE,
        TokenType.LENGTH,
        TokenType.TRUE,
        TokenType.FALSE,
    }
)


class _Parser:
    """Recursive-descent parser for Concerto token streams."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> ModelFile:
        """Parse the full token stream and return a ModelFile."""
        concerto_version: str | None = None
        if self._check(TokenType.CONCERTO):
            self._advance()  # consume 'concerto'
            self._expect(TokenType.VERSION)
            concerto_version = self._expect(TokenType.STRING).value

        decorators = self._parse_decorators()
        namespace, version = self._parse_namespace()
        result = ModelFile(
            namespace=namespace,
            version=version,
            concerto_version=concerto_version,
            decorators=decorators,
        )

        while self._check(TokenType.IMPORT):
            result.imports.append(self._parse_import())

        while not self._at_end():
            result.declarations.append(self._parse_declaration())
        return result

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        """Return the current (un-consumed) token."""
        return self._tokens[self._pos]

    def _peek_type(self) -> TokenType:
        """Return the token type of the current token."""
        return self._tokens[self._pos].type

    def _peek_next_type(self) -> TokenType:
        """Return the token type of the token after the current one."""
        if self._pos + 1 < len(self._tokens):
            return self._tokens[self._pos + 1].type
        return TokenType.EOF

    def _at_end(self) -> bool:
        """Return True if the current token is the EOF token."""
        return self._peek_type() == TokenType.EOF

    def _advance(self) -> Token:
        """Consume and return the current token, stopping at EOF."""
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _expect(self, *types: TokenType) -> Token:
        """Consume the current token if it matches any of the given types.

        Raises ParseError if the current token does not match.
        """
        tok = self._current()
        if tok.type not in types:
            expected = ", ".join(repr(t.value) for t in types)
            raise ParseError(
                f"Expected {expected}, got {tok.value!r}",
                tok.line,
                tok.column,
            )
        return self._advance()

    def _check(self, *types: TokenType) -> bool:
        """Return True if the current token matches any of the given types (without
        consuming).
        """
        return self._peek_type() in types

    def _expect_name_token(self) -> Token:
        """Consume the current token as a name.

        Accepts identifiers and keywords used in name positions (e.g. a
        property named 'version').  Raises ParseError for structural tokens
        and EOF.
        """
        tok = self._current()
        if tok.type != TokenType.IDENTIFIER and tok.type not in _KEYWORD_TYPES:
            raise ParseError(
                f"Expected identifier, got {tok.value!r}",
                tok.line,
                tok.column,
            )
        return self._advance()

    def _parse_dotted_name(self) -> str:
        """Parse: name (. name)*"""
        parts = [self._expect_name_token().value]
        while self._check(TokenType.DOT):
            self._advance()  # consume .
            parts.append(self._expect_name_token().value)
        return ".".join(parts)

    # ------------------------------------------------------------------
    # Namespace and imports
    # ------------------------------------------------------------------

    def _parse_namespace(self) -> tuple[str, str | None]:
        """Parse: namespace <a.b.c>[@<version>]"""
        self._expect(TokenType.NAMESPACE)
        name = self._parse_dotted_name()
        version: str | None = None
        if self._check(TokenType.AT):
            self._advance()  # consume @
            version = self._expect(TokenType.SEMVER).value
        return name, version

    def _parse_import(self) -> ImportDeclaration:
        """Parse one import statement.

        Accepted forms::

            import a.b.Type
            import a.b.*
            import a.b@1.0.0.Type
            import a.b@1.0.0.{TypeA, TypeB}
            import a.b@1.0.0.* from https://example.org/b.cto
        """
        import_tok = self._expect(TokenType.IMPORT)
        parts = [self._expect_name_token().value]
        version: str | None = None
        types: list[str] = []
        wildcard = False

        while True:
            if self._check(TokenType.AT):
                self._advance()  # consume @
                version = self._expect(TokenType.SEMVER).value
                self._expect(TokenType.DOT)
                types, wildcard = self._parse_import_targets()
                break
            if self._check(TokenType.DOT):
                if self._peek_next_type() in (TokenType.STAR, TokenType.LBRACE):
                    self._advance()  # consume .
                    types, wildcard = self._parse_import_targets()
                    break
                self._advance()  # consume .
                parts.append(self._expect_name_token().value)
                continue
            if len(parts) < 2:
                raise ParseError(
                    f"Import of '{parts[0]}' must name a type within a namespace",
                    import_tok.line,
                    import_tok.column,
                )
            types = [parts.pop()]
            break

        uri: str | None = None
        if self._check(TokenType.FROM):
            self._advance()  # consume 'from'
            uri = self._expect(TokenType.URI).value

        return ImportDeclaration(
            namespace=".".join(parts),
            version=version,
            types=types,
            wildcard=wildcard,
            uri=uri,
        )

    def _parse_import_targets(self) -> tuple[list[str], bool]:
        """Parse the part after the namespace: ``*``, ``{A, B}`` or ``Type``."""
        if self._check(TokenType.STAR):
            self._advance()
            return [], True
        if self._check(TokenType.LBRACE):
            self._advance()  # consume {
            names = [self._expect_name_token().value]
            while self._check(TokenType.COMMA):
                self._advance()  # consume ,
                names.append(self._expect_name_token().value)
            self._expect(TokenType.RBRACE)
            return names, False
        return [self._expect_name_token().value], False

    # ------------------------------------------------------------------
    # Decorators
    # ------------------------------------------------------------------

    def _parse_decorators(self) -> list[DecoratorDef]:
        """Parse zero or more decorators: @Name or @Name(arg, ...)"""
        decorators: list[DecoratorDef] = []
        while self._check(TokenType.AT):
            self._advance()  # consume @
            name = self._expect_name_token().value
            decorator = DecoratorDef(name=name)
            if self._check(TokenType.LPAREN):
                self._advance()  # consume (
                if not self._check(TokenType.RPAREN):
                    decorator.arguments.append(self._parse_decorator_argument())
                    while self._check(TokenType.COMMA):
                        self._advance()  # consume ,
                        decorator.arguments.append(self._parse_decorator_argument())
                self._expect(TokenType.RPAREN)
            decorators.append(decorator)
        return decorators

    def _parse_decorator_argument(self) -> DecoratorArgument:
        tok = self._current()
        if tok.type in (TokenType.STRING, TokenType.INTEGER, TokenType.FLOAT, TokenType.TRUE, TokenType.FALSE):
            return self._parse_literal()
        name = self._parse_dotted_name()
        if self._check(TokenType.LBRACKET):
            self._advance()
            self._expect(TokenType.RBRACKET)
            name += "[]"
        return name

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _parse_declaration(self) -> TypeDeclaration:
        """Parse one top-level declaration with its leading decorators."""
        decorators = self._parse_decorators()
        is_abstract = False
        if self._check(TokenType.ABSTRACT):
            self._advance()  # consume 'abstract'
            is_abstract = True

        tok = self._current()
        if tok.type in _CLASS_KINDS:
            declaration = self._parse_class_declaration(_CLASS_KINDS[tok.type])
            declaration.is_abstract = is_abstract
        elif is_abstract:
            raise ParseError(
                f"Expected a class declaration after 'abstract', got {tok.value!r}",
                tok.line,
                tok.column,
            )
        elif tok.type == TokenType.ENUM:
            declaration = self._parse_enum()
        elif tok.type == TokenType.SCALAR:
            declaration = self._parse_scalar()
        elif tok.type == TokenType.MAP:
            declaration = self._parse_map()
        else:
            raise ParseError(
                f"Unexpected token {tok.value!r} at top level",
                tok.line,
                tok.column,
            )
        declaration.decorators = decorators
        return declaration

    def _parse_class_declaration(self, kind: DeclarationKind) -> TypeDeclaration:
        """Parse: <kind> <Name> [identified [by <field>]] [extends <Super>] { property* }"""
        self._advance()  # consume the kind keyword
        name_tok = self._expect(TokenType.IDENTIFIER)
        declaration = TypeDeclaration(kind=kind, name=name_tok.value)

        while self._check(TokenType.IDENTIFIED, TokenType.EXTENDS):
            if self._check(TokenType.IDENTIFIED):
                self._advance()  # consume 'identified'
                declaration.is_identified = True
                if self._check(TokenType.BY):
                    self._advance()  # consume 'by'
                    declaration.identified_by = self._expect_name_token().value
            else:
                self._advance()  # consume 'extends'
                declaration.super_type = self._parse_dotted_name()

        self._expect(TokenType.LBRACE)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            declaration.properties.append(self._parse_property())
        self._expect(TokenType.RBRACE)
        return declaration

    def _parse_enum(self) -> TypeDeclaration:
        """Parse: enum <Name> { (o <value>)* }"""
        self._expect(TokenType.ENUM)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LBRACE)
        declaration = TypeDeclaration(kind=DeclarationKind.ENUM, name=name_tok.value)
        while not self._check(TokenType.RBRACE, TokenType.EOF):
            self._parse_decorators()
            self._expect(TokenType.FIELD)
            declaration.enum_values.append(self._expect_name_token().value)
        self._expect(TokenType.RBRACE)
        return declaration

    def _parse_scalar(self) -> TypeDeclaration:
        """Parse: scalar <Name> extends <Primitive> [default=..] [regex=..] [range=..] [length=..]"""
        self._expect(TokenType.SCALAR)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.EXTENDS)
        base_tok = self._expect(TokenType.IDENTIFIER)
        declaration = TypeDeclaration(
            kind=DeclarationKind.SCALAR,
            name=name_tok.value,
            scalar_type=base_tok.value,
        )
        # Scalar validators are accepted but carry no meaning for code generation.
        holder = PropertyDef(name=name_tok.value, type_name=base_tok.value)
        while self._check(TokenType.DEFAULT, TokenType.REGEX, TokenType.RANGE, TokenType.LENGTH):
            self._parse_property_modifier(holder)
        return declaration

    def _parse_map(self) -> TypeDeclaration:
        """Parse: map <Name> { o <KeyType> [name] o|--> <ValueType> [name] }"""
        self._expect(TokenType.MAP)
        name_tok = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.LBRACE)
        self._expect(TokenType.FIELD)
        key_type = self._parse_dotted_name()
        if self._check(TokenType.IDENTIFIER):
            self._advance()  # optional key name
        self._expect(TokenType.FIELD, TokenType.ARROW)
        value_type = self._parse_dotted_name()
        if self._check(TokenType.IDENTIFIER):
            self._advance()  # optional value name
        self._expect(TokenType.RBRACE)
        return TypeDeclaration(
            kind=DeclarationKind.MAP,
            name=name_tok.value,
            map_key_type=key_type,
            map_value_type=value_type,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def _parse_property(self) -> PropertyDef:
        """Parse: o|--> <Type>[[]] <name> [modifiers]"""
        decorators = self._parse_decorators()
        marker = self._expect(TokenType.FIELD, TokenType.ARROW)
        type_name = self._parse_dotted_name()
        is_array = False
        if self._check(TokenType.LBRACKET):
            self._advance()  # consume [
            self._expect(TokenType.RBRACKET)
            is_array = True
        name_tok = self._expect_name_token()
        prop = PropertyDef(
            name=name_tok.value,
            type_name=type_name,
            is_array=is_array,
            is_relationship=marker.type == TokenType.ARROW,
            decorators=decorators,
        )
        while self._check(
            TokenType.OPTIONAL,
            TokenType.DEFAULT,
            TokenType.REGEX,
            TokenType.RANGE,
            TokenType.LENGTH,
        ):
            self._parse_property_modifier(prop)
        return prop

    def _parse_property_modifier(self, prop: PropertyDef) -> None:
        """Parse one of: optional | default=.. | regex=/../ | range=[..] | length=[..]"""
        tok = self._advance()
        if tok.type == TokenType.OPTIONAL:
            prop.is_optional = True
            return
        self._expect(TokenType.EQUALS)
        if tok.type == TokenType.DEFAULT:
            prop.default = self._parse_literal()
        elif tok.type == TokenType.REGEX:
            prop.regex = self._expect(TokenType.REGEX_LITERAL).value
        elif tok.type == TokenType.RANGE:
            prop.range = self._parse_range()
        else:
            prop.length = self._parse_range()

    def _parse_range(self) -> NumericRange:
        """Parse: [ [lower] , [upper] ]"""
        self._expect(TokenType.LBRACKET)
        result = NumericRange()
        if not self._check(TokenType.COMMA):
            result.lower = self._parse_number()
        self._expect(TokenType.COMMA)
        if not self._check(TokenType.RBRACKET):
            result.upper = self._parse_number()
        self._expect(TokenType.RBRACKET)
        return result

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _parse_number(self) -> int | float:
        tok = self._expect(TokenType.INTEGER, TokenType.FLOAT)
        return int(tok.value) if tok.type == TokenType.INTEGER else float(tok.value)

    def _parse_literal(self) -> str | int | float | bool:
        """Parse a string, number, or boolean literal."""
        tok = self._current()
        if tok.type == TokenType.STRING:
            return self._advance().value
        if tok.type in (TokenType.INTEGER, TokenType.FLOAT):
            return self._parse_number()
        if tok.type in (TokenType.TRUE, TokenType.FALSE):
            return self._advance().type == TokenType.TRUE
        if tok.type == TokenType.IDENTIFIER:
            return self._advance().value
        raise ParseError(
            f"Expected a literal value, got {tok.value!r}",
            tok.line,
            tok.column,
        )
