# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lexical scanner for Concerto (.cto) files.

Converts raw source text into a sequence of tokens for subsequent parsing.
"""

import enum
from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class TokenType(enum.Enum):
    """All token types produced by the Concerto scanner."""

    # Keywords
    CONCERTO = "concerto"
    VERSION = "version"
    NAMESPACE = "namespace"
    IMPORT = "import"
    FROM = "from"
    ABSTRACT = "abstract"
    CONCEPT = "concept"
    ASSET = "asset"
    PARTICIPANT = "participant"
    TRANSACTION = "transaction"
    EVENT = "event"
    ENUM = "enum"
    SCALAR = "scalar"
    MAP = "map"
    EXTENDS = "extends"
    IDENTIFIED = "identified"
    BY = "by"
    FIELD = "o"
    OPTIONAL = "optional"
    DEFAULT = "default"
    REGEX = "regex"
    RANGE = "range"
    LENGTH = "length"
    TRUE = "true"
    FALSE = "false"

    # Symbols and operators
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    DOT = "."
    EQUALS = "="
    AT = "@"
    STAR = "*"
    ARROW = "-->"

    # Literals
    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    REGEX_LITERAL = "REGEX_LITERAL"
    SEMVER = "SEMVER"
    URI = "URI"

    # Identifiers
    IDENTIFIER = "IDENTIFIER"

    # End of file
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its source location.

    Attributes:
        type: The kind of token.
        value: The raw text of the token (or decoded string content for STRING tokens).
        line: 1-based line number where the token starts.
        column: 1-based column number where the token starts.
    """

    type: TokenType
    value: str
    line: int
    column: int


class LexerError(Exception):
    """Raised when the scanner encounters an invalid character or unterminated literal.

    Attributes:
        line: 1-based line number of the error.
        column: 1-based column number of the error.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"Line {line}, column {column}: {message}")
        self.line = line
        self.column = column


def tokenize(source: str) -> list[Token]:
    """Tokenize Concerto source text into a sequence of tokens.

    Comments and whitespace are consumed and not included in the output.
    The text following ``from`` is scanned as a single URI token, and a
    version following ``@`` (``money@0.3.0``) as a single SEMVER token.

    Args:
        source: The full text of a .cto file.

    Returns:
        A list of Token objects ending with a single EOF token.

    Raises:
        LexerError: On unexpected characters, unterminated string or regex
            literals, or unterminated block comments.
    """
    return _Lexer(source).tokenize()


# ################
# Implementation
# ################

_KEYWORDS: dict[str, TokenType] = {
    "concerto": TokenType.CONCERTO,
    "version": TokenType.VERSION,
    "namespace": TokenType.NAMESPACE,
    "import": TokenType.IMPORT,
    "from": TokenType.FROM,
    "abstract": TokenType.ABSTRACT,
    "concept": TokenType.CONCEPT,
    "asset": TokenType.ASSET,
    "participant": TokenType.PARTICIPANT,
    "transaction": TokenType.TRANSACTION,
    "event": TokenType.EVENT,
    "enum": TokenType.ENUM,
    "scalar": TokenType.SCALAR,
    "map": TokenType.MAP,
    "extends": TokenType.EXTENDS,
    "identified": TokenType.IDENTIFIED,
    "by": TokenType.BY,
    "o": TokenType.FIELD,
    "optional": TokenType.OPTIONAL,
    "default": TokenType.DEFAULT,
    "regex": TokenType.REGEX,
    "range": TokenType.RANGE,
    "length": TokenType.LENGTH,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "=": TokenType.EQUALS,
    "*": TokenType.STAR,
}

_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


class _Lexer:
    """Internal scanner state machine."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Run the scanner and return all tokens including the terminal EOF."""
        while self._pos < len(self._source):
            self._skip_whitespace_and_comments()
            if self._pos >= len(self._source):
                break
            self._scan_token()
        self._tokens.append(Token(TokenType.EOF, "", self._line, self._column))
        return self._tokens

    # ------------------------------------------------------------------
    # Low-level character access helpers
    # ------------------------------------------------------------------

    def _current(self) -> str:
        """Return the character at the current position, or '' at end of input."""
        if self._pos < len(self._source):
            return self._source[self._pos]
        return ""

    def _peek(self, offset: int = 1) -> str:
        """Return the character *offset* positions ahead, or '' past end of input."""
        if self._pos + offset < len(self._source):
            return self._source[self._pos + offset]
        return ""

    def _advance(self) -> str:
        """Consume the current character, update position tracking, and return it."""
        ch = self._source[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _previous_type(self) -> TokenType | None:
        return self._tokens[-1].type if self._tokens else None

    # ------------------------------------------------------------------
    # Whitespace and comment skipping
    # ------------------------------------------------------------------

    def _skip_whitespace_and_comments(self) -> None:
        """Skip all whitespace and comment runs at the current position."""
        while self._pos < len(self._source):
            ch = self._current()
            if ch in " \t\r\n\ufeff":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                self._skip_line_comment()
            elif ch == "/" and self._peek() == "*":
                self._skip_block_comment()
            else:
                break

    def _skip_line_comment(self) -> None:
        """Consume from '//' through end-of-line (exclusive of the newline itself)."""
        while self._pos < len(self._source) and self._current() != "\n":
            self._advance()

    def _skip_block_comment(self) -> None:
        """Consume from '/*' through the matching '*/'."""
        start_line = self._line
        start_col = self._column
        self._advance()  # /
        self._advance()  # *
        while self._pos < len(self._source):
            if self._current() == "*" and self._peek() == "/":
                self._advance()  # *
                self._advance()  # /
                return
            self._advance()
        raise LexerError("Unterminated block comment", start_line, start_col)

    # ------------------------------------------------------------------
    # Token scanning dispatcher
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        """Dispatch to the appropriate handler based on the current character."""
        ch = self._current()
        line = self._line
        col = self._column
        previous = self._previous_type()

        if previous == TokenType.FROM and self._looks_like_uri():
            self._scan_uri(line, col)
        elif previous == TokenType.AT and ch.isdigit():
            self._scan_semver(line, col)
        elif ch in _SINGLE_CHAR_TOKENS:
            self._advance()
            self._tokens.append(Token(_SINGLE_CHAR_TOKENS[ch], ch, line, col))
        elif ch == "@":
            self._advance()
            self._tokens.append(Token(TokenType.AT, ch, line, col))
        elif ch == "-":
            if self._peek() == "-" and self._peek(2) == ">":
                self._advance()  # -
                self._advance()  # -
                self._advance()  # >
                self._tokens.append(Token(TokenType.ARROW, "-->", line, col))
            elif self._peek().isdigit():
                self._scan_number(line, col)
            else:
                raise LexerError("Unexpected character: '-'", line, col)
        elif ch == "/":
            self._scan_regex(line, col)
        elif ch in "\"'":
            self._scan_string(line, col)
        elif ch.isdigit():
            self._scan_number(line, col)
        elif ch.isalpha() or ch in "_$":
            self._scan_identifier_or_keyword(line, col)
        else:
            raise LexerError(f"Unexpected character: {ch!r}", line, col)

    # ------------------------------------------------------------------
    # Literal scanners
    # ------------------------------------------------------------------

    def _scan_string(self, line: int, col: int) -> None:
        """Scan a single- or double-quoted string literal with escape sequences."""
        quote = self._advance()
        chars: list[str] = []
        while self._pos < len(self._source):
            ch = self._current()
            if ch == quote:
                self._advance()  # closing quote
                self._tokens.append(Token(TokenType.STRING, "".join(chars), line, col))
                return
            if ch == "\n":
                raise LexerError("Unterminated string literal", line, col)
            if ch == "\\":
                self._advance()
                if self._pos >= len(self._source):
                    raise LexerError("Unterminated string literal", line, col)
                esc = self._current()
                if esc not in _ESCAPES:
                    raise LexerError(
                        f"Invalid escape sequence: '\\{esc}'",
                        self._line,
                        self._column,
                    )
                chars.append(_ESCAPES[esc])
                self._advance()
            else:
                chars.append(ch)
                self._advance()
        raise LexerError("Unterminated string literal", line, col)

    def _scan_regex(self, line: int, col: int) -> None:
        """Scan a ``/pattern/flags`` literal; the token value keeps the delimiters."""
        start = self._pos
        self._advance()  # opening /
        while self._pos < len(self._source):
            ch = self._current()
            if ch == "\n":
                break
            if ch == "\\":
                self._advance()
                if self._pos < len(self._source) and self._current() != "\n":
                    self._advance()
                continue
            if ch == "/":
                self._advance()  # closing /
                while self._current().isalpha():
                    self._advance()
                value = self._source[start : self._pos]
                self._tokens.append(Token(TokenType.REGEX_LITERAL, value, line, col))
                return
            self._advance()
        raise LexerError("Unterminated regular expression literal", line, col)

    def _scan_number(self, line: int, col: int) -> None:
        """Scan an integer or floating-point literal, optionally negative.

        A float requires at least one digit on both sides of the decimal point
        or an exponent.
        """
        start = self._pos
        is_float = False
        if self._current() == "-":
            self._advance()
        while self._current().isdigit():
            self._advance()

        if self._current() == "." and self._peek().isdigit():
            is_float = True
            self._advance()  # consume the '.'
            while self._current().isdigit():
                self._advance()

        if self._current() in "eE" and self._current() != "":
            sign_offset = 2 if self._peek() in "+-" and self._peek() != "" else 1
            if self._peek(sign_offset).isdigit():
                is_float = True
                for _ in range(sign_offset):
                    self._advance()
                while self._current().isdigit():
                    self._advance()

        value = self._source[start : self._pos]
        token_type = TokenType.FLOAT if is_float else TokenType.INTEGER
        self._tokens.append(Token(token_type, value, line, col))

    def _scan_semver(self, line: int, col: int) -> None:
        """Scan a namespace version such as ``0.3.0`` or ``1.0.0-rc.1``.

        The version stops before a ``.`` that introduces a type name, so that
        ``money@0.3.0.MonetaryAmount`` yields ``0.3.0`` followed by ``.``.
        """
        start = self._pos
        parts = 0
        while True:
            if not self._current().isdigit():
                raise LexerError("Malformed version number", line, col)
            while self._current().isdigit():
                self._advance()
            parts += 1
            if parts < 3 and self._current() == "." and self._peek().isdigit():
                self._advance()
                continue
            break

        if self._current() in "-+" and self._current() != "" and self._peek().isalnum():
            self._advance()
            while True:
                while self._current().isalnum() or self._current() == "-":
                    self._advance()
                nxt = self._peek()
                if self._current() == "." and (nxt.isdigit() or nxt.islower()):
                    self._advance()
                    continue
                break

        value = self._source[start : self._pos]
        self._tokens.append(Token(TokenType.SEMVER, value, line, col))

    def _looks_like_uri(self) -> bool:
        """Return True if the whitespace-delimited run at the cursor contains a scheme."""
        end = self._pos
        while end < len(self._source) and self._source[end] not in " \t\r\n":
            end += 1
        return "://" in self._source[self._pos : end]

    def _scan_uri(self, line: int, col: int) -> None:
        """Scan the location following ``from`` up to the next whitespace."""
        start = self._pos
        while self._pos < len(self._source) and self._current() not in " \t\r\n":
            self._advance()
        value = self._source[start : self._pos]
        self._tokens.append(Token(TokenType.URI, value, line, col))

    def _scan_identifier_or_keyword(self, line: int, col: int) -> None:
        """Scan an identifier and map it to a keyword token type if applicable."""
        start = self._pos
        while self._pos < len(self._source) and (self._current().isalnum() or self._current() in "_$"):
            self._advance()
        value = self._source[start : self._pos]
        token_type = _KEYWORDS.get(value, TokenType.IDENTIFIER)
        self._tokens.append(Token(token_type, value, line, col))
