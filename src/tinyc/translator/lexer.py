"""
tinyc Scanner
=============

This module converts source text into a lazily produced sequence of
classified tokens. The translator pulls one token at a time through
Scanner.next_token(); nothing is buffered ahead of the cursor.

Token Categories
----------------
- Keywords: if, else, while, print, int, float
- Identifiers: letter followed by letters, digits and underscores
- Numbers: digits with at most one '.' (INT_LITERAL or FLOAT_LITERAL)
- Operators/punctuation: + - * / = ; ( ) { } >
- ERROR: any other single character

The type keywords 'int' and 'float' share their kinds with the numeric
literals (INT_LITERAL and FLOAT_LITERAL). The two never occur in the same
grammar position; Token.is_type_keyword() tells them apart by lexeme.

The scanner never raises. An unknown character becomes an ERROR token
and the cursor moves past it, so every call makes progress until the end
of input, after which END_OF_INPUT is returned forever.

Example Usage
-------------
>>> from tinyc.translator.lexer import Scanner
>>> for token in Scanner("int x = 1.5;").tokenize():
...     print(token)
Token(INT_LITERAL, 'int', 1:1)
Token(IDENTIFIER, 'x', 1:5)
Token(ASSIGN, '=', 1:7)
Token(FLOAT_LITERAL, '1.5', 1:9)
Token(SEMICOLON, ';', 1:12)
Token(END_OF_INPUT, 1:13)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Mapping, Optional
import string

from tinyc.errors import SourceLocation


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """Closed set of token kinds produced by the scanner."""

    # === Literals (also the 'int' / 'float' type keywords) ===
    INT_LITERAL = auto()
    FLOAT_LITERAL = auto()
    IDENTIFIER = auto()

    # === Arithmetic Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    MUL = auto()            # *
    DIV = auto()            # /

    # === Assignment and Comparison ===
    ASSIGN = auto()         # =
    GREATER_THAN = auto()   # >

    # === Delimiters ===
    SEMICOLON = auto()      # ;
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }

    # === Keywords - Control Flow ===
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    PRINT = auto()

    # === Structural ===
    END_OF_INPUT = auto()
    ERROR = auto()


# =============================================================================
# Keyword and Operator Tables
# =============================================================================

KEYWORDS: dict[str, TokenKind] = {
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "print": TokenKind.PRINT,
    # Type keywords reuse the literal kinds
    "int": TokenKind.INT_LITERAL,
    "float": TokenKind.FLOAT_LITERAL,
}

OPERATORS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "=": TokenKind.ASSIGN,
    ";": TokenKind.SEMICOLON,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ">": TokenKind.GREATER_THAN,
}

NUMERIC_KINDS = (TokenKind.INT_LITERAL, TokenKind.FLOAT_LITERAL)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single classified lexical unit.

    Position fields are informational and excluded from equality, so
    Token(TokenKind.IDENTIFIER, "x") matches any scanned 'x'.

    Attributes:
        kind: The TokenKind classification
        lexeme: Exact matched text ("" for END_OF_INPUT)
        offset: Cursor offset of the first character (0-indexed)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    kind: TokenKind
    lexeme: str = ""
    offset: int = field(default=0, compare=False)
    line: int = field(default=1, compare=False)
    column: int = field(default=1, compare=False)
    filename: str = field(default="<input>", compare=False, repr=False)

    def __repr__(self) -> str:
        if self.lexeme:
            return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column, self.offset)

    def is_type_keyword(self) -> bool:
        """Return True for 'int'/'float' used as a type, not a number."""
        return (
            self.kind in NUMERIC_KINDS
            and bool(self.lexeme)
            and not self.lexeme[0].isdigit()
        )

    def is_number(self) -> bool:
        """Return True for an integer or float literal."""
        return self.kind in NUMERIC_KINDS and not self.is_type_keyword()


# =============================================================================
# Scanner Implementation
# =============================================================================

class Scanner:
    """
    Pull-based scanner over one immutable source buffer.

    The scanner owns the buffer and a single cursor. The cursor only
    moves forward; it is never rewound and there is no peeking beyond
    the current character.

    Usage:
        scanner = Scanner(source_text, "prog.tc")
        token = scanner.next_token()

    Attributes:
        source: The text being scanned
        filename: Name of the source (for token locations)
        keywords: Keyword table in use
        operators: Single-character operator table in use
    """

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits + "_"
    DIGITS = string.digits
    WHITESPACE = string.whitespace

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        keywords: Optional[Mapping[str, TokenKind]] = None,
        operators: Optional[Mapping[str, TokenKind]] = None,
    ):
        """
        Initialize the scanner.

        Args:
            source: The program text
            filename: Name used in token locations
            keywords: Keyword table (defaults to KEYWORDS)
            operators: Single-character operator table (defaults to OPERATORS)
        """
        self.source = source
        self.filename = filename
        self.keywords = dict(KEYWORDS if keywords is None else keywords)
        self.operators = dict(OPERATORS if operators is None else operators)

        self._pos = 0
        self._line = 1
        self._column = 1

    @property
    def position(self) -> int:
        """Current cursor offset (read-only)."""
        return self._pos

    def at_end(self) -> bool:
        """Check if the cursor has reached the end of the buffer."""
        return self._pos >= len(self.source)

    def next_token(self) -> Token:
        """
        Scan and return the next token.

        Returns END_OF_INPUT once the buffer is exhausted, on this call
        and every later one.
        """
        self._skip_whitespace()

        start = (self._pos, self._line, self._column)

        if self.at_end():
            return self._make_token(TokenKind.END_OF_INPUT, "", start)

        char = self._peek()

        if char in self.DIGITS:
            return self._scan_number(start)

        if char in self.IDENT_START:
            return self._scan_identifier(start)

        self._advance()
        kind = self.operators.get(char, TokenKind.ERROR)
        return self._make_token(kind, char, start)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including the first END_OF_INPUT.

        Yields:
            Token objects in source order
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind == TokenKind.END_OF_INPUT:
                return

    def source_line(self, line: int) -> Optional[str]:
        """Return the text of a 1-based line, or None if out of range."""
        lines = self.source.splitlines()
        if 0 < line <= len(lines):
            return lines[line - 1]
        return None

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _peek(self) -> str:
        """Current character, or empty string at end of buffer."""
        if self.at_end():
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1

        return char

    def _skip_whitespace(self) -> None:
        while not self.at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    def _make_token(self, kind: TokenKind, lexeme: str, start: tuple[int, int, int]) -> Token:
        offset, line, column = start
        return Token(
            kind=kind,
            lexeme=lexeme,
            offset=offset,
            line=line,
            column=column,
            filename=self.filename,
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_number(self, start: tuple[int, int, int]) -> Token:
        """
        Scan a numeric literal.

        Digits and at most one '.' are consumed. A second '.' ends the
        literal and is left for the next call, where it becomes an ERROR
        token.
        """
        chars = []
        is_float = False

        while not self.at_end():
            char = self._peek()
            if char == ".":
                if is_float:
                    break
                is_float = True
            elif char not in self.DIGITS:
                break
            chars.append(self._advance())

        kind = TokenKind.FLOAT_LITERAL if is_float else TokenKind.INT_LITERAL
        return self._make_token(kind, "".join(chars), start)

    def _scan_identifier(self, start: tuple[int, int, int]) -> Token:
        """Scan an identifier and look it up in the keyword table."""
        chars = []
        while not self.at_end() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        kind = self.keywords.get(name, TokenKind.IDENTIFIER)
        return self._make_token(kind, name, start)
