"""
PROGRAMA Lexer (Tokenizer)
==========================

Converts PROGRAMA source text into tokens for the parser.

Token Categories
----------------
- Reserved words: PROGRAMA, INICIO, FIM, RES (case-exact)
- Identifiers: letter or underscore, then letters, digits, underscores
- Numbers: runs of decimal digits
- Operators: + - * / ( ) = :
- Quote: the `"` delimiting the program name
- NEWLINE: a run of line break characters (no meaning to the grammar)
- UNKNOWN: any other single character

Tolerant Policy
---------------
The lexer never raises. Characters it cannot classify come out as UNKNOWN
tokens, and the TokenStream the parser reads from throws them away along
with NEWLINE tokens. The discarded UNKNOWN tokens are kept in
`TokenStream.skipped` so callers can see what was ignored.

Example Usage
-------------
>>> from neander_sdk.compiler.lexer import Lexer
>>> for token in Lexer('x = 2 + 3').tokenize():
...     print(token)
Token(IDENTIFIER, 'x', 1:1)
Token(ASSIGN, '=', 1:3)
Token(NUMBER, '2', 1:5)
Token(PLUS, '+', 1:7)
Token(NUMBER, '3', 1:9)
Token(EOF, '', 1:10)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import logging
import string

from neander_sdk.errors import SourceLocation


logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token kinds of the PROGRAMA language."""

    # === Structural ===
    EOF = auto()
    NEWLINE = auto()
    UNKNOWN = auto()

    # === Literals and Names ===
    NUMBER = auto()
    IDENTIFIER = auto()
    QUOTE = auto()          # "

    # === Reserved Words ===
    PROGRAMA = auto()
    INICIO = auto()
    FIM = auto()
    RES = auto()

    # === Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    ASSIGN = auto()         # =
    COLON = auto()          # :


RESERVED_WORDS: dict[str, TokenType] = {
    "PROGRAMA": TokenType.PROGRAMA,
    "INICIO": TokenType.INICIO,
    "FIM": TokenType.FIM,
    "RES": TokenType.RES,
}

SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "=": TokenType.ASSIGN,
    ":": TokenType.COLON,
    '"': TokenType.QUOTE,
}

LINE_BREAKS = "\n\r"
BLANKS = " \t"


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        type: The TokenType classification
        text: The literal source text of the token
        offset: Character offset of the first character in the source
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        filename: Source file name, for locations
    """
    type: TokenType
    text: str
    offset: int
    line: int
    column: int
    filename: str = "<input>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"

    __str__ = __repr__

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def is_significant(self) -> bool:
        """False for the tokens the parser never sees (UNKNOWN, NEWLINE)."""
        return self.type not in (TokenType.UNKNOWN, TokenType.NEWLINE)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes PROGRAMA source.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()      # one at a time
        tokens = list(lexer.tokenize()) # or all at once, EOF last
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> Iterator[Token]:
        """Yield every token, UNKNOWN and NEWLINE included, ending with EOF."""
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return

    def next_token(self) -> Token:
        """
        Return the next token and advance past it.

        Once the end of the source is reached, every call returns EOF.
        """
        self._skip_blanks()

        start = self._pos
        line, column = self._line, self._column
        char = self._peek()

        if not char:
            return self._make_token(TokenType.EOF, start, line, column)

        if char in LINE_BREAKS:
            while self._peek() and self._peek() in LINE_BREAKS:
                self._advance()
            return self._make_token(TokenType.NEWLINE, start, line, column)

        if char in self.IDENT_START:
            while self._peek() and self._peek() in self.IDENT_CHARS:
                self._advance()
            word = self.source[start:self._pos]
            token_type = RESERVED_WORDS.get(word, TokenType.IDENTIFIER)
            return self._make_token(token_type, start, line, column)

        if char in string.digits:
            while self._peek() and self._peek() in string.digits:
                self._advance()
            return self._make_token(TokenType.NUMBER, start, line, column)

        self._advance()
        token_type = SINGLE_CHAR_TOKENS.get(char, TokenType.UNKNOWN)
        return self._make_token(token_type, start, line, column)

    def line_text(self, line: int) -> str:
        """Return the text of a 1-indexed source line, for error context."""
        lines = self.source.splitlines()
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""

    # =========================================================================
    # Character Access
    # =========================================================================

    def _peek(self) -> str:
        if self._pos >= len(self.source):
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        char = self.source[self._pos]
        self._pos += 1

        # "\r\n" counts as one line break; a lone "\r" counts as one too
        if char == "\n" or (char == "\r" and self._peek() != "\n"):
            self._line += 1
            self._column = 1
        elif char != "\r":
            self._column += 1
        return char

    def _skip_blanks(self) -> None:
        while self._peek() and self._peek() in BLANKS:
            self._advance()

    def _make_token(self, token_type: TokenType, start: int, line: int, column: int) -> Token:
        return Token(
            type=token_type,
            text=self.source[start:self._pos],
            offset=start,
            line=line,
            column=column,
            filename=self.filename,
        )


# =============================================================================
# Token Stream
# =============================================================================

class TokenStream:
    """
    The parser's view of the token sequence.

    Pulls tokens from a Lexer on demand and silently drops UNKNOWN and
    NEWLINE tokens, so `current` is always a significant token (or EOF).

    Attributes:
        skipped: UNKNOWN tokens dropped so far, in source order
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.skipped: list[Token] = []
        self._previous: Token | None = None
        self._current = self._next_significant()

    @property
    def current(self) -> Token:
        return self._current

    @property
    def previous(self) -> Token | None:
        return self._previous

    def at_end(self) -> bool:
        return self._current.type is TokenType.EOF

    def advance(self) -> Token:
        """Consume the current token and return it."""
        token = self._current
        if token.type is not TokenType.EOF:
            self._previous = token
            self._current = self._next_significant()
        return token

    def _next_significant(self) -> Token:
        while True:
            token = self.lexer.next_token()
            if token.type is TokenType.UNKNOWN:
                logger.debug(f"{token.location}: ignoring character {token.text!r}")
                self.skipped.append(token)
                continue
            if token.type is TokenType.NEWLINE:
                continue
            return token
