"""
PROGRAMA Recursive Descent Parser
=================================

Parses PROGRAMA source and drives the code generator as it goes. Each
expression rule returns the memory address holding its value; no syntax
tree is built.

Grammar
-------
    module      ::= 'PROGRAMA' '"' IDENTIFIER '"' ':' 'INICIO'
                    statement* ('RES' '=' expression)? 'FIM'
    statement   ::= IDENTIFIER '=' expression
    expression  ::= term (('+' | '-') term)*
    term        ::= factor (('*' | '/') factor)*
    factor      ::= NUMBER | IDENTIFIER | '(' expression ')' | '-' factor

Error Recovery
--------------
Syntax errors are recorded in the DiagnosticCollector instead of stopping
the parse. After an error the parser skips one token and carries on, so one
run reports every mistake it can reach. End of input inside the statement
list ends the parse with a missing 'FIM' diagnostic.

Example Usage
-------------
>>> from neander_sdk.compiler.compiler import NeanderCompiler
>>> result = NeanderCompiler().compile_source(
...     'PROGRAMA "soma": INICIO x = 2 + 3 RES = x FIM')
>>> result.program_name
'soma'
"""

from typing import Optional
import logging

from neander_sdk.compiler.codegen import CodeGenerator
from neander_sdk.compiler.errors import (
    DiagnosticCollector,
    LangSyntaxError,
    MissingTokenError,
    UnexpectedTokenError,
)
from neander_sdk.compiler.lexer import Token, TokenStream, TokenType


logger = logging.getLogger(__name__)


FACTOR_START = (
    TokenType.NUMBER,
    TokenType.IDENTIFIER,
    TokenType.LPAREN,
    TokenType.MINUS,
)

TOKEN_NAMES = {
    TokenType.PROGRAMA: "'PROGRAMA'",
    TokenType.INICIO: "'INICIO'",
    TokenType.FIM: "'FIM'",
    TokenType.RES: "'RES'",
    TokenType.QUOTE: "'\"'",
    TokenType.COLON: "':'",
    TokenType.ASSIGN: "'='",
    TokenType.RPAREN: "')'",
    TokenType.IDENTIFIER: "an identifier",
}


class Parser:
    """
    Syntax-directed parser for PROGRAMA.

    Usage:
        stream = TokenStream(Lexer(source, "prog.txt"))
        parser = Parser(stream, codegen, diagnostics)
        name = parser.parse()

    Attributes:
        program_name: Name from the header, None if it could not be read
    """

    def __init__(
        self,
        stream: TokenStream,
        codegen: CodeGenerator,
        diagnostics: Optional[DiagnosticCollector] = None,
    ):
        self.stream = stream
        self.codegen = codegen
        self.symbols = codegen.symbols
        self.diagnostics = diagnostics or DiagnosticCollector()
        self.program_name: Optional[str] = None

        # Value of the most recent factor when it was a bare literal
        self._literal: Optional[int] = None

    # =========================================================================
    # Token Helpers
    # =========================================================================

    def _peek(self) -> Token:
        return self.stream.current

    def _advance(self) -> Token:
        return self.stream.advance()

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> Optional[Token]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: TokenType) -> Token:
        """
        Consume a token of the given type.

        Raises:
            MissingTokenError: At end of input
            UnexpectedTokenError: Any other token is in the way
        """
        if self._check(token_type):
            return self._advance()
        raise self._error(TOKEN_NAMES.get(token_type, token_type.name.lower()))

    def _error(self, expected: str) -> LangSyntaxError:
        current = self._peek()
        source_line = self.stream.lexer.line_text(current.line)
        if current.type is TokenType.EOF:
            return MissingTokenError(expected, current.location, source_line)
        return UnexpectedTokenError(current.text, expected, current.location, source_line)

    def _report(self, error: LangSyntaxError) -> None:
        logger.debug(f"syntax error: {error.message}")
        self.diagnostics.add(error)

    def _skip(self) -> None:
        """Drop one token after a syntax error."""
        if not self.stream.at_end():
            logger.debug(f"skipping {self._peek()!r}")
            self._advance()

    # =========================================================================
    # Module
    # =========================================================================

    def parse(self) -> Optional[str]:
        """
        Parse a whole program, emitting code as it goes.

        Syntax errors end up in the diagnostics collector; the caller decides
        what to do with them.

        Returns:
            The program name, or None if the header was malformed
        """
        self._parse_header()
        self._parse_statements()
        if self.diagnostics.should_stop():
            return self.program_name

        if self._check(TokenType.RES):
            self._parse_result()

        try:
            self._expect(TokenType.FIM)
        except LangSyntaxError as e:
            self._report(e)
            return self.program_name

        if not self.stream.at_end():
            current = self._peek()
            self.diagnostics.add_warning(
                f"text after 'FIM' ignored, starting at '{current.text}'",
                current.location,
            )

        return self.program_name

    def _parse_header(self) -> None:
        """'PROGRAMA' '"' IDENTIFIER '"' ':' 'INICIO'"""
        for token_type in (TokenType.PROGRAMA, TokenType.QUOTE):
            self._expect_or_report(token_type)

        name = self._expect_or_report(TokenType.IDENTIFIER)
        if name is not None:
            self.program_name = name.text

        for token_type in (TokenType.QUOTE, TokenType.COLON, TokenType.INICIO):
            self._expect_or_report(token_type)

    def _expect_or_report(self, token_type: TokenType) -> Optional[Token]:
        """Header element: a wrong token is reported and treated as missing."""
        try:
            return self._expect(token_type)
        except LangSyntaxError as e:
            self._report(e)
            return None

    def _parse_statements(self) -> None:
        while not self._check(TokenType.RES, TokenType.FIM, TokenType.EOF):
            if self.diagnostics.should_stop():
                return
            try:
                self._parse_statement()
            except LangSyntaxError as e:
                self._report(e)
                self._skip()

    def _parse_statement(self) -> None:
        """IDENTIFIER '=' expression"""
        name = self._peek()
        if name.type is not TokenType.IDENTIFIER:
            raise self._error("an assignment or 'FIM'")
        self._advance()
        self._expect(TokenType.ASSIGN)

        value = self._parse_expression()
        variable = self.symbols.declare(name.text, location=name.location)
        self.codegen.copy(value, variable.address)

    def _parse_result(self) -> None:
        """'RES' '=' expression -- leaves the value in the accumulator."""
        self._advance()
        try:
            self._expect(TokenType.ASSIGN)
            value = self._parse_expression()
        except LangSyntaxError as e:
            self._report(e)
            self._skip()
            return
        self.codegen.load(value)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_expression(self) -> int:
        """term (('+' | '-') term)*"""
        left = self._parse_term()

        while operator := self._match(TokenType.PLUS, TokenType.MINUS):
            right = self._parse_term()
            dst = self.symbols.allocate_temp(operator.location)
            if operator.type is TokenType.PLUS:
                self.codegen.add(left, right, dst)
            else:
                self.codegen.subtract(left, right, dst)
            left = dst

        return left

    def _parse_term(self) -> int:
        """factor (('*' | '/') factor)*"""
        left = self._parse_factor()

        while operator := self._match(TokenType.STAR, TokenType.SLASH):
            right = self._parse_factor()
            dst = self.symbols.allocate_temp(operator.location)
            if operator.type is TokenType.STAR:
                self.codegen.multiply(left, right, dst)
            else:
                if self._literal == 0:
                    self.diagnostics.add_warning(
                        "division by zero yields 0", operator.location,
                    )
                self.codegen.divide(left, right, dst)
            left = dst

        self._literal = None
        return left

    def _parse_factor(self) -> int:
        """NUMBER | IDENTIFIER | '(' expression ')' | '-' factor"""
        token = self._peek()

        if token.type is TokenType.NUMBER:
            self._advance()
            value = int(token.text)
            if value > 0xFF:
                self.diagnostics.add_warning(
                    f"literal {value} does not fit in a byte, using {value & 0xFF}",
                    token.location,
                )
                value &= 0xFF
            constant = self.symbols.constant(value, token.location)
            address = self.codegen.load_into_temp(constant.address)
            self._literal = value
            return address

        if token.type is TokenType.IDENTIFIER:
            self._advance()
            variable = self.symbols.declare(token.text, location=token.location)
            address = self.codegen.load_into_temp(variable.address)
            self._literal = None
            return address

        if token.type is TokenType.LPAREN:
            self._advance()
            temp = self.symbols.allocate_temp(token.location)
            inner = self._parse_expression()
            self._expect(TokenType.RPAREN)
            self.codegen.copy(inner, temp)
            self._literal = None
            return temp

        if token.type is TokenType.MINUS:
            self._advance()
            temp = self.symbols.allocate_temp(token.location)
            inner = self._parse_factor()
            self.codegen.negate(inner, temp)
            self._literal = None
            return temp

        error = self._error("a number, identifier, '(' or '-'")
        if isinstance(error, MissingTokenError):
            raise error

        # Skip the offending token and try again from the next one
        self._report(error)
        self._skip()
        if self._check(*FACTOR_START):
            return self._parse_factor()
        self._literal = None
        return self.symbols.zero
