"""
Compiler Error Hierarchy
========================

Exceptions raised by the PROGRAMA compiler. All inherit from CompilerError,
which itself inherits from NeanderError for consistent handling across the
SDK.

Exception Hierarchy
-------------------
CompilerError (base for all compiler errors)
├── LangSyntaxError - parser diagnostics, collected and recovered from
│   ├── UnexpectedTokenError - token does not fit the grammar here
│   └── MissingTokenError - required token not found
├── CapacityError - variable, temp or code band exhausted (fatal)
├── InternalCompilerError - code generator invariant broken (fatal)
└── CompilationError - aggregate report of collected diagnostics

Unrecognized characters never raise: the lexer classifies them as UNKNOWN
and the token stream discards them.

Error Message Format
--------------------
    prog.txt:3:9: error: unexpected token '*'
        x = 2 + * 3
                ^
    hint: expected a number, identifier, '(' or '-'
"""

from typing import Optional

from neander_sdk.errors import LocatedError, SourceLocation


# =============================================================================
# Base Compiler Exception
# =============================================================================

class CompilerError(LocatedError):
    """Base exception for all compiler errors."""
    pass


class CompilationError(CompilerError):
    """
    Aggregate error containing every collected diagnostic.

    The message is the pre-formatted report from DiagnosticCollector and is
    passed through unchanged.

    Attributes:
        errors: The individual diagnostics
    """

    def __init__(self, report: str, errors: Optional[list[CompilerError]] = None):
        self.errors = list(errors or [])
        super().__init__(report)

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Errors
# =============================================================================

class LangSyntaxError(CompilerError):
    """
    Syntax error in PROGRAMA source.

    The parser records these and resynchronizes by skipping one token, so a
    single run reports every syntax error it can find.
    """
    pass


class UnexpectedTokenError(LangSyntaxError):
    """Token that does not fit the grammar at this point."""

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            f"unexpected token '{found}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(LangSyntaxError):
    """Required token is missing (typically at end of input)."""

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Fatal Errors
# =============================================================================

class CapacityError(CompilerError):
    """
    An address band ran out.

    Variables, constants and temp slots are bump allocated and never
    reclaimed; running past the end of a band stops compilation rather than
    overlapping the next band or wrapping around.
    """

    def __init__(self, band: str, limit: int, location: Optional[SourceLocation] = None):
        self.band = band
        self.limit = limit
        super().__init__(
            f"{band} space exhausted (limit 0x{limit:02X})",
            location=location,
            hint="simplify the program: every operand consumes a memory cell",
        )


class InternalCompilerError(CompilerError):
    """
    Code generator invariant violated.

    Raised for an unresolved jump placeholder at the end of compilation or a
    second backpatch of the same instruction. Never caused by user input.
    """
    pass


# =============================================================================
# Diagnostic Collection
# =============================================================================

class DiagnosticCollector:
    """
    Collects syntax errors and warnings for batch reporting.

    Example:
        collector = DiagnosticCollector(max_errors=50)
        collector.add(UnexpectedTokenError("*", "an expression", loc))
        collector.add_warning("literal 300 reduced to 44", loc)
        collector.raise_if_errors()
    """

    def __init__(self, max_errors: int = 100):
        self.errors: list[CompilerError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: CompilerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True once max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []
        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        lines.extend(self.warnings)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )
        return "\n".join(lines)

    def clear(self) -> None:
        self.errors.clear()
        self.warnings.clear()

    def raise_if_errors(self) -> None:
        """Raise a CompilationError if any errors were collected."""
        if self.has_errors():
            raise CompilationError(self.report(), self.errors)
