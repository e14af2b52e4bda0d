"""
Neander SDK Error Hierarchy
===========================

This module defines the exception hierarchy shared by the assembler and the
instruction encoder. All exceptions inherit from NeanderError, allowing callers
to catch every SDK-related error with a single except clause.

Exception Hierarchy
-------------------
NeanderError (base)
├── EncodingError (assembler / instruction encoding, always fatal)
│   ├── UnknownMnemonicError - mnemonic not in the opcode table
│   ├── InvalidLiteralError - malformed numeric literal or operand
│   ├── AddressRangeError - address or value outside 0x00-0xFF
│   ├── UndefinedLabelError - operand names a label that was never defined
│   └── DuplicateLabelError - label defined more than once
└── CompilerError (see neander_sdk.compiler.errors)

The execution engine has no exception type: unknown opcodes
are handled by the engine's opcode policy, not by raising.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class NeanderError(Exception):
    """
    Base exception for all Neander SDK errors.

        try:
            assembler.assemble_file("program.asm")
        except NeanderError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in a source file, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Formatted Error Base
# =============================================================================

class LocatedError(NeanderError):
    """
    Error carrying an optional source location, source line and hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:4:1: error: unknown mnemonic 'LDX'
                LDX 0x80
                ^
            hint: valid mnemonics are ADD, AND, HLT, ...
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Encoding (Assembler) Exceptions
# =============================================================================

class EncodingError(LocatedError):
    """
    Base exception for assembly and instruction-encoding errors.

    Encoding errors are always fatal: the assembler stops at the first one
    and no image is produced.
    """
    pass


class UnknownMnemonicError(EncodingError):
    """Mnemonic not present in the fixed opcode table."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        # Local import: opcodes imports this module.
        from neander_sdk.assembler.opcodes import OPCODE_TABLE

        self.mnemonic = mnemonic
        super().__init__(
            f"unknown mnemonic '{mnemonic}'",
            location=location,
            hint=f"valid mnemonics are {', '.join(sorted(OPCODE_TABLE))}",
            source_line=source_line,
        )


class InvalidLiteralError(EncodingError):
    """
    Malformed numeric literal or operand field.

    Examples:
        - "0xZZ" (not hexadecimal)
        - "128" (missing 0x prefix in a hex-only field)
        - operand given to a zero-operand instruction
    """
    pass


class AddressRangeError(EncodingError):
    """Address or byte value outside the 256-cell address space."""

    def __init__(
        self,
        message: str,
        value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            message,
            location=location,
            hint="addresses and values must be in the range 0x00-0xFF",
            source_line=source_line,
        )


class UndefinedLabelError(EncodingError):
    """
    Reference to a label that was never defined.

    Raised during the second assembly pass. Similar label names are offered
    as a hint to catch typos.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(EncodingError):
    """Label defined more than once in the code section."""

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )
