"""
Neander Assembly Parser
=======================

Parses Neander assembly text into a list of statements for the two-pass
code generator.

Source Format
-------------
    ; comment to end of line
    .DATA
    0x80 0x05          ; address value, both hexadecimal
    .CODE
    start: LDA 0x80    ; optional label, mnemonic, optional operand
    loop:
           ADD 0x81
           JZ done     ; operand may be a label
           JMP loop
    done:  HLT

Rules
-----
- `.DATA` and `.CODE` are case-exact lines; either may be omitted and they
  may appear in any order (a new `.CODE` restarts code at address 0x00).
- Mnemonics are case-insensitive.
- Numeric fields use the `0x` prefix; anything else is a malformed literal.
- Every non-blank line must sit inside a section.

All errors raised here are EncodingErrors and therefore fatal.

Example
-------
>>> from neander_sdk.assembler.parser import parse_source
>>> statements = parse_source(".CODE\\nLDA 0x80\\nHLT\\n")
>>> [str(s) for s in statements if isinstance(s, InstructionStatement)]
['LDA 0x80', 'HLT']
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union
import re

from neander_sdk.assembler.opcodes import lookup
from neander_sdk.errors import (
    AddressRangeError,
    EncodingError,
    InvalidLiteralError,
    SourceLocation,
)


DATA_MARKER = ".DATA"
CODE_MARKER = ".CODE"
COMMENT_CHAR = ";"

_HEX_RE = re.compile(r"^0[xX][0-9A-Fa-f]+$")
_LABEL_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*):(.*)$")
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Section(Enum):
    """Assembly source sections."""
    DATA = auto()
    CODE = auto()


# =============================================================================
# Statement Types
# =============================================================================

@dataclass(frozen=True)
class DataStatement:
    """A `.DATA` line: write value verbatim at address."""
    address: int
    value: int
    location: SourceLocation
    source_line: str

    def __str__(self) -> str:
        return f"0x{self.address:02X} 0x{self.value:02X}"


@dataclass(frozen=True)
class LabelDefinition:
    """A `name:` prefix in the code section."""
    name: str
    location: SourceLocation
    source_line: str

    def __str__(self) -> str:
        return f"{self.name}:"


@dataclass(frozen=True)
class CodeOrigin:
    """A `.CODE` marker; code placement restarts at address 0x00."""
    location: SourceLocation


@dataclass(frozen=True)
class InstructionStatement:
    """
    A code line.

    Exactly one of operand (numeric) and label (symbolic) is set when the
    line has an operand field.
    """
    mnemonic: str
    location: SourceLocation
    source_line: str
    operand: Optional[int] = None
    label: Optional[str] = None

    @property
    def has_operand_field(self) -> bool:
        return self.operand is not None or self.label is not None

    def __str__(self) -> str:
        if self.label is not None:
            return f"{self.mnemonic} {self.label}"
        if self.operand is not None:
            return f"{self.mnemonic} 0x{self.operand:02X}"
        return self.mnemonic


Statement = Union[DataStatement, LabelDefinition, CodeOrigin, InstructionStatement]


# =============================================================================
# Literal Parsing
# =============================================================================

def parse_hex(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
    what: str = "value",
) -> int:
    """
    Parse a `0x`-prefixed hexadecimal byte.

    Raises:
        InvalidLiteralError: Not a 0x-prefixed hex literal
        AddressRangeError: Value above 0xFF
    """
    if not _HEX_RE.match(text):
        raise InvalidLiteralError(
            f"malformed {what} '{text}'",
            location=location,
            hint="numeric fields are hexadecimal with a 0x prefix, e.g. 0x80",
            source_line=source_line,
        )
    value = int(text[2:], 16)
    if value > 0xFF:
        raise AddressRangeError(
            f"{what} {text} does not fit in a byte",
            value,
            location=location,
            source_line=source_line,
        )
    return value


# =============================================================================
# Parser
# =============================================================================

class AssemblyParser:
    """
    Line-oriented parser for Neander assembly.

    Usage:
        parser = AssemblyParser(source_text, "prog.asm")
        statements = parser.parse()
    """

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename
        self._section: Optional[Section] = None

    def parse(self) -> list[Statement]:
        """
        Parse the whole source.

        Raises:
            EncodingError: On the first malformed line
        """
        statements: list[Statement] = []
        self._section = None

        for line_number, raw_line in enumerate(self.source.splitlines(), start=1):
            statements.extend(self._parse_line(raw_line, line_number))

        return statements

    def _parse_line(self, raw_line: str, line_number: int) -> list[Statement]:
        text = raw_line.split(COMMENT_CHAR, 1)[0].strip()
        if not text:
            return []

        location = self._location(raw_line, text, line_number)

        if text == DATA_MARKER:
            self._section = Section.DATA
            return []
        if text == CODE_MARKER:
            self._section = Section.CODE
            return [CodeOrigin(location)]

        if self._section is Section.DATA:
            return [self._parse_data(text, raw_line, line_number)]
        if self._section is Section.CODE:
            return self._parse_code(text, raw_line, line_number)

        raise EncodingError(
            "statement outside of a .DATA or .CODE section",
            location=location,
            hint="start the file with a .DATA or .CODE line",
            source_line=raw_line,
        )

    def _parse_data(self, text: str, raw_line: str, line_number: int) -> DataStatement:
        fields = text.split()
        location = self._location(raw_line, fields[0], line_number)
        if len(fields) != 2:
            raise InvalidLiteralError(
                "data lines need exactly two fields: address value",
                location=location,
                hint="write e.g. '0x80 0x05'",
                source_line=raw_line,
            )

        address = parse_hex(
            fields[0], location, raw_line, what="data address",
        )
        value = parse_hex(
            fields[1], self._location(raw_line, fields[1], line_number), raw_line,
            what="data value",
        )
        return DataStatement(address, value, location, raw_line)

    def _parse_code(self, text: str, raw_line: str, line_number: int) -> list[Statement]:
        statements: list[Statement] = []

        match = _LABEL_RE.match(text)
        if match:
            name = match.group(1)
            statements.append(LabelDefinition(
                name, self._location(raw_line, name, line_number), raw_line,
            ))
            text = match.group(2).strip()
            if not text:
                return statements

        fields = text.split()
        mnemonic = fields[0]
        location = self._location(raw_line, mnemonic, line_number)
        lookup(mnemonic, location, raw_line)

        if len(fields) > 2:
            raise InvalidLiteralError(
                f"unexpected text after operand: '{' '.join(fields[2:])}'",
                location=self._location(raw_line, fields[2], line_number),
                source_line=raw_line,
            )

        operand: Optional[int] = None
        label: Optional[str] = None
        if len(fields) == 2:
            operand_text = fields[1]
            operand_location = self._location(raw_line, operand_text, line_number)
            if _IDENT_RE.match(operand_text):
                label = operand_text
            else:
                operand = parse_hex(
                    operand_text, operand_location, raw_line, what="operand",
                )

        statements.append(InstructionStatement(
            mnemonic=mnemonic.upper(),
            location=location,
            source_line=raw_line,
            operand=operand,
            label=label,
        ))
        return statements

    def _location(self, raw_line: str, fragment: str, line_number: int) -> SourceLocation:
        column = raw_line.find(fragment) + 1
        return SourceLocation(self.filename, line_number, max(column, 1))


def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """Convenience wrapper: parse assembly text into statements."""
    return AssemblyParser(source, filename).parse()
