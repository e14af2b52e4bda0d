"""
Neander Assembler Code Generator
================================

Turns parsed assembly statements into a 256-byte memory image using a
two-pass process.

Pass 1 (Label Collection)
-------------------------
- Walk the code statements in order
- Assign each instruction its byte address by summing instruction sizes
  (1 byte for NOP/NOT/HLT, 2 bytes otherwise)
- Record `label -> byte address`

Pass 2 (Image Generation)
-------------------------
- Start from an image filled with NOP (0x00)
- Write `.DATA` cells verbatim
- Encode each instruction, resolving symbolic operands against the labels

Label addresses are byte addresses, never statement indices, so a jump to
a label placed after a NOT lands where the NOT's size says it should.

Output
------
- Binary image: exactly 256 bytes, no header
- Listing: address, encoded bytes, source line
"""

from dataclasses import dataclass
from difflib import get_close_matches
from pathlib import Path
from typing import Optional
import logging

from neander_sdk.assembler.opcodes import MEMORY_SIZE, Opcode, encode_instruction, lookup
from neander_sdk.assembler.parser import (
    CodeOrigin,
    DataStatement,
    InstructionStatement,
    LabelDefinition,
    Statement,
)
from neander_sdk.errors import (
    AddressRangeError,
    DuplicateLabelError,
    SourceLocation,
    UndefinedLabelError,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Label Table Entry
# =============================================================================

@dataclass
class Label:
    """
    Label table entry.

    Attributes:
        name: Label name (upper case)
        address: Byte address of the instruction following the label
        location: Where the label was defined
    """
    name: str
    address: int
    location: SourceLocation


@dataclass
class ListingLine:
    """One line of the assembly listing."""
    address: Optional[int]
    data: bytes
    source_line: str
    line_number: int

    def __str__(self) -> str:
        addr = f"{self.address:02X}" if self.address is not None else "  "
        code = " ".join(f"{b:02X}" for b in self.data)
        return f"{addr}    {code:<8}  {self.line_number:4d}  {self.source_line}"


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates a Neander memory image from parsed statements.

    Usage:
        codegen = CodeGenerator()
        image = codegen.generate(statements)
        labels = codegen.get_labels()
    """

    def __init__(self):
        self._image = bytearray([Opcode.NOP] * MEMORY_SIZE)
        self._labels: dict[str, Label] = {}
        self._data_cells: set[int] = set()
        self._listing: list[ListingLine] = []
        self._pc = 0
        self._code_end = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, statements: list[Statement]) -> bytes:
        """
        Assemble statements into a 256-byte image.

        Raises:
            EncodingError: On the first encoding problem (fatal)
        """
        self._image = bytearray([Opcode.NOP] * MEMORY_SIZE)
        self._labels.clear()
        self._data_cells.clear()
        self._listing.clear()
        self._code_end = 0

        self._pass1(statements)
        logger.debug(
            f"Pass 1: {len(self._labels)} labels "
            + ", ".join(f"{l.name}=0x{l.address:02X}" for l in self._labels.values())
        )

        self._pass2(statements)
        logger.debug(f"Pass 2: {self._code_end} code bytes, {len(self._data_cells)} data cells")

        return bytes(self._image)

    def get_image(self) -> bytes:
        """Return the most recently generated image."""
        return bytes(self._image)

    def get_labels(self) -> dict[str, int]:
        """Return label name -> byte address."""
        return {name: label.address for name, label in self._labels.items()}

    def get_code_size(self) -> int:
        """Return the highest code byte address written plus one."""
        return self._code_end

    def get_listing(self) -> str:
        """Return the listing: address, bytes, line number, source."""
        lines = [
            "Neander Assembler Listing",
            "=" * 60,
            "",
            "Addr  Code      Line  Source",
            "-" * 60,
        ]
        lines.extend(str(entry) for entry in self._listing)
        if self._labels:
            lines.append("")
            lines.append("Labels")
            lines.append("-" * 30)
            for name, label in sorted(self._labels.items()):
                lines.append(f"{name:20s} = 0x{label.address:02X}")
        return "\n".join(lines) + "\n"

    def write_listing(self, filepath: str | Path) -> None:
        """Write the listing file."""
        Path(filepath).write_text(self.get_listing())

    # =========================================================================
    # Pass 1: Label Collection
    # =========================================================================

    def _pass1(self, statements: list[Statement]) -> None:
        self._pc = 0
        for stmt in statements:
            if isinstance(stmt, CodeOrigin):
                self._pc = 0
            elif isinstance(stmt, LabelDefinition):
                self._define_label(stmt)
            elif isinstance(stmt, InstructionStatement):
                self._pc += lookup(stmt.mnemonic, stmt.location, stmt.source_line).size

    def _define_label(self, stmt: LabelDefinition) -> None:
        name = stmt.name.upper()
        if name in self._labels:
            raise DuplicateLabelError(
                stmt.name,
                location=stmt.location,
                original_location=self._labels[name].location,
                source_line=stmt.source_line,
            )
        if self._pc >= MEMORY_SIZE:
            raise AddressRangeError(
                f"label '{stmt.name}' lies past the end of memory (0x{self._pc:X})",
                self._pc,
                location=stmt.location,
                source_line=stmt.source_line,
            )
        self._labels[name] = Label(name, self._pc, stmt.location)

    # =========================================================================
    # Pass 2: Image Generation
    # =========================================================================

    def _pass2(self, statements: list[Statement]) -> None:
        self._pc = 0
        for stmt in statements:
            if isinstance(stmt, CodeOrigin):
                self._pc = 0
            elif isinstance(stmt, DataStatement):
                self._write_data(stmt)
            elif isinstance(stmt, InstructionStatement):
                self._write_instruction(stmt)
            elif isinstance(stmt, LabelDefinition):
                self._listing.append(ListingLine(
                    self._pc, b"", stmt.source_line, stmt.location.line,
                ))

    def _write_data(self, stmt: DataStatement) -> None:
        self._image[stmt.address] = stmt.value
        self._data_cells.add(stmt.address)
        self._listing.append(ListingLine(
            stmt.address, bytes([stmt.value]), stmt.source_line, stmt.location.line,
        ))

    def _write_instruction(self, stmt: InstructionStatement) -> None:
        operand = stmt.operand
        if stmt.label is not None:
            operand = self._resolve_label(stmt)

        encoded = encode_instruction(
            stmt.mnemonic, operand, stmt.location, stmt.source_line,
        )

        if self._pc + len(encoded) > MEMORY_SIZE:
            raise AddressRangeError(
                f"code overflows memory at {stmt.mnemonic} (address 0x{self._pc:X})",
                self._pc,
                location=stmt.location,
                source_line=stmt.source_line,
            )

        for offset, byte in enumerate(encoded):
            address = self._pc + offset
            if address in self._data_cells:
                logger.warning(
                    f"{stmt.location}: code overwrites data cell 0x{address:02X}"
                )
            self._image[address] = byte

        self._listing.append(ListingLine(
            self._pc, encoded, stmt.source_line, stmt.location.line,
        ))
        self._pc += len(encoded)
        self._code_end = max(self._code_end, self._pc)

    def _resolve_label(self, stmt: InstructionStatement) -> int:
        name = stmt.label.upper()
        label = self._labels.get(name)
        if label is None:
            raise UndefinedLabelError(
                stmt.label,
                location=stmt.location,
                source_line=stmt.source_line,
                similar_labels=get_close_matches(name, list(self._labels), n=3),
            )
        return label.address
