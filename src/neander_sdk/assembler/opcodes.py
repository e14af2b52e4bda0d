"""
Neander Instruction Set Definition
==================================

This module is the single source of truth for the Neander instruction
encoding. The assembler (text -> bytes), the execution engine and the
disassembler (bytes -> instructions) all go through it, so they agree on
every bit.

Encoding
--------
The opcode lives in the high 4 bits of the instruction byte; the low 4 bits
are ignored when decoding and written as zero when encoding. Instructions
with an operand are followed by one operand byte holding a memory address.

| Mnemonic | Byte | Operand | Size | Effect                          |
|----------|------|---------|------|---------------------------------|
| NOP      | 0x00 | no      | 1    | nothing                         |
| STA      | 0x10 | addr    | 2    | mem[addr] = AC                  |
| LDA      | 0x20 | addr    | 2    | AC = mem[addr]                  |
| ADD      | 0x30 | addr    | 2    | AC = (AC + mem[addr]) mod 256   |
| OR       | 0x40 | addr    | 2    | AC = AC | mem[addr]             |
| AND      | 0x50 | addr    | 2    | AC = AC & mem[addr]             |
| NOT      | 0x60 | no      | 1    | AC = ~AC                        |
| JMP      | 0x80 | addr    | 2    | PC = addr                       |
| JN       | 0x90 | addr    | 2    | PC = addr if N                  |
| JZ       | 0xA0 | addr    | 2    | PC = addr if Z                  |
| HLT      | 0xF0 | no      | 1    | stop                            |

Opcode nibbles 0x7 and 0xB-0xE are unassigned.

Because sizes differ, an instruction's logical position in a program is not
its byte address. Anything that computes jump targets must sum sizes.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence

from neander_sdk.errors import (
    AddressRangeError,
    InvalidLiteralError,
    SourceLocation,
    UnknownMnemonicError,
)


# Size of the address space and of every memory image.
MEMORY_SIZE = 256

# Mask selecting the opcode nibble of an instruction byte.
OPCODE_MASK = 0xF0


# =============================================================================
# Opcode Enumeration
# =============================================================================

class Opcode(IntEnum):
    """Neander opcodes; the value is the encoded instruction byte."""
    NOP = 0x00
    STA = 0x10
    LDA = 0x20
    ADD = 0x30
    OR = 0x40
    AND = 0x50
    NOT = 0x60
    JMP = 0x80
    JN = 0x90
    JZ = 0xA0
    HLT = 0xF0

    @property
    def info(self) -> "InstructionInfo":
        return OPCODE_TABLE[self.name]

    @property
    def size(self) -> int:
        return self.info.size

    @property
    def has_operand(self) -> bool:
        return self.info.has_operand


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding information for one mnemonic.

    Attributes:
        opcode: The instruction byte
        size: Total instruction size in bytes (1 or 2)
        has_operand: True if an address byte follows the opcode
        updates_flags: True if the instruction recomputes N and Z
    """
    opcode: int
    size: int
    has_operand: bool
    updates_flags: bool

    def __repr__(self) -> str:
        return f"InstructionInfo(opcode=0x{self.opcode:02X}, size={self.size})"


# =============================================================================
# Opcode Table
# =============================================================================
# Key: mnemonic (upper case)
# Value: InstructionInfo(opcode, size, has_operand, updates_flags)
# =============================================================================

OPCODE_TABLE: dict[str, InstructionInfo] = {
    "NOP": InstructionInfo(0x00, 1, False, False),
    "STA": InstructionInfo(0x10, 2, True, False),
    "LDA": InstructionInfo(0x20, 2, True, True),
    "ADD": InstructionInfo(0x30, 2, True, True),
    "OR": InstructionInfo(0x40, 2, True, True),
    "AND": InstructionInfo(0x50, 2, True, True),
    "NOT": InstructionInfo(0x60, 1, False, True),
    "JMP": InstructionInfo(0x80, 2, True, False),
    "JN": InstructionInfo(0x90, 2, True, False),
    "JZ": InstructionInfo(0xA0, 2, True, False),
    "HLT": InstructionInfo(0xF0, 1, False, False),
}

# Reverse table: opcode nibble -> mnemonic
_NIBBLE_TABLE: dict[int, str] = {
    info.opcode: mnemonic for mnemonic, info in OPCODE_TABLE.items()
}


# =============================================================================
# Lookup Helpers
# =============================================================================

def lookup(
    mnemonic: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> InstructionInfo:
    """
    Look up a mnemonic (case-insensitive).

    Raises:
        UnknownMnemonicError: If the mnemonic is not in the table
    """
    info = OPCODE_TABLE.get(mnemonic.upper())
    if info is None:
        raise UnknownMnemonicError(mnemonic, location, source_line)
    return info


def is_mnemonic(name: str) -> bool:
    """Check whether a name is a known mnemonic."""
    return name.upper() in OPCODE_TABLE


def instruction_size(mnemonic: str) -> int:
    """Return the encoded size in bytes of a mnemonic."""
    return lookup(mnemonic).size


def mnemonic_for(byte: int) -> Optional[str]:
    """Return the mnemonic whose opcode nibble matches byte, or None."""
    return _NIBBLE_TABLE.get(byte & OPCODE_MASK)


# =============================================================================
# Encoding
# =============================================================================

def encode_instruction(
    mnemonic: str,
    operand: Optional[int] = None,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> bytes:
    """
    Encode one instruction.

    Args:
        mnemonic: Instruction mnemonic (any case)
        operand: Address operand, required exactly when the mnemonic takes one

    Returns:
        1 byte for zero-operand instructions, 2 bytes otherwise

    Raises:
        UnknownMnemonicError: Unknown mnemonic
        InvalidLiteralError: Operand missing or unexpected
        AddressRangeError: Operand outside 0x00-0xFF

    Example:
        >>> encode_instruction("LDA", 0x80)
        b' \\x80'
        >>> encode_instruction("HLT")
        b'\\xf0'
    """
    info = lookup(mnemonic, location, source_line)

    if not info.has_operand:
        if operand is not None:
            raise InvalidLiteralError(
                f"{mnemonic.upper()} takes no operand",
                location=location,
                source_line=source_line,
            )
        return bytes([info.opcode])

    if operand is None:
        raise InvalidLiteralError(
            f"{mnemonic.upper()} requires an address operand",
            location=location,
            hint=f"write e.g. '{mnemonic.upper()} 0x80'",
            source_line=source_line,
        )
    if not 0 <= operand < MEMORY_SIZE:
        raise AddressRangeError(
            f"operand 0x{operand:X} out of range for {mnemonic.upper()}",
            operand,
            location=location,
            source_line=source_line,
        )
    return bytes([info.opcode, operand])


# =============================================================================
# Decoding
# =============================================================================

@dataclass(frozen=True)
class DecodedInstruction:
    """
    One instruction decoded from a memory image.

    Attributes:
        address: Address of the opcode byte
        opcode: The raw opcode byte as stored (low nibble included)
        mnemonic: Decoded mnemonic
        operand: Operand byte, or None for zero-operand instructions
        size: Instruction size in bytes
    """
    address: int
    opcode: int
    mnemonic: str
    operand: Optional[int]
    size: int

    @property
    def info(self) -> InstructionInfo:
        return OPCODE_TABLE[self.mnemonic]

    def __str__(self) -> str:
        if self.operand is None:
            return self.mnemonic
        return f"{self.mnemonic} 0x{self.operand:02X}"


def decode_instruction(memory: Sequence[int], address: int) -> Optional[DecodedInstruction]:
    """
    Decode the instruction starting at address.

    The operand byte is read from (address + 1) mod 256, matching how the
    execution engine fetches across the end of memory.

    Returns:
        The decoded instruction, or None if the opcode nibble is unassigned
    """
    address &= 0xFF
    byte = memory[address]
    mnemonic = mnemonic_for(byte)
    if mnemonic is None:
        return None

    info = OPCODE_TABLE[mnemonic]
    operand = memory[(address + 1) % MEMORY_SIZE] if info.has_operand else None
    return DecodedInstruction(
        address=address,
        opcode=byte,
        mnemonic=mnemonic,
        operand=operand,
        size=info.size,
    )
