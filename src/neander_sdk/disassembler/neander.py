"""
Neander Disassembler
====================

Turns a Neander memory image back into assembly, using the same decode
table the emulator executes with. Listing lines carry an address and the
raw bytes, so they are not assembler input; the `text` of a decoded
instruction (e.g. `LDA 0x80`) is, and can be fed back to the assembler.

Unassigned opcode bytes are rendered as `DB 0xHH` and take one byte. The
assembler has no `DB` directive, so such entries do not reassemble.

Example:
    >>> from neander_sdk.disassembler import NeanderDisassembler
    >>> disasm = NeanderDisassembler({0x80: "x"})
    >>> print(disasm.disassemble_to_text(bytes([0x20, 0x80, 0xF0]), count=2))
    00: 20 80  LDA 0x80     ; x
    02: F0     HLT
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from neander_sdk.assembler.opcodes import MEMORY_SIZE, decode_instruction


@dataclass
class DisassembledInstruction:
    """
    One disassembled instruction.

    Attributes:
        address: Address of the opcode byte
        opcode: The opcode byte as stored
        mnemonic: Mnemonic, or "DB" for an unassigned opcode
        operand: Operand byte, None for 1-byte instructions
        size: Instruction size in bytes
        raw_bytes: The bytes making up the instruction
        comment: Symbol name for the operand, if known
    """
    address: int
    opcode: int
    mnemonic: str
    operand: Optional[int]
    size: int
    raw_bytes: bytes
    comment: str = ""

    @property
    def is_valid(self) -> bool:
        return self.mnemonic != "DB"

    @property
    def text(self) -> str:
        """The instruction as assembler source."""
        if self.mnemonic == "DB":
            return f"DB 0x{self.opcode:02X}"
        if self.operand is None:
            return self.mnemonic
        return f"{self.mnemonic} 0x{self.operand:02X}"

    def __str__(self) -> str:
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(5)
        if self.comment:
            return f"{self.address:02X}: {hex_bytes}  {self.text:<12} ; {self.comment}"
        return f"{self.address:02X}: {hex_bytes}  {self.text}"

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON serialization."""
        return {
            "address": self.address,
            "opcode": f"0x{self.opcode:02X}",
            "mnemonic": self.mnemonic,
            "operand": self.operand,
            "size": self.size,
            "bytes": [f"0x{b:02X}" for b in self.raw_bytes],
            "comment": self.comment,
        }


class NeanderDisassembler:
    """
    Disassembler for Neander memory images.

    Attributes:
        symbols: Address -> name map used to annotate operands
    """

    def __init__(self, symbols: Optional[Dict[int, str]] = None):
        self.symbols: Dict[int, str] = dict(symbols or {})

    def disassemble_one(self, image: bytes, address: int) -> DisassembledInstruction:
        """Decode the instruction at address (operands wrap past 0xFF)."""
        memory = self._as_memory(image)
        address &= 0xFF
        decoded = decode_instruction(memory, address)

        if decoded is None:
            byte = memory[address]
            return DisassembledInstruction(
                address=address,
                opcode=byte,
                mnemonic="DB",
                operand=None,
                size=1,
                raw_bytes=bytes([byte]),
            )

        raw = bytes(memory[(address + i) % MEMORY_SIZE] for i in range(decoded.size))
        comment = ""
        if decoded.operand is not None:
            comment = self.symbols.get(decoded.operand, "")

        return DisassembledInstruction(
            address=address,
            opcode=decoded.opcode,
            mnemonic=decoded.mnemonic,
            operand=decoded.operand,
            size=decoded.size,
            raw_bytes=raw,
            comment=comment,
        )

    def disassemble(
        self,
        image: bytes,
        start: int = 0,
        count: Optional[int] = None,
        end: Optional[int] = None,
    ) -> List[DisassembledInstruction]:
        """
        Disassemble a run of instructions.

        Args:
            image: Memory image (shorter images are zero padded)
            start: Address to start at
            count: Maximum number of instructions (None = no limit)
            end: Stop before this address (None = end of memory)

        Returns:
            List of DisassembledInstruction objects
        """
        memory = self._as_memory(image)
        end = MEMORY_SIZE if end is None else min(end, MEMORY_SIZE)

        result = []
        address = start
        while address < end:
            if count is not None and len(result) >= count:
                break
            instr = self.disassemble_one(memory, address)
            result.append(instr)
            address += instr.size

        return result

    def disassemble_to_text(
        self,
        image: bytes,
        start: int = 0,
        count: Optional[int] = None,
        end: Optional[int] = None,
    ) -> str:
        """Disassemble and return the listing as text."""
        return "\n".join(str(i) for i in self.disassemble(image, start, count, end))

    def add_symbol(self, address: int, name: str) -> None:
        self.symbols[address] = name

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        self.symbols.update(symbols)

    @staticmethod
    def _as_memory(image: bytes) -> bytes:
        if len(image) >= MEMORY_SIZE:
            return bytes(image[:MEMORY_SIZE])
        return bytes(image) + bytes(MEMORY_SIZE - len(image))
