"""
Neander Instruction Set Tests
=============================

Tests for the shared opcode table, encoder and decoder.
"""

import pytest

from neander_sdk.assembler.opcodes import (
    MEMORY_SIZE,
    OPCODE_TABLE,
    Opcode,
    decode_instruction,
    encode_instruction,
    instruction_size,
    is_mnemonic,
    lookup,
    mnemonic_for,
)
from neander_sdk.errors import (
    AddressRangeError,
    InvalidLiteralError,
    UnknownMnemonicError,
)


# =============================================================================
# Opcode Table
# =============================================================================

class TestOpcodeTable:
    """Tests for the fixed opcode table."""

    def test_eleven_instructions(self):
        """The table holds exactly the eleven Neander instructions."""
        assert sorted(OPCODE_TABLE) == sorted([
            "NOP", "STA", "LDA", "ADD", "OR", "AND",
            "NOT", "JMP", "JN", "JZ", "HLT",
        ])

    @pytest.mark.parametrize("mnemonic,byte", [
        ("NOP", 0x00), ("STA", 0x10), ("LDA", 0x20), ("ADD", 0x30),
        ("OR", 0x40), ("AND", 0x50), ("NOT", 0x60), ("JMP", 0x80),
        ("JN", 0x90), ("JZ", 0xA0), ("HLT", 0xF0),
    ])
    def test_opcode_bytes(self, mnemonic, byte):
        """Each mnemonic maps to its documented byte."""
        assert OPCODE_TABLE[mnemonic].opcode == byte
        assert Opcode[mnemonic] == byte

    @pytest.mark.parametrize("mnemonic", ["NOP", "NOT", "HLT"])
    def test_one_byte_instructions(self, mnemonic):
        """Only NOP, NOT and HLT are a single byte."""
        assert instruction_size(mnemonic) == 1
        assert not Opcode[mnemonic].has_operand

    @pytest.mark.parametrize("mnemonic", ["STA", "LDA", "ADD", "OR", "AND", "JMP", "JN", "JZ"])
    def test_two_byte_instructions(self, mnemonic):
        """Everything else carries an address byte."""
        assert instruction_size(mnemonic) == 2
        assert Opcode[mnemonic].size == 2

    def test_flag_updating_instructions(self):
        """Only LDA, ADD, OR, AND and NOT recompute N and Z."""
        updating = {name for name, info in OPCODE_TABLE.items() if info.updates_flags}
        assert updating == {"LDA", "ADD", "OR", "AND", "NOT"}

    def test_lookup_is_case_insensitive(self):
        """Mnemonics match in any case."""
        assert lookup("lda") is OPCODE_TABLE["LDA"]
        assert is_mnemonic("Hlt")
        assert not is_mnemonic("SUB")

    def test_lookup_unknown(self):
        """Unknown mnemonics raise with the valid list as a hint."""
        with pytest.raises(UnknownMnemonicError) as exc_info:
            lookup("SUB")
        assert exc_info.value.mnemonic == "SUB"
        assert "LDA" in exc_info.value.hint

    @pytest.mark.parametrize("byte", [0x70, 0x7F, 0xB0, 0xC3, 0xD0, 0xE0])
    def test_unassigned_nibbles(self, byte):
        """Nibbles 0x7 and 0xB-0xE have no mnemonic."""
        assert mnemonic_for(byte) is None

    def test_low_nibble_ignored(self):
        """Only the high nibble selects the instruction."""
        assert mnemonic_for(0x2F) == "LDA"
        assert mnemonic_for(0xF7) == "HLT"


# =============================================================================
# Encoding
# =============================================================================

class TestEncoding:
    """Tests for encode_instruction()."""

    def test_encode_with_operand(self):
        """Two-byte instructions emit opcode then operand."""
        assert encode_instruction("LDA", 0x80) == bytes([0x20, 0x80])
        assert encode_instruction("jz", 0x07) == bytes([0xA0, 0x07])

    def test_encode_without_operand(self):
        """One-byte instructions emit just the opcode."""
        assert encode_instruction("HLT") == bytes([0xF0])
        assert encode_instruction("NOT") == bytes([0x60])

    def test_operand_extremes(self):
        """0x00 and 0xFF are both valid operands."""
        assert encode_instruction("STA", 0x00) == bytes([0x10, 0x00])
        assert encode_instruction("STA", 0xFF) == bytes([0x10, 0xFF])

    def test_missing_operand(self):
        """An operand-taking instruction without one is rejected."""
        with pytest.raises(InvalidLiteralError, match="requires an address operand"):
            encode_instruction("ADD")

    def test_unexpected_operand(self):
        """A zero-operand instruction with an operand is rejected."""
        with pytest.raises(InvalidLiteralError, match="takes no operand"):
            encode_instruction("HLT", 0x10)

    @pytest.mark.parametrize("operand", [-1, 0x100, 0x1FF])
    def test_operand_out_of_range(self, operand):
        """Operands outside 0x00-0xFF are rejected."""
        with pytest.raises(AddressRangeError) as exc_info:
            encode_instruction("LDA", operand)
        assert exc_info.value.value == operand

    def test_unknown_mnemonic(self):
        """Encoding an unknown mnemonic raises."""
        with pytest.raises(UnknownMnemonicError):
            encode_instruction("MUL", 0x80)


# =============================================================================
# Decoding
# =============================================================================

class TestDecoding:
    """Tests for decode_instruction()."""

    def test_decode_two_byte(self):
        """Operand instructions read the following byte."""
        memory = bytes([0x30, 0x81]) + bytes(MEMORY_SIZE - 2)
        decoded = decode_instruction(memory, 0)
        assert decoded.mnemonic == "ADD"
        assert decoded.operand == 0x81
        assert decoded.size == 2
        assert str(decoded) == "ADD 0x81"

    def test_decode_one_byte(self):
        """Zero-operand instructions have no operand."""
        memory = bytes([0x60]) + bytes(MEMORY_SIZE - 1)
        decoded = decode_instruction(memory, 0)
        assert decoded.mnemonic == "NOT"
        assert decoded.operand is None
        assert decoded.size == 1

    def test_decode_keeps_raw_byte(self):
        """The stored byte is reported even with a non-zero low nibble."""
        memory = bytes([0x25, 0x10]) + bytes(MEMORY_SIZE - 2)
        decoded = decode_instruction(memory, 0)
        assert decoded.mnemonic == "LDA"
        assert decoded.opcode == 0x25

    def test_decode_unassigned(self):
        """Unassigned opcodes decode to None."""
        memory = bytes([0x70]) + bytes(MEMORY_SIZE - 1)
        assert decode_instruction(memory, 0) is None

    def test_operand_wraps(self):
        """An instruction at 0xFF takes its operand from 0x00."""
        memory = bytearray(MEMORY_SIZE)
        memory[0xFF] = 0x20
        memory[0x00] = 0x42
        decoded = decode_instruction(memory, 0xFF)
        assert decoded.operand == 0x42

    @pytest.mark.parametrize("mnemonic", sorted(OPCODE_TABLE))
    def test_decode_matches_encode(self, mnemonic):
        """Decoding an encoded instruction yields the same mnemonic."""
        operand = 0x9C if OPCODE_TABLE[mnemonic].has_operand else None
        encoded = encode_instruction(mnemonic, operand)
        memory = encoded + bytes(MEMORY_SIZE - len(encoded))
        decoded = decode_instruction(memory, 0)
        assert decoded.mnemonic == mnemonic
        assert decoded.operand == operand
