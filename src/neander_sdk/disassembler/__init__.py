"""
Neander Disassembler Module
===========================

Usage:
    from neander_sdk.disassembler import NeanderDisassembler

    disasm = NeanderDisassembler()
    instructions = disasm.disassemble(image, start=0x00, end=0x80)
"""

from .neander import DisassembledInstruction, NeanderDisassembler

__all__ = [
    "NeanderDisassembler",
    "DisassembledInstruction",
]
