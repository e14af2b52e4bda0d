"""
Neander Assembler
=================

Converts Neander assembly text into a 256-byte memory image.

Main Components
---------------
- **opcodes**: The instruction set table plus encode/decode helpers shared
  with the execution engine and the disassembler
- **AssemblyParser**: Line-oriented parser producing statements
- **CodeGenerator**: Two-pass label resolver and image writer
- **Assembler**: Facade tying the two together

Assembly Process
----------------
1. **Parsing**: each line becomes a data cell, a label or an instruction
2. **Pass 1**: labels are bound to byte addresses (instruction sizes summed)
3. **Pass 2**: data cells are written, instructions encoded with labels
   resolved

Supported Features
------------------
- `.DATA` cells as `0xAA 0xVV` pairs
- `.CODE` lines `[label:] MNEMONIC [operand]`
- Operands as `0x` hex literals or label names
- `;` line comments
- Listing file generation
"""

from neander_sdk.assembler.assembler import Assembler, assemble, assemble_file
from neander_sdk.assembler.codegen import CodeGenerator, Label
from neander_sdk.assembler.opcodes import (
    MEMORY_SIZE,
    OPCODE_TABLE,
    DecodedInstruction,
    InstructionInfo,
    Opcode,
    decode_instruction,
    encode_instruction,
    instruction_size,
)
from neander_sdk.assembler.parser import (
    AssemblyParser,
    CodeOrigin,
    DataStatement,
    InstructionStatement,
    LabelDefinition,
    Statement,
    parse_source,
)

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "AssemblyParser",
    "parse_source",
    "Statement",
    "DataStatement",
    "InstructionStatement",
    "LabelDefinition",
    "CodeOrigin",
    "CodeGenerator",
    "Label",
    "Opcode",
    "OPCODE_TABLE",
    "MEMORY_SIZE",
    "InstructionInfo",
    "DecodedInstruction",
    "encode_instruction",
    "decode_instruction",
    "instruction_size",
]
