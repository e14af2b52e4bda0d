"""
Neander SDK - Toolchain for the Neander Teaching Computer
=========================================================

The Neander is a minimal 8-bit accumulator machine used to teach computer
architecture: 256 bytes of memory, one accumulator, N and Z flags and eleven
instructions. It has no subtract, multiply or divide.

This package compiles a small structured language down to that machine and
runs the result.

Main Components
---------------
- **compiler**: PROGRAMA compiler (ncc)
    Source text -> Neander assembly, synthesizing loops for `*` and `/`

- **assembler**: Neander assembler (nasm)
    Assembly text -> 256-byte memory image, with label support

- **emulator**: Neander emulator (nemu)
    Runs an image with a step budget and reports why it stopped

- **disassembler**: image -> assembly listing (ndisasm)

Quick Start
-----------
    >>> from neander_sdk import NeanderCompiler, Assembler, Emulator
    >>> result = NeanderCompiler().compile_source(
    ...     'PROGRAMA "t": INICIO x = 2 + 3 RES = x FIM')
    >>> image = Assembler().assemble(result.assembly)
    >>> emu = Emulator()
    >>> emu.load_image(image)
    >>> emu.run().state.accumulator
    5

Or use the command-line tools:
    $ ncc soma.txt -o soma.asm
    $ nasm soma.asm -o soma.bin
    $ nemu soma.bin

Version History
---------------
1.0.0 - Compiler, assembler with labels, emulator and disassembler
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from neander_sdk.errors import (
    NeanderError,
    SourceLocation,
    EncodingError,
    UnknownMnemonicError,
    InvalidLiteralError,
    AddressRangeError,
    UndefinedLabelError,
    DuplicateLabelError,
)
from neander_sdk.assembler import Assembler, Opcode, OPCODE_TABLE
from neander_sdk.compiler import (
    NeanderCompiler,
    CompilerOptions,
    CompilerResult,
    CompilerError,
    CompilationError,
    LangSyntaxError,
    CapacityError,
    InternalCompilerError,
)
from neander_sdk.emulator import Emulator, EmulatorConfig, RunResult, StopReason
from neander_sdk.disassembler import NeanderDisassembler

__all__ = [
    "__version__",
    # Toolchain
    "NeanderCompiler",
    "CompilerOptions",
    "CompilerResult",
    "Assembler",
    "Opcode",
    "OPCODE_TABLE",
    "Emulator",
    "EmulatorConfig",
    "RunResult",
    "StopReason",
    "NeanderDisassembler",
    # Exception hierarchy
    "NeanderError",
    "SourceLocation",
    "EncodingError",
    "UnknownMnemonicError",
    "InvalidLiteralError",
    "AddressRangeError",
    "UndefinedLabelError",
    "DuplicateLabelError",
    "CompilerError",
    "CompilationError",
    "LangSyntaxError",
    "CapacityError",
    "InternalCompilerError",
]
