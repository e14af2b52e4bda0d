"""
PROGRAMA Compiler Main Module
=============================

Orchestrates a compilation:

    Source -> Lexer -> Parser + CodeGenerator -> Assembly text

Usage
-----
Command line:
    $ ncc soma.txt -o soma.asm

Programmatic:
    >>> from neander_sdk.compiler import compile_source
    >>> asm = compile_source('PROGRAMA "t": INICIO x = 2 + 3 RES = x FIM')
    >>> asm.splitlines()[1]
    '.DATA'

The assembly text feeds the Neander assembler (nasm), whose image runs on
the emulator (nemu).

Error Handling
--------------
Syntax errors are collected during the parse and raised together as one
CompilationError. Capacity and internal errors stop compilation at once.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from neander_sdk.compiler.codegen import CodeGenerator, Instruction
from neander_sdk.compiler.errors import DiagnosticCollector
from neander_sdk.compiler.lexer import Lexer, Token, TokenStream
from neander_sdk.compiler.parser import Parser
from neander_sdk.compiler.symbols import (
    DEFAULT_MEMORY_SIZE,
    DEFAULT_TEMP_BASE,
    DEFAULT_VARIABLE_BASE,
    SymbolTable,
)


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        variable_base: First address of the variable band (also where code
            must stop)
        temp_base: First address of the temp band (end of the variable band)
        memory_size: End of the temp band
        legacy_jump_targets: Compute jump targets as instruction index * 2
        output_comments: Annotate the assembly with names
        max_errors: Stop parsing after this many syntax errors
    """
    variable_base: int = DEFAULT_VARIABLE_BASE
    temp_base: int = DEFAULT_TEMP_BASE
    memory_size: int = DEFAULT_MEMORY_SIZE
    legacy_jump_targets: bool = False
    output_comments: bool = True
    max_errors: int = 100


@dataclass
class CompilerResult:
    """
    Result of a successful compilation.

    Attributes:
        filename: Source filename
        program_name: Name from the PROGRAMA header
        assembly: Generated assembly text
        instructions: Emitted instructions, HLT included
        symbols: Variables and constants in address order
        code_size: Code size in bytes
        warnings: Formatted warning messages
        skipped: Unrecognized characters the lexer discarded
        success: True when assembly was produced
    """
    filename: str = ""
    program_name: Optional[str] = None
    assembly: str = ""
    instructions: list[Instruction] = field(default_factory=list)
    symbols: Optional[SymbolTable] = None
    code_size: int = 0
    warnings: list[str] = field(default_factory=list)
    skipped: list[Token] = field(default_factory=list)
    success: bool = False


class NeanderCompiler:
    """
    PROGRAMA compiler targeting the Neander machine.

    Example:
        compiler = NeanderCompiler()
        result = compiler.compile_file("soma.txt")
        print(result.assembly)
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile PROGRAMA source to assembly.

        Returns:
            CompilerResult with assembly output and diagnostics

        Raises:
            CompilationError: One or more syntax errors
            CapacityError: An address band ran out
            InternalCompilerError: A code generator invariant broke
        """
        opts = self.options
        symbols = SymbolTable(
            variable_base=opts.variable_base,
            variable_limit=opts.temp_base,
            temp_base=opts.temp_base,
            temp_limit=opts.memory_size,
        )
        codegen = CodeGenerator(
            symbols,
            code_limit=opts.variable_base,
            legacy_jump_targets=opts.legacy_jump_targets,
        )
        diagnostics = DiagnosticCollector(max_errors=opts.max_errors)
        stream = TokenStream(Lexer(source, filename))

        logger.debug(f"Compiling {filename}")
        program_name = Parser(stream, codegen, diagnostics).parse()

        for warning in diagnostics.warnings:
            logger.debug(warning)
        diagnostics.raise_if_errors()

        codegen.finish()
        assembly = codegen.to_assembly(
            symbols, program_name, comments=opts.output_comments,
        )

        return CompilerResult(
            filename=filename,
            program_name=program_name,
            assembly=assembly,
            instructions=list(codegen.instructions),
            symbols=symbols,
            code_size=codegen.byte_offset,
            warnings=list(diagnostics.warnings),
            skipped=list(stream.skipped),
            success=True,
        )

    def compile_file(self, filepath: str | Path) -> CompilerResult:
        """
        Compile a source file.

        Raises:
            CompilerError: If compilation fails
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")
        return self.compile_source(path.read_text(encoding="utf-8"), str(path))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(source: str, filename: str = "<input>") -> str:
    """Compile PROGRAMA source and return the assembly text."""
    return NeanderCompiler().compile_source(source, filename).assembly


def compile_file(filepath: str | Path, output_path: str | Path | None = None) -> str:
    """
    Compile a source file and return the assembly text, optionally writing
    it to output_path.
    """
    result = NeanderCompiler().compile_file(filepath)
    if output_path:
        Path(output_path).write_text(result.assembly, encoding="utf-8")
    return result.assembly
