"""
PROGRAMA Compiler for the Neander Machine
=========================================

Compiles the PROGRAMA teaching language into Neander assembly:

    PROGRAMA "soma":
    INICIO
        x = 2 + 3
        y = x * 4 - 1
        RES = y / 2
    FIM

Expressions support `+ - * /`, parentheses and unary minus on unsigned
8-bit values. Multiplication and division become loops, since the machine
only adds.

Main Components
---------------
- **Lexer / TokenStream**: tokens, with unrecognized characters dropped
- **SymbolTable**: variable, constant and temp slot addresses
- **CodeGenerator**: instruction emission and jump backpatching
- **Parser**: recursive descent, drives the code generator directly
- **NeanderCompiler**: the facade, with CompilerOptions and CompilerResult
"""

from neander_sdk.compiler.codegen import UNRESOLVED, CodeGenerator, Instruction
from neander_sdk.compiler.compiler import (
    CompilerOptions,
    CompilerResult,
    NeanderCompiler,
    compile_file,
    compile_source,
)
from neander_sdk.compiler.errors import (
    CapacityError,
    CompilationError,
    CompilerError,
    DiagnosticCollector,
    InternalCompilerError,
    LangSyntaxError,
    MissingTokenError,
    UnexpectedTokenError,
)
from neander_sdk.compiler.lexer import Lexer, Token, TokenStream, TokenType
from neander_sdk.compiler.parser import Parser
from neander_sdk.compiler.symbols import SymbolTable, Variable

__all__ = [
    "NeanderCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "compile_file",
    "Lexer",
    "Token",
    "TokenType",
    "TokenStream",
    "Parser",
    "SymbolTable",
    "Variable",
    "CodeGenerator",
    "Instruction",
    "UNRESOLVED",
    "CompilerError",
    "CompilationError",
    "LangSyntaxError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "CapacityError",
    "InternalCompilerError",
    "DiagnosticCollector",
]
