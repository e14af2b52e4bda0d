"""
Unified CLI Error Handling
==========================

Consistent error reporting and exit codes for ncc, nasm, nemu and ndisasm.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Compilation or assembly error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None,
) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: Print a traceback for internal errors
        error_type: Optional prefix for the message (e.g. "Assembly")

    Raises:
        SystemExit: Always
    """
    from neander_sdk.compiler.errors import CompilerError, InternalCompilerError
    from neander_sdk.errors import NeanderError

    if isinstance(error, InternalCompilerError):
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exception(error)
        sys.exit(ExitCode.INTERNAL_ERROR)

    elif isinstance(error, CompilerError):
        # Already formatted with "error:" prefixes
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, NeanderError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError, ValueError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exception(error)
        sys.exit(ExitCode.INTERNAL_ERROR)
