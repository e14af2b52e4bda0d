"""
Neander SDK Command-Line Interface
==================================

Command-line tools for the Neander toolchain:

- **ncc**: PROGRAMA compiler (source -> assembly)
- **nasm**: assembler (assembly -> 256-byte image)
- **nemu**: emulator (runs an image)
- **ndisasm**: disassembler (image -> assembly listing)

Each tool is a Click command. A full pipeline:

    $ ncc soma.txt && nasm soma.asm && nemu soma.bin
"""

import logging

import click

__all__ = ["ncc", "nasm", "nemu", "ndisasm", "parse_address", "setup_logging"]


def parse_address(text: str) -> int:
    """
    Parse an address written as 0xHH or decimal.

    Raises:
        click.BadParameter: Not a number in 0x00-0x100
    """
    try:
        value = int(text, 16) if text.lower().startswith("0x") else int(text)
    except ValueError:
        raise click.BadParameter(f"invalid address '{text}'")
    if not 0 <= value <= 0x100:
        raise click.BadParameter(f"address '{text}' outside 0x00-0x100")
    return value


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )
