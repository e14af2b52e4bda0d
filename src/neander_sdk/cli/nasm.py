"""
nasm - Neander Assembler Command-Line Interface
===============================================

Usage Examples
--------------
Basic assembly (writes prog.bin):
    $ nasm prog.asm

With output and listing files:
    $ nasm prog.asm -o prog.bin -l prog.lst
"""

from pathlib import Path
from typing import Optional

import click

from neander_sdk import __version__
from neander_sdk.assembler import Assembler
from neander_sdk.cli import setup_logging
from neander_sdk.cli.errors import handle_cli_exception


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output image file (default: input.bin)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="nasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble Neander assembly into a 256-byte memory image.

    INPUT_FILE is the assembly source file (.asm).

    \b
    Examples:
        nasm prog.asm                # Outputs prog.bin
        nasm prog.asm -o out.bin     # Specify output file
        nasm prog.asm -l prog.lst    # Also write a listing
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".bin")

    try:
        asm = Assembler()
        asm.assemble_file(input_file)
        asm.write_binary(output)

        if listing:
            asm.write_listing(listing)

        if verbose:
            click.echo(f"Code size: {asm.get_code_size()} bytes")
            labels = asm.get_labels()
            if labels:
                click.echo("Labels: " + ", ".join(
                    f"{name}=0x{address:02X}" for name, address in sorted(labels.items())
                ))

        click.echo(f"Assembled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
