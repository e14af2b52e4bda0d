"""
ndisasm - Neander Disassembler Command-Line Interface
=====================================================

Usage Examples
--------------
Disassemble the code band:
    $ ndisasm soma.bin

Start elsewhere, limit the count:
    $ ndisasm soma.bin --start 0x10 --count 8

Output to file:
    $ ndisasm soma.bin -o listing.txt
"""

from pathlib import Path
from typing import Optional

import click

from neander_sdk import __version__
from neander_sdk.cli import parse_address, setup_logging
from neander_sdk.cli.errors import handle_cli_exception
from neander_sdk.disassembler import NeanderDisassembler


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--start",
    default="0x00",
    show_default=True,
    help="First address to disassemble (hex with 0x prefix or decimal)",
)
@click.option(
    "-e", "--end",
    default="0x80",
    show_default=True,
    help="Stop before this address",
)
@click.option(
    "-c", "--count",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of instructions (default: all up to --end)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="ndisasm")
def main(
    input_file: Path,
    output: Optional[Path],
    start: str,
    end: str,
    count: Optional[int],
    verbose: bool,
) -> None:
    """
    Disassemble a Neander memory image.

    INPUT_FILE is a raw image produced by nasm.

    \b
    Examples:
        ndisasm soma.bin                       # Code band 0x00-0x7F
        ndisasm soma.bin --start 0x10 -c 8     # Eight instructions
        ndisasm soma.bin --end 0x100           # Whole memory
    """
    setup_logging(verbose)

    try:
        start_address = parse_address(start)
        end_address = parse_address(end)
        data = input_file.read_bytes()
        if len(data) > 0x100:
            raise click.BadParameter(f"{input_file} is {len(data)} bytes, images are at most 256")
    except Exception as e:
        handle_cli_exception(e, verbose)

    lines = [
        f"; Disassembly of {input_file.name}",
        f"; Range: 0x{start_address:02X}-0x{end_address:02X}",
        "",
    ]
    disasm = NeanderDisassembler()
    lines.append(disasm.disassemble_to_text(data, start_address, count, end_address))
    text = "\n".join(lines) + "\n"

    if output:
        output.write_text(text)
        click.echo(f"Wrote disassembly to {output}")
    else:
        click.echo(text, nl=False)


if __name__ == "__main__":
    main()
