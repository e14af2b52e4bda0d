"""
nemu - Neander Emulator Command-Line Interface
==============================================

Runs a 256-byte image and prints the final registers, the stop reason and a
memory dump.

Usage Examples
--------------
Run with the default step budget:
    $ nemu soma.bin

Unbounded run, dumping the temp band:
    $ nemu soma.bin --steps 0 --dump 0xC8:0x100

Instruction trace:
    $ nemu soma.bin --trace
"""

import sys
from pathlib import Path

import click

from neander_sdk import __version__
from neander_sdk.cli import parse_address, setup_logging
from neander_sdk.cli.errors import ExitCode, handle_cli_exception
from neander_sdk.emulator import Emulator, EmulatorConfig, StopReason


DEFAULT_STEPS = 10_000


def parse_range(text: str) -> tuple[int, int]:
    """Parse START:END (END exclusive)."""
    start_text, sep, end_text = text.partition(":")
    if not sep:
        raise click.BadParameter(f"expected START:END, got '{text}'")
    start, end = parse_address(start_text), parse_address(end_text)
    if start > end:
        raise click.BadParameter(f"empty range '{text}'")
    return start, end


@click.command()
@click.argument(
    "image_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-s", "--steps",
    type=click.IntRange(min=0),
    default=DEFAULT_STEPS,
    show_default=True,
    help="Step budget (0 = unbounded)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Stop on unassigned opcodes instead of skipping them",
)
@click.option(
    "--dump",
    "dump_range",
    default="0x80:0x90",
    show_default=True,
    help="Memory range to print after the run, as START:END",
)
@click.option(
    "-t", "--trace",
    is_flag=True,
    help="Print every executed instruction",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="nemu")
def main(
    image_file: Path,
    steps: int,
    strict: bool,
    dump_range: str,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Run a Neander memory image.

    IMAGE_FILE is a raw image (up to 256 bytes) produced by nasm.

    \b
    Examples:
        nemu soma.bin                    # Run, dump 0x80-0x8F
        nemu soma.bin -s 0               # No step limit
        nemu soma.bin --strict           # Fault on bad opcodes
        nemu soma.bin --dump 0xC8:0x100  # Dump the temp band
    """
    setup_logging(verbose)

    try:
        start, end = parse_range(dump_range)
        config = EmulatorConfig(
            max_steps=steps,
            strict_opcodes=strict,
            record_trace=trace,
        )
        emu = Emulator(config)
        emu.load_file(image_file)
        result = emu.run()
    except Exception as e:
        handle_cli_exception(e, verbose)

    for entry in result.trace:
        click.echo(str(entry))

    state = result.state
    click.echo(f"Stopped: {result.reason} after {result.steps} steps")
    click.echo(
        f"AC=0x{state.accumulator:02X} PC=0x{state.pc:02X} "
        f"N={int(state.flag_n)} Z={int(state.flag_z)}"
    )

    if end > start:
        click.echo(f"Memory 0x{start:02X}-0x{end - 1:02X}:")
        for address, value in emu.memory.dump(start, end):
            click.echo(f"  0x{address:02X}: 0x{value:02X} ({value})")

    if result.reason is StopReason.INVALID_OPCODE:
        opcode = emu.memory.read(state.pc)
        click.echo(f"Error: invalid opcode 0x{opcode:02X} at 0x{state.pc:02X}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)


if __name__ == "__main__":
    main()
