"""
ncc - PROGRAMA Compiler Command-Line Interface
==============================================

Usage Examples
--------------
Basic compilation (writes soma.asm):
    $ ncc soma.txt

With output file:
    $ ncc soma.txt -o out.asm

Full pipeline:
    $ ncc soma.txt && nasm soma.asm && nemu soma.bin
"""

from pathlib import Path
from typing import Optional

import click

from neander_sdk import __version__
from neander_sdk.cli import setup_logging
from neander_sdk.cli.errors import handle_cli_exception
from neander_sdk.compiler import CompilerOptions, NeanderCompiler


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: input.asm)",
)
@click.option(
    "--legacy-jumps",
    is_flag=True,
    help="Compute jump targets as instruction index * 2 (old, buggy output)",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Emit bare assembly without name annotations",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="ncc")
def main(
    input_file: Path,
    output: Optional[Path],
    legacy_jumps: bool,
    no_comments: bool,
    verbose: bool,
) -> None:
    """
    Compile a PROGRAMA source file to Neander assembly.

    INPUT_FILE is the source file to compile.

    \b
    Examples:
        ncc soma.txt                 # Outputs soma.asm
        ncc soma.txt -o out.asm      # Specify output file
        ncc -v soma.txt              # Verbose output
    """
    setup_logging(verbose)

    if output is None:
        output = input_file.with_suffix(".asm")

    options = CompilerOptions(
        legacy_jump_targets=legacy_jumps,
        output_comments=not no_comments,
    )

    try:
        result = NeanderCompiler(options).compile_file(input_file)
        output.write_text(result.assembly)

        for warning in result.warnings:
            click.echo(warning, err=True)

        if verbose:
            click.echo(f"Program: {result.program_name}")
            click.echo(
                f"Code: {result.code_size} bytes, {len(result.instructions)} instructions"
            )
            click.echo(f"Variables and constants: {len(result.symbols)}")
            if result.skipped:
                ignored = " ".join(repr(t.text) for t in result.skipped)
                click.echo(f"Ignored characters: {ignored}")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
