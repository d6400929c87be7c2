"""
sasm - 6502 Assembler Command-Line Interface
============================================

This module implements the command-line interface for the assembler.
Source is read from a file or from standard input, and the assembled
code is written to a file or to standard output.

Usage Examples
--------------
Assemble from stdin, hex string on stdout:
    $ sasm < hello.s

With input and output files:
    $ sasm -i hello.s -o hello.hex

Apple II System Monitor listing:
    $ sasm -i hello.s -f apple

Atari 2600 cartridge image:
    $ sasm -i game.s -s atari -f bin -o game.bin

Defaults for -s and -f can also come from the SASM_SYSTEM and
SASM_FORMAT environment variables.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from sasm import __version__
from sasm.assembler import Assembler, CodeFormat, System
from sasm.cli.errors import handle_cli_exception, setup_logging
from sasm.config import SasmConfig
from sasm.errors import ConfigError

logger = logging.getLogger(__name__)


def _system_option(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[System]:
    if value is None:
        return None
    try:
        return System.from_name(value)
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


def _format_option(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[CodeFormat]:
    if value is None:
        return None
    try:
        return CodeFormat.from_name(value)
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.option(
    "-i", "--input", "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Input source file (default: stdin)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-s", "--system",
    callback=_system_option,
    metavar="[apple|atari]",
    help="Target system (default: apple)",
)
@click.option(
    "-f", "--format", "code_format",
    callback=_format_option,
    metavar="[hex|apple|bin]",
    help="Output format: hex string, Apple II System Monitor, or binary (default: hex)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sasm")
def main(
    input_file: Optional[Path],
    output: Optional[Path],
    system: Optional[System],
    code_format: Optional[CodeFormat],
    verbose: bool,
) -> None:
    """
    Assemble SASM source code for the 6502.

    \b
    Examples:
        sasm -i hello.s              # Hex string on stdout
        sasm -i hello.s -o hello.hex # Specify output file
        sasm -i hello.s -f apple     # Apple II monitor listing
        sasm -s atari -f bin < game.s > game.bin
    """
    setup_logging(verbose)

    try:
        config = SasmConfig.from_env()
        if system is not None:
            config.system = system
        if code_format is not None:
            config.code_format = code_format
        config.validate()

        logger.debug(f"Target system: {config.system}, output format: {config.code_format}")

        asm = Assembler(config.system, config.code_format)
        if input_file is not None:
            asm.assemble_file(input_file)
        else:
            asm.assemble_string(click.get_text_stream("stdin").read())

        if output is not None:
            asm.write_output(output)
            logger.debug(f"Wrote {len(asm.get_code())} bytes of code to {output}")
            return

        code = asm.render()
        if isinstance(code, bytes):
            stdout = click.get_binary_stream("stdout")
            stdout.write(code)
            stdout.flush()
        elif config.code_format is CodeFormat.HEX:
            click.echo(code)
        else:
            click.echo(code, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
