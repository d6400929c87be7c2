"""
dtsasm - 6502 Disassembler Command-Line Interface
=================================================

This module implements the command-line interface for the disassembler.
The input is a raw memory image, read from a file, from standard input,
or given on the command line as a string of hex digits. The output is
SASM source that assembles back to the same bytes.

Usage Examples
--------------
Disassemble a binary image loaded at $0800:
    $ dtsasm -i program.bin -a 0800

Disassemble a hex string:
    $ dtsasm -x a200e8d0fd60

Treat shorter instruction runs as code:
    $ dtsasm -i program.bin -m 4 -o program.s

Labels that cannot be placed are reported as warnings on stderr.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from sasm import __version__
from sasm.cli.errors import handle_cli_exception, setup_logging
from sasm.config import SasmConfig
from sasm.disassembler import Disassembler

logger = logging.getLogger(__name__)


def _address_option(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        address = int(value, 16)
    except ValueError:
        raise click.BadParameter("Invalid starting address") from None
    if not 0 <= address <= 0xFFFF:
        raise click.BadParameter("Invalid starting address")
    return address


def _region_size_option(ctx: click.Context, param: click.Parameter, value: Optional[int]) -> Optional[int]:
    if value is not None and value < 0:
        raise click.BadParameter("Invalid minimum region size")
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.option(
    "-i", "--input", "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Input binary file (default: stdin)",
)
@click.option(
    "-x", "--hex-string",
    type=str,
    help="Input given as a string of hex digits",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    callback=_address_option,
    metavar="HEX",
    help="Starting address in hex (default: 0000)",
)
@click.option(
    "-m", "--min-region-size",
    type=int,
    callback=_region_size_option,
    help="Minimum size for a code region (default: 10)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="dtsasm")
def main(
    input_file: Optional[Path],
    hex_string: Optional[str],
    output: Optional[Path],
    address: Optional[int],
    min_region_size: Optional[int],
    verbose: bool,
) -> None:
    """
    Disassemble 6502 machine code into SASM source.

    \b
    Examples:
        dtsasm -i program.bin -a 0800
        dtsasm -x a200e8d0fd60
        dtsasm -i program.bin -m 4 -o program.s
    """
    setup_logging(verbose)

    if input_file is not None and hex_string is not None:
        raise click.UsageError("-i/--input and -x/--hex-string are mutually exclusive")

    try:
        config = SasmConfig.from_env()
        if address is not None:
            config.start_address = address
        if min_region_size is not None:
            config.min_region_size = min_region_size
        config.validate()

        disasm = Disassembler(config.min_region_size)
        if hex_string is not None:
            result = disasm.disassemble_hex(hex_string, config.start_address)
        else:
            if input_file is not None:
                data = input_file.read_bytes()
            else:
                data = click.get_binary_stream("stdin").read()
            logger.debug(f"Read {len(data)} bytes")
            result = disasm.disassemble(data, config.start_address)

        logger.debug(
            f"{len(result.regions)} code regions, {len(result.warnings)} warnings"
        )

        if output is not None:
            output.write_text(result.text, encoding="utf-8")
            logger.debug(f"Output written to: {output}")
        else:
            click.echo(result.text, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
