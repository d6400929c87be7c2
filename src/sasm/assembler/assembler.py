"""
SASM Assembler - Main Interface
===============================

This module provides the main Assembler class, the primary interface
for assembling SASM source code. It runs the code generator and renders
the result with the output formatter.

Example Usage
-------------
>>> from sasm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
... org 4000
... .loop
...     inx
...     bne .loop
... ''')
b'\\xe8\\xd0\\xfd'
>>> asm.render()
'e8d0fd'

Command-Line Usage
------------------
    $ sasm -i program.s -o program.hex
    $ sasm -i program.s -s apple -f apple

See `sasm --help` for all options.
"""

import logging
from pathlib import Path

from sasm.assembler.codegen import CodeGenerator
from sasm.assembler.output import Code, CodeFormat, bytes_to_output
from sasm.assembler.zeropage import System
from sasm.errors import ConfigError

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main 6502 assembler class.

    Each call to assemble_string() or assemble_file() is an independent
    run with its own label table, address map and zero-page allocator;
    the results of the last successful run are kept for the output
    methods.

    Attributes:
        system: Target machine (zero-page policy)
        code_format: Default output format for render()
    """

    def __init__(
        self,
        system: System = System.APPLE,
        code_format: CodeFormat = CodeFormat.HEX,
    ):
        """
        Initialize the assembler.

        Args:
            system: Target machine, selects the zero-page allocator
            code_format: Default output format

        Raises:
            ConfigError: If the format cannot be used with the system
        """
        if system is System.ATARI and code_format is CodeFormat.APPLE_SM:
            raise ConfigError("Apple System Monitor output not compatible with Atari")

        self.system = system
        self.code_format = code_format
        self._codegen = CodeGenerator(system)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str) -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: SASM source code

        Returns:
            Generated machine code (without gap filling)

        Raises:
            AssemblerError: If assembly fails
        """
        codegen = CodeGenerator(self.system)
        code = codegen.generate(source)

        # Only a successful run replaces the previous result
        self._codegen = codegen
        logger.debug(f"Generated {len(code)} bytes of code")
        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Generated machine code

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"Assembling {filepath}")
        return self.assemble_string(filepath.read_text())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the generated machine code."""
        return self._codegen.get_code()

    def get_address_map(self) -> dict[int, int]:
        """Get the org address -> buffer position map."""
        return self._codegen.get_address_map()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Dictionary mapping label names to values
        """
        return {name: value.value for name, value in self._codegen.get_symbols().items()}

    def render(self, code_format: CodeFormat | None = None) -> Code:
        """
        Render the generated code.

        Args:
            code_format: Output format; defaults to the assembler's format

        Returns:
            str for hex and Apple System Monitor output, bytes for binary
        """
        fmt = code_format or self.code_format
        if self.system is System.ATARI and fmt is CodeFormat.APPLE_SM:
            raise ConfigError("Apple System Monitor output not compatible with Atari")
        return bytes_to_output(self.get_code(), self.get_address_map(), fmt)

    def write_output(self, filepath: str | Path, code_format: CodeFormat | None = None) -> None:
        """
        Write the rendered code to a file.

        Text formats are written as text, binary as raw bytes.

        Args:
            filepath: Output file path
            code_format: Output format; defaults to the assembler's format
        """
        output = self.render(code_format)
        if isinstance(output, bytes):
            Path(filepath).write_bytes(output)
        else:
            Path(filepath).write_text(output)
        logger.debug(f"Wrote {len(output)} {'bytes' if isinstance(output, bytes) else 'characters'} to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(
    source: str,
    system: System = System.APPLE,
    code_format: CodeFormat = CodeFormat.HEX,
) -> Code:
    """
    Convenience function to assemble and render source code.

    Args:
        source: SASM source code
        system: Target machine
        code_format: Output format (default: hex string)

    Returns:
        The rendered output

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(system, code_format)
    asm.assemble_string(source)
    return asm.render()


def assemble_file(
    filepath: str | Path,
    system: System = System.APPLE,
    code_format: CodeFormat = CodeFormat.HEX,
) -> Code:
    """
    Convenience function to assemble and render a file.

    Args:
        filepath: Path to source file
        system: Target machine
        code_format: Output format (default: hex string)

    Returns:
        The rendered output

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(system, code_format)
    asm.assemble_file(filepath)
    return asm.render()
