"""
SASM - Simple Assembler Toolchain for the 6502
==============================================

This package provides an assembler and a disassembler for the MOS 6502,
the CPU of the Apple II and (as the 6507) of the Atari 2600.

Main Components
---------------
- **cpu**: The shared 6502 instruction table
- **assembler**: Two-pass assembler (sasm)
    Converts SASM source to hex, binary or Apple II monitor output
- **disassembler**: Disassembler with code/data inference (dtsasm)
    Converts raw memory images back to SASM source

Quick Start
-----------
Assemble a program:
    >>> from sasm import assemble
    >>> assemble("ldxi 00\\n.loop\\ninx\\nbne .loop\\n")
    'a200e8d0fd'

Disassemble an image:
    >>> from sasm import disassemble
    >>> print(disassemble(bytes.fromhex("a200e8d0fd"), min_region_size=2).text)
    org 0000
        ldxi 00
    .l0002
        inx
        bne .l0002
    <BLANKLINE>

Or use the command-line tools:
    $ sasm -i hello.s -o hello.hex
    $ dtsasm -i hello.bin -a 0800

Version History
---------------
1.0.0 - Initial release with assembler and disassembler
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sasm.assembler import Assembler, CodeFormat, System, assemble, assemble_file
from sasm.config import SasmConfig
from sasm.disassembler import Disassembler, DisassemblyResult, disassemble
from sasm.errors import (
    SasmError,
    InternalError,
    AssemblerError,
    AssemblySyntaxError,
    UnknownMnemonicError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    OperandError,
    BranchRangeError,
    DirectiveError,
    ZeroPageError,
    DisassemblerError,
    ConfigError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "CodeFormat",
    "System",
    "assemble",
    "assemble_file",
    # Disassembler
    "Disassembler",
    "DisassemblyResult",
    "disassemble",
    # Configuration
    "SasmConfig",
    # Exception hierarchy
    "SasmError",
    "InternalError",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownMnemonicError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "OperandError",
    "BranchRangeError",
    "DirectiveError",
    "ZeroPageError",
    "DisassemblerError",
    "ConfigError",
]
