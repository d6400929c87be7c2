"""
SASM 6502 Assembler
===================

This package provides a two-pass assembler for the SASM dialect of
6502 assembly language, targeting the Apple II and the Atari 2600.

Main Components
---------------
- **Assembler**: Main class that runs an assembly and renders its output
- **Parser**: Tokenizes source lines into statements
- **CodeGenerator**: Two-pass label resolution and encoding
- **ZeroPageAllocator**: Per-system allocator behind the `zbyte` keyword
- **Output**: Hex, binary and Apple System Monitor renderers

Assembly Process
----------------
1. **Pass 1**: tokenize each line, bind labels, measure code and record
   `org` addresses in the address map
2. **Pass 2**: resolve labels, check operand widths, compute branch
   displacements and emit bytes
3. **Output**: render the bytes, filling gaps between org blocks

Example Usage
-------------
>>> from sasm.assembler import assemble
>>> assemble("ldai 41\\nstaa 0400\\n")
'a9418d0004'
"""

from sasm.assembler.assembler import Assembler, assemble, assemble_file
from sasm.assembler.codegen import CodeGenerator
from sasm.assembler.output import Code, CodeFormat, bytes_to_output
from sasm.assembler.parser import (
    Statement,
    Blank,
    Org,
    LabelDef,
    ZeroPageDef,
    DataBytes,
    DataLabel,
    CodeMarker,
    Instruction,
    UInt,
    LabelRef,
    parse_hex,
    parse_source,
    tokenize_line,
)
from sasm.assembler.zeropage import System, ZeroPageAllocator

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Parser
    "Statement",
    "Blank",
    "Org",
    "LabelDef",
    "ZeroPageDef",
    "DataBytes",
    "DataLabel",
    "CodeMarker",
    "Instruction",
    "UInt",
    "LabelRef",
    "parse_hex",
    "parse_source",
    "tokenize_line",
    # Code generator
    "CodeGenerator",
    # Output
    "Code",
    "CodeFormat",
    "bytes_to_output",
    # Zero page
    "System",
    "ZeroPageAllocator",
]
