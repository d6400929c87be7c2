"""
SASM Disassembler Module
========================

This module turns raw 6502 memory images back into SASM source. Code is
told apart from data by a region-inference heuristic, and jump and
branch targets inside the image are given labels.

Usage:
    from sasm.disassembler import Disassembler

    result = Disassembler(min_region_size=10).disassemble(image, 0x0800)
    print(result.text)
"""

from .mos6502 import (
    Disassembler,
    DisassembledLine,
    DisassemblyResult,
    candidate_regions,
    disassemble,
    instruction_sizes,
    select_code_regions,
)

__all__ = [
    "Disassembler",
    "DisassembledLine",
    "DisassemblyResult",
    "candidate_regions",
    "disassemble",
    "instruction_sizes",
    "select_code_regions",
]
