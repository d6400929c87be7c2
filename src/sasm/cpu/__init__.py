"""
SASM CPU Package
================

CPU architecture definitions shared by the assembler (which encodes
instructions) and the disassembler (which decodes them). Keeping a single
table guarantees that both directions agree on every opcode.

Usage:
    from sasm.cpu import get_instruction, OperandWidth

    record = get_instruction("ldai")
    assert record.opcode == 0xA9 and record.width is OperandWidth.BYTE
"""

from sasm.cpu.mos6502 import (
    # Core types
    OperandWidth,
    InstructionRecord,
    # Instruction tables
    OPCODE_TABLE,
    OPCODES_BY_VALUE,
    MNEMONICS,
    RELATIVE_BRANCHES,
    # Lookup functions
    get_instruction,
    get_instruction_by_opcode,
    instruction_size,
    instruction_size_from_opcode,
    is_relative_branch,
)

__all__ = [
    "OperandWidth",
    "InstructionRecord",
    "OPCODE_TABLE",
    "OPCODES_BY_VALUE",
    "MNEMONICS",
    "RELATIVE_BRANCHES",
    "get_instruction",
    "get_instruction_by_opcode",
    "instruction_size",
    "instruction_size_from_opcode",
    "is_relative_branch",
]
