"""
MOS 6502 Instruction Set Definition
===================================

This module defines the documented NMOS 6502 instruction set as used by
both the assembler and the disassembler. The 6502 is little-endian: a
two-byte operand is stored low byte first.

Mnemonic Naming
---------------
SASM encodes the addressing mode in a mnemonic suffix instead of in the
operand syntax, so every mnemonic maps to exactly one opcode:

| Suffix | Mode                  | Example  | Operand |
|--------|-----------------------|----------|---------|
| (none) | implied / accumulator | clc, asl | none    |
| i      | immediate             | ldai 41  | byte    |
| z      | zero page             | ldaz 80  | byte    |
| zx, zy | zero page indexed     | ldazx 80 | byte    |
| a      | absolute              | ldaa 4000| word    |
| ax, ay | absolute indexed      | ldaax 4000 | word  |
| nx     | (zero page,X)         | ldanx 80 | byte    |
| ny     | (zero page),Y         | ldany 80 | byte    |
| n      | (absolute) indirect   | jmpn 03f0| word    |

The eight conditional branches (bpl, bmi, bvc, bvs, bcc, bcs, bne, beq)
are one-byte-operand instructions whose operand is a signed displacement
from the address following the branch.

Reference
---------
- MOS MCS6500 Microcomputer Family Programming Manual
- http://www.6502.org/tutorials/6502opcodes.html
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Operand Width
# =============================================================================

class OperandWidth(Enum):
    """
    Width of an instruction operand, also used to tag literal values.

    The value of each member is its size in bytes.
    """
    NONE = 0
    BYTE = 1
    WORD = 2

    @property
    def size(self) -> int:
        """Number of bytes occupied by an operand of this width."""
        return self.value

    def __str__(self) -> str:
        return {
            OperandWidth.NONE: "none",
            OperandWidth.BYTE: "single-byte",
            OperandWidth.WORD: "two-byte",
        }[self]


# =============================================================================
# Instruction Record
# =============================================================================

@dataclass(frozen=True)
class InstructionRecord:
    """
    One entry of the instruction table.

    Frozen so that the shared table cannot be modified at runtime.

    Attributes:
        mnemonic: Lower-case SASM mnemonic (e.g. "ldai")
        opcode: The opcode byte
        width: Operand width class
    """
    mnemonic: str
    opcode: int
    width: OperandWidth

    @property
    def size(self) -> int:
        """Total encoded size in bytes (opcode plus operand)."""
        return 1 + self.width.size

    def __repr__(self) -> str:
        return f"InstructionRecord({self.mnemonic!r}, opcode=${self.opcode:02X}, size={self.size})"


_NONE = OperandWidth.NONE
_BYTE = OperandWidth.BYTE
_WORD = OperandWidth.WORD


# =============================================================================
# Opcode Table
# =============================================================================
# (mnemonic, opcode, operand width) for all 151 documented opcodes.
# =============================================================================

_INSTRUCTIONS: list[tuple[str, int, OperandWidth]] = [
    # Load and store
    ("ldai", 0xA9, _BYTE), ("ldaz", 0xA5, _BYTE), ("ldazx", 0xB5, _BYTE),
    ("ldaa", 0xAD, _WORD), ("ldaax", 0xBD, _WORD), ("ldaay", 0xB9, _WORD),
    ("ldanx", 0xA1, _BYTE), ("ldany", 0xB1, _BYTE),
    ("ldxi", 0xA2, _BYTE), ("ldxz", 0xA6, _BYTE), ("ldxzy", 0xB6, _BYTE),
    ("ldxa", 0xAE, _WORD), ("ldxay", 0xBE, _WORD),
    ("ldyi", 0xA0, _BYTE), ("ldyz", 0xA4, _BYTE), ("ldyzx", 0xB4, _BYTE),
    ("ldya", 0xAC, _WORD), ("ldyax", 0xBC, _WORD),
    ("staz", 0x85, _BYTE), ("stazx", 0x95, _BYTE), ("staa", 0x8D, _WORD),
    ("staax", 0x9D, _WORD), ("staay", 0x99, _WORD),
    ("stanx", 0x81, _BYTE), ("stany", 0x91, _BYTE),
    ("stxz", 0x86, _BYTE), ("stxzy", 0x96, _BYTE), ("stxa", 0x8E, _WORD),
    ("styz", 0x84, _BYTE), ("styzx", 0x94, _BYTE), ("stya", 0x8C, _WORD),

    # Register transfers
    ("tax", 0xAA, _NONE), ("txa", 0x8A, _NONE),
    ("tay", 0xA8, _NONE), ("tya", 0x98, _NONE),
    ("tsx", 0xBA, _NONE), ("txs", 0x9A, _NONE),

    # Stack
    ("pha", 0x48, _NONE), ("pla", 0x68, _NONE),
    ("php", 0x08, _NONE), ("plp", 0x28, _NONE),

    # Arithmetic
    ("adci", 0x69, _BYTE), ("adcz", 0x65, _BYTE), ("adczx", 0x75, _BYTE),
    ("adca", 0x6D, _WORD), ("adcax", 0x7D, _WORD), ("adcay", 0x79, _WORD),
    ("adcnx", 0x61, _BYTE), ("adcny", 0x71, _BYTE),
    ("sbci", 0xE9, _BYTE), ("sbcz", 0xE5, _BYTE), ("sbczx", 0xF5, _BYTE),
    ("sbca", 0xED, _WORD), ("sbcax", 0xFD, _WORD), ("sbcay", 0xF9, _WORD),
    ("sbcnx", 0xE1, _BYTE), ("sbcny", 0xF1, _BYTE),

    # Comparisons
    ("cmpi", 0xC9, _BYTE), ("cmpz", 0xC5, _BYTE), ("cmpzx", 0xD5, _BYTE),
    ("cmpa", 0xCD, _WORD), ("cmpax", 0xDD, _WORD), ("cmpay", 0xD9, _WORD),
    ("cmpnx", 0xC1, _BYTE), ("cmpny", 0xD1, _BYTE),
    ("cpxi", 0xE0, _BYTE), ("cpxz", 0xE4, _BYTE), ("cpxa", 0xEC, _WORD),
    ("cpyi", 0xC0, _BYTE), ("cpyz", 0xC4, _BYTE), ("cpya", 0xCC, _WORD),

    # Logical
    ("andi", 0x29, _BYTE), ("andz", 0x25, _BYTE), ("andzx", 0x35, _BYTE),
    ("anda", 0x2D, _WORD), ("andax", 0x3D, _WORD), ("anday", 0x39, _WORD),
    ("andnx", 0x21, _BYTE), ("andny", 0x31, _BYTE),
    ("eori", 0x49, _BYTE), ("eorz", 0x45, _BYTE), ("eorzx", 0x55, _BYTE),
    ("eora", 0x4D, _WORD), ("eorax", 0x5D, _WORD), ("eoray", 0x59, _WORD),
    ("eornx", 0x41, _BYTE), ("eorny", 0x51, _BYTE),
    ("orai", 0x09, _BYTE), ("oraz", 0x05, _BYTE), ("orazx", 0x15, _BYTE),
    ("oraa", 0x0D, _WORD), ("oraax", 0x1D, _WORD), ("oraay", 0x19, _WORD),
    ("oranx", 0x01, _BYTE), ("orany", 0x11, _BYTE),
    ("bitz", 0x24, _BYTE), ("bita", 0x2C, _WORD),

    # Increments and decrements
    ("incz", 0xE6, _BYTE), ("inczx", 0xF6, _BYTE),
    ("inca", 0xEE, _WORD), ("incax", 0xFE, _WORD),
    ("inx", 0xE8, _NONE), ("iny", 0xC8, _NONE),
    ("decz", 0xC6, _BYTE), ("deczx", 0xD6, _BYTE),
    ("deca", 0xCE, _WORD), ("decax", 0xDE, _WORD),
    ("dex", 0xCA, _NONE), ("dey", 0x88, _NONE),

    # Shifts and rotates (no suffix = accumulator)
    ("asl", 0x0A, _NONE), ("aslz", 0x06, _BYTE), ("aslzx", 0x16, _BYTE),
    ("asla", 0x0E, _WORD), ("aslax", 0x1E, _WORD),
    ("lsr", 0x4A, _NONE), ("lsrz", 0x46, _BYTE), ("lsrzx", 0x56, _BYTE),
    ("lsra", 0x4E, _WORD), ("lsrax", 0x5E, _WORD),
    ("rol", 0x2A, _NONE), ("rolz", 0x26, _BYTE), ("rolzx", 0x36, _BYTE),
    ("rola", 0x2E, _WORD), ("rolax", 0x3E, _WORD),
    ("ror", 0x6A, _NONE), ("rorz", 0x66, _BYTE), ("rorzx", 0x76, _BYTE),
    ("rora", 0x6E, _WORD), ("rorax", 0x7E, _WORD),

    # Jumps and calls
    ("jmpa", 0x4C, _WORD), ("jmpn", 0x6C, _WORD),
    ("jsra", 0x20, _WORD), ("rts", 0x60, _NONE),

    # Branches (signed displacement)
    ("bpl", 0x10, _BYTE), ("bmi", 0x30, _BYTE),
    ("bvc", 0x50, _BYTE), ("bvs", 0x70, _BYTE),
    ("bcc", 0x90, _BYTE), ("bcs", 0xB0, _BYTE),
    ("bne", 0xD0, _BYTE), ("beq", 0xF0, _BYTE),

    # Status flags
    ("clc", 0x18, _NONE), ("sec", 0x38, _NONE),
    ("cli", 0x58, _NONE), ("sei", 0x78, _NONE),
    ("cld", 0xD8, _NONE), ("sed", 0xF8, _NONE),
    ("clv", 0xB8, _NONE),

    # System
    ("brk", 0x00, _NONE), ("rti", 0x40, _NONE), ("nop", 0xEA, _NONE),
]

# Mnemonic -> record
OPCODE_TABLE: dict[str, InstructionRecord] = {
    mnemonic: InstructionRecord(mnemonic, opcode, width)
    for mnemonic, opcode, width in _INSTRUCTIONS
}

# Opcode byte -> record (None for the 105 undocumented opcodes)
OPCODES_BY_VALUE: tuple[Optional[InstructionRecord], ...] = tuple(
    next((r for r in OPCODE_TABLE.values() if r.opcode == value), None)
    for value in range(256)
)

MNEMONICS: frozenset[str] = frozenset(OPCODE_TABLE)

RELATIVE_BRANCHES: frozenset[str] = frozenset({
    "bpl", "bmi", "bvc", "bvs", "bcc", "bcs", "bne", "beq",
})


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction(mnemonic: str) -> Optional[InstructionRecord]:
    """
    Look up an instruction by mnemonic (case-insensitive).

    Returns:
        The InstructionRecord, or None if the mnemonic is unknown
    """
    return OPCODE_TABLE.get(mnemonic.lower())


def get_instruction_by_opcode(opcode: int) -> Optional[InstructionRecord]:
    """Look up an instruction by opcode byte; None if undocumented."""
    return OPCODES_BY_VALUE[opcode & 0xFF]


def instruction_size(mnemonic: str) -> Optional[int]:
    """
    Get the encoded size (1, 2 or 3 bytes) of an instruction.

    Returns:
        Size in bytes, or None if the mnemonic is unknown
    """
    record = get_instruction(mnemonic)
    return record.size if record else None


def instruction_size_from_opcode(opcode: int) -> Optional[int]:
    """Get the encoded size of the instruction starting with `opcode`."""
    record = get_instruction_by_opcode(opcode)
    return record.size if record else None


def is_relative_branch(mnemonic: str) -> bool:
    """
    Check if an instruction is one of the eight conditional branches.

    Branches are declared with a single-byte operand, but the assembler
    also accepts a two-byte target address for them and derives the
    signed displacement itself.
    """
    return mnemonic.lower() in RELATIVE_BRANCHES
