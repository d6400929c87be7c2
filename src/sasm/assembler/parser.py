"""
SASM Source Line Parser
=======================

This module turns assembly source text into a list of statements that
the code generator can process. SASM source is strictly line-oriented:
each line holds at most one statement and anything after a `;` is a
comment.

Statement Types
---------------
1. **Blank**: empty line (after comment removal)

2. **Org**: declares the address of the next emitted byte
   ```asm
   org 4000
   ```

3. **LabelDef**: binds a name to a literal
   ```asm
   label screen 0400
   label width 28
   ```

4. **ZeroPageDef**: binds a name to freshly allocated zero-page bytes
   ```asm
   zbyte counter       ; one byte
   zbyte buffer 10     ; sixteen bytes
   ```

5. **DataBytes / DataLabel**: raw bytes, or a two-byte label value
   ```asm
   data cafe
   data .screen
   ```

6. **CodeMarker**: binds a name to the address of the next emitted byte
   ```asm
   .loop
   ```

7. **Instruction**: mnemonic with optional operand and offset
   ```asm
   ldai 41
   staa .screen .width
   beq .loop
   ```

Literals
--------
All numbers are bare hexadecimal. One or two digits make a single-byte
value, three or four digits a two-byte value, so `00ff` and `ff` differ:
the width of a literal is part of its meaning.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

from sasm.cpu import OperandWidth
from sasm.errors import AssemblySyntaxError


# Prefix marking a code marker or a label reference
LABEL_PREFIX = "."

# Start of a trailing comment
COMMENT_CHAR = ";"

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]{1,4}")
_HEX_ERROR = "not a valid hexadecimal number"


# =============================================================================
# Values
# =============================================================================

@dataclass(frozen=True)
class UInt:
    """
    Unsigned value tagged with its width.

    The width decides how the value is serialized (one byte, or two bytes
    little-endian) and which instructions accept it.

    Attributes:
        value: The integer value (0-0xFF or 0-0xFFFF)
        width: OperandWidth.BYTE or OperandWidth.WORD
    """
    value: int
    width: OperandWidth

    @classmethod
    def byte(cls, value: int) -> "UInt":
        return cls(value, OperandWidth.BYTE)

    @classmethod
    def word(cls, value: int) -> "UInt":
        return cls(value, OperandWidth.WORD)

    @property
    def is_byte(self) -> bool:
        return self.width is OperandWidth.BYTE

    @property
    def is_word(self) -> bool:
        return self.width is OperandWidth.WORD

    def to_bytes(self) -> bytes:
        """Serialize little-endian in `width` bytes."""
        return self.value.to_bytes(self.width.size, "little")


@dataclass(frozen=True)
class LabelRef:
    """Reference to a label, resolved during pass 2."""
    name: str


# An instruction operand is absent (None), a literal, or a label
Operand = Optional[Union[UInt, LabelRef]]

# An instruction offset is a literal byte or a label
Offset = Union[int, LabelRef]


def parse_hex(text: str) -> UInt:
    """
    Parse a bare hexadecimal literal.

    Args:
        text: One to four hex digits, either case

    Returns:
        UInt tagged BYTE for 1-2 digits, WORD for 3-4 digits

    Raises:
        ValueError: If the text is not 1-4 hex digits
    """
    if not _HEX_PATTERN.fullmatch(text):
        raise ValueError(_HEX_ERROR)

    value = int(text, 16)
    if len(text) <= 2:
        return UInt.byte(value)
    return UInt.word(value)


# =============================================================================
# Statements
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all parsed statements.

    Every statement remembers its 1-based source line for error reporting.
    """
    line: int


@dataclass
class Blank(Statement):
    """Empty line or comment-only line."""


@dataclass
class Org(Statement):
    """Origin directive: address of the next emitted byte."""
    address: int


@dataclass
class LabelDef(Statement):
    """`label NAME VALUE`: binds NAME to an explicit literal."""
    name: str
    value: UInt


@dataclass
class ZeroPageDef(Statement):
    """`zbyte NAME [SIZE]`: binds NAME to an allocated zero-page address."""
    name: str
    size: int = 1


@dataclass
class DataBytes(Statement):
    """`data HEXBYTES`: bytes emitted verbatim."""
    data: bytes


@dataclass
class DataLabel(Statement):
    """`data .NAME`: the two-byte value of a label, little-endian."""
    name: str


@dataclass
class CodeMarker(Statement):
    """`.NAME` alone on a line: binds NAME to the current code address."""
    name: str


@dataclass
class Instruction(Statement):
    """
    Machine instruction statement.

    Attributes:
        mnemonic: The mnemonic as written (lookup is case-insensitive)
        operand: None, a literal UInt, or a LabelRef
        offset: Byte added to the operand; literal int or LabelRef
    """
    mnemonic: str
    operand: Operand = None
    offset: Offset = 0


# =============================================================================
# Tokenizer
# =============================================================================

def _hex(text: str, line: int) -> UInt:
    try:
        return parse_hex(text)
    except ValueError:
        raise AssemblySyntaxError(_HEX_ERROR, line) from None


def _is_label(word: str) -> bool:
    return word.startswith(LABEL_PREFIX)


def tokenize_line(text: str, line: int = 0) -> Statement:
    """
    Tokenize a single source line.

    Args:
        text: The raw source line
        line: 1-based line number, attached to the statement and errors

    Returns:
        The Statement for this line

    Raises:
        AssemblySyntaxError: If the line is malformed
    """
    words = text.split(COMMENT_CHAR, 1)[0].split()
    if not words:
        return Blank(line)

    keyword = words[0]

    if keyword == "org":
        if len(words) != 2:
            raise AssemblySyntaxError("org takes one argument", line)
        value = _hex(words[1], line)
        if value.is_byte:
            raise AssemblySyntaxError("org must be a 2-byte address", line)
        return Org(line, value.value)

    if keyword == "label":
        if len(words) != 3:
            raise AssemblySyntaxError("label takes two arguments", line)
        return LabelDef(line, words[1], _hex(words[2], line))

    if keyword == "zbyte":
        if len(words) == 2:
            return ZeroPageDef(line, words[1])
        if len(words) == 3:
            size = _hex(words[2], line)
            if size.is_word:
                raise AssemblySyntaxError(
                    "zbyte array size must be a single byte (< 0x100)", line
                )
            return ZeroPageDef(line, words[1], size.value)
        raise AssemblySyntaxError("zbyte takes one or two arguments", line)

    if keyword == "data":
        if len(words) != 2:
            raise AssemblySyntaxError("data takes one argument", line)
        if _is_label(words[1]):
            return DataLabel(line, words[1][1:])
        if not re.fullmatch(r"(?:[0-9a-fA-F]{2})+", words[1]):
            raise AssemblySyntaxError("data must be a valid hex string", line)
        return DataBytes(line, bytes.fromhex(words[1]))

    if _is_label(keyword):
        if len(words) != 1:
            raise AssemblySyntaxError(
                "code markers must be on a line by themselves", line
            )
        if len(keyword) == 1:
            raise AssemblySyntaxError("code marker needs a name", line)
        return CodeMarker(line, keyword[1:])

    # Anything else is an instruction
    if len(words) > 3:
        raise AssemblySyntaxError(
            "instruction takes at most an operand and an offset", line
        )

    operand: Operand = None
    if len(words) > 1:
        if _is_label(words[1]):
            operand = LabelRef(words[1][1:])
        else:
            operand = _hex(words[1], line)

    offset: Offset = 0
    if len(words) > 2:
        if _is_label(words[2]):
            offset = LabelRef(words[2][1:])
        else:
            value = _hex(words[2], line)
            if value.is_word:
                raise AssemblySyntaxError(
                    "offset must be a single byte (< 0x100)", line
                )
            offset = value.value

    return Instruction(line, keyword, operand, offset)


def parse_source(source: str) -> list[Statement]:
    """
    Tokenize a complete source text.

    Every line yields exactly one statement, so statement i carries line
    number i + 1.

    Raises:
        AssemblySyntaxError: On the first malformed line
    """
    return [
        tokenize_line(text, number)
        for number, text in enumerate(source.splitlines(), start=1)
    ]
