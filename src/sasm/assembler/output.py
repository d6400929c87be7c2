"""
Assembler Output Formats
========================

Renders assembled code, together with its address map, in one of three
formats:

Hex
---
A single line of lower-case hex digits. The gap between the end of one
org block and the start of the next is filled with `ff` bytes, so the
string can be loaded as one contiguous image.

Binary
------
The same image as raw bytes, gaps filled with $FF.

Apple System Monitor
--------------------
Text that can be typed (or pasted) into the Apple II monitor. Each org
block is written as its own run of store commands, so no filling is
needed:

```
4000:A2 00 E8 F0 FD 4C 10 40
4010:A0 00 C8 F0 FD F0 EB
```

A monitor input line holds at most 42 bytes.
"""

from enum import Enum
from typing import Union

from sasm.errors import ConfigError, InternalError


# Filler byte for the gaps between org blocks
FILL_BYTE = 0xFF

# Bytes per Apple System Monitor line
APPLE_SM_BYTES_PER_LINE = 42

# Rendered output: text for Hex and Apple System Monitor, bytes for Binary
Code = Union[str, bytes]


class CodeFormat(Enum):
    """Output format for assembled code."""
    HEX = "hex"
    APPLE_SM = "apple"
    BINARY = "bin"

    @classmethod
    def from_name(cls, name: str) -> "CodeFormat":
        """
        Look up a format by name.

        Only the first letter counts ("h", "a" or "b", any case), so
        "hex", "Apple" and "binary" are all accepted.

        Raises:
            ConfigError: If the name is empty or matches no format
        """
        for fmt in cls:
            if name and name[0].lower() == fmt.value[0]:
                return fmt
        raise ConfigError("Unrecognized code format")

    @property
    def is_text(self) -> bool:
        """True if this format renders to a str."""
        return self is not CodeFormat.BINARY

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Org Blocks
# =============================================================================

def _org_blocks(code: bytes, address_map: dict[int, int]):
    """
    Split code into org blocks.

    Yields (start_address, end_address, block_bytes) for each block. The
    end address of a block is the start of the next one, so
    `end_address - start_address - len(block_bytes)` is the gap that
    follows it. The last block ends right after its bytes.
    """
    if not address_map:
        raise InternalError("no org found for assembled code")

    entries = sorted(address_map.items())
    for (address, position), (next_address, next_position) in zip(entries, entries[1:]):
        yield address, next_address, code[position:next_position]

    address, position = entries[-1]
    yield address, address + len(code) - position, code[position:]


def _hex_block(start: int, end: int, block: bytes) -> str:
    return block.hex() + "ff" * (end - start - len(block))


def _binary_block(start: int, end: int, block: bytes) -> bytes:
    return block + bytes([FILL_BYTE]) * (end - start - len(block))


def _apple_sm_block(start: int, end: int, block: bytes) -> str:
    lines = []
    for index in range(0, len(block), APPLE_SM_BYTES_PER_LINE):
        chunk = block[index:index + APPLE_SM_BYTES_PER_LINE]
        values = " ".join(f"{b:02X}" for b in chunk)
        lines.append(f"{start + index:04X}:{values}\n")
    return "".join(lines)


# =============================================================================
# Public Interface
# =============================================================================

def bytes_to_output(
    code: bytes,
    address_map: dict[int, int],
    fmt: CodeFormat = CodeFormat.HEX,
) -> Code:
    """
    Render assembled code in the given format.

    Args:
        code: The assembled bytes, without any gap filling
        address_map: org address -> buffer position (see CodeGenerator)
        fmt: Output format

    Returns:
        str for HEX and APPLE_SM, bytes for BINARY
    """
    blocks = _org_blocks(code, address_map)

    if fmt is CodeFormat.HEX:
        return "".join(_hex_block(*block) for block in blocks)
    if fmt is CodeFormat.APPLE_SM:
        return "".join(_apple_sm_block(*block) for block in blocks)
    return b"".join(_binary_block(*block) for block in blocks)
