"""
MOS 6502 Disassembler
=====================

Disassembles a raw 6502 memory image into SASM source text. This is the
inverse operation of the assembler: assembling the output reproduces
the input bytes.

A memory image carries no marker separating code from data, so the
disassembler has to guess. It does so in four steps:

1. **Instruction sizes**: every byte is looked up as an opcode, giving
   the size of the instruction that would start there (0 if the byte
   is not a documented opcode).

2. **Code regions**: from every offset a candidate region is grown by
   hopping from instruction to instruction until an invalid opcode or
   the end of the buffer. Candidates longer than the minimum region
   size are accepted longest first, skipping any that overlap a region
   already accepted.

3. **Rendering**: regions become instruction lines, everything else
   `data` lines. Absolute operands and branch targets that point into
   the image are rendered as label references.

4. **Labels**: a code marker is inserted before each line whose address
   is a referenced target. A target in the middle of a line cannot be
   labelled; it is reported as a warning and referenced by address.

Usage:
    result = disassemble(image, start_address=0x0800)
    print(result.text)
    for warning in result.warnings:
        print(warning)
"""

import bisect
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from sasm.cpu import get_instruction_by_opcode, instruction_size_from_opcode, is_relative_branch
from sasm.errors import DisassemblerError, InternalError

logger = logging.getLogger(__name__)

# Default minimum code region length
DEFAULT_MIN_REGION_SIZE = 10

# Bytes per `data` line
DATA_BYTES_PER_LINE = 16

# One past the highest 6502 address
ADDRESS_SPACE_END = 0x10000

INDENT = "    "

# (start, end) byte offsets, end exclusive
Region = tuple[int, int]


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledLine:
    """
    One line of disassembly output.

    Attributes:
        address: Memory address of the line's first byte
        kind: "label", "code" or "data"
        raw_bytes: Bytes covered by the line (empty for labels)
        mnemonic: Instruction mnemonic, "data", or "" for labels
        operand: Rendered operand (label name for label lines)
        target: Absolute address referenced by the operand, if any
    """
    address: int
    kind: str
    raw_bytes: bytes = b""
    mnemonic: str = ""
    operand: str = ""
    target: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.raw_bytes)

    def __str__(self) -> str:
        """Format as a SASM source line."""
        if self.kind == "label":
            return f".{self.operand}"
        if self.operand:
            return f"{INDENT}{self.mnemonic} {self.operand}"
        return f"{INDENT}{self.mnemonic}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"{self.address:04x}",
            "address_int": self.address,
            "kind": self.kind,
            "bytes": self.raw_bytes.hex(),
            "text": str(self).strip(),
            "target": self.target,
        }


@dataclass
class DisassemblyResult:
    """
    Output of a disassembly run.

    Attributes:
        text: SASM source, starting with an `org` line
        warnings: Labels that could not be placed
        regions: Selected code regions as (start, end) offsets
        lines: All rendered lines, labels included, in output order
    """
    text: str
    warnings: list[str] = field(default_factory=list)
    regions: list[Region] = field(default_factory=list)
    lines: list[DisassembledLine] = field(default_factory=list)


# =============================================================================
# Code Region Inference
# =============================================================================

def instruction_sizes(data: bytes) -> list[int]:
    """Size of the instruction starting at each offset (0 if invalid)."""
    return [instruction_size_from_opcode(b) or 0 for b in data]


def candidate_regions(sizes: list[int]) -> list[Region]:
    """
    Grow a candidate code region from every offset.

    Starting at each offset, instruction sizes are followed until an
    invalid opcode, the end of the buffer, or an instruction that would
    run past the end. Offsets where no instruction fits yield nothing.

    The walk from an offset continues exactly as the walk from the next
    instruction does, so the end of every walk is computed once, from the
    last offset backwards.

    Returns:
        Non-empty (start, end) intervals in ascending start order
    """
    length = len(sizes)
    ends = [0] * (length + 1)
    ends[length] = length
    for start in range(length - 1, -1, -1):
        size = sizes[start]
        if size and start + size <= length:
            ends[start] = ends[start + size]
        else:
            ends[start] = start
    return [(start, ends[start]) for start in range(length) if ends[start] > start]


def _overlaps_any(region: Region, starts: list[int], selected: list[Region]) -> bool:
    """Check a region against disjoint regions sorted by start."""
    index = bisect.bisect_right(starts, region[0])
    if index > 0 and selected[index - 1][1] > region[0]:
        return True
    return index < len(selected) and selected[index][0] < region[1]


def select_code_regions(sizes: list[int], min_size: int = DEFAULT_MIN_REGION_SIZE) -> list[Region]:
    """
    Choose non-overlapping code regions.

    Candidates longer than `min_size` are taken longest first; equal
    lengths keep their start order. A candidate overlapping one already
    taken is dropped.

    Returns:
        Selected regions in ascending start order
    """
    candidates = [r for r in candidate_regions(sizes) if r[1] - r[0] > min_size]
    candidates.sort(key=lambda r: r[1] - r[0], reverse=True)
    logger.debug(f"{len(candidates)} candidate regions longer than {min_size} bytes")

    # Kept sorted by start
    starts: list[int] = []
    selected: list[Region] = []
    for region in candidates:
        if not _overlaps_any(region, starts, selected):
            index = bisect.bisect_right(starts, region[0])
            starts.insert(index, region[0])
            selected.insert(index, region)

    for start, end in selected:
        logger.debug(f"Code region {start:04x}-{end:04x} ({end - start} bytes)")
    return selected


# =============================================================================
# Disassembler
# =============================================================================

class Disassembler:
    """
    Disassembler for raw 6502 memory images.

    Attributes:
        min_region_size: Code regions must be longer than this many bytes
    """

    def __init__(self, min_region_size: int = DEFAULT_MIN_REGION_SIZE):
        self.min_region_size = min_region_size

    def disassemble(self, data: bytes, start_address: int = 0) -> DisassemblyResult:
        """
        Disassemble a memory image.

        Args:
            data: The image bytes
            start_address: Memory address of the first byte

        Returns:
            DisassemblyResult with the SASM text and any warnings

        Raises:
            DisassemblerError: If the image does not fit the address space
        """
        if not 0 <= start_address < ADDRESS_SPACE_END:
            raise DisassemblerError(f"Invalid starting address: {start_address:#x}")
        if start_address + len(data) > ADDRESS_SPACE_END:
            raise DisassemblerError(
                f"{len(data)} bytes at {start_address:04x} extend past address ffff"
            )

        regions = select_code_regions(instruction_sizes(data), self.min_region_size)
        lines = self._render(data, start_address, regions)
        lines, warnings, placed = self._place_labels(lines)

        for line in lines:
            if line.target is not None:
                line.operand = self._target_text(line, placed)

        text = "".join(f"{line}\n" for line in lines)
        text = f"org {start_address:04x}\n" + text
        return DisassemblyResult(text, warnings, regions, lines)

    def disassemble_hex(self, hex_string: str, start_address: int = 0) -> DisassemblyResult:
        """
        Disassemble an image given as a string of hex digit pairs.

        Raises:
            DisassemblerError: If the string is not valid hex
        """
        hex_string = hex_string.strip()
        if not re.fullmatch(r"(?:[0-9a-fA-F]{2})*", hex_string):
            raise DisassemblerError("Cannot decode input string")
        return self.disassemble(bytes.fromhex(hex_string), start_address)

    # =========================================================================
    # Rendering
    # =========================================================================

    def _render(self, data: bytes, start_address: int, regions: list[Region]) -> list[DisassembledLine]:
        """Render regions as instructions and the bytes around them as data."""
        lines: list[DisassembledLine] = []
        end_address = start_address + len(data)
        offset = 0

        for start, end in regions:
            lines.extend(self._data_lines(data[offset:start], start_address + offset))
            position = start
            while position < end:
                line = self._instruction_line(data, position, start_address, end_address)
                lines.append(line)
                position += line.size
            offset = end

        lines.extend(self._data_lines(data[offset:], start_address + offset))
        return lines

    def _data_lines(self, chunk: bytes, address: int) -> list[DisassembledLine]:
        return [
            DisassembledLine(
                address=address + index,
                kind="data",
                raw_bytes=chunk[index:index + DATA_BYTES_PER_LINE],
                mnemonic="data",
                operand=chunk[index:index + DATA_BYTES_PER_LINE].hex(),
            )
            for index in range(0, len(chunk), DATA_BYTES_PER_LINE)
        ]

    def _instruction_line(
        self,
        data: bytes,
        position: int,
        start_address: int,
        end_address: int,
    ) -> DisassembledLine:
        """Decode the instruction at `position`."""
        record = get_instruction_by_opcode(data[position])
        if record is None:
            raise InternalError(f"invalid opcode {data[position]:02x} inside a code region")

        address = start_address + position
        raw = data[position:position + record.size]
        line = DisassembledLine(address, "code", raw, record.mnemonic)

        if record.size == 3:
            target = int.from_bytes(raw[1:3], "little")
            if start_address <= target < end_address:
                line.target = target
            else:
                line.operand = f"{target:04x}"

        elif record.size == 2 and is_relative_branch(record.mnemonic):
            displacement = raw[1] - 0x100 if raw[1] & 0x80 else raw[1]
            target = address + record.size + displacement
            if target < 0:
                raise InternalError(f"branch at {address:04x} targets negative address {target}")
            if start_address <= target < end_address:
                line.target = target
            elif target < ADDRESS_SPACE_END:
                line.operand = f"{target:04x}"
            else:
                # Past ffff only the displacement itself can be written
                line.operand = f"{raw[1]:02x}"

        elif record.size == 2:
            line.operand = f"{raw[1]:02x}"

        return line

    # =========================================================================
    # Labels
    # =========================================================================

    def _place_labels(
        self,
        lines: list[DisassembledLine],
    ) -> tuple[list[DisassembledLine], list[str], set[int]]:
        """
        Insert label lines before the lines at referenced addresses.

        Returns:
            (lines with labels, warnings, addresses that received a label)
        """
        pending = sorted({line.target for line in lines if line.target is not None})
        result: list[DisassembledLine] = []
        warnings: list[str] = []
        placed: set[int] = set()
        index = 0
        previous: Optional[DisassembledLine] = None

        for line in lines:
            while index < len(pending) and pending[index] < line.address:
                warnings.append(self._misaligned(pending[index], previous))
                index += 1
            if index < len(pending) and pending[index] == line.address:
                result.append(DisassembledLine(line.address, "label", operand=_label_name(line.address)))
                placed.add(line.address)
                logger.debug(f"Label {_label_name(line.address)} placed")
                index += 1
            result.append(line)
            previous = line

        for target in pending[index:]:
            warnings.append(self._misaligned(target, previous))

        return result, warnings, placed

    def _misaligned(self, target: int, line: Optional[DisassembledLine]) -> str:
        if line is None:
            raise InternalError(f"label target {target:04x} precedes the image")
        message = (
            f"label target {target:04x} falls inside the line at "
            f"{line.address:04x}; label omitted"
        )
        logger.warning(message)
        return message

    def _target_text(self, line: DisassembledLine, placed: set[int]) -> str:
        if line.target in placed:
            return "." + _label_name(line.target)
        return f"{line.target:04x}"


def _label_name(address: int) -> str:
    return f"l{address:04x}"


# =============================================================================
# Convenience Functions
# =============================================================================

def disassemble(
    data: bytes,
    start_address: int = 0,
    min_region_size: int = DEFAULT_MIN_REGION_SIZE,
) -> DisassemblyResult:
    """
    Convenience function to disassemble a memory image.

    Args:
        data: The image bytes
        start_address: Memory address of the first byte
        min_region_size: Code regions must be longer than this

    Returns:
        DisassemblyResult
    """
    return Disassembler(min_region_size).disassemble(data, start_address)
