"""
MOS 6502 Code Generator
=======================

This module generates 6502 machine code from SASM source text. It
implements a two-pass assembly process:

Pass 1 (Tokenize and Measure)
-----------------------------
- Tokenize each source line into a Statement
- Track the code address (moved by `org`) and the code position
  (offset into the output buffer, never moved by `org`)
- Bind labels, zero-page bytes and code markers in the label table
- Record every `org` in the address map

Pass 2 (Resolve and Emit)
-------------------------
- Resolve label references using the finished label table
- Check every operand against the width the instruction expects
- Compute signed displacements for relative branches
- Emit opcode and operand bytes (little-endian)

Address Map
-----------
The address map pairs each `org` address with the buffer position of
the first byte emitted after it. An implicit {$0000: 0} entry exists
so that source without any `org` assembles at address zero; an `org`
seen before any byte is emitted replaces it. The output formatter uses
the map to fill the gaps between org blocks.

Any error aborts the run. Errors carry the 1-based source line number.
"""

import difflib
import logging
from typing import Optional

from sasm.assembler.parser import (
    Blank,
    CodeMarker,
    DataBytes,
    DataLabel,
    Instruction,
    LabelDef,
    LabelRef,
    Operand,
    Offset,
    Org,
    Statement,
    UInt,
    ZeroPageDef,
    tokenize_line,
)
from sasm.assembler.zeropage import System, ZeroPageAllocator
from sasm.cpu import OperandWidth, get_instruction, is_relative_branch
from sasm.errors import (
    AssemblerError,
    BranchRangeError,
    DirectiveError,
    DuplicateSymbolError,
    InternalError,
    OperandError,
    UndefinedSymbolError,
    UnknownMnemonicError,
    ZeroPageError,
)

logger = logging.getLogger(__name__)

# One past the highest 6502 address
ADDRESS_SPACE_END = 0x10000

# Signed range of a relative branch displacement
BRANCH_MIN = -128
BRANCH_MAX = 127


class CodeGenerator:
    """
    Two-pass 6502 code generator.

    The label table, address map, zero-page allocator and code buffer
    hold the results of the latest call to generate(); each call starts
    them afresh, so successive runs on one instance never share state.

    Usage:
        codegen = CodeGenerator(System.APPLE)
        code = codegen.generate("ldai 41\\nstaa 0400\\n")
        codegen.get_address_map()   # {0: 0}
    """

    def __init__(self, system: System = System.APPLE):
        """
        Initialize the code generator.

        Args:
            system: Target machine, selects the zero-page policy used by
                    `zbyte`
        """
        self._zero_page = ZeroPageAllocator(system)
        self._statements: list[Statement] = []
        self._symbols: dict[str, UInt] = {}
        self._address_map: dict[int, int] = {0: 0}
        self._code = bytearray()

        # Address where the current byte will live in memory
        self._code_addr = 0
        # Offset of the current byte in the output buffer
        self._code_pos = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, source: str) -> bytes:
        """
        Assemble source text into machine code.

        This is the main entry point for code generation.

        Args:
            source: SASM source text

        Returns:
            Generated machine code (without gap filling)

        Raises:
            AssemblerError: On the first error found in the source
        """
        # Reset state for fresh assembly
        self._zero_page = ZeroPageAllocator(self._zero_page.system)
        self._statements.clear()
        self._symbols.clear()
        self._code.clear()

        self._pass1(source)
        logger.debug(
            f"Pass 1 complete: {len(self._statements)} lines, "
            f"{len(self._symbols)} labels, {self._code_pos} bytes"
        )

        try:
            self._pass2()
        except AssemblerError:
            self._code = bytearray()
            raise

        if len(self._code) != self._code_pos:
            raise InternalError(
                f"pass 2 emitted {len(self._code)} bytes, "
                f"pass 1 measured {self._code_pos}"
            )
        logger.debug(f"Pass 2 complete: {len(self._code)} bytes emitted")

        return bytes(self._code)

    def get_code(self) -> bytes:
        """Get the generated machine code."""
        return bytes(self._code)

    def get_address_map(self) -> dict[int, int]:
        """Get the org address -> buffer position map, in address order."""
        return dict(sorted(self._address_map.items()))

    def get_symbols(self) -> dict[str, UInt]:
        """Get the label table."""
        return dict(self._symbols)

    def get_statements(self) -> list[Statement]:
        """Get the tokenized source lines, one per input line."""
        return list(self._statements)

    # =========================================================================
    # Pass 1: Tokenize and Measure
    # =========================================================================

    def _pass1(self, source: str) -> None:
        """
        First pass: tokenize, bind labels and measure code.

        Lines are tokenized one at a time, so a syntax error on a later
        line never hides an earlier measuring error.
        """
        self._address_map = {0: 0}
        self._code_addr = 0
        self._code_pos = 0

        for number, text in enumerate(source.splitlines(), start=1):
            stmt = tokenize_line(text, number)
            self._pass1_statement(stmt)
            self._statements.append(stmt)

    def _pass1_statement(self, stmt: Statement) -> None:
        """Process a single statement in pass 1."""
        if isinstance(stmt, Blank):
            return

        if isinstance(stmt, Org):
            if stmt.address < self._code_addr:
                raise DirectiveError("org smaller than code address", stmt.line)

            # An org before any code replaces the implicit org 0000
            if self._code_pos == 0:
                self._address_map.clear()

            self._address_map[stmt.address] = self._code_pos
            self._code_addr = stmt.address
            logger.debug(f"Line {stmt.line}: org ${stmt.address:04X} at position {self._code_pos}")

        elif isinstance(stmt, LabelDef):
            self._define_label(stmt.name, stmt.value, stmt.line)

        elif isinstance(stmt, ZeroPageDef):
            if stmt.name in self._symbols:
                raise DuplicateSymbolError(stmt.name, stmt.line)
            try:
                address = self._zero_page.alloc(stmt.size)
            except ZeroPageError as e:
                raise DirectiveError(str(e), stmt.line) from e
            self._define_label(stmt.name, UInt.byte(address), stmt.line)

        elif isinstance(stmt, CodeMarker):
            if self._code_addr >= ADDRESS_SPACE_END:
                raise DirectiveError("code address exceeds 0xffff", stmt.line)
            self._define_label(stmt.name, UInt.word(self._code_addr), stmt.line)

        elif isinstance(stmt, DataBytes):
            self._advance(len(stmt.data), stmt.line)

        elif isinstance(stmt, DataLabel):
            # Assumed two bytes; pass 2 rejects one-byte labels
            self._advance(2, stmt.line)

        elif isinstance(stmt, Instruction):
            record = get_instruction(stmt.mnemonic)
            if record is None:
                raise UnknownMnemonicError(stmt.mnemonic, stmt.line)
            self._advance(record.size, stmt.line)

    def _define_label(self, name: str, value: UInt, line: int) -> None:
        """Bind a name in the label table."""
        if name in self._symbols:
            raise DuplicateSymbolError(name, line)
        self._symbols[name] = value
        logger.debug(f"Line {line}: label {name} = {value.value:0{value.width.size * 2}x}")

    def _advance(self, size: int, line: int) -> None:
        """Move both counters past `size` bytes of code or data."""
        self._code_addr += size
        self._code_pos += size
        if self._code_addr > ADDRESS_SPACE_END:
            raise DirectiveError("code address exceeds 0xffff", line)

    # =========================================================================
    # Pass 2: Resolve and Emit
    # =========================================================================

    def _pass2(self) -> None:
        """
        Second pass: generate machine code.

        The code address is tracked again from zero so that relative
        branches can be measured from the end of each instruction.
        """
        self._code = bytearray()
        self._code_addr = 0

        for stmt in self._statements:
            start = len(self._code)
            self._pass2_statement(stmt)
            self._code_addr += len(self._code) - start

    def _pass2_statement(self, stmt: Statement) -> None:
        """Process a single statement in pass 2."""
        if isinstance(stmt, Org):
            self._code_addr = stmt.address

        elif isinstance(stmt, DataBytes):
            self._code.extend(stmt.data)

        elif isinstance(stmt, DataLabel):
            value = self._lookup(stmt.name, stmt.line)
            if not value.is_word:
                raise DirectiveError("labels used for data must be two bytes", stmt.line)
            self._code.extend(value.to_bytes())

        elif isinstance(stmt, Instruction):
            self._generate_instruction(stmt)

        # Blank lines, labels and code markers emit nothing

    def _generate_instruction(self, inst: Instruction) -> None:
        """Generate machine code for an instruction."""
        record = get_instruction(inst.mnemonic)
        if record is None:
            raise InternalError(f"mnemonic {inst.mnemonic} accepted in pass 1 only")

        self._emit_byte(record.opcode)

        offset = self._resolve_offset(inst.offset, inst.line)
        operand = self._resolve_operand(inst.operand, inst.line)

        if operand is None:
            if record.width is OperandWidth.BYTE:
                raise OperandError("instruction requires a single-byte operand", inst.line)
            if record.width is OperandWidth.WORD:
                raise OperandError("instruction requires a two-byte operand", inst.line)
            return

        if record.width is OperandWidth.NONE:
            raise OperandError("instruction does not require an operand", inst.line)

        target = operand.value + offset

        if record.width is OperandWidth.BYTE:
            if operand.is_byte:
                # A literal one-byte operand to a branch is taken as the
                # displacement itself
                if target > 0xFF:
                    raise OperandError("operand plus offset is > 0xff", inst.line)
                self._emit_byte(target)
            elif is_relative_branch(inst.mnemonic):
                self._emit_branch(target, inst.line)
            else:
                raise OperandError("instruction requires a single-byte operand", inst.line)
            return

        # Two-byte operand
        if operand.is_byte:
            raise OperandError("instruction requires a two-byte operand", inst.line)
        if target > 0xFFFF:
            raise OperandError("operand plus offset is > 0xffff", inst.line)
        self._emit_word(target)

    def _emit_branch(self, target: int, line: int) -> None:
        """
        Emit the displacement byte of a relative branch.

        The displacement is measured from the address following the
        branch. The opcode is already in the buffer, so that address is
        the current code address plus the opcode and displacement bytes.
        """
        if target > 0xFFFF:
            raise OperandError("operand plus offset is > 0xffff", line)

        diff = target - (self._code_addr + 2)
        if diff < BRANCH_MIN or diff > BRANCH_MAX:
            raise BranchRangeError(diff, line)
        self._emit_byte(diff & 0xFF)

    def _resolve_offset(self, offset: Offset, line: int) -> int:
        """Resolve an instruction offset to a byte value."""
        if isinstance(offset, LabelRef):
            value = self._lookup(offset.name, line)
            if not value.is_byte:
                raise OperandError("offset must be a single byte", line)
            return value.value
        return offset

    def _resolve_operand(self, operand: Operand, line: int) -> Optional[UInt]:
        """Replace a label reference operand by the label's value."""
        if isinstance(operand, LabelRef):
            operand = self._lookup(operand.name, line)
        if operand is not None and not isinstance(operand, UInt):
            raise InternalError(f"unresolved operand {operand!r} on line {line}")
        return operand

    def _lookup(self, name: str, line: int) -> UInt:
        """Look up a label bound in pass 1."""
        try:
            return self._symbols[name]
        except KeyError:
            similar = difflib.get_close_matches(name, list(self._symbols), n=3)
            raise UndefinedSymbolError(name, line, similar) from None

    # =========================================================================
    # Code Emission Helpers
    # =========================================================================

    def _emit_byte(self, value: int) -> None:
        """Emit a single byte to the output."""
        self._code.append(value & 0xFF)

    def _emit_word(self, value: int) -> None:
        """Emit a 16-bit word to the output (little-endian)."""
        self._code.append(value & 0xFF)
        self._code.append((value >> 8) & 0xFF)
