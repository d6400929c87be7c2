"""
SASM Error Hierarchy
====================

This module defines the exception hierarchy for the whole toolchain.
All user-facing exceptions inherit from SasmError, allowing callers to
catch every recoverable failure with a single except clause.

Exception Hierarchy
-------------------
SasmError (base)
├── AssemblerError (assembler-related, carries a source line number)
│   ├── AssemblySyntaxError - malformed source line or literal
│   ├── UnknownMnemonicError - mnemonic not in the instruction table
│   ├── DuplicateSymbolError - label bound more than once
│   ├── UndefinedSymbolError - reference to a label that is never bound
│   ├── OperandError - operand/offset does not fit the instruction
│   ├── BranchRangeError - relative branch target too far away
│   └── DirectiveError - error in org/data/zbyte directive
├── ZeroPageError - zero-page allocator failure
├── DisassemblerError - unusable disassembler input
└── ConfigError - invalid tool configuration

InternalError is not a SasmError. It signals a broken
invariant between the two assembler passes (or inside the disassembler)
and is never part of normal error reporting.

Error messages follow this format:
    <line>: <description>
    hint: suggestion for fixing (when available)
"""

from typing import Optional


# =============================================================================
# Base Exception Classes
# =============================================================================

class SasmError(Exception):
    """
    Base exception for all recoverable toolchain errors.

        try:
            assemble(source)
        except SasmError as e:
            print(f"Error: {e}")
    """
    pass


class InternalError(RuntimeError):
    """
    A consistency check inside the toolchain failed.

    Examples:
        - a label recorded in pass 1 missing in pass 2
        - a label operand surviving label resolution
        - a negative address computed while disassembling
    """
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SasmError):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        line: 1-based source line where the error occurred (0 if unknown)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(self, message: str, line: int = 0, hint: Optional[str] = None):
        self.message = message
        self.line = line
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with line number and hint.

        Example output:
            12: undefined label 'prnt'
            hint: did you mean 'print'?
        """
        text = f"{self.line}: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Wrong number of arguments to a keyword
        - Invalid hexadecimal literal
        - Code marker sharing its line with other words
    """
    pass


class UnknownMnemonicError(AssemblerError):
    """Instruction mnemonic not found in the instruction table."""

    def __init__(self, mnemonic: str, line: int = 0):
        self.mnemonic = mnemonic
        super().__init__("mnemonic not found", line)


class DuplicateSymbolError(AssemblerError):
    """
    Label bound more than once.

    Labels, zero-page bytes and code markers share one namespace, so
    `label x 10` followed by `.x` is also a duplicate.
    """

    def __init__(self, symbol: str, line: int = 0):
        self.symbol = symbol
        super().__init__(f"label repeated: {symbol}", line)


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that no line of the source binds.

    When similar names exist the error carries a hint listing up to
    three of them, helping to catch typos.
    """

    def __init__(
        self,
        symbol: str,
        line: int = 0,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(f"undefined label '{symbol}'", line, hint=hint)


class OperandError(AssemblerError):
    """
    Operand or offset incompatible with the instruction.

    Examples:
        clc ff          ; Error: instruction does not require an operand
        ldyi cafe       ; Error: instruction requires a single-byte operand
        staz fe 2       ; Error: operand plus offset is > 0xff
    """
    pass


class BranchRangeError(AssemblerError):
    """
    Relative branch target out of range.

    6502 branches take a signed 8-bit displacement measured from the
    address following the branch, limiting the reach to -128..+127 bytes.

    Attributes:
        offset: The displacement that did not fit
    """

    def __init__(self, offset: int, line: int = 0):
        self.offset = offset
        super().__init__("relative branch is too far from target", line)


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Examples:
        - org lower than the address already reached
        - data referencing a one-byte label
        - zbyte allocation that the zero page cannot satisfy
    """
    pass


# =============================================================================
# Other Exceptions
# =============================================================================

class ZeroPageError(SasmError):
    """
    Zero-page allocation failed.

    Raised when zero bytes are requested or when the remaining
    zero-page capacity of the selected system is exhausted.
    """
    pass


class DisassemblerError(SasmError):
    """
    Disassembler input cannot be processed.

    Raised for undecodable hex-string input, or when the buffer would
    extend past the top of the 16-bit address space.
    """
    pass


class ConfigError(SasmError):
    """Invalid system, output format or option combination."""
    pass
