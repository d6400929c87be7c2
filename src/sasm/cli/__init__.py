"""
SASM Command-Line Interface
===========================

This package provides the command-line tools of the toolchain:

- **sasm**: 6502 assembler
- **dtsasm**: 6502 disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["sasm", "dtsasm"]
