"""
SASM Configuration
==================

Run configuration shared by the command-line tools. Configuration can
come from:
- Default values (defined here)
- Environment variables (SasmConfig.from_env)
- Command-line options, which the CLI applies on top

Settings only used by one tool are ignored by the other: the system and
output format matter to the assembler, the start address and minimum
region size to the disassembler.
"""

from dataclasses import dataclass
import os

from sasm.assembler.output import CodeFormat
from sasm.assembler.zeropage import System
from sasm.disassembler.mos6502 import DEFAULT_MIN_REGION_SIZE
from sasm.errors import ConfigError


@dataclass
class SasmConfig:
    """
    Configuration for one assembler or disassembler run.

    Attributes:
        system: Target machine (default: Apple II)
        code_format: Assembler output format (default: hex string)
        start_address: Address of the first disassembled byte (default: 0)
        min_region_size: Code regions must be longer than this (default: 10)
    """

    system: System = System.APPLE
    code_format: CodeFormat = CodeFormat.HEX
    start_address: int = 0
    min_region_size: int = DEFAULT_MIN_REGION_SIZE

    @classmethod
    def from_env(cls) -> "SasmConfig":
        """
        Create SasmConfig from environment variables.

        Environment variables (all optional):
            SASM_SYSTEM: Target system ("apple" or "atari")
            SASM_FORMAT: Output format ("hex", "apple" or "bin")
            SASM_START_ADDRESS: Disassembly start address in hex
            SASM_MIN_REGION_SIZE: Minimum code region size (integer)

        Values that cannot be parsed are ignored.

        Returns:
            SasmConfig with values from environment variables
        """
        config = cls()

        if system := os.environ.get("SASM_SYSTEM"):
            try:
                config.system = System.from_name(system)
            except ConfigError:
                pass  # Keep default

        if code_format := os.environ.get("SASM_FORMAT"):
            try:
                config.code_format = CodeFormat.from_name(code_format)
            except ConfigError:
                pass  # Keep default

        if address := os.environ.get("SASM_START_ADDRESS"):
            try:
                config.start_address = int(address, 16)
            except ValueError:
                pass  # Keep default

        if size := os.environ.get("SASM_MIN_REGION_SIZE"):
            try:
                config.min_region_size = int(size)
            except ValueError:
                pass  # Keep default

        return config

    def validate(self) -> None:
        """
        Check the configuration for invalid values and combinations.

        Raises:
            ConfigError: On the first problem found
        """
        if self.system is System.ATARI and self.code_format is CodeFormat.APPLE_SM:
            raise ConfigError("Apple System Monitor output not compatible with Atari")
        if not 0 <= self.start_address <= 0xFFFF:
            raise ConfigError("Invalid starting address")
        if self.min_region_size < 0:
            raise ConfigError("Invalid minimum region size")
