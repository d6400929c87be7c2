"""
Zero Page Allocation
====================

The 6502 zero page ($00-$FF) supports shorter and faster addressing
modes, so SASM lets a program reserve named zero-page bytes with the
`zbyte` keyword instead of hard-coding addresses.

Which part of the zero page is free depends on the target machine:

- **Apple II**: the whole page is handed out from the top down. The
  first single-byte allocation is $FF and the page may be consumed
  completely, down to $00.
- **Atari 2600**: $00-$7F are TIA registers, so allocation starts at
  $80 and grows upward to $FF.

Allocations are never freed.
"""

from enum import Enum

from sasm.errors import ConfigError, ZeroPageError


ZERO_PAGE_SIZE = 0x100

# First free zero-page byte on the Atari 2600 (below it: TIA registers)
ATARI_ZERO_PAGE_START = 0x80


class System(Enum):
    """Target machine, selecting the zero-page allocation policy."""
    APPLE = "apple"
    ATARI = "atari"

    @classmethod
    def from_name(cls, name: str) -> "System":
        """
        Look up a system by name.

        Any string starting with "apple" or "atari" is accepted, ignoring
        case, so "Apple2" and "atari2600" both work.

        Raises:
            ConfigError: If the name matches no supported system
        """
        lowered = name.lower()
        for system in cls:
            if lowered.startswith(system.value):
                return system
        raise ConfigError("Unrecognized or unsupported system")

    def __str__(self) -> str:
        return self.value


class ZeroPageAllocator:
    """
    Monotonic zero-page allocator for one assembly run.

    Usage:
        zpm = ZeroPageAllocator(System.ATARI)
        zpm.alloc(1)    # 0x80
        zpm.alloc(4)    # 0x81
        zpm.alloc(1)    # 0x85
    """

    def __init__(self, system: System = System.APPLE):
        self.system = system
        # Apple: bytes still free below the last allocation
        self._remaining = ZERO_PAGE_SIZE
        # Atari: next free byte
        self._next = ATARI_ZERO_PAGE_START

    def alloc(self, size: int) -> int:
        """
        Reserve `size` consecutive zero-page bytes.

        Args:
            size: Number of bytes (1-255)

        Returns:
            Zero-page address of the first reserved byte

        Raises:
            ZeroPageError: If size is zero or the page is exhausted
        """
        if size == 0:
            raise ZeroPageError(
                "Request to allocate zero bytes of zero page memory"
            )

        if self.system is System.APPLE:
            if size > self._remaining:
                raise ZeroPageError("Zero page memory exhausted")
            self._remaining -= size
            return self._remaining

        if self._next + size > ZERO_PAGE_SIZE:
            raise ZeroPageError("Zero page memory exhausted")
        address = self._next
        self._next += size
        return address

    @property
    def bytes_free(self) -> int:
        """Number of zero-page bytes still available."""
        if self.system is System.APPLE:
            return self._remaining
        return ZERO_PAGE_SIZE - self._next
