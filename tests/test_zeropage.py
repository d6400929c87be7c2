"""
Unit Tests for Zero Page Allocation
===================================

Covers the Apple II (top-down) and Atari 2600 (from $80 upward)
allocation policies and system name lookup.
"""

import pytest

from sasm.assembler.zeropage import System, ZeroPageAllocator
from sasm.errors import ConfigError, ZeroPageError


class TestSystem:

    @pytest.mark.parametrize("name,system", [
        ("apple", System.APPLE),
        ("Apple2", System.APPLE),
        ("APPLE IIe", System.APPLE),
        ("atari", System.ATARI),
        ("atari2600", System.ATARI),
    ])
    def test_from_name(self, name, system):
        assert System.from_name(name) is system

    @pytest.mark.parametrize("name", ["", "c64", "app"])
    def test_unsupported(self, name):
        with pytest.raises(ConfigError, match="Unrecognized or unsupported system"):
            System.from_name(name)


class TestAppleAllocator:

    def setup_method(self):
        self.zpm = ZeroPageAllocator(System.APPLE)

    def test_first_byte_is_ff(self):
        assert self.zpm.alloc(1) == 0xFF
        assert self.zpm.alloc(1) == 0xFE

    def test_array_returns_lowest_address(self):
        assert self.zpm.alloc(4) == 0xFC
        assert self.zpm.alloc(1) == 0xFB

    def test_alloc_all_available(self):
        assert self.zpm.alloc(100) == 0xFF - 99
        assert self.zpm.alloc(100) == 0xFF - 199
        assert self.zpm.alloc(56) == 0
        assert self.zpm.bytes_free == 0

    def test_alloc_too_much(self):
        self.zpm.alloc(100)
        self.zpm.alloc(100)
        with pytest.raises(ZeroPageError, match="Zero page memory exhausted"):
            self.zpm.alloc(57)

    def test_alloc_zero(self):
        with pytest.raises(ZeroPageError, match="Request to allocate zero bytes of zero page memory"):
            self.zpm.alloc(0)


class TestAtariAllocator:

    def setup_method(self):
        self.zpm = ZeroPageAllocator(System.ATARI)

    def test_first_byte_is_80(self):
        assert self.zpm.alloc(1) == 0x80
        assert self.zpm.alloc(1) == 0x81

    def test_alloc_all_available(self):
        assert self.zpm.alloc(50) == 0x80
        assert self.zpm.alloc(50) == 0x80 + 50
        assert self.zpm.alloc(28) == 0x80 + 100
        assert self.zpm.bytes_free == 0

    def test_alloc_too_much(self):
        self.zpm.alloc(50)
        self.zpm.alloc(50)
        with pytest.raises(ZeroPageError, match="Zero page memory exhausted"):
            self.zpm.alloc(29)

    def test_alloc_zero(self):
        with pytest.raises(ZeroPageError, match="Request to allocate zero bytes"):
            self.zpm.alloc(0)

    def test_default_system_is_apple(self):
        assert ZeroPageAllocator().system is System.APPLE
