"""
Unit Tests for Assembler Output Formats
=======================================

Covers format lookup, gap filling between org blocks, and the Apple II
System Monitor listing.
"""

import pytest

from sasm.assembler.output import CodeFormat, bytes_to_output
from sasm.errors import ConfigError, InternalError


# Two org blocks: 8 bytes at $4000, 7 bytes at $4010
MULTI_ORG_CODE = bytes.fromhex("a200e8f0fd4c1040" "a000c8f0fdf0eb")
MULTI_ORG_MAP = {0x4000: 0, 0x4010: 8}


class TestCodeFormat:

    @pytest.mark.parametrize("name,fmt", [
        ("hex", CodeFormat.HEX),
        ("H", CodeFormat.HEX),
        ("apple", CodeFormat.APPLE_SM),
        ("Apple2", CodeFormat.APPLE_SM),
        ("bin", CodeFormat.BINARY),
        ("binary", CodeFormat.BINARY),
    ])
    def test_from_name(self, name, fmt):
        assert CodeFormat.from_name(name) is fmt

    @pytest.mark.parametrize("name", ["", "xyz", "text"])
    def test_unrecognized(self, name):
        with pytest.raises(ConfigError, match="Unrecognized code format"):
            CodeFormat.from_name(name)

    def test_is_text(self):
        assert CodeFormat.HEX.is_text
        assert CodeFormat.APPLE_SM.is_text
        assert not CodeFormat.BINARY.is_text


class TestHexOutput:

    def test_single_block(self):
        assert bytes_to_output(b"\xa9\x41", {0: 0}) == "a941"

    def test_gap_filled_with_ff(self):
        output = bytes_to_output(MULTI_ORG_CODE, MULTI_ORG_MAP, CodeFormat.HEX)
        assert output == "a200e8f0fd4c1040" + "ff" * 8 + "a000c8f0fdf0eb"

    def test_adjacent_blocks_have_no_filler(self):
        output = bytes_to_output(b"\x01\x02\x03", {0x4000: 0, 0x4002: 2}, CodeFormat.HEX)
        assert output == "010203"

    def test_empty_block_filled(self):
        """An org followed directly by another org still fills its gap."""
        output = bytes_to_output(b"\xea", {0x4000: 0, 0x4004: 0}, CodeFormat.HEX)
        assert output == "ffffffffea"

    def test_last_block_not_padded(self):
        output = bytes_to_output(b"\xea\xea", {0x4000: 0}, CodeFormat.HEX)
        assert output == "eaea"

    def test_empty_code(self):
        assert bytes_to_output(b"", {0xABCD: 0}, CodeFormat.HEX) == ""

    def test_missing_address_map(self):
        with pytest.raises(InternalError):
            bytes_to_output(b"\xea", {}, CodeFormat.HEX)


class TestBinaryOutput:

    def test_gap_filled_with_255(self):
        output = bytes_to_output(MULTI_ORG_CODE, MULTI_ORG_MAP, CodeFormat.BINARY)
        assert output == MULTI_ORG_CODE[:8] + b"\xff" * 8 + MULTI_ORG_CODE[8:]

    def test_returns_bytes(self):
        assert bytes_to_output(b"", {0: 0}, CodeFormat.BINARY) == b""


class TestAppleMonitorOutput:

    def test_single_line(self):
        output = bytes_to_output(b"\xa9\x41\x8d\x00\x04", {0x0800: 0}, CodeFormat.APPLE_SM)
        assert output == "0800:A9 41 8D 00 04\n"

    def test_one_line_per_block_without_filling(self):
        output = bytes_to_output(MULTI_ORG_CODE, MULTI_ORG_MAP, CodeFormat.APPLE_SM)
        assert output == (
            "4000:A2 00 E8 F0 FD 4C 10 40\n"
            "4010:A0 00 C8 F0 FD F0 EB\n"
        )

    def test_long_block_split_at_42_bytes(self):
        code = bytes(range(50))
        lines = bytes_to_output(code, {0x0300: 0}, CodeFormat.APPLE_SM).splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("0300:00 01 02")
        assert lines[0].endswith(" 29")
        assert len(lines[0].split(":")[1].split()) == 42
        assert lines[1] == "032A:" + " ".join(f"{b:02X}" for b in range(42, 50))

    def test_full_line_length(self):
        line = bytes_to_output(bytes(42), {0: 0}, CodeFormat.APPLE_SM).rstrip("\n")
        assert len(line) == 5 + 42 * 3 - 1

    def test_empty_blocks_produce_no_lines(self):
        assert bytes_to_output(b"", {0x0800: 0}, CodeFormat.APPLE_SM) == ""
