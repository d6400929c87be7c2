# =============================================================================
# test_assembler.py - Full Assembler Integration Tests
# =============================================================================
# End-to-end tests for the complete assembler, from source text to the
# rendered hex, binary and Apple II monitor output.
#
# Test coverage includes:
#   - Sample programs with labels, zero-page bytes and offsets
#   - Relative branches at the edges of their range
#   - Multiple org blocks and gap filling
#   - Error reporting with line numbers
#   - Assembler class output methods
# =============================================================================

import pytest

from sasm.assembler import Assembler, CodeFormat, System, assemble, assemble_file
from sasm.errors import AssemblerError, ConfigError, OperandError


def rep(text: str, count: int) -> str:
    """Repeat a line of source or expected output `count` times."""
    return text * count


# =============================================================================
# Sample Programs
# =============================================================================

class TestSamplePrograms:
    """Complete programs assembled to hex strings."""

    def test_simple_instructions(self):
        source = (
            "ldaz  ff\n"
            "ldxi  00\n"
            "clc\n"
            "adcax 4000\n"
            "inx\n"
            "adcax 4000\n"
            "staa  6000\n"
        )
        assert assemble(source) == "a5ffa200187d0040e87d00408d0060"

    def test_same_program_with_labels(self):
        source = (
            "zbyte z0\n"
            "ldaz  .z0\n"
            "ldxi  00\n"
            "clc\n"
            "label arr1 4000\n"
            "adcax .arr1\n"
            "inx\n"
            "adcax 4000\n"
            "label arr2 5f50\n"
            "label arr2_offset b0\n"
            "staa  .arr2 .arr2_offset\n"
        )
        assert assemble(source) == "a5ffa200187d0040e87d00408d0060"

    def test_comments_and_indentation(self):
        source = (
            "; clear the screen\n"
            "    org 0800   ; entry point\n"
            ".start\n"
            "    ldai a0    ; space\n"
            "    jmpa .start\n"
        )
        assert assemble(source) == "a9a04c0008"

    def test_org_only(self):
        assert assemble("org ABCD") == ""

    def test_data_forward(self):
        assert assemble("data CaFe") == "cafe"

    def test_three_digit_label(self):
        assert assemble("label l dad") == ""

    def test_three_digit_operand(self):
        assert assemble("jmpa dad") == "4cad0d"

    def test_data_from_two_byte_label(self):
        assert assemble("label addr cafe\ndata  .addr") == "feca"


# =============================================================================
# Relative Branches
# =============================================================================

class TestRelativeBranches:
    """Branches at the limits of the -128..+127 displacement."""

    def test_backward_barely_in_range(self):
        source = "ldxi  00\n.loop_start\ninx\n" + rep("nop\n", 125) + "beq   .loop_start\n"
        assert assemble(source) == "a200e8" + rep("ea", 125) + "f080"

    def test_backward_barely_out_of_range(self):
        source = "ldxi  00\n.loop_start\ninx\n" + rep("nop\n", 126) + "beq   .loop_start\n"
        with pytest.raises(AssemblerError) as exc_info:
            assemble(source)
        assert str(exc_info.value) == "130: relative branch is too far from target"

    def test_forward_barely_in_range(self):
        source = (
            "ldxi  00\n.loop_start\ninx\nbeq   .loop_end\n"
            + rep("nop\n", 124)
            + "jmpa  .loop_start\n.loop_end\n"
        )
        assert assemble(source) == "a200e8f07f" + rep("ea", 124) + "4c0200"

    def test_forward_barely_out_of_range(self):
        source = (
            "ldxi  00\n.loop_start\ninx\nbeq   .loop_end\n"
            + rep("nop\n", 125)
            + "jmpa  .loop_start\n.loop_end\n"
        )
        with pytest.raises(AssemblerError) as exc_info:
            assemble(source)
        assert str(exc_info.value) == "4: relative branch is too far from target"


# =============================================================================
# Org Blocks
# =============================================================================

class TestOrgBlocks:
    """Programs with more than one org."""

    MULTIPLE_ORGS = (
        "org 4000\n"
        "ldxi  00\n"
        ".loop_1_start\n"
        "inx\n"
        "beq   .loop_1_start\n"
        "jmpa  4010\n"
        "org 4010\n"
        "ldyi  00\n"
        ".loop_2_start\n"
        "iny\n"
        "beq   .loop_2_start\n"
        "beq   .loop_1_start\n"
    )

    def test_multiple_orgs_with_rel_branches(self):
        assert assemble(self.MULTIPLE_ORGS) == (
            "a200e8f0fd4c1040" + "ffffffffffffffff" + "a000c8f0fdf0eb"
        )

    def test_multiple_orgs_binary(self):
        code = assemble(self.MULTIPLE_ORGS, code_format=CodeFormat.BINARY)
        assert code == bytes.fromhex("a200e8f0fd4c1040" + "ff" * 8 + "a000c8f0fdf0eb")

    def test_multiple_orgs_apple_monitor(self):
        assert assemble(self.MULTIPLE_ORGS, code_format=CodeFormat.APPLE_SM) == (
            "4000:A2 00 E8 F0 FD 4C 10 40\n"
            "4010:A0 00 C8 F0 FD F0 EB\n"
        )

    def test_org_at_code_addr(self):
        source = self.MULTIPLE_ORGS.replace("jmpa  4010\n", "").replace("org 4010", "org 4005")
        assert assemble(source) == "a200e8f0fda000c8f0fdf0f6"

    def test_org_one_less_than_code_addr(self):
        source = self.MULTIPLE_ORGS.replace("jmpa  4010\n", "").replace("org 4010", "org 4004")
        with pytest.raises(AssemblerError) as exc_info:
            assemble(source)
        assert str(exc_info.value) == "6: org smaller than code address"


# =============================================================================
# Error Reporting
# =============================================================================

class TestErrorReporting:
    """Every error is reported as '<line>: <message>'."""

    @pytest.mark.parametrize("source,expected", [
        ("org 88", "1: org must be a 2-byte address"),
        ("org", "1: org takes one argument"),
        ("data cafedad", "1: data must be a valid hex string"),
        ("data coffee", "1: data must be a valid hex string"),
        ("data cafe dad", "1: data takes one argument"),
        ("zbyte z cafe", "1: zbyte array size must be a single byte (< 0x100)"),
        ("zbyte z pa", "1: not a valid hexadecimal number"),
        ("label l faced", "1: not a valid hexadecimal number"),
        ("label l pa", "1: not a valid hexadecimal number"),
        ("xxx john", "1: not a valid hexadecimal number"),
        ("xxx .op cafe", "1: offset must be a single byte (< 0x100)"),
        ("xxx ff john", "1: not a valid hexadecimal number"),
        ("dec", "1: mnemonic not found"),
        ("andz", "1: instruction requires a single-byte operand"),
        ("adcax", "1: instruction requires a two-byte operand"),
        ("oraa ff", "1: instruction requires a two-byte operand"),
        ("ldyi cafe", "1: instruction requires a single-byte operand"),
        ("clc ff", "1: instruction does not require an operand"),
        ("dex ffff", "1: instruction does not require an operand"),
        ("staz fe 2", "1: operand plus offset is > 0xff"),
        ("staa fffe 2", "1: operand plus offset is > 0xffff"),
        ("label addr ed\ndata  .addr", "2: labels used for data must be two bytes"),
        ("label x 10\nlabel x 11", "2: label repeated: x"),
    ])
    def test_error_message(self, source, expected):
        with pytest.raises(AssemblerError) as exc_info:
            assemble(source)
        assert str(exc_info.value) == expected


# =============================================================================
# Assembler Class
# =============================================================================

class TestAssemblerClass:
    """Tests for the Assembler facade."""

    SOURCE = "org 0800\n.start\nldai 41\nstaa 0400\njmpa .start\n"
    CODE = bytes.fromhex("a9418d00044c0008")

    def test_assemble_string_returns_code(self):
        asm = Assembler()
        assert asm.assemble_string(self.SOURCE) == self.CODE
        assert asm.get_code() == self.CODE
        assert asm.get_address_map() == {0x0800: 0}

    def test_get_symbols(self):
        asm = Assembler()
        asm.assemble_string("zbyte ptr\n" + self.SOURCE)
        assert asm.get_symbols() == {"ptr": 0xFF, "start": 0x0800}

    def test_render_formats(self):
        asm = Assembler()
        asm.assemble_string(self.SOURCE)
        assert asm.render() == self.CODE.hex()
        assert asm.render(CodeFormat.BINARY) == self.CODE
        assert asm.render(CodeFormat.APPLE_SM) == "0800:A9 41 8D 00 04 4C 00 08\n"

    def test_default_format(self):
        asm = Assembler(code_format=CodeFormat.BINARY)
        asm.assemble_string(self.SOURCE)
        assert asm.render() == self.CODE

    def test_atari_zero_page(self):
        asm = Assembler(System.ATARI)
        asm.assemble_string("zbyte a\nldaz .a\n")
        assert asm.get_code() == bytes([0xA5, 0x80])

    def test_atari_rejects_apple_monitor(self):
        with pytest.raises(ConfigError, match="Apple System Monitor output not compatible with Atari"):
            Assembler(System.ATARI, CodeFormat.APPLE_SM)

    def test_atari_render_rejects_apple_monitor(self):
        asm = Assembler(System.ATARI)
        asm.assemble_string("nop")
        with pytest.raises(ConfigError):
            asm.render(CodeFormat.APPLE_SM)

    def test_runs_are_independent(self):
        """Labels and zero-page bytes do not leak between runs."""
        asm = Assembler()
        asm.assemble_string("zbyte a\nlabel x 10\n")
        asm.assemble_string("zbyte b\nlabel x 20\n")
        assert asm.get_symbols() == {"b": 0xFF, "x": 0x20}

    def test_failed_run_keeps_previous_result(self):
        asm = Assembler()
        asm.assemble_string(self.SOURCE)
        with pytest.raises(OperandError):
            asm.assemble_string("clc ff")
        assert asm.get_code() == self.CODE

    def test_assemble_file(self, tmp_path):
        source_file = tmp_path / "prog.s"
        source_file.write_text(self.SOURCE)
        asm = Assembler()
        assert asm.assemble_file(source_file) == self.CODE
        assert assemble_file(source_file) == self.CODE.hex()

    def test_assemble_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Assembler().assemble_file(tmp_path / "missing.s")

    def test_write_output_text(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(self.SOURCE)
        out = tmp_path / "prog.hex"
        asm.write_output(out)
        assert out.read_text() == self.CODE.hex()

    def test_render_before_assembly(self):
        asm = Assembler()
        assert asm.render() == ""
        assert asm.render(CodeFormat.BINARY) == b""
        assert asm.render(CodeFormat.APPLE_SM) == ""

    def test_write_output_binary(self, tmp_path):
        asm = Assembler()
        asm.assemble_string(self.SOURCE)
        out = tmp_path / "prog.bin"
        asm.write_output(out, CodeFormat.BINARY)
        assert out.read_bytes() == self.CODE
