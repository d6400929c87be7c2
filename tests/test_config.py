"""
Unit Tests for SasmConfig
=========================

Covers defaults, environment overrides and validation.
"""

import pytest

from sasm.assembler.output import CodeFormat
from sasm.assembler.zeropage import System
from sasm.config import SasmConfig
from sasm.errors import ConfigError


ENV_VARS = ["SASM_SYSTEM", "SASM_FORMAT", "SASM_START_ADDRESS", "SASM_MIN_REGION_SIZE"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:

    def test_defaults(self):
        config = SasmConfig()
        assert config.system is System.APPLE
        assert config.code_format is CodeFormat.HEX
        assert config.start_address == 0
        assert config.min_region_size == 10

    def test_from_env_without_variables(self):
        assert SasmConfig.from_env() == SasmConfig()


class TestFromEnv:

    def test_all_variables(self, monkeypatch):
        monkeypatch.setenv("SASM_SYSTEM", "atari2600")
        monkeypatch.setenv("SASM_FORMAT", "bin")
        monkeypatch.setenv("SASM_START_ADDRESS", "0800")
        monkeypatch.setenv("SASM_MIN_REGION_SIZE", "4")

        config = SasmConfig.from_env()
        assert config.system is System.ATARI
        assert config.code_format is CodeFormat.BINARY
        assert config.start_address == 0x0800
        assert config.min_region_size == 4

    @pytest.mark.parametrize("name,value", [
        ("SASM_SYSTEM", "c64"),
        ("SASM_FORMAT", "text"),
        ("SASM_START_ADDRESS", "zz"),
        ("SASM_MIN_REGION_SIZE", "ten"),
    ])
    def test_invalid_values_ignored(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        assert SasmConfig.from_env() == SasmConfig()


class TestValidate:

    def test_default_is_valid(self):
        SasmConfig().validate()

    def test_atari_with_apple_monitor(self):
        config = SasmConfig(system=System.ATARI, code_format=CodeFormat.APPLE_SM)
        with pytest.raises(ConfigError, match="not compatible with Atari"):
            config.validate()

    @pytest.mark.parametrize("address", [-1, 0x10000])
    def test_invalid_start_address(self, address):
        with pytest.raises(ConfigError, match="Invalid starting address"):
            SasmConfig(start_address=address).validate()

    def test_last_start_address(self):
        SasmConfig(start_address=0xFFFF).validate()

    def test_negative_region_size(self):
        with pytest.raises(ConfigError, match="Invalid minimum region size"):
            SasmConfig(min_region_size=-1).validate()
