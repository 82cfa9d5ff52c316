"""
Configuration Tests — profiles, overrides and validation.
"""

import pytest

from bf_interpreter.config import (
    CellPolicy, EngineConfig, PROFILES, DEFAULT_PROFILE,
    EOF_MINUS_ONE, EOF_UNCHANGED, EOF_ZERO,
)


class TestCellPolicy:

    def test_unbounded_passthrough(self):
        policy = CellPolicy()
        assert policy.normalize(-5) == -5
        assert policy.normalize(1 << 40) == 1 << 40
        assert policy.name == "unbounded"

    def test_8bit(self):
        policy = CellPolicy(8)
        assert policy.normalize(256) == 0
        assert policy.normalize(-1) == 255
        assert policy.name == "8-bit"

    @pytest.mark.parametrize("bits", [0, -8])
    def test_invalid_width(self, bits):
        with pytest.raises(ValueError):
            CellPolicy(bits)


class TestEngineConfig:

    def test_defaults_match_reference_profile(self):
        assert DEFAULT_PROFILE == "reference"
        config = EngineConfig()
        assert config.cell_bits is None
        assert config.eof == EOF_MINUS_ONE
        assert EngineConfig.from_profile() == config

    def test_profiles(self):
        classic = EngineConfig.from_profile("classic")
        assert classic.cell_bits == 8
        assert classic.eof == EOF_UNCHANGED
        wide = EngineConfig.from_profile("wide")
        assert wide.cell_bits == 16
        assert wide.eof == EOF_ZERO

    def test_every_profile_has_description(self):
        for name, profile in PROFILES.items():
            assert profile["description"], name

    def test_overrides_win(self):
        config = EngineConfig.from_profile("classic", cell_bits=None, max_steps=5)
        assert config.cell_bits is None
        assert config.eof == EOF_UNCHANGED
        assert config.max_steps == 5

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="unknown profile"):
            EngineConfig.from_profile("turbo")

    def test_unknown_eof(self):
        with pytest.raises(ValueError, match="EOF policy"):
            EngineConfig(eof="explode")

    def test_override_is_validated(self):
        with pytest.raises(ValueError):
            EngineConfig.from_profile("reference", eof="explode")

    def test_negative_limits(self):
        with pytest.raises(ValueError):
            EngineConfig(max_steps=-1)
        with pytest.raises(ValueError):
            EngineConfig(trace_depth=-1)

    def test_invalid_cell_bits(self):
        with pytest.raises(ValueError):
            EngineConfig(cell_bits=0)

    def test_cell_policy_property(self):
        assert EngineConfig(cell_bits=16).cell_policy.normalize(65536) == 0
