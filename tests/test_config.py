"""Tests for engine configuration loading."""

import logging

import pytest

from waypoint_engine.config import EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.sampling_period_ms == 100
        assert config.sampling_period == pytest.approx(0.1)
        assert config.tolerance_bins == 2
        assert config.max_strikes == 2
        assert config.resolution == 18

    def test_from_yaml_with_engine_section(self, tmp_path):
        path = tmp_path / "engine.yml"
        path.write_text("engine:\n  sampling_period_ms: 50\n  max_strikes: 3\n")
        config = EngineConfig.from_yaml(path)
        assert config.sampling_period_ms == 50
        assert config.max_strikes == 3
        assert config.tolerance_bins == 2

    def test_from_yaml_flat(self, tmp_path):
        path = tmp_path / "engine.yml"
        path.write_text("tolerance_bins: 1\nabort_event: wave-out\n")
        config = EngineConfig.from_yaml(path)
        assert config.tolerance_bins == 1
        assert config.abort_event == "wave-out"

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "engine.yml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_unknown_keys_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="waypoint_engine.config"):
            config = EngineConfig.from_dict({"frequency": 10, "max_strikes": 1})
        assert config.max_strikes == 1
        assert "frequency" in caplog.text

    def test_begin_is_not_a_config_key(self, caplog):
        with caplog.at_level(logging.WARNING, logger="waypoint_engine.config"):
            config = EngineConfig.from_dict({"begin_event": "go"})
        assert "begin_event" in caplog.text
        assert not hasattr(config, "begin_event")

    @pytest.mark.parametrize("overrides", [
        {"sampling_period_ms": 0},
        {"tolerance_bins": -1},
        {"max_strikes": -1},
        {"resolution": 1},
        {"stop_event": ""},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            EngineConfig.from_dict(overrides)

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "engine.yml"
        config = EngineConfig(sampling_period_ms=40, stop_event="double-tap")
        config.to_yaml(path)
        assert EngineConfig.from_yaml(path) == config

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(tmp_path / "nope.yml")
