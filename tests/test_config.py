"""Tests for the config module."""

import argparse
from unittest.mock import patch

import pytest

from loggen.config import (
    Config, LOG_LEVELS, _parse_bool, load_config, load_yaml_config,
    resolve_parallelism, validate,
)
from loggen.strategy import WrapStrategy


def _cli(**kwargs):
    fields = dict(
        in_base_dir=None, out_base_dir=None, interval_ms=None, parallelism=None,
        strategy=None, sort_paths=None, log_level=None, config=None,
    )
    fields.update(kwargs)
    return argparse.Namespace(**fields)


class TestParseBool:
    def test_true_values(self):
        for val in ("true", "True", "1", "yes", " YES ", True):
            assert _parse_bool(val) is True

    def test_false_values(self):
        for val in ("false", "0", "no", "", "random", False):
            assert _parse_bool(val) is False


class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.in_base_dir is None
        assert cfg.out_base_dir is None
        assert cfg.interval_ms == 250
        assert cfg.parallelism == 0
        assert cfg.strategy == "append"
        assert cfg.sort_paths is True
        assert cfg.log_level == "INFO"

    def test_interval_seconds(self):
        assert Config(interval_ms=1500).interval_seconds == 1.5

    def test_wrap_strategy(self):
        assert Config(strategy="rotate").wrap_strategy is WrapStrategy.ROTATE

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.interval_ms = 10


class TestLoadYamlConfig:
    def test_no_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(str(tmp_path / "missing.yml")) == {}

    def test_reads_mapping(self, tmp_path):
        path = tmp_path / "loggen.yml"
        path.write_text("interval_ms: 100\nstrategy: rotate\n")
        assert load_yaml_config(str(path)) == {"interval_ms": 100, "strategy": "rotate"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "loggen.yml"
        path.write_text("")
        assert load_yaml_config(str(path)) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "loggen.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))

    def test_invalid_yaml_rejected(self, tmp_path):
        path = tmp_path / "loggen.yml"
        path.write_text("strategy: [unclosed\n")
        with pytest.raises(ValueError):
            load_yaml_config(str(path))


class TestLoadConfig:
    def test_defaults_with_empty_env(self):
        assert load_config(environ={}) == Config()

    def test_yaml_values(self):
        cfg = load_config(
            yaml_data={"in-base-dir": "/in", "interval_ms": "40", "sort_paths": "no"},
            environ={},
        )
        assert cfg.in_base_dir == "/in"
        assert cfg.interval_ms == 40
        assert cfg.sort_paths is False

    def test_unknown_yaml_key_ignored(self, caplog):
        cfg = load_config(yaml_data={"colour": "blue"}, environ={})
        assert cfg == Config()
        assert "Ignoring unknown config key 'colour'" in caplog.text

    def test_env_overrides_yaml(self):
        cfg = load_config(
            yaml_data={"interval_ms": 40, "strategy": "rotate"},
            environ={"LOGGEN_INTERVAL_MS": "75", "LOGGEN_LOG_LEVEL": "debug"},
        )
        assert cfg.interval_ms == 75
        assert cfg.strategy == "rotate"
        assert cfg.log_level == "DEBUG"

    def test_cli_overrides_env(self):
        cfg = load_config(
            _cli(parallelism=8, strategy="truncate", sort_paths=False),
            environ={"LOGGEN_PARALLELISM": "2", "LOGGEN_STRATEGY": "rotate", "LOGGEN_SORT_PATHS": "true"},
        )
        assert cfg.parallelism == 8
        assert cfg.strategy == "truncate"
        assert cfg.sort_paths is False

    def test_unset_cli_values_do_not_override(self):
        cfg = load_config(_cli(), environ={"LOGGEN_OUT_BASE_DIR": "/out"})
        assert cfg.out_base_dir == "/out"

    def test_bad_number_raises(self):
        with pytest.raises(ValueError):
            load_config(environ={"LOGGEN_INTERVAL_MS": "fast"})


class TestValidate:
    def _config(self, tmp_path, **overrides):
        (tmp_path / "in").mkdir(exist_ok=True)
        defaults = dict(in_base_dir=str(tmp_path / "in"), out_base_dir=str(tmp_path / "out"))
        defaults.update(overrides)
        return Config(**defaults)

    def test_valid(self, tmp_path):
        validate(self._config(tmp_path))

    def test_missing_input(self):
        with pytest.raises(ValueError, match="Input base directory is required"):
            validate(Config(out_base_dir="/out"))

    def test_missing_output(self, tmp_path):
        with pytest.raises(ValueError, match="Output base directory is required"):
            validate(self._config(tmp_path, out_base_dir=None))

    def test_input_not_a_directory(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            validate(self._config(tmp_path, in_base_dir=str(tmp_path / "nope")))

    def test_same_directories(self, tmp_path):
        cfg = self._config(tmp_path)
        with pytest.raises(ValueError, match="must differ"):
            validate(Config(in_base_dir=cfg.in_base_dir, out_base_dir=cfg.in_base_dir + "/"))

    def test_negative_interval(self, tmp_path):
        with pytest.raises(ValueError, match="isn't a positive number"):
            validate(self._config(tmp_path, interval_ms=-1))

    def test_negative_parallelism(self, tmp_path):
        with pytest.raises(ValueError, match="isn't a positive number"):
            validate(self._config(tmp_path, parallelism=-2))

    def test_unknown_strategy(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown wrap strategy"):
            validate(self._config(tmp_path, strategy="shuffle"))

    def test_unknown_log_level(self, tmp_path):
        assert "VERBOSE" not in LOG_LEVELS
        with pytest.raises(ValueError, match="Unknown log level"):
            validate(self._config(tmp_path, log_level="VERBOSE"))


class TestResolveParallelism:
    def test_explicit_count(self):
        assert resolve_parallelism(Config(parallelism=6)) == 6

    @patch("loggen.config.psutil")
    def test_zero_uses_cpu_count(self, mock_psutil):
        mock_psutil.cpu_count.return_value = 12
        assert resolve_parallelism(Config(parallelism=0)) == 12

    @patch("loggen.config.psutil")
    def test_unknown_cpu_count_falls_back_to_one(self, mock_psutil):
        mock_psutil.cpu_count.return_value = None
        assert resolve_parallelism(Config()) == 1
