"""
Tests for hornlog configuration
"""
import json

import pytest
import yaml
from hornlog.config import (
    HornlogConfig, QueryConfig, ValidationConfig, RuntimeConfig,
)


class TestDefaults:

    def test_default_values(self):
        config = HornlogConfig()
        assert config.query.max_depth == 1000
        assert config.query.strategy == "constrained"
        assert config.query.renaming == "application"
        assert config.query.occurs_check
        assert not config.validation.strict
        assert config.runtime.enable_logic
        assert config.log_level == "WARNING"

    def test_invalid_strategy(self):
        with pytest.raises(ValueError, match="Unknown strategy"):
            QueryConfig(strategy="random")

    def test_invalid_renaming(self):
        with pytest.raises(ValueError):
            QueryConfig(renaming="never")

    def test_negative_depth(self):
        with pytest.raises(ValueError):
            QueryConfig(max_depth=-1)

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            HornlogConfig(log_level="LOUD")

    def test_log_level_case_insensitive(self):
        assert HornlogConfig(log_level="debug").log_level == "debug"


class TestFiles:
    """Test loading and saving configuration files"""

    def test_yaml_round_trip(self, tmp_path):
        config = HornlogConfig(
            query=QueryConfig(max_depth=50, strategy="baseline"),
            validation=ValidationConfig(strict=True),
            log_level="DEBUG",
        )
        path = tmp_path / "config.yaml"
        config.save(path)
        loaded = HornlogConfig.load(path)
        assert loaded == config

    def test_json_round_trip(self, tmp_path):
        config = HornlogConfig(runtime=RuntimeConfig(enable_logic=False))
        path = tmp_path / "nested" / "config.json"
        config.save(path)
        assert json.loads(path.read_text())["runtime"] == {"enable_logic": False}
        assert HornlogConfig.load(path) == config

    def test_partial_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text(yaml.safe_dump({"query": {"max_depth": 10}}))
        config = HornlogConfig.load(path)
        assert config.query.max_depth == 10
        assert config.query.strategy == "constrained"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert HornlogConfig.load(path) == HornlogConfig()

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"query": {"strategy": "random"}}))
        with pytest.raises(ValueError):
            HornlogConfig.load(path)

    def test_search_path_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.chdir(tmp_path)
        assert HornlogConfig.load() == HornlogConfig()

    def test_search_path_local_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        monkeypatch.chdir(tmp_path)
        (tmp_path / "hornlog_config.yaml").write_text("log_level: INFO\n")
        assert HornlogConfig.load().log_level == "INFO"

