"""Tests for slicemeta.config — layered configuration loading."""

from __future__ import annotations

import os

import yaml

from slicemeta.config import (
    DEFAULTS,
    get_default_config_path,
    init_config,
    load_config,
    validate_config,
)


class TestLoadConfig:

    def test_defaults(self, isolated_home) -> None:
        assert load_config() == DEFAULTS

    def test_default_path_under_home(self, isolated_home) -> None:
        assert get_default_config_path() == isolated_home / ".slicemeta" / "config.yaml"

    def test_reads_default_file(self, isolated_home) -> None:
        path = isolated_home / ".slicemeta" / "config.yaml"
        path.parent.mkdir()
        path.write_text("output: json\nlog_level: debug\n")
        config = load_config()
        assert config["output"] == "json"
        assert config["log_level"] == "DEBUG"

    def test_explicit_path(self, isolated_home, tmp_path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("log_dir: ~/logs\n")
        config = load_config(config_path=str(path))
        assert config["log_dir"] == os.path.join(str(isolated_home), "logs")

    def test_env_overrides_file(self, isolated_home, tmp_path, monkeypatch) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("output: text\n")
        monkeypatch.setenv("SLICEMETA_OUTPUT", "json")
        assert load_config(config_path=str(path))["output"] == "json"

    def test_explicit_overrides_env(self, isolated_home, monkeypatch) -> None:
        monkeypatch.setenv("SLICEMETA_LOG_LEVEL", "ERROR")
        assert load_config(log_level="info")["log_level"] == "INFO"

    def test_malformed_yaml_ignored(self, isolated_home, tmp_path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("output: [unclosed\n")
        assert load_config(config_path=str(path)) == DEFAULTS

    def test_non_mapping_yaml_ignored(self, isolated_home, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert load_config(config_path=str(path)) == DEFAULTS

    def test_null_values_keep_defaults(self, isolated_home, tmp_path) -> None:
        path = tmp_path / "nulls.yaml"
        path.write_text("output: null\nlog_level:\n")
        assert load_config(config_path=str(path)) == DEFAULTS


class TestInitConfig:

    def test_writes_defaults(self, tmp_path) -> None:
        path = init_config(str(tmp_path / "nested" / "config.yaml"))
        assert path.is_file()
        assert yaml.safe_load(path.read_text()) == DEFAULTS

    def test_default_location(self, isolated_home) -> None:
        path = init_config()
        assert path == isolated_home / ".slicemeta" / "config.yaml"
        assert path.is_file()


class TestValidateConfig:

    def test_defaults_valid(self) -> None:
        assert validate_config(dict(DEFAULTS)) == (True, None)

    def test_unknown_level(self) -> None:
        ok, msg = validate_config({**DEFAULTS, "log_level": "VERBOSE"})
        assert not ok
        assert "VERBOSE" in msg

    def test_unknown_output(self) -> None:
        ok, msg = validate_config({**DEFAULTS, "output": "xml"})
        assert not ok
        assert "xml" in msg

    def test_log_dir_must_be_string(self) -> None:
        ok, _ = validate_config({**DEFAULTS, "log_dir": 42})
        assert not ok
