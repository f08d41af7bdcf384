"""
Tests for installer configuration loading.
"""

from pathlib import Path

import pytest

from nodesetup.core.config import (
    DEFAULT_MIRROR,
    InstallerConfig,
    load_config,
    load_yaml_settings,
)
from nodesetup.core.exceptions import ConfigError


@pytest.fixture
def in_tmp_cwd(tmp_path, monkeypatch):
    """Run with an empty working directory so no nodesetup.yaml is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestInstallerConfig:
    """Tests for InstallerConfig validation."""

    def test_defaults(self, isolated_home):
        config = InstallerConfig()
        assert config.mirror == DEFAULT_MIRROR
        assert config.timeout is None
        assert config.seven_zip_path is None

    def test_trailing_slash_stripped(self, tmp_path):
        config = InstallerConfig(
            mirror="https://example.com/dist/", cache_dir=tmp_path, work_dir=tmp_path
        )
        assert config.mirror == "https://example.com/dist"

    def test_invalid_mirror_scheme(self, tmp_path):
        with pytest.raises(ConfigError, match="http"):
            InstallerConfig(mirror="ftp://example.com", cache_dir=tmp_path, work_dir=tmp_path)

    def test_non_positive_timeout(self, tmp_path):
        with pytest.raises(ConfigError, match="positive"):
            InstallerConfig(cache_dir=tmp_path, work_dir=tmp_path, timeout=0)

    def test_paths_are_paths(self, tmp_path):
        config = InstallerConfig(
            cache_dir=str(tmp_path / "c"),
            work_dir=str(tmp_path / "w"),
            seven_zip_path=str(tmp_path / "7zr.exe"),
        )
        assert config.cache_dir == tmp_path / "c"
        assert isinstance(config.seven_zip_path, Path)


class TestLoadYamlSettings:
    """Tests for YAML settings."""

    def test_missing_optional_file(self, tmp_path):
        assert load_yaml_settings(tmp_path / "nodesetup.yaml") == {}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_yaml_settings(tmp_path / "nodesetup.yaml", required=True)

    def test_node_section(self, tmp_path):
        config_file = tmp_path / "nodesetup.yaml"
        config_file.write_text(
            "node:\n  mirror: https://mirror.local/node\n  timeout: '30'\n"
        )

        settings = load_yaml_settings(config_file)

        assert settings == {"mirror": "https://mirror.local/node", "timeout": 30.0}

    def test_top_level_settings(self, tmp_path):
        config_file = tmp_path / "nodesetup.yaml"
        config_file.write_text("mirror: https://mirror.local/node\n")

        assert load_yaml_settings(config_file)["mirror"] == "https://mirror.local/node"

    def test_unknown_keys_dropped(self, tmp_path, caplog):
        config_file = tmp_path / "nodesetup.yaml"
        config_file.write_text("node:\n  mirror: https://m.local\n  colour: blue\n")

        settings = load_yaml_settings(config_file)

        assert "colour" not in settings
        assert "colour" in caplog.text

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "nodesetup.yaml"
        config_file.write_text("node: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml_settings(config_file)

    def test_invalid_timeout(self, tmp_path):
        config_file = tmp_path / "nodesetup.yaml"
        config_file.write_text("timeout: soon\n")

        with pytest.raises(ConfigError, match="Invalid timeout"):
            load_yaml_settings(config_file)


class TestLoadConfig:
    """Tests for layered configuration."""

    def test_precedence(self, in_tmp_cwd, monkeypatch):
        """Test YAML < environment < explicit overrides."""
        (in_tmp_cwd / "nodesetup.yaml").write_text(
            "node:\n  mirror: https://yaml.local\n  timeout: 10\n"
        )
        monkeypatch.setenv("NODESETUP_MIRROR", "https://env.local")

        config = load_config()
        assert config.mirror == "https://env.local"
        assert config.timeout == 10.0

        config = load_config(mirror="https://cli.local")
        assert config.mirror == "https://cli.local"

    def test_environment_paths(self, in_tmp_cwd, monkeypatch):
        monkeypatch.setenv("RUNNER_TOOL_CACHE", str(in_tmp_cwd / "cache"))
        monkeypatch.setenv("RUNNER_TEMP", str(in_tmp_cwd / "temp"))
        monkeypatch.setenv("NODESETUP_7Z_PATH", str(in_tmp_cwd / "7zr.exe"))

        config = load_config()

        assert config.cache_dir == in_tmp_cwd / "cache"
        assert config.work_dir == in_tmp_cwd / "temp"
        assert config.seven_zip_path == in_tmp_cwd / "7zr.exe"

    def test_explicit_file_required(self, in_tmp_cwd):
        with pytest.raises(ConfigError):
            load_config(in_tmp_cwd / "missing.yaml")

    def test_invalid_env_timeout(self, in_tmp_cwd, monkeypatch):
        monkeypatch.setenv("NODESETUP_TIMEOUT", "abc")

        with pytest.raises(ConfigError, match="NODESETUP_TIMEOUT"):
            load_config()

    def test_non_string_mirror_in_yaml(self, in_tmp_cwd):
        """Test a numeric YAML mirror is reported as a configuration error."""
        (in_tmp_cwd / "nodesetup.yaml").write_text("node:\n  mirror: 123\n")

        with pytest.raises(ConfigError, match="must be a string"):
            load_config()
