"""Tests for the dataconnect.settings module."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from filelock import FileLock, Timeout

from dataconnect.settings import (
    CONFIG_ENV_VAR,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DataConnectSettings,
    load_settings,
    save_settings,
    settings_path,
    update_settings,
)


class TestSettingsPath:
    """Tests for settings_path."""

    def test_explicit_path(self, tmp_path: Path):
        assert settings_path(tmp_path / "x.yaml") == tmp_path / "x.yaml"

    def test_environment_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))
        assert settings_path() == tmp_path / "env.yaml"

    def test_xdg_config_home(self, monkeypatch, tmp_path: Path):
        monkeypatch.delenv(CONFIG_ENV_VAR)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert settings_path() == tmp_path / "dataconnect" / "config.yaml"


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_uses_defaults(self, tmp_path: Path):
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings == DataConnectSettings()
        assert settings.host == DEFAULT_HOST
        assert settings.port == DEFAULT_PORT
        assert settings.use_tls is True
        assert settings.token is None

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_settings(path) == DataConnectSettings()

    def test_partial_file(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("host: localhost\nport: 8815\nuse_tls: false\n")
        settings = load_settings(path)
        assert settings.host == "localhost"
        assert settings.port == 8815
        assert settings.use_tls is False
        assert settings.resolve_public_ip is True

    def test_unknown_field(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("hots: localhost\n")
        with pytest.raises(ValueError, match="Invalid settings"):
            load_settings(path)

    def test_wrong_type(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("port: not-a-port\n")
        with pytest.raises(ValueError, match="Invalid settings"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_settings(path)

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("host: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_settings(path)


class TestSaveSettings:
    """Tests for save_settings and update_settings."""

    def test_round_trip(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.yaml"
        settings = DataConnectSettings(host="localhost", port=8815, use_tls=False)

        assert save_settings(settings, path) == path
        assert load_settings(path) == settings
        assert yaml.safe_load(path.read_text())["host"] == "localhost"

    def test_file_is_private(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        save_settings(DataConnectSettings(token="secret"), path)
        assert path.stat().st_mode & 0o777 == 0o600

    def test_no_leftover_temporary_files(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        save_settings(DataConnectSettings(), path)
        leftovers = {p.name for p in tmp_path.iterdir()} - {"config.yaml", "config.yaml.lock"}
        assert leftovers == set()

    def test_update_holds_lock_while_loading(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        lock_path = tmp_path / "config.yaml.lock"
        held = []

        def checking_load(resolved):
            with pytest.raises(Timeout):
                FileLock(lock_path).acquire(timeout=0)
            held.append(True)
            return DataConnectSettings()

        with patch("dataconnect.settings.load_settings", side_effect=checking_load):
            update_settings(path, token="abc")

        assert held == [True]
        assert load_settings(path).token == "abc"

    def test_update_keeps_other_fields(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        save_settings(DataConnectSettings(host="localhost"), path)

        updated = update_settings(path, token="abc")

        assert updated.host == "localhost"
        assert updated.token == "abc"
        assert load_settings(path) == updated
