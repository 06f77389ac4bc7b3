"""Tests for spendlog.config."""

import stat
import tomllib
from pathlib import Path

import pytest

from spendlog.config import (
    create_default_config,
    get_config_path,
    get_default_db_path,
    load_config,
    load_settings,
    save_config,
)
from spendlog.domain.expenses import SortOrder


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("SPENDLOG_DB_PATH", raising=False)


class TestPaths:
    """Tests for XDG path resolution."""

    def test_config_path(self, tmp_path: Path) -> None:
        """Should live under XDG_CONFIG_HOME."""
        assert get_config_path() == tmp_path / "config" / "spendlog" / "config.toml"

    def test_default_db_path(self, tmp_path: Path) -> None:
        """Should live under XDG_DATA_HOME."""
        assert get_default_db_path() == tmp_path / "data" / "spendlog" / "spendlog.db"


class TestConfigFile:
    """Tests for creating, saving and loading the config file."""

    def test_default_config_round_trip(self) -> None:
        """Should write a loadable default config with private permissions."""
        create_default_config()

        config = load_config()
        assert config["defaults"]["sort"] == "date_desc"
        assert stat.S_IMODE(get_config_path().stat().st_mode) == 0o600

    def test_load_missing_raises(self) -> None:
        """Should raise FileNotFoundError when there is no config."""
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Should surface TOML errors."""
        path = tmp_path / "bad.toml"
        path.write_text("[defaults\n")

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(path)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        """Should fall back to defaults when no config exists."""
        settings = load_settings()

        assert settings.db_path == tmp_path / "data" / "spendlog" / "spendlog.db"
        assert settings.default_user is None
        assert settings.default_sort is SortOrder.DATE_DESC
        assert settings.currency_symbol == "₹"

    def test_values_from_file(self, tmp_path: Path) -> None:
        """Should read every section."""
        path = tmp_path / "custom.toml"
        save_config(
            {
                "database": {"path": str(tmp_path / "ledger.db")},
                "defaults": {"user": "alice", "sort": "date_asc"},
                "display": {"currency_symbol": "$"},
                "logging": {"level": "DEBUG"},
            },
            path,
        )

        settings = load_settings(path)

        assert settings.db_path == tmp_path / "ledger.db"
        assert settings.default_user == "alice"
        assert settings.default_sort is SortOrder.DATE_ASC
        assert settings.currency_symbol == "$"
        assert settings.log_level == "DEBUG"

    def test_env_overrides_db_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should prefer SPENDLOG_DB_PATH over the config file."""
        path = tmp_path / "custom.toml"
        save_config({"database": {"path": str(tmp_path / "ledger.db")}}, path)
        monkeypatch.setenv("SPENDLOG_DB_PATH", str(tmp_path / "env.db"))

        assert load_settings(path).db_path == tmp_path / "env.db"

    def test_unknown_sort_in_file(self, tmp_path: Path) -> None:
        """Should fall back to date_desc for an unknown configured sort."""
        path = tmp_path / "custom.toml"
        save_config({"defaults": {"sort": "amount"}}, path)

        assert load_settings(path).default_sort is SortOrder.DATE_DESC
