"""Configuration file management for spendlog."""

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from spendlog.domain.expenses import DEFAULT_SORT, SortOrder, parse_sort

DEFAULT_CURRENCY_SYMBOL = "₹"


@dataclass(frozen=True)
class Settings:
    """Effective settings after merging the config file with defaults."""

    db_path: Path
    default_user: str | None = None
    default_sort: SortOrder = DEFAULT_SORT
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    log_level: str | None = None


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "spendlog" / "config.toml"


def get_default_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "spendlog" / "spendlog.db"


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config: dict[str, Any] = {
        "defaults": {"sort": DEFAULT_SORT.value},
        "display": {"currency_symbol": DEFAULT_CURRENCY_SYMBOL},
        "logging": {"level": "WARNING"},
    }

    save_config(default_config, config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def resolve_db_path(config: dict[str, Any]) -> Path:
    """Pick the database path: SPENDLOG_DB_PATH, then [database].path, then the XDG default.

    Args:
        config: Loaded configuration dictionary (may be empty).

    Returns:
        Database path. ":memory:" is passed through unchanged.
    """
    env_path = os.environ.get("SPENDLOG_DB_PATH")
    if env_path:
        return Path(env_path).expanduser()

    configured = config.get("database", {}).get("path")
    if configured:
        return Path(configured).expanduser()

    return get_default_db_path()


def load_settings(config_path: Path | None = None) -> Settings:
    """Load effective settings, using defaults when no config file exists.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Settings instance.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}

    defaults = config.get("defaults", {})
    display = config.get("display", {})

    return Settings(
        db_path=resolve_db_path(config),
        default_user=defaults.get("user") or None,
        default_sort=parse_sort(defaults.get("sort")),
        currency_symbol=display.get("currency_symbol", DEFAULT_CURRENCY_SYMBOL),
        log_level=config.get("logging", {}).get("level"),
    )
