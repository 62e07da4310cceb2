"""
Configuration file system for inventory-panel.

Supports loading configuration from multiple locations, merged with precedence:
1. /etc/inventory-panel/config.yaml or config.json (lowest priority)
2. ~/.config/inventory-panel/config.yaml or config.json
3. ./inventory-panel.yaml or ./inventory-panel.json (highest priority)

All found config files are merged, with later files overriding earlier ones.
YAML is checked before JSON at each location. Environment variables
(INVENTORY_PANEL_*) have the highest priority.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

ENV_PREFIX = "INVENTORY_PANEL_"

# Config filenames for current working directory (project-local config)
CONFIG_FILENAMES = ["inventory-panel.yaml", "inventory-panel.json"]
# Config filenames for system/user config directories
CONFIG_USER_FILENAMES = ["config.yaml", "config.json"]

DEFAULTS: dict[str, Any] = {
    # Where the client finds the product API
    "api": {"url": "http://127.0.0.1:8080", "timeout": 10.0},
    # Reference API server
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
        "data_file": "products-db.json",
        "seed_file": "seeds/products.json",
    },
    "display": {
        "low_stock_threshold": 5,
        "top_products": 5,
        "currency": "$",
    },
}


def _get_config_dirs() -> list[Path]:
    """Get list of config directories to search, in merge order (lowest priority first)."""
    return [
        Path("/etc/inventory-panel"),
        Path.home() / ".config" / "inventory-panel",
        Path.cwd(),
    ]


def find_config_files() -> list[Path]:
    """Find all existing config files, in merge order (lowest priority first).

    At each location, only the first found file (YAML before JSON) is included.
    """
    found_files = []

    for dir_path in _get_config_dirs():
        filenames = CONFIG_FILENAMES if dir_path == Path.cwd() else CONFIG_USER_FILENAMES
        for filename in filenames:
            path = dir_path / filename
            if path.exists():
                found_files.append(path)
                break
    return found_files


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base dict, modifying base in place."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _deep_copy(d: dict) -> dict:
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy(value)
        else:
            result[key] = value
    return result


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load a single config file and return its contents.

    Raises:
        ImportError: If YAML config is found but PyYAML is not installed.
        json.JSONDecodeError: If JSON config file is malformed.
    """
    if path.suffix in (".yaml", ".yml"):
        try:
            import yaml
        except ImportError as e:
            raise ImportError(
                "PyYAML required for .yaml config files. Install with: pip install inventory-panel[yaml]"
            ) from e
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from file(s), merging with defaults.

    If path is provided, only that file is loaded (plus defaults and
    environment overrides). Otherwise all standard locations are merged.

    Args:
        path: Optional explicit path to a config file.

    Returns:
        Merged configuration dictionary with defaults applied.
    """
    config = _deep_copy(DEFAULTS)

    if path is not None:
        if path.exists():
            _deep_merge(config, _load_config_file(path))
    else:
        for config_path in find_config_files():
            _deep_merge(config, _load_config_file(config_path))

    _apply_env_overrides(config)

    return config


def _apply_env_overrides(config: dict[str, Any]) -> None:
    """Apply INVENTORY_PANEL_<KEY> overrides; nested keys use double underscore.

    e.g. INVENTORY_PANEL_API__URL=http://inventory:8080
    """
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config_key = key[len(ENV_PREFIX):].lower()
            _set_nested_value(config, config_key, value)


def _set_nested_value(config: dict, key: str, value: str) -> None:
    parts = key.split("__")
    target = config
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[parts[-1]] = _convert_value(value)


def _convert_value(value: str) -> Any:
    """Convert string value to bool, int or float where it parses as one."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def get_config_value(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a config value using dot notation, e.g. "api.url"."""
    target = config
    for part in key.split("."):
        if isinstance(target, dict) and part in target:
            target = target[part]
        else:
            return default
    return target


class Config:
    """Configuration holder with convenient access methods."""

    def __init__(self, path: Path | None = None):
        """Initialize config, loading from file(s).

        Args:
            path: Optional explicit path to config file. If provided, only
                  this file is loaded. Otherwise, all standard locations
                  are searched and merged.
        """
        if path is not None:
            self._paths = [path] if path.exists() else []
        else:
            self._paths = find_config_files()
        self._data = load_config(path)

    @property
    def path(self) -> Path | None:
        """Return the highest-priority loaded config file, or None."""
        return self._paths[-1] if self._paths else None

    @property
    def paths(self) -> list[Path]:
        return self._paths.copy()

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return get_config_value(self._data, key, default)

    @property
    def api_url(self) -> str:
        """Return the product API base URL, without a trailing slash."""
        return str(self.get("api.url", DEFAULTS["api"]["url"])).rstrip("/")

    @property
    def api_timeout(self) -> float:
        return float(self.get("api.timeout", DEFAULTS["api"]["timeout"]))

    @property
    def server_host(self) -> str:
        return self.get("server.host", "127.0.0.1")

    @property
    def server_port(self) -> int:
        return int(self.get("server.port", 8080))

    @property
    def data_file(self) -> Path:
        return Path(self.get("server.data_file", DEFAULTS["server"]["data_file"]))

    @property
    def seed_file(self) -> Path:
        return Path(self.get("server.seed_file", DEFAULTS["server"]["seed_file"]))

    @property
    def low_stock_threshold(self) -> int:
        return int(self.get("display.low_stock_threshold", 5))

    @property
    def top_products(self) -> int:
        return int(self.get("display.top_products", 5))

    @property
    def currency(self) -> str:
        return str(self.get("display.currency", "$"))
