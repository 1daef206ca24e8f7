"""
Configuration management for Dropbox Cleaner.

Handles loading configuration files with support for local overrides,
layering environment and command line values on top, and validating the
result into an immutable CleanupConfig.
"""

import copy
import json
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from .durations import DurationError, parse_duration


class ConfigError(Exception):
    """Raised when the configuration is incomplete or invalid."""


BOOL_STRINGS = {"true": True, "false": False}


@dataclass(frozen=True)
class CleanupConfig:
    """Settings for a cleaner process, fixed for its whole lifetime."""

    folder_path: str
    max_age: timedelta
    interval: timedelta
    dry_run: bool
    token_storage: str
    abort_timeout: int = 15
    verbose: bool = True


def default_token_storage() -> str:
    """Default location of the persisted auth tokens."""
    return os.path.join("~", ".config", "dropbox-auto-cleaner", "auth.json")


class ConfigManager:
    """Handles configuration loading and validation."""

    DEFAULT_CONFIG = {
        "dropbox_settings": {
            "path": "",
            "token_storage": default_token_storage(),
        },
        "cleanup_settings": {
            "interval": "24h",
            "file_age": "168h",
            "dry_run": False,
            "abort_timeout": 15,
            "verbose": True,
        },
    }

    # Maps override keyword to (section, key)
    OVERRIDE_KEYS = {
        "path": ("dropbox_settings", "path"),
        "token_storage": ("dropbox_settings", "token_storage"),
        "interval": ("cleanup_settings", "interval"),
        "file_age": ("cleanup_settings", "file_age"),
        "dry_run": ("cleanup_settings", "dry_run"),
        "abort_timeout": ("cleanup_settings", "abort_timeout"),
        "verbose": ("cleanup_settings", "verbose"),
    }

    def __init__(self, config_file: str = "config.json", local_config_file: str = "config.local.json"):
        """Initialize configuration manager.

        Args:
            config_file: Main configuration file path
            local_config_file: Local overrides configuration file path
        """
        self.config_file = config_file
        self.local_config_file = local_config_file
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load defaults, then the main file, then the local overrides."""
        config = copy.deepcopy(self.DEFAULT_CONFIG)

        main_config = self._read_json(self.config_file, "using default configuration")
        if main_config is None:
            print(f"[i] {self.config_file} not found, using default configuration")
        else:
            self._merge_config(config, main_config)

        local_config = self._read_json(self.local_config_file, "ignoring local config")
        if local_config:
            self._merge_config(config, local_config)
            print(f"[i] Loaded local configuration overrides from {self.local_config_file}")

        return config

    @staticmethod
    def _read_json(path: str, fallback: str) -> Optional[Dict[str, Any]]:
        """Read a JSON object from path.

        Returns None for a missing file and an empty dict for a broken one.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            print(f"[!] Error parsing {path}: {e}, {fallback}")
            return {}

        if not isinstance(data, dict):
            print(f"[!] {path} does not contain a JSON object, {fallback}")
            return {}
        return data

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary to merge into
            override: Override configuration dictionary to merge from
        """
        for section, values in override.items():
            if section not in base:
                base[section] = values
            elif isinstance(values, dict) and isinstance(base[section], dict):
                self._merge_config(base[section], values)
            else:
                base[section] = values

    def apply_overrides(self, **values: Any) -> None:
        """Layer environment or command line values over the file configuration.

        Values that are None are ignored so unset flags keep the file value.

        Args:
            **values: Any of path, token_storage, interval, file_age,
                dry_run, abort_timeout, verbose
        """
        for name, value in values.items():
            if name not in self.OVERRIDE_KEYS:
                raise ConfigError(f"Unknown configuration override '{name}'")
            if value is None:
                continue
            section, key = self.OVERRIDE_KEYS[name]
            self.config.setdefault(section, {})[key] = value

    def get_dropbox_settings(self) -> Dict[str, Any]:
        """Get Dropbox folder and token settings."""
        return self.config["dropbox_settings"]

    def get_cleanup_settings(self) -> Dict[str, Any]:
        """Get cleanup scheduling settings."""
        return self.config["cleanup_settings"]

    def build_cleanup_config(self) -> CleanupConfig:
        """Validate the merged configuration.

        Returns:
            Immutable CleanupConfig for this process

        Raises:
            ConfigError: If the folder path is missing or a duration is malformed
        """
        dropbox_settings = self.get_dropbox_settings()
        cleanup_settings = self.get_cleanup_settings()

        folder_path = (dropbox_settings.get("path") or "").strip()
        if not folder_path:
            raise ConfigError(
                "No Dropbox folder path was found. Please pass --path or set "
                "the environment variable DROPBOX_PATH."
            )

        max_age = self._parse_duration_setting("file-age", cleanup_settings["file_age"])
        interval = self._parse_duration_setting("interval", cleanup_settings["interval"])

        if interval <= timedelta(0):
            raise ConfigError(f"interval must be positive, got '{cleanup_settings['interval']}'")
        if max_age < timedelta(0):
            raise ConfigError(f"file-age must not be negative, got '{cleanup_settings['file_age']}'")

        try:
            abort_timeout = int(cleanup_settings["abort_timeout"])
        except (TypeError, ValueError):
            raise ConfigError(
                f"abort_timeout must be a number of seconds, got '{cleanup_settings['abort_timeout']}'"
            )
        if abort_timeout < 0:
            raise ConfigError("abort_timeout must not be negative")

        return CleanupConfig(
            folder_path=folder_path,
            max_age=max_age,
            interval=interval,
            dry_run=self._parse_bool_setting("dry_run", cleanup_settings["dry_run"]),
            token_storage=os.path.expanduser(dropbox_settings["token_storage"]),
            abort_timeout=abort_timeout,
            verbose=self._parse_bool_setting("verbose", cleanup_settings["verbose"]),
        )

    @staticmethod
    def _parse_bool_setting(name: str, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in BOOL_STRINGS:
            return BOOL_STRINGS[value.strip().lower()]
        raise ConfigError(f"{name} must be true or false, got '{value}'")

    @staticmethod
    def _parse_duration_setting(name: str, value: str) -> timedelta:
        try:
            return parse_duration(value)
        except DurationError:
            raise ConfigError(
                f"{name} value '{value}' could not be parsed. Use values like "
                f"'90s', '30m', '24h' or '1h30m'. Aborting."
            )
