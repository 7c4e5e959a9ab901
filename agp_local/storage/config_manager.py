"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from agp_local.exceptions import ConfigurationError
from agp_local.models.config import AppConfig

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.ini"


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, app_data_dir: Path):
        self.app_data_dir = app_data_dir
        self.config_file_path = app_data_dir / CONFIG_FILE_NAME
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> AppConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.
        A default configuration file is written when none exists yet.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated AppConfig object.

        Raises:
            ConfigurationError: If the config file is invalid or validation fails.
        """
        if not self.config_file_path.is_file():
            log.info(
                f"[yellow]No configuration found, writing defaults to "
                f"'{self.config_file_path}'.[/yellow]"
            )
            self.save_new_config({})

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Error parsing configuration file: {e}") from e

        if self._migrate_if_needed():
            log.info(
                "[yellow]Configuration file was updated with new default values."
                "[/yellow]"
            )

        config_from_file = self._get_config_as_dict()

        # Override with CLI options
        if cli_options:
            config_from_file.update(cli_options)

        try:
            return AppConfig(
                **config_from_file, app_data_path=str(self.app_data_dir)
            )
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save; missing keys use defaults.
        """
        config = configparser.ConfigParser(interpolation=None)
        config["DEFAULT"] = {}

        defaults = AppConfig.model_construct()
        for key in sorted(AppConfig.get_ini_keys()):
            value = settings.get(key, getattr(defaults, key, None))
            config["DEFAULT"][key] = self._to_ini_value(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini_value(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, list):
            return ",".join(map(str, value))
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        values: dict[str, Any] = {
            "server_url": section.get("server_url", ""),
            "api_token": section.get("api_token", ""),
            "drafts_path": section.get("drafts_path", ""),
            "games_path": section.get("games_path", ""),
        }
        try:
            values["fetch_attempts"] = section.getint("fetch_attempts", 3)
            values["request_timeout"] = section.getint("request_timeout", 60)
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        patterns = [
            p.strip()
            for p in section.get("entrypoint_patterns", "").split(",")
            if p.strip()
        ]
        if patterns:
            values["entrypoint_patterns"] = patterns
        return values

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = AppConfig.model_construct()
        needs_saving = False

        config_section = self._parser["DEFAULT"]
        for key in sorted(AppConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini_value(getattr(defaults, key, None))
                needs_saving = True

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                    self._parser.write(configfile)
            except OSError as e:
                log.warning(f"Could not update configuration file: {e}")
                return False
        return needs_saving
