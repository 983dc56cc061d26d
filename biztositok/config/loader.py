"""Configuration loader for the biztositok client.

Settings come from a single YAML file with the sections ``client``
(api_endpoint, username, password), ``transport`` (timeouts, user agent,
redirect policy, extra headers) and ``logging``. The file is named either
explicitly or through the BIZTOSITOK_CONFIG environment variable.
"""

import os
from pathlib import Path
from typing import Any, cast

import yaml

from ..exceptions import ConfigurationError
from ..logging_config import get_module_logger

logger = get_module_logger("config")

CONFIG_ENV_VAR = "BIZTOSITOK_CONFIG"

_MISSING = object()


class Config:
    """Configuration manager that loads and provides access to client settings."""

    def __init__(
        self,
        config_dict: dict[str, Any] | None = None,
        config_file: str | Path | None = None,
    ):
        """
        Initialize the configuration manager.

        Args:
            config_dict: Optional dictionary of config values for testing.
                        If provided, no file is read.
            config_file: Optional path of a YAML config file. Falls back to the
                        BIZTOSITOK_CONFIG environment variable when omitted.
        """
        self._configs: dict[str, Any]
        self._config_file: Path | None

        if config_dict is not None:
            # Testing mode: use provided config
            self._configs = config_dict
            self._config_file = None
        else:
            self._configs = {}
            self._config_file = self._find_config_file(config_file)
            self._load_config()

    def _find_config_file(self, config_file: str | Path | None) -> Path | None:
        """Resolve the config file from the argument or the environment."""
        if config_file is None:
            env_value = os.environ.get(CONFIG_ENV_VAR)
            if not env_value:
                return None
            config_file = env_value

        path = Path(config_file).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found at {path}.")

        return path

    def _load_config(self):
        """Load the YAML configuration file, if one was found."""
        if self._config_file is None:
            return

        with open(self._config_file, encoding="utf-8") as f:
            loaded_config = yaml.safe_load(f)

        # Validate that loaded config is a dictionary
        if not isinstance(loaded_config, dict):
            logger.warning(
                f"Config file {self._config_file} must contain a dictionary, "
                f"got {type(loaded_config).__name__}. Using empty config."
            )
            self._configs = {}
        else:
            self._configs = loaded_config

    @property
    def config_file(self) -> Path | None:
        """Path of the loaded config file (None for dict or empty configs)."""
        return self._config_file

    def get(self, path: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation.

        Args:
            path: Dot-separated path to the config value (e.g., "transport.timeout")
            default: Default value to return if path is not found

        Returns:
            The configuration value or default if not found

        Example:
            >>> config.get("transport.timeout")
            60
            >>> config.get("client.api_endpoint")
            "https://www.biztositok.hu"
        """
        parts = path.split(".")
        value = self._configs

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def get_required(self, path: str) -> Any:
        """Get a configuration value that must be present.

        Raises:
            ConfigurationError: If the path is missing or set to null
        """
        value = self.get(path, _MISSING)
        if value is _MISSING or value is None:
            raise ConfigurationError("required value is missing", config_key=path)
        return value

    @property
    def client(self) -> dict[str, Any]:
        """Get client configuration (endpoint and credentials)."""
        return self._section("client")

    @property
    def transport(self) -> dict[str, Any]:
        """Get transport configuration."""
        return self._section("transport")

    @property
    def logging(self) -> dict[str, Any]:
        """Get logging configuration."""
        return self._section("logging")

    def _section(self, name: str) -> dict[str, Any]:
        section = self._configs.get(name)
        if not isinstance(section, dict):
            return {}
        return cast(dict[str, Any], section)

    def reload(self):
        """Reload the configuration file."""
        if self._config_file is None:
            return
        self._configs = {}
        self._load_config()


# Create a singleton instance
config = Config()
