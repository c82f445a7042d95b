"""Resolve upload configuration from file, environment, and explicit overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from partstream.config_manager.helpers import parse_bytes
from partstream.config_manager.upload_config import UploadConfig
from partstream.const import CONFIG_FILE_ENV
from partstream.exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

_ENV_MAP: dict[str, str] = {
    "max_part_size": "PARTSTREAM_MAX_PART_SIZE",
    "concurrent_parts": "PARTSTREAM_CONCURRENT_PARTS",
    "endpoint_url": "PARTSTREAM_ENDPOINT_URL",
    "region_name": "PARTSTREAM_REGION",
}


class ConfigManager:
    """Build effective upload configuration from file, env, and overrides.

    Precedence, lowest first: YAML file, environment variables, keyword
    overrides passed to :meth:`resolve`.
    """

    def __init__(self, config_path: Path | str | None = None) -> None:
        """Initialise ConfigManager.

        Args:
            config_path: YAML file holding base settings. Falls back to the
                path in ``PARTSTREAM_CONFIG``; no file is read if neither is set.
        """
        if config_path is None:
            config_path = os.getenv(CONFIG_FILE_ENV)
        self.config_path = Path(config_path) if config_path else None

    def _read_file(self) -> dict[str, Any]:
        """Read base settings from the YAML file.

        Returns:
            Mapping of config field names to values; empty if no file is set.

        Raises:
            ConfigLoadError: If the file cannot be read or is not a mapping.
        """
        if self.config_path is None:
            return {}
        try:
            with open(self.config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigLoadError(
                f"Failed to load upload config '{self.config_path}': {exc}", exc
            ) from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Upload config '{self.config_path}' must contain a mapping"
            )
        logger.debug("Loaded upload config from %s", self.config_path)
        return data

    def _read_env_overrides(self) -> dict[str, Any]:
        """Read configuration overrides from environment variables.

        Values that cannot be parsed are skipped with a warning.

        Returns:
            A dictionary of configuration field names to override values.
        """
        overrides: dict[str, Any] = {}

        for field_name, env_var_name in _ENV_MAP.items():
            env_value = os.getenv(env_var_name)
            if env_value is None:
                continue

            if field_name == "max_part_size":
                try:
                    overrides[field_name] = parse_bytes(env_value)
                except ValueError:
                    logger.warning("Ignoring %s=%r", env_var_name, env_value)
                    continue
            elif field_name == "concurrent_parts":
                try:
                    overrides[field_name] = int(env_value)
                except ValueError:
                    logger.warning("Ignoring %s=%r", env_var_name, env_value)
                    continue
            else:
                overrides[field_name] = env_value

        return overrides

    def resolve(self, **overrides: Any) -> UploadConfig:
        """Return the effective configuration.

        Args:
            **overrides: Explicit values; ``None`` values are ignored.

        Returns:
            The validated UploadConfig.

        Raises:
            ConfigLoadError: If the config file is unreadable.
            pydantic.ValidationError: If a resolved value is invalid.
        """
        values = self._read_file()
        values.update(self._read_env_overrides())
        values.update({k: v for k, v in overrides.items() if v is not None})
        return UploadConfig(**values)
