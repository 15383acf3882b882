"""Configuration service - YAML-backed settings with dependency injection.

This service provides a class-based interface with configurable paths.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from contentrouter.app_utils.config_schema import ContentRouterConfig
from contentrouter.app_utils.paths import get_user_data_dir

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for managing content-router configuration."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """Initialize config service.

        Args:
            config_file: Path to config file. Defaults to ~/.contentrouter/config.yaml
        """
        if config_file is None:
            self.config_dir = get_user_data_dir()
            self.config_file = self.config_dir / "config.yaml"
        else:
            self.config_file = Path(config_file)
            self.config_dir = self.config_file.parent

    def load(self) -> ContentRouterConfig:
        """Load configuration from YAML file.

        Creates default config if file doesn't exist. Unreadable or malformed
        files fall back to defaults; invalid values raise ValueError.

        Returns:
            ContentRouterConfig instance.
        """
        if not self.config_file.exists():
            config = ContentRouterConfig.create_default()
            self.save(config)
            return config

        try:
            with open(self.config_file, "r") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, IOError) as e:
            logger.warning(f"Failed to read {self.config_file}, using defaults: {e}")
            return ContentRouterConfig.create_default()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring non-mapping config in {self.config_file}")
            return ContentRouterConfig.create_default()
        return ContentRouterConfig.from_dict(data)

    def save(self, config: ContentRouterConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: ContentRouterConfig to save.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            yaml.safe_dump(
                config.to_dict(), f, default_flow_style=False, sort_keys=False
            )

    def update(self, **kwargs: Any) -> ContentRouterConfig:
        """Persist individual settings addressed as ``<section>_<field>``.

        Keys whose section or field is unknown are logged and skipped. The
        edited config goes through schema validation before it is written.

        Args:
            **kwargs: Settings to change, e.g. ``source_url="https://..."``.

        Returns:
            Updated ContentRouterConfig.

        Raises:
            ValueError: If an updated value fails validation. Nothing is saved.
        """
        data = self.load().to_dict()

        for key, value in kwargs.items():
            section_name, _, field_name = key.partition("_")
            section = data.get(section_name)
            if section is None or field_name not in section:
                logger.warning(f"Unknown config key ignored: '{key}'")
                continue
            section[field_name] = value
            logger.info(f"Config {section_name}.{field_name} set to {value!r}")

        config = ContentRouterConfig.from_dict(data)
        self.save(config)
        return config
