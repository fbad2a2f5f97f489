#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: config_manager.py
# Author: Rajaram Lakshmanan
# Description:  Configuration manager for loading and validating the ingest
# configuration.
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import os
import yaml
import json
import logging
from typing import Dict, Any, Optional

from pydantic import ValidationError

from deconz_ingest.config.models.ingest_config import IngestConfig

logger = logging.getLogger("ConfigManager")

class ConfigManager:
    """
    Configuration manager for loading and validating the ingest configuration.
    """

    def __init__(self):
        """Initialize a new configuration manager."""
        self._config: Optional[IngestConfig] = None
        self._config_file: Optional[str] = None

    @property
    def config(self) -> IngestConfig:
        """
        Get the validated configuration.

        Raises:
            ValueError: If configuration hasn't been loaded.
        """
        if self._config is None:
            raise ValueError("Configuration is not loaded. Call load() first.")
        return self._config

    @property
    def config_file(self) -> Optional[str]:
        """Return the path of the loaded configuration file."""
        return self._config_file

    def load(self, config_file: str = "config/config.yaml") -> IngestConfig:
        """
        Load the configuration from a YAML or JSON file.

        Args:
            config_file: Path to the configuration file.

        Returns:
            The validated configuration object.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ValueError: If the file format is not supported or the configuration is invalid.
        """
        if not os.path.isfile(config_file):
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        file_ext = os.path.splitext(config_file)[1].lower()
        if file_ext not in ('.yaml', '.yml', '.json'):
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

        try:
            with open(config_file, 'r') as f:
                if file_ext == '.json':
                    raw_config = json.load(f)
                else:
                    raw_config = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading configuration file: {e}")
            raise ValueError(f"Unable to read configuration file {config_file}: {e}") from e

        if not isinstance(raw_config, dict):
            raise ValueError(f"Configuration file {config_file} must contain a mapping at the top level")

        self._config = self.validate(raw_config)
        self._config_file = config_file
        logger.info(f"Configuration loaded and validated successfully from {config_file}")
        return self._config

    @staticmethod
    def validate(raw_config: Dict[str, Any]) -> IngestConfig:
        """
        Validate a raw configuration dictionary.

        Raises:
            ValueError: If the configuration is invalid.
        """
        try:
            # ** operator is unpacking the raw config dictionary
            return IngestConfig(**raw_config)
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise ValueError(f"Invalid configuration: {e}") from e
