"""Configuration loader with YAML/JSON parsing and environment variable substitution."""

import json
import yaml
import os
import re
from pathlib import Path
from typing import Any
from .models import WatchdogConfig


class ConfigLoader:
    """Load and validate watchdog configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> WatchdogConfig:
        """
        Load configuration from a YAML or JSON file with environment variable substitution.

        Files ending in ``.json`` are parsed as JSON, everything else as YAML.

        Args:
            config_path: Path to configuration file (``~`` is expanded)

        Returns:
            WatchdogConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            json.JSONDecodeError: If JSON parsing fails
            ValueError: If the document is not a mapping
            pydantic.ValidationError: If configuration validation fails
        """
        config_file = Path(config_path).expanduser()
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            if config_file.suffix.lower() == '.json':
                raw_config = json.load(f)
            else:
                raw_config = yaml.safe_load(f)

        return ConfigLoader.load_from_dict(raw_config)

    @staticmethod
    def load_from_dict(raw_config: Any) -> WatchdogConfig:
        """
        Validate an already-parsed configuration document.

        Args:
            raw_config: Parsed document (``None`` is treated as empty)

        Returns:
            WatchdogConfig: Validated configuration object
        """
        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, dict):
            raise ValueError(
                f"Configuration must be a mapping, got {type(raw_config).__name__}"
            )

        raw_config = ConfigLoader._substitute_env_vars(raw_config)

        return WatchdogConfig(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
