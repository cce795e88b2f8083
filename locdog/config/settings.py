"""Environment settings."""

import os
from typing import Optional


CONFIG_DIR = os.path.join("~", ".config", "locdog")
DEFAULT_CONFIG_PATH = os.path.join(CONFIG_DIR, "config.yaml")
# Location used by earlier releases
LEGACY_CONFIG_PATH = os.path.join(CONFIG_DIR, "config.json")


class Settings:
    """Application settings from environment variables."""

    @staticmethod
    def get(key: str, default: Optional[str] = None, required: bool = False) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set
            required: Whether the variable is required

        Returns:
            str: Environment variable value

        Raises:
            ValueError: If required variable is not set
        """
        value = os.getenv(key, default)
        if required and not value:
            raise ValueError(f"Required environment variable not set: {key}")
        return value or ""

    @staticmethod
    def config_path() -> str:
        """
        Config file path from LOCDOG_CONFIG, else the per-user default.

        Without LOCDOG_CONFIG, ``config.yaml`` is preferred and ``config.json``
        is used when only that one exists.
        """
        override = Settings.get("LOCDOG_CONFIG")
        if override:
            return os.path.expanduser(override)

        yaml_path = os.path.expanduser(DEFAULT_CONFIG_PATH)
        json_path = os.path.expanduser(LEGACY_CONFIG_PATH)
        if not os.path.exists(yaml_path) and os.path.exists(json_path):
            return json_path
        return yaml_path

    @staticmethod
    def log_level() -> str:
        return Settings.get("LOG_LEVEL", "INFO").upper()
