"""
Centralized configuration management.

Configuration sources, later overriding earlier:
1) `env.example` (committed, safe placeholders)
2) `env.local` (optional, MUST NOT be committed)
3) System environment variables (highest priority)
"""

import os
from pathlib import Path

from dotenv import dotenv_values
from loguru import logger


class EnvironConfig:
    """
    Singleton configuration class that loads environment variables from env files
    and system environment, providing dictionary-like access with default values.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(EnvironConfig, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = {}
            self._load_config()
            EnvironConfig._initialized = True

    def _load_config(self):
        root = Path(__file__).parent.parent.parent

        example_path = root / "env.example"
        if example_path.exists():
            self._config.update(dotenv_values(example_path))
            logger.info("Loaded environment variables from {}", example_path)

        local_path = root / "env.local"
        if local_path.exists():
            self._config.update(dotenv_values(local_path))
            logger.info("Loaded and overrode environment variables from {}", local_path)

        self._config.update(os.environ)

    def __getitem__(self, key):
        if key not in self._config:
            raise KeyError(f"Configuration key '{key}' not found")

        return self._config[key]

    def get(self, key, default=None):
        return self._config.get(key, default)

    def reload(self):
        """
        Reload configuration from files and environment.
        Useful for testing or when configuration files change.
        """
        self._config.clear()
        self._load_config()
        logger.info("Configuration reloaded")

    def __contains__(self, key):
        return key in self._config

    def __iter__(self):
        return iter(self._config)

    def keys(self):
        return self._config.keys()

    def values(self):
        return self._config.values()

    def items(self):
        return self._config.items()

    def get_str(self, key: str, default: str = "") -> str:
        return (self.get(key) or "").strip() or default

    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = (self.get(key) or "").strip().lower()
        if not raw:
            return default
        return raw in {"1", "true", "yes", "on"}

    def get_int(self, key: str, default: int, *, minimum: int = 1) -> int:
        """
        Get an integer value, falling back to the default on bad input.

        Args:
            key: Configuration key
            default: Value used when the key is missing, malformed or below minimum
            minimum: Smallest accepted value

        Returns:
            int: Parsed value or default
        """
        raw = self.get(key)
        if raw is None or str(raw).strip() == "":
            return default
        try:
            value = int(str(raw).strip())
        except (ValueError, TypeError):
            logger.warning("Invalid {} value '{}', defaulting to {}", key, raw, default)
            return default
        if value < minimum:
            logger.warning("{} value {} is below {}, defaulting to {}", key, value, minimum, default)
            return default
        return value

    def get_float(self, key: str, default: float, *, minimum: float = 0.0) -> float:
        raw = self.get(key)
        if raw is None or str(raw).strip() == "":
            return default
        try:
            value = float(str(raw).strip())
        except (ValueError, TypeError):
            logger.warning("Invalid {} value '{}', defaulting to {}", key, raw, default)
            return default
        if value < minimum:
            logger.warning("{} value {} is below {}, defaulting to {}", key, value, minimum, default)
            return default
        return value

    def get_float_list(self, key: str, default: list[float]) -> list[float]:
        """
        Get a comma-separated list of floats, e.g. `5,20,60`.

        Returns:
            list[float]: Parsed values, or default if any element is malformed
        """
        raw = (self.get(key) or "").strip()
        if not raw:
            return list(default)
        try:
            return [float(x.strip()) for x in raw.split(",") if x.strip()]
        except ValueError:
            logger.warning("Invalid {} value '{}', defaulting to {}", key, raw, default)
            return list(default)

    def get_list(self, key: str, default: list[str]) -> list[str]:
        raw = (self.get(key) or "").strip()
        if not raw:
            return list(default)
        return [x.strip() for x in raw.split(",") if x.strip()]


config = EnvironConfig()
