"""Simple YAML configuration loader for fieldvoice."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "audio": {
        "sample_rate": 16000,
        "channels": 1,
        "bits_per_sample": 16,
        "chunk_size": 1600,
    },
    "capture": {
        "pre_roll_seconds": 5,
        "chunk_duration_ms": 100,
        "silence_ms": 800,
        "restart_delay_ms": 200,
    },
    "vad": {
        "threshold": 0.5,
        "energy_floor": 500,
    },
    "matching": {
        "command_threshold": 0.32,
        "quick_threshold": 0.25,
    },
    "search": {
        "fuzzy_threshold": 0.4,
    },
    "embedding": {
        "base_url": "https://api.openai.com/v1",
        "model": "text-embedding-3-small",
        "api_key_env": "OPENAI_API_KEY",
    },
    "transcription": {
        "language": "en-US",
        "credentials_path": None,
    },
    "storage": {
        "recordings_directory": "data/recordings",
        "keep_recordings": 5,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/fieldvoice.log",
        "console_output": True,
    },
    "catalog": {
        "commands": None,
        "products": None,
        "shops": None,
    },
}

# Keys holding filesystem paths, resolved relative to the config file.
PATH_KEYS = (
    "transcription.credentials_path",
    "storage.recordings_directory",
    "logging.file_path",
    "catalog.commands",
    "catalog.products",
    "catalog.shops",
)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class FieldVoiceConfig:
    """fieldvoice configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used.
        """
        self.config_file: Optional[Path] = Path(config_path) if config_path else None

        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self.config = copy.deepcopy(DEFAULTS)
            return

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = _merge(DEFAULTS, self._load_config())
        self._resolve_paths(self.config)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent
        for key_path in PATH_KEYS:
            value = self.get(key_path)
            if value and not os.path.isabs(value):
                self.set(key_path, str(config_dir / value))

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'capture.silence_ms').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'matching.command_threshold')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_recordings_directory(self) -> str:
        return str(Path(self.get('storage.recordings_directory')).absolute())
