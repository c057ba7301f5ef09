"""
Configuration for Guess The Child

Holds the captioning defaults, merges an optional JSON config file over them
and looks up the Gemini credential from the environment.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gemini-2.5-flash"

CAPTION_PROMPT = (
    "You are creating a fun 'Guess the Child' game. "
    "Here are two photos: one of a person as a child and one of them as an adult. "
    "Write a single, short, witty, and charming caption that humorously or sweetly connects the two photos. "
    "Keep it to one or two sentences. For example: 'The mischievous glint in those eyes? It's definitely still there!' "
    "or 'Some things never change, like that award-winning smile.'"
)


class MissingCredentialError(RuntimeError):
    """Raised at start-up when no Gemini API key is configured."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class AppConfig:
    """Manages application configuration."""

    DEFAULT_CONFIG = {
        "captioning": {
            "model": DEFAULT_MODEL,
            "prompt": CAPTION_PROMPT
        },
        "upload": {
            "preview_size": [512, 512]
        }
    }

    # Checked in order
    API_KEY_ENV_VARS = ("API_KEY", "GEMINI_API_KEY")

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_file: Optional path to a JSON file overriding the defaults
        """
        self.config_file = Path(config_file) if config_file else None
        self._config = copy.deepcopy(self.DEFAULT_CONFIG)

    def load(self) -> Dict[str, Any]:
        """Load configuration from file, merged over the defaults.

        Raises:
            ValueError: If the file exists but is not valid JSON
        """
        if self.config_file is None:
            return self._config

        if not self.config_file.exists():
            logger.warning(f"Config file {self.config_file} not found, using defaults")
            return self._config

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded_config = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load config from {self.config_file}: {e}")
            raise ValueError(f"Invalid config file {self.config_file}: {e}") from e

        if not isinstance(loaded_config, dict):
            raise ValueError(f"Config file {self.config_file} must contain a JSON object")

        _deep_merge(self._config, loaded_config)
        logger.info(f"Loaded configuration from {self.config_file}")
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key path (e.g., 'captioning.model')."""
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key path."""
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            config = config.setdefault(k, {})

        config[keys[-1]] = value

    @property
    def model(self) -> str:
        return self.get("captioning.model", DEFAULT_MODEL)

    @property
    def prompt(self) -> str:
        return self.get("captioning.prompt", CAPTION_PROMPT)

    @property
    def preview_size(self) -> tuple:
        return tuple(self.get("upload.preview_size", [512, 512]))

    def api_key(self) -> str:
        """Return the Gemini API key from the environment.

        Raises:
            MissingCredentialError: If none of API_KEY_ENV_VARS is set
        """
        for name in self.API_KEY_ENV_VARS:
            value = os.environ.get(name, "").strip()
            if value:
                logger.debug(f"Using API key from ${name}")
                return value

        raise MissingCredentialError(
            f"{self.API_KEY_ENV_VARS[0]} environment variable not set."
        )
