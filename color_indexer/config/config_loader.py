"""Configuration loading with file, environment and override support."""

import json
import os
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..errors import ConfigurationError
from ..indexer_logging import get_logger
from .models import ColorIndexerConfig

logger = get_logger()

CONFIG_FILENAME = "color-indexer.config.json"

ENV_VARS = {
    "languages": "COLOR_INDEXER_LANGUAGES",
    "max_stylesheet_files": "COLOR_INDEXER_MAX_FILES",
    "log_level": "COLOR_INDEXER_LOG_LEVEL",
}


def to_snake_case(key: str) -> str:
    """``maxStylesheetFiles`` -> ``max_stylesheet_files``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


class ConfigLoader:
    """Merges configuration sources into a validated ``ColorIndexerConfig``."""

    def __init__(self, project_path: Path | None = None, config_file: Path | None = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()
        self.config_file = Path(config_file) if config_file else None

    @property
    def config_path(self) -> Path:
        return self.config_file or self.project_path / CONFIG_FILENAME

    def load(self, **overrides: Any) -> ColorIndexerConfig:
        """Load configuration from all sources.

        Precedence (highest to lowest):
        1. Explicit overrides
        2. Environment variables
        3. Config file (color-indexer.config.json)
        4. Defaults

        Raises:
            ConfigurationError: If the file is unreadable or a value fails
                validation.
        """
        config_dict: dict[str, Any] = {}

        # 1. Config file
        path = self.config_path
        if path.exists():
            file_settings = self._read_file(path)
            config_dict.update(file_settings)
            logger.debug(f"Loaded {len(file_settings)} settings from {path}")
        elif self.config_file is not None:
            raise ConfigurationError(f"Config file not found: {path}", path=path)

        # 2. Environment variables
        env_count = 0
        for key, env_name in ENV_VARS.items():
            value = os.environ.get(env_name)
            if value is not None:
                config_dict[key] = value
                env_count += 1
        if env_count > 0:
            logger.debug(f"Applied {env_count} environment variables")

        # 3. Explicit overrides
        explicit = {key: value for key, value in overrides.items() if value is not None}
        config_dict.update(explicit)
        if explicit:
            logger.debug(f"Applied {len(explicit)} explicit overrides")

        try:
            return ColorIndexerConfig(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.error_count()} error(s)\n{e}",
                path=path if path.exists() else None,
            ) from e

    @staticmethod
    def _read_file(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}", path=path) from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read {path}: {e}", path=path) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file must contain a JSON object: {path}", path=path
            )

        known = set(ColorIndexerConfig.model_fields)
        settings = {}
        for key, value in data.items():
            name = to_snake_case(key)
            if name in known:
                settings[name] = value
            else:
                logger.warning(f"Ignoring unknown setting '{key}' in {path}")
        return settings


def load_config(path: Path | None = None, **overrides: Any) -> ColorIndexerConfig:
    """Load configuration from multiple sources with precedence.

    Args:
        path: Config file OR project directory containing
            ``color-indexer.config.json``. Defaults to the current directory.
        **overrides: Explicit configuration overrides.

    Returns:
        Configured ColorIndexerConfig instance.
    """
    if path is not None and Path(path).is_dir():
        return ConfigLoader(project_path=Path(path)).load(**overrides)
    return ConfigLoader(config_file=Path(path) if path else None).load(**overrides)
