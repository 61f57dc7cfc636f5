"""Runtime settings for api-inspector.

Sources, lowest priority first:
1. Default values
2. YAML config file (explicit path, else ./.api-inspector.yml when present)
3. Environment variables (API_INSPECTOR_<FIELD>)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from api_inspector.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(".api-inspector.yml")
ENV_PREFIX = "API_INSPECTOR_"


class Settings(BaseModel):
    """Tunables for grouping, remote fetching and logging."""

    success_status_min: int = 200
    success_status_max: int = 299
    endpoint_limit: int = Field(default=100, ge=0)  # newest exchanges analyzed per endpoint
    request_limit: int = Field(default=100, ge=0)
    timeout: float = Field(default=10.0, gt=0)  # seconds, remote inspector queries
    log_level: str = "WARNING"

    def is_success(self, status_code: int | None) -> bool:
        if status_code is None:
            return False
        return self.success_status_min <= status_code <= self.success_status_max


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load settings overrides from a YAML file."""
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")
    return data


def load_env_overrides(environ: dict[str, str] | None = None) -> dict[str, str]:
    """Collect API_INSPECTOR_* variables that name a settings field."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for field in Settings.model_fields:
        key = ENV_PREFIX + field.upper()
        if key in environ:
            overrides[field] = environ[key]
    return overrides


def load_settings(config_path: Path | None = None, environ: dict[str, str] | None = None) -> Settings:
    """Build settings from defaults, config file and environment."""
    values: dict[str, Any] = {}

    if config_path is None and DEFAULT_CONFIG_FILE.exists():
        config_path = DEFAULT_CONFIG_FILE
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        values.update(load_config_file(config_path))
        logger.debug("Loaded config from %s", config_path)

    values.update(load_env_overrides(environ))

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
