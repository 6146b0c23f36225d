"""
Settings loader — reads the optional settings file and the environment.

Settings are resolved in precedence order:
    PANTRY_* env vars  >  settings file  >  built-in defaults

The settings file is YAML, located via ``PANTRY_SETTINGS`` or at
``<home>/config.yml``. It is optional; a missing file is not an error.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from pantry.core.data.constants import (
    DEFAULT_BUCKET,
    DEFAULT_HOME,
    DEFAULT_REGION,
    DEFAULT_TIMEOUT,
)
from pantry.core.errors import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "config.yml"

# Environment variable → Settings field
_ENV_FIELDS: dict[str, str] = {
    "PANTRY_HOME": "home",
    "PANTRY_BUCKET": "bucket",
    "PANTRY_REGION": "region",
    "PANTRY_REGISTRY_URL": "registry_url",
    "PANTRY_TIMEOUT": "timeout",
    "PANTRY_PATH_PRECEDENCE": "path_precedence",
}


class PathPrecedence(str, Enum):
    """Which declared package wins when two expose the same executable."""

    DECLARATION = "declaration"      # first-declared package first on PATH
    LAST_DECLARED = "last-declared"  # last-declared package first on PATH


class Settings(BaseModel):
    """Resolved pantry settings."""

    home: Path = DEFAULT_HOME
    bucket: str = DEFAULT_BUCKET
    region: str = DEFAULT_REGION
    registry_url: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    path_precedence: PathPrecedence = PathPrecedence.DECLARATION

    @property
    def base_url(self) -> str:
        """Registry endpoint; the S3 bucket URL unless overridden."""
        if self.registry_url:
            return self.registry_url.rstrip("/")
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"


def settings_file(environ: Mapping[str, str]) -> Path:
    """Return the settings file location for the given environment."""
    explicit = environ.get("PANTRY_SETTINGS")
    if explicit:
        return Path(explicit).expanduser()
    home = Path(environ.get("PANTRY_HOME") or DEFAULT_HOME).expanduser()
    return home / SETTINGS_FILENAME


def load_settings(
    environ: Mapping[str, str] | None = None,
    path: Path | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        environ: Environment to read ``PANTRY_*`` overrides from
            (default: ``os.environ``).
        path: Explicit settings file. If None, uses ``settings_file()``.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If the settings file or an override is invalid.
    """
    env = os.environ if environ is None else environ
    path = path or settings_file(env)

    data: dict = {}
    if path.is_file():
        logger.debug("Loading settings from %s", path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}")
        data.update(raw)

    for var, field in _ENV_FIELDS.items():
        value = env.get(var)
        if value:
            data[field] = value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid pantry settings: {e}") from e

    settings.home = settings.home.expanduser()
    return settings
