"""
Environment configuration for daggersheet.

Settings are read from the environment, after loading a ``.env`` file if one
is present:

- DAGGERSHEET_CONTENT_PATH: JSON/YAML content file for the default catalog.
- DAGGERSHEET_LOG_LEVEL: level name used by ``configure_logging`` (default INFO).

Modules log to ``logging.getLogger("daggersheet")`` or a dotted child of it.
"""

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .catalog import ContentCatalog

logger = logging.getLogger("daggersheet")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class ConfigError(Exception):
    """Invalid environment configuration."""
    pass


class EngineSettings(BaseModel):
    content_path: Path | None = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level


def load_settings(env: Mapping[str, str] | None = None) -> EngineSettings:
    """Build settings from ``env`` (defaults to ``os.environ`` plus ``.env``).

    Raises:
        ConfigError: If a value fails validation.
    """
    if env is None:
        if not load_dotenv():
            logger.debug(".env file not found, using process environment only")
        env = os.environ

    raw = {
        "content_path": env.get("DAGGERSHEET_CONTENT_PATH") or None,
        "log_level": env.get("DAGGERSHEET_LOG_LEVEL") or "INFO",
    }
    try:
        return EngineSettings(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid daggersheet configuration: {e}") from e


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send daggersheet log output to the console.

    The library never calls this itself; hosts that want console logging do.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)


def setup_logging(settings: EngineSettings | None = None) -> None:
    settings = settings or load_settings()
    configure_logging(settings.log_level)


def default_catalog(settings: EngineSettings | None = None) -> ContentCatalog:
    """Catalog from DAGGERSHEET_CONTENT_PATH, or an empty one if unset."""
    settings = settings or load_settings()
    if settings.content_path is None:
        logger.debug("No content path configured, using an empty catalog")
        return ContentCatalog()
    logger.debug(f"📂 Content path: {settings.content_path}")
    return ContentCatalog.from_file(settings.content_path)
