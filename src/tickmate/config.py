"""Configuration management for tickmate."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .core.errors import ValidationError
from .core.timectx import DEFAULT_TIMEZONE, get_zone

logger = logging.getLogger(__name__)

TICKMATE_HOME = Path(os.environ.get("TICKMATE_HOME", Path.home() / "tickmate"))
CONFIG_FILE = TICKMATE_HOME / "config" / "tickmate.conf"

DEFAULT_API_BASE = "https://api.ticktick.com/open/v1"


@dataclass
class Config:
    """tickmate configuration."""

    ticktick_token: str = ""
    ticktick_api_base: str = DEFAULT_API_BASE
    timezone: str = DEFAULT_TIMEZONE
    fetch_workers: int = 8
    request_timeout: int = 30
    log_level: str = "INFO"


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline # comment on unquoted values."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _positive_int(key: str, value: str, default: int) -> int:
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key.upper()}: {value}")
        return default
    if number < 1:
        logger.warning(f"Ignoring non-positive {key.upper()}: {value}")
        return default
    return number


def _apply(config: Config, key: str, value: str) -> None:
    match key:
        case "ticktick_token":
            config.ticktick_token = value
        case "ticktick_api_base":
            config.ticktick_api_base = value.rstrip("/")
        case "timezone":
            try:
                get_zone(value)
                config.timezone = value
            except ValidationError:
                logger.warning(f"Unknown TIMEZONE {value!r}, keeping {config.timezone}")
        case "fetch_workers":
            config.fetch_workers = _positive_int(key, value, config.fetch_workers)
        case "request_timeout":
            config.request_timeout = _positive_int(key, value, config.request_timeout)
        case "log_level":
            config.log_level = value.upper()
        case _:
            logger.debug(f"Unknown config key: {key}")


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration from tickmate.conf, then apply environment overrides.

    File format is KEY=value per line with # comments. TICKTICK_TOKEN and
    TIMEZONE in the environment win over the file.
    """
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            _apply(config, key.strip().lower(), _unquote(value.strip()))

    for env_key in ("TICKTICK_TOKEN", "TIMEZONE"):
        if os.environ.get(env_key):
            _apply(config, env_key.lower(), os.environ[env_key].strip())

    return config
