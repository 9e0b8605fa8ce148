"""Application configuration pulled from environment variables via pydantic."""
from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the weather CLI."""
    model_config = SettingsConfigDict(env_prefix="WEATHER_CLI_", extra="ignore", validate_assignment=True)

    api_key: str | None = None
    base_url: str = "https://api.weatherapi.com/v1"
    timeout_seconds: int = 15
    user_agent: str = "WeatherCLI-Pro/2.0"
    max_retries: int = 3
    backoff_seconds: float = 2.0
    cache_ttl_seconds: float = 300.0
    config_file: str = "weather_cli_config.json"
    log_file: str = "weather_cli.log"
    logging_enabled: bool = True
    log_level: str = "INFO"

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("timeout_seconds", "max_retries", mode="after")
    @classmethod
    def require_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("backoff_seconds", mode="after")
    @classmethod
    def require_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("cache_ttl_seconds", mode="after")
    @classmethod
    def require_positive_ttl(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    def masked_api_key(self) -> str:
        """Return the first eight characters of the key for display."""
        if not self.api_key:
            return "(not set)"
        return self.api_key[:8] + "..."


def save_settings_file(settings: Settings, path: str | Path | None = None) -> bool:
    """Write the persisted subset of settings (API key and timeout) as JSON."""
    target = Path(path or settings.config_file)
    payload = {"api_key": settings.api_key, "timeout": settings.timeout_seconds}
    try:
        target.write_text(json.dumps(payload, indent=4), encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write settings file %s: %s", target, exc)
        return False
    logger.info("Settings exported to %s", target)
    return True


def load_settings_file(settings: Settings, path: str | Path | None = None) -> bool:
    """Apply API key and timeout from a JSON settings file, if present."""
    source = Path(path or settings.config_file)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.info("No settings file at %s", source)
        return False
    except (OSError, ValueError) as exc:
        logger.warning("Failed to read settings file %s: %s", source, exc)
        return False

    if not isinstance(data, dict):
        logger.warning("Settings file %s does not contain a JSON object", source)
        return False

    update = {}
    if "api_key" in data:
        update["api_key"] = data["api_key"]
    if "timeout" in data:
        update["timeout_seconds"] = data["timeout"]

    # Validate the whole update before touching the live settings.
    try:
        validated = Settings.model_validate({**settings.model_dump(), **update})
    except ValidationError as exc:
        logger.warning("Invalid values in settings file %s: %s", source, exc)
        return False

    for name in update:
        setattr(settings, name, getattr(validated, name))

    logger.info("Settings imported from %s", source)
    return True


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {Settings().model_dump_json(indent=4)}")
