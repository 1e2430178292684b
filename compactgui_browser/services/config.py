"""Configuration service for managing application settings."""

import json
from pathlib import Path
from typing import Any

import httpx
import structlog

from ..models import (
    FALLBACK_DATABASE_URL,
    PAGE_SIZE_OPTIONS,
    PRIMARY_DATABASE_URL,
    AppConfig,
)
from .errors import ConfigurationError, handle_error

log = structlog.stdlib.get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "compactgui-browser" / "config.json"
DEFAULT_STORAGE_PATH = Path.home() / ".local" / "share" / "compactgui-browser"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


def _is_http_url(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


class ConfigurationService:
    """Service for managing application configuration."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or DEFAULT_CONFIG_PATH
        log.debug("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults")
            return self.get_default_config()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data: dict[str, Any] = json.load(f)

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                handle_error(
                    ConfigurationError(
                        f"Invalid configuration: {', '.join(validation_result.errors)}",
                        setting=str(self.config_path),
                    ),
                    operation="load_config",
                    component="config",
                )
                return self.get_default_config()

            log.info("Configuration loaded successfully")
            return config

        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self.get_default_config()

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        if not _is_http_url(config.primary_url):
            errors.append("primary_url must be an http(s) URL")
        if not _is_http_url(config.fallback_url):
            errors.append("fallback_url must be an http(s) URL")

        if not isinstance(config.storage_path, Path):
            errors.append("storage_path must be a Path object")
        elif not config.storage_path.is_absolute():
            errors.append("storage_path must be an absolute path")

        if not isinstance(config.cache_ttl_hours, (int, float)) or config.cache_ttl_hours <= 0:
            errors.append("cache_ttl_hours must be a positive number")

        if not isinstance(config.request_timeout, (int, float)) or config.request_timeout <= 0:
            errors.append("request_timeout must be a positive number")
        elif config.request_timeout > 300:
            errors.append("request_timeout should not exceed 300 seconds")

        if config.page_size not in PAGE_SIZE_OPTIONS:
            errors.append(f"page_size must be one of: {', '.join(str(s) for s in PAGE_SIZE_OPTIONS)}")

        if not isinstance(config.search_debounce_ms, int) or not 0 <= config.search_debounce_ms <= 5000:
            errors.append("search_debounce_ms must be between 0 and 5000")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        return ValidationResult(len(errors) == 0, errors)

    def get_default_config(self) -> AppConfig:
        """Get default configuration."""
        return AppConfig(
            primary_url=PRIMARY_DATABASE_URL,
            fallback_url=FALLBACK_DATABASE_URL,
            storage_path=DEFAULT_STORAGE_PATH,
        )

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig, filling missing settings with defaults."""
        defaults = self.get_default_config()

        def number(key: str, default: float) -> float:
            value = data.get(key, default)
            return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else default

        page_size_raw = data.get("page_size", defaults.page_size)
        debounce_raw = data.get("search_debounce_ms", defaults.search_debounce_ms)

        return AppConfig(
            primary_url=str(data.get("primary_url", defaults.primary_url)),
            fallback_url=str(data.get("fallback_url", defaults.fallback_url)),
            storage_path=Path(str(data.get("storage_path", defaults.storage_path))).expanduser(),
            cache_ttl_hours=number("cache_ttl_hours", defaults.cache_ttl_hours),
            request_timeout=number("request_timeout", defaults.request_timeout),
            page_size=int(page_size_raw) if isinstance(page_size_raw, int) else defaults.page_size,
            search_debounce_ms=int(debounce_raw) if isinstance(debounce_raw, int) else defaults.search_debounce_ms,
            log_level=str(data.get("log_level", defaults.log_level)).upper(),
        )
