"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path

PRIMARY_DATABASE_URL = (
    "https://rawcdn.githack.com/IridiumIO/CompactGUI/"
    "a8a8869ce61e200d542f090d47fab5b0107f0233/database.json"
)
FALLBACK_DATABASE_URL = (
    "https://raw.githubusercontent.com/IridiumIO/CompactGUI/refs/heads/database/database.json"
)
PAGE_SIZE_OPTIONS: tuple[int, ...] = (12, 24, 48, 96)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    primary_url: str
    fallback_url: str
    storage_path: Path  # Directory holding the local storage file
    cache_ttl_hours: float = 24.0
    request_timeout: float = 30.0
    page_size: int = 24
    search_debounce_ms: int = 300
    log_level: str = "INFO"
