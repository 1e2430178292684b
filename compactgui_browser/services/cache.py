"""Single-slot dataset cache with a fixed freshness window."""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from compactgui_browser.models.game import Dataset, dataset_to_payload, parse_dataset

from .storage import LocalStorageService

log = structlog.stdlib.get_logger()

CACHE_KEY = "compactGuiData"
CACHE_TIMESTAMP_KEY = "compactGuiTimestamp"
CACHE_DURATION_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEnvelope:
    """A cached dataset and the time it was stored."""
    dataset: Dataset
    timestamp_ms: int

    def age_ms(self, now: int) -> int:
        return now - self.timestamp_ms

    def is_fresh(self, now: int, ttl_ms: int = CACHE_DURATION_MS) -> bool:
        return self.age_ms(now) < ttl_ms


class DatasetCacheService:
    """Stores the last successfully fetched dataset in local storage."""

    def __init__(
        self,
        storage: LocalStorageService,
        ttl_ms: int = CACHE_DURATION_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize the cache.

        Args:
            storage: Local storage holding the cache keys
            ttl_ms: Age in milliseconds after which cached data is stale
            clock: Source of the current time in epoch milliseconds
        """
        self.storage = storage
        self.ttl_ms = ttl_ms
        self._clock = clock

    def read_cache(self) -> Dataset | None:
        """Get the cached dataset if it exists and is still fresh."""
        envelope = self.read_envelope()
        if envelope is None:
            return None

        now = self._clock()
        if not envelope.is_fresh(now, self.ttl_ms):
            log.info("Cached database is stale", age_ms=envelope.age_ms(now), ttl_ms=self.ttl_ms)
            return None

        log.info("Loading data from cache", games=len(envelope.dataset))
        return envelope.dataset

    def read_envelope(self) -> CacheEnvelope | None:
        """Get the cached dataset and its timestamp regardless of age.

        Missing keys and unparseable content both count as an empty cache.
        """
        raw_data = self.storage.get_item(CACHE_KEY)
        raw_timestamp = self.storage.get_item(CACHE_TIMESTAMP_KEY)
        if not raw_data or not raw_timestamp:
            log.debug("No cached database")
            return None

        try:
            timestamp = int(raw_timestamp)
            dataset = parse_dataset(json.loads(raw_data))
        except ValueError as e:
            log.error("Failed to parse cached data", error=str(e))
            return None

        return CacheEnvelope(dataset=dataset, timestamp_ms=timestamp)

    def write_cache(self, dataset: Dataset) -> None:
        """Store a dataset stamped with the current time, replacing any previous entry.

        Raises:
            StorageError: If local storage cannot be written
        """
        timestamp = self._clock()
        self.storage.set_item(CACHE_KEY, json.dumps(dataset_to_payload(dataset), ensure_ascii=False))
        self.storage.set_item(CACHE_TIMESTAMP_KEY, str(timestamp))
        log.info("Database cached", games=len(dataset), timestamp_ms=timestamp)

