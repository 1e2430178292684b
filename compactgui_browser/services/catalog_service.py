"""Catalog loading: fresh cache first, then network, then stale cache."""

from dataclasses import dataclass
from enum import Enum

import structlog

from compactgui_browser.models.game import Dataset

from .cache import DatasetCacheService
from .errors import AggregatedFetchError, StorageError, UserFriendlyError, handle_error
from .loader import DatasetLoaderService

log = structlog.stdlib.get_logger()


class LoadOrigin(Enum):
    """Where the dataset of a load came from."""
    CACHE = "cache"
    PRIMARY = "primary"
    FALLBACK = "fallback"
    STALE_CACHE = "stale_cache"
    NONE = "none"


@dataclass(frozen=True)
class LoadOutcome:
    """Result of one catalog load.

    Attributes:
        dataset: Loaded records, None when nothing could be loaded
        origin: Where the dataset came from
        error: User-facing error when the network fetch failed
        generation: Sequence number of the load that produced this outcome
        superseded: True when a newer load was started before this one finished
    """
    dataset: Dataset | None
    origin: LoadOrigin
    error: UserFriendlyError | None = None
    generation: int = 0
    superseded: bool = False

    @property
    def has_data(self) -> bool:
        return self.dataset is not None


class CatalogService:
    """Coordinates the cache and the loader to produce a dataset."""

    def __init__(self, loader: DatasetLoaderService, cache: DatasetCacheService) -> None:
        self.loader = loader
        self.cache = cache
        self._generation = 0

    @property
    def generation(self) -> int:
        """Sequence number of the most recently started load."""
        return self._generation

    async def load(self, force: bool = False) -> LoadOutcome:
        """Load the catalog.

        A fresh cache entry is used without touching the network unless
        `force` is set. Otherwise the dataset is fetched and cached. When the
        fetch fails entirely, a stale cache entry is returned together with the
        error, or no dataset at all if the cache is empty.

        Args:
            force: Skip the cache and always fetch (explicit refresh)

        Returns:
            LoadOutcome describing the dataset and where it came from
        """
        self._generation += 1
        generation = self._generation

        if not force:
            cached = self.cache.read_cache()
            if cached is not None:
                return LoadOutcome(dataset=cached, origin=LoadOrigin.CACHE, generation=generation)
            log.info("Cache is old or missing, fetching new data")

        try:
            result = await self.loader.fetch_dataset()
        except AggregatedFetchError as e:
            error = handle_error(e, operation="fetch_dataset", component="catalog_service")
            stale = self.cache.read_envelope()
            if stale is not None:
                log.warning("Using stale cached database after fetch failure", games=len(stale.dataset))
                outcome = LoadOutcome(
                    dataset=stale.dataset,
                    origin=LoadOrigin.STALE_CACHE,
                    error=error,
                    generation=generation,
                )
            else:
                outcome = LoadOutcome(dataset=None, origin=LoadOrigin.NONE, error=error, generation=generation)
            return self._finish(outcome)

        try:
            self.cache.write_cache(result.dataset)
            if result.from_fallback:
                log.info("Caching fallback data source for offline use", url=result.source_url)
        except StorageError as e:
            # The data is still usable for this session
            handle_error(e, operation="write_cache", component="catalog_service")

        origin = LoadOrigin.FALLBACK if result.from_fallback else LoadOrigin.PRIMARY
        return self._finish(LoadOutcome(dataset=result.dataset, origin=origin, generation=generation))

    def _finish(self, outcome: LoadOutcome) -> LoadOutcome:
        if outcome.generation != self._generation:
            log.info(
                "Discarding superseded load",
                generation=outcome.generation,
                current=self._generation,
            )
            return LoadOutcome(
                dataset=outcome.dataset,
                origin=outcome.origin,
                error=outcome.error,
                generation=outcome.generation,
                superseded=True,
            )
        return outcome
