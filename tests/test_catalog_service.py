"""Tests for catalog load orchestration: cache, network and stale fallback."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from compactgui_browser.models import RawGameRecord
from compactgui_browser.services.cache import DatasetCacheService
from compactgui_browser.services.catalog_service import CatalogService, LoadOrigin
from compactgui_browser.services.errors import (
    AggregatedFetchError,
    ErrorCategory,
    NetworkError,
    StorageError,
)
from compactgui_browser.services.loader import DatasetLoaderService, FetchResult
from compactgui_browser.services.storage import LocalStorageService

HOUR_MS = 60 * 60 * 1000
NOW = 1_700_000_000_000

CACHED = [RawGameRecord(steam_id="400", game_name="Portal")]
FETCHED = [RawGameRecord(steam_id="620", game_name="Portal 2"), RawGameRecord(steam_id="70", game_name="Half-Life")]


def _total_failure() -> AggregatedFetchError:
    return AggregatedFetchError(
        primary_error=NetworkError("HTTP error! status: 500", status_code=500),
        fallback_error=NetworkError("Unable to reach the database source"),
        primary_url="https://primary.example.com",
        fallback_url="https://fallback.example.com",
    )


def _loader(result: FetchResult | Exception) -> AsyncMock:
    loader = AsyncMock(spec=DatasetLoaderService)
    if isinstance(result, Exception):
        loader.fetch_dataset.side_effect = result
    else:
        loader.fetch_dataset.return_value = result
    return loader


@pytest.fixture
def cache(tmp_path: Path) -> DatasetCacheService:
    return DatasetCacheService(LocalStorageService(tmp_path), clock=lambda: NOW)


def _seed(cache: DatasetCacheService, age_ms: int) -> None:
    DatasetCacheService(cache.storage, clock=lambda: NOW - age_ms).write_cache(CACHED)


@pytest.mark.asyncio
async def test_fresh_cache_skips_network(cache: DatasetCacheService) -> None:
    _seed(cache, age_ms=HOUR_MS)
    loader = _loader(FetchResult(dataset=FETCHED, source_url="primary"))

    outcome = await CatalogService(loader, cache).load()

    loader.fetch_dataset.assert_not_awaited()
    assert outcome.origin is LoadOrigin.CACHE
    assert outcome.dataset == CACHED
    assert outcome.error is None


@pytest.mark.asyncio
async def test_stale_cache_triggers_fetch_and_recache(cache: DatasetCacheService) -> None:
    _seed(cache, age_ms=25 * HOUR_MS)
    loader = _loader(FetchResult(dataset=FETCHED, source_url="primary"))

    outcome = await CatalogService(loader, cache).load()

    loader.fetch_dataset.assert_awaited_once()
    assert outcome.origin is LoadOrigin.PRIMARY
    assert outcome.dataset == FETCHED
    assert cache.read_cache() == FETCHED


@pytest.mark.asyncio
async def test_force_refresh_ignores_fresh_cache(cache: DatasetCacheService) -> None:
    _seed(cache, age_ms=HOUR_MS)
    loader = _loader(FetchResult(dataset=FETCHED, source_url="primary"))

    outcome = await CatalogService(loader, cache).load(force=True)

    loader.fetch_dataset.assert_awaited_once()
    assert outcome.dataset == FETCHED


@pytest.mark.asyncio
async def test_fallback_result_is_cached_without_error(cache: DatasetCacheService) -> None:
    loader = _loader(FetchResult(dataset=FETCHED, source_url="fallback", from_fallback=True))

    outcome = await CatalogService(loader, cache).load()

    assert outcome.origin is LoadOrigin.FALLBACK
    assert outcome.error is None
    assert cache.read_cache() == FETCHED


@pytest.mark.asyncio
async def test_total_failure_uses_stale_cache(cache: DatasetCacheService) -> None:
    _seed(cache, age_ms=48 * HOUR_MS)
    loader = _loader(_total_failure())

    outcome = await CatalogService(loader, cache).load()

    assert outcome.origin is LoadOrigin.STALE_CACHE
    assert outcome.dataset == CACHED
    assert outcome.error is not None
    assert outcome.error.category == ErrorCategory.NETWORK
    assert "primary" in (outcome.error.technical_details or "").lower()
    assert "fallback" in (outcome.error.technical_details or "").lower()


@pytest.mark.asyncio
async def test_total_failure_without_cache(cache: DatasetCacheService) -> None:
    loader = _loader(_total_failure())

    outcome = await CatalogService(loader, cache).load()

    assert outcome.origin is LoadOrigin.NONE
    assert outcome.dataset is None
    assert not outcome.has_data
    assert outcome.error is not None


@pytest.mark.asyncio
async def test_cache_write_failure_is_not_fatal(cache: DatasetCacheService) -> None:
    loader = _loader(FetchResult(dataset=FETCHED, source_url="primary"))
    broken_cache = MagicMock(spec=DatasetCacheService)
    broken_cache.read_cache.return_value = None
    broken_cache.write_cache.side_effect = StorageError("Could not save data to local storage.")

    outcome = await CatalogService(loader, broken_cache).load()

    assert outcome.origin is LoadOrigin.PRIMARY
    assert outcome.dataset == FETCHED


@pytest.mark.asyncio
async def test_generation_increases_per_load(cache: DatasetCacheService) -> None:
    service = CatalogService(_loader(FetchResult(dataset=FETCHED, source_url="primary")), cache)

    first = await service.load(force=True)
    second = await service.load(force=True)

    assert (first.generation, second.generation) == (1, 2)
    assert service.generation == 2
    assert not first.superseded
    assert not second.superseded


@pytest.mark.asyncio
async def test_slow_load_is_superseded_by_newer_load(cache: DatasetCacheService) -> None:
    release = asyncio.Event()
    calls = 0

    async def fetch() -> FetchResult:
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            return FetchResult(dataset=CACHED, source_url="slow")
        return FetchResult(dataset=FETCHED, source_url="fast")

    loader = AsyncMock(spec=DatasetLoaderService)
    loader.fetch_dataset.side_effect = fetch
    service = CatalogService(loader, cache)

    slow = asyncio.create_task(service.load(force=True))
    while calls == 0:
        await asyncio.sleep(0)
    fast = await service.load(force=True)
    release.set()
    stale = await slow

    assert not fast.superseded
    assert fast.dataset == FETCHED
    assert stale.superseded
    assert stale.generation < fast.generation
