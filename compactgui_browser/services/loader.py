"""Dataset loader with a primary source and a single fallback mirror."""

from dataclasses import dataclass

import httpx
import structlog

from compactgui_browser.models.game import Dataset, parse_dataset

from .errors import AggregatedFetchError, DatasetFormatError, NetworkError
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()


@dataclass(frozen=True)
class FetchResult:
    """A dataset together with the source it was downloaded from."""
    dataset: Dataset
    source_url: str
    from_fallback: bool = False


class DatasetLoaderService:
    """Fetches the compression database, falling back to a mirror on failure.

    The primary source is always tried first. The fallback is only requested
    after the primary has failed, so the two requests never overlap. There is
    no retry beyond that one extra hop.
    """

    def __init__(
        self,
        http_client: HttpClientService,
        primary_url: str,
        fallback_url: str,
    ) -> None:
        self.http_client = http_client
        self.primary_url = primary_url
        self.fallback_url = fallback_url

    async def fetch_dataset(self) -> FetchResult:
        """Download and parse the dataset.

        Returns:
            FetchResult with the parsed records and the URL that served them

        Raises:
            AggregatedFetchError: If both the primary and the fallback source fail
        """
        try:
            dataset = await self._attempt_fetch(self.primary_url)
            return FetchResult(dataset=dataset, source_url=self.primary_url)
        except (NetworkError, DatasetFormatError) as primary_error:
            log.warning(
                "Primary database fetch failed, trying fallback",
                url=self.primary_url,
                error=str(primary_error),
            )

            try:
                dataset = await self._attempt_fetch(self.fallback_url)
            except (NetworkError, DatasetFormatError) as fallback_error:
                log.error(
                    "Fallback database fetch failed",
                    url=self.fallback_url,
                    error=str(fallback_error),
                )
                raise AggregatedFetchError(
                    primary_error=primary_error,
                    fallback_error=fallback_error,
                    primary_url=self.primary_url,
                    fallback_url=self.fallback_url,
                ) from fallback_error

            log.info("Loaded database from fallback source", url=self.fallback_url, games=len(dataset))
            return FetchResult(dataset=dataset, source_url=self.fallback_url, from_fallback=True)

    async def _attempt_fetch(self, url: str) -> Dataset:
        """Fetch and parse the dataset from one source.

        Raises:
            NetworkError: If the request fails or returns a non-success status
            DatasetFormatError: If the body is not a valid game database
        """
        try:
            payload = await self.http_client.get_json(url)
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"HTTP error! status: {e.response.status_code}",
                original_error=e,
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(
                "Unable to reach the database source",
                original_error=e,
                url=url,
            ) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError both land here
            raise DatasetFormatError(
                "Database source returned invalid JSON",
                source=url,
                original_error=e,
            ) from e

        try:
            dataset = parse_dataset(payload)
        except ValueError as e:
            raise DatasetFormatError(
                "Database source returned an unexpected document",
                source=url,
                original_error=e,
            ) from e

        log.debug("Database parsed", url=url, games=len(dataset))
        return dataset
