"""HTTP client service for fetching the compression database."""

import json
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class HttpClientService:
    """Thin async HTTP client with timeout handling and request logging.

    Requests are made exactly once; recovering from a failed source is the
    loader's job, not the client's.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            transport: Optional transport override (used by tests)
        """
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": "CompactGUI-Browser/0.1",
                "Accept": "application/json",
            },
            follow_redirects=True,
            verify=verify_ssl,
            transport=transport,
        )

        log.debug("HTTP client service initialized", timeout=timeout, verify_ssl=verify_ssl)

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make a single GET request.

        Args:
            url: The URL to request
            headers: Optional additional headers
            params: Optional query parameters

        Returns:
            HTTP response object with a success status

        Raises:
            httpx.HTTPStatusError: If the server answers with a non-success status
            httpx.RequestError: If the request could not be completed
        """
        log.debug("Making HTTP GET request", url=url)

        try:
            response = await self._client.get(url, headers=headers, params=params)
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            log.warning(
                "HTTP GET request failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        log.info(
            "HTTP GET request successful",
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response

    async def get_json(self, url: str) -> Any:
        """GET a URL and decode its body as JSON.

        Raises:
            httpx.HTTPStatusError: If the server answers with a non-success status
            httpx.RequestError: If the request could not be completed
            json.JSONDecodeError: If the body is not valid JSON
        """
        response = await self.get(url)
        try:
            return response.json()
        except json.JSONDecodeError as e:
            log.warning("Response body is not valid JSON", url=url, error=str(e))
            raise

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.debug("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
