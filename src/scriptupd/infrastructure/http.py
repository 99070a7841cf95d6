"""Conditional HTTP fetcher built on httpx.

``HttpFetcher.request_newer`` remembers the ``ETag`` and ``Last-Modified``
validators of every URL it fetched and sends them back on the next request,
so an unchanged update URL costs a bodiless 304 instead of a full download.
"""

from typing import Optional

import httpx

from scriptupd.domain.types import FetchOptions, FetchResult
from scriptupd.errors import FetchError
from scriptupd.logger import get_logger

logger = get_logger("http")


class HttpFetcher:
    """
    Async fetcher implementing the NewerFetcher protocol.

    Example:
        >>> async with HttpFetcher(timeout=10) as fetcher:
        ...     result = await fetcher.request_newer(url, FAST_CHECK)
        ...     if result is None:
        ...         print("unchanged")
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = 30.0,
        user_agent: str = "scriptupd",
    ):
        """
        Initialize the fetcher.

        Args:
            client: Client to send requests with; one is created (and owned) when omitted
            timeout: Request timeout in seconds for an owned client
            user_agent: User-Agent header for an owned client
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )
        self._validators: dict[str, tuple[Optional[str], Optional[str]]] = {}

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def request_newer(
        self, url: str, options: FetchOptions, force: bool = False
    ) -> Optional[FetchResult]:
        """
        GET ``url``, returning None when the server says it has not changed.

        Args:
            url: URL to fetch
            options: Cache and header settings
            force: Do not send the remembered validators

        Raises:
            FetchError: On transport errors or non-success statuses
        """
        headers = options.header_dict()
        etag, last_modified = (None, None) if force else self._validators.get(url, (None, None))
        if etag:
            headers["If-None-Match"] = etag
        if last_modified:
            headers["If-Modified-Since"] = last_modified

        response = await self._get(url, headers)
        if response.status_code == 304:
            logger.debug(f"Not modified: {url}")
            return None
        result = self._to_result(url, response)
        if result.etag or result.last_modified:
            self._validators[url] = (result.etag, result.last_modified)
        return result

    async def request(self, url: str, options: FetchOptions) -> FetchResult:
        """
        GET ``url`` without conditional headers.

        Raises:
            FetchError: On transport errors or non-success statuses
        """
        response = await self._get(url, options.header_dict())
        return self._to_result(url, response)

    def forget(self, url: Optional[str] = None) -> None:
        """Drop the remembered validators of ``url``, or of every URL."""
        if url is None:
            self._validators.clear()
        else:
            self._validators.pop(url, None)

    async def _get(self, url: str, headers: dict[str, str]) -> httpx.Response:
        try:
            response = await self.client.get(url, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Request to {url} failed: {e!r}")
            raise FetchError(url, None, str(e) or type(e).__name__) from e
        if response.status_code >= 400:
            logger.debug(f"Request to {url} returned {response.status_code}")
            raise FetchError(url, response.status_code, response.reason_phrase)
        logger.debug(f"GET {url} -> {response.status_code}")
        return response

    @staticmethod
    def _to_result(url: str, response: httpx.Response) -> FetchResult:
        return FetchResult(
            url=url,
            data=response.text,
            status=response.status_code,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )
