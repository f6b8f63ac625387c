"""Async HTTP fetcher for remote images."""

from __future__ import annotations

import logging

import httpx

from imgcache.config.defaults import DEFAULT_TIMEOUT_MS
from imgcache.errors.exceptions import (
    REQUEST_ERROR,
    REQUEST_TIMEOUT,
    RESPONSE_FAILED,
    FetchError,
)

logger = logging.getLogger(__name__)


class Fetcher:
    """Single-attempt GET of image bytes. No retries.

    Only a 200 response counts as success. Failures raise FetchError with a
    cause that tells a bad status, a transport error and a timeout apart.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self._timeout_ms = timeout_ms

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def fetch(self, url: str, timeout_ms: int | None = None) -> bytes:
        timeout_ms = timeout_ms if timeout_ms is not None else self._timeout_ms
        try:
            response = await self._client.get(url, timeout=timeout_ms / 1000)
        except httpx.TimeoutException as e:
            raise FetchError(
                f"{REQUEST_TIMEOUT}: {url} ({timeout_ms} ms)",
                cause=REQUEST_TIMEOUT,
                url=url,
                original=e,
            ) from e
        # InvalidURL and CookieConflict sit outside the HTTPError tree
        except (httpx.HTTPError, httpx.InvalidURL, httpx.CookieConflict) as e:
            raise FetchError(
                f"{REQUEST_ERROR}: {url}: {e}",
                cause=REQUEST_ERROR,
                url=url,
                original=e,
            ) from e

        if response.status_code != 200:
            raise FetchError(
                f"{RESPONSE_FAILED}: {url} returned HTTP {response.status_code}",
                cause=RESPONSE_FAILED,
                url=url,
                http_status=response.status_code,
            )

        body = response.content
        logger.debug("Fetched %d bytes from %s", len(body), url)
        return body

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
