"""
HTTP access for buf release downloads.

Redirects are followed by hand rather than by httpx so that the hop limit
and the accumulated redirect chain stay visible to callers and errors.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from bufbuild.domain.errors import (
    HttpStatusError,
    RedirectLocationError,
    TooManyRedirectsError,
    UnexpectedResponseError,
)
from bufbuild.domain.models import DEFAULT_MAX_REDIRECTS

logger = logging.getLogger(__name__)


def _check_url(url: str) -> None:
    if not isinstance(url, str) or not url:
        raise ValueError(f"Expected a non-empty URL string, got {url!r}")
    if not url.startswith(("https://", "http://")):
        raise ValueError(f"Expected an http:// or https:// URL, got {url!r}")


def _is_redirect(status_code: int) -> bool:
    return 300 <= status_code < 400


class HttpFetcher:
    """
    Issue GET requests against the release host.

    Use as an async context manager; the underlying ``httpx.AsyncClient`` is
    opened on enter and closed on exit:

        async with HttpFetcher() as fetcher:
            data = await fetcher.download(url)
    """

    def __init__(
        self,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            max_redirects: Redirect hops allowed before giving up
            timeout: Timeout in seconds for each request, None for no timeout
            transport: Optional transport override (e.g. httpx.MockTransport)
        """
        self.max_redirects = max_redirects
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpFetcher":
        self._client = httpx.AsyncClient(
            follow_redirects=False,
            timeout=self.timeout,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("HttpFetcher must be entered with 'async with' before use")
        return self._client

    async def _get(self, url: str) -> httpx.Response:
        request = self.client.build_request("GET", url)
        return await self.client.send(request, stream=True)

    @staticmethod
    def _redirect_location(response: httpx.Response, url: str) -> str:
        location = response.headers.get("location")
        if not location:
            raise RedirectLocationError(url, response.status_code)
        # Relative locations are resolved against the URL that produced them
        return str(response.url.join(location))

    async def fetch_following_redirects(
        self, url: str, redirects: Optional[List[str]] = None
    ) -> httpx.Response:
        """
        GET ``url``, following up to ``max_redirects`` redirects.

        Args:
            url: Absolute http(s) URL
            redirects: Redirect locations already followed to reach ``url``

        Returns:
            The open, streaming 2xx response. The caller must read and close it.

        Raises:
            ValueError: if a URL in the chain is not an http(s) URL
            TooManyRedirectsError: if the chain grows beyond ``max_redirects``
            RedirectLocationError: if a redirect carries no Location header
            HttpStatusError: for any other non-2xx status
        """
        chain = list(redirects or [])
        while True:
            _check_url(url)
            if len(chain) > self.max_redirects:
                raise TooManyRedirectsError(url, chain)

            response = await self._get(url)

            if _is_redirect(response.status_code):
                try:
                    location = self._redirect_location(response, url)
                finally:
                    await response.aclose()
                logger.debug(f"HTTP {response.status_code} {url} -> {location}")
                chain.append(location)
                url = location
                continue

            if not response.is_success:
                await response.aclose()
                raise HttpStatusError(url, response.status_code)

            return response

    async def download(self, url: str) -> bytes:
        """Download ``url`` (following redirects) and return the full body."""
        response = await self.fetch_following_redirects(url)
        try:
            return await response.aread()
        finally:
            await response.aclose()

    async def resolve_redirect_target(self, url: str) -> str:
        """
        Return the Location of the redirect ``url`` answers with.

        Only the first hop is inspected; the target itself is not requested.

        Raises:
            RedirectLocationError: if the redirect carries no Location header
            HttpStatusError: for a non-redirect, non-200 status
            UnexpectedResponseError: if the server answers 200 directly
        """
        _check_url(url)
        response = await self._get(url)
        try:
            if _is_redirect(response.status_code):
                return self._redirect_location(response, url)
            if response.status_code != 200:
                raise HttpStatusError(url, response.status_code)
            raise UnexpectedResponseError(url, response.status_code)
        finally:
            await response.aclose()
