#!/usr/bin/env python3
"""
Docs Client - async page fetcher for the API documentation site.

Wraps a single httpx.AsyncClient per run. Only GET requests are issued,
only to the configured allowed domain, and the number of in-flight
requests is capped so the documentation site is not hammered.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from config import ScraperConfig
from errors import FetchError

logger = logging.getLogger(__name__)

# Redirect hops per fetch; each hop must stay on the allowed domain.
MAX_REDIRECTS = 10

DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
}


def is_allowed_url(url: str, domain: str) -> bool:
    """True for http(s) URLs whose host is exactly `domain`."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and parsed.hostname == domain


class DocsClient:
    """
    Async HTML fetcher bound to one documentation domain.

    Use as an async context manager:

        async with DocsClient(config) as client:
            html = await client.fetch_page(url)
    """

    def __init__(self,
                 config: ScraperConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            config: resolved run configuration (domain, timeout, concurrency)
            transport: optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.allowed_domain = config.allowed_domain
        self._semaphore = asyncio.Semaphore(config.max_concurrency)
        self.http = httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            timeout=config.request_timeout,
            follow_redirects=False,
            transport=transport,
        )

    async def __aenter__(self) -> "DocsClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def fetch_page(self, url: str) -> str:
        """
        GET one page and return its HTML text.

        Raises:
            FetchError: URL outside the allowed domain, transport failure or non-2xx status
        """
        if not is_allowed_url(url, self.allowed_domain):
            raise FetchError(url, f"outside allowed domain {self.allowed_domain}")

        async with self._semaphore:
            try:
                response = await self.http.get(url)
                response = await self._follow_redirects(url, response)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchError(url, f"HTTP {e.response.status_code}", e) from e
            except httpx.HTTPError as e:
                raise FetchError(url, f"{type(e).__name__}: {e}", e) from e

        logger.debug(f"GET {url} -> {response.status_code}")
        return response.text

    async def _follow_redirects(self, url: str, response: httpx.Response) -> httpx.Response:
        hops = 0
        while response.next_request is not None:
            target = str(response.next_request.url)
            if not is_allowed_url(target, self.allowed_domain):
                raise FetchError(url, f"redirected outside allowed domain {self.allowed_domain} to {target}")
            hops += 1
            if hops > MAX_REDIRECTS:
                raise FetchError(url, f"more than {MAX_REDIRECTS} redirects")
            logger.debug(f"↪️  {url} redirected to {target}")
            response = await self.http.send(response.next_request)
        return response

    async def close(self):
        """Close the HTTP client."""
        await self.http.aclose()
