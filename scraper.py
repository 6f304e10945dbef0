#!/usr/bin/env python3
"""
Backlog API documentation scraper.

Two stages, one allowed domain, two link levels:
  Stage 1: fetch the index page and collect the endpoint page links
  Stage 2: fetch every endpoint page concurrently, extract its fields and
           add the assembled record to the collection

Endpoint pages are never searched for further links.
"""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import urldefrag, urljoin

import httpx
from bs4 import BeautifulSoup

from assembler import assemble_endpoint
from client import DocsClient, is_allowed_url
from collection import CollectionStore
from config import ScraperConfig
from errors import EndpointFetchError, FetchError, IndexFetchError
from html_extractor import EndpointPageExtractor
from models import EndpointRecord
from postman import PostmanCollection

logger = logging.getLogger(__name__)


class BacklogDocsScraper:
    """
    Crawl controller for one run.

    Args:
        config: resolved run configuration
        transport: optional httpx transport handed to the DocsClient
    """

    def __init__(self, config: ScraperConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport
        self.extractor = EndpointPageExtractor.from_config(config)
        self.store = CollectionStore(config.collection_name)
        self.failed_urls: List[str] = []

    async def run(self) -> PostmanCollection:
        """Discover, scrape every endpoint page, then finalize the collection."""
        async with DocsClient(self.config, transport=self.transport) as client:
            endpoint_urls = await self.discover_endpoint_urls(client)
            await self.scrape_endpoints(client, endpoint_urls)

        collection = self.store.finalize(order=self.config.order)
        logger.info(f"✅ Collected {len(collection.item)} endpoints ({len(self.failed_urls)} skipped)")
        return collection

    # Stage 1

    async def discover_endpoint_urls(self, client: DocsClient) -> List[str]:
        """
        Fetch the index page and return endpoint page URLs in page order.

        Raises:
            IndexFetchError: the index page could not be fetched
        """
        index_url = self.config.root_url
        logger.info(f"🔍 Stage 1: Discovering endpoint pages from {index_url}")

        try:
            html = await client.fetch_page(index_url)
        except FetchError as e:
            raise IndexFetchError(e.message, e) from e

        endpoint_urls = self.parse_endpoint_links(html, index_url)
        logger.info(f"📋 Discovered {len(endpoint_urls)} endpoint URLs")
        return endpoint_urls

    def parse_endpoint_links(self, html: str, page_url: str) -> List[str]:
        """
        Endpoint links of an index page, resolved against `page_url`.

        With a navigation container configured every link inside it counts;
        otherwise links are matched with the locale's link selector. Links
        to other domains are dropped, fragments are stripped. Duplicates are
        kept unless dedupe_links is set.
        """
        soup = BeautifulSoup(html, 'html.parser')

        if self.config.nav_selector:
            anchors = [a for nav in soup.select(self.config.nav_selector)
                       for a in nav.find_all('a', href=True)]
        else:
            anchors = soup.select(self.config.link_selector)

        endpoint_urls = []
        seen = set()
        for anchor in anchors:
            href = (anchor.get('href') or '').strip()
            if not href:
                continue

            full_url = urldefrag(urljoin(page_url, href))[0]
            if not is_allowed_url(full_url, self.config.allowed_domain):
                logger.debug(f"Skipping off-site link {full_url}")
                continue

            if self.config.dedupe_links:
                if full_url in seen:
                    continue
                seen.add(full_url)

            endpoint_urls.append(full_url)

        return endpoint_urls

    # Stage 2

    async def scrape_endpoints(self, client: DocsClient, endpoint_urls: List[str]):
        """
        Scrape all endpoint pages concurrently and wait for every one of them.

        The first fatal failure cancels the pages still in flight.

        Raises:
            EndpointFetchError: a page failed and skip_failed_pages is off
        """
        logger.info(f"🔄 Stage 2: Scraping {len(endpoint_urls)} endpoint pages...")
        if not endpoint_urls:
            return

        tasks = [
            asyncio.ensure_future(self.scrape_endpoint(client, url, index))
            for index, url in enumerate(endpoint_urls)
        ]
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for task in tasks:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()

    async def scrape_endpoint(self, client: DocsClient, url: str, index: int = 0) -> Optional[EndpointRecord]:
        """
        Fetch one endpoint page and add its record to the store.

        Returns None when the page failed and skip_failed_pages is on.
        """
        try:
            html = await client.fetch_page(url)
        except FetchError as e:
            if not self.config.skip_failed_pages:
                raise EndpointFetchError(url, e.reason, e) from e
            logger.warning(f"⚠️  Skipping {url}: {e.reason}")
            self.failed_urls.append(url)
            return None

        fields = self.extractor.extract_html(html)
        record = assemble_endpoint(fields, source_url=url, discovery_index=index)
        await self.store.add(record)
        return record
