#!/usr/bin/env python3
"""
Collection store shared by the concurrent endpoint scrapes.
"""

import asyncio
import logging
from typing import List, Tuple

from config import COLLECTION_NAME, ORDER_DISCOVERY
from models import EndpointRecord
from postman import PostmanCollection, build_collection

logger = logging.getLogger(__name__)


class CollectionStore:
    """
    Ordered, append-only set of endpoint records.

    add() is the only mutation and is serialized with an asyncio.Lock, so
    any number of scrape tasks may call it concurrently. Records are kept in
    the order the appends completed.
    """

    def __init__(self, name: str = COLLECTION_NAME):
        self.name = name
        self._records: List[EndpointRecord] = []
        self._lock = asyncio.Lock()
        self._finalized = False

    async def add(self, record: EndpointRecord):
        async with self._lock:
            if self._finalized:
                raise RuntimeError("collection already finalized")
            self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> Tuple[EndpointRecord, ...]:
        return tuple(self._records)

    def finalize(self, order: str = ORDER_DISCOVERY) -> PostmanCollection:
        """
        Close the store and build the output document.

        Args:
            order: "discovery" sorts by the index the link had on the index
                page; "completion" keeps the order the fetches finished in
        """
        self._finalized = True

        records = list(self._records)
        if order == ORDER_DISCOVERY:
            records.sort(key=lambda r: r.discovery_index)

        return build_collection(records, name=self.name)
