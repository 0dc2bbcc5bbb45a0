"""
Memory Store Implementation

In-memory content and provenance stores.
Used by default and in tests; contents are lost on restart.

Features:
- Async-safe operations with asyncio.Lock
- Overwrite on re-put (last write wins)
- Sorted, cursor-paginated key listing
"""

import asyncio
import logging
import time
from typing import Dict, Optional

from .protocols import DEFAULT_PAGE_SIZE, ListPage, StoredObject, paginate

logger = logging.getLogger(__name__)


class MemoryContentStore:
    """
    Dict-backed content store.

    Objects are never expired or evicted; the gateway never deletes.
    """

    def __init__(self):
        self._objects: Dict[str, StoredObject] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        async with self._lock:
            self._objects[key] = StoredObject(
                key=key,
                data=bytes(data),
                content_type=content_type,
                uploaded_at=time.time(),
            )
        logger.debug(f"[ImageStore] Stored object {key} ({len(data)} bytes)")

    async def get(self, key: str) -> Optional[StoredObject]:
        async with self._lock:
            return self._objects.get(key)

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        async with self._lock:
            keys = list(self._objects)
        return paginate(keys, prefix, cursor, limit)

    def __len__(self) -> int:
        return len(self._objects)


class MemoryProvenanceStore:
    """Dict-backed key -> source URL store."""

    def __init__(self):
        self._records: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, source_url: str) -> None:
        async with self._lock:
            self._records[key] = source_url

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._records.get(key)

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        async with self._lock:
            keys = list(self._records)
        return paginate(keys, prefix, cursor, limit)

    def __len__(self) -> int:
        return len(self._records)
