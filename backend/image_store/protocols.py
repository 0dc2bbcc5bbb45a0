"""
Store Capabilities

The gateway talks to two external stores joined on the storage key:

- ContentStore:    key -> image bytes + content type
- ProvenanceStore: key -> original Figma URL

Both are treated as capabilities so that the in-memory and file-backed
implementations (or a cloud bucket / KV namespace) can be swapped freely.
"""

import time
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional, Protocol, runtime_checkable


DEFAULT_PAGE_SIZE = 1000


@dataclass
class StoredObject:
    """A blob held by the content store."""
    key: str
    data: bytes
    content_type: str
    uploaded_at: float = field(default_factory=time.time)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class ListPage:
    """One page of a key listing."""
    keys: List[str]
    cursor: Optional[str] = None     # Pass back to list_page() for the next page
    list_complete: bool = True


@runtime_checkable
class ContentStore(Protocol):
    """Durable binary object store addressed by key."""

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        """Store (or overwrite) an object. Raises ImageStoreError on failure."""
        ...

    async def get(self, key: str) -> Optional[StoredObject]:
        """Return the object, or None if the key was never written."""
        ...

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        ...


@runtime_checkable
class ProvenanceStore(Protocol):
    """Durable key -> source URL store."""

    async def put(self, key: str, source_url: str) -> None:
        ...

    async def get(self, key: str) -> Optional[str]:
        """Return the recorded source URL, or None. Absence is a normal outcome."""
        ...

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        ...


def paginate(keys: List[str], prefix: str, cursor: Optional[str], limit: int) -> ListPage:
    """
    Build a ListPage from a full key list.

    The cursor is the last key of the previous page; keys are returned in
    lexicographic order like a KV namespace listing.
    """
    matching = sorted(k for k in keys if k.startswith(prefix))
    if cursor is not None:
        matching = [k for k in matching if k > cursor]

    page = matching[:limit]
    complete = len(matching) <= limit
    return ListPage(
        keys=page,
        cursor=None if complete or not page else page[-1],
        list_complete=complete,
    )


async def iter_keys(
    store,
    prefix: str = "",
    page_size: int = DEFAULT_PAGE_SIZE,
) -> AsyncIterator[str]:
    """
    Lazily walk every key in a store, following continuation cursors.

    Each call starts a fresh listing, so the iterator is restartable.
    """
    cursor: Optional[str] = None
    while True:
        page = await store.list_page(prefix=prefix, cursor=cursor, limit=page_size)
        for key in page.keys:
            yield key
        if page.list_complete or page.cursor is None:
            return
        cursor = page.cursor
