"""
Image Store Module

Content and provenance stores for ingested Figma exports.

Features:
- Store capabilities (ContentStore, ProvenanceStore) with cursor listing
- In-memory and file-backed implementations
- Non-transactional dual writer
"""

from .errors import ImageStoreError, InvalidStorageKey, WriteFailure
from .file_store import FileContentStore, FileProvenanceStore
from .memory_store import MemoryContentStore, MemoryProvenanceStore
from .protocols import ContentStore, ListPage, ProvenanceStore, StoredObject, iter_keys
from .writer import PNG_CONTENT_TYPE, StorageWriter

__all__ = [
    "ContentStore",
    "ProvenanceStore",
    "StoredObject",
    "ListPage",
    "iter_keys",
    "MemoryContentStore",
    "MemoryProvenanceStore",
    "FileContentStore",
    "FileProvenanceStore",
    "StorageWriter",
    "PNG_CONTENT_TYPE",
    "ImageStoreError",
    "InvalidStorageKey",
    "WriteFailure",
]
