"""
File Store Implementation

Filesystem-backed content and provenance stores.

Content store layout:
store_dir/
├── objects/
│   ├── 2f1c9e0a-....png
│   └── ...
└── metadata.json        # key -> {content_type, size_bytes, uploaded_at}

Provenance store layout:
store_dir/
└── provenance.json      # key -> source URL
"""

import asyncio
import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import ImageStoreError, InvalidStorageKey
from .protocols import DEFAULT_PAGE_SIZE, ListPage, StoredObject, paginate

logger = logging.getLogger(__name__)


def is_valid_key(key: str) -> bool:
    """A key must be usable as a single file name."""
    if not key or key in (".", ".."):
        return False
    return "/" not in key and "\\" not in key and "\x00" not in key


@dataclass
class ObjectMetadata:
    """Metadata for a stored object."""
    content_type: str
    size_bytes: int
    uploaded_at: float


class FileContentStore:
    """
    Stores image blobs as files with a JSON metadata sidecar.

    Metadata is held in memory and flushed to disk on every write.
    """

    def __init__(self, store_dir: str = "./figma_image_store"):
        self.store_dir = Path(store_dir)
        self.objects_dir = self.store_dir / "objects"
        self.metadata_file = self.store_dir / "metadata.json"

        self._metadata: Dict[str, ObjectMetadata] = {}
        self._lock = asyncio.Lock()

        self.objects_dir.mkdir(parents=True, exist_ok=True)
        self._load_metadata()

    def _load_metadata(self) -> None:
        """Load metadata from disk."""
        if not self.metadata_file.exists():
            self._metadata = {}
            return
        try:
            with open(self.metadata_file, "r") as f:
                data = json.load(f)
            self._metadata = {k: ObjectMetadata(**v) for k, v in data.items()}
            logger.info(f"[ImageStore] Loaded {len(self._metadata)} objects from {self.store_dir}")
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"[ImageStore] Failed to load metadata: {e}")
            self._metadata = {}

    def _save_metadata(self) -> None:
        data = {k: asdict(v) for k, v in self._metadata.items()}
        with open(self.metadata_file, "w") as f:
            json.dump(data, f, indent=2)

    def _object_path(self, key: str) -> Path:
        return self.objects_dir / key

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        if not is_valid_key(key):
            raise InvalidStorageKey(key)

        async with self._lock:
            try:
                with open(self._object_path(key), "wb") as f:
                    f.write(data)
                self._metadata[key] = ObjectMetadata(
                    content_type=content_type,
                    size_bytes=len(data),
                    uploaded_at=time.time(),
                )
                self._save_metadata()
            except OSError as e:
                logger.error(f"[ImageStore] Failed to write {key}: {e}")
                raise ImageStoreError(f"Failed to write object {key!r}: {e}") from e

        logger.debug(f"[ImageStore] Stored object {key} ({len(data)} bytes)")

    async def get(self, key: str) -> Optional[StoredObject]:
        if not is_valid_key(key):
            return None

        async with self._lock:
            entry = self._metadata.get(key)
            if entry is None:
                return None

            path = self._object_path(key)
            if not path.exists():
                logger.warning(f"[ImageStore] Object file missing: {path}")
                return None

            with open(path, "rb") as f:
                data = f.read()

        return StoredObject(
            key=key,
            data=data,
            content_type=entry.content_type,
            uploaded_at=entry.uploaded_at,
        )

    async def list_page(
        self,
        prefix: str = "",
        cursor: Optional[str] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ListPage:
        async with self._lock:
            keys = list(self._metadata)
        return paginate(keys, prefix, cursor, limit)


class FileProvenanceStore:
    """Key -> source URL records kept in a single JSON document."""

    def __init__(self, store_dir: str = "./figma_image_store"):
        self.store_dir = Path(store_dir)
        self.records_file = self.store_dir / "provenance.json"

        self._records: Dict[str, str] = {}
        self._lock = asyncio.Lock()

        self.store_dir.mkdir(parents=True, exist_ok=True)
        if self.records_file.exists():
            try:
                with open(self.records_file, "r") as f:
                    self._records = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"[ImageStore] Failed to load provenance records: {e}")
                self._records = {}

    async def put(self, key: str, source_url: str) -> None:
        if not is_valid_key(key):
            raise InvalidStorageKey(key)

        async with self._lock:
            records = {**self._records, key: source_url}
            try:
                with open(self.records_file, "w") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
            except OSError as e:
                logger.error(f"[ImageStore] Failed to write provenance for {key}: {e}")
                raise ImageStoreError(f"Failed to write provenance {key!r}: {e}") from e
            self._records = records

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
