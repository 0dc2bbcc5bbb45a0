"""
Edge Response Cache

File-based cache for GET responses that sits in front of the serving path:
- LRU (Least Recently Used) eviction strategy
- TTL bounded by both the cache's own limit and the response's max-age
- Maximum cache size limit
"""

import asyncio
import hashlib
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class CachedResponse:
    """A response as replayed from the cache."""
    status_code: int
    headers: List[Tuple[str, str]]
    body: bytes


@dataclass
class CacheEntry:
    """Metadata for a cached response."""
    cache_key: str
    status_code: int
    headers: List[List[str]]
    size_bytes: int
    created_at: float
    last_accessed: float
    ttl_seconds: float = field(default=0.0)

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl_seconds


def parse_max_age(cache_control: str) -> Optional[int]:
    """
    Return max-age if the response is publicly cacheable, else None.

    "public, max-age=2592000" -> 2592000
    "private, max-age=60"     -> None
    "no-store"                -> None
    """
    directives = {}
    for part in cache_control.split(","):
        name, _, value = part.strip().partition("=")
        directives[name.strip().lower()] = value.strip().strip('"')

    if "public" not in directives:
        return None
    if directives.keys() & {"private", "no-store", "no-cache"}:
        return None
    try:
        max_age = int(directives.get("max-age", ""))
    except ValueError:
        return None
    return max_age if max_age > 0 else None


class EdgeResponseCache:
    """
    Manages file-based response cache with LRU eviction.

    Cache structure:
    cache_dir/
    ├── responses/
    │   ├── a1b2c3d4e5f6a7b8.bin
    │   └── ...
    └── metadata.json
    """

    def __init__(
        self,
        cache_dir: str = "./figma_image_cache",
        max_cache_size_mb: int = 500,
        cache_ttl_seconds: int = 24 * 60 * 60,  # 24 hours
    ):
        self.cache_dir = Path(cache_dir)
        self.responses_dir = self.cache_dir / "responses"
        self.metadata_file = self.cache_dir / "metadata.json"

        self.max_cache_size_bytes = max_cache_size_mb * 1024 * 1024
        self.cache_ttl_seconds = cache_ttl_seconds

        self._metadata: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self.hits = 0
        self.misses = 0

        self.responses_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"[EdgeCache] Cache directory: {self.cache_dir}")
        self._load_metadata()

    def _load_metadata(self) -> None:
        """Load metadata from disk."""
        if not self.metadata_file.exists():
            self._metadata = {}
            return
        try:
            with open(self.metadata_file, "r") as f:
                data = json.load(f)
            self._metadata = {k: CacheEntry(**v) for k, v in data.items()}
            logger.info(f"[EdgeCache] Loaded {len(self._metadata)} cached entries")
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"[EdgeCache] Failed to load metadata: {e}")
            self._metadata = {}

    def _save_metadata(self) -> None:
        """Save metadata to disk."""
        try:
            data = {k: asdict(v) for k, v in self._metadata.items()}
            with open(self.metadata_file, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"[EdgeCache] Failed to save metadata: {e}")

    @staticmethod
    def _key_to_hash(cache_key: str) -> str:
        """Convert a request key to a safe filename hash."""
        return hashlib.sha256(cache_key.encode()).hexdigest()[:16]

    def _get_cache_path(self, key_hash: str) -> Path:
        return self.responses_dir / f"{key_hash}.bin"

    def _get_total_cache_size(self) -> int:
        return sum(entry.size_bytes for entry in self._metadata.values())

    async def get(self, cache_key: str) -> Optional[CachedResponse]:
        """
        Look up a cached response.

        Returns:
            CachedResponse if cached and fresh, None otherwise.
        """
        key_hash = self._key_to_hash(cache_key)

        async with self._lock:
            entry = self._metadata.get(key_hash)
            if entry is None:
                self.misses += 1
                return None

            if entry.is_expired(time.time()):
                logger.debug(f"[EdgeCache] Expired: {cache_key[:60]}")
                self._remove_entry(key_hash)
                self._save_metadata()
                self.misses += 1
                return None

            cache_path = self._get_cache_path(key_hash)
            try:
                with open(cache_path, "rb") as f:
                    body = f.read()
            except OSError as e:
                logger.warning(f"[EdgeCache] Failed to read {cache_path}: {e}")
                self._remove_entry(key_hash)
                self._save_metadata()
                self.misses += 1
                return None

            # LRU tracking
            entry.last_accessed = time.time()
            self._save_metadata()
            self.hits += 1

        logger.debug(f"[EdgeCache] Cache hit: {cache_key[:60]}")
        return CachedResponse(
            status_code=entry.status_code,
            headers=[(name, value) for name, value in entry.headers],
            body=body,
        )

    async def put(
        self,
        cache_key: str,
        response: CachedResponse,
        max_age: int,
    ) -> bool:
        """
        Cache a response for min(max_age, cache TTL) seconds.

        Returns:
            True if cached, False if it did not fit.
        """
        size = len(response.body)
        if size > self.max_cache_size_bytes:
            logger.warning(f"[EdgeCache] Response too large to cache ({size} bytes): {cache_key[:60]}")
            return False

        key_hash = self._key_to_hash(cache_key)

        async with self._lock:
            self._ensure_space(size)

            try:
                with open(self._get_cache_path(key_hash), "wb") as f:
                    f.write(response.body)
            except OSError as e:
                logger.error(f"[EdgeCache] Failed to cache {cache_key[:60]}: {e}")
                return False

            now = time.time()
            self._metadata[key_hash] = CacheEntry(
                cache_key=cache_key,
                status_code=response.status_code,
                headers=[[name, value] for name, value in response.headers],
                size_bytes=size,
                created_at=now,
                last_accessed=now,
                ttl_seconds=float(min(max_age, self.cache_ttl_seconds)),
            )
            self._save_metadata()

        logger.debug(f"[EdgeCache] Cached: {cache_key[:60]} ({size} bytes)")
        return True

    def _remove_entry(self, key_hash: str) -> None:
        """Remove a cache entry (file and metadata). Caller holds the lock."""
        entry = self._metadata.pop(key_hash, None)
        if entry is None:
            return
        cache_path = self._get_cache_path(key_hash)
        try:
            cache_path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"[EdgeCache] Failed to remove file: {e}")

    def _ensure_space(self, needed_bytes: int) -> None:
        """Evict least recently used entries until needed_bytes fits."""
        current_size = self._get_total_cache_size()
        target_size = self.max_cache_size_bytes - needed_bytes
        if current_size <= target_size:
            return

        for key_hash, entry in sorted(self._metadata.items(), key=lambda x: x[1].last_accessed):
            if current_size <= target_size:
                break
            current_size -= entry.size_bytes
            self._remove_entry(key_hash)
            logger.info(f"[EdgeCache] LRU evicted: {entry.cache_key[:60]}")

    async def cleanup_expired(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            now = time.time()
            expired = [h for h, entry in self._metadata.items() if entry.is_expired(now)]
            for key_hash in expired:
                self._remove_entry(key_hash)
            if expired:
                self._save_metadata()
                logger.info(f"[EdgeCache] Cleaned up {len(expired)} expired entries")
            return len(expired)

    def get_stats(self) -> dict:
        """Get cache statistics."""
        total_size = self._get_total_cache_size()
        return {
            "total_entries": len(self._metadata),
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "max_size_mb": self.max_cache_size_bytes // (1024 * 1024),
            "cache_ttl_hours": self.cache_ttl_seconds // 3600,
            "hits": self.hits,
            "misses": self.misses,
        }
