"""
Storage Writer

Persists an ingested image and its provenance record as two independent
writes. There is no shared transaction: if one write fails the other is
kept, and readers of the provenance store must tolerate a missing record.
"""

import asyncio
import logging

from .errors import WriteFailure
from .protocols import ContentStore, ProvenanceStore

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"


class StorageWriter:
    """Dual writer for the content and provenance stores."""

    def __init__(self, content_store: ContentStore, provenance_store: ProvenanceStore):
        self.content_store = content_store
        self.provenance_store = provenance_store

    async def store(self, key: str, data: bytes, source_url: str) -> None:
        """
        Write (key -> data) and (key -> source_url).

        Raises:
            WriteFailure: if either write raised. The other write's effect
                is not rolled back.
        """
        content_result, provenance_result = await asyncio.gather(
            self.content_store.put(key, data, PNG_CONTENT_TYPE),
            self.provenance_store.put(key, source_url),
            return_exceptions=True,
        )

        failed = []
        cause = None
        for name, result in (("content", content_result), ("provenance", provenance_result)):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failed.append(name)
                cause = cause or result

        if failed:
            if len(failed) == 1:
                logger.error(
                    f"[ImageStore] Partial write for {key}: {failed[0]} store failed, "
                    f"other write kept ({cause})"
                )
            raise WriteFailure(key, failed, cause)

        logger.debug(f"[ImageStore] Wrote {key} to content and provenance stores")
