"""
Ingestion Pipeline

Figma link -> identifiers -> export URL -> image bytes -> storage key -> stores

Stages run strictly forward:
    RECEIVED -> EXTRACTED -> RESOLVED -> FETCHED -> KEY_DERIVED -> STORED
A failure ends the request with a FailureKind; IngestResult.stage is then
the last stage that completed (RECEIVED for an unparseable link).
Nothing is retried.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from figma_export import FailureKind, FigmaExportResolver, derive_key, extract_identifiers
from image_store import StorageWriter, WriteFailure

logger = logging.getLogger(__name__)


class IngestStage(str, Enum):
    RECEIVED = "received"
    EXTRACTED = "extracted"
    RESOLVED = "resolved"
    FETCHED = "fetched"
    KEY_DERIVED = "key_derived"
    STORED = "stored"


@dataclass
class IngestResult:
    """Outcome of one ingestion request."""
    success: bool
    stage: IngestStage
    key: Optional[str] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None


class IngestPipeline:
    """
    Runs one Figma link through export and storage.

    Usage:
        pipeline = IngestPipeline(resolver, writer)
        result = await pipeline.ingest("https://www.figma.com/file/ABC123/Name?node-id=10-20")
    """

    def __init__(self, resolver: FigmaExportResolver, writer: StorageWriter):
        self.resolver = resolver
        self.writer = writer

    @staticmethod
    def _fail(stage: IngestStage, failure: FailureKind, error: str) -> IngestResult:
        return IngestResult(success=False, stage=stage, failure=failure, error=error)

    async def ingest(self, source_url: str) -> IngestResult:
        identifiers = extract_identifiers(source_url)
        if identifiers is None:
            logger.warning(f"[Ingest] Invalid Figma URL: {source_url[:80]}")
            return self._fail(
                IngestStage.RECEIVED,
                FailureKind.INVALID_REFERENCE,
                "URL has no /file/<key>/ or node-id=<n>-<m>",
            )
        logger.debug(f"[Ingest] Extracted {identifiers.document_key} node {identifiers.node_id}")

        export = await self.resolver.resolve(identifiers)
        if not export.success:
            return self._fail(IngestStage.EXTRACTED, export.failure, export.error)

        try:
            data = await self.resolver.fetch_blob(export.descriptor)
        except httpx.HTTPError as e:
            logger.error(f"[Ingest] Export download failed: {e}")
            return self._fail(IngestStage.RESOLVED, FailureKind.UPSTREAM_UNAVAILABLE, str(e))

        key = derive_key(export.descriptor)
        logger.debug(f"[Ingest] Fetched {len(data)} bytes, key {key}")

        try:
            await self.writer.store(key, data, source_url)
        except WriteFailure as e:
            logger.error(f"[Ingest] Store failed for {key}: {e}")
            result = self._fail(IngestStage.KEY_DERIVED, FailureKind.WRITE_FAILURE, str(e))
            result.key = key
            return result

        logger.info(f"[Ingest] Uploaded {key} ({len(data)} bytes) from {source_url[:80]}")
        return IngestResult(success=True, stage=IngestStage.STORED, key=key)
