"""
Figma Export Resolver

Turns (document key, node id) into a rendered PNG:
1. GET /v1/images/{key}?ids={node}&scale=1&format=png  -> transient export URL
2. GET transient URL                                   -> image bytes

Single attempt only. A failed or malformed response is terminal for the
request; no timeout beyond the HTTP client default is imposed.
"""

import logging
from typing import Optional

import httpx

from .models import ExportDescriptor, ExportResult, FailureKind, FigmaIdentifiers

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.figma.com"
EXPORT_SCALE = 1
EXPORT_FORMAT = "png"


class FigmaExportResolver:
    """
    Client for the Figma images API.

    Usage:
        resolver = FigmaExportResolver(token)
        result = await resolver.resolve(identifiers)
        if result.success:
            data = await resolver.fetch_blob(result.descriptor)
        await resolver.close()
    """

    def __init__(
        self,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.http_client = http_client or httpx.AsyncClient(follow_redirects=True)

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def resolve(self, identifiers: FigmaIdentifiers) -> ExportResult:
        """
        Ask Figma to render a node and return the export URL.

        Returns:
            ExportResult with the descriptor, or a failure of kind
            UPSTREAM_EMPTY (no usable export) / UPSTREAM_UNAVAILABLE (transport).
        """
        url = f"{self.api_base}/v1/images/{identifiers.document_key}"
        params = {
            "ids": identifiers.node_id,
            "scale": str(EXPORT_SCALE),
            "format": EXPORT_FORMAT,
        }

        try:
            response = await self.http_client.get(
                url,
                params=params,
                headers={"X-Figma-Token": self.token},
            )
        except httpx.HTTPError as e:
            logger.error(f"[FigmaExport] Request failed for {identifiers.document_key}: {e}")
            return ExportResult.failed(FailureKind.UPSTREAM_UNAVAILABLE, str(e))

        if response.is_error:
            logger.warning(
                f"[FigmaExport] HTTP {response.status_code} for "
                f"{identifiers.document_key} node {identifiers.node_id}"
            )
            return ExportResult.failed(
                FailureKind.UPSTREAM_EMPTY,
                f"Figma API returned {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"[FigmaExport] Non-JSON response for {identifiers.document_key}")
            return ExportResult.failed(FailureKind.UPSTREAM_EMPTY, "Malformed Figma response")

        images = payload.get("images") if isinstance(payload, dict) else None
        if not isinstance(images, dict):
            return ExportResult.failed(FailureKind.UPSTREAM_EMPTY, "No images in Figma response")

        # Figma keys the mapping by its own node id form ("10:20"), so take
        # the first value instead of looking up the id we sent.
        transient_url = next(iter(images.values()), None)
        if not transient_url or not isinstance(transient_url, str):
            logger.warning(
                f"[FigmaExport] Empty export for {identifiers.document_key} node {identifiers.node_id}"
            )
            return ExportResult.failed(FailureKind.UPSTREAM_EMPTY, "Figma returned no export")

        logger.debug(f"[FigmaExport] Export ready: {transient_url[:80]}")
        return ExportResult.ok(transient_url)

    async def fetch_blob(self, descriptor: ExportDescriptor) -> bytes:
        """
        Download the rendered image.

        Raises:
            httpx.HTTPError: on transport failure or an error status.
        """
        response = await self.http_client.get(descriptor.transient_url)
        response.raise_for_status()
        return response.content
