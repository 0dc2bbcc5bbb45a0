"""
Figma Image Gateway API Routes

Provides endpoints for:
- POST /upload            - Ingest a Figma link (admin)
- GET  /admin/            - Admin page listing stored images (admin)
- GET  /admin/{key}/src   - Original Figma link for a key (admin, never cached)
- GET  /{key}             - Serve a stored image (public, edge cached)
- GET  /health            - Health check
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response
from pydantic import BaseModel

from figma_export import FailureKind
from image_store import ContentStore, ProvenanceStore, iter_keys

from .auth import require_admin
from .pipeline import IngestPipeline
from .rendering import render_admin_page, render_source_link, render_uploaded

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

MAX_AGE_SECONDS = 60 * 60 * 24 * 30  # 30 days
CACHE_CONTROL = f"public, max-age={MAX_AGE_SECONDS}"

# Status code and message returned for each ingestion failure
FAILURE_RESPONSES = {
    FailureKind.INVALID_REFERENCE: (400, "Invalid URL"),
    FailureKind.UPSTREAM_EMPTY: (400, "figma error"),
    FailureKind.UPSTREAM_UNAVAILABLE: (502, "figma unavailable"),
    FailureKind.WRITE_FAILURE: (500, "storage error"),
}

# ============================================
# Response Models
# ============================================

class UploadErrorResponse(BaseModel):
    """Body returned when an upload is rejected"""
    message: str

class HealthResponse(BaseModel):
    status: str
    service: str
    edge_cache_stats: Optional[Dict[str, Any]] = None


# ============================================
# Dependencies
# ============================================


def get_pipeline(request: Request) -> IngestPipeline:
    return request.app.state.pipeline


def get_content_store(request: Request) -> ContentStore:
    return request.app.state.content_store


def get_provenance_store(request: Request) -> ProvenanceStore:
    return request.app.state.provenance_store


# ============================================
# Router
# ============================================

router = APIRouter(tags=["Figma Images"])


# ============================================
# Endpoints
# ============================================

@router.get("/", response_class=PlainTextResponse)
async def index():
    return "Figma Image Gateway"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    edge_cache = getattr(request.app.state, "edge_cache", None)
    return HealthResponse(
        status="healthy",
        service="figma-image-gateway",
        edge_cache_stats=edge_cache.get_stats() if edge_cache else None,
    )


@router.post("/upload", dependencies=[Depends(require_admin)])
async def upload_image(
    figmaUrl: str = Form("", description="Figma link with a node-id"),
    pipeline: IngestPipeline = Depends(get_pipeline),
):
    """
    Render a Figma node to PNG and store it.

    This endpoint:
    1. Extracts the file key and node id from the link
    2. Asks the Figma images API for a PNG export
    3. Downloads the export and stores it under <export id>.png
    4. Records the original link for the key

    Example:
        POST /upload
        figmaUrl=https://www.figma.com/file/ABC123/Name?node-id=10-20
    """
    result = await pipeline.ingest(figmaUrl)
    if not result.success:
        status_code, message = FAILURE_RESPONSES[result.failure]
        return JSONResponse(
            status_code=status_code,
            content=UploadErrorResponse(message=message).model_dump(),
        )

    return HTMLResponse(render_uploaded(result.key))


@router.get("/admin/", dependencies=[Depends(require_admin)], response_class=HTMLResponse)
async def admin_page(provenance_store: ProvenanceStore = Depends(get_provenance_store)):
    """List every stored key with its link, copy button and source trigger."""
    keys = [key async for key in iter_keys(provenance_store, prefix="")]
    return HTMLResponse(render_admin_page(keys))


@router.get("/admin", include_in_schema=False)
async def admin_redirect():
    # Otherwise "/admin" would be looked up as an image key
    return RedirectResponse("/admin/")


@router.get("/admin/{key}/src", dependencies=[Depends(require_admin)])
async def get_source(
    key: str,
    provenance_store: ProvenanceStore = Depends(get_provenance_store),
):
    """Return the Figma link an image was ingested from."""
    source_url = await provenance_store.get(key)
    if not source_url:
        return Response(status_code=404)
    return HTMLResponse(render_source_link(source_url))


@router.get("/{key}")
async def serve_image(
    key: str,
    content_store: ContentStore = Depends(get_content_store),
):
    """
    Serve a stored image.

    Responses carry a 30-day public Cache-Control so the edge cache and
    browsers can answer repeat requests without reaching this handler.
    """
    stored = await content_store.get(key)
    if stored is None:
        return Response(status_code=404)

    return Response(
        content=stored.data,
        headers={
            "Cache-Control": CACHE_CONTROL,
            "Content-Type": stored.content_type or "",
        },
    )
