"""
Figma Image Gateway - FastAPI application

Run:
    cd backend
    uvicorn main:create_app --factory --port 8787
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Tuple

from fastapi import FastAPI

from edge_cache import EdgeCacheMiddleware, EdgeResponseCache
from figma_export import FigmaExportResolver
from gateway import GatewayConfig, IngestPipeline, router
from image_store import (
    ContentStore,
    FileContentStore,
    FileProvenanceStore,
    MemoryContentStore,
    MemoryProvenanceStore,
    ProvenanceStore,
    StorageWriter,
)

logger = logging.getLogger(__name__)


def build_stores(config: GatewayConfig) -> Tuple[ContentStore, ProvenanceStore]:
    if config.store_backend == "file":
        store_dir = Path(config.store_dir)
        return FileContentStore(str(store_dir)), FileProvenanceStore(str(store_dir))
    return MemoryContentStore(), MemoryProvenanceStore()


def create_app(
    config: Optional[GatewayConfig] = None,
    resolver: Optional[FigmaExportResolver] = None,
    content_store: Optional[ContentStore] = None,
    provenance_store: Optional[ProvenanceStore] = None,
    edge_cache: Optional[EdgeResponseCache] = None,
) -> FastAPI:
    """
    Build the gateway app.

    Collaborators not passed in are created from the config; the config
    itself defaults to GatewayConfig.from_env().
    """
    config = config or GatewayConfig.from_env()

    if content_store is None or provenance_store is None:
        default_content, default_provenance = build_stores(config)
        if content_store is None:
            content_store = default_content
        if provenance_store is None:
            provenance_store = default_provenance

    if resolver is None:
        resolver = FigmaExportResolver(config.figma_token, api_base=config.figma_api_base)

    if edge_cache is None and config.edge_cache_enabled:
        edge_cache = EdgeResponseCache(
            cache_dir=config.edge_cache_dir,
            max_cache_size_mb=config.edge_cache_max_size_mb,
            cache_ttl_seconds=config.edge_cache_ttl_hours * 3600,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"[Gateway] Starting with {config.store_backend} store")
        if edge_cache is not None:
            await edge_cache.cleanup_expired()
        yield
        await resolver.close()

    app = FastAPI(title="Figma Image Gateway", lifespan=lifespan)
    app.state.config = config
    app.state.content_store = content_store
    app.state.provenance_store = provenance_store
    app.state.edge_cache = edge_cache
    app.state.pipeline = IngestPipeline(resolver, StorageWriter(content_store, provenance_store))

    app.add_middleware(EdgeCacheMiddleware, cache=edge_cache)
    app.include_router(router)
    return app

