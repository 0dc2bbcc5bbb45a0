"""
Figma Image Gateway Module

Ingests Figma node exports and serves them with long-lived cache headers.

Features:
- Admin-gated upload and listing
- Public, edge-cached image serving
- Provenance lookup for each stored image
"""

from .config import GatewayConfig
from .pipeline import IngestPipeline, IngestResult, IngestStage
from .routes_fastapi import router

__all__ = ["router", "GatewayConfig", "IngestPipeline", "IngestResult", "IngestStage"]
