"""
Figma image gateway test configuration.

Fixtures:
- figma_api:        a fake Figma API + export CDN behind httpx.MockTransport
- resolver:         FigmaExportResolver wired to the fake
- content_store / provenance_store: in-memory stores
- app / client:     the FastAPI app and a TestClient with admin credentials
"""

import sys
from pathlib import Path

import httpx
import pytest

# Add the backend directory to the import path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from edge_cache import EdgeResponseCache
from figma_export import FigmaExportResolver
from gateway import GatewayConfig
from image_store import MemoryContentStore, MemoryProvenanceStore
from main import create_app

FIGMA_TOKEN = "figd_test_token"
ADMIN_USER = "admin"
ADMIN_PASS = "secret"

SOURCE_URL = "https://www.figma.com/file/ABC123/Name?node-id=10-20"
EXPORT_URL = "https://cdn.example/export/xyz789"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeFigmaAPI:
    """
    Records requests and answers like the Figma images API and its CDN.

    Set `images` to change the export mapping, `api_status` for an error
    status, or `raise_on` to a host name to simulate a transport failure.
    """

    def __init__(self):
        self.images = {"10:20": EXPORT_URL}
        self.api_status = 200
        self.api_body = None
        self.blob = PNG_BYTES
        self.raise_on = None
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_on and request.url.host == self.raise_on:
            raise httpx.ConnectError("connection refused", request=request)

        if request.url.host == "api.figma.com":
            if self.api_body is not None:
                return httpx.Response(self.api_status, content=self.api_body)
            return httpx.Response(self.api_status, json={"err": None, "images": self.images})

        if request.url.host == "cdn.example":
            return httpx.Response(200, content=self.blob, headers={"Content-Type": "image/png"})

        return httpx.Response(404)

    @property
    def api_requests(self):
        return [r for r in self.requests if r.url.host == "api.figma.com"]


@pytest.fixture
def figma_api():
    return FakeFigmaAPI()


@pytest.fixture
def resolver(figma_api):
    client = httpx.AsyncClient(transport=httpx.MockTransport(figma_api.handler))
    return FigmaExportResolver(FIGMA_TOKEN, http_client=client)


@pytest.fixture
def content_store():
    return MemoryContentStore()


@pytest.fixture
def provenance_store():
    return MemoryProvenanceStore()


@pytest.fixture
def config(tmp_path):
    return GatewayConfig(
        figma_token=FIGMA_TOKEN,
        admin_username=ADMIN_USER,
        admin_password=ADMIN_PASS,
        edge_cache_dir=str(tmp_path / "edge_cache"),
    )


@pytest.fixture
def edge_cache(config):
    return EdgeResponseCache(cache_dir=config.edge_cache_dir, max_cache_size_mb=10)


@pytest.fixture
def app(config, resolver, content_store, provenance_store, edge_cache):
    return create_app(
        config=config,
        resolver=resolver,
        content_store=content_store,
        provenance_store=provenance_store,
        edge_cache=edge_cache,
    )


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_auth():
    return (ADMIN_USER, ADMIN_PASS)
