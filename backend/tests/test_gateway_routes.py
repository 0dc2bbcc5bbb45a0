"""
Gateway HTTP surface tests.

Covers upload, serving, provenance lookup, the admin gate and the edge
cache, with Figma replaced by FakeFigmaAPI.

Run:
    cd backend
    pytest tests/test_gateway_routes.py -v
"""

import pytest

from conftest import EXPORT_URL, PNG_BYTES, SOURCE_URL
from image_store import ImageStoreError, MemoryProvenanceStore

THIRTY_DAYS = "public, max-age=2592000"


def upload(client, admin_auth, figma_url=SOURCE_URL):
    return client.post("/upload", data={"figmaUrl": figma_url}, auth=admin_auth)


# ============================================
# 1. Upload
# ============================================

class TestUpload:

    def test_upload_success(self, client, admin_auth, figma_api):
        response = upload(client, admin_auth)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Uploaded" in response.text
        assert "xyz789.png" in response.text
        assert [r.url.host for r in figma_api.requests] == ["api.figma.com", "cdn.example"]

    def test_upload_then_serve(self, client, admin_auth):
        upload(client, admin_auth)

        response = client.get("/xyz789.png")

        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == THIRTY_DAYS

    def test_upload_then_source(self, client, admin_auth):
        upload(client, admin_auth)

        response = client.get("/admin/xyz789.png/src", auth=admin_auth)

        assert response.status_code == 200
        assert 'target="_blank"' in response.text
        assert "https://www.figma.com/file/ABC123/Name?node-id=10-20" in response.text

    def test_upload_invalid_url(self, client, admin_auth, figma_api):
        response = upload(client, admin_auth, "https://example.com/not-a-figma-link")

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL"}
        assert figma_api.requests == []

    def test_upload_figma_empty(self, client, admin_auth, figma_api, content_store):
        figma_api.images = {}

        response = upload(client, admin_auth)

        assert response.status_code == 400
        assert response.json() == {"message": "figma error"}
        assert len(content_store) == 0

    def test_upload_figma_unreachable(self, client, admin_auth, figma_api):
        figma_api.raise_on = "api.figma.com"

        response = upload(client, admin_auth)

        assert response.status_code == 502
        assert response.json() == {"message": "figma unavailable"}

    def test_upload_export_download_fails(self, client, admin_auth, figma_api, content_store):
        figma_api.raise_on = "cdn.example"

        response = upload(client, admin_auth)

        assert response.status_code == 502
        assert len(content_store) == 0

    def test_upload_empty_field_is_invalid_url(self, client, admin_auth, figma_api):
        response = upload(client, admin_auth, "")

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL"}
        assert figma_api.requests == []

    def test_upload_missing_field_is_invalid_url(self, client, admin_auth, figma_api):
        response = client.post("/upload", data={}, auth=admin_auth)

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid URL"}
        assert figma_api.requests == []

    def test_upload_store_failure(self, config, resolver, content_store, edge_cache, admin_auth):
        """Provenance write fails: 500, but the image is still served"""
        from fastapi.testclient import TestClient
        from main import create_app

        class BrokenProvenanceStore(MemoryProvenanceStore):
            async def put(self, key, source_url):
                raise ImageStoreError("kv down")

        app = create_app(
            config=config,
            resolver=resolver,
            content_store=content_store,
            provenance_store=BrokenProvenanceStore(),
            edge_cache=edge_cache,
        )
        with TestClient(app) as client:
            response = upload(client, admin_auth)
            assert response.status_code == 500
            assert response.json() == {"message": "storage error"}

            assert client.get("/xyz789.png").content == PNG_BYTES
            assert client.get("/admin/xyz789.png/src", auth=admin_auth).status_code == 404


# ============================================
# 2. Admin gate
# ============================================

class TestAdminGate:

    @pytest.mark.parametrize("auth", [None, ("admin", "wrong"), ("someone", "secret")])
    def test_upload_requires_credentials(self, client, figma_api, auth):
        response = client.post("/upload", data={"figmaUrl": SOURCE_URL}, auth=auth)

        assert response.status_code == 401
        assert response.headers["www-authenticate"].startswith("Basic")
        assert figma_api.requests == []

    def test_admin_page_requires_credentials(self, client):
        assert client.get("/admin/").status_code == 401

    def test_source_requires_credentials(self, client):
        assert client.get("/admin/xyz789.png/src").status_code == 401

    def test_unset_credentials_deny_everything(self, config, resolver, edge_cache):
        from fastapi.testclient import TestClient
        from main import create_app

        config.admin_username = ""
        config.admin_password = ""
        app = create_app(config=config, resolver=resolver, edge_cache=edge_cache)
        with TestClient(app) as client:
            assert client.get("/admin/", auth=("", "")).status_code == 401

    def test_serving_is_public(self, client, admin_auth):
        upload(client, admin_auth)

        assert client.get("/xyz789.png").status_code == 200


# ============================================
# 3. Serving and provenance
# ============================================

class TestServing:

    def test_serve_missing_key(self, client):
        response = client.get("/nothing-here.png")

        assert response.status_code == 404
        assert response.content == b""

    def test_source_missing_key(self, client, admin_auth):
        response = client.get("/admin/nothing-here.png/src", auth=admin_auth)

        assert response.status_code == 404

    def test_index(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "Figma Image Gateway" in response.text

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "hits" in response.json()["edge_cache_stats"]


# ============================================
# 4. Edge cache
# ============================================

class TestEdgeCache:

    def test_repeat_read_served_from_cache(self, client, admin_auth, content_store):
        upload(client, admin_auth)

        first = client.get("/xyz789.png")
        # Empty the store: only the cache can answer now
        content_store._objects.clear()
        second = client.get("/xyz789.png")

        assert first.headers["x-cache"] == "MISS"
        assert second.headers["x-cache"] == "HIT"
        assert second.content == PNG_BYTES
        assert second.headers["cache-control"] == THIRTY_DAYS
        assert second.headers["content-type"] == "image/png"

    def test_not_found_is_not_cached(self, client, admin_auth):
        assert client.get("/xyz789.png").status_code == 404

        upload(client, admin_auth)

        assert client.get("/xyz789.png").status_code == 200

    def test_source_lookup_bypasses_cache(self, client, admin_auth, provenance_store):
        upload(client, admin_auth)
        client.get("/admin/xyz789.png/src", auth=admin_auth)

        provenance_store._records["xyz789.png"] = "https://www.figma.com/file/NEW1/x?node-id=1-1"
        response = client.get("/admin/xyz789.png/src", auth=admin_auth)

        assert "NEW1" in response.text
        assert "x-cache" not in response.headers

    def test_admin_page_not_cached(self, client, admin_auth):
        client.get("/admin/", auth=admin_auth)
        upload(client, admin_auth)

        response = client.get("/admin/", auth=admin_auth)

        assert "xyz789.png" in response.text


# ============================================
# 5. Admin page
# ============================================

class TestAdminPage:

    def test_admin_page_lists_keys(self, client, admin_auth, provenance_store, figma_api):
        upload(client, admin_auth)
        figma_api.images = {"1:1": "https://cdn.example/export/abc111"}
        upload(client, admin_auth, "https://www.figma.com/file/K2/x?node-id=1-1")

        response = client.get("/admin/", auth=admin_auth)

        assert response.status_code == 200
        assert 'hx-post="/upload"' in response.text
        assert 'name="figmaUrl"' in response.text
        assert 'href="/xyz789.png"' in response.text
        assert 'href="/abc111.png"' in response.text
        assert 'hx-get="/admin/abc111.png/src"' in response.text
        assert 'data-url="xyz789.png"' in response.text

    def test_admin_page_escapes_keys(self, client, admin_auth, provenance_store):
        provenance_store._records['<b>"x".png'] = "u"

        response = client.get("/admin/", auth=admin_auth)

        assert "<b>" not in response.text
        assert "&lt;b&gt;" in response.text


# ============================================
# 6. App wiring
# ============================================

class TestCreateApp:

    def test_injected_content_store_is_kept(self, config, resolver, edge_cache, admin_auth):
        """An empty store passed alone is used, not replaced by a default"""
        from fastapi.testclient import TestClient
        from image_store import MemoryContentStore
        from main import create_app

        store = MemoryContentStore()
        app = create_app(config=config, resolver=resolver, content_store=store, edge_cache=edge_cache)

        assert app.state.content_store is store
        with TestClient(app) as client:
            assert upload(client, admin_auth).status_code == 200
        assert len(store) == 1

    def test_injected_provenance_store_is_kept(self, config, resolver, edge_cache):
        from image_store import MemoryProvenanceStore
        from main import create_app

        store = MemoryProvenanceStore()
        app = create_app(config=config, resolver=resolver, provenance_store=store, edge_cache=edge_cache)

        assert app.state.provenance_store is store

    def test_startup_removes_expired_cache_entries(self, app, edge_cache):
        import asyncio
        from fastapi.testclient import TestClient
        from edge_cache import CachedResponse

        asyncio.run(edge_cache.put("/old.png", CachedResponse(200, [], b"old"), max_age=10))
        for entry in edge_cache._metadata.values():
            entry.created_at -= 3600

        with TestClient(app):
            assert edge_cache.get_stats()["total_entries"] == 0

    def test_admin_without_slash_redirects(self, client):
        response = client.get("/admin", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/admin/"
