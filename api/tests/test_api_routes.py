"""HTTP surface: auth guards, request shapes and response envelopes."""

import time

import pytest
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from auth import sso
from catalog.upsert import ChunkFailure
from main import app
from products import service as products_service
from sku_master import service as sku_master_service
from sku_master.service import SyncResult

# No `with TestClient(...)`: the lifespan (DB pool) is not started.
client = TestClient(app)


@pytest.fixture
def sso_user():
    app.dependency_overrides[auth_dependencies.get_sso_user] = lambda: {"id": "u1", "role": "viewer"}
    yield
    app.dependency_overrides.pop(auth_dependencies.get_sso_user, None)


def _fake_bulk_import(result):
    async def bulk_import(records, *, file_name=None):
        return result

    return bulk_import


class TestBulkImportRoute:
    def test_requires_token(self):
        resp = client.post("/api/products/bulk", json={"products": [{"name": "A"}]})
        assert resp.status_code == 401

    def test_requires_admin_role(self, viewer_headers):
        resp = client.post("/api/products/bulk", json={"products": [{"name": "A"}]}, headers=viewer_headers)
        assert resp.status_code == 403

    def test_rejects_bad_token(self, jwt_env):
        resp = client.post(
            "/api/products/bulk",
            json={"products": [{"name": "A"}]},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert resp.status_code == 401

    def test_rejects_expired_token(self, bearer):
        headers = bearer(sub="1", role="admin", exp=int(time.time()) - 60)
        resp = client.post(
            "/api/products/bulk",
            json={"products": [{"name": "A"}]},
            headers=headers,
        )
        assert resp.status_code == 401

    def test_rejects_non_array(self, admin_headers):
        resp = client.post("/api/products/bulk", json={"products": "nope"}, headers=admin_headers)
        assert resp.status_code == 422

    def test_rejects_record_without_name(self, admin_headers):
        resp = client.post("/api/products/bulk", json={"products": [{"category": "x"}]}, headers=admin_headers)
        assert resp.status_code == 422

    def test_empty_list(self, admin_headers):
        resp = client.post("/api/products/bulk", json={"products": []}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json() == {"added": 0, "updated": 0, "skipped": 0}

    def test_success(self, admin_headers, monkeypatch):
        monkeypatch.setattr(
            products_service,
            "bulk_import",
            _fake_bulk_import(products_service.BulkImportResult(added=3, updated=1, skipped=0)),
        )
        resp = client.post("/api/products/bulk", json={"products": [{"name": "A"}]}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json() == {"added": 3, "updated": 1, "skipped": 0}

    def test_chunk_failure(self, admin_headers, monkeypatch):
        failure = ChunkFailure(chunk_index=2, offset=500, size=500, message="boom")
        monkeypatch.setattr(
            products_service,
            "bulk_import",
            _fake_bulk_import(products_service.BulkImportResult(added=500, updated=0, skipped=0, failure=failure)),
        )
        resp = client.post("/api/products/bulk", json={"products": [{"name": "A"}]}, headers=admin_headers)

        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["failed_chunk"] == 2
        assert detail["added"] == 500
        assert "chunk 2" in detail["error"]


class TestAnalyzerRoutes:
    def test_sync_requires_admin(self, viewer_headers):
        resp = client.post("/api/products/mapping/amazon-analyzer/sync", headers=viewer_headers)
        assert resp.status_code == 403

    def test_sync(self, admin_headers, monkeypatch):
        monkeypatch.delenv("SYNC_CHANNEL", raising=False)
        seen = []

        async def sync_channel(channel):
            seen.append(channel)
            return SyncResult(updated=2, inserted=1, total=10, with_cost=8, with_size=7)

        monkeypatch.setattr(sku_master_service, "sync_channel", sync_channel)
        resp = client.post("/api/products/mapping/amazon-analyzer/sync", headers=admin_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["data"] == {"updated": 2, "inserted": 1, "total": 10, "withCost": 8, "withSize": 7}
        assert body["message"] == "Synced 2 updated, 1 new. Total: 10 (8 with cost)"
        assert seen == ["amazon"]

    def test_missing(self, sso_user, monkeypatch):
        async def ingest_missing(entries, *, channel):
            return {"added": len(entries), "skipped": 0, "total": len(entries)}

        monkeypatch.setattr(sku_master_service, "ingest_missing", ingest_missing)
        resp = client.post(
            "/api/products/mapping/amazon-analyzer/missing",
            json={"skus": [{"sku": "M1", "marketplace": "US"}]},
        )
        assert resp.status_code == 200
        assert resp.json() == {"added": 1, "skipped": 0, "total": 1}

    def test_missing_rejects_non_array(self, sso_user):
        resp = client.post("/api/products/mapping/amazon-analyzer/missing", json={"skus": "M1"})
        assert resp.status_code == 422

    def test_sso_forbidden(self, monkeypatch):
        async def verify_token(token, *, timeout_s=None):
            raise sso.SsoForbidden("No access to pricelab.")

        monkeypatch.setattr(sso, "verify_token", verify_token)
        resp = client.get("/api/products/mapping/amazon-analyzer", headers={"Authorization": "Bearer t"})
        assert resp.status_code == 403

    def test_sso_unavailable(self, monkeypatch):
        async def verify_token(token, *, timeout_s=None):
            raise sso.SsoError("SSO backend unavailable.")

        monkeypatch.setattr(sso, "verify_token", verify_token)
        resp = client.get("/api/products/mapping/amazon-analyzer", headers={"Authorization": "Bearer t"})
        assert resp.status_code == 401


def test_health():
    assert client.get("/api/health").json() == {"status": "ok"}
