"""Shared test fixtures: in-memory stand-ins for the Postgres-backed repositories."""

from contextlib import asynccontextmanager

import asyncpg
import jwt
import pytest

from catalog import keys, precedence
from sku_master import reconcile

TEST_JWT_SECRET = "test-secret-0123456789abcdef0123456789"


class FakeProductStore:
    """Mimics `products.repository.upsert_products_chunk`: all-or-nothing per chunk."""

    def __init__(self):
        self.rows = {}
        self.chunks_seen = []
        self.fail_on_call = None

    async def upsert_chunk(self, chunk):
        self.chunks_seen.append(len(chunk))
        if self.fail_on_call == len(self.chunks_seen):
            raise OSError("connection reset by peer")

        staged = {k: dict(v) for k, v in self.rows.items()}
        flags = []
        for record in chunk:
            key = record.get("name_key")
            if not key:
                raise asyncpg.NotNullViolationError('null value in column "name_key" violates not-null constraint')
            if key in staged:
                staged[key] = precedence.resolve(staged[key], record, precedence.PRODUCT_FIELD_POLICY)
                flags.append(False)
            else:
                staged[key] = dict(record)
                flags.append(True)
        self.rows = staged
        return flags


class FakeSkuMasterStore:
    """In-memory sku_master plus the mapping + product join it is synced from."""

    def __init__(self):
        self.sources = []
        self.rows = {}

    def key(self, channel, sku, country_code):
        return (sku, channel, country_code)

    async def fetch_sync_sources(self, conn, channel):
        return [dict(s) for s in self.sources if s.get("channel", "amazon") == channel]

    async def fetch_channel_rows(self, conn, channel):
        return [dict(r) for (sku, ch, cc), r in self.rows.items() if ch == channel]

    async def refresh_rows(self, conn, channel, targets):
        written = 0
        for t in targets:
            row = self.rows.get(self.key(channel, t.sku, t.country_code))
            if row is None:
                continue
            for f in reconcile.REFRESH_FIELDS:
                row[f] = getattr(t, f)
            written += 1
        return written

    async def insert_rows(self, conn, channel, targets):
        inserted = 0
        for t in targets:
            k = self.key(channel, t.sku, t.country_code)
            if k in self.rows:
                continue
            self.rows[k] = dict(t.as_dict(), marketplace=channel, fulfillment=None)
            inserted += 1
        return inserted

    async def channel_stats(self, channel):
        rows = [r for (sku, ch, cc), r in self.rows.items() if ch == channel]
        return {
            "total": len(rows),
            "with_cost": sum(1 for r in rows if r.get("cost") is not None),
            "with_size": sum(1 for r in rows if r.get("size") is not None),
        }

    async def insert_placeholder(self, *, channel, sku, country_code, asin, name, category, fulfillment):
        k = self.key(channel, sku, country_code)
        wanted = keys.composite_key(sku, country_code)
        if any(ch == channel and keys.composite_key(s, cc) == wanted for (s, ch, cc) in self.rows):
            return False
        self.rows[k] = {
            "sku": sku,
            "country_code": country_code,
            "asin": asin,
            "name": name,
            "category": category,
            "fulfillment": fulfillment,
            "parent": None,
            "cost": None,
            "size": None,
            "custom_shipping": None,
            "fbm_source": None,
        }
        return True

    async def list_channel_rows(self, channel):
        rows = [r for (sku, ch, cc), r in self.rows.items() if ch == channel]
        return sorted(rows, key=lambda r: (r["country_code"], r["sku"]))


@asynccontextmanager
async def _fake_transaction():
    yield None


@pytest.fixture
def product_store():
    return FakeProductStore()


@pytest.fixture
def sku_store(monkeypatch):
    """Route sku_master.service through an in-memory store."""
    from sku_master import repository, service

    store = FakeSkuMasterStore()
    for name in (
        "fetch_sync_sources",
        "fetch_channel_rows",
        "refresh_rows",
        "insert_rows",
        "channel_stats",
        "insert_placeholder",
        "list_channel_rows",
    ):
        monkeypatch.setattr(repository, name, getattr(store, name))
    monkeypatch.setattr(service.db, "transaction", _fake_transaction)
    return store


@pytest.fixture
def jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("JWT_ALG", "HS256")


@pytest.fixture
def bearer(jwt_env):
    """Build an Authorization header for the given claims."""

    def make(**claims):
        token = jwt.encode(claims, TEST_JWT_SECRET, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def admin_headers(bearer):
    return bearer(sub="1", username="admin", role="admin")


@pytest.fixture
def viewer_headers(bearer):
    return bearer(sub="2", username="viewer", role="viewer")
