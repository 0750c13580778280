from dataclasses import replace
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from db.database import get_db
from main import create_app
from routes.url import get_settings
from services.expiry import utcnow
from services.store import SQLAlchemyMappingStore


@pytest.fixture
def app(session_factory, settings):
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def seed(session_factory):
    async def _seed(*mappings):
        async with session_factory() as session:
            store = SQLAlchemyMappingStore(session)
            for mapping in mappings:
                await store.save(mapping)

    return _seed


async def test_shorten_and_redirect(client):
    response = await client.post("/api/shorten", json={"url": "https://example.com/very/long/path"})
    assert response.status_code == 201
    data = response.json()
    code = data["short_code"]
    assert len(code) == 6
    assert data["short_url"] == f"https://sho.rt/{code}"
    assert data["original_url"] == "https://example.com/very/long/path"
    assert data["expires_at"] is not None

    redirect = await client.get(f"/{code}", follow_redirects=False)
    assert redirect.status_code == 301
    assert redirect.headers["location"] == "https://example.com/very/long/path"

    info = await client.get(f"/api/info/{code}")
    assert info.status_code == 200
    assert info.json()["click_count"] == 1
    assert info.json()["is_active"] is True


async def test_custom_code_conflict(client):
    first = await client.post("/api/shorten", json={"url": "https://foo.com", "custom_code": "promo"})
    assert first.status_code == 201
    assert first.json()["short_code"] == "promo"

    second = await client.post("/api/shorten", json={"url": "https://bar.com", "custom_code": "promo"})
    assert second.status_code == 409


async def test_invalid_url(client):
    response = await client.post("/api/shorten", json={"url": "ftp://example.com/file"})
    assert response.status_code == 400


@pytest.mark.parametrize("payload", [
    {},
    {"url": ""},
    {"url": "https://example.com", "expires_in_days": 0},
    {"url": "https://example.com", "expires_in_days": 3_000_000},
])
async def test_malformed_request(client, payload):
    response = await client.post("/api/shorten", json=payload)
    assert response.status_code == 422


async def test_longest_allowed_expiry(client):
    response = await client.post("/api/shorten", json={"url": "https://example.com", "expires_in_days": 36500})
    assert response.status_code == 201
    assert response.json()["expires_at"] is not None


async def test_out_of_range_default_expiry(app, client, settings):
    app.dependency_overrides[get_settings] = lambda: replace(settings, default_expiry_days=3_000_000)

    response = await client.post("/api/shorten", json={"url": "https://example.com"})
    assert response.status_code == 400
    assert "out of range" in response.json()["detail"]


async def test_url_with_whitespace_rejected(client):
    response = await client.post("/api/shorten", json={"url": "https://example.com/a b"})
    assert response.status_code == 400


async def test_unknown_and_expired_codes_look_the_same(client, seed, make_mapping):
    await seed(make_mapping("old", expires_at=utcnow() - timedelta(days=1)))

    unknown = await client.get("/doesnotexist", follow_redirects=False)
    expired = await client.get("/old", follow_redirects=False)

    assert unknown.status_code == expired.status_code == 404
    assert unknown.json() == expired.json()
    assert (await client.get("/api/info/old")).status_code == 404


async def test_stats_redact_urls(client):
    await client.post("/api/shorten", json={"url": "https://bank.example/account?id=42"})

    response = await client.get("/api/stats")
    assert response.status_code == 200
    stats = response.json()
    assert stats["total_urls"] == 1
    assert stats["active_urls"] == 1
    assert stats["expired_urls"] == 0
    assert stats["recent_urls"][0]["original_url"] == "https://bank.example/[path-redacted]?[params-redacted]"


async def test_cleanup(client, seed, make_mapping):
    now = utcnow()
    await seed(
        make_mapping("old", expires_at=now - timedelta(days=1)),
        make_mapping("fresh", expires_at=now + timedelta(days=1)),
    )

    response = await client.post("/api/cleanup")
    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1

    again = await client.post("/api/cleanup")
    assert again.json()["deleted_count"] == 0


async def test_label_summary(client, seed, make_mapping):
    await client.post("/api/shorten", json={"url": "https://example.com", "custom_code": "mine"})
    await seed(make_mapping("other", label="other.io"))

    response = await client.get("/api/labels/sho.rt")
    assert response.status_code == 200
    assert response.json() == {"label": "sho.rt", "total_urls": 1, "active_urls": 1, "active_codes": ["mine"]}


async def test_health(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
