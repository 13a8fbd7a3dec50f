"""Rate Limit & Body Limit stages - hard gates in front of dispatch.

Tests cover:
    - (N+1)-th request in a window rejected with 429 + fixed message
    - API and image tiers budgeted independently
    - Clients behind the trusted proxy counted separately
    - Oversized JSON / urlencoded bodies rejected with 413, streamed or declared
"""

import json

from app.api.body_limit import is_limited_content_type

API_MESSAGE = "Too many API requests from this IP, please try again later."
IMAGE_MESSAGE = "Too many image requests from this IP, please try again later."


# ─── rate limiting ───────────────────────────────────────────────

async def test_api_tier_rejects_request_over_cap(make_client):
    _, client = make_client(api_rate_limit=3)
    async with client:
        statuses = [(await client.get("/api/health")).status_code for _ in range(3)]
        rejected = await client.get("/api/health")

    assert statuses == [200, 200, 200]
    assert rejected.status_code == 429
    assert rejected.text == API_MESSAGE
    assert rejected.headers["content-type"].startswith("text/plain")
    assert int(rejected.headers["retry-after"]) > 0


async def test_rate_headers_count_down(make_client):
    _, client = make_client(api_rate_limit=3)
    async with client:
        first = await client.get("/api/health")
        second = await client.get("/api/health")
    assert first.headers["x-ratelimit-limit"] == "3"
    assert first.headers["x-ratelimit-remaining"] == "2"
    assert second.headers["x-ratelimit-remaining"] == "1"


async def test_unmatched_api_paths_count_against_api_tier(make_client):
    _, client = make_client(api_rate_limit=1)
    async with client:
        await client.get("/api/nonexistent")
        res = await client.get("/api/health")
    assert res.status_code == 429


async def test_image_tier_is_independent_of_api_tier(make_client):
    _, client = make_client(api_rate_limit=1, image_rate_limit=2)
    async with client:
        await client.get("/api/health")
        assert (await client.get("/api/health")).status_code == 429
        images = [(await client.get("/images/logo.svg")).status_code for _ in range(2)]
        rejected = await client.get("/uploads/banner.txt")

    assert images == [200, 200]
    assert rejected.status_code == 429
    assert rejected.text == IMAGE_MESSAGE


async def test_clients_behind_proxy_are_not_merged(make_client):
    _, client = make_client(peer="10.0.0.1", api_rate_limit=1)
    async with client:
        a = await client.get("/api/health", headers={"X-Forwarded-For": "198.51.100.1"})
        b = await client.get("/api/health", headers={"X-Forwarded-For": "198.51.100.2"})
        a_again = await client.get("/api/health", headers={"X-Forwarded-For": "198.51.100.1"})
    assert (a.status_code, b.status_code, a_again.status_code) == (200, 200, 429)


async def test_spoofed_forwarded_prefix_does_not_escape_limit(make_client):
    _, client = make_client(peer="10.0.0.1", api_rate_limit=1)
    async with client:
        await client.get("/api/health", headers={"X-Forwarded-For": "198.51.100.1"})
        res = await client.get(
            "/api/health", headers={"X-Forwarded-For": "6.6.6.6, 198.51.100.1"},
        )
    assert res.status_code == 429


async def test_paths_outside_tiers_are_not_limited(make_client):
    _, client = make_client(api_rate_limit=1)
    async with client:
        responses = [await client.get("/elsewhere") for _ in range(3)]
    assert all(r.status_code == 404 for r in responses)
    assert all("x-ratelimit-limit" not in r.headers for r in responses)


async def test_limiter_reset_reopens_window(make_client):
    app, client = make_client(api_rate_limit=1)
    async with client:
        await client.get("/api/health")
        assert (await client.get("/api/health")).status_code == 429
        await app.state.rate_limiter.reset()
        assert (await client.get("/api/health")).status_code == 200


# ─── body size limit ─────────────────────────────────────────────

async def test_json_body_under_limit_is_accepted(make_client):
    _, client = make_client(max_body_bytes=1024)
    async with client:
        res = await client.post("/api/products", json={"name": "Mug"})
    assert res.status_code == 200
    assert res.json() == {"received": {"name": "Mug"}}


async def test_declared_oversized_json_is_rejected(make_client):
    _, client = make_client(max_body_bytes=64)
    async with client:
        res = await client.post("/api/products", json={"name": "x" * 200})
    assert res.status_code == 413
    assert res.json() == {"message": "Request entity too large"}


async def test_oversized_urlencoded_is_rejected(make_client):
    _, client = make_client(max_body_bytes=64)
    async with client:
        res = await client.post("/api/products", data={"name": "y" * 200})
    assert res.status_code == 413


async def test_streamed_oversized_json_is_rejected(make_client):
    _, client = make_client(max_body_bytes=64)
    payload = json.dumps({"name": "z" * 200}).encode()

    async def chunks():
        for i in range(0, len(payload), 32):
            yield payload[i:i + 32]

    async with client:
        res = await client.post(
            "/api/products",
            content=chunks(),
            headers={"content-type": "application/json"},
        )
    assert res.status_code == 413
    assert res.json() == {"message": "Request entity too large"}


def test_limited_content_types():
    assert is_limited_content_type("application/json")
    assert is_limited_content_type("application/json; charset=utf-8")
    assert is_limited_content_type("application/vnd.api+json")
    assert is_limited_content_type("application/x-www-form-urlencoded")
    assert not is_limited_content_type("multipart/form-data; boundary=x")
    assert not is_limited_content_type(None)
