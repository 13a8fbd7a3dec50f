"""Error Formatting - uniform envelopes, detail exposed only in development."""

from app.api.error_handlers import build_internal_error_response


async def test_unhandled_error_includes_detail_in_development(make_client):
    _, client = make_client(environment="development")
    async with client:
        res = await client.get("/api/products/boom")
    assert res.status_code == 500
    assert res.json() == {"message": "Something went wrong!", "error": "kaboom"}


async def test_unhandled_error_hides_detail_in_production(make_client):
    _, client = make_client(environment="production")
    async with client:
        res = await client.get("/api/products/boom")
    assert res.status_code == 500
    assert res.json() == {"message": "Something went wrong!", "error": {}}


async def test_error_response_still_carries_security_headers(client):
    res = await client.get("/api/products/boom")
    assert res.status_code == 500
    assert res.headers["x-content-type-options"] == "nosniff"


async def test_unhandled_error_is_logged(client, caplog):
    await client.get("/api/products/boom")
    assert "Unhandled exception on /api/products/boom" in caplog.text


async def test_storefront_error_uses_its_own_status(client):
    res = await client.get("/api/products/missing")
    assert res.status_code == 404
    body = res.json()
    assert body["message"] == "Product '42' not found"
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_validation_error_returns_400_with_details(client):
    res = await client.post(
        "/api/products", content="[1, 2]", headers={"content-type": "application/json"},
    )
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Invalid request data"
    assert body["error"]["category"] == "validation"
    assert body["error"]["details"]


def test_internal_error_response_shape():
    exc = ValueError("secret detail")
    assert build_internal_error_response(exc, expose_detail=True)["error"] == "secret detail"
    assert build_internal_error_response(exc, expose_detail=False)["error"] == {}
