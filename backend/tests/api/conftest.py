"""API test fixtures - isolated app instances behind an in-process ASGI client.

Invariants:
    - Every test builds its own app via create_app(settings): fresh rate-limit
      counters, its own upload directory
    - A stand-in "products" handler group exercises dispatch and error paths
    - Lifespan is not run by ASGITransport; tests that need it enter it explicitly
"""

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.core.errors import ResourceNotFoundError
from app.main import create_app

SVG = '<svg xmlns="http://www.w3.org/2000/svg" width="1" height="1"></svg>'


def products_router() -> APIRouter:
    router = APIRouter()

    @router.get("")
    async def list_products():
        return [{"id": 1, "name": "Wireless Headphones"}]

    @router.post("")
    async def create_product(payload: dict):
        return {"received": payload}

    @router.get("/boom")
    async def explode():
        raise RuntimeError("kaboom")

    @router.get("/missing")
    async def missing():
        raise ResourceNotFoundError("Product", "42")

    return router


@pytest.fixture
def upload_dir(tmp_path):
    root = tmp_path / "uploads"
    images = root / "images"
    images.mkdir(parents=True)
    (images / "logo.svg").write_text(SVG, encoding="utf-8")
    (root / "banner.txt").write_text("banner", encoding="utf-8")
    return root


@pytest.fixture
def make_settings(upload_dir):
    def _make(**overrides) -> Settings:
        values = {
            "database_url": "sqlite+aiosqlite:///:memory:",
            "bootstrap_on_startup": False,
            "upload_dir": upload_dir,
            "log_format": "text",
        }
        values.update(overrides)
        return Settings(**values)
    return _make


@pytest.fixture
def make_client(make_settings):
    """Build (app, client) pairs; callers enter the client as a context manager."""
    def _make(peer: str = "203.0.113.7", **overrides):
        app = create_app(
            make_settings(**overrides), route_groups={"products": products_router()},
        )
        client = AsyncClient(
            transport=ASGITransport(app=app, client=(peer, 4321)),
            base_url="http://test",
        )
        return app, client

    return _make


@pytest.fixture
async def client(make_client):
    _, c = make_client()
    async with c:
        yield c
