"""Routes — liveness checks, route-group dispatch and the /api/* fallback.

Tests cover:
    - GET /test and GET / fixed acknowledgements
    - readiness follows the datastore ping
    - unmatched /api/* paths → structured 404, any method
    - route groups mounted under their prefixes take precedence over the fallback
    - JSON bodies are decoded before reaching handlers
"""

from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from bookhive.api.routes.groups import ROUTE_GROUPS
from bookhive.main import create_app


async def test_test_endpoint(client):
    resp = await client.get("/test")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Test exitoso"}


async def test_root_endpoint(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Backend BookHive funcionando"


async def test_liveness(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_readiness_ok(client):
    resp = await client.get("/api/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"]["datastore"] == "healthy"


async def test_readiness_fails_when_datastore_down(client, datastore):
    datastore.healthy = False
    resp = await client.get("/api/health/ready")
    assert resp.status_code == 503
    assert resp.json()["reason"] == "datastore_unavailable"


async def test_unknown_api_path_returns_structured_404(client):
    resp = await client.get("/api/unknown-path")
    assert resp.status_code == 404
    error = resp.json()["error"]
    assert error["code"] == "ROUTE_NOT_FOUND"
    assert error["message"] == "Endpoint API no encontrado"
    assert error["context"]["path"] == "/api/unknown-path"


async def test_unknown_api_path_any_method(client):
    for method in ("POST", "PUT", "PATCH", "DELETE"):
        resp = await client.request(method, "/api/nope/deeper")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "ROUTE_NOT_FOUND"


async def test_unmatched_path_inside_group_falls_back(client):
    resp = await client.get("/api/books/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "ROUTE_NOT_FOUND"


def test_default_groups_have_expected_prefixes():
    prefixes = [group.prefix for group in ROUTE_GROUPS]
    assert prefixes == [
        "/api/auth",
        "/api/profiles",
        "/api/books",
        "/api/manual-books",
        "/api/favorites",
    ]


class _BookIn(BaseModel):
    title: str


async def test_group_routes_win_over_fallback(settings, datastore):
    books = APIRouter(prefix="/api/books", tags=["books"])

    @books.get("")
    async def list_books():
        return [{"title": "Rayuela"}]

    @books.post("", status_code=201)
    async def add_book(body: _BookIn):
        return {"title": body.title}

    app = create_app(settings, datastore, route_groups=(books,))
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        listed = await c.get("/api/books")
        created = await c.post("/api/books", json={"title": "Ficciones"})
        invalid = await c.post("/api/books", json={})
        missing = await c.get("/api/favorites")

    assert listed.status_code == 200
    assert listed.json() == [{"title": "Rayuela"}]
    assert created.status_code == 201
    assert created.json() == {"title": "Ficciones"}
    assert invalid.status_code == 400
    assert invalid.json()["error"]["code"] == "VALIDATION_ERROR"
    assert missing.status_code == 404


async def test_handlers_borrow_shared_datastore(app, datastore):
    assert app.state.datastore is datastore


async def test_lifespan_shutdown_closes_datastore(app, datastore):
    async with app.router.lifespan_context(app):
        assert not datastore.closed
    assert datastore.closed
