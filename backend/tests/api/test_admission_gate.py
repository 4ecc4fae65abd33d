"""Admission Gate — middleware behavior over the real app.

Tests cover:
    - allowed origins echoed exactly, never "*"
    - origin-less requests pass without an allow-origin header
    - rejected origins get no CORS headers, are logged, still reach the handler
    - every OPTIONS answers 204 with an empty body, regardless of path or origin
    - headers applied once per response
"""

import logging

import pytest

FRONTEND = "https://bookhive.example.com"


async def test_allowed_origin_echoed_exactly(client):
    resp = await client.get("/test", headers={"Origin": FRONTEND})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == FRONTEND
    assert resp.headers["access-control-allow-credentials"] == "true"
    assert "Origin" in resp.headers["vary"]


async def test_dev_origin_allowed(client):
    resp = await client.get("/test", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"


async def test_no_origin_allowed_without_wildcard(client):
    resp = await client.get("/test")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Test exitoso"}
    assert "access-control-allow-origin" not in resp.headers


async def test_rejected_origin_gets_no_cors_headers(client):
    resp = await client.get("/test", headers={"Origin": "https://evil.example.com"})
    assert resp.status_code == 200
    assert "access-control-allow-origin" not in resp.headers
    assert "access-control-allow-credentials" not in resp.headers


async def test_rejected_origin_is_logged(client, caplog):
    with caplog.at_level(logging.WARNING, logger="bookhive.api.admission_gate"):
        await client.get("/test", headers={"Origin": "https://evil.example.com"})
    records = [r for r in caplog.records if r.name == "bookhive.api.admission_gate"]
    assert len(records) == 1
    assert records[0].error_code == "ORIGIN_REJECTED"
    assert records[0].origin == "https://evil.example.com"
    assert "https://evil.example.com" in records[0].getMessage()


async def test_trailing_slash_origin_is_rejected(client):
    resp = await client.get("/test", headers={"Origin": FRONTEND + "/"})
    assert "access-control-allow-origin" not in resp.headers


@pytest.mark.parametrize("path", ["/", "/test", "/api/books", "/api/unknown-path", "/nowhere"])
async def test_preflight_answers_204_empty(client, path):
    resp = await client.options(
        path,
        headers={
            "Origin": FRONTEND,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type, Authorization",
        },
    )
    assert resp.status_code == 204
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == FRONTEND
    assert "POST" in resp.headers["access-control-allow-methods"]
    assert "Authorization" in resp.headers["access-control-allow-headers"]


async def test_preflight_without_origin_answers_204(client):
    resp = await client.options("/api/books")
    assert resp.status_code == 204
    assert resp.content == b""
    assert "access-control-allow-origin" not in resp.headers


async def test_preflight_from_rejected_origin_answers_204_without_origin(client):
    resp = await client.options(
        "/api/books", headers={"Origin": "https://evil.example.com"},
    )
    assert resp.status_code == 204
    assert resp.content == b""
    assert "access-control-allow-origin" not in resp.headers


async def test_allow_origin_header_applied_once(client):
    resp = await client.get("/test", headers={"Origin": FRONTEND})
    assert resp.headers.get_list("access-control-allow-origin") == [FRONTEND]


async def test_error_responses_carry_cors_headers(client):
    resp = await client.get("/api/unknown-path", headers={"Origin": FRONTEND})
    assert resp.status_code == 404
    assert resp.headers["access-control-allow-origin"] == FRONTEND
