"""Origin Policy — pure CORS admission decision for cross-origin requests.

Invariants:
    - Origins compare by exact string equality (scheme, port, trailing slash all matter)
    - No origin header → allowed, but no Access-Control-Allow-Origin emitted
    - Allowed origin is echoed verbatim, never "*" (credentials are enabled)
    - Rejected origin → no CORS headers at all
    - Allow-list always contains the dev origins; a blank frontend URL never widens it

Design Decisions:
    - frozenset allow-list: membership is the only semantic, read-only after startup
    - Header computation separated from the middleware so it is testable without ASGI
"""

from enum import Enum

DEV_ORIGINS: tuple[str, ...] = (
    "http://localhost:5173",  # Vite dev
    "http://localhost:3000",  # CRA dev
    "http://localhost:3001",
)

ALLOWED_METHODS: tuple[str, ...] = (
    "GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS",
)

ALLOWED_HEADERS: tuple[str, ...] = (
    "Content-Type", "Authorization", "Accept", "X-Requested-With",
)

WILDCARD = "*"


class OriginDecision(str, Enum):
    """Outcome of the admission check for one request."""
    NO_ORIGIN = "no_origin"
    ALLOWED = "allowed"
    REJECTED = "rejected"


def build_allowed_origins(frontend_url: str | None) -> frozenset[str]:
    """Frontend origin (when usable) plus the local development origins."""
    origins = set(DEV_ORIGINS)
    if frontend_url and frontend_url.strip() and frontend_url.strip() != WILDCARD:
        origins.add(frontend_url.strip())
    return frozenset(origins)


def decide_origin(origin: str | None, allowed: frozenset[str]) -> OriginDecision:
    """Classify the request's Origin header against the allow-list."""
    if not origin:
        return OriginDecision.NO_ORIGIN
    if origin in allowed:
        return OriginDecision.ALLOWED
    return OriginDecision.REJECTED


def admission_headers(origin: str | None, decision: OriginDecision) -> dict[str, str]:
    """Response headers to attach for a given decision."""
    if decision is OriginDecision.REJECTED:
        return {}
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    }
    if decision is OriginDecision.ALLOWED:
        headers["Access-Control-Allow-Origin"] = origin
    return headers
