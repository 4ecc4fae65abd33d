"""Admission Gate — the single CORS middleware in front of every route.

Invariants:
    - Exactly one gate per app; headers are assigned (not appended) once per request
    - OPTIONS always terminates here with 204 and an empty body
    - Rejected origins are logged and never receive Access-Control-Allow-Origin
    - Non-preflight requests are never failed by the gate

Design Decisions:
    - Custom middleware over Starlette's CORSMiddleware: that one answers rejected
      preflights with 400 and lets origin-less OPTIONS fall through to routing (405)
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from bookhive.core.errors import ErrorContext, OriginRejectedError
from bookhive.core.origin_policy import (
    OriginDecision, admission_headers, decide_origin,
)

logger = logging.getLogger(__name__)


class AdmissionGateMiddleware(BaseHTTPMiddleware):
    """Apply the origin allow-list and answer preflight requests."""

    def __init__(self, app: ASGIApp, allowed_origins: frozenset[str]):
        super().__init__(app)
        self.allowed_origins = allowed_origins

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        origin = request.headers.get("origin")
        decision = decide_origin(origin, self.allowed_origins)
        if decision is OriginDecision.REJECTED:
            _report_rejection(origin, request)

        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)

        if decision is OriginDecision.REJECTED:
            if "access-control-allow-origin" in response.headers:
                del response.headers["access-control-allow-origin"]
            return response
        for name, value in admission_headers(origin, decision).items():
            response.headers[name] = value
        if decision is OriginDecision.ALLOWED:
            response.headers.add_vary_header("Origin")
        return response


def _report_rejection(origin: str, request: Request) -> None:
    err = OriginRejectedError(origin, ErrorContext(path=request.url.path))
    logger.warning(
        err.message,
        extra={
            "error_code": err.code,
            "origin": origin,
            "method": request.method,
            "path": request.url.path,
        },
    )
