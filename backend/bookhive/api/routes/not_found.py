"""API Fallback — structured 404 for any /api/* path no route group matched.

Invariants:
    - Registered after every other router, so it never shadows a real route
"""

from fastapi import APIRouter, Request

from bookhive.core.errors import RouteNotFoundError

router = APIRouter(tags=["fallback"])


@router.api_route(
    "/api/{path:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def api_not_found(request: Request, path: str):
    raise RouteNotFoundError(request.url.path)
