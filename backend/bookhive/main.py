"""BookHive API — FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery), /api/* fallback last
    - Exactly one CORS layer: the AdmissionGateMiddleware, fed from settings
    - Global error handlers map BookHiveError → structured JSON responses
    - The datastore is connected before the app is built and closed on lifespan shutdown

Design Decisions:
    - Factory over module-level app: settings and datastore are passed in, never
      read from globals, so tests build apps with fakes
    - Datastore close lives in the lifespan: uvicorn runs it after it stops accepting
      and drains connections, and before serve() returns
"""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from bookhive.api.admission_gate import AdmissionGateMiddleware
from bookhive.api.error_handlers import register_error_handlers
from bookhive.api.routes import health, not_found
from bookhive.api.routes.groups import ROUTE_GROUPS
from bookhive.config import Settings
from bookhive.infrastructure.datastore import DatastoreManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    logger.info("BookHive API started")
    yield
    logger.info("BookHive API shutting down")
    await app.state.datastore.close()


def create_app(
    settings: Settings,
    datastore: DatastoreManager,
    route_groups: Sequence[APIRouter] = ROUTE_GROUPS,
) -> FastAPI:
    app = FastAPI(title="BookHive API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.datastore = datastore

    app.add_middleware(
        AdmissionGateMiddleware, allowed_origins=settings.allowed_origins,
    )

    app.include_router(health.router)
    for group in route_groups:
        app.include_router(group)
    # Must stay last: catches every /api/* path the groups did not match
    app.include_router(not_found.router)

    register_error_handlers(app)
    return app
