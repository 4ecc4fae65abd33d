"""Health & Liveness Checks — fixed acknowledgements plus datastore readiness.

Invariants:
    - GET /test and GET / always answer once the process is listening
    - GET /api/health/ready returns 503 if the datastore ping fails
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from bookhive.infrastructure.datastore import DatastoreManager, get_datastore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/test")
async def test_endpoint():
    logger.info("Test endpoint accessed")
    return {"message": "Test exitoso"}


@router.get("/", response_class=PlainTextResponse)
async def root_endpoint():
    return "Backend BookHive funcionando"


@router.get("/api/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "bookhive-api"}


@router.get("/api/health/ready")
async def readiness_check(datastore: DatastoreManager = Depends(get_datastore)):
    """Readiness check — includes datastore connectivity."""
    if not await datastore.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "datastore_unavailable",
            },
        )
    return {"status": "ready", "checks": {"datastore": "healthy"}}
