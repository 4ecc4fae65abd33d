"""Datastore Manager — async MongoDB client with bounded timeouts and failure classification.

Invariants:
    - Server-selection, socket and connect timeouts are always finite
    - connect() confirms the connection with a ping before returning
    - Every driver exception raised by connect(), including the bare ValueError pymongo
      raises for malformed hosts, is mapped via classify_connection_error
    - Classified errors carry the host without credentials, never the raw URI
    - close() is idempotent; the client is released exactly once

Design Decisions:
    - One client per process, owned by the lifecycle controller and exposed to routes
      through app.state (no module-level singleton)
    - motor pools connections internally: handlers borrow the shared client per operation
"""

import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import (
    InvalidURI, OperationFailure, PyMongoError, ServerSelectionTimeoutError,
)

from bookhive.config import Settings
from bookhive.core.connection_string import datastore_host
from bookhive.core.errors import (
    BookHiveError,
    DatastoreAuthError,
    DatastoreDNSError,
    DatastoreUnreachableError,
    InvalidConfigError,
)

logger = logging.getLogger(__name__)

DNS_FAILURE_MARKERS = (
    "querysrv",
    "dns query",
    "dns response",
    "dns operation timed out",
    "resolution lifetime expired",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "temporary failure in name resolution",
    "no address associated with hostname",
)

# AuthenticationFailed, plus Atlas's "bad auth" variant
AUTH_FAILURE_CODES = frozenset({18, 8000})


def classify_connection_error(exc: Exception, host: str | None) -> BookHiveError:
    """Map a driver exception to the startup failure taxonomy."""
    text = str(exc).lower()
    # pymongo raises bare ValueError for bad hosts/ports, usually an unescaped password
    if isinstance(exc, (InvalidURI, ValueError, TypeError)):
        return InvalidConfigError(
            "MONGO_URI",
            "not a valid MongoDB connection string "
            "(username and password must be URL-encoded)",
        )
    if any(marker in text for marker in DNS_FAILURE_MARKERS):
        return DatastoreDNSError(host)
    if isinstance(exc, OperationFailure) and (
        exc.code in AUTH_FAILURE_CODES or "auth" in text
    ):
        return DatastoreAuthError(host)
    if isinstance(exc, ServerSelectionTimeoutError):
        return DatastoreUnreachableError(host, reason="timeout")
    return DatastoreUnreachableError(host, reason=type(exc).__name__)


class DatastoreManager:
    """Owns the process-lifetime MongoDB client."""

    def __init__(
        self,
        uri: str,
        database_name: str = "bookhive",
        server_selection_timeout_ms: int = 10_000,
        socket_timeout_ms: int = 45_000,
        connect_timeout_ms: int = 10_000,
    ):
        self._uri = uri
        self._database_name = database_name
        self._client_options = {
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "socketTimeoutMS": socket_timeout_ms,
            "connectTimeoutMS": connect_timeout_ms,
        }
        self.host = datastore_host(uri)
        self.client: AsyncIOMotorClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatastoreManager":
        return cls(
            settings.require_mongo_uri(),
            database_name=settings.mongo_db_name,
            server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
            socket_timeout_ms=settings.mongo_socket_timeout_ms,
            connect_timeout_ms=settings.mongo_connect_timeout_ms,
        )

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    async def connect(self) -> None:
        """Create the client and confirm reachability with a ping."""
        try:
            # mongodb+srv:// resolves SRV records inside the constructor
            self.client = AsyncIOMotorClient(self._uri, **self._client_options)
            await self.client.admin.command("ping")
        except (PyMongoError, ValueError, TypeError) as e:
            await self.close()
            raise classify_connection_error(e, self.host) from e
        logger.info("MongoDB connection established", extra={"host": self.host})

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self.client is None:
            raise RuntimeError("Datastore not connected")
        return self.client.get_default_database(default=self._database_name)

    async def health_check(self) -> bool:
        """Check datastore connectivity (for readiness checks)."""
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"Datastore health check failed: {e}")
            return False

    async def close(self) -> None:
        if self.client is None:
            return
        self.client.close()
        self.client = None
        logger.info("MongoDB connection closed", extra={"host": self.host})


def get_datastore(request: Request) -> DatastoreManager:
    """FastAPI dependency: the shared datastore for this app."""
    return request.app.state.datastore
