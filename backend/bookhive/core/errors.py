"""Error Hierarchy — typed, categorized exceptions for all BookHive failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - fatal=True errors abort startup; everything else is recovered or reported
    - to_response() produces the REST envelope
    - No credentials in messages (datastore errors carry the host only)

Design Decisions:
    - Single hierarchy with BookHiveError base: FastAPI global handler catches all
      and the lifecycle controller reports startup failures with the same fields
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    CONFIGURATION = "configuration"
    CORS = "cors"
    DATASTORE = "datastore"
    LISTENER = "listener"
    RESOURCE_NOT_FOUND = "resource_not_found"
    VALIDATION = "validation"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    path: str | None = None
    host: str | None = None


class BookHiveError(Exception):
    """Base exception for all BookHive errors."""

    fatal: bool = False

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "path": self.context.path,
                },
            }
        }


# ─── Configuration Errors (fatal at startup) ────────────────────

class ConfigMissingError(BookHiveError):
    """A required environment variable is absent or blank."""

    fatal = True

    def __init__(self, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"{setting} is not defined in the environment variables",
            "CONFIG_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting


class InvalidConfigError(BookHiveError):
    """An environment variable is present but unusable."""

    fatal = True

    def __init__(self, setting: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"{setting} is invalid: {reason}",
            "CONFIG_INVALID", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting
        self.reason = reason


# ─── Per-request Errors ─────────────────────────────────────────

class OriginRejectedError(BookHiveError):
    """Cross-origin request from an origin outside the allow-list."""

    def __init__(self, origin: str, context: ErrorContext | None = None):
        super().__init__(
            f"CORS attempt from disallowed origin: {origin}",
            "ORIGIN_REJECTED", ErrorCategory.CORS,
            ErrorSeverity.WARNING, context, 403,
        )
        self.origin = origin


class RouteNotFoundError(BookHiveError):
    """No API route matched the request path."""

    def __init__(self, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.path = path
        super().__init__(
            "Endpoint API no encontrado",
            "ROUTE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, ctx, 404,
        )


# ─── Datastore Errors (fatal at startup) ────────────────────────

class DatastoreError(BookHiveError):
    """Base for datastore connection failures. Carries the redacted host."""

    fatal = True

    def __init__(
        self,
        message: str,
        code: str,
        host: str | None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.host = host
        super().__init__(
            message, code, ErrorCategory.DATASTORE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.host = host


class DatastoreUnreachableError(DatastoreError):
    """Datastore could not be reached (timeout, refused, network)."""

    def __init__(
        self,
        host: str | None,
        reason: str = "network",
        context: ErrorContext | None = None,
    ):
        message = f"MongoDB unreachable at {host} ({reason})"
        super().__init__(message, "DATASTORE_UNREACHABLE", host, context)
        self.reason = reason


class DatastoreDNSError(DatastoreUnreachableError):
    """Datastore host name could not be resolved."""

    hints = (
        "Check that MONGO_URI is exactly the Atlas connection string (no quotes).",
        "If mongodb+srv:// SRV resolution fails, switch to the standard "
        "mongodb:// connection string from Atlas.",
        "Make sure the password is URL-encoded if it has special characters.",
        "Temporarily allow 0.0.0.0/0 in the Atlas IP Access List to rule out "
        "the IP whitelist.",
    )

    def __init__(self, host: str | None, context: ErrorContext | None = None):
        # Skips DatastoreUnreachableError.__init__: different code and message
        DatastoreError.__init__(
            self,
            f"DNS resolution failed for MongoDB host: {host}",
            "DATASTORE_DNS_FAILURE", host, context,
        )
        self.reason = "dns"


class DatastoreAuthError(DatastoreError):
    """Datastore rejected the credentials."""

    def __init__(self, host: str | None, context: ErrorContext | None = None):
        super().__init__(
            f"MongoDB authentication failed for host: {host}",
            "DATASTORE_AUTH_FAILURE", host, context,
        )


# ─── Listener Errors (reported, not fatal) ──────────────────────

class ListenerBindError(BookHiveError):
    """Listener socket could not be bound (e.g. port already in use)."""

    def __init__(
        self, host: str, port: int, detail: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Could not bind listener to {host}:{port}: {detail}",
            "LISTENER_BIND_ERROR", ErrorCategory.LISTENER,
            ErrorSeverity.ERROR, context, 500,
        )
        self.host = host
        self.port = port


class ListenerRuntimeError(BookHiveError):
    """Listener failed while serving."""

    def __init__(self, detail: str, context: ErrorContext | None = None):
        super().__init__(
            f"Server error: {detail}",
            "LISTENER_RUNTIME_ERROR", ErrorCategory.LISTENER,
            ErrorSeverity.ERROR, context, 500,
        )


class InvalidTransitionError(BookHiveError):
    """Lifecycle state machine asked to make an illegal move."""

    def __init__(self, current: str, target: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid lifecycle transition: {current} -> {target}",
            "INVALID_LIFECYCLE_TRANSITION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.current = current
        self.target = target
