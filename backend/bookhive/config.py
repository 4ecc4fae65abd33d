"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - Settings are frozen: built once at startup, passed explicitly, never mutated
    - get_settings() is cached (lru_cache), single instance per process
    - MONGO_URI is a SecretStr: never rendered in repr, logs, or tracebacks

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - MONGO_URI optional at the model level: the lifecycle controller reports it missing
      as a fatal startup error instead of a pydantic traceback
    - Invalid PORT falls back to 5000 rather than failing validation
    - Non-positive Mongo timeouts fail validation: a zero would disable the bound
"""

from functools import lru_cache

from pydantic import PositiveInt, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bookhive.core.connection_string import mask_uri
from bookhive.core.errors import ConfigMissingError
from bookhive.core.origin_policy import build_allowed_origins

DEFAULT_PORT = 5000


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, frozen=True, extra="ignore",
    )

    # Listener
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT

    @field_validator("port", mode="before")
    @classmethod
    def default_invalid_port(cls, v) -> int:
        """PORT absent, non-numeric or out of range → 5000."""
        try:
            port = int(v)
        except (TypeError, ValueError):
            return DEFAULT_PORT
        if not 0 < port < 65536:
            return DEFAULT_PORT
        return port

    # Datastore
    mongo_uri: SecretStr | None = None
    mongo_db_name: str = "bookhive"
    # Finite timeouts; pymongo reads 0 as "no timeout", hence PositiveInt
    mongo_server_selection_timeout_ms: PositiveInt = 10_000
    mongo_socket_timeout_ms: PositiveInt = 45_000
    mongo_connect_timeout_ms: PositiveInt = 10_000

    @field_validator("mongo_uri", mode="before")
    @classmethod
    def blank_uri_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # CORS
    frontend_url: str | None = None

    @field_validator("frontend_url", mode="before")
    @classmethod
    def blank_frontend_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def allowed_origins(self) -> frozenset[str]:
        return build_allowed_origins(self.frontend_url)

    def require_mongo_uri(self) -> str:
        """Raw connection string, or ConfigMissingError when absent."""
        if self.mongo_uri is None:
            raise ConfigMissingError("MONGO_URI")
        return self.mongo_uri.get_secret_value()

    def startup_summary(self) -> dict[str, str]:
        """Loaded environment with the connection string reduced to its scheme."""
        raw_uri = self.mongo_uri.get_secret_value() if self.mongo_uri else None
        return {
            "PORT": str(self.port),
            "MONGO_URI": mask_uri(raw_uri),
            "FRONTEND_URL": self.frontend_url or "NOT SET",
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
