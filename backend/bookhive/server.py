"""Process Lifecycle Controller — validate config, connect, listen, shut down.

Invariants:
    - The listener socket is bound only after the datastore ping succeeds
    - Missing MONGO_URI → Fatal before any network I/O and before any bind
    - Fatal startup conditions exit 1; graceful shutdown exits 0
    - SIGINT/SIGTERM go through one path: BookHiveServer.handle_exit → request_shutdown
    - The datastore is closed before run() returns, on every path past Connecting
    - Fatal diagnostics carry the datastore host only, never credentials

Design Decisions:
    - uvicorn.Server driven with a pre-bound socket: binding is an explicit step we
      control and classify, instead of uvicorn calling sys.exit on bind failure
    - handle_exit overridden without recording the signal: uvicorn would otherwise
      re-raise it after shutdown and the process would die by signal, not exit 0
    - Collaborators injected (datastore/app/server factories, bind) so the state
      machine is tested without sockets or MongoDB
"""

import asyncio
import logging
import signal
import socket
import sys
from collections.abc import Callable
from types import FrameType

import uvicorn
from pydantic import ValidationError

from bookhive.config import Settings, get_settings
from bookhive.core.errors import (
    BookHiveError,
    DatastoreDNSError,
    DatastoreError,
    ListenerBindError,
    ListenerRuntimeError,
)
from bookhive.core.lifecycle import LifecycleState, LifecycleStateMachine
from bookhive.infrastructure.datastore import DatastoreManager
from bookhive.infrastructure.observability import setup_logging
from bookhive.main import create_app

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class BookHiveServer(uvicorn.Server):
    """uvicorn server whose signal handling feeds the lifecycle controller."""

    def __init__(self, config: uvicorn.Config, on_shutdown: Callable[[int], None]):
        super().__init__(config)
        self._on_shutdown = on_shutdown

    def handle_exit(self, sig: int, frame: FrameType | None) -> None:
        if self.should_exit and sig == signal.SIGINT:
            self.force_exit = True
            return
        self.should_exit = True
        self._on_shutdown(sig)


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind and listen on host:port, or raise ListenerBindError."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    try:
        return socket.create_server((host, port), family=family, backlog=2048)
    except OSError as e:
        raise ListenerBindError(host, port, e.strerror or str(e)) from e


class LifecycleController:
    """Runs the process through its lifecycle states and returns the exit code."""

    def __init__(
        self,
        settings: Settings,
        datastore_factory: Callable[[Settings], DatastoreManager] = DatastoreManager.from_settings,
        app_factory=create_app,
        server_factory=BookHiveServer,
        bind: Callable[[str, int], socket.socket] = bind_listener,
    ):
        self.settings = settings
        self.lifecycle = LifecycleStateMachine()
        self._datastore_factory = datastore_factory
        self._app_factory = app_factory
        self._server_factory = server_factory
        self._bind = bind

    @property
    def state(self) -> LifecycleState:
        return self.lifecycle.state

    async def run(self) -> int:
        self._advance(LifecycleState.VALIDATING_CONFIG)
        logger.info(f"Environment loaded: {self.settings.startup_summary()}")
        logger.info(
            f"Allowed CORS origins: {sorted(self.settings.allowed_origins)}",
        )
        try:
            self.settings.require_mongo_uri()
        except BookHiveError as e:
            return self._fail(e)

        self._advance(LifecycleState.CONNECTING)
        datastore = self._datastore_factory(self.settings)
        logger.info("Connecting to MongoDB...", extra={"host": datastore.host})
        try:
            await datastore.connect()
        except BookHiveError as e:
            return self._fail(e)

        try:
            sock = self._bind(self.settings.host, self.settings.port)
        except ListenerBindError as e:
            self._report(e)
            self._advance(LifecycleState.SHUTTING_DOWN)
            return await self._terminate(datastore, EXIT_FAILURE)

        self._advance(LifecycleState.LISTENING)
        port = self.settings.port
        logger.info(f"Server listening on port {port}", extra={"port": port})
        logger.info(f"Local check: http://localhost:{port}/test")

        exit_code = await self._serve(datastore, sock)

        if self.state is LifecycleState.LISTENING:
            self._advance(LifecycleState.SHUTTING_DOWN)
        return await self._terminate(datastore, exit_code)

    def request_shutdown(self, sig: int) -> None:
        """Single shutdown entry point, called from the server's signal handler."""
        if self.state is not LifecycleState.LISTENING:
            return
        self._advance(LifecycleState.SHUTTING_DOWN)
        logger.info(
            "Shutting down server...",
            extra={"signal": signal.Signals(sig).name},
        )

    async def _serve(self, datastore: DatastoreManager, sock: socket.socket) -> int:
        app = self._app_factory(self.settings, datastore)
        config = uvicorn.Config(
            app,
            host=self.settings.host,
            port=self.settings.port,
            lifespan="on",
            log_config=None,
        )
        server = self._server_factory(config, on_shutdown=self.request_shutdown)
        try:
            await server.serve(sockets=[sock])
        except Exception as e:
            self._report(ListenerRuntimeError(str(e)), exc_info=True)
            return EXIT_FAILURE
        finally:
            sock.close()
        if not server.started:
            logger.error("Application startup failed")
            return EXIT_FAILURE
        return EXIT_OK

    async def _terminate(self, datastore: DatastoreManager, exit_code: int) -> int:
        await datastore.close()
        self._advance(LifecycleState.TERMINATED)
        logger.info("Server stopped")
        return exit_code

    def _fail(self, exc: BookHiveError) -> int:
        self._advance(LifecycleState.FATAL)
        logger.critical(
            exc.message,
            extra={"error_code": exc.code, "host": exc.context.host},
        )
        if isinstance(exc, DatastoreDNSError):
            for hint in exc.hints:
                logger.error(f"Hint: {hint}")
        elif isinstance(exc, DatastoreError) and exc.__cause__ is not None:
            logger.error(f"Driver error detail: {exc.__cause__}")
        return EXIT_FAILURE

    def _report(self, exc: BookHiveError, exc_info: bool = False) -> None:
        logger.error(
            exc.message, extra={"error_code": exc.code}, exc_info=exc_info,
        )

    def _advance(self, target: LifecycleState) -> None:
        self.lifecycle.advance(target)
        logger.debug(f"Lifecycle → {target.value}", extra={"state": target.value})


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.critical(
            f"Invalid configuration: {e}", extra={"error_code": "CONFIG_INVALID"},
        )
        sys.exit(EXIT_FAILURE)
    setup_logging(settings.log_level, settings.log_format)
    logger.info("BookHive server process starting")
    sys.exit(asyncio.run(LifecycleController(settings).run()))
