import sys
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from . import __version__
from .api.control import ControlService, ValidationFailure
from .config import Settings, SettingsError, load_settings
from .models.api import (
    AddSessionRequest,
    AddSessionResponse,
    CleanResponse,
    CountsResponse,
    RemoveSessionRequest,
    SessionResult,
)
from .sessions.registry import SessionRegistry
from .sessions.reporter import CountersReporter
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings, registry: Optional[SessionRegistry] = None) -> FastAPI:
    """
    Build the control API around a session registry.

    The registry lives as long as the application: the counters reporter
    starts with it and every session is drained on shutdown.
    """
    registry = registry if registry is not None else SessionRegistry()
    control = ControlService(registry, default_broker_url=settings.centrifugo_url)
    reporter = CountersReporter(registry, interval=settings.report_interval)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up")
        reporter.start()
        yield
        logger.info("Application shutting down")
        await reporter.stop()
        await registry.shutdown()

    app = FastAPI(
        title="Realtime Session Pool",
        description="Pool of simulated users subscribed to private broker channels",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.control = control

    @app.post("/connection.add", response_model=AddSessionResponse)
    async def add_connection(body: AddSessionRequest, request: Request) -> AddSessionResponse:
        """
        Add a session by id, or ``many`` sessions with sequential ids.
        Cookies come from the request itself unless ``cookie`` overrides them.
        """
        try:
            return control.add_sessions(body, request.cookies)
        except ValidationFailure as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    @app.post("/connection.remove", response_model=SessionResult)
    async def remove_connection(body: RemoveSessionRequest) -> SessionResult:
        try:
            return control.remove_session(body)
        except ValidationFailure as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    @app.api_route("/connection.clean", methods=["GET", "POST"], response_model=CleanResponse)
    async def clean_connections() -> CleanResponse:
        return control.remove_all()

    @app.api_route("/connection.count", methods=["GET", "POST"], response_model=CountsResponse)
    async def count_connections() -> CountsResponse:
        return control.get_counts()

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Global exception handler to prevent server crashes.
        """
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return app


def main() -> None:
    import uvicorn

    try:
        settings = load_settings()
        host, port = settings.bind()
    except SettingsError as e:
        logging.basicConfig()
        logger.critical(str(e))
        sys.exit(1)

    setup_logging(settings.log_filename)
    logger.info(f"Settings: {settings}")
    logger.info(f"Listening at {host}:{port}")

    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level="info",
        log_config=None,
    )


if __name__ == "__main__":
    main()
