"""Web Service: browser dashboard with live metric updates."""

import asyncio
import logging
import webbrowser
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from tgraph.api.dashboard import get_dashboard_html
from tgraph.api.health import check_session
from tgraph.core.config import settings
from tgraph.core.dependencies import ServiceContainer
from tgraph.core.exceptions import ResolutionError, SessionStateError
from tgraph.models.payload import (
    ConfigResponse,
    DataPayload,
    ResolutionRequest,
    ResolutionResponse,
)
from tgraph.monitoring.metrics import resolution_changes_total
from tgraph.services.broadcaster import CLOSED, format_sse
from tgraph.services.session import ViewerConfig

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Seconds between keep-alive comments on an idle event stream.
KEEPALIVE_SECONDS = 15.0


def create_app(
    config: Optional[ViewerConfig] = None,
    tail_interval_ms: Optional[int] = None,
    auto_open: bool = False,
    url: Optional[str] = None,
) -> FastAPI:
    """
    Build the dashboard application.

    Args:
        config: Viewer configuration; built from settings if omitted.
        tail_interval_ms: Delay between polls of the source file.
        auto_open: Open the dashboard in the default browser on startup.
        url: Address the dashboard is served at, for logs and auto-open.

    Returns:
        Configured FastAPI application.
    """
    services = ServiceContainer(config, tail_interval_ms)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        await services.initialize()
        dashboard_url = url or f"http://{settings.host}:{settings.port}"
        logger.info(f"Web Service started for {services.config.log_file} at {dashboard_url}")
        if auto_open:
            webbrowser.open(dashboard_url)
        yield
        await services.shutdown()
        logger.info("Web Service stopped")

    app = FastAPI(title="Terminal Graph Dashboard", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SessionStateError)
    async def session_state_error(request: Request, exc: SessionStateError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.get("/", response_class=HTMLResponse)
    async def dashboard() -> HTMLResponse:
        return HTMLResponse(get_dashboard_html())

    @app.get("/data", response_model=DataPayload)
    async def data() -> DataPayload:
        """
        Current compressed series and statistics for every metric.

        Returns:
            Data payload at the active resolution.
        """
        return services.session.payload()

    @app.get("/config", response_model=ConfigResponse)
    async def config_endpoint() -> ConfigResponse:
        return services.session.config_response()

    @app.post("/resolution", response_model=ResolutionResponse)
    async def resolution(request: ResolutionRequest) -> ResolutionResponse:
        """
        Change the number of points each series is compressed to.

        Args:
            request: Requested resolution.

        Returns:
            The accepted resolution.
        """
        try:
            value = services.session.set_resolution(request.resolution)
        except ResolutionError as e:
            resolution_changes_total.labels(outcome="rejected").inc()
            logger.warning(f"Rejected resolution {e.value!r}: {str(e)}")
            raise HTTPException(
                status_code=400,
                detail={"error": str(e), "resolution": services.session.resolution},
            )

        resolution_changes_total.labels(outcome="accepted").inc()
        services.broadcast()
        return ResolutionResponse(resolution=value)

    @app.post("/reload")
    async def reload() -> dict:
        """
        Discard in-memory samples and replay the source file.

        Returns:
            Number of samples loaded for the active metric.
        """
        loaded = services.session.reload()
        services.broadcast()
        return {"success": True, "loaded": loaded}

    @app.get("/sse")
    async def sse(request: Request) -> StreamingResponse:
        """Server-sent events: the full payload, then one event per update."""
        queue = services.broadcaster.subscribe()
        initial = services.session.payload().model_dump_json()

        async def event_stream():
            try:
                yield format_sse(initial)
                while True:
                    if await request.is_disconnected():
                        break
                    try:
                        message = await asyncio.wait_for(queue.get(), KEEPALIVE_SECONDS)
                    except asyncio.TimeoutError:
                        yield ": keep-alive\n\n"
                        continue
                    if message is CLOSED:
                        break
                    yield format_sse(message)
            finally:
                services.broadcaster.unsubscribe(queue)

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )

    @app.get("/health")
    async def health() -> dict:
        """
        Health check endpoint.

        Returns:
            Health status with session state and source details.
        """
        return {"service": settings.service_name, **check_session(services.session)}

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
