import asyncio
import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from glance import __version__
from glance.api.router import api_router
from glance.api.routes import health
from glance.config import Settings, get_settings
from glance.exceptions import error_payload, register_exception_handlers
from glance.services.k8s import ClusterClient, ClusterOperations


logger = structlog.get_logger(__name__)


def create_app(cluster: ClusterClient, settings: Settings | None = None) -> FastAPI:
    """Build the application around an already connected cluster client.

    The client and the resource modules built on it live on ``app.state``;
    route dependencies read them from there.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app.startup", environment=settings.environment, cluster=cluster.display_name)
        yield
        logger.info("app.shutdown")
        cluster.close()

    app = FastAPI(
        title="glance",
        description="REST façade over the Kubernetes API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.cluster = cluster
    app.state.operations = ClusterOperations.for_cluster(cluster)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(call_next(request), timeout=settings.request_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("http.timeout", method=request.method, path=request.url.path)
            response = JSONResponse(status_code=504, content=error_payload("Request timed out"))

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(api_router)
    return app
