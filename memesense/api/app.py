"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import MemesenseConfig
from ..core.errors import MemesenseError
from ..core.service_metrics import get_metrics
from .dependencies import ServiceContainer
from .routes import router

logger = logging.getLogger(__name__)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def endpoint_label(request: Request) -> str:
    """Metric label for a request: the matched route template, else "unmatched"."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path is None:
        return "unmatched"
    return path.lstrip("/") or "root"


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the Memesense app.

    Args:
        container: Pre-built services (tests inject one with mocked clients);
            built from the environment when not given
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI application."""
        logger.info("Starting Memesense API")
        is_valid, warnings = MemesenseConfig.validate_config()
        for warning in warnings:
            logger.warning(warning)
        if not is_valid:
            logger.error("Configuration is invalid, some endpoints may fail")
        get_metrics()

        yield

        logger.info("Shutting down Memesense API")
        await app.state.container.close()

    app = FastAPI(
        title="Memesense",
        description="Solana memecoin analytics backend",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container or ServiceContainer()

    @app.middleware("http")
    async def cors_and_metrics(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        get_metrics().record_request(endpoint_label(request), response.status_code)
        return response

    @app.exception_handler(MemesenseError)
    async def memesense_error_handler(request: Request, exc: MemesenseError):
        status_code = getattr(exc, "status_code", 500)
        if status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.url.path} rejected: {exc}")
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    app.include_router(router)
    return app
