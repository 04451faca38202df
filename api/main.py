"""
FastAPI application for CineSearch.

Public read-only API for the movie search frontend. Every upstream call
goes through the shared response cache; every /api/ request goes through
abuse control unless the app runs in the test environment.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from cinesearch.config import Config
from cinesearch.context import AppContext
from cinesearch.errors import CineSearchError, RateLimited
from api.dependencies import client_address
from api.exceptions import (
    APIError,
    api_error_handler,
    cinesearch_error_handler,
    generic_exception_handler,
    rate_limited_response,
)
from api.logging_config import (
    logger,
    generate_request_id,
    set_request_id,
)

# Import routers
from api.routers import discover, genres, movies, search
from api.schemas.common import HealthResponse

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def create_app(config: Optional[Config] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        config: Settings (loaded from the environment when omitted)
        context: Prebuilt service context (built from config when omitted)

    Returns:
        Configured FastAPI app owning its own cache and abuse-control state
    """
    if context is None:
        context = AppContext.from_config(config or Config.from_env())
    config = context.config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        housekeeping = asyncio.create_task(context.run_housekeeping())
        logger.info(
            f"CineSearch API ready (abuse control "
            f"{'enabled' if config.abuse_control_enabled else 'disabled'})"
        )
        try:
            yield
        finally:
            housekeeping.cancel()
            try:
                await housekeeping
            except asyncio.CancelledError:
                pass
            context.close()

    app = FastAPI(
        title="CineSearch API",
        description="Movie search broker in front of TMDB",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(CineSearchError, cinesearch_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.middleware("http")
    async def abuse_control_middleware(request: Request, call_next):
        """Rate limit and slow down /api/ requests per client address."""
        if not config.abuse_control_enabled or not request.url.path.startswith("/api/"):
            return await call_next(request)

        address = client_address(request, config.trust_proxy)
        try:
            decision = await context.abuse.admit(address)
        except RateLimited as e:
            return rate_limited_response(e)

        response = await call_next(request)
        response.headers.update(decision.headers())
        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all HTTP requests with timing and response status."""
        request_id = generate_request_id()
        set_request_id(request_id)

        # Skip logging for health checks and docs
        skip_paths = {"/api/health", "/", "/api/docs", "/api/redoc", "/api/openapi.json"}
        if request.url.path in skip_paths:
            return await call_next(request)

        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"from {client_ip}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"duration={duration_ms:.2f}ms error={str(e)}"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        log_msg = (
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration_ms:.2f}ms"
        )

        if response.status_code >= 500:
            logger.error(log_msg)
        elif response.status_code >= 400:
            logger.warning(log_msg)
        else:
            logger.info(log_msg)

        # Add request ID to response headers for debugging
        response.headers["X-Request-ID"] = request_id
        return response

    # CORS is outermost so preflight requests are answered before abuse control
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins or ["*"],
        allow_credentials=bool(config.allowed_origins),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    # Mount public routers
    app.include_router(search.router, prefix="/api", tags=["Search"])
    app.include_router(movies.router, prefix="/api", tags=["Movies"])
    app.include_router(genres.router, prefix="/api", tags=["Genres"])
    app.include_router(discover.router, prefix="/api", tags=["Discovery"])

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint points at the docs."""
        return {
            "message": "CineSearch API",
            "docs": "/api/docs",
            "redoc": "/api/redoc",
        }

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        """Simple health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    return app
