"""FastAPI application setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.catalog import __version__
from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.envelope import (
    api_error_handler,
    error_response,
    validation_error_handler,
)
from src.catalog.api.http.routers.health import legacy_router as healthcheck_router
from src.catalog.api.http.routers.health import router as health_router
from src.catalog.api.http.routers.metrics import router as metrics_router
from src.catalog.api.http.routers.service.product import router as product_router
from src.catalog.api.utils.app_startup import configure_logging
from src.catalog.core.errors import ApiError
from src.catalog.core.services import (
    DbManageService,
    DbSessionService,
    NullMetricsSink,
    build_metrics_sink,
)
from src.catalog.core.services.external.dummyjson import ExternalCatalogClient
from src.catalog.runtime.context import get_config

# Initialize logging
configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


_is_production = get_config().app.environment == "production"

app = FastAPI(
    title="Product Catalog API",
    version=__version__,
    description="Product listings, discounts and external catalog synchronisation.",
    lifespan=lifespan,
    docs_url=None if _is_production else "/api-docs",
    redoc_url=None,
    openapi_url=None if _is_production else "/api-docs/openapi.json",
    servers=[{"url": get_config().app.base_url}],
)

app.add_middleware(SecurityHeadersMiddleware)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)

app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)


# --- Request logging and metrics middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    app_deps: ApplicationDependencies | None = getattr(
        request.app.state, "app_dependencies", None
    )
    metrics = app_deps.metrics if app_deps is not None else NullMetricsSink()

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)
            status_code = response.status_code
            response.headers.setdefault("X-Request-ID", request_id)
        except Exception as exc:
            status_code = 500
            logger.bind(
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            response = error_response(
                status_code, "Internal Server Error", [str(exc)], request_id
            )
        else:
            logger.bind(
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            ).info("request.end")

        # Templated path keeps label cardinality bounded
        route = getattr(request.scope.get("route"), "path", "unmatched")
        labels = {"method": request.method, "route": route, "status": status_code}
        metrics.increment("http_requests_total", labels)
        metrics.observe("http_duration_seconds", time.perf_counter() - start, labels)
        return response


# --- Router registration ---
app.include_router(health_router)
app.include_router(healthcheck_router)
app.include_router(metrics_router)
app.include_router(product_router)


# --- Lifecycle hooks ---
def build_dependencies() -> ApplicationDependencies:
    config = get_config()
    return ApplicationDependencies(
        database_service=DbSessionService(),
        metrics=build_metrics_sink(config.metrics.enabled, config.metrics.prefix),
        catalog_client=ExternalCatalogClient(config.external_source),
    )


async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Tests install their own dependencies before the app starts
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = build_dependencies()

    deps: ApplicationDependencies = app.state.app_dependencies
    DbManageService(deps.database_service).create_all()
    logger.info(
        "Application ready",
        database=deps.database_service.backend,
        external_source=deps.catalog_client.base_url,
        metrics_enabled=config.metrics.enabled,
    )


async def shutdown() -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is not None:
        deps.database_service.dispose()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
