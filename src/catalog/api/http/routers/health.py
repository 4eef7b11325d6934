"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from loguru import logger
from starlette.responses import JSONResponse, PlainTextResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])

# Combined check kept at its historical path for existing probes
legacy_router = APIRouter(tags=["health"])


def _database_check(app_deps: ApplicationDependencies) -> dict[str, Any]:
    try:
        healthy = app_deps.database_service.health_check()
    except Exception as e:
        logger.error("Database health check raised", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    return {
        "status": "healthy" if healthy else "unhealthy",
        "type": app_deps.database_service.backend,
    }


@router.get("")
async def health() -> dict[str, str]:
    """Basic health check endpoint - checks if app is running.

    This is a liveness probe that returns 200 OK as long as the application
    process is running. It does not check dependencies.
    """
    return {"status": "healthy", "service": "product-catalog"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness check - validates service dependencies.

    Returns 200 if the database is reachable, 503 otherwise. The external
    catalog is reported but does not affect readiness.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    checks: dict[str, Any] = {"database": _database_check(app_deps)}
    all_healthy = checks["database"]["status"] == "healthy"

    external_healthy = await app_deps.catalog_client.health_check()
    checks["external_source"] = {
        "status": "healthy" if external_healthy else "degraded",
        "name": app_deps.catalog_client.source,
        "url": app_deps.catalog_client.base_url,
    }

    response = {
        "status": "ready" if all_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": checks,
    }
    if not all_healthy:
        return JSONResponse(status_code=503, content=response)
    return response


@router.get("/database", response_model=None)
async def health_database(request: Request) -> dict[str, Any] | JSONResponse:
    """Database-specific health check with connection pool status."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    check = _database_check(app_deps)
    if check["status"] != "healthy":
        return JSONResponse(status_code=503, content=check)
    return {**check, "pool": app_deps.database_service.get_pool_status()}


@legacy_router.get("/api/healthcheck", response_class=PlainTextResponse)
async def healthcheck(request: Request) -> PlainTextResponse:
    """Plain-text probe: "OK" when the database answers, 503 otherwise."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    if _database_check(app_deps)["status"] == "healthy":
        return PlainTextResponse("OK")
    return PlainTextResponse("Service Unavailable", status_code=503)
