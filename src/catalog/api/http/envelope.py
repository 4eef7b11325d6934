"""Uniform success and error response bodies."""

from typing import Any, Generic, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from pydantic import BaseModel, Field, computed_field
from starlette.responses import JSONResponse

from src.catalog.core.errors import ApiError
from src.catalog.runtime.context import get_config

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every product endpoint."""

    status_code: int = Field(default=200, description="HTTP status code")
    data: T | None = Field(default=None, description="Response payload")
    message: str = Field(default="Success", description="Human-readable summary")

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


class ErrorResponse(BaseModel):
    success: bool = False
    status_code: int
    message: str
    errors: list[str] = Field(default_factory=list)
    request_id: str | None = None


def error_response(
    status_code: int,
    message: str,
    errors: list[str] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Build the error envelope; details are withheld in production."""
    if get_config().app.environment == "production":
        errors = []
    body = ErrorResponse(
        status_code=status_code,
        message=message,
        errors=errors or [],
        request_id=request_id,
    )
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    log = logger.bind(status_code=exc.status_code, error_type=type(exc).__name__)
    if exc.status_code >= 500:
        log.error("request.api_error: {}", exc.message)
    else:
        log.info("request.api_error: {}", exc.message)
    return error_response(exc.status_code, exc.message, exc.errors, _request_id(request))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    logger.bind(status_code=400, error_type=type(exc).__name__).info(
        "request.validation_error"
    )
    return error_response(400, "Invalid input data", errors, _request_id(request))


def success(data: Any, message: str = "Success", status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, data=data, message=message)
