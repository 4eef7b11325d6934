"""Domain errors and their HTTP status codes."""

from typing import ClassVar

from fastapi import HTTPException


class ApiError(HTTPException):
    """Base class for errors rendered through the error envelope.

    ``errors`` holds detail strings (usually the underlying cause) that are
    only exposed to clients outside production.
    """

    status_code_default: ClassVar[int] = 500
    default_message: ClassVar[str] = "Internal Server Error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[str] | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail=self.message,
        )


class InvalidInputError(ApiError):
    status_code_default = 400
    default_message = "Invalid input data"


class UnauthorizedError(ApiError):
    status_code_default = 401
    default_message = "Unauthorized"


class NotFoundError(ApiError):
    status_code_default = 404
    default_message = "Resource not found"


class UpstreamFailureError(ApiError):
    status_code_default = 502
    default_message = "Upstream service failure"


class InternalError(ApiError):
    status_code_default = 500
    default_message = "Internal Server Error"
