"""Structured API errors."""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.models.assets import ErrorResponse


class APIError(Exception):
    """Error rendered as an :class:`ErrorResponse` body."""

    def __init__(
        self,
        status_code: int,
        error: str,
        detail: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(detail or error)
        self.status_code = status_code
        self.error = error
        self.detail = detail
        self.headers = headers


def invalid_file_name(reason: str) -> APIError:
    """400 for a rejected file name."""
    return APIError(status.HTTP_400_BAD_REQUEST, "invalid_filename", detail=reason)


def not_found() -> APIError:
    """404 for an absent asset."""
    return APIError(status.HTTP_404_NOT_FOUND, "not_found")


def unauthorized() -> APIError:
    """401 with a generic challenge and no detail."""
    return APIError(
        status.HTTP_401_UNAUTHORIZED,
        "unauthorized",
        headers={"WWW-Authenticate": "Bearer, ApiKey"},
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render an :class:`APIError` as JSON."""
    body = ErrorResponse(error=exc.error, detail=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query or path parameters as a 400 ``invalid_request``."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    body = ErrorResponse(error="invalid_request", detail="; ".join(problems) or None)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(exclude_none=True),
    )
