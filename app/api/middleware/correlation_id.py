"""Correlation ID middleware."""

import time
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from app.core.logging import get_logger
from app.core.security import generate_correlation_id

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-Id"

correlation_id_context: ContextVar[str] = ContextVar("correlation_id", default="")


def resolve_correlation_id(provided: str | None) -> str:
    """Keep a non-blank client-supplied ID, otherwise mint a new one."""
    if provided is not None and provided.strip():
        return provided
    return generate_correlation_id()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with a correlation ID.

    The ID is stored on ``request.state.correlation_id``, exposed to log
    records through :data:`correlation_id_context`, and echoed back in the
    ``X-Correlation-Id`` response header, including on error responses.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        cid = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.correlation_id = cid
        token = correlation_id_context.set(cid)

        fields = {"method": request.method, "path": request.url.path}
        started = time.perf_counter()
        try:
            logger.debug(
                "Request received",
                extra={**fields, "client": request.client.host if request.client else None},
            )
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Request failed with exception",
                    extra={**fields, "error": str(exc)},
                    exc_info=True,
                )
                raise

            response.headers[CORRELATION_ID_HEADER] = cid
            logger.info(
                "Request completed",
                extra={
                    **fields,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return response
        finally:
            correlation_id_context.reset(token)


def get_correlation_id() -> str:
    """
    Get the current correlation ID from context.

    Returns:
        Current correlation ID or empty string outside a request
    """
    return correlation_id_context.get()
