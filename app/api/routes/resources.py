"""Asset download endpoint."""

from collections.abc import AsyncIterator
from email.utils import format_datetime
from typing import Any, BinaryIO

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response, StreamingResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from app.api.errors import invalid_file_name, not_found
from app.api.middleware import get_current_principal
from app.core.config import get_settings
from app.core.filenames import InvalidFileNameError, sanitize_file_name
from app.core.logging import get_logger
from app.models.assets import AssetMetadata, ErrorResponse
from app.models.auth import Principal
from app.services.assets import AssetStore
from app.services.audit import AuditService
from app.services.ranges import ByteRange, RangeNotSatisfiableError, parse_range_header

logger = get_logger(__name__)
router = APIRouter(tags=["Resources"])

CHUNK_SIZE = 64 * 1024


class AssetStreamResponse(StreamingResponse):
    """Streaming response that owns an open file handle until it finishes or is cancelled."""

    def __init__(self, handle: BinaryIO, byte_range: ByteRange, **kwargs: Any) -> None:
        self._handle = handle
        super().__init__(
            content=_read_chunks(handle, byte_range.start, byte_range.length), **kwargs
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self._handle.close()


async def _read_chunks(handle: BinaryIO, start: int, length: int) -> AsyncIterator[bytes]:
    try:
        if start:
            await run_in_threadpool(handle.seek, start)
        remaining = length
        while remaining > 0:
            chunk = await run_in_threadpool(handle.read, min(CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
    finally:
        handle.close()


def get_asset_store() -> AssetStore:
    """Build an asset store for the current settings snapshot."""
    return AssetStore(get_settings().assets.root_path)


def get_audit_service(request: Request) -> AuditService:
    """Fetch initialized audit service from app state."""
    service = getattr(request.app.state, "audit_service", None)
    if not isinstance(service, AuditService):
        raise HTTPException(status_code=500, detail="Audit service is not initialized")
    return service


async def record_download_safely(
    audit_service: AuditService,
    *,
    principal: Principal,
    client_ip: str | None,
    file_name: str,
    size_bytes: int,
    correlation_id: str | None,
) -> None:
    """Write an audit record. Sink failures are logged and never reach the client."""
    try:
        await audit_service.record_download(
            subject=principal.subject_id,
            auth_method=str(principal.auth_method),
            client_ip=client_ip,
            file_name=file_name,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Audit sink failed", extra={"error": str(exc)}, exc_info=True)


def _range_applies(request: Request, last_modified: str) -> bool:
    # Weak ETags never match If-Range, so only the date form is honored.
    if_range = request.headers.get("If-Range")
    return if_range is None or if_range.strip() == last_modified


def _response_headers(
    metadata: AssetMetadata, last_modified: str, download: bool
) -> dict[str, str]:
    cache_seconds = max(0, get_settings().assets.default_cache_seconds)
    disposition = "attachment" if download else "inline"
    return {
        "Cache-Control": f"private, max-age={cache_seconds}",
        "ETag": metadata.validation_token,
        "Last-Modified": last_modified,
        "X-Content-Type-Options": "nosniff",
        "Content-Disposition": f'{disposition}; filename="{metadata.file_name}"',
        "Accept-Ranges": "bytes",
    }


@router.get(
    "/resources/{filename:path}",
    response_class=StreamingResponse,
    responses={
        206: {"description": "Partial content"},
        304: {"description": "Not modified"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        416: {"description": "Range not satisfiable"},
    },
)
async def get_resource(
    filename: str,
    request: Request,
    download: bool = Query(default=False),
    principal: Principal = Depends(get_current_principal),
    store: AssetStore = Depends(get_asset_store),
    audit_service: AuditService = Depends(get_audit_service),
) -> Response:
    """
    Download a single asset.

    Supports conditional GET via If-None-Match and single byte ranges.
    """
    try:
        safe_name = sanitize_file_name(filename)
    except InvalidFileNameError as exc:
        raise invalid_file_name(exc.reason) from exc

    metadata = store.get_metadata(safe_name)
    if metadata is None:
        raise not_found()

    if request.headers.get("If-None-Match") == metadata.validation_token:
        return Response(
            status_code=status.HTTP_304_NOT_MODIFIED,
            headers={"ETag": metadata.validation_token},
        )

    handle = store.open_read(safe_name)
    if handle is None:
        raise not_found()

    last_modified = format_datetime(metadata.last_modified_utc, usegmt=True)
    headers = _response_headers(metadata, last_modified, download)
    size_bytes = metadata.size_bytes

    try:
        byte_range = None
        if _range_applies(request, last_modified):
            byte_range = parse_range_header(request.headers.get("Range"), size_bytes)
    except RangeNotSatisfiableError:
        handle.close()
        headers["Content-Range"] = f"bytes */{size_bytes}"
        return Response(status_code=416, headers=headers)

    status_code = status.HTTP_200_OK
    if byte_range is None:
        byte_range = ByteRange(start=0, end=size_bytes - 1)
    else:
        status_code = status.HTTP_206_PARTIAL_CONTENT
        headers["Content-Range"] = byte_range.content_range(size_bytes)
    headers["Content-Length"] = str(byte_range.length)

    # Recorded before streaming starts, so abandoned downloads are audited too.
    try:
        await record_download_safely(
            audit_service,
            principal=principal,
            client_ip=request.client.host if request.client else None,
            file_name=safe_name,
            size_bytes=size_bytes,
            correlation_id=getattr(request.state, "correlation_id", None),
        )
    except BaseException:
        handle.close()
        raise

    logger.debug(
        "Serving asset",
        extra={"file_name": safe_name, "status_code": status_code, "bytes": byte_range.length},
    )
    return AssetStreamResponse(
        handle,
        byte_range,
        status_code=status_code,
        headers=headers,
        media_type=metadata.content_type,
    )
