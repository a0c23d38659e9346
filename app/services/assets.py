"""Filesystem-backed asset store."""

import hashlib
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO, Final

from app.core.logging import get_logger
from app.models.assets import AssetMetadata

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE: Final = "application/octet-stream"

CONTENT_TYPES: Final[dict[str, str]] = {
    ".7z": "application/x-7z-compressed",
    ".avif": "image/avif",
    ".bmp": "image/bmp",
    ".csv": "text/csv",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".geojson": "application/geo+json",
    ".gif": "image/gif",
    ".gz": "application/gzip",
    ".htm": "text/html",
    ".html": "text/html",
    ".ico": "image/x-icon",
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".js": "text/javascript",
    ".json": "application/json",
    ".md": "text/markdown",
    ".mp3": "audio/mpeg",
    ".mp4": "video/mp4",
    ".parquet": "application/vnd.apache.parquet",
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".ppt": "application/vnd.ms-powerpoint",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".svg": "image/svg+xml",
    ".tar": "application/x-tar",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".tsv": "text/tab-separated-values",
    ".txt": "text/plain",
    ".webp": "image/webp",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xml": "application/xml",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".zip": "application/zip",
}


def content_type_for(file_name: str) -> str:
    """Map a file name to its MIME type by extension."""
    return CONTENT_TYPES.get(Path(file_name).suffix.lower(), DEFAULT_CONTENT_TYPE)


def compute_validation_token(size_bytes: int, last_modified_utc: datetime) -> str:
    """
    Compute the weak ETag for an asset.

    Depends only on size and whole-second modification time, so two files
    with equal size and mtime share a token.

    Args:
        size_bytes: File size
        last_modified_utc: Timezone-aware modification time

    Returns:
        Token of the form W/"<sha256 hex>"
    """
    token_input = f"{size_bytes}:{int(last_modified_utc.timestamp())}"
    digest = hashlib.sha256(token_input.encode("utf-8")).hexdigest()
    return f'W/"{digest}"'


class AssetStore:
    """Resolves sanitized file names to regular files under a root directory."""

    def __init__(self, root_path: str | Path) -> None:
        self.root_path = Path(root_path).resolve()

    def get_metadata(self, safe_name: str) -> AssetMetadata | None:
        """
        Describe an asset.

        Args:
            safe_name: File name that passed sanitization

        Returns:
            Metadata, or None if the asset is absent
        """
        path = self._resolve(safe_name)
        if path is None:
            return None

        try:
            stat_result = path.stat()
        except FileNotFoundError:
            return None

        last_modified = datetime.fromtimestamp(stat_result.st_mtime, tz=UTC)
        return AssetMetadata(
            file_name=safe_name,
            content_type=content_type_for(safe_name),
            size_bytes=stat_result.st_size,
            last_modified_utc=last_modified,
            validation_token=compute_validation_token(stat_result.st_size, last_modified),
        )

    def open_read(self, safe_name: str) -> BinaryIO | None:
        """
        Open an asset for reading.

        The caller owns the returned handle and must close it.

        Returns:
            Binary file object, or None if the asset is absent
        """
        path = self._resolve(safe_name)
        if path is None:
            return None

        try:
            return path.open("rb")
        except (FileNotFoundError, IsADirectoryError):
            return None

    def _resolve(self, safe_name: str) -> Path | None:
        candidate = (self.root_path / safe_name).resolve()
        if candidate.parent != self.root_path:
            logger.warning(
                "Asset path escapes root",
                extra={"file_name": safe_name, "root_path": str(self.root_path)},
            )
            return None
        if not candidate.is_file():
            return None
        return candidate
