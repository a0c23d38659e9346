"""Download audit logging with an optional JSONL trail."""

import json
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

from app.core.logging import get_logger
from app.models.audit import DownloadAuditEntry

logger = get_logger(__name__)

AUDIT_FILE_PREFIX = "downloads"


class AuditService:
    """Records one entry per served download."""

    def __init__(self, *, enabled: bool, storage_dir: str, retention_days: int = 30) -> None:
        self.enabled = enabled
        self.storage_dir = Path(storage_dir)
        self.retention_days = retention_days

        if self.enabled:
            self.storage_dir.mkdir(parents=True, exist_ok=True)

    async def cleanup_old_files(self) -> None:
        """Delete audit files older than retention window."""
        if not self.enabled:
            return

        cutoff = datetime.now(UTC).date() - timedelta(days=self.retention_days)
        for audit_file in self.storage_dir.glob(f"{AUDIT_FILE_PREFIX}-*.jsonl"):
            file_date = self._extract_date_from_file_name(audit_file)
            if file_date is not None and file_date < cutoff:
                audit_file.unlink(missing_ok=True)

    async def record_download(
        self,
        *,
        subject: str,
        auth_method: str,
        client_ip: str | None,
        file_name: str,
        size_bytes: int,
        correlation_id: str | None = None,
    ) -> DownloadAuditEntry:
        """Log a download and append it to the audit trail when enabled."""
        entry = DownloadAuditEntry(
            timestamp=datetime.now(UTC),
            correlation_id=correlation_id,
            subject=subject,
            auth_method=auth_method,
            client_ip=client_ip,
            file_name=file_name,
            size_bytes=size_bytes,
        )
        logger.info(
            "asset_download",
            extra={
                "subject": subject,
                "auth_method": auth_method,
                "client_ip": client_ip,
                "file_name": file_name,
                "size_bytes": size_bytes,
            },
        )

        if self.enabled:
            self._append_jsonl(entry.model_dump(mode="json"))
        return entry

    def read_entries(self, day: date) -> list[DownloadAuditEntry]:
        """Read the audit entries written on one UTC day."""
        file_path = self._file_for(day)
        if not file_path.exists():
            return []

        entries = []
        with file_path.open(encoding="utf-8") as audit_file:
            for line in audit_file:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(DownloadAuditEntry.model_validate(json.loads(line)))
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "Skipping malformed audit record",
                        extra={"file": str(file_path), "error": str(exc)},
                    )
        return entries

    def _append_jsonl(self, payload: dict[str, object]) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        file_path = self._file_for(datetime.now(UTC).date())
        with file_path.open("a", encoding="utf-8") as audit_file:
            audit_file.write(json.dumps(payload, ensure_ascii=True))
            audit_file.write("\n")

    def _file_for(self, day: date) -> Path:
        return self.storage_dir / f"{AUDIT_FILE_PREFIX}-{day.isoformat()}.jsonl"

    @staticmethod
    def _extract_date_from_file_name(file_path: Path) -> date | None:
        try:
            suffix = file_path.stem.split("-", maxsplit=1)[1]
            return date.fromisoformat(suffix)
        except Exception:  # noqa: BLE001
            return None
