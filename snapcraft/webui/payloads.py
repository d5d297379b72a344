"""JSON-ready views of snapshots and remote parameter merging."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from ..manifest import Manifest
from ..repository import SnapshotRecord
from .redact import REDACTED

_ZERO = datetime(1, 1, 1, tzinfo=timezone.utc)


def _json_time(moment: Optional[datetime]) -> str:
    if moment is None:
        moment = _ZERO
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def snapshot_from_record(record: Optional[SnapshotRecord]) -> Optional[dict[str, Any]]:
    """Public fields of a snapshot record, or None for no record."""
    if record is None:
        return None
    return {
        "id": record.id,
        "server_name": record.server_name,
        "world_path": record.world_path,
        "mode": record.mode,
        "compression": record.compression,
        "status": record.status,
        "local_status": record.local_status,
        "remote_status": record.remote_status,
        "archive_path": record.archive_path,
        "file_count": record.file_count,
        "total_bytes": record.total_bytes,
        "started_at": _json_time(record.started_at),
        "completed_at": _json_time(record.completed_at),
        "error": record.error,
        "restorable": record.restorable,
    }


def manifest_list(manifests: Iterable[Manifest]) -> list[dict[str, Any]]:
    """Short summaries of manifests, in the given order."""
    return [
        {
            "id": m.id,
            "started_at": _json_time(m.started_at),
            "total_bytes": m.total_bytes,
            "status": m.status,
        }
        for m in manifests
    ]


def merge_remote_parameters(incoming: Mapping[str, str], existing: Mapping[str, str]) -> dict[str, str]:
    """Incoming parameters, keeping existing values where incoming ones are blank or masked."""
    out: dict[str, str] = {}
    for key, value in incoming.items():
        if value in ("", REDACTED) and existing.get(key):
            out[key] = existing[key]
        else:
            out[key] = value
    return out