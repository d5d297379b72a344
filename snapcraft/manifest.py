"""Snapshot manifests and the remote directory layout."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .settings import Settings

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _format_time(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _parse_time(text: str) -> datetime:
    match = _TIME_RE.fullmatch(text)
    if not match:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    moment = datetime(int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz)
    if tz is timezone.utc:
        return moment
    return moment.astimezone(timezone.utc)


def _get(obj: dict, key: str, kind: type, default):
    value = obj.get(key)
    if value is None:
        return default
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"manifest field {key!r} has the wrong type")
    return value


@dataclass
class Manifest:
    """Describes a backup snapshot stored remotely."""

    id: str = ""
    server_name: str = ""
    world_path: str = ""
    mode: str = ""
    compression: str = ""
    remote: str = ""
    remote_path: str = ""
    archive_path: str = ""
    directory_path: str = ""
    history_path: str = ""
    file_count: int = 0
    total_bytes: int = 0
    started_at: datetime = ZERO_TIME
    completed_at: datetime | None = None
    status: str = ""
    control_type: str = ""
    rclone_summary: str = ""
    error: str = ""
    restorable: bool = False

    def mark_completed(self) -> None:
        self.status = STATUS_COMPLETED
        self.completed_at = datetime.now(timezone.utc)
        self.restorable = True

    def mark_failed(self, error) -> None:
        self.status = STATUS_FAILED
        self.completed_at = datetime.now(timezone.utc)
        if error is not None:
            self.error = str(error)

    def to_json(self) -> bytes:
        """Serialise as indented JSON; empty optional fields are left out."""
        doc: dict = {
            "id": self.id,
            "server_name": self.server_name,
            "world_path": self.world_path,
            "mode": self.mode,
            "compression": self.compression,
            "remote": self.remote,
            "remote_path": self.remote_path,
        }
        for key in ("archive_path", "directory_path", "history_path"):
            if getattr(self, key):
                doc[key] = getattr(self, key)
        doc["file_count"] = self.file_count
        doc["total_bytes"] = self.total_bytes
        doc["started_at"] = _format_time(self.started_at)
        doc["completed_at"] = _format_time(self.completed_at or ZERO_TIME)
        doc["status"] = self.status
        doc["control_type"] = self.control_type
        if self.rclone_summary:
            doc["rclone_summary"] = self.rclone_summary
        if self.error:
            doc["error"] = self.error
        doc["restorable"] = self.restorable
        return json.dumps(doc, indent=2, ensure_ascii=False).encode("utf-8")


def new_manifest(settings: Settings, snapshot_id: str) -> Manifest:
    """A running manifest for a snapshot that starts now."""
    return Manifest(
        id=snapshot_id,
        server_name=settings.server.name,
        world_path=settings.server.world_path,
        mode=settings.backup.mode,
        compression=settings.backup.compression,
        remote=settings.rclone.remote,
        remote_path=settings.rclone.remote_path,
        started_at=datetime.now(timezone.utc),
        status=STATUS_RUNNING,
        control_type=settings.server.control_type,
        restorable=False,
    )


def parse_manifest(data) -> Manifest:
    """Parse JSON produced by Manifest.to_json; raises ValueError when malformed."""
    doc = json.loads(data)
    if not isinstance(doc, dict):
        raise ValueError("manifest must be a JSON object")
    started = _get(doc, "started_at", str, "")
    completed = _get(doc, "completed_at", str, "")
    completed_at = _parse_time(completed) if completed else None
    if completed_at == ZERO_TIME:
        completed_at = None
    return Manifest(
        id=_get(doc, "id", str, ""),
        server_name=_get(doc, "server_name", str, ""),
        world_path=_get(doc, "world_path", str, ""),
        mode=_get(doc, "mode", str, ""),
        compression=_get(doc, "compression", str, ""),
        remote=_get(doc, "remote", str, ""),
        remote_path=_get(doc, "remote_path", str, ""),
        archive_path=_get(doc, "archive_path", str, ""),
        directory_path=_get(doc, "directory_path", str, ""),
        history_path=_get(doc, "history_path", str, ""),
        file_count=_get(doc, "file_count", int, 0),
        total_bytes=_get(doc, "total_bytes", int, 0),
        started_at=_parse_time(started) if started else ZERO_TIME,
        completed_at=completed_at,
        status=_get(doc, "status", str, ""),
        control_type=_get(doc, "control_type", str, ""),
        rclone_summary=_get(doc, "rclone_summary", str, ""),
        error=_get(doc, "error", str, ""),
        restorable=_get(doc, "restorable", bool, False),
    )


@dataclass(frozen=True)
class RemoteLayout:
    """Standard remote paths below the configured remote path."""

    base: str
    manifests: str
    archives: str
    dir_current: str
    dir_history: str
    logs: str

    @classmethod
    def for_settings(cls, settings: Settings) -> RemoteLayout:
        base = settings.rclone.remote_path
        return cls(
            base=base,
            manifests=base + "/manifests",
            archives=base + "/archives",
            dir_current=base + "/directories/current",
            dir_history=base + "/directories/history",
            logs=base + "/logs",
        )

    def manifest_path(self, snapshot_id: str) -> str:
        return f"{self.manifests}/{snapshot_id}.json"

    def archive_path(self, snapshot_id: str, ext: str) -> str:
        return f"{self.archives}/{snapshot_id}{ext}"

    def history_path(self, snapshot_id: str) -> str:
        return f"{self.dir_history}/{snapshot_id}"

    def log_path(self, snapshot_id: str) -> str:
        return f"{self.logs}/{snapshot_id}.log"