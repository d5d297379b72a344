"""Recent runtime log lines kept in memory for the web interface."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

DEFAULT_LOG_CAPACITY = 1000


@dataclass
class LogEntry:
    """A single log line."""

    level: str
    source: str
    message: str
    fields: Optional[dict[str, Any]] = None
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LogStore:
    """A bounded, thread-safe buffer of log entries; oldest are dropped first."""

    def __init__(self, capacity: int = DEFAULT_LOG_CAPACITY):
        if capacity <= 0:
            capacity = DEFAULT_LOG_CAPACITY
        self._lock = threading.Lock()
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def append(self, level: str, source: str, message: str, fields: Optional[Mapping[str, Any]] = None) -> LogEntry:
        entry = LogEntry(level=level, source=source, message=message, fields=dict(fields) if fields else None)
        with self._lock:
            self._entries.append(entry)
        return entry

    def list(self, level: str = "", source: str = "", limit: int = 0) -> list[LogEntry]:
        """Matching entries, newest first; empty filters match all, limit 0 means no limit."""
        with self._lock:
            snapshot = list(self._entries)
        out: list[LogEntry] = []
        for entry in reversed(snapshot):
            if level and entry.level != level:
                continue
            if source and entry.source != source:
                continue
            out.append(entry)
            if limit > 0 and len(out) >= limit:
                break
        return out

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()