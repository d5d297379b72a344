"""A single long-running operation at a time, with its status."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional


class JobStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class Job:
    """State of the current or last operation."""

    status: JobStatus = JobStatus.IDLE
    operation: str = ""
    message: str = ""
    snapshot_id: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class JobConflictError(RuntimeError):
    """Another operation is already running."""


StartCallback = Callable[[str], None]
FinishCallback = Callable[[str, JobStatus, str], None]


class JobManager:
    """Runs at most one operation at a time and records its outcome."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._job = Job()
        self._on_start: Optional[StartCallback] = None
        self._on_finish: Optional[FinishCallback] = None

    def set_callbacks(self, on_start: Optional[StartCallback], on_finish: Optional[FinishCallback]) -> None:
        with self._lock:
            self._on_start = on_start
            self._on_finish = on_finish

    def current(self) -> Job:
        """A copy of the current job state."""
        with self._lock:
            return dataclasses.replace(self._job)

    def _begin(self, operation: str) -> None:
        if self._job.status is JobStatus.RUNNING:
            raise JobConflictError(f"operation {self._job.operation!r} already running")
        self._job = Job(status=JobStatus.RUNNING, operation=operation, started_at=datetime.now(timezone.utc))

    def _finish(self, message: str, error: Optional[BaseException]) -> tuple[JobStatus, str]:
        with self._lock:
            self._job.completed_at = datetime.now(timezone.utc)
            if error is not None:
                self._job.status = JobStatus.FAILED
                self._job.message = str(error)
            else:
                self._job.status = JobStatus.SUCCEEDED
                self._job.message = message
            return self._job.status, self._job.message

    def run(self, operation: str, fn: Callable[[], str]) -> None:
        """Run fn now; its exception, if any, is recorded and raised again."""
        with self._lock:
            self._begin(operation)
        try:
            message = fn()
        except Exception as exc:
            self._finish("", exc)
            raise
        self._finish(message or "", None)

    def run_async(self, operation: str, fn: Callable[[], str]) -> threading.Thread:
        """Start fn in a background thread and return that thread."""
        with self._lock:
            self._begin(operation)
            on_start = self._on_start
        if on_start is not None:
            on_start(operation)

        def work() -> None:
            try:
                result = self._finish(fn() or "", None)
            except Exception as exc:
                result = self._finish("", exc)
            with self._lock:
                on_finish = self._on_finish
            if on_finish is not None:
                on_finish(operation, *result)

        thread = threading.Thread(target=work, name=f"job-{operation}", daemon=True)
        thread.start()
        return thread

    def set_snapshot_id(self, snapshot_id: str) -> None:
        with self._lock:
            self._job.snapshot_id = snapshot_id