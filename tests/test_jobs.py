import threading

import pytest

from snapcraft.webui.jobs import JobConflictError, JobManager, JobStatus


def test_new_manager_is_idle():
    assert JobManager().current().status is JobStatus.IDLE


def test_single_flight():
    manager = JobManager()
    release = threading.Event()

    def slow():
        release.wait(5)
        return "ok"

    thread = manager.run_async("backup", slow)
    assert manager.current().status is JobStatus.RUNNING
    with pytest.raises(JobConflictError, match="backup"):
        manager.run_async("restore", lambda: "")
    release.set()
    thread.join(5)
    job = manager.current()
    assert job.status is JobStatus.SUCCEEDED
    assert job.message == "ok"
    assert job.operation == "backup"
    assert job.completed_at is not None and job.completed_at >= job.started_at


def test_async_failure_records_message():
    manager = JobManager()

    def boom():
        raise RuntimeError("disk full")

    manager.run_async("backup", boom).join(5)
    job = manager.current()
    assert job.status is JobStatus.FAILED
    assert job.message == "disk full"


def test_callbacks_are_invoked():
    manager = JobManager()
    started, finished = [], []
    manager.set_callbacks(started.append, lambda op, status, msg: finished.append((op, status, msg)))
    manager.run_async("prune", lambda: "pruned 2 snapshot(s)").join(5)
    assert started == ["prune"]
    assert finished == [("prune", JobStatus.SUCCEEDED, "pruned 2 snapshot(s)")]


def test_sync_run_success_and_failure():
    manager = JobManager()
    manager.run("repo_verify", lambda: "verified 0 snapshot(s)")
    assert manager.current().message == "verified 0 snapshot(s)"

    def boom():
        raise ValueError("bad")

    with pytest.raises(ValueError, match="bad"):
        manager.run("repo_verify", boom)
    assert manager.current().status is JobStatus.FAILED
    assert manager.current().message == "bad"


def test_set_snapshot_id_and_copy():
    manager = JobManager()
    manager.run("backup", lambda: "done")
    manager.set_snapshot_id("snap-1")
    job = manager.current()
    job.snapshot_id = "changed"
    assert manager.current().snapshot_id == "snap-1"