"""Upload local repository payloads to remote storage and fetch them back."""

from __future__ import annotations

import contextlib
import json
import os
import sqlite3
from typing import Protocol

from .codec import archive_ext, object_ext
from .hashing import object_path
from .repository import Repository, SnapshotRecord
from .settings import BACKUP_MODE_ARCHIVE, BACKUP_MODE_INCREMENTAL


class SyncError(Exception):
    """A transfer to or from remote storage could not be completed."""


class RemoteRunner(Protocol):
    """Transfers files between the local disk and remote storage."""

    def copy(self, local_path: str, remote: str) -> None:
        """Upload a local file to a remote path; raise on failure."""

    def check(self, local_path: str, remote: str) -> None:
        """Raise if the remote copy differs from the local file."""

    def copy_to_local(self, remote: str, local_path: str) -> None:
        """Download a remote file to a local path; raise on failure."""


def _slash(path: str) -> str:
    return path.replace(os.sep, "/")


class Syncer:
    """Uploads snapshots of a repository and fetches them for restore."""

    def __init__(self, repo: Repository, runner: RemoteRunner):
        self.repo = repo
        self.runner = runner
        self.settings = repo.settings

    def _remote_base(self) -> str:
        return f"{self.settings.rclone.remote}:{_slash(self.settings.rclone.remote_path)}"

    def _record_failure(self, snapshot_id: str, exc: BaseException) -> None:
        with contextlib.suppress(sqlite3.Error):
            self.repo.mark_snapshot_remote_failed(snapshot_id, str(exc))

    # Upload

    def sync_snapshot(self, snapshot_id: str) -> None:
        """Upload a snapshot's payload and manifest when uploads are enabled."""
        if not self.settings.upload.enabled:
            return
        record = self.repo.get_snapshot(snapshot_id)
        base = self._remote_base()

        if record.mode == BACKUP_MODE_ARCHIVE:
            self._upload_archive(record, base)
        elif record.mode == BACKUP_MODE_INCREMENTAL:
            try:
                self._upload_incremental_objects(snapshot_id, base)
            except Exception as exc:
                self._record_failure(snapshot_id, exc)
                raise
        else:
            raise SyncError(f"unsupported mode for sync: {record.mode}")

        try:
            self._upload_manifest(snapshot_id, base)
        except Exception as exc:
            self._record_failure(snapshot_id, exc)
            raise

        self.repo.mark_snapshot_remote_complete(snapshot_id)
        if self.settings.repository.cleanup_after_verified_upload:
            self.repo.cleanup_local_payload(snapshot_id)

    def _upload_archive(self, record: SnapshotRecord, base: str) -> None:
        if not record.archive_path:
            raise SyncError("no archive to upload")
        remote = f"{base}/archives/{os.path.basename(record.archive_path)}"
        try:
            self.runner.copy(record.archive_path, remote)
        except Exception as exc:
            self._record_failure(record.id, exc)
            raise
        if self.settings.repository.verify_after_upload:
            try:
                self.runner.check(record.archive_path, remote)
            except Exception as exc:
                self._record_failure(record.id, exc)
                raise SyncError(f"remote verify: {exc}") from exc

    def _upload_incremental_objects(self, snapshot_id: str, base: str) -> None:
        uploaded: set[str] = set()
        for entry in self.repo.load_entries(snapshot_id):
            if entry.is_chunked:
                for chunk in entry.chunk_hashes:
                    if chunk not in uploaded:
                        self._upload_blob("chunks", chunk, base)
                        uploaded.add(chunk)
            elif entry.object_hash and entry.object_hash not in uploaded:
                self._upload_blob("objects", entry.object_hash, base)
                uploaded.add(entry.object_hash)

    def _upload_blob(self, table: str, digest: str, base: str) -> None:
        row = self.repo.db.execute(f"SELECT local_path FROM {table} WHERE hash=?", (digest,)).fetchone()
        if row is None or row[0] is None:
            raise SyncError(f"{table[:-1]} {digest}: no local copy in repository")
        (local_path,) = row
        rel = f"repo/{table}/{digest[0:2]}/{digest[2:4]}/{os.path.basename(local_path)}"
        remote = f"{base}/{rel}"
        self.runner.copy(local_path, remote)
        if self.settings.repository.verify_after_upload:
            self.runner.check(local_path, remote)
        self.repo.db.execute(
            f"UPDATE {table} SET uploaded=1, verified=1, remote_path=? WHERE hash=?", (rel, digest)
        )

    def _upload_manifest(self, snapshot_id: str, base: str) -> None:
        record = self.repo.get_snapshot(snapshot_id)
        path = os.path.join(self.repo.layout.manifests, snapshot_id + ".json")
        doc = {
            "id": record.id,
            "mode": record.mode,
            "archive_path": record.archive_path,
            "archive_hash": record.archive_hash,
            "archive_size": record.archive_size,
            "status": record.status,
        }
        with open(path, "w", encoding="utf-8") as out:
            out.write(json.dumps(doc, separators=(",", ":")))
        self.runner.copy(path, f"{base}/manifests/{snapshot_id}.json")

    # Download

    def fetch_snapshot(self, snapshot_id: str) -> None:
        """Download whatever part of a snapshot is missing locally."""
        record = self.repo.get_snapshot(snapshot_id)
        base = self._remote_base()

        if record.mode == BACKUP_MODE_ARCHIVE:
            if record.archive_path and os.path.exists(record.archive_path):
                return
            if record.archive_path:
                rel = "archives/" + os.path.basename(record.archive_path)
            else:
                rel = "archives/" + snapshot_id + archive_ext(self.settings.backup.compression)
            local = os.path.join(self.repo.layout.archives, os.path.basename(rel))
            self.runner.copy_to_local(f"{base}/{rel}", local)
            self.repo.db.execute("UPDATE snapshots SET archive_path=? WHERE id=?", (local, snapshot_id))
        elif record.mode == BACKUP_MODE_INCREMENTAL:
            for entry in self.repo.load_entries(snapshot_id):
                if entry.is_chunked:
                    for chunk in entry.chunk_hashes:
                        self._fetch_blob("chunks", self.repo.layout.chunks, chunk, base, strip_slash=True)
                elif entry.object_hash:
                    self._fetch_blob("objects", self.repo.layout.objects, entry.object_hash, base, strip_slash=False)
        else:
            raise SyncError(f"unsupported mode: {record.mode}")

    def _fetch_blob(self, table: str, base_dir: str, digest: str, base: str, *, strip_slash: bool) -> None:
        row = self.repo.db.execute(
            f"SELECT local_path, local_present FROM {table} WHERE hash=?", (digest,)
        ).fetchone()
        if row is not None and row[1] == 1 and row[0] and os.path.exists(row[0]):
            return

        ext = object_ext(self.settings.backup.compression)
        rel = f"repo/{table}/{digest[0:2]}/{digest[2:4]}/{digest}{ext}"
        local_path = object_path(base_dir, digest) + ext
        os.makedirs(os.path.dirname(local_path), mode=0o755, exist_ok=True)
        try:
            self.runner.copy_to_local(f"{base}/{rel}", local_path)
        except Exception as exc:
            found = self.repo.db.execute(f"SELECT remote_path FROM {table} WHERE hash=?", (digest,)).fetchone()
            remote_path = found[0] if found and found[0] else ""
            if not remote_path:
                raise
            if strip_slash:
                remote_path = remote_path.removeprefix("/")
            try:
                self.runner.copy_to_local(f"{self.settings.rclone.remote}:{_slash(remote_path)}", local_path)
            except Exception:
                raise exc
        self.repo.db.execute(
            f"UPDATE {table} SET local_path=?, local_present=1 WHERE hash=?", (local_path, digest)
        )