"""Snapshot manifests kept on remote storage."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from typing import Protocol

from .manifest import Manifest, RemoteLayout, parse_manifest
from .settings import Settings
from .sync import SyncError


@dataclass
class RemoteEntry:
    """One item of a remote directory listing."""

    name: str
    is_dir: bool = False
    path: str = ""
    size: int = 0


class ManifestRunner(Protocol):
    """Remote operations needed to manage manifests."""

    def copy(self, local_path: str, remote: str) -> None:
        """Upload a local file to a remote path."""

    def copy_to_local(self, remote: str, local_path: str) -> None:
        """Download a remote file to a local path."""

    def list_json(self, remote: str) -> list[RemoteEntry]:
        """List the items of a remote directory."""

    def delete_file(self, remote: str) -> None:
        """Delete a single remote file."""

    def purge(self, remote: str) -> None:
        """Delete a remote directory and everything below it."""


class ManifestStore:
    """Manages snapshot manifests on remote storage."""

    def __init__(self, settings: Settings, runner: ManifestRunner):
        self.settings = settings
        self.runner = runner
        self.layout = RemoteLayout.for_settings(settings)

    def _remote(self, rel: str) -> str:
        return f"{self.settings.rclone.remote}:{rel.replace(os.sep, '/')}"

    def _temp_file(self, prefix: str) -> str:
        fd, path = tempfile.mkstemp(prefix=prefix, suffix=".json", dir=self.settings.backup.staging_dir or None)
        os.close(fd)
        return path

    def upload_manifest(self, manifest: Manifest) -> None:
        path = self._temp_file("manifest-")
        try:
            with open(path, "wb") as out:
                out.write(manifest.to_json())
            self.runner.copy(path, self._remote(self.layout.manifest_path(manifest.id)))
        finally:
            os.remove(path)

    def list(self) -> list[Manifest]:
        """All readable manifests, newest first; unreadable ones are skipped."""
        manifests = []
        for entry in self.runner.list_json(self._remote(self.layout.manifests)):
            if entry.is_dir or not entry.name.endswith(".json"):
                continue
            try:
                manifests.append(self.get(entry.name.removesuffix(".json")))
            except Exception:
                continue
        manifests.sort(key=lambda m: m.started_at, reverse=True)
        return manifests

    def get(self, snapshot_id: str) -> Manifest:
        path = self._temp_file("manifest-dl-")
        try:
            try:
                self.runner.copy_to_local(self._remote(self.layout.manifest_path(snapshot_id)), path)
            except Exception as exc:
                raise SyncError(f"download manifest {snapshot_id}: {exc}") from exc
            with open(path, "rb") as stream:
                data = stream.read()
        finally:
            os.remove(path)
        return parse_manifest(data)

    def delete(self, manifest: Manifest) -> None:
        """Delete a manifest together with its archive and history directory."""
        self.runner.delete_file(self._remote(self.layout.manifest_path(manifest.id)))
        if manifest.archive_path:
            self.runner.delete_file(self._remote(manifest.archive_path))
        if manifest.history_path:
            self.runner.purge(self._remote(manifest.history_path))