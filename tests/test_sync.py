import json
import shutil
from pathlib import Path

import pytest

from snapcraft.repository import Repository
from snapcraft.settings import (
    BACKUP_MODE_ARCHIVE,
    BACKUP_MODE_DIRECTORY,
    BACKUP_MODE_INCREMENTAL,
    COMPRESSION_NONE,
    HASH_SHA256,
    BackupSettings,
    RcloneSettings,
    RepositorySettings,
    ServerSettings,
    Settings,
    UploadSettings,
)
from snapcraft.sync import SyncError, Syncer


class FakeRunner:
    def __init__(self, root: Path):
        self.root = root
        self.copies = []
        self.fail_copy = False
        self.fail_check = False

    def _path(self, remote):
        name, _, rel = remote.partition(":")
        return self.root / name / rel

    def copy(self, local_path, remote):
        if self.fail_copy:
            raise OSError("upload refused")
        dest = self._path(remote)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(local_path, dest)
        self.copies.append(remote)

    def check(self, local_path, remote):
        if self.fail_check:
            raise OSError("check mismatch")
        if Path(local_path).read_bytes() != self._path(remote).read_bytes():
            raise OSError("differs")

    def copy_to_local(self, remote, local_path):
        src = self._path(remote)
        if not src.is_file():
            raise FileNotFoundError(str(src))
        shutil.copyfile(src, local_path)


def make_settings(tmp_path, mode=BACKUP_MODE_INCREMENTAL):
    return Settings(
        server=ServerSettings(name="test", world_path=str(tmp_path / "world")),
        backup=BackupSettings(
            mode=mode, compression=COMPRESSION_NONE, hash_method=HASH_SHA256, staging_dir=str(tmp_path)
        ),
        repository=RepositorySettings(local_path=str(tmp_path / "repo")),
        upload=UploadSettings(enabled=True),
        rclone=RcloneSettings(remote="remote", remote_path="backups"),
    )


@pytest.fixture
def runner(tmp_path):
    return FakeRunner(tmp_path / "remote-store")


@pytest.fixture
def incremental(tmp_path):
    settings = make_settings(tmp_path)
    world = tmp_path / "world"
    (world / "region").mkdir(parents=True)
    (world / "level.dat").write_bytes(b"hello world")
    (world / "region" / "r.0.0.mca").write_bytes(b"region data" * 10)
    repo = Repository.open(settings)
    repo.create_snapshot("snap-1", BACKUP_MODE_INCREMENTAL)
    count, total = repo.scan_and_store_incremental("snap-1", world)
    repo.mark_snapshot_local_complete("snap-1", count, total, "", "", 0)
    yield repo
    repo.close()


@pytest.fixture
def archived(tmp_path):
    settings = make_settings(tmp_path, BACKUP_MODE_ARCHIVE)
    src = tmp_path / "built.tar"
    src.write_bytes(b"archive payload")
    repo = Repository.open(settings)
    repo.create_snapshot("snap-a", BACKUP_MODE_ARCHIVE)
    dest, digest, size = repo.store_archive("snap-a", src)
    repo.mark_snapshot_local_complete("snap-a", 1, size, dest, digest, size)
    yield repo
    repo.close()


def test_sync_disabled_does_nothing(incremental, runner):
    incremental.settings.upload.enabled = False
    Syncer(incremental, runner).sync_snapshot("snap-1")
    assert runner.copies == []
    assert incremental.get_snapshot("snap-1").remote_status == "pending"


def test_incremental_sync_uploads_objects_and_manifest(incremental, runner):
    Syncer(incremental, runner).sync_snapshot("snap-1")
    assert "remote:backups/manifests/snap-1.json" in runner.copies
    object_copies = [c for c in runner.copies if c.startswith("remote:backups/repo/objects/")]
    assert len(object_copies) == 2
    record = incremental.get_snapshot("snap-1")
    assert record.status == "completed_remote"
    assert record.remote_status == "completed_remote"
    rows = incremental.db.execute("SELECT uploaded, verified, remote_path FROM objects").fetchall()
    assert all(uploaded == 1 and verified == 1 for uploaded, verified, _ in rows)
    assert all(path.startswith("repo/objects/") for _, _, path in rows)


def test_manifest_written_locally(incremental, runner):
    Syncer(incremental, runner).sync_snapshot("snap-1")
    path = Path(incremental.layout.manifests) / "snap-1.json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["id"] == "snap-1"
    assert doc["mode"] == BACKUP_MODE_INCREMENTAL
    assert doc["status"] == "completed_local"


def test_copy_failure_marks_remote_failed(incremental, runner):
    runner.fail_copy = True
    with pytest.raises(OSError, match="upload refused"):
        Syncer(incremental, runner).sync_snapshot("snap-1")
    status = incremental.get_snapshot("snap-1").remote_status
    assert status.startswith("failed: ")
    assert status.endswith("upload refused")


def test_archive_sync_copies_archive(archived, runner):
    Syncer(archived, runner).sync_snapshot("snap-a")
    record = archived.get_snapshot("snap-a")
    remote_file = runner.root / "remote" / "backups" / "archives" / Path(record.archive_path).name
    assert remote_file.read_bytes() == b"archive payload"
    assert record.status == "completed_remote"


def test_archive_verify_failure(archived, runner):
    runner.fail_check = True
    with pytest.raises(SyncError, match="remote verify"):
        Syncer(archived, runner).sync_snapshot("snap-a")
    assert archived.get_snapshot("snap-a").remote_status.startswith("failed: ")


def test_archive_without_path_is_rejected(tmp_path, runner):
    settings = make_settings(tmp_path, BACKUP_MODE_ARCHIVE)
    with Repository.open(settings) as repo:
        repo.create_snapshot("snap-empty", BACKUP_MODE_ARCHIVE)
        with pytest.raises(SyncError, match="no archive to upload"):
            Syncer(repo, runner).sync_snapshot("snap-empty")


def test_unsupported_mode(tmp_path, runner):
    with Repository.open(make_settings(tmp_path)) as repo:
        repo.create_snapshot("snap-d", BACKUP_MODE_DIRECTORY)
        with pytest.raises(SyncError, match="unsupported mode"):
            Syncer(repo, runner).sync_snapshot("snap-d")
        with pytest.raises(SyncError, match="unsupported mode"):
            Syncer(repo, runner).fetch_snapshot("snap-d")


def test_cleanup_after_upload_removes_archive(archived, runner):
    archived.settings.repository.cleanup_after_verified_upload = True
    archived.settings.repository.keep_local_manifests = False
    path = Path(archived.get_snapshot("snap-a").archive_path)
    Syncer(archived, runner).sync_snapshot("snap-a")
    assert not path.exists()


def test_fetch_archive_restores_missing_file(archived, runner):
    syncer = Syncer(archived, runner)
    syncer.sync_snapshot("snap-a")
    path = Path(archived.get_snapshot("snap-a").archive_path)
    path.unlink()
    syncer.fetch_snapshot("snap-a")
    record = archived.get_snapshot("snap-a")
    assert Path(record.archive_path).read_bytes() == b"archive payload"


def test_fetch_incremental_restores_objects(incremental, runner, tmp_path):
    syncer = Syncer(incremental, runner)
    syncer.sync_snapshot("snap-1")
    shutil.rmtree(incremental.layout.objects)
    syncer.fetch_snapshot("snap-1")
    dest = tmp_path / "restored"
    incremental.restore_incremental("snap-1", dest)
    assert (dest / "level.dat").read_bytes() == b"hello world"
    assert (dest / "region" / "r.0.0.mca").read_bytes() == b"region data" * 10


def test_fetch_falls_back_to_recorded_remote_path(incremental, runner, tmp_path):
    syncer = Syncer(incremental, runner)
    syncer.sync_snapshot("snap-1")
    remote_root = runner.root / "remote"
    shutil.move(str(remote_root / "backups" / "repo"), str(remote_root / "repo"))
    shutil.rmtree(incremental.layout.objects)
    syncer.fetch_snapshot("snap-1")
    entries = {e.rel_path: e for e in incremental.load_entries("snap-1")}
    assert incremental.read_object(entries["level.dat"].object_hash) == b"hello world"


def test_fetch_missing_remote_raises(incremental, runner):
    shutil.rmtree(incremental.layout.objects)
    with pytest.raises(FileNotFoundError):
        Syncer(incremental, runner).fetch_snapshot("snap-1")