"""Local content-addressed backup repository backed by SQLite."""

from __future__ import annotations

import os
import re
import shutil
import sqlite3
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable

from .chunker import ChunkerConfig, split_file
from .codec import archive_ext, compress_bytes, decompress_bytes, object_ext
from .hashing import Hasher, object_path
from .manifest import ZERO_TIME
from .settings import BACKUP_MODE_ARCHIVE, BACKUP_MODE_INCREMENTAL, Settings

SCHEMA_VERSION = 1

SNAPSHOT_STATUS_RUNNING = "running"
SNAPSHOT_STATUS_COMPLETED_LOCAL = "completed_local"
SNAPSHOT_STATUS_COMPLETED_REMOTE = "completed_remote"
SNAPSHOT_STATUS_FAILED = "failed"

ENTRY_TYPE_FILE = "file"
ENTRY_TYPE_DIR = "dir"
ENTRY_TYPE_LINK = "symlink"

_MIGRATE_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
  version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS snapshots (
  id TEXT PRIMARY KEY,
  server_name TEXT NOT NULL,
  world_path TEXT NOT NULL,
  mode TEXT NOT NULL,
  compression TEXT NOT NULL,
  status TEXT NOT NULL,
  local_status TEXT NOT NULL DEFAULT 'pending',
  remote_status TEXT NOT NULL DEFAULT 'pending',
  archive_path TEXT,
  archive_hash TEXT,
  archive_size INTEGER DEFAULT 0,
  file_count INTEGER DEFAULT 0,
  total_bytes INTEGER DEFAULT 0,
  started_at TEXT NOT NULL,
  completed_at TEXT,
  error TEXT,
  restorable INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS entries (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  snapshot_id TEXT NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
  rel_path TEXT NOT NULL,
  entry_type TEXT NOT NULL,
  mode INTEGER NOT NULL DEFAULT 0,
  mtime_ns INTEGER NOT NULL DEFAULT 0,
  size INTEGER NOT NULL DEFAULT 0,
  object_hash TEXT,
  is_chunked INTEGER NOT NULL DEFAULT 0,
  symlink_target TEXT,
  UNIQUE(snapshot_id, rel_path)
);

CREATE TABLE IF NOT EXISTS objects (
  hash TEXT PRIMARY KEY,
  size INTEGER NOT NULL,
  compression TEXT NOT NULL,
  local_path TEXT,
  remote_path TEXT,
  ref_count INTEGER NOT NULL DEFAULT 0,
  local_present INTEGER NOT NULL DEFAULT 1,
  uploaded INTEGER NOT NULL DEFAULT 0,
  verified INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS chunks (
  hash TEXT PRIMARY KEY,
  size INTEGER NOT NULL,
  compression TEXT NOT NULL,
  local_path TEXT,
  remote_path TEXT,
  ref_count INTEGER NOT NULL DEFAULT 0,
  local_present INTEGER NOT NULL DEFAULT 1,
  uploaded INTEGER NOT NULL DEFAULT 0,
  verified INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS file_chunks (
  snapshot_id TEXT NOT NULL,
  rel_path TEXT NOT NULL,
  chunk_index INTEGER NOT NULL,
  chunk_hash TEXT NOT NULL REFERENCES chunks(hash),
  PRIMARY KEY (snapshot_id, rel_path, chunk_index)
);

CREATE TABLE IF NOT EXISTS remote_sync (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  snapshot_id TEXT NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
  object_type TEXT NOT NULL,
  object_hash TEXT NOT NULL,
  uploaded INTEGER NOT NULL DEFAULT 0,
  verified INTEGER NOT NULL DEFAULT 0,
  error TEXT,
  UNIQUE(snapshot_id, object_type, object_hash)
);

CREATE INDEX IF NOT EXISTS idx_entries_snapshot ON entries(snapshot_id);
CREATE INDEX IF NOT EXISTS idx_remote_sync_snapshot ON remote_sync(snapshot_id);
"""

_SNAPSHOT_SELECT = """
SELECT id, server_name, world_path, mode, compression, status, local_status, remote_status,
       COALESCE(archive_path,''), COALESCE(archive_hash,''), COALESCE(archive_size,0),
       COALESCE(file_count,0), COALESCE(total_bytes,0), started_at,
       COALESCE(completed_at,''), COALESCE(error,''), restorable
FROM snapshots"""

_TIME_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?Z")


class RepositoryError(Exception):
    """A repository operation could not be completed."""


def _now_text() -> str:
    return _format_time(datetime.now(timezone.utc))


def _format_time(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    return text + "Z"


def _parse_time(text: str) -> datetime | None:
    match = _TIME_RE.fullmatch(text)
    if not match:
        return None
    year, month, day, hour, minute, second, fraction = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=timezone.utc
        )
    except ValueError:
        return None


@dataclass(frozen=True)
class Layout:
    """On-disk repository paths."""

    root: str
    db: str
    objects: str
    chunks: str
    archives: str
    manifests: str
    staging: str

    @classmethod
    def under(cls, root: str) -> Layout:
        return cls(
            root=root,
            db=os.path.join(root, "snapcraft.db"),
            objects=os.path.join(root, "objects"),
            chunks=os.path.join(root, "chunks"),
            archives=os.path.join(root, "archives"),
            manifests=os.path.join(root, "manifests"),
            staging=os.path.join(root, "staging"),
        )

    def directories(self) -> tuple[str, ...]:
        return (self.root, self.objects, self.chunks, self.archives, self.manifests, self.staging)


@dataclass
class SnapshotRecord:
    """A snapshot in the local repository."""

    id: str
    server_name: str = ""
    world_path: str = ""
    mode: str = ""
    compression: str = ""
    status: str = ""
    local_status: str = ""
    remote_status: str = ""
    archive_path: str = ""
    archive_hash: str = ""
    archive_size: int = 0
    file_count: int = 0
    total_bytes: int = 0
    started_at: datetime = ZERO_TIME
    completed_at: datetime | None = None
    error: str = ""
    restorable: bool = False

    @classmethod
    def _from_row(cls, row: tuple) -> SnapshotRecord:
        (
            snapshot_id, server_name, world_path, mode, compression, status, local_status,
            remote_status, archive_path, archive_hash, archive_size, file_count, total_bytes,
            started, completed, error, restorable,
        ) = row
        return cls(
            id=snapshot_id,
            server_name=server_name,
            world_path=world_path,
            mode=mode,
            compression=compression,
            status=status,
            local_status=local_status,
            remote_status=remote_status,
            archive_path=archive_path,
            archive_hash=archive_hash,
            archive_size=archive_size,
            file_count=file_count,
            total_bytes=total_bytes,
            started_at=_parse_time(started) or ZERO_TIME,
            completed_at=_parse_time(completed) if completed else None,
            error=error,
            restorable=restorable == 1,
        )


@dataclass
class EntryRecord:
    """A file tree entry in a snapshot."""

    rel_path: str
    entry_type: str = ENTRY_TYPE_FILE
    mode: int = 0
    mtime_ns: int = 0
    size: int = 0
    object_hash: str = ""
    is_chunked: bool = False
    symlink_target: str = ""
    chunk_hashes: list[str] = field(default_factory=list)


@dataclass
class _ScanTotals:
    file_count: int = 0
    total_bytes: int = 0


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern | None:
    """Regex for a shell pattern where * and ? never match '/'; None if malformed."""
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            parts.append("[^/]*")
        elif c == "?":
            parts.append("[^/]")
        elif c == "\\":
            i += 1
            if i >= n:
                return None
            parts.append(re.escape(pattern[i]))
        elif c == "[":
            i += 1
            negate = i < n and pattern[i] == "^"
            if negate:
                i += 1
            items: list[str] = []
            ranges = 0
            while True:
                if i >= n:
                    return None
                if pattern[i] == "]" and ranges > 0:
                    break
                lo, i = _class_char(pattern, i)
                if lo is None:
                    return None
                hi = lo
                if i < n and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                    if hi is None:
                        return None
                ranges += 1
                if lo <= hi:
                    items.append(f"{re.escape(lo)}-{re.escape(hi)}")
            if items:
                parts.append(("[^" if negate else "[") + "".join(items) + "]")
            else:
                parts.append("." if negate else "(?!)")
        else:
            parts.append(re.escape(c))
        i += 1
    return re.compile("".join(parts), re.DOTALL)


def _class_char(pattern: str, i: int) -> tuple[str | None, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        return None, i
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            return None, i
    return pattern[i], i + 1


def should_exclude(rel: str, patterns) -> bool:
    """True if rel matches any pattern as a glob or contains it as a substring."""
    for pattern in patterns:
        regex = _glob_regex(pattern)
        if regex is not None and regex.fullmatch(rel):
            return True
        if pattern in rel:
            return True
    return False


def _write_file(path: str, data: bytes, mode: int) -> None:
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    fd = os.open(path, flags, mode)
    with os.fdopen(fd, "wb") as out:
        out.write(data)


def _copy_file(src: str, dest: str) -> None:
    os.makedirs(os.path.dirname(dest), exist_ok=True)
    try:
        shutil.copyfile(src, dest)
    except BaseException:
        if os.path.exists(dest):
            os.remove(dest)
        raise


class Repository:
    """The local backup store."""

    def __init__(self, settings: Settings, layout: Layout, db: sqlite3.Connection):
        self.settings = settings
        self.layout = layout
        self.db = db

    @classmethod
    def open(cls, settings: Settings) -> Repository:
        """Open or create the repository described by settings."""
        layout = Layout.under(os.path.abspath(settings.repository.local_path))
        for directory in layout.directories():
            try:
                os.makedirs(directory, mode=0o755, exist_ok=True)
            except OSError as exc:
                raise RepositoryError(f"create repo dir {directory}: {exc}") from exc
        db = sqlite3.connect(layout.db, isolation_level=None, check_same_thread=False)
        try:
            db.execute("PRAGMA foreign_keys = ON")
            db.execute("PRAGMA journal_mode = WAL")
            repo = cls(settings, layout, db)
            repo._migrate()
        except BaseException:
            db.close()
            raise
        return repo

    def _migrate(self) -> None:
        try:
            self.db.executescript(_MIGRATE_SQL)
        except sqlite3.Error as exc:
            raise RepositoryError(f"migrate schema: {exc}") from exc
        (version,) = self.db.execute("SELECT COALESCE(MAX(version), 0) FROM schema_version").fetchone()
        if version == 0:
            self.db.execute("INSERT INTO schema_version(version) VALUES (?)", (SCHEMA_VERSION,))

    def close(self) -> None:
        self.db.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Snapshots

    def create_snapshot(self, snapshot_id: str, mode: str) -> SnapshotRecord:
        record = SnapshotRecord(
            id=snapshot_id,
            server_name=self.settings.server.name,
            world_path=self.settings.server.world_path,
            mode=mode,
            compression=self.settings.backup.compression,
            status=SNAPSHOT_STATUS_RUNNING,
            local_status=SNAPSHOT_STATUS_RUNNING,
            remote_status="pending",
            started_at=datetime.now(timezone.utc),
        )
        self.db.execute(
            """INSERT INTO snapshots(id, server_name, world_path, mode, compression, status,
                                     local_status, remote_status, started_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                record.id, record.server_name, record.world_path, record.mode, record.compression,
                record.status, record.local_status, record.remote_status, _format_time(record.started_at),
            ),
        )
        return record

    def mark_snapshot_local_complete(
        self, snapshot_id, file_count, total_bytes, archive_path, archive_hash, archive_size
    ) -> None:
        self.db.execute(
            """UPDATE snapshots SET status=?, local_status=?, file_count=?, total_bytes=?, archive_path=?,
                      archive_hash=?, archive_size=?, completed_at=?, restorable=1
               WHERE id=?""",
            (
                SNAPSHOT_STATUS_COMPLETED_LOCAL, SNAPSHOT_STATUS_COMPLETED_LOCAL, file_count, total_bytes,
                archive_path, archive_hash, archive_size, _now_text(), snapshot_id,
            ),
        )

    def mark_snapshot_failed(self, snapshot_id: str, message: str) -> None:
        self.db.execute(
            "UPDATE snapshots SET status=?, local_status=?, error=?, completed_at=?, restorable=0 WHERE id=?",
            (SNAPSHOT_STATUS_FAILED, SNAPSHOT_STATUS_FAILED, message, _now_text(), snapshot_id),
        )

    def mark_snapshot_remote_complete(self, snapshot_id: str) -> None:
        self.db.execute(
            "UPDATE snapshots SET status=?, remote_status=? WHERE id=?",
            (SNAPSHOT_STATUS_COMPLETED_REMOTE, SNAPSHOT_STATUS_COMPLETED_REMOTE, snapshot_id),
        )

    def mark_snapshot_remote_failed(self, snapshot_id: str, message: str) -> None:
        self.db.execute("UPDATE snapshots SET remote_status=? WHERE id=?", ("failed: " + message, snapshot_id))

    def get_snapshot(self, snapshot_id: str) -> SnapshotRecord:
        row = self.db.execute(_SNAPSHOT_SELECT + " WHERE id=?", (snapshot_id,)).fetchone()
        if row is None:
            raise RepositoryError(f"snapshot {snapshot_id} not found")
        return SnapshotRecord._from_row(row)

    def list_snapshots(self) -> list[SnapshotRecord]:
        rows = self.db.execute(_SNAPSHOT_SELECT + " ORDER BY started_at DESC").fetchall()
        return [SnapshotRecord._from_row(row) for row in rows]

    # Archives

    def store_archive(self, snapshot_id: str, src_path) -> tuple[str, str, int]:
        """Copy an archive into the repository; return its path, hash and size."""
        dest = os.path.join(self.layout.archives, snapshot_id + archive_ext(self.settings.backup.compression))
        _copy_file(os.fspath(src_path), dest)
        digest, size = Hasher(self.settings.backup.hash_method).sum_file(dest)
        return dest, digest, size

    def verify_archive(self, path, expected_hash: str, expected_size: int) -> None:
        """Raise RepositoryError if the file's size or hash differs from what is expected."""
        digest, size = Hasher(self.settings.backup.hash_method).sum_file(path)
        if expected_size > 0 and size != expected_size:
            raise RepositoryError(f"archive size mismatch: got {size} want {expected_size}")
        if expected_hash and digest != expected_hash:
            raise RepositoryError(f"archive hash mismatch: got {digest} want {expected_hash}")

    # Incremental storage

    def scan_and_store_incremental(self, snapshot_id: str, root_dir) -> tuple[int, int]:
        """Store every file below root_dir; return the file count and total bytes."""
        root = os.fspath(root_dir)
        totals = _ScanTotals()
        if stat.S_ISDIR(os.lstat(root).st_mode):
            self._scan_dir(snapshot_id, root, "", totals)
        return totals.file_count, totals.total_bytes

    def _scan_dir(self, snapshot_id: str, directory: str, prefix: str, totals: _ScanTotals) -> None:
        with os.scandir(directory) as listing:
            children = sorted(listing, key=lambda child: child.name)
        for child in children:
            rel = prefix + child.name
            info = child.stat(follow_symlinks=False)
            is_dir = stat.S_ISDIR(info.st_mode)
            if should_exclude(rel, self.settings.backup.exclude_patterns):
                continue
            entry = EntryRecord(rel_path=rel, mode=info.st_mode, mtime_ns=info.st_mtime_ns, size=info.st_size)
            if is_dir:
                entry.entry_type = ENTRY_TYPE_DIR
                self._insert_entry(snapshot_id, entry)
                self._scan_dir(snapshot_id, child.path, rel + "/", totals)
            elif stat.S_ISLNK(info.st_mode):
                entry.entry_type = ENTRY_TYPE_LINK
                entry.symlink_target = os.readlink(child.path)
                self._insert_entry(snapshot_id, entry)
            else:
                self._store_file(snapshot_id, child.path, entry, totals)

    def _store_file(self, snapshot_id: str, path: str, entry: EntryRecord, totals: _ScanTotals) -> None:
        backup = self.settings.backup
        cdc = backup.cdc
        if cdc.enabled and entry.size >= cdc.min_file_size:
            config = ChunkerConfig(
                min_size=cdc.min_size, avg_size=cdc.avg_size, max_size=cdc.max_size, min_file_size=cdc.min_file_size
            )
            chunks = split_file(path, config, backup.hash_method)
            if chunks:
                entry.is_chunked = True
                for index, chunk in enumerate(chunks):
                    self._store_blob("chunks", self.layout.chunks, chunk.digest, lambda data=chunk.data: data)
                    entry.chunk_hashes.append(chunk.digest)
                    self.db.execute(
                        """INSERT OR IGNORE INTO file_chunks(snapshot_id, rel_path, chunk_index, chunk_hash)
                           VALUES (?, ?, ?, ?)""",
                        (snapshot_id, entry.rel_path, index, chunk.digest),
                    )
                    totals.total_bytes += chunk.size
                totals.file_count += 1
                self._insert_entry(snapshot_id, entry)
                return

        digest, size = Hasher(backup.hash_method).sum_file(path)
        entry.object_hash = digest
        entry.size = size
        self._store_blob("objects", self.layout.objects, digest, lambda: _read_bytes(path))
        totals.file_count += 1
        totals.total_bytes += size
        self._insert_entry(snapshot_id, entry)

    def _insert_entry(self, snapshot_id: str, entry: EntryRecord) -> None:
        self.db.execute(
            """INSERT INTO entries(snapshot_id, rel_path, entry_type, mode, mtime_ns, size, object_hash,
                                   is_chunked, symlink_target)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                snapshot_id, entry.rel_path, entry.entry_type, entry.mode, entry.mtime_ns, entry.size,
                entry.object_hash or None, int(entry.is_chunked), entry.symlink_target or None,
            ),
        )

    def _store_blob(self, table: str, base_dir: str, digest: str, load: Callable[[], bytes]) -> None:
        if self.db.execute(f"SELECT 1 FROM {table} WHERE hash=?", (digest,)).fetchone() is not None:
            self.db.execute(f"UPDATE {table} SET ref_count = ref_count + 1 WHERE hash=?", (digest,))
            return
        compression = self.settings.backup.compression
        data = load()
        local_path = object_path(base_dir, digest) + object_ext(compression)
        os.makedirs(os.path.dirname(local_path), mode=0o755, exist_ok=True)
        _write_file(local_path, compress_bytes(data, compression), 0o644)
        self.db.execute(
            f"""INSERT INTO {table}(hash, size, compression, local_path, ref_count, local_present)
                VALUES (?, ?, ?, ?, 1, 1)""",
            (digest, len(data), compression, local_path),
        )

    def load_entries(self, snapshot_id: str) -> list[EntryRecord]:
        rows = self.db.execute(
            """SELECT rel_path, entry_type, mode, mtime_ns, size, COALESCE(object_hash,''), is_chunked,
                      COALESCE(symlink_target,'')
               FROM entries WHERE snapshot_id=? ORDER BY rel_path""",
            (snapshot_id,),
        ).fetchall()
        entries = []
        for rel_path, entry_type, mode, mtime_ns, size, object_hash, is_chunked, target in rows:
            entry = EntryRecord(
                rel_path=rel_path,
                entry_type=entry_type,
                mode=mode,
                mtime_ns=mtime_ns,
                size=size,
                object_hash=object_hash,
                is_chunked=is_chunked == 1,
                symlink_target=target,
            )
            if entry.is_chunked:
                entry.chunk_hashes = [
                    chunk_hash
                    for (chunk_hash,) in self.db.execute(
                        """SELECT chunk_hash FROM file_chunks WHERE snapshot_id=? AND rel_path=?
                           ORDER BY chunk_index""",
                        (snapshot_id, rel_path),
                    )
                ]
            entries.append(entry)
        return entries

    def read_object(self, digest: str) -> bytes:
        return self._read_blob("objects", "object", digest)

    def read_chunk(self, digest: str) -> bytes:
        return self._read_blob("chunks", "chunk", digest)

    def _read_blob(self, table: str, kind: str, digest: str) -> bytes:
        row = self.db.execute(
            f"SELECT local_path, compression, local_present FROM {table} WHERE hash=?", (digest,)
        ).fetchone()
        if row is None:
            raise RepositoryError(f"{kind} {digest}: not found")
        local_path, compression, local_present = row
        if local_present == 0:
            raise RepositoryError(f"{kind} {digest} not present locally; use --remote to fetch")
        if local_path is None:
            raise RepositoryError(f"{kind} {digest}: no local path")
        return decompress_bytes(_read_bytes(local_path), compression)

    def restore_incremental(self, snapshot_id: str, dest_root) -> None:
        """Recreate the file tree of a snapshot below dest_root."""
        root = os.fspath(dest_root)
        for entry in self.load_entries(snapshot_id):
            target = os.path.join(root, *entry.rel_path.split("/"))
            if entry.entry_type == ENTRY_TYPE_DIR:
                os.makedirs(target, mode=stat.S_IMODE(entry.mode), exist_ok=True)
            elif entry.entry_type == ENTRY_TYPE_LINK:
                os.makedirs(os.path.dirname(target), mode=0o755, exist_ok=True)
                try:
                    os.remove(target)
                except OSError:
                    pass
                os.symlink(entry.symlink_target, target)
            elif entry.entry_type == ENTRY_TYPE_FILE:
                os.makedirs(os.path.dirname(target), mode=0o755, exist_ok=True)
                if entry.is_chunked:
                    data = b"".join(self.read_chunk(chunk) for chunk in entry.chunk_hashes)
                else:
                    data = self.read_object(entry.object_hash)
                _write_file(target, data, stat.S_IMODE(entry.mode))

    def verify_snapshot_local(self, snapshot_id: str) -> None:
        """Raise if the local payload of a snapshot is missing or damaged."""
        record = self.get_snapshot(snapshot_id)
        if record.mode == BACKUP_MODE_ARCHIVE:
            if not record.archive_path:
                raise RepositoryError(f"snapshot {snapshot_id} has no archive path")
            self.verify_archive(record.archive_path, record.archive_hash, record.archive_size)
        elif record.mode == BACKUP_MODE_INCREMENTAL:
            for entry in self.load_entries(snapshot_id):
                if entry.entry_type != ENTRY_TYPE_FILE:
                    continue
                if entry.is_chunked:
                    for chunk in entry.chunk_hashes:
                        self.read_chunk(chunk)
                elif entry.object_hash:
                    self.read_object(entry.object_hash)

    def cleanup_local_payload(self, snapshot_id: str) -> None:
        """Remove the local archive of an uploaded snapshot unless manifests are kept."""
        record = self.get_snapshot(snapshot_id)
        if (
            record.mode == BACKUP_MODE_ARCHIVE
            and record.archive_path
            and not self.settings.repository.keep_local_manifests
        ):
            try:
                os.remove(record.archive_path)
            except OSError:
                pass


def _read_bytes(path: str) -> bytes:
    with open(path, "rb") as stream:
        return stream.read()


def init_repository(settings: Settings) -> None:
    """Create the repository directories and database."""
    Repository.open(settings).close()