# snapcraft

A library for keeping backups of Minecraft worlds. It provides a local,
content-addressed repository backed by SQLite, with deduplication and
optional content-defined chunking of large files. It also provides snapshot
manifests, retention planning, restore helpers and the building blocks of a
small web control panel.

## What is inside

- `snapcraft.settings`: the `Settings` dataclass and its parts
  (`ServerSettings`, `BackupSettings`, `CDCSettings`, `RepositorySettings`,
  `UploadSettings`, `RcloneSettings`, `RetentionSettings`).
- `snapcraft.hashing`: `Hasher`, `hash_bytes`, `object_path` and a pure-Python
  `Blake3` hash. The method `"blake3"` selects BLAKE3 and any other method
  selects SHA-256. `BackupSettings.hash_method` is `"blake3"` unless you
  change it.
- `snapcraft.chunker`: content-defined chunking with `split_bytes` and
  `split_file`, configured by `ChunkerConfig`.
- `snapcraft.codec`: `compress_bytes` and `decompress_bytes` for the
  `none`, `gzip` and `zstd` codecs, and the file extensions that go with them
  (`archive_ext`, `object_ext`).
- `snapcraft.ids`: `new_id` returns identifiers such as
  `2026-05-28T08-30-00Z-a1b2c3`, and `parse_time` reads their timestamp back.
- `snapcraft.manifest`: the `Manifest` class with its JSON form
  (`to_json`, `parse_manifest`), `new_manifest`, and `RemoteLayout`.
- `snapcraft.repository`: `Repository`, which stores snapshots, file entries,
  objects and chunks, and `init_repository`. Errors are raised as
  `RepositoryError`.
- `snapcraft.sync`: `Syncer`, which uploads a snapshot and fetches it back
  through a `RemoteRunner` that you supply.
- `snapcraft.store`: `ManifestStore`, which uploads, lists, downloads and
  deletes manifests on a remote through a `ManifestRunner` that you supply.
- `snapcraft.retention`: `compute`, which splits manifests into a `Plan`
  of snapshots to keep and snapshots to delete.
- `snapcraft.restore`: `restore_incremental`, `atomic_replace_world` and
  `copy_tree`.
- `snapcraft.webui`: the web panel pieces. They cover token auth and session
  cookies (`auth`), a single-flight `JobManager` (`jobs`), an in-memory
  `LogStore` (`logs`), masking of secret values (`redact`), switching between
  single-player and server control profiles (`control`), and JSON payload
  builders (`payloads`).

## Incremental backup and restore

```python
from snapcraft.ids import new_id
from snapcraft.repository import Repository
from snapcraft.settings import BackupSettings, CDCSettings, RepositorySettings, Settings

settings = Settings(
    backup=BackupSettings(mode="incremental", compression="zstd", cdc=CDCSettings(enabled=True)),
    repository=RepositorySettings(local_path="/srv/backups/repo"),
)

with Repository.open(settings) as repo:
    snapshot_id = new_id()
    repo.create_snapshot(snapshot_id, "incremental")
    files, total = repo.scan_and_store_incremental(snapshot_id, "/srv/world")
    repo.mark_snapshot_local_complete(snapshot_id, files, total, "", "", 0)

    repo.verify_snapshot_local(snapshot_id)  # raises RepositoryError on damage
    repo.restore_incremental(snapshot_id, "/tmp/restored-world")
```

Files that are identical are stored only once. When chunking is enabled,
files at least `cdc.min_file_size` bytes long are split into chunks at
content-defined boundaries. Identical chunks are then shared between files
and between snapshots. Paths that match one of
`backup.exclude_patterns`, either as a glob or as a substring, are skipped.

To swap a restored snapshot in as the live world, use
`snapcraft.restore.restore_incremental(repo, snapshot_id, world_path, staging_dir)`.
It moves the current world aside to `<world>.snapcraft-old-YYYYmmdd-HHMMSS`
and returns that path. If the copy fails, the old world is moved back.

## Remote storage

`Syncer` and `ManifestStore` do not transfer anything themselves. They call
methods such as `copy`, `check`, `copy_to_local`, `list_json`, `delete_file`
and `purge` on a runner object that you write. Remote paths are passed to
the runner as `"<remote>:<remote_path>/..."`.

## Retention

```python
from snapcraft.retention import compute

plan = compute(settings, manifests)
for manifest in plan.delete:
    print("would delete", manifest.id)
```

The plan keeps every snapshot from the last `retention.daily` days. It also
keeps the newest snapshot of each ISO week within the last `retention.weekly`
weeks, and the newest of each month within the last `retention.monthly`
months. Snapshots that have not completed are always kept.

## Web panel helpers

```python
from snapcraft.webui.auth import Auth
from snapcraft.webui.logs import LogStore
from snapcraft.webui.redact import redact_map

auth = Auth("token", "snapcraft_webui")
assert auth.valid_token("token")

logs = LogStore(100)
logs.append("info", "server", "started", None)
newest_first = logs.list("", "", 0)

print(redact_map({"user": "alice", "pass": "secret"}))
```

## What this package does not do

- It has no command-line program and no HTTP server. The `webui` modules are
  helpers for building a panel, not a running one.
- It does not create or extract tar archives. Archive-mode snapshots can be
  stored, hashed, verified, uploaded and fetched, but not produced or
  unpacked.
- It does not include a runner for any storage service, a scheduler, server
  (RCON) control, notifications, or loading and saving configuration files.
  `Settings` is built in code.