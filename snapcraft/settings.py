"""Configuration objects for the backup tool."""

from __future__ import annotations

from dataclasses import dataclass, field

COMPRESSION_NONE = "none"
COMPRESSION_GZIP = "gzip"
COMPRESSION_ZSTD = "zstd"

BACKUP_MODE_ARCHIVE = "archive"
BACKUP_MODE_INCREMENTAL = "incremental"
BACKUP_MODE_DIRECTORY = "directory"

CONTROL_NONE = "none"
CONTROL_RCON = "rcon"

HASH_BLAKE3 = "blake3"
HASH_SHA256 = "sha256"


@dataclass
class CDCSettings:
    """Content-defined chunking parameters."""

    enabled: bool = False
    min_size: int = 64 * 1024
    avg_size: int = 1024 * 1024
    max_size: int = 4 * 1024 * 1024
    min_file_size: int = 4 * 1024 * 1024


@dataclass
class ServerSettings:
    """The game server whose world is backed up."""

    name: str = ""
    world_path: str = ""
    control_type: str = CONTROL_NONE


@dataclass
class BackupSettings:
    """How snapshots are produced."""

    mode: str = BACKUP_MODE_ARCHIVE
    compression: str = COMPRESSION_ZSTD
    hash_method: str = HASH_BLAKE3
    staging_dir: str = ""
    exclude_patterns: list[str] = field(default_factory=list)
    safety_backup_local: bool = False
    cdc: CDCSettings = field(default_factory=CDCSettings)


@dataclass
class RepositorySettings:
    """The local repository."""

    local_path: str = "repository"
    verify_after_backup: bool = False
    verify_after_upload: bool = True
    cleanup_after_verified_upload: bool = False
    keep_local_manifests: bool = True


@dataclass
class UploadSettings:
    """Whether snapshots are copied to remote storage."""

    enabled: bool = False


@dataclass
class RcloneSettings:
    """Remote storage location."""

    remote: str = ""
    remote_path: str = "snapcraft"


@dataclass
class RetentionSettings:
    """How many daily, weekly and monthly snapshots to keep."""

    daily: int = 7
    weekly: int = 4
    monthly: int = 0


@dataclass
class Settings:
    """Complete configuration."""

    server: ServerSettings = field(default_factory=ServerSettings)
    backup: BackupSettings = field(default_factory=BackupSettings)
    repository: RepositorySettings = field(default_factory=RepositorySettings)
    upload: UploadSettings = field(default_factory=UploadSettings)
    rclone: RcloneSettings = field(default_factory=RcloneSettings)
    retention: RetentionSettings = field(default_factory=RetentionSettings)