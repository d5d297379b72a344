"""Replacing a world directory with restored content."""

from __future__ import annotations

import os
import stat
import tempfile
import time

from .repository import Repository


def _raise(exc: OSError) -> None:
    raise exc


def _copy_file(src: str, dst: str, mode: int) -> None:
    os.makedirs(os.path.dirname(dst), mode=0o755, exist_ok=True)
    with open(src, "rb") as stream:
        data = stream.read()
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0)
    with os.fdopen(os.open(dst, flags, mode), "wb") as out:
        out.write(data)


def copy_tree(src, dst) -> None:
    """Copy the directory tree src into dst, keeping permission bits."""
    src = os.fspath(src)
    dst = os.fspath(dst)
    info = os.stat(src)
    if not stat.S_ISDIR(info.st_mode):
        raise NotADirectoryError(src)
    os.makedirs(dst, mode=stat.S_IMODE(info.st_mode), exist_ok=True)
    for current, dirnames, filenames in os.walk(src, onerror=_raise):
        rel = os.path.relpath(current, src)
        target_dir = dst if rel == os.curdir else os.path.join(dst, rel)
        for name in dirnames:
            path = os.path.join(current, name)
            entry = os.lstat(path)
            if stat.S_ISDIR(entry.st_mode):
                os.makedirs(os.path.join(target_dir, name), mode=stat.S_IMODE(entry.st_mode), exist_ok=True)
            else:
                _copy_file(path, os.path.join(target_dir, name), stat.S_IMODE(entry.st_mode))
        for name in filenames:
            path = os.path.join(current, name)
            _copy_file(path, os.path.join(target_dir, name), stat.S_IMODE(os.lstat(path).st_mode))


def atomic_replace_world(world_path, source) -> str:
    """Move the world aside and copy source in its place; return where the old world went.

    If copying fails the old world is moved back before the error is raised.
    """
    world = os.fspath(world_path)
    parent, base = os.path.split(world.rstrip(os.sep) or world)
    backup_path = os.path.join(parent, f"{base}.snapcraft-old-{time.strftime('%Y%m%d-%H%M%S')}")
    os.rename(world, backup_path)
    try:
        copy_tree(source, world)
    except BaseException:
        try:
            os.rename(backup_path, world)
        except OSError:
            pass
        raise
    return backup_path


def restore_incremental(repo: Repository, snapshot_id: str, world_path, staging_dir) -> str:
    """Rebuild an incremental snapshot in a staging directory and swap it in as the world."""
    with tempfile.TemporaryDirectory(prefix="snapcraft-inc-restore-", dir=os.fspath(staging_dir) or None) as tmp:
        repo.restore_incremental(snapshot_id, tmp)
        return atomic_replace_world(world_path, tmp)