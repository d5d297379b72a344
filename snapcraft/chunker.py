"""Content-defined chunking with a simple rolling hash."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .hashing import hash_bytes

_DEFAULT_MIN = 65536
_DEFAULT_AVG = 1048576
_DEFAULT_MAX = 4194304
_CUT_MASK = (1 << 13) - 1
_WORD = 0xFFFFFFFF


@dataclass
class Chunk:
    """A piece of a file together with its content hash."""

    offset: int
    size: int
    digest: str
    data: bytes


@dataclass
class ChunkerConfig:
    """Chunk size limits; zero or negative sizes fall back to defaults."""

    min_size: int = 0
    avg_size: int = 0
    max_size: int = 0
    min_file_size: int = 0


def split_file(path, config: ChunkerConfig, hash_method: str) -> list[Chunk]:
    """Split a file into chunks; files smaller than min_file_size yield none."""
    with open(path, "rb") as stream:
        if os.fstat(stream.fileno()).st_size < config.min_file_size:
            return []
        data = stream.read()
    return split_bytes(data, config, hash_method)


def split_bytes(data: bytes, config: ChunkerConfig, hash_method: str) -> list[Chunk]:
    """Split data at content-defined boundaries."""
    if not data:
        return []
    min_size = config.min_size if config.min_size > 0 else _DEFAULT_MIN
    avg_size = config.avg_size if config.avg_size > 0 else _DEFAULT_AVG
    max_size = config.max_size if config.max_size > 0 else _DEFAULT_MAX

    view = memoryview(data)
    total = len(data)
    chunks: list[Chunk] = []
    offset = 0
    while offset < total:
        end = min(offset + min_size, total)
        if end < total:
            limit = min(offset + max_size, total)
            end = offset + _find_cut_point(view[offset:limit], avg_size, min_size)
        part = bytes(view[offset:end])
        chunks.append(Chunk(offset=offset, size=len(part), digest=hash_bytes(part, hash_method), data=part))
        offset = end
    return chunks


def _find_cut_point(window: memoryview, avg_size: int, min_size: int) -> int:
    if len(window) <= min_size:
        return len(window)
    rolling = 0
    for position, byte in enumerate(window[min_size:], start=min_size):
        rolling = ((rolling << 1) + byte) & _WORD
        if rolling & _CUT_MASK == 0 or position >= avg_size * 2:
            return position + 1
    return len(window)