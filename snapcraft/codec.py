"""Compression of stored payloads and file extensions for each codec."""

from __future__ import annotations

import gzip

import zstandard

from .settings import COMPRESSION_GZIP, COMPRESSION_NONE, COMPRESSION_ZSTD


def compress_bytes(data: bytes, compression: str) -> bytes:
    """Compress data; unknown codecs store the data unchanged."""
    if compression == COMPRESSION_GZIP:
        return gzip.compress(data)
    if compression == COMPRESSION_ZSTD:
        return zstandard.ZstdCompressor().compress(data)
    return data


def decompress_bytes(data: bytes, compression: str) -> bytes:
    """Reverse compress_bytes."""
    if compression in (COMPRESSION_NONE, ""):
        return data
    if compression == COMPRESSION_ZSTD:
        return zstandard.ZstdDecompressor().decompressobj().decompress(data)
    if compression == COMPRESSION_GZIP:
        return gzip.decompress(data)
    return data


def archive_ext(compression: str) -> str:
    """File extension of a snapshot archive."""
    if compression == COMPRESSION_ZSTD:
        return ".tar.zst"
    if compression == COMPRESSION_GZIP:
        return ".tar.gz"
    return ".tar"


def object_ext(compression: str) -> str:
    """File extension of a stored object or chunk."""
    if compression == COMPRESSION_ZSTD:
        return ".zst"
    if compression == COMPRESSION_GZIP:
        return ".gz"
    return ""