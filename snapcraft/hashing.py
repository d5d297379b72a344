"""Content hashing with SHA-256 or BLAKE3."""

from __future__ import annotations

import hashlib
import os
import struct
from dataclasses import dataclass
from typing import BinaryIO

from .settings import HASH_BLAKE3

_READ_SIZE = 1 << 16
_MASK = 0xFFFFFFFF
_BLOCK_LEN = 64
_CHUNK_LEN = 1024

_CHUNK_START = 1 << 0
_CHUNK_END = 1 << 1
_PARENT = 1 << 2
_ROOT = 1 << 3

_IV = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)
_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)
_BLOCK_WORDS = struct.Struct("<16I")


def _g(s: list[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    sa = (s[a] + s[b] + mx) & _MASK
    sd = s[d] ^ sa
    sd = ((sd >> 16) | (sd << 16)) & _MASK
    sc = (s[c] + sd) & _MASK
    sb = s[b] ^ sc
    sb = ((sb >> 12) | (sb << 20)) & _MASK
    sa = (sa + sb + my) & _MASK
    sd ^= sa
    sd = ((sd >> 8) | (sd << 24)) & _MASK
    sc = (sc + sd) & _MASK
    sb ^= sc
    sb = ((sb >> 7) | (sb << 25)) & _MASK
    s[a], s[b], s[c], s[d] = sa, sb, sc, sd


def _round(s: list[int], m: list[int]) -> None:
    _g(s, 0, 4, 8, 12, m[0], m[1])
    _g(s, 1, 5, 9, 13, m[2], m[3])
    _g(s, 2, 6, 10, 14, m[4], m[5])
    _g(s, 3, 7, 11, 15, m[6], m[7])
    _g(s, 0, 5, 10, 15, m[8], m[9])
    _g(s, 1, 6, 11, 12, m[10], m[11])
    _g(s, 2, 7, 8, 13, m[12], m[13])
    _g(s, 3, 4, 9, 14, m[14], m[15])


def _compress(cv, words, counter: int, block_len: int, flags: int) -> list[int]:
    state = [*cv, *_IV[:4], counter & _MASK, (counter >> 32) & _MASK, block_len, flags]
    message = list(words)
    for round_number in range(7):
        _round(state, message)
        if round_number < 6:
            message = [message[i] for i in _PERMUTATION]
    for i, value in enumerate(cv):
        state[i] ^= state[i + 8]
        state[i + 8] ^= value
    return state


class _Output:
    __slots__ = ("cv", "words", "counter", "block_len", "flags")

    def __init__(self, cv, words, counter: int, block_len: int, flags: int):
        self.cv = tuple(cv)
        self.words = tuple(words)
        self.counter = counter
        self.block_len = block_len
        self.flags = flags

    def chaining_value(self) -> tuple[int, ...]:
        return tuple(_compress(self.cv, self.words, self.counter, self.block_len, self.flags)[:8])

    def root_bytes(self, length: int) -> bytes:
        out = bytearray()
        block_counter = 0
        while len(out) < length:
            state = _compress(self.cv, self.words, block_counter, self.block_len, self.flags | _ROOT)
            out += _BLOCK_WORDS.pack(*state)
            block_counter += 1
        return bytes(out[:length])


def _parent_output(left, right) -> _Output:
    return _Output(_IV, (*left, *right), 0, _BLOCK_LEN, _PARENT)


class _ChunkState:
    __slots__ = ("cv", "counter", "buffer", "blocks_compressed")

    def __init__(self, counter: int):
        self.cv: tuple[int, ...] = _IV
        self.counter = counter
        self.buffer = bytearray()
        self.blocks_compressed = 0

    def __len__(self) -> int:
        return _BLOCK_LEN * self.blocks_compressed + len(self.buffer)

    def _start_flag(self) -> int:
        return _CHUNK_START if self.blocks_compressed == 0 else 0

    def update(self, data: memoryview) -> None:
        while len(data):
            if len(self.buffer) == _BLOCK_LEN:
                words = _BLOCK_WORDS.unpack(self.buffer)
                self.cv = tuple(_compress(self.cv, words, self.counter, _BLOCK_LEN, self._start_flag())[:8])
                self.blocks_compressed += 1
                self.buffer.clear()
            take = min(_BLOCK_LEN - len(self.buffer), len(data))
            self.buffer += data[:take]
            data = data[take:]

    def output(self) -> _Output:
        block = bytes(self.buffer).ljust(_BLOCK_LEN, b"\0")
        return _Output(
            self.cv,
            _BLOCK_WORDS.unpack(block),
            self.counter,
            len(self.buffer),
            self._start_flag() | _CHUNK_END,
        )


class Blake3:
    """BLAKE3 hash with a hashlib-style interface (32-byte digest)."""

    name = "blake3"
    digest_size = 32
    block_size = _BLOCK_LEN

    def __init__(self, data: bytes = b""):
        self._cv_stack: list[tuple[int, ...]] = []
        self._chunk = _ChunkState(0)
        if data:
            self.update(data)

    def _push_chunk(self, cv: tuple[int, ...], total_chunks: int) -> None:
        while total_chunks & 1 == 0:
            cv = _parent_output(self._cv_stack.pop(), cv).chaining_value()
            total_chunks >>= 1
        self._cv_stack.append(cv)

    def update(self, data) -> None:
        view = memoryview(data).cast("B")
        while len(view):
            if len(self._chunk) == _CHUNK_LEN:
                cv = self._chunk.output().chaining_value()
                total = self._chunk.counter + 1
                self._push_chunk(cv, total)
                self._chunk = _ChunkState(total)
            take = min(_CHUNK_LEN - len(self._chunk), len(view))
            self._chunk.update(view[:take])
            view = view[take:]

    def digest(self) -> bytes:
        output = self._chunk.output()
        for left in reversed(self._cv_stack):
            output = _parent_output(left, output.chaining_value())
        return output.root_bytes(self.digest_size)

    def hexdigest(self) -> str:
        return self.digest().hex()


def _new_hash(method: str):
    if method == HASH_BLAKE3:
        return Blake3()
    return hashlib.sha256()


def hash_bytes(data: bytes, method: str) -> str:
    """Hex digest of data; BLAKE3 for "blake3", SHA-256 otherwise."""
    hasher = _new_hash(method)
    hasher.update(data)
    return hasher.hexdigest()


@dataclass(frozen=True)
class Hasher:
    """Computes content hashes with a fixed method."""

    method: str

    def sum(self, stream: BinaryIO) -> str:
        hasher = _new_hash(self.method)
        for block in iter(lambda: stream.read(_READ_SIZE), b""):
            hasher.update(block)
        return hasher.hexdigest()

    def sum_file(self, path) -> tuple[str, int]:
        """Return the hex digest and size in bytes of a file."""
        with open(path, "rb") as stream:
            size = os.fstat(stream.fileno()).st_size
            return self.sum(stream), size


def object_path(base_dir, digest: str) -> str:
    """Path of a content-addressed object, fanned out by its first four hex digits."""
    if len(digest) < 4:
        return os.path.join(base_dir, digest)
    return os.path.join(base_dir, digest[0:2], digest[2:4], digest)