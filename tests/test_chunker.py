import hashlib

from snapcraft.chunker import ChunkerConfig, split_bytes, split_file
from snapcraft.hashing import hash_bytes

CONFIG = ChunkerConfig(min_size=64, avg_size=256, max_size=1024)


def _sample(length=2048):
    return bytes(i % 251 for i in range(length))


def test_split_produces_multiple_chunks():
    chunks = split_bytes(_sample(), CONFIG, "blake3")
    assert len(chunks) >= 2


def test_chunks_reassemble_and_are_contiguous():
    data = _sample()
    chunks = split_bytes(data, CONFIG, "blake3")
    assert b"".join(c.data for c in chunks) == data
    expected_offset = 0
    for chunk in chunks:
        assert chunk.offset == expected_offset
        assert chunk.size == len(chunk.data)
        expected_offset += chunk.size
    assert expected_offset == len(data)


def test_chunk_sizes_respect_maximum():
    chunks = split_bytes(_sample(5000), CONFIG, "sha256")
    assert all(c.size <= CONFIG.max_size for c in chunks)
    assert all(c.size >= CONFIG.min_size for c in chunks[:-1])


def test_chunk_digest_matches_content():
    chunks = split_bytes(_sample(), CONFIG, "sha256")
    for chunk in chunks:
        assert chunk.digest == hashlib.sha256(chunk.data).hexdigest()
    blake_chunks = split_bytes(_sample(), CONFIG, "blake3")
    assert blake_chunks[0].digest == hash_bytes(blake_chunks[0].data, "blake3")


def test_empty_input_gives_no_chunks():
    assert split_bytes(b"", CONFIG, "blake3") == []


def test_short_input_is_single_chunk():
    chunks = split_bytes(b"tiny", ChunkerConfig(), "sha256")
    assert len(chunks) == 1
    assert chunks[0].data == b"tiny"
    assert chunks[0].offset == 0


def test_split_is_deterministic():
    first = [c.digest for c in split_bytes(_sample(), CONFIG, "sha256")]
    second = [c.digest for c in split_bytes(_sample(), CONFIG, "sha256")]
    assert first == second


def test_split_file_below_minimum_size(tmp_path):
    path = tmp_path / "small.bin"
    path.write_bytes(b"x" * 100)
    config = ChunkerConfig(min_size=64, avg_size=256, max_size=1024, min_file_size=512)
    assert split_file(path, config, "sha256") == []


def test_split_file_matches_split_bytes(tmp_path):
    data = _sample()
    path = tmp_path / "big.bin"
    path.write_bytes(data)
    config = ChunkerConfig(min_size=64, avg_size=256, max_size=1024, min_file_size=512)
    from_file = split_file(path, config, "sha256")
    assert [c.digest for c in from_file] == [c.digest for c in split_bytes(data, config, "sha256")]