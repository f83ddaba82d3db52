from __future__ import annotations

import io
from pathlib import Path

from blake256 import blake256
from config import HashConfig
from hash_file import compute_file_digest, digest_stream


def test_compute_file_digest_basic(tmp_path: Path) -> None:
    f1 = tmp_path / "a.bin"
    f2 = tmp_path / "b.bin"

    f1.write_bytes(b"hello world")
    f2.write_bytes(b"hello world")

    d1 = compute_file_digest(f1)
    d2 = compute_file_digest(f2)
    assert d1 == d2
    assert len(d1) == 64  # hex length for 32-byte digest
    assert d1 == str(blake256(b"hello world"))

    f2.write_bytes(b"HELLO WORLD")
    assert compute_file_digest(f2) != d1


def test_small_chunks_do_not_change_digest(tmp_path: Path) -> None:
    data = bytes(range(256)) * 5
    f = tmp_path / "data.bin"
    f.write_bytes(data)
    expected = str(blake256(data))
    for chunk in (1, 7, 64, 100, 4096):
        assert compute_file_digest(f, chunk_size=chunk) == expected


def test_salted_file_digest(tmp_path: Path) -> None:
    f = tmp_path / "a.bin"
    f.write_bytes(b"salted")
    cfg = HashConfig.build((1, 2, 3, 4))
    assert compute_file_digest(f, config=cfg) == str(blake256(b"salted", cfg))
    assert compute_file_digest(f, config=cfg) != compute_file_digest(f)


def test_digest_stream() -> None:
    assert digest_stream(io.BytesIO(b"Go"), chunk_size=1) == blake256(b"Go")
