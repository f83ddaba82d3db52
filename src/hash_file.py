"""
File hashing.

- Stream files through a BLAKE-256 engine in chunks to keep memory low.
- One engine per call, so calls may run in parallel worker threads.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional

from blake256 import create
from config import HashConfig
from logs import get_logger
from wordbuf import WordBuffer

log = get_logger(__name__)

DEFAULT_CHUNK = 1024 * 1024  # 1 MiB


def digest_stream(
    stream: BinaryIO,
    *,
    config: Optional[HashConfig] = None,
    chunk_size: int = DEFAULT_CHUNK,
) -> WordBuffer:
    """Digest everything readable from a binary stream."""
    engine = create(config)
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        engine.update(chunk)
    return engine.compute()


def compute_file_digest(
    path: Path,
    *,
    config: Optional[HashConfig] = None,
    chunk_size: int = DEFAULT_CHUNK,
) -> str:
    """
    Compute the BLAKE-256 digest of a file.

    Args:
        path: filesystem path to the file.
        config: salt to hash with (default: zero salt).
        chunk_size: bytes read per update.

    Returns:
        Lowercase hex digest (64 chars).

    Raises:
        OSError: if the file cannot be read.
    """
    with path.open("rb") as f:
        digest = digest_stream(f, config=config, chunk_size=chunk_size)
    log.debug(f"hashed {path}")
    return str(digest)
