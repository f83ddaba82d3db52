"""
Streaming hash engine.

The engine owns the generic part of a block hash:
- buffering input into a WordBuffer,
- handing every complete block to the algorithm (the "compressor"),
- dropping consumed words and keeping the byte count exact,
- driving finalization and resetting for reuse.

The algorithm plugs in through the `Compressor` protocol (reset, block and
finalize hooks), so the buffering logic exists exactly once.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol, Union

from logs import get_logger
from wordbuf import BytesLike, WordBuffer

log = get_logger(__name__)

Message = Union[WordBuffer, BytesLike]


class Compressor(Protocol):
    """Algorithm-specific hooks driven by `StreamingHasher`."""

    name: str
    block_words: int
    digest_words: int

    def reset(self) -> None:
        """Restore the initial chaining value and counters."""

    def hash_block(self, words: List[int], offset: int) -> None:
        """Compress `words[offset : offset + block_words]` into the state."""

    def finalize(
        self, message: WordBuffer, length: int, flush: Callable[[], None]
    ) -> WordBuffer:
        """
        Pad the pending `message` (total input `length` in bytes), call
        `flush()` to dispatch the padded block(s), and return the digest.
        """

    def copy(self) -> "Compressor":
        """Independent compressor with identical state."""


def to_buffer(message: Message) -> WordBuffer:
    """
    Accept a WordBuffer or a bytes-like object.

    Raises:
        TypeError: for text or any other type; encode text explicitly first
            (e.g. `encoders.Utf8.parse`).
    """
    if isinstance(message, WordBuffer):
        return message
    if isinstance(message, (bytes, bytearray, memoryview)):
        return WordBuffer.from_bytes(message)
    if isinstance(message, str):
        raise TypeError("text must be encoded to bytes before hashing")
    raise TypeError(f"cannot hash object of type {type(message).__name__}")


class StreamingHasher:
    """
    Incremental hasher over a pluggable compressor.

    Not thread-safe: one instance per thread (or an external lock).
    """

    def __init__(self, compressor: Compressor) -> None:
        self._compressor = compressor
        self._message = WordBuffer()
        self._length = 0
        self.reset()

    @property
    def name(self) -> str:
        return self._compressor.name

    @property
    def block_size(self) -> int:
        """Block size in bytes."""
        return self._compressor.block_words * 4

    @property
    def digest_size(self) -> int:
        """Digest size in bytes."""
        return self._compressor.digest_words * 4

    def reset(self) -> None:
        """Drop pending input and restore the algorithm's initial state."""
        self._message = WordBuffer()
        self._length = 0
        self._compressor.reset()

    def update(self, message: Message) -> "StreamingHasher":
        """Append `message` and compress every complete block. Chainable."""
        buf = to_buffer(message)

        self._message.concat(buf)
        self._length += buf.sig_bytes

        self._hash_blocks()
        return self

    def _hash_blocks(self) -> None:
        message = self._message
        sig_bytes = message.sig_bytes
        block_words = self._compressor.block_words

        n_blocks_ready = sig_bytes // (block_words * 4)
        if not n_blocks_ready:
            return

        n_words_ready = n_blocks_ready * block_words
        for offset in range(0, n_words_ready, block_words):
            self._compressor.hash_block(message.words, offset)

        del message.words[:n_words_ready]
        message.sig_bytes = sig_bytes - n_words_ready * 4

    def compute(self, message: Optional[Message] = None) -> WordBuffer:
        """
        Finish the hash and return the digest; the engine is reset afterwards.

        Args:
            message: optional final update.
        """
        if message is not None:
            self.update(message)

        length = self._length
        digest = self._compressor.finalize(self._message, length, self._hash_blocks)
        log.debug(f"{self.name}: finalized {length} byte(s)")

        self.reset()
        return digest

    # ------------ hashlib-style conveniences ------------

    def copy(self) -> "StreamingHasher":
        clone = StreamingHasher.__new__(StreamingHasher)
        clone._compressor = self._compressor.copy()
        clone._message = self._message.clone()
        clone._length = self._length
        return clone

    def digest(self) -> bytes:
        """Digest of the input so far; this engine keeps its state."""
        return self.copy().compute().to_bytes()

    def hexdigest(self) -> str:
        return self.digest().hex()
