"""
HMAC (RFC 2104) over any StreamingHasher.

    mac = HMAC(lambda: blake256.create(), key)
    tag = mac.update(b"part 1").compute(b"part 2")
"""

from __future__ import annotations

from typing import Callable, Optional

from hasher import Message, StreamingHasher, to_buffer
from wordbuf import WordBuffer

_IPAD = 0x36363636
_OPAD = 0x5C5C5C5C


class HMAC:
    """Keyed hash built from a hasher factory; follows the engine's contract."""

    def __init__(self, factory: Callable[[], StreamingHasher], key: Message) -> None:
        hasher = self._hasher = factory()
        block_bytes = hasher.block_size
        block_words = block_bytes // 4

        key_buf = to_buffer(key).clone()
        if key_buf.sig_bytes > block_bytes:
            key_buf = hasher.compute(key_buf)
        key_buf.clamp()

        words = key_buf.words + [0] * (block_words - len(key_buf.words))
        self._o_key = WordBuffer([w ^ _OPAD for w in words], block_bytes)
        self._i_key = WordBuffer([w ^ _IPAD for w in words], block_bytes)

        self.reset()

    @property
    def digest_size(self) -> int:
        return self._hasher.digest_size

    def reset(self) -> None:
        self._hasher.reset()
        self._hasher.update(self._i_key)

    def update(self, message: Message) -> "HMAC":
        self._hasher.update(message)
        return self

    def compute(self, message: Optional[Message] = None) -> WordBuffer:
        """Finish the MAC; the instance is reset (still keyed) afterwards."""
        inner = self._hasher.compute(message)
        mac = self._hasher.update(self._o_key).compute(inner)
        self.reset()
        return mac
