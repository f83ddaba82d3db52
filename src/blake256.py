"""
BLAKE-256 (14 rounds, 512-bit blocks, 256-bit digest, 128-bit salt).

- Blake256Compressor plugs into StreamingHasher (reset/block/finalize hooks).
- create(): new engine, optionally salted.
- blake256() / hmac_blake256(): one-shot helpers; these accept text and
  encode it as UTF-8.

All word arithmetic is masked to 32 bits explicitly.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple, Union

from config import HashConfig
from encoders import Utf8
from hasher import Message, StreamingHasher, to_buffer
from mac import HMAC
from wordbuf import MASK32, WordBuffer

BLOCK_WORDS = 16
DIGEST_WORDS = 8
ROUNDS = 14

# Initial chaining value (same as SHA-256).
IV = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

# Leading digits of pi.
K = (
    0x243F6A88, 0x85A308D3, 0x13198A2E, 0x03707344,
    0xA4093822, 0x299F31D0, 0x082EFA98, 0xEC4E6C89,
    0x452821E6, 0x38D01377, 0xBE5466CF, 0x34E90C6C,
    0xC0AC29B7, 0xC97C50DD, 0x3F84D5B5, 0xB5470917,
)

# Message permutations; round r uses row r % 10.
P = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
    (11, 8, 12, 0, 5, 2, 15, 13, 10, 14, 3, 6, 7, 1, 9, 4),
    (7, 9, 3, 1, 13, 12, 11, 14, 2, 6, 5, 10, 4, 0, 15, 8),
    (9, 0, 5, 7, 2, 4, 10, 15, 14, 1, 11, 12, 6, 8, 3, 13),
    (2, 12, 6, 10, 0, 11, 8, 3, 4, 13, 7, 5, 15, 14, 1, 9),
    (12, 5, 1, 15, 14, 13, 4, 10, 0, 7, 6, 3, 9, 2, 8, 11),
    (13, 11, 7, 14, 12, 1, 3, 9, 5, 0, 15, 4, 8, 6, 2, 10),
    (6, 15, 14, 9, 11, 3, 0, 8, 12, 2, 13, 7, 1, 4, 10, 5),
    (10, 2, 8, 4, 7, 6, 1, 5, 15, 11, 9, 14, 3, 12, 13, 0),
)

# (a, b, c, d, e): four columns, then four diagonals; e indexes the P row.
_STEPS = (
    (0, 4, 8, 12, 0),
    (1, 5, 9, 13, 2),
    (2, 6, 10, 14, 4),
    (3, 7, 11, 15, 6),
    (0, 5, 10, 15, 8),
    (1, 6, 11, 12, 10),
    (2, 7, 8, 13, 12),
    (3, 4, 9, 14, 14),
)


def rotr32(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & MASK32


def _g(
    v: List[int],
    m: List[int],
    p: Tuple[int, ...],
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
) -> None:
    """The G mixing function on v[a], v[b], v[c], v[d]."""
    i0 = p[e]
    i1 = p[e + 1]

    va = (v[a] + v[b] + (m[i0] ^ K[i1])) & MASK32
    vd = rotr32(v[d] ^ va, 16)
    vc = (v[c] + vd) & MASK32
    vb = rotr32(v[b] ^ vc, 12)

    va = (va + vb + (m[i1] ^ K[i0])) & MASK32
    vd = rotr32(vd ^ va, 8)
    vc = (vc + vd) & MASK32
    vb = rotr32(vb ^ vc, 7)

    v[a], v[b], v[c], v[d] = va, vb, vc, vd


class Blake256Compressor:
    """BLAKE-256 hooks for StreamingHasher."""

    name = "blake256"
    block_words = BLOCK_WORDS
    digest_words = DIGEST_WORDS

    def __init__(self, config: Optional[HashConfig] = None) -> None:
        self._config = config or HashConfig()
        self._salt = self._config.salt
        self._hash: List[int] = list(IV)
        # Bits of message compressed so far, including the current block.
        self._t = 0

    @property
    def config(self) -> HashConfig:
        return self._config

    def reset(self) -> None:
        self._hash = list(IV)
        self._t = 0

    def hash_block(self, words: List[int], offset: int) -> None:
        h = self._hash
        s = self._salt

        self._t += 512
        t_lo = self._t & MASK32
        t_hi = (self._t >> 32) & MASK32

        v = [
            h[0], h[1], h[2], h[3],
            h[4], h[5], h[6], h[7],
            K[0] ^ s[0], K[1] ^ s[1],
            K[2] ^ s[2], K[3] ^ s[3],
            K[4] ^ t_lo, K[5] ^ t_lo,
            K[6] ^ t_hi, K[7] ^ t_hi,
        ]
        m = words[offset : offset + BLOCK_WORDS]

        for r in range(ROUNDS):
            p = P[r % 10]
            for a, b, c, d, e in _STEPS:
                _g(v, m, p, a, b, c, d, e)

        for i in range(8):
            h[i] ^= s[i % 4] ^ v[i] ^ v[i + 8]

    def finalize(
        self, message: WordBuffer, length: int, flush: Callable[[], None]
    ) -> WordBuffer:
        """
        Pad the pending bytes and compress the last block(s).

        Padding is a single 1 bit after the payload, zeros, a 1 bit at the end
        of word 13 of the last block, then the 64-bit message length in bits
        (words 14 and 15). The counter is pre-adjusted so that each final
        block reports the number of message bits it actually carries; a block
        holding only padding reports zero.
        """
        words = message.words
        n_bits_total = length * 8
        n_bits_left = message.sig_bytes * 8

        if n_bits_left:
            self._t -= 512 - n_bits_left
        else:
            self._t = -512

        message.clamp()
        last = ((n_bits_left + 64) >> 9) << 4
        words.extend([0] * (last + BLOCK_WORDS - len(words)))

        words[n_bits_left >> 5] |= 0x80 << (24 - n_bits_left % 32)
        words[last + 13] |= 1
        words[last + 14] = (n_bits_total >> 32) & MASK32
        words[last + 15] = n_bits_total & MASK32

        if last:
            # The payload fills the first block; the second is padding only.
            message.sig_bytes = BLOCK_WORDS * 4
            flush()
            self._t = -512

        message.sig_bytes = len(words) * 4
        flush()

        return WordBuffer(list(self._hash), DIGEST_WORDS * 4)

    def copy(self) -> "Blake256Compressor":
        clone = Blake256Compressor(self._config)
        clone._hash = list(self._hash)
        clone._t = self._t
        return clone


def create(
    config: Optional[HashConfig] = None, *, salt: object = None
) -> StreamingHasher:
    """
    New BLAKE-256 engine, ready for `update()`.

    Args:
        config: hashing parameters; defaults to an all-zero salt.
        salt: shortcut for `HashConfig.build(salt)` when `config` is omitted.

    Raises:
        InvalidSaltError: if `salt` is not four 32-bit words.
    """
    if config is None:
        config = HashConfig.build(salt)
    return StreamingHasher(Blake256Compressor(config))


def _text_to_buffer(message: Union[str, Message]) -> WordBuffer:
    if isinstance(message, str):
        return Utf8.parse(message)
    return to_buffer(message)


def blake256(
    message: Union[str, Message], config: Optional[HashConfig] = None
) -> WordBuffer:
    """One-shot BLAKE-256; text is hashed as its UTF-8 bytes."""
    return create(config).compute(_text_to_buffer(message))


def hmac_blake256(
    message: Union[str, Message],
    key: Union[str, Message],
    config: Optional[HashConfig] = None,
) -> WordBuffer:
    """One-shot HMAC-BLAKE256; text message and key are hashed as UTF-8."""
    return HMAC(lambda: create(config), _text_to_buffer(key)).compute(
        _text_to_buffer(message)
    )
