"""
Word buffer: an array of 32-bit big-endian words with an exact byte length.

- `words` holds unsigned 32-bit ints; byte 0 is the high byte of word 0.
- `sig_bytes` counts the significant bytes; the last word may be partial.
- Bits past `sig_bytes` are undefined until `clamp()` zeroes them.
"""

from __future__ import annotations

import secrets
from typing import List, Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

MASK32 = 0xFFFFFFFF


class WordBuffer:
    """Growable list of 32-bit words plus a significant-byte count."""

    __slots__ = ("words", "sig_bytes")

    def __init__(
        self, words: Optional[List[int]] = None, sig_bytes: Optional[int] = None
    ) -> None:
        self.words: List[int] = words if words is not None else []
        if sig_bytes is None:
            sig_bytes = len(self.words) * 4
        if sig_bytes < 0 or sig_bytes > len(self.words) * 4:
            raise ValueError(
                f"sig_bytes={sig_bytes} does not fit in {len(self.words)} words"
            )
        self.sig_bytes: int = sig_bytes

    # ------------ Construction ------------

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "WordBuffer":
        raw = bytes(data)
        words = [0] * ((len(raw) + 3) // 4)
        for i, b in enumerate(raw):
            words[i >> 2] |= b << (24 - (i % 4) * 8)
        return cls(words, len(raw))

    @classmethod
    def random(cls, n_bytes: int) -> "WordBuffer":
        """Buffer of `n_bytes` bytes from the OS CSPRNG."""
        if n_bytes < 0:
            raise ValueError("n_bytes must be non-negative")
        return cls.from_bytes(secrets.token_bytes(n_bytes))

    # ------------ Operations ------------

    def concat(self, other: "WordBuffer") -> "WordBuffer":
        """
        Append the significant bytes of `other` to this buffer.

        The receiver need not end on a word boundary: every byte of `other`
        is ORed into its lane individually. Returns self for chaining.
        """
        this_words = self.words
        that_words = other.words
        this_sig = self.sig_bytes
        that_sig = other.sig_bytes

        # Clear excess bits so ORing lands on zeroes.
        self.clamp()

        needed = (this_sig + that_sig + 3) // 4
        if len(this_words) < needed:
            this_words.extend([0] * (needed - len(this_words)))

        if this_sig % 4 == 0 and that_sig % 4 == 0:
            # Word-aligned on both sides; copy whole words.
            start = this_sig >> 2
            this_words[start : start + (that_sig >> 2)] = that_words[: that_sig >> 2]
        else:
            for i in range(that_sig):
                byte = (that_words[i >> 2] >> (24 - (i % 4) * 8)) & 0xFF
                this_words[this_sig >> 2] |= byte << (24 - (this_sig % 4) * 8)
                this_sig += 1

        self.sig_bytes = self.sig_bytes + that_sig
        return self

    def clamp(self) -> None:
        """Zero the insignificant bits and drop words past `sig_bytes`."""
        words = self.words
        sig = self.sig_bytes
        n_words = (sig + 3) // 4
        del words[n_words:]
        if sig % 4:
            words[sig >> 2] &= (MASK32 << (32 - (sig % 4) * 8)) & MASK32

    def clone(self) -> "WordBuffer":
        return WordBuffer(list(self.words), self.sig_bytes)

    # ------------ Conversion ------------

    def to_bytes(self) -> bytes:
        words = self.words
        return bytes(
            (words[i >> 2] >> (24 - (i % 4) * 8)) & 0xFF
            for i in range(self.sig_bytes)
        )

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __len__(self) -> int:
        return self.sig_bytes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WordBuffer):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __str__(self) -> str:
        # Hex is the default text form.
        return self.to_bytes().hex()

    def __repr__(self) -> str:
        return f"WordBuffer({self.to_bytes().hex()!r}, sig_bytes={self.sig_bytes})"
