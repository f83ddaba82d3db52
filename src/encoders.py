"""
Text encoders for word buffers.

Each encoder converts between a `WordBuffer` and a `str`:
- Hex: two lowercase hex digits per byte.
- Latin1: one code point (0..255) per byte.
- Utf8: UTF-8 text.

Decoding failures raise EncodingError; the hashing core never catches them.
"""

from __future__ import annotations

import string

from errors import EncodingError
from wordbuf import WordBuffer

_HEX_DIGITS = frozenset(string.hexdigits)


class Hex:
    @staticmethod
    def stringify(buf: WordBuffer) -> str:
        return buf.to_bytes().hex()

    @staticmethod
    def parse(hex_str: str) -> WordBuffer:
        """
        Convert a hex string to a word buffer.

        Raises:
            EncodingError: on odd length or a non-hex character.
        """
        if len(hex_str) % 2:
            raise EncodingError(f"Hex string has odd length: {len(hex_str)}")
        bad = next((c for c in hex_str if c not in _HEX_DIGITS), None)
        if bad is not None:
            raise EncodingError(f"Invalid hex character: {bad!r}")
        return WordBuffer.from_bytes(bytes.fromhex(hex_str))


class Latin1:
    @staticmethod
    def stringify(buf: WordBuffer) -> str:
        return buf.to_bytes().decode("latin-1")

    @staticmethod
    def parse(latin1_str: str) -> WordBuffer:
        try:
            raw = latin1_str.encode("latin-1")
        except UnicodeEncodeError as exc:
            raise EncodingError(
                f"Character outside Latin-1 at position {exc.start}"
            ) from exc
        return WordBuffer.from_bytes(raw)


class Utf8:
    @staticmethod
    def stringify(buf: WordBuffer) -> str:
        try:
            return buf.to_bytes().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Malformed UTF-8 at byte {exc.start}") from exc

    @staticmethod
    def parse(utf8_str: str) -> WordBuffer:
        try:
            raw = utf8_str.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise EncodingError(
                f"Unencodable character at position {exc.start}"
            ) from exc
        return WordBuffer.from_bytes(raw)
