"""
Decoding of ``bjcloudvod://`` links.

A link is the fixed prefix followed by URL-safe, unpadded base64. The first
decoded byte is a key; every following byte had a small position dependent
offset added to it, which is subtracted again here.
"""

from __future__ import annotations

import base64
import string

from .errors import Base64DecodeError, InvalidUrl

URL_PREFIX = "bjcloudvod://"

_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"
_SYMBOL_VALUES = {symbol: value for value, symbol in enumerate(_ALPHABET)}


def _b64decode_no_pad(text: str) -> bytes:
    """Strict URL-safe base64 decode that refuses padding and stray bits."""
    for offset, symbol in enumerate(text):
        if symbol == "=":
            raise Base64DecodeError("Invalid padding")
        if symbol not in _SYMBOL_VALUES:
            raise Base64DecodeError(f"Invalid symbol {symbol!r}, offset {offset}.")

    remainder = len(text) % 4
    if remainder == 1:
        raise Base64DecodeError("Invalid input length.")

    # The last symbol of a partial quantum carries unused low bits, which
    # must be zero for the encoding to be canonical.
    if remainder:
        unused_mask = 0x0F if remainder == 2 else 0x03
        last = text[-1]
        if _SYMBOL_VALUES[last] & unused_mask:
            raise Base64DecodeError(
                f"Invalid last symbol {last!r}, offset {len(text) - 1}."
            )

    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def decode_bjc_url(url: str) -> str:
    """
    Decode a bjcloudvod URL and return the file URL hidden inside it,
    usually a link to an ev1 video file.

    Each recovered byte becomes the character with the same code point, so
    values above 127 survive unchanged instead of going through UTF-8.
    """
    if not url.startswith(URL_PREFIX):
        raise InvalidUrl(url)

    payload = _b64decode_no_pad(url[len(URL_PREFIX):])
    if not payload:
        raise InvalidUrl(url, "empty payload")

    key = payload[0] % 8
    chars = []
    for i, byte in enumerate(payload[1:]):
        step = (i % 4) * key + (i % 3) + 1
        chars.append(chr((byte - step) & 0xFF))
    return "".join(chars)
