"""Binary and base64 encoding of (exponent, modulus) pairs.

Wire layout of a key blob::

    [len(a): 4 bytes, big-endian][a: big-endian magnitude]
    [len(b): 4 bytes, big-endian][b: big-endian magnitude]

Magnitudes are unsigned and minimal, so zero is stored as an empty field and
no sign byte is ever prepended.  The same order is used on encode and decode.
Which field is the exponent and which is the modulus is a caller convention.
"""
from __future__ import annotations

import base64
import binascii
from typing import Tuple

from textbook_rsa.errors import EncodingError

LENGTH_PREFIX_BYTES = 4
_MAX_FIELD_BYTES = (1 << (8 * LENGTH_PREFIX_BYTES)) - 1


def os2ip(data: bytes) -> int:
    """Convert a byte-string into its non-negative integer representation."""

    return int.from_bytes(data, "big", signed=False)


def i2osp(value: int) -> bytes:
    """Convert a non-negative integer into its minimal big-endian byte-string."""

    if value < 0:
        raise EncodingError("Cannot convert negative integers")
    length = (value.bit_length() + 7) // 8
    return value.to_bytes(length, "big") if length > 0 else b""


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str, *, field: str = "value") -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError(f"Invalid base64 value for '{field}'") from exc


def _encode_field(value: int) -> bytes:
    if not isinstance(value, int) or isinstance(value, bool):
        raise EncodingError("Only integers can be encoded")
    magnitude = i2osp(value)
    if len(magnitude) > _MAX_FIELD_BYTES:
        raise EncodingError("Integer too large for a 4-byte length prefix")
    return len(magnitude).to_bytes(LENGTH_PREFIX_BYTES, "big") + magnitude


def _decode_field(data: bytes, offset: int) -> Tuple[int, int]:
    header_end = offset + LENGTH_PREFIX_BYTES
    if header_end > len(data):
        raise EncodingError(f"Truncated length prefix at offset {offset}")
    length = int.from_bytes(data[offset:header_end], "big")
    field_end = header_end + length
    if field_end > len(data):
        raise EncodingError(
            f"Field length {length} exceeds the {len(data) - header_end} remaining byte(s)"
        )
    return os2ip(data[header_end:field_end]), field_end


def encode_pair(a: int, b: int) -> bytes:
    """Pack two non-negative integers into the length-prefixed layout."""

    return _encode_field(a) + _encode_field(b)


def decode_pair(data: bytes) -> Tuple[int, int]:
    """Unpack a blob produced by :func:`encode_pair`."""

    data = bytes(data)
    a, offset = _decode_field(data, 0)
    b, offset = _decode_field(data, offset)
    if offset != len(data):
        raise EncodingError(f"{len(data) - offset} unexpected trailing byte(s)")
    return a, b


def encode_key(a: int, b: int) -> str:
    """Base64 form of :func:`encode_pair`, as stored in key files."""

    return b64encode(encode_pair(a, b))


def decode_key(text: str) -> Tuple[int, int]:
    return decode_pair(b64decode(text, field="key"))


__all__ = [
    "LENGTH_PREFIX_BYTES",
    "os2ip",
    "i2osp",
    "b64encode",
    "b64decode",
    "encode_pair",
    "decode_pair",
    "encode_key",
    "decode_key",
]
