"""Text normalization between the external course database and the LMS.

The LMS works in UTF-8 text. External databases may hand back legacy
encodings, so values crossing the boundary go through a TextCodec.
"""

from __future__ import annotations

import codecs
from collections.abc import Mapping
from typing import Any

from errors import EncodingError

CANONICAL_ENCODING = "utf-8"


class TextCodec:
    """Convert values between the external encoding and canonical text.

    Both directions are identity when no encoding is configured or the
    configured one is UTF-8 under any alias. Mappings are converted value
    by value; non-text values pass through unchanged.
    """

    def __init__(self, encoding: str | None = None) -> None:
        self.encoding = _canonical_name(encoding)

    @property
    def is_identity(self) -> bool:
        return self.encoding is None or self.encoding == CANONICAL_ENCODING

    def encode(self, value: Any) -> Any:
        """Canonical text -> external encoding (str -> bytes)."""
        if self.is_identity:
            return value
        if isinstance(value, Mapping):
            return {key: self.encode(item) for key, item in value.items()}
        if not isinstance(value, str):
            return value
        try:
            return value.encode(self.encoding)
        except UnicodeEncodeError as exc:
            raise EncodingError(f"Cannot encode {value!r} as {self.encoding}: {exc.reason}") from exc

    def decode(self, value: Any) -> Any:
        """External encoding -> canonical text (bytes -> str)."""
        if self.is_identity:
            return value
        if isinstance(value, Mapping):
            return {key: self.decode(item) for key, item in value.items()}
        if isinstance(value, (bytes, bytearray)):
            return _decode_bytes(bytes(value), self.encoding)
        return value


def lower_keys(row: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of row with every key lower-cased."""
    return {str(key).lower(): value for key, value in row.items()}


def as_text(value: Any) -> str:
    """Convert a decoded column value to str; NULL becomes ""."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return _decode_bytes(bytes(value), CANONICAL_ENCODING)
    return value if isinstance(value, str) else str(value)


def _canonical_name(encoding: str | None) -> str | None:
    if not encoding or not encoding.strip():
        return None
    try:
        name = codecs.lookup(encoding.strip()).name
    except LookupError as exc:
        raise EncodingError(f"Unknown encoding: {encoding}") from exc
    # codecs reports "utf-8" for utf8, UTF_8, U8 and friends.
    return name


def _decode_bytes(raw: bytes, encoding: str) -> str:
    try:
        return raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise EncodingError(f"Cannot decode value as {encoding}: {exc.reason}") from exc
