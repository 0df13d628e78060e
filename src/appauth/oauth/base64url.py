"""Base64URL codec (RFC 4648 section 5, unpadded)."""

from __future__ import annotations

__all__ = ["decode", "encode"]

import base64
import binascii
import re

from appauth.exceptions import ERR_INVALID_ARG_VALUE, InvalidArgumentError

_WHITESPACE = re.compile(r"\s+")
_B64URL = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def encode(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode(value: str) -> bytes:
    """Decode URL-safe base64, with or without padding.

    Whitespace is ignored.

    Raises:
        InvalidArgumentError: If the input is not correctly encoded.
    """
    cleaned = _WHITESPACE.sub("", value)
    if not _B64URL.fullmatch(cleaned):
        raise InvalidArgumentError(
            "The input to be decoded is not correctly encoded.",
            code=ERR_INVALID_ARG_VALUE,
        )

    unpadded = cleaned.rstrip("=")
    try:
        return base64.urlsafe_b64decode(unpadded + "=" * (-len(unpadded) % 4))
    except (binascii.Error, ValueError) as e:
        raise InvalidArgumentError(
            "The input to be decoded is not correctly encoded.",
            code=ERR_INVALID_ARG_VALUE,
        ) from e
