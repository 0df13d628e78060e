"""Unit tests for the base64url codec."""

from __future__ import annotations

import pytest

from appauth.exceptions import ERR_INVALID_ARG_VALUE, InvalidArgumentError
from appauth.oauth import base64url


class TestEncode:
    """Tests for base64url.encode."""

    def test_uses_url_safe_alphabet_without_padding(self) -> None:
        """Given bytes that map to + and / in standard base64, uses - and _ without =."""
        # Act
        result = base64url.encode(b"\xfb\xff")

        # Assert
        assert result == "-_8"

    def test_empty_input(self) -> None:
        """Given empty bytes, returns empty string."""
        assert base64url.encode(b"") == ""


class TestDecode:
    """Tests for base64url.decode."""

    @pytest.mark.parametrize("value", ["-_8", "-_8=", " -_\n8 "])
    def test_accepts_unpadded_padded_and_whitespace(self, value: str) -> None:
        """Given unpadded, padded or whitespace-wrapped input, decodes the same bytes."""
        assert base64url.decode(value) == b"\xfb\xff"

    def test_decodes_encoded_json(self) -> None:
        """Given an encoded JSON header, returns the original bytes."""
        # Arrange
        original = b'{"alg":"RS256","typ":"JWT"}'

        # Act
        result = base64url.decode(base64url.encode(original))

        # Assert
        assert result == original

    @pytest.mark.parametrize("value", ["ab+c", "ab/c", "a.b", "abc=d", "abc==="])
    def test_rejects_characters_outside_alphabet(self, value: str) -> None:
        """Given standard base64 or stray characters, raises InvalidArgumentError."""
        # Act & Assert
        with pytest.raises(InvalidArgumentError) as exc_info:
            base64url.decode(value)

        assert exc_info.value.code == ERR_INVALID_ARG_VALUE

    def test_rejects_impossible_length(self) -> None:
        """Given a single character, raises InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            base64url.decode("a")

    def test_error_is_a_type_error(self) -> None:
        """Given invalid input, the error is also catchable as TypeError."""
        with pytest.raises(TypeError):
            base64url.decode("***")
