"""WWW-Authenticate challenge parsing (RFC 9110 section 11.6.1).

A challenge header looks like:

    Bearer realm="example", error="invalid_token", DPoP algs="ES256 PS256"

The header is scanned character by character instead of split with regular
expressions, so quoted strings containing commas or escaped quotes stay
intact. A bare token starts a new challenge only at the beginning of the
header or directly after a comma; any other bare token is ignored.
"""

from __future__ import annotations

__all__ = [
    "WWWAuthenticateChallenge",
    "parse_challenge_header",
    "parse_www_authenticate_challenges",
]

import string
from dataclasses import dataclass, field

import httpx

from appauth.exceptions import InvalidArgumentError

# RFC 9110 tchar
_TCHARS: frozenset[str] = frozenset("!#$%&'*+-.^_`|~" + string.ascii_letters + string.digits)
_WHITESPACE: frozenset[str] = frozenset(" \t")


@dataclass
class WWWAuthenticateChallenge:
    """A single authentication challenge.

    Attributes:
        scheme: Lowercased auth scheme (e.g. "bearer", "dpop").
        parameters: Lowercased parameter names to unquoted values,
            in header order.
    """

    scheme: str
    parameters: dict[str, str] = field(default_factory=dict)


def _skip_whitespace(header: str, pos: int) -> int:
    while pos < len(header) and header[pos] in _WHITESPACE:
        pos += 1
    return pos


def _read_token(header: str, pos: int) -> tuple[str, int]:
    start = pos
    while pos < len(header) and header[pos] in _TCHARS:
        pos += 1
    return header[start:pos], pos


def _read_value(header: str, pos: int) -> tuple[str, int]:
    """Read a parameter value: quoted-string or bare token up to , or whitespace."""
    if pos < len(header) and header[pos] == '"':
        pos += 1
        chars: list[str] = []
        while pos < len(header):
            char = header[pos]
            if char == "\\" and pos + 1 < len(header):
                chars.append(header[pos + 1])
                pos += 2
            elif char == '"':
                return "".join(chars), pos + 1
            else:
                chars.append(char)
                pos += 1
        # Unterminated quoted-string runs to end of header
        return "".join(chars), pos

    start = pos
    while pos < len(header) and header[pos] != "," and header[pos] not in _WHITESPACE:
        pos += 1
    return header[start:pos], pos


def parse_challenge_header(header: str) -> list[WWWAuthenticateChallenge]:
    """Parse a WWW-Authenticate header value into challenges.

    Args:
        header: Raw header value.

    Returns:
        Challenges in header order (empty if no scheme is found).
    """
    challenges: list[WWWAuthenticateChallenge] = []
    current: WWWAuthenticateChallenge | None = None
    after_comma = True  # start of header counts as a scheme position
    pos = 0

    while pos < len(header):
        char = header[pos]

        if char == ",":
            after_comma = True
            pos += 1
            continue

        if char in _WHITESPACE:
            pos += 1
            continue

        if char not in _TCHARS:
            # Stray character (e.g. a quote outside a parameter value)
            after_comma = False
            pos += 1
            continue

        token, pos = _read_token(header, pos)
        lookahead = _skip_whitespace(header, pos)

        if lookahead < len(header) and header[lookahead] == "=":
            value, pos = _read_value(header, _skip_whitespace(header, lookahead + 1))
            if current is not None:
                current.parameters[token.lower()] = value
        elif after_comma:
            current = WWWAuthenticateChallenge(scheme=token.lower())
            challenges.append(current)

        after_comma = False

    return challenges


def parse_www_authenticate_challenges(
    response: httpx.Response,
) -> list[WWWAuthenticateChallenge] | None:
    """Parse the WWW-Authenticate header of a response.

    Args:
        response: HTTP response to inspect.

    Returns:
        Parsed challenges, or None if the header is absent or names no scheme.

    Raises:
        InvalidArgumentError: If response is not an httpx.Response.
    """
    if not isinstance(response, httpx.Response):
        raise InvalidArgumentError('"response" must be an instance of httpx.Response')

    header = response.headers.get("www-authenticate")
    if header is None:
        return None

    return parse_challenge_header(header) or None
