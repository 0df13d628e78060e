"""Compact JWT/JWE decoding with structural and timestamp checks.

Decodes the compact serialization of an ID Token:
1. A 5-segment JWE is handed to the configured decrypt hook, which must
   return the inner 3-segment JWS
2. Header and payload are decoded with PyJWT and must be JSON objects
3. The signing algorithm policy runs on the header
4. Registered claim types are checked and exp/nbf compared to "now"

Header and payload segments are decoded with PyJWT without verifying the
signature. The ID Token arrives over the direct TLS channel to the token
endpoint, so only structure and claims are validated.
"""

from __future__ import annotations

__all__ = [
    "JweDecryptFunction",
    "ParsedJWT",
    "check_signing_algorithm",
    "decode_compact_jwt",
]

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence, Union

import jwt
from jwt.api_jws import decode_complete as decode_jws

from appauth.exceptions import (
    ClaimMismatchError,
    MalformedResponseError,
    ParseError,
    TimestampViolationError,
    UnsupportedOperationError,
)
from appauth.oauth import clock
from appauth.oauth.validation import is_json_object, is_number, parse_json

# Receives the compact JWE, returns the compact JWS inside it (sync or async)
JweDecryptFunction = Callable[[str], Union[str, Awaitable[str]]]


@dataclass
class ParsedJWT:
    """Decoded compact token.

    Attributes:
        header: JOSE header parameters (always includes a string "alg").
        claims: JWT claims set.
        raw: The compact JWS that was decoded (after decryption, if any).
    """

    header: dict[str, Any]
    claims: dict[str, Any]
    raw: str


def check_signing_algorithm(
    client: str | Sequence[str] | None,
    issuer: Sequence[str] | None,
    fallback: str | Sequence[str] | None,
    header: dict[str, Any],
) -> None:
    """Enforce the JWS "alg" policy.

    If configured, the algorithm must be the client's. If not configured,
    it must be one the authorization server advertises. If the server
    advertises nothing, the fallback applies. Exactly one source is used,
    in that order.

    Args:
        client: Client-registered algorithm or algorithms.
        issuer: Algorithms from authorization server metadata.
        fallback: Default algorithm or algorithms.
        header: Decoded JOSE header.

    Raises:
        ClaimMismatchError: If "alg" is not accepted by the applicable source.
        UnsupportedOperationError: If no source is configured at all.
    """
    alg = header.get("alg")

    if client is not None:
        accepted = alg == client if isinstance(client, str) else alg in client
        if not accepted:
            raise _alg_mismatch(header, client, "client configuration")
        return

    if issuer is not None:
        if alg not in issuer:
            raise _alg_mismatch(header, issuer, "authorization server metadata")
        return

    if fallback is not None:
        accepted = alg == fallback if isinstance(fallback, str) else alg in fallback
        if not accepted:
            raise _alg_mismatch(header, fallback, "default value")
        return

    raise UnsupportedOperationError(
        'missing client or server configuration to verify used JWT "alg" header parameter',
        context={"client": client, "issuer": issuer, "fallback": fallback},
    )


def _alg_mismatch(header: dict[str, Any], expected: Any, reason: str) -> ClaimMismatchError:
    return ClaimMismatchError(
        'unexpected JWT "alg" header parameter',
        context={"header": header, "expected": expected, "reason": reason, "claim": "alg"},
    )


def _decode_header(jws: str) -> dict[str, Any]:
    """Decode the JOSE header without verifying the signature."""
    try:
        return jwt.get_unverified_header(jws)
    except jwt.DecodeError as e:
        if "must be a json object" in str(e):
            raise MalformedResponseError("JWT Header must be a top level object", context={"jwt": jws}) from e
        raise ParseError("failed to parse JWT Header as base64url encoded JSON") from e
    except jwt.InvalidTokenError as e:
        raise MalformedResponseError(f"invalid JWT Header: {e}", context={"jwt": jws}) from e


def _decode_payload(jws: str) -> Any:
    """Decode the payload segment without verifying the signature."""
    try:
        payload = decode_jws(jws, options={"verify_signature": False})["payload"]
    except jwt.DecodeError as e:
        raise ParseError("failed to parse JWT Payload as base64url encoded JSON") from e
    return parse_json(payload, "JWT Payload base64url encoded")


async def decode_compact_jwt(
    jws: str,
    check_alg: Callable[[dict[str, Any]], None],
    clock_skew: float,
    clock_tolerance: float,
    jwe_decrypt: JweDecryptFunction | None = None,
) -> ParsedJWT:
    """Decode a compact token and run the structural checks.

    Args:
        jws: Compact JWS (3 segments) or JWE (5 segments).
        check_alg: Algorithm policy, called with the decoded header.
        clock_skew: Seconds added to the local clock.
        clock_tolerance: Seconds of leeway for exp and nbf.
        jwe_decrypt: Hook turning a compact JWE into a compact JWS.

    Returns:
        ParsedJWT with header, claims and the decoded JWS.

    Raises:
        UnsupportedOperationError: JWE without decrypt hook, or "crit" header.
        MalformedResponseError: Wrong segment count, non-object segments,
            missing "alg", or mistyped registered claims.
        ParseError: Segment is not base64url encoded JSON.
        ClaimMismatchError: Algorithm rejected by check_alg.
        TimestampViolationError: Token expired or not yet valid.
    """
    segments = jws.split(".")

    if len(segments) == 5:
        if jwe_decrypt is None:
            raise UnsupportedOperationError("JWE decryption is not configured", context={"jwt": jws})
        decrypted = jwe_decrypt(jws)
        if inspect.isawaitable(decrypted):
            decrypted = await decrypted
        if not isinstance(decrypted, str):
            raise MalformedResponseError("JWE decryption must produce a compact JWS string")
        jws = decrypted
        segments = jws.split(".")

    if len(segments) != 3:
        raise MalformedResponseError("Invalid JWT", context={"jwt": jws})

    header = _decode_header(jws)

    if not isinstance(header.get("alg"), str):
        raise MalformedResponseError('JWT "alg" header parameter missing', context={"header": header})

    check_alg(header)

    if "crit" in header:
        raise UnsupportedOperationError(
            'no JWT "crit" header parameter extensions are supported',
            context={"header": header},
        )

    claims = _decode_payload(jws)
    if not is_json_object(claims):
        raise MalformedResponseError("JWT Payload must be a top level object", context={"jwt": jws})

    now = clock.epoch_time() + clock_skew

    if "exp" in claims:
        if not is_number(claims["exp"]):
            raise MalformedResponseError(
                'unexpected JWT "exp" (expiration time) claim type', context={"claims": claims}
            )
        if claims["exp"] <= now - clock_tolerance:
            raise TimestampViolationError(
                'unexpected JWT "exp" (expiration time) claim value, '
                "expiration is past current timestamp",
                context={"claims": claims, "now": now, "tolerance": clock_tolerance, "claim": "exp"},
            )

    if "iat" in claims and not is_number(claims["iat"]):
        raise MalformedResponseError('unexpected JWT "iat" (issued at) claim type', context={"claims": claims})

    if "iss" in claims and not isinstance(claims["iss"], str):
        raise MalformedResponseError('unexpected JWT "iss" (issuer) claim type', context={"claims": claims})

    if "nbf" in claims:
        if not is_number(claims["nbf"]):
            raise MalformedResponseError(
                'unexpected JWT "nbf" (not before) claim type', context={"claims": claims}
            )
        if claims["nbf"] > now + clock_tolerance:
            raise TimestampViolationError(
                'unexpected JWT "nbf" (not before) claim value',
                context={"claims": claims, "now": now, "tolerance": clock_tolerance, "claim": "nbf"},
            )

    if "aud" in claims and not isinstance(claims["aud"], (str, list)):
        raise MalformedResponseError('unexpected JWT "aud" (audience) claim type', context={"claims": claims})

    return ParsedJWT(header=header, claims=claims, raw=jws)
