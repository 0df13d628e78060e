"""Token endpoint response processing entry points.

process_authorization_code_oauth2_response is the main entry point:

    token_response = await process_authorization_code_oauth2_response(
        authorization_server, client, response
    )
    claims = get_validated_id_token_claims(token_response)

Flow: response gatekeeping -> token body validation -> (ID Token present)
compact decoding -> claims pipeline -> authorization code post-checks.

Validated ID Token claims are never put into the TokenEndpointResponse. They
are kept in a weak side-table keyed by the response object and read with
get_validated_id_token_claims. The entry exists only once every check passed
and disappears together with the response object.
"""

from __future__ import annotations

__all__ = [
    "assert_authorization_server",
    "assert_client",
    "get_validated_id_token_claims",
    "process_authorization_code_oauth2_response",
    "process_generic_access_token_response",
]

import weakref
from functools import partial
from typing import Any, Iterable

from appauth.constants import DEFAULT_ID_TOKEN_SIGNING_ALG
from appauth.exceptions import InvalidArgumentError
from appauth.oauth.claims import (
    reject_nonce,
    required_id_token_claims,
    run_claim_checks,
    validate_audience,
    validate_auth_time,
    validate_authorized_party,
    validate_issuer,
    validate_max_age,
    validate_presence,
)
from appauth.oauth.compact import JweDecryptFunction, ParsedJWT, check_signing_algorithm, decode_compact_jwt
from appauth.oauth.models import AuthorizationServer, Client, TokenEndpointResponse
from appauth.oauth.response import read_token_endpoint_body
from appauth.oauth.token_response import parse_token_response
from appauth.oauth.validation import assert_number, assert_string

_validated_claims: weakref.WeakKeyDictionary[TokenEndpointResponse, dict[str, Any]] = weakref.WeakKeyDictionary()


def assert_authorization_server(authorization_server: Any) -> None:
    """Raise InvalidArgumentError unless given a usable AuthorizationServer."""
    if not isinstance(authorization_server, AuthorizationServer):
        raise InvalidArgumentError('"as" must be an AuthorizationServer instance')
    assert_string(authorization_server.issuer, '"as.issuer"')


def assert_client(client: Any) -> None:
    """Raise InvalidArgumentError unless given a usable Client."""
    if not isinstance(client, Client):
        raise InvalidArgumentError('"client" must be a Client instance')
    assert_string(client.client_id, '"client.client_id"')
    if client.default_max_age is not None:
        assert_number(client.default_max_age, True, '"client.default_max_age"')


def get_validated_id_token_claims(token_response: TokenEndpointResponse) -> dict[str, Any] | None:
    """Return the validated ID Token claims for a processed response.

    Args:
        token_response: Result of one of the processing entry points.

    Returns:
        A copy of the claims, or None if the response carried no ID Token.
    """
    claims = _validated_claims.get(token_response)
    return dict(claims) if claims is not None else None


async def _process_generic(
    authorization_server: AuthorizationServer,
    client: Client,
    response: Any,
    additional_required_id_token_claims: Iterable[str] | None,
    jwe_decrypt: JweDecryptFunction | None,
) -> tuple[TokenEndpointResponse, ParsedJWT | None]:
    """Shared pipeline. Does not touch the side-table."""
    assert_authorization_server(authorization_server)
    assert_client(client)

    body = await read_token_endpoint_body(response)
    token_response = parse_token_response(body)

    if token_response.id_token is None:
        return token_response, None

    check_alg = partial(
        check_signing_algorithm,
        client.id_token_signed_response_alg,
        authorization_server.id_token_signing_alg_values_supported,
        DEFAULT_ID_TOKEN_SIGNING_ALG,
    )
    parsed = await decode_compact_jwt(
        token_response.id_token,
        check_alg,
        client.clock_skew_seconds,
        client.clock_tolerance_seconds,
        jwe_decrypt,
    )

    parsed = run_claim_checks(
        parsed,
        [
            partial(validate_presence, required_id_token_claims(client, additional_required_id_token_claims)),
            partial(validate_issuer, authorization_server),
            partial(validate_audience, client.client_id),
            partial(validate_authorized_party, client.client_id),
            validate_auth_time,
        ],
    )
    return token_response, parsed


async def process_generic_access_token_response(
    authorization_server: AuthorizationServer,
    client: Client,
    response: Any,
    additional_required_id_token_claims: Iterable[str] | None = None,
    *,
    jwe_decrypt: JweDecryptFunction | None = None,
) -> TokenEndpointResponse:
    """Validate any token endpoint response (refresh, client credentials, ...).

    Runs gatekeeping, body validation and, when an ID Token is present, the
    claims pipeline. Authorization code post-checks (max age, nonce) are
    not applied.

    Args:
        authorization_server: Expected issuer and algorithm metadata.
        client: Client registration and validation policy.
        response: Raw httpx.Response from the token endpoint.
        additional_required_id_token_claims: Claims required on top of
            aud, exp, iat, iss and sub.
        jwe_decrypt: Hook for encrypted (5-segment) ID Tokens.

    Returns:
        The validated TokenEndpointResponse.

    Raises:
        OAuthError: Any subclass, on the first failing check.
    """
    token_response, parsed = await _process_generic(
        authorization_server, client, response, additional_required_id_token_claims, jwe_decrypt
    )
    if parsed is not None:
        _validated_claims[token_response] = parsed.claims
    return token_response


async def process_authorization_code_oauth2_response(
    authorization_server: AuthorizationServer,
    client: Client,
    response: Any,
    *,
    jwe_decrypt: JweDecryptFunction | None = None,
) -> TokenEndpointResponse:
    """Validate an Authorization Code grant token endpoint response.

    Same as process_generic_access_token_response, plus the ID Token
    post-checks: auth_time freshness against client.default_max_age, and
    rejection of any nonce claim (this flow never sends one).

    Args:
        authorization_server: Expected issuer and algorithm metadata.
        client: Client registration and validation policy.
        response: Raw httpx.Response from the token endpoint.
        jwe_decrypt: Hook for encrypted (5-segment) ID Tokens.

    Returns:
        The validated TokenEndpointResponse. Use get_validated_id_token_claims
        to read the ID Token claims.

    Raises:
        InvalidArgumentError: Bad arguments or an already consumed body.
        WWWAuthenticateChallengeError: Server presented a challenge.
        ResponseBodyError: OAuth error body.
        UnconformantStatusError: Unexpected status code.
        ParseError: Malformed JSON or base64url.
        MalformedResponseError: Missing or mistyped members or claims.
        ClaimMismatchError: Issuer, audience, azp, nonce or algorithm mismatch.
        TimestampViolationError: exp, nbf or max age violation.
        UnsupportedOperationError: JWE without decrypt hook, or crit header.
    """
    token_response, parsed = await _process_generic(authorization_server, client, response, None, jwe_decrypt)

    if parsed is not None:
        parsed = run_claim_checks(parsed, [partial(validate_max_age, client), reject_nonce])
        _validated_claims[token_response] = parsed.claims

    return token_response
