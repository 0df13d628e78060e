"""Token endpoint response body validation.

Turns the parsed JSON body of a 200 token endpoint response into a
TokenEndpointResponse. Handles the standard OAuth 2.0 token response fields:
- access_token (required)
- token_type (required, lowercased, unexpected values only warn)
- expires_in (optional, numeric strings are coerced)
- refresh_token, scope, id_token (optional)

Any other member is kept in ``extra``. The ID Token is only type-checked
here; claim validation happens in appauth.oauth.processing.
"""

from __future__ import annotations

__all__ = ["parse_token_response"]

import math
from typing import Any

from appauth.constants import SUPPORTED_TOKEN_TYPES
from appauth.exceptions import MalformedResponseError
from appauth.oauth.models import TokenEndpointResponse
from appauth.oauth.validation import assert_number, assert_string
from appauth.telemetry.system.system_logger import get_system_logger

_system_logger = get_system_logger()

_KNOWN_MEMBERS = frozenset(
    {"access_token", "token_type", "expires_in", "refresh_token", "scope", "id_token"}
)


def _coerce_expires_in(value: Any, body: dict[str, Any]) -> int | float:
    """Return expires_in as a number, parsing numeric strings."""
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError as e:
            raise MalformedResponseError(
                '"response" body "expires_in" property must be a number',
                context={"body": body},
            ) from e
        if math.isfinite(parsed) and parsed.is_integer():
            value = int(parsed)
        else:
            value = parsed

    assert_number(value, True, '"response" body "expires_in" property', MalformedResponseError, {"body": body})
    return value


def parse_token_response(body: dict[str, Any]) -> TokenEndpointResponse:
    """Validate a token endpoint response body.

    Args:
        body: Top level JSON object from the token endpoint.

    Returns:
        TokenEndpointResponse with token_type lowercased and expires_in
        coerced to a number.

    Raises:
        MalformedResponseError: If a member is missing or has the wrong type.
    """
    context = {"body": body}

    access_token = body.get("access_token")
    assert_string(access_token, '"response" body "access_token" property', MalformedResponseError, context)

    token_type = body.get("token_type")
    assert_string(token_type, '"response" body "token_type" property', MalformedResponseError, context)
    token_type = token_type.lower()

    if token_type not in SUPPORTED_TOKEN_TYPES:
        _system_logger.warning(
            {
                "event": "unexpected_token_type",
                "message": f"Token endpoint returned unexpected token_type {token_type!r}",
                "token_type": token_type,
            }
        )

    expires_in = None
    if "expires_in" in body:
        expires_in = _coerce_expires_in(body["expires_in"], body)

    refresh_token = body.get("refresh_token")
    if "refresh_token" in body:
        assert_string(refresh_token, '"response" body "refresh_token" property', MalformedResponseError, context)

    scope = body.get("scope")
    if "scope" in body and not isinstance(scope, str):
        raise MalformedResponseError('"response" body "scope" property must be a string', context=context)

    id_token = body.get("id_token")
    if "id_token" in body:
        assert_string(id_token, '"response" body "id_token" property', MalformedResponseError, context)

    return TokenEndpointResponse(
        access_token=access_token,
        token_type=token_type,
        expires_in=expires_in,
        refresh_token=refresh_token,
        scope=scope,
        id_token=id_token,
        extra={key: value for key, value in body.items() if key not in _KNOWN_MEMBERS},
    )
