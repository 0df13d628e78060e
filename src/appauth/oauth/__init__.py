"""Token endpoint response validation core.

This module provides:
- Response gatekeeping (status, WWW-Authenticate challenges, OAuth error bodies)
- Token body validation
- Compact ID Token decoding and claims validation

Signatures are not verified. The ID Token is received directly from the
token endpoint over TLS, so only its structure and claims are checked.
"""

from appauth.oauth.challenges import (
    WWWAuthenticateChallenge,
    parse_challenge_header,
    parse_www_authenticate_challenges,
)
from appauth.oauth.compact import (
    JweDecryptFunction,
    ParsedJWT,
    decode_compact_jwt,
)
from appauth.oauth.models import (
    AuthorizationServer,
    Client,
    TokenEndpointResponse,
)
from appauth.oauth.processing import (
    get_validated_id_token_claims,
    process_authorization_code_oauth2_response,
    process_generic_access_token_response,
)

__all__ = [
    # Models
    "AuthorizationServer",
    "Client",
    "TokenEndpointResponse",
    # Processing
    "get_validated_id_token_claims",
    "process_authorization_code_oauth2_response",
    "process_generic_access_token_response",
    # Compact tokens
    "JweDecryptFunction",
    "ParsedJWT",
    "decode_compact_jwt",
    # Challenges
    "WWWAuthenticateChallenge",
    "parse_challenge_header",
    "parse_www_authenticate_challenges",
]
