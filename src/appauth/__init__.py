"""appauth - OAuth 2.0 / OpenID Connect token endpoint response validation.

Validates Authorization Code token endpoint responses (status, challenges,
error bodies, token body and ID Token claims) and provides a generic OIDC
app authorization flow plus a secrets provisioning CLI.
"""

from appauth.oauth import (
    AuthorizationServer,
    Client,
    TokenEndpointResponse,
    get_validated_id_token_claims,
    process_authorization_code_oauth2_response,
    process_generic_access_token_response,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AuthorizationServer",
    "Client",
    "TokenEndpointResponse",
    "get_validated_id_token_claims",
    "process_authorization_code_oauth2_response",
    "process_generic_access_token_response",
]
