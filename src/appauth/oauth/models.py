"""Models for token endpoint response processing.

AuthorizationServer and Client describe the caller's expectations and are
immutable. TokenEndpointResponse is produced fresh by every successful call.

Example usage:
    as_ = AuthorizationServer(issuer="https://login.example.com")
    client = Client(client_id="my-app", default_max_age=3600)
"""

from __future__ import annotations

__all__ = [
    "AuthorizationServer",
    "Client",
    "TokenEndpointResponse",
]

from dataclasses import dataclass, field
from typing import Annotated, Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from appauth.constants import DEFAULT_CLOCK_SKEW_SECONDS, DEFAULT_CLOCK_TOLERANCE_SECONDS
from appauth.oauth.compact import ParsedJWT


class AuthorizationServer(BaseModel):
    """Authorization server metadata (RFC 8414 subset).

    Unknown metadata members are ignored, so a discovery document can be
    validated directly with ``AuthorizationServer.model_validate(doc)``.

    Attributes:
        issuer: Expected "iss" of ID Tokens.
        id_token_signing_alg_values_supported: Algorithms the server signs
            ID Tokens with. Used when the client registers none.
        authorization_endpoint: Where users are redirected to authorize.
        token_endpoint: Where authorization codes are exchanged.
        expected_issuer: Optional override called with the parsed ID Token.
            A non-None return value replaces ``issuer`` for that validation
            (multi-tenant issuers).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    issuer: str = Field(min_length=1)
    id_token_signing_alg_values_supported: list[str] | None = None
    authorization_endpoint: str | None = None
    token_endpoint: str | None = None
    expected_issuer: Callable[[ParsedJWT], str | None] | None = Field(default=None, exclude=True)


class Client(BaseModel):
    """Client registration and validation policy.

    Attributes:
        client_id: OAuth client identifier, the expected ID Token audience.
        id_token_signed_response_alg: Algorithm(s) the client accepts for
            ID Tokens. Takes priority over server metadata.
        default_max_age: Maximum seconds since end-user authentication.
            Makes "auth_time" a required claim.
        require_auth_time: Require the "auth_time" claim.
        clock_skew_seconds: Signed offset added to the local clock.
        clock_tolerance_seconds: Leeway for exp, nbf and max-age checks.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(min_length=1)
    id_token_signed_response_alg: str | list[str] | None = None
    default_max_age: Annotated[float, Field(ge=0, allow_inf_nan=False)] | None = None
    require_auth_time: bool = False
    clock_skew_seconds: float = Field(default=DEFAULT_CLOCK_SKEW_SECONDS, allow_inf_nan=False)
    clock_tolerance_seconds: float = Field(default=DEFAULT_CLOCK_TOLERANCE_SECONDS, ge=0, allow_inf_nan=False)


@dataclass(eq=False)
class TokenEndpointResponse:
    """Validated token endpoint response body.

    Instances compare and hash by identity: validated ID Token claims are
    attached out-of-band, keyed by the instance (see
    appauth.oauth.processing.get_validated_id_token_claims).

    Attributes:
        access_token: The access token.
        token_type: Lowercased token type ("bearer" or "dpop" expected).
        expires_in: Access token lifetime in seconds.
        refresh_token: Refresh token, if issued.
        scope: Granted scope (may be empty).
        id_token: Compact ID Token, already validated.
        extra: Any other members of the response body.
    """

    access_token: str
    token_type: str
    expires_in: int | float | None = None
    refresh_token: str | None = None
    scope: str | None = None
    id_token: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the response as a JSON-serializable body (no claims)."""
        body: dict[str, Any] = {**self.extra, "access_token": self.access_token, "token_type": self.token_type}
        for name in ("expires_in", "refresh_token", "scope", "id_token"):
            value = getattr(self, name)
            if value is not None:
                body[name] = value
        return body
