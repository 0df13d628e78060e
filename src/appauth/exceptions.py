"""Custom exceptions for appauth.

This module contains all custom exceptions used throughout the package.
Every token endpoint processing failure derives from OAuthError and carries
a machine-readable ``code`` plus a ``context`` dict with the diagnostic data
(claims, header, expected value, computed "now", tolerance, response).

Caller errors (programmer mistakes, never retried):
    - InvalidArgumentError: Malformed input to a public function

Response errors (server sent something unusable):
    - ParseError: Malformed JSON or base64url
    - MalformedResponseError: Structurally invalid protocol response
    - WWWAuthenticateChallengeError: Server presented an authentication challenge
    - ResponseBodyError: Server returned a structured OAuth error body
    - UnconformantStatusError: Non-200 status without an OAuth error body

ID Token errors:
    - ClaimMismatchError: Claim or algorithm differs from the expected value
    - TimestampViolationError: exp, nbf or auth_time freshness check failed
    - UnsupportedOperationError: JWE without decrypt hook, crit extensions,
      or no algorithm policy configured

Usage:
    from appauth.exceptions import ClaimMismatchError, ResponseBodyError
"""

from __future__ import annotations

__all__ = [
    "ERR_INVALID_ARG_TYPE",
    "ERR_INVALID_ARG_VALUE",
    "AuthorizationCallbackError",
    "ClaimMismatchError",
    "ConfigurationError",
    "InvalidArgumentError",
    "MalformedResponseError",
    "OAuthError",
    "ParseError",
    "RESPONSE_IS_NOT_JSON",
    "ResponseBodyError",
    "SecretNotFoundError",
    "SecretsProvisioningError",
    "TimestampViolationError",
    "UnconformantStatusError",
    "UnsupportedOperationError",
    "WWWAuthenticateChallengeError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from appauth.oauth.challenges import WWWAuthenticateChallenge

ERR_INVALID_ARG_TYPE = "ERR_INVALID_ARG_TYPE"
ERR_INVALID_ARG_VALUE = "ERR_INVALID_ARG_VALUE"

# Alternate code for MalformedResponseError when the content-type is wrong
RESPONSE_IS_NOT_JSON = "OAUTH_RESPONSE_IS_NOT_JSON"


# =============================================================================
# Base
# =============================================================================


class OAuthError(Exception):
    """Base exception for token endpoint response processing.

    Attributes:
        code: Machine-readable error code. Subclasses define a default,
            individual raises may override it.
        message: Human-readable description.
        context: Diagnostic data for logging or display.
    """

    code: str = "OAUTH_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


# =============================================================================
# Caller Errors
# =============================================================================


class InvalidArgumentError(OAuthError, TypeError):
    """A public function was called with a malformed argument.

    Raised when:
    - The response is not an httpx.Response
    - The authorization server or client is not a model instance
    - A required string is empty, or a number is negative or non-finite
    - The response body has already been consumed
    - A base64url value contains characters outside the alphabet

    Always a programmer error. Code is ERR_INVALID_ARG_TYPE for wrong types
    and ERR_INVALID_ARG_VALUE for wrong values.
    """

    code = ERR_INVALID_ARG_TYPE


# =============================================================================
# Response Errors
# =============================================================================


class ParseError(OAuthError):
    """Malformed JSON or base64url in a response body or token segment."""

    code = "OAUTH_PARSE_ERROR"


class MalformedResponseError(OAuthError):
    """Structurally invalid protocol response.

    Raised when:
    - Content-type is not application/json (code OAUTH_RESPONSE_IS_NOT_JSON)
    - JSON body or JWT segment is not a top level object
    - A required member is missing or has the wrong type
    - The compact token has the wrong number of segments
    """

    code = "OAUTH_INVALID_RESPONSE"


class WWWAuthenticateChallengeError(OAuthError):
    """Server responded with a challenge in the WWW-Authenticate header.

    Attributes:
        challenges: Parsed challenges in header order.
        response: The original response for caller inspection.
        status: HTTP status code of the response.
    """

    code = "OAUTH_WWW_AUTHENTICATE_CHALLENGE"

    def __init__(
        self,
        message: str,
        *,
        challenges: list["WWWAuthenticateChallenge"],
        response: "httpx.Response",
    ) -> None:
        super().__init__(message, context={"challenges": challenges})
        self.challenges = challenges
        self.response = response
        self.status = response.status_code


class ResponseBodyError(OAuthError):
    """Server responded with an OAuth error object in the response body.

    Attributes:
        error: The OAuth "error" code (e.g. "invalid_grant").
        error_description: Optional human-readable description from the server.
        body: The full parsed error object.
        response: The original response.
        status: HTTP status code of the response.
    """

    code = "OAUTH_RESPONSE_BODY_ERROR"

    def __init__(
        self,
        message: str,
        *,
        body: dict[str, Any],
        response: "httpx.Response",
    ) -> None:
        super().__init__(message, context={"body": body})
        self.body = body
        self.error: str = body["error"]
        description = body.get("error_description")
        self.error_description: str | None = description if isinstance(description, str) else None
        self.response = response
        self.status = response.status_code


class UnconformantStatusError(OAuthError):
    """Non-200 status code without a structured OAuth error body."""

    code = "OAUTH_RESPONSE_IS_NOT_CONFORM"

    def __init__(self, message: str, *, response: "httpx.Response") -> None:
        super().__init__(message, context={"status": response.status_code})
        self.response = response
        self.status = response.status_code


# =============================================================================
# ID Token Errors
# =============================================================================


class ClaimMismatchError(OAuthError):
    """A JWT claim or header parameter does not match the expected value.

    Covers issuer, audience, authorized party, nonce and signing algorithm.
    Context carries ``claim``, ``expected`` and the full ``claims`` (or
    ``header`` for algorithm mismatches, with the policy ``reason``).
    """

    code = "OAUTH_JWT_CLAIM_COMPARISON_FAILED"

    @property
    def claim(self) -> str | None:
        """Name of the claim that failed the comparison."""
        return self.context.get("claim")

    @property
    def reason(self) -> str | None:
        """Which policy source produced the expected value (algorithm checks)."""
        return self.context.get("reason")


class TimestampViolationError(OAuthError):
    """exp, nbf or auth_time/max_age check failed.

    Context carries ``claim``, ``claims``, the computed ``now`` and the
    ``tolerance`` used.
    """

    code = "OAUTH_JWT_TIMESTAMP_CHECK_FAILED"

    @property
    def claim(self) -> str | None:
        """Name of the timestamp claim that failed."""
        return self.context.get("claim")


class UnsupportedOperationError(OAuthError):
    """The response requires a capability that is not configured or supported."""

    code = "OAUTH_UNSUPPORTED_OPERATION"


# =============================================================================
# Orchestration, Configuration and Provisioning Errors
# =============================================================================


class AuthorizationCallbackError(OAuthError):
    """Authorization callback request cannot be completed.

    Raised when:
    - The callback carries an "error" parameter
    - The "state" parameter is missing or does not match the stored value
    - The "iss" parameter does not match the authorization server
    - The "code" parameter is missing
    - The token response carries no ID Token to identify the account
    """

    code = "OAUTH_AUTHORIZATION_CALLBACK"


class ConfigurationError(Exception):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist or cannot be read
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    - A required app secret is not available
    """


class SecretNotFoundError(ConfigurationError):
    """A requested app secret is not set in the environment."""

    def __init__(self, name: str, env_var: str) -> None:
        super().__init__(f"Secret {name!r} not found (expected environment variable {env_var})")
        self.name = name
        self.env_var = env_var


class SecretsProvisioningError(Exception):
    """Uploading secrets to the remote secret store failed.

    Attributes:
        status_code: HTTP status returned by the API (None for transport errors).
        messages: Error messages reported by the API.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        messages: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.messages = messages or []
