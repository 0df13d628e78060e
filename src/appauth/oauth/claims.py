"""ID Token claims validation pipeline.

Each check is a pure function taking the parsed token last and returning
it unchanged or raising. Checks are bound to their expectations with
functools.partial and folded in order by run_claim_checks, so the first
failing check aborts the pipeline.

Example:
    checks = [
        partial(validate_presence, required),
        partial(validate_issuer, authorization_server),
        partial(validate_audience, client.client_id),
    ]
    parsed = run_claim_checks(parsed, checks)
"""

from __future__ import annotations

__all__ = [
    "JWT_CLAIM_NAMES",
    "ClaimCheck",
    "reject_nonce",
    "required_id_token_claims",
    "run_claim_checks",
    "validate_audience",
    "validate_auth_time",
    "validate_authorized_party",
    "validate_issuer",
    "validate_max_age",
    "validate_presence",
]

from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from appauth.constants import REQUIRED_ID_TOKEN_CLAIMS
from appauth.exceptions import ClaimMismatchError, MalformedResponseError, TimestampViolationError
from appauth.oauth import clock
from appauth.oauth.compact import ParsedJWT
from appauth.oauth.validation import is_number

if TYPE_CHECKING:
    from appauth.oauth.models import AuthorizationServer, Client

ClaimCheck = Callable[[ParsedJWT], ParsedJWT]

# Human labels used in error messages
JWT_CLAIM_NAMES: dict[str, str] = {
    "aud": "audience",
    "c_hash": "code hash",
    "client_id": "client id",
    "exp": "expiration time",
    "iat": "issued at",
    "iss": "issuer",
    "jti": "jwt id",
    "nonce": "nonce",
    "s_hash": "state hash",
    "sub": "subject",
    "ath": "access token hash",
    "htm": "http method",
    "htu": "http uri",
    "cnf": "confirmation",
    "auth_time": "authentication time",
}


def _label(claim: str) -> str:
    name = JWT_CLAIM_NAMES.get(claim)
    return f'"{claim}" ({name})' if name else f'"{claim}"'


def required_id_token_claims(client: Client, additional: Iterable[str] | None = None) -> list[str]:
    """Build the required claim list for an ID Token.

    aud, exp, iat, iss and sub are always required. auth_time is added when
    the client requires it or declares a default_max_age.
    """
    required = list(REQUIRED_ID_TOKEN_CLAIMS)
    if client.require_auth_time or client.default_max_age is not None:
        required.append("auth_time")
    for claim in additional or ():
        if claim not in required:
            required.append(claim)
    return required


def run_claim_checks(parsed: ParsedJWT, checks: Sequence[ClaimCheck]) -> ParsedJWT:
    """Apply checks in order, stopping at the first that raises."""
    for check in checks:
        parsed = check(parsed)
    return parsed


# =============================================================================
# Pipeline Checks
# =============================================================================


def validate_presence(required: Sequence[str], parsed: ParsedJWT) -> ParsedJWT:
    """Every required claim must be present.

    Raises:
        MalformedResponseError: With the missing claim in context.
    """
    for claim in required:
        if claim not in parsed.claims:
            raise MalformedResponseError(
                f"JWT {_label(claim)} claim missing",
                context={"claims": parsed.claims, "claim": claim},
            )
    return parsed


def validate_issuer(authorization_server: AuthorizationServer, parsed: ParsedJWT) -> ParsedJWT:
    """iss must equal the expected issuer.

    An expected_issuer callable on the authorization server overrides the
    static issuer when it returns a value.

    Raises:
        ClaimMismatchError: If iss differs.
    """
    expected = None
    if authorization_server.expected_issuer is not None:
        expected = authorization_server.expected_issuer(parsed)
    if expected is None:
        expected = authorization_server.issuer

    if parsed.claims.get("iss") != expected:
        raise ClaimMismatchError(
            'unexpected JWT "iss" (issuer) claim value',
            context={"expected": expected, "claims": parsed.claims, "claim": "iss"},
        )
    return parsed


def validate_audience(expected: str, parsed: ParsedJWT) -> ParsedJWT:
    """aud must contain (list) or equal (string) the client id.

    Raises:
        ClaimMismatchError: If the client id is not an audience.
    """
    aud = parsed.claims.get("aud")
    if isinstance(aud, list):
        matches = expected in aud
    else:
        matches = aud == expected

    if not matches:
        raise ClaimMismatchError(
            'unexpected JWT "aud" (audience) claim value',
            context={"expected": expected, "claims": parsed.claims, "claim": "aud"},
        )
    return parsed


def validate_authorized_party(client_id: str, parsed: ParsedJWT) -> ParsedJWT:
    """A multi-valued aud needs an azp naming the client.

    Raises:
        ClaimMismatchError: If azp is missing or differs.
    """
    aud = parsed.claims.get("aud")
    if isinstance(aud, list) and len(aud) != 1:
        if "azp" not in parsed.claims:
            raise ClaimMismatchError(
                'ID Token "aud" (audience) claim includes additional untrusted audiences',
                context={"claims": parsed.claims, "claim": "aud"},
            )
        if parsed.claims["azp"] != client_id:
            raise ClaimMismatchError(
                'unexpected ID Token "azp" (authorized party) claim value',
                context={"expected": client_id, "claims": parsed.claims, "claim": "azp"},
            )
    return parsed


def validate_auth_time(parsed: ParsedJWT) -> ParsedJWT:
    """auth_time, if present, must be a finite number >= 0.

    Raises:
        MalformedResponseError: On a wrong type or negative value.
    """
    if "auth_time" in parsed.claims:
        auth_time = parsed.claims["auth_time"]
        if not is_number(auth_time) or auth_time < 0:
            raise MalformedResponseError(
                'ID Token "auth_time" (authentication time) must be a non-negative number',
                context={"claims": parsed.claims, "claim": "auth_time"},
            )
    return parsed


# =============================================================================
# Authorization Code Post-Checks
# =============================================================================


def validate_max_age(client: Client, parsed: ParsedJWT) -> ParsedJWT:
    """Reject ID Tokens whose authentication is older than default_max_age.

    Raises:
        TimestampViolationError: Too much time elapsed since authentication.
    """
    if client.default_max_age is None:
        return parsed

    now = clock.epoch_time() + client.clock_skew_seconds
    tolerance = client.clock_tolerance_seconds
    auth_time = parsed.claims["auth_time"]

    if auth_time + client.default_max_age < now - tolerance:
        raise TimestampViolationError(
            "too much time has elapsed since the last End-User authentication",
            context={"claims": parsed.claims, "now": now, "tolerance": tolerance, "claim": "auth_time"},
        )
    return parsed


def reject_nonce(parsed: ParsedJWT) -> ParsedJWT:
    """No nonce is sent in this flow, so none may come back.

    Raises:
        ClaimMismatchError: If the ID Token carries a nonce claim.
    """
    if "nonce" in parsed.claims:
        raise ClaimMismatchError(
            'unexpected ID Token "nonce" claim value',
            context={"expected": None, "claims": parsed.claims, "claim": "nonce"},
        )
    return parsed
