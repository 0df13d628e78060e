"""Application-wide constants for appauth.

Constants that define protocol defaults and application behavior.
For per-app settings (issuer, endpoints, client policy), see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    # Token endpoint response processing
    "JSON_CONTENT_TYPE",
    "SUPPORTED_TOKEN_TYPES",
    "DEFAULT_ID_TOKEN_SIGNING_ALG",
    "DEFAULT_CLOCK_SKEW_SECONDS",
    "DEFAULT_CLOCK_TOLERANCE_SECONDS",
    "REQUIRED_ID_TOKEN_CLAIMS",
    # Authorization orchestration
    "OAUTH_CLIENT_TIMEOUT_SECONDS",
    "PKCE_CODE_VERIFIER_BYTES",
    "STATE_BYTES",
    "APP_SECRET_PREFIX",
    # Secrets provisioning
    "DOPPLER_SECRETS_URL",
    "DOPPLER_TIMEOUT_SECONDS",
]

# ============================================================================
# Application Identity
# ============================================================================

APP_NAME: str = "appauth"

# ============================================================================
# Token Endpoint Response Processing
# ============================================================================

# Only media type is compared, parameters such as charset are ignored
JSON_CONTENT_TYPE: str = "application/json"

# Token types this profile expects. Others are tolerated with a warning.
SUPPORTED_TOKEN_TYPES: frozenset[str] = frozenset({"bearer", "dpop"})

# Used when neither the client nor the authorization server names an algorithm
DEFAULT_ID_TOKEN_SIGNING_ALG: str = "RS256"

# Signed offset applied to "now" for all timestamp checks (seconds)
DEFAULT_CLOCK_SKEW_SECONDS: float = 0

# Window around exp/nbf/auth_time checks (seconds)
DEFAULT_CLOCK_TOLERANCE_SECONDS: float = 30

# Claims every ID Token must carry (OIDC Core 1.0 section 2)
REQUIRED_ID_TOKEN_CLAIMS: tuple[str, ...] = ("aud", "exp", "iat", "iss", "sub")

# ============================================================================
# Authorization Orchestration
# ============================================================================

# Timeout for token endpoint requests made by OIDCAppAuth
OAUTH_CLIENT_TIMEOUT_SECONDS: float = 30.0

# 32 random bytes -> 43 char base64url verifier (RFC 7636 minimum length)
PKCE_CODE_VERIFIER_BYTES: int = 32

STATE_BYTES: int = 32

# Secrets resolve from APP_<APP_NAME>_<KEY>, e.g. APP_FIGMA_CLIENT_ID
APP_SECRET_PREFIX: str = "APP_"

# ============================================================================
# Secrets Provisioning
# ============================================================================

DOPPLER_SECRETS_URL: str = "https://api.doppler.com/v3/configs/config/secrets"

DOPPLER_TIMEOUT_SECONDS: float = 30.0
