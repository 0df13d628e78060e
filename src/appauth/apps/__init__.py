"""App authorization orchestration.

This module provides:
- The app authorization interface (AppAuthConfig) and its result types
- A generic OpenID Connect implementation (OIDCAppAuth)
- Environment-backed secret resolution (env_secrets_resolver)
"""

from appauth.apps.oidc import OIDCAppAuth
from appauth.apps.secrets import env_secrets_resolver, secret_env_var
from appauth.apps.types import (
    AppAuthConfig,
    AppConfig,
    AuthorizationResult,
    AuthorizeRedirect,
    RequestAppSecretsFunction,
    SessionStorageValues,
)

__all__ = [
    # Interface
    "AppAuthConfig",
    "AppConfig",
    "AuthorizationResult",
    "AuthorizeRedirect",
    "RequestAppSecretsFunction",
    "SessionStorageValues",
    # Implementations
    "OIDCAppAuth",
    # Secrets
    "env_secrets_resolver",
    "secret_env_var",
]
