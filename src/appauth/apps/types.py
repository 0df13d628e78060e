"""Types shared by app authorization implementations.

An app is described by its AppConfig (usable anywhere, no secrets) and
authorized through an AppAuthConfig implementation (server side only).

Flow:
1. get_authorize_redirect() -> redirect the user to AuthorizeRedirect.url,
   persist AuthorizeRedirect.session_storage_values across the redirect
2. User returns to the redirect URI
3. handle_authorization_callback() -> AuthorizationResult
"""

from __future__ import annotations

__all__ = [
    "AppAuthConfig",
    "AppConfig",
    "AuthorizationResult",
    "AuthorizeRedirect",
    "RequestAppSecretsFunction",
    "SessionStorageValues",
]

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from appauth.config import AppConfig

# Receives {"CLIENT_ID": None, ...}, resolves every key to its secret value.
# Actual secrets are stored prefixed, e.g. APP_FIGMA_CLIENT_ID.
RequestAppSecretsFunction = Callable[[dict[str, None]], Awaitable[dict[str, str]]]

SessionStorageValues = dict[str, Optional[str]]


@dataclass(frozen=True)
class AuthorizeRedirect:
    """Where to send the user, and what to remember until the callback.

    Attributes:
        url: Authorization endpoint URL with all query parameters.
        session_storage_values: Values the caller must persist across the
            redirect and hand back to the callback (None if nothing).
    """

    url: str
    session_storage_values: SessionStorageValues | None


@dataclass(frozen=True)
class AuthorizationResult:
    """Normalized result of a completed authorization.

    Attributes:
        provider_account_id: Account id at the provider (OIDC "sub").
        access_token: Access token for the provider API.
        email: Email of the user, if available. Used for deduplication.
        type: "oauth", "oidc" or a provider-specific value.
        token_type: "bearer", "apitoken" or a provider-specific value.
        refresh_token: Refresh token, if issued.
        expires_at: Unix timestamp when the access token expires.
        id_token: Raw ID Token, if issued.
        scope: Space separated granted scopes.
        supplemental_data: Non-sensitive data for the app/tools.
        secret_data: Sensitive data for the app/tools, never sent to an LLM.
    """

    provider_account_id: str
    access_token: str
    email: str | None
    type: str
    token_type: str
    refresh_token: str | None
    expires_at: int | None
    id_token: str | None
    scope: str
    supplemental_data: dict[str, str | None] | None = None
    secret_data: dict[str, str | None] | None = None


class AppAuthConfig(ABC):
    """Server side authorization process for one app."""

    @property
    @abstractmethod
    def app_config(self) -> AppConfig:
        """App metadata."""

    @property
    def use_redirect_and_callback(self) -> bool:
        """Whether the app authorizes through a redirect (False for API key apps)."""
        return True

    @abstractmethod
    async def get_authorize_redirect(
        self,
        redirect_uri: str,
        get_secrets: RequestAppSecretsFunction,
        scopes: list[str] | None,
    ) -> AuthorizeRedirect:
        """Build the authorization redirect.

        Args:
            redirect_uri: Callback URI registered with the provider.
            get_secrets: Resolver for the app's secrets.
            scopes: Requested scopes. Default scopes are used if None.
        """

    @abstractmethod
    async def handle_authorization_callback(
        self,
        request_url: str,
        original_redirect_uri: str,
        session_storage_values: SessionStorageValues | None,
        get_secrets: RequestAppSecretsFunction,
    ) -> AuthorizationResult:
        """Complete the authorization from the callback request.

        Args:
            request_url: Full callback URL including query parameters.
            original_redirect_uri: redirect_uri used for the redirect.
            session_storage_values: Values from get_authorize_redirect.
            get_secrets: Resolver for the app's secrets.

        Raises:
            OAuthError: Any failure aborts the flow. No partial result.
        """
