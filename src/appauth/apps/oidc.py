"""Generic OpenID Connect app authorization.

Authorization Code flow with PKCE (S256) and client_secret_post:
1. get_authorize_redirect() builds the authorization URL and returns the
   state, PKCE code_verifier and scope as session storage values
2. handle_authorization_callback() checks the callback parameters (error,
   state, iss, code), exchanges the code at the token endpoint and validates
   the response with process_authorization_code_oauth2_response()

Any failure aborts the flow; no AuthorizationResult is produced.
"""

from __future__ import annotations

__all__ = ["OIDCAppAuth"]

import hashlib
import secrets
from pathlib import Path

import httpx

from appauth.apps.types import (
    AppAuthConfig,
    AuthorizationResult,
    AuthorizeRedirect,
    RequestAppSecretsFunction,
    SessionStorageValues,
)
from appauth.config import AppConfig, OIDCAppSettings
from appauth.constants import OAUTH_CLIENT_TIMEOUT_SECONDS, PKCE_CODE_VERIFIER_BYTES, STATE_BYTES
from appauth.exceptions import AuthorizationCallbackError
from appauth.oauth import base64url, clock
from appauth.oauth.compact import JweDecryptFunction
from appauth.oauth.processing import (
    get_validated_id_token_claims,
    process_authorization_code_oauth2_response,
)
from appauth.telemetry.system.system_logger import get_system_logger

_system_logger = get_system_logger()

_OPENID_SCOPE = "openid"


def _pkce_challenge(code_verifier: str) -> str:
    """S256 code challenge (RFC 7636 section 4.2)."""
    return base64url.encode(hashlib.sha256(code_verifier.encode("ascii")).digest())


class OIDCAppAuth(AppAuthConfig):
    """Authorization Code + PKCE flow against one OpenID Provider.

    Secrets CLIENT_ID and CLIENT_SECRET are resolved through the
    get_secrets function passed to each call.
    """

    def __init__(
        self,
        settings: OIDCAppSettings,
        http_client: httpx.AsyncClient | None = None,
        jwe_decrypt: JweDecryptFunction | None = None,
    ) -> None:
        """Initialize the app.

        Args:
            settings: App, provider and client policy configuration.
            http_client: Optional httpx client (for testing).
            jwe_decrypt: Hook for encrypted ID Tokens.
        """
        self._settings = settings
        self._http_client = http_client
        self._jwe_decrypt = jwe_decrypt

    @classmethod
    def from_config_file(
        cls,
        config_path: Path,
        http_client: httpx.AsyncClient | None = None,
        jwe_decrypt: JweDecryptFunction | None = None,
    ) -> OIDCAppAuth:
        """Create an app from a JSON config file.

        Raises:
            ConfigurationError: If the file is missing or invalid.
        """
        return cls(OIDCAppSettings.load_from_file(config_path), http_client=http_client, jwe_decrypt=jwe_decrypt)

    @property
    def app_config(self) -> AppConfig:
        return self._settings.app

    async def get_authorize_redirect(
        self,
        redirect_uri: str,
        get_secrets: RequestAppSecretsFunction,
        scopes: list[str] | None,
    ) -> AuthorizeRedirect:
        """Build the authorization URL with a fresh state and PKCE verifier."""
        app_secrets = await get_secrets({"CLIENT_ID": None})

        requested = list(scopes if scopes is not None else self._settings.app.default_scopes)
        if _OPENID_SCOPE not in requested:
            requested.insert(0, _OPENID_SCOPE)
        scope = " ".join(requested)

        state = base64url.encode(secrets.token_bytes(STATE_BYTES))
        code_verifier = base64url.encode(secrets.token_bytes(PKCE_CODE_VERIFIER_BYTES))

        url = httpx.URL(self._settings.provider.authorization_endpoint).copy_merge_params(
            {
                "response_type": "code",
                "client_id": app_secrets["CLIENT_ID"],
                "redirect_uri": redirect_uri,
                "scope": scope,
                "state": state,
                "code_challenge": _pkce_challenge(code_verifier),
                "code_challenge_method": "S256",
            }
        )

        return AuthorizeRedirect(
            url=str(url),
            session_storage_values={
                "state": state,
                "code_verifier": code_verifier,
                "scope": scope,
            },
        )

    async def handle_authorization_callback(
        self,
        request_url: str,
        original_redirect_uri: str,
        session_storage_values: SessionStorageValues | None,
        get_secrets: RequestAppSecretsFunction,
    ) -> AuthorizationResult:
        """Validate the callback, exchange the code and map the result.

        Raises:
            AuthorizationCallbackError: Error parameter, state or issuer
                mismatch, missing code or missing ID Token.
            OAuthError: Any token endpoint response validation failure.
        """
        params = httpx.URL(request_url).params
        stored = session_storage_values or {}
        expected_state = stored.get("state")
        code_verifier = stored.get("code_verifier")

        if "error" in params:
            raise self._reject(
                f"authorization server returned error {params['error']!r}",
                error=params["error"],
                error_description=params.get("error_description"),
            )

        state = params.get("state")
        if not expected_state or not code_verifier:
            raise self._reject("missing session storage values for the authorization callback")
        if state is None or not secrets.compare_digest(state.encode(), expected_state.encode()):
            raise self._reject('unexpected "state" parameter in the authorization callback')

        issuer = self._settings.provider.issuer
        if "iss" in params and params["iss"] != issuer:
            raise self._reject('unexpected "iss" parameter in the authorization callback', expected=issuer)

        code = params.get("code")
        if not code:
            raise self._reject('missing "code" parameter in the authorization callback')

        app_secrets = await get_secrets({"CLIENT_ID": None, "CLIENT_SECRET": None})
        response = await self._request_tokens(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": original_redirect_uri,
                "code_verifier": code_verifier,
                "client_id": app_secrets["CLIENT_ID"],
                "client_secret": app_secrets["CLIENT_SECRET"],
            }
        )

        token_response = await process_authorization_code_oauth2_response(
            self._settings.authorization_server(),
            self._settings.client(app_secrets["CLIENT_ID"]),
            response,
            jwe_decrypt=self._jwe_decrypt,
        )

        claims = get_validated_id_token_claims(token_response)
        if claims is None:
            raise self._reject("token endpoint response did not include an ID Token")

        email = claims.get("email")
        expires_at = None
        if token_response.expires_in is not None:
            expires_at = clock.epoch_time() + int(token_response.expires_in)

        _system_logger.info(
            {
                "event": "authorization_completed",
                "message": f"Authorization completed for {self._settings.app.display_name}",
                "provider": self._settings.app.provider,
            }
        )

        return AuthorizationResult(
            provider_account_id=claims["sub"],
            access_token=token_response.access_token,
            email=email if isinstance(email, str) else None,
            type="oidc",
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=expires_at,
            id_token=token_response.id_token,
            scope=token_response.scope if token_response.scope is not None else stored.get("scope") or "",
        )

    async def _request_tokens(self, data: dict[str, str]) -> httpx.Response:
        """POST the token request.

        Raises:
            AuthorizationCallbackError: On transport failure.
        """
        client = self._http_client or httpx.AsyncClient(timeout=OAUTH_CLIENT_TIMEOUT_SECONDS)
        owns_client = self._http_client is None

        try:
            return await client.post(
                self._settings.provider.token_endpoint,
                data=data,
                headers={"accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AuthorizationCallbackError(f"HTTP error during token request: {e}") from e
        finally:
            if owns_client:
                await client.aclose()

    def _reject(self, message: str, **context: str | None) -> AuthorizationCallbackError:
        _system_logger.warning(
            {
                "event": "authorization_callback_rejected",
                "message": message,
                "provider": self._settings.app.provider,
                **context,
            }
        )
        return AuthorizationCallbackError(message, context=context)
