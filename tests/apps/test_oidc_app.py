"""Tests for the generic OIDC app authorization flow.

The token endpoint is faked with httpx.MockTransport.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from appauth.apps import OIDCAppAuth, env_secrets_resolver
from appauth.apps.types import AuthorizeRedirect, RequestAppSecretsFunction
from appauth.config import AppConfig, OIDCAppSettings, ProviderConfig
from appauth.exceptions import (
    AuthorizationCallbackError,
    ConfigurationError,
    ResponseBodyError,
    SecretNotFoundError,
)
from appauth.oauth import base64url

ISSUER = "https://login.example.com"
TOKEN_ENDPOINT = f"{ISSUER}/oauth/token"
REDIRECT_URI = "https://app.example.com/callback"

Handler = Callable[[httpx.Request], httpx.Response]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings() -> OIDCAppSettings:
    """Settings for an example provider."""
    return OIDCAppSettings(
        app=AppConfig(
            major_version=1,
            display_name="Example",
            tier1_unique_id="COM_EXAMPLE_APP",
            provider="example",
            default_scopes=["openid", "email"],
        ),
        provider=ProviderConfig(
            issuer=ISSUER,
            authorization_endpoint=f"{ISSUER}/authorize",
            token_endpoint=TOKEN_ENDPOINT,
        ),
    )


@pytest.fixture
def get_secrets() -> RequestAppSecretsFunction:
    """Secrets resolver backed by a fixed environment."""
    return env_secrets_resolver(
        "example",
        {"APP_EXAMPLE_CLIENT_ID": "client-123", "APP_EXAMPLE_CLIENT_SECRET": "s3cret"},
    )


@pytest.fixture
def requests() -> list[httpx.Request]:
    """Requests received by the fake token endpoint."""
    return []


@pytest.fixture
def make_app(settings: OIDCAppSettings, requests: list[httpx.Request]) -> Callable[[Handler], OIDCAppAuth]:
    """Build an app whose HTTP client answers with the given handler."""

    def _make(handler: Handler) -> OIDCAppAuth:
        def record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return OIDCAppAuth(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(record)))

    return _make


@pytest.fixture
def token_handler(make_id_token: Callable[..., str]) -> Handler:
    """Token endpoint returning a valid response with an ID Token."""

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "access_token": "access-abc",
                "token_type": "Bearer",
                "expires_in": 3600,
                "refresh_token": "refresh-xyz",
                "id_token": make_id_token(email="user@example.com"),
            },
        )

    return _handler


def callback_url(**params: str) -> str:
    return str(httpx.URL(REDIRECT_URI, params=params))


async def start(app: OIDCAppAuth, get_secrets: RequestAppSecretsFunction) -> AuthorizeRedirect:
    return await app.get_authorize_redirect(REDIRECT_URI, get_secrets, None)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("token endpoint must not be called")


# ============================================================================
# Authorize redirect
# ============================================================================


class TestGetAuthorizeRedirect:
    """Tests for get_authorize_redirect."""

    @pytest.mark.asyncio
    async def test_builds_pkce_authorization_url(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given default scopes, returns an S256 PKCE URL and the session values."""
        # Act
        redirect = await start(make_app(unreachable), get_secrets)

        # Assert
        url = httpx.URL(redirect.url)
        stored = redirect.session_storage_values
        assert f"{url.scheme}://{url.host}{url.path}" == f"{ISSUER}/authorize"
        assert url.params["response_type"] == "code"
        assert url.params["client_id"] == "client-123"
        assert url.params["redirect_uri"] == REDIRECT_URI
        assert url.params["scope"] == "openid email"
        assert url.params["state"] == stored["state"]
        assert url.params["code_challenge_method"] == "S256"
        expected_challenge = base64url.encode(hashlib.sha256(stored["code_verifier"].encode()).digest())
        assert url.params["code_challenge"] == expected_challenge
        assert stored["scope"] == "openid email"
        assert "client_secret" not in url.params

    @pytest.mark.asyncio
    async def test_requested_scopes_include_openid(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given scopes without openid, prepends it."""
        # Act
        redirect = await make_app(unreachable).get_authorize_redirect(REDIRECT_URI, get_secrets, ["files:read"])

        # Assert
        assert httpx.URL(redirect.url).params["scope"] == "openid files:read"

    @pytest.mark.asyncio
    async def test_fresh_state_per_redirect(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given two redirects, state and verifier differ."""
        # Arrange
        app = make_app(unreachable)

        # Act
        first = await start(app, get_secrets)
        second = await start(app, get_secrets)

        # Assert
        assert first.session_storage_values["state"] != second.session_storage_values["state"]
        assert first.session_storage_values["code_verifier"] != second.session_storage_values["code_verifier"]
        assert len(first.session_storage_values["code_verifier"]) == 43

    @pytest.mark.asyncio
    async def test_missing_client_id_secret(self, make_app: Callable[[Handler], OIDCAppAuth]) -> None:
        """Given no CLIENT_ID in the environment, raises SecretNotFoundError."""
        with pytest.raises(SecretNotFoundError):
            await start(make_app(unreachable), env_secrets_resolver("example", {}))


# ============================================================================
# Authorization callback
# ============================================================================


class TestHandleAuthorizationCallback:
    """Tests for handle_authorization_callback."""

    @pytest.mark.asyncio
    async def test_successful_callback(
        self,
        frozen_clock: int,
        make_app: Callable[[Handler], OIDCAppAuth],
        get_secrets: RequestAppSecretsFunction,
        token_handler: Handler,
        requests: list[httpx.Request],
    ) -> None:
        """Given a valid callback, exchanges the code and returns the mapped result."""
        # Arrange
        app = make_app(token_handler)
        redirect = await start(app, get_secrets)
        stored = redirect.session_storage_values

        # Act
        result = await app.handle_authorization_callback(
            callback_url(code="code-1", state=stored["state"], iss=ISSUER),
            REDIRECT_URI,
            stored,
            get_secrets,
        )

        # Assert
        assert result.provider_account_id == "user-42"
        assert result.access_token == "access-abc"
        assert result.email == "user@example.com"
        assert result.type == "oidc"
        assert result.token_type == "bearer"
        assert result.refresh_token == "refresh-xyz"
        assert result.expires_at == frozen_clock + 3600
        assert result.scope == "openid email"
        assert result.id_token is not None

        assert len(requests) == 1
        form = httpx.QueryParams(requests[0].content.decode())
        assert str(requests[0].url) == TOKEN_ENDPOINT
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "code-1"
        assert form["redirect_uri"] == REDIRECT_URI
        assert form["code_verifier"] == stored["code_verifier"]
        assert form["client_id"] == "client-123"
        assert form["client_secret"] == "s3cret"

    @pytest.mark.asyncio
    async def test_granted_scope_wins(
        self,
        frozen_clock: int,
        make_app: Callable[[Handler], OIDCAppAuth],
        get_secrets: RequestAppSecretsFunction,
        make_id_token: Callable[..., str],
    ) -> None:
        """Given a scope in the token response, returns it instead of the requested scope."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"access_token": "a", "token_type": "bearer", "scope": "openid", "id_token": make_id_token()},
            )

        app = make_app(handler)
        stored = (await start(app, get_secrets)).session_storage_values

        # Act
        result = await app.handle_authorization_callback(
            callback_url(code="c", state=stored["state"]), REDIRECT_URI, stored, get_secrets
        )

        # Assert
        assert result.scope == "openid"
        assert result.email is None
        assert result.expires_at is None

    @pytest.mark.asyncio
    async def test_error_parameter(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given an error in the callback, raises AuthorizationCallbackError."""
        # Arrange
        app = make_app(unreachable)
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError) as exc_info:
            await app.handle_authorization_callback(
                callback_url(error="access_denied", error_description="User cancelled", state=stored["state"]),
                REDIRECT_URI,
                stored,
                get_secrets,
            )

        assert exc_info.value.context["error"] == "access_denied"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("state", [None, "forged-state"])
    async def test_state_mismatch(
        self,
        make_app: Callable[[Handler], OIDCAppAuth],
        get_secrets: RequestAppSecretsFunction,
        state: str | None,
    ) -> None:
        """Given a missing or different state, raises AuthorizationCallbackError."""
        # Arrange
        app = make_app(unreachable)
        stored = (await start(app, get_secrets)).session_storage_values
        params = {"code": "c"} if state is None else {"code": "c", "state": state}

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError):
            await app.handle_authorization_callback(callback_url(**params), REDIRECT_URI, stored, get_secrets)

    @pytest.mark.asyncio
    async def test_missing_session_values(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given no stored session values, raises AuthorizationCallbackError."""
        with pytest.raises(AuthorizationCallbackError):
            await make_app(unreachable).handle_authorization_callback(
                callback_url(code="c", state="s"), REDIRECT_URI, None, get_secrets
            )

    @pytest.mark.asyncio
    async def test_issuer_mismatch(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given an iss parameter from another server, raises AuthorizationCallbackError."""
        # Arrange
        app = make_app(unreachable)
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError):
            await app.handle_authorization_callback(
                callback_url(code="c", state=stored["state"], iss="https://evil.example.com"),
                REDIRECT_URI,
                stored,
                get_secrets,
            )

    @pytest.mark.asyncio
    async def test_missing_code(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given no code parameter, raises AuthorizationCallbackError."""
        # Arrange
        app = make_app(unreachable)
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError):
            await app.handle_authorization_callback(
                callback_url(state=stored["state"]), REDIRECT_URI, stored, get_secrets
            )

    @pytest.mark.asyncio
    async def test_token_endpoint_error(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given an invalid_grant error from the token endpoint, raises ResponseBodyError."""
        # Arrange
        app = make_app(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(ResponseBodyError) as exc_info:
            await app.handle_authorization_callback(
                callback_url(code="c", state=stored["state"]), REDIRECT_URI, stored, get_secrets
            )

        assert exc_info.value.error == "invalid_grant"

    @pytest.mark.asyncio
    async def test_missing_id_token(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given a token response without an ID Token, raises AuthorizationCallbackError."""
        # Arrange
        app = make_app(lambda request: httpx.Response(200, json={"access_token": "a", "token_type": "bearer"}))
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError):
            await app.handle_authorization_callback(
                callback_url(code="c", state=stored["state"]), REDIRECT_URI, stored, get_secrets
            )

    @pytest.mark.asyncio
    async def test_transport_error(
        self, make_app: Callable[[Handler], OIDCAppAuth], get_secrets: RequestAppSecretsFunction
    ) -> None:
        """Given a connection failure, raises AuthorizationCallbackError."""
        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        app = make_app(handler)
        stored = (await start(app, get_secrets)).session_storage_values

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError):
            await app.handle_authorization_callback(
                callback_url(code="c", state=stored["state"]), REDIRECT_URI, stored, get_secrets
            )


class TestFromConfigFile:
    """Tests for OIDCAppAuth.from_config_file."""

    def test_loads_settings(self, tmp_path: Path, settings: OIDCAppSettings) -> None:
        """Given a valid JSON config file, builds the app."""
        # Arrange
        config_path = tmp_path / "example.json"
        config_path.write_text(settings.model_dump_json())

        # Act
        app = OIDCAppAuth.from_config_file(config_path)

        # Assert
        assert app.app_config.display_name == "Example"
        assert app.use_redirect_and_callback is True

    def test_missing_file(self, tmp_path: Path) -> None:
        """Given a missing config file, raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            OIDCAppAuth.from_config_file(tmp_path / "missing.json")

    def test_invalid_settings(self, tmp_path: Path) -> None:
        """Given a config without provider, raises ConfigurationError naming the field."""
        # Arrange
        config_path = tmp_path / "example.json"
        data: dict[str, Any] = {
            "app": {"major_version": 1, "display_name": "X", "tier1_unique_id": "X", "provider": "x"}
        }
        config_path.write_text(json.dumps(data))

        # Act & Assert
        with pytest.raises(ConfigurationError, match="provider"):
            OIDCAppAuth.from_config_file(config_path)
