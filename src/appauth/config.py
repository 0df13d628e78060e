"""App configuration for appauth.

Defines the configuration model for a generic OIDC app: the app metadata,
the authorization server it talks to and the client validation policy.
Config files are JSON, validated with Pydantic.

Example usage:
    settings = OIDCAppSettings.load_from_file(Path("figma.json"))
    authorization_server = settings.authorization_server()
    client = settings.client(secrets["CLIENT_ID"])
"""

from __future__ import annotations

__all__ = [
    "AppConfig",
    "ClientPolicyConfig",
    "OIDCAppSettings",
    "ProviderConfig",
]

from pathlib import Path

from pydantic import BaseModel, Field

from appauth.constants import DEFAULT_CLOCK_SKEW_SECONDS, DEFAULT_CLOCK_TOLERANCE_SECONDS
from appauth.oauth.models import AuthorizationServer, Client
from appauth.utils.file_helpers import load_validated_json, require_file_exists


class AppConfig(BaseModel):
    """App metadata, usable on the client side and server side.

    Attributes:
        major_version: 1 for the first published release. Incremented for
            each version that needs to be reinstalled.
        minor_version: 0 for the first release of a major version.
        display_name: Name shown in the UI, e.g. "GitHub".
        icon_svg: Icon in SVG format.
        icon_url: Icon URL, used when no SVG is provided.
        tier1_unique_id: Unique app identifier, e.g. "COM_GITHUB_ORG_APP".
        provider: Provider name, e.g. "github".
        default_scopes: Scopes requested when the caller passes none.
    """

    major_version: int = Field(ge=1)
    minor_version: int = Field(default=0, ge=0)
    display_name: str = Field(min_length=1)
    icon_svg: str | None = None
    icon_url: str | None = None
    tier1_unique_id: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    default_scopes: list[str] = Field(default_factory=list)


class ProviderConfig(BaseModel):
    """Authorization server endpoints and metadata.

    Attributes:
        issuer: Issuer identifier, compared to the ID Token "iss".
        authorization_endpoint: Where users are redirected to authorize.
        token_endpoint: Where authorization codes are exchanged.
        id_token_signing_alg_values_supported: Algorithms the server
            signs ID Tokens with.
    """

    issuer: str = Field(min_length=1)
    authorization_endpoint: str = Field(min_length=1)
    token_endpoint: str = Field(min_length=1)
    id_token_signing_alg_values_supported: list[str] | None = None


class ClientPolicyConfig(BaseModel):
    """Client side ID Token validation policy.

    Attributes:
        id_token_signed_response_alg: Accepted ID Token algorithm(s).
        default_max_age: Maximum seconds since end-user authentication.
        require_auth_time: Require the "auth_time" claim.
        clock_skew_seconds: Signed offset added to the local clock.
        clock_tolerance_seconds: Leeway for timestamp checks.
    """

    id_token_signed_response_alg: str | list[str] | None = None
    default_max_age: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    require_auth_time: bool = False
    clock_skew_seconds: float = Field(default=DEFAULT_CLOCK_SKEW_SECONDS, allow_inf_nan=False)
    clock_tolerance_seconds: float = Field(default=DEFAULT_CLOCK_TOLERANCE_SECONDS, ge=0, allow_inf_nan=False)


class OIDCAppSettings(BaseModel):
    """Configuration for a generic OIDC app.

    Attributes:
        app: App metadata.
        provider: Authorization server configuration.
        policy: ID Token validation policy.
    """

    app: AppConfig
    provider: ProviderConfig
    policy: ClientPolicyConfig = Field(default_factory=ClientPolicyConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> OIDCAppSettings:
        """Load and validate settings from a JSON file.

        Args:
            config_path: Path to the JSON config file.

        Returns:
            Validated OIDCAppSettings.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid.
        """
        require_file_exists(config_path, file_type="app config")
        return load_validated_json(config_path, cls, file_type="app config")

    def authorization_server(self) -> AuthorizationServer:
        """Build the AuthorizationServer used for token response validation."""
        return AuthorizationServer(
            issuer=self.provider.issuer,
            authorization_endpoint=self.provider.authorization_endpoint,
            token_endpoint=self.provider.token_endpoint,
            id_token_signing_alg_values_supported=self.provider.id_token_signing_alg_values_supported,
        )

    def client(self, client_id: str) -> Client:
        """Build the Client for a resolved client id."""
        return Client(client_id=client_id, **self.policy.model_dump())
