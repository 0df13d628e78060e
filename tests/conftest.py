"""Shared fixtures for appauth tests.

Time is frozen at NOW through the clock module, ID Tokens are minted with
PyJWT and a throwaway RSA key, and token endpoint responses are built as
unread httpx.Response objects.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from appauth.oauth import base64url, clock
from appauth.oauth.models import AuthorizationServer, Client

NOW = 1_700_000_000
ISSUER = "https://login.example.com"
CLIENT_ID = "client-123"


# ============================================================================
# Helpers
# ============================================================================


def compact_token(header: dict[str, Any], claims: dict[str, Any], signature: bytes = b"signature") -> str:
    """Build a compact JWS from raw header and claims (no real signature)."""
    return ".".join(
        [
            base64url.encode(json.dumps(header).encode()),
            base64url.encode(json.dumps(claims).encode()),
            base64url.encode(signature),
        ]
    )


def json_response(
    body: Any,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
    content_type: str | None = "application/json",
) -> httpx.Response:
    """Build an unread response. Non-bytes bodies are JSON encoded."""
    if isinstance(body, str):
        raw = body.encode()
    elif isinstance(body, bytes):
        raw = body
    else:
        raw = json.dumps(body).encode()

    all_headers = dict(headers or {})
    if content_type is not None:
        all_headers["content-type"] = content_type

    return httpx.Response(status_code, headers=all_headers, stream=httpx.ByteStream(raw))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def frozen_clock(monkeypatch: pytest.MonkeyPatch) -> int:
    """Freeze clock.epoch_time() at NOW."""
    monkeypatch.setattr(clock, "epoch_time", lambda: NOW)
    return NOW


@pytest.fixture(scope="session")
def rsa_private_key_pem() -> bytes:
    """Generate an RSA key for ID Token signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def id_token_claims() -> dict[str, Any]:
    """Claims of a valid ID Token at NOW."""
    return {
        "iss": ISSUER,
        "sub": "user-42",
        "aud": CLIENT_ID,
        "iat": NOW,
        "exp": NOW + 3600,
    }


@pytest.fixture
def make_id_token(rsa_private_key_pem: bytes, id_token_claims: dict[str, Any]) -> Callable[..., str]:
    """Factory for RS256 ID Tokens.

    Keyword arguments override claims, a value of None removes the claim.
    """

    def _make(**overrides: Any) -> str:
        claims = {**id_token_claims, **overrides}
        claims = {key: value for key, value in claims.items() if value is not None}
        return jwt.encode(claims, rsa_private_key_pem, algorithm="RS256")

    return _make


@pytest.fixture
def authorization_server() -> AuthorizationServer:
    """Authorization server with default metadata."""
    return AuthorizationServer(issuer=ISSUER)


@pytest.fixture
def client() -> Client:
    """Client with default validation policy."""
    return Client(client_id=CLIENT_ID)


@pytest.fixture
def token_body() -> dict[str, Any]:
    """Minimal successful token endpoint body (no ID Token)."""
    return {"access_token": "access-abc", "token_type": "Bearer", "expires_in": 3600}


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Factory for unread token endpoint responses (see json_response)."""
    return json_response


@pytest.fixture
def make_compact() -> Callable[..., str]:
    """Factory for hand-built compact tokens (see compact_token)."""
    return compact_token
