"""Doppler secrets API client.

Uploads key/value secrets to a Doppler project config:

    POST https://api.doppler.com/v3/configs/config/secrets
    Authorization: Bearer <api key>
    {"project": ..., "config": ..., "secrets": {"KEY": "VALUE"}}

Secret values are never logged, only their names and count.
"""

from __future__ import annotations

__all__ = ["DopplerClient"]

from typing import Any

import httpx

from appauth.constants import DOPPLER_SECRETS_URL, DOPPLER_TIMEOUT_SECONDS
from appauth.exceptions import SecretsProvisioningError
from appauth.telemetry.system.system_logger import get_system_logger

_system_logger = get_system_logger()


def _error_messages(response: httpx.Response) -> list[str]:
    """Extract the "messages" list from a Doppler error body."""
    try:
        data = response.json()
    except ValueError:
        return [response.text] if response.text else []

    if isinstance(data, dict) and isinstance(data.get("messages"), list):
        return [str(message) for message in data["messages"]]
    return [str(data)]


class DopplerClient:
    """Minimal Doppler API client for writing secrets."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.Client | None = None,
        secrets_url: str = DOPPLER_SECRETS_URL,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Doppler API token (service or personal token).
            http_client: Optional httpx client (for testing).
            secrets_url: Secrets endpoint URL.
        """
        self._api_key = api_key
        self._http_client = http_client
        self._secrets_url = secrets_url

    def add_secrets(self, project: str, config: str, secrets: dict[str, str]) -> dict[str, Any]:
        """Create or update secrets in a project config.

        Args:
            project: Doppler project name.
            config: Doppler config name (e.g. "dev", "prd").
            secrets: Secret names to values.

        Returns:
            Parsed JSON response body.

        Raises:
            SecretsProvisioningError: On transport failure or a non-2xx
                response (with the API's error messages).
        """
        client = self._http_client or httpx.Client(timeout=DOPPLER_TIMEOUT_SECONDS)
        owns_client = self._http_client is None

        try:
            response = client.post(
                self._secrets_url,
                json={"project": project, "config": config, "secrets": secrets},
                headers={
                    "accept": "application/json",
                    "authorization": f"Bearer {self._api_key}",
                },
            )
        except httpx.HTTPError as e:
            raise SecretsProvisioningError(f"HTTP error while adding secrets: {e}") from e
        finally:
            if owns_client:
                client.close()

        if not response.is_success:
            messages = _error_messages(response)
            _system_logger.warning(
                {
                    "event": "secrets_provisioning_failed",
                    "message": f"Doppler rejected secrets for {project}/{config}",
                    "status_code": response.status_code,
                    "project": project,
                    "config": config,
                }
            )
            raise SecretsProvisioningError(
                f"Doppler API error ({response.status_code})",
                status_code=response.status_code,
                messages=messages,
            )

        _system_logger.info(
            {
                "event": "secrets_provisioned",
                "message": f"Added {len(secrets)} secret(s) to {project}/{config}",
                "project": project,
                "config": config,
                "secret_names": sorted(secrets),
            }
        )

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"value": data}
