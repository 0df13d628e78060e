"""Environment-backed app secrets.

Secrets are looked up as APP_<APP_NAME>_<KEY>, e.g. APP_FIGMA_CLIENT_ID for
app "figma" and key "CLIENT_ID".
"""

from __future__ import annotations

__all__ = ["env_secrets_resolver", "secret_env_var"]

import os
import re
from typing import Mapping

from appauth.apps.types import RequestAppSecretsFunction
from appauth.constants import APP_SECRET_PREFIX
from appauth.exceptions import SecretNotFoundError

_NON_ALNUM = re.compile(r"[^A-Z0-9]+")


def secret_env_var(app_name: str, key: str) -> str:
    """Return the environment variable name for an app secret."""
    app = _NON_ALNUM.sub("_", app_name.upper()).strip("_")
    return f"{APP_SECRET_PREFIX}{app}_{key.upper()}"


def env_secrets_resolver(
    app_name: str,
    environ: Mapping[str, str] | None = None,
) -> RequestAppSecretsFunction:
    """Build a RequestAppSecretsFunction reading from the environment.

    Args:
        app_name: App name used in the variable prefix.
        environ: Mapping to read from (defaults to os.environ at call time).

    Returns:
        Async resolver mapping every requested key to its value.
    """

    async def get_secrets(secrets: dict[str, None]) -> dict[str, str]:
        source = os.environ if environ is None else environ
        resolved: dict[str, str] = {}
        for name in secrets:
            env_var = secret_env_var(app_name, name)
            value = source.get(env_var)
            if not value:
                raise SecretNotFoundError(name, env_var)
            resolved[name] = value
        return resolved

    return get_secrets
