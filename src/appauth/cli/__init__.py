"""Command-line interface for appauth.

Provides commands for provisioning app secrets to a remote secret store.
"""

from .main import cli, main

__all__ = ["cli", "main"]
