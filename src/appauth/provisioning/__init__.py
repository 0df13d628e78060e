"""Secrets provisioning to remote secret stores."""

from appauth.provisioning.doppler import DopplerClient

__all__ = ["DopplerClient"]
