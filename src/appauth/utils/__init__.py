"""Shared utilities for appauth (file loading, log formatting)."""

__all__: list[str] = []
