"""Shared file utilities for appauth.

Provides the config loading helpers used by appauth.config:
- require_file_exists: Fail early with a readable message
- load_validated_json: Read JSON and validate it against a Pydantic model
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from appauth.exceptions import ConfigurationError

# Type variable for Pydantic models
T = TypeVar("T", bound=BaseModel)

__all__ = [
    "load_validated_json",
    "require_file_exists",
]


def require_file_exists(file_path: Path, file_type: str = "file") -> None:
    """Raise ConfigurationError if the file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "app config").

    Raises:
        ConfigurationError: If file doesn't exist.
    """
    if file_path.is_file():
        return

    raise ConfigurationError(f"{file_type.capitalize()} file not found at {file_path}.")


def load_validated_json(
    file_path: Path,
    model_class: type[T],
    file_type: str = "file",
    encoding: str = "utf-8",
) -> T:
    """Load JSON file and validate against Pydantic model.

    Combines file reading, JSON parsing, and Pydantic validation with
    consistent error messages.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "app config").
        encoding: File encoding.

    Returns:
        Validated Pydantic model instance.

    Raises:
        ConfigurationError: If the file is unreadable, JSON is invalid or
            validation fails.
    """
    try:
        with open(file_path, "r", encoding=encoding) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read {file_type} file {file_path}: {e}") from e

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"]) or "(root)"
            errors.append(f"  - {loc}: {error['msg']}")

        raise ConfigurationError(f"Invalid {file_type} file {file_path}:\n" + "\n".join(errors)) from e
