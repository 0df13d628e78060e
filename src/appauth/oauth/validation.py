"""Type assertions and JSON helpers shared by the token response pipeline.

The assert_* helpers raise InvalidArgumentError by default (caller mistakes).
When an ``error`` class is given they raise that class instead, which is how
response-level checks turn the same rule into a MalformedResponseError.
"""

from __future__ import annotations

__all__ = [
    "assert_number",
    "assert_string",
    "is_json_object",
    "is_number",
    "parse_json",
]

import json
import math
from typing import Any, TypeGuard

from appauth.exceptions import (
    ERR_INVALID_ARG_TYPE,
    ERR_INVALID_ARG_VALUE,
    InvalidArgumentError,
    OAuthError,
    ParseError,
)


def is_json_object(value: Any) -> TypeGuard[dict[str, Any]]:
    """True for a JSON object (dict), False for arrays, scalars and null."""
    return isinstance(value, dict)


def is_number(value: Any) -> bool:
    """True for a finite JSON number. Booleans are not numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_json(data: bytes | str, what: str) -> Any:
    """Parse strict JSON (no NaN/Infinity).

    Args:
        data: Raw JSON document.
        what: Description used in the error message.

    Returns:
        The parsed JSON value.

    Raises:
        ParseError: If the document is not valid UTF-8 JSON.
    """
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError) as e:
        # JSONDecodeError is a ValueError subclass
        raise ParseError(f"failed to parse {what} as JSON") from e


def assert_string(
    value: Any,
    it: str,
    error: type[OAuthError] | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Require a non-empty string.

    Args:
        value: Value to check.
        it: Description used in the error message (e.g. '"client.client_id"').
        error: Error class to raise instead of InvalidArgumentError.
        context: Diagnostic context attached to the error.
    """
    if not isinstance(value, str):
        _fail(f"{it} must be a string", ERR_INVALID_ARG_TYPE, error, context)
    elif not value:
        _fail(f"{it} must not be empty", ERR_INVALID_ARG_VALUE, error, context)


def assert_number(
    value: Any,
    allow_zero: bool,
    it: str,
    error: type[OAuthError] | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Require a finite positive number (or non-negative with allow_zero).

    Args:
        value: Value to check.
        allow_zero: Accept 0 as well as positive numbers.
        it: Description used in the error message.
        error: Error class to raise instead of InvalidArgumentError.
        context: Diagnostic context attached to the error.
    """
    if not is_number(value):
        _fail(f"{it} must be a number", ERR_INVALID_ARG_TYPE, error, context)
    elif value > 0:
        return
    elif allow_zero and value == 0:
        return
    elif allow_zero:
        _fail(f"{it} must be a non-negative number", ERR_INVALID_ARG_VALUE, error, context)
    else:
        _fail(f"{it} must be a positive number", ERR_INVALID_ARG_VALUE, error, context)


def _fail(
    message: str,
    arg_code: str,
    error: type[OAuthError] | None,
    context: dict[str, Any] | None,
) -> None:
    if error is None:
        raise InvalidArgumentError(message, code=arg_code, context=context)
    raise error(message, context=context)
