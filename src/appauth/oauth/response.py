"""Token endpoint HTTP response gatekeeping.

Checks that run on the raw httpx.Response before any token parsing:
1. The argument is an httpx.Response
2. No WWW-Authenticate challenge is present
3. Non-200 responses become ResponseBodyError (4xx with an OAuth error
   object) or UnconformantStatusError
4. 200 responses must have an unconsumed application/json body holding a
   JSON object

The body is read at most once. Every response this module reads or cancels is
remembered in a weak set and counts as consumed from then on, even though httpx
keeps its content buffered. A response whose content httpx buffered before it
was handed in (the normal case for ``client.post``) is still unconsumed. A body
streamed without buffering or closed before reading is consumed.
"""

from __future__ import annotations

__all__ = [
    "assert_http_response",
    "assert_readable_response",
    "body_used",
    "get_content_type",
    "handle_oauth_body_error",
    "read_token_endpoint_body",
]

import weakref
from typing import Any

import httpx

from appauth.constants import JSON_CONTENT_TYPE
from appauth.exceptions import (
    ERR_INVALID_ARG_VALUE,
    RESPONSE_IS_NOT_JSON,
    InvalidArgumentError,
    MalformedResponseError,
    ParseError,
    ResponseBodyError,
    UnconformantStatusError,
    WWWAuthenticateChallengeError,
)
from appauth.oauth.challenges import parse_www_authenticate_challenges
from appauth.oauth.validation import is_json_object, parse_json

# Responses whose body was read or cancelled here
_consumed_responses: weakref.WeakSet[httpx.Response] = weakref.WeakSet()


def assert_http_response(response: Any) -> None:
    """Raise InvalidArgumentError unless response is an httpx.Response."""
    if not isinstance(response, httpx.Response):
        raise InvalidArgumentError('"response" must be an instance of httpx.Response')


def body_used(response: httpx.Response) -> bool:
    """True if the body can no longer be read.

    Args:
        response: Response to inspect.

    Returns:
        True once this module has read or cancelled the body. Otherwise
        False if the content is buffered or the stream is still unread.
    """
    if response in _consumed_responses:
        return True
    try:
        response.content
    except httpx.ResponseNotRead:
        return response.is_stream_consumed or response.is_closed
    return False


def assert_readable_response(response: httpx.Response) -> None:
    """Raise InvalidArgumentError if the response body was already consumed."""
    if body_used(response):
        raise InvalidArgumentError('"response" body has been used already', code=ERR_INVALID_ARG_VALUE)


def get_content_type(response: httpx.Response) -> str | None:
    """Return the lowercased media type without parameters, or None."""
    content_type = response.headers.get("content-type")
    if content_type is None:
        return None
    return content_type.split(";")[0].strip().lower()


def _assert_application_json(response: httpx.Response) -> None:
    if get_content_type(response) != JSON_CONTENT_TYPE:
        raise MalformedResponseError(
            f'"response" content-type must be {JSON_CONTENT_TYPE}',
            code=RESPONSE_IS_NOT_JSON,
            context={"content_type": response.headers.get("content-type")},
        )


async def _read_body(response: httpx.Response) -> bytes:
    _consumed_responses.add(response)
    return await response.aread()


async def _cancel_body(response: httpx.Response) -> None:
    _consumed_responses.add(response)
    await response.aclose()


async def handle_oauth_body_error(response: httpx.Response) -> dict[str, Any] | None:
    """Extract an OAuth error object from a 4xx response body.

    Args:
        response: Non-200 response.

    Returns:
        The error object if the body is a JSON object with a non-empty
        string "error", otherwise None.

    Raises:
        InvalidArgumentError: 4xx response whose body was already consumed.
        MalformedResponseError: 4xx response that is not application/json.
    """
    if not 400 <= response.status_code <= 499:
        return None

    assert_readable_response(response)
    _assert_application_json(response)

    try:
        body = parse_json(await _read_body(response), '"response" body')
    except ParseError:
        return None

    if is_json_object(body) and isinstance(body.get("error"), str) and body["error"]:
        return body
    return None


async def read_token_endpoint_body(response: Any) -> dict[str, Any]:
    """Run the gatekeeper checks and return the parsed JSON body.

    Args:
        response: Raw token endpoint response.

    Returns:
        The top level JSON object of a 200 response.

    Raises:
        InvalidArgumentError: Not an httpx.Response, or body already used.
        WWWAuthenticateChallengeError: Server presented a challenge.
        ResponseBodyError: 4xx with an OAuth error object.
        UnconformantStatusError: Any other non-200 status.
        MalformedResponseError: Wrong content-type or non-object body.
        ParseError: Body is not valid JSON.
    """
    assert_http_response(response)

    challenges = parse_www_authenticate_challenges(response)
    if challenges:
        raise WWWAuthenticateChallengeError(
            "server responded with a challenge in the WWW-Authenticate HTTP Header",
            challenges=challenges,
            response=response,
        )

    if response.status_code != 200:
        error_body = await handle_oauth_body_error(response)
        if error_body is not None:
            await _cancel_body(response)
            raise ResponseBodyError(
                "server responded with an error in the response body",
                body=error_body,
                response=response,
            )
        raise UnconformantStatusError(
            '"response" is not a conform Token Endpoint response (unexpected HTTP status code)',
            response=response,
        )

    assert_readable_response(response)
    _assert_application_json(response)

    body = parse_json(await _read_body(response), '"response" body')
    if not is_json_object(body):
        raise MalformedResponseError('"response" body must be a top level object', context={"body": body})

    return body
