"""Exception hierarchy for gptwire.

All exceptions inherit from :class:`GptwireError` so callers can catch every
library failure with a single ``except`` clause while still distinguishing
the individual failure classes.

Subclass hierarchy::

    GptwireError
    +-- ParseError            (also ValueError)
    +-- MissingFieldError
    +-- CacheMissError        (also KeyError)
    +-- ResponseError
    |   +-- AuthError         (HTTP 401 / 403)
    |   +-- NotFoundError     (HTTP 404)
    |   +-- ServerError       (HTTP 5xx)
    +-- ConnectionError_
    +-- InvalidUsageError
    +-- ConfigError
    +-- UnknownModelError
    +-- UnknownEncodingError
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    import httpx


class GptwireError(Exception):
    """Base exception for all gptwire errors."""


class ParseError(GptwireError, ValueError):
    """Raised when a response body (or a streamed frame) is not valid JSON."""


class MissingFieldError(GptwireError):
    """Raised when a required response field cannot be resolved.

    Carries enough context to diagnose schema drift without re-running the
    request: the key path that was being resolved, the specific key that was
    missing, and the full payload the lookup ran against.

    Args:
        path: The full key path of the declared field.
        missing_key: The first key in *path* that could not be found.
        payload: The complete (frozen or plain) response document.
    """

    def __init__(self, path: Sequence[str], missing_key: str, payload: Any) -> None:
        self.path = tuple(path)
        self.missing_key = missing_key
        self.payload = payload
        super().__init__(self._render())

    def _render(self) -> str:
        from gptwire.response.payload import thaw

        pretty = json.dumps(thaw(self.payload), indent=2, default=str)
        return (
            f"Missing field {self.missing_key!r} in response payload!\n"
            f"Was attempting to access value at path `{list(self.path)!r}`.\n"
            f"Payload: {pretty}\n"
        )


class CacheMissError(GptwireError, KeyError):
    """Raised when a storage backend is asked to read an entry it does not hold.

    Callers are expected to check ``cached()`` before ``read()``; hitting this
    error indicates a broken contract rather than an ordinary cache miss.
    """

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(identifier)

    def __str__(self) -> str:
        return f"No cache entry for {self.identifier!r}"


class ResponseError(GptwireError):
    """Raised when the API answers with a non-2xx status code.

    Args:
        http_response: The :class:`httpx.Response` that failed.
    """

    def __init__(self, http_response: httpx.Response) -> None:
        self.http_response = http_response
        super().__init__(self._render())

    @property
    def status_code(self) -> int:
        return self.http_response.status_code

    def _render(self) -> str:
        response = self.http_response
        status = f"{response.status_code} {response.reason_phrase}".rstrip()
        return (
            f"Unexpected response status! Expected 2xx but got: {status}\n"
            f"\n"
            f"Body:\n"
            f"\n"
            f"{response.text}\n"
        )


class AuthError(ResponseError):
    """Raised when the API rejects the credentials (HTTP 401 / 403)."""


class NotFoundError(ResponseError):
    """Raised when the API returns HTTP 404 (resource not found)."""


class ServerError(ResponseError):
    """Raised when the API returns an HTTP 5xx server error."""


class ConnectionError_(GptwireError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """


class InvalidUsageError(GptwireError):
    """Raised when a public API is called with an invalid combination of arguments."""


class ConfigError(GptwireError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""


class UnknownModelError(GptwireError):
    """Raised when no tokenizer encoding is known for a model name."""


class UnknownEncodingError(GptwireError):
    """Raised when a tokenizer encoding name is not recognised."""
