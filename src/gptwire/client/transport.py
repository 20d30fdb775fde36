"""Synchronous HTTP transport for the API, backed by :mod:`httpx`.

:class:`HTTPTransport` is the only component that performs network I/O.
Everything above it (the response cache, endpoint resources, the streaming
decoder) talks to it through a small surface:

- ``get`` / ``post`` / ``post_form_multipart`` / ``delete`` -- return the raw
  response body text of a 2xx response.
- ``stream_post`` -- push each received line of a streamed response to a
  callback on the calling thread.
- ``credential_identity`` -- the API key currently in use.

It layers on:

- **Bearer auth** -- ``Authorization: Bearer <api_key>`` on every request.
- **Error mapping** -- non-2xx responses raise
  :class:`~gptwire.exceptions.ResponseError` subclasses carrying the
  :class:`httpx.Response`.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).  Streaming requests are not retried.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Mapping, Optional

import httpx

from gptwire.client.multipart import FormFile
from gptwire.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ResponseError,
    ServerError,
)
from gptwire.models import RequestConfig
from gptwire.output import get_output


class HTTPTransport:
    """Blocking HTTP transport for API calls.

    Args:
        api_key: Secret sent as a bearer token.  The attribute may be
            reassigned between calls to switch credentials.
        config: Base URL, timeout, SSL and retry settings.
        http: Optional preconfigured :class:`httpx.Client`.  When given,
            ``config.base_url``, ``timeout`` and ``verify_ssl`` are ignored
            and the caller keeps ownership of the client.

    Example::

        with HTTPTransport("sk-...") as transport:
            text = transport.get("/v1/models")
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[RequestConfig] = None,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self._config = config or RequestConfig()
        self._owns_client = http is None
        self._client = http or httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
        )

    def __repr__(self) -> str:
        # Never leak the API key into logs or tracebacks.
        return f"<{type(self).__name__}>"

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> HTTPTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying httpx client if this transport created it."""
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------ #
    # Transport surface
    # ------------------------------------------------------------------ #

    def credential_identity(self) -> str:
        return self.api_key

    def get(self, route: str) -> str:
        return self._request("GET", route, headers=self._json_headers())

    def delete(self, route: str) -> str:
        return self._request("DELETE", route, headers=self._json_headers())

    def post(self, route: str, body: Optional[Mapping[str, Any]] = None) -> str:
        return self._request(
            "POST", route, headers=self._json_headers(), json=dict(body or {}),
        )

    def post_form_multipart(self, route: str, body: Mapping[str, Any]) -> str:
        """POST *body* as ``multipart/form-data``.

        :class:`~gptwire.client.multipart.FormFile` values become file parts;
        everything else becomes a plain form field.
        """
        files = {
            name: value.as_upload()
            for name, value in body.items()
            if isinstance(value, FormFile)
        }
        data = {
            name: _form_value(value)
            for name, value in body.items()
            if not isinstance(value, FormFile)
        }
        return self._request(
            "POST", route, headers=self._auth_headers(), data=data, files=files,
        )

    def stream_post(
        self,
        route: str,
        body: Mapping[str, Any],
        on_chunk: Callable[[str], object],
    ) -> None:
        """POST *body* and feed every line of the streamed response to *on_chunk*.

        Blocks until the server closes the stream.  Not retried.

        Raises:
            ResponseError: If the server answers with a non-2xx status.
        """
        get_output().debug(f"Streaming POST {route}")
        try:
            with self._client.stream(
                "POST", route, headers=self._json_headers(), json=dict(body),
            ) as response:
                if not response.is_success:
                    response.read()
                    raise _error_for(response)
                for line in response.iter_lines():
                    on_chunk(line)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            raise ConnectionError_(f"Streaming request failed: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _json_headers(self) -> dict[str, str]:
        return {**self._auth_headers(), "Content-Type": "application/json"}

    def _request(self, method: str, route: str, **kwargs: Any) -> str:
        response = self._execute_with_retry(method, route, **kwargs)
        if not response.is_success:
            raise _error_for(response)
        return response.text

    def _execute_with_retry(self, method: str, route: str, **kwargs: Any) -> httpx.Response:
        """Execute the HTTP request with exponential-backoff retry.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(method, route, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue

            return response

        raise AssertionError("unreachable")  # pragma: no cover


def _error_for(response: httpx.Response) -> ResponseError:
    """Map an unsuccessful response to the matching exception type."""
    status = response.status_code
    if status in (401, 403):
        return AuthError(response)
    if status == 404:
        return NotFoundError(response)
    if status >= 500:
        return ServerError(response)
    return ResponseError(response)


def _form_value(value: Any) -> str:
    """Render a non-file multipart field as text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)
