"""Shared test fixtures for gptwire.

Provides an isolated diagnostics output, a mock transport that stands in
for :class:`~gptwire.client.HTTPTransport`, and a helper for building an
httpx client backed by :class:`httpx.MockTransport`.
"""

from __future__ import annotations

import json
from typing import Any, Callable
from unittest.mock import MagicMock

import httpx
import pytest

from gptwire.client import HTTPTransport
from gptwire.models import RequestConfig
from gptwire.output import OutputManager, reset_output, set_output


API_BASE = "https://api.openai.com"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _quiet_output_between_tests():
    """Install a quiet, colourless OutputManager for every test."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


@pytest.fixture
def api_resource() -> str:
    """Raw body every mock transport call returns by default."""
    return json.dumps({"text": "Wow neat"})


@pytest.fixture
def mock_transport(api_resource: str) -> MagicMock:
    """A spec'd stand-in for HTTPTransport with the ``sk-123`` credential."""
    transport = MagicMock(spec=HTTPTransport)
    transport.credential_identity.return_value = "sk-123"
    for method in ("get", "post", "post_form_multipart", "delete"):
        getattr(transport, method).return_value = api_resource
    return transport


@pytest.fixture
def make_transport() -> Callable[..., HTTPTransport]:
    """Factory for HTTPTransports whose requests are answered by a handler."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        api_key: str = "sk-123",
        max_retries: int = 0,
    ) -> HTTPTransport:
        http = httpx.Client(base_url=API_BASE, transport=httpx.MockTransport(handler))
        return HTTPTransport(api_key, RequestConfig(max_retries=max_retries), http=http)

    return _make


@pytest.fixture
def sse_body() -> Callable[..., bytes]:
    """Encode frames as a server-sent-event body terminated by ``[DONE]``."""

    def _encode(*frames: Any) -> bytes:
        parts = [f"data: {json.dumps(frame)}" for frame in frames]
        parts.append("data: [DONE]")
        return ("\n\n".join(parts) + "\n\n").encode("utf-8")

    return _encode
