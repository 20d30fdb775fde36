"""Tests for the httpx-backed HTTP transport."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from gptwire.client import FormFile, HTTPTransport
from gptwire.exceptions import (
    AuthError,
    ConnectionError_,
    NotFoundError,
    ResponseError,
    ServerError,
)
from gptwire.models import RequestConfig


MakeTransport = Callable[..., HTTPTransport]


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record retry delays instead of sleeping."""
    delays: list[float] = []
    monkeypatch.setattr("gptwire.client.transport.time.sleep", delays.append)
    return delays


# ------------------------------------------------------------------ #
# Requests
# ------------------------------------------------------------------ #


class TestRequests:
    def test_get_returns_the_body_text(self, make_transport: MakeTransport) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/v1/models"
            return httpx.Response(200, text='{"data": []}')

        assert make_transport(handler).get("/v1/models") == '{"data": []}'

    def test_bearer_token_is_sent(self, make_transport: MakeTransport) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, text="{}")

        make_transport(handler, api_key="sk-abc").get("/v1/models")
        assert seen == ["Bearer sk-abc"]

    def test_post_sends_json(self, make_transport: MakeTransport) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.headers["Content-Type"] == "application/json"
            assert json.loads(request.content) == {"model": "model1", "prompt": "prompt1"}
            return httpx.Response(200, text='{"ok": true}')

        result = make_transport(handler).post(
            "/v1/completions", {"model": "model1", "prompt": "prompt1"},
        )
        assert result == '{"ok": true}'

    def test_post_without_body_sends_empty_object(self, make_transport: MakeTransport) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {}
            return httpx.Response(200, text="{}")

        make_transport(handler).post("/v1/fine-tunes/ft-1/cancel")

    def test_delete(self, make_transport: MakeTransport) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            assert request.url.path == "/v1/files/file-1"
            return httpx.Response(200, text='{"deleted": true}')

        assert make_transport(handler).delete("/v1/files/file-1") == '{"deleted": true}'

    def test_swapping_the_api_key(self, make_transport: MakeTransport) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, text="{}")

        transport = make_transport(handler)
        transport.get("/v1/models")
        transport.api_key = "sk-456"
        transport.get("/v1/models")

        assert seen == ["Bearer sk-123", "Bearer sk-456"]
        assert transport.credential_identity() == "sk-456"


class TestMultipart:
    def test_files_and_fields(self, make_transport: MakeTransport, tmp_path: Path) -> None:
        path = tmp_path / "training.jsonl"
        path.write_text('{"prompt": "a", "completion": "b"}\n', encoding="utf-8")

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["Content-Type"].startswith("multipart/form-data")
            body = request.content.decode("utf-8")
            assert 'name="purpose"' in body
            assert "fine-tune" in body
            assert 'name="file"; filename="training.jsonl"' in body
            assert '{"prompt": "a", "completion": "b"}' in body
            return httpx.Response(200, text='{"id": "file-1"}')

        result = make_transport(handler).post_form_multipart(
            "/v1/files", {"file": FormFile(path), "purpose": "fine-tune"},
        )
        assert result == '{"id": "file-1"}'

    def test_non_string_fields_are_rendered_as_text(
        self, make_transport: MakeTransport, tmp_path: Path,
    ) -> None:
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")

        def handler(request: httpx.Request) -> httpx.Response:
            body = request.content.decode("utf-8", errors="replace")
            assert 'name="n"\r\n\r\n2\r\n' in body
            assert 'name="flag"\r\n\r\ntrue\r\n' in body
            assert "image/png" in body
            return httpx.Response(200, text="{}")

        make_transport(handler).post_form_multipart(
            "/v1/images/variations", {"image": FormFile(path), "n": 2, "flag": True},
        )


# ------------------------------------------------------------------ #
# Error mapping
# ------------------------------------------------------------------ #


class TestErrors:
    @pytest.mark.parametrize(
        ("status", "error_type"),
        [
            (400, ResponseError),
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (429, ResponseError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_status_maps_to_error_type(
        self, make_transport: MakeTransport, status: int, error_type: type,
    ) -> None:
        transport = make_transport(lambda request: httpx.Response(status, text="nope"))
        with pytest.raises(error_type) as exc_info:
            transport.get("/v1/models")
        assert exc_info.value.status_code == status

    def test_message_includes_status_and_body(self, make_transport: MakeTransport) -> None:
        transport = make_transport(
            lambda request: httpx.Response(404, text='{"error": "no such model"}'),
        )
        with pytest.raises(NotFoundError) as exc_info:
            transport.get("/v1/models/nope")

        assert str(exc_info.value) == (
            "Unexpected response status! Expected 2xx but got: 404 Not Found\n"
            "\n"
            "Body:\n"
            "\n"
            '{"error": "no such model"}\n'
        )

    def test_error_carries_the_response(self, make_transport: MakeTransport) -> None:
        transport = make_transport(lambda request: httpx.Response(401, text="denied"))
        with pytest.raises(AuthError) as exc_info:
            transport.get("/v1/models")
        assert exc_info.value.http_response.text == "denied"


# ------------------------------------------------------------------ #
# Retries
# ------------------------------------------------------------------ #


class TestRetries:
    def test_server_errors_are_retried_with_backoff(
        self, make_transport: MakeTransport, _no_sleep: list[float],
    ) -> None:
        responses = iter([
            httpx.Response(502, text="bad gateway"),
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, text="{}"),
        ])
        transport = make_transport(lambda request: next(responses), max_retries=2)

        assert transport.get("/v1/models") == "{}"
        assert _no_sleep == [1, 2]

    def test_gives_up_after_max_retries(
        self, make_transport: MakeTransport, _no_sleep: list[float],
    ) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(500, text="boom")

        with pytest.raises(ServerError):
            make_transport(handler, max_retries=2).get("/v1/models")
        assert len(calls) == 3

    def test_client_errors_are_not_retried(self, make_transport: MakeTransport) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(400, text="bad")

        with pytest.raises(ResponseError):
            make_transport(handler, max_retries=3).get("/v1/models")
        assert len(calls) == 1

    def test_connection_errors_are_retried_then_raised(
        self, make_transport: MakeTransport, _no_sleep: list[float],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ConnectionError_, match="after 2 attempts"):
            make_transport(handler, max_retries=1).get("/v1/models")
        assert _no_sleep == [1]


# ------------------------------------------------------------------ #
# Streaming
# ------------------------------------------------------------------ #


class TestStreamPost:
    def test_lines_are_pushed_to_the_callback(
        self, make_transport: MakeTransport, sse_body: Callable[..., bytes],
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"model": "model1", "stream": True}
            return httpx.Response(200, content=sse_body({"text": "a"}, {"text": "b"}))

        lines: list[str] = []
        make_transport(handler).stream_post(
            "/v1/completions", {"model": "model1", "stream": True}, lines.append,
        )

        frames = [line for line in lines if line]
        assert frames == ['data: {"text": "a"}', 'data: {"text": "b"}', "data: [DONE]"]

    def test_error_status_raises_before_any_chunk(self, make_transport: MakeTransport) -> None:
        lines: list[str] = []
        transport = make_transport(lambda request: httpx.Response(401, text="denied"))

        with pytest.raises(AuthError) as exc_info:
            transport.stream_post("/v1/completions", {"stream": True}, lines.append)
        assert lines == []
        assert "denied" in str(exc_info.value)

    def test_streaming_is_not_retried(
        self, make_transport: MakeTransport, _no_sleep: list[float],
    ) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(503, text="busy")

        with pytest.raises(ServerError):
            make_transport(handler, max_retries=3).stream_post("/v1/completions", {}, print)
        assert len(calls) == 1
        assert _no_sleep == []


# ------------------------------------------------------------------ #
# Lifecycle
# ------------------------------------------------------------------ #


class TestLifecycle:
    def test_repr_hides_the_api_key(self) -> None:
        transport = HTTPTransport("sk-secret")
        try:
            assert "sk-secret" not in repr(transport)
        finally:
            transport.close()

    def test_owned_client_is_closed(self) -> None:
        with HTTPTransport("sk-123", RequestConfig(base_url="https://example.com")) as transport:
            pass
        assert transport._client.is_closed

    def test_injected_client_is_left_open(self) -> None:
        http = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with HTTPTransport("sk-123", http=http):
            pass
        assert not http.is_closed
        http.close()
