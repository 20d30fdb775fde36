"""Tests for server-sent-event frame decoding."""

from __future__ import annotations

import json
from typing import Callable

import pytest

from gptwire.client import FrameDecoder, split_frames
from gptwire.exceptions import ParseError
from gptwire.response import PayloadView, field


class Token(PayloadView):
    text = field()


def _frame(text: str) -> str:
    return f"data: {json.dumps({'text': text})}"


class TestSplitFrames:
    def test_splits_on_blank_lines(self) -> None:
        chunk = f"{_frame('a')}\n\n{_frame('b')}\n\n"
        assert split_frames(chunk) == ['{"text": "a"}', '{"text": "b"}']

    def test_drops_the_done_sentinel(self) -> None:
        assert split_frames(f"{_frame('a')}\n\ndata: [DONE]\n\n") == ['{"text": "a"}']

    def test_only_done(self) -> None:
        assert split_frames("data: [DONE]") == []

    def test_empty_chunk(self) -> None:
        assert split_frames("") == []
        assert split_frames("\n\n\n\n") == []

    def test_prefix_without_space(self) -> None:
        assert split_frames('data:{"text": "a"}') == ['{"text": "a"}']

    def test_bytes_are_decoded_as_utf8(self) -> None:
        assert split_frames(_frame("é").encode("utf-8")) == [json.dumps({"text": "é"})]

    def test_unprefixed_frame_is_kept(self) -> None:
        assert split_frames('{"text": "a"}') == ['{"text": "a"}']


class TestFrameDecoder:
    def test_decodes_each_frame_in_order(self) -> None:
        decoder = FrameDecoder(Token)
        chunk = f"{_frame('Hel')}\n\n{_frame('lo')}\n\ndata: [DONE]\n\n"
        assert [token.text for token in decoder.decode(chunk)] == ["Hel", "lo"]

    def test_frames_are_typed(self) -> None:
        decoder = FrameDecoder(Token)
        (token,) = decoder.decode(_frame("x"))
        assert isinstance(token, Token)
        assert decoder.payload_cls is Token

    def test_iter_decoded_spans_chunks(self) -> None:
        decoder = FrameDecoder(Token)
        chunks = [_frame("a"), "", _frame("b"), "data: [DONE]"]
        assert [token.text for token in decoder.iter_decoded(chunks)] == ["a", "b"]

    def test_malformed_frame_raises_parse_error(self) -> None:
        decoder = FrameDecoder(Token)
        with pytest.raises(ParseError):
            list(decoder.decode("data: {not json"))

    def test_frames_before_a_malformed_one_are_delivered(self) -> None:
        decoder = FrameDecoder(Token)
        received: list[str] = []
        with pytest.raises(ParseError):
            for token in decoder.decode(f"{_frame('ok')}\n\ndata: {{oops"):
                received.append(token.text)
        assert received == ["ok"]

    def test_callback_pushes_each_frame(self) -> None:
        received: list[Token] = []
        handle_chunk = FrameDecoder(Token).callback(received.append)

        handle_chunk(_frame("a"))
        handle_chunk("")
        handle_chunk(f"{_frame('b')}\n\n{_frame('c')}")
        handle_chunk("data: [DONE]")

        assert [token.text for token in received] == ["a", "b", "c"]

    def test_decodes_a_full_sse_body(self, sse_body: Callable[..., bytes]) -> None:
        body = sse_body({"text": "one"}, {"text": "two"}, {"text": "three"})
        assert [token.text for token in FrameDecoder(Token).decode(body)] == ["one", "two", "three"]

    def test_invalid_utf8_chunk_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match="UTF-8"):
            list(FrameDecoder(Token).decode(b'data: {"text": "\xff"}\n\n'))

    def test_wire_example_with_done_sentinel(self) -> None:
        body = b"".join(
            f"{_frame(text)}\n\n".encode("utf-8") for text in ("a", "b", "c")
        ) + b"data: [DONE]\n\n"
        assert [token.text for token in FrameDecoder(Token).decode(body)] == ["a", "b", "c"]
