"""Incremental decoding of server-sent-event response bodies.

Streaming endpoints answer with a chunked body of ``data:`` frames separated
by blank lines and terminated by a ``[DONE]`` sentinel::

    data: {"id": "cmpl-1", ...}

    data: {"id": "cmpl-1", ...}

    data: [DONE]

:class:`FrameDecoder` turns each chunk the transport delivers into typed
:class:`~gptwire.response.payload.PayloadView` objects.  It keeps no state
between chunks: a chunk is split, decoded, and fully yielded before the next
one is looked at, and frames come out in the order they arrived.
"""

from __future__ import annotations

from typing import Callable, Generic, Iterable, Iterator, TypeVar, Union

from gptwire.exceptions import ParseError
from gptwire.response.payload import PayloadView

V = TypeVar("V", bound=PayloadView)

Chunk = Union[str, bytes]

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def split_frames(chunk: Chunk) -> list[str]:
    """Split one transport chunk into the JSON texts of its frames.

    Empty parts and the ``[DONE]`` sentinel are dropped.

    Raises:
        ParseError: If a byte chunk is not valid UTF-8.
    """
    if isinstance(chunk, bytes):
        try:
            chunk = chunk.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Stream chunk is not valid UTF-8: {exc}") from exc

    frames = []
    for part in chunk.split(FRAME_DELIMITER):
        text = part.strip()
        if text.startswith(DATA_PREFIX):
            text = text[len(DATA_PREFIX):].strip()
        if not text or text == DONE_SENTINEL:
            continue
        frames.append(text)
    return frames


class FrameDecoder(Generic[V]):
    """Decode streamed chunks into instances of *payload_cls*.

    Args:
        payload_cls: The response type every frame is parsed into.

    Example::

        decoder = FrameDecoder(ChatCompletionChunk)
        for chunk in decoder.iter_decoded(lines):
            print(chunk.response_text(), end="")
    """

    def __init__(self, payload_cls: type[V]) -> None:
        self._payload_cls = payload_cls

    @property
    def payload_cls(self) -> type[V]:
        return self._payload_cls

    def decode(self, chunk: Chunk) -> Iterator[V]:
        """Yield one typed object per frame in *chunk*.

        Raises:
            ParseError: If a frame is not valid JSON.
        """
        for frame in split_frames(chunk):
            yield self._payload_cls.from_json(frame)

    def iter_decoded(self, chunks: Iterable[Chunk]) -> Iterator[V]:
        """Decode an entire stream of chunks lazily."""
        for chunk in chunks:
            yield from self.decode(chunk)

    def callback(self, on_frame: Callable[[V], object]) -> Callable[[Chunk], None]:
        """Adapt *on_frame* into a per-chunk callback for push-style transports."""

        def handle_chunk(chunk: Chunk) -> None:
            for payload in self.decode(chunk):
                on_frame(payload)

        return handle_chunk
