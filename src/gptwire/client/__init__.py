"""HTTP transport and stream decoding for gptwire.

Classes:
    :class:`HTTPTransport` -- blocking transport backed by :class:`httpx.Client`.
    :class:`FrameDecoder` -- turns server-sent-event chunks into typed responses.
    :class:`FormFile` -- a file reference used as a multipart body value.
"""

from gptwire.client.multipart import FormFile
from gptwire.client.streaming import FrameDecoder, split_frames
from gptwire.client.transport import HTTPTransport

__all__ = ["FormFile", "FrameDecoder", "HTTPTransport", "split_frames"]
