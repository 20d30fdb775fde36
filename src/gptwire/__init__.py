"""gptwire -- a typed, cache-aware client for generative-AI HTTP APIs.

The package is built around three reusable pieces:

* **Typed response decoding** -- :class:`~gptwire.response.PayloadView`
  subclasses declare fields as key paths over an immutable JSON document
  and fail loudly, naming the missing key, when the API's shape drifts.
* **Request caching** -- :class:`~gptwire.cache.ResponseCache` memoizes GET,
  JSON POST and multipart POST calls in a pluggable storage backend, keyed
  by a :class:`~gptwire.cache.RequestFingerprint`.
* **Stream decoding** -- :class:`~gptwire.client.FrameDecoder` turns a
  server-sent-event body into typed chunks for token-by-token generation.

Typical use::

    from gptwire import connect

    api = connect(api_key="sk-...")
    models = api.models.list()

Modules:
    api: Endpoint resources and the :func:`connect` factory.
    cache: Response cache, fingerprints and storage backends.
    client: httpx transport, multipart file references, stream decoding.
    response: PayloadView and the per-endpoint response schemas.
    chat: Immutable chat conversations.
    tokenizer: Token counting via tiktoken.
    models: Pydantic configuration models.
    config: XDG-aware configuration loading.
    exceptions: Exception hierarchy.
    output: Diagnostic output on stderr.
"""

__version__ = "0.1.0"

from gptwire.api import API, connect
from gptwire.cache import ResponseCache
from gptwire.chat import Chat
from gptwire.client import FrameDecoder, HTTPTransport
from gptwire.response import PayloadView, field, optional_field

__all__ = [
    "API",
    "Chat",
    "FrameDecoder",
    "HTTPTransport",
    "PayloadView",
    "ResponseCache",
    "__version__",
    "connect",
    "field",
    "optional_field",
]
