"""Endpoint facade for gptwire.

:class:`API` groups the endpoint resources over a single client, which is
either an :class:`~gptwire.client.HTTPTransport` or a
:class:`~gptwire.cache.ResponseCache` wrapping one.  :func:`connect` builds
the whole stack from configuration.

Example::

    from gptwire.api import connect

    api = connect()
    reply = api.chat_completions.create(
        model="gpt-3.5-turbo",
        messages=[{"role": "user", "content": "Hello"}],
    )
    print(reply.response_text())
"""

from __future__ import annotations

from typing import Any, Optional

from gptwire.api.resources import (
    Audio,
    ChatCompletions,
    Completions,
    Edits,
    Embeddings,
    Files,
    FineTunes,
    Images,
    Models,
    Moderations,
)
from gptwire.cache import ResponseCache, storage_for
from gptwire.client import HTTPTransport
from gptwire.config import load_config, resolve_credential
from gptwire.models import ClientConfig


class API:
    """Entry point to every endpoint resource.

    Args:
        client: Transport (or cache) all requests go through.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def __repr__(self) -> str:
        return f"<{type(self).__name__} client={self._client!r}>"

    @property
    def client(self) -> Any:
        return self._client

    @property
    def completions(self) -> Completions:
        return Completions(self._client)

    @property
    def chat_completions(self) -> ChatCompletions:
        return ChatCompletions(self._client)

    @property
    def embeddings(self) -> Embeddings:
        return Embeddings(self._client)

    @property
    def models(self) -> Models:
        return Models(self._client)

    @property
    def moderations(self) -> Moderations:
        return Moderations(self._client)

    @property
    def edits(self) -> Edits:
        return Edits(self._client)

    @property
    def files(self) -> Files:
        return Files(self._client)

    @property
    def fine_tunes(self) -> FineTunes:
        return FineTunes(self._client)

    @property
    def images(self) -> Images:
        return Images(self._client)

    @property
    def audio(self) -> Audio:
        return Audio(self._client)


def connect(api_key: Optional[str] = None, config: Optional[ClientConfig] = None) -> API:
    """Build an :class:`API` from configuration.

    Args:
        api_key: Explicit API key.  When omitted, ``config.api_key_source``
            is resolved.
        config: Client configuration; loaded with
            :func:`~gptwire.config.load_config` when omitted.

    Raises:
        ConfigError: If the configuration or the credential cannot be resolved.
    """
    if config is None:
        config = load_config()
    if api_key is None:
        api_key = resolve_credential(config.api_key_source)

    client: Any = HTTPTransport(api_key, config.request)
    storage = storage_for(config.cache)
    if storage is not None:
        client = ResponseCache(client, storage)
    return API(client)


__all__ = [
    "API",
    "Audio",
    "ChatCompletions",
    "Completions",
    "Edits",
    "Embeddings",
    "Files",
    "FineTunes",
    "Images",
    "Models",
    "Moderations",
    "connect",
]
