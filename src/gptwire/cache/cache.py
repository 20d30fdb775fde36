"""Content-addressable response cache in front of a transport.

:class:`ResponseCache` mirrors the public surface of
:class:`~gptwire.client.transport.HTTPTransport` and memoizes every call
that is safe to replay:

* ``get`` -- keyed by route.
* ``post`` -- keyed by route and JSON body.
* ``post_form_multipart`` -- keyed by route and body, with file fields keyed
  by content digest.

``delete`` and ``stream_post`` are always forwarded to the transport.  The
credential is part of every key and is read from the transport on each
call, so swapping API keys between calls starts a fresh partition.

A hit returns exactly the text that was stored on the original miss and
never touches the network, so a hit can never raise a transport error.
"""

from __future__ import annotations

import threading
import weakref
from typing import Any, Callable, Mapping, Optional, Protocol

from gptwire.cache.fingerprint import RequestFingerprint
from gptwire.cache.storage import Storage
from gptwire.models import BodyFormat, HTTPVerb
from gptwire.output import get_output


class Transport(Protocol):
    """The subset of :class:`~gptwire.client.transport.HTTPTransport` the cache wraps."""

    def credential_identity(self) -> str: ...

    def get(self, route: str) -> str: ...

    def delete(self, route: str) -> str: ...

    def post(self, route: str, body: Optional[Mapping[str, Any]] = None) -> str: ...

    def post_form_multipart(self, route: str, body: Mapping[str, Any]) -> str: ...

    def stream_post(
        self, route: str, body: Mapping[str, Any], on_chunk: Callable[[str], object],
    ) -> None: ...


class ResponseCache:
    """Memoizing wrapper around a transport.

    Concurrent calls for the same fingerprint are serialised by a
    per-identifier lock, so the transport is invoked at most once per
    identifier even when one cache instance is shared between threads.
    Calls for different identifiers proceed independently.

    Args:
        client: The transport that performs real requests on a miss.
        storage: Backend holding the cached response bodies.

    Example::

        cache = ResponseCache(HTTPTransport("sk-..."), MemoryStorage())
        first = cache.get("/v1/models")    # network
        second = cache.get("/v1/models")   # storage
    """

    def __init__(self, client: Transport, storage: Storage) -> None:
        self._client = client
        self._storage = storage
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} storage={type(self._storage).__name__}>"

    @property
    def client(self) -> Transport:
        return self._client

    @property
    def storage(self) -> Storage:
        return self._storage

    # ------------------------------------------------------------------ #
    # Transport surface
    # ------------------------------------------------------------------ #

    def credential_identity(self) -> str:
        return self._client.credential_identity()

    def get(self, route: str) -> str:
        fingerprint = self._fingerprint(HTTPVerb.GET, route)
        return self._read_cache_or_apply(fingerprint, lambda: self._client.get(route))

    def post(self, route: str, body: Optional[Mapping[str, Any]] = None) -> str:
        body = dict(body or {})
        fingerprint = self._fingerprint(HTTPVerb.POST, route, body, BodyFormat.JSON)
        return self._read_cache_or_apply(fingerprint, lambda: self._client.post(route, body))

    def post_form_multipart(self, route: str, body: Mapping[str, Any]) -> str:
        body = dict(body)
        fingerprint = self._fingerprint(HTTPVerb.POST, route, body, BodyFormat.MULTIPART)
        return self._read_cache_or_apply(
            fingerprint, lambda: self._client.post_form_multipart(route, body),
        )

    def delete(self, route: str) -> str:
        # Deleting is not safe to replay, so it is never cached.
        return self._client.delete(route)

    def stream_post(
        self,
        route: str,
        body: Mapping[str, Any],
        on_chunk: Callable[[str], object],
    ) -> None:
        self._client.stream_post(route, body, on_chunk)

    def close(self) -> None:
        """Close the storage backend."""
        self._storage.close()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _fingerprint(
        self,
        verb: HTTPVerb,
        route: str,
        body: Optional[Mapping[str, Any]] = None,
        format: Optional[BodyFormat] = None,
    ) -> RequestFingerprint:
        return RequestFingerprint(
            verb=verb,
            credential=self._client.credential_identity(),
            route=route,
            body=body,
            format=format,
        )

    def _read_cache_or_apply(
        self, fingerprint: RequestFingerprint, call: Callable[[], str],
    ) -> str:
        target = fingerprint.identifier()
        output = get_output()

        with self._lock_for(target):
            if self._storage.cached(target):
                output.debug(f"Cache hit: {target}")
                return self._storage.read(target)

            output.debug(f"Cache miss: {target}")
            result = call()
            self._storage.write(target, result)
            return result

    def _lock_for(self, target: str) -> threading.Lock:
        # Entries vanish once no caller holds the lock, so the table only
        # grows with the number of identifiers in flight.
        with self._locks_guard:
            lock = self._locks.get(target)
            if lock is None:
                lock = self._locks[target] = threading.Lock()
            return lock
