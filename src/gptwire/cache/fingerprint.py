"""Deterministic cache keys for API requests.

A :class:`RequestFingerprint` captures everything that determines a
response: the verb, the credential, the route, the body and how the body is
encoded.  Its :meth:`~RequestFingerprint.identifier` is short and readable
enough to double as a file name::

    post_chat_completions_1f3a9c02

File body values are keyed by the SHA-256 of their content rather than their
path, so the same upload from two locations shares one cache entry and the
key never embeds the file itself.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Mapping, Optional

from gptwire.client.multipart import FormFile
from gptwire.models import BodyFormat, HTTPVerb

_ROUTE_PREFIX = "/v1/"
_DIGEST_LENGTH = 8


@dataclass(frozen=True, eq=False)
class RequestFingerprint:
    """Canonical description of a cacheable request.

    Args:
        verb: ``get`` or ``post``.
        credential: Identity of the credential the request is sent with.
        route: API route, e.g. ``/v1/completions``.
        body: Request body, or ``None`` for body-less requests.
        format: Body encoding, or ``None`` for body-less requests.
    """

    verb: HTTPVerb
    credential: str
    route: str
    body: Optional[Mapping[str, Any]] = None
    format: Optional[BodyFormat] = None

    def canonicalize(self) -> dict[str, Any]:
        """Return the fingerprint as plain JSON-safe data.

        Every :class:`~gptwire.client.multipart.FormFile` in the body is
        replaced by the hex SHA-256 digest of its content.
        """
        body = None
        if self.body is not None:
            body = {
                name: value.sha256() if isinstance(value, FormFile) else value
                for name, value in self.body.items()
            }
        return {
            "verb": HTTPVerb(self.verb).value,
            "credential": self.credential,
            "route": self.route,
            "body": body,
            "format": BodyFormat(self.format).value if self.format is not None else None,
        }

    def serialize(self) -> str:
        """Stable JSON text of :meth:`canonicalize` (keys sorted at every level)."""
        return json.dumps(self.canonicalize(), sort_keys=True, separators=(",", ":"))

    def identifier(self) -> str:
        """``{verb}_{route_slug}_{digest}`` where digest is 8 hex characters."""
        return self._identifier

    @cached_property
    def _identifier(self) -> str:
        digest = hashlib.sha256(self.serialize().encode("utf-8")).hexdigest()
        bare_route = self.route.removeprefix(_ROUTE_PREFIX)
        prefix = f"{HTTPVerb(self.verb).value}_{bare_route}".replace("/", "_")
        return f"{prefix}_{digest[:_DIGEST_LENGTH]}"

    def __str__(self) -> str:
        return self.identifier()
