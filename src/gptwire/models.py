"""Pydantic configuration models shared across gptwire.

:class:`ClientConfig` is the root object loaded by
:func:`gptwire.config.load_config`.  It nests a :class:`RequestConfig`
(transport settings) and a :class:`CacheConfig` (which storage backend, if
any, sits in front of the transport).
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_BASE_URL = "https://api.openai.com"


class HTTPVerb(str, enum.Enum):
    """HTTP verbs that take part in request fingerprinting."""

    GET = "get"
    POST = "post"


class BodyFormat(str, enum.Enum):
    """How a request body is encoded on the wire."""

    JSON = "json"
    MULTIPART = "multipart"


class CacheStrategy(str, enum.Enum):
    """Storage backend selected for the response cache.

    ``NONE`` disables caching entirely; the transport is used directly.
    """

    NONE = "none"
    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    DISKCACHE = "diskcache"


class RequestConfig(BaseModel):
    """HTTP transport settings."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root, without /v1")
    timeout: float = Field(default=60, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=2, ge=0, description="Max retry attempts")


class CacheConfig(BaseModel):
    """Response cache settings.

    Example::

        CacheConfig(strategy="filesystem", directory="/tmp/gptwire-cache")
    """

    strategy: CacheStrategy = Field(
        default=CacheStrategy.NONE,
        description="Cache backend: none, memory, filesystem, diskcache",
    )
    directory: Optional[str] = Field(
        default=None,
        description="Directory for filesystem/diskcache backends "
        "(defaults to the XDG cache directory)",
    )


class ClientConfig(BaseModel):
    """Root configuration for a gptwire client."""

    model_config = ConfigDict(extra="ignore")

    api_key_source: str = Field(
        default="env:OPENAI_API_KEY",
        description="Credential source: env:VAR or file:/path",
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
