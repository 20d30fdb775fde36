"""Response caching for gptwire.

:class:`ResponseCache` wraps a transport and memoizes replay-safe calls,
keyed by a :class:`RequestFingerprint` of verb, credential, route and body.
Cached bodies live in a pluggable :class:`Storage` backend.
"""

from gptwire.cache.cache import ResponseCache
from gptwire.cache.fingerprint import RequestFingerprint
from gptwire.cache.storage import (
    DiskCacheStorage,
    FileSystemStorage,
    MemoryStorage,
    Storage,
    storage_for,
)

__all__ = [
    "DiskCacheStorage",
    "FileSystemStorage",
    "MemoryStorage",
    "RequestFingerprint",
    "ResponseCache",
    "Storage",
    "storage_for",
]
