"""Storage backends for the response cache.

A backend maps a fingerprint identifier to the raw response body text.  The
contract is deliberately small -- ``cached``, ``read`` and ``write`` -- so
that new backends can be added without touching
:class:`~gptwire.cache.cache.ResponseCache`.

Backends:
    :class:`MemoryStorage` -- a dict that lives as long as the process.
    :class:`FileSystemStorage` -- one ``{identifier}.json`` file per entry.
    :class:`DiskCacheStorage` -- a :class:`diskcache.Cache` directory.

Entries are never expired or invalidated here; staleness is the caller's
concern.  Backends do no locking of their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import diskcache

from gptwire.config import _atomic_write, get_cache_dir
from gptwire.exceptions import CacheMissError
from gptwire.models import CacheConfig, CacheStrategy


class Storage(ABC):
    """Abstract key/value store for cached response bodies."""

    @abstractmethod
    def cached(self, identifier: str) -> bool:
        """Return ``True`` if an entry exists for *identifier*."""

    @abstractmethod
    def read(self, identifier: str) -> str:
        """Return the stored text for *identifier*.

        Raises:
            CacheMissError: If there is no such entry.
        """

    @abstractmethod
    def write(self, identifier: str, text: str) -> None:
        """Store *text* under *identifier*, replacing any previous entry."""

    def close(self) -> None:
        """Release any resources held by the backend."""


class MemoryStorage(Storage):
    """In-process storage; cleared only when the process exits."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def cached(self, identifier: str) -> bool:
        return identifier in self._entries

    def read(self, identifier: str) -> str:
        try:
            return self._entries[identifier]
        except KeyError:
            raise CacheMissError(identifier) from None

    def write(self, identifier: str, text: str) -> None:
        self._entries[identifier] = text

    def __len__(self) -> int:
        return len(self._entries)


class FileSystemStorage(Storage):
    """One JSON file per entry inside *cache_dir*.

    Files are named ``{identifier}.json`` and hold the raw response body,
    nothing else.  Writes replace the file atomically, so a file is either
    absent or complete.

    Args:
        cache_dir: Directory for the entries; created on first write.
    """

    def __init__(self, cache_dir: str | Path) -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def cached(self, identifier: str) -> bool:
        return self._cache_file(identifier).is_file()

    def read(self, identifier: str) -> str:
        try:
            return self._cache_file(identifier).read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CacheMissError(identifier) from None

    def write(self, identifier: str, text: str) -> None:
        _atomic_write(self._cache_file(identifier), text)

    def _cache_file(self, identifier: str) -> Path:
        return self._cache_dir / f"{identifier}.json"


class DiskCacheStorage(Storage):
    """Entries kept in a :mod:`diskcache` directory, without expiry.

    Args:
        directory: Root directory of the :class:`diskcache.Cache`.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._cache = diskcache.Cache(str(self._directory))

    def cached(self, identifier: str) -> bool:
        return identifier in self._cache

    def read(self, identifier: str) -> str:
        text = self._cache.get(identifier)
        if text is None:
            raise CacheMissError(identifier)
        return text

    def write(self, identifier: str, text: str) -> None:
        self._cache.set(identifier, text)

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        self._cache.close()

    def __len__(self) -> int:
        return len(self._cache)


def storage_for(config: CacheConfig) -> Optional[Storage]:
    """Build the backend selected by *config*, or ``None`` when caching is off.

    Directory-backed strategies default to ``<cache_dir>/responses``.
    """
    strategy = CacheStrategy(config.strategy)
    if strategy is CacheStrategy.NONE:
        return None
    if strategy is CacheStrategy.MEMORY:
        return MemoryStorage()

    directory = Path(config.directory) if config.directory else get_cache_dir() / "responses"
    if strategy is CacheStrategy.FILESYSTEM:
        return FileSystemStorage(directory)
    return DiskCacheStorage(directory)
