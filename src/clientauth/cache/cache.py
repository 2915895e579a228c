"""Expiring token storage shared by every OAuth2 client.

Uses :mod:`diskcache` to hold access tokens with a per-entry time-to-live.
:class:`diskcache.Cache` is thread-safe and process-safe, so callers never
need their own locking: concurrent cache misses for the same key may each
write an entry and the last writer wins.

When no directory is given, diskcache creates a private temporary directory;
:meth:`TokenCache.close` removes it again.

See Also:
    :class:`~clientauth.auth.oauth2_provider.OAuth2Provider` -- the only
    consumer of this cache.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Optional

import diskcache


class TokenCache:
    """Key/value store with per-entry expiry, backed by :class:`diskcache.Cache`.

    Args:
        directory: Root directory for the cache. A ``tokens/`` subdirectory
            is created inside it. ``None`` uses a temporary directory.

    Example::

        cache = TokenCache()
        cache.set("ClientCredentials#https://login/token#billing", token, 3420.0)
        hit = cache.get("ClientCredentials#https://login/token#billing")
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self._directory = Path(directory) / "tokens" if directory is not None else None
        self._cache = diskcache.Cache(
            str(self._directory) if self._directory is not None else None
        )
        self._temporary = directory is None

    @property
    def directory(self) -> str:
        """The directory holding the cache files."""
        return self._cache.directory

    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under *key*, or ``None`` when absent or expired."""
        return self._cache.get(key)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store *value* under *key* for *ttl_seconds* seconds, replacing any previous entry."""
        self._cache.set(key, value, expire=ttl_seconds)

    def delete(self, key: str) -> None:
        """Remove a single entry. Missing keys are ignored."""
        self._cache.delete(key)

    def clear(self) -> None:
        """Remove all entries from the cache."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache` and release resources.

        A temporary cache directory is deleted; a persistent one is kept.
        """
        self._cache.close()
        if self._temporary:
            shutil.rmtree(self._cache.directory, ignore_errors=True)
