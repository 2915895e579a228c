"""Expiring token storage for clientauth.

This package provides :class:`TokenCache`, a thin wrapper over
:mod:`diskcache` used by the OAuth2 provider to keep access tokens until
shortly before they expire.
"""

from clientauth.cache.cache import TokenCache

__all__ = ["TokenCache"]
