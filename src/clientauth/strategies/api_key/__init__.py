"""API key authentication strategy.

Implements the ``ApiKey`` provider, which adds a statically configured
header to every outgoing request.

See Also:
    :class:`~clientauth.strategies.api_key.strategy.ApiKeyAuth`
"""

from clientauth.strategies.api_key.strategy import ApiKeyAuth

__all__ = ["ApiKeyAuth"]
