"""API key authentication strategy.

This module provides :class:`ApiKeyAuth`, which adds the configured header
name and value to each request. When the request already carries that
header the key is added as an extra value rather than replacing it.
"""

from __future__ import annotations

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.exceptions import ConfigurationError
from clientauth.models import ApiKeyConfig, AuthenticationProvider


class ApiKeyAuth(AuthStrategy):
    """Authenticate with a static API key header.

    Args:
        config: The ``ApiKey`` section of the client configuration.

    Example::

        auth = ApiKeyAuth(ApiKeyConfig(header="X-API-Key", value="secret"))
        httpx.get("https://api.example.com/orders", auth=auth)
    """

    provider = AuthenticationProvider.API_KEY

    def __init__(self, config: ApiKeyConfig) -> None:
        self.config = config

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Add the API key header to *request*.

        Raises:
            ConfigurationError: If ``header`` or ``value`` is blank.
        """
        header = self.config.header
        value = self.config.value
        if not header or not header.strip():
            raise ConfigurationError(
                "HTTP client configured to use ApiKey, but Header is not set in the "
                "ApiKey configuration."
            )
        if not value or not value.strip():
            raise ConfigurationError(
                "HTTP client configured to use ApiKey, but Value is not set in the "
                "ApiKey configuration."
            )

        # Headers.__setitem__ replaces existing values; rebuild to append instead.
        request.headers = httpx.Headers(
            [*request.headers.multi_items(), (header, value)]
        )
        return request
