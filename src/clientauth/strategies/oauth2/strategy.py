"""OAuth2 authentication strategy.

This module provides :class:`OAuth2Auth`. The strategy never holds a token
itself; it asks the provider on every request, which serves it from the
token cache when possible. A missing token is fatal for the request.

See Also:
    :class:`clientauth.auth.oauth2_provider.OAuth2Provider`
"""

from __future__ import annotations

from typing import Optional

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.auth.oauth2_provider import OAuth2Provider
from clientauth.exceptions import AuthenticationError, ConfigurationError
from clientauth.models import (
    AccessTokenResponse,
    AuthenticationProvider,
    OAuth2Config,
    OAuth2GrantType,
)


class OAuth2Auth(AuthStrategy):
    """Authenticate with an OAuth2 access token.

    Args:
        config: The ``OAuth2`` section of the client configuration.
        token_provider: Shared provider that fetches and caches tokens.
    """

    provider = AuthenticationProvider.OAUTH2

    def __init__(self, config: OAuth2Config, token_provider: OAuth2Provider) -> None:
        self.config = config
        self.token_provider = token_provider

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Fetch a token and set ``Authorization: <token_type> <access_token>``.

        Raises:
            ConfigurationError: If the grant type is missing or unsupported.
            InvalidArgumentError: If the client credentials or token endpoint
                are incomplete or the token endpoint is malformed.
            AuthenticationError: If no valid access token could be retrieved.
        """
        self._check_grant_type()
        token = self.token_provider.get_client_credentials_token(self.config)
        return self._authorize(request, token)

    async def apply_async(self, request: httpx.Request) -> httpx.Request:
        self._check_grant_type()
        token = await self.token_provider.get_client_credentials_token_async(self.config)
        return self._authorize(request, token)

    def _check_grant_type(self) -> None:
        grant_type = self.config.grant_type
        if grant_type is OAuth2GrantType.NONE:
            raise ConfigurationError("GrantType must be specified.")
        if grant_type is not OAuth2GrantType.CLIENT_CREDENTIALS:
            raise ConfigurationError(f"The GrantType {grant_type} is not supported.")

    @staticmethod
    def _authorize(
        request: httpx.Request, token: Optional[AccessTokenResponse]
    ) -> httpx.Request:
        if token is None:
            raise AuthenticationError(
                "HTTP client configured to use OAuth2 authentication, but no valid "
                "access token could be retrieved."
            )
        request.headers["Authorization"] = f"{token.token_type} {token.access_token}"
        return request
