"""HTTP Basic authentication strategy."""

from __future__ import annotations

import base64

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.exceptions import ConfigurationError
from clientauth.models import AuthenticationProvider, BasicConfig


class BasicAuth(AuthStrategy):
    """Authenticate via HTTP Basic authentication.

    The username and password are joined with a colon, UTF-8 encoded,
    Base64-encoded and sent as an ``Authorization: Basic <encoded>`` header.
    An existing ``Authorization`` header is replaced.
    """

    provider = AuthenticationProvider.BASIC

    def __init__(self, config: BasicConfig) -> None:
        self.config = config

    def apply(self, request: httpx.Request) -> httpx.Request:
        """Set the Basic ``Authorization`` header on *request*.

        Raises:
            ConfigurationError: If ``username`` or ``password`` is blank.
        """
        username = self.config.username
        password = self.config.password
        if not username or not username.strip():
            raise ConfigurationError(
                "HTTP client configured to use basic authentication but Username is "
                "missing in configuration."
            )
        if not password or not password.strip():
            raise ConfigurationError(
                "HTTP client configured to use basic authentication but Password is "
                "missing in configuration."
            )

        encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        request.headers["Authorization"] = f"Basic {encoded}"
        return request
