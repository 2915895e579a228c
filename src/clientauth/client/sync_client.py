"""Synchronous HTTP client authenticated by a named configuration.

This module provides :class:`SyncClient`, a blocking client that wraps
:class:`httpx.Client` with the strategy resolved for one named
configuration. httpx runs the strategy before each request is transmitted;
configuration and authentication errors abort the request before anything
is sent.

See Also:
    :class:`~clientauth.client.async_client.AsyncClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.auth.selector import StrategySelector
from clientauth.exceptions import ConnectionError_


class SyncClient:
    """Synchronous HTTP client for one named configuration.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        configuration_name: Name of the configuration section to authenticate with.
        selector: Resolves *configuration_name* into a strategy.
        base_url: Prefix for relative request paths.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        transport: Optional custom transport (used by tests).

    Example::

        with SyncClient("Billing", selector, base_url="https://billing.example.com") as client:
            response = client.get("/invoices")
    """

    def __init__(
        self,
        configuration_name: str,
        selector: StrategySelector,
        base_url: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._configuration_name = configuration_name
        self._selector = selector
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self.auth: Optional[AuthStrategy] = None

    def __enter__(self) -> SyncClient:
        # Resolve up front so configuration errors surface before any request.
        self.auth = self._selector.resolve(self._configuration_name)
        self._client = httpx.Client(
            base_url=self._base_url,
            auth=self.auth,
            timeout=self._timeout,
            verify=self._verify_ssl,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request.

        Args:
            method: HTTP method.
            url: Absolute URL, or path relative to ``base_url``.
            **kwargs: Forwarded to :meth:`httpx.Client.request`.

        Returns:
            The :class:`httpx.Response`, whatever its status code.

        Raises:
            ConfigurationError: If the named configuration is incomplete.
            AuthenticationError: If no OAuth2 token could be retrieved.
            ConnectionError_: On network / timeout errors.
        """
        if self._client is None:
            raise RuntimeError("SyncClient must be used as a context manager")
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed: {exc}") from exc

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request. See :meth:`request`."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request. See :meth:`request`."""
        return self.request("POST", url, **kwargs)
