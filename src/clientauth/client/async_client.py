"""Asynchronous HTTP client authenticated by a named configuration.

Behaves like :class:`~clientauth.client.sync_client.SyncClient` but is
non-blocking. The OAuth2 strategy fetches tokens with the provider's async
path, so cancelling a request task also abandons its token fetch.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.auth.selector import StrategySelector
from clientauth.exceptions import ConnectionError_


class AsyncClient:
    """Asynchronous HTTP client for one named configuration.

    Must be used as an async context manager.

    Example::

        async with AsyncClient("Billing", selector, base_url="https://billing.example.com") as client:
            response = await client.get("/invoices")
    """

    def __init__(
        self,
        configuration_name: str,
        selector: StrategySelector,
        base_url: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._configuration_name = configuration_name
        self._selector = selector
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.auth: Optional[AuthStrategy] = None

    async def __aenter__(self) -> AsyncClient:
        self.auth = self._selector.resolve(self._configuration_name)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            auth=self.auth,
            timeout=self._timeout,
            verify=self._verify_ssl,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request. See :meth:`SyncClient.request`."""
        if self._client is None:
            raise RuntimeError("AsyncClient must be used as an async context manager")
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed: {exc}") from exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request."""
        return await self.request("POST", url, **kwargs)
