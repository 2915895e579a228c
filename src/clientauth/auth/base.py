"""Abstract base class for authentication strategies.

Every strategy is an :class:`httpx.Auth`, so it plugs straight into
``httpx.Client(auth=...)`` and ``httpx.AsyncClient(auth=...)``. httpx runs
the strategy before transmitting each request, sends whatever request the
strategy yields, and hands the transport's response (or exception) back to
the caller untouched.

To implement a new strategy, subclass :class:`AuthStrategy`, set
:attr:`~AuthStrategy.provider` and implement :meth:`~AuthStrategy.apply`.
Strategies that need I/O to decorate a request override
:meth:`~AuthStrategy.apply_async` as well.

See Also:
    :mod:`clientauth.auth.selector` for choosing a strategy by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncGenerator, Generator

import httpx

from clientauth.models import AuthenticationProvider


class AuthStrategy(httpx.Auth, ABC):
    """Decorates outgoing requests with authentication headers.

    A strategy raises instead of yielding when its configuration is
    unusable or no credentials can be obtained, which aborts the request
    before anything is sent.
    """

    provider: AuthenticationProvider

    @abstractmethod
    def apply(self, request: httpx.Request) -> httpx.Request:
        """Add authentication to *request* and return it.

        Raises:
            ConfigurationError: If the strategy's configuration is incomplete.
            AuthenticationError: If credentials could not be obtained.
        """
        ...

    async def apply_async(self, request: httpx.Request) -> httpx.Request:
        """Non-blocking variant of :meth:`apply`. Defaults to calling :meth:`apply`."""
        return self.apply(request)

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        yield self.apply(request)

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        yield await self.apply_async(request)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provider={self.provider})"
