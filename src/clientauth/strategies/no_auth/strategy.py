"""No-op authentication strategy."""

from __future__ import annotations

import httpx

from clientauth.auth.base import AuthStrategy
from clientauth.models import AuthenticationProvider


class NoAuth(AuthStrategy):
    """Pass every request through unchanged."""

    provider = AuthenticationProvider.NONE

    def apply(self, request: httpx.Request) -> httpx.Request:
        return request
