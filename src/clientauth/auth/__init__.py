"""Pluggable authentication for outgoing HTTP requests.

The main entry points are:

- :class:`AuthStrategy` -- base class of the four built-in strategies, each an
  :class:`httpx.Auth`.
- :class:`OAuth2Provider` -- fetches and caches OAuth2 client-credentials tokens.
- :class:`StrategySelector` -- resolves a named configuration section into a
  strategy.
- :func:`create_default_selector` -- selector wired to the default settings
  file and a fresh token cache.

Typical usage::

    from clientauth.auth import create_default_selector

    with create_default_selector() as selector, httpx.Client(
        auth=selector.resolve("Billing")
    ) as client:
        client.get("https://billing.example.com/invoices")
"""

from clientauth.auth.base import AuthStrategy
from clientauth.auth.oauth2_provider import OAuth2Provider
from clientauth.auth.selector import StrategySelector, create_default_selector

__all__ = [
    "AuthStrategy",
    "OAuth2Provider",
    "StrategySelector",
    "create_default_selector",
]
