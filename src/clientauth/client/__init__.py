"""HTTP clients authenticated by a named configuration.

Classes:
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both resolve their strategy through a
:class:`~clientauth.auth.selector.StrategySelector` on entry and are
designed to be used as context managers.

Example::

    from clientauth.client import SyncClient

    with SyncClient("Billing", selector) as client:
        resp = client.get("https://billing.example.com/invoices")
"""

from clientauth.client.async_client import AsyncClient
from clientauth.client.sync_client import SyncClient

__all__ = ["SyncClient", "AsyncClient"]
