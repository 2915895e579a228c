"""OAuth2 client-credentials authentication strategy.

Implements the ``OAuth2`` provider: each request asks the shared
:class:`~clientauth.auth.oauth2_provider.OAuth2Provider` for a token and
sends it as ``Authorization: <token_type> <access_token>``.
"""

from clientauth.strategies.oauth2.strategy import OAuth2Auth

__all__ = ["OAuth2Auth"]
