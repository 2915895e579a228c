"""Built-in authentication strategies.

One sub-package per :class:`~clientauth.models.AuthenticationProvider`:

- :mod:`~clientauth.strategies.no_auth` -- passes requests through.
- :mod:`~clientauth.strategies.api_key` -- static header.
- :mod:`~clientauth.strategies.basic` -- HTTP Basic authentication.
- :mod:`~clientauth.strategies.oauth2` -- OAuth2 client-credentials token.
"""

from clientauth.strategies.api_key import ApiKeyAuth
from clientauth.strategies.basic import BasicAuth
from clientauth.strategies.no_auth import NoAuth
from clientauth.strategies.oauth2 import OAuth2Auth

__all__ = ["ApiKeyAuth", "BasicAuth", "NoAuth", "OAuth2Auth"]
