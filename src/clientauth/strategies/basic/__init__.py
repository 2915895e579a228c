"""HTTP Basic authentication strategy.

Implements the ``Basic`` provider, which sends
``Authorization: Basic <base64(username:password)>`` per :rfc:`7617`.
"""

from clientauth.strategies.basic.strategy import BasicAuth

__all__ = ["BasicAuth"]
