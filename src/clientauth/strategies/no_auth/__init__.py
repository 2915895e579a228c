"""Strategy for clients that send requests without authentication."""

from clientauth.strategies.no_auth.strategy import NoAuth

__all__ = ["NoAuth"]
