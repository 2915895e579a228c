"""Exception hierarchy for clientauth.

All exceptions inherit from :class:`ClientAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`clientauth.exit_codes`.
The CLI entry point catches ``ClientAuthError`` and exits with the
appropriate code.

Subclass hierarchy::

    ClientAuthError (exit 1)
    +-- InvalidArgumentError  (exit 2, also a ValueError)
    +-- ConfigurationError    (exit 2)
    +-- AuthenticationError   (exit 3)
    +-- ConfigError           (exit 4)
    +-- ConnectionError_      (exit 6)

Configuration problems are raised synchronously and never logged by the
library; remote authentication failures are logged where they happen and
surface as :class:`AuthenticationError` only in the OAuth2 strategy.
"""

from clientauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class ClientAuthError(Exception):
    """Base exception for all clientauth errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidArgumentError(ClientAuthError, ValueError):
    """Raised when an argument handed to the library is unusable.

    Covers the OAuth2 provider preconditions (wrong grant type, missing
    client credentials or token endpoint) and a named configuration section
    that does not exist or cannot be parsed.
    """

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(ClientAuthError):
    """Raised when a resolved configuration cannot be used by its strategy.

    Examples are a blank API key header, a missing ``Basic`` sub-section or
    an unsupported provider or grant type.
    """

    exit_code = EXIT_INVALID_USAGE


class AuthenticationError(ClientAuthError):
    """Raised when the OAuth2 strategy cannot obtain an access token."""

    exit_code = EXIT_AUTH_FAILURE


class ConfigError(ClientAuthError):
    """Raised when the settings document is missing or malformed."""

    exit_code = EXIT_CONFIG_ERROR


class ConnectionError_(ClientAuthError):
    """Raised on network-level failures of an authenticated request.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR
