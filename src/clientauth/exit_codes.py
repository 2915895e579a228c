"""Numeric process exit codes used by the ``clientauth`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~clientauth.exceptions.ClientAuthError` subclass.
Scripts wrapping the CLI can inspect the exit code to determine the failure
class without parsing stderr.

Example::

    $ clientauth token billing
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- no token could be retrieved
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""A required argument or configuration value is missing or invalid."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed (no usable token or credentials rejected)."""

EXIT_CONFIG_ERROR = 4
"""The settings document could not be found or parsed."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
