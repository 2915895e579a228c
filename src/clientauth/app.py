"""Typer application and CLI entry point for clientauth.

The CLI is a thin operator tool around the library: it resolves a named
configuration from the settings file and shows what the library would do
with it -- the token it obtains, the headers it adds, or the response of an
authenticated request.

Tokens fetched by the CLI are kept in a persistent
:class:`~clientauth.cache.TokenCache` under the cache directory, so repeated
invocations reuse them until they expire.

Typical usage::

    clientauth --config settings.json inspect Billing
    clientauth token Billing
    clientauth request Billing https://billing.example.com/invoices

See Also:
    :mod:`clientauth.config`: Where settings are loaded from.
    :mod:`clientauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import httpx
import typer

from clientauth import __version__
from clientauth.auth.selector import StrategySelector, create_default_selector
from clientauth.cache import TokenCache
from clientauth.config import get_cache_dir
from clientauth.exceptions import AuthenticationError, ClientAuthError, ConfigurationError
from clientauth.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from clientauth.models import AuthConfig, AuthenticationProvider
from clientauth.output import (
    OutputManager,
    error,
    get_output,
    info,
    print_json,
    print_table,
    set_output,
    success,
)

app = typer.Typer(
    name="clientauth",
    help="Authenticate outgoing HTTP requests from named client configurations.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_SECRET_FIELDS = {
    ("ApiKey", "Value"),
    ("Basic", "Password"),
    ("ClientCredentials", "ClientSecret"),
}


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"clientauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Settings file (defaults to $CLIENTAUTH_CONFIG)."
    ),
    plain: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug log records."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~clientauth.output.OutputManager`, routes
    library logging to stderr, and stores the settings path in ``ctx.obj``.
    """
    output = OutputManager(plain=plain, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    output.configure_logging()
    ctx.obj = {"config": config}


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report :class:`ClientAuthError` on stderr and exit with its code."""
    try:
        yield
    except ClientAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _selector(ctx: typer.Context) -> StrategySelector:
    cache = TokenCache(get_cache_dir())
    ctx.call_on_close(cache.close)
    settings = (ctx.obj or {}).get("config")
    return create_default_selector(settings, cache=cache)


def mask(value: Optional[str], reveal: bool = False) -> Optional[str]:
    """Hide all but the last four characters of *value* unless *reveal* is set."""
    if value is None or reveal:
        return value
    if len(value) <= 8:
        return "****"
    return f"****{value[-4:]}"


def _mask_secrets(data: Any, reveal: bool, parent: str = "") -> Any:
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if (parent, key) in _SECRET_FIELDS and isinstance(value, str):
                masked[key] = mask(value, reveal)
            else:
                masked[key] = _mask_secrets(value, reveal, key)
        return masked
    return data


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("inspect")
def inspect_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Configuration section name."),
    reveal: bool = typer.Option(False, "--reveal", help="Show secrets in clear text."),
) -> None:
    """Show the resolved configuration for NAME with secrets masked."""
    with _handle_errors():
        config: AuthConfig = _selector(ctx).load_config(name)
    data = config.model_dump(mode="json", by_alias=True, exclude_none=True)
    print_json(_mask_secrets(data, reveal))


@app.command("token")
def token_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Configuration section name (must use OAuth2)."),
    reveal: bool = typer.Option(False, "--reveal", help="Print the full access token."),
) -> None:
    """Fetch an OAuth2 access token for NAME, reusing a cached one when valid."""
    with _handle_errors():
        selector = _selector(ctx)
        config = selector.load_config(name)
        if config.authentication_provider is not AuthenticationProvider.OAUTH2:
            raise ConfigurationError(
                f"Configuration {name} uses {config.authentication_provider}, not OAuth2."
            )
        if config.oauth2 is None:
            raise ConfigurationError(f"Missing OAuth2 configuration for configuration {name}.")

        token = selector.token_provider.get_client_credentials_token(config.oauth2)
        if token is None:
            raise AuthenticationError(
                f"No valid access token could be retrieved from {config.oauth2.token_endpoint}."
            )

    data = token.model_dump()
    data["access_token"] = mask(token.access_token, reveal)
    print_json(data)


@app.command("headers")
def headers_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Configuration section name."),
    url: str = typer.Option(
        "https://example.invalid/", "--url", help="URL of the sample request."
    ),
    reveal: bool = typer.Option(False, "--reveal", help="Show header values in clear text."),
) -> None:
    """Show the headers the strategy for NAME adds to a request."""
    with _handle_errors():
        strategy = _selector(ctx).resolve(name)
        request = httpx.Request("GET", url)
        before = list(request.headers.multi_items())
        strategy.apply(request)

    added = [item for item in request.headers.multi_items() if item not in before]
    if not added:
        info(f"Configuration {name} adds no headers ({strategy.provider}).")
        return
    print_table(
        ["Header", "Value"],
        [[header, mask(value, reveal) or ""] for header, value in added],
        title=f"{name} ({strategy.provider})",
    )


@app.command("request")
def request_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Configuration section name."),
    url: str = typer.Argument(help="Absolute URL to request."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Extra header as 'Name: value'. Repeatable."
    ),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="Raw request body."),
    timeout: float = typer.Option(30.0, "--timeout", help="Timeout in seconds."),
) -> None:
    """Send an authenticated request using the strategy for NAME."""
    from clientauth.client import SyncClient

    extra_headers: list[tuple[str, str]] = []
    for raw in header or []:
        key, sep, value = raw.partition(":")
        if not sep or not key.strip():
            error(f"Invalid header '{raw}', expected 'Name: value'.")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        extra_headers.append((key.strip(), value.strip()))

    with _handle_errors():
        with SyncClient(name, _selector(ctx), timeout=timeout) as client:
            response = client.request(
                method.upper(), url, headers=extra_headers, content=body
            )

    info(f"{response.status_code} {response.reason_phrase}")
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            print_json(response.json())
        except ValueError:
            get_output().print_data(response.text)
    elif response.text:
        get_output().print_data(response.text)

    if not response.is_success:
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)
    success("Request succeeded.")


def main() -> None:
    """CLI entry point invoked by the ``clientauth`` console script.

    Unhandled :class:`~clientauth.exceptions.ClientAuthError` instances
    cause a clean exit with the error's ``exit_code``.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except ClientAuthError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)


if __name__ == "__main__":
    main()
