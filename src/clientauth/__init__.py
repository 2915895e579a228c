"""clientauth -- pluggable authentication for outgoing HTTP requests.

Each named client configuration selects one of four strategies: no
authentication, a static API key header, HTTP Basic credentials, or an
OAuth2 client-credentials token that is fetched from the token endpoint and
cached until shortly before it expires. Strategies are :class:`httpx.Auth`
objects, so they plug directly into :class:`httpx.Client` and
:class:`httpx.AsyncClient`.

Typical usage::

    from clientauth.auth import create_default_selector

    with create_default_selector("settings.json") as selector, httpx.Client(
        auth=selector.resolve("Billing")
    ) as client:
        client.get("https://billing.example.com/invoices")

Modules:
    app: Typer CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Settings loading with nested sections and environment overrides.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the CLI.
    output: stdout/stderr formatting and log routing for the CLI.
"""

__version__ = "0.1.0"
