"""Tests for the clientauth CLI commands."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from clientauth import __version__
from clientauth.app import app, mask
from clientauth.auth.oauth2_provider import OAuth2Provider
from clientauth.auth.selector import StrategySelector
from clientauth.cache import TokenCache
from clientauth.config import ConfigurationSource
from clientauth.exit_codes import EXIT_INVALID_USAGE

TOKEN_ENDPOINT = "https://login.example.com/oauth2/token"
CLIENT_ID = "billing"
CLIENT_SECRET = "billing-secret"
ACCESS_TOKEN = "eyJhbGciOi.payload.signature-WXYZ"

SETTINGS = {
    "Orders": {
        "AuthenticationProvider": "ApiKey",
        "ApiKey": {"Header": "X-API-Key", "Value": "orders-api-key-1234"},
    },
    "Legacy": {
        "AuthenticationProvider": "Basic",
        "Basic": {"Username": "alice", "Password": "wonderland"},
    },
    "Public": {"AuthenticationProvider": "None"},
    "Billing": {
        "AuthenticationProvider": "OAuth2",
        "OAuth2": {
            "TokenEndpoint": TOKEN_ENDPOINT,
            "GrantType": "ClientCredentials",
            "ClientCredentials": {"ClientId": CLIENT_ID, "ClientSecret": CLIENT_SECRET},
        },
    },
    "BrokenKey": {"AuthenticationProvider": "ApiKey", "ApiKey": {"Header": "X-API-Key"}},
}


@pytest.fixture
def stub_selector(
    isolated_config: Path, monkeypatch: pytest.MonkeyPatch, make_token_endpoint
):
    """Replace the CLI's selector factory with one backed by mock transports.

    Returns a function that installs a token endpoint answering with the
    given status and body (a one-hour bearer token by default) and returns it.
    """
    state: dict[str, Any] = {}

    def _install(**response: Any):
        if not response:
            response = {
                "json_body": {
                    "access_token": ACCESS_TOKEN,
                    "token_type": "Bearer",
                    "expires_in": 3600,
                }
            }
        state["endpoint"] = make_token_endpoint(**response)
        return state["endpoint"]

    def _factory(settings_path: Any, cache: TokenCache) -> StrategySelector:
        endpoint = state.get("endpoint") or _install()
        provider = OAuth2Provider(cache, client=endpoint.client())
        return StrategySelector(ConfigurationSource(SETTINGS, environ={}), provider)

    monkeypatch.setattr("clientauth.app.create_default_selector", _factory)
    return _install


class TestMask:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("short", "****"),
            ("12345678", "****"),
            ("orders-api-key-1234", "****1234"),
            (None, None),
        ],
    )
    def test_mask(self, value: Optional[str], expected: Optional[str]) -> None:
        assert mask(value) == expected

    def test_reveal(self) -> None:
        assert mask("orders-api-key-1234", reveal=True) == "orders-api-key-1234"


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"clientauth {__version__}" in result.stdout

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "Usage" in result.output


class TestInspect:
    def test_secrets_are_masked(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["--quiet", "inspect", "Orders"])

        assert result.exit_code == 0
        assert '"Header": "X-API-Key"' in result.stdout
        assert '"Value": "****1234"' in result.stdout
        assert "orders-api-key-1234" not in result.stdout

    def test_reveal(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["--quiet", "inspect", "Billing", "--reveal"])

        assert result.exit_code == 0
        assert f'"ClientSecret": "{CLIENT_SECRET}"' in result.stdout
        assert '"AuthenticationProvider": "OAuth2"' in result.stdout

    def test_unknown_section(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["inspect", "Nope"])

        assert result.exit_code == 2
        assert "Could not find the configuration section for Nope" in result.output

    def test_reads_settings_file(self, cli_runner, isolated_config: Path, write_settings) -> None:
        path = write_settings(SETTINGS)

        result = cli_runner.invoke(app, ["--quiet", "--config", str(path), "inspect", "Public"])

        assert result.exit_code == 0
        assert '"AuthenticationProvider": "None"' in result.stdout

    def test_missing_settings_file(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--config", str(isolated_config / "missing.json"), "inspect", "Public"]
        )

        assert result.exit_code == 4
        assert "Settings file not found" in result.output


class TestToken:
    def test_prints_masked_token(self, cli_runner, stub_selector) -> None:
        endpoint = stub_selector()

        result = cli_runner.invoke(app, ["--quiet", "token", "Billing"])

        assert result.exit_code == 0
        assert '"access_token": "****WXYZ"' in result.stdout
        assert '"token_type": "Bearer"' in result.stdout
        assert '"expires_in": 3600' in result.stdout
        assert endpoint.calls == 1

    def test_cached_between_invocations(self, cli_runner, stub_selector) -> None:
        endpoint = stub_selector()

        cli_runner.invoke(app, ["--quiet", "token", "Billing"])
        result = cli_runner.invoke(app, ["--quiet", "token", "Billing", "--reveal"])

        assert result.exit_code == 0
        assert ACCESS_TOKEN in result.stdout
        assert endpoint.calls == 1

    def test_rejects_non_oauth2_configuration(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["token", "Orders"])

        assert result.exit_code == 2
        assert "Configuration Orders uses ApiKey, not OAuth2." in result.output

    def test_failed_fetch(self, cli_runner, stub_selector) -> None:
        stub_selector(status_code=400, json_body={"error": "invalid_client"})

        result = cli_runner.invoke(app, ["token", "Billing"])

        assert result.exit_code == 3
        assert "No valid access token could be retrieved" in result.output


class TestHeaders:
    def test_api_key_header(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["--quiet", "headers", "Orders"])

        assert result.exit_code == 0
        assert "X-API-Key\t****1234" in result.stdout

    def test_basic_header_revealed(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["--quiet", "headers", "Legacy", "--reveal"])

        expected = base64.b64encode(b"alice:wonderland").decode()
        assert result.exit_code == 0
        assert f"Authorization\tBasic {expected}" in result.stdout

    def test_oauth2_header(self, cli_runner, stub_selector) -> None:
        stub_selector()

        result = cli_runner.invoke(app, ["--quiet", "headers", "Billing", "--reveal"])

        assert result.exit_code == 0
        assert f"Authorization\tBearer {ACCESS_TOKEN}" in result.stdout

    def test_no_headers(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["headers", "Public"])

        assert result.exit_code == 0
        assert "adds no headers" in result.output

    def test_incomplete_configuration(self, cli_runner, stub_selector) -> None:
        result = cli_runner.invoke(app, ["headers", "BrokenKey"])

        assert result.exit_code == 2
        assert "Value is not set in the ApiKey configuration" in result.output


class TestRequest:
    @pytest.fixture
    def resource_server(self, monkeypatch: pytest.MonkeyPatch) -> list[httpx.Request]:
        """Route SyncClient traffic to an in-memory resource server."""
        received: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append(request)
            if request.url.path == "/missing":
                return httpx.Response(404, text="not here")
            return httpx.Response(200, json={"method": request.method})

        from clientauth.client import sync_client

        original = sync_client.SyncClient.__init__

        def patched_init(self, *args: Any, **kwargs: Any) -> None:
            kwargs["transport"] = httpx.MockTransport(handler)
            original(self, *args, **kwargs)

        monkeypatch.setattr(sync_client.SyncClient, "__init__", patched_init)
        return received

    def test_authenticated_get(self, cli_runner, stub_selector, resource_server) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "request", "Orders", "https://api.example.com/orders"]
        )

        assert result.exit_code == 0
        assert '"method": "GET"' in result.stdout
        assert resource_server[0].headers["X-API-Key"] == "orders-api-key-1234"

    def test_method_headers_and_body(self, cli_runner, stub_selector, resource_server) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--quiet",
                "request",
                "Orders",
                "https://api.example.com/orders",
                "-X",
                "post",
                "-H",
                "Content-Type: application/json",
                "-d",
                '{"item": 1}',
            ],
        )

        assert result.exit_code == 0
        sent = resource_server[0]
        assert sent.method == "POST"
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.content == b'{"item": 1}'

    def test_invalid_header(self, cli_runner, stub_selector, resource_server) -> None:
        result = cli_runner.invoke(
            app, ["request", "Orders", "https://api.example.com/orders", "-H", "broken"]
        )

        assert result.exit_code == EXIT_INVALID_USAGE
        assert "Invalid header 'broken'" in result.output
        assert resource_server == []

    def test_error_status_exits_nonzero(self, cli_runner, stub_selector, resource_server) -> None:
        result = cli_runner.invoke(
            app, ["--quiet", "request", "Orders", "https://api.example.com/missing"]
        )

        assert result.exit_code == 1
        assert "not here" in result.stdout

    def test_authentication_failure_sends_nothing(
        self, cli_runner, stub_selector, resource_server
    ) -> None:
        stub_selector(status_code=500, text="boom")

        result = cli_runner.invoke(app, ["request", "Billing", "https://billing.example.com/"])

        assert result.exit_code == 3
        assert resource_server == []
