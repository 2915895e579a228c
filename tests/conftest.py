"""Shared test fixtures for clientauth.

Provides reusable fixtures for isolated config environments, token caches,
mock token endpoints, output state and the CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from clientauth.cache import TokenCache
from clientauth.output import OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and library log routing after every test.

    The CLI installs a RichHandler bound to the streams of the test runner;
    leaving it in place would write to closed files in later tests.
    """
    yield
    reset_output()
    logger = logging.getLogger("clientauth")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Token endpoint fixtures
# ---------------------------------------------------------------------------


class TokenEndpoint:
    """Mock token endpoint for :class:`httpx.MockTransport`.

    Records every request it receives and answers with a fixed status and
    body.
    """

    def __init__(
        self,
        status_code: int = 200,
        json_body: Optional[Any] = None,
        text: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.json_body = json_body
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.json_body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def make_token_endpoint() -> Callable[..., TokenEndpoint]:
    """Factory for token endpoints with a chosen status and body.

    Example::

        endpoint = make_token_endpoint(status_code=400, json_body={"error": "invalid_client"})
        provider = OAuth2Provider(cache, client=endpoint.client())
    """
    return TokenEndpoint


@pytest.fixture
def token_endpoint() -> TokenEndpoint:
    """A token endpoint returning a one-hour bearer token."""
    return TokenEndpoint(
        json_body={"access_token": "fetched-token", "token_type": "Bearer", "expires_in": 3600}
    )


@pytest.fixture
def token_cache(tmp_path: Path) -> TokenCache:
    """A real TokenCache stored under tmp_path."""
    cache = TokenCache(tmp_path)
    yield cache
    cache.close()


# ---------------------------------------------------------------------------
# Config isolation fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and cache directories to tmp_path.

    Sets XDG_CONFIG_HOME and XDG_CACHE_HOME to subdirectories of tmp_path,
    clears CLIENTAUTH_* environment variables and changes the working
    directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("CLIENTAUTH_CONFIG", raising=False)
    for name in list(os.environ):
        if name.upper().startswith("CLIENTAUTH__"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_settings(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Write a settings document to tmp_path and return its path."""

    def _write(data: dict[str, Any], name: str = "settings.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a plain, quiet OutputManager for tests that don't care about output."""
    output = OutputManager(plain=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
