"""Strategy selector -- resolves a named client configuration into a strategy.

The :class:`StrategySelector` is the central coordinator of the
authentication subsystem. It looks up a named section in a
:class:`~clientauth.config.ConfigurationSource`, validates it into an
immutable :class:`~clientauth.models.AuthConfig`, and instantiates the
matching :class:`~clientauth.auth.base.AuthStrategy`.

For most use cases, call :func:`create_default_selector` to get a selector
wired to the default settings file and a process-wide token cache.

See Also:
    :class:`~clientauth.client.SyncClient` -- consumes the strategies
    produced here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from clientauth.auth.base import AuthStrategy
from clientauth.auth.oauth2_provider import OAuth2Provider
from clientauth.cache import TokenCache
from clientauth.config import ConfigurationSource
from clientauth.exceptions import ConfigurationError, InvalidArgumentError
from clientauth.models import AuthConfig, AuthenticationProvider


class StrategySelector:
    """Map named configuration sections to authentication strategies.

    All dependencies are passed in explicitly; the selector holds no
    global state. One selector (and one token provider) is normally shared
    by every client in a process.

    Args:
        source: Where named configuration sections are read from.
        token_provider: Shared OAuth2 token provider used by
            :class:`~clientauth.strategies.oauth2.OAuth2Auth`.
        owned_cache: Token cache closed by :meth:`close`. Leave ``None``
            when the caller manages the provider's cache itself.

    Example::

        selector = StrategySelector(ConfigurationSource.load(), OAuth2Provider(TokenCache()))
        with httpx.Client(auth=selector.resolve("Billing")) as client:
            client.get("https://billing.example.com/invoices")
    """

    def __init__(
        self,
        source: ConfigurationSource,
        token_provider: OAuth2Provider,
        owned_cache: Optional[TokenCache] = None,
    ) -> None:
        self.source = source
        self.token_provider = token_provider
        self._owned_cache = owned_cache

    def close(self) -> None:
        """Close the token cache this selector created, if any."""
        if self._owned_cache is not None:
            self._owned_cache.close()
            self._owned_cache = None

    def __enter__(self) -> StrategySelector:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def load_config(self, configuration_name: str) -> AuthConfig:
        """Read and validate the section named *configuration_name*.

        Raises:
            InvalidArgumentError: If the section does not exist, is empty, or
                cannot be parsed as an :class:`~clientauth.models.AuthConfig`.
        """
        section = self.source.get_section(configuration_name)
        if section is None:
            raise InvalidArgumentError(
                f"Could not find the configuration section for {configuration_name} "
                f"that has values for AuthConfig."
            )
        try:
            return AuthConfig.model_validate(section)
        except ValidationError as exc:
            raise InvalidArgumentError(
                f"Could not find the configuration section for {configuration_name} "
                f"that has values for AuthConfig: {exc}"
            ) from exc

    def resolve(self, configuration_name: str) -> AuthStrategy:
        """Return the strategy configured for *configuration_name*.

        Raises:
            InvalidArgumentError: If the section is missing or unparseable.
            ConfigurationError: If the provider's sub-section is missing or
                the provider value is not supported.
        """
        return self.create_strategy(configuration_name, self.load_config(configuration_name))

    def create_strategy(self, configuration_name: str, config: AuthConfig) -> AuthStrategy:
        """Instantiate the strategy for an already resolved *config*."""
        from clientauth.strategies import ApiKeyAuth, BasicAuth, NoAuth, OAuth2Auth

        provider = config.authentication_provider

        if provider is AuthenticationProvider.NONE:
            return NoAuth()
        if provider is AuthenticationProvider.API_KEY:
            return ApiKeyAuth(_required(config.api_key, "ApiKey", configuration_name))
        if provider is AuthenticationProvider.BASIC:
            return BasicAuth(_required(config.basic, "Basic", configuration_name))
        if provider is AuthenticationProvider.OAUTH2:
            return OAuth2Auth(
                _required(config.oauth2, "OAuth2", configuration_name),
                self.token_provider,
            )
        raise ConfigurationError(f"AuthenticationProvider value {provider} is not supported.")


def _required(value, configuration_type: str, configuration_name: str):
    if value is None:
        raise ConfigurationError(
            f"Missing {configuration_type} configuration for configuration {configuration_name}."
        )
    return value


def create_default_selector(
    settings_path: str | Path | None = None,
    cache: Optional[TokenCache] = None,
) -> StrategySelector:
    """Create a :class:`StrategySelector` from the default settings file.

    Args:
        settings_path: Explicit settings file; defaults to
            :func:`~clientauth.config.default_settings_path`.
        cache: Token cache to share, still owned by the caller. When
            omitted the selector creates a temporary
            :class:`~clientauth.cache.TokenCache` and owns it; release it
            with :meth:`StrategySelector.close` or a ``with`` block.

    Example::

        with create_default_selector("settings.json") as selector:
            strategy = selector.resolve("Billing")
    """
    source = ConfigurationSource.load(settings_path)
    if cache is not None:
        return StrategySelector(source, OAuth2Provider(cache))
    owned = TokenCache()
    return StrategySelector(source, OAuth2Provider(owned), owned_cache=owned)
