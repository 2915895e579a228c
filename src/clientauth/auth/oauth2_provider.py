"""OAuth2 client-credentials token acquisition and caching.

This module provides :class:`OAuth2Provider`, the single stateful piece of
the authentication subsystem. Given an :class:`~clientauth.models.OAuth2Config`
it returns an :class:`~clientauth.models.AccessTokenResponse`, either from the
shared :class:`~clientauth.cache.TokenCache` or freshly fetched from the token
endpoint using the Client Credentials grant (:rfc:`6749` section 4.4).

Every decision branch is logged through the module logger. Remote failures
(non-success status, malformed body, OAuth2 error responses, unreachable
endpoint) are logged at error level and reported to the caller as ``None``;
invalid configuration raises :class:`~clientauth.exceptions.InvalidArgumentError`
before any I/O happens.

Tokens are cached under ``"{grant_type}#{token_endpoint}#{client_id}"`` for
95% of their reported lifetime. The scope is not part of the key, so two
configurations that differ only in scope share a cached token.

See Also:
    :class:`clientauth.strategies.oauth2.OAuth2Auth` -- turns a missing token
    into a hard failure.
"""

from __future__ import annotations

import base64
import logging
import math
from typing import Optional

import httpx
from pydantic import ValidationError

from clientauth.cache import TokenCache
from clientauth.exceptions import InvalidArgumentError
from clientauth.models import (
    AccessTokenResponse,
    ClientCredentialsConfig,
    ErrorResponse,
    OAuth2Config,
    OAuth2GrantType,
)

logger = logging.getLogger(__name__)

GRANT_TYPE = "grant_type"
CLIENT_CREDENTIALS = "client_credentials"
CLIENT_ID = "client_id"
CLIENT_SECRET = "client_secret"
SCOPE = "scope"

DEFAULT_TOKEN_TYPE = "Bearer"
CACHE_LIFETIME_FACTOR = 0.95


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _format_seconds(seconds: float) -> float | int:
    return int(seconds) if seconds.is_integer() else seconds


class OAuth2Provider:
    """Fetch and cache OAuth2 access tokens for the client-credentials grant.

    A single provider is shared by every OAuth2 client in a process. It
    holds no per-client state of its own; all sharing happens through the
    injected cache.

    Args:
        cache: Shared token cache.
        client: Optional blocking client used for token requests. When
            ``None`` a short-lived :class:`httpx.Client` is created per fetch.
        async_client: Optional non-blocking client used by
            :meth:`get_client_credentials_token_async`.
        timeout: Timeout in seconds for the short-lived clients.

    Example::

        provider = OAuth2Provider(TokenCache())
        token = provider.get_client_credentials_token(config)
        if token is not None:
            headers = {"Authorization": f"{token.token_type} {token.access_token}"}
    """

    def __init__(
        self,
        cache: TokenCache,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._cache = cache
        self._client = client
        self._async_client = async_client
        self._timeout = timeout

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get_client_credentials_token(
        self, config: OAuth2Config
    ) -> Optional[AccessTokenResponse]:
        """Return a cached or freshly fetched access token.

        Args:
            config: OAuth2 configuration of the calling client.

        Returns:
            The access token, or ``None`` when the token endpoint could not
            be reached or did not return a usable token (the reason is
            logged).

        Raises:
            InvalidArgumentError: If the grant type is not
                ``ClientCredentials``, the client credentials or token
                endpoint are missing, the client id/secret are blank, or the
                token endpoint is not a valid URL.
        """
        self._validate(config)
        key = self.cache_key(config)
        cached = self._lookup(config, key)
        if cached is not None:
            return cached

        request = self.build_token_request(config)
        try:
            if self._client is not None:
                response = self._client.send(request)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.send(request)
        except httpx.TransportError as exc:
            logger.error("Could not reach %s: %s.", config.token_endpoint, exc)
            return None

        token = self.parse_response(config, response)
        return self._store(config, key, token)

    async def get_client_credentials_token_async(
        self, config: OAuth2Config
    ) -> Optional[AccessTokenResponse]:
        """Non-blocking variant of :meth:`get_client_credentials_token`.

        Cancelling the awaiting task abandons the in-flight token request;
        :class:`asyncio.CancelledError` propagates and nothing is cached.
        """
        self._validate(config)
        key = self.cache_key(config)
        cached = self._lookup(config, key)
        if cached is not None:
            return cached

        request = self.build_token_request(config)
        try:
            if self._async_client is not None:
                response = await self._async_client.send(request)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.send(request)
        except httpx.TransportError as exc:
            logger.error("Could not reach %s: %s.", config.token_endpoint, exc)
            return None

        token = self.parse_response(config, response)
        return self._store(config, key, token)

    @staticmethod
    def cache_key(config: OAuth2Config) -> str:
        """Cache key for *config*: grant type, token endpoint and client id."""
        client_id = config.client_credentials.client_id if config.client_credentials else None
        return f"{config.grant_type}#{config.token_endpoint}#{client_id}"

    def build_token_request(self, config: OAuth2Config) -> httpx.Request:
        """Build the ``POST`` request for the token endpoint.

        The form body always carries ``grant_type=client_credentials``. The
        client id and secret go either into the body or, with
        ``use_basic_auth_header``, into an ``Authorization: Basic`` header.
        A non-blank scope is trimmed and added. Additional parameters from
        the configuration are merged in but never replace these fields.
        """
        credentials: ClientCredentialsConfig = config.client_credentials  # type: ignore[assignment]

        url = httpx.URL(config.token_endpoint)  # type: ignore[arg-type]
        if config.additional_query_parameters:
            url = url.copy_merge_params(config.additional_query_parameters)

        data: dict[str, str] = {GRANT_TYPE: CLIENT_CREDENTIALS}
        headers: dict[str, str] = {"Accept": "application/json"}

        if credentials.use_basic_auth_header:
            raw = f"{credentials.client_id}:{credentials.client_secret}"
            encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {encoded}"
        else:
            data[CLIENT_ID] = credentials.client_id  # type: ignore[assignment]
            data[CLIENT_SECRET] = credentials.client_secret  # type: ignore[assignment]

        if not _is_blank(config.scope):
            data[SCOPE] = config.scope.strip()  # type: ignore[union-attr]

        for name, value in config.additional_body_parameters.items():
            data.setdefault(name, value)
        for name, value in config.additional_header_parameters.items():
            headers.setdefault(name, value)

        return httpx.Request(
            "POST",
            url,
            data=data,
            headers=headers,
            extensions={"timeout": httpx.Timeout(self._timeout).as_dict()},
        )

    def parse_response(
        self, config: OAuth2Config, response: httpx.Response
    ) -> Optional[AccessTokenResponse]:
        """Turn a token endpoint response into a token, or log why it is not one.

        The token type defaults to ``Bearer`` and is replaced by the
        configured ``authorization_scheme`` when one is set.
        """
        body = response.text
        endpoint = config.token_endpoint

        if not response.is_success:
            client_id = config.client_credentials.client_id if config.client_credentials else None
            if response.status_code != httpx.codes.BAD_REQUEST or not self._log_oauth2_error(
                body, endpoint, client_id
            ):
                logger.error(
                    "Could not authenticate against %s, the returned status code was %s. "
                    "Response body: %s.",
                    endpoint,
                    response.status_code,
                    body,
                )
            return None

        try:
            token = AccessTokenResponse.model_validate_json(body)
        except ValidationError:
            logger.error("The result from %s is not a valid OAuth2 result.", endpoint)
            return None

        token_type = token.token_type if token.token_type is not None else DEFAULT_TOKEN_TYPE
        if not _is_blank(config.authorization_scheme):
            token_type = config.authorization_scheme  # type: ignore[assignment]
        return token.model_copy(update={"token_type": token_type})

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate(config: OAuth2Config) -> None:
        if config.grant_type is not OAuth2GrantType.CLIENT_CREDENTIALS:
            raise InvalidArgumentError(
                f"GrantType must be {OAuth2GrantType.CLIENT_CREDENTIALS}."
            )
        if config.client_credentials is None:
            raise InvalidArgumentError("No valid ClientCredentials found.")
        if _is_blank(config.client_credentials.client_id):
            raise InvalidArgumentError("ClientCredentials.ClientId must be specified.")
        if _is_blank(config.client_credentials.client_secret):
            raise InvalidArgumentError("ClientCredentials.ClientSecret must be specified.")
        if _is_blank(config.token_endpoint):
            raise InvalidArgumentError("TokenEndpoint must be specified.")
        try:
            httpx.URL(config.token_endpoint)  # type: ignore[arg-type]
        except httpx.InvalidURL as exc:
            raise InvalidArgumentError(
                f"TokenEndpoint {config.token_endpoint} is not a valid URL."
            ) from exc

    def _lookup(self, config: OAuth2Config, key: str) -> Optional[AccessTokenResponse]:
        client_id = config.client_credentials.client_id  # type: ignore[union-attr]
        if config.disable_token_cache:
            logger.debug(
                "Token cache is disabled, requesting token from endpoint %s with client id %s.",
                config.token_endpoint,
                client_id,
            )
            return None

        token = self._cache.get(key)
        if token is not None:
            logger.info(
                "Token for %s with client id %s found in cache, using this.",
                config.token_endpoint,
                client_id,
            )
            return token

        logger.debug(
            "Could not find existing token in cache, requesting token from endpoint %s "
            "with client id %s.",
            config.token_endpoint,
            client_id,
        )
        return None

    def _store(
        self, config: OAuth2Config, key: str, token: Optional[AccessTokenResponse]
    ) -> Optional[AccessTokenResponse]:
        if token is None:
            return None

        client_id = config.client_credentials.client_id  # type: ignore[union-attr]
        if config.disable_token_cache:
            logger.info(
                "Token retrieved from %s with client id %s, but the token cache is disabled.",
                config.token_endpoint,
                client_id,
            )
        elif token.expires_in is not None and token.expires_in > 0:
            cache_expires_in = math.floor(token.expires_in) * CACHE_LIFETIME_FACTOR
            self._cache.set(key, token, cache_expires_in)
            logger.info(
                "Token retrieved from %s with client id %s and cached for %s seconds.",
                config.token_endpoint,
                client_id,
                _format_seconds(cache_expires_in),
            )
        else:
            logger.info(
                "Token retrieved from %s with client id %s, but not cached since it is "
                "missing expires_in information.",
                config.token_endpoint,
                client_id,
            )
        return token

    @staticmethod
    def _log_oauth2_error(body: str, endpoint: Optional[str], client_id: Optional[str]) -> bool:
        """Log an OAuth2 error response on one line. Returns ``False`` if *body* is not one."""
        try:
            error = ErrorResponse.model_validate_json(body)
        except ValidationError:
            return False
        if _is_blank(error.error):
            return False

        message = f"Could not authenticate against {endpoint}"
        if not _is_blank(client_id):
            message += f" with client id {client_id}"
        message += f". Error code: {error.error}"
        if not _is_blank(error.description):
            message += f", description: {error.description}"
        if error.uri is not None:
            message += f" ({error.uri})"
        message += "."

        logger.error("%s", message)
        return True
