"""Canonical Pydantic models shared across all clientauth modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- one named section of the settings document,
resolved into an immutable :class:`AuthConfig`:
    :class:`AuthenticationProvider`, :class:`OAuth2GrantType`,
    :class:`ApiKeyConfig`, :class:`BasicConfig`,
    :class:`ClientCredentialsConfig`, :class:`OAuth2Config` and
    :class:`AuthConfig`.

**Token endpoint models** -- parsed from the JSON bodies returned by an OAuth2
token endpoint:
    :class:`AccessTokenResponse` and :class:`ErrorResponse`.

Configuration keys are PascalCase in the settings document
(``AuthenticationProvider``, ``TokenEndpoint``, ...); the snake_case field
names are accepted as well so that models can be built directly in code.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal


class _CaseInsensitiveEnum(str, enum.Enum):
    """String enum whose members can be looked up ignoring case and underscores."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, str):
            folded = value.replace("_", "").replace("-", "").lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return None

    def __str__(self) -> str:
        return self.value


class AuthenticationProvider(_CaseInsensitiveEnum):
    """Selects which authentication strategy a named client uses."""

    NONE = "None"
    OAUTH2 = "OAuth2"
    API_KEY = "ApiKey"
    BASIC = "Basic"


class OAuth2GrantType(_CaseInsensitiveEnum):
    """OAuth2 grant types. Only ``ClientCredentials`` can be used."""

    NONE = "None"
    CLIENT_CREDENTIALS = "ClientCredentials"


def _lenient_enum(enum_cls: type[enum.Enum], value: Any) -> Any:
    """Convert *value* to *enum_cls* when possible, otherwise keep it as-is.

    Unknown values are preserved so that the strategy selector can report
    them by name instead of failing the whole section parse.
    """
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


class _SettingsModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
    )


# --- Auth Config ---


class ApiKeyConfig(_SettingsModel):
    """Static API key sent as a request header.

    Example::

        ApiKeyConfig(header="X-API-Key", value="secret")
    """

    header: Optional[str] = Field(default=None, description="Header name")
    value: Optional[str] = Field(default=None, description="Header value")


class BasicConfig(_SettingsModel):
    """Username and password for HTTP Basic authentication."""

    username: Optional[str] = None
    password: Optional[str] = None


class ClientCredentialsConfig(_SettingsModel):
    """Client id and secret for the OAuth2 client-credentials grant.

    When ``use_basic_auth_header`` is set the credentials are sent to the
    token endpoint as an ``Authorization: Basic`` header instead of as form
    fields.
    """

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    use_basic_auth_header: bool = False


class OAuth2Config(_SettingsModel):
    """OAuth2 settings for one named client.

    The ``additional_*_parameters`` maps are merged into the outgoing token
    request as headers, form fields and query parameters respectively.

    Example::

        OAuth2Config(
            token_endpoint="https://login.example.com/oauth2/token",
            grant_type=OAuth2GrantType.CLIENT_CREDENTIALS,
            client_credentials=ClientCredentialsConfig(
                client_id="billing", client_secret="s3cret"
            ),
            scope="api://billing/.default",
        )
    """

    token_endpoint: Optional[str] = Field(
        default=None, description="URL of the authorization server's token endpoint"
    )
    grant_type: Union[OAuth2GrantType, str] = OAuth2GrantType.NONE
    client_credentials: Optional[ClientCredentialsConfig] = None
    scope: Optional[str] = None
    authorization_scheme: Optional[str] = Field(
        default=None,
        description="Overrides the token type reported by the token endpoint",
    )
    disable_token_cache: bool = False
    additional_header_parameters: dict[str, str] = Field(default_factory=dict)
    additional_body_parameters: dict[str, str] = Field(default_factory=dict)
    additional_query_parameters: dict[str, str] = Field(default_factory=dict)

    @field_validator("grant_type", mode="before")
    @classmethod
    def _parse_grant_type(cls, value: Any) -> Any:
        if value is None:
            return OAuth2GrantType.NONE
        return _lenient_enum(OAuth2GrantType, value)


class AuthConfig(_SettingsModel):
    """Resolved authentication configuration for one named client.

    ``authentication_provider`` selects which of the sub-sections is used;
    the others are ignored.

    Example (settings document)::

        {
            "Billing": {
                "AuthenticationProvider": "ApiKey",
                "ApiKey": {"Header": "X-API-Key", "Value": "secret"}
            }
        }
    """

    authentication_provider: Union[AuthenticationProvider, str] = (
        AuthenticationProvider.NONE
    )
    api_key: Optional[ApiKeyConfig] = None
    basic: Optional[BasicConfig] = None
    oauth2: Optional[OAuth2Config] = Field(default=None, alias="OAuth2")

    @field_validator("authentication_provider", mode="before")
    @classmethod
    def _parse_provider(cls, value: Any) -> Any:
        if value is None:
            return AuthenticationProvider.NONE
        return _lenient_enum(AuthenticationProvider, value)


# --- Token endpoint responses ---


class AccessTokenResponse(BaseModel):
    """Successful token endpoint response (:rfc:`6749` section 5.1)."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = Field(
        default=None, description="Lifetime of the access token in seconds"
    )


class ErrorResponse(BaseModel):
    """Token endpoint error response (:rfc:`6749` section 5.2)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error: str
    description: Optional[str] = Field(default=None, alias="error_description")
    uri: Optional[str] = Field(default=None, alias="error_uri")
