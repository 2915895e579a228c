"""Settings loading with XDG paths, nested sections and environment overrides.

This module supplies the named configuration sections that the
:class:`~clientauth.auth.selector.StrategySelector` resolves into
:class:`~clientauth.models.AuthConfig` objects:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.clientauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **Settings document** -- a JSON (or YAML) object whose top-level keys are
  section names. Sections may nest; ``"Clients:Billing"`` addresses
  ``{"Clients": {"Billing": {...}}}``. Section names are matched ignoring
  case.
* **Environment overlay** -- variables named
  ``CLIENTAUTH__<Section>__<Key>...`` override values from the document, so
  secrets need not live in the file.

Example settings document::

    {
        "Billing": {
            "AuthenticationProvider": "OAuth2",
            "OAuth2": {
                "TokenEndpoint": "https://login.example.com/oauth2/token",
                "GrantType": "ClientCredentials",
                "ClientCredentials": {"ClientId": "billing", "ClientSecret": "..."}
            }
        }
    }
"""

from __future__ import annotations

import copy
import json
import os
import platform
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from clientauth.exceptions import ConfigError

_APP_NAME = "clientauth"
_SETTINGS_FILENAME = "settings.json"

CONFIG_ENV_VAR = "CLIENTAUTH_CONFIG"
ENV_PREFIX = "CLIENTAUTH__"
SECTION_SEPARATOR = ":"
ENV_SEPARATOR = "__"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/clientauth/`` (default ``~/.config/clientauth/``).
    On macOS/Windows: ``~/.clientauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the persistent token cache used by the CLI. Cached tokens can be
    safely deleted at any time.

    On Linux/BSD: ``$XDG_CACHE_HOME/clientauth/`` (default ``~/.cache/clientauth/``).
    On macOS/Windows: ``~/.clientauth/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_settings_path() -> Path:
    """Return ``$CLIENTAUTH_CONFIG`` if set, else ``<config_dir>/settings.json``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / _SETTINGS_FILENAME


# --- Document parsing ---


def _parse_document(text: str, hint: Optional[str], origin: str) -> dict[str, Any]:
    """Parse *text* as JSON or YAML, trying JSON first unless *hint* is ``"yaml"``."""
    data: Any = None
    if hint != "yaml":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON in settings {origin}: {exc}") from exc
            data = None
    if data is None:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid settings {origin}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Settings {origin} must contain an object at the top level, "
            f"got {type(data).__name__}"
        )
    return data


def _find_key(mapping: Mapping[str, Any], name: str) -> Optional[str]:
    """Return the key of *mapping* equal to *name* ignoring case."""
    if name in mapping:
        return name
    folded = name.lower()
    for key in mapping:
        if key.lower() == folded:
            return key
    return None


def _set_path(target: dict[str, Any], parts: list[str], value: str) -> None:
    node = target
    for part in parts[:-1]:
        key = _find_key(node, part)
        if key is None or not isinstance(node[key], dict):
            key = key or part
            node[key] = {}
        node = node[key]
    leaf = _find_key(node, parts[-1]) or parts[-1]
    node[leaf] = value


class ConfigurationSource:
    """Named configuration sections backed by a settings document.

    Args:
        data: The parsed settings document.
        environ: Environment used for the ``CLIENTAUTH__`` overlay.
            Defaults to :data:`os.environ`; pass ``{}`` to disable it.

    Example::

        source = ConfigurationSource.from_file("settings.json")
        section = source.get_section("Clients:Billing")
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(data or {}))
        self._apply_environment(os.environ if environ is None else environ)

    @classmethod
    def from_file(
        cls, path: str | Path, environ: Optional[Mapping[str, str]] = None
    ) -> ConfigurationSource:
        """Load a settings document from *path*.

        Files ending in ``.yaml``/``.yml`` are parsed as YAML, ``.json`` as
        JSON; anything else is tried as JSON first and then as YAML.

        Raises:
            ConfigError: If the file does not exist, cannot be read, or does
                not contain an object.
        """
        path = Path(path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Settings file not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc

        suffix = path.suffix.lower()
        hint = "yaml" if suffix in (".yaml", ".yml") else "json" if suffix == ".json" else None
        return cls(_parse_document(text, hint, f"at {path}"), environ=environ)

    @classmethod
    def load(
        cls, path: str | Path | None = None, environ: Optional[Mapping[str, str]] = None
    ) -> ConfigurationSource:
        """Load settings from *path*, or from :func:`default_settings_path`.

        A missing default settings file yields a source that only contains
        the environment overlay; an explicitly named file must exist.
        """
        if path is not None:
            return cls.from_file(path, environ=environ)
        default = default_settings_path()
        if default.is_file():
            return cls.from_file(default, environ=environ)
        return cls({}, environ=environ)

    def get_section(self, name: str) -> Optional[dict[str, Any]]:
        """Return the section addressed by *name*, or ``None`` if it has no values.

        Args:
            name: Section path using ``:`` between levels, matched ignoring case.
        """
        node: Any = self._data
        for part in name.split(SECTION_SEPARATOR):
            if not isinstance(node, dict):
                return None
            key = _find_key(node, part)
            if key is None:
                return None
            node = node[key]
        if not isinstance(node, dict) or not node:
            return None
        return copy.deepcopy(node)

    def section_names(self) -> list[str]:
        """Return the top-level section names, sorted alphabetically."""
        return sorted(key for key, value in self._data.items() if isinstance(value, dict))

    def _apply_environment(self, environ: Mapping[str, str]) -> None:
        for name, value in environ.items():
            if not name.upper().startswith(ENV_PREFIX):
                continue
            parts = [part for part in name[len(ENV_PREFIX):].split(ENV_SEPARATOR) if part]
            if parts:
                _set_path(self._data, parts, value)
