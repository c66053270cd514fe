"""API key retrieval for the Requesty router.

Components never cache the key: they ask the credential provider on every
outbound call so that a key rotated in the environment is picked up.
"""

import inspect
from collections.abc import Awaitable
from typing import Protocol

from requesty_ai.config import Settings, get_settings


class RequestyError(Exception):
    """Base exception for all Requesty client errors."""

    pass


class CredentialError(RequestyError):
    """Base exception for credential lookup errors."""

    pass


class MissingCredentialError(CredentialError):
    """Raised when no API key is configured."""

    def __init__(self, message: str = "Requesty API key is not configured"):
        super().__init__(message)


class CredentialProvider(Protocol):
    """Anything exposing ``get_api_key``, sync or async."""

    def get_api_key(self) -> str | Awaitable[str]: ...


class SettingsCredentialProvider:
    """Reads the API key from application settings (env / .env)."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings

    def get_api_key(self) -> str:
        settings = self._settings or get_settings()
        secret = settings.requesty_api_key
        if secret is None:
            raise MissingCredentialError()
        key = secret.get_secret_value().strip()
        if not key:
            raise MissingCredentialError()
        return key


class StaticCredentialProvider:
    """Wraps a fixed key; useful for scripts and tests."""

    def __init__(self, api_key: str | None):
        self._api_key = api_key

    def get_api_key(self) -> str:
        if not self._api_key:
            raise MissingCredentialError()
        return self._api_key


async def resolve_api_key(provider: CredentialProvider) -> str:
    """Get the key from a provider, awaiting it if the provider is async."""
    result = provider.get_api_key()
    if inspect.isawaitable(result):
        result = await result
    if not result:
        raise MissingCredentialError()
    return result


def mask_api_key(api_key: str) -> str:
    """Mask a key for logging, e.g. ``sk-a...wxyz``."""
    if len(api_key) <= 8:
        return "****"
    return f"{api_key[:4]}...{api_key[-4:]}"
