"""API key lookup — environment first, then the system keychain."""

from __future__ import annotations

import os

import keyring
import keyring.errors

from ghostpad.core.exceptions import CredentialError

KEYRING_SERVICE = "ghostpad"

PROVIDERS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def _check_provider(provider: str) -> str:
    if provider not in PROVIDERS:
        raise CredentialError(f"Unknown provider: {provider}. Expected one of: {', '.join(PROVIDERS)}")
    return PROVIDERS[provider]


def save_api_key(provider: str, key: str) -> None:
    """Store a provider API key in the system keychain."""
    _check_provider(provider)
    try:
        keyring.set_password(KEYRING_SERVICE, provider, key)
    except keyring.errors.KeyringError as e:
        raise CredentialError(f"Could not store {provider} key in keychain: {e}") from e


def get_api_key(provider: str) -> str | None:
    """Return the API key for ``provider`` or None if neither source has one."""
    env_var = _check_provider(provider)
    value = os.environ.get(env_var)
    if value:
        return value
    try:
        return keyring.get_password(KEYRING_SERVICE, provider)
    except keyring.errors.KeyringError:
        return None


def require_api_key(provider: str) -> str:
    key = get_api_key(provider)
    if not key:
        raise CredentialError(
            f"No {provider} API key. Set {PROVIDERS[provider]} or run 'ghostpad config set-key {provider}'."
        )
    return key


def delete_api_key(provider: str) -> None:
    """Remove a stored key. Missing keys are not an error."""
    _check_provider(provider)
    try:
        keyring.delete_password(KEYRING_SERVICE, provider)
    except keyring.errors.PasswordDeleteError:
        pass
