"""Secure credential storage helpers for the Blogvoice CLI.

Responsibilities:
- Persist the OpenAI API key and the Telegram bot token in an OS-backed
  secure credential store.
- Provide deterministic read/write/delete operations per secret name.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for secret persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.backends import fail as keyring_fail
from keyring.errors import KeyringError


_DEFAULT_SERVICE_NAME = "blogvoice"
SECRET_NAMES = ("openai_api_key", "tts_api_key", "telegram_bot_token")


class CredentialStore:
    """Interface for secure secret operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_secret(self, name: str) -> str | None:
        """Load a stored secret from secure storage, when available."""

        raise NotImplementedError

    def set_secret(self, name: str, value: str) -> None:
        """Persist a secret in secure storage."""

        raise NotImplementedError

    def clear_secret(self, name: str) -> bool:
        """Delete a stored secret and return whether one existed."""

        raise NotImplementedError

    def stored_secrets(self) -> dict[str, str]:
        """Return every known secret that is currently stored."""

        values: dict[str, str] = {}
        for name in SECRET_NAMES:
            value = self.get_secret(name)
            if value is not None:
                values[name] = value
        return values


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _load_keyring_module(self):
        """Return the keyring module; tests replace this seam with a fake."""

        return keyring

    def is_available(self) -> bool:
        """Return `True` when a usable keyring backend is configured."""

        module = self._load_keyring_module()
        try:
            backend = module.get_keyring()
        except KeyringError:
            return False
        return not isinstance(backend, keyring_fail.Keyring)

    def get_secret(self, name: str) -> str | None:
        """Get a normalized secret from keyring, returning `None` when missing."""

        self._require_known_name(name)
        try:
            value = self._load_keyring_module().get_password(self.service_name, name)
        except KeyringError:
            return None
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_secret(self, name: str, value: str) -> None:
        """Persist a normalized secret in keyring."""

        self._require_known_name(name)
        normalized = value.strip()
        if not normalized:
            raise ValueError("Secret value must be a non-empty string.")
        self._load_keyring_module().set_password(self.service_name, name, normalized)

    def clear_secret(self, name: str) -> bool:
        """Remove a stored secret from keyring and report if one was present."""

        existing = self.get_secret(name)
        if existing is None:
            return False

        self._load_keyring_module().delete_password(self.service_name, name)
        return True

    @staticmethod
    def _require_known_name(name: str) -> None:
        if name not in SECRET_NAMES:
            raise ValueError(f"Unknown secret name `{name}`.")


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
