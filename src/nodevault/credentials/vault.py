"""Async wrapper persisting the single settings blob in a SecureStore."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..config import SETTINGS_KEY, VaultConfig, default_config
from ..errors import StorageUnavailableError
from .storage import Accessibility, EncryptedFileStorage, SecureStore


class CredentialVault:
    """
    Durable encrypted persistence of one opaque settings blob.

    ``load()`` returning None is a normal first-run outcome. Store failures
    raise StorageUnavailableError instead, so the caller can decide how to
    fail closed.
    """

    def __init__(self, store: SecureStore, key: str = SETTINGS_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> str | None:
        """Return the stored blob, or None if nothing has been saved yet."""
        return await self._call(self._store.get, self._key)

    async def save(self, blob: str) -> bool:
        """Persist ``blob``, replacing whatever was stored."""
        return bool(
            await self._call(self._store.set, self._key, blob, Accessibility.WHEN_UNLOCKED)
        )

    async def clear(self) -> bool:
        """Remove the stored blob. Returns False if there was none."""
        return bool(await self._call(self._store.delete, self._key))

    async def _call(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except StorageUnavailableError:
            raise
        except Exception as exc:
            raise StorageUnavailableError(f"Secure store failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def default(cls, config: VaultConfig | None = None) -> CredentialVault:
        """Create a vault over EncryptedFileStorage using ``config`` (env by default)."""
        config = config or default_config
        storage = EncryptedFileStorage(
            base_path=config.credentials_path, encryption_key=config.credential_key
        )
        return cls(storage, key=config.settings_key)

    @classmethod
    def at_path(cls, path: str | Path, encryption_key: str | bytes | None = None) -> CredentialVault:
        """Create a vault storing its blob under a custom directory."""
        return cls(EncryptedFileStorage(base_path=path, encryption_key=encryption_key))
