"""Shared fixtures: an in-memory secure store and a store wired to it."""

from __future__ import annotations

import pytest

from nodevault.credentials import Accessibility, CredentialVault
from nodevault.errors import StorageUnavailableError
from nodevault.profiles import NodeProfileStore


class MemorySecureStore:
    """SecureStore double that records writes and can be told to fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str, Accessibility]] = []
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageUnavailableError("keychain locked")
        return self.data.get(key)

    def set(self, key: str, value: str, accessible: Accessibility = Accessibility.WHEN_UNLOCKED):
        if self.fail_writes:
            raise StorageUnavailableError("keychain locked")
        self.writes.append((key, value, accessible))
        self.data[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None


@pytest.fixture
def secure_store() -> MemorySecureStore:
    return MemorySecureStore()


@pytest.fixture
def vault(secure_store: MemorySecureStore) -> CredentialVault:
    return CredentialVault(secure_store)


@pytest.fixture
def store(vault: CredentialVault) -> NodeProfileStore:
    return NodeProfileStore(vault)
