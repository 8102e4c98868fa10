"""
nodevault - encrypted Lightning node profiles with BTCPay auto-configuration.

Usage:
    from nodevault import NodeProfileStore, OnChainAddressManager, RemoteConfigImporter

    store = NodeProfileStore.default()
    await store.get_settings()

    result = await RemoteConfigImporter().fetch_config(qr_text)
    if result.ok:
        await store.add_node(result.profile)

    address = await OnChainAddressManager(store).get_new_address()
"""

from .accounts import AccountProvisioner, AccountResult
from .address import OnChainAddressManager
from .backends import BackendRegistry, default_registry
from .config import VaultConfig, default_config
from .credentials import Accessibility, CredentialVault, EncryptedFileStorage
from .errors import (
    AccountCreationError,
    BackendError,
    MalformedPersistedDataError,
    NodeVaultError,
    NoActiveProfileError,
    RemoteConfigFetchError,
    StorageUnavailableError,
    UnsupportedRemoteImplementationError,
)
from .profiles import (
    ActiveProfile,
    Implementation,
    NodeProfile,
    NodeProfileStore,
    Settings,
    StoreState,
    project_active,
)
from .remote_config import ImportResult, RemoteConfigImporter

__version__ = "0.1.0"

__all__ = [
    "Accessibility",
    "AccountCreationError",
    "AccountProvisioner",
    "AccountResult",
    "ActiveProfile",
    "BackendError",
    "BackendRegistry",
    "CredentialVault",
    "EncryptedFileStorage",
    "Implementation",
    "ImportResult",
    "MalformedPersistedDataError",
    "NoActiveProfileError",
    "NodeProfile",
    "NodeProfileStore",
    "NodeVaultError",
    "OnChainAddressManager",
    "RemoteConfigFetchError",
    "RemoteConfigImporter",
    "Settings",
    "StorageUnavailableError",
    "StoreState",
    "UnsupportedRemoteImplementationError",
    "VaultConfig",
    "default_config",
    "default_registry",
    "project_active",
]
