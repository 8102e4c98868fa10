"""
Encrypted persistence for the settings blob.

Usage:
    from nodevault.credentials import CredentialVault

    vault = CredentialVault.default()
    blob = await vault.load()        # None on first run
    await vault.save(settings.to_json())
"""

from .storage import Accessibility, EncryptedFileStorage, SecureStore
from .vault import CredentialVault

__all__ = [
    "Accessibility",
    "CredentialVault",
    "EncryptedFileStorage",
    "SecureStore",
]
