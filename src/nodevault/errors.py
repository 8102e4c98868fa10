"""
Error taxonomy.

Storage and parse errors are absorbed by NodeProfileStore and degrade to
"no profile configured". Remote-config and account errors are reported as
result values plus a display field. Backend errors raised while fetching an
address propagate to the caller.
"""

from __future__ import annotations


class NodeVaultError(Exception):
    """Base class for all nodevault errors."""


class StorageUnavailableError(NodeVaultError):
    """The secure store could not be read or written."""


class MalformedPersistedDataError(NodeVaultError):
    """The stored settings blob is not valid settings JSON."""


class RemoteConfigFetchError(NodeVaultError):
    """A remote configuration could not be retrieved or parsed."""


class UnsupportedRemoteImplementationError(RemoteConfigFetchError):
    """A remote configuration names a backend type we cannot talk to."""


class BackendError(NodeVaultError):
    """A node backend rejected a request or could not be reached."""


class AccountCreationError(BackendError):
    """The hosted backend refused to create an account."""


class NoActiveProfileError(NodeVaultError):
    """No node profile is selected."""
