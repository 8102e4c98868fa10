"""
Node profiles: the persisted Settings aggregate and the store that owns it.

Usage:
    from nodevault.profiles import NodeProfile, NodeProfileStore

    store = NodeProfileStore.default()
    await store.get_settings()
    print(store.host, store.implementation, store.has_credentials())
"""

from .models import (
    DEFAULT_IMPLEMENTATION,
    ActiveProfile,
    Implementation,
    NodeProfile,
    Settings,
    project_active,
)
from .store import NodeProfileStore, StoreState

__all__ = [
    "DEFAULT_IMPLEMENTATION",
    "ActiveProfile",
    "Implementation",
    "NodeProfile",
    "NodeProfileStore",
    "Settings",
    "StoreState",
    "project_active",
]
