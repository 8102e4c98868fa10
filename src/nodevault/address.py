"""On-chain receive addresses for the active node."""

from __future__ import annotations

import logging

from .backends import BackendRegistry, default_registry
from .errors import BackendError, NoActiveProfileError
from .profiles.models import Settings
from .profiles.store import NodeProfileStore

logger = logging.getLogger(__name__)


class OnChainAddressManager:
    """
    Asks the active backend for a new address and records it in Settings.

    Backend failures are not caught here: ``get_new_address()`` raises and
    the caller decides how to report it.
    """

    def __init__(self, store: NodeProfileStore, backends: BackendRegistry | None = None) -> None:
        self._store = store
        self._backends = backends or default_registry

    async def get_new_address(self) -> str:
        """
        Fetch a fresh receive address and persist it as ``onChainAddress``.

        Raises:
            NoActiveProfileError: If no node profile is selected.
            BackendError: If the backend call fails or returns no address.
        """
        active = self._store.active
        if active is None:
            raise NoActiveProfileError("No node profile selected")

        client = self._backends.client_for(active)
        data = await client.get_new_address()
        address = data.get("address") if isinstance(data, dict) else None
        if not address:
            raise BackendError("Backend returned no address")

        def merge(settings: Settings) -> None:
            settings.on_chain_address = address

        if await self._store.update(merge) is None:
            logger.warning("New address %s could not be persisted", address)
        return address
