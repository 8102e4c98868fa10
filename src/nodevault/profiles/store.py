"""
Node Profile Store.

In-memory aggregate of the persisted Settings plus a projection of the active
profile for the network layer. The vault is the source of truth: the store
rebuilds itself from it on every ``get_settings()`` and writes the whole blob
back on every mutation.

Usage:
    store = NodeProfileStore.default()
    await store.get_settings()

    if not store.has_credentials():
        await store.add_node(NodeProfile(host="node.example:8080", macaroon_hex="..."))

    unsubscribe = store.subscribe(lambda state: print(state.active))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from ..config import VaultConfig
from ..credentials import CredentialVault
from ..errors import MalformedPersistedDataError, StorageUnavailableError
from .models import ActiveProfile, Implementation, NodeProfile, Settings, project_active

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreState:
    """Snapshot handed to listeners after every change."""

    settings: Settings
    active: ActiveProfile | None = None
    chain_address: str | None = None
    loading: bool = False


StoreListener = Callable[[StoreState], None]
SettingsMutator = Callable[[Settings], Settings | None]


class NodeProfileStore:
    """
    Owns the node profile list and the active selection.

    All reads and writes of the vault go through one asyncio.Lock, so
    overlapping calls run in the order they were started. ``set_settings``
    replaces the whole blob (last writer wins); use ``update()`` for
    read-modify-write changes that must not drop a concurrent mutation.
    """

    def __init__(self, vault: CredentialVault) -> None:
        self._vault = vault
        self._lock = asyncio.Lock()
        self._listeners: list[StoreListener] = []
        self._state = StoreState(settings=Settings())

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    async def get_settings(self) -> Settings | None:
        """
        Reload Settings from the vault and re-project the active profile.

        Returns:
            The parsed Settings, or None when nothing usable is stored. A
            vault miss, an unreachable store and malformed data all leave the
            store empty; none of them raise.
        """
        async with self._lock:
            self._set_loading(True)
            settings = Settings()
            try:
                raw = await self._vault.load()
                if raw:
                    settings = Settings.from_json(raw)
                    return settings
                logger.debug("No settings stored under %s", self._vault.key)
                return None
            except StorageUnavailableError as exc:
                logger.warning("Secure store couldn't be accessed: %s", exc)
                return None
            except MalformedPersistedDataError as exc:
                logger.warning("Ignoring stored settings: %s", exc)
                return None
            finally:
                self._adopt(settings)

    async def set_settings(self, settings: Settings) -> bool:
        """
        Persist ``settings`` as the whole blob and adopt it in memory.

        Returns:
            True on success. On a storage failure the in-memory state is left
            unchanged and False is returned.
        """
        async with self._lock:
            return await self._write(settings)

    async def update(self, mutator: SettingsMutator) -> Settings | None:
        """
        Apply ``mutator`` to a copy of the current Settings and persist it.

        The mutator may change the copy in place (assign fields, don't mutate
        lists) or return a new Settings. Exceptions it raises propagate and
        nothing is written.

        Returns:
            The persisted Settings, or None if the write failed.
        """
        async with self._lock:
            current = self._state.settings.model_copy(deep=True)
            updated = mutator(current) or current
            if not await self._write(updated):
                return None
            return updated

    async def reset(self) -> bool:
        """Delete the stored blob and forget every profile."""
        async with self._lock:
            try:
                await self._vault.clear()
            except StorageUnavailableError as exc:
                logger.warning("Could not clear stored settings: %s", exc)
                return False
            self._adopt(Settings())
            return True

    # ------------------------------------------------------------------
    # Profile management
    # ------------------------------------------------------------------

    async def add_node(self, profile: NodeProfile, select: bool = True) -> int | None:
        """Append ``profile``; returns its index, or None if it wasn't saved."""

        def mutate(settings: Settings) -> None:
            settings.nodes = [*settings.nodes, profile.model_copy(deep=True)]
            if select:
                settings.selected_node = len(settings.nodes) - 1

        updated = await self.update(mutate)
        return len(updated.nodes) - 1 if updated is not None else None

    async def select_node(self, index: int) -> bool:
        """
        Make ``nodes[index]`` the active profile.

        Raises:
            IndexError: If ``index`` is not a stored profile.
        """

        def mutate(settings: Settings) -> None:
            _check_index(settings, index)
            settings.selected_node = index

        return await self.update(mutate) is not None

    async def replace_node(self, index: int, profile: NodeProfile) -> bool:
        """Overwrite ``nodes[index]``. Raises IndexError for unknown indices."""

        def mutate(settings: Settings) -> None:
            _check_index(settings, index)
            nodes = list(settings.nodes)
            nodes[index] = profile.model_copy(deep=True)
            settings.nodes = nodes

        return await self.update(mutate) is not None

    async def remove_node(self, index: int) -> bool:
        """
        Delete ``nodes[index]``, keeping the selection on the same profile
        where possible. Removing the selected profile selects the first one.

        Raises:
            IndexError: If ``index`` is not a stored profile.
        """

        def mutate(settings: Settings) -> None:
            _check_index(settings, index)
            selected = settings.selected_index
            nodes = list(settings.nodes)
            del nodes[index]
            settings.nodes = nodes

            if not nodes:
                settings.selected_node = None
            elif index == selected:
                settings.selected_node = 0
            elif index < selected:
                settings.selected_node = selected - 1

        return await self.update(mutate) is not None

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def has_credentials(self) -> bool:
        """True iff the active profile has a macaroon or an access key."""
        active = self._state.active
        return active is not None and active.has_credentials

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def settings(self) -> Settings:
        return self._state.settings

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def active(self) -> ActiveProfile | None:
        return self._state.active

    @property
    def chain_address(self) -> str | None:
        return self._state.chain_address

    @property
    def host(self) -> str | None:
        return self.active.host if self.active else None

    @property
    def port(self) -> str | int | None:
        return self.active.port if self.active else None

    @property
    def url(self) -> str | None:
        return self.active.url if self.active else None

    @property
    def macaroon_hex(self) -> str | None:
        return self.active.macaroon_hex if self.active else None

    @property
    def access_key(self) -> str | None:
        return self.active.access_key if self.active else None

    @property
    def implementation(self) -> Implementation | str | None:
        return self.active.implementation if self.active else None

    @property
    def ssl_verification(self) -> bool | None:
        return self.active.ssl_verification if self.active else None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Call ``listener`` with the new StoreState after every change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def default(cls, config: VaultConfig | None = None) -> NodeProfileStore:
        """Create a store over the default encrypted vault."""
        return cls(CredentialVault.default(config))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _write(self, settings: Settings) -> bool:
        self._set_loading(True)
        try:
            await self._vault.save(settings.to_json())
        except StorageUnavailableError as exc:
            logger.warning("Could not persist settings: %s", exc)
            self._set_loading(False)
            return False
        self._adopt(settings)
        return True

    def _adopt(self, settings: Settings) -> None:
        self._set_state(
            StoreState(
                settings=settings,
                active=project_active(settings.nodes, settings.selected_node),
                chain_address=settings.on_chain_address,
                loading=False,
            )
        )

    def _set_loading(self, loading: bool) -> None:
        if self._state.loading != loading:
            self._set_state(replace(self._state, loading=loading))

    def _set_state(self, state: StoreState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Settings listener %r failed", listener)


def _check_index(settings: Settings, index: int) -> None:
    if index < 0 or index >= len(settings.nodes):
        raise IndexError(f"No node profile at index {index} ({len(settings.nodes)} stored)")
