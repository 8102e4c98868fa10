"""
Data models for node profiles and the persisted settings blob.

Persisted field names (``macaroonHex``, ``selectedNode``, ...) are a durable
compatibility surface: every model declares them as explicit aliases and the
blob is always written by alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import MalformedPersistedDataError


class Implementation(str, Enum):
    """Node backend a profile talks to. Values are what gets persisted."""

    LND = "lnd"
    CLIGHTNING = "c-lightning-REST"
    LNDHUB = "lndhub"


DEFAULT_IMPLEMENTATION = Implementation.LND
"""Assumed for profiles saved before ``implementation`` existed."""


class _PersistedModel(BaseModel):
    # extra="allow" keeps fields written by newer versions intact on rewrite
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class NodeProfile(_PersistedModel):
    """
    One reachable backend and its credential material.

    Either ``macaroon_hex`` or ``access_key`` authenticates; neither means
    the profile is not provisioned yet.
    """

    host: str | None = None
    # Older installs saved numeric ports; keep whichever form was stored.
    port: str | int | None = None
    url: str | None = None
    macaroon_hex: str | None = Field(default=None, alias="macaroonHex")
    access_key: str | None = Field(default=None, alias="accessKey")
    # Unknown values are kept as plain strings so one unrecognized profile
    # does not make the whole blob unreadable.
    implementation: Implementation | str | None = Field(default=None, union_mode="left_to_right")
    ssl_verification: bool | None = Field(default=None, alias="sslVerification")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.macaroon_hex or self.access_key)


class Settings(_PersistedModel):
    """The persisted aggregate."""

    nodes: list[NodeProfile] = Field(default_factory=list)
    selected_node: int | None = Field(default=None, alias="selectedNode")
    on_chain_address: str | None = Field(default=None, alias="onChainAddress")
    theme: str | None = None
    lurker_mode: bool | None = Field(default=None, alias="lurkerMode")
    passphrase: str | None = None
    fiat: str | None = None

    @classmethod
    def from_json(cls, raw: str | bytes) -> Settings:
        """
        Parse a stored blob.

        Raises:
            MalformedPersistedDataError: If ``raw`` is not a settings object.
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise MalformedPersistedDataError(
                f"Stored settings are malformed ({exc.error_count()} errors)"
            ) from exc

    def to_json(self) -> str:
        """Serialize by persisted name, writing only the fields that were set."""
        return self.model_dump_json(by_alias=True, exclude_unset=True)

    @property
    def selected_index(self) -> int:
        return self.selected_node if self.selected_node is not None else 0


@dataclass(frozen=True)
class ActiveProfile:
    """Read-only projection of the selected NodeProfile."""

    index: int
    host: str | None = None
    port: str | int | None = None
    url: str | None = None
    macaroon_hex: str | None = None
    access_key: str | None = None
    implementation: Implementation | str = DEFAULT_IMPLEMENTATION
    ssl_verification: bool = False

    @property
    def has_credentials(self) -> bool:
        return bool(self.macaroon_hex or self.access_key)


def project_active(nodes: list[NodeProfile], selected_node: int | None) -> ActiveProfile | None:
    """
    Project ``nodes[selected_node]`` for the network layer.

    ``selected_node`` of None means 0. An index outside ``nodes`` yields None
    rather than raising.
    """
    index = selected_node if selected_node is not None else 0
    if index < 0 or index >= len(nodes):
        return None

    node = nodes[index]
    return ActiveProfile(
        index=index,
        host=node.host,
        port=node.port,
        url=node.url,
        macaroon_hex=node.macaroon_hex,
        access_key=node.access_key,
        implementation=node.implementation or DEFAULT_IMPLEMENTATION,
        ssl_verification=bool(node.ssl_verification),
    )
