"""
BTCPay Server auto-configuration import.

A BTCPay "connect wallet" link or QR code carries ``config=<url>``. The URL
serves a JSON document shaped like:

    {"configurations": [{"type": "lnd-rest",
                         "uri": "https://node.example:8080",
                         "adminMacaroon": "0201...",
                         "macaroon": "0201..."}]}

The document is untrusted. Only the first configuration is read, its type
must be one we can talk to, and the resulting NodeProfile is returned as a
candidate. Nothing is stored until the caller adopts it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from .config import default_config
from .errors import RemoteConfigFetchError, UnsupportedRemoteImplementationError
from .profiles.models import Implementation, NodeProfile
from .profiles.store import NodeProfileStore

logger = logging.getLogger(__name__)

CONFIG_MARKER = "config="
HTTPS_PREFIX = "https://"

SUPPORTED_TYPES: dict[str, Implementation] = {
    "lnd-rest": Implementation.LND,
    "clightning-rest": Implementation.CLIGHTNING,
}

FETCH_ERROR = "Error getting BTCPay configuration"
UNSUPPORTED_ERROR = "Sorry, we currently only support BTCPay instances using lnd or c-lightning"


class _ConfigDocument(BaseModel):
    configurations: list[Any] = Field(min_length=1)


class RemoteConfiguration(BaseModel):
    """One entry of the ``configurations`` list. Unknown fields are ignored."""

    type: Any = None
    uri: str | None = None
    admin_macaroon: str | None = Field(default=None, alias="adminMacaroon")
    macaroon: str | None = None


@dataclass(frozen=True)
class ImportResult:
    """Candidate profile, or the error that discarded it."""

    profile: NodeProfile | None = None
    error: RemoteConfigFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.profile is not None and self.error is None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error else None


def extract_config_url(data: str) -> str | None:
    """Return the text after the first ``config=``, or None if absent/empty."""
    _, sep, url = data.partition(CONFIG_MARKER)
    url = url.strip()
    return url if sep and url else None


def parse_configuration(document: bytes | str) -> NodeProfile:
    """
    Validate a configuration document and map its first entry to a NodeProfile.

    Raises:
        UnsupportedRemoteImplementationError: If ``type`` is not supported.
        RemoteConfigFetchError: If the document is not valid JSON or is
            missing a usable first configuration.
    """
    try:
        config_doc = _ConfigDocument.model_validate_json(document)
        entry = RemoteConfiguration.model_validate(config_doc.configurations[0])
    except ValidationError as exc:
        raise RemoteConfigFetchError(f"{FETCH_ERROR}: {_describe(exc)}") from exc

    implementation = SUPPORTED_TYPES.get(entry.type) if isinstance(entry.type, str) else None
    if implementation is None:
        logger.info("Rejected BTCPay configuration of type %r", entry.type)
        raise UnsupportedRemoteImplementationError(UNSUPPORTED_ERROR)

    if not entry.uri or not entry.uri.startswith(HTTPS_PREFIX):
        raise RemoteConfigFetchError(f"{FETCH_ERROR}: configuration uri must use https")

    return NodeProfile(
        host=entry.uri[len(HTTPS_PREFIX) :].rstrip("/"),
        macaroon_hex=entry.admin_macaroon or entry.macaroon,
        implementation=implementation,
    )


class RemoteConfigImporter:
    """
    Fetches and validates BTCPay auto-configuration.

    ``fetch_config()`` never raises for fetch or validation problems; they are
    returned in the ImportResult and kept in ``error`` for display until the
    next call.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout if timeout is not None else default_config.timeout
        self._transport = transport
        self.error: str | None = None

    async def fetch_config(self, data: str) -> ImportResult:
        """
        Fetch the document behind ``config=<url>`` in ``data`` and build a
        candidate NodeProfile from it.
        """
        self.error = None

        url = extract_config_url(data)
        if url is None:
            return self._fail(RemoteConfigFetchError(FETCH_ERROR))

        try:
            response = await self._get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("BTCPay configuration request failed: %s", exc)
            return self._fail(RemoteConfigFetchError(f"{FETCH_ERROR}: {exc}"))

        if response.status_code != 200:
            logger.warning("BTCPay configuration returned HTTP %s", response.status_code)
            return self._fail(RemoteConfigFetchError(FETCH_ERROR))

        try:
            profile = parse_configuration(response.content)
        except RemoteConfigFetchError as exc:
            return self._fail(exc)

        return ImportResult(profile=profile)

    async def adopt(
        self, result: ImportResult, store: NodeProfileStore, select: bool = True
    ) -> int | None:
        """Append a validated candidate to ``store``. Returns its index."""
        if not result.ok:
            return None
        return await store.add_node(result.profile, select=select)

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            return await client.get(url)

    def _fail(self, error: RemoteConfigFetchError) -> ImportResult:
        self.error = str(error)
        return ImportResult(error=error)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]
