"""
Backend client interface and dispatch table.

Each Implementation maps to a factory that builds a client for the active
profile. Callers never compare implementation strings themselves; they ask
the registry for a client.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

import httpx

from ..config import default_config
from ..errors import BackendError, NoActiveProfileError
from ..profiles.models import ActiveProfile, Implementation


class BackendClient(Protocol):
    """Operations the core needs from a node backend."""

    async def get_new_address(self) -> dict[str, Any]:
        """Return ``{"address": ...}`` for a fresh on-chain receive address."""
        ...

    async def create_account(self, host: str, ssl_verification: bool) -> dict[str, Any]:
        """Create a hosted account; return ``{"login": ..., "password": ...}``."""
        ...


BackendFactory = Callable[[ActiveProfile | None], BackendClient]


class BackendRegistry:
    """Implementation -> client factory table."""

    def __init__(self, factories: dict[Implementation, BackendFactory] | None = None) -> None:
        self._factories: dict[Implementation, BackendFactory] = dict(factories or {})

    def register(self, implementation: Implementation, factory: BackendFactory) -> None:
        self._factories[Implementation(implementation)] = factory

    def supports(self, implementation: Implementation | str) -> bool:
        try:
            return Implementation(implementation) in self._factories
        except ValueError:
            return False

    def client_for(
        self,
        profile: ActiveProfile | None,
        implementation: Implementation | str | None = None,
    ) -> BackendClient:
        """
        Build a client for ``profile``.

        Args:
            profile: Active profile, or None for calls that don't need one
                (e.g. creating a hosted account on a new host).
            implementation: Overrides ``profile.implementation``.

        Raises:
            NoActiveProfileError: If neither a profile nor an implementation is given.
            BackendError: If the implementation has no registered client.
        """
        if implementation is None:
            if profile is None:
                raise NoActiveProfileError("No node profile selected")
            implementation = profile.implementation

        try:
            factory = self._factories[Implementation(implementation)]
        except (ValueError, KeyError):
            name = getattr(implementation, "value", implementation)
            raise BackendError(f"Unsupported backend implementation: {name}") from None
        return factory(profile)


class RestClient:
    """Shared request/response handling for the REST backends."""

    def __init__(
        self,
        profile: ActiveProfile | None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._profile = profile
        self._timeout = timeout if timeout is not None else default_config.timeout
        self._transport = transport

    @property
    def profile(self) -> ActiveProfile:
        if self._profile is None:
            raise NoActiveProfileError("No node profile selected")
        return self._profile

    @property
    def base_url(self) -> str:
        profile = self.profile
        if profile.url:
            return profile.url.rstrip("/")
        if not profile.host:
            raise BackendError("Active profile has no host")
        host = profile.host if "://" in profile.host else f"https://{profile.host}"
        return f"{host}:{profile.port}" if profile.port else host

    @property
    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        verify: bool | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send one request and return the decoded JSON body."""
        if verify is None:
            verify = bool(self._profile and self._profile.ssl_verification)
        async with httpx.AsyncClient(
            timeout=self._timeout, verify=verify, transport=self._transport
        ) as client:
            try:
                response = await client.request(
                    method, url, headers={**self._headers, **(headers or {})}, **kwargs
                )
            except httpx.TimeoutException as exc:
                raise BackendError("Request timed out") from exc
            except httpx.RequestError as exc:
                raise BackendError(f"Network error: {exc}") from exc
            except httpx.InvalidURL as exc:
                raise BackendError(f"Invalid URL: {exc}") from exc
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Any:
        if not response.is_success:
            try:
                data = response.json()
                message = data.get("message") or data.get("error") or response.text
            except Exception:
                message = response.text
            raise BackendError(f"HTTP {response.status_code}: {message}")

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendError(f"Invalid JSON from backend: {exc}") from exc

        if isinstance(data, dict) and data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise BackendError(str(data.get("message") or message))
        return data

    async def create_account(self, host: str, ssl_verification: bool) -> dict[str, Any]:
        raise BackendError(f"{type(self).__name__} cannot create hosted accounts")
