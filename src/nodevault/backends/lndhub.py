"""
LNDHub client for hosted accounts.

Supports:
- Creating an account on any LNDHub host (no profile required)
- On-chain addresses for a provisioned account (access key "login:password")

API Reference: https://github.com/BlueWallet/LndHub/blob/master/doc/Send-requirements.md
"""

from __future__ import annotations

from typing import Any

from ..errors import AccountCreationError, BackendError
from .base import RestClient

PARTNER_ID = "bluewallet"
ACCOUNT_TYPE = "common"


class LndHubClient(RestClient):
    """Hosted-account backend."""

    async def create_account(self, host: str, ssl_verification: bool) -> dict[str, Any]:
        try:
            data = await self._request(
                "POST",
                f"{host.rstrip('/')}/create",
                verify=ssl_verification,
                json={"partnerid": PARTNER_ID, "accounttype": ACCOUNT_TYPE},
            )
        except BackendError as exc:
            raise AccountCreationError(str(exc)) from exc

        if not isinstance(data, dict) or not data.get("login") or not data.get("password"):
            raise AccountCreationError("LNDHub did not return account credentials")
        return {"login": data["login"], "password": data["password"]}

    async def get_new_address(self) -> dict[str, Any]:
        token = await self._authenticate()
        data = await self._request(
            "GET",
            f"{self.base_url}/getbtc",
            headers={"Authorization": f"Bearer {token}"},
        )
        # /getbtc answers with a list of address objects
        if isinstance(data, list) and data and isinstance(data[0], dict):
            address = data[0].get("address")
            if address:
                return {"address": address}
        raise BackendError("LNDHub returned no address")

    async def _authenticate(self) -> str:
        login, sep, password = (self.profile.access_key or "").partition(":")
        if not sep or not login or not password:
            raise BackendError("LNDHub access key must be 'login:password'")

        data = await self._request(
            "POST",
            f"{self.base_url}/auth",
            params={"type": "auth"},
            json={"login": login, "password": password},
        )
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise BackendError("LNDHub authentication returned no access token")
        return token
