"""
LND REST client.

API Reference: https://lightning.engineering/api-docs/api/lnd/
"""

from __future__ import annotations

from typing import Any

from ..errors import BackendError
from .base import RestClient


class LndClient(RestClient):
    """Talks to LND's REST proxy using a hex-encoded macaroon."""

    @property
    def _headers(self) -> dict[str, str]:
        headers = super()._headers
        if self.profile.macaroon_hex:
            headers["Grpc-Metadata-macaroon"] = self.profile.macaroon_hex
        return headers

    async def get_new_address(self) -> dict[str, Any]:
        data = await self._request("GET", f"{self.base_url}/v1/newaddress")
        if not isinstance(data, dict) or not data.get("address"):
            raise BackendError("LND returned no address")
        return {"address": data["address"]}
