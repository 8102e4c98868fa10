"""
c-lightning-REST client.

API Reference: https://github.com/Ride-The-Lightning/c-lightning-REST
"""

from __future__ import annotations

from typing import Any

from ..errors import BackendError
from .base import RestClient


class CLightningClient(RestClient):
    """Talks to c-lightning-REST; the macaroon is sent hex-encoded."""

    @property
    def _headers(self) -> dict[str, str]:
        headers = super()._headers
        if self.profile.macaroon_hex:
            headers["macaroon"] = self.profile.macaroon_hex
            headers["encodingtype"] = "hex"
        return headers

    async def get_new_address(self) -> dict[str, Any]:
        data = await self._request("GET", f"{self.base_url}/v1/newaddr")
        if not isinstance(data, dict) or not data.get("address"):
            raise BackendError("c-lightning-REST returned no address")
        return {"address": data["address"]}
