"""
Node backend clients.

Usage:
    from nodevault.backends import default_registry

    client = default_registry.client_for(store.active)
    data = await client.get_new_address()
"""

from ..profiles.models import Implementation
from .base import BackendClient, BackendFactory, BackendRegistry, RestClient
from .clightning import CLightningClient
from .lnd import LndClient
from .lndhub import LndHubClient

default_registry = BackendRegistry(
    {
        Implementation.LND: LndClient,
        Implementation.CLIGHTNING: CLightningClient,
        Implementation.LNDHUB: LndHubClient,
    }
)

__all__ = [
    "BackendClient",
    "BackendFactory",
    "BackendRegistry",
    "CLightningClient",
    "LndClient",
    "LndHubClient",
    "RestClient",
    "default_registry",
]
