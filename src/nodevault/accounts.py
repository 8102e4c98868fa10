"""Hosted (LNDHub) account creation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .backends import BackendRegistry, default_registry
from .errors import NodeVaultError
from .profiles.models import Implementation, NodeProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountResult:
    """Outcome of one ``create_account()`` call."""

    username: str | None = None
    password: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.username)

    @property
    def access_key(self) -> str | None:
        """Credentials in the ``login:password`` form LNDHub profiles store."""
        if not self.ok:
            return None
        return f"{self.username}:{self.password}"


class AccountProvisioner:
    """
    Creates a hosted account and stages its credentials.

    ``username``/``password`` are transient: nothing is persisted here. The
    caller turns them into a NodeProfile (see ``staged_profile()``) and adds
    it to the store. ``create_account_error`` keeps the last failure for
    display until the next attempt.
    """

    def __init__(
        self,
        backends: BackendRegistry | None = None,
        implementation: Implementation = Implementation.LNDHUB,
    ) -> None:
        self._backends = backends or default_registry
        self._implementation = implementation
        self.loading = False
        self.create_account_error = ""
        self.username: str | None = None
        self.password: str | None = None
        self._host: str | None = None
        self._ssl_verification = False

    async def create_account(self, host: str, ssl_verification: bool) -> AccountResult:
        """Ask the hosted backend at ``host`` for a new account. Never raises."""
        self.create_account_error = ""
        self.loading = True
        try:
            client = self._backends.client_for(None, implementation=self._implementation)
            data = await client.create_account(host, ssl_verification)
            username, password = data["login"], data["password"]
        except (NodeVaultError, KeyError, TypeError) as exc:
            self.create_account_error = str(exc) or type(exc).__name__
            logger.warning("Account creation on %s failed: %s", host, self.create_account_error)
            return AccountResult(error=self.create_account_error)
        finally:
            self.loading = False

        self.username = username
        self.password = password
        self._host = host
        self._ssl_verification = ssl_verification
        return AccountResult(username=username, password=password)

    def staged_profile(self) -> NodeProfile | None:
        """NodeProfile for the last created account, or None if none is staged."""
        if not self.username or not self.password:
            return None
        return NodeProfile(
            url=self._host,
            access_key=f"{self.username}:{self.password}",
            implementation=self._implementation,
            ssl_verification=self._ssl_verification,
        )

    def clear(self) -> None:
        """Forget staged credentials."""
        self.username = None
        self.password = None
        self._host = None
