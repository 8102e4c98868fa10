"""Tests for AccountProvisioner (hosted LNDHub accounts)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from nodevault.accounts import AccountProvisioner
from nodevault.backends import BackendRegistry, LndHubClient
from nodevault.errors import AccountCreationError
from nodevault.profiles import Implementation


class TestCreateAccount:
    def setup_method(self):
        self.backend = MagicMock()
        self.backend.create_account = AsyncMock(
            return_value={"login": "alice", "password": "s3cret"}
        )
        self.factory = MagicMock(return_value=self.backend)
        self.provisioner = AccountProvisioner(
            backends=BackendRegistry({Implementation.LNDHUB: self.factory})
        )

    async def test_success_stages_credentials(self):
        result = await self.provisioner.create_account("https://lndhub.example", True)

        assert result.ok is True
        assert result.access_key == "alice:s3cret"
        assert self.provisioner.username == "alice"
        assert self.provisioner.password == "s3cret"
        assert self.provisioner.create_account_error == ""
        self.backend.create_account.assert_awaited_once_with("https://lndhub.example", True)
        self.factory.assert_called_once_with(None)

    async def test_loading_cleared_on_success(self):
        await self.provisioner.create_account("https://lndhub.example", True)
        assert self.provisioner.loading is False

    async def test_loading_set_while_pending(self):
        observed = []

        async def create(host, ssl_verification):
            observed.append(self.provisioner.loading)
            return {"login": "a", "password": "b"}

        self.backend.create_account = create
        await self.provisioner.create_account("https://hub", False)
        assert observed == [True]

    async def test_failure_records_error(self):
        self.backend.create_account.side_effect = AccountCreationError("HTTP 503: maintenance")

        result = await self.provisioner.create_account("https://lndhub.example", True)

        assert result.ok is False
        assert result.error == "HTTP 503: maintenance"
        assert result.access_key is None
        assert self.provisioner.create_account_error == "HTTP 503: maintenance"
        assert self.provisioner.loading is False
        assert self.provisioner.username is None

    async def test_malformed_backend_reply(self):
        self.backend.create_account.return_value = {"user": "alice"}
        result = await self.provisioner.create_account("https://lndhub.example", True)
        assert result.ok is False
        assert self.provisioner.create_account_error

    async def test_error_cleared_on_retry(self):
        self.backend.create_account.side_effect = [
            AccountCreationError("busy"),
            {"login": "alice", "password": "s3cret"},
        ]
        await self.provisioner.create_account("https://hub", True)
        assert self.provisioner.create_account_error == "busy"

        await self.provisioner.create_account("https://hub", True)
        assert self.provisioner.create_account_error == ""

    async def test_unregistered_backend_is_reported(self):
        provisioner = AccountProvisioner(backends=BackendRegistry())
        result = await provisioner.create_account("https://hub", True)
        assert result.ok is False
        assert "Unsupported backend" in provisioner.create_account_error

    async def test_staged_profile_not_persisted(self, store, secure_store):
        await self.provisioner.create_account("https://lndhub.example", False)
        assert secure_store.writes == []

        profile = self.provisioner.staged_profile()
        assert profile.url == "https://lndhub.example"
        assert profile.access_key == "alice:s3cret"
        assert profile.implementation is Implementation.LNDHUB
        assert profile.ssl_verification is False

        await store.add_node(profile)
        assert store.has_credentials() is True
        assert store.implementation is Implementation.LNDHUB

    def test_no_staged_profile(self):
        assert self.provisioner.staged_profile() is None

    async def test_clear(self):
        await self.provisioner.create_account("https://hub", True)
        self.provisioner.clear()
        assert self.provisioner.staged_profile() is None


class TestCreateAccountOverHttp:
    async def test_default_lndhub_client(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"login": "bob", "password": "pw"})
        )
        registry = BackendRegistry(
            {Implementation.LNDHUB: lambda profile: LndHubClient(profile, transport=transport)}
        )
        provisioner = AccountProvisioner(backends=registry)

        result = await provisioner.create_account("https://lndhub.example", True)
        assert result.access_key == "bob:pw"

    async def test_http_failure_is_reported(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(500, json={"message": "internal"})
        )
        registry = BackendRegistry(
            {Implementation.LNDHUB: lambda profile: LndHubClient(profile, transport=transport)}
        )
        provisioner = AccountProvisioner(backends=registry)

        result = await provisioner.create_account("https://lndhub.example", True)
        assert result.ok is False
        assert provisioner.create_account_error == "HTTP 500: internal"
        assert provisioner.loading is False

    @pytest.mark.parametrize("host", ["https://[::1", "https://a\x00b"])
    async def test_unparseable_host_is_reported(self, host):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        registry = BackendRegistry(
            {Implementation.LNDHUB: lambda profile: LndHubClient(profile, transport=transport)}
        )
        provisioner = AccountProvisioner(backends=registry)

        result = await provisioner.create_account(host, True)

        assert result.ok is False
        assert provisioner.create_account_error.startswith("Invalid URL")
        assert provisioner.loading is False
        assert provisioner.staged_profile() is None
