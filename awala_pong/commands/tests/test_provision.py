from base64 import b64encode
from unittest import IsolatedAsyncioTestCase

import pytest

from ...config.error import ArgsParseError
from ...config.settings import Settings
from ...config.store import ConfigItem
from ...keys.in_memory import InMemoryPrivateKeyStore
from ...pki.keys import generate_rsa_key_pair
from ...tests.mock import CoroutineMock, MagicMock, patch
from .. import provision as test_module

SESSION_KEY_ID = b"\x01\x02\x03\x04"
SESSION_KEY_ID_BASE64 = b64encode(SESSION_KEY_ID).decode("ascii")


class FakeConfigStore:
    def __init__(self):
        self.items = {}
        self.close = CoroutineMock()

    async def get(self, item):
        return self.items.get(item)

    async def set(self, item, value):
        self.items[item] = value


class TestProvision(IsolatedAsyncioTestCase):
    def setUp(self):
        self.config_store = FakeConfigStore()
        self.key_store = InMemoryPrivateKeyStore()

    def test_bad_calls(self):
        with pytest.raises(ArgsParseError):
            test_module.execute([])

        with pytest.raises(SystemExit):
            test_module.execute(["bad"])

    async def test_new_identity_key(self):
        current_id = await test_module.provision_identity_key(
            self.config_store, self.key_store
        )
        assert self.config_store.items[ConfigItem.CURRENT_ID] == current_id
        assert await self.key_store.retrieve_identity_key(current_id)

    async def test_existing_identity_key(self):
        current_id = await self.key_store.save_identity_key(generate_rsa_key_pair())
        self.config_store.items[ConfigItem.CURRENT_ID] = current_id

        assert (
            await test_module.provision_identity_key(self.config_store, self.key_store)
            == current_id
        )
        assert len(self.key_store.keys) == 1

    async def test_missing_identity_key_is_replaced(self):
        self.config_store.items[ConfigItem.CURRENT_ID] = "0lost"
        current_id = await test_module.provision_identity_key(
            self.config_store, self.key_store
        )
        assert current_id != "0lost"
        assert self.config_store.items[ConfigItem.CURRENT_ID] == current_id

    async def test_initial_session_key(self):
        await test_module.provision_initial_session_key(
            self.config_store, self.key_store, "0current", SESSION_KEY_ID_BASE64
        )
        assert await self.key_store.retrieve_unbound_session_key(
            SESSION_KEY_ID, "0current"
        )
        assert (
            self.config_store.items[ConfigItem.INITIAL_SESSION_KEY_ID_BASE64]
            == SESSION_KEY_ID_BASE64
        )

        serialized = dict(self.key_store.keys)
        await test_module.provision_initial_session_key(
            self.config_store, self.key_store, "0current", SESSION_KEY_ID_BASE64
        )
        assert self.key_store.keys == serialized

    async def test_invalid_session_key_id(self):
        with pytest.raises(test_module.ProvisionError):
            await test_module.provision_initial_session_key(
                self.config_store, self.key_store, "0current", "not base64!"
            )

    async def test_provision(self):
        settings = Settings(
            {
                "config.url": "redis://localhost",
                "provision.session_key_id": SESSION_KEY_ID_BASE64,
            }
        )
        with patch.object(
            test_module.ConfigStore,
            "from_url",
            MagicMock(return_value=self.config_store),
        ), patch.object(
            test_module.VaultPrivateKeyStore,
            "from_settings",
            MagicMock(return_value=self.key_store),
        ):
            await test_module.provision(settings)

        current_id = self.config_store.items[ConfigItem.CURRENT_ID]
        assert await self.key_store.retrieve_unbound_session_key(
            SESSION_KEY_ID, current_id
        )
        self.config_store.close.assert_awaited_once()

    async def test_provision_x(self):
        settings = Settings({"config.url": "redis://localhost"})
        with patch.object(
            test_module.ConfigStore,
            "from_url",
            MagicMock(return_value=self.config_store),
        ), patch.object(
            test_module.VaultPrivateKeyStore,
            "from_settings",
            MagicMock(return_value=self.key_store),
        ):
            with pytest.raises(test_module.ProvisionError):
                await test_module.provision(settings)
        self.config_store.close.assert_awaited_once()
