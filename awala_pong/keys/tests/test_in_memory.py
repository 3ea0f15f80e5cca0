from unittest import IsolatedAsyncioTestCase

import pytest

from ...pki.keys import (
    generate_ecdh_key_pair,
    generate_rsa_key_pair,
    get_id_from_public_key,
    serialize_private_key,
)
from ..error import UnknownKeyError
from ..in_memory import InMemoryPrivateKeyStore

NODE_ID = "0node"
PEER_ID = "0peer"
KEY_ID = b"\x01\x02\x03"


class TestInMemoryPrivateKeyStore(IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.store = InMemoryPrivateKeyStore()

    async def test_identity_key(self):
        private_key = generate_rsa_key_pair()
        node_id = await self.store.save_identity_key(private_key)
        assert node_id == get_id_from_public_key(private_key.public_key())

        retrieved = await self.store.retrieve_identity_key(node_id)
        assert serialize_private_key(retrieved) == serialize_private_key(private_key)

    async def test_missing_identity_key(self):
        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_identity_key(NODE_ID)

    async def test_session_key_is_not_identity_key(self):
        await self.store.save_session_key(generate_ecdh_key_pair(), KEY_ID, NODE_ID)
        self.store.keys[f"i-{NODE_ID}"] = self.store.keys[f"s-{KEY_ID.hex()}"]
        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_identity_key(NODE_ID)

    async def test_unbound_session_key(self):
        private_key = generate_ecdh_key_pair()
        await self.store.save_session_key(private_key, KEY_ID, NODE_ID)

        retrieved = await self.store.retrieve_unbound_session_key(KEY_ID, NODE_ID)
        assert serialize_private_key(retrieved) == serialize_private_key(private_key)
        # Initial session keys are usable with any peer
        assert await self.store.retrieve_session_key(KEY_ID, NODE_ID, PEER_ID)

    async def test_bound_session_key(self):
        await self.store.save_session_key(
            generate_ecdh_key_pair(), KEY_ID, NODE_ID, PEER_ID
        )
        assert await self.store.retrieve_session_key(KEY_ID, NODE_ID, PEER_ID)

        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_session_key(KEY_ID, NODE_ID, "0other")
        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_unbound_session_key(KEY_ID, NODE_ID)

    async def test_session_key_owned_by_other_node(self):
        await self.store.save_session_key(generate_ecdh_key_pair(), KEY_ID, NODE_ID)
        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_session_key(KEY_ID, "0other", PEER_ID)

    async def test_missing_session_key(self):
        with pytest.raises(UnknownKeyError):
            await self.store.retrieve_session_key(KEY_ID, NODE_ID, PEER_ID)

    async def test_context_manager(self):
        async with InMemoryPrivateKeyStore() as store:
            assert isinstance(store, InMemoryPrivateKeyStore)
