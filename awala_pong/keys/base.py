"""Private key store interface."""

import logging
from abc import ABC, abstractmethod

from ..pki.keys import get_id_from_public_key
from .error import UnknownKeyError
from .models import StoredPrivateKey

LOGGER = logging.getLogger(__name__)


class BasePrivateKeyStore(ABC):
    """Storage of identity and session private keys."""

    async def open(self):
        """Open the store."""
        return self

    async def close(self):
        """Close the store."""

    async def __aenter__(self):
        """Async context manager enter."""
        return await self.open()

    async def __aexit__(self, err_type, err_value, err_t):
        """Async context manager exit."""
        await self.close()

    @staticmethod
    def _identity_key_name(node_id: str) -> str:
        return f"i-{node_id}"

    @staticmethod
    def _session_key_name(key_id: bytes) -> str:
        return f"s-{key_id.hex()}"

    async def save_identity_key(self, private_key) -> str:
        """
        Save an identity key.

        Returns:
            The id of the node that owns the key

        """
        node_id = get_id_from_public_key(private_key.public_key())
        await self._save_key(
            self._identity_key_name(node_id),
            StoredPrivateKey.wrap(private_key, StoredPrivateKey.TYPE_IDENTITY, node_id),
        )
        return node_id

    async def retrieve_identity_key(self, node_id: str):
        """
        Fetch the identity key of `node_id`.

        Raises:
            UnknownKeyError: If the key does not exist

        """
        record = await self._fetch_key(self._identity_key_name(node_id))
        if record.key_type != StoredPrivateKey.TYPE_IDENTITY:
            raise UnknownKeyError(f"Key for {node_id} is not an identity key")
        return record.load_private_key()

    async def save_session_key(
        self, private_key, key_id: bytes, node_id: str, peer_id: str = None
    ):
        """
        Save a session key owned by `node_id`.

        Args:
            private_key: The private key
            key_id: Id of the key pair
            node_id: Id of the node that owns the key
            peer_id: Id of the peer the key is bound to; absent for initial keys

        """
        await self._save_key(
            self._session_key_name(key_id),
            StoredPrivateKey.wrap(
                private_key, StoredPrivateKey.TYPE_SESSION, node_id, peer_id
            ),
        )
        LOGGER.debug("Saved session key %s for %s", key_id.hex(), node_id)

    async def _fetch_session_key(self, key_id: bytes, node_id: str) -> StoredPrivateKey:
        record = await self._fetch_key(self._session_key_name(key_id))
        if record.key_type != StoredPrivateKey.TYPE_SESSION:
            raise UnknownKeyError(f"Key {key_id.hex()} is not a session key")
        if record.node_id != node_id:
            raise UnknownKeyError(f"Key {key_id.hex()} is owned by a different node")
        return record

    async def retrieve_unbound_session_key(self, key_id: bytes, node_id: str):
        """
        Fetch an initial session key, which is not bound to any peer.

        Raises:
            UnknownKeyError: If the key does not exist or is bound to a peer

        """
        record = await self._fetch_session_key(key_id, node_id)
        if record.peer_id:
            raise UnknownKeyError(f"Session key {key_id.hex()} is bound")
        return record.load_private_key()

    async def retrieve_session_key(self, key_id: bytes, node_id: str, peer_id: str):
        """
        Fetch a session key usable with `peer_id`.

        Initial session keys are usable with any peer.

        Raises:
            UnknownKeyError: If the key does not exist or is bound to another peer

        """
        record = await self._fetch_session_key(key_id, node_id)
        if record.peer_id and record.peer_id != peer_id:
            raise UnknownKeyError(
                f"Session key {key_id.hex()} is bound to another recipient"
            )
        return record.load_private_key()

    @abstractmethod
    async def _save_key(self, key_name: str, record: StoredPrivateKey):
        """
        Persist `record` under `key_name`.

        Raises:
            KeyStoreError: If the backend failed

        """

    @abstractmethod
    async def _fetch_key(self, key_name: str) -> StoredPrivateKey:
        """
        Load the record stored under `key_name`.

        Raises:
            UnknownKeyError: If there is no such record
            KeyStoreError: If the backend failed

        """
