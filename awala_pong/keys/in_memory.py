"""In-memory private key store."""

from .base import BasePrivateKeyStore
from .error import UnknownKeyError
from .models import StoredPrivateKey


class InMemoryPrivateKeyStore(BasePrivateKeyStore):
    """Private key store backed by a dictionary of JSON documents."""

    def __init__(self):
        """Initialize an empty store."""
        self.keys = {}

    async def _save_key(self, key_name: str, record: StoredPrivateKey):
        self.keys[key_name] = record.to_json()

    async def _fetch_key(self, key_name: str) -> StoredPrivateKey:
        if key_name not in self.keys:
            raise UnknownKeyError(f"Key {key_name} does not exist")
        return StoredPrivateKey.from_json(self.keys[key_name])
