"""HashiCorp Vault private key store."""

import asyncio
import logging
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout, DummyCookieJar

from ..config.base import BaseSettings
from ..messaging.models.base import BaseModelError
from .base import BasePrivateKeyStore
from .error import KeyStoreError, UnknownKeyError
from .models import StoredPrivateKey

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


def build_base_vault_url(vault_url: str, kv_path: str) -> str:
    """Return the URL under which the secrets of a KV v2 engine are kept."""
    sanitized_url = vault_url.rstrip("/")
    sanitized_path = kv_path.strip("/")
    return f"{sanitized_url}/v1/{sanitized_path}/data"


class VaultPrivateKeyStore(BasePrivateKeyStore):
    """Private key store backed by a Vault KV (version 2) secrets engine."""

    def __init__(
        self,
        vault_url: str,
        vault_token: str,
        kv_path: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize a `VaultPrivateKeyStore` instance."""
        self.base_url = build_base_vault_url(vault_url, kv_path)
        self.vault_token = vault_token
        self.timeout = timeout
        self.client_session: ClientSession = None

    @classmethod
    def from_settings(cls, settings: BaseSettings) -> "VaultPrivateKeyStore":
        """Build the store configured in `settings`."""
        return cls(
            settings.require_str("vault.url"),
            settings.require_str("vault.token"),
            settings.require_str("vault.kv_prefix"),
            settings.get_float("vault.timeout", default=DEFAULT_TIMEOUT),
        )

    async def open(self):
        """Open the connection pool."""
        if not self.client_session:
            self.client_session = ClientSession(
                cookie_jar=DummyCookieJar(),
                headers={"X-Vault-Token": self.vault_token},
                timeout=ClientTimeout(total=self.timeout),
            )
        return self

    async def close(self):
        """Close the connection pool."""
        if self.client_session:
            await self.client_session.close()
            self.client_session = None

    def _session(self) -> ClientSession:
        if not self.client_session:
            raise KeyStoreError("Vault key store is not open")
        return self.client_session

    def _key_url(self, key_name: str) -> str:
        return self.base_url + "/" + quote(key_name, safe="")

    async def _save_key(self, key_name: str, record: StoredPrivateKey):
        # Error messages omit the underlying exception so secrets never reach logs
        try:
            async with self._session().post(
                self._key_url(key_name), json={"data": record.serialize()}
            ) as response:
                status = response.status
        except (ClientError, asyncio.TimeoutError) as err:
            raise KeyStoreError(
                f"Failed to save key {key_name}: {err.__class__.__name__}"
            ) from None
        if status not in (200, 204):
            raise KeyStoreError(
                f"Failed to save key {key_name}: Vault returned a {status} response"
            )

    async def _fetch_key(self, key_name: str) -> StoredPrivateKey:
        try:
            async with self._session().get(self._key_url(key_name)) as response:
                status = response.status
                body = await response.json() if status == 200 else None
        except (ClientError, asyncio.TimeoutError, ValueError) as err:
            raise KeyStoreError(
                f"Failed to retrieve key {key_name}: {err.__class__.__name__}"
            ) from None

        if status == 404:
            raise UnknownKeyError(f"Key {key_name} does not exist")
        if status != 200:
            raise KeyStoreError(
                f"Failed to retrieve key {key_name}: Vault returned a {status} response"
            )
        try:
            return StoredPrivateKey.deserialize(body["data"]["data"])
        except (KeyError, TypeError, BaseModelError) as err:
            raise KeyStoreError(f"Key {key_name} is malformed") from err
