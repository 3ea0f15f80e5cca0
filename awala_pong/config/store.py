"""Runtime configuration kept in Redis."""

import logging
from enum import Enum
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .base import ConfigError

LOGGER = logging.getLogger(__name__)

CONFIG_NAMESPACE = "config"


class ConfigItem(Enum):
    """Configuration items shared by the provisioning and worker processes."""

    CURRENT_ID = "current_id"
    INITIAL_SESSION_KEY_ID_BASE64 = "initial_session_key_id_base64"


class ConfigStoreError(ConfigError):
    """The configuration backend could not be reached."""


class ConfigStore:
    """Key/value store for configuration items."""

    def __init__(self, redis: Redis, namespace: str = CONFIG_NAMESPACE):
        """Initialize the store with a Redis client."""
        self.redis = redis
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str) -> "ConfigStore":
        """Create a store connected to the Redis server at `url`."""
        return cls(Redis.from_url(url, decode_responses=True))

    def _key(self, item: ConfigItem) -> str:
        return f"{self.namespace}:{item.value}"

    async def get(self, item: ConfigItem) -> Optional[str]:
        """Fetch the value of `item`, or None if it was never set."""
        try:
            return await self.redis.get(self._key(item))
        except RedisError as err:
            raise ConfigStoreError(f"Failed to read {item.value}") from err

    async def set(self, item: ConfigItem, value: str):
        """Set the value of `item`."""
        try:
            await self.redis.set(self._key(item), value)
        except RedisError as err:
            raise ConfigStoreError(f"Failed to write {item.value}") from err
        LOGGER.debug("Set configuration item %s", item.value)

    async def close(self):
        """Close the connection to the backend."""
        await self.redis.aclose()
