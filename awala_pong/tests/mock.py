"""Mocks shared by the test suites."""

from unittest.mock import AsyncMock, MagicMock, patch

# Commands issued through redis.asyncio.Redis by the queue and config store
REDIS_COMMANDS = (
    "get",
    "set",
    "ping",
    "rpush",
    "blmove",
    "lmove",
    "lrem",
    "zadd",
    "zrem",
    "zrangebyscore",
    "aclose",
)


def CoroutineMock(*args, **kwargs):
    """Return an AsyncMock whose result is a MagicMock unless one is given."""
    kwargs.setdefault("return_value", MagicMock())
    return AsyncMock(*args, **kwargs)


def make_redis_mock(**return_values) -> MagicMock:
    """
    Mock an asyncio Redis client.

    Every command resolves to None unless a return value is given for it by
    keyword, as in `make_redis_mock(ping=True)`.
    """
    redis = MagicMock()
    for command in REDIS_COMMANDS:
        setattr(redis, command, AsyncMock(return_value=return_values.pop(command, None)))
    if return_values:
        raise TypeError(f"Unknown Redis commands: {', '.join(return_values)}")
    return redis


__all__ = ["CoroutineMock", "MagicMock", "make_redis_mock", "patch"]
