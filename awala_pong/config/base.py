"""Configuration base classes."""

from abc import abstractmethod
from typing import Any, Callable, Iterator, Mapping, Optional

from ..core.error import BaseError


class ConfigError(BaseError):
    """A base exception for all configuration errors."""


class SettingsError(ConfigError):
    """A setting is missing or has an unusable value."""


class BaseSettings(Mapping[str, Any]):
    """
    Read-only view of the settings of a command.

    Keys are dotted names grouped by concern, such as `queue.redis_host` or
    `vault.timeout`.
    """

    @abstractmethod
    def get_value(self, var_name: str, default: Optional[Any] = None) -> Any:
        """Fetch a setting, or `default` if it is not defined."""

    def _get_converted(self, var_name: str, convert: Callable, default):
        value = self.get_value(var_name, default=default)
        if value is None:
            return None
        try:
            return convert(value)
        except (TypeError, ValueError) as err:
            raise SettingsError(f"Invalid value for setting {var_name}") from err

    def get_int(self, var_name: str, default: Optional[int] = None) -> Optional[int]:
        """Fetch a setting as an integer."""
        return self._get_converted(var_name, int, default)

    def get_float(
        self, var_name: str, default: Optional[float] = None
    ) -> Optional[float]:
        """Fetch a setting as a number of seconds, a size, or any other float."""
        return self._get_converted(var_name, float, default)

    def get_str(self, var_name: str, default: Optional[str] = None) -> Optional[str]:
        """Fetch a setting as a string."""
        return self._get_converted(var_name, str, default)

    def require_str(self, var_name: str) -> str:
        """
        Fetch a mandatory string setting.

        Raises:
            SettingsError: If the setting is absent or empty

        """
        value = self.get_str(var_name)
        if not value:
            raise SettingsError(f"Missing required setting: {var_name}")
        return value

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        """Iterate over the setting names."""

    def __getitem__(self, var_name):
        """Fetch a setting, raising `KeyError` if it is not defined."""
        if not isinstance(var_name, str):
            raise TypeError(f"Setting name {var_name!r} must be a string")
        missing = object()
        value = self.get_value(var_name, default=missing)
        if value is missing:
            raise KeyError(var_name)
        return value

    def __repr__(self) -> str:
        """Return the setting names; values may be secrets such as tokens."""
        return f"<{self.__class__.__name__}({', '.join(sorted(self))})>"
