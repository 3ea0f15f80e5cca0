"""Settings implementation."""

from typing import Mapping

from .base import BaseSettings, SettingsError


class Settings(BaseSettings):
    """Settings held in a dictionary, as parsed from the command line."""

    def __init__(self, values: Mapping[str, object] = None):
        """Initialize the settings with an optional mapping of values."""
        self._values = dict(values or {})

    def get_value(self, var_name: str, default=None):
        """Fetch a setting, or `default` if it is not defined."""
        return self._values.get(var_name, default)

    def __setitem__(self, var_name: str, value):
        """Define or replace a setting."""
        if not isinstance(var_name, str) or not var_name:
            raise SettingsError("Setting names must be non-empty strings")
        self._values[var_name] = value

    def __contains__(self, var_name) -> bool:
        return var_name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
