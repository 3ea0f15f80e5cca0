"""Load classes named by dotted paths, such as the configured parcel format."""

from importlib import import_module
from importlib.util import find_spec
from types import ModuleType
from typing import Optional, Type

from ..core.error import BaseError


class ModuleLoadError(BaseError):
    """A module exists but importing it failed."""


class ClassNotFoundError(BaseError):
    """A dotted path does not name a class."""


class ClassLoader:
    """Resolve modules and classes by name."""

    @staticmethod
    def load_module(mod_path: str) -> Optional[ModuleType]:
        """
        Import a module by its absolute path.

        Returns:
            The module, or None if it does not exist

        Raises:
            ModuleLoadError: If the module exists but could not be imported

        """
        try:
            spec = find_spec(mod_path)
        except (ModuleNotFoundError, ValueError):
            # A parent package is missing
            return None
        if spec is None:
            return None
        try:
            return import_module(mod_path)
        except ImportError as err:
            raise ModuleLoadError(f"Unable to import module {mod_path}") from err

    @classmethod
    def load_class(cls, class_path: str, default_module: str = None) -> type:
        """
        Resolve `module.Class`, or a bare class name within `default_module`.

        Raises:
            ClassNotFoundError: If the path does not resolve to a class
            ModuleLoadError: If the module could not be imported

        """
        mod_path, _, class_name = class_path.rpartition(".")
        mod_path = mod_path or default_module
        if not mod_path:
            raise ClassNotFoundError(f"Class name has no module: {class_path}")

        module = cls.load_module(mod_path)
        if module is None:
            raise ClassNotFoundError(f"Module '{mod_path}' not found")
        resolved = getattr(module, class_name, None)
        if not isinstance(resolved, type):
            raise ClassNotFoundError(f"'{class_name}' is not a class in {mod_path}")
        return resolved

    @classmethod
    def load_subclass(cls, base_class: Type, class_path: str) -> Type:
        """
        Resolve a class path and check that it implements `base_class`.

        Raises:
            ClassNotFoundError: If the class is missing or does not subclass
                `base_class`

        """
        resolved = cls.load_class(class_path)
        if not issubclass(resolved, base_class):
            raise ClassNotFoundError(
                f"Class {class_path} does not inherit from {base_class.__name__}"
            )
        return resolved
