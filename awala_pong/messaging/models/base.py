"""Base classes for models persisted as JSON and their marshmallow schemas."""

import json
import logging
from abc import ABC
from typing import Type, TypeVar, Union

from marshmallow import EXCLUDE, Schema, ValidationError, post_dump, post_load

from ...core.error import BaseError
from ...utils.classloader import ClassLoader

LOGGER = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound="BaseModel")


class BaseModelError(BaseError):
    """A model could not be loaded or dumped."""


def _meta_option(cls: type, name: str, default=None):
    """Look up a `Meta` option on `cls` or the closest base class defining it."""
    for klass in cls.__mro__:
        meta = klass.__dict__.get("Meta")
        if meta is not None and hasattr(meta, name):
            return getattr(meta, name)
    return default


def _resolve(target, owner: type) -> type:
    """Resolve a class given directly or by name in the module of `owner`."""
    if isinstance(target, str):
        return ClassLoader.load_class(target, owner.__module__)
    return target


class BaseModel(ABC):
    """
    Model with a marshmallow schema.

    Subclasses name their schema in `Meta.schema_class`, either as the class
    or as a class name in the same module (for schemas defined after the
    model). `Meta.repr_exclude` lists attributes kept out of `repr`, such as
    key material.
    """

    class Meta:
        schema_class = None

    def __init__(self):
        """Refuse to build models without a schema."""
        if not self.Meta.schema_class:
            raise TypeError(f"{self.__class__.__name__} has no schema_class")

    @classmethod
    def _schema(cls) -> "BaseModelSchema":
        schema_cls = _resolve(cls.Meta.schema_class, cls)
        if not issubclass(schema_cls, BaseModelSchema):
            raise TypeError(f"{schema_cls} is not a BaseModelSchema")
        return schema_cls(unknown=_meta_option(schema_cls, "unknown", EXCLUDE))

    @classmethod
    def deserialize(cls: Type[ModelType], obj: dict) -> ModelType:
        """
        Load a model from its dict representation.

        Raises:
            BaseModelError: If the data does not match the schema

        """
        try:
            return cls._schema().load(obj)
        except (AttributeError, TypeError, ValidationError) as err:
            LOGGER.warning("%s validation error: %s", cls.__name__, err)
            raise BaseModelError(f"{cls.__name__} schema validation failed") from err

    def serialize(self) -> dict:
        """Dump the model to a JSON-compatible dict."""
        try:
            return self._schema().dump(self)
        except (AttributeError, ValidationError) as err:
            raise BaseModelError(
                f"{self.__class__.__name__} could not be serialized"
            ) from err

    @classmethod
    def from_json(cls: Type[ModelType], json_repr: Union[str, bytes]) -> ModelType:
        """
        Load a model from a JSON document.

        Raises:
            BaseModelError: If the document is not JSON or does not match the
                schema

        """
        try:
            parsed = json.loads(json_repr)
        except ValueError as err:
            raise BaseModelError(f"{cls.__name__} JSON parsing failed") from err
        return cls.deserialize(parsed)

    def to_json(self) -> str:
        """Dump the model to a compact JSON document."""
        return json.dumps(self.serialize(), separators=(",", ":"))

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return False
        return self.serialize() == other.serialize()

    def __repr__(self) -> str:
        exclude = _meta_option(type(self), "repr_exclude", ())
        items = ", ".join(
            f"{name}={value!r}"
            for name, value in self.__dict__.items()
            if name not in exclude
        )
        return f"<{self.__class__.__name__}({items})>"


class BaseModelSchema(Schema):
    """
    Schema loading into a `BaseModel`.

    Subclasses set `Meta.model_class`. Dumped values listed in
    `Meta.skip_values` (None by default) are left out of the output.
    """

    class Meta:
        model_class = None
        skip_values = [None]

    @post_load
    def make_model(self, data: dict, **kwargs):
        """Build the model instance from the loaded data."""
        model_cls = _resolve(_meta_option(type(self), "model_class"), type(self))
        if model_cls is None:
            raise TypeError(f"{self.__class__.__name__} has no model_class")
        return model_cls(**data)

    @post_dump
    def remove_skipped_values(self, data: dict, **kwargs) -> dict:
        """Drop the values to skip."""
        skip_values = _meta_option(type(self), "skip_values", [])
        return {key: value for key, value in data.items() if value not in skip_values}
