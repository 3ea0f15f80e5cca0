from unittest import TestCase

import pytest
from marshmallow import EXCLUDE, fields, validates_schema, ValidationError

from ..base import BaseModel, BaseModelError, BaseModelSchema


class ModelImpl(BaseModel):
    class Meta:
        schema_class = "SchemaImpl"

    def __init__(self, *, attr=None, optional=None):
        self.attr = attr
        self.optional = optional


class SchemaImpl(BaseModelSchema):
    class Meta:
        model_class = ModelImpl
        unknown = EXCLUDE

    attr = fields.String(required=True)
    optional = fields.String(required=False, data_key="optionalAttr")

    @validates_schema
    def validate_fields(self, data, **kwargs):
        if data["attr"] != "succeeds":
            raise ValidationError("")


class TestBase(TestCase):
    def test_model_validate_fails(self):
        model = ModelImpl(attr="string")
        with pytest.raises(BaseModelError):
            ModelImpl.deserialize(model.serialize())

    def test_model_validate_succeeds(self):
        model = ModelImpl(attr="succeeds")
        loaded = ModelImpl.deserialize(model.serialize())
        assert loaded == model
        assert loaded.attr == "succeeds"

    def test_serialize_skips_none(self):
        assert ModelImpl(attr="succeeds").serialize() == {"attr": "succeeds"}
        assert ModelImpl(attr="succeeds", optional="x").serialize() == {
            "attr": "succeeds",
            "optionalAttr": "x",
        }

    def test_unknown_excluded(self):
        loaded = ModelImpl.deserialize({"attr": "succeeds", "other": 1})
        assert not hasattr(loaded, "other")

    def test_json(self):
        model = ModelImpl.from_json('{"attr": "succeeds", "optionalAttr": "x"}')
        assert model.optional == "x"
        assert ModelImpl.from_json(model.to_json()) == model
        with pytest.raises(BaseModelError):
            ModelImpl.from_json("{not json")

    def test_repr(self):
        assert repr(ModelImpl(attr="succeeds")) == (
            "<ModelImpl(attr='succeeds', optional=None)>"
        )

    def test_missing_schema_class(self):
        class Abstract(BaseModel):
            pass

        with pytest.raises(TypeError):
            Abstract()
