import logging

import pytest

from remoting_swagger.generator.registry import TypeRegistry
from remoting_swagger.generator.schema import (
    build_model_schema,
    build_property_schema,
    convert_text,
    translate,
)
from remoting_swagger.parser.base import ModelDescriptor, PropertyDescriptor
from remoting_swagger.parser.types import parse_type


def _registry(*names):
    registry = TypeRegistry()
    for name in names:
        registry.register(name, lambda: {"type": "object"})
    return registry


class TestTranslate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("string", {"type": "string"}),
            ("number", {"type": "number"}),
            ("integer", {"type": "integer", "format": "int64"}),
            ("boolean", {"type": "boolean"}),
            ("date", {"type": "string", "format": "date-time"}),
            ("buffer", {"type": "string", "format": "binary"}),
            ("any", {"type": "object"}),
            ("object", {"type": "object"}),
            ("file", {"type": "file"}),
        ],
    )
    def test_primitives(self, raw, expected):
        assert translate(parse_type(raw), _registry()) == expected

    def test_known_model_is_referenced(self):
        registry = _registry("Product")
        assert translate(parse_type("Product"), registry) == {"$ref": "#/definitions/Product"}
        assert registry.is_referenced("Product")

    def test_unknown_model_is_object(self, caplog):
        registry = _registry()
        with caplog.at_level(logging.DEBUG, logger="remoting_swagger.generator.schema"):
            assert translate(parse_type("Ghost"), registry) == {"type": "object"}
        assert "Ghost" in caplog.text
        assert registry.definitions() == {}

    def test_array_of_model(self):
        schema = translate(parse_type(["Product"]), _registry("Product"))
        assert schema == {"type": "array", "items": {"$ref": "#/definitions/Product"}}

    def test_inline_object(self):
        schema = translate(parse_type({"count": "number"}), _registry())
        assert schema == {"type": "object", "properties": {"count": {"type": "number"}}}

    def test_results_are_fresh_copies(self):
        schema = translate(parse_type("string"), _registry())
        schema["description"] = "mutated"
        assert translate(parse_type("string"), _registry()) == {"type": "string"}


class TestConvertText:
    def test_joins_lines(self):
        assert convert_text(["a-description", "line2"]) == "a-description\nline2"

    def test_none_stays_none(self):
        assert convert_text(None) is None


class TestPropertySchema:
    def test_bounds_default_description(self):
        prop = PropertyDescriptor.model_validate(
            {"type": "number", "min": 1, "max": 10, "default": 5, "description": "A number"}
        )
        assert build_property_schema(prop, _registry()) == {
            "type": "number",
            "description": "A number",
            "default": 5,
            "minimum": 1,
            "maximum": 10,
        }

    def test_reference_has_no_siblings(self):
        prop = PropertyDescriptor.model_validate({"type": "Address", "description": "Where"})
        assert build_property_schema(prop, _registry("Address")) == {"$ref": "#/definitions/Address"}


class TestModelSchema:
    def test_properties_and_required(self):
        model = ModelDescriptor.model_validate(
            {
                "name": "Product",
                "settings": {"description": ["a-description", "line2"]},
                "properties": {"foo": {"type": "string", "required": True}, "bar": "string"},
            }
        )
        schema = build_model_schema(model, _registry())
        assert schema["type"] == "object"
        assert schema["description"] == "a-description\nline2"
        assert list(schema["properties"]) == ["id", "foo", "bar"]
        assert schema["properties"]["id"] == {"type": "number"}
        assert schema["required"] == ["foo"]
        assert "additionalProperties" not in schema

    def test_no_required_key_when_nothing_required(self):
        model = ModelDescriptor(name="Tag", properties={"label": "string"})
        assert "required" not in build_model_schema(model, _registry())

    def test_hidden_and_excluded(self):
        model = ModelDescriptor.model_validate(
            {"name": "User", "settings": {"hidden": ["password"]}, "properties": {"email": "string", "password": "string"}}
        )
        schema = build_model_schema(model, _registry(), exclude=("id",))
        assert list(schema["properties"]) == ["email"]

    def test_strict_disallows_extra(self):
        model = ModelDescriptor.model_validate({"name": "Tag", "settings": {"strict": True}})
        assert build_model_schema(model, _registry())["additionalProperties"] is False

    def test_extra_properties_appended(self):
        model = ModelDescriptor(name="Tag", properties={"label": "string"})
        schema = build_model_schema(model, _registry(), extra={"owner": {"type": "object"}})
        assert list(schema["properties"]) == ["id", "label", "owner"]
