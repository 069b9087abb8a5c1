"""Translate type references and model field sets into Swagger 2.0 schemas."""

import logging

from remoting_swagger.generator.registry import TypeRegistry
from remoting_swagger.parser.base import ModelDescriptor, PropertyDescriptor
from remoting_swagger.parser.types import (
    ArrayType,
    FileType,
    NamedType,
    ObjectType,
    PrimitiveType,
    TypeRef,
)

logger = logging.getLogger(__name__)

PRIMITIVE_SCHEMAS = {
    "string": {"type": "string"},
    "number": {"type": "number"},
    "integer": {"type": "integer", "format": "int64"},
    "boolean": {"type": "boolean"},
    "date": {"type": "string", "format": "date-time"},
    "buffer": {"type": "string", "format": "binary"},
    "any": {"type": "object"},
    "object": {"type": "object"},
}

GENERIC_OBJECT = {"type": "object"}


def convert_text(value) -> str | None:
    """Join multi-line descriptions; leave None alone."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return "\n".join(str(line) for line in value)
    return str(value)


def is_reference(schema: dict) -> bool:
    return "$ref" in schema


def translate(type_ref: TypeRef, registry: TypeRegistry) -> dict:
    """Return the schema fragment for a type reference.

    Named types the registry does not know become a plain object, never a
    dangling ``$ref``.
    """
    if isinstance(type_ref, PrimitiveType):
        return dict(PRIMITIVE_SCHEMAS[type_ref.name])
    if isinstance(type_ref, FileType):
        return {"type": "file"}
    if isinstance(type_ref, ArrayType):
        return {"type": "array", "items": translate(type_ref.items, registry)}
    if isinstance(type_ref, ObjectType):
        schema = {"type": "object"}
        if type_ref.properties:
            schema["properties"] = {
                name: translate(field_type, registry) for name, field_type in type_ref.properties.items()
            }
        return schema
    if isinstance(type_ref, NamedType):
        if registry.is_defined(type_ref.name):
            return {"$ref": registry.reference(type_ref.name)}
        logger.debug("using `object` in place of unknown type %r", type_ref.name)
        return dict(GENERIC_OBJECT)
    raise TypeError(f"unsupported type reference: {type_ref!r}")


def describe(schema: dict, description) -> dict:
    """Attach a description unless the schema is a bare reference."""
    text = convert_text(description)
    if text and not is_reference(schema):
        schema["description"] = text
    return schema


def build_property_schema(prop: PropertyDescriptor, registry: TypeRegistry) -> dict:
    schema = translate(prop.type, registry)
    if is_reference(schema):
        return schema
    describe(schema, prop.description)
    if prop.default is not None:
        schema["default"] = prop.default
    if prop.min is not None:
        schema["minimum"] = prop.min
    if prop.max is not None:
        schema["maximum"] = prop.max
    return schema


def build_model_schema(
    model: ModelDescriptor,
    registry: TypeRegistry,
    exclude: tuple[str, ...] = (),
    extra: dict | None = None,
) -> dict:
    """Build the definition for a model's own properties.

    ``exclude`` drops properties (e.g. a server-generated id); ``extra`` adds
    synthesized ones after the declared properties.
    """
    hidden = set(model.settings.hidden) | set(exclude)
    properties = {}
    required = []
    for name, prop in model.properties.items():
        if name in hidden:
            continue
        properties[name] = build_property_schema(prop, registry)
        if prop.required:
            required.append(name)
    if extra:
        properties.update(extra)

    schema = {"type": "object"}
    description = convert_text(model.settings.description)
    if description:
        schema["description"] = description
    schema["properties"] = properties
    if required:
        schema["required"] = required
    if model.settings.strict:
        schema["additionalProperties"] = False
    return schema
