"""Type references for model properties and remote method arguments.

Raw descriptors spell types loosely: ``"string"``, ``"Warehouse"``,
``["Warehouse"]``, ``{"type": "number"}`` or an inline ``{"street": "string"}``.
``parse_type`` turns every one of those into exactly one of the variants below,
so the generator never has to inspect raw values again.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, BeforeValidator

PrimitiveName = Literal["string", "number", "integer", "boolean", "date", "buffer", "any", "object"]

PRIMITIVE_NAMES = ("string", "number", "integer", "boolean", "date", "buffer", "any", "object")
FILE_NAMES = ("file", "stream", "readablestream")
NUMERIC_NAMES = ("number", "integer")


class PrimitiveType(BaseModel):
    kind: Literal["primitive"] = "primitive"
    name: PrimitiveName


class NamedType(BaseModel):
    """Reference to a model by name; may or may not be known at generation time."""

    kind: Literal["named"] = "named"
    name: str


class FileType(BaseModel):
    kind: Literal["file"] = "file"


class ArrayType(BaseModel):
    kind: Literal["array"] = "array"
    items: "TypeRef"


class ObjectType(BaseModel):
    """Anonymous inline object with typed fields."""

    kind: Literal["object"] = "object"
    properties: dict[str, "TypeRef"] = {}


TypeRef = Union[PrimitiveType, NamedType, FileType, ArrayType, ObjectType]

ArrayType.model_rebuild()
ObjectType.model_rebuild()

ANY = PrimitiveType(name="any")


def parse_type(raw) -> TypeRef:
    """Parse a raw type descriptor into a TypeRef."""
    if isinstance(raw, (PrimitiveType, NamedType, FileType, ArrayType, ObjectType)):
        return raw
    if raw is None:
        return ANY
    if isinstance(raw, list):
        return ArrayType(items=parse_type(raw[0] if raw else None))
    if isinstance(raw, dict):
        if "type" in raw:
            return parse_type(raw["type"])
        return ObjectType(properties={name: parse_type(value) for name, value in raw.items()})
    if isinstance(raw, str):
        if not raw.strip():
            return ANY
        lowered = raw.strip().lower()
        if lowered in PRIMITIVE_NAMES:
            return PrimitiveType(name=lowered)
        if lowered == "array":
            return ArrayType(items=ANY)
        if lowered in FILE_NAMES:
            return FileType()
        return NamedType(name=raw.strip())
    raise ValueError(f"unsupported type descriptor: {raw!r}")


TypeField = Annotated[TypeRef, BeforeValidator(parse_type)]
