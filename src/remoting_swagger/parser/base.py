"""Descriptor models for an application's models and remote methods.

Everything the generator consumes is validated into these models once, at the
boundary. Loaders (YAML/JSON files, the CRUD route synthesizer) produce them;
the generator only reads them.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .types import ANY, NUMERIC_NAMES, PrimitiveType, TypeField

REQUEST_SOURCES = ("req", "res", "context")

PROPERTY_KEYS = {"type", "required", "min", "max", "minimum", "maximum", "default", "description", "id", "generated"}


def _as_number(value):
    if isinstance(value, (int, float)) or value is None:
        return value
    number = float(value)
    return int(number) if number.is_integer() else number


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


class HttpHint(BaseModel):
    """Where an argument comes from, or where a return value goes."""

    source: str | None = None  # query / body / path / header / form / formData / req / res / context
    target: str | None = None  # header / status
    derived: bool = False  # computed by the framework from the request


class PropertyDescriptor(BaseModel):
    """A single model property."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    type: TypeField = ANY
    required: bool = False
    min: int | float | None = Field(None, alias="minimum")
    max: int | float | None = Field(None, alias="maximum")
    default: Any = None
    description: str | list[str] | None = None
    id: bool = False
    generated: bool = False

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthand(cls, data):
        # `bar: string`, `tags: [string]` and inline `{street: string}` are type-only.
        # A mapping is a full descriptor only with a `type` key or descriptor keys alone.
        if isinstance(data, PropertyDescriptor):
            return data
        if isinstance(data, dict) and ("type" in data or (data and data.keys() <= PROPERTY_KEYS)):
            return data
        return {"type": data}

    @model_validator(mode="after")
    def _numeric_default(self):
        if isinstance(self.type, PrimitiveType) and self.type.name in NUMERIC_NAMES:
            self.default = _as_number(self.default)
        return self


class RelationDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    kind: Literal["belongsTo", "hasOne", "hasMany", "hasManyThrough"]
    model: str
    through: str | None = None
    disable_include: bool = Field(False, alias="disableInclude")

    @property
    def is_collection(self) -> bool:
        return self.kind in ("hasMany", "hasManyThrough")


class TagSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    description: str | list[str] | None = None
    external_docs: dict | None = Field(None, alias="externalDocs")


class AclRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    permission: str
    principal_type: str = Field("ROLE", alias="principalType")
    principal_id: str = Field(alias="principalId")
    property: str = "*"
    access_type: str = Field("*", alias="accessType")

    @field_validator("permission")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class ModelSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str | list[str] | None = None
    plural: str | None = None
    tag: TagSettings | None = None
    force_id: bool | None = Field(None, alias="forceId")
    id_injection: bool = Field(True, alias="idInjection")
    hidden: list[str] = []
    strict: bool = False
    generate_relation_properties: bool | None = Field(None, alias="generateRelationProperties")
    acls: list[AclRule] = []


class AcceptDescriptor(BaseModel):
    """One declared input of a remote method."""

    name: str = ""
    arg: str = ""
    type: TypeField = ANY
    model: str | None = None
    required: bool = False
    description: str | list[str] | None = None
    documented: bool = True
    http: HttpHint | None = None

    @property
    def param_name(self) -> str:
        return self.name or self.arg

    @model_validator(mode="after")
    def _has_name(self):
        if not self.param_name:
            raise ValueError("accepted argument needs a `name` or `arg`")
        return self


class ReturnDescriptor(BaseModel):
    """One declared output of a remote method."""

    name: str = ""
    arg: str = ""
    type: TypeField = ANY
    model: str | None = None
    root: bool = False
    required: bool = False
    description: str | list[str] | None = None
    example: Any = None
    http: HttpHint | None = None

    @property
    def param_name(self) -> str:
        return self.name or self.arg


class ErrorDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    message: str = ""
    response_model: TypeField | None = Field(None, alias="responseModel")

    @field_validator("code", mode="before")
    @classmethod
    def _code_to_str(cls, value) -> str:
        return str(value)


class RouteDescriptor(BaseModel):
    """A remote method exposed at one HTTP verb + path."""

    model_config = ConfigDict(populate_by_name=True)

    method: str = Field(min_length=1)  # Product.find / Product.prototype.patchAttributes
    verb: str = Field(min_length=1)
    path: str = Field(min_length=1)  # /Products/:id
    accepts: list[AcceptDescriptor] = []
    returns: list[ReturnDescriptor] = []
    errors: list[ErrorDescriptor] = []
    description: str | list[str] | None = None
    notes: str | list[str] | None = None
    deprecated: bool = False
    status: int | None = None
    error_status: int | None = Field(None, alias="errorStatus")

    @field_validator("accepts", "returns", "errors", mode="before")
    @classmethod
    def _listify(cls, value):
        return _as_list(value)

    @property
    def class_name(self) -> str:
        return self.method.split(".")[0]

    @property
    def method_name(self) -> str:
        return self.method.split(".")[-1]

    @property
    def is_prototype(self) -> bool:
        return "prototype" in self.method.split(".")[1:-1]


class ModelDescriptor(BaseModel):
    """A named model with its properties, relations and settings."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    properties: dict[str, PropertyDescriptor] = {}
    relations: list[RelationDescriptor] = []
    public: bool = True
    settings: ModelSettings = Field(default_factory=ModelSettings)
    shared_ctor_accepts: list[AcceptDescriptor] | None = Field(None, alias="sharedCtorAccepts")
    crud: bool = False

    @model_validator(mode="after")
    def _inject_defaults(self):
        if self.id_property is None and self.settings.id_injection:
            injected = PropertyDescriptor(type="number", id=True, generated=True)
            self.properties = {"id": injected, **self.properties}
        if self.shared_ctor_accepts is None:
            self.shared_ctor_accepts = []
            if self.crud:
                self.shared_ctor_accepts = [
                    AcceptDescriptor(
                        arg="id",
                        type="any",
                        required=True,
                        description=f"{self.name} id",
                        http=HttpHint(source="path"),
                    )
                ]
        return self

    @property
    def id_property(self) -> str | None:
        for name, prop in self.properties.items():
            if prop.id:
                return name
        return None

    def has_generated_id(self) -> bool:
        name = self.id_property
        return name is not None and self.properties[name].generated


class AppDescriptor(BaseModel):
    """Everything needed for one generation run."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = "remoting-swagger"
    description: str | list[str] | None = None
    version: str = "1.0.0"
    rest_api_root: str = Field("/api", alias="restApiRoot")
    models: list[ModelDescriptor] = []
    routes: list[RouteDescriptor] = []
    swagger: dict = {}  # app-level swagger config: generator flags and top-level overrides

    @model_validator(mode="after")
    def _unique_models(self):
        seen = set()
        for model in self.models:
            if model.name in seen:
                raise ValueError(f"model {model.name!r} is declared more than once")
            seen.add(model.name)
        return self

    def get_model(self, name: str) -> ModelDescriptor | None:
        for model in self.models:
            if model.name == name:
                return model
        return None
