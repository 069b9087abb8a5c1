"""Convert remote method routes into Swagger 2.0 operations.

Routes need some massaging before they fit the Swagger model: framework-injected
arguments are dropped, argument locations are resolved, returns are folded into
one response schema, and ids are made unique across the whole document.
"""

import logging
import re

from remoting_swagger.config import GeneratorOptions
from remoting_swagger.errors import SpecGenerationError
from remoting_swagger.generator.operation_ids import OperationIdAllocator, PathEntry
from remoting_swagger.generator.registry import TypeRegistry
from remoting_swagger.generator.relations import RelationExpander
from remoting_swagger.generator.schema import GENERIC_OBJECT, convert_text, describe, is_reference, translate
from remoting_swagger.parser.base import (
    REQUEST_SOURCES,
    AcceptDescriptor,
    ModelDescriptor,
    ReturnDescriptor,
    RouteDescriptor,
)
from remoting_swagger.parser.types import FileType, NamedType, PrimitiveType

logger = logging.getLogger(__name__)

NEW_INSTANCE_SCOPE = "new"

READ_VERBS = ("get", "head")
VERB_ALIASES = {"all": "post", "del": "delete"}
SKIPPED_RETURN_TARGETS = ("header", "status")

MODEL_DATA_DESCRIPTION = "Model instance data"
MODEL_DATA_REPLACEMENT = "An object of model property name/value pairs"
ID_DESCRIPTION = re.compile(r" id$")

EVERYONE = "$everyone"


def convert_path(path: str) -> str:
    """``/Products/:id`` -> ``/Products/{id}``."""
    return "/".join(
        "{" + fragment[1:] + "}" if fragment.startswith(":") else fragment for fragment in path.split("/")
    )


def convert_verb(verb: str) -> str:
    verb = verb.lower()
    return VERB_ALIASES.get(verb, verb)


def path_placeholders(path: str) -> set[str]:
    return {fragment[1:] for fragment in path.split("/") if fragment.startswith(":")}


def candidate_operation_id(method: str) -> str:
    """``Product.prototype.patchAttributes`` -> ``Product_patchAttributes``."""
    return method.replace(".prototype.", "_", 1).replace(".", "_", 1)


def tag_name(model: ModelDescriptor) -> str:
    tag = model.settings.tag
    if tag and tag.name:
        return tag.name
    return model.name


def _is_model_data(type_ref) -> bool:
    if isinstance(type_ref, NamedType):
        return True
    return isinstance(type_ref, PrimitiveType) and type_ref.name in ("any", "object")


def _is_documented(accept: AcceptDescriptor) -> bool:
    if not accept.documented:
        return False
    http = accept.http
    if http is None:
        return True
    return not http.derived and http.source not in REQUEST_SOURCES


class RouteTranslator:
    def __init__(
        self,
        models: dict[str, ModelDescriptor],
        registry: TypeRegistry,
        allocator: OperationIdAllocator,
        expander: RelationExpander,
        options: GeneratorOptions,
    ):
        self._models = models
        self._registry = registry
        self._allocator = allocator
        self._expander = expander
        self._creation_patterns = [re.compile(pattern) for pattern in options.creation_patterns]

    def add_to_paths(self, route: RouteDescriptor, paths: dict[str, dict]) -> PathEntry | None:
        """Translate ``route`` and file it under its path; a taken path+verb is skipped."""
        path = convert_path(route.path)
        verb = convert_verb(route.verb)
        if verb in paths.get(path, {}):
            logger.warning("skipping %s: %s %s is already taken", route.method, verb.upper(), path)
            return None
        entry = self.translate(route)
        paths.setdefault(entry.path, {})[entry.verb] = entry.operation
        return entry

    def translate(self, route: RouteDescriptor) -> PathEntry:
        model = self._models.get(route.class_name)
        if model is None:
            raise SpecGenerationError(f"route {route.method!r} belongs to undeclared model {route.class_name!r}")

        parameters = self._convert_accepts(route, model)
        operation = {"tags": [tag_name(model)]}
        summary = convert_text(route.description)
        if summary is not None:
            operation["summary"] = summary
        notes = convert_text(route.notes)
        if notes is not None:
            operation["description"] = notes
        operation["operationId"] = candidate_operation_id(route.method)
        operation["parameters"] = parameters
        operation["responses"] = self._build_responses(route)
        operation["deprecated"] = route.deprecated
        if not self._is_public(route, model):
            operation["security"] = [{"bearer": []}]
        if any(p.get("type") == "file" for p in parameters):
            operation["consumes"] = ["multipart/form-data"]
        elif any(p["in"] == "formData" for p in parameters):
            operation["consumes"] = ["application/x-www-form-urlencoded"]

        entry = PathEntry(path=convert_path(route.path), verb=convert_verb(route.verb), operation=operation)
        entry.operation["operationId"] = self._allocator.allocate(operation["operationId"], entry)
        return entry

    # -- parameters -----------------------------------------------------------

    def _convert_accepts(self, route: RouteDescriptor, model: ModelDescriptor) -> list[dict]:
        accepts = list(route.accepts)
        if route.is_prototype:
            accepts = list(model.shared_ctor_accepts) + accepts
        return [self._accept_to_parameter(route, model, accept) for accept in accepts if _is_documented(accept)]

    def _accept_to_parameter(self, route: RouteDescriptor, model: ModelDescriptor, accept: AcceptDescriptor) -> dict:
        name = accept.param_name
        if name == "options":
            name = "optionsData"

        location = "query" if convert_verb(route.verb) in READ_VERBS else "formData"
        if accept.http and accept.http.source:
            location = "formData" if accept.http.source == "form" else accept.http.source
        elif name in path_placeholders(route.path):
            location = "path"

        parameter = {"name": name, "in": location}
        description = convert_text(accept.description)
        if description:
            parameter["description"] = description
        parameter["required"] = True if location == "path" else accept.required

        type_ref = NamedType(name=accept.model) if accept.model else accept.type
        if isinstance(type_ref, FileType):
            parameter.update({"in": "formData", "type": "file", "description": "File to upload"})
            return parameter

        if location == "body" and name == "data" and _is_model_data(type_ref):
            target = type_ref.name if isinstance(type_ref, NamedType) else model.name
            parameter["schema"] = self._data_schema(route, target)
            if parameter.get("description") == MODEL_DATA_DESCRIPTION:
                parameter["description"] = MODEL_DATA_REPLACEMENT
            return parameter

        schema = translate(type_ref, self._registry)
        if location == "body":
            parameter["schema"] = schema
        elif schema.get("type") == "object" or is_reference(schema):
            # Non-body parameters cannot carry a schema; pass complex values as JSON.
            parameter["type"] = "object"
            if "properties" in schema:
                parameter["properties"] = schema["properties"]
            parameter["format"] = "JSON"
        elif schema.get("type") == "array":
            parameter["type"] = "array"
            parameter["items"] = schema.get("items", dict(GENERIC_OBJECT))
        else:
            parameter.update(schema)

        if (
            name == "id"
            and parameter["in"] == "path"
            and parameter.get("format") == "JSON"
            and ID_DESCRIPTION.search(parameter.get("description", ""))
        ):
            parameter.pop("format")
            parameter["type"] = "string"
        return parameter

    def _data_schema(self, route: RouteDescriptor, target: str) -> dict:
        """Schema of a ``data`` body argument: the target model, or its creation variant."""
        if not self._registry.is_defined(target):
            logger.debug("using `object` for the body of %s: unknown model %r", route.method, target)
            return dict(GENERIC_OBJECT)
        if self._is_creation(route):
            scoped = self._registry.scoped_name(target, NEW_INSTANCE_SCOPE)
            if scoped is not None:
                return {"$ref": self._registry.reference(scoped)}
        return {"$ref": self._registry.reference(target)}

    def _is_creation(self, route: RouteDescriptor) -> bool:
        return any(pattern.search(route.method_name) for pattern in self._creation_patterns)

    # -- responses ------------------------------------------------------------

    def _build_responses(self, route: RouteDescriptor) -> dict:
        status = route.status or (200 if route.returns else 204)
        success = {"description": "Request was successful"}
        schema = self._convert_returns(route)
        if schema is not None:
            success["schema"] = schema
        if route.returns and route.returns[0].example is not None:
            success["examples"] = {"application/json": route.returns[0].example}
        responses = {str(status): success}

        for error in route.errors:
            response = {"description": error.message}
            if error.response_model is not None:
                response["schema"] = translate(error.response_model, self._registry)
            responses[error.code] = response

        if route.error_status and str(route.error_status) not in responses:
            responses[str(route.error_status)] = {"description": "Unknown error"}
        return responses

    def _convert_returns(self, route: RouteDescriptor) -> dict | None:
        returns = [ret for ret in route.returns if not (ret.http and ret.http.target in SKIPPED_RETURN_TARGETS)]
        if not returns:
            return None

        if len(returns) == 1 and returns[0].root:
            return self._root_schema(route, returns[0])
        if len(returns) == 1 and isinstance(returns[0].type, FileType):
            return {"type": "file"}

        properties = {}
        required = []
        for ret in returns:
            name = ret.param_name
            type_ref = NamedType(name=ret.model) if ret.model else ret.type
            properties[name] = describe(translate(type_ref, self._registry), ret.description)
            if ret.required:
                required.append(name)
        schema = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema

    def _root_schema(self, route: RouteDescriptor, ret: ReturnDescriptor) -> dict:
        type_ref = NamedType(name=ret.model) if ret.model else ret.type
        if self._expander.qualifies(route):
            type_ref = self._expander.expand_type(type_ref)
        return translate(type_ref, self._registry)

    # -- access ---------------------------------------------------------------

    def _is_public(self, route: RouteDescriptor, model: ModelDescriptor) -> bool:
        acls = model.settings.acls
        if not acls:
            return True
        return any(
            acl.permission == "ALLOW" and acl.principal_id == EVERYONE and acl.property == route.method_name
            for acl in acls
        )
