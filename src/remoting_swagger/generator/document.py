"""Assemble a Swagger 2.0 document from an application description.

``SpecGenerator`` produces the ``definitions`` and ``paths`` sections;
``build_swagger_document`` wraps them with the top-level fields.
"""

import json
import logging
from functools import partial

import yaml

from remoting_swagger.config import GENERATOR_ONLY_KEYS, GeneratorOptions, resolve_options
from remoting_swagger.generator.operation_ids import OperationIdAllocator
from remoting_swagger.generator.registry import TypeRegistry
from remoting_swagger.generator.relations import RelationExpander
from remoting_swagger.generator.routes import NEW_INSTANCE_SCOPE, RouteTranslator, tag_name
from remoting_swagger.generator.schema import build_model_schema, convert_text
from remoting_swagger.parser.base import AppDescriptor, ModelDescriptor, RouteDescriptor
from remoting_swagger.parser.crud import standard_routes

logger = logging.getLogger(__name__)

SWAGGER_VERSION = "2.0"

DEFAULT_CONSUMES = [
    "application/json",
    "application/x-www-form-urlencoded",
    "application/xml",
    "text/xml",
]

DEFAULT_PRODUCES = [
    "application/json",
    "application/xml",
    "text/xml",
    # JSONP content types
    "application/javascript",
    "text/javascript",
]

BEARER_SECURITY_DEFINITION = {"type": "apiKey", "name": "Authorization", "in": "header"}


def _model_schema(model: ModelDescriptor, registry: TypeRegistry) -> dict:
    # Related and through models are reachable from their owner even when private.
    for relation in model.relations:
        for target in (relation.model, relation.through):
            if target is None:
                continue
            if registry.is_defined(target):
                registry.reference(target)
            else:
                logger.debug("model %r relates to unknown model %r", model.name, target)
    return build_model_schema(model, registry)


def _new_instance_schema(model: ModelDescriptor, registry: TypeRegistry) -> dict:
    return build_model_schema(model, registry, exclude=(model.id_property,))


class SpecGenerator:
    """One generation run over an application description.

    Every call to ``generate`` starts from fresh registries, so repeated calls
    return identical documents.
    """

    def __init__(self, app: AppDescriptor, options: GeneratorOptions | None = None):
        self.app = app
        self.options = options or resolve_options(app.swagger)

    def routes(self) -> list[RouteDescriptor]:
        """Synthesized CRUD routes of public models, then explicitly declared routes."""
        routes = []
        for model in self.app.models:
            if model.crud and model.public:
                routes.extend(standard_routes(model))
        routes.extend(self.app.routes)
        return routes

    def generate(self) -> dict:
        models = {model.name: model for model in self.app.models}
        registry = TypeRegistry()
        allocator = OperationIdAllocator()
        expander = RelationExpander(models, registry, self.options)
        translator = RouteTranslator(models, registry, allocator, expander, self.options)

        for model in self.app.models:
            self._register_model(model, registry)
        for model in self.app.models:
            if model.public:
                registry.reference(model.name)

        paths: dict[str, dict] = {}
        for route in self.routes():
            translator.add_to_paths(route, paths)

        if allocator.collisions:
            logger.warning("%d operation id(s) could not be made unique", allocator.collisions)
        return {"definitions": registry.definitions(), "paths": paths}

    def _register_model(self, model: ModelDescriptor, registry: TypeRegistry) -> None:
        registry.register(model.name, partial(_model_schema, model, registry))
        if (
            self.options.generate_operation_scoped_models
            and model.has_generated_id()
            and model.settings.force_id is not False
        ):
            registry.reserve_operation_scoped(
                model.name, NEW_INSTANCE_SCOPE, partial(_new_instance_schema, model, registry)
            )


def build_tags(app: AppDescriptor) -> list[dict]:
    """One tag per public model."""
    tags = []
    for model in app.models:
        if not model.public:
            continue
        tag = model.settings.tag
        entry = {"name": tag_name(model)}
        description = convert_text(tag.description if tag and tag.description else model.settings.description)
        if description:
            entry["description"] = description
        if tag and tag.external_docs:
            entry["externalDocs"] = tag.external_docs
        tags.append(entry)
    return tags


def _requires_security(paths: dict) -> bool:
    return any("security" in operation for verbs in paths.values() for operation in verbs.values())


def build_swagger_document(app: AppDescriptor, options: GeneratorOptions | None = None) -> dict:
    """Build the complete document, app-level swagger config applied last."""
    options = options or resolve_options(app.swagger)
    spec = SpecGenerator(app, options).generate()

    info = {"title": app.name}
    description = convert_text(app.description)
    if description:
        info["description"] = description
    info["version"] = app.version

    document = {
        "swagger": SWAGGER_VERSION,
        "info": info,
        "basePath": options.base_path or app.rest_api_root,
    }
    if options.host:
        document["host"] = options.host
    if options.protocol:
        document["schemes"] = [options.protocol]
    document["consumes"] = list(DEFAULT_CONSUMES)
    document["produces"] = list(DEFAULT_PRODUCES)
    document["tags"] = build_tags(app)
    document["paths"] = spec["paths"]
    document["definitions"] = spec["definitions"]
    if _requires_security(spec["paths"]):
        document["securityDefinitions"] = {"bearer": dict(BEARER_SECURITY_DEFINITION)}

    for key, value in app.swagger.items():
        if key not in GENERATOR_ONLY_KEYS:
            document[key] = value
    document["swagger"] = SWAGGER_VERSION
    return document


def dump_document(document: dict, fmt: str = "json") -> str:
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"
