"""Relation-augmented model variants (``<Model>WithRelations``).

Retrieval routes may return instances with related models embedded, so their
responses point at a variant that adds one property per includable relation.
Variants are memoized and registered before their properties are built, which
lets cyclic relation graphs resolve to a ``$ref`` instead of recursing forever.
"""

import logging
import re

from remoting_swagger.config import GeneratorOptions
from remoting_swagger.errors import SpecGenerationError
from remoting_swagger.generator.registry import TypeRegistry
from remoting_swagger.generator.schema import GENERIC_OBJECT, build_model_schema
from remoting_swagger.parser.base import ModelDescriptor, RelationDescriptor, RouteDescriptor
from remoting_swagger.parser.types import ArrayType, NamedType, TypeRef

logger = logging.getLogger(__name__)

RELATIONS_SCOPE = "WithRelations"


class RelationExpander:
    def __init__(self, models: dict[str, ModelDescriptor], registry: TypeRegistry, options: GeneratorOptions):
        self._models = models
        self._registry = registry
        self._enabled = options.generate_relation_properties
        self._patterns = [re.compile(pattern) for pattern in options.retrieval_patterns]
        self._variants: dict[tuple[str, str], str] = {}

    def is_enabled(self, model_name: str) -> bool:
        model = self._models.get(model_name)
        if model is None:
            return False
        override = model.settings.generate_relation_properties
        return self._enabled if override is None else override

    def qualifies(self, route: RouteDescriptor) -> bool:
        """True when the route retrieves zero or more instances of its model."""
        return any(pattern.search(route.method_name) for pattern in self._patterns)

    def expand_type(self, type_ref: TypeRef) -> TypeRef:
        """Swap a model reference (possibly inside arrays) for its expanded variant."""
        if isinstance(type_ref, ArrayType):
            return ArrayType(items=self.expand_type(type_ref.items))
        if isinstance(type_ref, NamedType) and self.is_enabled(type_ref.name):
            return NamedType(name=self.expanded_name(type_ref.name))
        return type_ref

    def expanded_name(self, model_name: str) -> str:
        key = (model_name, RELATIONS_SCOPE)
        if key in self._variants:
            return self._variants[key]
        name = f"{model_name}{RELATIONS_SCOPE}"
        if self._registry.is_defined(name):
            raise SpecGenerationError(
                f"cannot expand relations of {model_name!r}: a definition named {name!r} already exists"
            )
        self._variants[key] = name
        model = self._models[model_name]
        self._registry.register(name, lambda: self._build_expanded(model))
        return name

    def _build_expanded(self, model: ModelDescriptor) -> dict:
        extra = {
            relation.name: self._relation_schema(relation)
            for relation in model.relations
            if not relation.disable_include
        }
        return build_model_schema(model, self._registry, extra=extra)

    def _relation_schema(self, relation: RelationDescriptor) -> dict:
        target = relation.model
        if self.is_enabled(target):
            schema = {"$ref": self._registry.reference(self.expanded_name(target))}
        elif self._registry.is_defined(target):
            schema = {"$ref": self._registry.reference(target)}
        else:
            logger.debug("relation %r points at unknown model %r", relation.name, target)
            schema = dict(GENERIC_OBJECT)
        if relation.is_collection:
            return {"type": "array", "items": schema}
        return schema
