"""Standard remote methods of a persisted model.

Models declared with ``crud: true`` expose the usual create/read/update/delete
surface plus the relation methods for each of their relations, so application
descriptions only need to list their custom routes.
"""

import re

from .base import ModelDescriptor, RelationDescriptor, RouteDescriptor

FILTER_DESCRIPTION = (
    'Filter defining fields, where, include, order, offset, and limit - '
    'must be a JSON-encoded string ({"something":"value"})'
)


def pluralize(name: str) -> str:
    if re.search(r"(s|x|z|ch|sh)$", name):
        return name + "es"
    if re.search(r"[^aeiou]y$", name):
        return name[:-1] + "ies"
    return name + "s"


def _route(model_name: str, method: str, verb: str, path: str, **metadata) -> RouteDescriptor:
    return RouteDescriptor.model_validate({"method": f"{model_name}.{method}", "verb": verb, "path": path, **metadata})


def _data(model_name: str) -> dict:
    return {
        "arg": "data",
        "type": "object",
        "model": model_name,
        "description": "Model instance data",
        "http": {"source": "body"},
    }


def _filter() -> dict:
    return {"arg": "filter", "type": "object", "description": FILTER_DESCRIPTION}


def _where(source: str = "query") -> dict:
    return {"arg": "where", "type": "object", "description": "Criteria to match model instances", "http": {"source": source}}


def _instance(model_name: str) -> dict:
    return {"arg": "data", "type": model_name, "root": True, "description": f"{model_name} instance"}


def _path_id(name: str, description: str) -> dict:
    return {"arg": name, "type": "any", "required": True, "description": description, "http": {"source": "path"}}


def standard_routes(model: ModelDescriptor) -> list[RouteDescriptor]:
    name = model.name
    base = "/" + (model.settings.plural or pluralize(name))
    data = _data(name)
    instance = _instance(name)
    model_id = _path_id("id", f"{name} id")

    routes = [
        _route(name, "create", "post", base, accepts=[data], returns=[instance],
               description="Create a new instance of the model and persist it into the data source."),
        _route(name, "patchOrCreate", "patch", base, accepts=[data], returns=[instance],
               description="Patch an existing model instance or insert a new one into the data source."),
        _route(name, "patchOrCreate", "put", base, accepts=[data], returns=[instance],
               description="Patch an existing model instance or insert a new one into the data source."),
        _route(name, "replaceOrCreate", "post", base + "/replaceOrCreate", accepts=[data], returns=[instance],
               description="Replace an existing model instance or insert a new one into the data source."),
        _route(name, "upsertWithWhere", "post", base + "/upsertWithWhere", accepts=[_where(), data], returns=[instance],
               description="Update an existing model instance or insert a new one into the data source based on the where criteria."),
        _route(name, "exists", "get", base + "/:id/exists", accepts=[model_id],
               returns=[{"arg": "exists", "type": "boolean"}],
               description="Check whether a model instance exists in the data source."),
        _route(name, "exists", "head", base + "/:id", accepts=[model_id],
               returns=[{"arg": "exists", "type": "boolean"}],
               description="Check whether a model instance exists in the data source."),
        _route(name, "findById", "get", base + "/:id", accepts=[model_id, _filter()], returns=[instance],
               description="Find a model instance by {{id}} from the data source."),
        _route(name, "replaceById", "post", base + "/:id/replace", accepts=[model_id, data], returns=[instance],
               description="Replace attributes for a model instance and persist it into the data source."),
        _route(name, "find", "get", base, accepts=[_filter()],
               returns=[{"arg": "data", "type": [name], "root": True}],
               description="Find all instances of the model matched by filter from the data source."),
        _route(name, "findOne", "get", base + "/findOne", accepts=[_filter()], returns=[instance],
               description="Find first instance of the model matched by filter from the data source."),
        _route(name, "updateAll", "post", base + "/update", accepts=[_where(), data],
               returns=[{"arg": "info", "type": {"count": "number"}, "root": True,
                         "description": "Information related to the outcome of the operation"}],
               description="Update instances of the model matched by {{where}} from the data source."),
        _route(name, "deleteById", "delete", base + "/:id", accepts=[model_id],
               returns=[{"arg": "count", "type": "object", "root": True}],
               description="Delete a model instance by {{id}} from the data source."),
        _route(name, "count", "get", base + "/count", accepts=[_where()],
               returns=[{"arg": "count", "type": "number"}],
               description="Count instances of the model matched by where from the data source."),
        _route(name, "prototype.patchAttributes", "patch", base + "/:id", accepts=[data], returns=[instance],
               description="Patch attributes for a model instance and persist it into the data source."),
        _route(name, "prototype.patchAttributes", "put", base + "/:id", accepts=[data], returns=[instance],
               description="Patch attributes for a model instance and persist it into the data source."),
    ]
    for relation in model.relations:
        routes.extend(relation_routes(model, relation, base))
    return routes


def relation_routes(model: ModelDescriptor, relation: RelationDescriptor, base: str) -> list[RouteDescriptor]:
    """Prototype methods that reach a model's related instances."""
    name = model.name
    rel = relation.name
    target = relation.model
    path = f"{base}/:id/{rel}"

    if not relation.is_collection:
        return [
            _route(name, f"prototype.__get__{rel}", "get", path,
                   accepts=[{"arg": "refresh", "type": "boolean", "http": {"source": "query"}}],
                   returns=[{"arg": rel, "type": target, "root": True}],
                   description=f"Fetches {relation.kind} relation {rel}."),
        ]

    fk = _path_id("fk", f"Foreign key for {rel}")
    return [
        _route(name, f"prototype.__get__{rel}", "get", path,
               accepts=[{"arg": "filter", "type": "object", "http": {"source": "query"}}],
               returns=[{"arg": rel, "type": [target], "root": True}],
               description=f"Queries {rel} of {name}."),
        _route(name, f"prototype.__create__{rel}", "post", path,
               accepts=[_data(target)],
               returns=[{"arg": "data", "type": target, "root": True}],
               description=f"Creates a new instance in {rel} of this model."),
        _route(name, f"prototype.__delete__{rel}", "delete", path,
               description=f"Deletes all {rel} of this model."),
        _route(name, f"prototype.__findById__{rel}", "get", f"{path}/:fk",
               accepts=[fk],
               returns=[{"arg": "result", "type": target, "root": True}],
               description=f"Find a related item by id for {rel}."),
        _route(name, f"prototype.__updateById__{rel}", "put", f"{path}/:fk",
               accepts=[fk, _data(target)],
               returns=[{"arg": "result", "type": target, "root": True}],
               description=f"Update a related item by id for {rel}."),
        _route(name, f"prototype.__destroyById__{rel}", "delete", f"{path}/:fk",
               accepts=[fk],
               description=f"Delete a related item by id for {rel}."),
        _route(name, f"prototype.__count__{rel}", "get", f"{path}/count",
               accepts=[_where()],
               returns=[{"arg": "count", "type": "number"}],
               description=f"Counts {rel} of {name}."),
    ]
