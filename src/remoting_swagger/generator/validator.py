"""Structural checks on generated documents.

Not a full Swagger 2.0 schema validation: only the properties the generator
itself guarantees, so regressions show up as concrete locations.
"""

from remoting_swagger.generator.registry import DEFINITIONS_PREFIX

HTTP_VERBS = ("get", "put", "post", "delete", "options", "head", "patch")


def _walk_refs(node, location: str):
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                yield location, value
            else:
                yield from _walk_refs(value, f"{location}/{key}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _walk_refs(value, f"{location}/{index}")


def find_dangling_refs(document: dict) -> dict[str, str]:
    """Return {location: $ref} for references with no matching definition."""
    definitions = document.get("definitions", {})
    dangling = {}
    for location, ref in _walk_refs(document, "#"):
        if not ref.startswith(DEFINITIONS_PREFIX) or ref[len(DEFINITIONS_PREFIX):] not in definitions:
            dangling[location] = ref
    return dangling


def find_duplicate_operation_ids(document: dict) -> dict[str, list[str]]:
    """Return {operationId: ["VERB /path", ...]} for ids used more than once."""
    owners: dict[str, list[str]] = {}
    for path, verbs in document.get("paths", {}).items():
        for verb, operation in verbs.items():
            if verb not in HTTP_VERBS or "operationId" not in operation:
                continue
            owners.setdefault(operation["operationId"], []).append(f"{verb.upper()} {path}")
    return {operation_id: where for operation_id, where in owners.items() if len(where) > 1}


def validate_document(document: dict) -> dict[str, str]:
    """Run all checks on a generated document.

    Returns dict of {location: error_message} for every problem found.
    """
    errors = {}
    for location, ref in find_dangling_refs(document).items():
        errors[location] = f"dangling reference {ref}"
    for operation_id, where in find_duplicate_operation_ids(document).items():
        errors[f"operationId {operation_id}"] = f"shared by {', '.join(where)}"
    return errors
