"""Unique operation ids across every route of a document."""

import logging
import re

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class PathEntry(BaseModel):
    """One operation placed at a path and verb."""

    path: str
    verb: str
    operation: dict


def long_form(base_id: str, verb: str) -> str:
    return f"{base_id}__{verb}"


def path_suffix(path: str) -> str:
    return re.sub(r"[/:]+", "_", path)


class OperationIdAllocator:
    """Hands out operation ids, never letting two operations keep the same short id.

    The first route to claim an id gets it as-is. When a second route claims the
    same id, both switch to ``<id>__<verb>`` (extended with the path when that
    is still ambiguous) and the short id is retired for good.
    """

    def __init__(self):
        # A value of None marks a retired short id.
        self._owners: dict[str, PathEntry | None] = {}
        self.collisions = 0

    def __contains__(self, operation_id: str) -> bool:
        return operation_id in self._owners

    def owner(self, operation_id: str) -> PathEntry | None:
        return self._owners.get(operation_id)

    def allocate(self, candidate: str, entry: PathEntry) -> str:
        if candidate not in self:
            self._owners[candidate] = entry
            return candidate

        first = self._owners[candidate]
        if first is not None:
            renamed = self._unique_id(candidate, first.verb, first.path)
            first.operation["operationId"] = renamed
            self._owners[renamed] = first
            self._owners[candidate] = None

        operation_id = self._unique_id(candidate, entry.verb, entry.path)
        self._owners[operation_id] = entry
        return operation_id

    def _unique_id(self, base_id: str, verb: str, path: str) -> str:
        operation_id = long_form(base_id, verb)
        if operation_id not in self:
            return operation_id
        operation_id = f"{operation_id}_{path_suffix(path)}"
        if operation_id in self:
            self.collisions += 1
            logger.warning(
                "detected multiple remote methods at the same HTTP endpoint; "
                "operation id %r will NOT be unique",
                operation_id,
            )
        return operation_id
