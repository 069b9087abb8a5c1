"""Registry of schema definitions for one generation run.

A name is *known* once registered and *referenced* once something in the
document points at it. Only referenced names end up in ``definitions``, so a
model that nothing reaches is left out even though it is known. Schemas are
built lazily: materializing one definition may reference further names, which
are then materialized in turn until nothing new turns up.
"""

import logging
from typing import Callable

from remoting_swagger.errors import SpecGenerationError

logger = logging.getLogger(__name__)

DEFINITIONS_PREFIX = "#/definitions/"

SchemaFactory = Callable[[], dict]


class TypeRegistry:
    """Known and referenced definitions. Append-only for the lifetime of a run."""

    def __init__(self):
        self._factories: dict[str, SchemaFactory] = {}
        self._referenced: list[str] = []
        self._referenced_set: set[str] = set()
        self._schemas: dict[str, dict] = {}
        self._scoped: dict[tuple[str, str], str] = {}

    def register(self, name: str, factory: SchemaFactory) -> None:
        if name in self._factories:
            logger.debug("definition %r is already registered, keeping the first", name)
            return
        self._factories[name] = factory

    def is_defined(self, name: str) -> bool:
        return name in self._factories

    def is_referenced(self, name: str) -> bool:
        return name in self._referenced_set

    def reference(self, name: str) -> str:
        """Mark ``name`` as required in the output and return its ``$ref`` path."""
        if name not in self._factories:
            raise SpecGenerationError(f"cannot reference unknown definition {name!r}")
        if name not in self._referenced_set:
            self._referenced_set.add(name)
            self._referenced.append(name)
        return DEFINITIONS_PREFIX + name

    def reserve_operation_scoped(self, base_name: str, scope: str, factory: SchemaFactory) -> str:
        """Register a variant of ``base_name`` used by one kind of operation.

        The variant is named ``$<scope>_<base_name>``; the base model is left as is.
        """
        key = (base_name, scope)
        if key not in self._scoped:
            self._scoped[key] = f"${scope}_{base_name}"
            self.register(self._scoped[key], factory)
        return self._scoped[key]

    def scoped_name(self, base_name: str, scope: str) -> str | None:
        return self._scoped.get((base_name, scope))

    def definitions(self) -> dict[str, dict]:
        """Materialize every referenced definition, in reference order."""
        index = 0
        while index < len(self._referenced):
            name = self._referenced[index]
            if name not in self._schemas:
                self._schemas[name] = self._factories[name]()
            index += 1
        return {name: self._schemas[name] for name in self._referenced}
