"""Field-name collection across a type's ancestor chain."""

from __future__ import annotations

from typing import Iterator, List, Optional, Set

from .errors import CyclicHierarchyError, InvalidTypeError, MalformedFieldError
from .logging import get_logger
from .models import FieldNameSet, TypeDescriptor

DEFAULT_MAX_DEPTH = 1024


class FieldCollector:
    """Walks a type and its ancestors, accumulating unique field names.

    Names are kept in the order they are visited: the type's own declarations
    first, then each ancestor's in turn. A name re-declared by an ancestor keeps
    the position of its most-derived declaration.
    """

    def __init__(self, *, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be positive")
        self.max_depth = max_depth
        self.logger = get_logger("collector")

    def collect(self, type_: TypeDescriptor) -> FieldNameSet:
        """Return the frozen, ordered field names reachable from ``type_``."""
        names = FieldNameSet()
        for current in self.walk(type_):
            for index, name in enumerate(current.declared_fields):
                if not isinstance(name, str) or not name:
                    raise MalformedFieldError(type_.qualified_name, current.qualified_name, index)
                if names.add(name):
                    self.logger.debug("Adding field %s from %s", name, current.qualified_name)
        return names.freeze()

    def walk(self, type_: TypeDescriptor) -> Iterator[TypeDescriptor]:
        """Yield ``type_`` and then each ancestor up to the root of the chain."""
        if type_ is None:
            raise InvalidTypeError("Cannot collect fields of a missing type")
        if type_.kind != "class":
            raise InvalidTypeError(
                f"{type_.qualified_name} is a {type_.kind}, not a concrete class",
                type_.qualified_name,
            )

        visited: Set[int] = set()
        chain: List[str] = []
        current: Optional[TypeDescriptor] = type_
        while current is not None:
            chain.append(current.qualified_name)
            if id(current) in visited or len(chain) > self.max_depth:
                raise CyclicHierarchyError(type_.qualified_name, chain)
            visited.add(id(current))
            yield current
            current = current.ancestor
            if current is None:
                self.logger.debug("No ancestor above %s", chain[-1])
            else:
                self.logger.debug("Found ancestor %s of %s", current.qualified_name, chain[-1])


def collect(type_: TypeDescriptor) -> FieldNameSet:
    """Collect field names with a default collector."""
    return FieldCollector().collect(type_)


__all__ = ["DEFAULT_MAX_DEPTH", "FieldCollector", "collect"]
