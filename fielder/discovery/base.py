"""Base classes for type discovery sources."""

from abc import ABC, abstractmethod
from typing import Sequence

from ..models import TypeDescriptor


class TypeDiscovery(ABC):
    """Contract for sources that enumerate the annotated types of a round."""

    name: str = "discovery"

    @abstractmethod
    def discover(self) -> Sequence[TypeDescriptor]:
        """Return annotated types in a stable, reproducible order."""


class StaticDiscovery(TypeDiscovery):
    """Serves a fixed list of descriptors, for hosts that discover types themselves."""

    name = "static"

    def __init__(self, types: Sequence[TypeDescriptor]) -> None:
        self._types = list(types)

    def discover(self) -> Sequence[TypeDescriptor]:
        return list(self._types)
