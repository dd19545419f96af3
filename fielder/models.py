"""Core data models shared across fielder components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


@dataclass(eq=False)
class TypeDescriptor:
    """A class supplied by a discovery source.

    Descriptors are owned by the discovery source that built them; the rest of
    the pipeline only reads them. Identity is reference identity, so two
    descriptors with the same name are still distinct inputs.
    """

    qualified_name: str
    simple_name: str
    package: str
    declared_fields: Tuple[Optional[str], ...] = ()
    ancestor: Optional["TypeDescriptor"] = field(default=None, repr=False)
    kind: str = "class"
    origin: Optional[str] = None

    def __str__(self) -> str:
        return self.qualified_name


class FieldNameSet:
    """Insertion-ordered set of field names that can be frozen once built."""

    __slots__ = ("_names", "_frozen")

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: Dict[str, None] = {}
        self._frozen = False
        for name in names:
            self.add(name)

    def add(self, name: str) -> bool:
        """Insert ``name``; return False when it was already present."""
        if self._frozen:
            raise TypeError("FieldNameSet is frozen")
        if name in self._names:
            return False
        self._names[name] = None
        return True

    def freeze(self) -> "FieldNameSet":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def as_tuple(self) -> Tuple[str, ...]:
        return tuple(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldNameSet):
            return self.as_tuple() == other.as_tuple()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return f"FieldNameSet({list(self._names)!r})"


@dataclass(frozen=True)
class GeneratedArtifact:
    """Abstract description of a generated companion type."""

    target_package: str
    generated_type_name: str
    field_names: FieldNameSet
    debuggable: bool
    source_type: str

    @property
    def qualified_name(self) -> str:
        if self.target_package:
            return f"{self.target_package}.{self.generated_type_name}"
        return self.generated_type_name


CollectionResult = Dict[TypeDescriptor, GeneratedArtifact]


class Severity(str, Enum):
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """Structured message about a single input type (or the round itself)."""

    severity: Severity
    source_type: Optional[str]
    message: str
    code: Optional[str] = None

    def __str__(self) -> str:
        subject = f"{self.source_type}: " if self.source_type else ""
        return f"{self.severity.value}: {subject}{self.message}"


@dataclass
class RoundResult:
    """Outcome of one processing round."""

    artifacts: CollectionResult = field(default_factory=dict)
    written: Dict[str, Path] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [item for item in self.diagnostics if item.severity is Severity.ERROR]

    @property
    def success(self) -> bool:
        return not self.errors
