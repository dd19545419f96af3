"""Generate companion types that list the field names of annotated classes."""

from .artifact import FIELDER_SUFFIX, ArtifactBuilder
from .collector import FieldCollector, collect
from .errors import (
    ConfigError,
    CyclicHierarchyError,
    FielderError,
    InvalidTypeError,
    MalformedFieldError,
    NameCollisionError,
    WriteError,
)
from .markers import fieldable
from .models import (
    CollectionResult,
    Diagnostic,
    FieldNameSet,
    GeneratedArtifact,
    RoundResult,
    Severity,
    TypeDescriptor,
)

__version__ = "0.1.0"

__all__ = [
    "ArtifactBuilder",
    "CollectionResult",
    "ConfigError",
    "CyclicHierarchyError",
    "Diagnostic",
    "FIELDER_SUFFIX",
    "FieldCollector",
    "FieldNameSet",
    "FielderError",
    "GeneratedArtifact",
    "InvalidTypeError",
    "MalformedFieldError",
    "NameCollisionError",
    "RoundResult",
    "Severity",
    "TypeDescriptor",
    "WriteError",
    "collect",
    "fieldable",
]
