"""Error taxonomy for collection, artifact building and emission."""

from __future__ import annotations

from typing import Optional, Sequence


class FielderError(Exception):
    """Base class for failures attributable to a single input type."""

    code = "fielder-error"

    def __init__(self, message: str, source_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.source_type = source_type


class CyclicHierarchyError(FielderError):
    """Raised when an ancestor walk revisits a type or exceeds the depth bound."""

    code = "cyclic-hierarchy"

    def __init__(self, source_type: str, chain: Sequence[str]) -> None:
        path = " -> ".join(chain)
        super().__init__(f"Cyclic ancestor chain for {source_type}: {path}", source_type)
        self.chain = list(chain)


class MalformedFieldError(FielderError):
    """Raised when a declared field cannot be named."""

    code = "malformed-field"

    def __init__(self, source_type: str, declaring_type: str, index: int) -> None:
        super().__init__(
            f"Field #{index} declared on {declaring_type} has no usable name",
            source_type,
        )
        self.declaring_type = declaring_type
        self.index = index


class InvalidTypeError(FielderError):
    """Raised when the input is not a concrete class."""

    code = "invalid-type"


class NameCollisionError(FielderError):
    """Raised when distinct input types resolve to the same generated type."""

    code = "name-collision"

    def __init__(self, generated_name: str, source_types: Sequence[str]) -> None:
        members = ", ".join(source_types)
        super().__init__(
            f"Generated type {generated_name} would be produced by more than one type: {members}",
            source_types[0] if source_types else None,
        )
        self.generated_name = generated_name
        self.source_types = list(source_types)


class WriteError(FielderError):
    """Raised when an emitter cannot persist a generated artifact."""

    code = "write-error"

    def __init__(self, target: str, cause: BaseException, source_type: Optional[str] = None) -> None:
        super().__init__(f"Unable to write fielder {target}: {cause}", source_type)
        self.target = target
        self.cause = cause


class ConfigError(RuntimeError):
    """Raised when configuration or a type manifest cannot be parsed."""

    code = "config-error"


__all__ = [
    "ConfigError",
    "CyclicHierarchyError",
    "FielderError",
    "InvalidTypeError",
    "MalformedFieldError",
    "NameCollisionError",
    "WriteError",
]
