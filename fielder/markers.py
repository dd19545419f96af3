"""Runtime marker for classes that should get a generated fielder."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar, overload

T = TypeVar("T", bound=type)

MARKER_ATTRIBUTE = "__fielder_fieldable__"


@overload
def fieldable(cls: T) -> T: ...


@overload
def fieldable(cls: None = None) -> Callable[[T], T]: ...


def fieldable(cls: Optional[T] = None):  # type: ignore[no-untyped-def]
    """Mark a class for field-name generation.

    Works bare (``@fieldable``) or called (``@fieldable()``). The class is
    returned unchanged apart from a marker attribute; discovery reads the
    decorator from source, not from this attribute.
    """

    def _mark(target: T) -> T:
        if not isinstance(target, type):
            raise TypeError("@fieldable can only decorate classes")
        setattr(target, MARKER_ATTRIBUTE, True)
        return target

    if cls is None:
        return _mark
    return _mark(cls)


def is_fieldable(cls: type) -> bool:
    return bool(cls.__dict__.get(MARKER_ATTRIBUTE, False))


__all__ = ["MARKER_ATTRIBUTE", "fieldable", "is_fieldable"]
