"""Emission backends that materialise generated artifacts."""

from .base import Emitter
from .templates import HEADER, TemplateEmitter, get_emitter, supported_languages

__all__ = [
    "Emitter",
    "HEADER",
    "TemplateEmitter",
    "get_emitter",
    "supported_languages",
]
