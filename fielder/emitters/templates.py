"""Jinja2-backed emitters for the supported target languages."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import GeneratedArtifact
from .base import Emitter

HEADER = "Generated code from fielder. Do not modify!"

_EXTENSIONS: Dict[str, str] = {
    "python": ".py",
    "java": ".java",
    "kotlin": ".kt",
}


def _python_literal(value: str) -> str:
    return json.dumps(value)


def _java_literal(value: str) -> str:
    return json.dumps(value)


def _kotlin_literal(value: str) -> str:
    # Kotlin interpolates "$name" inside string literals.
    return json.dumps(value).replace("$", "\\$")


_LITERALS = {
    "python": _python_literal,
    "java": _java_literal,
    "kotlin": _kotlin_literal,
}


class TemplateEmitter(Emitter):
    """Renders ``templates/<language>.j2`` for each artifact."""

    def __init__(self, language: str = "python", *, templates_dir: Path | None = None) -> None:
        language = language.lower()
        if language not in _EXTENSIONS:
            supported = ", ".join(sorted(_EXTENSIONS))
            raise ValueError(f"Unsupported language '{language}' (expected one of: {supported})")
        self.language = language
        self.extension = _EXTENSIONS[language]
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)

    def render(self, artifact: GeneratedArtifact) -> str:
        template = self._env.get_template(f"{self.language}.j2")
        return template.render(
            header=HEADER,
            name=artifact.generated_type_name,
            package=artifact.target_package,
            source=artifact.source_type,
            fields=artifact.field_names.as_tuple(),
            debuggable=artifact.debuggable,
        )

    def _create_env(self, templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = Path(__file__).with_name("templates")
        if templates_dir != default_dir:
            directories.append(str(default_dir))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters["literal"] = _LITERALS[self.language]
        return env


def get_emitter(language: str = "python", *, templates_dir: Path | None = None) -> Emitter:
    return TemplateEmitter(language, templates_dir=templates_dir)


def supported_languages() -> list[str]:
    return sorted(_EXTENSIONS)


__all__ = ["HEADER", "TemplateEmitter", "get_emitter", "supported_languages"]
