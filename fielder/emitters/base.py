"""Base class for emission backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from ..errors import WriteError
from ..models import GeneratedArtifact


class Emitter(ABC):
    """Turns a generated artifact into source text and writes it to disk."""

    language: str = ""
    extension: str = ""

    @abstractmethod
    def render(self, artifact: GeneratedArtifact) -> str:
        """Return the formatted source text for ``artifact``."""

    def relative_path(self, artifact: GeneratedArtifact) -> Path:
        """Location of the generated file below the output root."""
        parts = [part for part in artifact.target_package.split(".") if part]
        return Path(*parts, f"{artifact.generated_type_name}{self.extension}")

    def write(self, artifact: GeneratedArtifact, output_root: Path) -> Path:
        """Render and persist ``artifact``; raise ``WriteError`` on failure."""
        target = Path(output_root) / self.relative_path(artifact)
        text = self.render(artifact)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise WriteError(artifact.qualified_name, exc, artifact.source_type) from exc
        return target
