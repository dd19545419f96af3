"""Discovery backed by a YAML type manifest.

The manifest describes types directly, which lets hosts that are not Python
source trees (or tests) feed the pipeline::

    types:
      - name: com.example.Animal
        fields: [name, age]
      - name: com.example.Dog
        extends: com.example.Animal
        fields: [breed]

Each entry accepts ``name`` (qualified, required), ``package`` (defaults to
everything before the last dot), ``fields``, ``extends``, ``kind`` (defaults to
``class``) and ``fieldable`` (defaults to true; set false for base types that
only contribute fields).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import ConfigError
from ..logging import get_logger
from ..models import TypeDescriptor
from .base import TypeDiscovery


class ManifestDiscovery(TypeDiscovery):
    """Reads type descriptors from a YAML manifest."""

    name = "manifest"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.logger = get_logger("discovery.manifest")

    def discover(self) -> List[TypeDescriptor]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to read type manifest {self.path}: {exc}") from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self.path.name}: {exc}") from exc
        return parse_manifest(data, origin=self.path.name)


def parse_manifest(data: Any, *, origin: Optional[str] = None) -> List[TypeDescriptor]:
    """Build linked descriptors from manifest data; return the fieldable ones."""
    if not isinstance(data, dict) or not isinstance(data.get("types"), list):
        raise ConfigError("Type manifest must contain a 'types' list")

    descriptors: Dict[str, TypeDescriptor] = {}
    parents: Dict[str, Optional[str]] = {}
    fieldable: List[str] = []

    for index, entry in enumerate(data["types"]):
        if not isinstance(entry, dict):
            raise ConfigError(f"Manifest entry #{index} must be a mapping")
        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"Manifest entry #{index} is missing a name")
        name = name.strip()
        if name in descriptors:
            raise ConfigError(f"Type {name} is declared more than once")

        package = entry.get("package")
        if package is None:
            package = name.rpartition(".")[0]
        elif not isinstance(package, str):
            raise ConfigError(f"Package of {name} must be a string")

        fields = entry.get("fields") or []
        if not isinstance(fields, list):
            raise ConfigError(f"Fields of {name} must be a list")

        extends = entry.get("extends")
        if extends is not None and not isinstance(extends, str):
            raise ConfigError(f"'extends' of {name} must be a type name")

        descriptors[name] = TypeDescriptor(
            qualified_name=name,
            simple_name=name.rpartition(".")[2],
            package=package,
            # Left unvalidated: unnamed fields are reported per type during collection.
            declared_fields=tuple(field if isinstance(field, str) else None for field in fields),
            kind=str(entry.get("kind") or "class"),
            origin=f"{origin}#{index}" if origin else None,
        )
        parents[name] = extends
        if entry.get("fieldable", True) is not False:
            fieldable.append(name)

    for name, parent in parents.items():
        if parent is None:
            continue
        if parent not in descriptors:
            raise ConfigError(f"Type {name} extends unknown type {parent}")
        descriptors[name].ancestor = descriptors[parent]

    get_logger("discovery.manifest").debug(
        "Manifest declares %d types, %d fieldable", len(descriptors), len(fieldable)
    )
    return [descriptors[name] for name in fieldable]


__all__ = ["ManifestDiscovery", "parse_manifest"]
