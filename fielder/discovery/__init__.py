"""Type discovery sources and plugin lookup."""

from __future__ import annotations

from importlib import metadata
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Sequence

from ..errors import ConfigError
from .base import StaticDiscovery, TypeDiscovery
from .manifest import ManifestDiscovery, parse_manifest
from .python_source import PythonSourceDiscovery

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import FielderConfig

_ENTRY_POINT_GROUP = "fielder.discovery"


def _python_factory(config: "FielderConfig") -> TypeDiscovery:
    roots = [config.root / source for source in config.sources]
    exclude = list(config.exclude_paths)
    output_root = config.output_root.resolve()
    for root in roots:
        # Never rescan previously generated fielders that live under a source root.
        try:
            relative = output_root.relative_to(root.resolve())
        except ValueError:
            continue
        if relative.parts:
            exclude.append(f"/{relative.as_posix()}/")
    return PythonSourceDiscovery(roots, exclude=exclude)


def _manifest_factory(config: "FielderConfig") -> TypeDiscovery:
    if config.manifest is None:
        raise ConfigError("The manifest discovery source needs a 'manifest' path")
    return ManifestDiscovery(config.manifest)


_BUILTIN_FACTORIES: Dict[str, Callable[["FielderConfig"], TypeDiscovery]] = {
    "python": _python_factory,
    "manifest": _manifest_factory,
}


def discover_sources(config: "FielderConfig", names: Sequence[str] | None = None) -> List[TypeDiscovery]:
    """Return instantiated discovery sources in the requested order."""
    requested = [name.lower() for name in (names if names is not None else config.discovery)]
    plugins = {entry.name.lower(): entry for entry in _iter_entry_points()}

    sources: List[TypeDiscovery] = []
    seen: set[str] = set()
    for name in requested:
        if name in seen:
            continue
        seen.add(name)
        if name in _BUILTIN_FACTORIES:
            sources.append(_BUILTIN_FACTORIES[name](config))
            continue
        entry = plugins.get(name)
        if entry is None:
            raise ConfigError(f"Unknown discovery source requested: {name}")
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken plugin import
            raise ConfigError(f"Failed to load discovery entry point '{name}': {exc}") from exc
        sources.append(_coerce_discovery(loaded, config))
    return sources


def _coerce_discovery(obj: object, config: "FielderConfig") -> TypeDiscovery:
    if isinstance(obj, TypeDiscovery):
        return obj
    if callable(obj):
        instance = obj(config)
        if isinstance(instance, TypeDiscovery):
            return instance
    raise ConfigError("Discovery entry point must be a TypeDiscovery or a factory taking the config")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "ManifestDiscovery",
    "PythonSourceDiscovery",
    "StaticDiscovery",
    "TypeDiscovery",
    "discover_sources",
    "parse_manifest",
]
