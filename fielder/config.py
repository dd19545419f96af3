"""Configuration loading for fielder (.fielder.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".fielder.yml"
OPTION_DEBUGGABLE = "fielder.debuggable"

DEFAULT_OUTPUT = "generated"
DEFAULT_LANGUAGE = "python"

_YAML_BOOL_TAG = "tag:yaml.org,2002:bool"


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps YAML 1.1 booleans (``no``, ``False``, ``off``) as text.

    Option values are compared as exact strings, so ``fielder.debuggable: False``
    must reach :func:`parse_debuggable` as ``"False"``, the same as ``-A``.
    """


_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _YAML_BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class FielderConfig:
    """Represents the settings defined in .fielder.yml."""

    root: Path
    sources: List[str] = field(default_factory=lambda: ["."])
    exclude_paths: List[str] = field(default_factory=list)
    output: Path | None = None
    language: str = DEFAULT_LANGUAGE
    workers: int = 1
    discovery: List[str] = field(default_factory=lambda: ["python"])
    manifest: Optional[Path] = None
    options: Dict[str, str] = field(default_factory=dict)

    @property
    def output_root(self) -> Path:
        return self.output if self.output is not None else self.root / DEFAULT_OUTPUT

    @property
    def debuggable(self) -> bool:
        return parse_debuggable(self.options.get(OPTION_DEBUGGABLE))


def parse_debuggable(value: Optional[str]) -> bool:
    """Only the exact string ``"false"`` turns debug scaffolding off."""
    return value != "false"


def parse_options(pairs: Sequence[str]) -> Dict[str, str]:
    """Parse ``key=value`` option strings as passed with ``-A``."""
    options: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not key:
            raise ConfigError(f"Invalid option {pair!r}; expected key=value")
        options[key] = value if sep else "true"
    return options


def load_config(config_path: Path) -> FielderConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FielderConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = FielderConfig(root=root)

    sources = _as_str_list(data.get("sources"), "sources")
    if sources:
        config.sources = sources
    config.exclude_paths = _as_str_list(data.get("exclude_paths"), "exclude_paths")

    output = _as_str(data.get("output"))
    if output:
        config.output = root / output

    language = _as_str(data.get("language"))
    if language:
        config.language = language.lower()

    if "workers" in data:
        workers = _as_int(data.get("workers"))
        if workers is None or workers < 1:
            raise ConfigError("workers must be a positive integer")
        config.workers = workers

    discovery = _as_str_list(data.get("discovery"), "discovery")
    if discovery:
        config.discovery = [name.lower() for name in discovery]

    manifest = _as_str(data.get("manifest"))
    if manifest:
        config.manifest = root / manifest
        if not discovery:
            config.discovery = ["manifest"]

    config.options = _as_options(data.get("options"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.load(text, Loader=_ConfigLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_options(value: Any) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("options must be a mapping of option names to values")
    options: Dict[str, str] = {}
    for key, raw in value.items():
        if raw is None:
            continue
        if not isinstance(raw, (str, int, float)):
            raise ConfigError(f"Option {key} must be a scalar value")
        options[str(key)] = str(raw)
    return options


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any, key: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a string or a list of strings")
    items: List[str] = []
    for item in value:
        if not isinstance(item, (str, int, float)) or isinstance(item, bool):
            raise ConfigError(f"{key} entries must be strings, got {item!r}")
        items.append(str(item))
    return items


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "FielderConfig",
    "OPTION_DEBUGGABLE",
    "load_config",
    "parse_debuggable",
    "parse_options",
]
