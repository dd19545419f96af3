"""Discovery of ``@fieldable`` classes in Python source trees."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import TypeDescriptor
from ..scanner import SourceFile, SourceScanner
from .base import TypeDiscovery

_MARKER_NAME = "fieldable"
_MARKER_MODULES = {"fielder", "fielder.markers"}
_INTERFACE_BASES = {"Protocol", "typing.Protocol", "typing_extensions.Protocol"}
_MAX_REEXPORT_HOPS = 8


@dataclass
class _ClassInfo:
    module: str
    qualname: str
    name: str
    bases: List[str]
    fields: List[str]
    annotated: bool
    interface: bool
    origin: str
    descriptor: Optional[TypeDescriptor] = field(default=None, repr=False)

    @property
    def key(self) -> str:
        return _qualify(self.module, self.qualname)


class PythonSourceDiscovery(TypeDiscovery):
    """Finds decorated classes by parsing modules with :mod:`ast`.

    Every class under the roots gets a descriptor so that undecorated base
    classes still contribute their fields; only decorated ones are returned.
    A class's ancestor is its first base that resolves to a class in the scanned
    tree. Bases outside the tree (``object``, library classes) end the chain.
    """

    name = "python"

    def __init__(self, roots: Sequence[Path] | Path, *, exclude: Sequence[str] = ()) -> None:
        if isinstance(roots, (str, Path)):
            self.roots = [Path(roots)]
        else:
            self.roots = [Path(root) for root in roots]
        self.scanner = SourceScanner(exclude)
        self.logger = get_logger("discovery.python")

    def discover(self) -> List[TypeDescriptor]:
        classes: Dict[str, _ClassInfo] = {}
        module_imports: Dict[str, Dict[str, str]] = {}

        for root in self.roots:
            for source in self.scanner.scan(root):
                parsed = self._parse_module(source)
                if parsed is None:
                    continue
                imports, infos = parsed
                module_imports.setdefault(source.module, imports)
                for info in infos:
                    if info.key in classes:
                        self.logger.warning(
                            "Duplicate class %s at %s; keeping the first definition", info.key, info.origin
                        )
                        continue
                    classes[info.key] = info

        for info in classes.values():
            info.descriptor = TypeDescriptor(
                qualified_name=info.key,
                simple_name=info.name,
                package=info.module,
                declared_fields=tuple(info.fields),
                kind="interface" if info.interface else "class",
                origin=info.origin,
            )

        for info in classes.values():
            ancestor = self._resolve_ancestor(info, classes, module_imports)
            if ancestor is None:
                self.logger.debug("No superclass in source tree for %s", info.key)
                continue
            self.logger.debug("Found superclass %s for %s", ancestor.key, info.key)
            info.descriptor.ancestor = ancestor.descriptor  # type: ignore[union-attr]

        annotated = [info.descriptor for info in classes.values() if info.annotated]
        self.logger.debug("Discovered %d @%s classes out of %d", len(annotated), _MARKER_NAME, len(classes))
        return annotated  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Parsing

    def _parse_module(self, source: SourceFile) -> Optional[tuple[Dict[str, str], List[_ClassInfo]]]:
        try:
            text = source.path.read_text(encoding="utf-8")
            tree = ast.parse(text, filename=str(source.path))
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError) as exc:
            self.logger.warning("Skipping %s: %s", source.relative_path, exc)
            return None

        is_package = source.relative_path.endswith("__init__.py")
        imports = _collect_imports(tree, source.module, is_package)
        infos: List[_ClassInfo] = []
        self._visit_body(tree.body, source, imports, "", infos)
        return imports, infos

    def _visit_body(
        self,
        body: Iterable[ast.stmt],
        source: SourceFile,
        imports: Dict[str, str],
        prefix: str,
        infos: List[_ClassInfo],
    ) -> None:
        for node in body:
            if not isinstance(node, ast.ClassDef):
                continue
            qualname = f"{prefix}{node.name}"
            bases = [name for name in map(_dotted_name, node.bases) if name]
            info = _ClassInfo(
                module=source.module,
                qualname=qualname,
                name=node.name,
                bases=bases,
                fields=_collect_fields(node),
                annotated=any(_is_marker(dec, imports) for dec in node.decorator_list),
                interface=any(_resolve_import(base, imports) in _INTERFACE_BASES for base in bases),
                origin=f"{source.relative_path}:{node.lineno}",
            )
            infos.append(info)
            self._visit_body(node.body, source, imports, f"{qualname}.", infos)

    # ------------------------------------------------------------------
    # Ancestor resolution

    def _resolve_ancestor(
        self,
        info: _ClassInfo,
        classes: Dict[str, _ClassInfo],
        module_imports: Dict[str, Dict[str, str]],
    ) -> Optional[_ClassInfo]:
        imports = module_imports.get(info.module, {})
        for base in info.bases:
            candidates = [_qualify(info.module, base), _resolve_import(base, imports), base]
            for candidate in candidates:
                found = _lookup(candidate, classes, module_imports)
                if found is not None and found is not info:
                    return found
        return None


def _lookup(
    dotted: str,
    classes: Dict[str, _ClassInfo],
    module_imports: Dict[str, Dict[str, str]],
) -> Optional[_ClassInfo]:
    # Follows re-exports such as ``from .animals import Animal`` in a package __init__.
    for _ in range(_MAX_REEXPORT_HOPS):
        found = classes.get(dotted)
        if found is not None:
            return found
        parts = dotted.split(".")
        redirected = None
        for index in range(len(parts) - 1, 0, -1):
            module = ".".join(parts[:index])
            target = module_imports.get(module, {}).get(parts[index])
            if target:
                redirected = ".".join([target, *parts[index + 1 :]])
                break
        if redirected is None or redirected == dotted:
            return None
        dotted = redirected
    return None


def _collect_imports(tree: ast.Module, module: str, is_package: bool) -> Dict[str, str]:
    imports: Dict[str, str] = {}
    for node in tree.body:
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    imports[alias.asname] = alias.name
                else:
                    head = alias.name.split(".")[0]
                    imports[head] = head
        elif isinstance(node, ast.ImportFrom):
            base = _import_base(node, module, is_package)
            for alias in node.names:
                if alias.name == "*":
                    continue
                imports[alias.asname or alias.name] = f"{base}.{alias.name}" if base else alias.name
    return imports


def _import_base(node: ast.ImportFrom, module: str, is_package: bool) -> str:
    if not node.level:
        return node.module or ""
    parts = module.split(".") if module else []
    if not is_package:
        parts = parts[:-1]
    if node.level > 1:
        parts = parts[: max(len(parts) - (node.level - 1), 0)]
    if node.module:
        parts.append(node.module)
    return ".".join(parts)


def _qualify(module: str, name: str) -> str:
    return f"{module}.{name}" if module else name


def _resolve_import(dotted: str, imports: Dict[str, str]) -> str:
    head, _, rest = dotted.partition(".")
    target = imports.get(head, head)
    return f"{target}.{rest}" if rest else target


def _dotted_name(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = _dotted_name(node.value)
        return f"{owner}.{node.attr}" if owner else None
    if isinstance(node, ast.Subscript):
        return _dotted_name(node.value)
    return None


def _is_marker(decorator: ast.expr, imports: Dict[str, str]) -> bool:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    dotted = _dotted_name(target)
    if not dotted:
        return False
    resolved = _resolve_import(dotted, imports)
    if resolved == _MARKER_NAME:
        return True
    owner, _, name = resolved.rpartition(".")
    return name == _MARKER_NAME and owner in _MARKER_MODULES


# ----------------------------------------------------------------------
# Field extraction


def _collect_fields(node: ast.ClassDef) -> List[str]:
    """Class-body assignments and ``self.x`` assignments in ``__init__``, in source order."""
    names: Dict[str, None] = {}

    def _add(name: str) -> None:
        if name.startswith("__") and name.endswith("__"):
            return
        names.setdefault(name, None)

    for stmt in node.body:
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            _add(stmt.target.id)
        elif isinstance(stmt, ast.Assign):
            for target in stmt.targets:
                for name in _target_names(target):
                    _add(name)
        elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == "__init__":
            for name in _instance_attributes(stmt):
                _add(name)
    return list(names)


def _target_names(target: ast.expr) -> List[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        return [name for element in target.elts for name in _target_names(element)]
    if isinstance(target, ast.Starred):
        return _target_names(target.value)
    return []


def _instance_attributes(func: ast.FunctionDef | ast.AsyncFunctionDef) -> List[str]:
    params = [*func.args.posonlyargs, *func.args.args]
    if not params:
        return []
    self_name = params[0].arg
    found: List[str] = []

    def _visit(node: ast.AST) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
                continue
            targets: List[ast.expr] = []
            if isinstance(child, ast.Assign):
                targets = list(child.targets)
            elif isinstance(child, (ast.AnnAssign, ast.AugAssign)):
                targets = [child.target]
            for target in targets:
                found.extend(_self_attributes(target, self_name))
            _visit(child)

    _visit(func)
    return found


def _self_attributes(target: ast.expr, self_name: str) -> List[str]:
    if isinstance(target, ast.Attribute) and isinstance(target.value, ast.Name):
        return [target.attr] if target.value.id == self_name else []
    if isinstance(target, (ast.Tuple, ast.List)):
        return [name for element in target.elts for name in _self_attributes(element, self_name)]
    if isinstance(target, ast.Starred):
        return _self_attributes(target.value, self_name)
    return []


__all__ = ["PythonSourceDiscovery"]
