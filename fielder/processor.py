"""Processing round: discovery, collection, artifact building and emission."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .artifact import ArtifactBuilder, find_collisions
from .collector import FieldCollector
from .config import FielderConfig
from .discovery import StaticDiscovery, TypeDiscovery, discover_sources
from .emitters import Emitter, get_emitter
from .errors import ConfigError, FielderError, NameCollisionError, WriteError
from .logging import get_logger
from .models import (
    CollectionResult,
    Diagnostic,
    GeneratedArtifact,
    RoundResult,
    Severity,
    TypeDescriptor,
)


@dataclass
class _TypeOutcome:
    """Result of collect+build for one input type."""

    type_: TypeDescriptor
    artifact: Optional[GeneratedArtifact]
    diagnostics: List[Diagnostic] = field(default_factory=list)


class Processor:
    """Runs processing rounds over the types supplied by discovery sources.

    Every failure is converted into a :class:`Diagnostic` against the offending
    type; one type failing never stops the others. ``run`` does not raise.
    """

    def __init__(
        self,
        discovery: TypeDiscovery | Sequence[TypeDiscovery],
        emitter: Emitter | None = None,
        *,
        collector: FieldCollector | None = None,
        builder: ArtifactBuilder | None = None,
        debuggable: bool = True,
        workers: int = 1,
    ) -> None:
        if isinstance(discovery, TypeDiscovery):
            self.sources: List[TypeDiscovery] = [discovery]
        else:
            self.sources = list(discovery)
        self.emitter = emitter or get_emitter()
        self.collector = collector or FieldCollector()
        self.builder = builder or ArtifactBuilder()
        self.debuggable = debuggable
        self.workers = max(1, workers)
        self.logger = get_logger("processor")
        self._cancelled = threading.Event()

    @classmethod
    def from_config(cls, config: FielderConfig, emitter: Emitter | None = None) -> "Processor":
        return cls(
            discover_sources(config),
            emitter or get_emitter(config.language),
            debuggable=config.debuggable,
            workers=config.workers,
        )

    def cancel(self) -> None:
        """Stop emitting remaining artifacts of the current round."""
        self._cancelled.set()

    def run(self, output_root: Path, *, dry_run: bool = False) -> RoundResult:
        """Run one full round and return artifacts, written paths and diagnostics."""
        self._cancelled.clear()
        result = self.inspect()
        result.written = self.emit(result.artifacts, output_root, result.diagnostics, dry_run=dry_run)
        return self._finish(result)

    def inspect(self) -> RoundResult:
        """Discover, collect and build without emitting anything."""
        result = RoundResult()
        self._note(result.diagnostics, None, "Starting processing round")
        types = self._discover(result.diagnostics)
        if types is not None:
            result.artifacts = self.process(types, result.diagnostics)
        return result

    def process(
        self,
        types: Sequence[TypeDescriptor],
        diagnostics: List[Diagnostic] | None = None,
    ) -> CollectionResult:
        """Collect and build artifacts, dropping every member of a name collision."""
        sink = diagnostics if diagnostics is not None else []
        outcomes = self._map(types)

        artifacts: CollectionResult = {}
        for outcome in outcomes:
            sink.extend(outcome.diagnostics)
            if outcome.artifact is not None:
                artifacts[outcome.type_] = outcome.artifact

        rejected: set[int] = set()
        for members in find_collisions(artifacts.values()):
            sources = [member.source_type for member in members]
            for member in members:
                error = NameCollisionError(member.qualified_name, sources)
                self._report(sink, member.source_type, error)
                rejected.add(id(member))

        return {type_: artifact for type_, artifact in artifacts.items() if id(artifact) not in rejected}

    def emit(
        self,
        artifacts: CollectionResult,
        output_root: Path,
        diagnostics: List[Diagnostic],
        *,
        dry_run: bool = False,
    ) -> Dict[str, Path]:
        """Hand each artifact to the emitter; write failures are reported per artifact."""
        written: Dict[str, Path] = {}
        pending = list(artifacts.values())
        for index, artifact in enumerate(pending):
            if self._cancelled.is_set():
                remaining = len(pending) - index
                self._error(diagnostics, None, f"Round cancelled; {remaining} fielders not written")
                break
            if dry_run:
                written[artifact.qualified_name] = Path(output_root) / self.emitter.relative_path(artifact)
                continue
            try:
                path = self.emitter.write(artifact, output_root)
            except WriteError as exc:
                self._report(diagnostics, artifact.source_type, exc)
                continue
            except Exception as exc:  # pragma: no cover - emitter bug
                message = f"Unable to write fielder {artifact.qualified_name}: {exc}"
                self._log_exception(message)
                self._record(diagnostics, artifact.source_type, message)
                continue
            written[artifact.qualified_name] = path
            self.logger.debug("Wrote %s to %s", artifact.qualified_name, path)
        return written

    # ------------------------------------------------------------------
    # Internal helpers

    def _discover(self, diagnostics: List[Diagnostic]) -> Optional[List[TypeDescriptor]]:
        types: Dict[int, TypeDescriptor] = {}
        for source in self.sources:
            try:
                found = list(source.discover())
            except ConfigError as exc:
                self._error(diagnostics, None, f"Discovery source {source.name}: {exc}", ConfigError.code)
                return None
            except Exception as exc:
                message = f"Discovery source {source.name} failed: {exc}"
                self._log_exception(message)
                self._record(diagnostics, None, message, "discovery-failed")
                return None
            for type_ in found:
                types.setdefault(id(type_), type_)
            self._note(diagnostics, None, f"{source.name} discovered {len(found)} types")
        return list(types.values())

    def _map(self, types: Sequence[TypeDescriptor]) -> List[_TypeOutcome]:
        if self.workers == 1 or len(types) < 2:
            return [self._process_one(type_) for type_ in types]
        # Executor.map yields in input order whatever order the workers finish in.
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="fielder") as pool:
            return list(pool.map(self._process_one, types))

    def _process_one(self, type_: TypeDescriptor) -> _TypeOutcome:
        outcome = _TypeOutcome(type_=type_, artifact=None)
        name = getattr(type_, "qualified_name", None)
        try:
            names = self.collector.collect(type_)
            outcome.artifact = self.builder.build(type_, names, self.debuggable)
        except FielderError as exc:
            self._report(outcome.diagnostics, exc.source_type or name, exc)
            return outcome
        except Exception as exc:  # pragma: no cover - unexpected failure
            message = f"Unable to process {name}: {exc}"
            self._log_exception(message)
            self._record(outcome.diagnostics, name, message)
            return outcome
        self._note(
            outcome.diagnostics,
            name,
            f"Collected {len(names)} fields for {outcome.artifact.qualified_name}",
        )
        return outcome

    def _finish(self, result: RoundResult) -> RoundResult:
        errors = len(result.errors)
        self.logger.info(
            "Round finished: %d fielders, %d written, %d errors",
            len(result.artifacts),
            len(result.written),
            errors,
        )
        return result

    def _report(self, diagnostics: List[Diagnostic], source_type: Optional[str], exc: FielderError) -> None:
        self._error(diagnostics, source_type, str(exc), exc.code)

    def _error(
        self,
        diagnostics: List[Diagnostic],
        source_type: Optional[str],
        message: str,
        code: Optional[str] = None,
    ) -> None:
        self._record(diagnostics, source_type, message, code)
        self.logger.error("%s", message)

    def _note(self, diagnostics: List[Diagnostic], source_type: Optional[str], message: str) -> None:
        diagnostics.append(Diagnostic(Severity.NOTE, source_type, message))
        self.logger.debug("%s", message)

    def _record(
        self,
        diagnostics: List[Diagnostic],
        source_type: Optional[str],
        message: str,
        code: Optional[str] = None,
    ) -> None:
        diagnostics.append(Diagnostic(Severity.ERROR, source_type, message, code))

    def _log_exception(self, message: str) -> None:
        # Called from an except block; the traceback is only shown when verbose.
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s", message)
        else:
            self.logger.error("%s", message)


def run_round(
    types: Iterable[TypeDescriptor],
    emitter: Emitter,
    output_root: Path,
    *,
    debuggable: bool = True,
    dry_run: bool = False,
) -> RoundResult:
    """Run a round over an already-discovered list of types."""
    return Processor(StaticDiscovery(list(types)), emitter, debuggable=debuggable).run(
        output_root, dry_run=dry_run
    )


__all__ = ["Processor", "run_round"]
