"""Builds generated-artifact descriptions from collected field names."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .models import FieldNameSet, GeneratedArtifact, TypeDescriptor

FIELDER_SUFFIX = "_Fielder"


class ArtifactBuilder:
    """Turns a type and its collected field names into a ``GeneratedArtifact``."""

    def build(
        self,
        source_type: TypeDescriptor,
        field_names: FieldNameSet,
        debuggable: bool = True,
    ) -> GeneratedArtifact:
        names = field_names if field_names.frozen else FieldNameSet(field_names).freeze()
        return GeneratedArtifact(
            target_package=target_package_for(source_type),
            generated_type_name=generated_name_for(source_type),
            field_names=names,
            debuggable=bool(debuggable),
            source_type=source_type.qualified_name,
        )


def generated_name_for(source_type: TypeDescriptor) -> str:
    return f"{source_type.simple_name}{FIELDER_SUFFIX}"


def target_package_for(source_type: TypeDescriptor) -> str:
    # Default-package inputs get a flat synthetic package built from their name.
    if source_type.package:
        return source_type.package
    return source_type.qualified_name.replace(".", "_")


def find_collisions(artifacts: Iterable[GeneratedArtifact]) -> List[List[GeneratedArtifact]]:
    """Return groups of artifacts that share a generated qualified name.

    Each artifact stands for a distinct input type, so any group with more than
    one member is a collision. Groups come back in the order their first member
    was seen, so reporting is stable however the artifacts were produced.
    """
    groups: Dict[str, List[GeneratedArtifact]] = {}
    for artifact in artifacts:
        groups.setdefault(artifact.qualified_name, []).append(artifact)
    return [members for members in groups.values() if len(members) > 1]


__all__ = [
    "ArtifactBuilder",
    "FIELDER_SUFFIX",
    "find_collisions",
    "generated_name_for",
    "target_package_for",
]
