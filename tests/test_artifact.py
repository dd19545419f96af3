"""Tests for fielder.artifact."""

from __future__ import annotations

import dataclasses

import pytest

from fielder.artifact import (
    FIELDER_SUFFIX,
    ArtifactBuilder,
    find_collisions,
    generated_name_for,
    target_package_for,
)
from fielder.collector import collect
from fielder.models import FieldNameSet
from tests._fixtures.types import make_type, zoo


def test_build_names_generated_type_after_source() -> None:
    types = zoo()
    builder = ArtifactBuilder()

    artifact = builder.build(types["animal"], collect(types["animal"]), True)

    assert FIELDER_SUFFIX == "_Fielder"
    assert artifact.generated_type_name == "Animal_Fielder"
    assert artifact.target_package == "com.example"
    assert artifact.qualified_name == "com.example.Animal_Fielder"
    assert artifact.field_names.as_tuple() == ("name", "age")
    assert artifact.source_type == "com.example.Animal"


def test_build_default_package_uses_flattened_qualified_name() -> None:
    nested = make_type("Inner", ["x"], package="")
    nested.qualified_name = "Outer.Inner"

    assert target_package_for(nested) == "Outer_Inner"
    assert generated_name_for(nested) == "Inner_Fielder"
    assert ArtifactBuilder().build(nested, FieldNameSet(["x"])).qualified_name == "Outer_Inner.Inner_Fielder"


def test_build_debuggable_does_not_change_field_names() -> None:
    types = zoo()
    builder = ArtifactBuilder()
    names = collect(types["cat"])

    debug = builder.build(types["cat"], names, True)
    release = builder.build(types["cat"], names, False)

    assert debug.debuggable is True
    assert release.debuggable is False
    assert debug.field_names == release.field_names


def test_build_freezes_unfrozen_names_and_is_immutable() -> None:
    names = FieldNameSet(["a", "b"])

    artifact = ArtifactBuilder().build(make_type("Thing"), names)

    assert artifact.field_names.frozen
    assert not names.frozen
    names.add("c")
    assert artifact.field_names.as_tuple() == ("a", "b")
    with pytest.raises(dataclasses.FrozenInstanceError):
        artifact.generated_type_name = "Other"  # type: ignore[misc]


def test_find_collisions_groups_same_generated_name() -> None:
    builder = ArtifactBuilder()
    first = builder.build(make_type("Foo", package=""), FieldNameSet())
    second = builder.build(make_type("Foo", package=""), FieldNameSet())
    other = builder.build(make_type("Foo", package="com.other"), FieldNameSet())

    collisions = find_collisions([first, other, second])

    assert collisions == [[first, second]]


def test_find_collisions_empty_when_names_unique() -> None:
    types = zoo()
    builder = ArtifactBuilder()
    artifacts = [builder.build(item, collect(item)) for item in types.values()]

    assert find_collisions(artifacts) == []
