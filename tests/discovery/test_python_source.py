"""Tests for the Python source discovery."""

from __future__ import annotations

from fielder.collector import collect
from fielder.discovery import PythonSourceDiscovery
from tests._fixtures.source_builder import SourceTreeBuilder


def _by_name(types):  # type: ignore[no-untyped-def]
    return {item.qualified_name: item for item in types}


def test_discovers_decorated_classes_with_ancestor_fields(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "zoo/__init__.py": "",
            "zoo/animals.py": """
                from fielder import fieldable


                @fieldable
                class Animal:
                    name: str
                    age: int = 0


                @fieldable
                class Dog(Animal):
                    breed: str


                @fieldable
                class Cat(Animal):
                    name: str
                    claws: int
                """,
        }
    )

    types = source_builder.discover()

    assert [item.qualified_name for item in types] == ["zoo.animals.Animal", "zoo.animals.Dog", "zoo.animals.Cat"]
    dog = types[1]
    assert dog.simple_name == "Dog"
    assert dog.package == "zoo.animals"
    assert dog.origin == "zoo/animals.py:11"
    assert collect(types[0]).as_tuple() == ("name", "age")
    assert collect(dog).as_tuple() == ("breed", "name", "age")
    assert collect(types[2]).as_tuple() == ("name", "claws", "age")


def test_undecorated_base_in_other_module_contributes_fields(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "app/__init__.py": "from .base import Model\n",
            "app/base.py": """
                class Model:
                    id: int

                    def __init__(self, id: int) -> None:
                        self.id = id
                        self.created, self._dirty = None, False
                """,
            "app/users.py": """
                import fielder
                from app import Model


                @fielder.fieldable()
                class User(Model):
                    __slots__ = ("email",)
                    email: str
                    ROLE = "user"

                    def __init__(self, email: str) -> None:
                        super().__init__(0)
                        self.email = email
                        self.nickname: str = ""

                        def helper() -> None:
                            self.ignored = True

                    def rename(self, value: str) -> None:
                        self.renamed = value
                """,
        }
    )

    (user,) = source_builder.discover()

    assert user.qualified_name == "app.users.User"
    assert user.declared_fields == ("email", "ROLE", "nickname")
    assert user.ancestor is not None
    assert user.ancestor.qualified_name == "app.base.Model"
    assert collect(user).as_tuple() == ("email", "ROLE", "nickname", "id", "created", "_dirty")


def test_relative_and_aliased_imports_resolve(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "pkg/__init__.py": "",
            "pkg/shapes/__init__.py": "",
            "pkg/shapes/base.py": """
                class Shape:
                    sides: int
                """,
            "pkg/shapes/square.py": """
                from fielder import fieldable as mark
                from . import base as shapes_base


                @mark
                class Square(shapes_base.Shape):
                    length: float
                """,
            "pkg/circle.py": """
                from fielder.markers import fieldable
                from .shapes.base import Shape as BaseShape


                @fieldable
                class Circle(BaseShape):
                    radius: float
                """,
        }
    )

    types = _by_name(source_builder.discover())

    assert collect(types["pkg.shapes.square.Square"]).as_tuple() == ("length", "sides")
    assert collect(types["pkg.circle.Circle"]).as_tuple() == ("radius", "sides")


def test_nested_classes_and_unknown_bases(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "events.py": """
                from dataclasses import dataclass
                from typing import Generic, TypeVar

                from fielder import fieldable
                from somewhere.else_ import Remote

                T = TypeVar("T")


                class Envelope:
                    @fieldable
                    class Header(Remote):
                        kind: str

                    @fieldable
                    class Body(Generic[T], Remote):
                        payload: str


                @fieldable
                @dataclass
                class Event(Envelope.Header):
                    at: float
                """,
        }
    )

    types = _by_name(source_builder.discover())

    header = types["events.Envelope.Header"]
    assert header.simple_name == "Header"
    assert header.package == "events"
    assert header.ancestor is None
    assert types["events.Envelope.Body"].ancestor is None
    assert collect(types["events.Event"]).as_tuple() == ("at", "kind")


def test_protocols_are_reported_as_interfaces(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "api.py": """
                from typing import Protocol

                from fielder import fieldable


                @fieldable
                class Named(Protocol):
                    name: str
                """,
        }
    )

    (named,) = source_builder.discover()

    assert named.kind == "interface"


def test_unmarked_decorators_are_ignored(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "plain.py": """
                import other


                @other.fieldable
                class Lookalike:
                    x: int


                class Plain:
                    y: int
                """,
        }
    )

    assert source_builder.discover() == []


def test_syntax_errors_and_excluded_paths_are_skipped(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "broken.py": "class Oops(:\n",
            "legacy/old.py": """
                from fielder import fieldable


                @fieldable
                class Old:
                    x: int
                """,
            "current.py": """
                from fielder import fieldable


                @fieldable
                class Current:
                    y: int
                """,
        }
    )

    types = source_builder.discover(exclude=("legacy/",))

    assert [item.qualified_name for item in types] == ["current.Current"]


def test_cyclic_bases_are_linked_for_the_collector(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "loop.py": """
                from fielder import fieldable


                @fieldable
                class A(B):
                    a: int


                class B(A):
                    b: int
                """,
        }
    )

    (a,) = source_builder.discover()

    assert a.ancestor is not None
    assert a.ancestor.ancestor is a


def test_multiple_roots_are_scanned_in_order(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "first/one.py": "from fielder import fieldable\n\n@fieldable\nclass One:\n    a: int\n",
            "second/two.py": "from fielder import fieldable\n\n@fieldable\nclass Two:\n    b: int\n",
        }
    )
    root = source_builder.path()

    types = PythonSourceDiscovery([root / "second", root / "first"]).discover()

    assert [item.qualified_name for item in types] == ["two.Two", "one.One"]


def test_root_package_init_uses_the_empty_package(source_builder: SourceTreeBuilder) -> None:
    source_builder.write(
        {
            "__init__.py": """
                from fielder import fieldable
                from .models import Base


                @fieldable
                class Root(Base):
                    r: int
                """,
            "models.py": """
                class Base:
                    b: int
                """,
        }
    )

    (root,) = source_builder.discover()

    assert root.qualified_name == "Root"
    assert root.package == ""
    assert collect(root).as_tuple() == ("r", "b")
