"""CLI behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from fielder.cli import _build_parser, main
from tests._fixtures.source_builder import SourceTreeBuilder

_ZOO = {
    "zoo/__init__.py": "",
    "zoo/animals.py": """
        from fielder import fieldable


        class Animal:
            name: str
            age: int


        @fieldable
        class Dog(Animal):
            breed: str
        """,
}


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["list", "--verbose"])
    assert args.verbose is True
    assert args.command == "list"


def test_cli_collects_repeated_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "-A", "fielder.debuggable=false", "--option", "other=1", "--dry-run"]
    )
    assert args.options == ["fielder.debuggable=false", "other=1"]
    assert args.dry_run is True


def test_cli_rejects_unknown_language() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "--language", "cobol"])


def test_generate_writes_fielders(source_builder: SourceTreeBuilder, tmp_path: Path, capsys) -> None:
    source_builder.write(_ZOO)
    output = tmp_path / "out"

    main(["generate", str(source_builder.path()), "-o", str(output), "-A", "fielder.debuggable=false"])

    generated = output / "zoo" / "animals" / "Dog_Fielder.py"
    assert generated.exists()
    text = generated.read_text(encoding="utf-8")
    assert '"breed",' in text
    assert "def describe" not in text
    assert "Wrote zoo.animals.Dog_Fielder" in capsys.readouterr().out


def test_generate_dry_run_only_reports(source_builder: SourceTreeBuilder, tmp_path: Path, capsys) -> None:
    source_builder.write(_ZOO)
    output = tmp_path / "out"

    main(["generate", str(source_builder.path()), "-o", str(output), "--dry-run", "--language", "java"])

    assert not output.exists()
    assert "Would write zoo.animals.Dog_Fielder" in capsys.readouterr().out


def test_list_prints_collected_fields(source_builder: SourceTreeBuilder, capsys) -> None:
    source_builder.write(_ZOO)

    main(["list", str(source_builder.path())])

    assert "zoo.animals.Dog -> zoo.animals.Dog_Fielder: [breed, name, age]" in capsys.readouterr().out


def test_generate_exits_nonzero_on_collision(source_builder: SourceTreeBuilder, tmp_path: Path, capsys) -> None:
    source_builder.write(
        {
            "shapes.py": """
                from fielder import fieldable


                class Outer:
                    @fieldable
                    class Point:
                        x: int


                class Other:
                    @fieldable
                    class Point:
                        y: int
                """,
        }
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(source_builder.path()), "-o", str(tmp_path / "out")])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "shapes.Outer.Point" in err
    assert "shapes.Other.Point" in err


def test_generate_exits_with_config_error(tmp_path: Path) -> None:
    (tmp_path / ".fielder.yml").write_text("workers: -3\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path)])

    assert excinfo.value.code == 2


def test_cli_accepts_log_file_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "--log-file", "fielder.log"])
    assert args.log_file == "fielder.log"


def test_generate_exits_with_config_error_for_bad_manifest(tmp_path: Path, capsys) -> None:
    (tmp_path / ".fielder.yml").write_text("manifest: types.yml\n", encoding="utf-8")
    (tmp_path / "types.yml").write_text(
        "types:\n  - name: a.B\n    extends: a.Missing\n", encoding="utf-8"
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path)])

    assert excinfo.value.code == 2
    assert "a.Missing" in capsys.readouterr().err


def test_list_exits_with_config_error_for_unreadable_manifest(tmp_path: Path) -> None:
    (tmp_path / ".fielder.yml").write_text("manifest: missing.yml\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["list", str(tmp_path)])

    assert excinfo.value.code == 2


def test_generate_writes_log_file(source_builder: SourceTreeBuilder, tmp_path: Path) -> None:
    source_builder.write(_ZOO)
    log_file = tmp_path / "logs" / "fielder.log"

    main(["--log-file", str(log_file), "generate", str(source_builder.path()), "-o", str(tmp_path / "out")])

    text = log_file.read_text(encoding="utf-8")
    assert "INFO fielder.processor: Round finished: 1 fielders, 1 written, 0 errors" in text
