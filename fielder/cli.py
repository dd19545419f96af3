"""CLI entrypoints for fielder commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable

from .config import ConfigError, FielderConfig, load_config, parse_options
from .emitters import supported_languages
from .logging import configure_logging
from .models import Diagnostic, Severity
from .processor import Processor


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        metavar="PATH",
        help="Also write log records, with timestamps, to this file.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root containing .fielder.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fielder",
        description="Generate companion types listing the field names of @fieldable classes.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Discover @fieldable classes and write their fielders.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "-o",
        "--output",
        help="Output root for generated files (overrides .fielder.yml).",
    )
    generate_parser.add_argument(
        "--language",
        choices=supported_languages(),
        help="Target language of the generated fielders.",
    )
    generate_parser.add_argument(
        "-A",
        "--option",
        dest="options",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Processor option, e.g. -A fielder.debuggable=false.",
    )
    generate_parser.add_argument(
        "--workers",
        type=int,
        help="Number of worker threads for field collection.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be written without writing them.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="Print discovered @fieldable classes and their collected fields.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser, suppress_default=True)
    _add_path_argument(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for fielder commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file).expanduser() if args.log_file else None
    try:
        configure_logging(verbose=bool(args.verbose), log_file=log_file)
    except OSError as exc:
        parser.exit(2, f"fielder: cannot open log file: {exc}\n")

    try:
        config = _load_effective_config(args)
        processor = Processor.from_config(config)
    except (ConfigError, ValueError, OSError) as exc:
        parser.exit(2, f"fielder: configuration error: {exc}\n")

    if args.command == "generate":
        dry_run = bool(getattr(args, "dry_run", False))
        result = processor.run(config.output_root, dry_run=dry_run)
        for qualified_name, path in result.written.items():
            prefix = "Would write" if dry_run else "Wrote"
            print(f"{prefix} {qualified_name} -> {_relativize(path)}")
        _print_problems(result.diagnostics)
        _exit_on_config_error(parser, result.errors)
        if not result.success:
            parser.exit(1, f"fielder generate failed with {len(result.errors)} error(s).\n")
    elif args.command == "list":
        result = processor.inspect()
        for type_, artifact in result.artifacts.items():
            fields = ", ".join(artifact.field_names)
            print(f"{type_.qualified_name} -> {artifact.qualified_name}: [{fields}]")
        _print_problems(result.diagnostics)
        _exit_on_config_error(parser, result.errors)
        if not result.success:
            parser.exit(1)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _load_effective_config(args: argparse.Namespace) -> FielderConfig:
    root = Path(args.path).expanduser()
    if not root.exists():
        raise ConfigError(f"Project path not found: {args.path}")
    config = load_config(root)
    output = getattr(args, "output", None)
    if output:
        config.output = Path(output).expanduser().resolve()
    language = getattr(args, "language", None)
    if language:
        config.language = language
    workers = getattr(args, "workers", None)
    if workers is not None:
        if workers < 1:
            raise ConfigError("--workers must be a positive integer")
        config.workers = workers
    config.options.update(parse_options(getattr(args, "options", [])))
    return config


def _print_problems(diagnostics: Iterable[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        if diagnostic.severity is not Severity.NOTE:
            print(str(diagnostic), file=sys.stderr)


def _exit_on_config_error(parser: argparse.ArgumentParser, errors: Iterable[Diagnostic]) -> None:
    # Manifest problems surface during discovery but are configuration errors.
    for diagnostic in errors:
        if diagnostic.code == ConfigError.code:
            parser.exit(2, f"fielder: configuration error: {diagnostic.message}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
