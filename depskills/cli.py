"""CLI entrypoints for depskills commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import ConfigError, SkillsConfig, resolve_options, write_config_template
from .logging import configure_logging
from .orchestrator import Orchestrator


def _comma_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _add_common_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress_default else value

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default(False),
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--silent",
        action="store_true",
        default=default(False),
        help="Suppress the run summary (useful in postinstall hooks).",
    )
    parser.add_argument(
        "--cwd",
        default=default(None),
        help="Project root to scan (defaults to current directory).",
    )
    parser.add_argument(
        "--output",
        default=default(None),
        help="Output directory (defaults to .claude/skills/depskills).",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        default=default(False),
        help="Ignore configuration files.",
    )


def _add_generate_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    def default(value: object) -> object:
        return argparse.SUPPRESS if suppress_default else value

    parser.add_argument(
        "--direct-only",
        action="store_const",
        const=True,
        default=default(None),
        help="Only document direct dependencies of the root package.json.",
    )
    parser.add_argument(
        "--include",
        type=_comma_list,
        default=default(None),
        help="Comma-separated packages to include (supports * wildcards).",
    )
    parser.add_argument(
        "--exclude",
        type=_comma_list,
        default=default(None),
        help="Comma-separated packages to exclude (supports * wildcards).",
    )
    parser.add_argument(
        "--additional-sources",
        type=_comma_list,
        default=default(None),
        help="Comma-separated extra documentation file names to look for.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="depskills",
        description="Generate per-package documentation summaries from installed dependencies.",
    )
    _add_common_options(parser)
    _add_generate_options(parser)
    subparsers = parser.add_subparsers(dest="command")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate summary documents from the dependency tree (default).",
    )
    _add_common_options(generate_parser, suppress_default=True)
    _add_generate_options(generate_parser, suppress_default=True)

    clean_parser = subparsers.add_parser(
        "clean",
        help="Remove generated summary documents.",
    )
    _add_common_options(clean_parser, suppress_default=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Create a depskills.config.yaml template.",
    )
    _add_common_options(init_parser, suppress_default=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for depskills commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = args.command or "generate"

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.silent))
    cwd = Path(args.cwd) if args.cwd else Path.cwd()

    if command == "init":
        try:
            config_path = write_config_template(cwd)
        except FileExistsError as exc:
            parser.exit(1, f"{exc}\n")
        except OSError as exc:
            parser.exit(1, f"depskills init failed: {exc}\n")
        if not args.silent:
            print(f"Created {_relativize(config_path)}")
        return

    cli_config = SkillsConfig(
        include=args.include,
        exclude=args.exclude,
        direct_only=args.direct_only,
        output=args.output,
        additional_sources=args.additional_sources,
    )
    orchestrator = Orchestrator()

    try:
        options, file_config = resolve_options(cwd, cli_config, use_config=not args.no_config)
        if command == "clean":
            clean_result = orchestrator.clean(options)
        else:
            result = orchestrator.generate(options)
    except ConfigError as exc:
        parser.exit(1, f"depskills: invalid configuration: {exc}\n")
    except OSError as exc:
        parser.exit(1, f"depskills {command} failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"depskills {command} failed: {exc}\nRun with --verbose for more details.\n")

    if args.silent:
        return
    if command == "clean":
        if clean_result.removed:
            print(f"Removed {clean_result.files_removed} files from {_relativize(clean_result.output_dir)}")
        else:
            print(f"Nothing to clean at {_relativize(clean_result.output_dir)}")
        return

    if file_config is not None and file_config.source is not None:
        print(f"Using config {_relativize(file_config.source)}")
    print(f"Generated {len(result.skills)} skill files")
    print(f"  Workspace: {result.workspace_type.value}")
    print(f"  Scanned: {result.packages_scanned} packages")
    print(f"  Duration: {result.duration_ms}ms")
    print(f"  Output: {_relativize(result.output_dir)}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
