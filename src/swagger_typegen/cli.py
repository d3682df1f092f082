"""Command line interface for Swagger/OpenAPI to TypeScript generation."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .aliases import ALIAS_FILE_NAME, AliasSource
from .config import CONFIG_KEY, MANIFEST_FILE, ConfigError, load_settings, write_default_settings
from .diff import format_report
from .generator import run_check, run_update
from .loader import SpecLoadError
from .writer import WriteError


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="swagger-typegen",
        description="Generate TypeScript types and request functions from Swagger/OpenAPI",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--project-dir",
        default=".",
        help="Directory holding package.json (default: current directory)",
    )
    common.add_argument("--verbose", action="store_true", help="Log progress information")

    subparsers = parser.add_subparsers(dest="command", required=True)

    update = subparsers.add_parser(
        "update", parents=[common], help="Generate or refresh the API files"
    )
    update.add_argument(
        "--clean",
        action="store_true",
        help=f"Remove previous output (keeping {ALIAS_FILE_NAME}) before generating",
    )
    update.add_argument(
        "--init-only",
        action="store_true",
        help=f"Only create or extend {ALIAS_FILE_NAME}",
    )

    subparsers.add_parser(
        "check", parents=[common], help="Report changes against the generated files"
    )
    subparsers.add_parser(
        "init", parents=[common], help=f"Add default settings to {MANIFEST_FILE}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    project_dir = Path(args.project_dir)

    try:
        if args.command == "init":
            return _init(project_dir)
        settings = load_settings(project_dir)
        if args.command == "update":
            run = run_update(
                settings,
                project_dir=project_dir,
                clean=bool(args.clean),
                init_only=bool(args.init_only),
            )
            _print_new_labels(run.new_labels, configured=run.alias_source is AliasSource.CONFIG)
            for warning in run.warnings:
                print(f"Warning: {warning}")
            if args.init_only:
                print(f"Category aliases written to {run.output_dir / ALIAS_FILE_NAME}")
                return 0
            for group in run.groups:
                print(f"  - {group.group}/ ({group.action})")
            print(f"Done. Output directory: {run.output_dir}")
            return 0

        check = run_check(settings, project_dir=project_dir)
    except (SpecLoadError, ConfigError, WriteError) as exc:
        parser.error(str(exc))
        return 2

    for warning in check.warnings:
        print(f"Warning: {warning}")
    print(format_report(check.report))
    print(f"Change report written to {check.changelog_path}")
    return 0


def _init(project_dir: Path) -> int:
    if write_default_settings(project_dir):
        print(f"Added '{CONFIG_KEY}' settings to {project_dir / MANIFEST_FILE}")
    else:
        print(f"'{CONFIG_KEY}' settings already present in {project_dir / MANIFEST_FILE}")
    return 0


def _print_new_labels(labels: tuple[str, ...], *, configured: bool) -> None:
    if not labels:
        return
    print(f"Found {len(labels)} unmapped categories:")
    for label in labels:
        print(f"  - {label}")
    if configured:
        print(f"Add aliases for them under '{CONFIG_KEY}.tagMapping' in {MANIFEST_FILE}")
    else:
        print(f"Edit {ALIAS_FILE_NAME} in the output directory to rename them, then run update")


if __name__ == "__main__":
    raise SystemExit(main())
