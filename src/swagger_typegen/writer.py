"""Filesystem writers for generated group directories."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from .merge import MergeAction, merge_function_file

logger = logging.getLogger(__name__)

TYPES_FILE_NAME = "types.ts"
FUNCTIONS_FILE_NAME = "index.ts"
CHANGELOG_FILE_NAME = "changelog.md"


class WriteError(RuntimeError):
    """Raised when output files cannot be read back or written."""


def write_group_files(
    *,
    output_dir: Path,
    group: str,
    types_text: str,
    functions_text: str,
) -> MergeAction:
    """Write ``types.ts`` and merge ``index.ts`` for one group.

    Args:
        output_dir (Path): Root output directory.
        group (str): Group directory name.
        types_text (str): Fully generated type declarations.
        functions_text (str): Freshly rendered function file.

    Returns:
        MergeAction: How the function file was produced.
    """
    group_dir = output_dir / group
    try:
        group_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {group_dir}: {exc}") from exc

    write_file(group_dir / TYPES_FILE_NAME, types_text)

    functions_path = group_dir / FUNCTIONS_FILE_NAME
    outcome = merge_function_file(read_text_if_exists(functions_path), functions_text)
    if outcome.action is MergeAction.REPLACED:
        logger.warning("%s has no generation markers and was overwritten", functions_path)
    write_file(functions_path, outcome.content)
    logger.info("Wrote %s (%s)", group_dir, outcome.action)
    return outcome.action


def clean_output_dir(output_dir: Path, *, keep: Iterable[str] = ()) -> None:
    """Remove everything under ``output_dir`` except the named entries."""
    if not output_dir.is_dir():
        return
    kept = set(keep)
    for entry in output_dir.iterdir():
        if entry.name in kept:
            continue
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            raise WriteError(f"Failed to remove {entry}: {exc}") from exc
    logger.info("Cleaned output directory %s", output_dir)


def write_changelog(project_dir: Path, content: str) -> Path:
    """Write ``changelog.md`` into the project root and return its path."""
    path = project_dir / CHANGELOG_FILE_NAME
    write_file(path, content)
    return path


def read_text_if_exists(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to read file {path}: {exc}") from exc


def write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc
