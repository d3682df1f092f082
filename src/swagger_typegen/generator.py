"""High-level orchestration of the ``update`` and ``check`` commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx

from .aliases import ALIAS_FILE_NAME, AliasSource, CategoryAliases, extract_all_tags
from .config import GeneratorSettings
from .diff import detect_changes, render_changelog
from .function_emitter import render_functions_file
from .json_types import JSONObject
from .loader import load_document
from .merge import MergeAction
from .model_types import ApiModel, ChangeReport, NamedType
from .normalize import normalize_document
from .resolver import collect_group_types
from .type_emitter import render_types_file
from .writer import clean_output_dir, write_changelog, write_group_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupResult:
    """Files produced for one group directory."""

    group: str
    action: MergeAction
    operation_count: int
    type_count: int


@dataclass(frozen=True)
class UpdateRun:
    """Result of an ``update`` run."""

    output_dir: Path
    groups: tuple[GroupResult, ...]
    new_labels: tuple[str, ...]
    alias_source: AliasSource
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class CheckRun:
    """Result of a ``check`` run."""

    report: ChangeReport
    changelog_path: Path
    warnings: tuple[str, ...] = ()


def run_update(
    settings: GeneratorSettings,
    *,
    project_dir: Path,
    clean: bool = False,
    init_only: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpdateRun:
    """Generate or refresh every group directory under the output root.

    Args:
        settings (GeneratorSettings): Validated project settings.
        project_dir (Path): Directory relative input/output paths resolve against.
        clean (bool): Remove previous output (except the alias file) first.
        init_only (bool): Stop once the alias table has been persisted.
        transport (Optional[httpx.AsyncBaseTransport]): Transport override
            for remote input.

    Returns:
        UpdateRun: Per-group results, new category labels and warnings.
    """
    document = load_document(settings.input, base_dir=project_dir, transport=transport)
    output_dir = project_dir / settings.output

    aliases = CategoryAliases.load(output_dir, settings.tag_mapping)
    new_labels = aliases.register(extract_all_tags(document))
    if new_labels:
        logger.info("Discovered %d unmapped categories: %s", len(new_labels), ", ".join(new_labels))
    aliases.persist(output_dir)

    if init_only:
        return UpdateRun(
            output_dir=output_dir,
            groups=(),
            new_labels=tuple(new_labels),
            alias_source=aliases.source,
        )

    if clean:
        clean_output_dir(output_dir, keep=(ALIAS_FILE_NAME,))

    model = normalize_document(document, settings=settings, aliases=aliases)
    all_types = model.all_types()
    groups: list[GroupResult] = []
    for group, operations in model.operations.items():
        group_types = collect_group_types(operations, all_types)
        action = write_group_files(
            output_dir=output_dir,
            group=group,
            types_text=render_types_file(group_types, operations, settings),
            functions_text=render_functions_file(operations, settings),
        )
        groups.append(
            GroupResult(
                group=group,
                action=action,
                operation_count=len(operations),
                type_count=len(group_types),
            )
        )
    logger.info("Generated %d groups in %s", len(groups), output_dir)

    return UpdateRun(
        output_dir=output_dir,
        groups=tuple(groups),
        new_labels=tuple(new_labels),
        alias_source=aliases.source,
        warnings=model.warnings,
    )


def run_check(
    settings: GeneratorSettings,
    *,
    project_dir: Path,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    generated_at: Optional[str] = None,
) -> CheckRun:
    """Compare the current API description with the generated files.

    Nothing under the output root is written; the report goes to
    ``changelog.md`` in the project directory.
    """
    document = load_document(settings.input, base_dir=project_dir, transport=transport)
    output_dir = project_dir / settings.output
    model = load_model(settings, document=document, output_dir=output_dir)

    report = detect_changes(
        model.operations,
        group_types_for(model),
        output_dir,
        settings,
        generated_at=generated_at or _timestamp(),
    )
    changelog_path = write_changelog(project_dir, render_changelog(report))
    logger.info("Wrote change report to %s", changelog_path)
    return CheckRun(report=report, changelog_path=changelog_path, warnings=model.warnings)


def group_types_for(model: ApiModel) -> dict[str, list[NamedType]]:
    """Select the emitted types of every group of a model."""
    all_types = model.all_types()
    return {
        group: collect_group_types(operations, all_types)
        for group, operations in model.operations.items()
    }


def load_model(
    settings: GeneratorSettings,
    *,
    document: JSONObject,
    output_dir: Path,
) -> ApiModel:
    """Normalize a loaded document with the aliases persisted under ``output_dir``."""
    aliases = CategoryAliases.load(output_dir, settings.tag_mapping)
    aliases.register(extract_all_tags(document))
    return normalize_document(document, settings=settings, aliases=aliases)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
