"""Detect changes between a fresh model and previously generated files."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from .config import GeneratorSettings
from .extract import (
    DeclaredField,
    DeclaredType,
    extract_declared_functions,
    extract_declared_types,
    generated_region,
    normalize_type_text,
)
from .model_types import (
    ChangeReport,
    ChangeType,
    FieldChange,
    GroupChangeReport,
    NamedType,
    Operation,
    OperationChange,
    TypeChange,
)
from .type_emitter import render_types_file
from .writer import FUNCTIONS_FILE_NAME, TYPES_FILE_NAME, read_text_if_exists

EXTENDS_FIELD = "(extends)"
ALIAS_FIELD = "(alias)"

_ICONS = {
    ChangeType.ADDED: "+",
    ChangeType.REMOVED: "-",
    ChangeType.MODIFIED: "~",
}


def detect_changes(
    operations_by_group: Mapping[str, list[Operation]],
    group_types: Mapping[str, list[NamedType]],
    output_dir: Path,
    settings: GeneratorSettings,
    *,
    generated_at: str,
) -> ChangeReport:
    """Compare every group of a model against the files on disk.

    Args:
        operations_by_group (Mapping[str, list[Operation]]): Operations per group.
        group_types (Mapping[str, list[NamedType]]): Types emitted per group.
        output_dir (Path): Root directory of generated groups.
        settings (GeneratorSettings): Settings used to render the fresh types.
        generated_at (str): Timestamp recorded in the report.

    Returns:
        ChangeReport: Groups with at least one type or operation change.
    """
    groups: list[GroupChangeReport] = []
    for group, operations in operations_by_group.items():
        group_dir = output_dir / group
        expected = extract_declared_types(
            render_types_file(group_types.get(group, []), operations, settings)
        )
        type_changes = detect_type_changes(
            expected, read_text_if_exists(group_dir / TYPES_FILE_NAME)
        )
        operation_changes = detect_operation_changes(
            operations, read_text_if_exists(group_dir / FUNCTIONS_FILE_NAME)
        )
        if type_changes or operation_changes:
            groups.append(
                GroupChangeReport(
                    group=group,
                    type_changes=tuple(type_changes),
                    operation_changes=tuple(operation_changes),
                )
            )
    return ChangeReport(generated_at=generated_at, groups=tuple(groups))


def detect_type_changes(
    expected: Mapping[str, DeclaredType], existing_text: Optional[str]
) -> list[TypeChange]:
    """Compare freshly rendered declarations with an existing ``types.ts``."""
    if existing_text is None:
        return [TypeChange(type_name=name, change_type=ChangeType.ADDED) for name in expected]

    existing = extract_declared_types(existing_text)
    changes: list[TypeChange] = []
    for name, declaration in expected.items():
        previous = existing.get(name)
        if previous is None:
            changes.append(TypeChange(type_name=name, change_type=ChangeType.ADDED))
            continue
        field_changes = compare_declarations(previous, declaration)
        if field_changes:
            changes.append(
                TypeChange(
                    type_name=name,
                    change_type=ChangeType.MODIFIED,
                    fields=tuple(field_changes),
                )
            )
    for name in existing:
        if name not in expected:
            changes.append(TypeChange(type_name=name, change_type=ChangeType.REMOVED))
    return changes


def compare_declarations(old: DeclaredType, new: DeclaredType) -> list[FieldChange]:
    """Compare two declarations of the same name field by field.

    Heritage clauses and alias bodies are compared as pseudo-fields so that
    a changed ``extends`` list or union is reported like a changed member.
    """
    changes = compare_fields(old.fields, new.fields)
    old_extends = ", ".join(old.extends)
    new_extends = ", ".join(new.extends)
    changes.extend(_compare_text(EXTENDS_FIELD, old_extends or None, new_extends or None))
    changes.extend(_compare_text(ALIAS_FIELD, old.alias_text, new.alias_text))
    return changes


def compare_fields(
    old_fields: Mapping[str, DeclaredField], new_fields: Mapping[str, DeclaredField]
) -> list[FieldChange]:
    changes: list[FieldChange] = []
    for name, new_field in new_fields.items():
        old_field = old_fields.get(name)
        if old_field is None:
            changes.append(
                FieldChange(
                    field=name,
                    change_type=ChangeType.ADDED,
                    new_type=new_field.type_text,
                    new_optional=new_field.optional,
                )
            )
        elif _field_key(old_field) != _field_key(new_field):
            changes.append(
                FieldChange(
                    field=name,
                    change_type=ChangeType.MODIFIED,
                    old_type=old_field.type_text,
                    new_type=new_field.type_text,
                    old_optional=old_field.optional,
                    new_optional=new_field.optional,
                )
            )
    for name, old_field in old_fields.items():
        if name not in new_fields:
            changes.append(
                FieldChange(
                    field=name,
                    change_type=ChangeType.REMOVED,
                    old_type=old_field.type_text,
                    old_optional=old_field.optional,
                )
            )
    return changes


def detect_operation_changes(
    operations: list[Operation], existing_text: Optional[str]
) -> list[OperationChange]:
    """Compare request functions by name with an existing ``index.ts``.

    Only the marked region is inspected when the file has markers, so hand
    written functions outside it are never reported as removed.
    """
    if existing_text is None:
        return [_added_operation(operation) for operation in operations]

    region = generated_region(existing_text)
    existing = extract_declared_functions(existing_text if region is None else region)
    current_names = {operation.call_name for operation in operations}
    changes = [
        _added_operation(operation) for operation in operations if operation.call_name not in existing
    ]
    for name in existing:
        if name not in current_names:
            changes.append(OperationChange(call_name=name, change_type=ChangeType.REMOVED))
    return changes


def render_changelog(report: ChangeReport) -> str:
    """Render the Markdown change report written by ``check``."""
    lines = ["# API Change Report", "", f"Generated at: {report.generated_at}", ""]
    if not report.groups:
        lines.append("No changes detected.")
        return "\n".join(lines) + "\n"

    for group in report.groups:
        lines.extend([f"## {group.group}", ""])
        if group.type_changes:
            lines.extend(["### Type changes", ""])
            for change in group.type_changes:
                lines.extend(_type_change_lines(change))
            lines.append("")
        if group.operation_changes:
            lines.extend(["### API changes", ""])
            added = [c for c in group.operation_changes if c.change_type is ChangeType.ADDED]
            removed = [c for c in group.operation_changes if c.change_type is ChangeType.REMOVED]
            if added:
                lines.append("**Added endpoints:**")
                lines.extend(
                    f"- + `{change.method.upper()} {change.path}` -> {change.call_name}"
                    for change in added
                )
                lines.append("")
            if removed:
                lines.append("**Removed endpoints:**")
                lines.extend(f"- - `{change.call_name}`" for change in removed)
                lines.append("")
    return "\n".join(lines)


def format_report(report: ChangeReport) -> str:
    """Render report as CLI output text."""
    lines = [
        f"Groups with changes: {len(report.groups)}",
        f"Type changes: {report.type_change_count}",
        f"API changes: {report.operation_change_count}",
    ]
    for group in report.groups:
        lines.append(
            f"- {group.group}: {len(group.type_changes)} type change(s), "
            f"{len(group.operation_changes)} API change(s)"
        )
    return "\n".join(lines)


def _type_change_lines(change: TypeChange) -> list[str]:
    icon = _ICONS[change.change_type]
    if change.change_type is ChangeType.ADDED:
        return [f"- {icon} **{change.type_name}**: new type"]
    if change.change_type is ChangeType.REMOVED:
        return [f"- {icon} **{change.type_name}**: removed"]
    lines = [f"- {icon} **{change.type_name}**:"]
    for field_change in change.fields:
        field_icon = _ICONS[field_change.change_type]
        if field_change.change_type is ChangeType.ADDED:
            detail = f"{_describe(field_change.new_type, field_change.new_optional)} (added)"
        elif field_change.change_type is ChangeType.REMOVED:
            detail = f"{_describe(field_change.old_type, field_change.old_optional)} (removed)"
        else:
            old = _describe(field_change.old_type, field_change.old_optional)
            new = _describe(field_change.new_type, field_change.new_optional)
            detail = f"{old} -> {new} (changed)"
        lines.append(f"  - {field_icon} `{field_change.field}`: {detail}")
    return lines


def _compare_text(name: str, old: Optional[str], new: Optional[str]) -> list[FieldChange]:
    if old is None and new is None:
        return []
    if old is None:
        return [FieldChange(field=name, change_type=ChangeType.ADDED, new_type=new)]
    if new is None:
        return [FieldChange(field=name, change_type=ChangeType.REMOVED, old_type=old)]
    if normalize_type_text(old) != normalize_type_text(new):
        return [FieldChange(field=name, change_type=ChangeType.MODIFIED, old_type=old, new_type=new)]
    return []


def _field_key(declared: DeclaredField) -> tuple[bool, str]:
    return declared.optional, normalize_type_text(declared.type_text)


def _describe(type_text: Optional[str], optional: bool) -> str:
    text = type_text or ""
    return f"{text} (optional)" if optional else text


def _added_operation(operation: Operation) -> OperationChange:
    return OperationChange(
        call_name=operation.call_name,
        change_type=ChangeType.ADDED,
        path=operation.path,
        method=operation.method,
    )
