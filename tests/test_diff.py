"""Tests for change detection and change report rendering."""

from __future__ import annotations

from pathlib import Path

from swagger_typegen.config import GeneratorSettings
from swagger_typegen.diff import (
    ALIAS_FIELD,
    detect_changes,
    detect_type_changes,
    format_report,
    render_changelog,
)
from swagger_typegen.extract import extract_declared_types
from swagger_typegen.function_emitter import AUTO_GEN_START, render_functions_file
from swagger_typegen.generator import group_types_for
from swagger_typegen.model_types import (
    ChangeReport,
    ChangeType,
    FieldChange,
    GroupChangeReport,
    NamedType,
    OperationChange,
    TypeChange,
)
from swagger_typegen.type_emitter import render_types_file

from .fixture_helpers import SWAGGER2_FIXTURE, normalize_fixture

_GROUP = "userApi"


def _write_current_files(output_dir: Path) -> tuple[Path, Path]:
    settings = GeneratorSettings()
    model = normalize_fixture(SWAGGER2_FIXTURE)
    operations = model.operations[_GROUP]
    group_dir = output_dir / _GROUP
    group_dir.mkdir(parents=True)
    types_path = group_dir / "types.ts"
    functions_path = group_dir / "index.ts"
    types_path.write_text(
        render_types_file(group_types_for(model)[_GROUP], operations, settings), encoding="utf-8"
    )
    functions_path.write_text(render_functions_file(operations, settings), encoding="utf-8")
    return types_path, functions_path


def _detect(output_dir: Path) -> ChangeReport:
    model = normalize_fixture(SWAGGER2_FIXTURE)
    return detect_changes(
        {_GROUP: model.operations[_GROUP]},
        group_types_for(model),
        output_dir,
        GeneratorSettings(),
        generated_at="2026-01-01T00:00:00+00:00",
    )


def test_unchanged_files_report_nothing(tmp_path: Path) -> None:
    _write_current_files(tmp_path)

    report = _detect(tmp_path)

    assert report.groups == ()
    assert "No changes detected." in render_changelog(report)


def test_missing_files_report_everything_added(tmp_path: Path) -> None:
    report = _detect(tmp_path)

    (group,) = report.groups
    assert [change.type_name for change in group.type_changes] == [
        "User",
        "Role",
        "Team",
        "CreateUser",
        "GetUsersParams",
    ]
    assert {change.change_type for change in group.type_changes} == {ChangeType.ADDED}
    assert [change.call_name for change in group.operation_changes] == [
        "getUsers",
        "postUsers",
        "getUsersById",
        "deleteUsersById",
    ]


def test_added_field_is_reported(tmp_path: Path) -> None:
    types_path, _ = _write_current_files(tmp_path)
    text = types_path.read_text(encoding="utf-8")
    types_path.write_text(text.replace("  age?: number\n", ""), encoding="utf-8")

    report = _detect(tmp_path)

    (group,) = report.groups
    assert group.operation_changes == ()
    assert group.type_changes == (
        TypeChange(
            type_name="CreateUser",
            change_type=ChangeType.MODIFIED,
            fields=(
                FieldChange(
                    field="age",
                    change_type=ChangeType.ADDED,
                    new_type="number",
                    new_optional=True,
                ),
            ),
        ),
    )


def test_modified_removed_and_alias_changes(tmp_path: Path) -> None:
    types_path, _ = _write_current_files(tmp_path)
    text = types_path.read_text(encoding="utf-8")
    text = text.replace("  name: string\n  role?: Role\n  manager", "  name: number\n  role?: Role\n  manager")
    text = text.replace("'admin' | 'member'", "'admin'")
    text += "\nexport interface Legacy {\n  x: string\n}\n"
    types_path.write_text(text, encoding="utf-8")

    changes = {change.type_name: change for change in _detect(tmp_path).groups[0].type_changes}

    assert changes["User"].fields == (
        FieldChange(
            field="name", change_type=ChangeType.MODIFIED, old_type="number", new_type="string"
        ),
    )
    assert changes["Role"].fields == (
        FieldChange(
            field=ALIAS_FIELD,
            change_type=ChangeType.MODIFIED,
            old_type="'admin'",
            new_type="'admin' | 'member'",
        ),
    )
    assert changes["Legacy"].change_type is ChangeType.REMOVED


def test_new_optional_field_reports_bare_type() -> None:
    user = NamedType(
        original_name="User",
        name="User",
        module="common",
        schema={
            "type": "object",
            "required": ["id", "name"],
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
                "age": {"type": "integer"},
            },
        },
    )
    expected = extract_declared_types(render_types_file([user], [], GeneratorSettings()))

    changes = detect_type_changes(expected, "interface User { id: number; name: string }")

    assert changes == [
        TypeChange(
            type_name="User",
            change_type=ChangeType.MODIFIED,
            fields=(
                FieldChange(
                    field="age",
                    change_type=ChangeType.ADDED,
                    new_type="number",
                    new_optional=True,
                ),
            ),
        )
    ]


def test_function_changes_use_generated_region_only(tmp_path: Path) -> None:
    _, functions_path = _write_current_files(tmp_path)
    text = functions_path.read_text(encoding="utf-8")
    text = text.replace(
        AUTO_GEN_START,
        "export const handWritten = () => {\n  return 1\n}\n\n" + AUTO_GEN_START,
    )
    text = text.replace(
        "export const deleteUsersById",
        "export const getLegacy = () => {\n  return null\n}\n\nexport const deleteUsersById",
    )
    text = text.replace("export const postUsers = ", "export const createUser = ")
    functions_path.write_text(text, encoding="utf-8")

    (group,) = _detect(tmp_path).groups

    assert group.type_changes == ()
    assert group.operation_changes == (
        OperationChange(
            call_name="postUsers", change_type=ChangeType.ADDED, path="/api/v1/users", method="post"
        ),
        OperationChange(call_name="createUser", change_type=ChangeType.REMOVED),
        OperationChange(call_name="getLegacy", change_type=ChangeType.REMOVED),
    )


def test_render_changelog_and_summary() -> None:
    report = ChangeReport(
        generated_at="2026-01-01T00:00:00+00:00",
        groups=(
            GroupChangeReport(
                group="userApi",
                type_changes=(
                    TypeChange(type_name="Team", change_type=ChangeType.ADDED),
                    TypeChange(
                        type_name="User",
                        change_type=ChangeType.MODIFIED,
                        fields=(
                            FieldChange(
                                field="age",
                                change_type=ChangeType.ADDED,
                                new_type="number",
                                new_optional=True,
                            ),
                            FieldChange(
                                field="name",
                                change_type=ChangeType.MODIFIED,
                                old_type="number",
                                new_type="string",
                            ),
                        ),
                    ),
                ),
                operation_changes=(
                    OperationChange(
                        call_name="getUsers",
                        change_type=ChangeType.ADDED,
                        path="/api/v1/users",
                        method="get",
                    ),
                    OperationChange(call_name="getLegacy", change_type=ChangeType.REMOVED),
                ),
            ),
        ),
    )

    changelog = render_changelog(report)

    assert changelog.startswith("# API Change Report\n\nGenerated at: 2026-01-01T00:00:00+00:00\n")
    assert "## userApi" in changelog
    assert "- + **Team**: new type" in changelog
    assert "  - + `age`: number (optional) (added)" in changelog
    assert "  - ~ `name`: number -> string (changed)" in changelog
    assert "- + `GET /api/v1/users` -> getUsers" in changelog
    assert "- - `getLegacy`" in changelog

    summary = format_report(report)
    assert summary.splitlines() == [
        "Groups with changes: 1",
        "Type changes: 2",
        "API changes: 2",
        "- userApi: 2 type change(s), 2 API change(s)",
    ]
