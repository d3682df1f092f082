"""Tests for group file writing."""

from __future__ import annotations

from pathlib import Path

import pytest

from swagger_typegen.merge import MergeAction
from swagger_typegen.writer import (
    FUNCTIONS_FILE_NAME,
    TYPES_FILE_NAME,
    WriteError,
    clean_output_dir,
    read_text_if_exists,
    write_changelog,
    write_group_files,
)


def test_write_group_files_replaces_foreign_function_file(tmp_path: Path) -> None:
    group_dir = tmp_path / "users"
    group_dir.mkdir()
    (group_dir / FUNCTIONS_FILE_NAME).write_text("export const mine = 1\n", encoding="utf-8")

    action = write_group_files(
        output_dir=tmp_path, group="users", types_text="types", functions_text="functions"
    )

    assert action is MergeAction.REPLACED
    assert (group_dir / TYPES_FILE_NAME).read_text(encoding="utf-8") == "types"
    assert (group_dir / FUNCTIONS_FILE_NAME).read_text(encoding="utf-8") == "functions"


def test_clean_output_dir_keeps_named_entries(tmp_path: Path) -> None:
    (tmp_path / "old").mkdir()
    (tmp_path / "old" / "index.ts").write_text("", encoding="utf-8")
    (tmp_path / "stray.ts").write_text("", encoding="utf-8")
    (tmp_path / "tag-mapping.json").write_text("{}", encoding="utf-8")

    clean_output_dir(tmp_path, keep=("tag-mapping.json",))

    assert [path.name for path in tmp_path.iterdir()] == ["tag-mapping.json"]
    clean_output_dir(tmp_path / "missing")


def test_read_and_changelog(tmp_path: Path) -> None:
    assert read_text_if_exists(tmp_path / "absent.ts") is None

    path = write_changelog(tmp_path, "# report\n")

    assert path == tmp_path / "changelog.md"
    assert read_text_if_exists(path) == "# report\n"


def test_write_below_a_regular_file_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(WriteError):
        write_group_files(
            output_dir=blocker, group="users", types_text="", functions_text=""
        )
