"""Tests for splicing the generated region into existing function files."""

from __future__ import annotations

import pytest

from swagger_typegen.config import GeneratorSettings
from swagger_typegen.extract import generated_region
from swagger_typegen.function_emitter import (
    AUTO_GEN_END,
    AUTO_GEN_START,
    marker_bounds,
    render_functions_file,
)
from swagger_typegen.merge import MergeAction, merge_function_file
from swagger_typegen.model_types import Operation

_HAND_WRITTEN = """
export const customHelper = () => {
  return 'kept verbatim'
}
"""


def _operation(call_name: str, path: str) -> Operation:
    return Operation(path=path, clean_path=path, method="get", group="demo", call_name=call_name)


def test_no_prior_file_is_created() -> None:
    outcome = merge_function_file(None, "generated")
    assert outcome.action is MergeAction.CREATED
    assert outcome.content == "generated"


def test_hand_written_code_outside_markers_survives_regeneration() -> None:
    settings = GeneratorSettings()
    first = render_functions_file([_operation("getA", "/a")], settings)
    existing = first + _HAND_WRITTEN
    regenerated = render_functions_file(
        [_operation("getA", "/a"), _operation("getB", "/b")], settings
    )

    outcome = merge_function_file(existing, regenerated)

    assert outcome.action is MergeAction.MERGED
    assert outcome.content.endswith(_HAND_WRITTEN)
    assert generated_region(outcome.content) == generated_region(regenerated)
    assert outcome.content.startswith(existing[: existing.index(AUTO_GEN_START)])


def test_prefix_edits_are_preserved() -> None:
    settings = GeneratorSettings()
    generated = render_functions_file([_operation("getA", "/a")], settings)
    existing = "import { extra } from './extra'\n" + generated

    outcome = merge_function_file(existing, generated)

    assert outcome.action is MergeAction.MERGED
    assert outcome.content == existing


def test_file_without_markers_is_replaced() -> None:
    generated = render_functions_file([_operation("getA", "/a")], GeneratorSettings())

    outcome = merge_function_file("export const mine = () => 1\n", generated)

    assert outcome.action is MergeAction.REPLACED
    assert outcome.content == generated


def test_markers_out_of_order_are_replaced() -> None:
    generated = render_functions_file([_operation("getA", "/a")], GeneratorSettings())
    existing = f"{AUTO_GEN_END}\nstuff\n{AUTO_GEN_START}\n"

    assert merge_function_file(existing, generated).action is MergeAction.REPLACED


def test_merging_is_idempotent() -> None:
    generated = render_functions_file([_operation("getA", "/a")], GeneratorSettings())
    once = merge_function_file(generated + _HAND_WRITTEN, generated).content
    twice = merge_function_file(once, generated).content

    assert once == twice == generated + _HAND_WRITTEN


@pytest.mark.parametrize(
    "existing",
    [
        "export const mine = () => 1\n",
        f"{AUTO_GEN_START}\nexport const a = () => 1\n",
        f"{AUTO_GEN_END}\n{AUTO_GEN_START}\n",
        f"// head\n{AUTO_GEN_START}\nexport const a = () => 1\n{AUTO_GEN_END}\n// tail\n",
    ],
)
def test_merge_and_region_agree_on_usable_markers(existing: str) -> None:
    generated = render_functions_file([_operation("getA", "/a")], GeneratorSettings())

    merged = merge_function_file(existing, generated).action is MergeAction.MERGED

    assert merged == (marker_bounds(existing) is not None)
    assert merged == (generated_region(existing) is not None)


def test_marker_bounds_span_both_markers() -> None:
    text = f"head\n{AUTO_GEN_START}\nbody\n{AUTO_GEN_END}\ntail"

    start, end = marker_bounds(text)

    assert text[start:end] == f"{AUTO_GEN_START}\nbody\n{AUTO_GEN_END}"
