"""Splice a freshly generated function region into an existing file."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from .function_emitter import marker_bounds


class MergeAction(StrEnum):
    """How the function file of a group was produced."""

    CREATED = "created"
    MERGED = "merged"
    REPLACED = "replaced"


@dataclass(frozen=True)
class MergeOutcome:
    content: str
    action: MergeAction


def merge_function_file(existing: Optional[str], generated: str) -> MergeOutcome:
    """Combine an existing function file with newly generated content.

    Args:
        existing (Optional[str]): Current file content, ``None`` when absent.
        generated (str): Complete freshly rendered file.

    Returns:
        MergeOutcome: The prior file's text outside the markers around the new
            marked region (``merged``), or the generated text verbatim
            (``created`` / ``replaced``). A prior file without usable markers
            is treated as foreign and replaced.
    """
    if existing is None:
        return MergeOutcome(content=generated, action=MergeAction.CREATED)

    existing_bounds = marker_bounds(existing)
    generated_bounds = marker_bounds(generated)
    if existing_bounds is None or generated_bounds is None:
        return MergeOutcome(content=generated, action=MergeAction.REPLACED)

    region = generated[generated_bounds[0] : generated_bounds[1]]
    content = existing[: existing_bounds[0]] + region + existing[existing_bounds[1] :]
    return MergeOutcome(content=content, action=MergeAction.MERGED)
