"""Category (tag) alias table with explicit load/extend/persist lifecycle.

Mapping priority:

1. ``tagMapping`` from the project settings (never written back);
2. ``tag-mapping.json`` in the output directory, extended with newly seen
   labels and persisted again.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from .json_types import JSONObject
from .naming import HTTP_METHODS, group_directory_name
from .writer import WriteError, write_file

logger = logging.getLogger(__name__)

ALIAS_FILE_NAME = "tag-mapping.json"
DEFAULT_TAG = "default"


class AliasSource(StrEnum):
    """Where the alias table of a run came from."""

    CONFIG = "config"
    FILE = "file"
    EMPTY = "empty"


@dataclass
class CategoryAliases:
    """Raw category label to directory alias mapping for one run."""

    mapping: dict[str, str] = field(default_factory=dict)
    source: AliasSource = AliasSource.EMPTY
    discovered: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, output_dir: Path, configured: dict[str, str]) -> CategoryAliases:
        """Load the table from settings, or else from the persisted alias file."""
        if configured:
            return cls(mapping=dict(configured), source=AliasSource.CONFIG)
        mapping = load_alias_file(output_dir)
        return cls(mapping=mapping, source=AliasSource.FILE if mapping else AliasSource.EMPTY)

    @property
    def is_configured(self) -> bool:
        return self.source is AliasSource.CONFIG

    def register(self, labels: Iterable[str]) -> list[str]:
        """Give unmapped labels an identity alias and return them."""
        new_labels: list[str] = []
        for label in labels:
            if label not in self.mapping:
                self.mapping[label] = label
                new_labels.append(label)
        self.discovered.extend(new_labels)
        return new_labels

    def alias_for(self, label: str) -> str:
        """Return the alias of a label, the label itself when unmapped."""
        return self.mapping.get(label) or label

    def group_for(self, label: str) -> str:
        """Return the group directory name of a raw category label."""
        return group_directory_name(self.alias_for(label))

    def persist(self, output_dir: Path) -> bool:
        """Write the table back unless it came from the settings.

        Returns:
            bool: Whether the alias file was written.
        """
        if self.is_configured or not self.discovered:
            return False
        save_alias_file(output_dir, self.mapping)
        return True


def load_alias_file(output_dir: Path) -> dict[str, str]:
    """Read ``tag-mapping.json``; an unreadable file is treated as empty."""
    path = output_dir / ALIAS_FILE_NAME
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Failed to read %s, using an empty mapping: %s", path, exc)
        return {}
    if not isinstance(payload, dict):
        logger.warning("%s must contain a JSON object, using an empty mapping", path)
        return {}
    return {str(key): str(value) for key, value in payload.items()}


def save_alias_file(output_dir: Path, mapping: dict[str, str]) -> None:
    """Persist the alias table as indented JSON."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {output_dir}: {exc}") from exc
    content = json.dumps(mapping, indent=2, ensure_ascii=False) + "\n"
    write_file(output_dir / ALIAS_FILE_NAME, content)
    logger.info("Saved category aliases to %s", output_dir / ALIAS_FILE_NAME)


def first_tag(operation: JSONObject) -> str:
    """Return the first declared category label of an operation."""
    tags = operation.get("tags")
    if isinstance(tags, list) and tags and isinstance(tags[0], str) and tags[0]:
        return tags[0]
    return DEFAULT_TAG


def extract_all_tags(document: JSONObject) -> list[str]:
    """Collect the first tag of every operation, sorted."""
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return []
    tags: set[str] = set()
    for path_item in paths.values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                tags.add(first_tag(operation))
    return sorted(tags)
