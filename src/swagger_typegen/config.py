"""Generator settings loaded from the invoking project's ``package.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
CONFIG_KEY = "swagger-typegen"


class ConfigError(RuntimeError):
    """Raised when the project configuration cannot be loaded or is invalid."""


class GeneratorSettings(BaseModel):
    """Settings consumed by the normalizer, the emitters and the commands."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    input: str = Field(default="./swagger.json", min_length=1)
    output: str = Field(default="./src/api", min_length=1)
    request_style: Literal["chain", "object"] = "chain"
    request_client: str = Field(default="requestClient", min_length=1)
    request_import: str = Field(default="@/utils/request", min_length=1)
    path_prefix_filter: tuple[str, ...] = ("/api/v1", "/api")
    type_name_suffix_filter: tuple[str, ...] = ("Request", "Response")
    exclude_fields: tuple[str, ...] = ()
    unwrap_response_field: Optional[str] = "data"
    tag_mapping: dict[str, str] = Field(default_factory=dict)
    include_tags: tuple[str, ...] = ()
    exclude_tags: tuple[str, ...] = ()

    @field_validator("path_prefix_filter")
    @classmethod
    def _longest_prefix_first(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted(value, key=len, reverse=True))

    def accepts_tag(self, tag: str) -> bool:
        """Apply the include/exclude tag filter; the include list wins."""
        if self.include_tags:
            return tag in self.include_tags
        if self.exclude_tags:
            return tag not in self.exclude_tags
        return True


def default_settings_payload() -> dict[str, object]:
    """Return the section written by ``init`` into ``package.json``."""
    defaults = GeneratorSettings()
    return defaults.model_dump(
        by_alias=True,
        include={
            "input",
            "output",
            "request_style",
            "request_client",
            "request_import",
            "path_prefix_filter",
            "type_name_suffix_filter",
        },
        mode="json",
    )


def load_settings(project_dir: Path) -> GeneratorSettings:
    """Load settings from ``package.json``, falling back to defaults.

    Args:
        project_dir (Path): Directory holding the project manifest.

    Returns:
        GeneratorSettings: Validated settings, user values taking precedence.
    """
    manifest_path = project_dir / MANIFEST_FILE
    if not manifest_path.is_file():
        logger.warning("%s not found in %s, using default settings", MANIFEST_FILE, project_dir)
        return GeneratorSettings()

    manifest = _read_manifest(manifest_path)
    section = manifest.get(CONFIG_KEY)
    if section is None:
        return GeneratorSettings()
    if not isinstance(section, dict):
        raise ConfigError(f"'{CONFIG_KEY}' in {manifest_path} must be an object")

    try:
        return GeneratorSettings.model_validate(section)
    except ValidationError as exc:
        raise ConfigError(f"Invalid '{CONFIG_KEY}' settings in {manifest_path}: {exc}") from exc


def write_default_settings(project_dir: Path) -> bool:
    """Add the default settings section to ``package.json``.

    Returns:
        bool: ``False`` when the section already exists.
    """
    manifest_path = project_dir / MANIFEST_FILE
    if not manifest_path.is_file():
        raise ConfigError(f"{MANIFEST_FILE} not found in {project_dir}")

    manifest = _read_manifest(manifest_path)
    if CONFIG_KEY in manifest:
        return False

    manifest[CONFIG_KEY] = default_settings_payload()
    try:
        manifest_path.write_text(
            json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
    except OSError as exc:
        raise ConfigError(f"Failed to write {manifest_path}: {exc}") from exc
    return True


def _read_manifest(manifest_path: Path) -> dict[str, object]:
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read {manifest_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {manifest_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"{manifest_path} must contain a JSON object")
    return payload
