"""Internal datatypes for the normalized API model and change reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

from .json_types import JSONValue, SchemaNode


class Dialect(StrEnum):
    """Supported API description dialects."""

    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


class ChangeType(StrEnum):
    """Kind of change reported for a type, field or operation."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class Parameter:
    """A path or query parameter normalized from either dialect."""

    name: str
    location: str
    required: bool = False
    type_tag: Optional[str] = None
    items: Optional[SchemaNode] = None
    enum: tuple[JSONValue, ...] = ()
    description: Optional[str] = None


@dataclass(frozen=True)
class Operation:
    """One HTTP verb and path pair, ready for emission."""

    path: str
    clean_path: str
    method: str
    group: str
    call_name: str
    summary: Optional[str] = None
    body_type_name: Optional[str] = None
    params_type_name: Optional[str] = None
    response_type_name: Optional[str] = None
    path_params: tuple[Parameter, ...] = ()
    query_params: tuple[Parameter, ...] = ()
    body_schema: Optional[SchemaNode] = None
    response_schema: Optional[SchemaNode] = None
    type_refs: tuple[str, ...] = ()


@dataclass(frozen=True)
class NamedType:
    """A resolved, nameable schema from the definition table."""

    original_name: str
    name: str
    module: str
    schema: SchemaNode


@dataclass(frozen=True)
class ApiModel:
    """Version-agnostic model built from one API description."""

    operations: dict[str, list[Operation]]
    types: dict[str, list[NamedType]]
    warnings: tuple[str, ...] = ()

    def all_types(self) -> list[NamedType]:
        """Return every resolved type across modules."""
        return [named for module_types in self.types.values() for named in module_types]


@dataclass(frozen=True)
class FieldChange:
    """A single field delta inside a modified type."""

    field: str
    change_type: ChangeType
    old_type: Optional[str] = None
    new_type: Optional[str] = None
    old_optional: bool = False
    new_optional: bool = False


@dataclass(frozen=True)
class TypeChange:
    """A type-level change inside one group."""

    type_name: str
    change_type: ChangeType
    fields: tuple[FieldChange, ...] = ()


@dataclass(frozen=True)
class OperationChange:
    """An added or removed request function."""

    call_name: str
    change_type: ChangeType
    path: str = ""
    method: str = ""


@dataclass(frozen=True)
class GroupChangeReport:
    """All changes detected for one group directory."""

    group: str
    type_changes: tuple[TypeChange, ...]
    operation_changes: tuple[OperationChange, ...]


@dataclass(frozen=True)
class ChangeReport:
    """Change report across all groups of one run."""

    generated_at: str
    groups: tuple[GroupChangeReport, ...] = field(default_factory=tuple)

    @property
    def type_change_count(self) -> int:
        return sum(len(group.type_changes) for group in self.groups)

    @property
    def operation_change_count(self) -> int:
        return sum(len(group.operation_changes) for group in self.groups)
