"""Shared helpers for JSON-Schema shape operations."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Optional, TypeAlias

from .json_types import JSONValue, SchemaNode

SWAGGER2_REF_PREFIX = "#/definitions/"
OPENAPI3_REF_PREFIX = "#/components/schemas/"

DisplayName: TypeAlias = Callable[[str], str]


def ref_name(ref: str) -> str:
    """Strip either dialect's definition prefix from a ``$ref`` value."""
    for prefix in (OPENAPI3_REF_PREFIX, SWAGGER2_REF_PREFIX):
        if ref.startswith(prefix):
            return ref[len(prefix) :]
    return ref


def schema_ref(schema: SchemaNode) -> Optional[str]:
    """Return the ``$ref`` of a schema node, if it has one."""
    ref = schema.get("$ref")
    return ref if isinstance(ref, str) and ref else None


def child_schema(schema: SchemaNode, key: str) -> Optional[SchemaNode]:
    """Return a nested schema mapping stored under ``key``."""
    value = schema.get(key)
    return value if isinstance(value, dict) else None


def schema_properties(schema: SchemaNode) -> dict[str, SchemaNode]:
    """Return the mapping-valued entries of ``properties``."""
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return {}
    return {
        name: value
        for name, value in properties.items()
        if isinstance(name, str) and isinstance(value, dict)
    }


def schema_required(schema: SchemaNode) -> set[str]:
    """Return the names listed in ``required``."""
    required = schema.get("required")
    if not isinstance(required, list):
        return set()
    return {name for name in required if isinstance(name, str)}


def all_of_members(schema: SchemaNode) -> list[SchemaNode]:
    """Return the mapping members of an ``allOf`` list."""
    members = schema.get("allOf")
    if not isinstance(members, list):
        return []
    return [member for member in members if isinstance(member, dict)]


def enum_values(schema: SchemaNode) -> list[JSONValue]:
    """Return the enumerated literal values of a schema, if any."""
    values = schema.get("enum")
    return list(values) if isinstance(values, list) else []


def iter_child_schemas(schema: SchemaNode) -> Iterator[SchemaNode]:
    """Yield schemas nested under properties, items, allOf and additionalProperties."""
    yield from schema_properties(schema).values()
    items = child_schema(schema, "items")
    if items is not None:
        yield items
    yield from all_of_members(schema)
    additional = child_schema(schema, "additionalProperties")
    if additional is not None:
        yield additional


def collect_refs(schema: SchemaNode, refs: list[str]) -> None:
    """Append every reference reachable inside ``schema`` without crossing a ``$ref``."""
    ref = schema_ref(schema)
    if ref is not None:
        refs.append(ref)
        return
    for child in iter_child_schemas(schema):
        collect_refs(child, refs)


def literal_union(values: list[JSONValue]) -> str:
    """Render enumerated values as a literal union: strings quoted, numbers bare."""
    rendered: list[str] = []
    for value in values:
        if isinstance(value, str):
            escaped = value.replace("\\", "\\\\").replace("'", "\\'")
            rendered.append(f"'{escaped}'")
        elif isinstance(value, bool):
            rendered.append("true" if value else "false")
        elif value is None:
            rendered.append("null")
        else:
            rendered.append(str(value))
    return " | ".join(rendered)


def primitive_type(type_tag: Optional[str]) -> Optional[str]:
    """Map a scalar type tag to its TypeScript counterpart."""
    if type_tag == "string":
        return "string"
    if type_tag in ("integer", "number"):
        return "number"
    if type_tag == "boolean":
        return "boolean"
    return None


def primitive_type_expression(schema: SchemaNode, display_name: DisplayName) -> str:
    """Render a schema with the primitive mapping only.

    References render as display names, arrays recurse into their items and
    every object collapses to ``Record<string, unknown>``.
    """
    ref = schema_ref(schema)
    if ref is not None:
        return display_name(ref_name(ref))

    type_tag = schema.get("type")
    scalar = primitive_type(type_tag if isinstance(type_tag, str) else None)
    if scalar is not None:
        return scalar
    if type_tag == "array":
        items = child_schema(schema, "items")
        if items is None:
            return "unknown[]"
        return f"{primitive_type_expression(items, display_name)}[]"
    if type_tag == "object":
        return "Record<string, unknown>"
    return "unknown"


def referenced_type_expression(
    schema: SchemaNode, display_name: DisplayName
) -> tuple[Optional[str], Optional[str]]:
    """Name a schema that is a reference or an array of referenced items.

    Returns:
        tuple[Optional[str], Optional[str]]: Rendered type name and the
            original name it points at, or ``(None, None)``.
    """
    ref = schema_ref(schema)
    if ref is not None:
        original = ref_name(ref)
        return display_name(original), original
    if schema.get("type") == "array":
        items = child_schema(schema, "items")
        item_ref = schema_ref(items) if items is not None else None
        if item_ref is not None:
            original = ref_name(item_ref)
            return f"{display_name(original)}[]", original
    return None, None


@dataclass
class MergedAllOf:
    """Result of flattening an ``allOf`` chain for declaration rendering."""

    extends: list[str] = field(default_factory=list)
    properties: dict[str, SchemaNode] = field(default_factory=dict)
    required: set[str] = field(default_factory=set)


def merge_all_of_schema(schema: SchemaNode, display_name: DisplayName) -> MergedAllOf:
    """Merge an ``allOf`` chain into extended names and own properties.

    Args:
        schema (SchemaNode): Schema carrying an ``allOf`` list.
        display_name (DisplayName): Maps original type names to display names.

    Returns:
        MergedAllOf: Referenced members in order, plus inline properties where
            later members override earlier ones and the node's own
            ``properties`` override every member.
    """
    merged = MergedAllOf()
    for member in all_of_members(schema):
        ref = schema_ref(member)
        if ref is not None:
            merged.extends.append(display_name(ref_name(ref)))
            continue
        _merge_child_object_data(member, merged=merged)
    _merge_child_object_data(schema, merged=merged)
    return merged


def _merge_child_object_data(child_schema_node: SchemaNode, *, merged: MergedAllOf) -> None:
    merged.properties.update(schema_properties(child_schema_node))
    merged.required.update(schema_required(child_schema_node))
