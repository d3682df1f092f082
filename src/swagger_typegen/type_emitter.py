"""Render resolved schemas as TypeScript declarations and type expressions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from .config import GeneratorSettings
from .json_types import SchemaNode
from .model_types import NamedType, Operation, Parameter
from .naming import clean_type_name, format_property_name
from .schema_utils import (
    all_of_members,
    child_schema,
    enum_values,
    literal_union,
    merge_all_of_schema,
    primitive_type,
    ref_name,
    schema_properties,
    schema_ref,
    schema_required,
)

TYPES_FILE_HEADER = (
    "/**\n"
    " * This file is generated by swagger-typegen. Do not edit it by hand.\n"
    " */\n"
)


class TypeRenderer:
    """Render schemas with one run's naming and field-exclusion settings."""

    def __init__(self, settings: GeneratorSettings) -> None:
        self._suffixes = settings.type_name_suffix_filter
        self._excluded = frozenset(settings.exclude_fields)

    def display_name(self, original_name: str) -> str:
        return clean_type_name(original_name, self._suffixes)

    def is_excluded(self, field_name: str) -> bool:
        return field_name in self._excluded

    def expression(self, schema: SchemaNode) -> str:
        """Render a schema as an inline type expression.

        Args:
            schema (SchemaNode): Schema to render.

        Returns:
            str: ``User``, ``string[]``, ``'a' | 'b'``, ``{ id: number }`` and so on.
        """
        ref = schema_ref(schema)
        if ref is not None:
            return self.display_name(ref_name(ref))

        members = all_of_members(schema)
        if members:
            return " & ".join(self.expression(member) for member in members)

        values = enum_values(schema)
        if values:
            return literal_union(values)

        type_tag = schema.get("type")
        scalar = primitive_type(type_tag if isinstance(type_tag, str) else None)
        if scalar is not None:
            return scalar
        if type_tag == "array":
            items = child_schema(schema, "items")
            return f"{self.expression(items)}[]" if items is not None else "unknown[]"
        if type_tag == "object" or "properties" in schema:
            return self._object_expression(schema)
        return "unknown"

    def _object_expression(self, schema: SchemaNode) -> str:
        properties = schema_properties(schema)
        if properties:
            required = schema_required(schema)
            members = [
                self._member(name, prop, required=name in required)
                for name, prop in properties.items()
                if not self.is_excluded(name)
            ]
            return f"{{ {'; '.join(members)} }}" if members else "Record<string, unknown>"
        additional = child_schema(schema, "additionalProperties")
        if additional is not None:
            return f"Record<string, {self.expression(additional)}>"
        return "Record<string, unknown>"

    def _member(self, name: str, schema: SchemaNode, *, required: bool) -> str:
        optional = "" if required else "?"
        return f"{format_property_name(name)}{optional}: {self.expression(schema)}"

    def declaration(self, name: str, schema: SchemaNode) -> str:
        """Render a named schema as an ``export interface`` or ``export type`` block."""
        lines: list[str] = []
        description = _description(schema)
        if description is not None:
            lines.append(f"/** {description} */")

        if all_of_members(schema):
            lines.extend(self._all_of_declaration(name, schema))
        elif enum_values(schema):
            lines.append(f"export type {name} = {literal_union(enum_values(schema))}")
        elif schema.get("type") == "object" or "properties" in schema:
            lines.append(f"export interface {name} {{")
            lines.extend(self._property_lines(schema_properties(schema), schema_required(schema)))
            additional = schema.get("additionalProperties")
            if additional is True:
                lines.append("  [key: string]: unknown")
            elif isinstance(additional, dict):
                lines.append(f"  [key: string]: {self.expression(additional)}")
            lines.append("}")
        else:
            lines.append(f"export type {name} = {self.expression(schema)}")
        return "\n".join(lines)

    def _all_of_declaration(self, name: str, schema: SchemaNode) -> list[str]:
        merged = merge_all_of_schema(schema, self.display_name)
        if merged.extends and not merged.properties:
            return [f"export type {name} = {' & '.join(merged.extends)}"]
        extends_clause = f" extends {', '.join(merged.extends)}" if merged.extends else ""
        return [
            f"export interface {name}{extends_clause} {{",
            *self._property_lines(merged.properties, merged.required),
            "}",
        ]

    def _property_lines(self, properties: dict[str, SchemaNode], required: set[str]) -> list[str]:
        lines: list[str] = []
        for prop_name, prop_schema in properties.items():
            if self.is_excluded(prop_name):
                continue
            description = _description(prop_schema)
            if description is not None:
                lines.append(f"  /** {description} */")
            lines.append(f"  {self._member(prop_name, prop_schema, required=prop_name in required)}")
        return lines

    def params_declaration(self, name: str, parameters: Iterable[Parameter]) -> str:
        """Render the dedicated query-parameters interface of an operation."""
        lines = [f"export interface {name} {{"]
        for parameter in parameters:
            if not parameter.name or parameter.name == "-" or self.is_excluded(parameter.name):
                continue
            if parameter.description:
                lines.append(f"  /** {_single_line(parameter.description)} */")
            optional = "" if parameter.required else "?"
            lines.append(
                f"  {format_property_name(parameter.name)}{optional}: {parameter_type(parameter)}"
            )
        lines.append("}")
        return "\n".join(lines)


def parameter_type(parameter: Parameter) -> str:
    """Type a parameter from its own type tag; enums become literal unions."""
    if parameter.enum:
        return literal_union(list(parameter.enum))
    scalar = primitive_type(parameter.type_tag)
    if scalar is not None:
        return scalar
    if parameter.type_tag == "array":
        if parameter.items is None:
            return "unknown[]"
        item_values = enum_values(parameter.items)
        if item_values:
            return f"({literal_union(item_values)})[]"
        item_tag = parameter.items.get("type")
        item_type = primitive_type(item_tag if isinstance(item_tag, str) else None)
        return f"{item_type or 'unknown'}[]"
    return "unknown"


def unique_by_display_name(types: Iterable[NamedType]) -> list[NamedType]:
    """Deduplicate types by display name; the last one seen wins its slot."""
    by_name: dict[str, NamedType] = {}
    for named in types:
        by_name[named.name] = named
    return list(by_name.values())


def render_types_file(
    types: Iterable[NamedType],
    operations: Iterable[Operation],
    settings: GeneratorSettings,
) -> str:
    """Render the fully generated ``types.ts`` of one group.

    Args:
        types (Iterable[NamedType]): Named types used by the group.
        operations (Iterable[Operation]): Operations of the group, in order.
        settings (GeneratorSettings): Naming and exclusion settings.

    Returns:
        str: File content.
    """
    renderer = TypeRenderer(settings)
    blocks = [renderer.declaration(named.name, named.schema) for named in unique_by_display_name(types)]
    for operation in operations:
        if operation.params_type_name and operation.query_params:
            blocks.append(
                renderer.params_declaration(operation.params_type_name, operation.query_params)
            )
    lines = [TYPES_FILE_HEADER]
    for block in blocks:
        lines.append(block)
        lines.append("")
    return "\n".join(lines)


def _description(schema: SchemaNode) -> Optional[str]:
    description = schema.get("description")
    if isinstance(description, str) and description.strip():
        return _single_line(description)
    return None


def _single_line(text: str) -> str:
    return " ".join(text.replace("*/", "* /").split())
