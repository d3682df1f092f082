"""Reference resolution, type closure and response unwrapping."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Optional

from .json_types import JSONObject, SchemaNode
from .model_types import NamedType, Operation
from .naming import clean_type_name, module_from_type_name
from .schema_utils import (
    all_of_members,
    child_schema,
    collect_refs,
    primitive_type_expression,
    ref_name,
    referenced_type_expression,
    schema_properties,
    schema_ref,
)


class Resolver:
    """Resolve local references against one API description.

    The resolver owns the dialect's definition table and the display-name
    rule; it records every schema reference it meets so the reachable type
    closure can be computed once all operations have been read.
    """

    def __init__(
        self,
        document: JSONObject,
        *,
        definitions: JSONObject,
        suffixes: Iterable[str] = (),
    ) -> None:
        self._document = document
        self._definitions = definitions
        self._suffixes = tuple(suffixes)
        self.pending: list[str] = []

    def display_name(self, original_name: str) -> str:
        """Return the cleaned display name of an original type name."""
        return clean_type_name(original_name, self._suffixes)

    def definition(self, original_name: str) -> Optional[SchemaNode]:
        """Look up a named schema; ``None`` for a dangling reference."""
        schema = self._definitions.get(original_name)
        return schema if isinstance(schema, dict) else None

    def resolve_pointer(self, node: Any) -> Optional[dict[str, Any]]:
        """Follow local ``$ref`` pointers until a concrete mapping is reached.

        Used for parameters, request bodies and responses, which may live in
        shared sections of the document. Dangling or cyclic pointers give
        ``None``.
        """
        seen: set[str] = set()
        current = node
        while isinstance(current, dict):
            ref = schema_ref(current)
            if ref is None:
                return current
            if ref in seen or not ref.startswith("#/"):
                return None
            seen.add(ref)
            current = self._lookup_pointer(ref)
        return None

    def _lookup_pointer(self, ref: str) -> Any:
        current: Any = self._document
        for token in ref[2:].split("/"):
            token = token.replace("~1", "/").replace("~0", "~")
            if not isinstance(current, dict) or token not in current:
                return None
            current = current[token]
        return current

    def track(self, schema: Optional[SchemaNode]) -> None:
        """Record every reference reachable from ``schema``."""
        if schema is not None:
            collect_refs(schema, self.pending)

    def envelope_type(self, schema: SchemaNode) -> tuple[Optional[str], tuple[str, ...]]:
        """Name a response or body schema without unwrapping it."""
        rendered, original = referenced_type_expression(schema, self.display_name)
        return rendered, (original,) if original is not None else ()

    def unwrap_response(
        self, schema: SchemaNode, field_name: str
    ) -> tuple[Optional[str], tuple[str, ...]]:
        """Resolve a response type through the configured unwrap field.

        Args:
            schema (SchemaNode): Success response schema.
            field_name (str): Envelope field holding the payload.

        Returns:
            tuple[Optional[str], tuple[str, ...]]: The rendered response type
                and the original names of every type it references.
        """
        members = all_of_members(schema)
        if members:
            for member in members:
                field_schema = schema_properties(member).get(field_name)
                if field_schema is not None:
                    return self._field_type(field_schema)
            return None, ()

        ref = schema_ref(schema)
        if ref is not None:
            original = ref_name(ref)
            envelope = self.definition(original)
            if envelope is None:
                return None, ()
            field_schema = schema_properties(envelope).get(field_name)
            if field_schema is None:
                return self.display_name(original), (original,)
            return self._field_type(field_schema)

        field_schema = schema_properties(schema).get(field_name)
        if field_schema is not None:
            return self._field_type(field_schema)
        return self.envelope_type(schema)

    def _field_type(self, field_schema: SchemaNode) -> tuple[Optional[str], tuple[str, ...]]:
        self.track(field_schema)
        rendered, original = referenced_type_expression(field_schema, self.display_name)
        if rendered is not None:
            return rendered, (original,) if original is not None else ()
        # Nested arrays render down to their innermost item.
        item: Optional[SchemaNode] = field_schema
        while item is not None and item.get("type") == "array":
            item = child_schema(item, "items")
        item_ref = schema_ref(item) if item is not None else None
        originals = (ref_name(item_ref),) if item_ref is not None else ()
        return primitive_type_expression(field_schema, self.display_name), originals

    def resolve_closure(self, refs: Optional[Iterable[str]] = None) -> list[NamedType]:
        """Resolve every type transitively reachable from the pending references.

        The visited set makes the walk order-independent and guarantees
        termination for self-referential and mutually-referential schemas.
        """
        queue = deque(self.pending if refs is None else refs)
        visited: set[str] = set()
        resolved: list[NamedType] = []
        while queue:
            ref = queue.popleft()
            original = ref_name(ref)
            if original in visited:
                continue
            visited.add(original)
            schema = self.definition(original)
            if schema is None:
                continue
            resolved.append(
                NamedType(
                    original_name=original,
                    name=self.display_name(original),
                    module=module_from_type_name(original),
                    schema=schema,
                )
            )
            nested: list[str] = []
            collect_refs(schema, nested)
            queue.extend(nested)
        return resolved


def group_types_by_module(types: Iterable[NamedType]) -> dict[str, list[NamedType]]:
    """Group resolved types by the module derived from their original name."""
    grouped: dict[str, list[NamedType]] = {}
    for named in types:
        grouped.setdefault(named.module, []).append(named)
    return grouped


def collect_group_types(
    operations: Iterable[Operation], types: Iterable[NamedType]
) -> list[NamedType]:
    """Select the types one group's signatures use, with their dependencies.

    Args:
        operations (Iterable[Operation]): Operations of the group, in order.
        types (Iterable[NamedType]): Every resolved type of the document.

    Returns:
        list[NamedType]: Types in depth-first discovery order.
    """
    registry = {named.original_name: named for named in types}
    selected: list[NamedType] = []
    seen: set[str] = set()

    def visit(original_name: str) -> None:
        named = registry.get(original_name)
        if named is None or original_name in seen:
            return
        seen.add(original_name)
        selected.append(named)
        nested: list[str] = []
        collect_refs(named.schema, nested)
        for ref in nested:
            visit(ref_name(ref))

    for operation in operations:
        for original_name in operation.type_refs:
            visit(original_name)
    return selected


def display_name_collisions(types: Iterable[NamedType]) -> list[str]:
    """Describe display names produced by more than one original type name."""
    originals_by_name: dict[str, list[str]] = {}
    for named in types:
        originals = originals_by_name.setdefault(named.name, [])
        if named.original_name not in originals:
            originals.append(named.original_name)

    warnings: list[str] = []
    for name, originals in originals_by_name.items():
        if len(originals) > 1:
            warnings.append(
                f"Type name collision: {name!r} is produced by "
                f"{', '.join(originals)}; the last definition wins"
            )
    return warnings
