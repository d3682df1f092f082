"""Normalize Swagger 2.0 and OpenAPI 3.x documents into one API model."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional, TypeAlias

from .aliases import CategoryAliases, first_tag
from .config import GeneratorSettings
from .json_types import JSONObject, SchemaNode
from .model_types import ApiModel, Dialect, Operation, Parameter
from .naming import HTTP_METHODS, call_name_for, clean_path_prefix, params_type_name
from .resolver import Resolver, display_name_collisions, group_types_by_module
from .schema_utils import child_schema, enum_values

_JSON_MEDIA_TYPES: tuple[str, ...] = ("application/json", "*/*")
_SUCCESS_STATUSES: tuple[str, ...] = ("200", "201")


@dataclass
class _RawOperation:
    """Dialect-specific pieces extracted from one operation object."""

    parameters: list[Parameter] = field(default_factory=list)
    body_schema: Optional[SchemaNode] = None
    response_schema: Optional[SchemaNode] = None
    parameter_schemas: list[SchemaNode] = field(default_factory=list)


Extractor: TypeAlias = Callable[[Resolver, list[dict[str, Any]], dict[str, Any]], _RawOperation]


def detect_dialect(document: JSONObject) -> Dialect:
    """Detect the dialect from the version marker.

    Anything that is not an ``openapi: 3.x`` document is read as Swagger 2.0,
    including documents carrying no version marker at all.
    """
    version = document.get("openapi")
    if isinstance(version, str) and version.strip().startswith("3."):
        return Dialect.OPENAPI3
    return Dialect.SWAGGER2


def definition_table(document: JSONObject, dialect: Dialect) -> JSONObject:
    """Return the named schema table of the dialect."""
    if dialect is Dialect.OPENAPI3:
        components = document.get("components")
        schemas = components.get("schemas") if isinstance(components, dict) else None
    else:
        schemas = document.get("definitions")
    return schemas if isinstance(schemas, dict) else {}


def normalize_document(
    document: JSONObject,
    *,
    settings: GeneratorSettings,
    aliases: CategoryAliases,
) -> ApiModel:
    """Build the version-agnostic API model of a document.

    Args:
        document (JSONObject): Parsed Swagger 2.0 or OpenAPI 3.x document.
        settings (GeneratorSettings): Naming, filtering and unwrap settings.
        aliases (CategoryAliases): Category label to group alias table.

    Returns:
        ApiModel: Operations grouped by group name and the reachable types
            grouped by module.
    """
    dialect = detect_dialect(document)
    extractor: Extractor = (
        extract_openapi3_operation if dialect is Dialect.OPENAPI3 else extract_swagger2_operation
    )
    resolver = Resolver(
        document,
        definitions=definition_table(document, dialect),
        suffixes=settings.type_name_suffix_filter,
    )

    operations: dict[str, list[Operation]] = {}
    paths = document.get("paths")
    for path, path_item in (paths.items() if isinstance(paths, dict) else ()):
        if not isinstance(path, str) or not isinstance(path_item, dict):
            continue
        shared_parameters = _parameter_list(path_item)
        for method in HTTP_METHODS:
            raw_operation = path_item.get(method)
            if not isinstance(raw_operation, dict):
                continue
            tag = first_tag(raw_operation)
            if not settings.accepts_tag(tag):
                continue
            operation = _build_operation(
                path=path,
                method=method,
                group=aliases.group_for(tag),
                raw_operation=raw_operation,
                raw=extractor(
                    resolver,
                    [*shared_parameters, *_parameter_list(raw_operation)],
                    raw_operation,
                ),
                resolver=resolver,
                settings=settings,
            )
            operations.setdefault(operation.group, []).append(operation)

    resolved = resolver.resolve_closure()
    return ApiModel(
        operations=operations,
        types=group_types_by_module(resolved),
        warnings=tuple(display_name_collisions(resolved)),
    )


def extract_swagger2_operation(
    resolver: Resolver,
    parameters: list[dict[str, Any]],
    operation: dict[str, Any],
) -> _RawOperation:
    """Read parameters, body and success response of a Swagger 2.0 operation."""
    raw = _RawOperation()
    for parameter_node in parameters:
        parameter = resolver.resolve_pointer(parameter_node)
        if parameter is None:
            continue
        location = parameter.get("in")
        if location == "body":
            body_schema = child_schema(parameter, "schema")
            if body_schema is not None:
                raw.body_schema = body_schema
            continue
        if location in ("path", "query"):
            raw.parameters.append(
                _parameter(parameter, type_source=parameter, location=str(location))
            )
            items = child_schema(parameter, "items")
            if items is not None:
                raw.parameter_schemas.append(items)

    response = _success_response(resolver, operation)
    if response is not None:
        raw.response_schema = child_schema(response, "schema")
    return raw


def extract_openapi3_operation(
    resolver: Resolver,
    parameters: list[dict[str, Any]],
    operation: dict[str, Any],
) -> _RawOperation:
    """Read parameters, request body and success response of an OpenAPI 3.x operation."""
    raw = _RawOperation()
    for parameter_node in parameters:
        parameter = resolver.resolve_pointer(parameter_node)
        if parameter is None:
            continue
        location = parameter.get("in")
        if location not in ("path", "query"):
            continue
        schema = child_schema(parameter, "schema") or {}
        raw.parameters.append(_parameter(parameter, type_source=schema, location=str(location)))
        if schema:
            raw.parameter_schemas.append(schema)

    request_body = resolver.resolve_pointer(operation.get("requestBody"))
    if request_body is not None:
        raw.body_schema = _json_media_schema(request_body)

    response = _success_response(resolver, operation)
    if response is not None:
        raw.response_schema = _json_media_schema(response)
    return raw


def _build_operation(
    *,
    path: str,
    method: str,
    group: str,
    raw_operation: dict[str, Any],
    raw: _RawOperation,
    resolver: Resolver,
    settings: GeneratorSettings,
) -> Operation:
    clean_path = clean_path_prefix(path, settings.path_prefix_filter)
    call_name = call_name_for(method, clean_path)
    type_refs: list[str] = []

    for schema in raw.parameter_schemas:
        resolver.track(schema)

    body_type_name: Optional[str] = None
    if raw.body_schema is not None:
        resolver.track(raw.body_schema)
        body_type_name, body_originals = resolver.envelope_type(raw.body_schema)
        type_refs.extend(body_originals)

    response_type_name: Optional[str] = None
    if raw.response_schema is not None:
        resolver.track(raw.response_schema)
        unwrap_field = settings.unwrap_response_field
        if unwrap_field:
            response_type_name, response_originals = resolver.unwrap_response(
                raw.response_schema, unwrap_field
            )
        else:
            response_type_name, response_originals = resolver.envelope_type(raw.response_schema)
        for original in response_originals:
            if original not in type_refs:
                type_refs.append(original)

    path_params = tuple(param for param in raw.parameters if param.location == "path")
    query_params = tuple(param for param in raw.parameters if param.location == "query")
    summary = raw_operation.get("summary")
    return Operation(
        path=path,
        clean_path=clean_path,
        method=method,
        group=group,
        call_name=call_name,
        summary=summary.strip() if isinstance(summary, str) and summary.strip() else None,
        body_type_name=body_type_name,
        params_type_name=params_type_name(call_name) if query_params else None,
        response_type_name=response_type_name,
        path_params=path_params,
        query_params=query_params,
        body_schema=raw.body_schema,
        response_schema=raw.response_schema,
        type_refs=tuple(type_refs),
    )


def _parameter_list(node: dict[str, Any]) -> list[dict[str, Any]]:
    raw = node.get("parameters")
    if not isinstance(raw, list):
        return []
    return [parameter for parameter in raw if isinstance(parameter, dict)]


def _parameter(
    parameter: dict[str, Any], *, type_source: dict[str, Any], location: str
) -> Parameter:
    name = parameter.get("name")
    type_tag = type_source.get("type")
    description = parameter.get("description")
    return Parameter(
        name=name if isinstance(name, str) else "",
        location=location,
        required=bool(parameter.get("required")),
        type_tag=type_tag if isinstance(type_tag, str) else None,
        items=child_schema(type_source, "items"),
        enum=tuple(enum_values(type_source)),
        description=description if isinstance(description, str) and description else None,
    )


def _success_response(resolver: Resolver, operation: dict[str, Any]) -> Optional[dict[str, Any]]:
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return None
    for status in _SUCCESS_STATUSES:
        response = responses.get(status)
        if response is None:
            # YAML documents may key statuses by integer.
            response = responses.get(int(status))
        if response is not None:
            return resolver.resolve_pointer(response)
    return None


def _json_media_schema(node: dict[str, Any]) -> Optional[SchemaNode]:
    content = node.get("content")
    if not isinstance(content, dict):
        return None
    for media_type in _JSON_MEDIA_TYPES:
        media = content.get(media_type)
        if isinstance(media, dict):
            schema = child_schema(media, "schema")
            if schema is not None:
                return schema
    return None
