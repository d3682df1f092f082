"""Render request functions and the partially owned ``index.ts`` of a group."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Optional

from .config import GeneratorSettings
from .model_types import Operation
from .naming import is_valid_identifier, param_identifier
from .schema_utils import primitive_type

AUTO_GEN_START = "// --- AUTO GENERATED START ---"
AUTO_GEN_END = "// --- AUTO GENERATED END ---"

FUNCTIONS_FILE_PREAMBLE = (
    "/**\n"
    " * This file is generated by swagger-typegen.\n"
    " * Generated code lives between the AUTO GENERATED markers;\n"
    " * code outside the markers is never overwritten.\n"
    " */\n"
)

READ_STYLE_METHODS = frozenset({"get", "delete", "head", "options"})

# TypeScript names that never need an import.
BUILTIN_TYPES = frozenset(
    {
        "unknown",
        "any",
        "void",
        "never",
        "string",
        "number",
        "boolean",
        "null",
        "undefined",
        "object",
        "symbol",
        "bigint",
        "Record",
        "Partial",
        "Required",
        "Readonly",
        "Pick",
        "Omit",
        "Array",
    }
)


def marker_bounds(text: str) -> Optional[tuple[int, int]]:
    """Return the span from the start marker through the end marker, or ``None``.

    Markers are usable only when both are present and in order.
    """
    start = text.find(AUTO_GEN_START)
    end = text.find(AUTO_GEN_END)
    if start == -1 or end == -1 or end < start:
        return None
    return start, end + len(AUTO_GEN_END)


def function_parameters(operation: Operation) -> list[str]:
    """Return the signature entries: path parameters, then ``data``, then ``params``."""
    parameters = [
        f"{param_identifier(param.name)}: {primitive_type(param.type_tag) or 'string'}"
        for param in operation.path_params
    ]
    if operation.body_type_name:
        parameters.append(f"data: {operation.body_type_name}")
    if operation.params_type_name:
        parameters.append(f"params: {operation.params_type_name}")
    return parameters


def request_path(operation: Operation) -> str:
    """Render the request path, interpolating every path parameter."""
    path = operation.clean_path
    for param in operation.path_params:
        interpolation = f"${{{param_identifier(param.name)}}}"
        path = path.replace(f"{{{param.name}}}", interpolation)
        path = re.sub(
            rf":{re.escape(param.name)}(?![A-Za-z0-9_])",
            lambda _match, value=interpolation: value,
            path,
        )
    if operation.path_params:
        return f"`{path}`"
    return f"'{path}'"


def render_function(operation: Operation, settings: GeneratorSettings) -> str:
    """Render one exported request function.

    Args:
        operation (Operation): Operation to render.
        settings (GeneratorSettings): Call convention and client symbol.

    Returns:
        str: ``export const getUsers = (params: GetUsersParams) => { ... }``.
    """
    lines: list[str] = []
    if operation.summary:
        lines.append(f"/** {' '.join(operation.summary.split())} */")

    signature = ", ".join(function_parameters(operation))
    response_type = operation.response_type_name or "unknown"
    method = operation.method.lower()
    client = settings.request_client
    path = request_path(operation)

    lines.append(f"export const {operation.call_name} = ({signature}) => {{")
    if settings.request_style == "chain":
        arguments = [path]
        if method not in READ_STYLE_METHODS and operation.body_type_name:
            arguments.append("data")
        if operation.params_type_name:
            arguments.append("{ params }")
        lines.append(f"  return {client}.{method}<{response_type}>({', '.join(arguments)})")
    else:
        entries = [f"    url: {path}", f"    method: '{method}'"]
        if operation.body_type_name:
            entries.append("    data")
        if operation.params_type_name:
            entries.append("    params")
        lines.append(f"  return {client}<{response_type}>({{")
        lines.append(",\n".join(entries))
        lines.append("  })")
    lines.append("}")
    return "\n".join(lines)


def imported_type_names(operations: Iterable[Operation]) -> list[str]:
    """Collect the sorted type names the functions of a group reference."""
    names: set[str] = set()
    for operation in operations:
        for type_name in (
            operation.params_type_name,
            operation.body_type_name,
            operation.response_type_name,
        ):
            if not type_name:
                continue
            base_name = type_name
            while base_name.endswith("[]"):
                base_name = base_name.removesuffix("[]")
            if is_valid_identifier(base_name) and base_name not in BUILTIN_TYPES:
                names.add(base_name)
    return sorted(names)


def render_imports(
    operations: Iterable[Operation], settings: GeneratorSettings, types_import: str = "./types"
) -> str:
    lines = [f"import {{ {settings.request_client} }} from '{settings.request_import}'"]
    type_names = imported_type_names(operations)
    if type_names:
        lines.append(f"import type {{ {', '.join(type_names)} }} from '{types_import}'")
    return "\n".join(lines)


def render_functions_file(
    operations: Iterable[Operation], settings: GeneratorSettings, types_import: str = "./types"
) -> str:
    """Render the complete ``index.ts`` of one group.

    The file consists of the fixed preamble, the client and type imports and
    the marked region holding every function in operation order.
    """
    operations = list(operations)
    lines = [FUNCTIONS_FILE_PREAMBLE, render_imports(operations, settings, types_import), ""]
    lines.append(AUTO_GEN_START)
    lines.append("")
    for operation in operations:
        lines.append(render_function(operation, settings))
        lines.append("")
    lines.append(AUTO_GEN_END)
    lines.append("")
    return "\n".join(lines)
