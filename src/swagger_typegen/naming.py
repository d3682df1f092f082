"""Naming helpers for call names, type names, paths and group directories."""

from __future__ import annotations

import re
from collections.abc import Iterable

HTTP_METHODS: tuple[str, ...] = (
    "get",
    "post",
    "put",
    "delete",
    "patch",
    "options",
    "head",
)

_SEPARATOR_RE = re.compile(r"[-_](.)")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_NON_IDENTIFIER_CHAR_RE = re.compile(r"[^A-Za-z0-9_$]+")
_BRACED_PARAM_RE = re.compile(r"\{([^}]+)\}")
_COLON_PARAM_RE = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def to_camel_case(raw: str) -> str:
    """Convert ``pos-devices`` or ``pos_devices`` into ``posDevices``."""
    text = _SEPARATOR_RE.sub(lambda match: match.group(1).upper(), raw)
    return text[:1].lower() + text[1:]


def to_pascal_case(raw: str) -> str:
    """Convert ``pos-devices`` or ``pos_devices`` into ``PosDevices``."""
    camel = to_camel_case(raw)
    return camel[:1].upper() + camel[1:]


def is_valid_identifier(name: str) -> bool:
    """Return whether ``name`` can be used as a bare TypeScript identifier."""
    return bool(_IDENTIFIER_RE.match(name))


def param_identifier(name: str) -> str:
    """Turn a path parameter name into a TypeScript identifier (``user-id`` -> ``userId``)."""
    if is_valid_identifier(name):
        return name
    identifier = _NON_IDENTIFIER_CHAR_RE.sub("_", to_camel_case(name))
    return identifier if is_valid_identifier(identifier) else f"_{identifier}"


def format_property_name(name: str) -> str:
    """Quote property names that are not valid bare identifiers."""
    if is_valid_identifier(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def remove_type_suffix(name: str, suffixes: Iterable[str]) -> str:
    """Strip the first matching suffix, never leaving an empty name.

    Args:
        name (str): PascalCase type name.
        suffixes (Iterable[str]): Suffixes to try, in configured order.

    Returns:
        str: ``CreateOrderRequest`` becomes ``CreateOrder`` for ``Request``.
    """
    for suffix in suffixes:
        if suffix and name.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def clean_type_name(original_name: str, suffixes: Iterable[str] = ()) -> str:
    """Derive the display name of a dialect-qualified type name.

    ``request.DeviceLoginRequest`` becomes ``DeviceLogin`` when ``Request`` is
    a configured suffix: the package qualifier is dropped, the rest is
    PascalCased and the suffix removed.
    """
    last_part = original_name.split(".")[-1]
    return remove_type_suffix(to_pascal_case(last_part), suffixes)


def module_from_type_name(original_name: str) -> str:
    """Return the module of a type: its qualifier before the first ``.``."""
    parts = original_name.split(".")
    if len(parts) > 1 and parts[0]:
        return to_camel_case(parts[0])
    return "common"


def clean_path_prefix(path: str, prefixes: Iterable[str]) -> str:
    """Strip the longest configured prefix that matches a whole path segment.

    Args:
        path (str): Raw path from the API description.
        prefixes (Iterable[str]): Candidate prefixes in any order.

    Returns:
        str: Path without the prefix, always starting with ``/``.
    """
    for prefix in sorted(prefixes, key=len, reverse=True):
        bare = prefix.rstrip("/")
        if not bare:
            continue
        if path == bare or path.startswith(f"{bare}/"):
            result = path[len(bare) :]
            return result if result.startswith("/") else f"/{result}"
    return path


def call_name_for(method: str, path: str) -> str:
    """Create the request function name from verb and cleaned path.

    ``GET /orders/{id}/items/{itemId}`` becomes ``getOrdersByIdItemsByItemId``;
    Express-style ``:id`` segments are handled the same way.
    """
    processed = _BRACED_PARAM_RE.sub(lambda match: f"/By{to_pascal_case(match.group(1))}", path)
    processed = _COLON_PARAM_RE.sub(lambda match: f"/By{to_pascal_case(match.group(1))}", processed)
    joined = "".join(to_pascal_case(part) for part in processed.split("/") if part)
    return _NON_IDENTIFIER_CHAR_RE.sub("", method.lower() + joined)


def params_type_name(call_name: str) -> str:
    """Return the name of the dedicated query-parameters type."""
    return f"{to_pascal_case(call_name)}Params"


def group_directory_name(alias: str) -> str:
    """Turn a category alias into a group directory name (``SysApi`` -> ``sysApi``)."""
    return to_camel_case(alias)
