"""Reverse-parse previously generated TypeScript for change detection.

Only the shapes the emitters produce (and their close hand-edited
variants) are understood: ``interface``/``type`` declarations with their
members, and ``export const``/``export function`` request functions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from .function_emitter import AUTO_GEN_END, AUTO_GEN_START, marker_bounds

_COMMENT_RE = re.compile(
    r"""('(?:\\.|[^'\\\n])*'|"(?:\\.|[^"\\\n])*"|`(?:\\.|[^`\\])*`)|/\*.*?\*/|//[^\n]*""",
    re.DOTALL,
)
_DECLARATION_RE = re.compile(
    r"(?m)^[ \t]*(?:export\s+)?(interface|type)\s+([A-Za-z_$][\w$]*)\s*(?:<[^>{=]*>)?\s*"
)
_EXTENDS_RE = re.compile(r"extends\s+([^{]+?)\s*\{")
_MEMBER_RE = re.compile(
    r"""^\s*(\[[^\]]+\]|'[^']*'|"[^"]*"|[A-Za-z_$][\w$]*)(\?)?\s*:\s*(.+?)[;,]?\s*$""",
    re.DOTALL,
)
_ARROW_FUNCTION_RE = re.compile(r"(?m)^[ \t]*export\s+const\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s*)?\(")
_FUNCTION_RE = re.compile(
    r"(?m)^[ \t]*export\s+(?:async\s+)?function\s+([A-Za-z_$][\w$]*)\s*(?:<[^>(]*>)?\s*\("
)

_OPENERS = {"{": "}", "(": ")", "[": "]"}
_QUOTES = ("'", '"', "`")


@dataclass(frozen=True)
class DeclaredField:
    """One member of a declared object type."""

    type_text: str
    optional: bool = False


@dataclass(frozen=True)
class DeclaredType:
    """A type declaration recovered from TypeScript source.

    ``alias_text`` holds the right-hand side of a ``type`` alias that has no
    object body; ``fields`` is empty for such aliases.
    """

    name: str
    kind: str
    fields: dict[str, DeclaredField] = field(default_factory=dict)
    extends: tuple[str, ...] = ()
    alias_text: Optional[str] = None


def strip_comments(text: str) -> str:
    """Remove line and block comments, leaving string literals intact."""
    return _COMMENT_RE.sub(lambda match: match.group(1) or "", text)


def normalize_type_text(text: str) -> str:
    """Collapse whitespace so formatting differences compare equal."""
    collapsed = " ".join(text.split())
    collapsed = re.sub(r"\s*([<>\[\](){}|&,;:])\s*", r"\1", collapsed)
    return collapsed.rstrip(";,")


def extract_declared_types(text: str) -> dict[str, DeclaredType]:
    """Recover every ``interface`` and ``type`` declaration of a file.

    Args:
        text (str): TypeScript source, typically a generated ``types.ts``.

    Returns:
        dict[str, DeclaredType]: Declarations by name, in source order; a
            later declaration with the same name replaces an earlier one.
    """
    source = strip_comments(text)
    declared: dict[str, DeclaredType] = {}
    position = 0
    while True:
        match = _DECLARATION_RE.search(source, position)
        if match is None:
            break
        kind, name = match.group(1), match.group(2)
        if kind == "interface":
            declaration, position = _interface(source, match.end(), name)
        else:
            declaration, position = _alias(source, match.end(), name)
        if declaration is not None:
            declared[name] = declaration
        position = max(position, match.end())
    return declared


def _interface(source: str, start: int, name: str) -> tuple[Optional[DeclaredType], int]:
    open_index = source.find("{", start)
    if open_index == -1:
        return None, start
    extends: tuple[str, ...] = ()
    extends_match = _EXTENDS_RE.match(source, start, open_index + 1)
    if extends_match is not None:
        extends = tuple(
            part.strip() for part in _split_top_level(extends_match.group(1), ",") if part.strip()
        )
    close_index = matching_close(source, open_index)
    if close_index == -1:
        return None, open_index + 1
    body = source[open_index + 1 : close_index]
    return (
        DeclaredType(name=name, kind="interface", fields=parse_members(body), extends=extends),
        close_index + 1,
    )


def _alias(source: str, start: int, name: str) -> tuple[Optional[DeclaredType], int]:
    if not source.startswith("=", start):
        return None, start
    end = _statement_end(source, start + 1)
    alias_text = source[start + 1 : end].strip().rstrip(";").strip()
    if alias_text.startswith("{"):
        close_index = matching_close(alias_text, 0)
        if close_index == len(alias_text) - 1:
            return (
                DeclaredType(name=name, kind="type", fields=parse_members(alias_text[1:-1])),
                end,
            )
    return DeclaredType(name=name, kind="type", alias_text=alias_text), end


def parse_members(body: str) -> dict[str, DeclaredField]:
    """Parse object members separated by newlines or top-level semicolons."""
    members: dict[str, DeclaredField] = {}
    for chunk in _split_top_level(body, ";\n"):
        match = _MEMBER_RE.match(chunk)
        if match is None:
            continue
        raw_name, optional, type_text = match.groups()
        members[_unquote(raw_name)] = DeclaredField(
            type_text=" ".join(type_text.split()), optional=bool(optional)
        )
    return members


def extract_declared_functions(text: str) -> dict[str, str]:
    """Recover every exported function of a file as ``name -> source``."""
    source = strip_comments(text)
    functions: dict[str, str] = {}
    for match in _ARROW_FUNCTION_RE.finditer(source):
        end = _arrow_function_end(source, match.end() - 1)
        if end != -1:
            functions[match.group(1)] = source[match.start() : end].strip()
    for match in _FUNCTION_RE.finditer(source):
        params_close = matching_close(source, match.end() - 1)
        body_open = source.find("{", params_close) if params_close != -1 else -1
        body_close = matching_close(source, body_open) if body_open != -1 else -1
        if body_close != -1:
            functions[match.group(1)] = source[match.start() : body_close + 1].strip()
    return functions


def generated_region(text: str) -> Optional[str]:
    """Return the text between the markers, or ``None`` when they are unusable."""
    bounds = marker_bounds(text)
    if bounds is None:
        return None
    start, end = bounds
    return text[start + len(AUTO_GEN_START) : end - len(AUTO_GEN_END)]


def matching_close(text: str, open_index: int) -> int:
    """Return the index of the bracket closing ``text[open_index]``, or ``-1``.

    Brackets inside string and template literals are ignored.
    """
    stack: list[str] = []
    index = open_index
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            index = _skip_literal(text, index)
            continue
        if char in _OPENERS:
            stack.append(_OPENERS[char])
        elif stack and char == stack[-1]:
            stack.pop()
            if not stack:
                return index
        index += 1
    return -1


def _arrow_function_end(source: str, params_open: int) -> int:
    params_close = matching_close(source, params_open)
    if params_close == -1:
        return -1
    arrow = source.find("=>", params_close)
    if arrow == -1:
        return -1
    body_start = arrow + 2
    while body_start < len(source) and source[body_start].isspace():
        body_start += 1
    if source.startswith("{", body_start):
        body_close = matching_close(source, body_start)
        return body_close + 1 if body_close != -1 else -1
    return _statement_end(source, body_start)


def _statement_end(text: str, start: int) -> int:
    """Find the end of a statement: a top-level newline or semicolon."""
    depth = 0
    index = start
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            index = _skip_literal(text, index)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _OPENERS.values():
            depth -= 1
        elif depth <= 0 and char == ";":
            return index + 1
        elif depth <= 0 and char == "\n" and text[start:index].strip():
            # Leading-operator continuation lines belong to the same union.
            if not text[index:].lstrip().startswith(("|", "&")):
                return index
        index += 1
    return len(text)


def _split_top_level(text: str, separators: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char in _QUOTES:
            end = _skip_literal(text, index)
            current.append(text[index:end])
            index = end
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _OPENERS.values():
            depth -= 1
        if depth <= 0 and char in separators:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    parts.append("".join(current))
    return [part for part in parts if part.strip()]


def _skip_literal(text: str, start: int) -> int:
    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1
        if char == "\n" and quote != "`":
            return index
        index += 1
    return len(text)


def _unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ("'", '"'):
        return name[1:-1].replace("\\'", "'").replace("\\\\", "\\")
    return name
