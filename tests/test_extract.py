"""Tests for reverse-parsing generated TypeScript."""

from __future__ import annotations

from swagger_typegen.extract import (
    DeclaredField,
    extract_declared_functions,
    extract_declared_types,
    generated_region,
    normalize_type_text,
)
from swagger_typegen.function_emitter import AUTO_GEN_END, AUTO_GEN_START

_TYPES_SOURCE = """\
/**
 * Header comment mentioning interface Fake { nope: string }
 */

export interface User extends Base, Audited {
  /** Identifier */
  id: number
  name?: string // trailing note
  'x-trace'?: string; inline: { a: string; b?: number }
  [key: string]: unknown
}

export type Role =
  | 'admin'
  | 'member'

type Point = { x: number; y: number }

export type Url = string;
"""


def test_extract_declared_types() -> None:
    declared = extract_declared_types(_TYPES_SOURCE)

    assert list(declared) == ["User", "Role", "Point", "Url"]

    user = declared["User"]
    assert user.kind == "interface"
    assert user.extends == ("Base", "Audited")
    assert user.fields == {
        "id": DeclaredField(type_text="number"),
        "name": DeclaredField(type_text="string", optional=True),
        "x-trace": DeclaredField(type_text="string", optional=True),
        "inline": DeclaredField(type_text="{ a: string; b?: number }"),
        "[key: string]": DeclaredField(type_text="unknown"),
    }

    assert declared["Role"].alias_text is not None
    assert normalize_type_text(declared["Role"].alias_text) == "|'admin'|'member'"
    assert declared["Point"].fields == {
        "x": DeclaredField(type_text="number"),
        "y": DeclaredField(type_text="number"),
    }
    assert declared["Url"].alias_text == "string"


def test_normalize_type_text_ignores_formatting() -> None:
    assert normalize_type_text("Record< string ,  User >") == normalize_type_text(
        "Record<string, User>"
    )
    assert normalize_type_text("{ a: string; }") == "{a:string;}"


_FUNCTIONS_SOURCE = f"""\
import {{ requestClient }} from '@/utils/request'

export const handWritten = () => {{
  return 1
}}

{AUTO_GEN_START}

/** Get user */
export const getUsersById = (id: number) => {{
  return requestClient.get<User>(`/users/${{id}}`)
}}

export const ping = () => requestClient.get<unknown>('/ping')

{AUTO_GEN_END}

export async function legacyLoad(id: string): Promise<void> {{
  if (id) {{
    await getUsersById(Number(id))
  }}
}}
"""


def test_extract_declared_functions() -> None:
    functions = extract_declared_functions(_FUNCTIONS_SOURCE)

    assert set(functions) == {"handWritten", "getUsersById", "ping", "legacyLoad"}
    assert functions["getUsersById"].endswith("`/users/${id}`)\n}")
    assert functions["ping"] == "export const ping = () => requestClient.get<unknown>('/ping')"
    assert functions["legacyLoad"].endswith("}\n}")


def test_generated_region() -> None:
    region = generated_region(_FUNCTIONS_SOURCE)

    assert region is not None
    assert set(extract_declared_functions(region)) == {"getUsersById", "ping"}
    assert generated_region("export const a = () => {}") is None
    assert generated_region(f"{AUTO_GEN_END}\n{AUTO_GEN_START}\n") is None
