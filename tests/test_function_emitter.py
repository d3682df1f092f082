"""Tests for request function rendering."""

from __future__ import annotations

from swagger_typegen.config import GeneratorSettings
from swagger_typegen.function_emitter import (
    AUTO_GEN_END,
    AUTO_GEN_START,
    FUNCTIONS_FILE_PREAMBLE,
    imported_type_names,
    render_function,
    render_functions_file,
    request_path,
)
from swagger_typegen.model_types import Operation, Parameter

from .fixture_helpers import SWAGGER2_FIXTURE, normalize_fixture

_USER_API_FUNCTIONS = """\
import { requestClient } from '@/utils/request'
import type { CreateUser, GetUsersParams, User } from './types'

// --- AUTO GENERATED START ---

/** List users */
export const getUsers = (params: GetUsersParams) => {
  return requestClient.get<User[]>('/users', { params })
}

/** Create user */
export const postUsers = (data: CreateUser) => {
  return requestClient.post<User>('/users', data)
}

/** Get user */
export const getUsersById = (id: number) => {
  return requestClient.get<User>(`/users/${id}`)
}

export const deleteUsersById = (id: number) => {
  return requestClient.delete<unknown>(`/users/${id}`)
}

// --- AUTO GENERATED END ---
"""


def _operation(**overrides: object) -> Operation:
    values: dict[str, object] = {
        "path": "/api/items/{id}",
        "clean_path": "/items/{id}",
        "method": "put",
        "group": "items",
        "call_name": "putItemsById",
        "body_type_name": "UpdateItem",
        "params_type_name": "PutItemsByIdParams",
        "response_type_name": "Item",
        "path_params": (Parameter(name="id", location="path"),),
    }
    values.update(overrides)
    return Operation(**values)  # type: ignore[arg-type]


def test_render_functions_file_chain_style() -> None:
    operations = normalize_fixture(SWAGGER2_FIXTURE).operations["userApi"]

    text = render_functions_file(operations, GeneratorSettings())

    assert text == FUNCTIONS_FILE_PREAMBLE + "\n" + _USER_API_FUNCTIONS


def test_chain_style_write_verb_passes_data_then_params() -> None:
    rendered = render_function(_operation(), GeneratorSettings())

    assert rendered == (
        "export const putItemsById = (id: string, data: UpdateItem, params: PutItemsByIdParams) => {\n"
        "  return requestClient.put<Item>(`/items/${id}`, data, { params })\n"
        "}"
    )


def test_chain_style_read_verb_never_passes_data() -> None:
    rendered = render_function(
        _operation(method="delete", params_type_name=None), GeneratorSettings()
    )
    assert "requestClient.delete<Item>(`/items/${id}`)" in rendered


def test_object_style() -> None:
    settings = GeneratorSettings(request_style="object", request_client="http")

    rendered = render_function(_operation(summary="Update item"), settings)

    assert rendered == (
        "/** Update item */\n"
        "export const putItemsById = (id: string, data: UpdateItem, params: PutItemsByIdParams) => {\n"
        "  return http<Item>({\n"
        "    url: `/items/${id}`,\n"
        "    method: 'put',\n"
        "    data,\n"
        "    params\n"
        "  })\n"
        "}"
    )


def test_request_path_handles_colon_params_on_word_boundary() -> None:
    operation = _operation(
        clean_path="/shops/:shop/:shopId",
        path_params=(Parameter(name="shop", location="path"), Parameter(name="shopId", location="path")),
    )
    assert request_path(operation) == "`/shops/${shop}/${shopId}`"
    assert request_path(_operation(clean_path="/items", path_params=())) == "'/items'"


def test_imports_skip_builtins_and_complex_types() -> None:
    operations = [
        _operation(response_type_name="Record<string, unknown>", params_type_name=None),
        _operation(body_type_name="string", response_type_name="Item[]", params_type_name=None),
    ]

    assert imported_type_names(operations) == ["Item", "UpdateItem"]

    nested = _operation(response_type_name="Row[][]", body_type_name=None, params_type_name=None)
    assert imported_type_names([nested]) == ["Row"]


def test_file_without_type_imports() -> None:
    operation = _operation(body_type_name=None, params_type_name=None, response_type_name=None)
    text = render_functions_file([operation], GeneratorSettings())

    assert "import type" not in text
    assert text.index(AUTO_GEN_START) < text.index("export const putItemsById") < text.index(
        AUTO_GEN_END
    )


def test_non_identifier_path_params_are_camel_cased() -> None:
    operation = _operation(
        clean_path="/users/{user-id}",
        path_params=(Parameter(name="user-id", location="path"),),
        body_type_name=None,
        params_type_name=None,
    )

    rendered = render_function(operation, GeneratorSettings())

    assert "(userId: string) =>" in rendered
    assert "requestClient.put<Item>(`/users/${userId}`)" in rendered
