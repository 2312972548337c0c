"""Tests for postmangen.compiler.request.

Covers:
- Path splitting and path-variable detection
- URL construction and path-variable resolution (literal and strict policy)
- Routing of fields into JSON body, form data and query parameters
- Body-mode selection and JSON body encoding
"""

from __future__ import annotations

import json
import logging

import pytest

from postmangen.compiler.fields import walk_fields
from postmangen.compiler.request import (
    BASE_URL_VARIABLE,
    compile_request,
    is_path_variable,
    split_path,
)
from postmangen.exceptions import BodySerializationError, InvalidSpecError
from postmangen.models import BodyMode, FormFieldKind, PathVariablePolicy

from sample_records import (
    ComplexBodyRequest,
    CreateUserRequest,
    DuplicateParamRequest,
    EmptyRequest,
    GetUserRequest,
    HiddenFieldsRequest,
    ListUsersRequest,
    MixedBodyRequest,
    OptionalTaggedRequest,
    ScalarsRequest,
    UploadPictureRequest,
    ZeroShapesRequest,
)


def _compile(method: str, path: str, record_type, defaults=None, **kwargs):
    return compile_request(method, path, walk_fields(record_type), defaults, **kwargs)


class TestSplitPath:
    @pytest.mark.parametrize("raw,expected", [
        ("/users", ["users"]),
        ("/users/:userId", ["users", ":userId"]),
        ("users/:userId/", ["users", ":userId"]),
        ("/a//b", ["a", "b"]),
        ("/", []),
    ])
    def test_split_path(self, raw: str, expected: list[str]) -> None:
        assert split_path(raw) == expected

    def test_is_path_variable(self) -> None:
        assert is_path_variable(":userId")
        assert not is_path_variable("users")
        assert not is_path_variable(":")


class TestURL:
    def test_path_variable_from_param_field(self) -> None:
        request = _compile("GET", "/users/:userId", GetUserRequest)
        url = request.url
        assert url.path == ["users", ":userId"]
        assert url.raw == f"{BASE_URL_VARIABLE}/users/:userId"
        assert url.host == [BASE_URL_VARIABLE]
        assert len(url.variable) == 1
        assert url.variable[0].key == "userId"
        assert url.variable[0].value == "user-abc-123"
        assert url.variable[0].description == "User identifier"

    def test_query_parameters(self) -> None:
        request = _compile("GET", "/users/:userId", GetUserRequest)
        assert [(q.key, q.value, q.description) for q in request.url.query] == [
            ("format", "full", "Response format"),
        ]

    def test_name_is_last_segment(self) -> None:
        assert _compile("GET", "/users/:userId", GetUserRequest).name == ":userId"
        assert _compile("POST", "/users", CreateUserRequest).name == "users"

    def test_root_path(self) -> None:
        request = _compile("GET", "/", EmptyRequest)
        assert request.name == "/"
        assert request.url.path == []
        assert request.url.raw == f"{BASE_URL_VARIABLE}/"

    def test_method_used_as_given(self) -> None:
        assert _compile("purge", "/cache", EmptyRequest).method == "purge"

    def test_unmatched_variable_literal_policy(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="postmangen.compiler.request"):
            request = _compile("GET", "/teams/:teamId", EmptyRequest)
        assert request.url.variable[0].key == "teamId"
        assert request.url.variable[0].value == ":teamId"
        assert "teamId" in caplog.text

    def test_unmatched_variable_strict_policy(self) -> None:
        with pytest.raises(InvalidSpecError, match="teamId"):
            _compile(
                "GET", "/teams/:teamId", EmptyRequest,
                unmatched_path_variable=PathVariablePolicy.ERROR,
            )

    def test_first_param_declaration_wins(self) -> None:
        request = _compile("GET", "/items/:id", DuplicateParamRequest)
        assert request.url.variable[0].value == "first"

    def test_blank_method_rejected(self) -> None:
        with pytest.raises(InvalidSpecError):
            _compile("  ", "/users", EmptyRequest)

    def test_blank_path_rejected(self) -> None:
        with pytest.raises(InvalidSpecError):
            _compile("GET", "", EmptyRequest)


class TestJSONBody:
    def test_json_body(self) -> None:
        request = _compile("POST", "/users", CreateUserRequest, {"tenant_id": "default-tenant-001"})
        assert request.body_mode is BodyMode.RAW
        assert request.header[0].key == "Content-Type"
        assert request.header[0].value == "application/json"
        assert request.body.options == {"raw": {"language": "json"}}
        body = json.loads(request.body.raw)
        assert body == {
            "username": "johndoe",
            "email": "john@example.com",
            "age": 0,
            "active": False,
            "tenant_id": "default-tenant-001",
        }

    def test_json_keys_keep_declaration_order(self) -> None:
        request = _compile("POST", "/users", CreateUserRequest)
        assert list(json.loads(request.body.raw)) == [
            "username", "email", "age", "active", "tenant_id",
        ]

    def test_body_is_indented(self) -> None:
        request = _compile("POST", "/users", CreateUserRequest)
        assert request.body.raw.startswith('{\n  "username"')

    def test_native_vs_string_zeros(self) -> None:
        request = _compile("GET", "/stats", ScalarsRequest)
        assert request.json_fields == {"count": 0, "enabled": False, "ratio": 0.0, "name": ""}
        assert {q.key: q.value for q in request.url.query} == {"count": "0", "enabled": "false"}

    def test_float_zero_renders_without_fraction(self) -> None:
        request = _compile("GET", "/stats", ScalarsRequest)
        assert '"ratio": 0,' in request.body.raw

    def test_optional_annotated_fields_are_routed(self) -> None:
        request = _compile("GET", "/owners", OptionalTaggedRequest)
        assert [(q.key, q.value) for q in request.url.query] == [("name", ""), ("limit", "0")]
        assert request.url.query[0].description == "Display name"
        assert request.json_fields == {"owner": {"street": "", "zip": 0}}

    def test_zero_shapes(self) -> None:
        request = _compile("POST", "/shapes", ZeroShapesRequest)
        body = json.loads(request.body.raw)
        assert body["tags"] == [""]
        assert body["scores"] == [0]
        assert body["labels"] == {}
        assert body["address"] == {"street": "", "zip": 0}
        assert body["maybe"] == 0
        assert body["created"] == "0001-01-01T00:00:00Z"
        assert body["ident"] == "00000000-0000-0000-0000-000000000000"
        assert body["role"] == "admin"
        assert body["kind"] == "a"
        assert body["anything"] is None
        query = {q.key: q.value for q in request.url.query}
        assert query == {"tags": '[""]', "address": '{"street":"","zip":0}'}

    def test_hidden_and_untagged_fields_ignored(self) -> None:
        request = _compile("POST", "/hidden", HiddenFieldsRequest)
        assert request.json_fields == {"visible": "yes"}

    def test_unencodable_body(self) -> None:
        with pytest.raises(BodySerializationError):
            _compile("POST", "/complex", ComplexBodyRequest)


class TestFormBody:
    def test_form_file_and_text(self) -> None:
        request = _compile("POST", "/users/:userId/picture", UploadPictureRequest)
        assert request.body_mode is BodyMode.FORMDATA
        assert request.header[0].value == "multipart/form-data"
        form = request.body.formdata
        assert [(p.key, p.type, p.value) for p in form] == [
            ("picture", FormFieldKind.FILE, ""),
            ("caption", FormFieldKind.TEXT, "Holiday"),
        ]
        assert form[0].description == "Image file"
        assert request.body.raw is None

    def test_form_wins_over_json(self) -> None:
        request = _compile("POST", "/mixed", MixedBodyRequest)
        assert request.body_mode is BodyMode.FORMDATA
        assert request.body.raw is None
        assert [p.key for p in request.body.formdata] == ["title"]

    def test_no_body_without_json_or_form(self) -> None:
        request = _compile("GET", "/users", ListUsersRequest)
        assert request.body is None
        assert request.header == []
        assert "body" not in request.to_postman()

    def test_embedded_query_parameters(self) -> None:
        request = _compile("GET", "/users", ListUsersRequest)
        assert [(q.key, q.value) for q in request.url.query] == [
            ("q", ""),
            ("page", "1"),
            ("per_page", "20"),
            ("sort", "name"),
        ]


class TestToPostman:
    def test_shape(self) -> None:
        request = _compile("GET", "/users/:userId", GetUserRequest)
        data = request.to_postman()
        assert set(data) == {"method", "url", "header"}
        assert data["method"] == "GET"
        assert data["url"]["variable"] == [{
            "key": "userId",
            "value": "user-abc-123",
            "type": "string",
            "description": "User identifier",
        }]
