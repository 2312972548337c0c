"""Tests for postmangen.compiler.placeholders.

Covers:
- Placeholder precedence: example tag, then caller defaults in role order
- Zero-value synthesis for JSON (native) and string slots
- stringify rendering of scalars, None and containers
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from typing import Any, Optional

import pytest

from postmangen.compiler.fields import FieldDescriptor, TypeDescriptor, walk_fields
from postmangen.compiler.placeholders import (
    is_resolved,
    natural_zero,
    resolve_placeholder,
    stringify,
    zero_value,
)
from postmangen.compiler.tags import route

from sample_records import Address, Node, Role


def _field(name: str = "field", annotation: Any = str, **tags: str) -> FieldDescriptor:
    return FieldDescriptor(name=name, tags=route(**tags), field_type=TypeDescriptor.of(annotation))


class TestResolvePlaceholder:
    def test_example_wins_over_defaults(self) -> None:
        field = _field(json="tenant_id", example="explicit")
        assert resolve_placeholder(field, {"tenant_id": "default"}) == "explicit"

    def test_default_matched_by_json_key(self) -> None:
        field = _field(json="tenant_id")
        assert resolve_placeholder(field, {"tenant_id": "default-tenant-001"}) == "default-tenant-001"

    def test_lookup_order_json_before_query(self) -> None:
        field = _field(json="a", query="b")
        assert resolve_placeholder(field, {"a": "from-json", "b": "from-query"}) == "from-json"

    def test_lookup_order_form_before_param(self) -> None:
        field = _field(form="f", param="p")
        assert resolve_placeholder(field, {"p": "from-param", "f": "from-form"}) == "from-form"

    def test_default_matched_by_declared_name(self) -> None:
        # Unset roles fall back to the field name, so the name itself is looked up.
        field = _field(name="tenant", query="t")
        assert resolve_placeholder(field, {"tenant": "by-name"}) == "by-name"

    def test_no_match_returns_none(self) -> None:
        assert resolve_placeholder(_field(json="x"), {"other": "v"}) is None

    def test_sentinel_example_is_ignored(self) -> None:
        field = _field(json="x", example="-")
        assert resolve_placeholder(field, {"x": "dflt"}) == "dflt"


class TestIsResolved:
    @pytest.mark.parametrize("value,expected", [
        (None, False),
        ("", False),
        ("-", False),
        ("x", True),
        (0, True),
        (False, True),
    ])
    def test_is_resolved(self, value: Any, expected: bool) -> None:
        assert is_resolved(value) is expected


class TestZeroValue:
    @pytest.mark.parametrize("annotation,expected", [
        (int, 0),
        (bool, False),
        (float, 0.0),
        (str, ""),
        (decimal.Decimal, 0),
        (bytes, ""),
        (datetime.datetime, "0001-01-01T00:00:00Z"),
        (datetime.date, "0001-01-01"),
        (uuid.UUID, "00000000-0000-0000-0000-000000000000"),
        (Role, "admin"),
        (Any, None),
    ])
    def test_native_zero(self, annotation: Any, expected: Any) -> None:
        assert zero_value(annotation) == expected

    def test_bool_zero_is_bool(self) -> None:
        assert zero_value(bool) is False

    def test_optional_unwraps_one_level(self) -> None:
        assert zero_value(Optional[int]) == 0

    def test_sequence_gets_one_element(self) -> None:
        assert zero_value(list[int]) == [0]
        assert zero_value(list[str]) == [""]

    def test_mapping_is_empty(self) -> None:
        assert zero_value(dict[str, int]) == {}

    def test_record_natural_zero(self) -> None:
        assert zero_value(Address) == {"street": "", "zip": 0}

    def test_record_prefer_string_is_compact_json(self) -> None:
        assert zero_value(Address, prefer_string=True) == '{"street":"","zip":0}'

    def test_sequence_of_records_prefer_string(self) -> None:
        assert zero_value(list[Address], prefer_string=True) == ['{"street":"","zip":0}']

    def test_accepts_descriptor(self) -> None:
        assert zero_value(TypeDescriptor.of(int)) == 0


class TestNaturalZero:
    def test_self_referential_record(self) -> None:
        assert natural_zero(TypeDescriptor.of(Node)) == {"value": 0, "child": None}

    def test_nested_sequence_inside_record_is_empty(self) -> None:
        from sample_records import ZeroShapesRequest

        zero = natural_zero(TypeDescriptor.of(ZeroShapesRequest))
        assert zero["tags"] == []
        assert zero["labels"] == {}
        assert zero["maybe"] is None
        assert zero["address"] == {"street": "", "zip": 0}

    def test_json_sentinel_fields_left_out(self) -> None:
        from sample_records import HiddenFieldsRequest

        zero = natural_zero(TypeDescriptor.of(HiddenFieldsRequest))
        assert zero == {"visible": "", "untagged": ""}


class TestStringify:
    @pytest.mark.parametrize("value,expected", [
        ("text", "text"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (1.5, "1.5"),
        (2.0, "2"),
        (0.0, "0"),
        (None, ""),
        ([""], '[""]'),
        ([0, 1], "[0,1]"),
        ({"a": 1}, '{"a":1}'),
        (Role.MEMBER, "member"),
    ])
    def test_stringify(self, value: Any, expected: str) -> None:
        assert stringify(value) == expected

    def test_walked_field_round_trip(self) -> None:
        field = next(iter(walk_fields(Address)))
        assert stringify(zero_value(field.field_type, prefer_string=True)) == ""
