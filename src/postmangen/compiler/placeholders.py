"""Placeholder resolution and zero-value synthesis.

Every routed field needs a literal to show in the generated request. The
value is chosen by :func:`resolve_placeholder` in this order:

1. the field's ``example`` tag, verbatim;
2. a caller default registered under one of the field's keys, looked up as
   json, form, form_file, query, param (first hit wins, whatever roles the
   field actually uses);
3. nothing, in which case the compiler asks :func:`zero_value` for a
   type-appropriate stand-in.

:func:`zero_value` has two flavours. The JSON body keeps native JSON types
(``prefer_string=False``); string-rendered slots (query, path variable,
form) ask for ``prefer_string=True`` so records come back as JSON text, then
run the result through :func:`stringify`.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import json
import typing
import uuid
from typing import Any, Mapping, Optional

from postmangen.compiler.fields import (
    FieldDescriptor,
    TypeDescriptor,
    TypeKind,
    walk_fields,
)
from postmangen.compiler.tags import ROLES, SENTINEL, is_set

_NIL_UUID = str(uuid.UUID(int=0))

# Checked in order; ``bool`` must precede ``int`` and ``datetime`` must
# precede ``date``.
_SCALAR_ZEROS: tuple[tuple[type, Any], ...] = (
    (bool, False),
    (int, 0),
    (float, 0),
    (complex, 0j),
    (decimal.Decimal, 0),
    (str, ""),
    (bytes, ""),
    (bytearray, ""),
    (datetime.datetime, "0001-01-01T00:00:00Z"),
    (datetime.date, "0001-01-01"),
    (datetime.time, "00:00:00"),
    (datetime.timedelta, 0),
    (uuid.UUID, _NIL_UUID),
)


def resolve_placeholder(
    field: FieldDescriptor,
    defaults: Mapping[str, Any],
) -> Optional[Any]:
    """Return the explicit or default placeholder for *field*, or ``None``.

    Args:
        field: The classified field.
        defaults: Caller-registered defaults, matched by exact key.

    Returns:
        The ``example`` tag when set, else the first caller default found
        under the field's json, form, form_file, query or param key, else
        ``None``.
    """
    if is_set(field.example):
        return field.example
    for role in ROLES:
        key = field.key(role)
        if key in defaults:
            return defaults[key]
    return None


def is_resolved(value: Any) -> bool:  # noqa: ANN401
    """Return ``False`` for "no placeholder": ``None``, ``""`` or ``"-"``."""
    if value is None:
        return False
    return not (isinstance(value, str) and value in ("", SENTINEL))


def zero_value(field_type: Any, prefer_string: bool = False) -> Any:  # noqa: ANN401
    """Synthesize a stand-in value for *field_type*.

    * Optional types unwrap one level.
    * Records with *prefer_string* become the compact JSON text of their
      zero-valued instance.
    * Sequences become a one-element list holding the element's zero
      value, so readers see "array of X" rather than an empty list.
    * Everything else gets its natural zero value (see :func:`natural_zero`).

    Args:
        field_type: A :class:`~postmangen.compiler.fields.TypeDescriptor`
            or a raw annotation.
        prefer_string: Render records as JSON text.
    """
    descriptor = (
        field_type
        if isinstance(field_type, TypeDescriptor)
        else TypeDescriptor.of(field_type)
    )
    if descriptor.kind is TypeKind.POINTER:
        return zero_value(descriptor.target, prefer_string)
    if descriptor.kind is TypeKind.RECORD and prefer_string:
        return json.dumps(natural_zero(descriptor), separators=(",", ":"), default=str)
    if descriptor.kind is TypeKind.SEQUENCE:
        return [zero_value(descriptor.element, prefer_string)]
    return natural_zero(descriptor)


def natural_zero(descriptor: TypeDescriptor, _active: frozenset[Any] = frozenset()) -> Any:  # noqa: ANN401
    """Return the plain zero value of *descriptor*.

    Optional fields are ``None``, sequences ``[]``, mappings ``{}``. A
    record becomes a dict keyed by each field's JSON key (fields tagged
    ``json="-"`` are left out) holding the fields' own natural zeros; a record
    nested inside itself is ``None``.
    """
    kind = descriptor.kind
    if kind is TypeKind.ANY or kind is TypeKind.POINTER:
        return None
    if kind is TypeKind.SEQUENCE:
        return []
    if kind is TypeKind.MAPPING:
        return {}
    if kind is TypeKind.RECORD:
        record = descriptor.annotation
        if record in _active:
            return None
        active = _active | {record}
        return {
            field.key("json"): natural_zero(field.field_type, active)
            for field in walk_fields(record)
            if field.tags.json != SENTINEL
        }
    return _scalar_zero(descriptor.annotation)


def _scalar_zero(annotation: Any) -> Any:  # noqa: ANN401
    if typing.get_origin(annotation) is typing.Literal:
        return typing.get_args(annotation)[0]
    if not isinstance(annotation, type):
        return None
    if issubclass(annotation, enum.Enum):
        first = next(iter(annotation), None)
        return first.value if first is not None else None
    for scalar, zero in _SCALAR_ZEROS:
        if issubclass(annotation, scalar):
            return zero
    return None


def stringify(value: Any) -> str:  # noqa: ANN401
    """Render a placeholder for a string-valued slot.

    Strings pass through, booleans become ``true``/``false``, ``None``
    becomes ``""``, integral floats drop their ``.0`` and lists/dicts
    become compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return stringify(value.value)
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)
