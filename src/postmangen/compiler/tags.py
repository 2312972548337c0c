"""Routing metadata attached to record fields.

A request shape is an ordinary record type whose fields carry a
:class:`RouteTags` value saying where in the generated request the field
goes::

    from dataclasses import dataclass
    from typing import Annotated

    from postmangen import route


    @dataclass
    class GetUserRequest:
        user_id: Annotated[str, route(param="userId", example="user-abc-123")]
        format: Annotated[str, route(query="format", description="Response format")]

Five roles are recognised: ``json`` (JSON body), ``form`` (multipart text
field), ``form_file`` (multipart file field), ``query`` (query string) and
``param`` (path variable). A role is *present* when its tag is neither empty
nor the sentinel ``"-"``. ``description`` and ``example`` are display
metadata.

Fields marked with :class:`Embedded` have their own record fields inlined
into the parent, in place.
"""

from __future__ import annotations

from dataclasses import dataclass

SENTINEL = "-"
"""Tag value meaning "explicitly unset"."""

ROLES: tuple[str, ...] = ("json", "form", "form_file", "query", "param")
"""Routing roles, in the order caller defaults are looked up."""


def is_set(tag: str) -> bool:
    """Return ``True`` if *tag* is neither empty nor the ``"-"`` sentinel."""
    return tag != "" and tag != SENTINEL


@dataclass(frozen=True)
class RouteTags:
    """Per-field routing metadata.

    Attributes:
        json: JSON body key. Go-style options after a comma
            (``"name,omitempty"``) are accepted and ignored.
        form: Multipart text field key.
        form_file: Multipart file field key.
        query: Query parameter key.
        param: Path variable name (matches a ``:name`` path segment).
        description: Human description carried into query parameters, path
            variables and form fields.
        example: Literal placeholder value; wins over caller defaults.
    """

    json: str = ""
    form: str = ""
    form_file: str = ""
    query: str = ""
    param: str = ""
    description: str = ""
    example: str = ""

    def has(self, role: str) -> bool:
        """Return ``True`` if *role* is present on this field."""
        return is_set(getattr(self, role))

    def key(self, role: str, default: str) -> str:
        """Return the key *role* maps this field to.

        Falls back to *default* (the declared field name) when the tag is
        empty or ``"-"``, whether or not the role is present.
        """
        value = getattr(self, role)
        if role == "json":
            value = value.split(",", 1)[0]
        return value if is_set(value) else default

    @property
    def roles(self) -> tuple[str, ...]:
        """Present roles, in :data:`ROLES` order."""
        return tuple(role for role in ROLES if self.has(role))


def route(
    *,
    json: str = "",
    form: str = "",
    form_file: str = "",
    query: str = "",
    param: str = "",
    description: str = "",
    example: str = "",
) -> RouteTags:
    """Build a :class:`RouteTags` for use in ``Annotated[...]`` or field metadata."""
    return RouteTags(
        json=json,
        form=form,
        form_file=form_file,
        query=query,
        param=param,
        description=description,
        example=example,
    )


class Embedded:
    """Marker inlining a record-typed field's own fields into its parent.

    ``Annotated[Pagination, Embedded()]`` behaves like an anonymous embedded
    struct: the ``Pagination`` fields are classified as if they were declared
    on the parent at this position. The marker is ignored on non-record types.
    """

    def __repr__(self) -> str:
        return "Embedded()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Embedded)

    def __hash__(self) -> int:
        return hash(Embedded)
