"""Canonical Pydantic models shared across all postmangen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- loaded from ``postmangen.json`` / ``postmangen.yaml``
and the environment:
    :class:`SchemaVersion`, :class:`PathVariablePolicy` and
    :class:`GeneratorConfig`.

**Registration models** -- the strongly typed argument of a route
registration:
    :class:`RouteSpec`.

**Compiler output models** -- produced by the request compiler and filed into
the path tree, shaped so that ``model_dump`` yields Postman Collection JSON:
    :class:`Variable`, :class:`QueryParam`, :class:`Header`,
    :class:`FormParam`, :class:`RequestBody`, :class:`RequestURL`,
    :class:`CompiledRequest` and :class:`PathTreeNode`.

Field-level introspection types (:class:`~postmangen.compiler.fields.FieldDescriptor`
and friends) hold live Python types and therefore live next to the
classifier as dataclasses, not here.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Configuration ---


class SchemaVersion(str, enum.Enum):
    """Postman Collection format versions the serializer can emit."""

    V210 = "v2.1.0"
    V200 = "v2.0.0"


class PathVariablePolicy(str, enum.Enum):
    """What to do with a ``:name`` path segment that has no ``param`` field.

    ``LITERAL`` keeps the segment text (``:name``) as the variable's display
    value, which allows pure pass-through path templating. ``ERROR`` rejects
    the registration with :class:`~postmangen.exceptions.InvalidSpecError`.
    """

    LITERAL = "literal"
    ERROR = "error"


class GeneratorConfig(BaseModel):
    """Collection-level settings for a generator run.

    Loaded by :func:`~postmangen.config.resolve_config` from a project config
    file, environment variables and CLI flags, then handed to
    :meth:`~postmangen.builder.PostmanGen.from_config`.

    Example::

        GeneratorConfig(
            name="My API",
            base_url="http://localhost:8080/api/v1",
            placeholders={"tenant_id": "default-tenant-001"},
        )
    """

    name: str = Field(default="API Collection", description="Collection name")
    description: str = Field(default="", description="Collection description")
    base_url: Optional[str] = Field(
        default=None, description="Initial value of the {{base_url}} variable"
    )
    token: Optional[str] = Field(
        default=None, description="Initial value of the {{token}} bearer variable"
    )
    variables: dict[str, str] = Field(
        default_factory=dict, description="Extra collection variables, in order"
    )
    placeholders: dict[str, str] = Field(
        default_factory=dict,
        description="Caller defaults used when a field has no example tag",
    )
    schema_version: SchemaVersion = Field(
        default=SchemaVersion.V210, description="Postman Collection format to emit"
    )
    unmatched_path_variable: PathVariablePolicy = Field(
        default=PathVariablePolicy.LITERAL,
        description="Policy for :name segments without a matching param field",
    )
    output: Optional[str] = Field(
        default=None, description="Output file path; stdout when unset"
    )

    @field_validator("schema_version", mode="before")
    @classmethod
    def _prefix_version(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept ``2.1.0`` as well as ``v2.1.0``."""
        if isinstance(value, str) and value[:1].isdigit():
            return f"v{value}"
        return value


# --- Registration ---


class RouteSpec(BaseModel):
    """One route registration: an HTTP method, a path and a record type.

    Validated structurally when constructed, so a malformed registration is
    rejected before any field walking happens. Method and path are free-form
    (no HTTP-method validation); they only have to be non-empty.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    method: str = Field(min_length=1)
    path: str = Field(min_length=1)
    record_type: Any

    @field_validator("method", "path")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("record_type")
    @classmethod
    def _must_be_record(cls, value: Any) -> Any:  # noqa: ANN401
        from postmangen.compiler.fields import is_record_type

        if not is_record_type(value):
            raise ValueError(
                "must be a dataclass, pydantic model or TypedDict "
                "(or Optional of one)"
            )
        return value


# --- Compiler output ---


class Variable(BaseModel):
    """A collection variable or a URL path variable."""

    key: str
    value: str = ""
    type: str = "string"
    description: Optional[str] = None


class QueryParam(BaseModel):
    """A query-string parameter of a compiled request."""

    key: str
    value: str = ""
    description: str = ""


class Header(BaseModel):
    key: str
    value: str


class FormFieldKind(str, enum.Enum):
    """Kinds of multipart form fields."""

    TEXT = "text"
    FILE = "file"


class FormParam(BaseModel):
    """A multipart form field; for ``file`` fields the value is only a display placeholder."""

    key: str
    value: str = ""
    type: FormFieldKind = FormFieldKind.TEXT
    description: str = ""


class BodyMode(str, enum.Enum):
    """Postman body modes produced by the compiler."""

    RAW = "raw"
    FORMDATA = "formdata"


class RequestBody(BaseModel):
    """Request body in Postman shape.

    ``raw`` plus ``options`` are set in :attr:`BodyMode.RAW` (JSON) mode,
    ``formdata`` in :attr:`BodyMode.FORMDATA` mode.
    """

    mode: BodyMode
    raw: Optional[str] = None
    formdata: Optional[list[FormParam]] = None
    options: Optional[dict[str, Any]] = None


class RequestURL(BaseModel):
    """URL of a compiled request.

    ``path`` keeps ``:name`` segments as written; each one also gets an entry
    in ``variable``.
    """

    raw: str
    host: list[str] = Field(default_factory=lambda: ["{{base_url}}"])
    path: list[str] = Field(default_factory=list)
    query: list[QueryParam] = Field(default_factory=list)
    variable: list[Variable] = Field(default_factory=list)


class CompiledRequest(BaseModel):
    """The fully resolved representation of one registered endpoint.

    Produced by :func:`~postmangen.compiler.request.compile_request` and
    attached to a leaf of the :class:`~postmangen.compiler.path_tree.PathTree`.

    ``name`` is the display name of the leaf (the last path segment).
    ``json_fields`` keeps the un-encoded JSON field mapping for inspection;
    it is never serialized.
    """

    name: str
    method: str
    url: RequestURL
    header: list[Header] = Field(default_factory=list)
    body: Optional[RequestBody] = None
    json_fields: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @property
    def body_mode(self) -> Optional[BodyMode]:
        """The body mode, or ``None`` when the request has no body."""
        return self.body.mode if self.body is not None else None

    def to_postman(self) -> dict[str, Any]:
        """Return the Postman ``request`` object for this request."""
        return self.model_dump(mode="json", exclude={"name"}, exclude_none=True)


class PathTreeNode(BaseModel):
    """A node of the path tree arena.

    ``children`` holds arena indices, not nodes. A node is a *group* when
    ``request`` is ``None`` and a *leaf* otherwise.
    """

    name: str
    children: list[int] = Field(default_factory=list)
    request: Optional[CompiledRequest] = None

    @property
    def is_group(self) -> bool:
        return self.request is None
