"""High-level generator: register routes, then write a Postman collection.

:class:`PostmanGen` is the public entry point of the library. It wires the
field walker, the request compiler and the path tree together behind a
small surface::

    gen = PostmanGen("My API", "Generated from routes.py")
    gen.add_variable("base_url", "http://localhost:8080/api/v1")
    gen.add_variable("token", "YOUR_INITIAL_JWT_TOKEN")
    gen.add_placeholder("tenant_id", "default-tenant-001")

    gen.register("POST", "/users", CreateUserRequest)
    gen.register("GET", "/users/:userId", GetUserRequest)

    gen.write_to_file("collection.json")

Registration is all-or-nothing: the request is compiled first and filed
into the tree only when compilation succeeded. Every failure surfaces as a
:class:`~postmangen.exceptions.PostmangenError`; unexpected faults while
walking a record type are wrapped in
:class:`~postmangen.exceptions.InvalidSpecError` with the original exception
chained.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, TypeVar, Union

from pydantic import ValidationError

from postmangen.collection import Collection
from postmangen.compiler.fields import walk_fields
from postmangen.compiler.path_tree import PathTree
from postmangen.compiler.request import compile_request
from postmangen.config import write_output
from postmangen.exceptions import InvalidSpecError, PostmangenError
from postmangen.models import (
    CompiledRequest,
    GeneratorConfig,
    PathVariablePolicy,
    RouteSpec,
    SchemaVersion,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into ``field: message`` pairs."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg', '')}" if loc else err.get("msg", ""))
    return "; ".join(parts)


class PostmanGen:
    """Collects route registrations into a Postman collection.

    The collection authenticates with a bearer token read from the
    ``{{token}}`` variable (see *token_variable*).

    Args:
        name: Collection name.
        description: Collection description.
        unmatched_path_variable: Policy for ``:name`` path segments without
            a matching ``param`` field.
        token_variable: Variable holding the bearer token.
        schema_version: Default format used by :meth:`serialize`,
            :meth:`write` and :meth:`write_to_file`.
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        *,
        unmatched_path_variable: Union[PathVariablePolicy, str] = PathVariablePolicy.LITERAL,
        token_variable: str = "token",
        schema_version: Union[SchemaVersion, str] = SchemaVersion.V210,
    ) -> None:
        self.collection = Collection(name, description)
        self.collection.add_auth_bearer(token_variable)
        self.placeholder_defaults: dict[str, Any] = {}
        self.unmatched_path_variable = PathVariablePolicy(unmatched_path_variable)
        self.schema_version = schema_version

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> PostmanGen:
        """Create a generator pre-populated from a :class:`~postmangen.models.GeneratorConfig`.

        ``base_url`` and ``token`` become the first collection variables,
        followed by ``variables`` in order; ``placeholders`` become caller
        defaults.
        """
        gen = cls(
            config.name,
            config.description,
            unmatched_path_variable=config.unmatched_path_variable,
            schema_version=config.schema_version,
        )
        if config.base_url is not None:
            gen.add_variable("base_url", config.base_url)
        if config.token is not None:
            gen.add_variable("token", config.token)
        for key, value in config.variables.items():
            gen.add_variable(key, value)
        for key, value in config.placeholders.items():
            gen.add_placeholder(key, value)
        return gen

    @property
    def tree(self) -> PathTree:
        return self.collection.tree

    def add_variable(self, key: str, value: str) -> PostmanGen:
        """Append a collection variable."""
        self.collection.add_variable(key, value)
        return self

    def add_placeholder(self, key: str, value: Any) -> PostmanGen:  # noqa: ANN401
        """Register a caller default used for any field whose key is *key*."""
        self.placeholder_defaults[key] = value
        return self

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, method: str, path: str, record_type: Any) -> CompiledRequest:  # noqa: ANN401
        """Compile one route and file it into the collection.

        Args:
            method: HTTP method (not validated, used as given).
            path: Route path; ``:name`` segments are path variables.
            record_type: Dataclass, pydantic model or TypedDict (or
                ``Optional`` of one) describing the request.

        Returns:
            The attached :class:`~postmangen.models.CompiledRequest`.

        Raises:
            InvalidSpecError: If the registration is malformed or the record
                type cannot be walked.
            BodySerializationError: If the JSON body cannot be encoded.
        """
        try:
            spec = RouteSpec(method=method, path=path, record_type=record_type)
        except ValidationError as exc:
            raise InvalidSpecError(
                f"invalid spec: {_describe_validation_error(exc)}"
            ) from exc
        return self.register_route(spec)

    def register_route(self, spec: RouteSpec) -> CompiledRequest:
        """Compile and attach an already validated :class:`~postmangen.models.RouteSpec`."""
        try:
            request = compile_request(
                spec.method,
                spec.path,
                walk_fields(spec.record_type),
                self.placeholder_defaults,
                unmatched_path_variable=self.unmatched_path_variable,
            )
        except PostmangenError:
            raise
        except Exception as exc:
            raise InvalidSpecError(
                f"invalid spec for {spec.method} {spec.path}: {exc}"
            ) from exc

        self.collection.attach_request(request)
        logger.debug("Registered %s %s", spec.method, spec.path)
        return request

    def endpoint(self, method: str, path: str) -> Callable[[T], T]:
        """Class decorator form of :meth:`register`::

            @gen.endpoint("POST", "/users")
            @dataclass
            class CreateUserRequest:
                username: Annotated[str, route(json="username")]
        """

        def decorator(record_type: T) -> T:
            self.register(method, path, record_type)
            return record_type

        return decorator

    # ------------------------------------------------------------------ #
    # Output
    # ------------------------------------------------------------------ #

    def serialize(self, version: Optional[Union[SchemaVersion, str]] = None) -> bytes:
        """Encode the collection; *version* defaults to :attr:`schema_version`."""
        return self.collection.serialize(version or self.schema_version)

    def write(self, stream: BinaryIO, version: Optional[Union[SchemaVersion, str]] = None) -> None:
        """Write the encoded collection to a binary stream."""
        stream.write(self.serialize(version))

    def write_to_file(
        self,
        path: Union[str, Path],
        version: Optional[Union[SchemaVersion, str]] = None,
    ) -> Path:
        """Atomically write the encoded collection to *path* and return it."""
        return write_output(path, self.serialize(version))
