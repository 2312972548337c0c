"""postmangen -- Generate Postman collections from annotated request types.

Request shapes are ordinary record types (dataclasses, pydantic models or
TypedDicts) whose fields say where they go in the request: JSON body,
multipart form, query string or path variable. Each registered route is
compiled into a Postman request and filed into folders named after its URL
path segments.

Typical usage::

    from dataclasses import dataclass
    from typing import Annotated

    from postmangen import PostmanGen, route


    @dataclass
    class GetUserRequest:
        user_id: Annotated[str, route(param="userId", example="user-abc-123")]
        format: Annotated[str, route(query="format", example="full")]


    gen = PostmanGen("My API")
    gen.add_variable("base_url", "http://localhost:8080/api/v1")
    gen.register("GET", "/users/:userId", GetUserRequest)
    gen.write_to_file("collection.json")

Modules:
    builder: The :class:`PostmanGen` facade.
    compiler: Field classification, placeholders, request compilation and
        the path tree.
    collection: Postman Collection document and serialization.
    models: Pydantic models shared across the package.
    config: Config files, precedence resolution and atomic writes.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI (``postmangen build``, ``postmangen inspect``).
"""

__version__ = "0.1.0"

from postmangen.builder import PostmanGen  # noqa: E402
from postmangen.compiler.tags import Embedded, RouteTags, route  # noqa: E402
from postmangen.exceptions import (  # noqa: E402
    BodySerializationError,
    InvalidSpecError,
    PostmangenError,
)

__all__ = [
    "BodySerializationError",
    "Embedded",
    "InvalidSpecError",
    "PostmanGen",
    "PostmangenError",
    "RouteTags",
    "__version__",
    "route",
]
