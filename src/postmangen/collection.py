"""Postman Collection document: variables, bearer auth and the request tree.

:class:`Collection` owns one :class:`~postmangen.compiler.path_tree.PathTree`
plus the collection-level metadata, and serializes the lot as Postman
Collection JSON. Two format versions are supported:

* ``v2.1.0`` -- auth parameters are a list of ``{key, value, type}`` objects.
* ``v2.0.0`` -- auth parameters are a flat ``{key: value}`` mapping.

Everything else is shared between the two versions.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

from postmangen.compiler.path_tree import PathTree
from postmangen.exceptions import InvalidSpecError
from postmangen.models import CompiledRequest, SchemaVersion, Variable

SCHEMA_URLS: dict[SchemaVersion, str] = {
    SchemaVersion.V210: "https://schema.getpostman.com/json/collection/v2.1.0/collection.json",
    SchemaVersion.V200: "https://schema.getpostman.com/json/collection/v2.0.0/collection.json",
}


def coerce_version(version: Union[SchemaVersion, str]) -> SchemaVersion:
    """Turn ``"v2.1.0"``/``"2.1.0"`` (or a :class:`SchemaVersion`) into a :class:`SchemaVersion`.

    Raises:
        InvalidSpecError: For versions the serializer does not know.
    """
    if isinstance(version, SchemaVersion):
        return version
    text = version if version.startswith("v") else f"v{version}"
    try:
        return SchemaVersion(text)
    except ValueError:
        supported = ", ".join(v.value for v in SchemaVersion)
        raise InvalidSpecError(
            f"unsupported collection schema version '{version}' (supported: {supported})"
        ) from None


class Collection:
    """A Postman Collection under construction.

    Args:
        name: Collection name (``info.name``).
        description: Collection description (``info.description``).
    """

    def __init__(self, name: str, description: str = "") -> None:
        self.name = name
        self.description = description
        self.variables: list[Variable] = []
        self.tree = PathTree()
        self.auth_token_variable: Optional[str] = None

    def add_variable(self, key: str, value: str) -> Collection:
        self.variables.append(Variable(key=key, value=value))
        return self

    def add_auth_bearer(self, token_variable_key: str = "token") -> Collection:
        """Authenticate every request with the bearer token ``{{token_variable_key}}``."""
        self.auth_token_variable = token_variable_key
        return self

    def attach_request(self, request: CompiledRequest) -> int:
        """File *request* into the tree; returns the leaf's arena index."""
        return self.tree.attach(request)

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def _auth(self, version: SchemaVersion) -> Optional[dict[str, Any]]:
        if self.auth_token_variable is None:
            return None
        token = "{{" + self.auth_token_variable + "}}"
        if version is SchemaVersion.V200:
            return {"type": "bearer", "bearer": {"token": token}}
        return {
            "type": "bearer",
            "bearer": [{"key": "token", "value": token, "type": "string"}],
        }

    def to_dict(self, version: Union[SchemaVersion, str] = SchemaVersion.V210) -> dict[str, Any]:
        """Return the collection as a JSON-ready dict in the given format."""
        schema_version = coerce_version(version)
        document: dict[str, Any] = {
            "info": {
                "name": self.name,
                "description": self.description,
                "schema": SCHEMA_URLS[schema_version],
            },
            "item": self.tree.to_items(),
        }
        auth = self._auth(schema_version)
        if auth is not None:
            document["auth"] = auth
        if self.variables:
            document["variable"] = [
                v.model_dump(mode="json", exclude_none=True) for v in self.variables
            ]
        return document

    def serialize(self, version: Union[SchemaVersion, str] = SchemaVersion.V210) -> bytes:
        """Encode the collection as UTF-8 JSON (2-space indent, trailing newline)."""
        text = json.dumps(self.to_dict(version), indent=2, ensure_ascii=False)
        return (text + "\n").encode("utf-8")
