"""Compile classified fields into one :class:`~postmangen.models.CompiledRequest`.

**Algorithm summary**

1. For every field with at least one routing role, resolve a placeholder
   (example, then caller default, then synthesized zero value).
2. Route the value: JSON body entry, multipart text/file field, query
   parameter, or path-variable candidate.
3. Pick the body mode: any form field wins (``formdata``), else any JSON
   field (``raw`` JSON), else no body.
4. Split the path; every ``:name`` segment becomes a URL variable whose value
   and description come from the matching ``param`` field.

The path is kept as written (``/users/:userId``); the URL variable list
carries the display values. Nothing outside the returned value is touched.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from postmangen.compiler.fields import FieldDescriptor
from postmangen.compiler.placeholders import (
    is_resolved,
    resolve_placeholder,
    stringify,
    zero_value,
)
from postmangen.exceptions import BodySerializationError, InvalidSpecError
from postmangen.models import (
    BodyMode,
    CompiledRequest,
    FormFieldKind,
    FormParam,
    Header,
    PathVariablePolicy,
    QueryParam,
    RequestBody,
    RequestURL,
    Variable,
)

logger = logging.getLogger(__name__)

BASE_URL_VARIABLE = "{{base_url}}"
"""Host placeholder every compiled URL starts with."""

CONTENT_TYPE_FORM = "multipart/form-data"
CONTENT_TYPE_JSON = "application/json"


def split_path(raw_path: str) -> list[str]:
    """Split *raw_path* into non-empty segments.

    ``"/users/:userId/"`` -> ``["users", ":userId"]``
    ``"/"``               -> ``[]``
    """
    return [segment for segment in raw_path.strip("/").split("/") if segment]


def is_path_variable(segment: str) -> bool:
    """Return ``True`` if *segment* names a path variable (``:name``)."""
    return segment.startswith(":") and len(segment) > 1


def compile_request(
    method: str,
    raw_path: str,
    fields: Iterable[FieldDescriptor],
    defaults: Mapping[str, Any] | None = None,
    *,
    unmatched_path_variable: PathVariablePolicy = PathVariablePolicy.LITERAL,
) -> CompiledRequest:
    """Assemble the compiled request for one route.

    Args:
        method: HTTP method, used as given.
        raw_path: Route path such as ``/users/:userId``.
        fields: Descriptors from :func:`~postmangen.compiler.fields.walk_fields`.
        defaults: Caller defaults keyed by field key.
        unmatched_path_variable: What to do with a ``:name`` segment no
            ``param`` field matches.

    Returns:
        The :class:`~postmangen.models.CompiledRequest`.

    Raises:
        InvalidSpecError: If *method* or *raw_path* is blank, or a path
            variable is unmatched under :attr:`PathVariablePolicy.ERROR`.
        BodySerializationError: If the JSON body cannot be encoded.
    """
    if not isinstance(method, str) or not method.strip():
        raise InvalidSpecError("invalid spec: method must be a non-empty string")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise InvalidSpecError("invalid spec: path must be a non-empty string")
    defaults = defaults or {}

    json_fields: dict[str, Any] = {}
    form_params: list[FormParam] = []
    query_params: list[QueryParam] = []
    # param key -> (display value, description); first declaration wins
    candidates: dict[str, tuple[str, str]] = {}

    for field in fields:
        roles = field.tags.roles
        if not roles:
            continue

        placeholder = resolve_placeholder(field, defaults)

        if "json" in roles:
            value = placeholder if is_resolved(placeholder) else zero_value(field.field_type)
            json_fields[field.key("json")] = value

        if not is_resolved(placeholder):
            placeholder = zero_value(field.field_type, prefer_string=True)
        text = stringify(placeholder)

        if "form" in roles:
            form_params.append(FormParam(
                key=field.key("form"),
                value=text,
                type=FormFieldKind.TEXT,
                description=field.description,
            ))
        if "form_file" in roles:
            form_params.append(FormParam(
                key=field.key("form_file"),
                value=text,
                type=FormFieldKind.FILE,
                description=field.description,
            ))
        if "query" in roles:
            query_params.append(QueryParam(
                key=field.key("query"),
                value=text,
                description=field.description,
            ))
        if "param" in roles:
            candidates.setdefault(field.key("param"), (text, field.description))

    segments = split_path(raw_path)
    variables = _url_variables(method, raw_path, segments, candidates, unmatched_path_variable)
    header, body = _build_body(form_params, json_fields)

    return CompiledRequest(
        name=segments[-1] if segments else "/",
        method=method,
        url=RequestURL(
            raw=BASE_URL_VARIABLE + "/" + "/".join(segments),
            host=[BASE_URL_VARIABLE],
            path=segments,
            query=query_params,
            variable=variables,
        ),
        header=header,
        body=body,
        json_fields=json_fields,
    )


def _url_variables(
    method: str,
    raw_path: str,
    segments: list[str],
    candidates: Mapping[str, tuple[str, str]],
    policy: PathVariablePolicy,
) -> list[Variable]:
    variables: list[Variable] = []
    for segment in segments:
        if not is_path_variable(segment):
            continue
        key = segment[1:]
        if key in candidates:
            value, description = candidates[key]
        elif policy is PathVariablePolicy.ERROR:
            raise InvalidSpecError(
                f"invalid spec: path variable '{segment}' in {method} {raw_path} "
                "has no matching param field"
            )
        else:
            logger.warning(
                "Path variable '%s' in %s %s has no matching param field; "
                "using the segment text as its value",
                segment, method, raw_path,
            )
            value, description = segment, ""
        variables.append(Variable(key=key, value=value, description=description))
    return variables


def _build_body(
    form_params: list[FormParam],
    json_fields: dict[str, Any],
) -> tuple[list[Header], RequestBody | None]:
    if form_params:
        return (
            [Header(key="Content-Type", value=CONTENT_TYPE_FORM)],
            RequestBody(mode=BodyMode.FORMDATA, formdata=form_params),
        )
    if json_fields:
        try:
            raw = json.dumps(json_fields, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise BodySerializationError(f"failed to marshal json body: {exc}") from exc
        return (
            [Header(key="Content-Type", value=CONTENT_TYPE_JSON)],
            RequestBody(
                mode=BodyMode.RAW,
                raw=raw,
                options={"raw": {"language": "json"}},
            ),
        )
    return [], None
