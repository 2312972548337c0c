"""Field classification -- turn a record type into field descriptors.

A *record type* is a dataclass, a pydantic model or a TypedDict. This module
gives the rest of the compiler a uniform view of one:

* :class:`TypeDescriptor` answers kind queries about a Python annotation
  (pointer, record, sequence, mapping, primitive, any) and exposes the
  pointer target and sequence element types. ``Optional[X]`` (and
  ``X | None``) plays the role of a pointer.
* :func:`walk_fields` lazily yields one :class:`FieldDescriptor` per exported
  field, in declaration order. Fields marked
  :class:`~postmangen.compiler.tags.Embedded` are replaced by the fields of
  their record type, depth-first, at their point of declaration.

Routing metadata is read from ``Annotated[...]`` extras and, for
dataclasses, from ``field(metadata={"route": ..., "embedded": True})``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import logging
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Iterator, Union

from pydantic import BaseModel

from postmangen.compiler.tags import Embedded, RouteTags

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)

_SEQUENCE_ORIGINS: frozenset[Any] = frozenset({
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
})

_MAPPING_ORIGINS: frozenset[Any] = frozenset({
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
})

_REQUIRED_WRAPPERS: tuple[Any, ...] = tuple(
    wrapper
    for wrapper in (
        getattr(typing, "Required", None),
        getattr(typing, "NotRequired", None),
        getattr(typing, "ReadOnly", None),
    )
    if wrapper is not None
)


class TypeKind(str, enum.Enum):
    """Kinds of types the compiler distinguishes."""

    POINTER = "pointer"
    RECORD = "record"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    PRIMITIVE = "primitive"
    ANY = "any"


def _strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:  # noqa: ANN401
    """Split ``Annotated[T, *extras]`` into ``(T, extras)``.

    TypedDict ``Required``/``NotRequired`` wrappers are peeled off as well.
    """
    extras: tuple[Any, ...] = ()
    while True:
        origin = typing.get_origin(annotation)
        if origin is Annotated:
            args = typing.get_args(annotation)
            annotation = args[0]
            extras = extras + tuple(args[1:])
        elif _REQUIRED_WRAPPERS and origin in _REQUIRED_WRAPPERS:
            annotation = typing.get_args(annotation)[0]
        else:
            return annotation, extras


def is_record_type(tp: Any) -> bool:  # noqa: ANN401
    """Return ``True`` if *tp* is a record type or ``Optional`` of one."""
    return TypeDescriptor.of(tp).deref().kind is TypeKind.RECORD


def _is_record_class(tp: Any) -> bool:  # noqa: ANN401
    if not isinstance(tp, type):
        return False
    if dataclasses.is_dataclass(tp):
        return True
    if issubclass(tp, BaseModel):
        return True
    return typing.is_typeddict(tp)


@dataclass(frozen=True)
class TypeDescriptor:
    """Kind-level view of a Python type annotation.

    Build one with :meth:`of`; the constructor does no classification.

    Attributes:
        annotation: The annotation with ``Annotated`` extras stripped.
        kind: The :class:`TypeKind` of the annotation.
    """

    annotation: Any
    kind: TypeKind

    @classmethod
    def of(cls, annotation: Any) -> TypeDescriptor:  # noqa: ANN401
        """Classify *annotation*."""
        annotation, _ = _strip_annotated(annotation)

        if annotation is Any or annotation is object or isinstance(annotation, typing.TypeVar):
            return cls(annotation, TypeKind.ANY)

        origin = typing.get_origin(annotation)
        if origin is Union or origin is types.UnionType:
            members = [a for a in typing.get_args(annotation) if a is not _NONE_TYPE]
            if len(members) == 1:
                return cls(annotation, TypeKind.POINTER)
            return cls(annotation, TypeKind.ANY)

        if _is_record_class(annotation):
            return cls(annotation, TypeKind.RECORD)

        if origin in _SEQUENCE_ORIGINS or annotation in (list, tuple, set, frozenset):
            return cls(annotation, TypeKind.SEQUENCE)

        if origin in _MAPPING_ORIGINS or annotation is dict:
            return cls(annotation, TypeKind.MAPPING)

        return cls(annotation, TypeKind.PRIMITIVE)

    @property
    def target(self) -> TypeDescriptor:
        """The pointed-to type of a :attr:`TypeKind.POINTER` descriptor."""
        if self.kind is not TypeKind.POINTER:
            raise TypeError(f"{self.annotation!r} is not an optional type")
        member = next(a for a in typing.get_args(self.annotation) if a is not _NONE_TYPE)
        return TypeDescriptor.of(member)

    @property
    def element(self) -> TypeDescriptor:
        """The element type of a :attr:`TypeKind.SEQUENCE` descriptor (``Any`` when bare)."""
        if self.kind is not TypeKind.SEQUENCE:
            raise TypeError(f"{self.annotation!r} is not a sequence type")
        args = typing.get_args(self.annotation)
        return TypeDescriptor.of(args[0] if args else Any)

    def deref(self) -> TypeDescriptor:
        """Unwrap one pointer level; other kinds are returned unchanged."""
        return self.target if self.kind is TypeKind.POINTER else self


@dataclass(frozen=True)
class FieldDescriptor:
    """One classified field of a record type.

    Attributes:
        name: The declared attribute name.
        tags: Routing metadata; an all-empty :class:`RouteTags` when the
            field carries none.
        field_type: Descriptor of the declared type.
    """

    name: str
    tags: RouteTags
    field_type: TypeDescriptor

    @property
    def description(self) -> str:
        return self.tags.description

    @property
    def example(self) -> str:
        return self.tags.example

    def key(self, role: str) -> str:
        """Key for *role*: the tag value, or the declared name when unset."""
        return self.tags.key(role, self.name)


@dataclass(frozen=True)
class _RawField:
    name: str
    annotation: Any
    extras: tuple[Any, ...]


def _type_hints(tp: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(tp, include_extras=True)
    except NameError as exc:
        raise TypeError(
            f"cannot resolve the annotations of {tp.__name__} ({exc}); record "
            "types referenced by string annotations must be defined at module level"
        ) from exc


def _record_fields(tp: type) -> list[_RawField]:
    """Enumerate the declared fields of record class *tp*, in order."""
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return [
            _RawField(name, info.annotation, tuple(info.metadata))
            for name, info in tp.model_fields.items()
        ]

    if dataclasses.is_dataclass(tp):
        hints = _type_hints(tp)
        raw: list[_RawField] = []
        for f in dataclasses.fields(tp):
            annotation = hints[f.name]
            extras: tuple[Any, ...] = ()
            meta = f.metadata.get("route")
            if meta is not None:
                extras = (meta,)
            if f.metadata.get("embedded"):
                extras = extras + (Embedded(),)
            raw.append(_RawField(f.name, annotation, extras))
        return raw

    hints = _type_hints(tp)
    return [_RawField(name, annotation, ()) for name, annotation in hints.items()]


def _classify(raw: _RawField) -> tuple[TypeDescriptor, RouteTags, bool]:
    annotation, annotated_extras = _strip_annotated(raw.annotation)
    # Optional[Annotated[T, ...]] carries its tags on the member
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not _NONE_TYPE]
        if len(members) == 1:
            member, member_extras = _strip_annotated(members[0])
            if member_extras:
                annotation = Union[member, None]
                annotated_extras = annotated_extras + member_extras
    tags = RouteTags()
    embedded = False
    for extra in raw.extras + annotated_extras:
        if isinstance(extra, RouteTags):
            tags = extra
        elif isinstance(extra, Embedded):
            embedded = True
    return TypeDescriptor.of(annotation), tags, embedded


def walk_fields(record_type: Any) -> Iterator[FieldDescriptor]:  # noqa: ANN401
    """Yield the :class:`FieldDescriptor` of every exported field of *record_type*.

    Fields whose name starts with ``_`` are skipped. Embedded record fields
    are expanded in place; expansion stops on record types already being
    expanded higher up, so self-referential embedding terminates.

    Annotations are resolved with :func:`typing.get_type_hints`, so record
    types named in string annotations (``from __future__ import
    annotations``) must be reachable from their module's globals.
    A ``TypeError`` is raised otherwise.

    Args:
        record_type: A record type or ``Optional`` of one. Anything else
            yields nothing.
    """
    yield from _walk(TypeDescriptor.of(record_type), frozenset())


def _walk(descriptor: TypeDescriptor, active: frozenset[Any]) -> Iterator[FieldDescriptor]:
    descriptor = descriptor.deref()
    if descriptor.kind is not TypeKind.RECORD:
        return
    record = descriptor.annotation
    if record in active:
        logger.debug("Skipping recursive embedding of %s", record.__name__)
        return
    active = active | {record}

    for raw in _record_fields(record):
        if raw.name.startswith("_"):
            continue
        field_type, tags, embedded = _classify(raw)
        if embedded and field_type.deref().kind is TypeKind.RECORD:
            yield from _walk(field_type, active)
            continue
        yield FieldDescriptor(name=raw.name, tags=tags, field_type=field_type)
