"""Request compiler -- turn annotated record types into compiled requests.

This sub-package is the core of postmangen: it takes a record type whose
fields carry :class:`~postmangen.compiler.tags.RouteTags` and produces a
:class:`~postmangen.models.CompiledRequest`, then files it into a
:class:`~postmangen.compiler.path_tree.PathTree`.

Typical usage::

    from postmangen.compiler import PathTree, compile_request, walk_fields

    tree = PathTree()
    request = compile_request("GET", "/users/:userId", walk_fields(GetUserRequest))
    tree.attach(request)

Sub-modules:

* :mod:`~postmangen.compiler.tags` -- routing metadata and the
  ``Embedded`` marker.
* :mod:`~postmangen.compiler.fields` -- type descriptors and the field
  walker.
* :mod:`~postmangen.compiler.placeholders` -- placeholder precedence and
  zero-value synthesis.
* :mod:`~postmangen.compiler.request` -- request assembly (URL, query, path
  variables, body mode).
* :mod:`~postmangen.compiler.path_tree` -- the arena tree of groups and
  request leaves.
"""

from postmangen.compiler.fields import FieldDescriptor, TypeDescriptor, walk_fields
from postmangen.compiler.path_tree import PathTree
from postmangen.compiler.request import compile_request
from postmangen.compiler.tags import Embedded, RouteTags, route

__all__ = [
    "Embedded",
    "FieldDescriptor",
    "PathTree",
    "RouteTags",
    "TypeDescriptor",
    "compile_request",
    "route",
    "walk_fields",
]
