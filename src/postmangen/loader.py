"""Locate the route declarations a CLI invocation points at.

A *target* names a Python object holding the routes, written
``MODULE:ATTRIBUTE``. ``MODULE`` is either a dotted import path
(``myapi.routes``) or a path to a ``.py`` file (``./routes.py``).
``ATTRIBUTE`` defaults to ``generator`` when omitted.

The object may be:

* a :class:`~postmangen.builder.PostmanGen` with routes already registered
  (typically at import time), or
* a callable accepting a :class:`~postmangen.builder.PostmanGen` built from
  the resolved configuration; it registers routes on it and may return a
  replacement generator.
"""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from postmangen.builder import PostmanGen
from postmangen.exceptions import PostmangenError, TargetLoadError
from postmangen.models import GeneratorConfig

DEFAULT_ATTRIBUTE = "generator"


def split_target(target: str) -> tuple[str, str]:
    """Split ``MODULE[:ATTRIBUTE]`` into its two parts.

    A Windows drive letter (``C:\\routes.py``) is not mistaken for the
    separator: only the last colon counts, and only when something follows it
    that is not a path.
    """
    module, sep, attribute = target.rpartition(":")
    if not sep or not module or "/" in attribute or "\\" in attribute:
        return target, DEFAULT_ATTRIBUTE
    return module, attribute or DEFAULT_ATTRIBUTE


def _import_file(path: Path) -> ModuleType:
    if not path.is_file():
        raise TargetLoadError(f"Route file not found: {path}")
    module_name = f"_postmangen_target_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise TargetLoadError(f"Cannot import route file: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except PostmangenError:
        sys.modules.pop(module_name, None)
        raise
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise TargetLoadError(f"Error while importing {path}: {exc}") from exc
    return module


def _import_module(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except PostmangenError:
        raise
    except ImportError as exc:
        raise TargetLoadError(f"Cannot import module '{name}': {exc}") from exc
    except Exception as exc:
        raise TargetLoadError(f"Error while importing '{name}': {exc}") from exc


def load_target(target: str) -> Any:  # noqa: ANN401
    """Import *target* and return the named attribute.

    Raises:
        TargetLoadError: If the module cannot be imported or lacks the
            attribute.
        PostmangenError: Registration errors raised while the module runs
            are propagated unchanged.
    """
    module_ref, attribute = split_target(target)
    if module_ref.endswith(".py") or "/" in module_ref or "\\" in module_ref:
        module = _import_file(Path(module_ref))
    else:
        module = _import_module(module_ref)

    try:
        return getattr(module, attribute)
    except AttributeError:
        raise TargetLoadError(
            f"Module '{module_ref}' has no attribute '{attribute}'"
        ) from None


def resolve_generator(target: str, config: GeneratorConfig) -> PostmanGen:
    """Load *target* and turn it into a populated :class:`PostmanGen`.

    Raises:
        TargetLoadError: If the target is neither a generator nor a callable
            producing one.
    """
    obj = load_target(target)
    if isinstance(obj, PostmanGen):
        return obj
    if callable(obj):
        gen = PostmanGen.from_config(config)
        result = obj(gen)
        if result is None:
            return gen
        if isinstance(result, PostmanGen):
            return result
        raise TargetLoadError(
            f"'{target}' returned {type(result).__name__}, expected PostmanGen or None"
        )
    raise TargetLoadError(
        f"'{target}' is a {type(obj).__name__}, expected a PostmanGen "
        "or a callable taking one"
    )
