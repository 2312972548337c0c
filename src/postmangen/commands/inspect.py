"""Inspect commands -- examine registered routes without writing a collection.

Provides the ``postmangen inspect`` sub-command group with read-only views
of a route target: the group tree the collection will contain, and a table
of every compiled request. Both sub-commands resolve the configuration the
same way ``postmangen build`` does.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from postmangen.builder import PostmanGen
from postmangen.output import error, info, print_table, print_tree


inspect_app = typer.Typer(no_args_is_help=True)


def _load_generator(target: str, config_path: Optional[Path]) -> PostmanGen:
    """Resolve config and load the generator named by *target*.

    Raises:
        typer.Exit: With the error's exit code when config or target
            loading fails.
    """
    from postmangen.config import resolve_config
    from postmangen.exceptions import PostmangenError
    from postmangen.loader import resolve_generator

    try:
        cfg = resolve_config(config_path)
        return resolve_generator(target, cfg)
    except PostmangenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@inspect_app.command("tree")
def inspect_tree(
    target: str = typer.Argument(..., help="Routes to load: MODULE[:ATTR] or file.py[:ATTR]."),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (JSON or YAML)."
    ),
) -> None:
    """Show the folder tree of the collection.

    Groups are printed by name; requests as ``METHOD name``.

    Example::

        postmangen inspect tree myapi.routes:register
    """
    gen = _load_generator(target, config)

    rows: list[tuple[int, str]] = []
    for depth, node in gen.tree.walk():
        if node.request is None:
            rows.append((depth, f"{node.name}/"))
        else:
            rows.append((depth, f"{node.request.method} {node.name}"))

    if not rows:
        info("No routes registered.")
        return

    print_tree(gen.collection.name, rows)


@inspect_app.command("requests")
def inspect_requests(
    target: str = typer.Argument(..., help="Routes to load: MODULE[:ATTR] or file.py[:ATTR]."),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (JSON or YAML)."
    ),
) -> None:
    """List every compiled request.

    Displays a table with the method, raw URL, body mode, query keys and
    path variables of each request, in tree order.

    Example::

        postmangen inspect requests ./routes.py
    """
    gen = _load_generator(target, config)

    headers = ["Method", "URL", "Body", "Query", "Variables"]
    rows: list[list[str]] = []
    for request in gen.tree.iter_requests():
        mode = request.body_mode
        rows.append([
            request.method,
            request.url.raw,
            mode.value if mode is not None else "-",
            ", ".join(q.key for q in request.url.query) or "-",
            ", ".join(f"{v.key}={v.value}" for v in request.url.variable) or "-",
        ])

    if not rows:
        info("No routes registered.")
        return

    print_table(
        headers, rows, title=f"{gen.collection.name} -- Requests ({len(rows)})"
    )
