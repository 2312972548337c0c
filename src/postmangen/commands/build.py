"""Build command -- write a Postman collection from a route target.

``postmangen build TARGET`` resolves the configuration (CLI flags,
environment, ``postmangen.json``/``.yaml``), loads the routes named by
*TARGET* and writes the collection to ``--output`` or stdout.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from postmangen.exceptions import PostmangenError
from postmangen.output import debug, error, print_data, success, suggest


def build_command(
    target: str = typer.Argument(
        ..., help="Routes to load: MODULE[:ATTR] or path/to/file.py[:ATTR]."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the collection here instead of stdout."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Config file (JSON or YAML)."
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Collection name."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Initial value of {{base_url}}."
    ),
    schema: Optional[str] = typer.Option(
        None, "--schema", help="Collection format: v2.1.0 (default) or v2.0.0."
    ),
    strict_params: bool = typer.Option(
        False,
        "--strict-params",
        help="Fail on :name path segments without a matching param field.",
    ),
) -> None:
    """Generate a Postman collection from registered routes.

    When *TARGET* is a callable it receives a generator built from the
    resolved configuration. When it is an already populated generator, only
    the output settings (``--output``, ``--schema``) apply.

    Example::

        postmangen build myapi.routes:register -o collection.json
        postmangen build ./routes.py --schema v2.0.0 > collection.json
    """
    from postmangen.config import resolve_config
    from postmangen.loader import resolve_generator

    try:
        cfg = resolve_config(
            config,
            cli_name=name,
            cli_base_url=base_url,
            cli_schema=schema,
            cli_output=output,
            cli_strict_params=True if strict_params else None,
        )
        debug(f"Loading routes from {target}")
        gen = resolve_generator(target, cfg)
        data = gen.serialize(cfg.schema_version)
        count = sum(1 for _ in gen.tree.iter_requests())

        if cfg.output:
            path = gen.write_to_file(cfg.output, cfg.schema_version)
            success(f"Wrote {count} request(s) to {path}")
        else:
            print_data(data.decode("utf-8"))
            debug(f"Generated {count} request(s)")
    except PostmangenError as exc:
        error(str(exc))
        if exc.__cause__ is not None:
            debug(f"Caused by: {exc.__cause__!r}")
        suggest("Run with --verbose for details.")
        raise typer.Exit(code=exc.exit_code) from None
    except OSError as exc:
        error(f"Failed to write collection: {exc}")
        raise typer.Exit(code=1) from None
