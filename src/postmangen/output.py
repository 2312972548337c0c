"""Console output for the postmangen CLI.

Two streams, two jobs:

* **stdout** carries the generated collection and the ``inspect`` views,
  so ``postmangen build routes.py > collection.json`` stays clean.
* **stderr** carries progress, errors and hints.

Rich rendering is used only when stdout is a terminal and colour is allowed
(``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all switch it off); piped
output falls back to plain text. ``--json`` turns tables and trees into
JSON arrays.

:func:`~postmangen.app.main_callback` installs one :class:`OutputManager`
with :func:`set_output`; commands call the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree


class OutputFormat(str, Enum):
    """Rendering mode for tables and trees; ``AUTO`` picks RICH or PLAIN."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Rendering mode. ``AUTO`` resolves to ``RICH`` on an
            interactive terminal with colour, ``PLAIN`` otherwise.
        no_color: Disable colour and markup.
        quiet: Drop info, success and suggestion messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            interactive = _is_tty() and not self._no_color
            self._format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout, adding a newline unless it ends with one."""
        print(text, file=sys.stdout, end="" if text.endswith("\n") else "\n", flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows as a rich table, tab-separated lines or a JSON array of objects."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*(escape(cell) for cell in row))
            self._stdout.print(table)

    def print_tree(self, title: str, rows: list[tuple[int, str]]) -> None:
        """Render a hierarchy given as depth-first ``(depth, label)`` pairs.

        Depth 0 is a direct child of *title*. Plain mode indents two spaces
        per level; JSON mode emits ``{"depth", "label"}`` objects.
        """
        if self._format == OutputFormat.JSON:
            records = [{"depth": depth, "label": label} for depth, label in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self.print_data(title)
            for depth, label in rows:
                self.print_data("  " * (depth + 1) + label)
        else:
            root = Tree(f"[bold]{escape(title)}[/bold]")
            stack: list[Tree] = [root]
            for depth, label in rows:
                del stack[depth + 1:]
                stack.append(stack[-1].add(escape(label)))
            self._stdout.print(root)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, escape(message))

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Errors are shown even with ``--quiet``."""
        self._diagnostic(
            f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}"
        )

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {escape(message)}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(
                f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]"
            )


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between CLI runs."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def print_tree(title: str, rows: list[tuple[int, str]]) -> None:
    get_output().print_tree(title, rows)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
