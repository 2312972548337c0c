"""Built-in CLI commands for postmangen.

* :mod:`~postmangen.commands.build` -- ``postmangen build``: write a
  collection from a route target.
* :mod:`~postmangen.commands.inspect` -- ``postmangen inspect``: show the
  group tree or the compiled requests without writing anything.
"""
