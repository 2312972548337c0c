"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~postmangen.exceptions.PostmangenError` subclass.
Build scripts can inspect the exit code to tell a bad route declaration
apart from a missing module without parsing stderr.

Example::

    $ postmangen build myapi.routes:gen -o collection.json
    $ echo $?
    2   # EXIT_INVALID_SPEC -- a route declaration was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_SPEC = 2
"""A route declaration (method, path or record type) was rejected."""

EXIT_TARGET_LOAD_ERROR = 7
"""The module or attribute holding the route declarations could not be loaded."""
