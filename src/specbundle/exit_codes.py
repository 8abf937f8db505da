"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specbundle.exceptions.SpecbundleError` subclass.
Build scripts can inspect the exit code to tell a broken input tree from a
genuine reference cycle without parsing stderr.

Example::

    $ specbundle bundle specification/api.v2.yaml -o resolved.json
    $ echo $?
    5   # EXIT_CIRCULAR_REFERENCE -- two files reference each other
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_IO_ERROR = 3
"""A document file could not be read."""

EXIT_PARSE_ERROR = 4
"""A document file could not be parsed as JSON or YAML."""

EXIT_CIRCULAR_REFERENCE = 5
"""The external reference graph contains a cycle through a file."""

EXIT_POINTER_ERROR = 6
"""A JSON pointer tried to index past a sequence or descend into a scalar."""
