"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant is referenced by the matching
:class:`~specdesk.exceptions.SpecdeskError` subclass so that shell wrappers
can tell failure classes apart without parsing stderr.

Example::

    $ specdesk show no_such_operation
    $ echo $?
    4   # EXIT_NOT_FOUND -- the operation id is not in the catalog
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, e.g. a malformed ``key=value`` pair or unknown language."""

EXIT_NOT_FOUND = 4
"""The requested operation is not present in the catalog."""

EXIT_CONNECTION_ERROR = 6
"""The outbound request failed at the network level (timeout, DNS, refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API document could not be loaded, deserialised, or lacks ``paths``."""
