"""Built-in CLI sub-commands for specbundle.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~specbundle.commands.bundle` -- resolve a document tree and write
  the bundled result.
* :mod:`~specbundle.commands.inspect` -- resolve a document tree and report
  run statistics.
* :mod:`~specbundle.commands.config` -- view and modify global settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or a plain callback function
registered directly on the root app (for single commands like ``bundle``).
"""

from __future__ import annotations

import typer

from specbundle.exceptions import SpecbundleError
from specbundle.output import error


def fail(exc: SpecbundleError) -> typer.Exit:
    """Report *exc* on stderr and return a ``typer.Exit`` carrying its exit code.

    Usage::

        except SpecbundleError as exc:
            raise fail(exc) from None
    """
    error(str(exc))
    return typer.Exit(code=exc.exit_code)
