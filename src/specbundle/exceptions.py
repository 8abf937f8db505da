"""Exception hierarchy for specbundle.

All exceptions inherit from :class:`SpecbundleError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specbundle.exit_codes`.
The top-level error handler in :func:`specbundle.app.main` catches
``SpecbundleError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Only structural failures are raised by the resolver. Missing files, missing
definitions and dangling pointer segments degrade to fallback schemas
instead (see :mod:`specbundle.parser.resolver`).

Subclass hierarchy::

    SpecbundleError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- SpecIOError             (exit 3)
    +-- SpecParseError          (exit 4)
    +-- CircularReferenceError  (exit 5)
    +-- PointerNavigationError  (exit 6)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from specbundle.exit_codes import (
    EXIT_CIRCULAR_REFERENCE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_ERROR,
    EXIT_PARSE_ERROR,
    EXIT_POINTER_ERROR,
)


class SpecbundleError(Exception):
    """Base exception for all specbundle errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specbundle.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecbundleError):
    """Raised for invalid CLI input, such as an unknown config key or a mistyped value."""

    exit_code = EXIT_INVALID_USAGE


class SpecIOError(SpecbundleError):
    """Raised when a document file does not exist or cannot be read."""

    exit_code = EXIT_IO_ERROR


class SpecParseError(SpecbundleError):
    """Raised when a document cannot be parsed, even after the numeric repair."""

    exit_code = EXIT_PARSE_ERROR


class CircularReferenceError(SpecbundleError):
    """Raised when a file is re-entered while it is still being resolved.

    Args:
        path: Canonical path of the file that closed the cycle.
        chain: Files on the active resolution chain, outermost first.
    """

    exit_code = EXIT_CIRCULAR_REFERENCE

    def __init__(self, path: Path, chain: Sequence[Path] = ()):
        self.path = path
        self.chain = list(chain)
        trail = " -> ".join(str(p) for p in [*self.chain, path])
        super().__init__(f"Circular reference detected: {path}" + (f" ({trail})" if self.chain else ""))


class PointerNavigationError(SpecbundleError):
    """Raised when a JSON pointer indexes out of bounds or descends into a scalar.

    Mapping-key misses are never errors; they produce a fallback schema.
    """

    exit_code = EXIT_POINTER_ERROR

    def __init__(self, message: str, pointer: str = "", segment: Optional[str] = None):
        super().__init__(message)
        self.pointer = pointer
        self.segment = segment


class ConfigError(SpecbundleError):
    """Raised for configuration problems (invalid JSON, failed validation, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE
