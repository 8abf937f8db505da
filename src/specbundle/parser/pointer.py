"""Evaluate ``/``-delimited JSON pointers against a document node.

Pointers follow RFC 6901 (``~1`` decodes to ``/`` and ``~0`` to ``~``)
with two departures that keep a sprawling, imperfect corpus resolvable:

* A key missing from a mapping is looked up once more inside that
  mapping's ``definitions`` container (the legacy Swagger location).
* If the key is still missing, navigation stops and an open-ended object
  schema naming the missing segment is returned instead of an error.

Only structural misuse -- indexing a sequence out of bounds, a
non-integer sequence index, or descending into a scalar -- raises
:class:`~specbundle.exceptions.PointerNavigationError`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Optional

from specbundle.document import NodeKind, fallback_object, kind_of
from specbundle.exceptions import PointerNavigationError

logger = logging.getLogger(__name__)

LEGACY_DEFINITIONS_KEY = "definitions"


def split_pointer(pointer: str) -> list[str]:
    """Split *pointer* into unescaped segments, dropping the leading empty one.

    ``""`` and ``"/"`` both address the whole document and yield ``[]``.
    """
    if pointer in ("", "/"):
        return []
    segments = pointer.split("/")[1:]
    return [s.replace("~1", "/").replace("~0", "~") for s in segments]


def _is_index(segment: str) -> bool:
    # str.isdigit also accepts non-ASCII digits such as "²" that int() rejects.
    return segment.isascii() and segment.isdigit()


def apply_pointer(
    node: Any,
    pointer: str,
    on_missing: Optional[Callable[[str], None]] = None,
) -> Any:
    """Return a deep copy of the value *pointer* addresses inside *node*.

    Args:
        node: The document (or sub-document) to navigate.
        pointer: A JSON pointer such as ``/components/schemas/Pet``. The
            leading ``#`` of a reference must already be stripped.
        on_missing: Called with the segment name whenever a fallback
            schema is synthesised for a missing mapping key.

    Returns:
        The addressed node, or a fallback object schema when a mapping key
        along the way does not exist.

    Raises:
        PointerNavigationError: If a sequence index is invalid or out of
            bounds, or if the pointer descends into a scalar.

    Example::

        apply_pointer({"a": {"b": [10, 20, 30]}}, "/a/b/1")  # -> 20
    """
    current = node
    for segment in split_pointer(pointer):
        kind = kind_of(current)
        if kind is NodeKind.MAPPING:
            if segment in current:
                current = current[segment]
                continue
            # YAML reads unquoted status codes such as 200 as integers.
            if _is_index(segment) and int(segment) in current:
                current = current[int(segment)]
                continue
            legacy = current.get(LEGACY_DEFINITIONS_KEY)
            if isinstance(legacy, dict) and segment in legacy:
                current = legacy[segment]
                continue
            logger.info("Creating fallback definition for missing JSON pointer path: %s", segment)
            if on_missing is not None:
                on_missing(segment)
            return fallback_object(f"Auto-generated fallback definition for: {segment}")
        elif kind is NodeKind.SEQUENCE:
            if not _is_index(segment):
                raise PointerNavigationError(
                    f"Invalid array index in JSON pointer {pointer!r}: {segment!r}",
                    pointer=pointer,
                    segment=segment,
                )
            index = int(segment)
            if index >= len(current):
                raise PointerNavigationError(
                    f"Array index out of bounds in JSON pointer {pointer!r}: {index}",
                    pointer=pointer,
                    segment=segment,
                )
            current = current[index]
        else:
            raise PointerNavigationError(
                f"Cannot apply JSON pointer {pointer!r} to {kind.value} at segment {segment!r}",
                pointer=pointer,
                segment=segment,
            )

    return copy.deepcopy(current)
