"""Document model for parsed JSON/YAML schema trees.

Documents are kept as the plain Python values that :mod:`json` and
:mod:`yaml` produce -- ``dict``, ``list``, ``str``, ``int``, ``float``,
``bool`` and ``None`` -- so that a resolved tree can be handed straight to
a downstream generator. :func:`kind_of` gives every node an explicit
:class:`NodeKind`; the traversals in :mod:`specbundle.parser` and
:mod:`specbundle.normalize` dispatch on it rather than on ad-hoc
``isinstance`` chains.

A mapping whose ``$ref`` value is a string is a *reference node*. Its other
keys are documentation siblings and are dropped when the reference is
replaced by its target.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

REF_KEY = "$ref"


class NodeKind(str, enum.Enum):
    """The six shapes a document node can take."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def kind_of(node: Any) -> NodeKind:
    """Classify *node*.

    Raises:
        TypeError: If *node* is not a JSON/YAML-compatible value.
    """
    if node is None:
        return NodeKind.NULL
    # bool is a subclass of int, so it must be checked first.
    if isinstance(node, bool):
        return NodeKind.BOOL
    if isinstance(node, (int, float)):
        return NodeKind.NUMBER
    if isinstance(node, str):
        return NodeKind.STRING
    if isinstance(node, list):
        return NodeKind.SEQUENCE
    if isinstance(node, dict):
        return NodeKind.MAPPING
    raise TypeError(f"Unsupported document node type: {type(node).__name__}")


def is_reference(node: Any) -> bool:
    """Return ``True`` if *node* is a mapping carrying a string ``$ref``."""
    return isinstance(node, dict) and isinstance(node.get(REF_KEY), str)


def reference_target(node: Any) -> Optional[str]:
    """Return the ``$ref`` string of a reference node, else ``None``."""
    if is_reference(node):
        return node[REF_KEY]
    return None


def fallback_object(description: str) -> dict[str, Any]:
    """Build an open-ended object schema used in place of a missing target."""
    return {
        "type": "object",
        "description": description,
        "additionalProperties": True,
    }


def string_stub(description: str) -> dict[str, Any]:
    """Build the minimal string schema written over unresolvable references."""
    return {"type": "string", "description": description}


def count_references(node: Any) -> int:
    """Count the reference nodes in the tree rooted at *node*.

    Reference nodes are counted once; their siblings are not descended into.
    """
    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        if is_reference(node):
            return 1
        return sum(count_references(value) for value in node.values())
    if kind is NodeKind.SEQUENCE:
        return sum(count_references(item) for item in node)
    return 0
