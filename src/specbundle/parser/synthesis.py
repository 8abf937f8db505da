"""Fallback definitions injected before resolution, and cleanup run after it.

Two passes bracket the rewrite passes of
:class:`~specbundle.parser.resolver.RefResolver`:

1. :func:`inject_definitions` adds a fixed catalog of well-known schema
   fragments (:data:`WELL_KNOWN_DEFINITIONS`) to the root document's
   ``definitions`` container. Names that are referenced across the corpus
   but defined in files that are often missing from an extracted archive
   then resolve deterministically, without network access.

2. :func:`clean_unresolved_refs` replaces every reference that survived
   the rewrite passes with a string-typed stub whose description quotes
   the original ``$ref`` text.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from specbundle.document import (
    NodeKind,
    kind_of,
    reference_target,
    string_stub,
)
from specbundle.models import CleanupConfig

logger = logging.getLogger(__name__)

_PAGE_URL = "https://api.digitalocean.com/v2/images?page={}"


def _page_link(page: int) -> dict[str, Any]:
    return {"type": "string", "format": "uri", "example": _PAGE_URL.format(page)}


WELL_KNOWN_DEFINITIONS: dict[str, dict[str, Any]] = {
    "forward_links": {
        "type": "object",
        "properties": {
            "first": _page_link(1),
            "last": _page_link(3),
            "next": _page_link(2),
        },
    },
    "backward_links": {
        "type": "object",
        "properties": {
            "first": _page_link(1),
            "last": _page_link(3),
            "prev": _page_link(1),
        },
    },
    "existing_tags_array": {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "minLength": 1,
                    "maxLength": 255,
                    "example": "web",
                },
                "resources": {
                    "type": "object",
                    "properties": {
                        "count": {"type": "integer", "example": 0},
                        "last_tagged_uri": {"type": "string", "example": ""},
                    },
                },
            },
            "required": ["name", "resources"],
        },
    },
    "error_response": {
        "type": "object",
        "properties": {
            "id": {"type": "string", "example": "bad_request"},
            "message": {"type": "string", "example": "The request was invalid."},
            "request_id": {
                "type": "string",
                "example": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
            },
        },
        "required": ["id", "message"],
    },
    "kubernetes_node_pool_taint": {
        "type": "object",
        "properties": {
            "key": {
                "type": "string",
                "example": "node.kubernetes.io/example-key",
                "description": "The taint key",
            },
            "value": {
                "type": "string",
                "example": "example-value",
                "description": "The taint value",
            },
            "effect": {
                "type": "string",
                "enum": ["NoSchedule", "PreferNoSchedule", "NoExecute"],
                "example": "NoSchedule",
                "description": "The taint effect",
            },
        },
        "required": ["key", "effect"],
    },
    "region_state": {
        "type": "string",
        "enum": ["available", "unavailable"],
        "example": "available",
        "description": "The availability state of the region",
    },
    "apiChatbot": {
        "type": "object",
        "properties": {
            "id": {"type": "string", "example": "chatbot-123"},
            "name": {"type": "string", "example": "Customer Support Bot"},
            "enabled": {"type": "boolean", "example": True},
            "settings": {"type": "object", "additionalProperties": True},
        },
    },
}


def inject_definitions(document: dict[str, Any], key: str = "definitions") -> list[str]:
    """Add the well-known fallback definitions to *document* in place.

    The ``key`` container is created when absent. Existing entries are never
    overwritten, so running this twice adds nothing the second time.

    Args:
        document: The root document mapping.
        key: Name of the top-level definitions container.

    Returns:
        Names of the definitions that were actually added, in catalog order.
    """
    container = document.setdefault(key, {})
    if not isinstance(container, dict):
        logger.warning("Top-level %r is not a mapping; skipping fallback definitions", key)
        return []

    added: list[str] = []
    for name, schema in WELL_KNOWN_DEFINITIONS.items():
        if name not in container:
            container[name] = copy.deepcopy(schema)
            added.append(name)
    if added:
        logger.info("Added fallback definitions: %s", ", ".join(added))
    return added


def is_known_unresolvable(ref: str, patterns: Optional[CleanupConfig] = None) -> bool:
    """Return ``True`` if *ref* matches one of the known-unresolvable patterns."""
    patterns = CleanupConfig() if patterns is None else patterns
    if any(fragment in ref for fragment in patterns.contains):
        return True
    if any(ref.startswith(prefix) for prefix in patterns.prefixes):
        return True
    if "#" not in ref and any(ref.endswith(suffix) for suffix in patterns.bare_suffixes):
        return True
    return False


def clean_unresolved_refs(node: Any, patterns: Optional[CleanupConfig] = None) -> int:
    """Overwrite surviving reference nodes under *node* with string stubs.

    Reference mappings are cleared and refilled in place, so *node* itself
    is updated even when it is a reference. Which references qualify is
    decided by *patterns*: the closed set of known-unresolvable forms, plus
    everything else when ``stub_all_unresolved`` is set.

    Returns:
        The number of references replaced.
    """
    patterns = CleanupConfig() if patterns is None else patterns
    kind = kind_of(node)
    if kind is NodeKind.MAPPING:
        ref = reference_target(node)
        if ref is not None:
            if patterns.stub_all_unresolved or is_known_unresolvable(ref, patterns):
                logger.info("Replacing unresolved reference %r with fallback schema", ref)
                node.clear()
                node.update(string_stub(f"Fallback for unresolved reference: {ref}"))
                return 1
            return 0
        return sum(clean_unresolved_refs(value, patterns) for value in node.values())
    if kind is NodeKind.SEQUENCE:
        return sum(clean_unresolved_refs(item, patterns) for item in node)
    return 0

