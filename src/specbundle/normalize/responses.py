"""Collapse each operation's responses to a single shape.

Downstream client generators commonly assume one success type per
operation and fail on operations that declare several. This pass is a
deliberately lossy simplification to meet that contract: any operation
with more than one ``2xx`` response, or more than two responses in total,
keeps exactly one entry, chosen in this order:

1. the first ``2xx`` response;
2. otherwise the first response that is not ``default``;
3. otherwise ``default``.

The kept response is trimmed to its first content type.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "head", "options", "trace")


def is_success_status(status: Any) -> bool:
    """Return ``True`` for three-character ``2xx`` keys such as ``200`` or ``2XX``."""
    text = str(status)
    return len(text) == 3 and text.startswith("2")


def pick_response(responses: dict[Any, Any]) -> Optional[Any]:
    """Return the status key that survives deduplication, or ``None`` if empty."""
    for status in responses:
        if is_success_status(status):
            return status
    for status in responses:
        if str(status) != "default":
            return status
    return next(iter(responses), None)


def _keep_first_content_type(response: Any) -> None:
    if not isinstance(response, dict):
        return
    content = response.get("content")
    if isinstance(content, dict) and len(content) > 1:
        first = next(iter(content))
        response["content"] = {first: content[first]}


def simplify_responses(responses: dict[Any, Any]) -> int:
    """Collapse *responses* in place if it needs collapsing.

    Returns:
        The number of response entries removed (``0`` if left untouched).
    """
    success_count = sum(1 for status in responses if is_success_status(status))
    if success_count <= 1 and len(responses) <= 2:
        return 0

    original_count = len(responses)
    keep = pick_response(responses)
    kept = responses[keep]
    _keep_first_content_type(kept)
    responses.clear()
    responses[keep] = kept
    return original_count - 1


def deduplicate_responses(document: dict[str, Any]) -> tuple[int, int]:
    """Apply :func:`simplify_responses` to every operation under ``paths``.

    Non-method keys of a path item (``parameters``, ``summary``, ``$ref``
    leftovers, vendor extensions) are skipped.

    Returns:
        ``(operations_modified, responses_removed)``.
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return 0, 0

    operations_modified = 0
    responses_removed = 0
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method not in HTTP_METHODS or not isinstance(operation, dict):
                continue
            responses = operation.get("responses")
            if not isinstance(responses, dict) or not responses:
                continue
            count = len(responses)
            removed = simplify_responses(responses)
            if removed:
                logger.info(
                    "Operation '%s' (%s %s) had %d responses; kept %s",
                    operation.get("operationId", "unknown"),
                    method.upper(),
                    path,
                    count,
                    next(iter(responses)),
                )
                operations_modified += 1
                responses_removed += removed

    if operations_modified:
        logger.info(
            "Modified %d operations, removed %d duplicate responses",
            operations_modified,
            responses_removed,
        )
    else:
        logger.debug("No operations with multiple response types found")
    return operations_modified, responses_removed
