"""Post-resolution normalisers.

These passes run once, after :class:`~specbundle.parser.resolver.RefResolver`
has produced a reference-free document. They are independent of each other
and of order:

* :mod:`~specbundle.normalize.responses` -- collapses every operation to a
  single response shape for generators that require one.
* :mod:`~specbundle.normalize.text` -- rewrites ``description`` and
  ``example`` strings so documentation tooling never executes them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specbundle.models import NormalizeConfig, ResolutionStats
from specbundle.normalize.responses import deduplicate_responses
from specbundle.normalize.text import sanitize_documentation

logger = logging.getLogger(__name__)


def normalize_document(
    document: dict[str, Any],
    config: Optional[NormalizeConfig] = None,
    stats: Optional[ResolutionStats] = None,
) -> ResolutionStats:
    """Run the enabled normalisers over *document* in place.

    Args:
        document: A resolved document.
        config: Which passes to run. Defaults to all of them.
        stats: Counter record to update; a new one is created if omitted.

    Returns:
        The updated statistics.
    """
    config = NormalizeConfig() if config is None else config
    stats = ResolutionStats() if stats is None else stats

    if config.sanitize_text:
        fixes = sanitize_documentation(document, config)
        stats.text_fixes += fixes
        logger.info("Applied %d documentation fixes", fixes)

    if config.dedupe_responses:
        modified, removed = deduplicate_responses(document)
        stats.operations_simplified += modified
        stats.responses_removed += removed

    return stats


__all__ = ["deduplicate_responses", "normalize_document", "sanitize_documentation"]
