"""End-to-end bundling of a multi-file specification into one document.

:func:`bundle_spec` is the entry point used by the CLI and by build
scripts that feed a code generator::

    result = bundle_spec("specification/api.v2.yaml")
    generator.generate(result.document)

The pipeline is Loader -> :class:`~specbundle.parser.resolver.RefResolver`
(synthesis, rewrite passes, cleanup) -> normalisers. The returned document
contains no ``$ref`` keys.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from specbundle.exceptions import SpecParseError
from specbundle.models import BundleResult, DocumentFormat, GlobalConfig, ResolutionStats
from specbundle.normalize import normalize_document
from specbundle.parser.loader import DocumentLoader
from specbundle.parser.resolver import RefResolver

logger = logging.getLogger(__name__)


def bundle_spec(root_path: str | Path, config: Optional[GlobalConfig] = None) -> BundleResult:
    """Load, resolve and normalise the document at *root_path*.

    External references are resolved relative to the root document's
    directory.

    Args:
        root_path: Path to the root JSON/YAML document.
        config: Effective configuration; defaults to :class:`GlobalConfig`.

    Returns:
        A :class:`BundleResult` with the resolved document and run statistics.

    Raises:
        SpecIOError: If the root or a referenced file cannot be read.
        SpecParseError: If a file cannot be parsed, or the root is not a mapping.
        CircularReferenceError: If external files reference each other in a cycle.
        PointerNavigationError: On structural pointer misuse.
    """
    config = GlobalConfig() if config is None else config
    root = Path(root_path).resolve()
    logger.info("Resolving %s", root)

    loader = DocumentLoader(config.resolver.numeric_repairs)
    document = loader.load(root)
    if not isinstance(document, dict):
        raise SpecParseError(
            f"Root document must be a JSON/YAML object (got {type(document).__name__}): {root}"
        )

    document, stats = resolve_document(document, root.parent, config, loader=loader)
    logger.info(
        "Resolved %d reference(s) across %d file(s) in %d pass(es)",
        stats.refs_resolved,
        stats.files_loaded,
        stats.passes_run,
    )
    return BundleResult(root_path=str(root), document=document, stats=stats)


def resolve_document(
    document: dict[str, Any],
    base_dir: str | Path,
    config: Optional[GlobalConfig] = None,
    loader: Optional[DocumentLoader] = None,
) -> tuple[dict[str, Any], ResolutionStats]:
    """Resolve and normalise an already-loaded root *document* in place.

    Args:
        document: The unresolved root mapping.
        base_dir: Directory that the root's relative file references use.
        config: Effective configuration; defaults to :class:`GlobalConfig`.
        loader: Loader to share with the resolver (e.g. one that already
            cached the root file).

    Returns:
        ``(resolved_document, stats)``.
    """
    config = GlobalConfig() if config is None else config
    resolver = RefResolver(base_dir, config.resolver, loader)
    resolved = resolver.run(document)
    if not isinstance(resolved, dict):
        raise SpecParseError(
            f"Root document resolved to {type(resolved).__name__}, expected an object"
        )
    normalize_document(resolved, config.normalize, resolver.stats)
    return resolved, resolver.stats


def dump_document(
    document: Any,
    fmt: DocumentFormat = DocumentFormat.JSON,
    indent: int = 2,
) -> str:
    """Serialise *document* as JSON or YAML, preserving key order.

    Returns:
        The serialised text, ending with a newline.
    """
    if fmt == DocumentFormat.YAML:
        return yaml.safe_dump(
            document,
            sort_keys=False,
            allow_unicode=True,
            indent=indent or None,
            default_flow_style=False,
        )
    return json.dumps(document, indent=indent or None, ensure_ascii=False) + "\n"
