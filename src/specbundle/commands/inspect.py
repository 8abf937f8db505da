"""Inspect command -- report what a bundling run would do.

Provides ``specbundle inspect``, a read-only companion to ``bundle``: it
runs the full resolution pipeline but prints the run statistics instead
of the document. Useful for spotting an incompletely extracted tree
(many file fallbacks) before wiring the output into a generator.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from specbundle.commands import fail
from specbundle.exceptions import SpecbundleError
from specbundle.normalize.responses import HTTP_METHODS
from specbundle.output import get_output


def _document_rows(document: dict[str, Any], definitions_key: str) -> list[list[str]]:
    paths = document.get("paths")
    paths = paths if isinstance(paths, dict) else {}
    operations = sum(
        1
        for item in paths.values()
        if isinstance(item, dict)
        for method in item
        if method in HTTP_METHODS
    )
    definitions = document.get(definitions_key)
    components = document.get("components")
    schemas = components.get("schemas") if isinstance(components, dict) else None
    return [
        ["paths", str(len(paths))],
        ["operations", str(operations)],
        [definitions_key, str(len(definitions)) if isinstance(definitions, dict) else "0"],
        ["components.schemas", str(len(schemas)) if isinstance(schemas, dict) else "0"],
    ]


def inspect_command(
    root: Path = typer.Argument(help="Root JSON/YAML document of the specification."),
    passes: Optional[int] = typer.Option(
        None, "--passes", min=1, help="Maximum number of resolution passes."
    ),
) -> None:
    """Resolve ROOT and print the resolution statistics.

    Shows one row per counter of
    :class:`~specbundle.models.ResolutionStats` followed by a summary of
    the resolved document's shape.

    Example::

        specbundle inspect specification/api.v2.yaml
        specbundle --json inspect specification/api.v2.yaml
    """
    from specbundle.config import resolve_config
    from specbundle.engine import bundle_spec

    try:
        config = resolve_config(cli_max_passes=passes)
        result = bundle_spec(root, config)
    except SpecbundleError as exc:
        raise fail(exc) from None

    rows = result.stats.as_rows()
    rows.extend(_document_rows(result.document, config.resolver.definitions_key))
    get_output().print_table(
        ["Metric", "Value"], rows, title=f"{root.name} -- Resolution"
    )
