"""Bundle command -- resolve a multi-file specification into one document.

Provides ``specbundle bundle``, the main entry point for build scripts:
it loads the root document, resolves every reference across the file
tree, applies the normalisers, and writes the result as JSON or YAML to
stdout or to a file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specbundle.commands import fail
from specbundle.exceptions import SpecbundleError, SpecIOError
from specbundle.models import DocumentFormat, ResolutionStats
from specbundle.output import debug, info, print_data, success, warning


def _report_fallbacks(stats: ResolutionStats) -> None:
    """Warn about degradations that usually mean the input tree is incomplete."""
    if stats.file_fallbacks:
        warning(f"{stats.file_fallbacks} missing file reference(s) replaced by fallback schemas")
    if stats.refs_stubbed:
        warning(f"{stats.refs_stubbed} unresolved reference(s) replaced by string stubs")


def bundle_command(
    root: Path = typer.Argument(help="Root JSON/YAML document of the specification."),
    output_path: Optional[Path] = typer.Option(
        None, "-o", "--output", help="Write the bundled document to this file."
    ),
    fmt: Optional[DocumentFormat] = typer.Option(
        None, "--format", help="Serialisation format (json or yaml)."
    ),
    passes: Optional[int] = typer.Option(
        None, "--passes", min=1, help="Maximum number of resolution passes."
    ),
    no_normalize: bool = typer.Option(
        False, "--no-normalize", help="Skip response deduplication and text sanitising."
    ),
    no_definitions: bool = typer.Option(
        False, "--no-definitions", help="Do not inject the well-known fallback definitions."
    ),
) -> None:
    """Resolve every $ref under ROOT and emit one self-contained document.

    Settings not given on the command line come from ``SPECBUNDLE_*``
    environment variables, ``./specbundle.json``, and the global config,
    in that order.

    Raises:
        typer.Exit: With the error's exit code when loading, parsing, or
            resolution fails (see :mod:`specbundle.exit_codes`).

    Example::

        specbundle bundle specification/api.v2.yaml -o bundled.json
        specbundle bundle api.yaml --format yaml --passes 5 > bundled.yaml
    """
    from specbundle.config import atomic_write, resolve_config
    from specbundle.engine import bundle_spec, dump_document

    try:
        config = resolve_config(
            cli_max_passes=passes,
            cli_format=fmt.value if fmt is not None else None,
            cli_inject_definitions=False if no_definitions else None,
            cli_normalize=False if no_normalize else None,
        )
        debug(f"Effective config: {config.model_dump_json()}")
        result = bundle_spec(root, config)
        text = dump_document(result.document, config.output.format, config.output.indent)
        if output_path is not None:
            atomic_write(output_path, text)
    except SpecbundleError as exc:
        raise fail(exc) from None
    except OSError as exc:
        raise fail(SpecIOError(f"Cannot write {output_path}: {exc}")) from None

    stats = result.stats
    _report_fallbacks(stats)
    if output_path is None:
        print_data(text)
        info(
            f"Resolved {stats.refs_resolved} reference(s) across "
            f"{stats.files_loaded} file(s) in {stats.passes_run} pass(es)"
        )
    else:
        success(f"Wrote {output_path} ({stats.refs_resolved} reference(s) resolved)")
