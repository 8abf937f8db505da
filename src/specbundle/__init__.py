"""specbundle -- Bundle multi-file OpenAPI specifications into one document.

This package loads a root JSON/YAML document, follows every ``$ref`` across
the surrounding file tree, and emits a single self-contained document with
no references left in it, ready to hand to a client code generator.

Typical workflow::

    specbundle bundle specification/api.v2.yaml -o bundled.json
    specbundle inspect specification/api.v2.yaml

Modules:
    app: Typer application and CLI entry point.
    engine: End-to-end bundling (:func:`~specbundle.engine.bundle_spec`).
    parser: Loader, JSON pointer evaluation, and the multi-pass resolver.
    normalize: Response deduplication and documentation-text sanitising.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
