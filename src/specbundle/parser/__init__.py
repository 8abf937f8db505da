"""Specification tree parser -- load files, evaluate pointers, resolve ``$ref``.

This sub-package turns a root document plus the tree of files it
references into one self-contained, reference-free document.

Typical usage::

    from specbundle.parser import DocumentLoader, RefResolver

    loader = DocumentLoader()
    root = loader.load(spec_path)
    resolved = RefResolver(spec_path.parent, loader=loader).run(root)

Sub-modules:

* :mod:`~specbundle.parser.loader` -- file I/O, JSON/YAML parsing and the
  per-run document cache.
* :mod:`~specbundle.parser.pointer` -- JSON pointer evaluation with
  fallback schemas for dangling keys.
* :mod:`~specbundle.parser.resolver` -- reference resolution, tree
  rewriting and cycle detection.
* :mod:`~specbundle.parser.synthesis` -- well-known fallback definitions
  and cleanup of references that could not be resolved.
"""

from specbundle.parser.loader import DocumentLoader
from specbundle.parser.pointer import apply_pointer
from specbundle.parser.resolver import RefResolver

__all__ = ["DocumentLoader", "RefResolver", "apply_pointer"]
