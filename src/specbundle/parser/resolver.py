"""Resolve ``$ref`` pointers across a multi-file specification tree.

A large OpenAPI description is rarely one file: the root document points
at path files, which point at schema files, which point at each other and
at shared attribute files, using three reference forms:

* ``#/components/schemas/Pet`` -- a JSON pointer into the current file
  (or, failing that, into the root document);
* ``models/pet.yml`` -- a whole external file;
* ``models/pet.yml#/properties/name`` -- a pointer into an external file.

:class:`RefResolver` replaces every reference with its target so the
result is one self-contained document. It owns all per-run state: the
:class:`~specbundle.parser.loader.DocumentLoader` cache, the set of files
currently being resolved (the only basis for cycle detection), and a
snapshot of the root document used for bare ``#/`` pointers.

Real-world trees are imperfect, so most failures degrade instead of
aborting the run: a missing file or a missing pointer target becomes an
open object schema, and a pointer that loops back into itself within one
file becomes a stub at the point of recursion. Two failures are fatal: a
file that exists but cannot be read or parsed, and a genuine cycle of
external file references (:class:`~specbundle.exceptions.CircularReferenceError`).

Typical usage::

    resolver = RefResolver(spec_path.parent)
    resolved = resolver.run(loader.load(spec_path))
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Optional

from specbundle.document import (
    NodeKind,
    count_references,
    fallback_object,
    kind_of,
    reference_target,
)
from specbundle.exceptions import CircularReferenceError, PointerNavigationError
from specbundle.models import ResolutionStats, ResolverConfig
from specbundle.parser.loader import DocumentLoader
from specbundle.parser.pointer import apply_pointer
from specbundle.parser.synthesis import clean_unresolved_refs, inject_definitions

logger = logging.getLogger(__name__)

ROOT_SCOPE = "<root>"


class RefResolver:
    """Multi-pass ``$ref`` resolver for one resolution run.

    One instance serves exactly one run and is not thread-safe: the file
    cache, the resolving set and the root snapshot are mutated sequentially.

    Args:
        base_dir: Directory of the root document. External references in
            the root document are resolved relative to it.
        config: Resolver settings. Defaults to :class:`ResolverConfig`.
        loader: Document loader to share. A fresh one is created by default.
        stats: Counter record to update. A fresh one is created by default.
    """

    def __init__(
        self,
        base_dir: str | Path,
        config: Optional[ResolverConfig] = None,
        loader: Optional[DocumentLoader] = None,
        stats: Optional[ResolutionStats] = None,
    ) -> None:
        self.base_dir = Path(base_dir).resolve()
        self.config = ResolverConfig() if config is None else config
        self.loader = DocumentLoader(self.config.numeric_repairs) if loader is None else loader
        self.stats = ResolutionStats() if stats is None else stats
        self._root: Any = None
        # Files on the active call chain, outermost first.
        self._resolving: list[Path] = []
        self._resolved_files: dict[Path, Any] = {}
        self._active_pointers: set[tuple[str, str]] = set()

    @property
    def root_document(self) -> Any:
        """The unresolved root snapshot that bare ``#/`` pointers fall back to."""
        return self._root

    def set_root(self, document: Any) -> None:
        """Snapshot *document* as the fallback context for ``#/`` pointers."""
        self._root = copy.deepcopy(document)

    # ------------------------------------------------------------------ #
    # Driver
    # ------------------------------------------------------------------ #

    def run(self, document: dict[str, Any]) -> Any:
        """Resolve every reference in *document* and return the result.

        Steps:

        1. Snapshot the document, inject the well-known fallback
           definitions, and snapshot again so they are resolvable.
        2. Rewrite the whole document up to ``max_passes`` times, stopping
           as soon as a pass leaves no reference behind.
        3. Overwrite any reference that survived with a string stub.

        *document* is rewritten in place where possible; use the return
        value, since a root that is itself a reference is replaced outright.

        Raises:
            CircularReferenceError: If external files reference each other
                in a cycle.
            SpecIOError: If a referenced file exists but cannot be read.
            SpecParseError: If a referenced file cannot be parsed.
            PointerNavigationError: If a pointer indexes a sequence out of
                bounds or descends into a scalar.
        """
        self.set_root(document)
        if self.config.inject_definitions and isinstance(document, dict):
            self.stats.definitions_injected = inject_definitions(
                document, self.config.definitions_key
            )
            self.set_root(document)

        result: Any = document
        for number in range(1, self.config.max_passes + 1):
            logger.debug("Reference resolution pass %d", number)
            before = self.stats.refs_resolved
            result = self.rewrite(result, self.base_dir)
            self.stats.passes_run = number
            logger.debug(
                "Pass %d resolved %d reference(s)", number, self.stats.refs_resolved - before
            )
            if count_references(result) == 0:
                break

        self.stats.refs_stubbed += clean_unresolved_refs(result, self.config.cleanup)
        self.stats.files_loaded = len(self.loader)
        return result

    # ------------------------------------------------------------------ #
    # Tree rewriting
    # ------------------------------------------------------------------ #

    def rewrite(
        self,
        node: Any,
        current_dir: Path,
        context: Any = None,
        scope: str = ROOT_SCOPE,
    ) -> Any:
        """Replace every reference under *node* with its resolved target.

        Mappings and sequences are updated in place. A reference node is
        replaced wholesale -- its sibling keys are discarded -- so the
        caller must use the return value.

        Args:
            node: The subtree to rewrite.
            current_dir: Directory that relative file references in
                *node* are resolved against.
            context: Unmodified parse of the file *node* came from, used
                for its ``#/`` pointers. ``None`` means the root document.
            scope: Identity of *context* for recursion tracking.

        Returns:
            The rewritten node.
        """
        kind = kind_of(node)
        if kind is NodeKind.MAPPING:
            ref = reference_target(node)
            if ref is not None:
                return self.resolve_ref(ref, current_dir, context, scope)
            for key, value in node.items():
                node[key] = self.rewrite(value, current_dir, context, scope)
        elif kind is NodeKind.SEQUENCE:
            for index, item in enumerate(node):
                node[index] = self.rewrite(item, current_dir, context, scope)
        return node

    # ------------------------------------------------------------------ #
    # Single references
    # ------------------------------------------------------------------ #

    def resolve_ref(
        self,
        ref: str,
        current_dir: Path,
        context: Any = None,
        scope: Optional[str] = None,
    ) -> Any:
        """Resolve a single ``$ref`` string to a fully rewritten node.

        ``#/pointer`` and ``#`` forms are evaluated against *context*
        first and the root snapshot second. ``file`` and ``file#/pointer``
        forms load the file relative to *current_dir*, resolve all of its
        own references, then apply the pointer.

        Args:
            ref: The reference string.
            current_dir: Base directory for relative file references.
            context: File-local document for internal pointers, or ``None``.
            scope: Identity of *context*; defaults to the root scope when
                *context* is ``None``.

        Returns:
            The resolved node, or a fallback schema when the target is missing.

        Only a reference whose target exists counts towards
        ``stats.refs_resolved``.
        """
        if scope is None:
            scope = ROOT_SCOPE if context is None else "<context>"

        file_part, _, pointer = ref.partition("#")
        if not file_part:
            node, found = self._resolve_pointer(ref, pointer, Path(current_dir), context, scope)
        else:
            node, found = self._resolve_external(file_part, pointer, Path(current_dir))
        # Fallbacks and recursion stubs are counted separately.
        if found:
            self.stats.refs_resolved += 1
        return node

    def _resolve_pointer(
        self,
        ref: str,
        pointer: str,
        current_dir: Path,
        context: Any,
        scope: str,
    ) -> tuple[Any, bool]:
        target, found, target_dir, target_context, target_scope = self._lookup(
            pointer, current_dir, context, scope
        )
        key = (target_scope, pointer)
        if key in self._active_pointers:
            logger.info("Recursive reference %s in %s; substituting fallback schema", ref, target_scope)
            self.stats.recursive_stubs += 1
            return fallback_object(f"Recursive reference: {ref}"), False

        self._active_pointers.add(key)
        try:
            return self.rewrite(target, target_dir, target_context, target_scope), found
        finally:
            self._active_pointers.discard(key)

    def _lookup(
        self,
        pointer: str,
        current_dir: Path,
        context: Any,
        scope: str,
    ) -> tuple[Any, bool, Path, Any, str]:
        """Evaluate *pointer* against *context*, falling back to the root snapshot."""
        if context is not None:
            try:
                target, found = self._apply_pointer(context, pointer)
                return target, found, current_dir, context, scope
            except PointerNavigationError as exc:
                logger.debug("Pointer %r failed in %s (%s); trying root document", pointer, scope, exc)
        target, found = self._apply_pointer(self._root, pointer)
        return target, found, self.base_dir, None, ROOT_SCOPE

    def _resolve_external(
        self, file_part: str, pointer: str, current_dir: Path
    ) -> tuple[Any, bool]:
        file_path = current_dir / file_part
        if not file_path.is_file():
            repaired = self._repair_path(file_part)
            if repaired is not None and (current_dir / repaired).is_file():
                file_path = current_dir / repaired
                self.stats.path_repairs += 1
                logger.warning(
                    "Corrected problematic path %r to %r -> %s", file_part, repaired, file_path
                )

        if not file_path.is_file():
            logger.info("Using fallback for missing file reference: %s -> %s", file_part, file_path)
            self.stats.file_fallbacks += 1
            return fallback_object(f"Fallback schema for missing file reference: {file_part}"), False

        document = self._resolve_file(file_path.resolve())
        if pointer:
            return self._apply_pointer(document, pointer)
        return document, True
    def _resolve_file(self, canonical: Path) -> Any:
        """Load *canonical* and resolve all of its references, once per run."""
        if canonical in self._resolved_files:
            return copy.deepcopy(self._resolved_files[canonical])
        if canonical in self._resolving:
            raise CircularReferenceError(canonical, self._resolving)

        self._resolving.append(canonical)
        try:
            document = self.loader.load(canonical)
            # Internal pointers resolve against the file as written, not
            # against the copy being rewritten.
            original = copy.deepcopy(document)
            document = self.rewrite(document, canonical.parent, original, str(canonical))
        finally:
            self._resolving.remove(canonical)

        self._resolved_files[canonical] = document
        return copy.deepcopy(document)

    def _repair_path(self, file_part: str) -> Optional[str]:
        for prefix, replacement in self.config.path_repairs.items():
            if file_part.startswith(prefix):
                return replacement + file_part[len(prefix):]
        return None

    def _apply_pointer(self, node: Any, pointer: str) -> tuple[Any, bool]:
        """Apply *pointer* to *node*; the flag is False when a fallback was synthesised."""
        missed: list[str] = []

        def on_missing(segment: str) -> None:
            missed.append(segment)
            self.stats.pointer_fallbacks += 1

        return apply_pointer(node, pointer, on_missing), not missed
