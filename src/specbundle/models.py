"""Canonical Pydantic models shared across all specbundle modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory
or in a project-local ``specbundle.json``:
    :class:`ResolverConfig`, :class:`CleanupConfig`, :class:`NormalizeConfig`,
    :class:`OutputConfig`, and :class:`GlobalConfig`.

**Run output models** -- produced by :func:`~specbundle.engine.bundle_spec`
and consumed by the CLI or by a downstream code generator:
    :class:`ResolutionStats` and :class:`BundleResult`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field


# --- Resolver Config ---


class CleanupConfig(BaseModel):
    """Patterns for references that are known to be unresolvable in the corpus.

    A ``$ref`` string matching any rule is replaced by a string-typed stub
    after the rewrite passes. With ``stub_all_unresolved`` every surviving
    reference is stubbed as well, so the output never contains ``$ref``.
    """

    contains: list[str] = Field(
        default_factory=lambda: ["../../../shared/", "shared/attributes/", "node.yml"],
        description="Substrings that mark a reference as unresolvable",
    )
    prefixes: list[str] = Field(
        default_factory=lambda: ["#/api"],
        description="Root pointer prefixes that are known to be dangling",
    )
    bare_suffixes: list[str] = Field(
        default_factory=lambda: [".yml"],
        description="File extensions that are unresolvable when no '#' pointer follows",
    )
    stub_all_unresolved: bool = Field(
        default=True,
        description="Also stub references that match no rule once cleanup has run",
    )


class ResolverConfig(BaseModel):
    """Settings for the multi-pass ``$ref`` resolver.

    See Also:
        :class:`~specbundle.parser.resolver.RefResolver`: The consumer.
    """

    max_passes: int = Field(
        default=3, ge=1, description="Upper bound on whole-document rewrite passes"
    )
    inject_definitions: bool = Field(
        default=True, description="Insert the well-known fallback definitions before resolving"
    )
    definitions_key: str = Field(
        default="definitions", description="Top-level container that receives injected definitions"
    )
    path_repairs: dict[str, str] = Field(
        default_factory=lambda: {"../../../shared/": "shared/"},
        description="Malformed ancestor-traversal prefixes and their corrected form",
    )
    numeric_repairs: dict[str, str] = Field(
        default_factory=lambda: {"18446744073709552000": "18446744073709551615"},
        description="Literal substitutions retried once when a file fails to parse",
    )
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)


class NormalizeConfig(BaseModel):
    """Post-resolution normalisation passes."""

    dedupe_responses: bool = Field(
        default=True, description="Collapse each operation to a single response shape"
    )
    sanitize_text: bool = Field(
        default=True, description="Make description/example text inert for doc tooling"
    )
    autolink_urls: list[str] = Field(
        default_factory=lambda: [
            "https://github.com/google/re2/wiki/Syntax",
            "https://www.digitalocean.com/legal/terms-of-service-agreement/",
        ],
        description="Bare URLs to wrap in angle brackets",
    )
    literal_escapes: list[str] = Field(
        default_factory=lambda: ["[V2]"],
        description="Bracketed literals that must not be read as link references",
    )


class DocumentFormat(str, enum.Enum):
    """Serialisation format for the resolved document."""

    JSON = "json"
    YAML = "yaml"


class OutputConfig(BaseModel):
    """How the resolved document is written out."""

    format: DocumentFormat = Field(default=DocumentFormat.JSON)
    indent: int = Field(default=2, ge=0)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specbundle/config.json``.

    Loaded and saved by :func:`~specbundle.config.load_global_config` and
    :func:`~specbundle.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specbundle.config.resolve_config`
    for the full precedence chain.
    """

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    normalize: NormalizeConfig = Field(default_factory=NormalizeConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Run output ---


class ResolutionStats(BaseModel):
    """Counters collected over one resolution run.

    The fallback counters are the interesting ones: a high
    ``file_fallbacks`` usually means the input tree was extracted
    incompletely.
    """

    files_loaded: int = 0
    passes_run: int = 0
    refs_resolved: int = 0
    definitions_injected: list[str] = Field(default_factory=list)
    path_repairs: int = 0
    file_fallbacks: int = 0
    pointer_fallbacks: int = 0
    recursive_stubs: int = 0
    refs_stubbed: int = 0
    operations_simplified: int = 0
    responses_removed: int = 0
    text_fixes: int = 0

    def as_rows(self) -> list[list[str]]:
        """Return ``[name, value]`` rows for table output."""
        rows: list[list[str]] = []
        for name, value in self.model_dump().items():
            if isinstance(value, list):
                value = ", ".join(value) or "-"
            rows.append([name, str(value)])
        return rows


class BundleResult(BaseModel):
    """A fully resolved document plus the statistics of the run that produced it."""

    root_path: str
    document: dict[str, Any]
    stats: ResolutionStats = Field(default_factory=ResolutionStats)
