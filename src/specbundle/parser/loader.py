"""Load and memoise JSON/YAML documents from disk.

Every file in a multi-file specification tree passes through
:class:`DocumentLoader`. A file is read and parsed at most once per run;
later loads of the same path are served from an in-memory cache. The
caller is responsible for canonicalising paths -- the loader keys its
cache by the exact path it is given.

Parsing tries JSON first for ``.json`` files and YAML for everything
else, falling back to the other format when the first one fails. YAML is
read with a safe loader that leaves timestamps as strings and rejects the
explicit tags (``!!set``, ``!!binary``, ``!!omap``, ``!!pairs``,
``!!timestamp``) that have no JSON equivalent, so every parsed node stays
within :mod:`specbundle.document`'s model.

One corpus-specific repair is attempted before a parse error is surfaced:
if the raw text contains a configured literal (by default an unsigned
64-bit overflow value emitted by an upstream generator), the literal is
substituted and parsing is retried once.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from specbundle.exceptions import SpecIOError, SpecParseError

logger = logging.getLogger(__name__)

DEFAULT_NUMERIC_REPAIRS: dict[str, str] = {
    "18446744073709552000": "18446744073709551615",
}


class _DocumentYAMLLoader(yaml.SafeLoader):
    """Safe YAML loader that keeps timestamps as plain strings."""


_DocumentYAMLLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag != "tag:yaml.org,2002:timestamp"
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _reject_tag(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    raise yaml.constructor.ConstructorError(
        None, None, f"unsupported YAML tag {node.tag!r}: no JSON equivalent", node.start_mark
    )


# Explicitly tagged sets, binaries, ordered pairs and timestamps would build
# set, bytes, tuple and datetime nodes.
for _tag in ("set", "binary", "omap", "pairs", "timestamp"):
    _DocumentYAMLLoader.add_constructor(f"tag:yaml.org,2002:{_tag}", _reject_tag)


class DocumentLoader:
    """Read-through cache of parsed documents keyed by file path.

    Args:
        numeric_repairs: Literal substitutions applied once after a failed
            parse. Defaults to :data:`DEFAULT_NUMERIC_REPAIRS`.

    Example::

        loader = DocumentLoader()
        root = loader.load(Path("specification/api.yaml").resolve())
    """

    def __init__(self, numeric_repairs: Optional[Mapping[str, str]] = None) -> None:
        self._repairs = dict(
            DEFAULT_NUMERIC_REPAIRS if numeric_repairs is None else numeric_repairs
        )
        self._cache: dict[Path, Any] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, path: object) -> bool:
        return path in self._cache

    def load(self, path: Path) -> Any:
        """Return the parsed document at *path*.

        The cached parse is never handed out directly: each call returns a
        deep copy, so callers may rewrite the result in place.

        Args:
            path: Path to the document, already resolved by the caller.

        Returns:
            The parsed document node.

        Raises:
            SpecIOError: If the file does not exist or cannot be read.
            SpecParseError: If the content is neither valid JSON nor YAML.
        """
        path = Path(path)
        if path not in self._cache:
            content = _read_text(path)
            self._cache[path] = self._parse_with_repair(content, path)
            logger.debug("Loaded %s", path)
        return copy.deepcopy(self._cache[path])

    def cache_info(self) -> dict[str, Any]:
        """Return ``files`` (count) and ``paths`` (sorted strings) of cached documents."""
        return {
            "files": len(self._cache),
            "paths": sorted(str(p) for p in self._cache),
        }

    def _parse_with_repair(self, content: str, path: Path) -> Any:
        hint = _hint_for(path)
        try:
            return parse_content(content, hint=hint, source=str(path))
        except SpecParseError:
            tokens = [token for token in self._repairs if token in content]
            if not tokens:
                raise
        repaired = content
        for token in tokens:
            repaired = repaired.replace(token, self._repairs[token])
        logger.warning(
            "Parse of %s failed; retrying with repaired literal(s): %s",
            path,
            ", ".join(tokens),
        )
        return parse_content(repaired, hint=hint, source=str(path))


def _read_text(path: Path) -> str:
    if not path.is_file():
        raise SpecIOError(f"Document file not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecIOError(f"Failed to read document file {path}: {exc}") from exc


def _hint_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return ""


def parse_content(content: str, hint: str = "", source: str = "<string>") -> Any:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.
    Unlike a root specification, a referenced file may hold any node kind,
    so no shape check is made here.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').
        source: Name used in error messages.

    Returns:
        The parsed document node (``None`` for an empty YAML document).

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            # If the hint was explicitly JSON, don't try YAML
            if hint == "json":
                raise SpecParseError(f"Invalid JSON in {source}: {exc}") from exc

    try:
        return yaml.load(content, Loader=_DocumentYAMLLoader)  # noqa: S506 -- SafeLoader subclass
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = f"Failed to parse {source} as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)
