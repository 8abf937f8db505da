"""Make ``description`` and ``example`` text inert for documentation tooling.

Descriptions in public API specifications are Markdown written for a web
renderer. When a generator copies them into doc comments, unlabeled code
fences get compiled as doc-tests, and ``<host>``-style placeholders get
parsed as HTML. This pass rewrites such text into a form that renders the
same but is never executed:

* unlabeled opening fences become ```` ```text ````;
* indented ``kubectl``/``curl`` command blocks outside any fence are
  wrapped in a ```` ```text ```` fence, continuation lines included;
* outside fences, ``<placeholder>`` tokens are escaped to
  ``\\<placeholder\\>`` (known HTML tags are left alone), bracketed
  literals such as ``[V2]`` are escaped, and configured bare URLs are
  wrapped in ``<...>``;
* ``<% ... %>`` template markers in ``example`` strings are escaped.

Every rewrite is idempotent: sanitising already-sanitised text is a no-op.
The pass never changes the shape of the document, only string values.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from specbundle.document import NodeKind, kind_of
from specbundle.models import NormalizeConfig

FENCE = "```"
COMMAND_PREFIXES = ("kubectl ", "curl ")

HTML_TAGS = frozenset({
    "a", "abbr", "b", "blockquote", "br", "code", "dd", "del", "details",
    "div", "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
    "img", "kbd", "li", "ol", "p", "pre", "s", "small", "span", "strong",
    "sub", "summary", "sup", "table", "tbody", "td", "th", "thead", "tr",
    "u", "ul",
})

_PLACEHOLDER_RE = re.compile(r"(?<!\\)<([A-Za-z][A-Za-z0-9_-]*)>")
_TEMPLATE_OPEN_RE = re.compile(r"(?<!\\)<%")


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _is_indented_command(line: str) -> bool:
    return line.startswith("    ") and line.lstrip().startswith(COMMAND_PREFIXES)


def _escape_placeholder(match: re.Match[str]) -> str:
    if match.group(1).lower() in HTML_TAGS:
        return match.group(0)
    return f"\\<{match.group(1)}\\>"


def _escape_inline(
    line: str,
    autolink_urls: Iterable[str],
    literal_escapes: Iterable[str],
) -> str:
    for url in autolink_urls:
        line = re.sub(r"(?<!<)" + re.escape(url), lambda _m, u=url: f"<{u}>", line)
    for literal in literal_escapes:
        escaped = literal.replace("[", "\\[").replace("]", "\\]")
        line = re.sub(r"(?<!\\)" + re.escape(literal), lambda _m: escaped, line)
    return _PLACEHOLDER_RE.sub(_escape_placeholder, line)


def sanitize_text(text: str, config: Optional[NormalizeConfig] = None) -> str:
    """Return *text* with code blocks labeled and inline hazards escaped."""
    config = NormalizeConfig() if config is None else config
    lines = text.split("\n")
    out: list[str] = []
    in_fence = False
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if stripped.startswith(FENCE):
            if not in_fence and stripped == FENCE:
                line = _indent_of(line) + FENCE + "text"
            in_fence = not in_fence
            out.append(line)
        elif in_fence:
            out.append(line)
        elif _is_indented_command(line):
            block = [line]
            while block[-1].rstrip().endswith("\\") and i + 1 < len(lines):
                i += 1
                block.append(lines[i])
            out.append(FENCE + "text")
            out.extend(block)
            out.append(FENCE)
        else:
            out.append(_escape_inline(line, config.autolink_urls, config.literal_escapes))
        i += 1

    return "\n".join(out)


def sanitize_example(text: str) -> str:
    """Escape ``<%``/``%>`` template markers in an example value."""
    if "<%" not in text and "%>" not in text:
        return text
    text = _TEMPLATE_OPEN_RE.sub(lambda _m: "\\<%", text)
    return text.replace("%>", "%\\>")


def sanitize_documentation(node: Any, config: Optional[NormalizeConfig] = None) -> int:
    """Sanitise every ``description`` and ``example`` string under *node* in place.

    Returns:
        The number of string fields that changed.
    """
    config = NormalizeConfig() if config is None else config
    kind = kind_of(node)
    fixes = 0
    if kind is NodeKind.MAPPING:
        description = node.get("description")
        if isinstance(description, str):
            fixed = sanitize_text(description, config)
            if fixed != description:
                node["description"] = fixed
                fixes += 1
        example = node.get("example")
        if isinstance(example, str):
            fixed = sanitize_example(example)
            if fixed != example:
                node["example"] = fixed
                fixes += 1
        for value in node.values():
            fixes += sanitize_documentation(value, config)
    elif kind is NodeKind.SEQUENCE:
        for item in node:
            fixes += sanitize_documentation(item, config)
    return fixes
