"""Tests for specbundle.normalize.text -- documentation text sanitising."""

from __future__ import annotations

from specbundle.models import NormalizeConfig
from specbundle.normalize.text import (
    sanitize_documentation,
    sanitize_example,
    sanitize_text,
)


class TestCodeFences:
    def test_labels_unlabeled_opening_fence(self) -> None:
        text = "Example:\n```\nGET /v2/pets\n```"
        assert sanitize_text(text) == "Example:\n```text\nGET /v2/pets\n```"

    def test_keeps_labeled_fence(self) -> None:
        text = "```json\n{\"a\": 1}\n```"
        assert sanitize_text(text) == text

    def test_only_opening_fences_are_labeled(self) -> None:
        text = "```\na\n```\n\n```\nb\n```"
        assert sanitize_text(text) == "```text\na\n```\n\n```text\nb\n```"

    def test_preserves_fence_indentation(self) -> None:
        assert sanitize_text("  ```\n  x\n  ```") == "  ```text\n  x\n  ```"

    def test_placeholders_inside_fence_untouched(self) -> None:
        text = "```bash\ncurl https://<host>/v2\n```"
        assert sanitize_text(text) == text


class TestCommandBlocks:
    def test_wraps_indented_kubectl_command(self) -> None:
        text = "Run:\n\n    kubectl get nodes\n\nDone."
        assert sanitize_text(text) == "Run:\n\n```text\n    kubectl get nodes\n```\n\nDone."

    def test_wraps_continuation_lines(self) -> None:
        text = "    curl -X POST \\\n      -H 'Auth: x' \\\n      https://api.example.com\nAfter"
        assert sanitize_text(text) == (
            "```text\n"
            "    curl -X POST \\\n"
            "      -H 'Auth: x' \\\n"
            "      https://api.example.com\n"
            "```\n"
            "After"
        )

    def test_fenced_command_not_wrapped_again(self) -> None:
        text = "```text\n    kubectl get pods\n```"
        assert sanitize_text(text) == text

    def test_unindented_command_left_alone(self) -> None:
        assert sanitize_text("kubectl get nodes") == "kubectl get nodes"


class TestInlineEscapes:
    def test_escapes_placeholders(self) -> None:
        assert sanitize_text("Connect to <host>:<port>.") == "Connect to \\<host\\>:\\<port\\>."

    def test_html_tags_are_kept(self) -> None:
        text = "Line one<br>line <b>two</b>"
        assert sanitize_text(text) == text

    def test_escapes_literal_marker(self) -> None:
        assert sanitize_text("Only [V2] tokens.") == "Only \\[V2\\] tokens."

    def test_autolinks_known_urls(self) -> None:
        text = "See https://github.com/google/re2/wiki/Syntax for syntax."
        assert sanitize_text(text) == "See <https://github.com/google/re2/wiki/Syntax> for syntax."

    def test_custom_config(self) -> None:
        config = NormalizeConfig(autolink_urls=["https://example.com/x"], literal_escapes=["[BETA]"])
        assert sanitize_text("[BETA] https://example.com/x", config) == (
            "\\[BETA\\] <https://example.com/x>"
        )

    def test_idempotent(self) -> None:
        text = (
            "Use <token> with [V2] per https://github.com/google/re2/wiki/Syntax\n"
            "```\nraw <x>\n```\n"
            "    kubectl apply -f <file>\n"
        )
        once = sanitize_text(text)
        assert sanitize_text(once) == once


class TestSanitizeExample:
    def test_escapes_template_markers(self) -> None:
        assert sanitize_example("<% name %>") == "\\<% name %\\>"

    def test_idempotent(self) -> None:
        once = sanitize_example("a <%= b %> c")
        assert sanitize_example(once) == once

    def test_plain_example_unchanged(self) -> None:
        assert sanitize_example("plain") == "plain"


class TestSanitizeDocumentation:
    def test_rewrites_nested_fields_and_counts(self) -> None:
        document = {
            "info": {"description": "Host: <host>"},
            "paths": {
                "/a": {
                    "get": {
                        "description": "Nothing to fix.",
                        "parameters": [{"name": "q", "example": "<% q %>"}],
                    }
                }
            },
        }
        assert sanitize_documentation(document) == 2
        assert document["info"]["description"] == "Host: \\<host\\>"
        assert document["paths"]["/a"]["get"]["parameters"][0]["example"] == "\\<% q %\\>"

    def test_non_string_fields_ignored(self) -> None:
        document = {"example": {"id": "<x>"}, "description": None}
        assert sanitize_documentation(document) == 0
        assert document == {"example": {"id": "<x>"}, "description": None}

    def test_property_named_description_is_not_text(self) -> None:
        document = {"properties": {"description": {"type": "string"}}}
        assert sanitize_documentation(document) == 0
