"""Tests for specbundle.normalize.responses -- response-shape deduplication."""

from __future__ import annotations

import pytest

from specbundle.normalize.responses import (
    deduplicate_responses,
    is_success_status,
    pick_response,
    simplify_responses,
)


def _operation(responses: dict) -> dict:
    return {"paths": {"/pets": {"get": {"operationId": "list_pets", "responses": responses}}}}


class TestIsSuccessStatus:
    @pytest.mark.parametrize("status", ["200", "201", "2XX", 204])
    def test_success(self, status: object) -> None:
        assert is_success_status(status)

    @pytest.mark.parametrize("status", ["400", "default", "2", "2000", 302])
    def test_not_success(self, status: object) -> None:
        assert not is_success_status(status)


class TestPickResponse:
    def test_prefers_first_success(self) -> None:
        assert pick_response({"400": {}, "201": {}, "200": {}}) == "201"

    def test_then_first_non_default(self) -> None:
        assert pick_response({"default": {}, "404": {}, "500": {}}) == "404"

    def test_then_default(self) -> None:
        assert pick_response({"default": {}}) == "default"

    def test_empty(self) -> None:
        assert pick_response({}) is None


class TestSimplifyResponses:
    def test_reduces_mixed_statuses_to_first_success(self) -> None:
        responses = {
            "200": {"description": "OK"},
            "201": {"description": "Created"},
            "400": {"description": "Bad"},
            "default": {"description": "Error"},
        }
        assert simplify_responses(responses) == 3
        assert responses == {"200": {"description": "OK"}}

    def test_two_entries_with_one_success_untouched(self) -> None:
        responses = {"200": {"description": "OK"}, "404": {"description": "Missing"}}
        assert simplify_responses(responses) == 0
        assert list(responses) == ["200", "404"]

    def test_two_successes_collapse(self) -> None:
        responses = {"200": {}, "202": {}}
        assert simplify_responses(responses) == 1
        assert list(responses) == ["200"]

    def test_falls_back_to_non_default_error(self) -> None:
        responses = {"default": {}, "400": {}, "404": {}}
        simplify_responses(responses)
        assert list(responses) == ["400"]

    def test_kept_response_keeps_first_content_type(self) -> None:
        responses = {
            "200": {
                "description": "OK",
                "content": {
                    "application/json": {"schema": {"type": "object"}},
                    "text/csv": {"schema": {"type": "string"}},
                },
            },
            "201": {},
            "400": {},
        }
        simplify_responses(responses)
        assert responses["200"]["content"] == {
            "application/json": {"schema": {"type": "object"}}
        }

    def test_integer_status_keys(self) -> None:
        responses = {200: {}, 201: {}, "default": {}}
        simplify_responses(responses)
        assert list(responses) == [200]


class TestDeduplicateResponses:
    def test_counts_operations_and_removals(self) -> None:
        document = _operation({"200": {}, "201": {}, "400": {}, "default": {}})
        assert deduplicate_responses(document) == (1, 3)
        assert list(document["paths"]["/pets"]["get"]["responses"]) == ["200"]

    def test_skips_non_method_keys(self) -> None:
        document = {
            "paths": {
                "/pets": {
                    "parameters": [{"name": "limit"}],
                    "x-responses": {"responses": {"200": {}, "201": {}}},
                    "summary": "Pets",
                }
            }
        }
        assert deduplicate_responses(document) == (0, 0)

    def test_document_without_paths(self) -> None:
        assert deduplicate_responses({"openapi": "3.0.0"}) == (0, 0)

    def test_idempotent(self) -> None:
        document = _operation({"200": {}, "201": {}, "default": {}})
        deduplicate_responses(document)
        assert deduplicate_responses(document) == (0, 0)
