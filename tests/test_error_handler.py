"""Tests for error categorization."""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from json_workbench.models.errors import (
    AddressOutOfBounds, DocumentParseError, MalformedPath, QuerySyntaxError,
    SessionException, UnrepresentableDocument, ValidationException, WorkbenchException,
)
from json_workbench.models.requests import AnalyzeRequest
from json_workbench.utils.error_handler import ErrorHandler, handle_error


@pytest.fixture
def handler():
    return ErrorHandler()


class TestErrorHandler:
    """Tests for ErrorHandler.categorize_error."""

    def test_malformed_path(self, handler):
        response = handler.categorize_error(MalformedPath("Unclosed bracket", "a[0", position=1))
        assert response.error_type == "address"
        assert response.error_code == "MALFORMED_PATH"
        assert response.path == "a[0"
        assert response.suggestions

    def test_unresolvable_address(self, handler):
        error = AddressOutOfBounds("Index 5 out of range", {"path": "items[5]", "length": 2})
        response = handler.categorize_error(error)
        assert response.error_type == "address"
        assert response.error_code == "ADDRESS_OUT_OF_BOUNDS"
        assert response.path == "items[5]"

    def test_query_syntax(self, handler):
        response = handler.categorize_error(QuerySyntaxError("Unexpected token", "$[?(@.a >)]", position=9))
        assert response.error_type == "query"
        assert response.expression == "$[?(@.a >)]"
        assert response.position == 9

    def test_document_errors(self, handler):
        parse = handler.categorize_error(DocumentParseError("Expecting value", line=2, column=5))
        assert (parse.error_type, parse.line, parse.column) == ("document", 2, 5)

        unrepresentable = handler.categorize_error(UnrepresentableDocument("Cycle detected"))
        assert unrepresentable.error_code == "UNREPRESENTABLE_DOCUMENT"
        assert unrepresentable.line is None

    def test_validation_exception(self, handler):
        error = ValidationException("DOCUMENT_TOO_LARGE", "Too large", {"document_size": 2000})
        response = handler.categorize_error(error)
        assert response.error_type == "validation"
        assert response.details == {"document_size": 2000}

    def test_session_exception(self, handler):
        error = SessionException("SESSION_DATA_CORRUPTED", "Corrupted", {"session_id": "sess_1"})
        response = handler.categorize_error(error)
        assert response.error_type == "session"
        assert response.session_id == "sess_1"

    def test_plain_workbench_exception(self, handler):
        response = handler.categorize_error(WorkbenchException("SOMETHING", "Went wrong"))
        assert response.error_type == "processing"
        assert response.error_code == "SOMETHING"

    def test_pydantic_validation_error(self, handler):
        with pytest.raises(PydanticValidationError) as excinfo:
            AnalyzeRequest.model_validate({})
        response = handler.categorize_error(excinfo.value)
        assert response.error_code == "VALIDATION_FAILED"
        assert "document" in response.field_errors
        assert response.details == {"error_count": 1}

    def test_json_decode_error(self, handler):
        with pytest.raises(json.JSONDecodeError) as excinfo:
            json.loads("{")
        response = handler.categorize_error(excinfo.value)
        assert response.error_code == "DOCUMENT_PARSE_FAILED"
        assert response.line == 1

    def test_resource_error(self, handler):
        response = handler.categorize_error(RecursionError("maximum recursion depth exceeded"))
        assert response.error_code == "RESOURCE_EXHAUSTED"

    def test_unexpected_error(self, handler):
        response = handler.categorize_error(RuntimeError("boom"))
        assert response.error_code == "INTERNAL_ERROR"
        assert response.details["error_id"].startswith("err_")
        assert response.details["error_type"] == "RuntimeError"

    def test_error_counts(self, handler):
        handler.categorize_error(RuntimeError("a"))
        handler.categorize_error(RuntimeError("b"))
        handler.categorize_error(UnrepresentableDocument("c"))
        assert handler.error_counts == {"INTERNAL_ERROR": 2, "UNREPRESENTABLE_DOCUMENT": 1}

    def test_handle_error_payload(self, handler):
        payload = handle_error(MalformedPath("Empty segment", "a..b"), handler)
        assert payload["error"]["error_code"] == "MALFORMED_PATH"
        assert payload["error"]["path"] == "a..b"
        assert "session_id" not in payload["error"]
