"""Turn exceptions into structured error responses."""

import json
import logging
import time
import uuid
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..models.errors import (
    AddressError, AddressErrorResponse, DocumentErrorResponse, DocumentParseError,
    ErrorResponse, MalformedPath, QueryErrorResponse, QuerySyntaxError, SessionError,
    SessionException, UnrepresentableDocument, ValidationError, ValidationException,
    WorkbenchException,
)
from .logging_config import log_error_with_context

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Categorizes exceptions into :class:`ErrorResponse` models.

    Known workbench exceptions keep their code and details; anything
    unexpected is logged with a reference ID and reported as an internal
    error.
    """

    def __init__(self):
        self.error_counts: Dict[str, int] = {}

    def categorize_error(self, error: Exception) -> ErrorResponse:
        """Categorize an exception into the appropriate error response."""
        if isinstance(error, WorkbenchException):
            response = self._handle_workbench_exception(error)
        elif isinstance(error, PydanticValidationError):
            response = self._handle_pydantic_validation_error(error)
        elif isinstance(error, json.JSONDecodeError):
            response = self._handle_json_parsing_error(error)
        elif isinstance(error, (MemoryError, RecursionError)):
            response = self._handle_resource_error(error)
        else:
            response = self._handle_generic_error(error)

        self.error_counts[response.error_code] = self.error_counts.get(response.error_code, 0) + 1
        return response

    def _handle_workbench_exception(self, error: WorkbenchException) -> ErrorResponse:
        if isinstance(error, MalformedPath):
            return AddressErrorResponse(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                path=error.path,
                suggestions=[
                    "Write paths as dotted keys with [n] indices, e.g. users[0].name",
                    "Quote keys containing dots or brackets: [\"a.b\"]",
                ]
            )

        if isinstance(error, AddressError):
            return AddressErrorResponse(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                path=error.details.get("path"),
                suggestions=["Check that every segment exists in the current document"]
            )

        if isinstance(error, QuerySyntaxError):
            return QueryErrorResponse(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                expression=error.expression,
                position=error.position,
                suggestions=[
                    "Filter array items with $[?(@.field > 10)]",
                    "Combine conditions with && and ||",
                ]
            )

        if isinstance(error, DocumentParseError):
            return DocumentErrorResponse(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                line=error.line,
                column=error.column,
                suggestions=[
                    "Check for missing quotes, brackets, or commas near the reported position",
                    "Remove trailing commas and comments",
                ]
            )

        if isinstance(error, UnrepresentableDocument):
            return DocumentErrorResponse(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                suggestions=["Documents must be trees of objects, arrays, strings, numbers, booleans and null"]
            )

        if isinstance(error, ValidationException):
            return ValidationError(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                field_errors=error.details.get("field_errors")
            )

        if isinstance(error, SessionException):
            return SessionError(
                error_code=error.error_code,
                message=error.message,
                details=error.details,
                session_id=error.details.get("session_id")
            )

        return ErrorResponse(
            error_type=error.error_type,
            error_code=error.error_code,
            message=error.message,
            details=error.details
        )

    def _handle_pydantic_validation_error(self, error: PydanticValidationError) -> ValidationError:
        field_errors: Dict[str, list] = {}
        for err in error.errors():
            field_path = ".".join(str(loc) for loc in err["loc"]) or "request"
            field_errors.setdefault(field_path, []).append(err["msg"])

        return ValidationError(
            error_code="VALIDATION_FAILED",
            message="Request validation failed",
            details={"error_count": error.error_count()},
            field_errors=field_errors,
            suggestions=[
                "Check the request format and ensure all required fields are provided",
                "Verify that field types match the expected schema"
            ]
        )

    def _handle_json_parsing_error(self, error: json.JSONDecodeError) -> DocumentErrorResponse:
        return DocumentErrorResponse(
            error_code="DOCUMENT_PARSE_FAILED",
            message=f"Invalid JSON: {error.msg}",
            details={"original_error": str(error)},
            line=error.lineno,
            column=error.colno,
            suggestions=["Ensure the document is valid JSON"]
        )

    def _handle_resource_error(self, error: Exception) -> ErrorResponse:
        return ErrorResponse(
            error_type="processing",
            error_code="RESOURCE_EXHAUSTED",
            message=f"Resource limit exceeded: {type(error).__name__}",
            details={"original_error": str(error)},
            suggestions=[
                "Reduce document size or nesting depth",
                "Query a smaller part of the document",
            ]
        )

    def _handle_generic_error(self, error: Exception) -> ErrorResponse:
        error_id = f"err_{int(time.time())}_{uuid.uuid4().hex[:6]}"
        log_error_with_context(logger, error, {"error_id": error_id}, "categorize_error",
                               include_traceback=True)

        return ErrorResponse(
            error_type="processing",
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            details={
                "error_id": error_id,
                "error_type": type(error).__name__,
                "original_error": str(error)
            },
            suggestions=[
                "Retry the operation",
                f"Reference error ID: {error_id}"
            ]
        )


default_error_handler = ErrorHandler()


def handle_error(error: Exception, handler: Optional[ErrorHandler] = None) -> Dict[str, Any]:
    """Categorize ``error`` and return it as a response payload."""
    response = (handler or default_error_handler).categorize_error(error)
    return {"error": response.model_dump(exclude_none=True)}
