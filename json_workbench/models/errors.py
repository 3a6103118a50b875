"""Error models for the JSON workbench."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error_type: str = Field(..., description="Category of error (validation, address, query, document, session)")
    error_code: str = Field(..., description="Specific error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error details")
    suggestions: Optional[List[str]] = Field(default=None, description="Suggested actions to resolve the error")

    @field_validator('error_type')
    @classmethod
    def validate_error_type(cls, v):
        """Ensure error type is one of the allowed categories."""
        allowed_types = ["validation", "address", "query", "document", "session", "configuration", "processing"]
        if v not in allowed_types:
            raise ValueError(f"Error type must be one of: {', '.join(allowed_types)}")
        return v

    @field_validator('error_code')
    @classmethod
    def validate_error_code(cls, v):
        """Ensure error code is not empty."""
        if not v or not v.strip():
            raise ValueError("Error code cannot be empty")
        return v.strip().upper()

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        """Ensure message is not empty."""
        if not v or not v.strip():
            raise ValueError("Error message cannot be empty")
        return v.strip()


class ValidationError(ErrorResponse):
    """Specific error model for request validation failures."""

    error_type: str = Field(default="validation", description="Error type is always validation")
    field_errors: Optional[Dict[str, List[str]]] = Field(
        default=None,
        description="Field-specific validation errors"
    )


class AddressErrorResponse(ErrorResponse):
    """Error model for malformed or unresolvable path addresses."""

    error_type: str = Field(default="address", description="Error type is always address")
    path: Optional[str] = Field(default=None, description="Path text that failed")


class QueryErrorResponse(ErrorResponse):
    """Error model for filter expression failures."""

    error_type: str = Field(default="query", description="Error type is always query")
    expression: Optional[str] = Field(default=None, description="Expression that failed to parse")
    position: Optional[int] = Field(default=None, description="Character offset of the failure")


class DocumentErrorResponse(ErrorResponse):
    """Error model for documents that cannot be parsed or represented."""

    error_type: str = Field(default="document", description="Error type is always document")
    line: Optional[int] = Field(default=None, description="Line of the parse failure")
    column: Optional[int] = Field(default=None, description="Column of the parse failure")


class SessionError(ErrorResponse):
    """Specific error model for session-related failures."""

    error_type: str = Field(default="session", description="Error type is always session")
    session_id: Optional[str] = Field(default=None, description="Session ID that caused the error")


class HistoryBoundary(str, Enum):
    """Edges of the version history; a normal outcome, not an error."""

    NOTHING_TO_UNDO = "nothing to undo"
    NOTHING_TO_REDO = "nothing to redo"


# Exception classes for raising errors
class WorkbenchException(Exception):
    """Base exception for the JSON workbench."""

    error_type = "processing"

    def __init__(self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class MalformedPath(WorkbenchException):
    """Raised when a textual path address does not follow the path grammar."""

    error_type = "address"

    def __init__(self, message: str, path: str, position: Optional[int] = None):
        super().__init__("MALFORMED_PATH", message, {"path": path, "position": position})
        self.path = path
        self.position = position


class AddressError(WorkbenchException):
    """Base exception for addresses that do not resolve against a document."""

    error_type = "address"


class AddressOutOfBounds(AddressError):
    """Raised when an index exceeds an array or a property is absent."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("ADDRESS_OUT_OF_BOUNDS", message, details)


class AddressTypeMismatch(AddressError):
    """Raised when a segment kind disagrees with the value it is applied to."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("ADDRESS_TYPE_MISMATCH", message, details)


class QuerySyntaxError(WorkbenchException):
    """Raised when a filter expression cannot be parsed."""

    error_type = "query"

    def __init__(self, message: str, expression: str, position: Optional[int] = None):
        super().__init__(
            "QUERY_SYNTAX_ERROR", message,
            {"expression": expression, "position": position}
        )
        self.expression = expression
        self.position = position


class UnrepresentableDocument(WorkbenchException):
    """Raised for values the JSON model cannot hold (cycles, foreign types)."""

    error_type = "document"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("UNREPRESENTABLE_DOCUMENT", message, details)


class DocumentParseError(WorkbenchException):
    """Raised when document text is not valid JSON."""

    error_type = "document"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__("DOCUMENT_PARSE_FAILED", message, {"line": line, "column": column})
        self.line = line
        self.column = column


class InvalidEdit(WorkbenchException):
    """Raised when a structural edit does not fit the addressed node."""

    error_type = "document"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_EDIT", message, details)


class ValidationException(WorkbenchException):
    """Exception for request validation failures."""

    error_type = "validation"


class SessionException(WorkbenchException):
    """Exception for session-related failures."""

    error_type = "session"
