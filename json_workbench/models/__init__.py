"""Data models for the JSON workbench."""

from .core import (
    JsonType,
    json_type_of,
    PropertySegment,
    IndexSegment,
    PathAddress,
    LineRange,
)

from .schema import (
    PropertySchema,
    ObjectSchema,
)

from .analysis import (
    Severity,
    IssueCategory,
    AnalysisIssue,
    AnalysisStats,
    AnalysisResult,
)

from .query import (
    QueryOperator,
    Combinator,
    QueryCondition,
    QueryMatch,
    QueryResult,
    QueryExample,
)

from .history import (
    VersionHistoryItem,
    HistoryStep,
    HistorySnapshot,
)

from .diff import (
    ChangeKind,
    DocumentChange,
)

from .edit import (
    EditAction,
    MoveDirection,
    SortOrder,
    KeyCase,
)

from .session import (
    WorkbenchSession,
)

from .requests import (
    AnalyzeRequest,
    QueryRequest,
    ResolvePathRequest,
    HighlightRequest,
    InferSchemaRequest,
    DiffRequest,
    SuggestQueriesRequest,
    SearchRequest,
    EditRequest,
    SortArrayRequest,
    TransformKeysRequest,
    SaveSessionRequest,
    LoadSessionRequest,
)

from .errors import (
    ErrorResponse,
    ValidationError,
    AddressErrorResponse,
    QueryErrorResponse,
    DocumentErrorResponse,
    SessionError,
    HistoryBoundary,
    WorkbenchException,
    MalformedPath,
    AddressError,
    AddressOutOfBounds,
    AddressTypeMismatch,
    QuerySyntaxError,
    UnrepresentableDocument,
    DocumentParseError,
    InvalidEdit,
    ValidationException,
    SessionException,
)

__all__ = [
    # Core models
    "JsonType",
    "json_type_of",
    "PropertySegment",
    "IndexSegment",
    "PathAddress",
    "LineRange",

    # Schema models
    "PropertySchema",
    "ObjectSchema",

    # Analysis models
    "Severity",
    "IssueCategory",
    "AnalysisIssue",
    "AnalysisStats",
    "AnalysisResult",

    # Query models
    "QueryOperator",
    "Combinator",
    "QueryCondition",
    "QueryMatch",
    "QueryResult",
    "QueryExample",

    # History models
    "VersionHistoryItem",
    "HistoryStep",
    "HistorySnapshot",

    # Diff models
    "ChangeKind",
    "DocumentChange",

    # Edit models
    "EditAction",
    "MoveDirection",
    "SortOrder",
    "KeyCase",

    # Session models
    "WorkbenchSession",

    # Request models
    "AnalyzeRequest",
    "QueryRequest",
    "ResolvePathRequest",
    "HighlightRequest",
    "InferSchemaRequest",
    "DiffRequest",
    "SuggestQueriesRequest",
    "SearchRequest",
    "EditRequest",
    "SortArrayRequest",
    "TransformKeysRequest",
    "SaveSessionRequest",
    "LoadSessionRequest",

    # Error models
    "ErrorResponse",
    "ValidationError",
    "AddressErrorResponse",
    "QueryErrorResponse",
    "DocumentErrorResponse",
    "SessionError",
    "HistoryBoundary",

    # Exception classes
    "WorkbenchException",
    "MalformedPath",
    "AddressError",
    "AddressOutOfBounds",
    "AddressTypeMismatch",
    "QuerySyntaxError",
    "UnrepresentableDocument",
    "DocumentParseError",
    "InvalidEdit",
    "ValidationException",
    "SessionException",
]
