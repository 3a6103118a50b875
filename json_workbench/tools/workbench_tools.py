"""Workbench tools exposed over MCP."""

import json
import time
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel

from ..config.models import WorkbenchConfig
from ..models.analysis import AnalysisIssue
from ..models.edit import EditAction, MoveDirection
from ..models.errors import UnrepresentableDocument, ValidationException
from ..models.history import HistorySnapshot
from ..models.query import QueryResult
from ..models.requests import (
    AnalyzeRequest, DiffRequest, EditRequest, HighlightRequest, InferSchemaRequest, LoadSessionRequest,
    QueryRequest, ResolvePathRequest, SaveSessionRequest, SearchRequest, SortArrayRequest,
    SuggestQueriesRequest, TransformKeysRequest,
)
from ..models.schema import ObjectSchema
from ..services.document_diff import diff_documents, diff_text
from ..services.document_editor import add_item, copy_sources, delete_node, move_item, set_value, sort_array
from ..services.document_search import search_document
from ..services.key_transforms import change_key_case, rename_keys
from ..services.path_address import parse_path, resolve_path, to_foreign_path_notation
from ..services.query_engine import run_conditions, run_query
from ..services.query_suggestions import available_properties, suggest_examples
from ..services.schema_inferencer import infer_schema_from_sample, synthesize
from ..services.serializer import serialize, serialize_with_line_map
from ..services.session_store import SessionStore
from ..services.structural_analyzer import analyze
from ..services.text_range_mapper import find_line_range
from ..utils.error_handler import ErrorHandler, handle_error

RequestT = TypeVar("RequestT", bound=BaseModel)


def _issue_payload(issue: AnalysisIssue) -> Dict[str, Any]:
    payload = {
        "category": issue.category.value,
        "label": issue.category.label,
        "severity": issue.severity.value,
        "path": str(issue.address),
        "message": issue.message,
    }
    if issue.detail is not None:
        payload["detail"] = issue.detail
    if issue.key is not None:
        payload["key"] = issue.key
    return payload


def _query_payload(result: QueryResult, max_matches: Optional[int]) -> Dict[str, Any]:
    matches = result.matches if max_matches is None else result.matches[:max_matches]
    payload: Dict[str, Any] = {
        "success": result.success,
        "expression": result.expression,
        "count": result.count,
        "matches": [
            {"path": match.path_text, "foreign_path": match.foreign_path, "value": match.value}
            for match in matches
        ],
    }
    if len(matches) < result.count:
        payload["truncated"] = True
    if result.error:
        payload["error"] = result.error
    return payload


def _schema_payload(schema: ObjectSchema) -> list:
    return [prop.model_dump(mode="json", exclude_none=True) for prop in schema.properties]


class WorkbenchTools:
    """Handlers for the workbench tools.

    Every handler takes the raw arguments of a tool call, validates them with
    the matching request model and returns a JSON-ready dict. Failures are
    reported as ``{"error": {...}}`` built by :class:`ErrorHandler`; handlers
    never raise.
    """

    def __init__(self, config: Optional[WorkbenchConfig] = None,
                 session_store: Optional[SessionStore] = None):
        self.config = config or WorkbenchConfig()
        self.logger = structlog.get_logger(__name__)
        self.error_handler = ErrorHandler()
        self.session_store = session_store or SessionStore(self.config)

        self.handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "analyze": self.analyze,
            "query": self.query,
            "suggest_queries": self.suggest_queries,
            "resolve_path": self.resolve_path,
            "highlight_range": self.highlight_range,
            "infer_schema": self.infer_schema,
            "diff": self.diff,
            "search": self.search,
            "edit": self.edit,
            "sort_array": self.sort_array,
            "transform_keys": self.transform_keys,
            "save_session": self.save_session,
            "load_session": self.load_session,
        }

    def handle(self, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Dispatch a tool call by name."""
        handler = self.handlers.get(name)
        if handler is None:
            return self._error_response(
                ValidationException("UNKNOWN_TOOL", f"Unknown tool: {name}", {"available_tools": sorted(self.handlers)}),
                name,
            )
        return handler(arguments or {})

    def analyze(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Report structural anomalies and statistics of a document."""
        start_time = time.time()
        try:
            request = self._validate_request(AnalyzeRequest, request_data)
            self._validate_document_size(request.document)

            result = analyze(request.document, self.config.analyzer_config)

            self.logger.info("Document analyzed", issues=len(result.issues),
                             duration_seconds=round(time.time() - start_time, 4))
            return {
                "issues": [_issue_payload(issue) for issue in result.issues],
                "stats": result.stats.model_dump(),
                "severity_counts": {severity.value: count for severity, count in result.severity_counts().items()},
                "has_errors": result.has_errors,
            }
        except Exception as e:
            return self._error_response(e, "analyze")

    def query(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Run a filter expression, or structured conditions, over a document."""
        try:
            request = self._validate_request(QueryRequest, request_data)
            self._validate_document_size(request.document)

            if request.conditions is not None:
                result = run_conditions(request.document, request.conditions, request.combinator)
            else:
                result = run_query(request.document, request.expression)

            self.logger.info("Query evaluated", expression=result.expression,
                             success=result.success, matches=result.count)
            return _query_payload(result, self.config.query_config.max_matches)
        except Exception as e:
            return self._error_response(e, "query")

    def suggest_queries(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """List example expressions and property paths that fit a document."""
        try:
            request = self._validate_request(SuggestQueriesRequest, request_data)
            self._validate_document_size(request.document)

            examples = suggest_examples(request.document, self.config.query_config.max_examples)
            return {
                "examples": [example.model_dump() for example in examples],
                "properties": available_properties(request.document),
            }
        except Exception as e:
            return self._error_response(e, "suggest_queries")

    def resolve_path(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Resolve path text against a document."""
        try:
            request = self._validate_request(ResolvePathRequest, request_data)
            self._validate_document_size(request.document)

            address = parse_path(request.path)
            value = resolve_path(request.document, address)
            return {
                "path": str(address),
                "foreign_path": to_foreign_path_notation(address),
                "depth": address.depth,
                "value": value,
            }
        except Exception as e:
            return self._error_response(e, "resolve_path")

    def highlight_range(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Find the lines of displayed text occupied by a node."""
        try:
            request = self._validate_request(HighlightRequest, request_data)
            address = parse_path(request.path)

            if request.text is not None:
                line_range = find_line_range(request.text, address, request.include_root)
            else:
                self._validate_document_size(request.document)
                rendered = serialize_with_line_map(request.document)
                line_range = None if address.is_root and not request.include_root else rendered.range_for(address)

            if line_range is None:
                return {"path": str(address), "found": False}
            return {
                "path": str(address),
                "found": True,
                "start_line": line_range.start_line,
                "end_line": line_range.end_line,
            }
        except Exception as e:
            return self._error_response(e, "highlight_range")

    def infer_schema(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Infer an object schema from a sample and build a default object for it."""
        try:
            request = self._validate_request(InferSchemaRequest, request_data)
            self._validate_document_size(request.sample)

            schema = infer_schema_from_sample(request.sample)
            return {
                "properties": _schema_payload(schema),
                "default_object": synthesize(schema, nested=request.nested),
            }
        except Exception as e:
            return self._error_response(e, "infer_schema")

    def diff(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Compare two documents structurally and line by line."""
        try:
            request = self._validate_request(DiffRequest, request_data)
            self._validate_document_size(request.old)
            self._validate_document_size(request.new)

            changes = diff_documents(request.old, request.new)
            return {
                "identical": not changes,
                "changes": [
                    {
                        "kind": change.kind.value,
                        "path": str(change.address),
                        "old_value": change.old_value,
                        "new_value": change.new_value,
                    }
                    for change in changes
                ],
                "text_diff": diff_text(serialize(request.old), serialize(request.new)),
            }
        except Exception as e:
            return self._error_response(e, "diff")

    def search(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Find object members whose key or value contains a term; the first is highlighted."""
        try:
            request = self._validate_request(SearchRequest, request_data)
            self._validate_document_size(request.document)

            addresses = search_document(request.document, request.term)
            payload: Dict[str, Any] = {
                "term": request.term,
                "count": len(addresses),
                "paths": [str(address) for address in addresses],
            }
            if addresses:
                line_range = serialize_with_line_map(request.document).range_for(addresses[0])
                payload["first_range"] = {"start_line": line_range.start_line, "end_line": line_range.end_line}
            return payload
        except Exception as e:
            return self._error_response(e, "search")

    def edit(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply one structural edit and return the new document."""
        try:
            request = self._validate_request(EditRequest, request_data)
            self._validate_document_size(request.document)

            address = parse_path(request.path)
            payload: Dict[str, Any] = {"action": request.action.value}
            if request.action is EditAction.SET:
                document = set_value(request.document, address, request.value)
            elif request.action is EditAction.DELETE:
                document = delete_node(request.document, address)
            elif request.action is EditAction.ADD_ITEM:
                document, address = add_item(request.document, address, request.source_index)
                payload["copy_sources"] = copy_sources(document, address.parent)
            else:
                direction = MoveDirection.UP if request.action is EditAction.MOVE_UP else MoveDirection.DOWN
                document = move_item(request.document, address, direction)

            self._validate_document_size(document)
            self.logger.info("Document edited", action=request.action.value, path=str(address))
            payload.update({"path": str(address), "document": document})
            return payload
        except Exception as e:
            return self._error_response(e, "edit")

    def sort_array(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Sort the array at a path by item value or by a property."""
        try:
            request = self._validate_request(SortArrayRequest, request_data)
            self._validate_document_size(request.document)

            address = parse_path(request.path)
            document = sort_array(request.document, address, request.sort_by, request.order)
            return {"path": str(address), "order": request.order.value, "document": document}
        except Exception as e:
            return self._error_response(e, "sort_array")

    def transform_keys(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Change the naming convention of every key and/or rename keys in bulk."""
        try:
            request = self._validate_request(TransformKeysRequest, request_data)
            self._validate_document_size(request.document)

            document = change_key_case(request.document, request.case)
            if request.find or request.prefix or request.suffix:
                document = rename_keys(document, request.find, request.replace, request.use_regex,
                                       request.prefix, request.suffix)
            return {"document": document, "text": serialize(document)}
        except Exception as e:
            return self._error_response(e, "transform_keys")

    def save_session(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Persist document text and its history."""
        try:
            request = self._validate_request(SaveSessionRequest, request_data)
            history = request.history or HistorySnapshot()
            session = self.session_store.save(
                request.document_text, history, filename=request.filename, session_id=request.session_id
            )
            self.logger.info("Session saved", session_id=session.session_id,
                             history_entries=len(session.history.items), storage=self.session_store.storage_type)
            return {
                "session_id": session.session_id,
                "saved_at": session.saved_at.isoformat(),
                "history_entries": len(session.history.items),
            }
        except Exception as e:
            return self._error_response(e, "save_session")

    def load_session(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """Load a saved session."""
        try:
            request = self._validate_request(LoadSessionRequest, request_data)
            session = self.session_store.load(request.session_id)
            if session is None:
                return {"session_id": request.session_id, "found": False}
            return {"found": True, **session.model_dump(mode="json", by_alias=True)}
        except Exception as e:
            return self._error_response(e, "load_session")

    def _validate_request(self, model: Type[RequestT], request_data: Any) -> RequestT:
        """Validate raw tool arguments.

        Raises:
            ValidationException: If the arguments are not an object
            pydantic.ValidationError: If the arguments do not fit ``model``
        """
        if not isinstance(request_data, dict):
            raise ValidationException(
                "INVALID_REQUEST",
                "Request data must be an object",
                {"received_type": type(request_data).__name__}
            )
        return model.model_validate(request_data)

    def _validate_document_size(self, document: Any) -> None:
        """Reject documents larger than ``max_document_size`` bytes when encoded.

        Raises:
            ValidationException: If the document is too large
            UnrepresentableDocument: If the document cannot be encoded as JSON
        """
        try:
            document_size = len(json.dumps(document, ensure_ascii=False, allow_nan=False).encode("utf-8"))
        except (TypeError, ValueError) as e:
            raise UnrepresentableDocument(f"Document cannot be encoded as JSON: {e}")

        if document_size > self.config.max_document_size:
            raise ValidationException(
                "DOCUMENT_TOO_LARGE",
                f"Document too large: {document_size} bytes (limit {self.config.max_document_size})",
                {"document_size": document_size, "max_size": self.config.max_document_size}
            )

    def _error_response(self, error: Exception, operation: str) -> Dict[str, Any]:
        payload = handle_error(error, self.error_handler)
        self.logger.warning("Tool call failed", tool=operation, error_code=payload["error"]["error_code"],
                            error_message=payload["error"]["message"])
        return payload
