"""Request models for the workbench tools."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .edit import EditAction, KeyCase, SortOrder
from .history import HistorySnapshot
from .query import Combinator, QueryCondition


class AnalyzeRequest(BaseModel):
    """Request model for the analyze tool."""

    document: Any = Field(..., description="JSON document to analyze")


class QueryRequest(BaseModel):
    """Request model for the query tool; textual or structured."""

    document: Any = Field(..., description="JSON document to query")
    expression: Optional[str] = Field(default=None, description="Filter expression")
    conditions: Optional[List[QueryCondition]] = Field(default=None, description="Structured conditions")
    combinator: Combinator = Field(default=Combinator.AND, description="How conditions are joined")

    @model_validator(mode='after')
    def validate_mode(self):
        """Exactly one of expression or conditions must be supplied."""
        if self.expression is None and self.conditions is None:
            raise ValueError("Either expression or conditions is required")
        if self.expression is not None and self.conditions is not None:
            raise ValueError("Supply expression or conditions, not both")
        return self


class ResolvePathRequest(BaseModel):
    """Request model for the resolve_path tool."""

    document: Any = Field(..., description="JSON document")
    path: str = Field(..., description="Dotted/bracketed path text")


class HighlightRequest(BaseModel):
    """Request model for the highlight_range tool."""

    path: str = Field(..., description="Dotted/bracketed path text")
    text: Optional[str] = Field(default=None, description="Displayed document text")
    document: Any = Field(default=None, description="Document to serialize when no text is given")
    include_root: bool = Field(default=False, description="Return the whole text for the root address")

    @model_validator(mode='after')
    def validate_source(self):
        """Either text or a document is needed to compute a range."""
        if self.text is None and "document" not in self.model_fields_set:
            raise ValueError("Either text or document is required")
        return self


class InferSchemaRequest(BaseModel):
    """Request model for the infer_schema tool."""

    sample: Any = Field(..., description="Sample object or array of objects")
    nested: bool = Field(default=True, description="Build nested skeletons for object properties")

    @field_validator('sample')
    @classmethod
    def validate_sample(cls, v):
        """Schema inference needs an object or an array."""
        if not isinstance(v, (dict, list)):
            raise ValueError("Sample must be a JSON object or array")
        return v


class DiffRequest(BaseModel):
    """Request model for the diff tool."""

    old: Any = Field(..., description="Earlier document")
    new: Any = Field(..., description="Later document")


class SuggestQueriesRequest(BaseModel):
    """Request model for the suggest_queries tool."""

    document: Any = Field(..., description="JSON document the examples should fit")


class SearchRequest(BaseModel):
    """Request model for the search tool."""

    document: Any = Field(..., description="JSON document to search")
    term: str = Field(..., description="Text to find in keys and values")


class EditRequest(BaseModel):
    """Request model for the edit tool."""

    document: Any = Field(..., description="JSON document to edit")
    action: EditAction = Field(..., description="Edit to apply")
    path: str = Field(default="", description="Node to edit; the array for add_item")
    value: Any = Field(default=None, description="New value for set")
    source_index: Optional[int] = Field(default=None, ge=0, description="Item to copy for add_item")

    @model_validator(mode='after')
    def validate_value(self):
        """set needs an explicit value, even if it is null."""
        if self.action is EditAction.SET and "value" not in self.model_fields_set:
            raise ValueError("value is required for set")
        return self


class SortArrayRequest(BaseModel):
    """Request model for the sort_array tool."""

    document: Any = Field(..., description="JSON document")
    path: str = Field(default="", description="Array to sort; empty for the root")
    sort_by: Optional[str] = Field(default=None, description="Property to sort object items by")
    order: SortOrder = Field(default=SortOrder.ASC, description="asc or desc")


class TransformKeysRequest(BaseModel):
    """Request model for the transform_keys tool; casing runs before renaming."""

    document: Any = Field(..., description="JSON document")
    case: KeyCase = Field(default=KeyCase.NONE, description="Naming convention for every key")
    find: str = Field(default="", description="Text or pattern to replace in keys")
    replace: str = Field(default="", description="Replacement text")
    use_regex: bool = Field(default=False, description="Treat find as a regular expression")
    prefix: str = Field(default="", description="Text put in front of every key")
    suffix: str = Field(default="", description="Text put after every key")


class SaveSessionRequest(BaseModel):
    """Request model for the save_session tool."""

    document_text: str = Field(..., description="Serialized document currently displayed")
    history: Optional[HistorySnapshot] = Field(default=None, description="Version history to persist")
    filename: Optional[str] = Field(default=None, description="Name of the loaded file")
    session_id: Optional[str] = Field(default=None, description="Existing session to overwrite")


class LoadSessionRequest(BaseModel):
    """Request model for the load_session tool."""

    session_id: str = Field(..., description="Session to load")

    @field_validator('session_id')
    @classmethod
    def validate_session_id(cls, v):
        """Ensure session ID is not empty."""
        if not v or not v.strip():
            raise ValueError("Session ID cannot be empty")
        return v.strip()
