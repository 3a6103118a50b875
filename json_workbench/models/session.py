"""Saved workbench session model."""

from datetime import datetime, UTC
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .history import HistorySnapshot


class WorkbenchSession(BaseModel):
    """Document text and its history, as persisted between visits."""

    session_id: str = Field(..., description="Unique session identifier")
    filename: Optional[str] = Field(default=None, description="Name of the loaded file")
    document_text: str = Field(..., description="Serialized document currently displayed")
    history: HistorySnapshot = Field(default_factory=HistorySnapshot, description="Version history")
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="When the session was saved")

    @field_validator('session_id')
    @classmethod
    def validate_session_id(cls, v):
        """Ensure session ID is not empty."""
        if not v or not v.strip():
            raise ValueError("Session ID cannot be empty")
        return v.strip()

    @field_validator('document_text')
    @classmethod
    def validate_document_text(cls, v):
        """Ensure document text is not empty."""
        if not v or not v.strip():
            raise ValueError("Document text cannot be empty")
        return v
