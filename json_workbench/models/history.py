"""Version history models."""

import time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import HistoryBoundary


def now_millis() -> int:
    """Current time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


class VersionHistoryItem(BaseModel):
    """Immutable snapshot of the serialized document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str = Field(..., description="Serialized document text")
    created_at: int = Field(default_factory=now_millis, alias="createdAt", description="Epoch milliseconds")
    label: str = Field(default="Edit", description="Free-form tag such as 'File loaded' or 'Edit'")

    @field_validator('created_at')
    @classmethod
    def validate_created_at(cls, v):
        """Timestamps cannot be negative."""
        if v < 0:
            raise ValueError("createdAt cannot be negative")
        return v


class HistoryStep(BaseModel):
    """Result of an undo or redo: the new current item, or the boundary hit."""

    item: Optional[VersionHistoryItem] = Field(default=None, description="Snapshot now current")
    boundary: Optional[HistoryBoundary] = Field(default=None, description="Edge that prevented the move")

    @property
    def moved(self) -> bool:
        return self.item is not None


class HistorySnapshot(BaseModel):
    """Exported history items plus cursor, for persistence."""

    model_config = ConfigDict(populate_by_name=True)

    items: List[VersionHistoryItem] = Field(default_factory=list, description="Oldest first")
    cursor: int = Field(default=-1, ge=-1, alias="currentVersionIndex", description="Index of the current item")
