"""Models for structural document comparison."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .core import PathAddress


class ChangeKind(str, Enum):
    """Kind of difference between two documents at one address."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


class DocumentChange(BaseModel):
    """One difference, addressed in the coordinates of the documents compared."""

    kind: ChangeKind = Field(..., description="Kind of change")
    address: PathAddress = Field(..., description="Where the change occurred")
    old_value: Any = Field(default=None, description="Value before (removed/changed)")
    new_value: Any = Field(default=None, description="Value after (added/changed)")
