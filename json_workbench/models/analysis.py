"""Models for structural analysis results."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .core import PathAddress


class Severity(str, Enum):
    """Issue severity; declaration order is the report order."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


class IssueCategory(str, Enum):
    """Closed set of structural anomalies the analyzer reports."""

    DEEP_NESTING = "deep_nesting"
    LARGE_ARRAY = "large_array"
    EMPTY_STRUCTURE = "empty_structure"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    INCONSISTENT_STRUCTURE = "inconsistent_structure"
    NULL_VALUE = "null_value"
    LARGE_STRING = "large_string"
    REPEATED_KEY = "repeated_key"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class AnalysisIssue(BaseModel):
    """One anomaly found while walking a document."""

    model_config = ConfigDict(frozen=True)

    category: IssueCategory = Field(..., description="Anomaly category")
    severity: Severity = Field(..., description="Issue severity")
    address: PathAddress = Field(..., description="Node the issue refers to")
    message: str = Field(..., description="Human-readable summary")
    detail: Optional[str] = Field(default=None, description="Additional explanation")
    key: Optional[str] = Field(default=None, description="Property name the issue concerns, if any")

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        """Ensure message is not empty."""
        if not v or not v.strip():
            raise ValueError("Issue message cannot be empty")
        return v


class AnalysisStats(BaseModel):
    """Document statistics gathered in the same traversal as the issues."""

    total_keys: int = Field(default=0, ge=0, description="Sum of object key counts")
    max_depth: int = Field(default=0, ge=0, description="Deepest node depth, root is 0")
    total_arrays: int = Field(default=0, ge=0, description="Number of arrays")
    total_objects: int = Field(default=0, ge=0, description="Number of objects")
    largest_array: int = Field(default=0, ge=0, description="Longest array length")
    largest_string: int = Field(default=0, ge=0, description="Longest string length")


class AnalysisResult(BaseModel):
    """Issues ordered by severity then discovery, plus statistics."""

    issues: List[AnalysisIssue] = Field(default_factory=list, description="Ordered issues")
    stats: AnalysisStats = Field(default_factory=AnalysisStats, description="Document statistics")

    def issues_by_category(self) -> Dict[IssueCategory, List[AnalysisIssue]]:
        grouped: Dict[IssueCategory, List[AnalysisIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.category, []).append(issue)
        return grouped

    def severity_counts(self) -> Dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for issue in self.issues:
            counts[issue.severity] += 1
        return counts

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == Severity.ERROR for issue in self.issues)
