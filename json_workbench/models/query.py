"""Models for filter queries and their results."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from .core import PathAddress


class QueryOperator(str, Enum):
    """Comparison operators offered by the structured query builder."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    CONTAINS = "contains"
    REGEX = "regex"

    @property
    def token(self) -> str:
        return _OPERATOR_TOKENS[self]


_OPERATOR_TOKENS = {
    QueryOperator.EQ: "==",
    QueryOperator.NE: "!=",
    QueryOperator.GT: ">",
    QueryOperator.GE: ">=",
    QueryOperator.LT: "<",
    QueryOperator.LE: "<=",
    QueryOperator.CONTAINS: "=~",
    QueryOperator.REGEX: "=~",
}


class Combinator(str, Enum):
    """How structured conditions are joined."""

    AND = "AND"
    OR = "OR"

    @property
    def token(self) -> str:
        return " && " if self is Combinator.AND else " || "


class QueryCondition(BaseModel):
    """One row of the structured query builder."""

    property_path: str = Field(..., description="Dotted property path relative to the element under test")
    operator: QueryOperator = Field(..., description="Comparison operator")
    literal: str = Field(default="", description="Right-hand literal as typed by the user")

    @field_validator('property_path')
    @classmethod
    def validate_property_path(cls, v):
        """Ensure the property path is not empty."""
        if not v or not v.strip():
            raise ValueError("Property path cannot be empty")
        return v.strip()


class QueryMatch(BaseModel):
    """A matched value together with its address."""

    value: Any = Field(default=None, description="Matched JSON value")
    address: PathAddress = Field(..., description="Canonical address of the match")
    foreign_path: str = Field(..., description="Path as reported by the evaluator, e.g. $['a'][0]")

    @property
    def path_text(self) -> str:
        return str(self.address)


class QueryResult(BaseModel):
    """Outcome of running a filter expression; failures are reported, not raised."""

    success: bool = Field(..., description="Whether the expression evaluated")
    expression: str = Field(default="", description="Expression that was evaluated")
    matches: List[QueryMatch] = Field(default_factory=list, description="Matches in document order")
    error: Optional[str] = Field(default=None, description="Human-readable failure message")

    @property
    def count(self) -> int:
        return len(self.matches)

    @property
    def values(self) -> List[Any]:
        return [match.value for match in self.matches]


class QueryExample(BaseModel):
    """A ready-to-run example expression derived from the loaded data."""

    label: str = Field(..., description="Short button label")
    query: str = Field(..., description="Filter expression")
    description: str = Field(..., description="What the expression selects")
