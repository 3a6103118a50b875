"""Core data models for the JSON workbench."""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import UnrepresentableDocument


class JsonType(str, Enum):
    """Type tags of the JSON value model."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


def json_type_of(value: Any) -> JsonType:
    """Classify a Python value as one of the JSON type tags.

    ``bool`` is checked before numbers because it is an ``int`` subclass.

    Raises:
        UnrepresentableDocument: If the value has no JSON counterpart
    """
    if value is None:
        return JsonType.NULL
    if isinstance(value, bool):
        return JsonType.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonType.NUMBER
    if isinstance(value, str):
        return JsonType.STRING
    if isinstance(value, list):
        return JsonType.ARRAY
    if isinstance(value, dict):
        return JsonType.OBJECT
    raise UnrepresentableDocument(
        f"Value of type {type(value).__name__} cannot be part of a JSON document",
        details={"python_type": type(value).__name__}
    )


class PropertySegment(BaseModel):
    """Address segment selecting an object property by name."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["property"] = "property"
    name: str = Field(..., strict=True, description="Property name")


class IndexSegment(BaseModel):
    """Address segment selecting an array element by position."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["index"] = "index"
    index: int = Field(..., ge=0, strict=True, description="Zero-based array index")


PathSegment = Annotated[Union[PropertySegment, IndexSegment], Field(discriminator="kind")]


def segment_for(part: Union[str, int]) -> Union[PropertySegment, IndexSegment]:
    """Build a segment from a plain name or index."""
    if isinstance(part, bool):
        raise TypeError("Path segments must be str or int, not bool")
    if isinstance(part, int):
        return IndexSegment(index=part)
    return PropertySegment(name=part)


class PathAddress(BaseModel):
    """Ordered sequence of segments identifying one node of a document.

    The empty sequence denotes the document root. Addresses are immutable and
    hashable so they can key line maps and issue indexes.
    """

    model_config = ConfigDict(frozen=True)

    segments: Tuple[PathSegment, ...] = Field(default=(), description="Segments from the root")

    @classmethod
    def root(cls) -> "PathAddress":
        return cls()

    @classmethod
    def of(cls, *parts: Union[str, int]) -> "PathAddress":
        """Build an address from names (properties) and ints (indices)."""
        return cls(segments=tuple(segment_for(part) for part in parts))

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def last(self) -> Optional[Union[PropertySegment, IndexSegment]]:
        return self.segments[-1] if self.segments else None

    @property
    def parent(self) -> Optional["PathAddress"]:
        if not self.segments:
            return None
        return PathAddress(segments=self.segments[:-1])

    def child(self, segment: Union[PropertySegment, IndexSegment]) -> "PathAddress":
        return PathAddress(segments=self.segments + (segment,))

    def key(self, name: str) -> "PathAddress":
        return self.child(PropertySegment(name=name))

    def item(self, index: int) -> "PathAddress":
        return self.child(IndexSegment(index=index))

    def is_prefix_of(self, other: "PathAddress") -> bool:
        """True iff this address is a strict ancestor of ``other``."""
        mine = self.segments
        return len(mine) < len(other.segments) and other.segments[:len(mine)] == mine

    def __str__(self) -> str:
        from ..services.path_address import path_to_text
        return path_to_text(self)


class LineRange(BaseModel):
    """1-based inclusive line range inside a serialized document."""

    model_config = ConfigDict(frozen=True)

    start_line: int = Field(..., ge=1, description="First line of the range")
    end_line: int = Field(..., ge=1, description="Last line of the range")

    @model_validator(mode='after')
    def validate_order(self):
        """Ensure the range is not inverted."""
        if self.end_line < self.start_line:
            raise ValueError("end_line cannot precede start_line")
        return self

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line
