"""Schema models produced by single-sample inference."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .core import JsonType


class PropertySchema(BaseModel):
    """Inferred shape of one object property."""

    name: str = Field(..., description="Property name")
    type: JsonType = Field(..., description="Inferred type tag")
    required: bool = Field(default=True, description="Always true; optionality is never inferred")
    array_item_type: Optional[JsonType] = Field(
        default=None,
        description="Type of the first element when the property is a non-empty array"
    )
    nested_schema: Optional[List["PropertySchema"]] = Field(
        default=None,
        description="Properties of a nested object or of the first array element object"
    )

    @field_validator('required')
    @classmethod
    def validate_required(cls, v):
        """Inference never produces optional properties."""
        if not v:
            raise ValueError("Inferred properties are always required")
        return v


class ObjectSchema(BaseModel):
    """Ordered property list describing an object shape."""

    properties: List[PropertySchema] = Field(default_factory=list, description="Properties in key order")

    def get(self, name: str) -> Optional[PropertySchema]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    @property
    def names(self) -> List[str]:
        return [prop.name for prop in self.properties]


PropertySchema.model_rebuild()
