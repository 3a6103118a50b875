"""Single-sample schema inference and default value synthesis."""

import logging
from typing import Any, Dict, List

from ..models.core import JsonType, json_type_of
from ..models.schema import ObjectSchema, PropertySchema

logger = logging.getLogger(__name__)


def infer_type(value: Any) -> JsonType:
    """Infer the type tag of a JSON value."""
    return json_type_of(value)


def validate_type(value: Any, expected: JsonType) -> bool:
    """Check whether ``value`` has the ``expected`` type tag."""
    return infer_type(value) == expected


def infer_schema(obj: Dict[str, Any]) -> ObjectSchema:
    """Infer an object schema from one representative object.

    Arrays take their item type from element 0 only and empty arrays carry no
    item type. Nested objects, and arrays whose first element is an object,
    are inferred recursively into ``nested_schema``. Siblings are never
    merged: the sample is trusted as the shape.
    """
    if json_type_of(obj) is not JsonType.OBJECT:
        raise TypeError(f"infer_schema expects an object, got {json_type_of(obj).value}")
    return ObjectSchema(properties=_infer_properties(obj))


def _infer_properties(obj: Dict[str, Any]) -> List[PropertySchema]:
    properties: List[PropertySchema] = []
    for key, value in obj.items():
        value_type = infer_type(value)
        prop = PropertySchema(name=key, type=value_type)

        if value_type is JsonType.ARRAY:
            if value:
                prop.array_item_type = infer_type(value[0])
                if prop.array_item_type is JsonType.OBJECT:
                    prop.nested_schema = _infer_properties(value[0])
        elif value_type is JsonType.OBJECT:
            prop.nested_schema = _infer_properties(value)

        properties.append(prop)
    return properties


def infer_schema_from_sample(sample: Any) -> ObjectSchema:
    """Infer a schema from an object, or from the first element of an array.

    Arrays whose first element is not an object produce an empty schema.
    """
    sample_type = json_type_of(sample)
    if sample_type is JsonType.OBJECT:
        return infer_schema(sample)
    if sample_type is JsonType.ARRAY and sample and json_type_of(sample[0]) is JsonType.OBJECT:
        return infer_schema(sample[0])
    logger.debug("No object sample available for schema inference (got %s)", sample_type.value)
    return ObjectSchema()


def default_value(type_tag: JsonType) -> Any:
    """Create the default value for a type tag."""
    if type_tag is JsonType.STRING:
        return ""
    if type_tag is JsonType.NUMBER:
        return 0
    if type_tag is JsonType.BOOLEAN:
        return False
    if type_tag is JsonType.NULL:
        return None
    if type_tag is JsonType.ARRAY:
        return []
    if type_tag is JsonType.OBJECT:
        return {}
    raise ValueError(f"Unknown type tag: {type_tag!r}")


def synthesize(schema: ObjectSchema, nested: bool = False) -> Dict[str, Any]:
    """Build an object populated with default values for every property.

    Args:
        schema: Schema to instantiate
        nested: When true, object properties recurse into their nested schema
            instead of yielding ``{}``. Array properties are always ``[]``.
    """
    return _synthesize_properties(schema.properties, nested)


def _synthesize_properties(properties: List[PropertySchema], nested: bool) -> Dict[str, Any]:
    obj: Dict[str, Any] = {}
    for prop in properties:
        if nested and prop.type is JsonType.OBJECT and prop.nested_schema is not None:
            obj[prop.name] = _synthesize_properties(prop.nested_schema, nested)
        else:
            obj[prop.name] = default_value(prop.type)
    return obj
