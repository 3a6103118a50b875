"""Tests for schema inference, default synthesis and object identity."""

import pytest

from json_workbench.models.core import JsonType
from json_workbench.models.errors import UnrepresentableDocument
from json_workbench.services.object_identity import (
    get_identifier_key,
    get_object_copy_label,
    get_object_identifier,
)
from json_workbench.services.schema_inferencer import (
    default_value,
    infer_schema,
    infer_schema_from_sample,
    infer_type,
    synthesize,
    validate_type,
)


class TestInferType:
    """Tests for type tags."""

    @pytest.mark.parametrize("value, expected", [
        ("x", JsonType.STRING),
        (1, JsonType.NUMBER),
        (1.5, JsonType.NUMBER),
        (True, JsonType.BOOLEAN),
        (None, JsonType.NULL),
        ([], JsonType.ARRAY),
        ({}, JsonType.OBJECT),
    ])
    def test_tags(self, value, expected):
        assert infer_type(value) is expected

    def test_bool_is_not_a_number(self):
        assert not validate_type(False, JsonType.NUMBER)
        assert validate_type(False, JsonType.BOOLEAN)

    def test_foreign_values_are_rejected(self):
        with pytest.raises(UnrepresentableDocument):
            infer_type({1, 2})


class TestInferSchema:
    """Tests for single-sample inference."""

    def test_flat_object_keeps_key_order(self):
        schema = infer_schema({"name": "Ann", "age": 31, "active": True, "note": None})
        assert schema.names == ["name", "age", "active", "note"]
        assert [prop.type for prop in schema.properties] == [
            JsonType.STRING, JsonType.NUMBER, JsonType.BOOLEAN, JsonType.NULL,
        ]
        assert all(prop.required for prop in schema.properties)

    def test_array_item_type_from_first_element(self):
        schema = infer_schema({"tags": ["a", 1], "empty": []})
        assert schema.get("tags").array_item_type is JsonType.STRING
        assert schema.get("empty").array_item_type is None

    def test_nested_object_and_array_of_objects(self):
        schema = infer_schema({"address": {"city": "Oslo"}, "items": [{"sku": "A1", "qty": 2}]})
        assert [prop.name for prop in schema.get("address").nested_schema] == ["city"]
        items = schema.get("items")
        assert items.array_item_type is JsonType.OBJECT
        assert [prop.name for prop in items.nested_schema] == ["sku", "qty"]

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            infer_schema([1, 2])

    def test_from_sample_array(self):
        schema = infer_schema_from_sample([{"id": 1}, {"other": 2}])
        assert schema.names == ["id"]

    def test_from_sample_scalar_array_is_empty(self):
        assert infer_schema_from_sample([1, 2]).properties == []
        assert infer_schema_from_sample([]).properties == []


class TestSynthesize:
    """Tests for default objects."""

    def test_defaults(self):
        assert [default_value(tag) for tag in JsonType] == ["", 0, False, None, [], {}]

    def test_synthesize_flat(self):
        schema = infer_schema({"name": "x", "count": 3, "flags": [True], "meta": {"a": 1}})
        assert synthesize(schema) == {"name": "", "count": 0, "flags": [], "meta": {}}

    def test_synthesize_nested(self):
        schema = infer_schema({"meta": {"a": 1, "deep": {"b": "x"}}, "list": [{"c": 1}]})
        assert synthesize(schema, nested=True) == {"meta": {"a": 0, "deep": {"b": ""}}, "list": []}

    def test_inference_is_idempotent_on_types(self):
        sample = {"name": "x", "count": 3, "ok": True, "none": None, "tags": [], "meta": {}}
        schema = infer_schema(sample)
        again = infer_schema(synthesize(schema))
        assert [(p.name, p.type) for p in again.properties] == [(p.name, p.type) for p in schema.properties]


class TestObjectIdentity:
    """Tests for identifier detection and copy labels."""

    def test_priority_keys(self):
        assert get_identifier_key({"title": "T", "name": "N"}) == "name"
        assert get_identifier_key({"sku": "S", "id": 5}) == "id"

    def test_falls_back_to_first_scalar_property(self):
        assert get_identifier_key({"nested": {}, "flag": True, "color": "red"}) == "color"

    def test_none_when_no_label(self):
        assert get_identifier_key({"a": [], "b": None}) is None
        assert get_object_identifier({"a": {}}) is None

    def test_identifier_text(self):
        assert get_object_identifier({"id": 7.0}) == "7"
        assert get_object_identifier({"id": "abc"}) == "abc"

    def test_copy_labels(self):
        assert get_object_copy_label({"id": "abc"}, 2) == "Copy from Item 3 (abc)"
        assert get_object_copy_label({}, 0, is_array_item=False) == "Copy from Object 1"
        assert get_object_copy_label({}, 1, parent={"userId": 42}) == "Copy from Item 2 (in userId: 42)"
