"""Tests for structural edits and array sorting."""

import copy

import pytest

from json_workbench.models.core import PathAddress
from json_workbench.models.edit import MoveDirection, SortOrder
from json_workbench.models.errors import AddressOutOfBounds, AddressTypeMismatch, InvalidEdit
from json_workbench.services.document_editor import (
    add_item,
    copy_sources,
    delete_node,
    move_item,
    new_item,
    set_value,
    sort_array,
)
from json_workbench.services.path_address import parse_path


class TestEdits:
    """Tests for set, delete, move and add."""

    def test_set_value_leaves_input_untouched(self, store_document):
        original = copy.deepcopy(store_document)
        updated = set_value(store_document, parse_path("store.books[1].price"), 10)
        assert updated["store"]["books"][1]["price"] == 10
        assert store_document == original

    def test_set_value_copies_the_value(self):
        value = {"nested": [1]}
        updated = set_value({"a": 1}, PathAddress.of("a"), value)
        value["nested"].append(2)
        assert updated == {"a": {"nested": [1]}}

    def test_set_root(self):
        assert set_value({"a": 1}, PathAddress.root(), [1]) == [1]

    def test_set_missing_property(self):
        with pytest.raises(AddressOutOfBounds):
            set_value({"a": 1}, PathAddress.of("b"), 2)

    def test_delete_property_and_item(self, products):
        assert delete_node({"a": 1, "b": 2}, PathAddress.of("a")) == {"b": 2}
        remaining = delete_node(products, PathAddress.of(1))
        assert [item["id"] for item in remaining] == [1, 3]
        assert len(products) == 3

    def test_delete_root(self):
        with pytest.raises(InvalidEdit):
            delete_node({"a": 1}, PathAddress.root())

    def test_delete_through_scalar(self):
        with pytest.raises(AddressTypeMismatch):
            delete_node({"a": 1}, parse_path("a.b"))

    def test_move_up_and_down(self, products):
        moved = move_item(products, PathAddress.of(1), MoveDirection.UP)
        assert [item["id"] for item in moved] == [2, 1, 3]
        moved = move_item(products, PathAddress.of(1), MoveDirection.DOWN)
        assert [item["id"] for item in moved] == [1, 3, 2]
        assert [item["id"] for item in products] == [1, 2, 3]

    def test_move_past_the_ends_is_a_no_op(self, products):
        assert move_item(products, PathAddress.of(0), MoveDirection.UP) == products
        assert move_item(products, PathAddress.of(2), MoveDirection.DOWN) == products

    def test_move_needs_an_item(self):
        with pytest.raises(InvalidEdit):
            move_item({"a": [1]}, PathAddress.of("a"), MoveDirection.UP)
        with pytest.raises(AddressOutOfBounds):
            move_item({"a": [1]}, parse_path("a[3]"), MoveDirection.UP)

    def test_add_default_item(self, products):
        updated, address = add_item({"items": products}, PathAddress.of("items"))
        assert str(address) == "items[3]"
        assert updated["items"][3] == {"id": 0, "name": "", "price": 0, "inStock": False}
        assert len(products) == 3

    def test_default_item_is_flat(self):
        item = new_item([{"meta": {"a": 1}, "tags": ["x"]}])
        assert item == {"meta": {}, "tags": []}

    def test_add_copied_item(self, products):
        updated, address = add_item(products, PathAddress.root(), source_index=2)
        assert str(address) == "[3]"
        assert updated[3] == products[2]
        assert updated[3] is not updated[2]

    def test_default_item_needs_an_object_sample(self):
        with pytest.raises(InvalidEdit):
            add_item([], PathAddress.root())
        with pytest.raises(InvalidEdit):
            add_item([1, 2], PathAddress.root())

    def test_add_to_non_array(self):
        with pytest.raises(InvalidEdit):
            add_item({"a": {}}, PathAddress.of("a"))

    def test_copy_sources(self, products):
        sources = copy_sources({"items": products + [7]}, PathAddress.of("items"))
        assert sources == [
            {"index": 0, "label": "Copy from Item 1 (1)"},
            {"index": 1, "label": "Copy from Item 2 (2)"},
            {"index": 2, "label": "Copy from Item 3 (3)"},
        ]


class TestSortArray:
    """Tests for sort_array."""

    def test_sort_by_property(self, products):
        ascending = sort_array(products, PathAddress.root(), "price")
        assert [item["price"] for item in ascending] == [25, 300, 1200]
        descending = sort_array(products, PathAddress.root(), "name", SortOrder.DESC)
        assert [item["name"] for item in descending] == ["Mouse", "Monitor", "Laptop"]
        assert [item["id"] for item in products] == [1, 2, 3]

    def test_missing_and_null_values_go_last(self):
        items = [{"n": None}, {"m": 1}, {"n": 2}, {"n": 1}]
        for order in SortOrder:
            ordered = sort_array(items, PathAddress.root(), "n", order)
            assert ordered[2:] == [{"n": None}, {"m": 1}]
        assert sort_array(items, PathAddress.root(), "n", SortOrder.DESC)[:2] == [{"n": 2}, {"n": 1}]

    def test_strings_ignore_case(self):
        assert sort_array(["b", "C", "a"], PathAddress.root()) == ["a", "b", "C"]

    def test_booleans(self):
        assert sort_array([True, False, True], PathAddress.root()) == [False, True, True]

    def test_primitives_when_items_are_not_objects(self):
        assert sort_array([3, None, 1, 2], PathAddress.root(), "ignored") == [1, 2, 3, None]

    def test_mixed_types_compare_as_text(self):
        assert sort_array([10, "9", True], PathAddress.root()) == [10, "9", True]

    def test_nested_array(self, store_document):
        updated = sort_array(store_document, parse_path("store.books"), "title", SortOrder.DESC)
        assert [book["title"] for book in updated["store"]["books"]] == ["Sword", "Sayings", "Moby Dick"]

    def test_not_an_array(self, store_document):
        with pytest.raises(InvalidEdit):
            sort_array(store_document, parse_path("store.bicycle"))
