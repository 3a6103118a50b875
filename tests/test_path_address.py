"""Tests for path address parsing, rendering and resolution."""

import pytest

from json_workbench.models.core import IndexSegment, PathAddress, PropertySegment
from json_workbench.models.errors import AddressOutOfBounds, AddressTypeMismatch, MalformedPath
from json_workbench.services.path_address import (
    from_foreign_path_notation,
    is_prefix_of,
    parse_path,
    path_exists,
    path_to_text,
    resolve_path,
    to_foreign_path_notation,
)


class TestParsePath:
    """Tests for canonical path text."""

    def test_dotted_and_indexed(self):
        assert parse_path("store.books[3].title") == PathAddress.of("store", "books", 3, "title")

    def test_leading_dot_is_optional(self):
        assert parse_path(".a.b") == parse_path("a.b")

    def test_leading_index(self):
        assert parse_path("[2].name") == PathAddress.of(2, "name")

    def test_empty_text_is_root(self):
        assert parse_path("").is_root

    def test_quoted_bracket_name(self):
        assert parse_path('a["b.c"]') == PathAddress.of("a", "b.c")

    @pytest.mark.parametrize("text", ["a..b", "a.", "a[x]", "a[", "a[0]b", "a]"])
    def test_malformed(self, text):
        with pytest.raises(MalformedPath):
            parse_path(text)

    def test_malformed_carries_text(self):
        with pytest.raises(MalformedPath) as excinfo:
            parse_path("a[x]")
        assert excinfo.value.path == "a[x]"
        assert excinfo.value.error_code == "MALFORMED_PATH"


class TestPathToText:
    """Tests for canonical rendering."""

    def test_root_renders_empty(self):
        assert path_to_text(PathAddress.root()) == ""

    def test_render(self):
        assert path_to_text(PathAddress.of("users", 0, "name")) == "users[0].name"
        assert str(PathAddress.of(0, "a")) == "[0].a"

    @pytest.mark.parametrize("address", [
        PathAddress.of("a", 0, "b"),
        PathAddress.of(1, 2, 3),
        PathAddress.of("with.dot", "x"),
        PathAddress.of("", "quote\"d"),
        PathAddress.of("sp ace", "[br]"),
        PathAddress.of("0", 0),
        PathAddress.of(" padded "),
    ])
    def test_round_trip(self, address):
        assert parse_path(path_to_text(address)) == address


class TestAddressModel:
    """Tests for the PathAddress value object."""

    def test_prefix_is_strict(self):
        a = PathAddress.of("a")
        ab = PathAddress.of("a", "b")
        assert is_prefix_of(a, ab)
        assert not is_prefix_of(ab, a)
        assert not is_prefix_of(a, a)

    def test_root_prefixes_everything_but_itself(self):
        root = PathAddress.root()
        assert root.is_prefix_of(PathAddress.of(0))
        assert not root.is_prefix_of(root)

    def test_parent_and_child(self):
        address = PathAddress.of("a", 1)
        assert address.parent == PathAddress.of("a")
        assert address.parent.item(1) == address
        assert PathAddress.root().parent is None
        assert address.depth == 2

    def test_hashable(self):
        seen = {PathAddress.of("a", 0): 1}
        assert seen[parse_path("a[0]")] == 1

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            IndexSegment(index=-1)

    def test_bool_is_not_a_segment(self):
        with pytest.raises(TypeError):
            PathAddress.of(True)


class TestResolvePath:
    """Tests for resolving addresses against documents."""

    def test_resolve(self, store_document):
        assert resolve_path(store_document, parse_path("store.books[1].title")) == "Sword"

    def test_resolve_root(self, store_document):
        assert resolve_path(store_document, PathAddress.root()) is store_document

    def test_index_out_of_bounds(self, store_document):
        with pytest.raises(AddressOutOfBounds) as excinfo:
            resolve_path(store_document, parse_path("store.books[5]"))
        assert excinfo.value.details["length"] == 3

    def test_missing_property(self, store_document):
        with pytest.raises(AddressOutOfBounds):
            resolve_path(store_document, parse_path("store.toys"))

    def test_index_into_object(self, store_document):
        with pytest.raises(AddressTypeMismatch):
            resolve_path(store_document, parse_path("store[0]"))

    def test_property_of_scalar(self, store_document):
        with pytest.raises(AddressTypeMismatch) as excinfo:
            resolve_path(store_document, parse_path("store.bicycle.color.hue"))
        assert excinfo.value.details["found"] == "string"

    def test_path_exists(self, store_document):
        assert path_exists(store_document, parse_path("store.bicycle"))
        assert not path_exists(store_document, parse_path("store.books[9]"))
        assert not path_exists(store_document, parse_path("store.bicycle[0]"))


class TestForeignNotation:
    """Tests for the bracket-quoted evaluator dialect."""

    def test_from_foreign(self):
        assert from_foreign_path_notation("$['store']['books'][0]") == PathAddress.of("store", "books", 0)

    def test_quoted_digits_are_properties(self):
        address = from_foreign_path_notation("$['0'][0]")
        assert address.segments == (PropertySegment(name="0"), IndexSegment(index=0))

    def test_double_quotes_and_escapes(self):
        assert from_foreign_path_notation('$["a"][\'it\\\'s\']') == PathAddress.of("a", "it's")

    def test_root(self):
        assert from_foreign_path_notation("$").is_root

    def test_to_foreign_round_trip(self):
        address = PathAddress.of("it's", 2, "x\\y")
        assert from_foreign_path_notation(to_foreign_path_notation(address)) == address

    @pytest.mark.parametrize("text", ["$.a", "$[", "$[]", "$['a'"])
    def test_malformed(self, text):
        with pytest.raises(MalformedPath):
            from_foreign_path_notation(text)
