"""Tests for searching keys and values."""

from json_workbench.services.document_search import search_document


def texts(addresses):
    return [str(address) for address in addresses]


class TestSearchDocument:
    """Tests for search_document."""

    def test_keys_match_in_document_order(self, store_document):
        assert texts(search_document(store_document, "price")) == [
            "store.books[0].price",
            "store.books[1].price",
            "store.books[2].price",
            "store.bicycle.price",
        ]

    def test_string_values_match_case_insensitively(self, store_document):
        assert texts(search_document(store_document, "SWORD")) == ["store.books[1].title"]

    def test_numbers_match_their_text(self, store_document):
        assert texts(search_document(store_document, "8.9")) == ["store.books[0].price", "store.books[2].price"]
        assert texts(search_document({"n": 2.0}, "2")) == ["n"]
        assert search_document({"n": 2.0}, "2.0") == []

    def test_booleans(self, products):
        assert texts(search_document(products, "TRUE")) == ["[0].inStock", "[2].inStock"]

    def test_member_reported_once(self):
        assert texts(search_document({"name": "name"}, "name")) == ["name"]

    def test_parents_before_nested_members(self):
        assert texts(search_document({"a": {"x": 1}, "x": 2}, "x")) == ["a.x", "x"]
        assert texts(search_document({"box": {"boxed": True}}, "box")) == ["box", "box.boxed"]

    def test_array_items_are_not_reported(self):
        assert search_document({"tags": ["quotes"]}, "quotes") == []
        assert search_document(["quotes"], "quotes") == []

    def test_nulls_never_match(self):
        assert search_document({"a": None}, "null") == []

    def test_blank_term(self, store_document):
        assert search_document(store_document, "") == []
        assert search_document(store_document, "   ") == []

    def test_keys_needing_quotes(self):
        assert texts(search_document({"a.b": 1}, "a.b")) == ['["a.b"]']
