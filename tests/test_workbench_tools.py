"""Tests for the workbench tool handlers and the MCP server wrapper."""

import json

import pytest

from json_workbench.config.models import WorkbenchConfig
from json_workbench.server import TOOL_DEFINITIONS, WorkbenchServer
from json_workbench.services.session_store import SessionStore
from json_workbench.tools.workbench_tools import WorkbenchTools

NESTED_TEXT = '{\n  "a": {\n    "b": 1\n  }\n}'


def error_code(result):
    assert "error" in result, result
    return result["error"]["error_code"]


class TestAnalyzeTool:
    """Tests for the analyze tool."""

    def test_issues_and_stats(self, tools):
        result = tools.handle("analyze", {"document": {"x": None, "a": []}})
        assert [issue["category"] for issue in result["issues"]] == ["null_value", "empty_structure"]
        assert result["issues"][0]["path"] == "x"
        assert result["issues"][0]["label"] == "Null Value"
        assert result["severity_counts"] == {"error": 0, "warning": 0, "info": 2}
        assert result["has_errors"] is False
        assert result["stats"]["total_objects"] == 1

    def test_duplicate_identifiers(self, tools):
        result = tools.handle("analyze", {"document": [{"id": 1}, {"id": 1}]})
        assert result["has_errors"] is True
        assert result["issues"][0]["key"] == "id"
        assert result["issues"][0]["detail"] == "Duplicates: 1 (index 1)"

    def test_missing_document(self, tools):
        assert error_code(tools.handle("analyze", {})) == "VALIDATION_FAILED"

    def test_arguments_must_be_object(self, tools):
        assert error_code(tools.analyze(["not", "an", "object"])) == "INVALID_REQUEST"

    def test_document_too_large(self):
        tools = WorkbenchTools(WorkbenchConfig(max_document_size=1024))
        result = tools.handle("analyze", {"document": {"text": "x" * 2000}})
        assert error_code(result) == "DOCUMENT_TOO_LARGE"
        assert result["error"]["details"]["max_size"] == 1024

    def test_unrepresentable_document(self, tools):
        result = tools.handle("analyze", {"document": {"value": float("nan")}})
        assert error_code(result) == "UNREPRESENTABLE_DOCUMENT"


class TestQueryTools:
    """Tests for query and suggest_queries."""

    def test_expression(self, tools, products):
        result = tools.handle("query", {"document": products, "expression": "$[?(@.price > 100)]"})
        assert result["success"] is True
        assert result["count"] == 2
        assert [match["path"] for match in result["matches"]] == ["[0]", "[2]"]
        assert result["matches"][0]["foreign_path"] == "$[0]"
        assert result["matches"][1]["value"]["name"] == "Monitor"

    def test_conditions(self, tools, products):
        result = tools.handle("query", {
            "document": products,
            "conditions": [
                {"property_path": "inStock", "operator": "eq", "literal": "true"},
                {"property_path": "name", "operator": "contains", "literal": "mon"},
            ],
            "combinator": "AND",
        })
        assert result["expression"] == '$[?(@.inStock == true && @.name =~ /mon/i)]'
        assert [match["value"]["id"] for match in result["matches"]] == [3]

    def test_invalid_expression_is_reported(self, tools, products):
        result = tools.handle("query", {"document": products, "expression": "$[?(@.price >"})
        assert result["success"] is False
        assert result["count"] == 0
        assert isinstance(result["error"], str)

    def test_expression_or_conditions_required(self, tools, products):
        assert error_code(tools.handle("query", {"document": products})) == "VALIDATION_FAILED"

    def test_truncated_matches(self, products):
        config = WorkbenchConfig(query_config={"max_matches": 1})
        tools = WorkbenchTools(config)
        result = tools.handle("query", {"document": products, "expression": "$[*]"})
        assert result["count"] == 3
        assert len(result["matches"]) == 1
        assert result["truncated"] is True

    def test_suggestions(self, tools, products):
        result = tools.handle("suggest_queries", {"document": products})
        assert result["properties"] == ["id", "inStock", "name", "price"]
        queries = [example["query"] for example in result["examples"]]
        assert queries[0] == "$[*]"
        assert '$[?(@.name == "Laptop")]' in queries
        assert all(set(example) == {"label", "query", "description"} for example in result["examples"])


class TestPathTools:
    """Tests for resolve_path and highlight_range."""

    def test_resolve(self, tools, store_document):
        result = tools.handle("resolve_path", {"document": store_document, "path": "store.books[1].title"})
        assert result["value"] == "Sword"
        assert result["depth"] == 4
        assert result["path"] == "store.books[1].title"
        assert result["foreign_path"] == "$['store']['books'][1]['title']"

    def test_resolve_missing(self, tools, store_document):
        result = tools.handle("resolve_path", {"document": store_document, "path": "store.books[5]"})
        assert result["error"]["error_type"] == "address"
        assert error_code(result) == "ADDRESS_OUT_OF_BOUNDS"

    def test_resolve_malformed(self, tools, store_document):
        result = tools.handle("resolve_path", {"document": store_document, "path": "store[0"})
        assert error_code(result) == "MALFORMED_PATH"
        assert result["error"]["path"] == "store[0"

    def test_highlight_from_document(self, tools):
        result = tools.handle("highlight_range", {"document": {"a": {"b": 1}}, "path": "a"})
        assert result == {"path": "a", "found": True, "start_line": 2, "end_line": 4}

    def test_highlight_from_text(self, tools):
        result = tools.handle("highlight_range", {"text": NESTED_TEXT, "path": "a.b"})
        assert (result["start_line"], result["end_line"]) == (3, 3)

    def test_highlight_root(self, tools):
        assert tools.handle("highlight_range", {"text": NESTED_TEXT, "path": ""})["found"] is False
        result = tools.handle("highlight_range", {"document": {"a": {"b": 1}}, "path": "", "include_root": True})
        assert (result["start_line"], result["end_line"]) == (1, 5)

    def test_highlight_missing_node(self, tools):
        result = tools.handle("highlight_range", {"document": {"a": 1}, "path": "b"})
        assert result == {"path": "b", "found": False}

    def test_highlight_needs_source(self, tools):
        assert error_code(tools.handle("highlight_range", {"path": "a"})) == "VALIDATION_FAILED"


class TestSchemaAndDiffTools:
    """Tests for infer_schema and diff."""

    def test_infer_schema(self, tools):
        sample = [{"name": "x", "tags": ["a"], "meta": {"v": 1}}, {"other": True}]
        result = tools.handle("infer_schema", {"sample": sample})
        assert [prop["name"] for prop in result["properties"]] == ["name", "tags", "meta"]
        assert result["properties"][1]["array_item_type"] == "string"
        assert result["default_object"] == {"name": "", "tags": [], "meta": {"v": 0}}

    def test_infer_schema_flat(self, tools):
        result = tools.handle("infer_schema", {"sample": {"meta": {"v": 1}}, "nested": False})
        assert result["default_object"] == {"meta": {}}

    def test_infer_schema_rejects_scalars(self, tools):
        assert error_code(tools.handle("infer_schema", {"sample": 5})) == "VALIDATION_FAILED"

    def test_diff(self, tools):
        result = tools.handle("diff", {"old": {"a": 1, "b": 2}, "new": {"a": 3, "c": 4}})
        assert result["identical"] is False
        assert [(change["kind"], change["path"]) for change in result["changes"]] == [
            ("removed", "b"), ("added", "c"), ("changed", "a"),
        ]
        assert result["changes"][2]["old_value"] == 1
        assert result["text_diff"].startswith("--- original\n+++ modified")

    def test_identical(self, tools):
        result = tools.handle("diff", {"old": [1, 2], "new": [1, 2]})
        assert result == {"identical": True, "changes": [], "text_diff": ""}


class TestSessionTools:
    """Tests for save_session and load_session."""

    def test_round_trip(self, tools):
        history = {
            "items": [
                {"content": "{}", "createdAt": 1, "label": "File loaded"},
                {"content": '{"a": 1}', "createdAt": 2, "label": "Edit"},
            ],
            "currentVersionIndex": 1,
        }
        saved = tools.handle("save_session", {
            "document_text": '{"a": 1}', "history": history, "filename": "data.json",
        })
        assert saved["history_entries"] == 2
        assert saved["session_id"].startswith("sess_")

        loaded = tools.handle("load_session", {"session_id": saved["session_id"]})
        assert loaded["found"] is True
        assert loaded["filename"] == "data.json"
        assert loaded["history"] == history

    def test_save_without_history(self, tools):
        saved = tools.handle("save_session", {"document_text": "[]", "session_id": "mine"})
        assert saved["session_id"] == "mine"
        assert saved["history_entries"] == 0

    def test_load_missing(self, tools):
        assert tools.handle("load_session", {"session_id": "sess_missing"}) == {
            "session_id": "sess_missing", "found": False,
        }

    def test_load_requires_id(self, tools):
        assert error_code(tools.handle("load_session", {"session_id": "  "})) == "VALIDATION_FAILED"


class TestEditingTools:
    """Tests for search, edit, sort_array and transform_keys."""

    def test_search_highlights_first_match(self, tools):
        result = tools.handle("search", {"document": {"a": {"b": 1}}, "term": "B"})
        assert result["paths"] == ["a.b"]
        assert result["count"] == 1
        assert result["first_range"] == {"start_line": 3, "end_line": 3}

    def test_search_without_matches(self, tools):
        result = tools.handle("search", {"document": {"a": 1}, "term": "zzz"})
        assert result == {"term": "zzz", "count": 0, "paths": []}

    def test_set(self, tools):
        result = tools.handle("edit", {"document": {"a": [1, 2]}, "action": "set", "path": "a[1]", "value": None})
        assert result["document"] == {"a": [1, None]}
        assert result["path"] == "a[1]"

    def test_set_needs_value(self, tools):
        result = tools.handle("edit", {"document": {"a": 1}, "action": "set", "path": "a"})
        assert error_code(result) == "VALIDATION_FAILED"

    def test_delete_and_move(self, tools, products):
        deleted = tools.handle("edit", {"document": products, "action": "delete", "path": "[0]"})
        assert [item["id"] for item in deleted["document"]] == [2, 3]
        moved = tools.handle("edit", {"document": products, "action": "move_down", "path": "[0]"})
        assert [item["id"] for item in moved["document"]] == [2, 1, 3]

    def test_add_item(self, tools, products):
        result = tools.handle("edit", {"document": {"items": products}, "action": "add_item", "path": "items"})
        assert result["path"] == "items[3]"
        assert result["document"]["items"][3] == {"id": 0, "name": "", "price": 0, "inStock": False}
        assert [source["index"] for source in result["copy_sources"]] == [0, 1, 2, 3]

    def test_add_copied_item(self, tools, products):
        result = tools.handle("edit", {"document": products, "action": "add_item", "source_index": 1})
        assert result["document"][3] == products[1]

    def test_edit_errors(self, tools):
        assert error_code(tools.handle("edit", {"document": {}, "action": "delete"})) == "INVALID_EDIT"
        assert error_code(tools.handle("edit", {"document": {}, "action": "delete", "path": "x"})) == \
            "ADDRESS_OUT_OF_BOUNDS"
        assert error_code(tools.handle("edit", {"document": {}, "action": "rotate"})) == "VALIDATION_FAILED"

    def test_sort_array(self, tools, products):
        result = tools.handle("sort_array", {"document": products, "sort_by": "price", "order": "desc"})
        assert [item["price"] for item in result["document"]] == [1200, 300, 25]
        assert result["path"] == ""

    def test_sort_non_array(self, tools):
        assert error_code(tools.handle("sort_array", {"document": {"a": 1}})) == "INVALID_EDIT"

    def test_transform_keys(self, tools):
        result = tools.handle("transform_keys", {
            "document": {"first_name": 1}, "case": "camelCase", "prefix": "x_",
        })
        assert result["document"] == {"x_firstName": 1}
        assert result["text"] == '{\n  "x_firstName": 1\n}'

    def test_transform_keys_invalid_regex(self, tools):
        result = tools.handle("transform_keys", {"document": {"a": 1}, "find": "[", "use_regex": True})
        assert error_code(result) == "INVALID_EDIT"
        assert result["error"]["error_type"] == "document"


class TestDispatch:
    """Tests for tool dispatch and the MCP wrapper."""

    def test_unknown_tool(self, tools):
        result = tools.handle("format_disk", {})
        assert error_code(result) == "UNKNOWN_TOOL"
        assert "analyze" in result["error"]["details"]["available_tools"]

    def test_every_defined_tool_has_a_handler(self, tools):
        assert sorted(definition["name"] for definition in TOOL_DEFINITIONS) == sorted(tools.handlers)

    def test_server_lists_tools(self, config, tools):
        server = WorkbenchServer(config, tools)
        assert [tool.name for tool in server.list_tools()] == [d["name"] for d in TOOL_DEFINITIONS]
        assert server.get_server_info()["health"]["storage_type"] == "memory"

    def test_server_renders_results(self, config, tools):
        server = WorkbenchServer(config, tools)
        content = server.call_tool("resolve_path", {"document": {"a": [1, 2]}, "path": "a[1]"})
        assert len(content) == 1
        assert json.loads(content[0].text)["value"] == 2

    def test_server_renders_errors(self, config, tools):
        server = WorkbenchServer(config, tools)
        content = server.call_tool("resolve_path", {"document": {}, "path": "a..b"})
        assert content[0].text.startswith("Error: ")
        assert json.loads(content[1].text)["error"]["error_code"] == "MALFORMED_PATH"

    def test_server_renders_failed_query(self, config, tools, products):
        server = WorkbenchServer(config, tools)
        content = server.call_tool("query", {"document": products, "expression": "$[?("})
        assert len(content) == 1
        assert json.loads(content[0].text)["success"] is False
