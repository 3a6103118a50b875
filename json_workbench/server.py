"""MCP server interface for the JSON workbench."""

import json
from typing import Any, Dict, List, Optional

import structlog
from mcp.server import Server
from mcp.server.lowlevel.server import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from . import __version__
from .config.models import WorkbenchConfig
from .tools.workbench_tools import WorkbenchTools

SERVER_NAME = "json-workbench"

_DOCUMENT = {"description": "JSON document (any JSON value)"}
_PATH = {"type": "string", "description": "Dotted/bracketed path, e.g. users[0].name"}

_CONDITION = {
    "type": "object",
    "properties": {
        "property_path": {"type": "string", "description": "Dotted property path relative to each item"},
        "operator": {
            "type": "string",
            "enum": ["eq", "ne", "gt", "ge", "lt", "le", "contains", "regex"],
        },
        "literal": {"type": "string", "description": "Right-hand value as typed"},
    },
    "required": ["property_path", "operator"],
}

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "analyze",
        "description": "Report structural anomalies (deep nesting, large arrays, duplicate IDs, "
                       "inconsistent items, empty containers, nulls, long strings, repeated keys) and statistics",
        "inputSchema": {
            "type": "object",
            "properties": {"document": _DOCUMENT},
            "required": ["document"],
        },
    },
    {
        "name": "query",
        "description": "Evaluate a filter expression such as $[?(@.price > 100)], or structured conditions, "
                       "and return the matching nodes with their paths",
        "inputSchema": {
            "type": "object",
            "properties": {
                "document": _DOCUMENT,
                "expression": {"type": "string", "description": "Filter expression"},
                "conditions": {"type": "array", "items": _CONDITION},
                "combinator": {"type": "string", "enum": ["AND", "OR"], "default": "AND"},
            },
            "required": ["document"],
        },
    },
    {
        "name": "suggest_queries",
        "description": "Suggest example filter expressions and list property paths for a document",
        "inputSchema": {
            "type": "object",
            "properties": {"document": _DOCUMENT},
            "required": ["document"],
        },
    },
    {
        "name": "resolve_path",
        "description": "Return the value at a path inside a document",
        "inputSchema": {
            "type": "object",
            "properties": {"document": _DOCUMENT, "path": _PATH},
            "required": ["document", "path"],
        },
    },
    {
        "name": "highlight_range",
        "description": "Find the 1-based line range a node occupies in pretty-printed document text",
        "inputSchema": {
            "type": "object",
            "properties": {
                "path": _PATH,
                "text": {"type": "string", "description": "Displayed document text"},
                "document": _DOCUMENT,
                "include_root": {"type": "boolean", "default": False},
            },
            "required": ["path"],
        },
    },
    {
        "name": "infer_schema",
        "description": "Infer property types from a sample object and build a default object",
        "inputSchema": {
            "type": "object",
            "properties": {
                "sample": {"description": "Object, or array whose first element is an object"},
                "nested": {"type": "boolean", "default": True},
            },
            "required": ["sample"],
        },
    },
    {
        "name": "diff",
        "description": "Compare two documents structurally and as unified text",
        "inputSchema": {
            "type": "object",
            "properties": {"old": _DOCUMENT, "new": _DOCUMENT},
            "required": ["old", "new"],
        },
    },
    {
        "name": "search",
        "description": "Find object members whose key or value contains a term (case-insensitive); "
                       "returns their paths and the line range of the first",
        "inputSchema": {
            "type": "object",
            "properties": {"document": _DOCUMENT, "term": {"type": "string"}},
            "required": ["document", "term"],
        },
    },
    {
        "name": "edit",
        "description": "Set, delete or move a node, or append an item (default or copied) to an array; "
                       "returns the new document",
        "inputSchema": {
            "type": "object",
            "properties": {
                "document": _DOCUMENT,
                "action": {"type": "string", "enum": ["set", "delete", "move_up", "move_down", "add_item"]},
                "path": _PATH,
                "value": {"description": "New value for set"},
                "source_index": {"type": "integer", "minimum": 0, "description": "Item to copy for add_item"},
            },
            "required": ["document", "action"],
        },
    },
    {
        "name": "sort_array",
        "description": "Sort the array at a path by value, or by a property of its object items",
        "inputSchema": {
            "type": "object",
            "properties": {
                "document": _DOCUMENT,
                "path": _PATH,
                "sort_by": {"type": "string", "description": "Property to sort by"},
                "order": {"type": "string", "enum": ["asc", "desc"], "default": "asc"},
            },
            "required": ["document"],
        },
    },
    {
        "name": "transform_keys",
        "description": "Convert every key to a naming convention, and/or find-replace and prefix/suffix keys",
        "inputSchema": {
            "type": "object",
            "properties": {
                "document": _DOCUMENT,
                "case": {
                    "type": "string",
                    "enum": ["camelCase", "PascalCase", "snake_case", "kebab-case", "UPPER_CASE", "none"],
                    "default": "none",
                },
                "find": {"type": "string"},
                "replace": {"type": "string"},
                "use_regex": {"type": "boolean", "default": False},
                "prefix": {"type": "string"},
                "suffix": {"type": "string"},
            },
            "required": ["document"],
        },
    },
    {
        "name": "save_session",
        "description": "Save document text and version history for later",
        "inputSchema": {
            "type": "object",
            "properties": {
                "document_text": {"type": "string"},
                "history": {"type": "object", "description": "items and currentVersionIndex"},
                "filename": {"type": "string"},
                "session_id": {"type": "string"},
            },
            "required": ["document_text"],
        },
    },
    {
        "name": "load_session",
        "description": "Load a saved session",
        "inputSchema": {
            "type": "object",
            "properties": {"session_id": {"type": "string"}},
            "required": ["session_id"],
        },
    },
]


class WorkbenchServer:
    """MCP server that registers and handles the workbench tools."""

    def __init__(self, config: WorkbenchConfig, tools: Optional[WorkbenchTools] = None):
        self.config = config
        self.logger = structlog.get_logger(__name__)

        self.server = Server(SERVER_NAME)
        self.tools = tools or WorkbenchTools(config)

        self._register_handlers()
        self.logger.info("MCP server initialized", storage=self.tools.session_store.storage_type)

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> List[Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
            return self.call_tool(name, arguments)

    def list_tools(self) -> List[Tool]:
        tools = [Tool(**definition) for definition in TOOL_DEFINITIONS]
        self.logger.debug("Listed tools", count=len(tools))
        return tools

    def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Run a tool and render its result as JSON text content."""
        self.logger.debug("Tool called", tool=name)
        result = self.tools.handle(name, arguments)
        return self._create_tool_result(result)

    def _create_tool_result(self, result: Dict[str, Any]) -> List[TextContent]:
        error_info = result.get("error")
        # Failed queries report their message as a plain string; only error dicts mark a failed call.
        if isinstance(error_info, dict):
            content = [TextContent(type="text", text=f"Error: {error_info.get('message', 'Unknown error')}")]
            content.append(TextContent(type="text", text=json.dumps(result, indent=2, default=str)))
            return content
        return [TextContent(type="text", text=json.dumps(result, indent=2, ensure_ascii=False, default=str))]

    def get_server_info(self) -> Dict[str, Any]:
        return {
            "name": SERVER_NAME,
            "version": __version__,
            "tools": [definition["name"] for definition in TOOL_DEFINITIONS],
            "config": {
                "max_document_size": self.config.max_document_size,
                "session_ttl": self.config.session_ttl,
                "log_level": self.config.log_level,
                "history_capacity": self.config.history_config.capacity,
            },
            "health": self.tools.session_store.health_check(),
        }

    async def run_stdio(self) -> None:
        """Serve MCP over stdin/stdout until the client disconnects."""
        self.logger.info("Starting MCP server with stdio transport")
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name=SERVER_NAME,
                        server_version=__version__,
                        capabilities=self.server.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={}
                        )
                    )
                )
        finally:
            self.tools.session_store.close()

