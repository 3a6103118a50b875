"""MCP tool handlers for the JSON workbench."""

from .workbench_tools import WorkbenchTools

__all__ = ["WorkbenchTools"]
