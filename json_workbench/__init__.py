"""Interactive JSON workbench: analysis, querying, path addressing and history."""

__version__ = "1.0.0"
