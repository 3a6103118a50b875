#!/usr/bin/env python3
"""
Demonstration script for the JSON workbench tools.

This script shows how to:
1. Analyze a document for structural anomalies
2. Run textual and structured queries
3. Locate a node in the pretty-printed text
4. Search, edit, sort and rename keys
5. Save and reload a session with its version history
"""

import json

from json_workbench.config import WorkbenchConfig
from json_workbench.services import VersionHistory, serialize
from json_workbench.tools import WorkbenchTools

CATALOGUE = {
    "products": [
        {"id": 1, "name": "Laptop", "price": 1200, "inStock": True, "tags": ["office"]},
        {"id": 2, "name": "Mouse", "price": 25, "inStock": False, "tags": []},
        {"id": 2, "name": "Monitor", "price": 300, "inStock": True, "notes": None},
    ]
}


def show(title, result):
    print(f"\n=== {title} ===")
    print(json.dumps(result, indent=2, ensure_ascii=False))


def demo_analysis(tools):
    """Report issues found in the catalogue."""
    result = tools.handle("analyze", {"document": CATALOGUE})
    print("\n=== Analysis ===")
    for issue in result["issues"]:
        print(f"  [{issue['severity']}] {issue['path'] or '(root)'}: {issue['message']}")
    print(f"  Stats: {result['stats']}")


def demo_queries(tools):
    """Run the same filter as an expression and as structured conditions."""
    show("Expression query", tools.handle("query", {
        "document": CATALOGUE["products"],
        "expression": "$[?(@.price > 100)]",
    }))
    show("Structured query", tools.handle("query", {
        "document": CATALOGUE["products"],
        "conditions": [{"property_path": "inStock", "operator": "eq", "literal": "true"}],
    }))
    show("Suggestions", tools.handle("suggest_queries", {"document": CATALOGUE["products"]}))


def demo_highlight(tools):
    """Find the lines a product occupies in the rendered document."""
    show("Highlight products[1]", tools.handle("highlight_range", {
        "document": CATALOGUE,
        "path": "products[1]",
    }))


def demo_editing(tools):
    """Search, edit, sort and rename keys; every step returns a new document."""
    show("Search for 'mo'", tools.handle("search", {"document": CATALOGUE, "term": "mo"}))

    added = tools.handle("edit", {"document": CATALOGUE, "action": "add_item", "path": "products"})
    print(f"\n  Added default item at {added['path']}: {added['document']['products'][-1]}")

    edited = tools.handle("edit", {
        "document": added["document"], "action": "set", "path": f"{added['path']}.name", "value": "Keyboard",
    })
    ordered = tools.handle("sort_array", {
        "document": edited["document"], "path": "products", "sort_by": "name",
    })
    print(f"  Sorted by name: {[item['name'] for item in ordered['document']['products']]}")

    renamed = tools.handle("transform_keys", {"document": ordered["document"], "case": "snake_case"})
    print(f"  Snake-case keys: {list(renamed['document']['products'][0])}")


def demo_session(tools):
    """Record two versions, save them and load them back."""
    history = VersionHistory()
    history.append(serialize(CATALOGUE), label="File loaded")
    edited = json.loads(json.dumps(CATALOGUE))
    edited["products"][2]["id"] = 3
    history.append(serialize(edited))

    saved = tools.handle("save_session", {
        "document_text": serialize(edited),
        "history": history.snapshot().model_dump(mode="json", by_alias=True),
        "filename": "catalogue.json",
    })
    show("Saved session", saved)

    loaded = tools.handle("load_session", {"session_id": saved["session_id"]})
    print(f"  Loaded {loaded['filename']} with {len(loaded['history']['items'])} history entries")
    show("Diff between versions", tools.handle("diff", {"old": CATALOGUE, "new": edited}))


def main():
    """Run all demos."""
    print("JSON Workbench Demo")
    print("=" * 50)

    tools = WorkbenchTools(WorkbenchConfig())
    try:
        demo_analysis(tools)
        demo_queries(tools)
        demo_highlight(tools)
        demo_editing(tools)
        demo_session(tools)
    finally:
        tools.session_store.close()


if __name__ == "__main__":
    main()
