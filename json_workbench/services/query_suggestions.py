"""Query assistance derived from the loaded document."""

import math
from typing import Any, Dict, List, Tuple

from ..models.core import JsonType, json_type_of
from ..models.query import QueryExample
from .query_engine import member_text, quote_literal

# Property paths are collected down to this many dotted segments.
_MAX_PROPERTY_SEGMENTS = 3


def available_properties(document: Any) -> List[str]:
    """Sorted dotted property paths offered by the structured query builder.

    Arrays contribute the properties of their first element.
    """
    found = set()
    _collect_properties(document, (), found)
    return sorted(found)


def _collect_properties(value: Any, prefix: Tuple[str, ...], found: set) -> None:
    while isinstance(value, list):
        if not value or not isinstance(value[0], (dict, list)):
            return
        value = value[0]
    if not isinstance(value, dict):
        return

    for key, child in value.items():
        path = prefix + (key,)
        found.add(".".join(path))
        if isinstance(child, dict) and child and len(path) < _MAX_PROPERTY_SEGMENTS:
            _collect_properties(child, path, found)


def _sample_properties(value: Any, depth: int = 0, max_depth: int = 2) -> Dict[str, Tuple[JsonType, Any]]:
    """First-seen property names with their type and a sample value."""
    props: Dict[str, Tuple[JsonType, Any]] = {}
    if depth >= max_depth:
        return props
    if isinstance(value, list):
        if value and isinstance(value[0], (dict, list)):
            return _sample_properties(value[0], depth, max_depth)
        return props
    if not isinstance(value, dict):
        return props

    for key, child in value.items():
        if child is None:
            continue
        kind = json_type_of(child)
        props.setdefault(key, (kind, child))
        if kind is JsonType.OBJECT and depth < max_depth - 1:
            for nested_key, info in _sample_properties(child, depth + 1, max_depth).items():
                props.setdefault(nested_key, info)
    return props


def suggest_examples(document: Any, limit: int = 6) -> List[QueryExample]:
    """Ready-to-run example expressions that fit the shape of ``document``."""
    properties = _sample_properties(document)
    names = list(properties)
    examples = [QueryExample(label="All items", query="$[*]", description="Get all root-level items")]

    strings = [name for name in names if properties[name][0] is JsonType.STRING]
    if strings:
        name = strings[0]
        sample = properties[name][1]
        examples.append(QueryExample(
            label=f"Filter by {name}",
            query=f"$[?(@{member_text(name)} == {quote_literal(sample)})]",
            description=f'Items where {name} equals "{sample}"',
        ))

    numbers = [name for name in names if properties[name][0] is JsonType.NUMBER]
    if numbers:
        name = numbers[0]
        threshold = math.floor(properties[name][1] * 0.8)
        examples.append(QueryExample(
            label=f"{name} > {threshold}",
            query=f"$[?(@{member_text(name)} > {threshold})]",
            description=f"Items with {name} greater than {threshold}",
        ))

    if names:
        name = names[0]
        member = member_text(name)
        examples.append(QueryExample(
            label=f"Get all {name}",
            query=f"$.{member}" if member.startswith(".") else f"$..{member}",
            description=f'Get all "{name}" properties recursively',
        ))

        name = names[min(1, len(names) - 1)]
        examples.append(QueryExample(
            label=f"Has {name}",
            query=f"$[?(@{member_text(name)})]",
            description=f'Items that have a "{name}" property',
        ))

    arrays = [name for name in names if properties[name][0] is JsonType.ARRAY]
    if arrays:
        name = arrays[0]
        examples.append(QueryExample(
            label=f"First {name}",
            query=f"$[*]{member_text(name)}[0]",
            description=f"Get first item from each {name} array",
        ))

    return examples[:limit]
