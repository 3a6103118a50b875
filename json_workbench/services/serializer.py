"""Serialization of documents to and from their displayed text.

The displayed rendering is fixed: two-space indentation, one value or closing
bracket per line, ``": "`` between key and value, non-ASCII characters kept
as-is. ``serialize`` and ``serialize_with_line_map`` produce identical text.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..models.core import LineRange, PathAddress, json_type_of
from ..models.errors import DocumentParseError, UnrepresentableDocument

logger = logging.getLogger(__name__)

INDENT = "  "


def _check_keys(value: Any) -> None:
    """Reject object keys that are not strings; ``json.dumps`` would coerce them."""
    seen: Set[int] = set()
    pending = [(value, PathAddress.root())]
    while pending:
        node, address = pending.pop()
        if not isinstance(node, (dict, list)) or id(node) in seen:
            continue
        seen.add(id(node))
        if isinstance(node, list):
            pending.extend((item, address.item(index)) for index, item in enumerate(node))
            continue
        for key, item in node.items():
            if not isinstance(key, str):
                raise UnrepresentableDocument(
                    f"Object key {key!r} at '{address}' is not a string",
                    details={"at": str(address), "key_type": type(key).__name__}
                )
            pending.append((item, address.key(key)))


def serialize(value: Any) -> str:
    """Render ``value`` as pretty-printed JSON text.

    Raises:
        UnrepresentableDocument: For cycles, non-string keys, NaN/Infinity or
            non-JSON types
    """
    _check_keys(value)
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise UnrepresentableDocument(f"Document cannot be serialized: {e}")
    except RecursionError:
        raise UnrepresentableDocument("Document is too deeply nested to serialize")


def _reject_constant(name: str) -> Any:
    raise DocumentParseError(f"{name} is not valid JSON")


def deserialize(text: str) -> Any:
    """Parse document text.

    Raises:
        DocumentParseError: With 1-based line and column of the failure
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DocumentParseError(
            f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            line=e.lineno,
            column=e.colno,
        )
    except RecursionError:
        raise DocumentParseError("Document is too deeply nested to parse")


@dataclass
class SerializedDocument:
    """Rendered text plus the line range of every node in it."""

    text: str
    line_map: Dict[PathAddress, LineRange] = field(default_factory=dict)

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1

    def range_for(self, address: PathAddress) -> Optional[LineRange]:
        """Line range of ``address``, or None when the document has no such node."""
        return self.line_map.get(address)


class _LineMapRenderer:
    def __init__(self):
        self.lines: List[str] = []
        self.line_map: Dict[PathAddress, LineRange] = {}
        self.on_path: Set[int] = set()

    def render(self, value: Any, address: PathAddress, level: int, prefix: str, suffix: str) -> None:
        pad = INDENT * level
        start = len(self.lines) + 1

        if isinstance(value, (dict, list)) and value:
            marker = id(value)
            if marker in self.on_path:
                raise UnrepresentableDocument(
                    f"Document contains a reference cycle at '{address}'",
                    details={"at": str(address)}
                )
            self.on_path.add(marker)

            if isinstance(value, list):
                self.lines.append(f"{pad}{prefix}[")
                last = len(value) - 1
                for index, item in enumerate(value):
                    self.render(item, address.item(index), level + 1, "", "" if index == last else ",")
                self.lines.append(f"{pad}]{suffix}")
            else:
                self.lines.append(f"{pad}{prefix}{{")
                last = len(value) - 1
                for position, (key, item) in enumerate(value.items()):
                    if not isinstance(key, str):
                        raise UnrepresentableDocument(
                            f"Object key {key!r} at '{address}' is not a string",
                            details={"at": str(address), "key_type": type(key).__name__}
                        )
                    key_prefix = json.dumps(key, ensure_ascii=False) + ": "
                    self.render(item, address.key(key), level + 1, key_prefix, "" if position == last else ",")
                self.lines.append(f"{pad}}}{suffix}")

            self.on_path.discard(marker)
        else:
            json_type_of(value)
            try:
                scalar = json.dumps(value, ensure_ascii=False, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise UnrepresentableDocument(f"Value at '{address}' cannot be serialized: {e}")
            self.lines.append(f"{pad}{prefix}{scalar}{suffix}")

        self.line_map[address] = LineRange(start_line=start, end_line=len(self.lines))


def serialize_with_line_map(value: Any) -> SerializedDocument:
    """Render ``value`` and record the line range of each node while doing so.

    Raises:
        UnrepresentableDocument: For cycles, non-string keys, NaN/Infinity or
            non-JSON types
    """
    renderer = _LineMapRenderer()
    try:
        renderer.render(value, PathAddress.root(), 0, "", "")
    except RecursionError:
        raise UnrepresentableDocument("Document is too deeply nested to serialize")

    logger.debug("Serialized document: %d lines, %d nodes mapped", len(renderer.lines), len(renderer.line_map))
    return SerializedDocument(text="\n".join(renderer.lines), line_map=renderer.line_map)
