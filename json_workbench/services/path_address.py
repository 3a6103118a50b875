"""Path address codec: parsing, rendering and resolving document addresses.

Two textual dialects address the same nodes:

* the canonical dotted form used by editors and tree views,
  ``store.books[3].title`` (a leading dot is optional), and
* the bracket-quoted form reported by the filter evaluator,
  ``$['store']['books'][3]['title']``.

Both are converted to :class:`PathAddress` at the boundary; nothing inside the
package passes raw path strings around.
"""

import json
import re
from typing import Any, List, Tuple, Union

from ..models.core import (
    IndexSegment,
    JsonType,
    PathAddress,
    PropertySegment,
    json_type_of,
)
from ..models.errors import AddressOutOfBounds, AddressTypeMismatch, MalformedPath


Segment = Union[PropertySegment, IndexSegment]

_DIGITS = re.compile(r"[0-9]+")
_RESERVED_NAME_CHARS = frozenset('.[]"')
_JSON_DECODER = json.JSONDecoder()


def _is_plain_name(name: str) -> bool:
    """Names that can be written without bracket quoting."""
    if not name or name != name.strip():
        return False
    return not any(ch in _RESERVED_NAME_CHARS for ch in name)


def path_to_text(address: PathAddress) -> str:
    """Render an address in canonical dotted/bracketed form.

    The root renders as the empty string. Names that are not plain
    identifiers are written as ``["name"]`` with JSON string escaping, which
    keeps ``parse_path(path_to_text(a)) == a`` true for every address.
    """
    parts: List[str] = []
    for position, segment in enumerate(address.segments):
        if isinstance(segment, IndexSegment):
            parts.append(f"[{segment.index}]")
        elif _is_plain_name(segment.name):
            parts.append(segment.name if position == 0 else f".{segment.name}")
        else:
            parts.append(f"[{json.dumps(segment.name, ensure_ascii=False)}]")
    return "".join(parts)


def parse_path(text: str) -> PathAddress:
    """Parse canonical path text into an address.

    Args:
        text: Path such as ``store.books[3].title`` or ``[2].name``

    Returns:
        The parsed PathAddress; empty text is the root

    Raises:
        MalformedPath: On an empty identifier, a non-numeric bracket body,
            or trailing/adjacent separators
    """
    source = text.strip()
    segments: List[Segment] = []
    pos = 0

    while pos < len(source):
        ch = source[pos]
        if ch == "[":
            segment, pos = _parse_bracket(source, pos, text)
            segments.append(segment)
        elif ch == ".":
            name, pos = _read_identifier(source, pos + 1, text)
            segments.append(PropertySegment(name=name))
        elif not segments:
            name, pos = _read_identifier(source, pos, text)
            segments.append(PropertySegment(name=name))
        else:
            raise MalformedPath(f"Unexpected character {ch!r} at position {pos}", text, pos)

    return PathAddress(segments=tuple(segments))


def _read_identifier(source: str, pos: int, text: str) -> Tuple[str, int]:
    start = pos
    while pos < len(source) and source[pos] not in ".[":
        if source[pos] == "]":
            raise MalformedPath(f"Unexpected ']' at position {pos}", text, pos)
        pos += 1
    name = source[start:pos]
    if not name:
        raise MalformedPath(f"Empty property name at position {start}", text, start)
    return name, pos


def _parse_bracket(source: str, pos: int, text: str) -> Tuple[Segment, int]:
    body_start = pos + 1
    if body_start < len(source) and source[body_start] == '"':
        try:
            name, end = _JSON_DECODER.raw_decode(source, body_start)
        except json.JSONDecodeError as e:
            raise MalformedPath(f"Invalid quoted property name: {e.msg}", text, body_start)
        if end >= len(source) or source[end] != "]":
            raise MalformedPath(f"Expected ']' at position {end}", text, end)
        return PropertySegment(name=name), end + 1

    close = source.find("]", body_start)
    if close == -1:
        raise MalformedPath(f"Unclosed '[' at position {pos}", text, pos)
    body = source[body_start:close]
    if not _DIGITS.fullmatch(body):
        raise MalformedPath(f"Bracket body must be a non-negative integer, got {body!r}", text, body_start)
    return IndexSegment(index=int(body)), close + 1


def is_prefix_of(ancestor: PathAddress, descendant: PathAddress) -> bool:
    """True iff ``ancestor`` is a strict ancestor of ``descendant``."""
    return ancestor.is_prefix_of(descendant)


def resolve_path(root: Any, address: PathAddress) -> Any:
    """Walk ``root`` segment by segment and return the addressed value.

    Raises:
        AddressOutOfBounds: If an index exceeds the array or a property is absent
        AddressTypeMismatch: If a segment kind disagrees with the value found
    """
    node = root
    for depth, segment in enumerate(address.segments):
        kind = json_type_of(node)
        if isinstance(segment, PropertySegment):
            if kind is not JsonType.OBJECT:
                at = _prefix_text(address, depth)
                raise AddressTypeMismatch(
                    f"Cannot read property {segment.name!r} of {kind.value} at '{at}'",
                    details={"at": at, "expected": JsonType.OBJECT.value, "found": kind.value}
                )
            if segment.name not in node:
                at = _prefix_text(address, depth)
                raise AddressOutOfBounds(
                    f"Property {segment.name!r} not found at '{at}'",
                    details={"at": at, "property": segment.name}
                )
            node = node[segment.name]
        else:
            if kind is not JsonType.ARRAY:
                at = _prefix_text(address, depth)
                raise AddressTypeMismatch(
                    f"Cannot read index {segment.index} of {kind.value} at '{at}'",
                    details={"at": at, "expected": JsonType.ARRAY.value, "found": kind.value}
                )
            if segment.index >= len(node):
                at = _prefix_text(address, depth)
                raise AddressOutOfBounds(
                    f"Index {segment.index} out of bounds (length: {len(node)}) at '{at}'",
                    details={"at": at, "index": segment.index, "length": len(node)}
                )
            node = node[segment.index]
    return node


def _prefix_text(address: PathAddress, depth: int) -> str:
    return path_to_text(PathAddress(segments=address.segments[:depth]))


def path_exists(root: Any, address: PathAddress) -> bool:
    """Whether ``address`` resolves against ``root``."""
    try:
        resolve_path(root, address)
    except (AddressOutOfBounds, AddressTypeMismatch):
        return False
    return True


def to_foreign_path_notation(address: PathAddress) -> str:
    """Render an address as ``$['name'][0]``."""
    parts = ["$"]
    for segment in address.segments:
        if isinstance(segment, IndexSegment):
            parts.append(f"[{segment.index}]")
        else:
            escaped = segment.name.replace("\\", "\\\\").replace("'", "\\'")
            parts.append(f"['{escaped}']")
    return "".join(parts)


def from_foreign_path_notation(text: str) -> PathAddress:
    """Convert bracket-quoted evaluator paths into a PathAddress.

    Unquoted digit bodies become index segments; every other body, quoted or
    not, becomes a property segment. The leading ``$`` is optional.

    Raises:
        MalformedPath: If the text is not a sequence of bracket tokens
    """
    source = text.strip()
    pos = 1 if source.startswith("$") else 0
    segments: List[Segment] = []

    while pos < len(source):
        if source[pos] != "[":
            raise MalformedPath(f"Expected '[' at position {pos}", text, pos)
        pos += 1
        if pos < len(source) and source[pos] in "'\"":
            name, pos = _read_quoted(source, pos, text)
            segments.append(PropertySegment(name=name))
            continue
        close = source.find("]", pos)
        if close == -1:
            raise MalformedPath(f"Unclosed '[' at position {pos - 1}", text, pos - 1)
        body = source[pos:close]
        if not body:
            raise MalformedPath(f"Empty bracket at position {pos - 1}", text, pos - 1)
        if _DIGITS.fullmatch(body):
            segments.append(IndexSegment(index=int(body)))
        else:
            segments.append(PropertySegment(name=body))
        pos = close + 1

    return PathAddress(segments=tuple(segments))


def _read_quoted(source: str, pos: int, text: str) -> Tuple[str, int]:
    quote = source[pos]
    pos += 1
    chars: List[str] = []
    while pos < len(source):
        ch = source[pos]
        if ch == "\\" and pos + 1 < len(source):
            chars.append(source[pos + 1])
            pos += 2
            continue
        if ch == quote:
            if pos + 1 >= len(source) or source[pos + 1] != "]":
                raise MalformedPath(f"Expected ']' at position {pos + 1}", text, pos + 1)
            return "".join(chars), pos + 2
        chars.append(ch)
        pos += 1
    raise MalformedPath("Unterminated quoted name", text, pos)
