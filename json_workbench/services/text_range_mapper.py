"""Map a path address onto a line range of displayed document text.

The scan reads the text line by line and relies on the layout produced by
:func:`serializer.serialize`: every value or key/value pair starts its own
line, a container that spans several lines ends its first line with ``{`` or
``[``, and its closing bracket starts a line of its own. It does not build a
tree, so it keeps working on text that has been edited by hand as long as the
layout is kept.

For text the serializer produced itself, ``SerializedDocument.range_for`` is
the cheaper lookup.
"""

import json
import logging
from typing import List, Optional, Tuple

from ..models.core import IndexSegment, LineRange, PathAddress

logger = logging.getLogger(__name__)

_DECODER = json.JSONDecoder()


class _Container:
    __slots__ = ("is_array", "count")

    def __init__(self, is_array: bool):
        self.is_array = is_array
        self.count = 0


def _split_line(trimmed: str) -> Tuple[Optional[str], str]:
    """Split an element line into its key (if any) and the value text."""
    if trimmed.startswith('"'):
        try:
            key, end = _DECODER.raw_decode(trimmed)
        except json.JSONDecodeError:
            return None, trimmed
        rest = trimmed[end:].lstrip()
        if rest.startswith(":"):
            return key, rest[1:].strip()
    return None, trimmed


def _opens_container(value_text: str) -> Optional[bool]:
    """True for an array opener, False for an object opener, None otherwise."""
    if value_text == "[":
        return True
    if value_text == "{":
        return False
    return None


def find_line_range(text: str, address: PathAddress, include_root: bool = False) -> Optional[LineRange]:
    """Find the 1-based inclusive line range of ``address`` in ``text``.

    Args:
        text: Pretty-printed document text as currently displayed
        address: Node to locate
        include_root: When true, the root address maps to the whole root value;
            otherwise the root has no range

    Returns:
        The range of the node, a single line for scalars, or None when the node
        cannot be found. A multi-line node whose closing line is missing
        (truncated text) yields its first line only.
    """
    if address.is_root and not include_root:
        return None

    segments = address.segments
    matched = 0
    start_line: Optional[int] = None
    target_depth: Optional[int] = None
    stack: List[_Container] = []

    for line_number, line in enumerate(text.split("\n"), start=1):
        trimmed = line.strip()
        if not trimmed:
            continue

        if trimmed[0] in "}]":
            depth_before = len(stack)
            if stack:
                stack.pop()
            if target_depth is not None and depth_before == target_depth:
                return LineRange(start_line=start_line, end_line=line_number)
            if target_depth is None and len(stack) < matched + 1:
                return None
            continue

        key, value_text = _split_line(trimmed)
        opener = _opens_container(value_text.rstrip(",").rstrip())
        depth = len(stack)
        parent = stack[-1] if stack else None

        if target_depth is None and not segments and depth == 0:
            start_line = line_number
            if opener is None:
                return LineRange(start_line=line_number, end_line=line_number)
            target_depth = 1
        elif target_depth is None and parent is not None and depth == matched + 1 and matched < len(segments):
            segment = segments[matched]
            if isinstance(segment, IndexSegment):
                hit = parent.is_array and parent.count == segment.index
            else:
                hit = not parent.is_array and key == segment.name
            if hit:
                matched += 1
                if matched == len(segments):
                    start_line = line_number
                    if opener is None:
                        return LineRange(start_line=line_number, end_line=line_number)
                    target_depth = depth + 1
                elif opener is None:
                    return None

        if parent is not None and parent.is_array:
            parent.count += 1
        if opener is not None:
            stack.append(_Container(opener))

    if start_line is not None:
        logger.debug("No closing line found for %s, highlighting its first line", address)
        return LineRange(start_line=start_line, end_line=start_line)
    return None
