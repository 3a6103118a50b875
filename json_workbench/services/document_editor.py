"""Structural edits addressed by PathAddress.

Every edit returns a new document; the input is never modified.
"""

import copy
import json
import logging
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Tuple

from ..models.core import IndexSegment, JsonType, PathAddress, json_type_of
from ..models.edit import MoveDirection, SortOrder
from ..models.errors import InvalidEdit
from .object_identity import get_object_copy_label
from .path_address import resolve_path
from .schema_inferencer import infer_schema_from_sample, synthesize

logger = logging.getLogger(__name__)


def _array_at(document: Any, address: PathAddress) -> List[Any]:
    node = resolve_path(document, address)
    if not isinstance(node, list):
        raise InvalidEdit(
            f"Expected an array at '{address}' but found {json_type_of(node).value}",
            details={"at": str(address), "found": json_type_of(node).value}
        )
    return node


def _parent_and_member(document: Any, address: PathAddress) -> Tuple[Any, Any]:
    """Container holding the addressed node and the key or index of the node in it."""
    resolve_path(document, address)
    parent = resolve_path(document, address.parent)
    last = address.last
    return parent, (last.index if isinstance(last, IndexSegment) else last.name)


def set_value(document: Any, address: PathAddress, value: Any) -> Any:
    """Replace the node at ``address`` with ``value``.

    Raises:
        AddressOutOfBounds: If nothing exists at ``address``
        AddressTypeMismatch: If the address does not fit the document
    """
    if address.is_root:
        return copy.deepcopy(value)
    updated = copy.deepcopy(document)
    parent, member = _parent_and_member(updated, address)
    parent[member] = copy.deepcopy(value)
    return updated


def delete_node(document: Any, address: PathAddress) -> Any:
    """Remove an object member or array item; later items move up one place.

    Raises:
        InvalidEdit: If ``address`` is the root
        AddressOutOfBounds: If nothing exists at ``address``
        AddressTypeMismatch: If the address does not fit the document
    """
    if address.is_root:
        raise InvalidEdit("The document root cannot be deleted", details={"at": ""})
    updated = copy.deepcopy(document)
    parent, member = _parent_and_member(updated, address)
    del parent[member]
    return updated


def move_item(document: Any, address: PathAddress, direction: MoveDirection) -> Any:
    """Swap an array item with its neighbour above or below.

    Moving the first item up or the last item down leaves the order as it is.

    Raises:
        InvalidEdit: If ``address`` does not end in an array index
    """
    if not isinstance(address.last, IndexSegment):
        raise InvalidEdit(f"'{address}' is not an array item", details={"at": str(address)})

    updated = copy.deepcopy(document)
    array = _array_at(updated, address.parent)
    index = address.last.index
    resolve_path(updated, address)

    target = index + direction.offset
    if 0 <= target < len(array):
        array[index], array[target] = array[target], array[index]
    return updated


def new_item(array: List[Any], source_index: Optional[int] = None) -> Any:
    """Item to append to ``array``: a copy of an existing item, or a default object.

    The default object has the properties of the first item, each holding the
    default value of its type.

    Raises:
        InvalidEdit: If no source is given and the first item is not an object
        AddressOutOfBounds: If ``source_index`` is past the end of the array
    """
    if source_index is not None:
        return copy.deepcopy(resolve_path(array, PathAddress.of(source_index)))
    if not array or json_type_of(array[0]) is not JsonType.OBJECT:
        raise InvalidEdit(
            "A default item needs an object as the first array element",
            details={"length": len(array)}
        )
    return synthesize(infer_schema_from_sample(array))


def add_item(document: Any, array_address: PathAddress,
             source_index: Optional[int] = None) -> Tuple[Any, PathAddress]:
    """Append a new item to the array at ``array_address``.

    Returns:
        The updated document and the address of the appended item
    """
    updated = copy.deepcopy(document)
    array = _array_at(updated, array_address)
    array.append(new_item(array, source_index))
    return updated, array_address.item(len(array) - 1)


def copy_sources(document: Any, array_address: PathAddress) -> List[Dict[str, Any]]:
    """Object items of an array that a new item can be copied from, with labels."""
    array = _array_at(document, array_address)
    return [
        {"index": index, "label": get_object_copy_label(item, index, True)}
        for index, item in enumerate(array)
        if isinstance(item, dict)
    ]


# Sorting ------------------------------------------------------------------------

_ABSENT = object()


def _display_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, str)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _compare_text(left: str, right: str) -> int:
    left_key, right_key = (left.casefold(), left), (right.casefold(), right)
    return (left_key > right_key) - (left_key < right_key)


def _compare_values(left: Any, right: Any) -> int:
    if isinstance(left, bool) and isinstance(right, bool):
        return int(left) - int(right)
    if isinstance(left, str) and isinstance(right, str):
        return _compare_text(left, right)
    if (isinstance(left, (int, float)) and isinstance(right, (int, float))
            and not isinstance(left, bool) and not isinstance(right, bool)):
        return (left > right) - (left < right)
    return _compare_text(_display_text(left), _display_text(right))


def sort_array(document: Any, address: PathAddress, sort_property: Optional[str] = None,
               order: SortOrder = SortOrder.ASC) -> Any:
    """Sort the array at ``address``.

    With ``sort_property`` and an object or array as first item, items are
    ordered by that property; otherwise by their own values. Strings compare
    case-insensitively, numbers and booleans by value, anything else by its
    text. Null or missing sort values go last in either order. The sort is
    stable.

    Raises:
        InvalidEdit: If the node at ``address`` is not an array
    """
    updated = copy.deepcopy(document)
    array = _array_at(updated, address)

    by_property = bool(sort_property) and bool(array) and isinstance(array[0], (dict, list))
    sign = 1 if order is SortOrder.ASC else -1

    def sort_value(item: Any) -> Any:
        if not by_property:
            return item
        return item.get(sort_property, _ABSENT) if isinstance(item, dict) else _ABSENT

    def compare(left: Any, right: Any) -> int:
        left, right = sort_value(left), sort_value(right)
        left_missing, right_missing = left is None or left is _ABSENT, right is None or right is _ABSENT
        if left_missing or right_missing:
            return int(left_missing) - int(right_missing)
        return sign * _compare_values(left, right)

    array.sort(key=cmp_to_key(compare))
    logger.debug("Sorted %d items at '%s' by %s (%s)", len(array), address,
                 sort_property if by_property else "value", order.value)
    return updated
