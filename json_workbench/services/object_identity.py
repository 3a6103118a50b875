"""Human-facing identifiers for objects, used when listing or copying array items."""

from typing import Any, Dict, Optional

IDENTIFIER_KEYS = (
    "id", "ID", "Id",
    "name", "Name", "NAME",
    "SKU", "sku",
    "title", "Title",
    "label", "Label",
    "code", "Code",
    "key", "Key",
    "productId", "ProductId", "product_id",
    "userId", "UserId", "user_id",
    "itemId", "ItemId", "item_id",
    "identifier", "Identifier",
)


def _is_label_value(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _label_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_identifier_key(obj: Dict[str, Any]) -> Optional[str]:
    """Name of the property that identifies ``obj``.

    Well-known identifier names win in priority order; otherwise the first
    string or number property is used.
    """
    for key in IDENTIFIER_KEYS:
        if key in obj and _is_label_value(obj[key]):
            return key
    for key, value in obj.items():
        if _is_label_value(value):
            return key
    return None


def get_object_identifier(obj: Dict[str, Any]) -> Optional[str]:
    """Identifying label of ``obj``, or None when it has no string/number property."""
    key = get_identifier_key(obj)
    if key is None:
        return None
    return _label_text(obj[key])


def get_object_copy_label(
    obj: Dict[str, Any],
    index: int,
    is_array_item: bool = True,
    parent: Optional[Dict[str, Any]] = None,
) -> str:
    """Describe ``obj`` for a "copy from" menu.

    Falls back to the parent's identifier when the object has none of its own.
    """
    base_label = f"Item {index + 1}" if is_array_item else f"Object {index + 1}"
    identifier = get_object_identifier(obj)
    if identifier:
        return f"Copy from {base_label} ({identifier})"

    if parent is not None:
        parent_key = get_identifier_key(parent)
        if parent_key is not None:
            parent_identifier = _label_text(parent[parent_key])
            if parent_identifier:
                return f"Copy from {base_label} (in {parent_key}: {parent_identifier})"

    return f"Copy from {base_label}"
