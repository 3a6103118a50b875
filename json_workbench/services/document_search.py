"""Case-insensitive search over object keys and scalar values."""

import logging
from typing import Any, List

from ..models.core import PathAddress

logger = logging.getLogger(__name__)


def _number_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _value_matches(value: Any, term: str, lowered: str) -> bool:
    if isinstance(value, bool):
        return lowered in ("true" if value else "false")
    if isinstance(value, str):
        return lowered in value.lower()
    if isinstance(value, (int, float)):
        # Numbers are matched against the term as typed.
        return term in _number_text(value)
    return False


def search_document(document: Any, term: str) -> List[PathAddress]:
    """Addresses of object members whose key or scalar value contains ``term``.

    Keys, strings and booleans match case-insensitively; numbers match their
    decimal text. Array items are searched through but only object members
    are reported, each once, in document order. A blank term finds nothing.

    Args:
        document: Any JSON value
        term: Text to look for

    Returns:
        Matching addresses, parents before the members nested in them
    """
    if not term.strip():
        return []

    lowered = term.lower()
    results: List[PathAddress] = []
    # Entries are (key, value, address); key is None for the root and array items.
    pending = [(None, document, PathAddress.root())]
    while pending:
        key, node, address = pending.pop()
        if key is not None and (lowered in key.lower() or _value_matches(node, term, lowered)):
            results.append(address)
        if isinstance(node, list):
            pending.extend((None, item, address.item(index)) for index, item in reversed(list(enumerate(node))))
        elif isinstance(node, dict):
            pending.extend((name, value, address.key(name)) for name, value in reversed(list(node.items())))

    logger.debug("Search for %r matched %d members", term, len(results))
    return results
